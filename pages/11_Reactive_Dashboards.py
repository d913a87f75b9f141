"""Chapter 11: Reactive Dashboards -- Sources, conductors, endpoints and lazy recomputation."""
import plotly.express as px
import streamlit as st

from course_utils.clustering import fit_kmeans, scale_features
from course_utils.config import get_settings
from course_utils.constants import DATASETS
from course_utils.data_loader import dataset_picker, load_dataset
from course_utils.plotting import apply_common_layout, color_map
from course_utils.reactive import RecomputeCounter
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, insight_box, quiz, takeaways, warning_box,
)

counter = RecomputeCounter()


# Conductors: each body runs only when its arguments change.
@st.cache_data(show_spinner=False)
def selected_rows(dataset_key, columns):
    counter.hit("selected_rows")
    label = DATASETS[dataset_key]["label"]
    return load_dataset(dataset_key)[list(columns) + [label]].dropna()


@st.cache_data(show_spinner=False)
def summary_table(dataset_key, columns):
    counter.hit("summary_table")
    return selected_rows(dataset_key, columns).describe().T.round(2)


@st.cache_data(show_spinner=False)
def cluster_assignments(dataset_key, columns, k, seed):
    counter.hit("cluster_assignments")
    rows = selected_rows(dataset_key, columns)
    X, _ = scale_features(rows, list(columns))
    return fit_kmeans(X, k, seed=seed).labels_.astype(str)


# ── Header ───────────────────────────────────────────────────────────────────
chapter_header(11)
st.markdown(
    "A dashboard is a small program that has to answer one question over and over: the "
    "user just changed something, what needs to be redrawn? Reactive frameworks answer it "
    "with a dependency graph. **Sources** are the inputs the user touches, **endpoints** "
    "are the outputs they look at, and **conductors** are the intermediate computations "
    "in between. When a source changes, only the things downstream of it are invalidated. "
    "Streamlit reruns the whole script on every change, so here the conductors are "
    "functions decorated with `st.cache_data`: they return the stored result unless one "
    "of their inputs changed. This page counts how often each conductor really runs."
)

settings = get_settings()

# ── 11.1 The Graph ───────────────────────────────────────────────────────────
st.header("11.1  Sources, Conductors, Endpoints")

concept_box(
    "The Reactive Graph",
    "<b>Sources</b>: widgets (dataset, columns, K, bins).<br>"
    "<b>Conductors</b>: cached computations (the selected rows, the summary, the cluster labels).<br>"
    "<b>Endpoints</b>: the chart, the table and the metrics below.<br><br>"
    "An endpoint depends on the conductors it reads, and a conductor depends on the "
    "sources and conductors it reads. Nothing else."
)

st.graphviz_chart("""
digraph {
    rankdir=LR;
    node [shape=box, style="rounded,filled", fontname="Helvetica"];
    dataset [fillcolor="#EBF5FB"]; columns [fillcolor="#EBF5FB"];
    k [fillcolor="#EBF5FB"]; bins [fillcolor="#EBF5FB"];
    selected_rows [fillcolor="#FDEBD0"]; summary_table [fillcolor="#FDEBD0"];
    cluster_assignments [fillcolor="#FDEBD0"];
    histogram [fillcolor="#D5F5E3"]; scatter [fillcolor="#D5F5E3"]; summary [fillcolor="#D5F5E3"];
    dataset -> selected_rows; columns -> selected_rows;
    selected_rows -> summary_table; selected_rows -> cluster_assignments; k -> cluster_assignments;
    selected_rows -> histogram; bins -> histogram;
    cluster_assignments -> scatter; selected_rows -> scatter;
    summary_table -> summary;
}
""")

# ── 11.2 A Live Dashboard ────────────────────────────────────────────────────
st.header("11.2  A Small Dashboard")

key, _ = dataset_picker(options=["iris", "wine", "pokemon"], key="rx_dataset")
features = DATASETS[key]["features"]
label = DATASETS[key]["label"]

col_s1, col_s2 = st.columns(2)
columns = tuple(col_s1.multiselect("Columns", features, default=features[:2], key="rx_columns"))
if len(columns) < 2:
    st.warning("Pick at least two columns.")
    st.stop()
k = col_s2.slider("Clusters (K)", 2, 8, 3, key="rx_k")
bins = col_s2.slider("Histogram bins", 5, 60, 20, key="rx_bins")

rows = selected_rows(key, columns)
labels = cluster_assignments(key, columns, k, settings.random_state)

col_e1, col_e2 = st.columns(2)
with col_e1:
    fig_hist = px.histogram(rows, x=columns[0], nbins=bins, color=rows[label].astype(str),
                            color_discrete_map=color_map(key), labels={"color": label})
    apply_common_layout(fig_hist, title=f"Distribution of {columns[0]}", height=380)
    st.plotly_chart(fig_hist, use_container_width=True)
with col_e2:
    fig_sc = px.scatter(rows, x=columns[0], y=columns[1], color=labels,
                        labels={"color": "cluster"}, opacity=0.7)
    apply_common_layout(fig_sc, title=f"K-Means with K={k}", height=380)
    st.plotly_chart(fig_sc, use_container_width=True)

st.dataframe(summary_table(key, columns), use_container_width=True)

# ── 11.3 Who Recomputed? ─────────────────────────────────────────────────────
st.header("11.3  Who Recomputed?")

st.dataframe(counter.as_frame(), use_container_width=True, hide_index=True)
st.caption(
    "The counts belong to this browser session, but the `st.cache_data` store is shared "
    "by every session on the server. Open the page in a second tab with the same "
    "settings and its counters stay at 0: the first tab already computed those results."
)
if st.button("Reset counters", key="rx_reset"):
    counter.reset()
    st.rerun()

insight_box(
    "Move the bins slider: no counter moves, because no conductor reads the bins. Move "
    "K: only `cluster_assignments` runs again. Change the columns: everything downstream "
    "of `selected_rows` runs once. Put a slider back to a value you used before and "
    "nothing runs at all, because that result is still in the cache."
)

warning_box(
    "A conductor must depend only on its arguments. If its body reads a widget value or "
    "a global directly, the cache cannot see the dependency and will keep serving the "
    "old answer."
)

# ── 11.4 Deferring Updates ───────────────────────────────────────────────────
st.header("11.4  Updating Only on Demand")

st.markdown(
    "Sometimes the graph should not react to every keystroke. A form groups several "
    "sources behind one submit button, so the endpoints see all the changes at once, "
    "or none of them."
)

with st.form("rx_form"):
    n_rows = st.number_input("Rows to preview", 1, 50, 5, key="rx_rows")
    sort_col = st.selectbox("Sort by", list(columns), key="rx_sort")
    st.form_submit_button("Apply")
st.dataframe(rows.sort_values(sort_col, ascending=False).head(int(n_rows)),
             use_container_width=True, hide_index=True)

code_example("""
import streamlit as st

@st.cache_data
def cluster_assignments(dataset_key, columns, k):   # a conductor
    rows = load_rows(dataset_key, columns)
    return KMeans(n_clusters=k, n_init=10).fit_predict(rows)

k = st.slider("K", 2, 8, 3)                          # a source
labels = cluster_assignments("iris", ("sepal_length", "petal_length"), k)
st.plotly_chart(px.scatter(..., color=labels))        # an endpoint
""")

# ── Quiz & Takeaways ─────────────────────────────────────────────────────────
st.divider()

quiz(
    "You change the histogram bins. Which conductors run again?",
    ["All of them", "selected_rows only", "cluster_assignments only", "None of them"],
    correct_idx=3,
    explanation="The bins feed an endpoint directly; no conductor takes them as an input.",
    key="q_rx_1",
)

quiz(
    "What plays the role of a conductor in a Streamlit app?",
    [
        "A widget",
        "A cached function whose result depends only on its arguments",
        "A chart",
        "The sidebar",
    ],
    correct_idx=1,
    explanation="Caching gives a rerun-everything script the same laziness as a reactive graph.",
    key="q_rx_2",
)

takeaways([
    "Sources are inputs, conductors are intermediate computations, endpoints are outputs.",
    "Only what is downstream of a changed source needs to be recomputed.",
    "In Streamlit, st.cache_data turns an ordinary function into a lazy conductor.",
    "Conductors must read their inputs through their arguments.",
    "Forms batch several source changes into one update.",
])
