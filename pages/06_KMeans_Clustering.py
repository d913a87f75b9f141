"""Chapter 6: K-Means Clustering -- Centroids, the elbow method, and what the clusters mean."""
import numpy as np
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st
from sklearn.cluster import KMeans
from sklearn.metrics import adjusted_rand_score

from course_utils.clustering import (
    centroids_frame, cluster_crosstab, elbow_table, fit_kmeans, scale_features,
)
from course_utils.config import get_settings
from course_utils.constants import DATASETS, NUMERIC_DATASETS
from course_utils.data_loader import dataset_picker, feature_picker
from course_utils.plotting import apply_common_layout, color_map, heatmap_chart
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, formula_box, insight_box, quiz,
    takeaways, warning_box,
)

# ── Page config ──────────────────────────────────────────────────────────────
chapter_header(6)
st.markdown(
    "Take away the labels and ask the data to sort itself. K-Means is the simplest "
    "answer: pick K centres, give every point to its nearest centre, move each centre "
    "to the middle of its points, repeat until nothing moves. The algorithm lives in "
    "scikit-learn and we will not rewrite it. Our job is the part the library cannot do "
    "for us: choosing K, preparing the features, and deciding whether the clusters mean "
    "anything."
)

# ── Load data ────────────────────────────────────────────────────────────────
settings = get_settings()
seed = settings.random_state
key, df = dataset_picker(options=NUMERIC_DATASETS, key="km_dataset")
df, features = feature_picker(df, key, key="km_features")
label = DATASETS[key]["label"]

sample = df.sample(min(settings.max_sample, len(df)), random_state=seed).copy()
scale = st.sidebar.checkbox("Standardise features", value=True, key="km_scale")
if scale:
    X, scaler = scale_features(sample, features)
else:
    X, scaler = sample[features].to_numpy(dtype=float), None

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 1 -- How K-Means Works
# ══════════════════════════════════════════════════════════════════════════════
st.header("1. How K-Means Works")

concept_box(
    "The K-Means Algorithm",
    "1. <b>Initialise</b> K centroids (k-means++ spreads them out sensibly)<br>"
    "2. <b>Assign</b> each point to the nearest centroid<br>"
    "3. <b>Update</b> each centroid to the mean of its assigned points<br>"
    "4. <b>Repeat</b> 2-3 until the assignments stop changing<br><br>"
    "Every run converges, but not necessarily to the best answer. That is why "
    "<code>n_init</code> restarts it several times and keeps the run with the lowest inertia."
)

formula_box(
    "Objective: Within-Cluster Sum of Squares (Inertia)",
    r"\min \sum_{k=1}^{K} \sum_{\mathbf{x}_i \in C_k} \|\mathbf{x}_i - \boldsymbol{\mu}_k\|^2",
    "C_k is cluster k and mu_k its centroid. Distances are Euclidean, so a feature measured "
    "in thousands drowns out one measured in fractions unless you standardise first."
)

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 2 -- Interactive K-Means
# ══════════════════════════════════════════════════════════════════════════════
st.header("2. Interactive K-Means Clustering")

n_labels = sample[label].nunique()
K = st.slider("Number of clusters (K)", 2, 10, min(max(n_labels, 2), 10), 1, key="km_k")

kmeans = fit_kmeans(X, K, seed=seed)
sample["cluster"] = kmeans.labels_.astype(str)
ari = adjusted_rand_score(sample[label].astype(str), kmeans.labels_)

col1, col2, col3 = st.columns(3)
col1.metric("Inertia", f"{kmeans.inertia_:,.1f}")
col2.metric("Iterations to converge", kmeans.n_iter_)
col3.metric("Adjusted Rand Index vs labels", f"{ari:.3f}")

st.caption(
    f"ARI compares the clusters to the `{label}` column, which K-Means never saw. 1.0 is "
    "perfect agreement, 0.0 is what random assignment would score."
)

feat_x = st.selectbox("X-axis", features, index=0, key="km_x")
feat_y = st.selectbox("Y-axis", features, index=min(1, len(features) - 1), key="km_y")

col_viz1, col_viz2 = st.columns(2)
centroids = centroids_frame(kmeans, scaler, features)

with col_viz1:
    fig_cluster = px.scatter(
        sample, x=feat_x, y=feat_y, color="cluster", opacity=0.6,
        category_orders={"cluster": [str(i) for i in range(K)]},
    )
    fig_cluster.add_trace(go.Scatter(
        x=centroids[feat_x], y=centroids[feat_y],
        mode="markers", name="Centroids",
        marker=dict(color="black", size=15, symbol="x", line=dict(width=2)),
    ))
    apply_common_layout(fig_cluster, title="K-Means Clusters", height=450)
    st.plotly_chart(fig_cluster, use_container_width=True)

with col_viz2:
    fig_actual = px.scatter(
        sample, x=feat_x, y=feat_y, color=sample[label].astype(str),
        color_discrete_map=color_map(key), opacity=0.6,
        labels={"color": label},
    )
    apply_common_layout(fig_actual, title=f"Actual {label}", height=450)
    st.plotly_chart(fig_actual, use_container_width=True)

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 3 -- Elbow Method
# ══════════════════════════════════════════════════════════════════════════════
st.header("3. The Elbow Method: Choosing K")

concept_box(
    "How to Choose the Number of Clusters",
    "Inertia always falls as K grows: more centres means shorter distances. The "
    "<b>elbow</b> is where the fall flattens out, the point after which new clusters "
    "split real groups instead of finding new ones. The <b>silhouette</b> score is a "
    "second opinion: it rewards points that sit much closer to their own cluster than "
    "to the next nearest, and it does peak instead of sliding forever."
)

elbow = elbow_table(X, range(2, 11), seed=seed, labels=sample[label].astype(str))

fig_elbow = go.Figure()
fig_elbow.add_trace(go.Scatter(
    x=elbow["K"], y=elbow["inertia"], mode="lines+markers", name="Inertia",
    line=dict(color="#2E86C1", width=3), marker=dict(size=10),
))
fig_elbow.add_vline(x=n_labels, line_dash="dash", line_color="gray",
                    annotation_text=f"K={n_labels} (number of labels)")
apply_common_layout(fig_elbow, title="Elbow Plot: Inertia vs K", height=400)
fig_elbow.update_layout(xaxis_title="Number of Clusters (K)", yaxis_title="Inertia")
st.plotly_chart(fig_elbow, use_container_width=True)

fig_sil = px.line(
    elbow.melt(id_vars="K", value_vars=["silhouette", "adjusted_rand"]),
    x="K", y="value", color="variable", markers=True,
)
apply_common_layout(fig_sil, title="Silhouette and ARI vs K", height=400)
st.plotly_chart(fig_sil, use_container_width=True)

best_k = int(elbow.loc[elbow["silhouette"].idxmax(), "K"])
insight_box(
    f"The silhouette score peaks at **K={best_k}** for these features, and the data has "
    f"**{n_labels}** labelled groups. When the two disagree, that is information, not "
    "failure: some labelled groups are simply not separable by these measurements."
)

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 4 -- Centroids and Cross-Tabulation
# ══════════════════════════════════════════════════════════════════════════════
st.header("4. What Do the Clusters Look Like?")

st.subheader(f"K={K} centroids (original units)")
st.dataframe(centroids.round(2), use_container_width=True)

standardised = (centroids - sample[features].mean()) / sample[features].std()
st.plotly_chart(
    heatmap_chart(standardised.round(2), title="Centroid profiles (z-scores)", height=380,
                  color_scale="RdBu_r", text_format="%{text}"),
    use_container_width=True,
)

cross_pct = cluster_crosstab(sample[label].astype(str), kmeans.labels_, normalize=True)
fig_cross = px.imshow(
    cross_pct.values,
    x=[f"Cluster {c}" for c in cross_pct.columns],
    y=cross_pct.index.tolist(),
    color_continuous_scale="Blues", text_auto=".1f", aspect="auto",
    labels=dict(color="%"),
)
apply_common_layout(fig_cross, title=f"{label} distribution across clusters (%)", height=400)
st.plotly_chart(fig_cross, use_container_width=True)

warning_box(
    "K-Means assumes round clusters of similar size. Elongated or nested groups get "
    "sliced into round chunks regardless, and the algorithm will report a tidy answer "
    "either way."
)

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 5 -- Iterations
# ══════════════════════════════════════════════════════════════════════════════
st.header("5. Watching the Centroids Move")

st.markdown(
    "Starting every run from the same random centres and stopping scikit-learn after "
    "1, 2, 3... iterations shows how quickly the centroids settle. Most of the movement "
    "happens in the first couple of steps."
)

n_iter_show = st.slider("Iterations", 1, 10, 3, 1, key="km_iter")
rng = np.random.RandomState(seed)
init = X[rng.choice(len(X), K, replace=False)]
ix, iy = features.index(feat_x), features.index(feat_y)

paths = [init]
for i in range(1, n_iter_show + 1):
    step = KMeans(n_clusters=K, init=init, n_init=1, max_iter=i, random_state=seed).fit(X)
    paths.append(step.cluster_centers_)

fig_iter = go.Figure()
fig_iter.add_trace(go.Scatter(
    x=X[:, ix], y=X[:, iy], mode="markers", name="Observations",
    marker=dict(size=4, color=step.labels_, colorscale="Viridis", opacity=0.35),
))
for k in range(K):
    fig_iter.add_trace(go.Scatter(
        x=[p[k, ix] for p in paths], y=[p[k, iy] for p in paths],
        mode="lines+markers", name=f"Centroid {k}",
        line=dict(width=2, dash="dot"), marker=dict(size=9, symbol="diamond"),
    ))
apply_common_layout(fig_iter, title=f"Centroid paths over {n_iter_show} iteration(s)", height=500)
fig_iter.update_layout(
    xaxis_title=f"{feat_x}{' (scaled)' if scale else ''}",
    yaxis_title=f"{feat_y}{' (scaled)' if scale else ''}",
)
st.plotly_chart(fig_iter, use_container_width=True)

code_example("""
from sklearn.cluster import KMeans
from sklearn.preprocessing import StandardScaler

X_scaled = StandardScaler().fit_transform(df[features])

inertias = [KMeans(n_clusters=k, random_state=42, n_init=10).fit(X_scaled).inertia_
            for k in range(2, 11)]

kmeans = KMeans(n_clusters=3, random_state=42, n_init=10).fit(X_scaled)
labels = kmeans.labels_
""")

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 6 -- Quiz & Takeaways
# ══════════════════════════════════════════════════════════════════════════════
st.divider()

quiz(
    "What does the 'elbow' in the elbow method represent?",
    [
        "The point where K-Means fails to converge",
        "The point where extra clusters stop reducing inertia by much",
        "The optimal number of features",
        "The point where inertia reaches zero",
    ],
    correct_idx=1,
    explanation="Before the elbow, new clusters split genuinely different groups; after it, "
    "they split groups that belong together and the gains are marginal.",
    key="q_km_1",
)

quiz(
    "Why standardise features before K-Means?",
    [
        "K-Means only accepts values between 0 and 1",
        "Euclidean distance is dominated by features with large numeric ranges",
        "It makes the algorithm converge in one iteration",
        "It is required to compute inertia",
    ],
    correct_idx=1,
    explanation="Try unticking 'Standardise features' on the wine data: proline, measured in "
    "hundreds, decides almost every assignment on its own.",
    key="q_km_2",
)

takeaways([
    "K-Means alternates assignment and update steps until assignments stop changing.",
    "Restarts (n_init) guard against a bad starting configuration.",
    "Choose K with the elbow plot and the silhouette score, then sanity-check against what you know.",
    "Standardise features first: the objective is a sum of squared Euclidean distances.",
    "Clusters are only as meaningful as the features you give the algorithm.",
])
