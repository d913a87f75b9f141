"""Chapter 4: Grammar of Graphics -- Building a chart one component at a time."""
import pandas as pd
import streamlit as st

from course_utils.constants import DATASETS
from course_utils.data_loader import dataset_picker
from course_utils.grammar import COORDS, GEOMS, STATS, THEMES, ggplot
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, insight_box, quiz, takeaways, warning_box,
)

# ── Header ───────────────────────────────────────────────────────────────────
chapter_header(4)
st.markdown(
    "Most plotting libraries give you a menu: scatter plot, bar chart, box plot, pick "
    "one. The grammar of graphics gives you a sentence instead. A chart is **data**, "
    "mapped to visual channels by **aesthetics**, drawn with a **geometry**, after an "
    "optional **statistical** transformation, split into **facets**, placed in a "
    "**coordinate** system and dressed in a **theme**. Change one word of the sentence "
    "and you get a different chart without rewriting the rest. Plotly Express is built "
    "on exactly this idea, and this chapter makes each word of the sentence a separate knob."
)

key, df = dataset_picker(options=["iris", "wine", "pokemon"], key="gg_dataset")
meta = DATASETS[key]
label = meta["label"]
features = meta["features"]

# ── 4.1 The Seven Components ─────────────────────────────────────────────────
st.header("4.1  Seven Components")

concept_box(
    "A Chart Is a Sentence",
    "<b>Data</b>: the table. <b>Aesthetics</b>: which column drives x, y, colour, size. "
    "<b>Geometry</b>: points, lines, bars, boxes. <b>Statistics</b>: what to compute "
    "before drawing (counts, means, a fitted line). <b>Facets</b>: small multiples by a "
    "category. <b>Coordinates</b>: cartesian, flipped, logarithmic. <b>Theme</b>: "
    "everything that is not data ink."
)

# ── 4.2 Build It Layer by Layer ──────────────────────────────────────────────
st.header("4.2  Build a Chart Layer by Layer")

col1, col2, col3 = st.columns(3)
with col1:
    x = st.selectbox("x", features + [label], index=0, key="gg_x")
    y = st.selectbox("y", [None] + features, index=2, key="gg_y")
    color = st.selectbox("colour", [None, label], index=1, key="gg_color")
with col2:
    geom = st.selectbox("geometry", GEOMS, index=0, key="gg_geom")
    stat = st.selectbox("statistic", STATS, index=0, key="gg_stat")
    coord = st.selectbox("coordinates", COORDS, index=0, key="gg_coord")
with col3:
    facet_on = st.checkbox(f"facet by {label}", value=False, key="gg_facet")
    theme = st.selectbox("theme", THEMES, index=0, key="gg_theme")

plot = ggplot(df, x=x, y=y, color=color).geom(geom).stat(stat).coord(coord).theme(theme)
if facet_on:
    plot = plot.facet(col=label, wrap=3)
plot = plot.labs(title=f"{geom} of {x}" + (f" vs {y}" if y else ""))

st.table(pd.DataFrame(list(plot.describe().items()), columns=["component", "value"]))

try:
    fig = plot.render()
    fig.update_layout(height=500)
    st.plotly_chart(fig, use_container_width=True)
except ValueError as err:
    st.error(f"This combination does not make a chart: {err}")

insight_box(
    "Switch the statistic from `identity` to `count` and the geometry to `bar`: the same "
    "x mapping now draws a frequency chart, because the stat layer replaced the data "
    "with group counts before the geometry ever saw it. Switch the coordinates to `flip` "
    "and the bars lie down. None of the other components changed."
)

code_example("""
import plotly.express as px

# data + aesthetics + geometry + stat (smooth) + facets + theme
px.scatter(iris, x="sepal_length", y="petal_length", color="species",
           trendline="ols", facet_col="species", template="ggplot2")
""")

# ── 4.3 Statistics ───────────────────────────────────────────────────────────
st.header("4.3  The Statistics Layer")

st.markdown(
    "The statistic is the most overlooked component. A bar chart of counts, a bar chart "
    "of means and a scatter with a regression line are three different statistics "
    "feeding (mostly) the same geometry."
)

tabs = st.tabs(["count", "mean", "smooth"])
with tabs[0]:
    st.plotly_chart(
        ggplot(df, x=label, color=label).geom("bar").stat("count").labs(title="stat = count").render(),
        use_container_width=True,
    )
with tabs[1]:
    st.plotly_chart(
        ggplot(df, x=label, y=features[0], color=label).geom("bar").stat("mean")
        .labs(title=f"stat = mean of {features[0]}").render(),
        use_container_width=True,
    )
with tabs[2]:
    st.plotly_chart(
        ggplot(df, x=features[0], y=features[1], color=label).geom("point").stat("smooth")
        .labs(title="stat = smooth (OLS per group)").render(),
        use_container_width=True,
    )

warning_box(
    "A bar chart of means hides the spread completely. If the groups overlap heavily, "
    "a box or violin geometry tells a much more honest story with the same aesthetics."
)

# ── 4.4 Facets ───────────────────────────────────────────────────────────────
st.header("4.4  Facets: Small Multiples")

facet_fig = (
    ggplot(df, x=features[0], y=features[1], color=label)
    .geom("point").facet(col=label).theme("simple_white")
    .labs(title=f"{features[1]} vs {features[0]}, one panel per {label}")
    .render()
)
st.plotly_chart(facet_fig, use_container_width=True)

# ── Quiz & Takeaways ─────────────────────────────────────────────────────────
st.divider()

quiz(
    "You change a histogram into a density curve of the same column. Which component changed?",
    ["Data", "Aesthetics", "Geometry and statistic", "Theme"],
    correct_idx=2,
    explanation="The mapping (x = column) is the same; what is computed and how it is drawn changed.",
    key="q_gg_1",
)

quiz(
    "Which component turns a vertical bar chart into a horizontal one?",
    ["Facets", "Coordinates", "Statistics", "Theme"],
    correct_idx=1,
    explanation="Flipping the coordinate system swaps the roles of the axes.",
    key="q_gg_2",
)

takeaways([
    "A chart is data, aesthetics, geometry, statistics, facets, coordinates and theme.",
    "Aesthetics map columns to channels; they are not fixed colours or sizes.",
    "The statistics layer transforms the data before drawing: counts, means, fitted lines.",
    "Facets repeat the same chart for each level of a category.",
    "Changing one component at a time is the fastest way to find the right chart.",
])
