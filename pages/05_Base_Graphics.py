"""Chapter 5: Base Graphics -- Panels, overlays, annotations and scatter-plot matrices."""
import matplotlib.pyplot as plt
import streamlit as st

from course_utils.base_graphics import (
    annotate_extremes, hist_with_density, pairs_plot, panel_grid, scatter_with_fit,
)
from course_utils.constants import DATASETS
from course_utils.data_loader import dataset_picker
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, insight_box, quiz, takeaways, warning_box,
)

# ── Header ───────────────────────────────────────────────────────────────────
chapter_header(5)
st.markdown(
    "Before the grammar of graphics there was the pen-and-paper model: open a canvas, "
    "draw some points, then keep drawing on top. Add a line. Add a label. Add a legend. "
    "Nothing is recomputed and nothing is declarative; every call puts more ink on the "
    "same page. matplotlib works the same way, and it is still the fastest route to a "
    "publication figure where you need to control every tick mark. This chapter covers "
    "the handful of moves you make over and over."
)

key, df = dataset_picker(options=["iris", "wine", "pokemon"], key="base_dataset")
meta = DATASETS[key]
label = meta["label"]
features = meta["features"]
colors = meta["colors"]

# ── 5.1 Panels ───────────────────────────────────────────────────────────────
st.header("5.1  Splitting the Canvas into Panels")

concept_box(
    "One Canvas, Many Plots",
    "Setting the panel layout up front (rows x columns) and then drawing into each panel "
    "in turn is the base-graphics way of building small multiples. In matplotlib, "
    "<code>plt.subplots(nrows, ncols)</code> returns the figure and a grid of axes, and "
    "every drawing call targets one axis."
)

n_panels = st.slider("Features to show", 2, min(6, len(features)), min(4, len(features)), key="base_panels")
ncols = 2
nrows = (n_panels + 1) // ncols
fig, axes = panel_grid(nrows, ncols, figsize=(10, 3.2 * nrows))
for ax, feature in zip(axes, features[:n_panels]):
    hist_with_density(ax, df[feature], bins=20)
    ax.set_title(feature, fontsize=10)
for ax in axes[n_panels:]:
    ax.set_visible(False)
fig.tight_layout()
st.pyplot(fig)
plt.close(fig)

code_example("""
fig, axes = plt.subplots(2, 2, figsize=(10, 6))
for ax, col in zip(axes.ravel(), columns):
    ax.hist(df[col], bins=20, density=True, alpha=0.5)
    ax.set_title(col)
""")

# ── 5.2 Overlays ─────────────────────────────────────────────────────────────
st.header("5.2  Drawing on Top: Points, Lines and Labels")

col1, col2 = st.columns(2)
x = col1.selectbox("x", features, index=0, key="base_x")
y = col2.selectbox("y", features, index=min(2, len(features) - 1), key="base_y")
by_group = st.checkbox(f"Colour by {label}", value=True, key="base_group")
n_labels = st.slider("Label the top N points by y", 0, 8, 3, key="base_labels")

fig, ax = plt.subplots(figsize=(9, 5.5))
slope, intercept = scatter_with_fit(
    ax, df[x], df[y],
    groups=df[label].astype(str) if by_group else None,
    colors=colors,
)
if n_labels:
    name_col = "name" if "name" in df.columns else label
    annotate_extremes(ax, df.reset_index(), x, y, name_col, n=n_labels)
ax.set_xlabel(x)
ax.set_ylabel(y)
ax.set_title(f"{y} vs {x}")
ax.text(0.02, 0.96, f"y = {slope:.2f} x + {intercept:.2f}", transform=ax.transAxes,
        va="top", fontsize=9, family="monospace")
ax.grid(alpha=0.3)
st.pyplot(fig)
plt.close(fig)

insight_box(
    "Each element above is its own call: `scatter`, `plot` for the fitted line, `annotate` "
    "for the labels, `text` for the equation, `grid` for the background. Delete any one of "
    "them and the others are unaffected. That independence is what makes base graphics "
    "easy to fine-tune and tedious to restyle."
)

warning_box(
    "The dashed line is fitted to all points together. When the groups have different "
    "slopes, one overall line can point in a direction none of the groups follow."
)

# ── 5.3 Pairs ────────────────────────────────────────────────────────────────
st.header("5.3  Scatter-Plot Matrix")

pair_cols = st.multiselect("Columns", features, default=features[:4], key="base_pairs")
if len(pair_cols) >= 2:
    fig = pairs_plot(df, pair_cols, hue=label, colors=colors, figsize=(2.4 * len(pair_cols),) * 2)
    st.pyplot(fig)
    plt.close(fig)
else:
    st.info("Pick at least two columns.")

code_example("""
pd.plotting.scatter_matrix(df[columns], diagonal="hist", figsize=(9, 9))
""")

# ── Quiz & Takeaways ─────────────────────────────────────────────────────────
st.divider()

quiz(
    "In the base-graphics model, how do you add a regression line to an existing scatter plot?",
    [
        "Rebuild the plot with a new geometry",
        "Call a line-drawing function on the same axes",
        "Change the theme",
        "Facet the plot",
    ],
    correct_idx=1,
    explanation="Base graphics are additive: each call draws more ink on the current axes.",
    key="q_base_1",
)

takeaways([
    "Base graphics are imperative: open a canvas, then keep drawing on it.",
    "Set up the panel grid first and draw into one axis at a time.",
    "Lines, labels, legends and text are separate calls layered on top of the points.",
    "A scatter-plot matrix is the quickest way to see every pairwise relationship.",
])
