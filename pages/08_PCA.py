"""Chapter 8: Principal Component Analysis -- Scree plots, loadings, biplots and scaling."""
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from course_utils.constants import DATASETS, NUMERIC_DATASETS
from course_utils.data_loader import dataset_picker, feature_picker
from course_utils.dimred import (
    biplot_arrows, fit_pca, loadings_frame, n_components_for, scree_table,
)
from course_utils.plotting import apply_common_layout, biplot_figure, color_map, heatmap_chart
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, formula_box, insight_box, quiz,
    takeaways, warning_box,
)

# ── Page config ──────────────────────────────────────────────────────────────
chapter_header(8)

st.markdown(
    "You have a table with a dozen numeric columns and a screen with two dimensions. "
    "PCA is the principled way to squash the first into the second while losing as "
    "little as possible. It rotates the data so that the first axis points along the "
    "direction of greatest spread, the second along the greatest remaining spread at "
    "right angles to the first, and so on. Keep the first two axes and you have a map "
    "of the data. `sklearn.decomposition.PCA` does the rotation; the work left to us is "
    "deciding whether to scale, how many components to keep, and what each one means."
)

# ── Load & filter data ───────────────────────────────────────────────────────
key, df = dataset_picker(options=NUMERIC_DATASETS, default="wine", key="pca_dataset")
df, features = feature_picker(df, key, key="pca_features")
label = DATASETS[key]["label"]

concept_box(
    "What Is PCA?",
    "PCA finds the eigenvectors of the covariance (or correlation) matrix. Each "
    "eigenvector is a new axis, a weighted blend of the original columns, and its "
    "eigenvalue says how much variance lies along it. The rotation itself loses "
    "nothing; information is only lost when you drop the smaller components."
)

formula_box(
    "Eigen-Decomposition of the Covariance Matrix",
    r"\Sigma = V \Lambda V^T",
    "V holds the principal directions (loadings) and Lambda the variance along each one."
)

st.sidebar.subheader("PCA Settings")
scale = st.sidebar.checkbox("Scale to unit variance (correlation PCA)", value=True, key="pca_scale")

pca, scores = fit_pca(df, features, scale=scale)
scores[label] = df.loc[scores.index, label].astype(str)
scree = scree_table(pca)

# ── Section 1: Explained Variance ────────────────────────────────────────────
st.header("1. How Much Does Each Component Explain?")

fig_evr = go.Figure()
fig_evr.add_trace(go.Bar(
    x=scree["component"], y=scree["proportion"], name="Individual", marker_color="#2E86C1",
))
fig_evr.add_trace(go.Scatter(
    x=scree["component"], y=scree["cumulative"], name="Cumulative",
    mode="lines+markers", marker_color="#E63946",
))
fig_evr.update_layout(yaxis_title="Proportion of variance", yaxis_range=[0, 1.05])
apply_common_layout(fig_evr, "Scree Plot", 420)
st.plotly_chart(fig_evr, use_container_width=True)

threshold = st.slider("Variance to retain", 0.5, 0.99, 0.9, 0.01, key="pca_threshold")
needed = n_components_for(pca, threshold)
kaiser = int((scree["eigenvalue"] > 1).sum()) if scale else None

col1, col2, col3 = st.columns(3)
col1.metric("PC1", f"{scree['proportion'].iloc[0]:.1%}")
col2.metric("PC1 + PC2", f"{scree['cumulative'].iloc[min(1, len(scree) - 1)]:.1%}")
col3.metric(f"Components for {threshold:.0%}", f"{needed} of {len(features)}")

if kaiser is not None:
    st.caption(
        f"Kaiser's rule (keep components with eigenvalue above 1 on scaled data) "
        f"suggests {kaiser}. It is a rule of thumb, not a theorem."
    )

st.dataframe(scree.round(3), use_container_width=True, hide_index=True)

# ── Section 2: Scores ────────────────────────────────────────────────────────
st.header("2. The Data on the First Two Components")

fig_scores = px.scatter(
    scores, x="PC1", y="PC2", color=label, color_discrete_map=color_map(key),
    opacity=0.7,
    labels={
        "PC1": f"PC1 ({scree['proportion'].iloc[0]:.1%})",
        "PC2": f"PC2 ({scree['proportion'].iloc[1]:.1%})",
    },
)
apply_common_layout(fig_scores, "PCA Scores", 520)
st.plotly_chart(fig_scores, use_container_width=True)

insight_box(
    f"PCA never saw the `{label}` column. If the colours still separate along PC1 or "
    "PC2, the directions of greatest variance happen to be the directions that "
    "distinguish the groups. That is common but not guaranteed: variance is not the "
    "same thing as relevance."
)

# ── Section 3: Loadings ──────────────────────────────────────────────────────
st.header("3. What Do the Components Mean?")

loadings = loadings_frame(pca, features)
n_show = min(4, pca.n_components_)
st.plotly_chart(
    heatmap_chart(loadings.iloc[:, :n_show].round(2), x_label="Component", y_label="Feature",
                  title="Loadings", height=max(350, 28 * len(features)), color_scale="RdBu_r",
                  text_format="%{text}"),
    use_container_width=True,
)

st.subheader("Biplot")
arrows = biplot_arrows(pca, features, scores)
st.plotly_chart(biplot_figure(scores, arrows, color=label, dataset_key=key), use_container_width=True)

st.markdown(
    "Arrows pointing the same way are positively correlated features; opposite arrows "
    "are negatively correlated; arrows at right angles are roughly unrelated. Points "
    "far along an arrow have high values of that feature."
)

# ── Section 4: Scaling ───────────────────────────────────────────────────────
st.header("4. To Scale or Not to Scale")

pca_raw, _ = fit_pca(df, features, scale=False)
top_raw = loadings_frame(pca_raw, features)["PC1"].abs().idxmax()
col_a, col_b = st.columns(2)
col_a.metric("PC1 share, unscaled", f"{pca_raw.explained_variance_ratio_[0]:.1%}")
col_b.metric("Feature dominating unscaled PC1", top_raw)

warning_box(
    "Without scaling, PCA on raw units is mostly a report on which column has the "
    "biggest numbers. On the wine data, proline (hundreds to over a thousand) takes "
    "nearly all of PC1 on its own. Scale unless the columns already share a unit."
)

code_example("""
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

X_scaled = StandardScaler().fit_transform(df[features])
pca = PCA().fit(X_scaled)

pca.explained_variance_ratio_     # scree
pca.components_.T                 # loadings, one column per component
scores = pca.transform(X_scaled)  # coordinates on the new axes
""")

# ── Quiz & Takeaways ─────────────────────────────────────────────────────────
st.divider()

quiz(
    "What does the first principal component represent?",
    [
        "The most important original feature",
        "The direction along which the data varies most",
        "The mean of all features",
        "The feature that best predicts the label",
    ],
    correct_idx=1,
    explanation="PC1 is a blend of all features chosen to maximise variance, not a single original column.",
    key="q_pca_1",
)

quiz(
    "Your unscaled PCA says PC1 explains 99% of the variance. The most likely explanation is...",
    [
        "The data is essentially one-dimensional",
        "One feature is measured on a far larger scale than the others",
        "PCA has failed to converge",
        "There are too few observations",
    ],
    correct_idx=1,
    explanation="Covariance PCA weights features by their variance, so large-unit columns dominate.",
    key="q_pca_2",
)

takeaways([
    "PCA rotates the data onto orthogonal axes ordered by the variance they explain.",
    "The scree plot and a cumulative-variance threshold guide how many components to keep.",
    "Loadings say how each original feature contributes to each component.",
    "A biplot shows observations and feature directions on the same two axes.",
    "Scale the features unless they share a unit; otherwise the biggest numbers win.",
])
