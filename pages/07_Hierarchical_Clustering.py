"""Chapter 7: Hierarchical Clustering -- Dendrograms, linkage methods and cutting the tree."""
import pandas as pd
import plotly.express as px
import streamlit as st
from sklearn.metrics import adjusted_rand_score

from course_utils.clustering import (
    LINKAGE_METHODS, cluster_crosstab, cophenetic_correlation, cut_tree, linkage_matrix,
    scale_features,
)
from course_utils.config import get_settings
from course_utils.constants import DATASETS, NUMERIC_DATASETS
from course_utils.data_loader import dataset_picker, feature_picker
from course_utils.plotting import apply_common_layout, color_map, dendrogram_figure
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, formula_box, insight_box, quiz,
    takeaways, warning_box,
)

# ── Page config ──────────────────────────────────────────────────────────────
chapter_header(7)
st.markdown(
    "K-Means makes you choose K before it starts. Hierarchical clustering postpones the "
    "decision: it builds the whole family tree of merges, from every point on its own to "
    "everything in one group, and lets you cut the tree wherever you like afterwards. "
    "SciPy builds the tree. We choose how to measure the distance between groups, read "
    "the dendrogram, and decide where to cut."
)

# ── Load data ────────────────────────────────────────────────────────────────
settings = get_settings()
seed = settings.random_state
key, df = dataset_picker(options=NUMERIC_DATASETS, key="hc_dataset")
df, features = feature_picker(df, key, key="hc_features")
label = DATASETS[key]["label"]

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 1 -- How Hierarchical Clustering Works
# ══════════════════════════════════════════════════════════════════════════════
st.header("1. How Agglomerative Clustering Works")

concept_box(
    "Bottom-Up Merging",
    "1. Start with every observation as its own cluster<br>"
    "2. Merge the two closest clusters<br>"
    "3. Repeat until one cluster remains<br>"
    "4. Cut the resulting tree at a height (or a number of clusters)<br><br>"
    "The only real choice is what 'closest' means for two <i>groups</i> of points."
)

st.markdown("""
**Linkage methods** define the distance between two clusters:
- **Single**: the closest pair of points (finds long chains, sensitive to noise)
- **Complete**: the farthest pair of points (compact, similar-diameter clusters)
- **Average**: the mean over all pairs (a compromise between the two)
- **Ward**: the increase in within-cluster variance from merging (close to the K-Means objective)
""")

formula_box(
    "Ward's Linkage",
    r"d(C_i, C_j) = \sqrt{\frac{2 n_i n_j}{n_i + n_j}} \|\boldsymbol{\mu}_i - \boldsymbol{\mu}_j\|",
    "Merges the pair of clusters whose union increases the total within-cluster sum of squares the least."
)

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 2 -- Dendrogram
# ══════════════════════════════════════════════════════════════════════════════
st.header("2. Reading a Dendrogram")

method = st.selectbox("Linkage method", LINKAGE_METHODS[:4], index=0, key="hc_method")
n_dendro = st.slider("Observations in the dendrogram", 20, min(150, len(df)), min(60, len(df)), 10,
                     key="hc_n_dendro")

small = df.sample(n_dendro, random_state=seed)
X_small, _ = scale_features(small, features)
row_labels = small["name"].tolist() if "name" in small.columns else small[label].astype(str).tolist()
st.plotly_chart(
    dendrogram_figure(X_small, labels=row_labels, method=method,
                      title=f"Dendrogram ({method.title()} linkage, standardised features)"),
    use_container_width=True,
)

insight_box(
    "Height is the distance at which two branches merged. Long vertical stems mean the "
    "groups below them were far apart before they were joined, which is exactly where "
    "a horizontal cut separates well-defined clusters."
)

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 3 -- Cutting the Tree
# ══════════════════════════════════════════════════════════════════════════════
st.header("3. Cutting the Tree")

sample = df.sample(min(settings.max_sample, len(df)), random_state=seed).copy()
X, _ = scale_features(sample, features)
Z = linkage_matrix(X, method=method)

cut_mode = st.radio("Cut by", ["number of clusters", "height"], horizontal=True, key="hc_cut")
if cut_mode == "number of clusters":
    k = st.slider("Number of clusters", 2, 10, min(max(sample[label].nunique(), 2), 10), key="hc_k")
    clusters = cut_tree(Z, k=k)
else:
    max_h = float(Z[:, 2].max())
    h = st.slider("Cut height", 0.0, round(max_h, 1), round(max_h * 0.5, 1), key="hc_height")
    clusters = cut_tree(Z, height=h)

sample["cluster"] = clusters.astype(str)
n_found = len(set(clusters))
ari = adjusted_rand_score(sample[label].astype(str), clusters)
coph = cophenetic_correlation(Z, X)

col1, col2, col3 = st.columns(3)
col1.metric("Clusters", n_found)
col2.metric("Adjusted Rand Index vs labels", f"{ari:.3f}")
col3.metric("Cophenetic correlation", f"{coph:.3f}")

st.caption(
    "The cophenetic correlation compares the tree's merge heights with the original "
    "pairwise distances. Close to 1 means the dendrogram is a faithful summary."
)

feat_x = st.selectbox("X-axis", features, index=0, key="hc_x")
feat_y = st.selectbox("Y-axis", features, index=min(1, len(features) - 1), key="hc_y")

col_v1, col_v2 = st.columns(2)
with col_v1:
    fig_hc = px.scatter(
        sample, x=feat_x, y=feat_y, color="cluster", opacity=0.6,
        category_orders={"cluster": [str(i) for i in range(n_found)]},
    )
    apply_common_layout(fig_hc, title="Hierarchical Clusters", height=420)
    st.plotly_chart(fig_hc, use_container_width=True)
with col_v2:
    fig_actual = px.scatter(
        sample, x=feat_x, y=feat_y, color=sample[label].astype(str),
        color_discrete_map=color_map(key), opacity=0.6, labels={"color": label},
    )
    apply_common_layout(fig_actual, title=f"Actual {label}", height=420)
    st.plotly_chart(fig_actual, use_container_width=True)

cross_pct = cluster_crosstab(sample[label].astype(str), clusters, normalize=True)
fig_cross = px.imshow(
    cross_pct.values,
    x=[f"Cluster {c}" for c in cross_pct.columns],
    y=cross_pct.index.tolist(),
    color_continuous_scale="Blues", text_auto=".1f", aspect="auto",
    labels=dict(color="%"),
)
apply_common_layout(fig_cross, title=f"{label} distribution across clusters (%)", height=380)
st.plotly_chart(fig_cross, use_container_width=True)

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 4 -- Comparing Linkages
# ══════════════════════════════════════════════════════════════════════════════
st.header("4. Same Data, Four Linkages")

k_compare = max(sample[label].nunique(), 2)
rows = []
for m in LINKAGE_METHODS[:4]:
    Zm = linkage_matrix(X, method=m)
    labels_m = cut_tree(Zm, k=k_compare)
    sizes = pd.Series(labels_m).value_counts()
    rows.append({
        "linkage": m,
        "ARI": adjusted_rand_score(sample[label].astype(str), labels_m),
        "cophenetic": cophenetic_correlation(Zm, X),
        "largest cluster share": sizes.max() / len(labels_m),
    })
compare = pd.DataFrame(rows)
st.dataframe(compare.round(3), use_container_width=True, hide_index=True)

warning_box(
    "Single linkage often scores a high cophenetic correlation and a terrible ARI at the "
    "same time: it faithfully records the chain of nearest neighbours, which tends to "
    "be one giant cluster plus a few stragglers. Check the 'largest cluster share' column."
)

code_example("""
from scipy.cluster.hierarchy import linkage, fcluster, cophenet
from scipy.spatial.distance import pdist

Z = linkage(X_scaled, method="ward")
labels = fcluster(Z, t=3, criterion="maxclust")      # by number of clusters
labels = fcluster(Z, t=8.0, criterion="distance")    # by height
c, _ = cophenet(Z, pdist(X_scaled))
""")

# ══════════════════════════════════════════════════════════════════════════════
# SECTION 5 -- Quiz & Takeaways
# ══════════════════════════════════════════════════════════════════════════════
st.divider()

quiz(
    "What does the height of a merge in a dendrogram represent?",
    [
        "The number of points in the merged cluster",
        "The distance between the two clusters when they were merged",
        "The order in which points were read",
        "The variance of the whole dataset",
    ],
    correct_idx=1,
    explanation="Cutting the tree at a height keeps every merge below it and undoes every merge above.",
    key="q_hc_1",
)

quiz(
    "Which linkage is most prone to 'chaining' into one long cluster?",
    ["Ward", "Complete", "Average", "Single"],
    correct_idx=3,
    explanation="Single linkage joins groups through their closest pair, so a trail of points can link everything.",
    key="q_hc_2",
)

takeaways([
    "Hierarchical clustering builds the full merge tree; you choose the number of clusters afterwards.",
    "The linkage method defines the distance between groups and changes the answer substantially.",
    "Cut by a number of clusters or by a height; both come from the same tree.",
    "The cophenetic correlation measures how well the tree preserves the original distances.",
    "Ward linkage is the closest cousin of K-Means and is only defined for Euclidean distance.",
])
