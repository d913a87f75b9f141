"""K-means and hierarchical clustering wrappers around scikit-learn and SciPy."""
import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import cophenet, fcluster, linkage
from scipy.spatial.distance import pdist
from sklearn.cluster import KMeans
from sklearn.metrics import adjusted_rand_score, silhouette_score
from sklearn.preprocessing import StandardScaler

LINKAGE_METHODS = ["ward", "complete", "average", "single", "centroid", "median"]


def scale_features(df, columns):
    """Standardise columns; returns (scaled array, fitted scaler)."""
    scaler = StandardScaler()
    return scaler.fit_transform(df[columns]), scaler


def fit_kmeans(X, k, seed=42, n_init=10):
    return KMeans(n_clusters=k, random_state=seed, n_init=n_init).fit(X)


def elbow_table(X, k_values, seed=42, labels=None):
    """Inertia and silhouette for each K (plus ARI against ``labels`` when given)."""
    rows = []
    for k in k_values:
        km = fit_kmeans(X, k, seed=seed)
        row = {"K": k, "inertia": km.inertia_, "silhouette": silhouette_score(X, km.labels_)}
        if labels is not None:
            row["adjusted_rand"] = adjusted_rand_score(labels, km.labels_)
        rows.append(row)
    return pd.DataFrame(rows)


def centroids_frame(model, scaler, columns):
    """Cluster centres back in original units."""
    centres = model.cluster_centers_
    if scaler is not None:
        centres = scaler.inverse_transform(centres)
    return pd.DataFrame(
        centres, columns=columns,
        index=[f"Cluster {i}" for i in range(len(centres))],
    )


def cluster_crosstab(labels_true, labels_pred, normalize=False):
    """Rows are true labels, columns are clusters; ``normalize`` gives row percentages."""
    tab = pd.crosstab(
        pd.Series(np.asarray(labels_true), name="label"),
        pd.Series(np.asarray(labels_pred), name="cluster"),
    )
    if normalize:
        tab = tab.div(tab.sum(axis=1), axis=0) * 100
    return tab


def linkage_matrix(X, method="ward", metric="euclidean"):
    if method not in LINKAGE_METHODS:
        raise ValueError(f"method must be one of {LINKAGE_METHODS}, got {method!r}")
    if method in ("ward", "centroid", "median") and metric != "euclidean":
        raise ValueError(f"{method} linkage is only defined for euclidean distances")
    return linkage(X, method=method, metric=metric)


def cut_tree(Z, k=None, height=None):
    """Flat cluster labels (0-based) from a linkage matrix, by count or by height."""
    if (k is None) == (height is None):
        raise ValueError("pass exactly one of k or height")
    if k is not None:
        labels = fcluster(Z, t=k, criterion="maxclust")
    else:
        labels = fcluster(Z, t=height, criterion="distance")
    return labels - 1


def cophenetic_correlation(Z, X, metric="euclidean"):
    """How faithfully the dendrogram heights preserve the original distances."""
    c, _ = cophenet(Z, pdist(X, metric=metric))
    return c
