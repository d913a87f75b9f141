"""PCA helpers: fitted model, scores, scree table, loadings, biplot arrows."""
import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler


def fit_pca(df, columns, scale=True, n_components=None):
    """Fit PCA on ``columns``; rows with missing values are dropped.

    Returns the fitted PCA and a scores frame (PC1..PCn) on the kept rows' index.
    """
    clean = df[columns].dropna()
    X = clean.to_numpy(dtype=float)
    if scale:
        X = StandardScaler().fit_transform(X)
    else:
        X = X - X.mean(axis=0)
    pca = PCA(n_components=n_components).fit(X)
    scores = pd.DataFrame(
        pca.transform(X),
        columns=[f"PC{i + 1}" for i in range(pca.n_components_)],
        index=clean.index,
    )
    return pca, scores


def scree_table(pca):
    evr = pca.explained_variance_ratio_
    return pd.DataFrame({
        "component": [f"PC{i + 1}" for i in range(len(evr))],
        "eigenvalue": pca.explained_variance_,
        "proportion": evr,
        "cumulative": np.cumsum(evr),
    })


def loadings_frame(pca, columns):
    """Rows are original features, columns are components."""
    return pd.DataFrame(
        pca.components_.T, index=columns,
        columns=[f"PC{i + 1}" for i in range(pca.n_components_)],
    )


def n_components_for(pca, threshold=0.9):
    """Smallest number of components whose cumulative explained variance reaches ``threshold``."""
    if not 0 < threshold <= 1:
        raise ValueError("threshold must be in (0, 1]")
    cumulative = np.cumsum(pca.explained_variance_ratio_)
    hits = np.flatnonzero(cumulative >= threshold - 1e-12)
    return int(hits[0]) + 1 if len(hits) else len(cumulative)


def biplot_arrows(pca, columns, scores=None):
    """Loading vectors on PC1/PC2, stretched to the spread of the scores when given."""
    if pca.n_components_ < 2:
        raise ValueError("a biplot needs at least two components")
    arrows = loadings_frame(pca, columns)[["PC1", "PC2"]]
    if scores is not None:
        reach = scores[["PC1", "PC2"]].abs().max().min()
        arrows = arrows * reach / arrows.abs().to_numpy().max()
    return arrows
