import numpy as np
import pandas as pd
import pytest

from course_utils.dimred import (
    biplot_arrows, fit_pca, loadings_frame, n_components_for, scree_table,
)

FEATURES = ["sepal_length", "sepal_width", "petal_length", "petal_width"]


def test_scores_keep_row_index_without_missing_rows(iris):
    iris.loc[5, "sepal_width"] = np.nan
    pca, scores = fit_pca(iris, FEATURES)
    assert list(scores.columns) == ["PC1", "PC2", "PC3", "PC4"]
    assert len(scores) == 149
    assert 5 not in scores.index


def test_scree_table(iris):
    pca, _ = fit_pca(iris, FEATURES)
    scree = scree_table(pca)
    assert list(scree.columns) == ["component", "eigenvalue", "proportion", "cumulative"]
    assert scree["cumulative"].iloc[-1] == pytest.approx(1.0)
    assert scree["proportion"].is_monotonic_decreasing
    # scaled iris: PC1 explains about 73%
    assert scree["proportion"].iloc[0] == pytest.approx(0.73, abs=0.01)


def test_scaling_changes_the_answer(iris):
    scaled, _ = fit_pca(iris, FEATURES, scale=True)
    raw, _ = fit_pca(iris, FEATURES, scale=False)
    assert raw.explained_variance_ratio_[0] > scaled.explained_variance_ratio_[0]


def test_loadings_are_unit_vectors(iris):
    pca, _ = fit_pca(iris, FEATURES)
    loadings = loadings_frame(pca, FEATURES)
    assert list(loadings.index) == FEATURES
    np.testing.assert_allclose((loadings ** 2).sum(), 1.0)


def test_n_components_for(iris):
    pca, _ = fit_pca(iris, FEATURES)
    assert n_components_for(pca, 0.5) == 1
    assert n_components_for(pca, 0.95) == 2
    assert n_components_for(pca, 1.0) == 4
    with pytest.raises(ValueError):
        n_components_for(pca, 0)


def test_biplot_arrows(iris):
    pca, scores = fit_pca(iris, FEATURES)
    arrows = biplot_arrows(pca, FEATURES)
    assert list(arrows.columns) == ["PC1", "PC2"]
    stretched = biplot_arrows(pca, FEATURES, scores)
    longest = stretched.abs().to_numpy().max()
    assert longest == pytest.approx(scores[["PC1", "PC2"]].abs().max().min())


def test_biplot_needs_two_components():
    df = pd.DataFrame({"a": [1.0, 2.0, 3.0, 4.0], "b": [2.0, 4.1, 5.9, 8.2]})
    pca, _ = fit_pca(df, ["a", "b"], n_components=1)
    with pytest.raises(ValueError):
        biplot_arrows(pca, ["a", "b"])
