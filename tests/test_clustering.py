import numpy as np
import pytest

from course_utils.clustering import (
    centroids_frame, cluster_crosstab, cophenetic_correlation, cut_tree, elbow_table,
    fit_kmeans, linkage_matrix, scale_features,
)

FEATURES = ["sepal_length", "sepal_width", "petal_length", "petal_width"]


@pytest.fixture
def scaled(iris):
    return scale_features(iris, FEATURES)


def test_scale_features(scaled):
    X, scaler = scaled
    assert X.shape == (150, 4)
    np.testing.assert_allclose(X.mean(axis=0), 0, atol=1e-9)
    np.testing.assert_allclose(X.std(axis=0), 1, atol=1e-9)


def test_kmeans_is_reproducible(scaled):
    X, _ = scaled
    a = fit_kmeans(X, 3, seed=1)
    b = fit_kmeans(X, 3, seed=1)
    np.testing.assert_array_equal(a.labels_, b.labels_)


def test_elbow_table(iris, scaled):
    X, _ = scaled
    table = elbow_table(X, range(2, 6), labels=iris["species"])
    assert list(table.columns) == ["K", "inertia", "silhouette", "adjusted_rand"]
    assert table["K"].tolist() == [2, 3, 4, 5]
    assert table["inertia"].is_monotonic_decreasing


def test_elbow_table_without_labels(scaled):
    X, _ = scaled
    assert "adjusted_rand" not in elbow_table(X, [2, 3]).columns


def test_centroids_back_in_original_units(iris, scaled):
    X, scaler = scaled
    km = fit_kmeans(X, 3)
    centres = centroids_frame(km, scaler, FEATURES)
    assert list(centres.index) == ["Cluster 0", "Cluster 1", "Cluster 2"]
    # setosa's petals are around 1.5 cm long; one centroid should sit there
    assert centres["petal_length"].min() == pytest.approx(1.46, abs=0.1)


def test_crosstab_counts_and_percentages(iris, scaled):
    X, _ = scaled
    labels = fit_kmeans(X, 3).labels_
    counts = cluster_crosstab(iris["species"], labels)
    assert counts.to_numpy().sum() == 150
    assert counts.index.name == "label"
    assert counts.columns.name == "cluster"
    pct = cluster_crosstab(iris["species"], labels, normalize=True)
    np.testing.assert_allclose(pct.sum(axis=1), 100)


def test_ward_needs_euclidean(scaled):
    X, _ = scaled
    with pytest.raises(ValueError, match="euclidean"):
        linkage_matrix(X, method="ward", metric="cityblock")
    with pytest.raises(ValueError):
        linkage_matrix(X, method="nearest")
    assert linkage_matrix(X, method="average", metric="cityblock").shape == (149, 4)


def test_cut_tree_by_count_and_height(scaled):
    X, _ = scaled
    Z = linkage_matrix(X, "ward")
    labels = cut_tree(Z, k=3)
    assert sorted(set(labels)) == [0, 1, 2]
    assert len(set(cut_tree(Z, height=Z[-1, 2] + 1))) == 1
    assert len(set(cut_tree(Z, height=0))) == len(np.unique(X, axis=0))


def test_cut_tree_needs_exactly_one_criterion(scaled):
    X, _ = scaled
    Z = linkage_matrix(X, "complete")
    with pytest.raises(ValueError):
        cut_tree(Z)
    with pytest.raises(ValueError):
        cut_tree(Z, k=2, height=1.0)


def test_cophenetic_correlation_in_range(scaled):
    X, _ = scaled
    c = cophenetic_correlation(linkage_matrix(X, "average"), X)
    assert 0.5 < c <= 1
