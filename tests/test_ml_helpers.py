import numpy as np
import pytest
from sklearn.pipeline import Pipeline

from course_utils.ml_helpers import (
    DEFAULT_GRIDS, MODELS, build_pipeline, classification_metrics, plot_confusion_matrix,
    resample, split_data, tune, variable_importance,
)

FEATURES = ["sepal_length", "sepal_width", "petal_length", "petal_width"]


@pytest.fixture
def split(iris):
    return split_data(iris, FEATURES, "species", test_size=0.2, seed=0)


def test_split_is_stratified(split):
    X_train, X_test, y_train, y_test, le = split
    assert len(X_train) == 120 and len(X_test) == 30
    assert list(le.classes_) == ["setosa", "versicolor", "virginica"]
    assert np.bincount(y_test).tolist() == [10, 10, 10]


def test_split_drops_incomplete_rows(iris):
    iris.loc[[0, 1], "petal_width"] = np.nan
    X_train, X_test, *_ = split_data(iris, FEATURES, "species")
    assert len(X_train) + len(X_test) == 148


def test_pipeline_step_order():
    pipe = build_pipeline("knn", preprocess=("pca", "scale", "impute", "center"))
    assert isinstance(pipe, Pipeline)
    assert [name for name, _ in pipe.steps] == ["impute", "scale", "pca", "model"]


def test_scale_without_center():
    scaler = build_pipeline("logistic", preprocess=("scale",)).named_steps["scale"]
    assert scaler.with_mean is False
    assert scaler.with_std is True


def test_no_preprocessing():
    assert [name for name, _ in build_pipeline("tree", preprocess=()).steps] == ["model"]


def test_unknown_model_and_step():
    with pytest.raises(ValueError, match="model"):
        build_pipeline("perceptron")
    with pytest.raises(ValueError, match="preprocessing"):
        build_pipeline("knn", preprocess=("normalise",))


@pytest.mark.parametrize("method, expected", [("cv", 5), ("repeatedcv", 15), ("boot", 3)])
def test_resample_row_counts(split, method, expected):
    X_train, _, y_train, _, _ = split
    scores = resample(build_pipeline("knn"), X_train, y_train, method=method, folds=5, repeats=3)
    assert list(scores.columns) == ["resample", "accuracy"]
    assert len(scores) == expected
    assert scores["accuracy"].between(0, 1).all()


def test_leave_one_out(split):
    X_train, _, y_train, _, _ = split
    scores = resample(build_pipeline("knn"), X_train.iloc[:30], y_train[:30], method="loocv")
    assert len(scores) == 30
    assert set(scores["accuracy"]) <= {0.0, 1.0}


def test_resample_unknown_method(split):
    X_train, _, y_train, _, _ = split
    with pytest.raises(ValueError):
        resample(build_pipeline("knn"), X_train, y_train, method="holdout")


def test_tune_returns_results_sorted_by_rank(split):
    X_train, _, y_train, _, _ = split
    search, results = tune(build_pipeline("knn"), DEFAULT_GRIDS["knn"], X_train, y_train, folds=3)
    assert "n_neighbors" in results.columns
    assert len(results) == len(DEFAULT_GRIDS["knn"]["n_neighbors"])
    assert results["rank_test_score"].is_monotonic_increasing
    assert search.best_params_["model__n_neighbors"] == results.loc[0, "n_neighbors"]


def test_every_model_fits(split):
    X_train, X_test, y_train, y_test, _ = split
    for name in MODELS:
        pipe = build_pipeline(name).fit(X_train, y_train)
        assert pipe.score(X_test, y_test) > 0.8, name


def test_metrics_keep_absent_classes(split):
    _, _, _, y_test, le = split
    names = list(le.classes_)
    y_pred = np.zeros_like(y_test)
    metrics = classification_metrics(y_test, y_pred, labels=names)
    assert metrics["accuracy"] == pytest.approx(1 / 3)
    assert metrics["confusion_matrix"].shape == (3, 3)
    fig = plot_confusion_matrix(metrics["confusion_matrix"], names)
    assert list(fig.data[0].x) == names


def test_variable_importance_ranks_petals_first(split):
    X_train, X_test, y_train, y_test, _ = split
    model = build_pipeline("forest").fit(X_train, y_train)
    imp = variable_importance(model, X_test, y_test, n_repeats=5)
    assert list(imp.columns) == ["feature", "importance", "std"]
    assert imp["feature"].iloc[0].startswith("petal")
