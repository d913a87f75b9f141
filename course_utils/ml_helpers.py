"""Supervised-learning workflow: split, preprocess, resample, tune, evaluate."""
import numpy as np
import pandas as pd
import streamlit as st
from sklearn.decomposition import PCA
from sklearn.ensemble import RandomForestClassifier
from sklearn.impute import SimpleImputer
from sklearn.inspection import permutation_importance
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix
from sklearn.model_selection import (
    GridSearchCV, LeaveOneOut, RepeatedStratifiedKFold, StratifiedKFold,
    cross_val_score, train_test_split,
)
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import LabelEncoder, StandardScaler
from sklearn.svm import SVC
from sklearn.tree import DecisionTreeClassifier
from xgboost import XGBClassifier

MODELS = {
    "knn": lambda seed: KNeighborsClassifier(),
    "logistic": lambda seed: LogisticRegression(max_iter=2000),
    "tree": lambda seed: DecisionTreeClassifier(random_state=seed),
    "forest": lambda seed: RandomForestClassifier(n_estimators=200, random_state=seed, n_jobs=-1),
    "svm": lambda seed: SVC(random_state=seed),
    "boosted": lambda seed: XGBClassifier(n_estimators=150, random_state=seed, verbosity=0),
}

MODEL_LABELS = {
    "knn": "k-nearest neighbours",
    "logistic": "Logistic regression",
    "tree": "Decision tree",
    "forest": "Random forest",
    "svm": "Support vector machine",
    "boosted": "Gradient boosting (XGBoost)",
}

DEFAULT_GRIDS = {
    "knn": {"n_neighbors": [3, 5, 7, 9, 11, 15]},
    "logistic": {"C": [0.01, 0.1, 1.0, 10.0]},
    "tree": {"max_depth": [2, 3, 4, 6, None]},
    "forest": {"max_features": [1, 2, "sqrt"], "min_samples_leaf": [1, 5]},
    "svm": {"C": [0.1, 1.0, 10.0], "gamma": ["scale", 0.1]},
    "boosted": {"max_depth": [2, 3, 4], "learning_rate": [0.05, 0.2]},
}

PREPROCESS_STEPS = ["impute", "center", "scale", "pca"]
RESAMPLING_METHODS = ["cv", "repeatedcv", "loocv", "boot"]


def split_data(df, features, target, test_size=0.2, seed=42, stratify=True):
    """Encode the target, drop incomplete rows and make a (stratified) train/test split."""
    clean = df[features + [target]].dropna()
    le = LabelEncoder()
    y = le.fit_transform(clean[target].astype(str))
    X_train, X_test, y_train, y_test = train_test_split(
        clean[features], y, test_size=test_size, random_state=seed,
        stratify=y if stratify else None,
    )
    return X_train, X_test, y_train, y_test, le


def build_pipeline(model_name, preprocess=("center", "scale"), seed=42):
    """Preprocessing steps in a fixed order (impute, center/scale, pca), then the model."""
    if model_name not in MODELS:
        raise ValueError(f"model must be one of {list(MODELS)}, got {model_name!r}")
    unknown = [p for p in preprocess if p not in PREPROCESS_STEPS]
    if unknown:
        raise ValueError(f"Unknown preprocessing steps {unknown}; expected some of {PREPROCESS_STEPS}")

    steps = []
    if "impute" in preprocess:
        steps.append(("impute", SimpleImputer(strategy="median")))
    if "center" in preprocess or "scale" in preprocess:
        steps.append(("scale", StandardScaler(
            with_mean="center" in preprocess, with_std="scale" in preprocess,
        )))
    if "pca" in preprocess:
        steps.append(("pca", PCA(n_components=0.95)))
    steps.append(("model", MODELS[model_name](seed)))
    return Pipeline(steps)


def _bootstrap_splits(n, repeats, seed):
    """Sample n rows with replacement for training; score on the out-of-bag rows."""
    rng = np.random.RandomState(seed)
    all_idx = np.arange(n)
    for _ in range(repeats):
        train = rng.choice(all_idx, size=n, replace=True)
        test = np.setdiff1d(all_idx, train)
        if len(test):
            yield train, test


def resample(pipeline, X, y, method="cv", folds=5, repeats=3, seed=42):
    """Score the pipeline under a resampling scheme; one row per resample."""
    if method == "cv":
        cv = StratifiedKFold(n_splits=folds, shuffle=True, random_state=seed)
    elif method == "repeatedcv":
        cv = RepeatedStratifiedKFold(n_splits=folds, n_repeats=repeats, random_state=seed)
    elif method == "loocv":
        cv = LeaveOneOut()
    elif method == "boot":
        cv = list(_bootstrap_splits(len(X), repeats, seed))
    else:
        raise ValueError(f"method must be one of {RESAMPLING_METHODS}, got {method!r}")

    scores = cross_val_score(pipeline, X, y, cv=cv, scoring="accuracy")
    return pd.DataFrame({"resample": np.arange(1, len(scores) + 1), "accuracy": scores})


def tune(pipeline, grid, X, y, folds=5, seed=42):
    """Grid search over model parameters; returns (fitted search, tidy results)."""
    param_grid = {f"model__{k}": v for k, v in grid.items()}
    search = GridSearchCV(
        pipeline, param_grid,
        cv=StratifiedKFold(n_splits=folds, shuffle=True, random_state=seed),
        scoring="accuracy",
    )
    search.fit(X, y)
    res = pd.DataFrame(search.cv_results_)
    params = pd.json_normalize(res["params"]).rename(columns=lambda c: c.replace("model__", ""))
    results = pd.concat(
        [params, res[["mean_test_score", "std_test_score", "rank_test_score"]]], axis=1,
    ).sort_values("rank_test_score", kind="mergesort")
    return search, results.reset_index(drop=True)


def classification_metrics(y_true, y_pred, labels=None):
    """Accuracy, per-class report and confusion matrix.

    ``labels`` are the class names for encoded targets 0..n-1; classes absent from
    the test rows still get a row and column in the matrix.
    """
    codes = np.arange(len(labels)) if labels is not None else None
    acc = accuracy_score(y_true, y_pred)
    report = classification_report(y_true, y_pred, labels=codes, target_names=labels,
                                   output_dict=True, zero_division=0)
    cm = confusion_matrix(y_true, y_pred, labels=codes)
    return {"accuracy": acc, "report": report, "confusion_matrix": cm}


def plot_confusion_matrix(cm, labels):
    """Return a Plotly heatmap of a confusion matrix."""
    import plotly.graph_objects as go
    fig = go.Figure(data=go.Heatmap(
        z=cm, x=labels, y=labels,
        colorscale="Blues", text=cm, texttemplate="%{text}",
    ))
    fig.update_layout(
        xaxis_title="Predicted", yaxis_title="Actual",
        title="Confusion Matrix", height=450,
        template="plotly_white",
    )
    return fig


def variable_importance(model, X, y, seed=42, n_repeats=10):
    """Permutation importance on held-out data, largest first."""
    result = permutation_importance(model, X, y, n_repeats=n_repeats, random_state=seed)
    return pd.DataFrame({
        "feature": list(X.columns),
        "importance": result.importances_mean,
        "std": result.importances_std,
    }).sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)


@st.cache_resource
def train_model(model_name, preprocess, X_train, y_train, seed=42):
    """Fit and cache a pipeline."""
    return build_pipeline(model_name, preprocess, seed).fit(X_train, y_train)
