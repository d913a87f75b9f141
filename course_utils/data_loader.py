"""Cached dataset loading and sidebar pickers."""
import re

import pandas as pd
import streamlit as st
from loguru import logger
from sklearn import datasets as sk_datasets

from course_utils.config import get_settings
from course_utils.constants import BUNDLED_FILES, DATASETS, SKLEARN_DATASETS


class DatasetNotFoundError(KeyError):
    """Raised for an unknown dataset key or a dataset whose file is missing."""


def snake_case(name):
    """Normalise a column name: drop unit suffixes like ``(cm)``, lower, underscores."""
    name = re.sub(r"\(.*?\)", "", name)
    name = re.sub(r"[^0-9a-zA-Z]+", "_", name.strip())
    return name.strip("_").lower()


def dataset_path(key):
    return get_settings().data_dir / BUNDLED_FILES[key]


def available_datasets():
    """Dataset keys whose source is present, in catalogue order."""
    keys = []
    for key in DATASETS:
        if key in SKLEARN_DATASETS or dataset_path(key).exists():
            keys.append(key)
    return keys


def _load_sklearn(key):
    loader = {"iris": sk_datasets.load_iris, "wine": sk_datasets.load_wine}[key]
    bunch = loader(as_frame=True)
    df = bunch.frame.copy()
    label = DATASETS[key]["label"]
    df[label] = pd.Categorical.from_codes(df.pop("target"), list(bunch.target_names))
    return df


def _load_csv(key):
    path = dataset_path(key)
    if not path.exists():
        raise DatasetNotFoundError(
            f"{key}: {path} not found. Run `python fetch_datasets.py` to download it."
        )
    sep = ";" if key == "wine_quality" else ","
    df = pd.read_csv(path, sep=sep)
    if key == "movies":
        df["release_date"] = pd.to_datetime(df["release_date"], errors="coerce")
    if key == "pokemon":
        df["type2"] = df["type2"].fillna("")
    return df


@st.cache_data
def load_dataset(key):
    """Load one dataset by key with snake_case columns."""
    if key not in DATASETS:
        raise DatasetNotFoundError(f"Unknown dataset {key!r}; expected one of {list(DATASETS)}")
    df = _load_sklearn(key) if key in SKLEARN_DATASETS else _load_csv(key)
    df.columns = [snake_case(c) for c in df.columns]
    logger.info("Loaded dataset {} ({} rows x {} cols)", key, len(df), df.shape[1])
    return df


def dataset_picker(options=None, default="iris", key="dataset"):
    """Render a sidebar dataset selector; return (key, DataFrame)."""
    options = [k for k in (options or DATASETS) if k in available_datasets()]
    st.sidebar.header("Dataset")
    index = options.index(default) if default in options else 0
    choice = st.sidebar.selectbox(
        "Dataset", options, index=index,
        format_func=lambda k: DATASETS[k]["title"], key=key,
    )
    return choice, load_dataset(choice)


def feature_picker(df, dataset_key, key="features", min_features=2):
    """Render a sidebar multiselect over the dataset's numeric features."""
    features = DATASETS[dataset_key]["features"]
    selected = st.sidebar.multiselect("Features", features, default=features, key=key)
    if len(selected) < min_features:
        st.sidebar.warning(f"Select at least {min_features} features; using all of them.")
        selected = features
    return df.dropna(subset=selected), selected
