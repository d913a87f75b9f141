import pandas as pd
import pytest
from sklearn.datasets import load_iris

from course_utils.config import get_settings
from course_utils.data_loader import load_dataset


@pytest.fixture
def iris():
    bunch = load_iris(as_frame=True)
    df = bunch.frame.rename(columns=lambda c: c.replace(" (cm)", "").replace(" ", "_"))
    df["species"] = pd.Categorical.from_codes(df.pop("target"), list(bunch.target_names))
    return df


@pytest.fixture
def scores_table():
    return pd.DataFrame({
        "student": ["ann", "bob", "cat", "dan", "eve", "fay"],
        "team": ["red", "blue", "red", "green", "blue", "red"],
        "score": [10, 7, 3, 8, 5, 6],
    })


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the settings at an empty data folder and start with cold caches."""
    monkeypatch.setenv("COURSE_DATA_DIR", str(tmp_path))
    get_settings.cache_clear()
    load_dataset.clear()
    yield tmp_path
    get_settings.cache_clear()
    load_dataset.clear()
