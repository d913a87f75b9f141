import shutil

import pytest

from course_utils.config import PROJECT_DIRECTORY
from course_utils.constants import DATASETS
from course_utils.data_loader import (
    DatasetNotFoundError, available_datasets, load_dataset, snake_case,
)


@pytest.mark.parametrize("raw, expected", [
    ("sepal length (cm)", "sepal_length"),
    ("od280/od315_of_diluted_wines", "od280_od315_of_diluted_wines"),
    ("Sp. Atk", "sp_atk"),
    ("pH", "ph"),
    ("  total sulfur dioxide ", "total_sulfur_dioxide"),
])
def test_snake_case(raw, expected):
    assert snake_case(raw) == expected


@pytest.mark.parametrize("key", ["iris", "wine", "pokemon", "movies"])
def test_bundled_datasets_match_their_metadata(key):
    df = load_dataset(key)
    meta = DATASETS[key]
    assert meta["label"] in df.columns
    assert set(meta["features"]) <= set(df.columns)


def test_iris_labels_are_species_names():
    assert sorted(load_dataset("iris")["species"].astype(str).unique()) == [
        "setosa", "versicolor", "virginica",
    ]


def test_movies_dates_are_parsed():
    movies = load_dataset("movies")
    assert str(movies["release_date"].dtype).startswith("datetime64")


def test_unknown_dataset():
    with pytest.raises(DatasetNotFoundError):
        load_dataset("titanic")


def test_missing_file_is_reported_with_fetch_hint(data_dir):
    with pytest.raises(DatasetNotFoundError, match="fetch_datasets.py"):
        load_dataset("wine_quality")


def test_available_datasets_follow_files_on_disk(data_dir):
    assert available_datasets() == ["iris", "wine"]
    shutil.copy(PROJECT_DIRECTORY / "data" / "movies.csv", data_dir / "movies.csv")
    assert available_datasets() == ["iris", "wine", "movies"]


def test_wine_quality_reads_semicolon_file(data_dir):
    (data_dir / "winequality-red.csv").write_text(
        '"fixed acidity";"pH";"alcohol";"quality"\n7.4;3.51;9.4;5\n7.8;3.2;9.8;6\n'
    )
    df = load_dataset("wine_quality")
    assert list(df.columns) == ["fixed_acidity", "ph", "alcohol", "quality"]
    assert df["quality"].tolist() == [5, 6]
