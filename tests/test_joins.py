import warnings

import pandas as pd
import pytest

from course_utils.joins import (
    JoinKeyWarning, arrange, filter_rows, join, mutate, select_cols, summarise_by,
)


@pytest.fixture
def bands():
    return pd.DataFrame({"name": ["Mick", "John", "Paul"], "band": ["Stones", "Beatles", "Beatles"]})


@pytest.fixture
def instruments():
    return pd.DataFrame({"name": ["John", "Paul", "Keith"], "plays": ["guitar", "bass", "guitar"]})


def test_inner_left_right_full(bands, instruments):
    assert join(bands, instruments, "inner", by="name")["name"].tolist() == ["John", "Paul"]
    assert len(join(bands, instruments, "left", by="name")) == 3
    assert set(join(bands, instruments, "right", by="name")["name"]) == {"John", "Paul", "Keith"}
    full = join(bands, instruments, "full", by="name")
    assert set(full["name"]) == {"Mick", "John", "Paul", "Keith"}
    assert full.loc[full["name"] == "Keith", "band"].isna().all()


def test_semi_and_anti_keep_left_columns_only(bands, instruments):
    semi = join(bands, instruments, "semi", by="name")
    anti = join(bands, instruments, "anti", by="name")
    assert list(semi.columns) == ["name", "band"]
    assert semi["name"].tolist() == ["John", "Paul"]
    assert anti["name"].tolist() == ["Mick"]


def test_semi_join_does_not_duplicate_left_rows(bands):
    right = pd.DataFrame({"name": ["John", "John", "John"]})
    assert len(join(bands, right, "semi", by="name")) == 1


def test_natural_join_uses_shared_columns(bands, instruments):
    out = join(bands, instruments)
    assert out["name"].tolist() == ["John", "Paul"]


def test_natural_join_without_shared_columns_raises(bands):
    with pytest.raises(ValueError):
        join(bands, pd.DataFrame({"other": [1]}))


def test_unknown_join_type(bands, instruments):
    with pytest.raises(ValueError, match="semi"):
        join(bands, instruments, "cross")


def test_many_to_many_warns(bands):
    right = pd.DataFrame({"band": ["Beatles", "Beatles"], "album": ["Help!", "Abbey Road"]})
    with pytest.warns(JoinKeyWarning, match="Many-to-many"):
        out = join(bands, right, by="band")
    assert len(out) == 4


def test_one_to_many_does_not_warn(bands):
    right = pd.DataFrame({"band": ["Beatles", "Stones"], "formed": [1960, 1962]})
    with warnings.catch_warnings():
        warnings.simplefilter("error", JoinKeyWarning)
        out = join(bands, right, by="band")
    assert len(out) == 3


def test_key_type_mismatch_warns_and_compares_as_text():
    left = pd.DataFrame({"id": [1, 2, 3], "x": ["a", "b", "c"]})
    right = pd.DataFrame({"id": ["1", "3"], "y": [True, False]})
    with pytest.warns(JoinKeyWarning, match="different types"):
        out = join(left, right, by="id")
    assert out["id"].tolist() == ["1", "3"]


def test_int_and_float_keys_join_without_warning():
    left = pd.DataFrame({"id": [1, 2, 3], "x": ["a", "b", "c"]})
    right = pd.DataFrame({"id": [1.0, 3.0, None], "y": ["p", "q", "r"]})
    with warnings.catch_warnings():
        warnings.simplefilter("error", JoinKeyWarning)
        inner = join(left, right, by="id")
        semi = join(left, right, "semi", by="id")
    assert inner["x"].tolist() == ["a", "c"]
    assert inner["y"].tolist() == ["p", "q"]
    assert semi["x"].tolist() == ["a", "c"]


def test_datetime_and_text_keys_compare_as_text():
    left = pd.DataFrame({"day": pd.to_datetime(["2024-01-01"]), "x": [1]})
    right = pd.DataFrame({"day": ["2024-01-01"], "y": [2]})
    with pytest.warns(JoinKeyWarning, match="different types"):
        join(left, right, by="day")


def test_suffixes_for_overlapping_columns():
    left = pd.DataFrame({"k": [1], "v": [1]})
    right = pd.DataFrame({"k": [1], "v": [2]})
    out = join(left, right, by="k")
    assert list(out.columns) == ["k", "v.x", "v.y"]


def test_verbs(scores_table):
    out = filter_rows(scores_table, scores_table["score"] > 4, lambda d: d["team"] != "green")
    assert out["student"].tolist() == ["ann", "bob", "eve", "fay"]

    picked = select_cols(scores_table, "student", starts_with="sc")
    assert list(picked.columns) == ["student", "score"]

    doubled = mutate(scores_table, double=lambda d: d["score"] * 2)
    assert doubled["double"].tolist() == [20, 14, 6, 16, 10, 12]
    assert "double" not in scores_table.columns

    ordered = arrange(scores_table, "team", "score", desc=("score",))
    assert ordered["student"].tolist() == ["bob", "eve", "dan", "ann", "fay", "cat"]


def test_summarise_by(scores_table):
    out = summarise_by(scores_table, "team", mean=("score", "mean"), n=("score", "size"))
    assert out["team"].tolist() == ["blue", "green", "red"]
    assert out["n"].tolist() == [2, 1, 3]
