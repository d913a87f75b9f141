import pandas as pd
import pytest

from course_utils.tables import (
    assign_by_group, chain, count_by, dt_query, keyed_lookup, rolling_join, set_key,
)


def test_dt_query_filters_with_query_string(scores_table):
    out = dt_query(scores_table, i="score > 5")
    assert out["student"].tolist() == ["ann", "bob", "dan", "fay"]


def test_dt_query_accepts_mask_and_callable(scores_table):
    mask = scores_table["team"] == "red"
    assert dt_query(scores_table, i=mask)["student"].tolist() == ["ann", "cat", "fay"]
    assert dt_query(scores_table, i=lambda d: d["score"] < 4)["student"].tolist() == ["cat"]


def test_dt_query_selects_columns(scores_table):
    out = dt_query(scores_table, j=["student", "score"])
    assert list(out.columns) == ["student", "score"]


def test_dt_query_grouped_aggregation_keeps_first_appearance_order(scores_table):
    out = dt_query(scores_table, j={"total": ("score", "sum"), "n": ("score", "size")}, by="team")
    assert out["team"].tolist() == ["red", "blue", "green"]
    assert out["total"].tolist() == [19, 12, 8]
    assert out["n"].tolist() == [3, 2, 1]


def test_dt_query_sorted_groups(scores_table):
    out = dt_query(scores_table, j={"best": ("score", "max")}, by="team", sort_by=True)
    assert out["team"].tolist() == ["blue", "green", "red"]


def test_dt_query_ungrouped_aggregation_is_one_row(scores_table):
    out = dt_query(scores_table, i="team == 'red'", j={"mean": ("score", "mean")})
    assert out.shape == (1, 1)
    assert out.loc[0, "mean"] == pytest.approx(19 / 3)


def test_dt_query_by_without_aggregation_raises(scores_table):
    with pytest.raises(ValueError):
        dt_query(scores_table, by="team")
    with pytest.raises(ValueError):
        dt_query(scores_table, j="score", by="team")


def test_count_by(scores_table):
    out = count_by(scores_table, "team")
    assert dict(zip(out["team"], out["N"])) == {"red": 3, "blue": 2, "green": 1}


def test_keyed_lookup_returns_missing_keys_as_empty_rows(scores_table):
    keyed = set_key(scores_table, "student")
    assert keyed.index.is_monotonic_increasing
    out = keyed_lookup(keyed, ["eve", "zed"])
    assert out.loc["eve", "score"] == 5
    assert out.loc["zed"].isna().all()


def test_keyed_lookup_returns_every_row_of_a_duplicated_key(scores_table):
    keyed = set_key(scores_table, "team")
    out = keyed_lookup(keyed, ["green", "red", "purple"])
    assert out.index.tolist() == ["green", "red", "red", "red", "purple"]
    assert out.index.name == "team"
    assert sorted(out.loc["red", "student"]) == ["ann", "cat", "fay"]
    assert out.loc[["purple"]].isna().all(axis=None)


def test_keyed_lookup_with_no_values_is_empty(scores_table):
    out = keyed_lookup(set_key(scores_table, "team"), [])
    assert out.empty
    assert list(out.columns) == ["student", "score"]


def test_assign_by_group_mutates_in_place(scores_table):
    out = assign_by_group(scores_table, "team_best", "score", "max", by="team")
    assert out is scores_table
    assert scores_table["team_best"].tolist() == [10, 7, 10, 8, 7, 10]


def test_assign_without_group_broadcasts(scores_table):
    assign_by_group(scores_table, "overall", "score", "mean")
    assert scores_table["overall"].nunique() == 1


def test_rolling_join_takes_last_quote_before_trade():
    trades = pd.DataFrame({
        "time": pd.to_datetime(["2024-01-02 10:00:03", "2024-01-02 10:00:07"]),
        "qty": [100, 50],
    })
    quotes = pd.DataFrame({
        "time": pd.to_datetime(["2024-01-02 10:00:01", "2024-01-02 10:00:05", "2024-01-02 10:00:09"]),
        "price": [10.0, 10.5, 11.0],
    })
    out = rolling_join(trades, quotes, on="time")
    assert out["price"].tolist() == [10.0, 10.5]
    out = rolling_join(trades, quotes, on="time", direction="forward")
    assert out["price"].tolist() == [10.5, 11.0]


def test_chain_applies_steps_in_order(scores_table):
    out = chain(
        scores_table,
        {"i": "score >= 5"},
        {"j": {"total": ("score", "sum")}, "by": "team"},
        {"i": "total > 7"},
    )
    assert out["team"].tolist() == ["red", "blue", "green"]
    assert out["total"].tolist() == [16, 12, 8]
