import pandas as pd
import pytest

from course_utils.dates import (
    add_duration, add_period, ceiling_date, date_parts, floor_date, force_tz,
    interval_length, parse_dates, round_date, with_tz,
)


def test_parse_dates_tries_orders_in_turn():
    out = parse_dates(["2021-03-04", "03/05/2021", "4 March 2021"], orders=("ymd", "mdy", "dmy"))
    assert out.tolist() == [pd.Timestamp("2021-03-04"), pd.Timestamp("2021-03-05"),
                            pd.Timestamp("2021-03-04")]


def test_parse_dates_impossible_date_is_missing():
    out = parse_dates(["2021-02-28", "2021-02-30", "not a date", None])
    assert out.iloc[0] == pd.Timestamp("2021-02-28")
    assert out.iloc[1:].isna().all()


def test_parse_dates_unknown_order():
    with pytest.raises(ValueError):
        parse_dates(["2021-01-01"], orders=("ydm",))


def test_adding_a_month_to_january_31_is_missing():
    out = add_period(["2021-01-31", "2021-03-15"], months=1)
    assert pd.isna(out.iloc[0])
    assert out.iloc[1] == pd.Timestamp("2021-04-15")


def test_rollback_clamps_to_month_end():
    out = add_period(["2024-01-31"], months=1, rollback=True)
    assert out.iloc[0] == pd.Timestamp("2024-02-29")


def test_add_years_on_leap_day():
    assert pd.isna(add_period(["2020-02-29"], years=1).iloc[0])
    assert add_period(["2020-02-29"], years=4).iloc[0] == pd.Timestamp("2024-02-29")


def test_period_and_duration_differ_across_dst():
    start = pd.Series([pd.Timestamp("2024-03-09 12:00", tz="America/New_York")])
    by_period = add_period(start, days=1).iloc[0]
    by_duration = add_duration(start, days=1).iloc[0]
    assert by_period.hour == 12
    assert by_duration.hour == 13
    assert by_duration - by_period == pd.Timedelta(hours=1)


def test_interval_in_days_and_weeks():
    assert interval_length(["2024-01-01"], ["2024-01-15"], "days").iloc[0] == 14
    assert interval_length(["2024-01-01"], ["2024-01-15"], "weeks").iloc[0] == 2


def test_interval_counts_whole_months():
    months = interval_length(["2020-01-15"], ["2023-12-20"], "months").iloc[0]
    assert months == 47
    assert interval_length(["2020-01-15"], ["2023-12-20"], "years").iloc[0] == 3
    assert interval_length(["2020-01-15"], ["2020-02-14"], "months").iloc[0] == 0


def test_backwards_interval_is_negative():
    assert interval_length(["2023-12-20"], ["2020-01-15"], "months").iloc[0] == -47


def test_interval_unknown_unit():
    with pytest.raises(ValueError):
        interval_length(["2020-01-01"], ["2020-01-02"], "fortnights")


def test_floor_and_ceiling():
    ts = ["2024-05-15 13:45:10"]
    assert floor_date(ts, "hour").iloc[0] == pd.Timestamp("2024-05-15 13:00")
    assert floor_date(ts, "month").iloc[0] == pd.Timestamp("2024-05-01")
    assert ceiling_date(ts, "month").iloc[0] == pd.Timestamp("2024-06-01")
    assert ceiling_date(ts, "year").iloc[0] == pd.Timestamp("2025-01-01")


def test_weeks_start_on_monday():
    # 2024-05-15 is a Wednesday
    assert floor_date(["2024-05-15 09:00"], "week").iloc[0] == pd.Timestamp("2024-05-13")


def test_ceiling_leaves_boundaries_alone():
    assert ceiling_date(["2024-05-01"], "month").iloc[0] == pd.Timestamp("2024-05-01")


def test_round_date_halfway_goes_up():
    assert round_date(["2024-05-15 12:00"], "day").iloc[0] == pd.Timestamp("2024-05-16")
    assert round_date(["2024-05-15 11:59"], "day").iloc[0] == pd.Timestamp("2024-05-15")


def test_unknown_rounding_unit():
    with pytest.raises(ValueError):
        floor_date(["2024-01-01"], "decade")


def test_with_tz_keeps_the_instant():
    out = with_tz(["2024-01-01 12:00"], "America/New_York").iloc[0]
    assert out.hour == 7
    assert out == pd.Timestamp("2024-01-01 12:00", tz="UTC")


def test_force_tz_keeps_the_clock():
    out = force_tz(["2024-01-01 12:00"], "Asia/Tokyo").iloc[0]
    assert out.hour == 12
    assert out.tz is not None


def test_force_tz_nonexistent_time_is_missing():
    assert pd.isna(force_tz(["2024-03-10 02:30"], "America/New_York").iloc[0])


def test_date_parts():
    parts = date_parts(["2024-02-29"])
    row = parts.iloc[0]
    assert (row["year"], row["month"], row["day"]) == (2024, 2, 29)
    assert row["weekday"] == "Thursday"
    assert row["quarter"] == 1
    assert row["day_of_year"] == 60
