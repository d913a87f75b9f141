"""
Date and time arithmetic with pandas.

Two kinds of arithmetic are kept apart:

* **periods** follow the calendar (``+ 1 month`` lands on the same day number
  of the next month, and is missing when that day does not exist);
* **durations** are exact elapsed seconds (``+ 1 day`` across a daylight
  saving change moves the wall clock by an hour).
"""
import numpy as np
import pandas as pd
from loguru import logger

ORDER_FORMATS = {
    "ymd": ["%Y-%m-%d", "%Y/%m/%d", "%Y%m%d", "%Y.%m.%d"],
    "mdy": ["%m/%d/%Y", "%m-%d-%Y", "%B %d, %Y", "%b %d, %Y", "%m/%d/%y"],
    "dmy": ["%d/%m/%Y", "%d-%m-%Y", "%d %B %Y", "%d %b %Y", "%d.%m.%Y"],
    "ymd_hms": ["%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%Y/%m/%d %H:%M:%S"],
    "ymd_hm": ["%Y-%m-%d %H:%M", "%Y/%m/%d %H:%M"],
}

ROUNDING_UNITS = {
    "second": "s",
    "minute": "min",
    "hour": "h",
    "day": "D",
    "week": "W-SUN",
    "month": "M",
    "year": "Y",
}

INTERVAL_UNITS = ["hours", "days", "weeks", "months", "years"]

_TIMEDELTA_UNITS = {"hours": "h", "days": "D", "weeks": "W"}


def _as_series(dates):
    if isinstance(dates, pd.Series):
        return pd.to_datetime(dates)
    return pd.Series(pd.to_datetime(dates))


def parse_dates(values, orders=("ymd",)):
    """Parse strings trying each order in turn; the first order that parses a value wins.

    Values that match no order, including impossible calendar dates such as
    ``2021-02-30``, come back as ``NaT``.
    """
    unknown = [o for o in orders if o not in ORDER_FORMATS]
    if unknown:
        raise ValueError(f"Unknown orders {unknown}; expected some of {list(ORDER_FORMATS)}")

    raw = pd.Series(values, dtype="object")
    text = raw.astype("string").str.strip()
    parsed = pd.Series(pd.NaT, index=raw.index, dtype="datetime64[ns]")
    for order in orders:
        for fmt in ORDER_FORMATS[order]:
            todo = parsed.isna() & text.notna()
            if not todo.any():
                break
            parsed[todo] = pd.to_datetime(text[todo], format=fmt, errors="coerce")

    failed = int((parsed.isna() & raw.notna()).sum())
    if failed:
        logger.warning("{} of {} values failed to parse with orders {}", failed, len(raw), list(orders))
    return parsed


def add_period(dates, years=0, months=0, days=0, rollback=False):
    """Calendar arithmetic.

    A result that would fall on a day the target month does not have (31 Jan
    plus one month) is ``NaT``, unless ``rollback`` clamps it to the last day of
    that month.
    """
    s = _as_series(dates)
    total_months = years * 12 + months
    shifted = s + pd.DateOffset(months=total_months) if total_months else s.copy()
    if total_months:
        overflow = s.notna() & (shifted.dt.day != s.dt.day)
        if overflow.any() and not rollback:
            shifted[overflow] = pd.NaT
    if days:
        shifted = shifted + pd.DateOffset(days=days)
    return shifted


def add_duration(dates, seconds=0, minutes=0, hours=0, days=0):
    """Exact elapsed-time arithmetic."""
    s = _as_series(dates)
    return s + pd.Timedelta(seconds=seconds, minutes=minutes, hours=hours, days=days)


def _whole_months(start, end):
    months = (end.dt.year - start.dt.year) * 12 + (end.dt.month - start.dt.month)
    start_key = start.dt.day * 86400 + (start - start.dt.normalize()).dt.total_seconds()
    end_key = end.dt.day * 86400 + (end - end.dt.normalize()).dt.total_seconds()
    return months - (end_key < start_key).astype(int)


def interval_length(start, end, unit="days"):
    """Length of ``[start, end]`` in ``unit``; months and years count whole calendar units."""
    if unit not in INTERVAL_UNITS:
        raise ValueError(f"unit must be one of {INTERVAL_UNITS}, got {unit!r}")
    start = _as_series(start).reset_index(drop=True)
    end = _as_series(end).reset_index(drop=True)

    if unit in ("hours", "days", "weeks"):
        return (end - start) / pd.Timedelta(1, unit=_TIMEDELTA_UNITS[unit])

    backwards = end < start
    lo = start.where(~backwards, end)
    hi = end.where(~backwards, start)
    months = _whole_months(lo, hi).where(~backwards, -_whole_months(lo, hi))
    months = months.where(start.notna() & end.notna())
    if unit == "years":
        return np.trunc(months / 12)
    return months


def _floor(s, unit):
    freq = ROUNDING_UNITS[unit]
    if unit in ("second", "minute", "hour", "day"):
        return s.dt.floor(freq)
    tz = s.dt.tz
    naive = s.dt.tz_localize(None) if tz is not None else s
    floored = naive.dt.to_period(freq).dt.start_time
    return floored.dt.tz_localize(tz) if tz is not None else floored


def _next(floored, unit):
    if unit == "week":
        return floored + pd.DateOffset(weeks=1)
    if unit == "month":
        return floored + pd.DateOffset(months=1)
    if unit == "year":
        return floored + pd.DateOffset(years=1)
    return floored + pd.Timedelta(1, unit=ROUNDING_UNITS[unit])


def _check_unit(unit):
    if unit not in ROUNDING_UNITS:
        raise ValueError(f"unit must be one of {list(ROUNDING_UNITS)}, got {unit!r}")


def floor_date(dates, unit):
    """Round down to the start of ``unit``. Weeks start on Monday."""
    _check_unit(unit)
    return _floor(_as_series(dates), unit)


def ceiling_date(dates, unit):
    """Round up to the next ``unit`` boundary; values already on a boundary stay put."""
    _check_unit(unit)
    s = _as_series(dates)
    floored = _floor(s, unit)
    return floored.where(floored == s, _next(floored, unit))


def round_date(dates, unit):
    """Round to the nearest ``unit`` boundary; halfway values round up."""
    _check_unit(unit)
    s = _as_series(dates)
    floored = _floor(s, unit)
    upper = _next(floored, unit)
    return floored.where((s - floored) < (upper - s), upper)


def with_tz(dates, tz):
    """Same instant shown on another clock. Naive input is read as UTC."""
    s = _as_series(dates)
    if s.dt.tz is None:
        s = s.dt.tz_localize("UTC")
    return s.dt.tz_convert(tz)


def force_tz(dates, tz):
    """Same clock reading pinned to another zone; non-existent local times become ``NaT``."""
    s = _as_series(dates)
    if s.dt.tz is not None:
        s = s.dt.tz_localize(None)
    return s.dt.tz_localize(tz, nonexistent="NaT", ambiguous="NaT")


def date_parts(dates):
    s = _as_series(dates)
    return pd.DataFrame({
        "date": s,
        "year": s.dt.year,
        "month": s.dt.month,
        "day": s.dt.day,
        "weekday": s.dt.day_name(),
        "quarter": s.dt.quarter,
        "day_of_year": s.dt.dayofyear,
    })
