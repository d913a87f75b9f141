"""Chapter 3: Dates and Times -- Parsing, periods vs durations, rounding and time zones."""
import datetime as dt

import pandas as pd
import plotly.express as px
import streamlit as st

from course_utils.data_loader import DatasetNotFoundError, load_dataset
from course_utils.dates import (
    ORDER_FORMATS, ROUNDING_UNITS, add_duration, add_period, ceiling_date, date_parts,
    floor_date, force_tz, interval_length, parse_dates, round_date, with_tz,
)
from course_utils.plotting import apply_common_layout
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, formula_box, insight_box, quiz,
    stop_on_missing_dataset, takeaways, warning_box,
)

# ── Header ───────────────────────────────────────────────────────────────────
chapter_header(3)
st.markdown(
    "Dates look like numbers and behave like anything but. A month is 28, 29, 30 or 31 "
    "days. A day is usually 24 hours, except twice a year when it is 23 or 25. Some "
    "dates simply do not exist (there is no 30 February, however confidently a form "
    "asks for it). The good news is that the libraries know all of this. The bad news "
    "is that you have to tell them which of two perfectly reasonable questions you are "
    "asking: *what is the date one month from now* or *what time is it 720 hours from now*."
)

# ── 3.1 Parsing ──────────────────────────────────────────────────────────────
st.header("3.1  Parsing: Tell It the Order")

concept_box(
    "Orders, Not Formats",
    "Instead of writing a format string for every input style, name the <b>order</b> "
    "of the parts: year-month-day (<code>ymd</code>), month-day-year (<code>mdy</code>), "
    "day-month-year (<code>dmy</code>). The parser tries each order in the sequence you "
    "give, and the first one that works wins. A string that fits none of them, or "
    "describes a day that does not exist, comes back as a missing value (<code>NaT</code>)."
)

raw_text = st.text_area(
    "One date per line",
    "2024-03-15\n03/15/2024\n15 March 2024\n2021-02-30\nMarch 15, 2024\nsometime in spring",
    key="dates_raw",
)
orders = st.multiselect("Orders to try (in this sequence)", list(ORDER_FORMATS),
                        default=["ymd", "mdy", "dmy"], key="dates_orders")
values = [line for line in raw_text.splitlines() if line.strip()]
if orders and values:
    parsed = parse_dates(values, orders)
    st.dataframe(
        pd.DataFrame({"input": values, "parsed": parsed.dt.strftime("%Y-%m-%d %H:%M").fillna("NaT")}),
        use_container_width=True, hide_index=True,
    )
    st.metric("Failed to parse", int(parsed.isna().sum()))

warning_box(
    "`01/02/2024` is 2 January under `mdy` and 1 February under `dmy`. The parser will "
    "not warn you; whichever order comes first wins. Decide from the source, not the data."
)

# ── 3.2 Periods vs Durations ─────────────────────────────────────────────────
st.header("3.2  Periods vs Durations")

formula_box(
    "Two Kinds of 'Plus One Month'",
    r"\text{period: } 2024\text{-}01\text{-}31 + 1\,\text{month} = \text{NA} \qquad "
    r"\text{duration: } 2024\text{-}01\text{-}31 + 30\,\text{days} = 2024\text{-}03\text{-}01",
    "A period follows the calendar and refuses to invent 31 February. A duration counts "
    "seconds and does not care what the calendar says."
)

start = st.date_input("Start date", dt.date(2024, 1, 31), key="dates_start")
n_months = st.slider("Months to add", 1, 12, 1, key="dates_months")
rollback = st.checkbox("Roll back to the end of the month when the day does not exist",
                       value=False, key="dates_rollback")

starts = pd.Series(pd.to_datetime([start]))
col1, col2, col3 = st.columns(3)
period_result = add_period(starts, months=n_months, rollback=rollback).iloc[0]
duration_result = add_duration(starts, days=30 * n_months).iloc[0]
col1.metric("Start", str(start))
col2.metric(f"+ {n_months} month(s) (period)",
            "NaT" if pd.isna(period_result) else period_result.strftime("%Y-%m-%d"))
col3.metric(f"+ {30 * n_months} days (duration)", duration_result.strftime("%Y-%m-%d"))

month_ends = pd.Series(pd.date_range("2024-01-31", periods=12, freq="ME"))
table = pd.DataFrame({
    "start": month_ends.dt.strftime("%Y-%m-%d"),
    "+1 month": add_period(month_ends, months=1).dt.strftime("%Y-%m-%d").fillna("NaT"),
    "+1 month (rollback)": add_period(month_ends, months=1, rollback=True).dt.strftime("%Y-%m-%d"),
})
st.dataframe(table, use_container_width=True, hide_index=True)

st.subheader("Across a daylight saving change")
dst = pd.Series([pd.Timestamp("2024-03-09 12:00", tz="America/New_York")])
col_a, col_b = st.columns(2)
col_a.metric("+ 1 day (period)", add_period(dst, days=1).iloc[0].strftime("%Y-%m-%d %H:%M %Z"))
col_b.metric("+ 24 hours (duration)", add_duration(dst, hours=24).iloc[0].strftime("%Y-%m-%d %H:%M %Z"))

insight_box(
    "New York sprang forward on 10 March 2024. One calendar day after noon on the 9th is "
    "noon on the 10th; 24 elapsed hours later the clocks read 13:00. Neither answer is "
    "wrong. They answer different questions."
)

# ── 3.3 Intervals ────────────────────────────────────────────────────────────
st.header("3.3  Intervals: How Long Between Two Dates?")

col_s, col_e = st.columns(2)
iv_start = col_s.date_input("From", dt.date(2020, 2, 29), key="dates_iv_start")
iv_end = col_e.date_input("To", dt.date(2024, 2, 28), key="dates_iv_end")
lengths = {
    unit: interval_length([pd.Timestamp(iv_start)], [pd.Timestamp(iv_end)], unit).iloc[0]
    for unit in ["days", "weeks", "months", "years"]
}
cols = st.columns(4)
for c, (unit, value) in zip(cols, lengths.items()):
    c.metric(unit.capitalize(), f"{value:,.1f}" if unit in ("days", "weeks") else f"{value:.0f}")

st.caption(
    "Months and years count whole calendar units: 29 Feb 2020 to 28 Feb 2024 is 47 "
    "months, not 48, because the 29th has not come round again."
)

# ── 3.4 Rounding ─────────────────────────────────────────────────────────────
st.header("3.4  Rounding Dates")

try:
    movies = load_dataset("movies")
except DatasetNotFoundError as err:
    stop_on_missing_dataset(err)

unit = st.selectbox("Unit", list(ROUNDING_UNITS), index=5, key="dates_round_unit")
rounded = pd.DataFrame({
    "title": movies["title"],
    "release_date": movies["release_date"].dt.strftime("%Y-%m-%d"),
    "floor": floor_date(movies["release_date"], unit).dt.strftime("%Y-%m-%d %H:%M"),
    "round": round_date(movies["release_date"], unit).dt.strftime("%Y-%m-%d %H:%M"),
    "ceiling": ceiling_date(movies["release_date"], unit).dt.strftime("%Y-%m-%d %H:%M"),
})
st.dataframe(rounded, use_container_width=True, hide_index=True)

parts = date_parts(movies["release_date"])
by_weekday = parts["weekday"].value_counts().reindex(
    ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"], fill_value=0,
).reset_index()
by_weekday.columns = ["weekday", "releases"]
fig = px.bar(by_weekday, x="weekday", y="releases", color_discrete_sequence=["#2E86C1"])
apply_common_layout(fig, title="Release weekday of the movies in the sample", height=380)
st.plotly_chart(fig, use_container_width=True)

# ── 3.5 Time Zones ───────────────────────────────────────────────────────────
st.header("3.5  Time Zones: Same Instant or Same Clock?")

concept_box(
    "Two Operations That Look Alike",
    "<b>with_tz</b> keeps the instant and changes the clock: a meeting at 09:00 in New "
    "York <i>is</i> 14:00 in London.<br>"
    "<b>force_tz</b> keeps the clock and changes the instant: the timestamp was recorded "
    "as 09:00 with the wrong zone attached, and you want 09:00 in the right one."
)

zones = ["UTC", "America/New_York", "Europe/London", "Asia/Tokyo", "Australia/Sydney"]
meeting = pd.Series([pd.Timestamp("2024-06-03 09:00", tz="America/New_York")])
target = st.selectbox("Target zone", zones, index=3, key="dates_tz")
col_w, col_f = st.columns(2)
col_w.metric("with_tz (same instant)", with_tz(meeting, target).iloc[0].strftime("%Y-%m-%d %H:%M %Z"))
col_f.metric("force_tz (same clock)", force_tz(meeting, target).iloc[0].strftime("%Y-%m-%d %H:%M %Z"))

code_example("""
s = pd.Series(pd.to_datetime(["2024-06-03 09:00"])).dt.tz_localize("America/New_York")
s.dt.tz_convert("Asia/Tokyo")                        # same instant
s.dt.tz_localize(None).dt.tz_localize("Asia/Tokyo")  # same clock
""")

# ── Quiz & Takeaways ─────────────────────────────────────────────────────────
st.divider()

quiz(
    "What is 31 January plus one month as a period, without rollback?",
    ["28 or 29 February", "2 or 3 March", "A missing value", "31 February"],
    correct_idx=2,
    explanation="The target day does not exist, so the result is NA rather than a silent guess.",
    key="q_dates_1",
)

quiz(
    "A log file stamped times in UTC but they were really local New York times. Which fixes it?",
    ["with_tz", "force_tz", "round_date", "add_duration"],
    correct_idx=1,
    explanation="The clock readings are right and the zone label is wrong: keep the clock, change the zone.",
    key="q_dates_2",
)

takeaways([
    "Parse by naming the order of date parts; unparseable or impossible dates become NaT.",
    "Periods follow the calendar; durations count elapsed seconds. They differ across month ends and DST.",
    "Month arithmetic on the 29th to 31st can produce NA; rollback clamps to month end instead.",
    "Intervals measured in months or years count whole calendar units.",
    "with_tz changes the clock for the same instant; force_tz changes the instant for the same clock.",
])
