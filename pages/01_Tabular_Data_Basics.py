"""Chapter 1: Tabular Data Basics -- Rows, columns, groups, keys and rolling joins."""
import pandas as pd
import plotly.express as px
import streamlit as st

from course_utils.constants import POKEMON_TYPE_COLORS
from course_utils.data_loader import DatasetNotFoundError, load_dataset
from course_utils.plotting import apply_common_layout
from course_utils.tables import (
    assign_by_group, chain, count_by, dt_query, keyed_lookup, rolling_join, set_key,
)
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, insight_box, quiz,
    stop_on_missing_dataset, takeaways, warning_box,
)

# ── Header ───────────────────────────────────────────────────────────────────
chapter_header(1)
st.markdown(
    "Fast table libraries have a reputation for terse syntax, and the reputation is "
    "earned. But almost all of that terseness comes from a single sentence you can "
    "read out loud: **take the rows `i`, compute `j`, grouped by `by`**. Once that "
    "sentence is in your head, every query is a fill-in-the-blanks exercise. This "
    "chapter walks through the sentence one blank at a time, with the pandas call "
    "that fills each blank, using a small table of Pokemon base stats."
)

try:
    poke = load_dataset("pokemon")
except DatasetNotFoundError as err:
    stop_on_missing_dataset(err)

STATS = ["hp", "attack", "defense", "sp_atk", "sp_def", "speed"]
poke = poke.assign(total=poke[STATS].sum(axis=1))

# ── 1.1 The Sentence ─────────────────────────────────────────────────────────
st.header("1.1  Reading DT[i, j, by]")

concept_box(
    "Three Blanks",
    "<b>i</b> says which rows: a condition, a set of key values, or nothing (all rows).<br>"
    "<b>j</b> says what to compute: columns to keep, or expressions that summarise them.<br>"
    "<b>by</b> says how to split the rows before computing <b>j</b>.<br><br>"
    "In pandas the three blanks become <code>query</code> (or a boolean mask), a column "
    "selection or <code>agg</code>, and <code>groupby</code>. The helper "
    "<code>dt_query</code> used on this page simply runs them in that order."
)

st.dataframe(poke.head(10), use_container_width=True, hide_index=True)

# ── 1.2 Filtering Rows ───────────────────────────────────────────────────────
st.header("1.2  The i Blank: Picking Rows")

query = st.text_input("Row condition (pandas query syntax)", "speed > 90 and type1 != 'Psychic'",
                      key="dt_query")
try:
    picked = dt_query(poke, i=query)
except (ValueError, SyntaxError, NameError, KeyError, TypeError) as err:
    st.error(f"That condition did not parse: {err}")
    picked = poke.iloc[0:0]

st.metric("Rows matched", f"{len(picked)} of {len(poke)}")
st.dataframe(picked[["name", "type1", "type2"] + STATS], use_container_width=True, hide_index=True)

code_example("""
# DT[speed > 90 & type1 != "Psychic"]
poke.query("speed > 90 and type1 != 'Psychic'")
""")

# ── 1.3 Computing j by Group ─────────────────────────────────────────────────
st.header("1.3  The j and by Blanks: Summaries per Group")

stat = st.selectbox("Statistic to summarise", STATS + ["total"], index=6, key="dt_stat")
summary = dt_query(
    poke,
    j={"n": (stat, "size"), "mean": (stat, "mean"), "max": (stat, "max")},
    by="type1",
)
summary = summary.sort_values("mean", ascending=False)

fig = px.bar(
    summary, x="type1", y="mean", color="type1",
    color_discrete_map=POKEMON_TYPE_COLORS,
    hover_data=["n", "max"],
    labels={"type1": "Primary type", "mean": f"Mean {stat}"},
)
apply_common_layout(fig, title=f"Mean {stat} by primary type", height=420)
fig.update_layout(showlegend=False)
st.plotly_chart(fig, use_container_width=True)

insight_box(
    "Groups come back in the order they first appear in the data, not sorted. That is "
    "the table-library default and it is why `dt_query` passes `sort=False` to "
    "`groupby`. If you want alphabetical groups, ask for them (`sort_by=True`); do not "
    "rely on an accident of the implementation."
)

code_example("""
# DT[, .(n = .N, mean = mean(total), max = max(total)), by = type1]
poke.groupby("type1", sort=False).agg(
    n=("total", "size"), mean=("total", "mean"), max=("total", "max")
).reset_index()
""")

# ── 1.4 Counting ─────────────────────────────────────────────────────────────
st.header("1.4  Counting Rows: .N")

st.markdown(
    "Counting rows per group is so common it gets its own special symbol. In pandas it "
    "is `groupby(...).size()`, and that is all `count_by` does."
)
counts = count_by(poke, ["type1", "legendary"])
st.dataframe(counts, use_container_width=True, hide_index=True)

# ── 1.5 Keys ─────────────────────────────────────────────────────────────────
st.header("1.5  Keys: Sorted Tables and Fast Lookup")

concept_box(
    "What a Key Buys You",
    "Setting a key sorts the table by one or more columns and remembers that order. "
    "Lookups by key value can then use binary search instead of scanning every row. "
    "pandas expresses the same idea with a sorted index; <code>.loc</code> on a sorted "
    "index is the keyed lookup."
)

keyed = set_key(poke, "name")
names = st.multiselect(
    "Look up by name", sorted(poke["name"]) + ["Missingno"],
    default=["Pikachu", "Snorlax", "Missingno"], key="dt_keys",
)
st.dataframe(keyed_lookup(keyed, names)[["type1"] + STATS], use_container_width=True)

warning_box(
    "A key value that is not in the table does not raise an error; it comes back as a "
    "row full of missing values. That is usually what you want for a lookup, and "
    "occasionally a silent bug when the key has a typo."
)

# ── 1.6 Assignment by Reference ──────────────────────────────────────────────
st.header("1.6  Adding Columns in Place")

st.markdown(
    "The `:=` operator adds or overwrites a column **without copying the table**. "
    "pandas column assignment also modifies the frame you hand it. Below, "
    "`assign_by_group` writes each Pokemon's share of its type's mean attack straight "
    "into the working copy, and the object identity does not change."
)

work = poke.copy()
before_id = id(work)
assign_by_group(work, "type_mean_attack", "attack", "mean", by="type1")
work["attack_vs_type"] = (work["attack"] / work["type_mean_attack"]).round(2)
col1, col2 = st.columns(2)
col1.metric("Same object after assignment", "yes" if id(work) == before_id else "no")
col2.metric("New columns", 2)
st.dataframe(
    work[["name", "type1", "attack", "type_mean_attack", "attack_vs_type"]]
    .sort_values("attack_vs_type", ascending=False).head(10),
    use_container_width=True, hide_index=True,
)

code_example("""
# DT[, type_mean_attack := mean(attack), by = type1]
poke["type_mean_attack"] = poke.groupby("type1")["attack"].transform("mean")
""")

# ── 1.7 Rolling Joins ────────────────────────────────────────────────────────
st.header("1.7  Rolling Joins")

concept_box(
    "Last Observation Carried Forward",
    "A rolling join matches each row to the most recent row at or before it in the "
    "other table, instead of demanding an exact key match. The classic use is prices: "
    "for every trade, what was the last quoted price? In pandas this is "
    "<code>merge_asof</code>."
)

trades = pd.DataFrame({
    "time": pd.to_datetime(["09:30:02", "09:30:07", "09:31:15", "09:33:00"], format="%H:%M:%S"),
    "ticker": ["PIKA", "PIKA", "EEVE", "PIKA"],
    "shares": [100, 250, 40, 75],
})
quotes = pd.DataFrame({
    "time": pd.to_datetime(["09:30:00", "09:30:05", "09:31:00", "09:32:30", "09:30:00"],
                           format="%H:%M:%S"),
    "ticker": ["PIKA", "PIKA", "EEVE", "PIKA", "EEVE"],
    "price": [10.10, 10.15, 52.00, 10.05, 51.80],
})
direction = st.radio("Roll direction", ["backward", "forward", "nearest"], horizontal=True,
                     key="dt_roll")
rolled = rolling_join(trades, quotes, on="time", by="ticker", direction=direction)
rolled["time"] = rolled["time"].dt.strftime("%H:%M:%S")
st.dataframe(rolled, use_container_width=True, hide_index=True)

# ── 1.8 Chaining ─────────────────────────────────────────────────────────────
st.header("1.8  Chaining")

st.markdown(
    "`DT[...][...]` applies one bracket after another, each working on the result of "
    "the last. Here: keep non-legendary Pokemon, average the totals per type, then "
    "keep the types averaging above 400."
)
chained = chain(
    poke,
    {"i": "not legendary"},
    {"j": {"mean_total": ("total", "mean"), "n": ("total", "size")}, "by": "type1"},
    {"i": "mean_total > 400"},
)
st.dataframe(chained.round(1), use_container_width=True, hide_index=True)

# ── Quiz & Takeaways ─────────────────────────────────────────────────────────
st.divider()

quiz(
    "In DT[i, j, by], which part decides how rows are split before summarising?",
    ["i", "j", "by", "The key"],
    correct_idx=2,
    explanation="i filters, j computes, by groups. The key only changes how lookups by value work.",
    key="q_dt_1",
)

quiz(
    "A rolling join with direction 'backward' matches each left row to...",
    [
        "The right row with exactly the same time",
        "The latest right row at or before it",
        "The earliest right row after it",
        "Every right row in the same group",
    ],
    correct_idx=1,
    explanation="Backward rolling carries the last observation forward in time.",
    key="q_dt_2",
)

takeaways([
    "Read every query as: take rows i, compute j, grouped by by.",
    "Grouped results keep first-appearance order unless you ask for sorting.",
    "Keys are sorted indexes; lookups on missing keys return empty rows, not errors.",
    "Column assignment modifies the table you pass in; copy first if you need the original.",
    "Rolling joins (merge_asof) answer 'what was the last value before this moment?'.",
])
