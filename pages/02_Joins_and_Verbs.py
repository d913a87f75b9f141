"""Chapter 2: Joins and Verbs -- filter, select, mutate, arrange, summarise, and six kinds of join."""
import warnings

import pandas as pd
import plotly.express as px
import streamlit as st

from course_utils.constants import POKEMON_TYPE_COLORS
from course_utils.data_loader import DatasetNotFoundError, load_dataset
from course_utils.joins import (
    JOIN_TYPES, JoinKeyWarning, arrange, filter_rows, join, mutate, select_cols, summarise_by,
)
from course_utils.plotting import apply_common_layout
from course_utils.ui_components import (
    chapter_header, code_example, concept_box, insight_box, quiz,
    stop_on_missing_dataset, takeaways, warning_box,
)

# ── Header ───────────────────────────────────────────────────────────────────
chapter_header(2)
st.markdown(
    "Most data manipulation is five verbs and a join. You **filter** rows, **select** "
    "columns, **mutate** new ones, **arrange** the result and **summarise** by group. "
    "Then, sooner or later, you need information that lives in another table, and you "
    "join. The verbs are easy. Joins are where the quiet bugs live: duplicated keys "
    "that multiply rows, keys of different types that never match, and natural joins "
    "on columns you did not mean to join on. This chapter is mostly about those."
)

try:
    poke = load_dataset("pokemon")
except DatasetNotFoundError as err:
    stop_on_missing_dataset(err)


def run_join(*args, **kwargs):
    """Run a join and surface any key warnings on the page."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", JoinKeyWarning)
        result = join(*args, **kwargs)
    for w in caught:
        if issubclass(w.category, JoinKeyWarning):
            st.warning(f"**Join warning:** {w.message}")
    return result


# ── 2.1 The Verbs ────────────────────────────────────────────────────────────
st.header("2.1  Five Verbs")

concept_box(
    "One Verb, One Job",
    "<b>filter</b> keeps rows, <b>select</b> keeps columns, <b>mutate</b> adds columns, "
    "<b>arrange</b> sorts, and <b>summarise</b> collapses groups to one row each. "
    "Each takes a table and returns a table, which is what makes them chain."
)

min_speed = st.slider("Minimum speed", 20, 130, 60, 5, key="verbs_speed")
descending = st.checkbox("Sort by attack/defense ratio descending", value=True, key="verbs_desc")

step = filter_rows(poke, poke["speed"] >= min_speed, lambda d: ~d["legendary"])
step = select_cols(step, "name", "type1", "attack", "defense", "speed")
step = mutate(step, ratio=lambda d: (d["attack"] / d["defense"]).round(2))
step = arrange(step, "ratio", desc=["ratio"] if descending else [])
st.dataframe(step, use_container_width=True, hide_index=True)

summary = summarise_by(
    poke, "type1",
    n=("name", "size"), mean_speed=("speed", "mean"), fastest=("speed", "max"),
)
fig = px.scatter(
    summary, x="n", y="mean_speed", size="fastest", color="type1", text="type1",
    color_discrete_map=POKEMON_TYPE_COLORS,
    labels={"n": "Number of Pokemon", "mean_speed": "Mean speed"},
)
fig.update_traces(textposition="top center")
apply_common_layout(fig, title="summarise(n, mean_speed, fastest) by type1", height=420)
fig.update_layout(showlegend=False)
st.plotly_chart(fig, use_container_width=True)

code_example("""
(poke[(poke.speed >= 60) & ~poke.legendary]
    [["name", "type1", "attack", "defense", "speed"]]
    .assign(ratio=lambda d: d.attack / d.defense)
    .sort_values("ratio", ascending=False))
""")

# ── 2.2 Join Types ───────────────────────────────────────────────────────────
st.header("2.2  Six Kinds of Join")

concept_box(
    "Mutating vs Filtering Joins",
    "<b>Mutating joins</b> (inner, left, right, full) add columns from the right table. "
    "They differ only in which unmatched rows survive.<br>"
    "<b>Filtering joins</b> (semi, anti) never add columns. A semi join keeps left rows "
    "that <i>have</i> a match, an anti join keeps those that <i>do not</i>. Neither can "
    "duplicate a left row, no matter how many matches there are."
)

habitats = pd.DataFrame({
    "type1": ["Grass", "Fire", "Water", "Electric", "Ghost", "Steel"],
    "habitat": ["Forest", "Volcano", "Sea", "Power plant", "Tower", "Cave"],
})
st.markdown("A small lookup table of type habitats (note: no Psychic row, and a Steel row with no Pokemon):")
st.dataframe(habitats, use_container_width=True, hide_index=True)

how = st.radio("Join type", JOIN_TYPES, horizontal=True, key="join_how")
joined = run_join(poke[["name", "type1"]], habitats, how=how, by="type1")

col1, col2, col3 = st.columns(3)
col1.metric("Left rows", len(poke))
col2.metric("Right rows", len(habitats))
col3.metric("Result rows", len(joined))
st.dataframe(joined, use_container_width=True, hide_index=True)

insight_box(
    "Watch the row counts as you switch. `left` keeps every Pokemon and fills missing "
    "habitats with NaN; `right` keeps the Steel habitat with no Pokemon; `full` keeps "
    "both; `anti` is the question 'which Pokemon have no habitat?', which is the single "
    "most useful query for finding holes in a lookup table."
)

# ── 2.3 Natural Joins ────────────────────────────────────────────────────────
st.header("2.3  Joining Without Saying 'by'")

st.markdown(
    "Leave out the key and the join uses **every column the two tables share**. That is "
    "convenient right up until the tables share a column you did not mean. The log line "
    "`Joining, by = [...]` is your only hint."
)

legend_notes = pd.DataFrame({
    "name": ["Articuno", "Zapdos", "Moltres", "Mewtwo", "Mew"],
    "legendary": [True, True, True, True, False],
    "note": ["Ice bird", "Thunder bird", "Fire bird", "Cloned", "Mythical, not legendary here"],
})
natural = run_join(poke[["name", "type1", "legendary"]], legend_notes, how="inner")
explicit = run_join(poke[["name", "type1", "legendary"]], legend_notes, how="inner", by="name")

col_a, col_b = st.columns(2)
with col_a:
    st.markdown("**No `by`** (joins on name *and* legendary)")
    st.dataframe(natural, use_container_width=True, hide_index=True)
with col_b:
    st.markdown("**`by='name'`**")
    st.dataframe(explicit, use_container_width=True, hide_index=True)

warning_box(
    "The natural join silently dropped Mew because the two tables disagree on its "
    "`legendary` flag. Spell out `by` in anything you will run twice."
)

# ── 2.4 Key Problems ─────────────────────────────────────────────────────────
st.header("2.4  When Keys Go Wrong")

st.subheader("Duplicate keys on both sides")
moves = pd.DataFrame({
    "type1": ["Fire", "Fire", "Water", "Water"],
    "move": ["Ember", "Flamethrower", "Bubble", "Surf"],
})
fire_water = poke[poke["type1"].isin(["Fire", "Water"])][["name", "type1"]]
many = run_join(fire_water, moves, how="inner", by="type1")
st.markdown(
    f"{len(fire_water)} Fire/Water Pokemon joined to {len(moves)} moves gives "
    f"**{len(many)} rows**: every Pokemon paired with every move of its type. "
    "Sometimes that is the point; usually it is an accident."
)

st.subheader("Keys of different types")
ids_left = pd.DataFrame({"dex": [1, 4, 7, 25], "name": ["Bulbasaur", "Charmander", "Squirtle", "Pikachu"]})
ids_right = pd.DataFrame({"dex": ["1", "4", "7", "25"], "colour": ["green", "red", "blue", "yellow"]})
typed = run_join(ids_left, ids_right, how="left", by="dex")
st.dataframe(typed, use_container_width=True, hide_index=True)

code_example("""
# validate= turns the silent many-to-many into an error in plain pandas
left.merge(right, on="type1", how="inner", validate="many_to_one")
""")

# ── Quiz & Takeaways ─────────────────────────────────────────────────────────
st.divider()

quiz(
    "Which join answers 'which Pokemon have no habitat in the lookup table'?",
    ["inner", "left", "semi", "anti"],
    correct_idx=3,
    explanation="An anti join keeps the left rows that have no match on the right.",
    key="q_join_1",
)

quiz(
    "You join 10 rows to 10 rows and get 40. The most likely cause is...",
    [
        "A bug in the join implementation",
        "Duplicate key values on both sides",
        "Missing values in the key column",
        "Using a left join instead of an inner join",
    ],
    correct_idx=1,
    explanation="Every duplicate on the left pairs with every duplicate on the right.",
    key="q_join_2",
)

takeaways([
    "filter, select, mutate, arrange and summarise each do one thing and return a table.",
    "Mutating joins add columns; filtering joins (semi, anti) only decide which left rows survive.",
    "Always pass the key explicitly; natural joins match on every shared column.",
    "Duplicate keys on both sides multiply rows. Check row counts after every join.",
    "Keys with different types (1 vs '1') never match until you make them agree.",
])
