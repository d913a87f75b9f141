"""Statistical Computing Course Notes -- Main Entry Point."""
import streamlit as st

from course_utils.constants import CHAPTERS, DATASETS, PART_TITLES
from course_utils.data_loader import available_datasets, load_dataset
from course_utils.logger import configure_logging

configure_logging("course-notes")

st.set_page_config(
    page_title="Statistical Computing Course Notes",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.title("Statistical Computing Course Notes")
st.subheader("Clustering, workflows, plotting, dates, text and dashboards, one library call at a time")

st.markdown("""
These notes are a tour of the data-analysis toolbox rather than a toolbox of their own.
Every chapter takes one well-worn technique (k-means, a dendrogram, a join, a date that
does not exist) and shows the library call that does it, what the call hands back, and
the one or two places where people reliably trip over it.

Nothing here reimplements an algorithm. scikit-learn clusters, SciPy builds trees, pandas
joins and Streamlit reacts. The interesting part is learning which knob to turn and
what the answer means.

### How to Use These Notes

1. **Navigate** via the sidebar. Chapters are independent, so start wherever you like
2. **Pick a dataset** in the sidebar where a chapter offers one; iris, wine and a small
   Pokemon table ship with the app
3. **Poke at the widgets.** Every chart is recomputed from the current settings, which
   is itself the subject of the last chapter
4. **Take the quizzes.** They are short, and they are there because retrieval practice works

### Course Outline
""")

for number, (title, part) in CHAPTERS.items():
    st.markdown(f"**Chapter {number}: {title}** -- Part {part}, {PART_TITLES[part]}")

st.divider()

st.subheader("Datasets")
rows = []
available = available_datasets()
for key, meta in DATASETS.items():
    rows.append({
        "key": key,
        "dataset": meta["title"],
        "label column": meta["label"],
        "numeric features": len(meta["features"]),
        "available": "yes" if key in available else "run fetch_datasets.py",
    })
st.dataframe(rows, use_container_width=True, hide_index=True)

st.subheader("Dataset Preview")
preview_key = st.selectbox(
    "Preview", available, format_func=lambda k: DATASETS[k]["title"], key="home_preview",
)
df = load_dataset(preview_key)
st.dataframe(df.head(20), use_container_width=True)

col1, col2, col3 = st.columns(3)
col1.metric("Rows", f"{len(df):,}")
col2.metric("Columns", df.shape[1])
col3.metric("Classes", df[DATASETS[preview_key]["label"]].nunique())
