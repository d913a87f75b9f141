"""Shared UI components: concept boxes, quizzes, takeaways, chapter scaffolding."""
import streamlit as st

from course_utils.constants import CHAPTERS, PART_TITLES
from course_utils.logger import configure_logging


def chapter_header(number):
    """Configure logging and render the chapter title with its part label."""
    configure_logging("course-notes")
    title, part = CHAPTERS[number]
    st.caption(f"Part {part}: {PART_TITLES[part]}")
    st.title(f"Chapter {number}: {title}")
    st.divider()


def concept_box(title, content):
    """Render a highlighted concept/theory box."""
    st.markdown(f"""
<div style="background-color: #EBF5FB; padding: 20px; border-radius: 10px; border-left: 5px solid #2E86C1; margin: 10px 0;">
<h4 style="color: #2E86C1; margin-top: 0;">{title}</h4>
<p style="color: #1B4F72;">{content}</p>
</div>
""", unsafe_allow_html=True)


def formula_box(title, formula, explanation=""):
    """Render a formula with explanation."""
    st.markdown(f"**{title}**")
    st.latex(formula)
    if explanation:
        st.caption(explanation)


def insight_box(text):
    """Render a key insight callout."""
    st.info(f"**Key Insight:** {text}")


def warning_box(text):
    """Render a warning/common mistake box."""
    st.warning(f"**Common Mistake:** {text}")


def code_example(code, language="python"):
    """Render a collapsible code example."""
    with st.expander("Show Code"):
        st.code(code.strip(), language=language)


def quiz(question, options, correct_idx, explanation="", key="quiz"):
    """Render a multiple-choice question. Returns True/False once answered, else None."""
    st.subheader("Quick Quiz")
    answer = st.radio(question, options, key=key, index=None)
    if answer is None:
        return None
    correct = options.index(answer) == correct_idx
    if correct:
        st.success("Correct!")
    else:
        st.error(f"Not quite. The correct answer is: **{options[correct_idx]}**")
    if explanation:
        st.caption(explanation)
    return correct


def takeaways(points):
    """Render key takeaways as a list."""
    st.subheader("Key Takeaways")
    for p in points:
        st.markdown(f"- {p}")


def stop_on_missing_dataset(err):
    """Show a dataset error with the fetch hint and halt the page."""
    st.error(f"**Dataset unavailable.** {err.args[0]}")
    st.stop()
