import pytest

from course_utils import plotting, ui_components

HELPERS = [
    ui_components.chapter_header, ui_components.concept_box, ui_components.formula_box,
    ui_components.insight_box, ui_components.warning_box, ui_components.code_example,
    ui_components.quiz, ui_components.takeaways, ui_components.stop_on_missing_dataset,
    plotting.apply_common_layout, plotting.color_map, plotting.pretty_label,
]


@pytest.mark.parametrize("func", HELPERS, ids=lambda f: f.__name__)
def test_shared_helpers_are_documented(func):
    assert func.__doc__ and func.__doc__.strip()


def test_pretty_label():
    assert plotting.pretty_label("petal_length") == "Petal length"
