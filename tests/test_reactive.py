from course_utils.reactive import RecomputeCounter


def test_counts_start_empty_and_accumulate():
    counter = RecomputeCounter(state={})
    assert counter.count("rows") == 0
    assert counter.hit("rows") == 1
    assert counter.hit("rows") == 2
    counter.hit("summary")
    assert counter.counts == {"rows": 2, "summary": 1}


def test_counts_survive_a_new_counter_on_the_same_state():
    state = {}
    RecomputeCounter(state=state).hit("rows")
    assert RecomputeCounter(state=state).count("rows") == 1


def test_separate_keys_do_not_share_counts():
    state = {}
    RecomputeCounter(state=state, key="a").hit("rows")
    assert RecomputeCounter(state=state, key="b").count("rows") == 0


def test_reset_and_frame():
    counter = RecomputeCounter(state={})
    counter.hit("b")
    counter.hit("a")
    counter.hit("a")
    frame = counter.as_frame()
    assert list(frame.columns) == ["conductor", "recomputations"]
    assert frame.values.tolist() == [["a", 2], ["b", 1]]
    counter.reset()
    assert counter.as_frame().empty
