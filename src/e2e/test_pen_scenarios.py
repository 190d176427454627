# src/e2e/test_pen_scenarios.py

import pytest

from magictext import Pen, RenderState


CORPUS = ["the", "cat", "sat", "the", "cat", "ran"]


class ScriptedPicker:
    """
    Picker double: returns the scripted picks in order (then 0) and records
    every n it was asked about.
    """
    def __init__(self, *picks: int):
        self.picks = list(picks)
        self.calls: list[int] = []

    def __call__(self, n: int) -> int:
        self.calls.append(n)
        return self.picks.pop(0) if self.picks else 0


@pytest.fixture
def pen():
    return Pen(CORPUS)


def test_from_position_starts_with_corpus_token_and_the_is_always_followed_by_cat(pen):
    for pick in (0, 1):
        picker = ScriptedPicker(pick)
        cursor = pen.render(1, picker, from_position=0)
        assert next(cursor) == "the"
        assert picker.calls == []          # copied from the corpus, not picked
        assert next(cursor) == "cat"
        assert picker.calls == [2]         # both occurrences of "the" were candidates


def test_the_two_successors_of_cat_follow_suffix_order(pen):
    # "cat ran" sorts before "cat sat the cat ran", so slot 0 is the "ran" occurrence
    seen = {}
    for pick in (0, 1):
        picker = ScriptedPicker(pick)
        cursor = pen.render(1, picker, from_position=1)
        assert next(cursor) == "cat"
        seen[pick] = next(cursor)
        assert picker.calls == [2]
    assert seen == {0: "ran", 1: "sat"}


def test_count_and_positions_of_cat(pen):
    assert pen.count(["cat"]) == 2
    assert pen.positions_of(["cat"]) == {1, 4}
    assert pen.first_position_of(["cat"]) == 1
    assert pen.last_position_of(["cat"]) == 4


def test_absent_sample_reports_n(pen):
    assert pen.count(["dog"]) == 0
    assert pen.positions_of(["dog"]) == frozenset()
    assert pen.first_position_of(["dog"]) == len(CORPUS)
    assert pen.last_position_of(["the", "dog"]) == len(CORPUS)


def test_sample_running_past_the_end_does_not_match(pen):
    assert pen.count(["ran"]) == 1
    assert pen.count(["ran", "the"]) == 0


def test_empty_sample_matches_every_position(pen):
    assert pen.positions_of([]) == set(range(len(CORPUS)))
    assert pen.count([]) == len(CORPUS)
    assert pen.first_position_of([]) == 0
    assert pen.last_position_of([]) == len(CORPUS) - 1


def test_bare_string_sample_is_one_token(pen):
    assert pen.count("cat") == 2


def test_sample_may_be_any_iterable(pen):
    assert pen.count(t for t in ["the", "cat"]) == 2


def test_full_render_with_zero_picker_is_deterministic(pen):
    first = list(pen.render(2, lambda n: 0))
    second = list(pen.render(2, lambda n: 0))
    assert first == second == ["cat", "ran"]


def test_cursor_states(pen):
    cursor = pen.render(1, lambda n: 0, from_position=0)
    assert cursor.state is RenderState.INITIALIZING
    assert list(cursor) == ["the", "cat", "ran"]
    assert cursor.state is RenderState.TERMINATED
    assert cursor.emitted == 3
    with pytest.raises(StopIteration):
        next(cursor)


def test_render_is_lazy(pen):
    picker = ScriptedPicker()
    cursor = pen.render(2, picker)
    assert picker.calls == []
    next(cursor)
    assert picker.calls == [len(CORPUS) + 1]


def test_close_terminates_the_cursor(pen):
    cursor = pen.render(1, lambda n: 0, from_position=0)
    assert next(cursor) == "the"
    cursor.close()
    assert list(cursor) == []


def test_concurrent_cursors_on_one_pen_are_independent(pen):
    a = pen.render(1, ScriptedPicker(0, 1, 0, 0), from_position=0)
    b = pen.render(1, ScriptedPicker(0, 1, 0, 0), from_position=0)
    interleaved_a, interleaved_b = [], []
    for _ in range(10):
        interleaved_a.extend([next(a, None)])
        interleaved_b.extend([next(b, None)])
    expected = list(pen.render(1, ScriptedPicker(0, 1, 0, 0), from_position=0))
    assert [t for t in interleaved_a if t is not None] == expected
    assert [t for t in interleaved_b if t is not None] == expected
