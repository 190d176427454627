# src/e2e/test_comparer_rng.py

import random
import threading

import pytest

from magictext import (
    NullArgumentError, ORDINAL, ORDINAL_IGNORE_CASE, Pen, TokenComparer,
    get_comparer, register_comparer,
)
from magictext import rng as R
from magictext.comparer import comparer_names


# ---- comparers ----

def test_ordinal_compare():
    assert ORDINAL.compare("a", "b") < 0
    assert ORDINAL.compare("b", "a") > 0
    assert ORDINAL.compare("a", "a") == 0
    assert ORDINAL.compare("B", "a") < 0           # code point order
    assert ORDINAL.compare(None, "") < 0
    assert ORDINAL.compare("", None) > 0
    assert ORDINAL.equals(None, None)
    assert not ORDINAL.equals(None, "")


def test_ignore_case_compare():
    assert ORDINAL_IGNORE_CASE.equals("Straße", "STRASSE")
    assert ORDINAL_IGNORE_CASE.compare("B", "a") > 0
    assert ORDINAL_IGNORE_CASE.compare(None, "a") < 0


def test_get_comparer_resolution():
    assert get_comparer() is ORDINAL
    assert get_comparer(None) is ORDINAL
    assert get_comparer("ordinal_ignore_case") is ORDINAL_IGNORE_CASE
    assert get_comparer(ORDINAL_IGNORE_CASE) is ORDINAL_IGNORE_CASE
    with pytest.raises(KeyError):
        get_comparer("no_such_rule")


def test_register_comparer():
    by_length = TokenComparer("by_length_for_tests", key=len)
    assert register_comparer(by_length) is by_length
    assert register_comparer(by_length) is by_length      # same object again is fine
    assert get_comparer("by_length_for_tests") is by_length
    assert "by_length_for_tests" in comparer_names()
    with pytest.raises(ValueError):
        register_comparer(TokenComparer("by_length_for_tests", key=len))
    with pytest.raises(NullArgumentError):
        register_comparer(None)


def test_custom_comparer_drives_equality_in_queries():
    by_length = TokenComparer("length_only", key=len)
    pen = Pen(["ab", "cd", "xyz", "ef"], comparer=by_length)
    assert pen.count(["zz"]) == 3
    assert pen.count(["zz", "zzz"]) == 1


def test_comparer_name_is_required():
    with pytest.raises(ValueError):
        TokenComparer("")


# ---- default random source ----

def test_thread_random_is_per_thread():
    mine = R.thread_random()
    assert R.thread_random() is mine

    theirs = []
    t = threading.Thread(target=lambda: theirs.append(R.thread_random()))
    t.start()
    t.join()
    assert theirs and theirs[0] is not mine


def test_reseed_controls_the_next_thread_generators():
    R.reseed(12345)
    draws = []

    def worker():
        draws.append(R.thread_random().random())

    for _ in range(2):
        t = threading.Thread(target=worker)
        t.start()
        t.join()
    assert draws == [random.Random(12345).random(), random.Random(12346).random()]


def test_random_picker_stays_in_range():
    pick = R.random_picker(random.Random(9))
    assert pick(0) == 0
    assert pick(1) == 0
    assert all(0 <= pick(5) < 5 for _ in range(200))
    with pytest.raises(NullArgumentError):
        R.random_picker(None)


def test_default_pick_stays_in_range():
    assert R.default_pick(0) == 0
    assert all(0 <= R.default_pick(3) < 3 for _ in range(200))


def test_constant_picker():
    assert R.constant_picker(2)(10) == 2
    assert R.constant_picker()(10) == 0


def test_babble_from_many_threads():
    pen = Pen("a b c a b d a c".split())
    results = []
    lock = threading.Lock()

    def worker():
        out = [t for _, t in zip(range(20), pen.babble(1))]
        with lock:
            results.append(out)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(results) == 8
    assert all(set(out) <= {"a", "b", "c", "d"} for out in results)
