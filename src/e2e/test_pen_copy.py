# src/e2e/test_pen_copy.py

import pytest

from magictext import NullArgumentError, Pen, PenFormatError, PenRecord
from magictext.corpus import Corpus
from magictext.rng import constant_picker


def _words():
    # built at runtime so equal strings are distinct objects before interning
    return ["".join(["c", "at"]), "sat", "".join(["ca", "t"]), "ran"]


def test_copy_shares_context_and_index():
    pen = Pen(_words())
    twin = pen.copy()
    assert twin.context is pen.context
    assert twin._index is pen._index
    assert twin.sentinel == pen.sentinel and twin.comparer is pen.comparer


def test_interned_pen_canonicalises_equal_tokens():
    pen = Pen(_words(), intern=True)
    assert pen.intern
    assert pen.context[0] is pen.context[2]


def test_copy_with_another_intern_policy():
    pen = Pen(_words())
    interned = pen.copy(intern=True)
    assert interned.intern and not pen.intern
    assert interned.context == pen.context
    assert interned.context[0] is interned.context[2]
    assert interned._index is pen._index
    assert list(interned.render(1, constant_picker(), 0)) == list(pen.render(1, constant_picker(), 0))

    back = interned.copy(intern=False)
    assert not back.intern
    assert back.context == pen.context
    assert interned.copy(intern=True).context is interned.context


def test_record_round_trip():
    pen = Pen(["a", "|", "b", "a"], sentinel="|", comparer="ordinal_ignore_case")
    record = pen.to_record()
    assert record.comparer == "ordinal_ignore_case"
    assert record.index == tuple(pen.index)
    back = Pen.from_record(record)
    assert back.to_record() == record


def test_record_with_mismatched_index_is_rejected():
    record = PenRecord(intern=False, comparer="ordinal", sentinel=None,
                       context=("a", "b"), index=(0,), all_sentinels=False)
    with pytest.raises(PenFormatError):
        Pen.from_record(record)
    with pytest.raises(NullArgumentError):
        Pen.from_record(None)


def test_record_whose_index_is_not_a_permutation_is_rejected():
    for index in ((0, 0), (0, 2), (1, -1)):
        record = PenRecord(intern=False, comparer="ordinal", sentinel=None,
                           context=("a", "b"), index=index, all_sentinels=False)
        with pytest.raises(PenFormatError):
            Pen.from_record(record)


def test_index_view_is_read_only():
    pen = Pen(["b", "a"])
    view = pen.index
    assert list(view) == [1, 0]
    with pytest.raises(TypeError):
        view[0] = 0


def test_none_tokens_are_rejected():
    with pytest.raises(NullArgumentError):
        Pen(None)
    with pytest.raises(NullArgumentError):
        Corpus.build(None)


def test_corpus_helpers():
    corpus = Corpus.build(["a", "|", "a"], sentinel="|")
    assert len(corpus) == 3
    assert corpus.token_at(1) == "|" and corpus.token_at(3) == "|"
    assert corpus.is_sentinel("|") and not corpus.is_sentinel("a")
    assert Pen(corpus.tokens, sentinel="|").distinct_count() == 2
    assert repr(Pen(["a"])) == "Pen(tokens=1, sentinel=None, comparer='ordinal', intern=False)"


def test_distinct_count_follows_the_comparer():
    words = ["The", "cat", "the", "CAT", "sat"]
    assert Pen(words).distinct_count() == 5
    assert Pen(words, comparer="ordinal_ignore_case").distinct_count() == 3
    assert Pen([]).distinct_count() == 0
