# src/magictext/index.py
"""
Sorted position index over a token corpus.

The index is a permutation of ``range(len(tokens))`` ordered by the suffix of
tokens starting at each position (the "extended suffix order"): positions are
compared token by token under the corpus comparer; when one suffix runs out
first it sorts before the other, so a corpus boundary sorts before any real
token. All occurrences of any n-gram therefore form one contiguous block of
the index, which is what makes the binary search in ``search`` possible.

The build is a plain comparison sort. A single comparison may walk O(N) tokens,
so the worst case (long repeated runs) is O(N^2 log N); typical text compares
in a handful of tokens.
"""
from __future__ import annotations

from array import array
from functools import cmp_to_key
from typing import Iterable, Sequence

from .comparer import Token, TokenComparer
from .errors import NullArgumentError

# Index slots are stored as unsigned 32-bit positions
INDEX_TYPECODE = "I"


def compare_suffixes(comparer: TokenComparer, tokens: Sequence[Token], x: int, y: int) -> int:
    """Three-way extended suffix comparison of positions ``x`` and ``y``."""
    if x == y:
        return 0
    n = len(tokens)
    i, j = x, y
    while i < n and j < n:
        c = comparer.compare(tokens[i], tokens[j])
        if c != 0:
            return c
        i += 1
        j += 1
    # the larger start runs out first: it is the shorter suffix
    return -1 if x > y else 1


def build_index(tokens: Sequence[Token], comparer: TokenComparer) -> array:
    if tokens is None:
        raise NullArgumentError("tokens")
    if comparer is None:
        raise NullArgumentError("comparer")
    key = cmp_to_key(lambda x, y: compare_suffixes(comparer, tokens, x, y))
    return array(INDEX_TYPECODE, sorted(range(len(tokens)), key=key))


def freeze_index(positions: Iterable[int]) -> array:
    """Compact form of an index computed elsewhere (e.g. read back from disk)."""
    return array(INDEX_TYPECODE, positions)


def is_sorted_index(index: Sequence[int], tokens: Sequence[Token], comparer: TokenComparer) -> bool:
    """
    Check that ``index`` is a permutation of the corpus positions in extended
    suffix order. Linear number of comparisons; used by tests and by callers
    that want to validate an index of unknown origin.
    """
    n = len(tokens)
    if len(index) != n or sorted(index) != list(range(n)):
        return False
    return all(compare_suffixes(comparer, tokens, index[i - 1], index[i]) < 0 for i in range(1, n))
