# src/magictext/search.py
from __future__ import annotations

from typing import FrozenSet, Iterable, Optional, Sequence

from .comparer import Token, TokenComparer
from .errors import NullArgumentError
from .models import Span

# Locate a (possibly cyclic) window of tokens in the sorted position index.
#
# Usage contract (not re-validated, for speed): ``index`` is the sorted
# permutation built by ``index.build_index`` for ``tokens`` under ``comparer``;
# ``lo``/``hi`` either bracket at least one match or are the full range;
# ``cycle_start`` is a valid slot of ``sample_cycle``. Breaking it gives
# meaningless spans, never an exception from inside the search.


def compare_range(
    comparer: TokenComparer,
    tokens: Sequence[Token],
    sample_cycle: Sequence[Token],
    i: int,
    cycle_start: int = 0,
) -> int:
    """
    Compare the tokens starting at corpus position ``i`` with the cyclic sample
    ``sample_cycle[cycle_start], sample_cycle[cycle_start + 1], ...`` (wrapping),
    over the sample's full length.

    Returns 0 when every sample token matches. A corpus run that ends before the
    sample does compares less.
    """
    n = len(tokens)
    m = len(sample_cycle)
    j = 0
    while i < n and j < m:
        c = comparer.compare(tokens[i], sample_cycle[(cycle_start + j) % m])
        if c != 0:
            return c
        i += 1
        j += 1
    return -1 if j < m else 0


def find_span(
    comparer: TokenComparer,
    tokens: Sequence[Token],
    index: Sequence[int],
    sample_cycle: Sequence[Token],
    cycle_start: int = 0,
    lo: int = 0,
    hi: Optional[int] = None,
) -> Span:
    """
    Binary-search ``index[lo:hi]`` for the block of slots whose positions start
    an occurrence of the cyclic sample.

    Returns ``Span(first, count)``: ``first`` is the leftmost matching slot, or
    the slot where the sample would be inserted when ``count == 0``.
    """
    if comparer is None:
        raise NullArgumentError("comparer")
    if tokens is None:
        raise NullArgumentError("tokens")
    if index is None:
        raise NullArgumentError("index")
    if sample_cycle is None:
        raise NullArgumentError("sample_cycle")

    n = len(tokens)
    l = lo
    h = n if hi is None else hi
    while l < h:
        m = (l + h) >> 1
        c = compare_range(comparer, tokens, sample_cycle, index[m], cycle_start)
        if c == 0:
            l, h = m, m + 1
            break
        if c < 0:
            l = m + 1
        else:
            h = m
    else:
        return Span(l, 0)

    # matches are contiguous in the index: widen the hit to the whole block
    while l > 0 and compare_range(comparer, tokens, sample_cycle, index[l - 1], cycle_start) == 0:
        l -= 1
    while h < n and compare_range(comparer, tokens, sample_cycle, index[h], cycle_start) == 0:
        h += 1
    return Span(l, h - l)


# ---- Sample queries (plain, non-cyclic samples) ----

def _as_sample(sample: Iterable[Token]) -> Sequence[Token]:
    if sample is None:
        raise NullArgumentError("sample", "sample tokens may not be None")
    if isinstance(sample, (list, tuple)):
        return sample
    if isinstance(sample, str):
        # a bare string is one token, not a sequence of characters
        return (sample,)
    return list(sample)


def locate(comparer: TokenComparer, tokens: Sequence[Token], index: Sequence[int],
           sample: Iterable[Token]) -> Span:
    return find_span(comparer, tokens, index, _as_sample(sample))


def positions_of(comparer: TokenComparer, tokens: Sequence[Token], index: Sequence[int],
                 sample: Iterable[Token]) -> FrozenSet[int]:
    """All corpus positions where ``sample`` starts (every position for an empty sample)."""
    span = locate(comparer, tokens, index, sample)
    return frozenset(index[span.first:span.stop])


def first_position_of(comparer: TokenComparer, tokens: Sequence[Token], index: Sequence[int],
                      sample: Iterable[Token]) -> int:
    found = positions_of(comparer, tokens, index, sample)
    return min(found) if found else len(tokens)


def last_position_of(comparer: TokenComparer, tokens: Sequence[Token], index: Sequence[int],
                     sample: Iterable[Token]) -> int:
    found = positions_of(comparer, tokens, index, sample)
    return max(found) if found else len(tokens)


def count(comparer: TokenComparer, tokens: Sequence[Token], index: Sequence[int],
          sample: Iterable[Token]) -> int:
    return locate(comparer, tokens, index, sample).count
