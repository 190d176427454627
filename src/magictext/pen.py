# src/magictext/pen.py
"""
Random text generator over a fixed token context.

A Pen copies the tokens it is given, sorts their positions once (see
``index``) and then answers two kinds of requests:

* queries: where and how often does a sample of tokens occur;
* renders: a lazily pulled stream of tokens in which every next token is a
  uniformly chosen successor of one of the places where the last
  ``relevant_tokens`` emitted tokens occur in the context.

If tokens come from several sources they should be concatenated with the
sentinel between sources, so that rendering never runs from the end of one
source into the beginning of the next. Choosing a sentinel (or the virtual
successor of the last token) ends the render.

Example:
    pen = Pen(["the", "cat", "sat", "the", "cat", "ran"])
    pen.count(["cat"])                       # 2
    list(pen.render(1, lambda n: 0, 0))      # ['the', 'cat', 'ran']
"""
from __future__ import annotations

import operator
import random as _random
from array import array
from typing import FrozenSet, Iterable, Iterator, List, Optional, Union

from .comparer import Token, TokenComparer, get_comparer
from .corpus import Corpus, intern_token
from .errors import NullArgumentError, PenFormatError, RangeError
from .index import build_index, freeze_index
from .models import PenRecord, RenderState
from .rng import Picker, default_pick, random_picker
from . import search

_PICK_OUT_OF_RANGE = "picker must return an integer from [0, n) (0 when n == 0)"


class RenderCursor(Iterator[Token]):
    """
    One render request: Initializing -> Streaming -> Terminated.

    Holds everything that survives between two pulls: the ring buffer of the
    last ``relevant_tokens`` emitted tokens, its rotation cursor and the state.
    The pen itself is only read. An exception raised while producing a token
    (a bad picker result) terminates the cursor; tokens already returned stay
    valid.
    """

    def __init__(self, pen: "Pen", relevant_tokens: int, picker: Picker,
                 from_position: Optional[int] = None) -> None:
        self._corpus = pen.corpus
        self._index = pen._index
        self.relevant_tokens = relevant_tokens
        self._picker = picker
        self._from_position = from_position
        self._capacity = max(relevant_tokens, 1)
        self._recent: List[Token] = []
        self._cycle = 0
        self._state = RenderState.INITIALIZING
        self.emitted = 0

    # ---- Introspection ----
    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def window(self) -> List[Token]:
        """The most recent tokens used as context, oldest first."""
        return self._recent[self._cycle:] + self._recent[:self._cycle]

    # ---- Iterator protocol ----
    def __iter__(self) -> "RenderCursor":
        return self

    def __next__(self) -> Token:
        if self._state is RenderState.TERMINATED:
            raise StopIteration
        try:
            position = self._next_position()
        except Exception:
            self._state = RenderState.TERMINATED
            raise
        token = self._corpus.token_at(position)
        if self._corpus.is_sentinel(token):
            self._state = RenderState.TERMINATED
            raise StopIteration
        self._push(token)
        self.emitted += 1
        return token

    def close(self) -> None:
        """Stop the render early; nothing else needs releasing."""
        self._state = RenderState.TERMINATED

    # ---- Steps ----
    def _next_position(self) -> int:
        n_tokens = len(self._corpus.tokens)
        if self._state is RenderState.INITIALIZING:
            if self._from_position is None:
                self._state = RenderState.STREAMING
                pick = self._pick(n_tokens + 1)
                return self._index[pick] if pick < n_tokens else n_tokens
            if self.emitted < self._capacity:
                # copy the first max(k, 1) tokens straight from the context
                return self._from_position + self.emitted
            self._state = RenderState.STREAMING

        if self.relevant_tokens == 0:
            p, n, d = 0, n_tokens + 1, 0
        else:
            p, n = search.find_span(self._corpus.comparer, self._corpus.tokens, self._index,
                                    self._recent, self._cycle)
            # until the window is full, every emitted token is relevant
            d = len(self._recent)
        slot = p + self._pick(n)
        return self._index[slot] + d if slot < n_tokens else n_tokens

    def _pick(self, n: int) -> int:
        pick = operator.index(self._picker(n))
        if pick < 0 or pick >= max(n, 1):
            raise RangeError("picker", pick, _PICK_OUT_OF_RANGE)
        return pick

    def _push(self, token: Token) -> None:
        if self.relevant_tokens == 0:
            return
        if len(self._recent) < self._capacity:
            self._recent.append(token)
        else:
            self._recent[self._cycle] = token
            self._cycle = (self._cycle + 1) % self._capacity


class Pen:
    """
    Random text generator built from a token context.

    Parameters
    ----------
    tokens : iterable of str | None
        The context. Copied; later changes to the source are not seen.
    sentinel : str | None
        Ending token; never emitted, chosen -> render stops.
    comparer : TokenComparer | str | None
        Token ordering rule or its registered name (default ``ordinal``).
    intern : bool
        Canonicalise the copied tokens with ``sys.intern``.
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        sentinel: Token = None,
        comparer: Union[TokenComparer, str, None] = None,
        intern: bool = False,
    ) -> None:
        corpus = Corpus.build(tokens, sentinel=sentinel, comparer=comparer, intern=intern)
        self._corpus = corpus
        self._index = build_index(corpus.tokens, corpus.comparer)

    @classmethod
    def _from_parts(cls, corpus: Corpus, index: array) -> "Pen":
        pen = cls.__new__(cls)
        pen._corpus = corpus
        pen._index = index
        return pen

    # ---- Properties ----
    @property
    def corpus(self) -> Corpus:
        return self._corpus

    @property
    def context(self):
        return self._corpus.tokens

    @property
    def index(self) -> memoryview:
        return memoryview(self._index).toreadonly()

    @property
    def sentinel(self) -> Token:
        return self._corpus.sentinel

    @property
    def comparer(self) -> TokenComparer:
        return self._corpus.comparer

    @property
    def intern(self) -> bool:
        return self._corpus.intern

    @property
    def all_sentinels(self) -> bool:
        return self._corpus.all_sentinels

    def __len__(self) -> int:
        return len(self._corpus)

    def __repr__(self) -> str:
        return (f"Pen(tokens={len(self)}, sentinel={self.sentinel!r}, "
                f"comparer={self.comparer.name!r}, intern={self.intern})")

    # ---- Copies and records ----
    def copy(self, intern: Optional[bool] = None) -> "Pen":
        """
        Cheap copy sharing the context and the index. Asking for another
        interning policy copies the context; the index is still shared since
        interning never reorders tokens.
        """
        corpus = self._corpus if intern is None else self._corpus.with_intern(intern)
        return Pen._from_parts(corpus, self._index)

    def to_record(self) -> PenRecord:
        return PenRecord(
            intern=self.intern,
            comparer=self.comparer.name,
            sentinel=self.sentinel,
            context=self.context,
            index=tuple(self._index),
            all_sentinels=self.all_sentinels,
        )

    @classmethod
    def from_record(cls, record: PenRecord) -> "Pen":
        """Rebuild a pen from a record without sorting the context again."""
        if record is None:
            raise NullArgumentError("record")
        if len(record.index) != len(record.context):
            raise PenFormatError(
                f"index has {len(record.index)} slots for {len(record.context)} tokens")
        if sorted(record.index) != list(range(len(record.context))):
            raise PenFormatError("index is not a permutation of the token positions")
        comparer = get_comparer(record.comparer)
        if record.intern:
            context = tuple(intern_token(t) for t in record.context)
            sentinel = intern_token(record.sentinel)
        else:
            context = tuple(record.context)
            sentinel = record.sentinel
        corpus = Corpus(context, sentinel, comparer, bool(record.intern), bool(record.all_sentinels))
        return cls._from_parts(corpus, freeze_index(record.index))

    # ---- Queries ----
    def positions_of(self, sample: Iterable[Token]) -> FrozenSet[int]:
        return search.positions_of(self.comparer, self.context, self._index, sample)

    def first_position_of(self, sample: Iterable[Token]) -> int:
        return search.first_position_of(self.comparer, self.context, self._index, sample)

    def last_position_of(self, sample: Iterable[Token]) -> int:
        return search.last_position_of(self.comparer, self.context, self._index, sample)

    def count(self, sample: Iterable[Token]) -> int:
        return search.count(self.comparer, self.context, self._index, sample)

    def distinct_count(self) -> int:
        """Number of tokens that differ under the pen's comparer."""
        tokens, index = self.context, self._index
        # sorted suffixes group equal first tokens together
        return sum(1 for i in range(len(index))
                   if i == 0 or not self.comparer.equals(tokens[index[i - 1]], tokens[index[i]]))

    # ---- Rendering ----
    def render(self, relevant_tokens: int, picker: Picker,
               from_position: Optional[int] = None) -> RenderCursor:
        """
        Start a render request.

        ``picker(n)`` must return an integer in ``[0, max(n, 1))``; it is the
        only source of randomness. With ``from_position`` the first
        ``max(relevant_tokens, 1)`` tokens are copied from the context starting
        there (``len(pen)`` renders nothing). Argument errors are raised here;
        a bad picker result is raised by the pull that called the picker.
        """
        if picker is None:
            raise NullArgumentError("picker", "picker function may not be None")
        if relevant_tokens < 0:
            raise RangeError("relevant_tokens", relevant_tokens,
                             "number of relevant tokens must be non-negative")
        if from_position is not None and not 0 <= from_position <= len(self):
            raise RangeError("from_position", from_position,
                             "first position must be between 0 and the number of tokens inclusive")
        return RenderCursor(self, relevant_tokens, picker, from_position)

    def render_random(self, relevant_tokens: int, random: _random.Random,
                      from_position: Optional[int] = None) -> RenderCursor:
        return self.render(relevant_tokens, random_picker(random), from_position)

    def babble(self, relevant_tokens: int, from_position: Optional[int] = None) -> RenderCursor:
        """Render with this thread's default generator (not reproducible)."""
        return self.render(relevant_tokens, default_pick, from_position)
