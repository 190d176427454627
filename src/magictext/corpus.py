# src/magictext/corpus.py
from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from .comparer import Token, TokenComparer, get_comparer
from .errors import NullArgumentError


def intern_token(token: Token) -> Token:
    """Canonicalise a token (``sys.intern``); None and non-str values pass through."""
    return sys.intern(token) if type(token) is str else token


@dataclass(frozen=True, slots=True)
class Corpus:
    """
    The immutable token context a pen draws from.

    Attributes
    ----------
    tokens : tuple
        Defensive copy of the tokens passed in, 0-indexed, never mutated.
    sentinel : str | None
        Tokens comparing equal to it end generation and are never emitted.
    comparer : TokenComparer
        The only rule used to compare tokens.
    intern : bool
        Whether ``tokens`` (and ``sentinel``) were canonicalised with
        ``sys.intern``. Interning never changes the order of tokens.
    all_sentinels : bool
        True iff every token equals the sentinel (vacuously true when empty).
    """
    tokens: Tuple[Token, ...]
    sentinel: Token
    comparer: TokenComparer
    intern: bool
    all_sentinels: bool

    @classmethod
    def build(
        cls,
        tokens: Iterable[Token],
        sentinel: Token = None,
        comparer: Union[str, TokenComparer, None] = None,
        intern: bool = False,
    ) -> "Corpus":
        if tokens is None:
            raise NullArgumentError("tokens", "token sequence may not be None")
        cmp = get_comparer(comparer)
        if intern:
            sentinel = intern_token(sentinel)
            context = tuple(intern_token(t) for t in tokens)
        else:
            context = tuple(tokens)
        all_sentinels = all(cmp.equals(t, sentinel) for t in context)
        return cls(context, sentinel, cmp, bool(intern), all_sentinels)

    def with_intern(self, intern: bool) -> "Corpus":
        """Same tokens under another interning policy (fresh copy if it changes)."""
        if bool(intern) == self.intern:
            return self
        if intern:
            return Corpus(tuple(intern_token(t) for t in self.tokens),
                          intern_token(self.sentinel), self.comparer, True, self.all_sentinels)
        return Corpus(tuple(t for t in self.tokens), self.sentinel, self.comparer, False, self.all_sentinels)

    def __len__(self) -> int:
        return len(self.tokens)

    def token_at(self, position: int) -> Token:
        """Token at ``position``; the position one past the end reads as the sentinel."""
        return self.tokens[position] if position < len(self.tokens) else self.sentinel

    def is_sentinel(self, token: Token) -> bool:
        return self.comparer.equals(token, self.sentinel)

