# src/magictext/comparer.py
"""
Token ordering rules.

Every comparison the pen makes between two tokens goes through a
TokenComparer, never through ``==`` or identity. A comparer is a total order
plus the equality it induces; ``None`` is a valid token and sorts before every
string (as in an ordinal string comparison).

Comparers are looked up by name so that a persisted pen can name the rule its
index was sorted with. ``ordinal`` and ``ordinal_ignore_case`` are built in;
register_comparer() adds more.
"""
from __future__ import annotations

from typing import Callable, Dict, Optional, Union

from .errors import NullArgumentError

Token = Optional[str]


class TokenComparer:
    """
    Three-way comparison of tokens through a sort key.

    ``key`` maps a non-None token to the value actually compared; two tokens
    are equal exactly when their keys are equal.
    """
    __slots__ = ("name", "_key")

    def __init__(self, name: str, key: Callable[[str], object] | None = None) -> None:
        if not name:
            raise ValueError("comparer name must be a non-empty string")
        self.name = name
        self._key = key

    def compare(self, a: Token, b: Token) -> int:
        if a is None or b is None:
            # None sorts first; None == None
            return (a is not None) - (b is not None)
        if self._key is not None:
            a = self._key(a)
            b = self._key(b)
        if a < b:
            return -1
        if a > b:
            return 1
        return 0

    def equals(self, a: Token, b: Token) -> bool:
        return self.compare(a, b) == 0

    def __repr__(self) -> str:
        return f"TokenComparer({self.name!r})"


ORDINAL = TokenComparer("ordinal")
ORDINAL_IGNORE_CASE = TokenComparer("ordinal_ignore_case", str.casefold)

_REGISTRY: Dict[str, TokenComparer] = {
    ORDINAL.name: ORDINAL,
    ORDINAL_IGNORE_CASE.name: ORDINAL_IGNORE_CASE,
}


def register_comparer(comparer: TokenComparer) -> TokenComparer:
    """Make ``comparer`` resolvable by name (needed to load pens sorted with it)."""
    if comparer is None:
        raise NullArgumentError("comparer")
    existing = _REGISTRY.get(comparer.name)
    if existing is not None and existing is not comparer:
        raise ValueError(f"a different comparer is already registered as {comparer.name!r}")
    _REGISTRY[comparer.name] = comparer
    return comparer


def get_comparer(comparer: Union[str, TokenComparer, None] = None) -> TokenComparer:
    """Resolve a comparer object or registered name; None means ``ordinal``."""
    if comparer is None:
        return ORDINAL
    if isinstance(comparer, TokenComparer):
        return comparer
    try:
        return _REGISTRY[comparer]
    except KeyError:
        raise KeyError(f"unknown token comparer: {comparer!r}") from None


def comparer_names() -> list[str]:
    return sorted(_REGISTRY)
