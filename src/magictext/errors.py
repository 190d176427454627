# src/magictext/errors.py
"""
Exception types raised by the pen and its collaborators.

Both concrete errors also derive from the matching builtin (TypeError /
ValueError) so callers that only know the builtins still catch them.
"""
from __future__ import annotations


class MagicTextError(Exception):
    """Root of every error raised on purpose by this package."""


class NullArgumentError(MagicTextError, TypeError):
    """A required collaborator (tokens, picker, comparer, input...) is None."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"{name} may not be None")


class RangeError(MagicTextError, ValueError):
    """An integer argument (or a picker result) is outside its contracted range."""

    def __init__(self, name: str, value: object, message: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"{message} ({name}={value!r})")


class PenFormatError(MagicTextError, ValueError):
    """Persisted bytes do not hold a valid pen record."""
