# src/magictext/models.py
"""
Data models shared by the pen, the tokenisers and the persistence layer.

This module defines small, focused data containers:

- ShatteringOptions: how raw text is split into tokens (line ends, empty lines).
- Span: the result of locating a sample in the sorted index.
- RenderState: the states of a render request.
- PenRecord: the exact tuple that is persisted for a pen.

These classes do not contain business logic; they only structure the data so
that tokenising, searching and persisting remain simple and predictable.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple


@dataclass(frozen=True, slots=True)
class ShatteringOptions:
    """
    Options applied by every line-by-line tokeniser.

    Attributes
    ----------
    ignore_empty_tokens : bool
        Drop tokens the tokeniser considers empty (by default None and "").
    ignore_line_ends : bool
        Do not emit ``line_end_token`` after each line.
    ignore_empty_lines : bool
        Lines that produce no tokens are skipped entirely (no
        ``empty_line_token`` and no line end for them).
    line_end_token : str | None
        Token emitted at the end of each line.
    empty_line_token : str | None
        Token emitted in place of an empty line.
    """
    ignore_empty_tokens: bool = False
    ignore_line_ends: bool = False
    ignore_empty_lines: bool = False
    line_end_token: Optional[str] = "\n"
    empty_line_token: Optional[str] = ""


class Span(NamedTuple):
    """Slots ``[first, first + count)`` of the sorted index that match a sample."""
    first: int
    count: int

    @property
    def stop(self) -> int:
        return self.first + self.count


class RenderState(enum.Enum):
    INITIALIZING = "initializing"
    STREAMING = "streaming"
    TERMINATED = "terminated"


@dataclass(frozen=True, slots=True)
class PenRecord:
    """
    Everything needed to rebuild a pen without sorting the corpus again.

    ``index`` must be the sorted permutation previously computed for
    ``context`` under the comparer named ``comparer``; it is trusted as is.
    """
    intern: bool
    comparer: str
    sentinel: Optional[str]
    context: Tuple[Optional[str], ...]
    index: Tuple[int, ...]
    all_sentinels: bool
