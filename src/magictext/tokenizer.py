# src/magictext/tokenizer.py
"""
Line-by-line tokenisers ("shattering" raw text into tokens).

Text is read one line at a time; CR, LF and CRLF all end a line. Each line is
split by the concrete tokeniser's ``shatter_line`` and then post-processed
according to ShatteringOptions:

  * empty tokens are dropped when ``ignore_empty_tokens``;
  * a line producing no tokens becomes ``empty_line_token``, or disappears
    entirely (no line end either) when ``ignore_empty_lines``;
  * ``line_end_token`` follows every remaining line, the last one included,
    unless ``ignore_line_ends``.
"""
from __future__ import annotations

import io
import os
import re
from abc import ABC, abstractmethod
from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional, TextIO, Union

from . import config as CFG
from .comparer import Token
from .errors import NullArgumentError
from .models import ShatteringOptions

_LINE_BREAK = re.compile(r"\r\n|\r|\n")

Source = Union[str, TextIO, Iterable[str]]


def default_is_empty_token(token: Token) -> bool:
    return token is None or token == ""


def _iter_lines(source: Source) -> Iterator[str]:
    if isinstance(source, str):
        lines = _LINE_BREAK.split(source)
        # a final line break does not open another line
        if lines and lines[-1] == "":
            lines.pop()
        yield from lines
        return
    pending, after_cr = "", False
    for raw in source:
        if after_cr and raw.startswith("\n"):
            # second half of a CRLF split across two reads
            raw = raw[1:]
        after_cr = raw.endswith("\r")
        lines = _LINE_BREAK.split(pending + raw)
        pending = lines.pop()
        yield from lines
    if pending:
        yield pending


class LineByLineTokenizer(ABC):
    """Base class; subclasses only have to split a single line."""

    def __init__(self, is_empty_token: Optional[Callable[[Token], bool]] = None) -> None:
        self.is_empty_token = is_empty_token or default_is_empty_token

    @abstractmethod
    def shatter_line(self, line: str) -> Iterable[Token]:
        ...

    def shatter(self, source: Source, options: Optional[ShatteringOptions] = None) -> Iterator[Token]:
        """Lazily yield the tokens of ``source`` (a string, a text stream or other chunks of text)."""
        if source is None:
            raise NullArgumentError("source", "input text may not be None")
        return self._shatter(source, options or ShatteringOptions())

    def _shatter(self, source: Source, options: ShatteringOptions) -> Iterator[Token]:
        add_line_end = False
        for line in _iter_lines(source):
            if add_line_end and not options.ignore_line_ends:
                yield options.line_end_token
            line_tokens = self.shatter_line(line)
            if line_tokens is None:
                raise TypeError(f"{type(self).__name__}.shatter_line() returned None")
            produced = 0
            for token in line_tokens:
                if options.ignore_empty_tokens and self.is_empty_token(token):
                    continue
                produced += 1
                yield token
            if produced == 0:
                if options.ignore_empty_lines:
                    add_line_end = False
                    continue
                yield options.empty_line_token
            add_line_end = True
        if add_line_end and not options.ignore_line_ends:
            yield options.line_end_token

    def shatter_to_list(self, source: Source, options: Optional[ShatteringOptions] = None) -> List[Token]:
        return list(self.shatter(source, options))

    def shatter_file(self, path: Union[str, os.PathLike], options: Optional[ShatteringOptions] = None,
                     encoding: str = CFG.ENCODING) -> List[Token]:
        with open(path, "r", encoding=encoding, errors="ignore", newline=None) as f:
            return list(self.shatter(f, options))

    def shatter_binary(self, stream: BinaryIO, options: Optional[ShatteringOptions] = None,
                       encoding: str = CFG.ENCODING) -> List[Token]:
        """Decode a binary stream (bad bytes are skipped) and shatter it. The stream stays open."""
        if stream is None:
            raise NullArgumentError("stream", "input stream may not be None")
        text = io.TextIOWrapper(stream, encoding=encoding, errors="ignore", newline="")
        try:
            return list(self.shatter(text, options))
        finally:
            text.detach()

    def shatter_bytes(self, data: bytes, options: Optional[ShatteringOptions] = None,
                      encoding: str = CFG.ENCODING) -> List[Token]:
        if data is None:
            raise NullArgumentError("data", "input bytes may not be None")
        return self.shatter_binary(io.BytesIO(data), options, encoding)


class CharTokenizer(LineByLineTokenizer):
    """One token per character."""

    def shatter_line(self, line: str) -> Iterable[Token]:
        return list(line)


class RegexSplitTokenizer(LineByLineTokenizer):
    """Splits each line on a regular expression (whitespace by default)."""

    def __init__(self, pattern: Union[str, "re.Pattern[str]"] = CFG.WORD_PATTERN,
                 is_empty_token: Optional[Callable[[Token], bool]] = None) -> None:
        super().__init__(is_empty_token)
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def shatter_line(self, line: str) -> Iterable[Token]:
        return self.pattern.split(line)


def make_tokenizer(name: str = CFG.TOKENIZER) -> LineByLineTokenizer:
    if name == "word":
        return RegexSplitTokenizer()
    if name == "char":
        return CharTokenizer()
    raise ValueError(f"Unsupported tokenizer: {name!r} (expected 'word' or 'char')")
