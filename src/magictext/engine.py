# src/magictext/engine.py
from __future__ import annotations

import itertools
import logging
import os
import random
from typing import Iterable, List, Optional

from . import config as CFG
from .comparer import Token
from .loader import load_tokens
from .models import ShatteringOptions
from .pen import Pen
from .storage import load_pen, save_pen
from .tokenizer import LineByLineTokenizer, make_tokenizer

log = logging.getLogger(__name__)


def default_options(tokenizer: str) -> ShatteringOptions:
    # whitespace splitting leaves "" around leading/trailing blanks
    return ShatteringOptions(ignore_empty_tokens=(tokenizer == "word"))


def join_tokens(tokens: Iterable[Token], separator: str, line_end: Optional[str] = "\n") -> str:
    """Glue rendered tokens into text; no separator is put around line ends."""
    out: List[str] = []
    prev_line_end = True
    for tok in tokens:
        text = "" if tok is None else tok
        is_line_end = line_end is not None and tok == line_end
        if out and not prev_line_end and not is_line_end:
            out.append(separator)
        out.append(text)
        prev_line_end = is_line_end
    return "".join(out)


class Engine:
    """
    Thin orchestration layer that glues together:
      - corpus loading (loader + a line-by-line tokenizer),
      - the Pen (sorted index, search and rendering),
      - persistence of the pen (storage).

    Public API (used by CLI/Flask/GUI):
      * build(roots, ...):      shatter -> Pen -> (optional) persist
      * build_from_text(text):  same for an in-memory string
      * load(path):             read a persisted pen
      * render(...) / render_text(...): bounded babble
      * count(query) / positions(query)
      * shutdown():             drop the pen
    """

    # ------------- lifecycle -------------

    def __init__(self) -> None:
        self.pen: Optional[Pen] = None
        self.tokenizer_name: str = CFG.TOKENIZER
        self._tokenizer: LineByLineTokenizer = make_tokenizer(CFG.TOKENIZER)
        self._options: ShatteringOptions = default_options(CFG.TOKENIZER)

    # /* ~~~ Build a pen from source folders ~~~ */
    def build(
        self,
        roots: Iterable[str],
        *,
        tokenizer: str = CFG.TOKENIZER,         # "word" | "char"
        options: Optional[ShatteringOptions] = None,
        sentinel: Token = None,
        comparer: str = CFG.COMPARER,
        intern: bool = False,
        pen_out: Optional[str] = None,          # if provided -> persist the pen
        verbose: bool = False,
    ) -> None:
        self._configure(tokenizer, options, verbose)

        roots = list(roots)
        if not roots:
            raise ValueError("build(): at least one root folder is required")

        log.info("Loading corpus from %s", roots)
        tokens = load_tokens(roots, self._tokenizer, self._options, sentinel=sentinel)
        self._make_pen(tokens, sentinel, comparer, intern, pen_out)

    def build_from_text(
        self,
        text: str,
        *,
        tokenizer: str = CFG.TOKENIZER,
        options: Optional[ShatteringOptions] = None,
        sentinel: Token = None,
        comparer: str = CFG.COMPARER,
        intern: bool = False,
        pen_out: Optional[str] = None,
        verbose: bool = False,
    ) -> None:
        self._configure(tokenizer, options, verbose)
        tokens = self._tokenizer.shatter_to_list(text, self._options)
        self._make_pen(tokens, sentinel, comparer, intern, pen_out)

    # /* ~~~ Load an already-built pen ~~~ */
    def load(self, pen_path: str, *, tokenizer: str = CFG.TOKENIZER, verbose: bool = False) -> None:
        self._configure(tokenizer, None, verbose)
        if not os.path.exists(pen_path):
            raise FileNotFoundError(pen_path)
        log.info("Loading pen from %s", pen_path)
        self.pen = load_pen(pen_path)
        log.info("Engine load() complete: %r", self.pen)

    def save(self, pen_path: str) -> None:
        pen = self._require_pen()
        log.info("Saving pen to %s", pen_path)
        save_pen(pen, pen_path)

    # ------------- queries -------------

    # /* ~~~ Pull at most max_tokens tokens from a fresh render ~~~ */
    def render(
        self,
        relevant_tokens: int = CFG.RELEVANT_TOKENS,
        *,
        max_tokens: int = CFG.MAX_TOKENS,
        seed: Optional[int] = None,
        from_position: Optional[int] = None,
    ) -> List[Token]:
        pen = self._require_pen()
        if max_tokens < 0:
            raise ValueError("render(): max_tokens must be non-negative")
        if seed is None:
            cursor = pen.babble(relevant_tokens, from_position)
        else:
            cursor = pen.render_random(relevant_tokens, random.Random(seed), from_position)
        return list(itertools.islice(cursor, max_tokens))

    def render_text(self, relevant_tokens: int = CFG.RELEVANT_TOKENS, **kwargs) -> str:
        return self.join(self.render(relevant_tokens, **kwargs))

    def join(self, tokens: Iterable[Token]) -> str:
        separator = "" if self.tokenizer_name == "char" else " "
        return join_tokens(tokens, separator, self._options.line_end_token)

    def shatter_query(self, query: str) -> List[Token]:
        opts = ShatteringOptions(ignore_empty_tokens=True, ignore_line_ends=True, ignore_empty_lines=True)
        return self._tokenizer.shatter_to_list(query, opts)

    def count(self, query: str) -> int:
        return self._require_pen().count(self.shatter_query(query))

    def positions(self, query: str) -> List[int]:
        return sorted(self._require_pen().positions_of(self.shatter_query(query)))

    def stats(self) -> dict:
        pen = self._require_pen()
        return {
            "tokens": len(pen),
            "distinct_tokens": pen.distinct_count(),
            "all_sentinels": pen.all_sentinels,
            "comparer": pen.comparer.name,
            "tokenizer": self.tokenizer_name,
        }

    # ------------- teardown -------------

    def shutdown(self) -> None:
        self.pen = None
        log.info("Engine shutdown complete")

    # ------------- internals -------------

    def _configure(self, tokenizer: str, options: Optional[ShatteringOptions], verbose: bool) -> None:
        if verbose or CFG.VERBOSE:
            logging.basicConfig(level=logging.INFO)
        self._tokenizer = make_tokenizer(tokenizer)
        self.tokenizer_name = tokenizer
        self._options = options or default_options(tokenizer)

    def _make_pen(self, tokens: List[Token], sentinel: Token, comparer: str,
                  intern: bool, pen_out: Optional[str]) -> None:
        log.info("Sorting %d token positions", len(tokens))
        pen = Pen(tokens, sentinel=sentinel, comparer=comparer, intern=intern)
        if pen_out:
            log.info("Saving pen to %s", pen_out)
            save_pen(pen, pen_out)
        self.pen = pen
        log.info("Engine build() complete: %r", pen)

    def _require_pen(self) -> Pen:
        if self.pen is None:
            raise RuntimeError("Engine not initialized. Call build() or load() first.")
        return self.pen
