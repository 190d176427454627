from __future__ import annotations
import logging
import os
from typing import Iterable, List, Optional

from .comparer import Token
from .config import ENCODING, INCLUDE_EXTS
from .models import ShatteringOptions
from .tokenizer import LineByLineTokenizer

log = logging.getLogger(__name__)

PROGRESS_EVERY_FILES = 500


def _iter_txt_files(roots: Iterable[str]) -> List[str]:
    """Text files under each root (a root may also be a single file), sorted per root."""
    files: List[str] = []
    for root in roots:
        root = os.path.abspath(root)
        if os.path.isfile(root):
            files.append(root)
            continue
        if not os.path.isdir(root):
            raise FileNotFoundError(root)
        found = []
        for dirpath, _, filenames in os.walk(root):
            for fn in filenames:
                if fn.lower().endswith(INCLUDE_EXTS):
                    found.append(os.path.join(dirpath, fn))
        # stable order for reproducibility
        files.extend(sorted(found))
    return files


def _rel_to_any_root(path: str, roots_abs: List[str]) -> str:
    """Return the shortest relative path to any of the given absolute roots."""
    best = path
    for r in roots_abs:
        try:
            rel = os.path.relpath(path, r)
            if len(rel) < len(best):
                best = rel
        except ValueError:
            pass
    return best.replace("\\", "/")


def load_tokens(roots: Iterable[str],
                tokenizer: LineByLineTokenizer,
                options: Optional[ShatteringOptions] = None,
                sentinel: Token = None) -> List[Token]:
    """
    Shatter every *.txt file under ``roots`` and concatenate the tokens, with
    ``sentinel`` between consecutive files so a render never continues from
    the end of one file into the start of the next.
    """
    roots = list(roots)
    roots_abs = [os.path.abspath(p) for p in roots]
    tokens: List[Token] = []
    file_count = 0
    for path in _iter_txt_files(roots):
        try:
            file_tokens = tokenizer.shatter_file(path, options, encoding=ENCODING)
        except OSError as exc:
            log.warning("Skipping unreadable file %s: %s", path, exc)
            continue
        if file_count:
            tokens.append(sentinel)
        tokens.extend(file_tokens)
        file_count += 1
        log.debug("[shattered] %s tokens=%d", _rel_to_any_root(path, roots_abs), len(file_tokens))
        if file_count % PROGRESS_EVERY_FILES == 0:
            log.info("[scanned] files=%d tokens=%d", file_count, len(tokens))

    log.info("[done] files=%d tokens=%d", file_count, len(tokens))
    return tokens
