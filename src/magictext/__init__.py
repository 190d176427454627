"""
magictext: corpus-driven random text generation ("n-gram babbling").

A Pen copies a sequence of tokens, sorts the token positions by the suffix
starting at each of them and then renders new text one token at a time: the
next token is a uniformly chosen successor of one of the places where the last
``relevant_tokens`` rendered tokens occur in the corpus. Occurrences are found
with a binary search over the sorted positions rather than an n-gram table, so
any window size can be used with the same index.

The package is split into:
- Token ordering rules and the immutable corpus
- The sorted index builder and the pattern locator
- The Pen (queries + lazy render cursors) and the default random source
- Collaborators: tokenisers, folder loader, pen persistence, Engine

Example Usage:
    from magictext import Pen, CharTokenizer

    tokens = CharTokenizer().shatter_to_list("abracadabra")
    pen = Pen(tokens)
    pen.count(["a", "b"])                    # 2
    "".join(pen.babble(3))                   # e.g. 'abracad'
"""

# src/magictext/__init__.py
from .comparer import TokenComparer, get_comparer, register_comparer, ORDINAL, ORDINAL_IGNORE_CASE
from .errors import MagicTextError, NullArgumentError, RangeError, PenFormatError
from .models import ShatteringOptions, Span, RenderState, PenRecord
from .pen import Pen, RenderCursor
from .tokenizer import LineByLineTokenizer, CharTokenizer, RegexSplitTokenizer, make_tokenizer
from .storage import encode_pen, decode_pen, save_pen, load_pen
from .engine import Engine

__version__ = "1.0.0"
__all__ = [
    "Pen", "RenderCursor", "Engine",
    "TokenComparer", "get_comparer", "register_comparer", "ORDINAL", "ORDINAL_IGNORE_CASE",
    "MagicTextError", "NullArgumentError", "RangeError", "PenFormatError",
    "ShatteringOptions", "Span", "RenderState", "PenRecord",
    "LineByLineTokenizer", "CharTokenizer", "RegexSplitTokenizer", "make_tokenizer",
    "encode_pen", "decode_pen", "save_pen", "load_pen",
]
