import os

# /* ~~~ generation defaults used by the engine and the front ends ~~~ */
RELEVANT_TOKENS: int = 3
MAX_TOKENS: int = 200          # front ends never pull more than this per request

# Tokenisation: "word" (regex split) or "char"
TOKENIZER: str = "word"
WORD_PATTERN: str = r"\s+"

# Loader
ENCODING: str = "utf-8"
INCLUDE_EXTS = (".txt",)

# Token ordering rule: any name registered in magictext.comparer
COMPARER: str = "ordinal"

# Progress logging (set MAGICTEXT_VERBOSE=1 to enable)
VERBOSE: bool = os.environ.get("MAGICTEXT_VERBOSE") == "1"
