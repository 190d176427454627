from __future__ import annotations
import argparse, json
from magictext import Engine
from magictext.config import RELEVANT_TOKENS, MAX_TOKENS


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="MagicText CLI (Engine-backed n-gram babbler)")
    g = p.add_mutually_exclusive_group(required=True)
    g.add_argument("--build", action="store_true", help="Build a pen from --roots")
    g.add_argument("--load", action="store_true", help="Load an existing pen file (--pen)")

    p.add_argument("--roots", nargs="+", default=[], help="Folders (or files) to scan for .txt")
    p.add_argument("--pen", default=None, help="Pen file to load")
    p.add_argument("--save", default=None, help="Write the built pen to this path")
    p.add_argument("--tokenizer", choices=["word", "char"], default="word")
    p.add_argument("--ignore-case", action="store_true", help="Compare tokens case-insensitively")
    p.add_argument("--intern", action="store_true", help="Intern token strings")
    p.add_argument("-k", type=int, default=RELEVANT_TOKENS, help="Relevant tokens (context window)")
    p.add_argument("-n", "--max-tokens", type=int, default=MAX_TOKENS, help="Stop after this many tokens")
    p.add_argument("--seed", type=int, default=None, help="Seed for reproducible output")
    p.add_argument("--from", dest="from_position", type=int, default=None,
                   help="Start by copying tokens from this corpus position")
    p.add_argument("--count", default=None, help="Count occurrences of a phrase instead of rendering")
    p.add_argument("--json", action="store_true", help="Emit JSON")
    p.add_argument("--repl", action="store_true", help="Interactive loop after init")
    p.add_argument("--verbose", action="store_true")

    args = p.parse_args(argv)

    eng = Engine()
    try:
        if args.build:
            if not args.roots:
                p.error("--build requires --roots")
            eng.build(
                roots=args.roots,
                tokenizer=args.tokenizer,
                comparer="ordinal_ignore_case" if args.ignore_case else "ordinal",
                intern=args.intern,
                pen_out=args.save,
                verbose=args.verbose,
            )
        else:
            if not args.pen:
                p.error("--load requires --pen")
            eng.load(args.pen, tokenizer=args.tokenizer, verbose=args.verbose)

        def run_count(q: str):
            n = eng.count(q)
            if args.json:
                print(json.dumps({"query": q, "count": n, "positions": eng.positions(q)}, ensure_ascii=False))
            else:
                print(f"{n} occurrence(s) of {q!r}")

        def run_render():
            tokens = eng.render(args.k, max_tokens=args.max_tokens, seed=args.seed,
                                from_position=args.from_position)
            if args.json:
                print(json.dumps({"tokens": tokens, "text": eng.join(tokens)}, ensure_ascii=False, indent=2))
            else:
                print(eng.join(tokens) if tokens else "(nothing rendered)")

        if args.count is not None:
            run_count(args.count)
        else:
            run_render()

        if args.repl:
            print("Enter a phrase to count it, or an empty line to babble again. Ctrl-D exits.")
            while True:
                try:
                    q = input("> ").strip()
                except (EOFError, KeyboardInterrupt):
                    break
                if q:
                    run_count(q)
                else:
                    run_render()

        return 0
    finally:
        eng.shutdown()

if __name__ == "__main__":
    raise SystemExit(main())
