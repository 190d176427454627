from __future__ import annotations
import argparse
from flask import Flask, request, jsonify, Response
from magictext import Engine, MagicTextError
from magictext.config import RELEVANT_TOKENS, MAX_TOKENS

app = Flask(__name__)
_engine: Engine | None = None


def _bad_request(message: str):
    return jsonify({"ok": False, "error": message}), 400


def _not_ready():
    return jsonify({"ok": False, "error": "engine not initialized"}), 503

# ---------- API ----------
@app.get("/api/render")
def api_render():
    if _engine is None or _engine.pen is None:
        return _not_ready()
    try:
        k = int(request.args.get("k", RELEVANT_TOKENS))
        n = int(request.args.get("n", MAX_TOKENS))
        seed = request.args.get("seed", None)
        seed = int(seed) if seed not in (None, "") else None
        start = request.args.get("from", None)
        start = int(start) if start not in (None, "") else None
    except ValueError:
        return _bad_request("k, n, seed and from must be integers")
    # never let a request pull an unbounded stream
    n = max(0, min(n, MAX_TOKENS))
    try:
        tokens = _engine.render(k, max_tokens=n, seed=seed, from_position=start)
    except MagicTextError as exc:
        return _bad_request(str(exc))
    return jsonify({"tokens": tokens, "text": _engine.join(tokens)})


@app.get("/api/count")
def api_count():
    if _engine is None or _engine.pen is None:
        return _not_ready()
    q = request.args.get("q", "", type=str)
    if not q.strip():
        return jsonify({"query": q, "count": 0, "positions": []})
    positions = _engine.positions(q)
    return jsonify({"query": q, "count": len(positions), "positions": positions})


@app.get("/health")
def health():
    if _engine is None or _engine.pen is None:
        return _not_ready()
    return jsonify({"ok": True, **_engine.stats()})

# ---------- UI ----------
PAGE = """<!doctype html>
<html lang="en"><head><meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>MagicText</title>
<style>
body{margin:0;padding:28px 16px;background:#10131a;color:#d5dbe5;font:15px/1.5 system-ui,sans-serif}
main{max-width:900px;margin:0 auto}
fieldset{border:1px solid #262d3a;border-radius:12px;margin:0 0 14px;padding:12px 14px}
legend{color:#7d8799;padding:0 6px}
input{background:#0c0f15;color:inherit;border:1px solid #262d3a;border-radius:8px;padding:7px 9px;width:84px}
input.wide{width:28em}
button{background:#1b2330;color:#8fd3ff;border:1px solid #2c3748;border-radius:8px;padding:7px 14px;cursor:pointer}
#text{white-space:pre-wrap;min-height:140px}
.note{color:#7d8799;font-size:13px}
</style></head>
<body><main>
<h1>MagicText</h1>
<form id="render"><fieldset><legend>render</legend>
  k <input name="k" type="number" min="0" value="%(k)d">
  tokens <input name="n" type="number" min="0" max="%(max)d" value="%(n)d">
  seed <input name="seed" type="number" placeholder="random">
  from <input name="from" type="number" min="0" placeholder="-">
  <button>Render</button>
</fieldset></form>
<form id="count"><fieldset><legend>count a phrase</legend>
  <input class="wide" name="q" placeholder="to be"> <button>Count</button>
  <span id="hits" class="note"></span>
</fieldset></form>
<div id="text" class="note">Press Render to babble.</div>
<script>
function query(form){
  const p = new URLSearchParams();
  for (const [key, value] of new FormData(form)) if (value !== "") p.set(key, value);
  return p.toString();
}
document.getElementById("render").onsubmit = async (ev) => {
  ev.preventDefault();
  const r = await fetch("/api/render?" + query(ev.target));
  const data = await r.json();
  const out = document.getElementById("text");
  out.className = r.ok ? "" : "note";
  out.textContent = r.ok ? (data.text || "(the first pick ended the text)") : data.error;
};
document.getElementById("count").onsubmit = async (ev) => {
  ev.preventDefault();
  const data = await (await fetch("/api/count?" + query(ev.target))).json();
  document.getElementById("hits").textContent = data.count + " occurrence(s)";
};
</script>
</main></body></html>
"""


@app.get("/")
def home():
    page = PAGE % {"k": RELEVANT_TOKENS, "n": min(100, MAX_TOKENS), "max": MAX_TOKENS}
    return Response(page, mimetype="text/html")


def _start_engine(args, ap: argparse.ArgumentParser) -> Engine:
    eng = Engine()
    if args.load:
        if not args.pen:
            ap.error("--load requires --pen")
        eng.load(args.pen, tokenizer=args.tokenizer, verbose=args.verbose)
        return eng
    if not args.roots:
        ap.error("--build requires --roots")
    comparer = "ordinal_ignore_case" if args.ignore_case else "ordinal"
    eng.build(args.roots, tokenizer=args.tokenizer, comparer=comparer,
              pen_out=args.pen, verbose=args.verbose)
    return eng


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Serve the MagicText babbler over HTTP (Flask)")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--build", action="store_true", help="build a pen from --roots")
    src.add_argument("--load", action="store_true", help="load the pen file given by --pen")
    ap.add_argument("--roots", nargs="+", default=[], help="folders (or files) with .txt sources")
    ap.add_argument("--pen", default=None, help="pen file to load, or to save after --build")
    ap.add_argument("--tokenizer", choices=["word", "char"], default="word")
    ap.add_argument("--ignore-case", action="store_true")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    global _engine
    _engine = _start_engine(args, ap)
    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        _engine.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
