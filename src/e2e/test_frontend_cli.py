# src/e2e/test_frontend_cli.py

import json
from pathlib import Path

import pytest

from frontend.__main__ import main


def _seed(tmp: Path) -> str:
    root = tmp / "Archive"; root.mkdir()
    (root / "h.txt").write_text("To be or not to be that is the question\n", encoding="utf-8")
    return str(root)


@pytest.mark.e2e
def test_cli_count_json(tmp_path: Path, capsys):
    root = _seed(tmp_path)
    assert main(["--build", "--roots", root, "--count", "to be", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data == {"query": "to be", "count": 1, "positions": [4]}


@pytest.mark.e2e
def test_cli_count_text_ignore_case(tmp_path: Path, capsys):
    root = _seed(tmp_path)
    assert main(["--build", "--roots", root, "--ignore-case", "--count", "TO BE"]) == 0
    assert capsys.readouterr().out.strip() == "2 occurrence(s) of 'TO BE'"


@pytest.mark.e2e
def test_cli_render_is_reproducible(tmp_path: Path, capsys):
    root = _seed(tmp_path)
    args = ["--build", "--roots", root, "-k", "2", "-n", "15", "--seed", "8", "--json"]
    assert main(args) == 0
    first = json.loads(capsys.readouterr().out)
    assert main(args) == 0
    assert json.loads(capsys.readouterr().out) == first
    assert len(first["tokens"]) <= 15


@pytest.mark.e2e
def test_cli_save_then_load(tmp_path: Path, capsys):
    root = _seed(tmp_path)
    pen = str(tmp_path / "h.pen")
    assert main(["--build", "--roots", root, "--save", pen, "--from", "0", "-k", "1", "-n", "3",
                 "--seed", "1"]) == 0
    built = capsys.readouterr().out
    assert built.startswith("To be")

    assert main(["--load", "--pen", pen, "--from", "0", "-k", "1", "-n", "3", "--seed", "1"]) == 0
    assert capsys.readouterr().out == built


@pytest.mark.e2e
def test_cli_repl(tmp_path: Path, capsys, monkeypatch):
    root = _seed(tmp_path)
    lines = iter(["that is"])

    def fake_input(prompt=""):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)
    assert main(["--build", "--roots", root, "--count", "the", "--repl"]) == 0
    out = capsys.readouterr().out
    assert "1 occurrence(s) of 'the'" in out
    assert "1 occurrence(s) of 'that is'" in out


@pytest.mark.e2e
@pytest.mark.parametrize("argv", [["--build"], ["--load"], ["--roots", "x"]])
def test_cli_usage_errors(argv, capsys):
    with pytest.raises(SystemExit) as err:
        main(argv)
    assert err.value.code == 2
