# src/e2e/test_storage.py

import os
import random
import struct
from itertools import islice
from pathlib import Path

import pytest

import magictext.pen as pen_module
from magictext import Pen, PenFormatError, TokenComparer, decode_pen, encode_pen, load_pen, save_pen


def _render(pen: Pen, k: int, seed: int, start=None):
    return list(islice(pen.render_random(k, random.Random(seed), start), 300))


def test_decoded_pen_renders_like_the_original():
    text = "to be or not to be that is the question whether tis nobler in the mind to suffer".split()
    pen = Pen(text, sentinel="|", comparer="ordinal_ignore_case")
    back = decode_pen(encode_pen(pen))

    assert back.to_record() == pen.to_record()
    assert list(back.index) == list(pen.index)
    for k in (0, 1, 3):
        assert _render(back, k, seed=k) == _render(pen, k, seed=k)
    assert _render(back, 2, seed=7, start=4) == _render(pen, 2, seed=7, start=4)


def test_none_tokens_and_flags_survive():
    pen = Pen(["a", None, "", "b", None], intern=True)
    back = decode_pen(encode_pen(pen))
    assert back.context == ("a", None, "", "b", None)
    assert back.sentinel is None
    assert back.intern is True
    assert back.all_sentinels is False
    assert back.comparer.name == "ordinal"

    empty = decode_pen(encode_pen(Pen([])))
    assert len(empty) == 0 and empty.all_sentinels


def test_decoding_does_not_sort_again(monkeypatch):
    data = encode_pen(Pen("b a c a b".split()))

    def boom(*args, **kwargs):
        raise AssertionError("index rebuilt")

    monkeypatch.setattr(pen_module, "build_index", boom)
    back = decode_pen(data)
    assert back.count(["a"]) == 2


def test_bad_magic():
    data = bytearray(encode_pen(Pen(["x"])))
    data[:4] = b"NOPE"
    with pytest.raises(PenFormatError, match="Invalid pen file"):
        decode_pen(bytes(data))


def test_unsupported_version():
    data = bytearray(encode_pen(Pen(["x"])))
    data[4:6] = struct.pack("<H", 99)
    with pytest.raises(PenFormatError, match="version"):
        decode_pen(bytes(data))


def test_truncated_and_trailing_data():
    data = encode_pen(Pen(["x", "y", "z"]))
    for cut in (0, 3, 7, len(data) - 1):
        with pytest.raises(PenFormatError):
            decode_pen(data[:cut])
    with pytest.raises(PenFormatError):
        decode_pen(data + b"\x00")


def test_format_errors_are_value_errors():
    with pytest.raises(ValueError):
        decode_pen(b"")


def test_unknown_comparer_name_fails_to_load():
    data = encode_pen(Pen(["a", "b"], comparer=TokenComparer("never_registered")))
    with pytest.raises(KeyError):
        decode_pen(data)


def _four_token_pen_bytes() -> bytearray:
    return bytearray(encode_pen(Pen(["a", "b", "c", "d"])))


def test_index_slot_out_of_range_is_rejected():
    data = _four_token_pen_bytes()
    data[-4:] = struct.pack("<I", 999)
    with pytest.raises(PenFormatError, match="permutation"):
        decode_pen(bytes(data))


def test_duplicate_index_slot_is_rejected():
    data = _four_token_pen_bytes()
    data[-4:] = data[-8:-4]
    with pytest.raises(PenFormatError, match="permutation"):
        decode_pen(bytes(data))


def test_comparer_name_with_invalid_utf8_is_a_format_error():
    data = _four_token_pen_bytes()
    data[9] = 0xFF      # magic, version, flags and name length come first
    with pytest.raises(PenFormatError, match="comparer name"):
        decode_pen(bytes(data))


def test_only_string_tokens_can_be_persisted():
    with pytest.raises(TypeError):
        encode_pen(Pen([1, 2, 3]))


def test_save_and_load_file(tmp_path: Path):
    pen = Pen("the cat sat the cat ran".split())
    out = tmp_path / "nested" / "corpus.pen"
    save_pen(pen, str(out))
    assert out.exists()
    assert not os.path.exists(str(out) + ".tmp")
    back = load_pen(str(out))
    assert back.count(["the", "cat"]) == 2
    assert _render(back, 1, seed=3) == _render(pen, 1, seed=3)
