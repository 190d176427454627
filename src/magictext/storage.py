from __future__ import annotations
import io
import os
import struct
from typing import BinaryIO, List, Optional

from .errors import PenFormatError
from .models import PenRecord
from .pen import Pen

_MAGIC = b"PEN1"
VERSION = 1

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")  # little-endian uint32
_NONE_LEN = 0xFFFFFFFF      # length marker for a None token

_FLAG_INTERN = 0x01
_FLAG_ALL_SENTINELS = 0x02


class PenWriter:
    """
    Serialise a pen record.
    Layout:
      0..3   : 'PEN1'
      4..5   : version (uint16)
      6      : flags (uint8) bit0=intern, bit1=all_sentinels
      Then:
         [len:u16][comparer name: utf-8]
         [len:u32][sentinel: utf-8]        (len 0xFFFFFFFF -> None, no bytes)
         [N:u32]
         N x [len:u32][token: utf-8]       (same None rule)
         N x [slot:u32]                    the sorted index
    """

    def write(self, f: BinaryIO, record: PenRecord) -> None:
        name = record.comparer.encode("utf-8")
        if len(name) > 0xFFFF:
            raise ValueError("comparer name too long for a pen file (max 65535 bytes)")
        flags = (_FLAG_INTERN if record.intern else 0) | (_FLAG_ALL_SENTINELS if record.all_sentinels else 0)

        f.write(_MAGIC)
        f.write(_U16.pack(VERSION))
        f.write(_U8.pack(flags))
        f.write(_U16.pack(len(name)))
        f.write(name)
        self._write_token(f, record.sentinel)
        f.write(_U32.pack(len(record.context)))
        buf = io.BytesIO()
        for token in record.context:
            self._write_token(buf, token)
        f.write(buf.getvalue())
        f.write(struct.pack(f"<{len(record.index)}I", *record.index))

    @staticmethod
    def _write_token(f: BinaryIO, token: Optional[str]) -> None:
        if token is None:
            f.write(_U32.pack(_NONE_LEN))
            return
        if not isinstance(token, str):
            raise TypeError(f"only str/None tokens can be persisted, got {type(token).__name__}")
        tb = token.encode("utf-8")
        f.write(_U32.pack(len(tb)))
        f.write(tb)


class PenReader:
    """Parse the bytes written by PenWriter back into a PenRecord."""

    def __init__(self, data: bytes) -> None:
        self._mv = memoryview(data)
        self._pos = 0

    def _take(self, n: int) -> memoryview:
        end = self._pos + n
        if end > len(self._mv):
            raise PenFormatError("Truncated pen data")
        chunk = self._mv[self._pos:end]
        self._pos = end
        return chunk

    def _unpack(self, st: struct.Struct) -> int:
        return st.unpack(self._take(st.size))[0]

    def _read_token(self) -> Optional[str]:
        ln = self._unpack(_U32)
        if ln == _NONE_LEN:
            return None
        try:
            return bytes(self._take(ln)).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PenFormatError("Invalid token encoding in pen data") from exc

    def read(self) -> PenRecord:
        if bytes(self._take(4)) != _MAGIC:
            raise PenFormatError("Invalid pen file")
        version = self._unpack(_U16)
        if version != VERSION:
            raise PenFormatError(f"Unsupported pen file version: {version}")
        flags = self._unpack(_U8)
        try:
            name = bytes(self._take(self._unpack(_U16))).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PenFormatError("Invalid comparer name encoding in pen data") from exc
        sentinel = self._read_token()
        n = self._unpack(_U32)
        context: List[Optional[str]] = [self._read_token() for _ in range(n)]
        index = struct.unpack(f"<{n}I", self._take(4 * n))
        if self._pos != len(self._mv):
            raise PenFormatError("Trailing bytes after pen data")
        return PenRecord(
            intern=bool(flags & _FLAG_INTERN),
            comparer=name,
            sentinel=sentinel,
            context=tuple(context),
            index=index,
            all_sentinels=bool(flags & _FLAG_ALL_SENTINELS),
        )


def encode_pen(pen: Pen) -> bytes:
    buf = io.BytesIO()
    PenWriter().write(buf, pen.to_record())
    return buf.getvalue()


def decode_pen(data: bytes) -> Pen:
    return Pen.from_record(PenReader(data).read())


def save_pen(pen: Pen, path: str) -> None:
    """Write atomically: a crash never leaves a half-written pen at ``path``."""
    tmp = f"{path}.tmp"
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(tmp, "wb") as f:
        PenWriter().write(f, pen.to_record())
    os.replace(tmp, path)


def load_pen(path: str) -> Pen:
    with open(path, "rb") as f:
        return decode_pen(f.read())
