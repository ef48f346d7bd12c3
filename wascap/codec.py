"""
Binary primitives for the WebAssembly container format.

- Unsigned LEB128 (u32) encoding and decoding
- A bounds-checked cursor over an immutable byte buffer
- An append-only writer that always emits minimal LEB128

Reads past the end of the buffer raise ``ParseError`` with the offending
offset; there is no partial result.
"""

from __future__ import annotations

import struct

from .errors import ParseError, SerializationError

U32_MAX = 0xFFFFFFFF
# ceil(32 / 7)
MAX_U32_LEB_BYTES = 5


# ---------------------------------------------------------------------------
# LEB128
# ---------------------------------------------------------------------------

def encode_u32(value: int) -> bytes:
    """Encode *value* as minimal unsigned LEB128."""
    if value < 0 or value > U32_MAX:
        raise SerializationError(f"value {value} does not fit in a u32")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

class BinaryReader:
    """Cursor over a byte buffer."""

    def __init__(self, buf: bytes, offset: int = 0, end: int | None = None):
        self._buf = buf
        self._off = offset
        self._end = len(buf) if end is None else end

    @property
    def offset(self) -> int:
        return self._off

    @property
    def eof(self) -> bool:
        return self._off >= self._end

    @property
    def remaining(self) -> int:
        return self._end - self._off

    def u8(self) -> int:
        if self._off >= self._end:
            raise ParseError("unexpected end of input", self._off)
        val = self._buf[self._off]
        self._off += 1
        return val

    def u32le(self) -> int:
        if self.remaining < 4:
            raise ParseError("unexpected end of input reading u32", self._off)
        val = struct.unpack("<I", self._buf[self._off:self._off + 4])[0]
        self._off += 4
        return val

    def u32_leb(self) -> int:
        """Read an unsigned LEB128 value bounded to 32 bits."""
        start = self._off
        result = 0
        for i in range(MAX_U32_LEB_BYTES):
            byte = self.u8()
            if i == MAX_U32_LEB_BYTES - 1 and byte & 0x70:
                # fifth byte may only carry the top 4 bits
                raise ParseError("LEB128 value overflows u32", start)
            result |= (byte & 0x7F) << (7 * i)
            if not byte & 0x80:
                return result
        raise ParseError("LEB128 value longer than 5 bytes", start)

    def bytes(self, n: int) -> bytes:
        if n > self.remaining:
            raise ParseError(
                f"declared length {n} exceeds {self.remaining} remaining bytes",
                self._off,
            )
        out = bytes(self._buf[self._off:self._off + n])
        self._off += n
        return out

    def len_prefixed_bytes(self) -> bytes:
        return self.bytes(self.u32_leb())

    def name(self) -> str:
        """Read a length-prefixed UTF-8 name."""
        start = self._off
        raw = self.len_prefixed_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError("name is not valid UTF-8", start) from e


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

class BinaryWriter:
    def __init__(self):
        self._bb = bytearray()

    def u8(self, v: int) -> None:
        self._bb.append(v & 0xFF)

    def u32le(self, v: int) -> None:
        self._bb.extend(struct.pack("<I", v & U32_MAX))

    def u32_leb(self, v: int) -> None:
        self._bb.extend(encode_u32(v))

    def bytes(self, v: bytes) -> None:
        self._bb.extend(v)

    def len_prefixed_bytes(self, v: bytes) -> None:
        self.u32_leb(len(v))
        self.bytes(v)

    def name(self, v: str) -> None:
        self.len_prefixed_bytes(v.encode("utf-8"))

    def to_bytes(self) -> bytes:
        return bytes(self._bb)
