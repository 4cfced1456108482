"""Shared decode/encode primitives: big-endian word packing, float32, int16 and uint16."""

import struct
from typing import Sequence

from .errors import DecodeError, EncodeError

_WORD = struct.Struct(">H")
_INT16 = struct.Struct(">h")
_FLOAT32 = struct.Struct(">f")


def check_count(raw: Sequence[object], expected: int) -> None:
    """Raise DecodeError unless exactly `expected` raw units were supplied."""
    if len(raw) != expected:
        raise DecodeError(f"Expected {expected} raw unit(s), got {len(raw)}")


def words_to_bytes(words: Sequence[int]) -> bytes:
    """Flatten 16-bit words into bytes, high byte first, keeping word order."""
    out = bytearray()
    for word in words:
        if isinstance(word, bool) or not isinstance(word, int):
            raise DecodeError(f"Register word must be an int, got {word!r}")
        try:
            out += _WORD.pack(word)
        except struct.error:
            raise DecodeError(f"Register word out of range 0..65535: {word}") from None
    return bytes(out)


def bytes_to_float32(data: bytes) -> float:
    """Reinterpret exactly 4 bytes as IEEE-754 binary32."""
    check_count(data, 4)
    return _FLOAT32.unpack(data)[0]


def bytes_to_int16(data: bytes) -> int:
    """Reinterpret exactly 2 bytes as a two's-complement 16-bit integer."""
    check_count(data, 2)
    return _INT16.unpack(data)[0]


def bytes_to_uint16(data: bytes) -> int:
    check_count(data, 2)
    return _WORD.unpack(data)[0]


def register_to_f32(words: Sequence[int]) -> float:
    """Two consecutive registers as a big-endian IEEE-754 float (diagnostics only)."""
    return bytes_to_float32(words_to_bytes(words))


def register_to_i16(words: Sequence[int]) -> int:
    return bytes_to_int16(words_to_bytes(words))


def register_to_u16(words: Sequence[int]) -> int:
    return bytes_to_uint16(words_to_bytes(words))


def int16_to_word(value: int) -> int:
    """Two's-complement word for a signed 16-bit value."""
    if not -0x8000 <= value <= 0x7FFF:
        raise EncodeError(f"Signed 16-bit integer out of range: {value}")
    return value & 0xFFFF


def uint16_to_word(value: int) -> int:
    if not 0 <= value <= 0xFFFF:
        raise EncodeError(f"Unsigned 16-bit integer out of range: {value}")
    return value
