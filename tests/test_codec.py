"""Tests for the shared word/byte codec primitives."""

import pytest

from modbus_regmap.codec import (
    bytes_to_float32,
    bytes_to_int16,
    bytes_to_uint16,
    check_count,
    int16_to_word,
    register_to_f32,
    register_to_i16,
    register_to_u16,
    uint16_to_word,
    words_to_bytes,
)
from modbus_regmap.errors import DecodeError, EncodeError


class TestWordsToBytes:
    """Test big-endian word flattening."""

    def test_high_byte_first(self) -> None:
        assert words_to_bytes([0x1234]) == b"\x12\x34"

    def test_word_order_preserved(self) -> None:
        assert words_to_bytes([0x4148, 0x0000]) == b"\x41\x48\x00\x00"

    def test_empty(self) -> None:
        assert words_to_bytes([]) == b""

    @pytest.mark.parametrize("word", [-1, 0x10000])
    def test_out_of_range_raises(self, word: int) -> None:
        with pytest.raises(DecodeError, match="out of range"):
            words_to_bytes([word])

    @pytest.mark.parametrize("word", [1.5, "1", True])
    def test_non_int_raises(self, word: object) -> None:
        with pytest.raises(DecodeError, match="must be an int"):
            words_to_bytes([word])  # type: ignore[list-item]


class TestReinterpret:
    """Test exact-length reinterpretation."""

    def test_float32(self) -> None:
        assert bytes_to_float32(b"\x41\x48\x00\x00") == 12.5

    def test_int16(self) -> None:
        assert bytes_to_int16(b"\xff\xff") == -1
        assert bytes_to_int16(b"\x80\x00") == -32768
        assert bytes_to_int16(b"\x7f\xff") == 32767

    def test_uint16(self) -> None:
        assert bytes_to_uint16(b"\xff\xff") == 65535
        assert bytes_to_uint16(b"\x00\x41") == 65

    def test_short_input_raises(self) -> None:
        with pytest.raises(DecodeError):
            bytes_to_float32(b"\x41\x48")
        with pytest.raises(DecodeError):
            bytes_to_int16(b"\x01")
        with pytest.raises(DecodeError):
            bytes_to_uint16(b"")

    def test_long_input_raises(self) -> None:
        with pytest.raises(DecodeError):
            bytes_to_int16(b"\x00\x01\x02")


class TestRegisterHelpers:
    """Test word-sequence conveniences."""

    def test_register_to_f32_two_words(self) -> None:
        assert register_to_f32([0x4148, 0x0000]) == 12.5

    def test_register_to_f32_one_word_raises(self) -> None:
        with pytest.raises(DecodeError):
            register_to_f32([0x4148])

    @pytest.mark.parametrize(
        ("word", "expected"),
        [(0xFFFF, -1), (0x0001, 1), (0x8000, -32768), (0x0000, 0)],
    )
    def test_register_to_i16(self, word: int, expected: int) -> None:
        assert register_to_i16([word]) == expected

    def test_register_to_u16(self) -> None:
        assert register_to_u16([0xFFFF]) == 65535

    def test_check_count(self) -> None:
        check_count([1], 1)
        with pytest.raises(DecodeError, match="Expected 1 raw unit"):
            check_count([], 1)
        with pytest.raises(DecodeError):
            check_count([1, 2], 1)


class TestEncode:
    """Test value -> word conversions."""

    def test_int16_to_word(self) -> None:
        assert int16_to_word(-1) == 0xFFFF
        assert int16_to_word(-32768) == 0x8000
        assert int16_to_word(32767) == 0x7FFF

    def test_int16_range(self) -> None:
        with pytest.raises(EncodeError, match="out of range"):
            int16_to_word(32768)
        with pytest.raises(EncodeError):
            int16_to_word(-32769)

    def test_uint16_to_word(self) -> None:
        assert uint16_to_word(0) == 0
        assert uint16_to_word(65535) == 65535
        with pytest.raises(EncodeError):
            uint16_to_word(65536)
        with pytest.raises(EncodeError):
            uint16_to_word(-1)

    def test_signed_word_decodes_back(self) -> None:
        for value in (-32768, -100, -1, 0, 1, 32767):
            assert register_to_i16([int16_to_word(value)]) == value
