"""QR Code data segments: modes, bit buffers and segment factories."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

__all__ = [
    "ALPHANUMERIC_CHARSET",
    "MAX_BIT_LENGTH",
    "Mode",
    "Segment",
    "BitBuffer",
    "is_numeric",
    "is_alphanumeric",
    "calc_segment_bit_length",
    "calc_segment_buffer_size",
    "make_bytes",
    "make_numeric",
    "make_alphanumeric",
    "make_eci",
    "num_char_count_bits",
    "get_total_bits",
]

ALPHANUMERIC_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"
_ALPHANUMERIC_INDEX = {ch: i for i, ch in enumerate(ALPHANUMERIC_CHARSET)}
_DIGITS = frozenset("0123456789")

# Largest bit length (and character count) a segment may have.
MAX_BIT_LENGTH = 32767

VERSION_MIN = 1
VERSION_MAX = 40


class Mode(enum.IntEnum):
    """How a segment's data bits are interpreted; the value is the mode indicator."""

    NUMERIC = 0x1
    ALPHANUMERIC = 0x2
    BYTE = 0x4
    KANJI = 0x8
    ECI = 0x7


_CHAR_COUNT_BITS = {
    Mode.NUMERIC: (10, 12, 14),
    Mode.ALPHANUMERIC: (9, 11, 13),
    Mode.BYTE: (8, 16, 16),
    Mode.KANJI: (8, 10, 12),
    Mode.ECI: (0, 0, 0),
}


class BitBuffer(list):
    """A growable sequence of bits (0 or 1), most significant first."""

    def append_bits(self, val: int, num_bits: int) -> None:
        """Append the low ``num_bits`` bits of ``val``, high bit first."""
        if not 0 <= num_bits <= 16:
            raise ValueError(f"bit count out of range: {num_bits}")
        if val < 0 or val >> num_bits:
            raise ValueError(f"value {val} does not fit in {num_bits} bits")
        self.extend((val >> i) & 1 for i in reversed(range(num_bits)))

    def to_bytes(self) -> bytes:
        """Pack the bits big-endian into bytes, zero-padding the last byte."""
        out = bytearray((len(self) + 7) // 8)
        for i, bit in enumerate(self):
            if bit:
                out[i >> 3] |= 1 << (7 - (i & 7))
        return bytes(out)


@dataclass(frozen=True)
class Segment:
    """A segment of character, binary or control data in a QR Code symbol.

    ``data`` holds the segment's bits packed big-endian; only the first
    ``bit_length`` bits are meaningful.
    """

    mode: Mode
    num_chars: int
    data: bytes
    bit_length: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", Mode(self.mode))
        object.__setattr__(self, "data", bytes(self.data))
        if not 0 <= self.num_chars <= MAX_BIT_LENGTH:
            raise ValueError(f"character count out of range: {self.num_chars}")
        if not 0 <= self.bit_length <= MAX_BIT_LENGTH:
            raise ValueError(f"bit length out of range: {self.bit_length}")
        if self.bit_length > len(self.data) * 8:
            raise ValueError("bit length exceeds the data provided")


def is_numeric(text: str) -> bool:
    """Return True if every character of ``text`` is an ASCII digit."""
    return all(ch in _DIGITS for ch in text)


def is_alphanumeric(text: str) -> bool:
    """Return True if every character of ``text`` is in the alphanumeric charset."""
    return all(ch in _ALPHANUMERIC_INDEX for ch in text)


def calc_segment_bit_length(mode: Mode, num_chars: int) -> int | None:
    """Return the data bit length of a segment with ``num_chars`` characters.

    Returns None if the count or the resulting bit length exceeds 32767.
    For ECI mode ``num_chars`` must be 0 and the worst case is returned.
    """
    if num_chars < 0:
        raise ValueError(f"negative character count: {num_chars}")
    if num_chars > MAX_BIT_LENGTH:
        return None
    mode = Mode(mode)
    if mode is Mode.NUMERIC:
        result = (num_chars * 10 + 2) // 3
    elif mode is Mode.ALPHANUMERIC:
        result = (num_chars * 11 + 1) // 2
    elif mode is Mode.BYTE:
        result = num_chars * 8
    elif mode is Mode.KANJI:
        result = num_chars * 13
    elif num_chars == 0:
        result = 3 * 8
    else:
        raise ValueError("an ECI segment has no characters")
    return None if result > MAX_BIT_LENGTH else result


def calc_segment_buffer_size(mode: Mode, num_chars: int) -> int | None:
    """Return the number of bytes needed for a segment's data, or None on overflow."""
    bits = calc_segment_bit_length(mode, num_chars)
    if bits is None:
        return None
    return (bits + 7) // 8


def make_bytes(data: Iterable[int]) -> Segment:
    """Return a byte-mode segment holding ``data``."""
    payload = bytes(data)
    bit_length = calc_segment_bit_length(Mode.BYTE, len(payload))
    if bit_length is None:
        raise ValueError("data too long for a segment")
    return Segment(Mode.BYTE, len(payload), payload, bit_length)


def make_numeric(digits: str) -> Segment:
    """Return a numeric-mode segment for a string of decimal digits."""
    if not is_numeric(digits):
        raise ValueError("string contains non-numeric characters")
    if calc_segment_bit_length(Mode.NUMERIC, len(digits)) is None:
        raise ValueError("string too long for a segment")
    bits = BitBuffer()
    for start in range(0, len(digits), 3):
        chunk = digits[start:start + 3]
        bits.append_bits(int(chunk), len(chunk) * 3 + 1)
    return Segment(Mode.NUMERIC, len(digits), bits.to_bytes(), len(bits))


def make_alphanumeric(text: str) -> Segment:
    """Return an alphanumeric-mode segment for ``text``."""
    if not is_alphanumeric(text):
        raise ValueError("string contains characters not encodable in alphanumeric mode")
    if calc_segment_bit_length(Mode.ALPHANUMERIC, len(text)) is None:
        raise ValueError("string too long for a segment")
    bits = BitBuffer()
    for start in range(0, len(text) - 1, 2):
        first, second = text[start], text[start + 1]
        bits.append_bits(_ALPHANUMERIC_INDEX[first] * 45 + _ALPHANUMERIC_INDEX[second], 11)
    if len(text) % 2:
        bits.append_bits(_ALPHANUMERIC_INDEX[text[-1]], 6)
    return Segment(Mode.ALPHANUMERIC, len(text), bits.to_bytes(), len(bits))


def make_eci(assign_val: int) -> Segment:
    """Return an Extended Channel Interpretation segment for ``assign_val``."""
    bits = BitBuffer()
    if assign_val < 0:
        raise ValueError("ECI assignment value out of range")
    if assign_val < (1 << 7):
        bits.append_bits(assign_val, 8)
    elif assign_val < (1 << 14):
        bits.append_bits(2, 2)
        bits.append_bits(assign_val, 14)
    elif assign_val < 1000000:
        bits.append_bits(6, 3)
        bits.append_bits(assign_val >> 10, 11)
        bits.append_bits(assign_val & 0x3FF, 10)
    else:
        raise ValueError("ECI assignment value out of range")
    return Segment(Mode.ECI, 0, bits.to_bytes(), len(bits))


def num_char_count_bits(mode: Mode, version: int) -> int:
    """Return the width of the character count field for ``mode`` at ``version``."""
    if not VERSION_MIN <= version <= VERSION_MAX:
        raise ValueError(f"version out of range: {version}")
    return _CHAR_COUNT_BITS[Mode(mode)][(version + 7) // 17]


def get_total_bits(segs: Iterable[Segment], version: int) -> int | None:
    """Return the bits needed to encode ``segs`` at ``version``.

    Returns None if a segment's length does not fit its count field or the
    total exceeds 32767 bits.
    """
    total = 0
    for seg in segs:
        ccbits = num_char_count_bits(seg.mode, version)
        if seg.num_chars >= (1 << ccbits):
            return None
        total += 4 + ccbits + seg.bit_length
        if total > MAX_BIT_LENGTH:
            return None
    return total