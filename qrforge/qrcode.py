"""QR Code symbols and the functions that encode text, bytes and segments into them."""

from __future__ import annotations

import enum
import itertools
from collections.abc import Iterable
from dataclasses import dataclass

from .ecc import Ecc, add_ecc_and_interleave, get_num_data_codewords
from .matrix import (
    apply_mask,
    draw_codewords,
    draw_format_bits,
    draw_light_function_modules,
    function_module_grid,
    get_penalty_score,
)
from .segment import (
    VERSION_MAX,
    VERSION_MIN,
    BitBuffer,
    Mode,
    Segment,
    calc_segment_bit_length,
    calc_segment_buffer_size,
    get_total_bits,
    is_alphanumeric,
    is_numeric,
    make_alphanumeric,
    make_numeric,
    num_char_count_bits,
)

__all__ = [
    "Mask",
    "DataTooLongError",
    "QrCode",
    "buffer_len_for_version",
    "encode_text",
    "encode_binary",
    "encode_segments",
    "encode_segments_advanced",
]


class Mask(enum.IntEnum):
    """The mask pattern of a symbol; AUTO lets the encoder choose the best one."""

    AUTO = -1
    MASK_0 = 0
    MASK_1 = 1
    MASK_2 = 2
    MASK_3 = 3
    MASK_4 = 4
    MASK_5 = 5
    MASK_6 = 6
    MASK_7 = 7


class DataTooLongError(ValueError):
    """Raised when the data does not fit in any allowed version."""


@dataclass(frozen=True)
class QrCode:
    """An immutable square grid of dark (True) and light (False) modules."""

    version: int
    ecl: Ecc
    mask: Mask
    modules: tuple[tuple[bool, ...], ...]

    @property
    def size(self) -> int:
        """Side length of the symbol in modules, from 21 to 177."""
        return len(self.modules)

    def get_module(self, x: int, y: int) -> bool:
        """Return True if the module at (x, y) is dark; False if light or out of bounds."""
        size = self.size
        return 0 <= x < size and 0 <= y < size and self.modules[y][x]


def buffer_len_for_version(version: int) -> int:
    """Return the bytes needed to store any symbol up to ``version`` packed one bit per module."""
    if not VERSION_MIN <= version <= VERSION_MAX:
        raise ValueError(f"version out of range: {version}")
    size = version * 4 + 17
    return (size * size + 7) // 8 + 1


def encode_text(
    text: str,
    ecl: Ecc = Ecc.LOW,
    min_version: int = VERSION_MIN,
    max_version: int = VERSION_MAX,
    mask: Mask = Mask.AUTO,
    boost_ecl: bool = True,
) -> QrCode:
    """Encode ``text`` in numeric, alphanumeric or UTF-8 byte mode, whichever applies."""
    if not text:
        return encode_segments_advanced([], ecl, min_version, max_version, mask, boost_ecl)
    buf_len = buffer_len_for_version(max_version)

    if is_numeric(text):
        needed = calc_segment_buffer_size(Mode.NUMERIC, len(text))
        if needed is None or needed > buf_len:
            raise DataTooLongError("text too long for the allowed versions")
        seg = make_numeric(text)
    elif is_alphanumeric(text):
        needed = calc_segment_buffer_size(Mode.ALPHANUMERIC, len(text))
        if needed is None or needed > buf_len:
            raise DataTooLongError("text too long for the allowed versions")
        seg = make_alphanumeric(text)
    else:
        data = text.encode("utf-8")
        if len(data) > buf_len:
            raise DataTooLongError("text too long for the allowed versions")
        bit_length = calc_segment_bit_length(Mode.BYTE, len(data))
        if bit_length is None:
            raise DataTooLongError("text too long for the allowed versions")
        seg = Segment(Mode.BYTE, len(data), data, bit_length)
    return encode_segments_advanced([seg], ecl, min_version, max_version, mask, boost_ecl)


def encode_binary(
    data: bytes,
    ecl: Ecc = Ecc.LOW,
    min_version: int = VERSION_MIN,
    max_version: int = VERSION_MAX,
    mask: Mask = Mask.AUTO,
    boost_ecl: bool = True,
) -> QrCode:
    """Encode ``data`` as a single byte-mode segment."""
    payload = bytes(data)
    bit_length = calc_segment_bit_length(Mode.BYTE, len(payload))
    if bit_length is None:
        raise DataTooLongError("data too long for the allowed versions")
    seg = Segment(Mode.BYTE, len(payload), payload, bit_length)
    return encode_segments_advanced([seg], ecl, min_version, max_version, mask, boost_ecl)


def encode_segments(segs: Iterable[Segment], ecl: Ecc = Ecc.LOW) -> QrCode:
    """Encode ``segs`` over all versions with automatic mask and boosted ECC level."""
    return encode_segments_advanced(segs, ecl, VERSION_MIN, VERSION_MAX, Mask.AUTO, True)


def _data_bits(segs: list[Segment], version: int) -> BitBuffer:
    bits = BitBuffer()
    for seg in segs:
        bits.append_bits(int(seg.mode), 4)
        bits.append_bits(seg.num_chars, num_char_count_bits(seg.mode, version))
        bits.extend((seg.data[j >> 3] >> (7 - (j & 7))) & 1 for j in range(seg.bit_length))
    return bits


def encode_segments_advanced(
    segs: Iterable[Segment],
    ecl: Ecc = Ecc.LOW,
    min_version: int = VERSION_MIN,
    max_version: int = VERSION_MAX,
    mask: Mask = Mask.AUTO,
    boost_ecl: bool = True,
) -> QrCode:
    """Encode ``segs`` in the smallest version within the given range.

    With ``boost_ecl`` the ECC level is raised as far as the chosen version allows.
    Raises DataTooLongError if no version in the range can hold the data.
    """
    if not VERSION_MIN <= min_version <= max_version <= VERSION_MAX:
        raise ValueError(f"invalid version range: {min_version}..{max_version}")
    ecl = Ecc(ecl)
    mask = Mask(mask)
    segs = list(segs)

    version = min_version
    while True:
        capacity = get_num_data_codewords(version, ecl) * 8
        used = get_total_bits(segs, version)
        if used is not None and used <= capacity:
            break
        if version >= max_version:
            raise DataTooLongError("data too long for the allowed versions")
        version += 1

    if boost_ecl:
        for level in (Ecc.MEDIUM, Ecc.QUARTILE, Ecc.HIGH):
            if used <= get_num_data_codewords(version, level) * 8:
                ecl = level

    bits = _data_bits(segs, version)
    capacity = get_num_data_codewords(version, ecl) * 8
    bits.append_bits(0, min(4, capacity - len(bits)))
    bits.append_bits(0, (8 - len(bits) % 8) % 8)
    for pad in itertools.cycle((0xEC, 0x11)):
        if len(bits) >= capacity:
            break
        bits.append_bits(pad, 8)

    codewords = add_ecc_and_interleave(bits.to_bytes(), version, ecl)
    grid = function_module_grid(version)
    draw_codewords(grid, codewords)
    draw_light_function_modules(grid, version)
    function_modules = function_module_grid(version)

    if mask is Mask.AUTO:
        best_penalty = None
        for candidate in range(8):
            apply_mask(function_modules, grid, candidate)
            draw_format_bits(grid, ecl, candidate)
            penalty = get_penalty_score(grid)
            if best_penalty is None or penalty < best_penalty:
                mask = Mask(candidate)
                best_penalty = penalty
            apply_mask(function_modules, grid, candidate)  # XOR undoes the mask

    apply_mask(function_modules, grid, mask)
    draw_format_bits(grid, ecl, mask)
    return QrCode(version, ecl, mask, tuple(tuple(row) for row in grid))