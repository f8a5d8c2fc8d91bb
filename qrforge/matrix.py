"""The module grid of a QR Code symbol: function patterns, data placement and masking."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .ecc import Ecc
from .segment import VERSION_MAX, VERSION_MIN

__all__ = [
    "Grid",
    "PENALTY_N1",
    "PENALTY_N2",
    "PENALTY_N3",
    "PENALTY_N4",
    "new_grid",
    "get_alignment_pattern_positions",
    "function_module_grid",
    "draw_light_function_modules",
    "draw_format_bits",
    "draw_codewords",
    "apply_mask",
    "get_penalty_score",
]

# A square grid of modules indexed as grid[y][x]; True is dark.
Grid = list[list[bool]]

SIZE_MIN = VERSION_MIN * 4 + 17
SIZE_MAX = VERSION_MAX * 4 + 17

PENALTY_N1 = 3
PENALTY_N2 = 3
PENALTY_N3 = 40
PENALTY_N4 = 10

_MASK_PATTERNS: tuple[Callable[[int, int], bool], ...] = (
    lambda x, y: (x + y) % 2 == 0,
    lambda x, y: y % 2 == 0,
    lambda x, y: x % 3 == 0,
    lambda x, y: (x + y) % 3 == 0,
    lambda x, y: (x // 3 + y // 2) % 2 == 0,
    lambda x, y: x * y % 2 + x * y % 3 == 0,
    lambda x, y: (x * y % 2 + x * y % 3) % 2 == 0,
    lambda x, y: ((x + y) % 2 + x * y % 3) % 2 == 0,
)


def _check_version(version: int) -> int:
    if not VERSION_MIN <= version <= VERSION_MAX:
        raise ValueError(f"version out of range: {version}")
    return version * 4 + 17


def _check_grid(grid: Grid, version: int) -> int:
    size = _check_version(version)
    if len(grid) != size:
        raise ValueError(f"grid size {len(grid)} does not match version {version}")
    return size


def _check_mask(mask: int) -> int:
    mask = int(mask)
    if not 0 <= mask <= 7:
        raise ValueError(f"mask out of range: {mask}")
    return mask


def _bit(value: int, i: int) -> bool:
    return (value >> i) & 1 != 0


def _set_unbounded(grid: Grid, x: int, y: int, dark: bool) -> None:
    size = len(grid)
    if 0 <= x < size and 0 <= y < size:
        grid[y][x] = dark


def _fill_rectangle(grid: Grid, left: int, top: int, width: int, height: int) -> None:
    for row in grid[top:top + height]:
        row[left:left + width] = [True] * width


def _skips_finder(i: int, j: int, count: int) -> bool:
    return (i, j) in ((0, 0), (0, count - 1), (count - 1, 0))


def new_grid(size: int) -> Grid:
    """Return a ``size`` by ``size`` grid of light modules."""
    if not SIZE_MIN <= size <= SIZE_MAX:
        raise ValueError(f"grid size out of range: {size}")
    return [[False] * size for _ in range(size)]


def get_alignment_pattern_positions(version: int) -> list[int]:
    """Return the ascending alignment pattern coordinates used on both axes."""
    size = _check_version(version)
    if version == 1:
        return []
    num_align = version // 7 + 2
    step = (version * 8 + num_align * 3 + 5) // (num_align * 4 - 4) * 2
    last = size - 7
    return [6] + [last - step * k for k in reversed(range(num_align - 1))]


def function_module_grid(version: int) -> Grid:
    """Return a grid for ``version`` with every function module marked dark."""
    size = _check_version(version)
    grid = new_grid(size)

    # Timing patterns
    _fill_rectangle(grid, 6, 0, 1, size)
    _fill_rectangle(grid, 0, 6, size, 1)

    # Three finder patterns with their format bits
    _fill_rectangle(grid, 0, 0, 9, 9)
    _fill_rectangle(grid, size - 8, 0, 8, 9)
    _fill_rectangle(grid, 0, size - 8, 9, 8)

    positions = get_alignment_pattern_positions(version)
    count = len(positions)
    for i, px in enumerate(positions):
        for j, py in enumerate(positions):
            if not _skips_finder(i, j, count):
                _fill_rectangle(grid, px - 2, py - 2, 5, 5)

    if version >= 7:
        _fill_rectangle(grid, size - 11, 0, 3, 6)
        _fill_rectangle(grid, 0, size - 11, 6, 3)
    return grid


def draw_light_function_modules(grid: Grid, version: int) -> None:
    """Draw the light parts of the function patterns and the version blocks.

    Expects every function module already dark, as ``function_module_grid`` leaves them.
    Format bits are not drawn.
    """
    size = _check_grid(grid, version)

    for i in range(7, size - 7, 2):
        grid[i][6] = False
        grid[6][i] = False

    for dy in range(-4, 5):
        for dx in range(-4, 5):
            if max(abs(dx), abs(dy)) in (2, 4):
                _set_unbounded(grid, 3 + dx, 3 + dy, False)
                _set_unbounded(grid, size - 4 + dx, 3 + dy, False)
                _set_unbounded(grid, 3 + dx, size - 4 + dy, False)

    positions = get_alignment_pattern_positions(version)
    count = len(positions)
    for i, px in enumerate(positions):
        for j, py in enumerate(positions):
            if _skips_finder(i, j, count):
                continue
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    grid[py + dy][px + dx] = dx == 0 and dy == 0

    if version >= 7:
        rem = version
        for _ in range(12):
            rem = (rem << 1) ^ ((rem >> 11) * 0x1F25)
        bits = version << 12 | rem
        for i in range(6):
            for j in range(3):
                k = size - 11 + j
                dark = bits & 1 != 0
                grid[i][k] = dark
                grid[k][i] = dark
                bits >>= 1


def draw_format_bits(grid: Grid, ecl: Ecc, mask: int) -> None:
    """Draw both copies of the format information for ``ecl`` and ``mask``."""
    mask = _check_mask(mask)
    size = len(grid)
    if not SIZE_MIN <= size <= SIZE_MAX:
        raise ValueError(f"grid size out of range: {size}")
    data = Ecc(ecl).format_bits << 3 | mask
    rem = data
    for _ in range(10):
        rem = (rem << 1) ^ ((rem >> 9) * 0x537)
    bits = (data << 10 | rem) ^ 0x5412

    # First copy, around the top left finder
    for i in range(6):
        grid[i][8] = _bit(bits, i)
    grid[7][8] = _bit(bits, 6)
    grid[8][8] = _bit(bits, 7)
    grid[8][7] = _bit(bits, 8)
    for i in range(9, 15):
        grid[8][14 - i] = _bit(bits, i)

    # Second copy, split between the other two finders
    for i in range(8):
        grid[8][size - 1 - i] = _bit(bits, i)
    for i in range(8, 15):
        grid[size - 15 + i][8] = _bit(bits, i)
    grid[size - 8][8] = True


def draw_codewords(grid: Grid, data: Sequence[int]) -> None:
    """Place codeword bits along the zigzag path over the light modules.

    Function modules must be dark and all others light beforehand.
    Raises ValueError if the data does not fit.
    """
    size = len(grid)
    total_bits = len(data) * 8
    i = 0
    right = size - 1
    while right >= 1:
        if right == 6:
            right = 5
        upward = ((right + 1) & 2) == 0
        for vert in range(size):
            y = size - 1 - vert if upward else vert
            for x in (right, right - 1):
                if not grid[y][x] and i < total_bits:
                    grid[y][x] = _bit(data[i >> 3], 7 - (i & 7))
                    i += 1
        right -= 2
    if i != total_bits:
        raise ValueError(f"{total_bits} data bits do not fit in a grid of size {size}")


def apply_mask(function_modules: Grid, grid: Grid, mask: int) -> None:
    """XOR the non-function modules of ``grid`` with mask pattern ``mask``.

    Applying the same mask twice restores the grid.
    """
    pattern = _MASK_PATTERNS[_check_mask(mask)]
    if len(function_modules) != len(grid):
        raise ValueError("function module grid and grid differ in size")
    for y, (fn_row, row) in enumerate(zip(function_modules, grid)):
        for x, is_function in enumerate(fn_row):
            if not is_function and pattern(x, y):
                row[x] = not row[x]


def _add_history(run_length: int, history: list[int], size: int) -> None:
    if history[0] == 0:
        run_length += size  # light border before the first run
    history.insert(0, run_length)
    history.pop()


def _count_patterns(history: list[int]) -> int:
    n = history[1]
    core = (n > 0 and history[2] == n and history[3] == n * 3
            and history[4] == n and history[5] == n)
    if not core:
        return 0
    return (int(history[0] >= n * 4 and history[6] >= n)
            + int(history[6] >= n * 4 and history[0] >= n))


def _line_penalty(line: Sequence[bool], size: int) -> int:
    result = 0
    run_color = False
    run_length = 0
    history = [0] * 7
    for color in line:
        if color == run_color:
            run_length += 1
            if run_length == 5:
                result += PENALTY_N1
            elif run_length > 5:
                result += 1
        else:
            _add_history(run_length, history, size)
            if not run_color:
                result += _count_patterns(history) * PENALTY_N3
            run_color = color
            run_length = 1
    if run_color:
        _add_history(run_length, history, size)
        run_length = 0
    _add_history(run_length + size, history, size)  # light border after the line
    result += _count_patterns(history) * PENALTY_N3
    return result


def get_penalty_score(grid: Grid) -> int:
    """Return the mask-selection penalty score of the grid's current modules."""
    size = len(grid)
    result = sum(_line_penalty(row, size) for row in grid)
    result += sum(_line_penalty(column, size) for column in zip(*grid))

    for top, bottom in zip(grid, grid[1:]):
        for a, b, c, d in zip(top, top[1:], bottom, bottom[1:]):
            if a == b == c == d:
                result += PENALTY_N2

    dark = sum(map(sum, grid))
    total = size * size
    k = (abs(dark * 20 - total * 10) + total - 1) // total - 1
    return result + k * PENALTY_N4