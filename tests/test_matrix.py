import pytest

from qrforge.ecc import Ecc, get_num_raw_data_modules
from qrforge.matrix import (
    apply_mask,
    draw_codewords,
    draw_format_bits,
    draw_light_function_modules,
    function_module_grid,
    get_alignment_pattern_positions,
    get_penalty_score,
    new_grid,
)


def dark_count(grid):
    return sum(map(sum, grid))


def copy_grid(grid):
    return [list(row) for row in grid]


def read_format_copies(grid):
    size = len(grid)
    first = 0
    second = 0
    first_coords = [(8, i) for i in range(6)] + [(8, 7), (8, 8), (7, 8)]
    first_coords += [(14 - i, 8) for i in range(9, 15)]
    second_coords = [(size - 1 - i, 8) for i in range(8)]
    second_coords += [(8, size - 15 + i) for i in range(8, 15)]
    for i, (x, y) in enumerate(first_coords):
        first |= int(grid[y][x]) << i
    for i, (x, y) in enumerate(second_coords):
        second |= int(grid[y][x]) << i
    return first, second


def test_new_grid_is_light_square():
    grid = new_grid(25)
    assert len(grid) == 25
    assert all(len(row) == 25 for row in grid)
    assert dark_count(grid) == 0
    grid[0][0] = True
    assert grid[1][0] is False


@pytest.mark.parametrize("size", [20, 178, 0])
def test_new_grid_rejects_bad_size(size):
    with pytest.raises(ValueError):
        new_grid(size)


def test_alignment_positions_version_1_empty():
    assert get_alignment_pattern_positions(1) == []


def test_alignment_positions_version_7():
    assert get_alignment_pattern_positions(7) == [6, 22, 38]


@pytest.mark.parametrize("version", range(2, 41))
def test_alignment_positions_invariants(version):
    positions = get_alignment_pattern_positions(version)
    size = version * 4 + 17
    assert len(positions) == version // 7 + 2
    assert positions[0] == 6
    assert positions[-1] == size - 7
    steps = {b - a for a, b in zip(positions[1:], positions[2:])}
    assert len(steps) <= 1
    assert positions == sorted(positions)


@pytest.mark.parametrize("version", [0, 41])
def test_alignment_positions_bad_version(version):
    with pytest.raises(ValueError):
        get_alignment_pattern_positions(version)


@pytest.mark.parametrize("version", range(1, 41))
def test_function_modules_count_matches_raw_capacity(version):
    grid = function_module_grid(version)
    size = version * 4 + 17
    assert len(grid) == size
    assert size * size - dark_count(grid) == get_num_raw_data_modules(version)


def test_light_function_modules_version_1():
    grid = function_module_grid(1)
    draw_light_function_modules(grid, 1)
    # Finder pattern: dark outer ring, light ring, dark core
    assert grid[0][0] and grid[0][6]
    assert not grid[1][1]
    assert grid[3][3] and grid[2][2]
    # Separator next to the finder
    assert not grid[0][7]
    # Timing pattern alternates starting light at index 7
    assert not grid[6][7]
    assert grid[6][8]
    assert not grid[7][6]
    assert grid[8][6]


def test_light_function_modules_alignment_version_2():
    grid = function_module_grid(2)
    draw_light_function_modules(grid, 2)
    assert grid[18][18]
    assert not grid[17][17]
    assert not grid[19][18]
    assert grid[16][16]


def test_version_blocks_copies_agree():
    grid = function_module_grid(7)
    draw_light_function_modules(grid, 7)
    size = len(grid)
    for i in range(6):
        for j in range(3):
            k = size - 11 + j
            assert grid[i][k] == grid[k][i]


def test_light_function_modules_wrong_version():
    grid = function_module_grid(1)
    with pytest.raises(ValueError):
        draw_light_function_modules(grid, 2)


def test_format_bits_low_mask_0():
    grid = function_module_grid(1)
    draw_format_bits(grid, Ecc.LOW, 0)
    first, second = read_format_copies(grid)
    assert first == 0x77C4
    assert second == first


def test_format_bits_copies_agree_and_distinct():
    seen = set()
    for ecl in Ecc:
        for mask in range(8):
            grid = function_module_grid(3)
            draw_format_bits(grid, ecl, mask)
            first, second = read_format_copies(grid)
            assert first == second
            assert grid[len(grid) - 8][8]
            seen.add(first)
    assert len(seen) == 32


@pytest.mark.parametrize("mask", [-1, 8])
def test_format_bits_bad_mask(mask):
    grid = function_module_grid(1)
    with pytest.raises(ValueError):
        draw_format_bits(grid, Ecc.LOW, mask)


def test_draw_codewords_zero_data_leaves_grid():
    version = 2
    grid = function_module_grid(version)
    before = copy_grid(grid)
    draw_codewords(grid, bytes(get_num_raw_data_modules(version) // 8))
    assert grid == before


@pytest.mark.parametrize("version", [1, 7, 15])
def test_draw_codewords_all_ones(version):
    grid = function_module_grid(version)
    functions = dark_count(grid)
    codewords = get_num_raw_data_modules(version) // 8
    draw_codewords(grid, b"\xff" * codewords)
    assert dark_count(grid) == functions + codewords * 8


def test_draw_codewords_first_bit_bottom_right():
    grid = function_module_grid(1)
    draw_codewords(grid, b"\x80")
    size = len(grid)
    assert grid[size - 1][size - 1]
    assert not grid[size - 1][size - 2]


def test_draw_codewords_too_much_data():
    version = 1
    grid = function_module_grid(version)
    with pytest.raises(ValueError):
        draw_codewords(grid, bytes(get_num_raw_data_modules(version) // 8 + 1))


@pytest.mark.parametrize("mask", range(8))
def test_apply_mask_twice_restores(mask):
    functions = function_module_grid(2)
    grid = function_module_grid(2)
    draw_codewords(grid, bytes(range(get_num_raw_data_modules(2) // 8)))
    before = copy_grid(grid)
    apply_mask(functions, grid, mask)
    assert grid != before
    apply_mask(functions, grid, mask)
    assert grid == before


@pytest.mark.parametrize("mask", range(8))
def test_apply_mask_leaves_function_modules(mask):
    functions = function_module_grid(1)
    grid = function_module_grid(1)
    apply_mask(functions, grid, mask)
    for fn_row, row in zip(functions, grid):
        for is_function, module in zip(fn_row, row):
            if is_function:
                assert module


def test_apply_mask_bad_mask():
    functions = function_module_grid(1)
    grid = function_module_grid(1)
    with pytest.raises(ValueError):
        apply_mask(functions, grid, 8)


def test_penalty_uniform_grids_equal():
    light = new_grid(21)
    dark = [[True] * 21 for _ in range(21)]
    assert get_penalty_score(light) == get_penalty_score(dark)
    assert get_penalty_score(light) > 0


def test_penalty_checkerboard_is_zero():
    grid = [[(x + y) % 2 == 0 for x in range(21)] for y in range(21)]
    assert get_penalty_score(grid) == 0


def test_penalty_transpose_invariant():
    grid = function_module_grid(3)
    draw_light_function_modules(grid, 3)
    transposed = [list(col) for col in zip(*grid)]
    assert get_penalty_score(grid) == get_penalty_score(transposed)
    assert get_penalty_score(grid) < get_penalty_score(new_grid(len(grid)))