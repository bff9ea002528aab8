import numpy as np
import pytest

from block_drop.game.grid import (
    COLS,
    ROWS,
    Block,
    Position,
    SettledBlocks,
    in_bounds,
    is_occupied,
    is_valid,
)


def fill_row(settled, row, color="red"):
    settled.add(Block(row, col, color) for col in range(COLS))


@pytest.mark.parametrize(
    "pos",
    [Position(ROWS, 0), Position(ROWS + 3, 5), Position(5, -1), Position(5, COLS), Position(-1, 4)],
)
def test_is_valid_rejects_out_of_bounds(pos):
    settled = SettledBlocks()
    assert not in_bounds(pos)
    assert not is_valid([Position(0, 0), pos], settled)


def test_is_valid_accepts_free_cells_and_rejects_occupied():
    settled = SettledBlocks()
    settled.add([Block(10, 3, "cyan")])
    assert is_occupied(Position(10, 3), settled)
    assert not is_occupied(Position(10, 4), settled)
    assert is_valid([Position(0, 0), Position(ROWS - 1, COLS - 1), Position(10, 4)], settled)
    assert not is_valid([Position(9, 3), Position(10, 3)], settled)


def test_blocks_compare_by_identity():
    a = Block(2, 2, "red")
    b = Block(2, 2, "red")
    assert a != b
    assert a.position == b.position == (2, 2)


def test_full_rows_bottom_first():
    settled = SettledBlocks()
    fill_row(settled, 5)
    fill_row(settled, 12)
    settled.add([Block(13, 0, "red")])
    assert settled.full_rows() == [12, 5]
    assert settled.row_count(13) == 1


def test_remove_row_frees_cells():
    settled = SettledBlocks()
    fill_row(settled, 15)
    removed = settled.remove_row(15)
    assert len(removed) == COLS
    assert len(settled) == 0
    assert not settled.is_occupied(Position(15, 0))


def test_shift_down_single_row():
    settled = SettledBlocks()
    above = Block(10, 1, "red")
    below = Block(14, 1, "red")
    settled.add([above, below])
    settled.shift_down([12])
    assert above.position == (11, 1)
    assert below.position == (14, 1)
    assert settled.get(Position(11, 1)) is above
    assert Position(10, 1) not in settled


def test_shift_down_two_rows_is_cumulative():
    settled = SettledBlocks()
    top = Block(3, 0, "red")
    middle = Block(7, 0, "red")
    bottom = Block(12, 0, "red")
    settled.add([top, middle, bottom])
    settled.shift_down([10, 5])
    assert top.row == 5
    assert middle.row == 8
    assert bottom.row == 12


def test_clone_state_uses_palette():
    settled = SettledBlocks()
    settled.add([Block(15, 0, "cyan"), Block(15, 1, "unknown")])
    state = settled.clone_state({"cyan": 2})
    assert state.shape == (ROWS, COLS)
    assert state.dtype == np.int8
    assert state[15, 0] == 2
    assert state[15, 1] == 1
    assert state.sum() == 3


def test_shift_blocks_never_overwrites_a_cell():
    settled = SettledBlocks()
    mover = Block(10, 2, "red")
    landed = Block(12, 2, "cyan")
    settled.add([mover, landed])
    settled.shift_blocks([(mover, 3)])
    assert mover.position == (11, 2)
    assert landed.position == (12, 2)
    assert len(settled) == 2


def test_shift_blocks_stops_above_blocked_cells():
    settled = SettledBlocks()
    mover = Block(0, 5, "red")
    settled.add([mover])
    settled.shift_blocks([(mover, 2)], blocked=[Position(1, 5)])
    assert mover.position == (0, 5)
    assert settled.holds(mover)


def test_shift_blocks_skips_blocks_no_longer_held():
    settled = SettledBlocks()
    gone = Block(3, 3, "red")
    settled.shift_blocks([(gone, 1)])
    assert gone.row == 3
    assert len(settled) == 0
