

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Tuple

import numpy as np


logger = logging.getLogger(__name__)

ROWS = 16
COLS = 10
SPAWN_COL = 4


class Position(NamedTuple):
    row: int
    col: int


@dataclass(eq=False)
class Block:
    """A single grid unit. Compared by identity, not by position."""

    row: int
    col: int
    color: str

    @property
    def position(self) -> Position:
        return Position(self.row, self.col)


def in_bounds(pos: Position) -> bool:
    return 0 <= pos.row < ROWS and 0 <= pos.col < COLS


def is_occupied(pos: Position, settled: "SettledBlocks") -> bool:
    return settled.get(pos) is not None


def is_valid(positions: Iterable[Position], settled: "SettledBlocks") -> bool:
    """True when every candidate cell is on the board and free of settled blocks."""
    for pos in positions:
        if not in_bounds(pos):
            return False
        if is_occupied(pos, settled):
            return False
    return True


class SettledBlocks:
    """Blocks that have landed, keyed by position.

    At most one block lives at any position. Rows are numbered from the top
    (row 0) to the bottom (row ``ROWS - 1``).
    """

    def __init__(self) -> None:
        self._cells: Dict[Position, Block] = {}

    def reset(self) -> None:
        self._cells.clear()

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, pos: object) -> bool:
        return pos in self._cells

    def get(self, pos: Position) -> Optional[Block]:
        return self._cells.get(Position(*pos))

    def is_occupied(self, pos: Position) -> bool:
        return is_occupied(Position(*pos), self)

    def can_place(self, positions: Iterable[Position]) -> bool:
        return is_valid((Position(*p) for p in positions), self)

    def add(self, blocks: Iterable[Block]) -> None:
        for block in blocks:
            self._cells[block.position] = block

    def blocks(self) -> Iterator[Block]:
        return iter(list(self._cells.values()))

    def row_count(self, row: int) -> int:
        return sum(1 for pos in self._cells if pos.row == row)

    def full_rows(self) -> List[int]:
        """Indices of full rows, bottom row first."""
        return [row for row in range(ROWS - 1, -1, -1) if self.row_count(row) == COLS]

    def remove_row(self, row: int) -> List[Block]:
        removed = [block for pos, block in self._cells.items() if pos.row == row]
        for block in removed:
            del self._cells[block.position]
        return removed

    def holds(self, block: Block) -> bool:
        return self._cells.get(block.position) is block

    def shift_down(self, cleared_rows: Sequence[int], blocked: Iterable[Position] = ()) -> None:
        """Drop each block by the number of cleared rows below it."""
        if not cleared_rows:
            return
        drops = [(b, sum(1 for r in cleared_rows if r > b.row)) for b in self._cells.values()]
        self.shift_blocks(drops, blocked)

    def shift_blocks(self, drops: Iterable[Tuple[Block, int]], blocked: Iterable[Position] = ()) -> None:
        """Move each held block down by up to its drop count.

        A block stops early above any occupied cell or any cell in ``blocked``,
        so no cell ever ends up holding two blocks.
        """
        obstacles = set(blocked)
        movers = [(b, d) for b, d in drops if d > 0 and self.holds(b)]
        for block, _ in movers:
            del self._cells[block.position]
        for block, drop in sorted(movers, key=lambda m: m[0].row, reverse=True):
            for _ in range(drop):
                below = Position(block.row + 1, block.col)
                if not in_bounds(below) or below in self._cells or below in obstacles:
                    logger.debug("Block at %s stopped short of its shift", block.position)
                    break
                block.row += 1
            self._cells[block.position] = block

    def clone_state(self, palette: Optional[Mapping[str, int]] = None) -> np.ndarray:
        """Return a (ROWS, COLS) int8 array; 0 is empty.

        ``palette`` maps color tags to cell values, unknown colors become 1.
        """
        state = np.zeros((ROWS, COLS), dtype=np.int8)
        for pos, block in self._cells.items():
            state[pos.row, pos.col] = (palette or {}).get(block.color, 1)
        return state
