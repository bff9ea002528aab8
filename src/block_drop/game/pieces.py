

from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Sequence, Tuple

from .grid import SPAWN_COL, Block, Position, SettledBlocks, is_valid


class ShapeKind(IntEnum):
    SQUARE = 1
    LINE = 2
    L = 3
    T = 4
    Z = 5


# Spawn cells as (row, col offset from SPAWN_COL). The second cell is the pivot.
SPAWN_LAYOUTS: Dict[ShapeKind, Tuple[Tuple[int, int], ...]] = {
    ShapeKind.SQUARE: ((0, 0), (0, 1), (1, 0), (1, 1)),
    ShapeKind.LINE: ((0, 0), (1, 0), (2, 0), (3, 0)),
    ShapeKind.L: ((0, 0), (1, 0), (2, 0), (2, 1)),
    ShapeKind.T: ((1, -1), (1, 0), (1, 1), (0, 0)),
    ShapeKind.Z: ((0, -1), (0, 0), (1, 0), (1, 1)),
}

COLORS: Dict[ShapeKind, str] = {
    ShapeKind.SQUARE: "yellow",
    ShapeKind.LINE: "cyan",
    ShapeKind.L: "orange",
    ShapeKind.T: "purple",
    ShapeKind.Z: "red",
}

PIVOT_INDEX = 1


def spawn_positions(kind: ShapeKind) -> List[Position]:
    return [Position(row, SPAWN_COL + dc) for row, dc in SPAWN_LAYOUTS[kind]]


def rotated_positions(kind: ShapeKind, positions: Sequence[Position]) -> List[Position]:
    """Rotate ``positions`` 90 degrees clockwise about the pivot cell."""
    if kind == ShapeKind.SQUARE:
        return list(positions)
    pivot = positions[PIVOT_INDEX]
    rotated: List[Position] = []
    for pos in positions:
        d_row = pos.row - pivot.row
        d_col = pos.col - pivot.col
        rotated.append(Position(pivot.row - d_col, pivot.col + d_row))
    return rotated


class Piece:
    """The falling group of four blocks."""

    def __init__(self, kind: ShapeKind, blocks: Sequence[Block]) -> None:
        if len(blocks) != 4:
            raise ValueError(f"a piece needs exactly 4 blocks, got {len(blocks)}")
        self.kind = kind
        self.blocks: List[Block] = list(blocks)

    @classmethod
    def spawn(cls, kind: ShapeKind) -> "Piece":
        color = COLORS[kind]
        return cls(kind, [Block(p.row, p.col, color) for p in spawn_positions(kind)])

    @property
    def pivot(self) -> Block:
        return self.blocks[PIVOT_INDEX]

    def positions(self) -> List[Position]:
        return [b.position for b in self.blocks]

    def falling_positions(self) -> List[Position]:
        return [Position(b.row + 1, b.col) for b in self.blocks]

    def left_positions(self) -> List[Position]:
        return [Position(b.row, b.col - 1) for b in self.blocks]

    def right_positions(self) -> List[Position]:
        return [Position(b.row, b.col + 1) for b in self.blocks]

    def rotate_positions(self) -> List[Position]:
        return rotated_positions(self.kind, self.positions())

    # Mutators below do not check validity.
    def fall(self) -> None:
        for b in self.blocks:
            b.row += 1

    def move_left(self) -> None:
        for b in self.blocks:
            b.col -= 1

    def move_right(self) -> None:
        for b in self.blocks:
            b.col += 1

    def rotate(self, settled: SettledBlocks) -> bool:
        """Rotate in place if the result is valid; otherwise leave the piece alone."""
        target = self.rotate_positions()
        if not is_valid(target, settled):
            return False
        for block, pos in zip(self.blocks, target):
            block.row, block.col = pos
        return True

    def clear(self) -> None:
        self.blocks = []
