

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

import numpy as np

from .grid import SPAWN_COL, Block, Position, SettledBlocks
from .pieces import COLORS, Piece, ShapeKind, spawn_positions
from .rules import ScoringRules
from .timer import TickTimer


logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    NEW_GAME = 4
    NONE = 5


@dataclass
class GameConfig:
    normal_interval_ms: float = 400.0
    fast_interval_ms: float = 15.0
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.normal_interval_ms <= 0 or self.fast_interval_ms <= 0:
            raise ValueError("tick intervals must be positive")


class ClearBatch:
    """Rows removed in one tick, waiting for their clear effects to finish.

    The blocks left on the board at clear time are recorded with how far each
    has to drop. ``on_complete`` runs once every block in the batch has
    reported completion; only the recorded blocks are shifted then.
    """

    def __init__(
        self,
        generation: int,
        rows: Sequence[int],
        blocks: Sequence[Block],
        survivors: Iterable[Block],
        on_complete: Callable[["ClearBatch"], None],
    ) -> None:
        self.generation = generation
        self.rows: Tuple[int, ...] = tuple(rows)
        self.blocks: List[Block] = list(blocks)
        self.drops: List[Tuple[Block, int]] = [
            (b, sum(1 for r in self.rows if r > b.row)) for b in survivors
        ]
        self._on_complete = on_complete
        self._pending: Set[Block] = set(self.blocks)
        self.done = False

    @property
    def pending(self) -> int:
        return len(self._pending)

    def effect_done(self, block: Block) -> None:
        if block not in self.blocks:
            raise ValueError("block is not part of this clear batch")
        self._pending.discard(block)
        if not self._pending:
            self._complete()

    def finish(self) -> None:
        """Mark every effect in the batch as finished."""
        self._pending.clear()
        self._complete()

    def _complete(self) -> None:
        if self.done:
            return
        self.done = True
        self._on_complete(self)


class GameListener:
    """Receives engine output. The default plays no effects."""

    def on_clear_effect(self, batch: ClearBatch) -> None:
        batch.finish()

    def on_new_game(self) -> None:
        pass

    def on_score(self, score: int) -> None:
        pass

    def on_game_over(self, score: int) -> None:
        pass


class BlockDropGame:
    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        listener: Optional[GameListener] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.listener = listener or GameListener()
        self.rng = random.Random(self.config.random_seed)
        self.settled = SettledBlocks()
        self.active_pieces: List[Piece] = []
        self.score = 0
        self.lines_cleared_total = 0
        self.running = False
        self.fast_drop = False
        self.timer = TickTimer(self.config.normal_interval_ms)
        self.pending_batches: List[ClearBatch] = []
        self._generation = 0

    @property
    def game_over(self) -> bool:
        return not self.running

    @property
    def interval_ms(self) -> float:
        return self.timer.interval_ms

    def new_game(self) -> None:
        for piece in self.active_pieces:
            piece.clear()
        self.active_pieces = []
        self.settled.reset()
        self.pending_batches = []
        self._generation += 1
        self.score = 0
        self.lines_cleared_total = 0
        self.fast_drop = False
        self.timer.stop()
        self.timer = TickTimer(self.config.normal_interval_ms)
        self.timer.start()
        self.running = True
        logger.info("New game started")
        self.listener.on_new_game()
        self.listener.on_score(self.score)

    # ---- tick -----------------------------------------------------------
    def tick(self) -> None:
        if not self.running:
            return
        self._advance()
        spawned = True
        if not self.active_pieces:
            spawned = self._spawn_piece()
        batch = self._clear_full_rows()
        if not spawned and batch is not None:
            # cleared rows may have freed the spawn cells
            spawned = self._spawn_piece()
        if not spawned or self.settled.is_occupied(Position(0, SPAWN_COL)):
            self._end_game()

    def update(self, elapsed_ms: float) -> int:
        """Feed frame time to the timer and run every tick that fell due."""
        ticks = 0
        due = self.timer.pop_due(elapsed_ms)
        while due and self.running:
            self.tick()
            ticks += 1
            due = self.timer.pop_due()
        return ticks

    def _advance(self) -> None:
        for piece in list(self.active_pieces):
            if self.settled.can_place(piece.falling_positions()):
                piece.fall()
            else:
                self._commit(piece)

    def _commit(self, piece: Piece) -> None:
        self.active_pieces.remove(piece)
        self.settled.add(piece.blocks)
        logger.debug("Committed %s at %s", piece.kind.name, piece.positions())

    def _spawn_piece(self) -> bool:
        if self.fast_drop:
            self.fast_drop = False
            self.timer.set_interval(self.config.normal_interval_ms)
        kind = self.rng.choice(list(ShapeKind))
        if not self.settled.can_place(spawn_positions(kind)):
            logger.debug("No room to spawn %s", kind.name)
            return False
        self.active_pieces.append(Piece.spawn(kind))
        logger.debug("Spawned %s", kind.name)
        return True

    def _clear_full_rows(self) -> Optional[ClearBatch]:
        rows = self.settled.full_rows()
        if not rows:
            return None
        removed: List[Block] = []
        for row in rows:
            removed.extend(self.settled.remove_row(row))
            self.score += self.rules.score_for_rows(1)
        self.lines_cleared_total += len(rows)
        logger.debug("Cleared rows %s, score %d", rows, self.score)
        self.listener.on_score(self.score)
        batch = ClearBatch(self._generation, rows, removed, self.settled.blocks(), self._apply_clear)
        self.pending_batches.append(batch)
        self.listener.on_clear_effect(batch)
        return batch

    def _apply_clear(self, batch: ClearBatch) -> None:
        if batch.generation != self._generation:
            logger.debug("Ignoring clear batch from a previous game")
            return
        if batch in self.pending_batches:
            self.pending_batches.remove(batch)
        # only blocks recorded at clear time move; active cells are obstacles
        active = [pos for piece in self.active_pieces for pos in piece.positions()]
        self.settled.shift_blocks(batch.drops, blocked=active)

    def _end_game(self) -> None:
        self.running = False
        self.timer.stop()
        logger.info("Game over, score %d", self.score)
        self.listener.on_game_over(self.score)

    # ---- player intents -------------------------------------------------
    def move_left(self) -> bool:
        moved = False
        for piece in self._controllable():
            if self.settled.can_place(piece.left_positions()):
                piece.move_left()
                moved = True
        return moved

    def move_right(self) -> bool:
        moved = False
        for piece in self._controllable():
            if self.settled.can_place(piece.right_positions()):
                piece.move_right()
                moved = True
        return moved

    def rotate(self) -> bool:
        rotated = False
        for piece in self._controllable():
            rotated = piece.rotate(self.settled) or rotated
        return rotated

    def soft_drop(self) -> bool:
        if not self.running:
            return False
        if not self.fast_drop:
            self.fast_drop = True
            self.timer.set_interval(self.config.fast_interval_ms)
        return True

    def _controllable(self) -> List[Piece]:
        return list(self.active_pieces) if self.running else []

    def step(self, action: Action) -> Tuple[np.ndarray, bool, dict]:
        if action == Action.LEFT:
            self.move_left()
        elif action == Action.RIGHT:
            self.move_right()
        elif action == Action.ROTATE:
            self.rotate()
        elif action == Action.SOFT_DROP:
            self.soft_drop()
        elif action == Action.NEW_GAME:
            self.new_game()
        elif action == Action.NONE:
            pass

        info = {
            "score": self.score,
            "lines_cleared_total": self.lines_cleared_total,
            "fast_drop": self.fast_drop,
        }
        return self.get_state(), self.game_over, info

    # ---- snapshots ------------------------------------------------------
    def blocks(self) -> Iterator[Tuple[Block, bool]]:
        """Yield ``(block, is_active)`` for every block on the board."""
        for block in self.settled.blocks():
            yield block, False
        for piece in self.active_pieces:
            for block in piece.blocks:
                yield block, True

    def get_state(self) -> np.ndarray:
        palette: Dict[str, int] = {color: int(kind) for kind, color in COLORS.items()}
        state = self.settled.clone_state(palette)
        for piece in self.active_pieces:
            for pos in piece.positions():
                if 0 <= pos.row < state.shape[0] and 0 <= pos.col < state.shape[1]:
                    # Negative marks the falling piece
                    state[pos.row, pos.col] = -int(piece.kind)
        return state
