"""Game module for Block Drop.

Exports the game-state engine and supporting classes:
- Position, Block, SettledBlocks: grid model, validity checks and landed blocks
- Piece, ShapeKind: the five falling shapes with movement and rotation
- ScoringRules: points per cleared row
- TickTimer: cooperative periodic timer
- BlockDropGame: tick loop, player intents, line clears and game over
"""

from .grid import COLS, ROWS, Block, Position, SettledBlocks, in_bounds, is_occupied, is_valid
from .pieces import Piece, ShapeKind, rotated_positions, spawn_positions
from .rules import ScoringRules
from .timer import TickTimer
from .core import Action, BlockDropGame, ClearBatch, GameConfig, GameListener

__all__ = [
    "COLS",
    "ROWS",
    "Block",
    "Position",
    "SettledBlocks",
    "in_bounds",
    "is_occupied",
    "is_valid",
    "Piece",
    "ShapeKind",
    "rotated_positions",
    "spawn_positions",
    "ScoringRules",
    "TickTimer",
    "Action",
    "BlockDropGame",
    "ClearBatch",
    "GameConfig",
    "GameListener",
]
