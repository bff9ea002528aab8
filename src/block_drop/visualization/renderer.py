

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np
import pygame

from block_drop.game import COLS, ROWS, BlockDropGame, ClearBatch, GameListener, ShapeKind
from block_drop.game.grid import Block
from block_drop.game.pieces import COLORS


logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

PALETTE: Dict[str, Color] = {
    "yellow": (240, 240, 0),
    "cyan": (0, 240, 240),
    "orange": (240, 160, 0),
    "purple": (160, 0, 240),
    "red": (240, 0, 0),
}
FLASH_COLOR: Color = (255, 255, 255)


def _color_for_block(block: Block) -> Color:
    return PALETTE.get(block.color, (200, 200, 200))


def _color_for_value(v: int) -> Color:
    # snapshot values are kind numbers, negative for the falling piece
    return PALETTE.get(COLORS[ShapeKind(abs(v))], (200, 200, 200))


class FlashEffects(GameListener):
    """Plays the clear flash and reports completions back to the engine."""

    def __init__(self, flash_ms: int = 500) -> None:
        self.flash_ms = flash_ms
        self.score = 0
        self.final_score: Optional[int] = None
        self._active: List[Tuple[ClearBatch, int]] = []

    def on_clear_effect(self, batch: ClearBatch) -> None:
        self._active.append((batch, pygame.time.get_ticks()))

    def on_new_game(self) -> None:
        self._active = []
        self.final_score = None

    def on_score(self, score: int) -> None:
        self.score = score

    def on_game_over(self, score: int) -> None:
        self.final_score = score

    def flashing(self) -> List[Tuple[Block, bool]]:
        """Blocks mid-flash, with whether they are lit this frame."""
        now = pygame.time.get_ticks()
        out: List[Tuple[Block, bool]] = []
        for batch, started in self._active:
            lit = ((now - started) // 100) % 2 == 0
            out.extend((block, lit) for block in batch.blocks)
        return out

    def update(self, now: Optional[int] = None) -> None:
        now = pygame.time.get_ticks() if now is None else now
        still_running: List[Tuple[ClearBatch, int]] = []
        for batch, started in self._active:
            if now - started >= self.flash_ms:
                logger.debug("Flash finished for rows %s", batch.rows)
                for block in batch.blocks:
                    batch.effect_done(block)
            else:
                still_running.append((batch, started))
        self._active = still_running


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20, panel_width: int = 160) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None

    @property
    def window_size(self) -> Tuple[int, int]:
        width = self.margin * 3 + COLS * self.cell_size + self.panel_width
        height = self.margin * 2 + ROWS * self.cell_size
        return width, height

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None or self._big_font is None:
            self._font = pygame.font.SysFont(None, 24)
            self._big_font = pygame.font.SysFont(None, 40)
        return self._font, self._big_font

    def cell_rect(self, row: int, col: int) -> pygame.Rect:
        return pygame.Rect(
            self.margin + col * self.cell_size,
            self.margin + row * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )

    def _grid_surface(self) -> pygame.Surface:
        surf = pygame.Surface((COLS * self.cell_size, ROWS * self.cell_size))
        surf.fill((30, 30, 36))
        for row in range(ROWS):
            for col in range(COLS):
                rect = pygame.Rect(col * self.cell_size, row * self.cell_size, self.cell_size - 1, self.cell_size - 1)
                pygame.draw.rect(surf, (20, 20, 26), rect)
        return surf

    def draw_state(self, screen: pygame.Surface, state: np.ndarray) -> None:
        screen.blit(self._grid_surface(), (self.margin, self.margin))
        for row, col in zip(*np.nonzero(state)):
            pygame.draw.rect(screen, _color_for_value(int(state[row, col])), self.cell_rect(int(row), int(col)))

    def draw(self, screen: pygame.Surface, game: BlockDropGame, effects: FlashEffects) -> None:
        font, big_font = self._fonts()
        screen.fill((10, 10, 14))
        self.draw_state(screen, game.get_state())
        for block, lit in effects.flashing():
            color = FLASH_COLOR if lit else _color_for_block(block)
            pygame.draw.rect(screen, color, self.cell_rect(block.row, block.col))

        x_text = self.margin * 2 + COLS * self.cell_size
        info_lines = [
            f"Score: {effects.score}",
            f"Lines: {game.lines_cleared_total}",
            "",
            "Move: Left/Right",
            "Rotate: Up",
            "Drop: Down",
            "New game: N",
        ]
        for i, txt in enumerate(info_lines):
            img = font.render(txt, True, (230, 230, 230))
            screen.blit(img, (x_text, self.margin + i * 22))

        if effects.final_score is not None:
            text = big_font.render("Game Over", True, (255, 100, 100))
            rect = text.get_rect(center=(self.margin + COLS * self.cell_size // 2, screen.get_height() // 2))
            screen.blit(text, rect)
            hint = font.render("Press N for a new game", True, (255, 255, 255))
            screen.blit(hint, hint.get_rect(center=(rect.centerx, rect.bottom + 20)))
        elif not game.running:
            hint = font.render("Press N to start", True, (255, 255, 255))
            screen.blit(hint, hint.get_rect(center=(self.margin + COLS * self.cell_size // 2, screen.get_height() // 2)))

        pygame.display.flip()
