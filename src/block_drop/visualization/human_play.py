

from __future__ import annotations

import argparse
import logging
from typing import Callable, Dict, Optional, Sequence

import pygame

from block_drop.game import BlockDropGame, GameConfig
from .renderer import FlashEffects, Renderer


logger = logging.getLogger(__name__)

KEY_TO_INTENT: Dict[int, Callable[[BlockDropGame], object]] = {
    pygame.K_LEFT: BlockDropGame.move_left,
    pygame.K_RIGHT: BlockDropGame.move_right,
    pygame.K_UP: BlockDropGame.rotate,
    pygame.K_DOWN: BlockDropGame.soft_drop,
    pygame.K_n: BlockDropGame.new_game,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Block Drop")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--interval-ms", type=float, default=400.0)
    p.add_argument("--fast-interval-ms", type=float, default=15.0)
    p.add_argument("--cell-size", type=int, default=30)
    p.add_argument("--flash-ms", type=int, default=500)
    p.add_argument("--log-level", default="WARNING")
    return p


def handle_key(game: BlockDropGame, key: int) -> bool:
    intent = KEY_TO_INTENT.get(key)
    if intent is None:
        return False
    intent(game)
    return True


def run(config: Optional[GameConfig] = None, cell_size: int = 30, flash_ms: int = 500) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        effects = FlashEffects(flash_ms=flash_ms)
        game = BlockDropGame(config, listener=effects)
        renderer = Renderer(cell_size=cell_size)

        screen = pygame.display.set_mode(renderer.window_size)
        pygame.display.set_caption("Block Drop")

        game.new_game()

        running = True
        while running:
            dt = clock.tick(60)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        handle_key(game, event.key)

            game.update(dt)
            effects.update()
            renderer.draw(screen, game, effects)
    finally:
        pygame.quit()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    config = GameConfig(
        normal_interval_ms=args.interval_ms,
        fast_interval_ms=args.fast_interval_ms,
        random_seed=args.seed,
    )
    logger.debug("Starting with %s", config)
    run(config, cell_size=args.cell_size, flash_ms=args.flash_ms)


if __name__ == "__main__":  # pragma: no cover
    main()
