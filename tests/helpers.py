from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from esper import World

from popmatch.config import GameConfig
from popmatch.constants import RAINBOW, SPECIAL
from popmatch.game import PopMatchGame
from popmatch.systems.board_ops import clear_tiles, get_tile_factory, place_tile
from popmatch.utils.game_state import get_game_state, get_targets

COLOR_CODES = {
    'r': 'red',
    'b': 'blue',
    'y': 'yellow',
    'g': 'green',
    'p': 'purple',
    'R': RAINBOW,
    'S': SPECIAL,
}


def paint_board(
    world: World,
    rows: Sequence[str],
    powerups: Optional[Dict[Tuple[int, int], str]] = None,
) -> None:
    """Overwrite the grid from one code string per row ('.' leaves the cell empty)."""
    factory = get_tile_factory(world)
    powerups = powerups or {}
    for r, line in enumerate(rows):
        for c, code in enumerate(line):
            if code == '.':
                clear_tiles(world, [(r, c)])
                continue
            place_tile(world, r, c, factory.make(COLOR_CODES[code], powerups.get((r, c))))


def fill_board(world: World, rows: int, cols: int, code: str = 'y') -> None:
    paint_board(world, [code * cols] * rows)


def set_targets(world: World, **targets: int) -> None:
    get_targets(world).remaining = dict(targets)


def set_moves(world: World, moves: int) -> None:
    get_game_state(world).moves_remaining = moves


def make_game(rows: int = 8, cols: int = 5, *, seed: int = 0, start: bool = True, **config_kwargs) -> PopMatchGame:
    game = PopMatchGame(GameConfig(rows=rows, cols=cols, seed=seed, **config_kwargs))
    if start:
        game.reset_run()
    return game


def drag(game: PopMatchGame, path: Sequence[Tuple[int, int]]) -> bool:
    """Press on the first cell and slide across the rest; True if every step was accepted."""
    if not path:
        return False
    accepted = game.start_selection(*path[0])
    for row, col in path[1:]:
        accepted = game.extend_selection(row, col) and accepted
    return accepted
