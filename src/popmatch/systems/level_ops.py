from __future__ import annotations

import random
from typing import Dict

from esper import World

from popmatch.components.game_state import GamePhase
from popmatch.components.level_config import LevelConfig
from popmatch.config import GameConfig
from popmatch.factories.levels import has_next_level, level_config_for
from popmatch.utils.game_state import get_game_state, get_selection, get_targets
from popmatch.utils.log import get_logger

log = get_logger(__name__)


def get_config(world: World) -> GameConfig:
    config = getattr(world, "config", None)
    if isinstance(config, GameConfig):
        return config
    raise RuntimeError("GameConfig not attached to world")


def level_config_at(world: World, level_index: int) -> LevelConfig:
    """Config for ``level_index``; procedural configs are generated once and cached."""
    config = get_config(world)
    cache: Dict[int, LevelConfig] = getattr(world, "level_cache", None) or {}
    if level_index in cache:
        return cache[level_index]
    rng = getattr(world, "random", None)
    if not isinstance(rng, random.Random):
        rng = random.Random()
    level = level_config_for(level_index, config.levels, rng, palette=config.palette)
    cache[level_index] = level
    setattr(world, "level_cache", cache)
    return level


def load_level(world: World, level_index: int) -> LevelConfig:
    """Reset moves, targets and multiplier from the level's config.

    The grid is dealt separately (BoardSystem reacts to EVENT_LEVEL_STARTED).
    """
    level = level_config_at(world, level_index)
    state = get_game_state(world)
    state.level_index = level_index
    state.moves_remaining = level.move_budget
    state.multiplier_turns_remaining = 0
    get_targets(world).remaining = dict(level.targets)
    get_selection(world).clear()
    log.info("level %d loaded: %d moves, targets %s", level_index, level.move_budget, dict(level.targets))
    return level


def evaluate_outcome(world: World) -> GamePhase | None:
    """Phase a resolved commit leads to, or None to keep playing.

    The win check runs first: a commit that spends the last move while also
    clearing every target completes the level.
    """
    state = get_game_state(world)
    config = get_config(world)
    if get_targets(world).is_complete():
        if has_next_level(state.level_index, len(config.levels), endless=config.endless):
            return GamePhase.LEVELUP
        return GamePhase.WON
    if state.moves_remaining <= 0:
        return GamePhase.LOST
    return None
