"""Level configuration lookup: authored list first, procedural afterwards."""
from __future__ import annotations

import random
from typing import Dict, Sequence

from popmatch.components.level_config import LevelConfig
from popmatch.constants import (
    PALETTE,
    PROCEDURAL_BASE_TARGET,
    PROCEDURAL_MAX_JITTER,
    PROCEDURAL_MIN_COLORS,
    PROCEDURAL_MIN_MOVES,
    PROCEDURAL_TARGET_STEP,
)


def procedural_level(
    level_index: int,
    authored_count: int,
    rng: random.Random,
    *,
    palette: Sequence[str] = PALETTE,
) -> LevelConfig:
    """Build a config for a level past the authored list.

    Targets grow by five per level beyond the list and spread over three to
    five colors. Each color's share is jittered independently, so the total is
    approximate rather than exact.
    """
    base_total = PROCEDURAL_BASE_TARGET + PROCEDURAL_TARGET_STEP * (level_index - authored_count + 1)
    color_count = min(len(palette), PROCEDURAL_MIN_COLORS + level_index // 3)
    colors = rng.sample(list(palette), color_count)
    share = base_total // color_count
    targets: Dict[str, int] = {}
    for color in colors:
        targets[color] = share + rng.randint(0, PROCEDURAL_MAX_JITTER)
    assigned = sum(targets.values())
    move_budget = max(PROCEDURAL_MIN_MOVES, assigned // 3 + 2)
    return LevelConfig(move_budget=move_budget, targets=targets)


def level_config_for(
    level_index: int,
    authored: Sequence[LevelConfig],
    rng: random.Random,
    *,
    palette: Sequence[str] = PALETTE,
) -> LevelConfig:
    if level_index < 0:
        raise ValueError(f"level_index must be non-negative, got {level_index}")
    if level_index < len(authored):
        return authored[level_index]
    return procedural_level(level_index, len(authored), rng, palette=palette)


def has_next_level(level_index: int, authored_count: int, *, endless: bool) -> bool:
    return endless or level_index + 1 < authored_count
