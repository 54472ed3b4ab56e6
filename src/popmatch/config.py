"""Run configuration: grid size, ruleset variant and level list."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from popmatch.components.level_config import LevelConfig
from popmatch.constants import GRID_COLS, GRID_ROWS, MIN_MATCH, PALETTE, PER_COLOR_MIN_MATCH, POWERUP_CHANCE


@dataclass(frozen=True)
class RuleSet:
    """One self-consistent rule variant.

    The fixed-minimum variant carries powerups, bonus tiers and reward tiles.
    The per-color variant replaces all of that with a minimum chain length per
    color. The two are alternatives; mixing their flags is rejected.
    """
    name: str
    min_match: int = MIN_MATCH
    min_match_by_color: Optional[Mapping[str, int]] = None
    powerups_enabled: bool = True
    bonus_tiers_enabled: bool = True
    powerup_chance: float = POWERUP_CHANCE

    def __post_init__(self) -> None:
        if self.min_match < 1:
            raise ValueError(f"min_match must be at least 1, got {self.min_match}")
        if not 0.0 <= self.powerup_chance <= 1.0:
            raise ValueError(f"powerup_chance must lie in [0, 1], got {self.powerup_chance}")
        if self.min_match_by_color is not None:
            if self.powerups_enabled or self.bonus_tiers_enabled:
                raise ValueError("per-color minimums cannot be combined with powerups or bonus tiers")
            for color, threshold in self.min_match_by_color.items():
                if threshold < 1:
                    raise ValueError(f"minimum for {color!r} must be at least 1, got {threshold}")

    def min_match_for(self, color: Optional[str]) -> int:
        if self.min_match_by_color is None or color is None:
            return self.min_match
        return self.min_match_by_color.get(color, self.min_match)


POWERUP_RULES = RuleSet(name="powerups")
PER_COLOR_RULES = RuleSet(
    name="per_color",
    min_match_by_color=dict(PER_COLOR_MIN_MATCH),
    powerups_enabled=False,
    bonus_tiers_enabled=False,
)


# Hand-authored early levels; level 0 is the classic 20-move board.
AUTHORED_LEVELS: Tuple[LevelConfig, ...] = (
    LevelConfig(move_budget=20, targets={'yellow': 15, 'red': 10, 'blue': 5}),
    LevelConfig(move_budget=20, targets={'green': 15, 'purple': 12, 'blue': 8}),
    LevelConfig(move_budget=18, targets={'red': 18, 'yellow': 12, 'green': 10}),
    LevelConfig(move_budget=22, targets={'blue': 20, 'purple': 15, 'red': 10, 'yellow': 8}),
    LevelConfig(move_budget=20, targets={'red': 15, 'blue': 15, 'yellow': 15, 'green': 15, 'purple': 10}),
)


@dataclass
class GameConfig:
    rows: int = GRID_ROWS
    cols: int = GRID_COLS
    ruleset: RuleSet = POWERUP_RULES
    # When True, clearing the last authored level continues into procedural levels.
    endless: bool = True
    seed: Optional[int] = None
    levels: Tuple[LevelConfig, ...] = AUTHORED_LEVELS
    palette: Tuple[str, ...] = PALETTE

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"grid must have positive dimensions, got {self.rows}x{self.cols}")
        if not self.levels:
            raise ValueError("at least one authored level is required")
        if not self.palette:
            raise ValueError("palette must not be empty")
