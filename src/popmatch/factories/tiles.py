from __future__ import annotations

import itertools
import random
from typing import Iterator, Optional, Sequence

from popmatch.components.tile import Tile
from popmatch.constants import (
    PALETTE,
    POWERUP_AREA_BOMB,
    POWERUP_CHANCE,
    POWERUP_EXTRA_MOVES,
    POWERUP_SCORE_MULTIPLIER,
    POWERUP_THRESHOLDS,
)


class TileFactory:
    """Produces fresh tiles for generation and refill.

    Owns the random source used for colors/powerups and the identity counter
    that gives every tile instance a distinct ``tile_id``.
    """

    def __init__(
        self,
        rng: random.Random,
        *,
        palette: Sequence[str] = PALETTE,
        powerups_enabled: bool = True,
        powerup_chance: float = POWERUP_CHANCE,
    ) -> None:
        self.rng = rng
        self.palette = tuple(palette)
        self.powerups_enabled = powerups_enabled
        self.powerup_chance = powerup_chance
        self._ids: Iterator[int] = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def roll_powerup(self) -> Optional[str]:
        if not self.powerups_enabled:
            return None
        if self.rng.random() >= self.powerup_chance:
            return None
        roll = self.rng.random()
        low, high = POWERUP_THRESHOLDS
        if roll < low:
            return POWERUP_EXTRA_MOVES
        if roll < high:
            return POWERUP_SCORE_MULTIPLIER
        return POWERUP_AREA_BOMB

    def spawn(self) -> Tile:
        """Random base-color tile; never a wildcard."""
        color = self.rng.choice(self.palette)
        return Tile(color=color, powerup=self.roll_powerup(), tile_id=self.next_id())

    def make(self, color: str, powerup: Optional[str] = None) -> Tile:
        """Explicit tile, used for reward placement and deterministic layouts."""
        return Tile(color=color, powerup=powerup, tile_id=self.next_id())
