from dataclasses import dataclass
from typing import Optional

from popmatch.constants import RAINBOW, SPECIAL, WILDCARDS


@dataclass(slots=True)
class Tile:
    """Contents of an occupied cell.

    ``tile_id`` is an identity token for presentation collaborators (animation
    keying across refills); no game rule reads it.
    """
    color: str
    powerup: Optional[str] = None
    tile_id: int = 0

    @property
    def is_wildcard(self) -> bool:
        return self.color in WILDCARDS

    @property
    def is_rainbow(self) -> bool:
        return self.color == RAINBOW

    @property
    def is_special(self) -> bool:
        return self.color == SPECIAL
