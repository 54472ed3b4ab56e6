"""Game state resource describing the active phase and run progress."""
from dataclasses import dataclass
from enum import Enum


class GamePhase(Enum):
    """High-level phases that gate which inputs are accepted."""
    HOME = "home"
    PLAYING = "playing"
    LEVELUP = "levelup"
    WON = "won"
    LOST = "lost"


@dataclass
class GameState:
    """Singleton component storing phase, level, score and move budget."""
    phase: GamePhase = GamePhase.HOME
    level_index: int = 0
    score: int = 0
    moves_remaining: int = 0
    multiplier_turns_remaining: int = 0
