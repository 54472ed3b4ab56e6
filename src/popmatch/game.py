"""Entry point for the Pop Match engine.

Sets up the ECS world, event bus and systems, and exposes the operations an
input/presentation layer drives.
"""
from __future__ import annotations

import random
from typing import Callable, Optional

from popmatch.audio.audio_engine import AudioEngine
from popmatch.components.game_state import GamePhase
from popmatch.config import GameConfig
from popmatch.events.bus import EVENT_MATCH_RESOLVED, EVENT_TICK, EventBus
from popmatch.systems.board import BoardSystem
from popmatch.systems.effects_system import EffectsSystem
from popmatch.systems.level_system import LevelSystem
from popmatch.systems.match_resolution import MatchResolutionSystem, ResolutionResult
from popmatch.systems.selection import SelectionSystem
from popmatch.utils.game_state import GameSnapshot, get_game_state, snapshot
from popmatch.world import create_world


class PopMatchGame:
    def __init__(
        self,
        config: GameConfig | None = None,
        *,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        audio_player: Optional[Callable[[str], None]] = None,
        muted: bool = False,
    ):
        self.config = config or GameConfig()
        self.event_bus = event_bus or EventBus()
        self.world = create_world(self.event_bus, self.config, rng=rng)

        # Board and level flow
        self.board_system = BoardSystem(self.world, self.event_bus)
        self.level_system = LevelSystem(self.world, self.event_bus)

        # Chain handling
        self.selection_system = SelectionSystem(self.world, self.event_bus)
        self.match_resolution_system = MatchResolutionSystem(self.world, self.event_bus)

        # Presentation-facing collaborators
        self.effects_system = EffectsSystem(self.world, self.event_bus)
        self.audio = AudioEngine(self.event_bus, player=audio_player, muted=muted)

        self._last_result: ResolutionResult | None = None
        self.event_bus.subscribe(EVENT_MATCH_RESOLVED, self._on_match_resolved)

    # Input operations

    def start_selection(self, row: int, col: int) -> bool:
        return self.selection_system.start(row, col)

    def extend_selection(self, row: int, col: int) -> bool:
        return self.selection_system.extend(row, col)

    def commit_selection(self) -> ResolutionResult | None:
        """Release the pointer. Returns the resolution, or None when the chain was discarded."""
        self._last_result = None
        self.selection_system.commit()
        return self._last_result

    # Flow operations

    def reset_run(self) -> bool:
        return self.level_system.reset_run()

    def advance_level(self) -> bool:
        return self.level_system.advance_level()

    def go_home(self) -> bool:
        return self.level_system.go_home()

    def tick(self, dt: float) -> None:
        self.event_bus.emit(EVENT_TICK, dt=dt)

    # Read-only views

    @property
    def phase(self) -> GamePhase:
        return get_game_state(self.world).phase

    def snapshot(self) -> GameSnapshot:
        return snapshot(self.world)

    def _on_match_resolved(self, sender, **kwargs):
        self._last_result = kwargs.get('result')
