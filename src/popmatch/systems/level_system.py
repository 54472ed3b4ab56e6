"""Phase coordinator: run resets, level advancement and the home screen."""
from __future__ import annotations

from esper import World

from popmatch.components.game_state import GamePhase
from popmatch.events.bus import (
    EVENT_GO_HOME_REQUEST,
    EVENT_LEVEL_ADVANCE_REQUEST,
    EVENT_LEVEL_STARTED,
    EVENT_RUN_RESET_REQUEST,
    EventBus,
)
from popmatch.systems.level_ops import load_level
from popmatch.utils.game_state import get_combo, get_game_state, set_phase
from popmatch.utils.log import get_logger

log = get_logger(__name__)


class LevelSystem:
    """Owns the home -> playing -> {levelup, won, lost} machine.

    Win/loss detection itself happens at the end of each resolution (see
    ``level_ops.evaluate_outcome``); this system handles the transitions the
    player asks for afterwards.
    """

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_RUN_RESET_REQUEST, self._on_reset_request)
        self.event_bus.subscribe(EVENT_LEVEL_ADVANCE_REQUEST, self._on_advance_request)
        self.event_bus.subscribe(EVENT_GO_HOME_REQUEST, self._on_home_request)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_reset_request(self, sender, **payload) -> None:
        self.reset_run()

    def _on_advance_request(self, sender, **payload) -> None:
        self.advance_level()

    def _on_home_request(self, sender, **payload) -> None:
        self.go_home()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def reset_run(self) -> bool:
        """Start a fresh run at level 0; also the way out of the home screen."""
        self._reset_progress()
        self._start_level(0)
        set_phase(self.world, self.event_bus, GamePhase.PLAYING)
        return True

    def advance_level(self) -> bool:
        state = get_game_state(self.world)
        if state.phase != GamePhase.LEVELUP:
            log.debug("advance_level ignored in phase %s", state.phase.value)
            return False
        self._start_level(state.level_index + 1)
        set_phase(self.world, self.event_bus, GamePhase.PLAYING)
        return True

    def go_home(self) -> bool:
        self._reset_progress()
        self._start_level(0)
        set_phase(self.world, self.event_bus, GamePhase.HOME)
        return True

    # ------------------------------------------------------------------
    # Utility helpers
    # ------------------------------------------------------------------

    def _start_level(self, level_index: int) -> None:
        config = load_level(self.world, level_index)
        self.event_bus.emit(EVENT_LEVEL_STARTED, level_index=level_index, config=config)

    def _reset_progress(self) -> None:
        state = get_game_state(self.world)
        state.score = 0
        state.multiplier_turns_remaining = 0
        get_combo(self.world).reset()
        # A new run rolls fresh procedural levels.
        setattr(self.world, "level_cache", {})
