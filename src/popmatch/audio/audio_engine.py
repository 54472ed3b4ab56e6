"""Maps core events to audio cue kinds.

The engine is an owned object wired to the bus next to the core systems. It
holds the mute flag and forwards cue kinds to whatever player the host
supplies; tone synthesis itself lives outside this package.
"""
from __future__ import annotations

from typing import Callable, List, Optional

from popmatch.components.game_state import GamePhase
from popmatch.events.bus import (
    EVENT_COMBO_BREAKOUT,
    EVENT_MATCH_RESOLVED,
    EVENT_PHASE_CHANGED,
    EVENT_SELECTION_EXTENDED,
    EVENT_SELECTION_STARTED,
    EventBus,
)
from popmatch.systems.scoring import BonusTier
from popmatch.utils.log import get_logger

log = get_logger(__name__)

CUE_SELECT = 'select'
CUE_POP = 'pop'
CUE_BONUS = 'bonus'
CUE_SUPER = 'super'
CUE_BOMB = 'bomb'
CUE_EXTRA_MOVES = 'extra_moves'
CUE_MULTIPLIER = 'multiplier'
CUE_BREAKOUT = 'breakout'
CUE_LEVEL_UP = 'level_up'
CUE_WIN = 'win'
CUE_LOSE = 'lose'

CUE_KINDS = (
    CUE_SELECT, CUE_POP, CUE_BONUS, CUE_SUPER, CUE_BOMB, CUE_EXTRA_MOVES,
    CUE_MULTIPLIER, CUE_BREAKOUT, CUE_LEVEL_UP, CUE_WIN, CUE_LOSE,
)

_PHASE_CUES = {
    GamePhase.LEVELUP: CUE_LEVEL_UP,
    GamePhase.WON: CUE_WIN,
    GamePhase.LOST: CUE_LOSE,
}


class AudioEngine:
    def __init__(
        self,
        event_bus: EventBus | None = None,
        *,
        player: Optional[Callable[[str], None]] = None,
        muted: bool = False,
    ) -> None:
        self.muted = muted
        self._player = player
        self.history: List[str] = []
        if event_bus is not None:
            self.attach(event_bus)

    def attach(self, event_bus: EventBus) -> None:
        event_bus.subscribe(EVENT_SELECTION_STARTED, self._on_selection)
        event_bus.subscribe(EVENT_SELECTION_EXTENDED, self._on_selection)
        event_bus.subscribe(EVENT_MATCH_RESOLVED, self._on_match_resolved)
        event_bus.subscribe(EVENT_COMBO_BREAKOUT, self._on_breakout)
        event_bus.subscribe(EVENT_PHASE_CHANGED, self._on_phase_changed)

    def toggle_mute(self) -> bool:
        self.muted = not self.muted
        return self.muted

    def play_event(self, kind: str) -> bool:
        """Forward one cue to the player; returns False when muted or unknown."""
        if kind not in CUE_KINDS:
            log.debug("unknown cue kind %r", kind)
            return False
        if self.muted:
            return False
        self.history.append(kind)
        if self._player is not None:
            self._player(kind)
        return True

    def _on_selection(self, sender, **kwargs):
        self.play_event(CUE_SELECT)

    def _on_match_resolved(self, sender, **kwargs):
        result = kwargs.get('result')
        if result is None:
            return
        if result.tier is BonusTier.SUPER:
            self.play_event(CUE_SUPER)
        elif result.tier is BonusTier.BONUS:
            self.play_event(CUE_BONUS)
        else:
            self.play_event(CUE_POP)
        if result.bomb_activated:
            self.play_event(CUE_BOMB)
        if result.extra_moves:
            self.play_event(CUE_EXTRA_MOVES)
        if result.multiplier_activated:
            self.play_event(CUE_MULTIPLIER)

    def _on_breakout(self, sender, **kwargs):
        self.play_event(CUE_BREAKOUT)

    def _on_phase_changed(self, sender, **kwargs):
        cue = _PHASE_CUES.get(kwargs.get('new_phase'))
        if cue is not None:
            self.play_event(cue)
