from __future__ import annotations

from typing import Tuple

from esper import World

from popmatch.components.game_state import GamePhase
from popmatch.events.bus import (
    EVENT_CELL_ENTERED,
    EVENT_CHAIN_COMMITTED,
    EVENT_CHAIN_DISCARDED,
    EVENT_PHASE_CHANGED,
    EVENT_SELECTION_CANCELLED,
    EVENT_SELECTION_COMMIT_REQUEST,
    EVENT_SELECTION_EXTENDED,
    EVENT_SELECTION_REJECTED,
    EVENT_SELECTION_RETRACTED,
    EVENT_SELECTION_START_REQUEST,
    EVENT_SELECTION_STARTED,
    EventBus,
)
from popmatch.systems.board_ops import is_king_adjacent, tile_at
from popmatch.systems.level_ops import get_config
from popmatch.systems.selection_rules import accepts_tile, chain_color
from popmatch.utils.game_state import get_game_state, get_selection
from popmatch.utils.log import get_logger

log = get_logger(__name__)

Position = Tuple[int, int]


class SelectionSystem:
    """Idle/active chain machine fed by pointer events.

    Start, extend and commit requests arrive on the bus (or through the direct
    methods, which return whether the input was accepted). A committed chain
    that meets the minimum length is handed on via EVENT_CHAIN_COMMITTED;
    anything shorter goes out as EVENT_CHAIN_DISCARDED. Either way the machine
    returns to idle.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_SELECTION_START_REQUEST, self.on_start_request)
        self.event_bus.subscribe(EVENT_CELL_ENTERED, self.on_cell_entered)
        self.event_bus.subscribe(EVENT_SELECTION_COMMIT_REQUEST, self.on_commit_request)
        self.event_bus.subscribe(EVENT_PHASE_CHANGED, self.on_phase_changed)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_start_request(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.start(row, col)

    def on_cell_entered(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.extend(row, col)

    def on_commit_request(self, sender, **kwargs):
        self.commit()

    def on_phase_changed(self, sender, **kwargs):
        if kwargs.get('new_phase') == GamePhase.PLAYING:
            return
        self.cancel(reason='phase_changed')

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, row: int, col: int) -> bool:
        selection = get_selection(self.world)
        if selection.active:
            return self._reject(row, col, 'already_active')
        if get_game_state(self.world).phase != GamePhase.PLAYING:
            return self._reject(row, col, 'not_playing')
        if tile_at(self.world, row, col) is None:
            return self._reject(row, col, 'empty_cell')
        selection.chain.append((row, col))
        self.event_bus.emit(EVENT_SELECTION_STARTED, row=row, col=col, chain=tuple(selection.chain))
        return True

    def extend(self, row: int, col: int) -> bool:
        selection = get_selection(self.world)
        if not selection.active:
            return False
        if get_game_state(self.world).phase != GamePhase.PLAYING:
            return self._reject(row, col, 'not_playing')
        chain = selection.chain
        pos = (row, col)
        if len(chain) >= 2 and chain[-2] == pos:
            removed = chain.pop()
            self.event_bus.emit(EVENT_SELECTION_RETRACTED, removed=removed, chain=tuple(chain))
            return True
        if pos in chain:
            return False
        if not is_king_adjacent(chain[-1], pos):
            return self._reject(row, col, 'not_adjacent')
        tile = tile_at(self.world, row, col)
        if tile is None:
            return self._reject(row, col, 'empty_cell')
        established = chain_color(self.world, chain)
        if not accepts_tile(established, tile):
            return self._reject(row, col, 'color_mismatch')
        chain.append(pos)
        self.event_bus.emit(
            EVENT_SELECTION_EXTENDED,
            row=row,
            col=col,
            chain=tuple(chain),
            chain_color=chain_color(self.world, chain),
        )
        return True

    def commit(self) -> bool:
        selection = get_selection(self.world)
        if not selection.active:
            return False
        chain = tuple(selection.chain)
        color = chain_color(self.world, chain)
        selection.clear()
        threshold = get_config(self.world).ruleset.min_match_for(color)
        if len(chain) < threshold:
            log.debug("discarding chain of %d (needs %d for %s)", len(chain), threshold, color)
            self.event_bus.emit(EVENT_CHAIN_DISCARDED, chain=chain, reason='too_short')
            return False
        self.event_bus.emit(EVENT_CHAIN_COMMITTED, chain=chain)
        return True

    def cancel(self, reason: str = 'cancelled') -> bool:
        selection = get_selection(self.world)
        if not selection.active:
            return False
        chain = tuple(selection.chain)
        selection.clear()
        self.event_bus.emit(EVENT_SELECTION_CANCELLED, chain=chain, reason=reason)
        return True

    def _reject(self, row: int, col: int, reason: str) -> bool:
        log.debug("selection rejected at (%s, %s): %s", row, col, reason)
        self.event_bus.emit(EVENT_SELECTION_REJECTED, row=row, col=col, reason=reason)
        return False
