from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from esper import World

from popmatch.components.combo_meter import ComboMeter
from popmatch.components.game_state import GamePhase, GameState
from popmatch.components.selection import Selection
from popmatch.components.targets import Targets
from popmatch.components.tile import Tile
from popmatch.events.bus import EVENT_PHASE_CHANGED, EventBus
from popmatch.utils.log import get_logger

log = get_logger(__name__)


def get_state_entity(world: World) -> int:
    for entity, _ in world.get_component(GameState):
        return entity
    raise RuntimeError("GameState not found; build the world with create_world()")


def get_game_state(world: World) -> GameState:
    return world.component_for_entity(get_state_entity(world), GameState)


def get_targets(world: World) -> Targets:
    return world.component_for_entity(get_state_entity(world), Targets)


def get_combo(world: World) -> ComboMeter:
    return world.component_for_entity(get_state_entity(world), ComboMeter)


def get_selection(world: World) -> Selection:
    return world.component_for_entity(get_state_entity(world), Selection)


def set_phase(world: World, event_bus: EventBus, phase: GamePhase) -> bool:
    """Update the global phase and emit a change event when it differs."""
    state = get_game_state(world)
    previous = state.phase
    if previous == phase:
        return False
    state.phase = phase
    log.info("phase %s -> %s (level %d, score %d)", previous.value, phase.value, state.level_index, state.score)
    event_bus.emit(EVENT_PHASE_CHANGED, previous_phase=previous, new_phase=phase)
    return True


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the whole game for presentation collaborators."""
    phase: GamePhase
    level_index: int
    score: int
    moves_remaining: int
    targets: Dict[str, int]
    grid: Tuple[Tuple[Optional[Tile], ...], ...]
    selection: Tuple[Tuple[int, int], ...]
    chain_color: Optional[str]
    combo_meter: int
    combo_streak: int
    multiplier_turns_remaining: int


def snapshot(world: World) -> GameSnapshot:
    # Imported here to keep utils free of a module-level dependency on systems.
    from popmatch.systems.board_ops import board_layout
    from popmatch.systems.selection_rules import chain_color

    state = get_game_state(world)
    combo = get_combo(world)
    chain: List[Tuple[int, int]] = list(get_selection(world).chain)
    return GameSnapshot(
        phase=state.phase,
        level_index=state.level_index,
        score=state.score,
        moves_remaining=state.moves_remaining,
        targets=dict(get_targets(world).remaining),
        grid=tuple(tuple(row) for row in board_layout(world)),
        selection=tuple(chain),
        chain_color=chain_color(world, chain),
        combo_meter=combo.meter,
        combo_streak=combo.streak,
        multiplier_turns_remaining=state.multiplier_turns_remaining,
    )
