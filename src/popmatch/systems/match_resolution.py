from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from esper import World

from popmatch.components.game_state import GamePhase
from popmatch.constants import (
    COMBO_BREAK_PENALTY,
    COMBO_BREAKOUT_MOVES,
    COMBO_BREAKOUT_SCORE,
    COMBO_METER_MAX,
    EXTRA_MOVES_PER_POWERUP,
    POWERUP_AREA_BOMB,
    POWERUP_EXTRA_MOVES,
    POWERUP_SCORE_MULTIPLIER,
    SCORE_MULTIPLIER_TURNS,
    SUPER_TIER_MOVE_BONUS,
)
from popmatch.events.bus import (
    EVENT_CHAIN_COMMITTED,
    EVENT_CHAIN_DISCARDED,
    EVENT_COMBO_BREAKOUT,
    EVENT_COMBO_BROKEN,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_RESOLVED,
    EVENT_POWERUP_TRIGGERED,
    EVENT_REFILL_COMPLETED,
    EVENT_REWARD_TILE_PLACED,
    EVENT_TARGETS_CHANGED,
    EventBus,
)
from popmatch.systems.board_ops import (
    GravityMove,
    active_tile_map,
    clear_tiles,
    get_tile_factory,
    place_tile,
    settle_board,
)
from popmatch.systems.level_ops import evaluate_outcome, get_config
from popmatch.systems.scoring import BonusTier, combo_gain, reward_color, score_delta, tier_for
from popmatch.systems.selection_rules import chain_problem, first_base_color
from popmatch.utils.game_state import get_combo, get_game_state, get_targets, set_phase
from popmatch.utils.log import get_logger

log = get_logger(__name__)

Position = Tuple[int, int]


@dataclass(frozen=True)
class ResolutionResult:
    """Everything presentation and audio collaborators need about one resolved commit."""
    chain: Tuple[Position, ...]
    removed: Tuple[Position, ...]
    removal_count: int
    tier: BonusTier
    chain_color: Optional[str]
    score_delta: int
    moves_delta: int
    extra_moves: int = 0
    multiplier_activated: bool = False
    multiplier_applied: bool = False
    bomb_activated: bool = False
    bomb_positions: Tuple[Position, ...] = ()
    breakout: bool = False
    breakout_bonus: int = 0
    reward_tile: Optional[Tuple[Position, str]] = None
    target_deltas: Dict[str, int] = field(default_factory=dict)
    gravity_moves: Tuple[GravityMove, ...] = ()
    new_tiles: Tuple[Position, ...] = ()
    explosion_origin: Optional[Position] = None
    phase: GamePhase = GamePhase.PLAYING

    @property
    def total_score(self) -> int:
        return self.score_delta + self.breakout_bonus

    @property
    def powerups_fired(self) -> Tuple[str, ...]:
        fired: List[str] = []
        if self.extra_moves:
            fired.append(POWERUP_EXTRA_MOVES)
        if self.multiplier_activated:
            fired.append(POWERUP_SCORE_MULTIPLIER)
        if self.bomb_activated:
            fired.append(POWERUP_AREA_BOMB)
        return tuple(fired)


class MatchResolutionSystem:
    """Turns a committed chain into score, targets, moves and a settled board.

    Every commit either resolves fully or is discarded without touching state;
    the chain is re-validated here so a malformed chain can never corrupt the
    grid. Released chains that fall short break the combo streak.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.last_result: ResolutionResult | None = None
        self.event_bus.subscribe(EVENT_CHAIN_COMMITTED, self.on_chain_committed)
        self.event_bus.subscribe(EVENT_CHAIN_DISCARDED, self.on_chain_discarded)

    def on_chain_committed(self, sender, **kwargs):
        chain = kwargs.get('chain')
        if not chain:
            return
        self.resolve(chain)

    def on_chain_discarded(self, sender, **kwargs):
        chain = kwargs.get('chain') or ()
        # A single tap is not an attempted chain.
        if len(chain) < 2:
            return
        state = get_game_state(self.world)
        if state.phase != GamePhase.PLAYING:
            return
        combo = get_combo(self.world)
        combo.streak = 0
        combo.meter = max(0, combo.meter - COMBO_BREAK_PENALTY)
        self.event_bus.emit(EVENT_COMBO_BROKEN, meter=combo.meter)

    def resolve(self, chain: Sequence[Position]) -> ResolutionResult | None:
        chain = tuple((int(row), int(col)) for row, col in chain)
        state = get_game_state(self.world)
        if state.phase != GamePhase.PLAYING:
            log.debug("ignoring commit outside play (phase %s)", state.phase.value)
            return None
        ruleset = get_config(self.world).ruleset
        tiles = active_tile_map(self.world)
        problem = chain_problem(self.world, chain, tiles)
        color = first_base_color([tiles[pos] for pos in chain if pos in tiles])
        if problem is None and len(chain) < ruleset.min_match_for(color):
            problem = 'too_short'
        if problem is not None:
            log.debug("discarding committed chain %s: %s", chain, problem)
            self.event_bus.emit(EVENT_CHAIN_DISCARDED, chain=chain, reason=problem)
            return None

        # Powerup collection
        chain_tiles = [tiles[pos] for pos in chain]
        extra_moves = EXTRA_MOVES_PER_POWERUP * sum(1 for t in chain_tiles if t.powerup == POWERUP_EXTRA_MOVES)
        multiplier_activated = any(t.powerup == POWERUP_SCORE_MULTIPLIER for t in chain_tiles)
        bomb_activated = any(t.powerup == POWERUP_AREA_BOMB for t in chain_tiles)

        # Bomb expansion
        chain_set = set(chain)
        bomb_positions: List[Position] = []
        if bomb_activated and color is not None:
            bomb_positions = [pos for pos in sorted(tiles) if pos not in chain_set and tiles[pos].color == color]
        removed: List[Position] = list(chain) + bomb_positions
        removal_count = len(removed)
        had_rainbow = any(tiles[pos].is_rainbow for pos in removed)
        had_special = any(tiles[pos].is_special for pos in removed)

        # Tier and score
        tier = tier_for(removal_count, enabled=ruleset.bonus_tiers_enabled)
        multiplier_applied = state.multiplier_turns_remaining > 0 or multiplier_activated
        delta = score_delta(removal_count, tier, multiplier_applied)
        state.score += delta

        # Combo meter
        combo = get_combo(self.world)
        combo.streak += 1
        combo.meter += combo_gain(removal_count)
        breakout = combo.meter >= COMBO_METER_MAX
        breakout_bonus = 0
        if breakout:
            combo.meter = 0
            breakout_bonus = COMBO_BREAKOUT_SCORE
            state.score += breakout_bonus

        # Clear, leaving the reward wildcard on the chain's last cell
        reward = reward_color(tier)
        last = chain[-1]
        to_clear = [pos for pos in removed if not (reward is not None and pos == last)]
        cleared = clear_tiles(self.world, to_clear)
        reward_tile: Optional[Tuple[Position, str]] = None
        if reward is not None:
            place_tile(self.world, last[0], last[1], get_tile_factory(self.world).make(reward))
            reward_tile = (last, reward)

        # Targets; an all-wildcard chain has no color to count against
        targets = get_targets(self.world)
        target_deltas: Dict[str, int] = {}
        if color is not None and had_rainbow:
            for target_color in list(targets.remaining):
                moved = targets.decrement(target_color, removal_count)
                if moved:
                    target_deltas[target_color] = moved
        elif color is not None and color in targets.remaining:
            amount = removal_count * (2 if had_special else 1)
            moved = targets.decrement(color, amount)
            if moved:
                target_deltas[color] = moved

        # Moves: the commit always costs one, refunds stack on top
        moves_delta = -1 + extra_moves
        if tier is BonusTier.SUPER:
            moves_delta += SUPER_TIER_MOVE_BONUS
        if breakout:
            moves_delta += COMBO_BREAKOUT_MOVES
        state.moves_remaining = max(0, state.moves_remaining + moves_delta)

        # Multiplier buff
        if multiplier_activated:
            state.multiplier_turns_remaining = SCORE_MULTIPLIER_TURNS
        elif state.multiplier_turns_remaining > 0:
            state.multiplier_turns_remaining -= 1

        gravity_moves, new_tiles = settle_board(self.world)
        outcome = evaluate_outcome(self.world)

        result = ResolutionResult(
            chain=chain,
            removed=tuple(removed),
            removal_count=removal_count,
            tier=tier,
            chain_color=color,
            score_delta=delta,
            moves_delta=moves_delta,
            extra_moves=extra_moves,
            multiplier_activated=multiplier_activated,
            multiplier_applied=multiplier_applied,
            bomb_activated=bomb_activated,
            bomb_positions=tuple(bomb_positions),
            breakout=breakout,
            breakout_bonus=breakout_bonus,
            reward_tile=reward_tile,
            target_deltas=target_deltas,
            gravity_moves=tuple(gravity_moves),
            new_tiles=tuple(new_tiles),
            explosion_origin=chain[len(chain) // 2],
            phase=outcome or GamePhase.PLAYING,
        )
        self.last_result = result
        log.debug(
            "resolved %d tiles (%s, color=%s): +%d score, moves %+d, targets %s",
            removal_count, tier.value, color, result.total_score, moves_delta, target_deltas,
        )
        self._announce(result, cleared)
        if outcome is not None:
            set_phase(self.world, self.event_bus, outcome)
        return result

    def _announce(self, result: ResolutionResult, cleared) -> None:
        self.event_bus.emit(EVENT_MATCH_CLEARED, positions=list(result.removed), colors=cleared)
        if result.extra_moves:
            self.event_bus.emit(EVENT_POWERUP_TRIGGERED, kind=POWERUP_EXTRA_MOVES, amount=result.extra_moves)
        if result.multiplier_activated:
            self.event_bus.emit(EVENT_POWERUP_TRIGGERED, kind=POWERUP_SCORE_MULTIPLIER, turns=SCORE_MULTIPLIER_TURNS)
        if result.bomb_activated:
            self.event_bus.emit(EVENT_POWERUP_TRIGGERED, kind=POWERUP_AREA_BOMB, positions=list(result.bomb_positions))
        if result.reward_tile is not None:
            position, reward = result.reward_tile
            self.event_bus.emit(EVENT_REWARD_TILE_PLACED, position=position, color=reward)
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=list(result.gravity_moves))
        if result.new_tiles:
            self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=list(result.new_tiles))
        if result.breakout:
            self.event_bus.emit(EVENT_COMBO_BREAKOUT, score_bonus=result.breakout_bonus, moves_bonus=COMBO_BREAKOUT_MOVES)
        if result.target_deltas:
            self.event_bus.emit(
                EVENT_TARGETS_CHANGED,
                remaining=dict(get_targets(self.world).remaining),
                deltas=dict(result.target_deltas),
            )
        self.event_bus.emit(EVENT_MATCH_RESOLVED, result=result)
