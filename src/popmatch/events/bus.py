from blinker import Signal
from typing import Dict

class EventBus:
    """Named synchronous events on top of blinker signals.

    Handlers receive ``(sender, **payload)`` with the bus as sender and run
    before ``emit`` returns.
    """
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong refs: systems are often constructed without being stored.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig is not None:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig is not None:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                    # payload: dt=float


# ============================================================================
# INPUT REQUESTS (emitted by input collaborators)
# ============================================================================
EVENT_SELECTION_START_REQUEST = "selection_start_request"    # payload: row, col
EVENT_CELL_ENTERED = "cell_entered"                          # payload: row, col
EVENT_SELECTION_COMMIT_REQUEST = "selection_commit_request"  # payload: None


# ============================================================================
# SELECTION
# ============================================================================
EVENT_SELECTION_STARTED = "selection_started"      # payload: row, col, chain=tuple[(r,c),...]
EVENT_SELECTION_EXTENDED = "selection_extended"    # payload: row, col, chain, chain_color=str|None
EVENT_SELECTION_RETRACTED = "selection_retracted"  # payload: removed=(r,c), chain
EVENT_SELECTION_REJECTED = "selection_rejected"    # payload: row, col, reason=str
EVENT_SELECTION_CANCELLED = "selection_cancelled"  # payload: chain, reason=str
EVENT_CHAIN_COMMITTED = "chain_committed"          # payload: chain=tuple[(r,c),...]
EVENT_CHAIN_DISCARDED = "chain_discarded"          # payload: chain, reason=str


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_BOARD_GENERATED = "board_generated"          # payload: rows=int, cols=int
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], colors=[(r,c,color),...]
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=[GravityMove,...]
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_REWARD_TILE_PLACED = "reward_tile_placed"    # payload: position=(r,c), color=str


# ============================================================================
# RESOLUTION & SCORING
# ============================================================================
EVENT_MATCH_RESOLVED = "match_resolved"            # payload: result=ResolutionResult
EVENT_POWERUP_TRIGGERED = "powerup_triggered"      # payload: kind=str, positions=[(r,c),...]
EVENT_COMBO_BREAKOUT = "combo_breakout"            # payload: score_bonus=int, moves_bonus=int
EVENT_COMBO_BROKEN = "combo_broken"                # payload: meter=int
EVENT_TARGETS_CHANGED = "targets_changed"          # payload: remaining=dict[str,int], deltas=dict[str,int]


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_RUN_RESET_REQUEST = "run_reset_request"          # payload: None
EVENT_LEVEL_ADVANCE_REQUEST = "level_advance_request"  # payload: None
EVENT_GO_HOME_REQUEST = "go_home_request"              # payload: None
EVENT_LEVEL_STARTED = "level_started"                  # payload: level_index=int, config=LevelConfig
EVENT_PHASE_CHANGED = "phase_changed"                  # payload: previous_phase=GamePhase|None, new_phase=GamePhase


# ============================================================================
# TRANSIENT EFFECTS
# ============================================================================
EVENT_EFFECT_SPAWNED = "effect_spawned"    # payload: effect_entity=int, kind=str
EVENT_EFFECT_EXPIRED = "effect_expired"    # payload: effect_entity=int, kind=str
