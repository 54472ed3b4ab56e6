import pytest

from popmatch.components.game_state import GamePhase
from popmatch.constants import POWERUP_AREA_BOMB, POWERUP_EXTRA_MOVES, POWERUP_SCORE_MULTIPLIER, RAINBOW, SPECIAL
from popmatch.events.bus import (
    EVENT_COMBO_BREAKOUT,
    EVENT_COMBO_BROKEN,
    EVENT_MATCH_RESOLVED,
    EVENT_REWARD_TILE_PLACED,
    EVENT_TARGETS_CHANGED,
)
from popmatch.systems.board_ops import empty_cells, tile_at
from popmatch.systems.scoring import BonusTier
from popmatch.utils.game_state import get_combo, get_game_state, get_targets, set_phase
from tests.helpers import drag, make_game, paint_board, set_moves

FILLER = ['pbpbp', 'bpbpb'] * 4


def board(**overrides):
    rows = list(FILLER)
    for key, line in overrides.items():
        rows[int(key[1:])] = line
    return rows


def commit(game, path):
    assert drag(game, path)
    return game.commit_selection()


@pytest.fixture
def game():
    return make_game()


def test_bonus_chain_scores_and_leaves_special(game):
    paint_board(game.world, board(r1='yyyyy'))
    result = commit(game, [(1, 0), (1, 1), (1, 2), (1, 3), (1, 4)])

    state = get_game_state(game.world)
    assert result.tier is BonusTier.BONUS
    assert state.score == 100
    assert state.moves_remaining == 19
    assert get_targets(game.world).remaining == {'yellow': 10, 'red': 10, 'blue': 5}
    assert result.reward_tile == ((1, 4), SPECIAL)
    assert tile_at(game.world, 1, 4).color == SPECIAL
    # Row 0 fell into the cleared cells; the top row was refilled.
    assert [tile_at(game.world, 1, c).color for c in range(4)] == ['purple', 'blue', 'purple', 'blue']
    assert sorted(result.new_tiles) == [(0, 0), (0, 1), (0, 2), (0, 3)]
    assert empty_cells(game.world) == []
    assert get_combo(game.world).meter == 20
    assert get_combo(game.world).streak == 1
    assert result.explosion_origin == (1, 2)
    assert game.phase == GamePhase.PLAYING


def test_short_chain_changes_nothing(game):
    paint_board(game.world, board(r0='yypbp'))
    assert commit(game, [(0, 0), (0, 1)]) is None
    state = get_game_state(game.world)
    assert state.score == 0
    assert state.moves_remaining == 20
    assert tile_at(game.world, 0, 0).color == 'yellow'


def test_normal_chain_decrements_its_target(game):
    targets_changed = []
    game.event_bus.subscribe(EVENT_TARGETS_CHANGED, lambda sender, **kw: targets_changed.append(kw))
    paint_board(game.world, board(r0='rrrrp'))
    result = commit(game, [(0, 0), (0, 1), (0, 2), (0, 3)])
    assert result.tier is BonusTier.NORMAL
    assert result.reward_tile is None
    assert get_game_state(game.world).score == 40
    assert get_game_state(game.world).moves_remaining == 19
    assert get_targets(game.world).remaining['red'] == 6
    assert targets_changed[0]['deltas'] == {'red': 4}


def test_untargeted_color_still_scores(game):
    paint_board(game.world, board(r0='gggpb'))
    result = commit(game, [(0, 0), (0, 1), (0, 2)])
    assert result.target_deltas == {}
    assert get_game_state(game.world).score == 30
    assert get_targets(game.world).remaining == {'yellow': 15, 'red': 10, 'blue': 5}


def test_super_chain_leaves_rainbow_that_hits_every_target(game):
    paint_board(game.world, board(r0='yyyyy', r1='yyyyy', r2='bpbpb', r3='bbpbp'))
    snake = [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4), (1, 4), (1, 3), (1, 2), (1, 1), (1, 0)]
    result = commit(game, snake)

    state = get_game_state(game.world)
    assert result.tier is BonusTier.SUPER
    assert state.score == 400
    assert state.moves_remaining == 20
    assert get_targets(game.world).remaining['yellow'] == 5
    assert tile_at(game.world, 1, 0).color == RAINBOW

    result = commit(game, [(1, 0), (2, 0), (3, 0)])
    assert result.chain_color == 'blue'
    assert get_targets(game.world).remaining == {'yellow': 2, 'red': 7, 'blue': 2}
    assert state.score == 430


def test_special_doubles_target_progress(game):
    paint_board(game.world, board(r0='yySyb'))
    result = commit(game, [(0, 0), (0, 1), (0, 2), (0, 3)])
    assert result.chain_color == 'yellow'
    assert get_targets(game.world).remaining['yellow'] == 7
    assert get_game_state(game.world).score == 40


def test_bomb_removes_every_tile_of_the_chain_color(game):
    rows = ['rrrbg', 'bgbgb', 'gbgbg', 'bgbrb', 'gbgbg', 'rgbgb', 'gbgbg', 'bgbgr']
    paint_board(game.world, rows, powerups={(0, 1): POWERUP_AREA_BOMB})
    result = commit(game, [(0, 0), (0, 1), (0, 2)])

    assert result.bomb_activated
    assert result.bomb_positions == ((3, 3), (5, 0), (7, 4))
    assert result.removal_count == 6
    assert result.tier is BonusTier.BONUS
    assert get_game_state(game.world).score == 120
    assert get_targets(game.world).remaining['red'] == 4
    assert empty_cells(game.world) == []


def test_extra_moves_powerup_refunds_moves(game):
    paint_board(game.world, board(r0='gggpb'), powerups={(0, 1): POWERUP_EXTRA_MOVES})
    result = commit(game, [(0, 0), (0, 1), (0, 2)])
    assert result.extra_moves == 3
    assert result.powerups_fired == (POWERUP_EXTRA_MOVES,)
    assert get_game_state(game.world).moves_remaining == 22


def test_score_multiplier_lasts_for_following_commits(game):
    state = get_game_state(game.world)
    paint_board(game.world, board(r0='gggpb'), powerups={(0, 0): POWERUP_SCORE_MULTIPLIER})
    deltas = [commit(game, [(0, 0), (0, 1), (0, 2)]).score_delta]
    assert state.multiplier_turns_remaining == 3
    for _ in range(4):
        paint_board(game.world, board(r0='gggpb'))
        deltas.append(commit(game, [(0, 0), (0, 1), (0, 2)]).score_delta)
    assert deltas == [60, 60, 60, 60, 30]
    assert state.multiplier_turns_remaining == 0


def test_combo_breakout_pays_bonus(game):
    breakouts = []
    game.event_bus.subscribe(EVENT_COMBO_BREAKOUT, lambda sender, **kw: breakouts.append(kw))
    get_combo(game.world).meter = 90
    paint_board(game.world, board(r0='gggpb'))
    result = commit(game, [(0, 0), (0, 1), (0, 2)])

    assert result.breakout
    assert result.total_score == 530
    assert get_game_state(game.world).score == 530
    assert get_game_state(game.world).moves_remaining == 21
    assert get_combo(game.world).meter == 0
    assert breakouts == [{'score_bonus': 500, 'moves_bonus': 2}]


def test_released_short_chain_breaks_combo(game):
    broken = []
    game.event_bus.subscribe(EVENT_COMBO_BROKEN, lambda sender, **kw: broken.append(kw))
    combo = get_combo(game.world)
    combo.meter = 40
    combo.streak = 3
    paint_board(game.world, board(r0='ggppb'))
    commit(game, [(0, 0), (0, 1)])
    assert combo.meter == 25
    assert combo.streak == 0
    assert broken == [{'meter': 25}]


def test_single_tap_is_not_penalised(game):
    combo = get_combo(game.world)
    combo.meter = 40
    combo.streak = 2
    assert game.start_selection(0, 0)
    game.commit_selection()
    assert combo.meter == 40
    assert combo.streak == 2


def test_penalty_floors_at_zero(game):
    get_combo(game.world).meter = 5
    paint_board(game.world, board(r0='ggppb'))
    commit(game, [(0, 0), (0, 1)])
    assert get_combo(game.world).meter == 0


def test_malformed_chain_is_rejected_without_side_effects(game):
    paint_board(game.world, board(r0='gggpb', r2='gpbpb', r3='gpbpb'))
    before = game.snapshot()
    assert game.match_resolution_system.resolve([(0, 0), (2, 0), (3, 0)]) is None
    assert game.match_resolution_system.resolve([(0, 0), (0, 1), (0, 1)]) is None
    assert game.match_resolution_system.resolve([(0, 0), (0, 1), (0, 3)]) is None
    assert game.snapshot() == before


def test_resolution_ignored_outside_play(game):
    paint_board(game.world, board(r0='gggpb'))
    set_phase(game.world, game.event_bus, GamePhase.LOST)
    assert game.match_resolution_system.resolve([(0, 0), (0, 1), (0, 2)]) is None
    assert get_game_state(game.world).score == 0


def test_last_move_without_targets_loses(game):
    set_moves(game.world, 1)
    paint_board(game.world, board(r0='gggpb'))
    result = commit(game, [(0, 0), (0, 1), (0, 2)])
    assert result.phase == GamePhase.LOST
    assert game.phase == GamePhase.LOST
    assert get_game_state(game.world).moves_remaining == 0


def test_events_emitted_in_order(game):
    order = []
    game.event_bus.subscribe(EVENT_REWARD_TILE_PLACED, lambda sender, **kw: order.append('reward'))
    game.event_bus.subscribe(EVENT_TARGETS_CHANGED, lambda sender, **kw: order.append('targets'))
    game.event_bus.subscribe(EVENT_MATCH_RESOLVED, lambda sender, **kw: order.append('resolved'))
    paint_board(game.world, board(r0='yyyyy'))
    commit(game, [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)])
    assert order == ['reward', 'targets', 'resolved']


def test_all_yellow_board_bonus_chain(game):
    paint_board(game.world, ['ryyyy'] + ['yyyyy'] * 7)
    result = commit(game, [(0, 1), (0, 2), (0, 3), (0, 4), (1, 4)])

    assert get_targets(game.world).remaining == {'yellow': 10, 'red': 10, 'blue': 5}
    assert get_game_state(game.world).score == 100
    assert result.reward_tile == ((1, 4), SPECIAL)
    assert tile_at(game.world, 0, 0).color == 'red'
    assert empty_cells(game.world) == []


def test_all_wildcard_chain_scores_but_skips_targets(game):
    paint_board(game.world, board(r0='RSRpb'))
    result = commit(game, [(0, 0), (0, 1), (0, 2)])

    assert result.chain_color is None
    assert result.target_deltas == {}
    assert get_targets(game.world).remaining == {'yellow': 15, 'red': 10, 'blue': 5}
    assert get_game_state(game.world).score == 30
    assert get_game_state(game.world).moves_remaining == 19
    assert empty_cells(game.world) == []


def test_combo_gain_is_capped_for_long_chains(game):
    paint_board(game.world, board(r0='ggggg', r1='bpbgg'))
    result = commit(game, [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4), (1, 4), (1, 3)])
    assert result.removal_count == 7
    assert get_combo(game.world).meter == 25


def test_second_multiplier_tile_refreshes_the_buff(game):
    state = get_game_state(game.world)
    paint_board(game.world, board(r0='gggpb'), powerups={(0, 0): POWERUP_SCORE_MULTIPLIER})
    commit(game, [(0, 0), (0, 1), (0, 2)])
    paint_board(game.world, board(r0='gggpb'))
    commit(game, [(0, 0), (0, 1), (0, 2)])
    assert state.multiplier_turns_remaining == 2

    paint_board(game.world, board(r0='gggpb'), powerups={(0, 2): POWERUP_SCORE_MULTIPLIER})
    result = commit(game, [(0, 0), (0, 1), (0, 2)])
    assert result.multiplier_activated
    assert result.score_delta == 60
    assert state.multiplier_turns_remaining == 3
