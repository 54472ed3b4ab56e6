import pytest

from popmatch.config import PER_COLOR_RULES, RuleSet
from popmatch.systems.board_ops import active_tile_map
from popmatch.systems.scoring import BonusTier
from popmatch.utils.game_state import get_game_state, get_targets
from tests.helpers import drag, make_game, paint_board

FILLER = ['pgpgp', 'gpgpg'] * 4


@pytest.fixture
def game():
    return make_game(ruleset=PER_COLOR_RULES)


def _paint(game, top):
    rows = list(FILLER)
    rows[0] = top
    paint_board(game.world, rows)


def test_generated_tiles_carry_no_powerups(game):
    assert all(tile.powerup is None for tile in active_tile_map(game.world).values())


def test_two_blue_tiles_are_enough(game):
    _paint(game, 'bbpgp')
    assert drag(game, [(0, 0), (0, 1)])
    result = game.commit_selection()
    assert result is not None
    assert get_game_state(game.world).score == 20
    assert get_targets(game.world).remaining['blue'] == 3


def test_three_red_tiles_fall_short(game):
    _paint(game, 'rrrgp')
    drag(game, [(0, 0), (0, 1), (0, 2)])
    assert game.commit_selection() is None
    assert get_game_state(game.world).score == 0
    assert get_targets(game.world).remaining['red'] == 10


def test_long_chains_earn_no_tier_or_reward(game):
    _paint(game, 'bbbbb')
    drag(game, [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)])
    result = game.commit_selection()
    assert result.tier is BonusTier.NORMAL
    assert result.reward_tile is None
    assert result.score_delta == 50
    assert get_targets(game.world).remaining['blue'] == 0


def test_per_color_minimums():
    assert PER_COLOR_RULES.min_match_for('red') == 4
    assert PER_COLOR_RULES.min_match_for('blue') == 2
    assert PER_COLOR_RULES.min_match_for('yellow') == 7
    assert PER_COLOR_RULES.min_match_for(None) == 3


@pytest.mark.parametrize(
    "kwargs",
    [
        {'min_match_by_color': {'red': 4}},
        {'min_match_by_color': {'red': 4}, 'powerups_enabled': False},
        {'min_match_by_color': {'red': 0}, 'powerups_enabled': False, 'bonus_tiers_enabled': False},
        {'min_match': 0},
        {'powerup_chance': 1.5},
    ],
)
def test_inconsistent_rulesets_rejected(kwargs):
    with pytest.raises(ValueError):
        RuleSet(name='broken', **kwargs)
