"""Pure scoring rules: tiers, multipliers and combo gain."""
from enum import Enum
from typing import Optional

from popmatch.constants import (
    BONUS_TIER_MULTIPLIER,
    BONUS_TIER_SIZE,
    COMBO_BASE_GAIN,
    COMBO_GAIN_PER_EXTRA_TILE,
    COMBO_MAX_GAIN,
    MIN_MATCH,
    POINTS_PER_TILE,
    RAINBOW,
    SCORE_MULTIPLIER_FACTOR,
    SPECIAL,
    SUPER_TIER_MULTIPLIER,
    SUPER_TIER_SIZE,
)


class BonusTier(Enum):
    NORMAL = "normal"
    BONUS = "bonus"
    SUPER = "super"


def tier_for(removal_count: int, *, enabled: bool = True) -> BonusTier:
    if not enabled:
        return BonusTier.NORMAL
    if removal_count >= SUPER_TIER_SIZE:
        return BonusTier.SUPER
    if removal_count >= BONUS_TIER_SIZE:
        return BonusTier.BONUS
    return BonusTier.NORMAL


def tier_multiplier(tier: BonusTier) -> int:
    if tier is BonusTier.SUPER:
        return SUPER_TIER_MULTIPLIER
    if tier is BonusTier.BONUS:
        return BONUS_TIER_MULTIPLIER
    return 1


def reward_color(tier: BonusTier) -> Optional[str]:
    """Wildcard left behind at the chain's last cell, if the tier earns one."""
    if tier is BonusTier.SUPER:
        return RAINBOW
    if tier is BonusTier.BONUS:
        return SPECIAL
    return None


def final_multiplier(tier: BonusTier, multiplier_active: bool) -> int:
    return tier_multiplier(tier) * (SCORE_MULTIPLIER_FACTOR if multiplier_active else 1)


def score_delta(removal_count: int, tier: BonusTier, multiplier_active: bool) -> int:
    return removal_count * POINTS_PER_TILE * final_multiplier(tier, multiplier_active)


def combo_gain(removal_count: int) -> int:
    gain = COMBO_BASE_GAIN + (removal_count - MIN_MATCH) * COMBO_GAIN_PER_EXTRA_TILE
    return max(0, min(COMBO_MAX_GAIN, gain))
