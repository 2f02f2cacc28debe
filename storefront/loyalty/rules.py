"""Pure loyalty rules: earning, discounts, eligibility and tier progression.

Nothing here holds state; every function takes the balances and catalog
entries it needs and returns a value.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_FLOOR, Decimal
from typing import Optional

from ..errors import errmsg
from ..helpers import Number, to_decimal
from .catalog import TIERS, DiscountType, LoyaltyReward, LoyaltyTier, TierName, get_tier

POINTS_PER_CURRENCY_UNIT = Decimal("0.1")
EXPIRY_MONTHS = 12
TIER_BONUS_RATE = Decimal("0.1")

BONUS_EVENT_MULTIPLIERS: dict[str, Decimal] = {
    "birthday": Decimal("2.0"),
    "anniversary": Decimal("1.5"),
    "promotion": Decimal("1.25"),
    "referral": Decimal("1.0"),
}

_TIER_RESTRICTION_MESSAGES = {
    TierName.SILVER: errmsg.REWARD_TIER_SILVER,
    TierName.GOLD: errmsg.REWARD_TIER_GOLD,
    TierName.PLATINUM: errmsg.REWARD_TIER_PLATINUM,
}


@dataclass(frozen=True)
class Eligibility:
    valid: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


ELIGIBLE = Eligibility(valid=True)


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def _tier_rank(tier: TierName | str) -> int:
    name = TierName(tier)
    for rank, candidate in enumerate(TIERS):
        if candidate.name is name:
            return rank
    raise ValueError(f"unknown tier: {tier!r}")


def points_earned(order_value: Number, multiplier: Number = Decimal("1.0")) -> int:
    """Points for spending ``order_value``: one per 10 currency units, scaled by tier."""
    value = to_decimal(order_value)
    if value <= 0:
        return 0
    base = _floor(value * POINTS_PER_CURRENCY_UNIT)
    bonus = _floor(base * (to_decimal(multiplier) - 1))
    return base + bonus


def reward_discount(reward: LoyaltyReward, order_value: Number) -> Decimal:
    """Currency amount ``reward`` takes off an order worth ``order_value``."""
    if reward.discount_type is DiscountType.PERCENTAGE:
        discount = to_decimal(order_value) * reward.discount_value / 100
        if reward.max_discount is not None:
            return min(discount, reward.max_discount)
        return discount
    if reward.discount_type in (DiscountType.FIXED, DiscountType.SHIPPING):
        return reward.discount_value
    return Decimal(0)


def reward_eligibility(
    reward: LoyaltyReward,
    balance: int,
    order_value: Number,
    tier: TierName | str,
) -> Eligibility:
    """Check whether ``reward`` may be redeemed; the first failing check wins."""
    if not reward.is_active:
        return Eligibility(False, errmsg.REWARD_INACTIVE)

    if balance < reward.points_cost:
        return Eligibility(
            False, errmsg.REWARD_SHORTFALL.format(shortfall=reward.points_cost - balance)
        )

    if reward.min_order_value is not None and to_decimal(order_value) < reward.min_order_value:
        return Eligibility(
            False, errmsg.REWARD_MIN_ORDER.format(min_order=reward.min_order_value)
        )

    if reward.min_tier is not None and _tier_rank(tier) < _tier_rank(reward.min_tier):
        return Eligibility(False, _TIER_RESTRICTION_MESSAGES[reward.min_tier])

    return ELIGIBLE


def is_reward_available(reward: LoyaltyReward, balance: int, tier: TierName | str) -> bool:
    """Whether ``reward`` shows up in the shopper's redeemable list.

    Order value is not considered; minimum-order checks happen at apply time.
    """
    if not reward.is_active or balance < reward.points_cost:
        return False
    return reward.min_tier is None or _tier_rank(tier) >= _tier_rank(reward.min_tier)


def tier_for_points(points: int) -> LoyaltyTier:
    """Highest tier whose threshold ``points`` reaches."""
    current = TIERS[0]
    for tier in TIERS:
        if points >= tier.min_points:
            current = tier
    return current


def next_tier(tier: TierName | str) -> Optional[LoyaltyTier]:
    rank = _tier_rank(tier)
    if rank + 1 < len(TIERS):
        return TIERS[rank + 1]
    return None


def tier_progress(
    points: int, tier: LoyaltyTier, upcoming: Optional[LoyaltyTier]
) -> Decimal:
    """Percentage of the way from ``tier`` to ``upcoming``, clamped to 0..100."""
    if upcoming is None:
        return Decimal(100)
    span = upcoming.min_points - tier.min_points
    progress = Decimal(points - tier.min_points) / span * 100
    return max(Decimal(0), min(progress, Decimal(100)))


def points_to_next_tier(points: int, tier: TierName | str) -> int:
    upcoming = next_tier(tier)
    if upcoming is None:
        return 0
    return max(0, upcoming.min_points - points)


def tier_upgrade_bonus(tier: TierName | str) -> int:
    """Bonus granted on reaching ``tier``: ten percent of its threshold."""
    return _floor(get_tier(tier).min_points * TIER_BONUS_RATE)


def bonus_points(base_points: int, event: str) -> int:
    """Points for a special event; unknown events earn the base amount."""
    multiplier = BONUS_EVENT_MULTIPLIERS.get(event, Decimal("1.0"))
    return _floor(base_points * multiplier)


def points_expiry(earned_at: datetime, months: int = EXPIRY_MONTHS) -> datetime:
    """Same wall-clock time ``months`` calendar months later.

    Days past the end of the target month are clamped to its last day.
    """
    month_index = earned_at.month - 1 + months
    year = earned_at.year + month_index // 12
    month = month_index % 12 + 1
    day = min(earned_at.day, calendar.monthrange(year, month)[1])
    return earned_at.replace(year=year, month=month, day=day)


def validate_ledger_entry(kind: str, points: int, balance: int) -> Eligibility:
    """Check a ledger posting against the current balance."""
    if kind == "REDEEMED" and abs(points) > balance:
        return Eligibility(False, errmsg.INSUFFICIENT_BALANCE)
    if kind == "EARNED" and points <= 0:
        return Eligibility(False, errmsg.EARNED_POSITIVE)
    return ELIGIBLE
