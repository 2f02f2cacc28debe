"""Tests for the pure loyalty rules."""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storefront.loyalty import TierName, get_reward, get_tier
from storefront.loyalty import rules


def _reward(reward_id):
    reward = get_reward(reward_id)
    assert reward is not None
    return reward


class TestPointsEarned:
    @pytest.mark.parametrize(
        "order_value,multiplier,expected",
        [
            (500, "1.0", 50),
            (0, "1.0", 0),
            (-10, "2.0", 0),
            (9.99, "1.0", 0),
            (1000, "1.2", 120),
            (1000, "1.5", 150),
            (1234, "2.0", 246),
        ],
    )
    def test_points_earned(self, order_value, multiplier, expected):
        assert rules.points_earned(order_value, Decimal(multiplier)) == expected


class TestRewardDiscount:
    def test_percentage_is_capped(self):
        assert rules.reward_discount(_reward("discount-5"), 3000) == Decimal("100")

    def test_percentage_below_cap(self):
        assert rules.reward_discount(_reward("discount-10"), 500) == Decimal("50")

    def test_fixed_and_shipping_are_flat(self):
        assert rules.reward_discount(_reward("fixed-50"), 10) == Decimal("50")
        assert rules.reward_discount(_reward("free-shipping"), 10) == Decimal("48.75")


class TestRewardEligibility:
    def test_eligible(self):
        result = rules.reward_eligibility(_reward("discount-5"), 600, 100, TierName.BRONZE)

        assert result.valid
        assert result.reason is None

    def test_shortfall_reason(self):
        result = rules.reward_eligibility(_reward("discount-5"), 300, 100, TierName.BRONZE)

        assert not result.valid
        assert result.reason == "You need 200 more points for this reward"

    def test_minimum_order_reason(self):
        result = rules.reward_eligibility(_reward("fixed-50"), 1000, 150, TierName.SILVER)

        assert result.reason == "This reward requires a minimum order of SAR 200"

    def test_silver_restriction(self):
        result = rules.reward_eligibility(_reward("discount-15"), 2000, 100, TierName.BRONZE)

        assert result.reason == "This reward requires Silver tier or higher"

    def test_platinum_restriction(self):
        result = rules.reward_eligibility(_reward("fixed-200"), 9000, 1000, TierName.GOLD)

        assert result.reason == "This reward is exclusive to Platinum tier members"

    def test_inactive_reason(self):
        inactive = replace(_reward("discount-5"), is_active=False)
        result = rules.reward_eligibility(inactive, 9000, 100, TierName.GOLD)

        assert result.reason == "This reward is not currently available"

    def test_availability_filter_ignores_order_value(self):
        assert rules.is_reward_available(_reward("fixed-200"), 3000, TierName.PLATINUM)
        assert not rules.is_reward_available(_reward("fixed-200"), 3000, TierName.GOLD)
        assert not rules.is_reward_available(_reward("discount-5"), 499, TierName.GOLD)


class TestTiers:
    @pytest.mark.parametrize(
        "points,tier",
        [
            (0, TierName.BRONZE),
            (999, TierName.BRONZE),
            (1000, TierName.SILVER),
            (4999, TierName.SILVER),
            (5000, TierName.GOLD),
            (15000, TierName.PLATINUM),
            (50000, TierName.PLATINUM),
        ],
    )
    def test_tier_for_points(self, points, tier):
        assert rules.tier_for_points(points).name is tier

    def test_tier_is_monotonic(self):
        ranks = [rules.tier_for_points(points).min_points for points in range(0, 20001, 50)]

        assert ranks == sorted(ranks)

    def test_progress_midway(self):
        progress = rules.tier_progress(3000, get_tier("SILVER"), get_tier("GOLD"))

        assert progress == Decimal(50)

    def test_progress_at_max_tier(self):
        assert rules.tier_progress(20000, get_tier("PLATINUM"), None) == Decimal(100)

    def test_progress_is_clamped(self):
        assert rules.tier_progress(-50, get_tier("BRONZE"), get_tier("SILVER")) == Decimal(0)

    def test_points_to_next_tier(self):
        assert rules.points_to_next_tier(900, TierName.BRONZE) == 100
        assert rules.points_to_next_tier(20000, TierName.PLATINUM) == 0

    def test_next_tier(self):
        assert rules.next_tier(TierName.GOLD).name is TierName.PLATINUM
        assert rules.next_tier(TierName.PLATINUM) is None

    def test_upgrade_bonus_uses_threshold(self):
        assert rules.tier_upgrade_bonus(TierName.SILVER) == 100
        assert rules.tier_upgrade_bonus(TierName.PLATINUM) == 1500

    def test_unknown_tier_raises(self):
        with pytest.raises(ValueError):
            get_tier("DIAMOND")


class TestSupplementaryRules:
    def test_bonus_points_by_event(self):
        assert rules.bonus_points(100, "birthday") == 200
        assert rules.bonus_points(100, "promotion") == 125
        assert rules.bonus_points(100, "unknown") == 100

    def test_expiry_is_twelve_calendar_months(self):
        earned = datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)

        assert rules.points_expiry(earned) == datetime(2025, 2, 28, 12, 0, tzinfo=timezone.utc)

    def test_expiry_custom_months(self):
        earned = datetime(2024, 11, 15, tzinfo=timezone.utc)

        assert rules.points_expiry(earned, months=3) == datetime(2025, 2, 15, tzinfo=timezone.utc)

    def test_validate_ledger_entry(self):
        assert not rules.validate_ledger_entry("REDEEMED", -500, 400).valid
        assert not rules.validate_ledger_entry("EARNED", 0, 400).valid
        assert rules.validate_ledger_entry("BONUS", 10, 0).valid
