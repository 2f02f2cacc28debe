"""Loyalty points, tiers and reward redemption."""

from .catalog import (
    REWARDS,
    TIERS,
    DiscountType,
    LoyaltyReward,
    LoyaltyTier,
    TierName,
    get_reward,
    get_tier,
)
from .engine import DEFAULT_LEDGER_KEY, DEFAULT_POINTS_KEY, LoyaltyEngine
from .reducer import handle, reduce_loyalty
from .rules import Eligibility
from .state import EntryKind, LedgerEntry, LoyaltyState

__all__ = [
    "DEFAULT_LEDGER_KEY",
    "DEFAULT_POINTS_KEY",
    "DiscountType",
    "Eligibility",
    "EntryKind",
    "LedgerEntry",
    "LoyaltyEngine",
    "LoyaltyReward",
    "LoyaltyState",
    "LoyaltyTier",
    "REWARDS",
    "TIERS",
    "TierName",
    "get_reward",
    "get_tier",
    "handle",
    "reduce_loyalty",
]
