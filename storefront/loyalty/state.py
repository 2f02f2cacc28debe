"""Loyalty state: the points ledger and everything derived from it."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from . import rules
from .catalog import REWARDS, LoyaltyReward, LoyaltyTier


class EntryKind(str, Enum):
    EARNED = "EARNED"
    REDEEMED = "REDEEMED"
    EXPIRED = "EXPIRED"
    BONUS = "BONUS"


@dataclass(frozen=True)
class LedgerEntry:
    """One immutable change to the points balance."""

    id: str
    kind: EntryKind
    points: int
    description: str
    timestamp: datetime
    order_id: Optional[str] = None
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class LoyaltyState:
    """Snapshot of a shopper's loyalty account.

    The balance is never stored on its own: it is the sum of the ledger, and
    the tier follows from the balance.
    """

    ledger: tuple[LedgerEntry, ...] = ()
    applied_reward: Optional[LoyaltyReward] = None
    applied_discount: Decimal = Decimal(0)
    points_earned: int = 0
    ready: bool = False
    error: Optional[str] = None

    @property
    def points(self) -> int:
        return sum(entry.points for entry in self.ledger)

    @property
    def tier(self) -> LoyaltyTier:
        return rules.tier_for_points(self.points)

    @property
    def next_tier(self) -> Optional[LoyaltyTier]:
        return rules.next_tier(self.tier.name)

    @property
    def points_to_next_tier(self) -> int:
        return rules.points_to_next_tier(self.points, self.tier.name)

    @property
    def tier_progress(self) -> Decimal:
        return rules.tier_progress(self.points, self.tier, self.next_tier)

    @property
    def available_rewards(self) -> tuple[LoyaltyReward, ...]:
        points, tier = self.points, self.tier.name
        return tuple(
            reward for reward in REWARDS if rules.is_reward_available(reward, points, tier)
        )

    def history(self) -> tuple[LedgerEntry, ...]:
        """Ledger entries, newest first."""
        return tuple(sorted(self.ledger, key=lambda entry: entry.timestamp, reverse=True))
