"""Static loyalty catalogs: tier ladder and redeemable rewards."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class TierName(str, Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


@dataclass(frozen=True)
class LoyaltyTier:
    name: TierName
    min_points: int
    multiplier: Decimal
    benefits: tuple[str, ...]
    color: str


TIERS: tuple[LoyaltyTier, ...] = (
    LoyaltyTier(
        name=TierName.BRONZE,
        min_points=0,
        multiplier=Decimal("1.0"),
        benefits=("Basic rewards", "Standard support"),
        color="#CD7F32",
    ),
    LoyaltyTier(
        name=TierName.SILVER,
        min_points=1000,
        multiplier=Decimal("1.2"),
        benefits=("Priority support", "Early access", "Birthday bonus"),
        color="#C0C0C0",
    ),
    LoyaltyTier(
        name=TierName.GOLD,
        min_points=5000,
        multiplier=Decimal("1.5"),
        benefits=("Free shipping", "Exclusive products", "Extended returns"),
        color="#FFD700",
    ),
    LoyaltyTier(
        name=TierName.PLATINUM,
        min_points=15000,
        multiplier=Decimal("2.0"),
        benefits=("Personal shopper", "VIP events", "Premium support"),
        color="#E5E4E2",
    ),
)

_TIER_BY_NAME = {tier.name: tier for tier in TIERS}


def get_tier(name: TierName | str) -> LoyaltyTier:
    """Look up a tier by name. Raises ValueError for an unknown name."""
    return _TIER_BY_NAME[TierName(name)]


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    SHIPPING = "shipping"


@dataclass(frozen=True)
class LoyaltyReward:
    id: str
    name: str
    description: str
    points_cost: int
    discount_type: DiscountType
    discount_value: Decimal
    min_order_value: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    min_tier: Optional[TierName] = None
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.points_cost <= 0:
            raise ValueError("points_cost must be positive")


REWARDS: tuple[LoyaltyReward, ...] = (
    LoyaltyReward(
        id="discount-5",
        name="5% Discount",
        description="Get 5% off your entire order",
        points_cost=500,
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("5"),
        max_discount=Decimal("100"),
    ),
    LoyaltyReward(
        id="discount-10",
        name="10% Discount",
        description="Get 10% off your entire order",
        points_cost=1000,
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("10"),
        max_discount=Decimal("200"),
    ),
    LoyaltyReward(
        id="discount-15",
        name="15% Discount",
        description="Get 15% off your entire order (Gold+ only)",
        points_cost=1500,
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("15"),
        max_discount=Decimal("300"),
        min_tier=TierName.SILVER,
    ),
    LoyaltyReward(
        id="fixed-25",
        name="SAR 25 Off",
        description="Get SAR 25 off your order",
        points_cost=400,
        discount_type=DiscountType.FIXED,
        discount_value=Decimal("25"),
        min_order_value=Decimal("100"),
    ),
    LoyaltyReward(
        id="fixed-50",
        name="SAR 50 Off",
        description="Get SAR 50 off your order",
        points_cost=750,
        discount_type=DiscountType.FIXED,
        discount_value=Decimal("50"),
        min_order_value=Decimal("200"),
    ),
    LoyaltyReward(
        id="fixed-100",
        name="SAR 100 Off",
        description="Get SAR 100 off your order",
        points_cost=1500,
        discount_type=DiscountType.FIXED,
        discount_value=Decimal("100"),
        min_order_value=Decimal("400"),
    ),
    LoyaltyReward(
        id="fixed-200",
        name="SAR 200 Off",
        description="Get SAR 200 off your order (Platinum only)",
        points_cost=2500,
        discount_type=DiscountType.FIXED,
        discount_value=Decimal("200"),
        min_order_value=Decimal("800"),
        min_tier=TierName.PLATINUM,
    ),
    LoyaltyReward(
        id="free-shipping",
        name="Free Express Shipping",
        description="Get free express shipping on your order",
        points_cost=300,
        discount_type=DiscountType.SHIPPING,
        discount_value=Decimal("48.75"),
    ),
)

_REWARD_BY_ID = {reward.id: reward for reward in REWARDS}


def get_reward(reward_id: str) -> Optional[LoyaltyReward]:
    return _REWARD_BY_ID.get(reward_id)
