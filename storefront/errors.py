"""Error types and user-facing error messages for the storefront engine."""

from typing import Optional


class errmsg:
    """Error message constants shown to shoppers."""

    QUANTITY_CEILING = "Cannot add more than {ceiling} items of this product"
    QUANTITY_POSITIVE = "Quantity must be positive"
    CART_EMPTY = "Cart is empty"
    REWARD_NOT_FOUND = "Reward not found"
    REWARD_INACTIVE = "This reward is not currently available"
    REWARD_SHORTFALL = "You need {shortfall} more points for this reward"
    REWARD_MIN_ORDER = "This reward requires a minimum order of SAR {min_order}"
    REWARD_TIER_SILVER = "This reward requires Silver tier or higher"
    REWARD_TIER_GOLD = "This reward requires Gold tier or higher"
    REWARD_TIER_PLATINUM = "This reward is exclusive to Platinum tier members"
    INVALID_REWARD = "Invalid reward"
    LOYALTY_PROCESSING_FAILED = "Failed to process loyalty rewards"
    LOYALTY_REFRESH_FAILED = "Failed to refresh loyalty data"
    INSUFFICIENT_BALANCE = "Insufficient points balance for redemption"
    EARNED_POSITIVE = "Earned points must be greater than zero"
    PAYMENT_METHOD_UNAVAILABLE = "Payment method {method} is not available for this order"
    PAYMENT_FAILED = "Payment creation failed"
    SESSION_NOT_READY = "Your cart and rewards are still loading, please try again"
    UNKNOWN_COMMAND = "Unknown command type"


class StorefrontError(Exception):
    """Base class for storefront engine errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class PersistenceError(StorefrontError):
    """Reading from or writing to durable storage failed."""

    def __init__(self, key: str, cause: Exception):
        super().__init__(f"storage failure for {key!r}", cause)
        self.key = key


class CommandRejectedError(Exception):
    """Command was rejected due to business rule violation."""
