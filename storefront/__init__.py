"""Cart and loyalty transaction engine for the storefront."""

from .cart import CartEngine, CartLineItem, CartState
from .checkout import (
    CheckoutRequest,
    DeliveryMethod,
    FinalizationResult,
    FinalizationStatus,
    OrderFinalizer,
    OrderPricing,
    PaymentRequest,
    PaymentResult,
    price_order,
)
from .config import Settings, get_settings
from .errors import CommandRejectedError, PersistenceError, StorefrontError
from .loyalty import LedgerEntry, LoyaltyEngine, LoyaltyState, TierName
from .orders import OrderRecord
from .session import StorefrontSession
from .storage import FileStorage, MemoryStorage

__version__ = "0.1.0"

__all__ = [
    "CartEngine",
    "CartLineItem",
    "CartState",
    "CheckoutRequest",
    "CommandRejectedError",
    "DeliveryMethod",
    "FileStorage",
    "FinalizationResult",
    "FinalizationStatus",
    "LedgerEntry",
    "LoyaltyEngine",
    "LoyaltyState",
    "MemoryStorage",
    "OrderFinalizer",
    "OrderPricing",
    "OrderRecord",
    "PaymentRequest",
    "PaymentResult",
    "PersistenceError",
    "Settings",
    "StorefrontError",
    "StorefrontSession",
    "TierName",
    "get_settings",
    "price_order",
]
