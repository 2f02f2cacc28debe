"""Checkout: pricing, payment methods and order finalization."""

from .finalize import (
    CheckoutRequest,
    DeliveryScheduler,
    FinalizationResult,
    FinalizationStatus,
    OrderFinalizer,
)
from .payments import (
    PAYMENT_METHODS,
    PaymentGateway,
    PaymentMethod,
    PaymentRequest,
    PaymentResult,
    get_payment_method,
    is_payment_method_available,
    payment_fee,
)
from .pricing import DeliveryMethod, OrderPricing, price_checkout, price_order, shipping_fee

__all__ = [
    "CheckoutRequest",
    "DeliveryMethod",
    "DeliveryScheduler",
    "FinalizationResult",
    "FinalizationStatus",
    "OrderFinalizer",
    "OrderPricing",
    "PAYMENT_METHODS",
    "PaymentGateway",
    "PaymentMethod",
    "PaymentRequest",
    "PaymentResult",
    "get_payment_method",
    "is_payment_method_available",
    "payment_fee",
    "price_checkout",
    "price_order",
    "shipping_fee",
]
