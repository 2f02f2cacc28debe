"""Order pricing: discount, VAT, shipping and payment surcharge.

Everything here is a pure function of its inputs and safe to call on every
change of cart, reward, delivery or payment selection.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from ..currency import calculate_vat
from ..helpers import Number, to_decimal
from .payments import payment_fee

if TYPE_CHECKING:
    from ..cart.engine import CartEngine
    from ..loyalty.engine import LoyaltyEngine

FREE_SHIPPING_THRESHOLD = Decimal("187.5")
STANDARD_SHIPPING_FEE = Decimal("37.5")
EXPRESS_SHIPPING_FEE = Decimal("48.75")


class DeliveryMethod(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"


@dataclass(frozen=True)
class OrderPricing:
    subtotal: Decimal
    loyalty_discount: Decimal
    discounted_subtotal: Decimal
    vat: Decimal
    shipping_fee: Decimal
    payment_surcharge: Decimal
    grand_total: Decimal


def shipping_fee(delivery_method: DeliveryMethod | str, discounted_subtotal: Number) -> Decimal:
    """Standard ships free from 187.5 upward; express is always a flat fee.

    Raises:
        ValueError: ``delivery_method`` is not a known method.
    """
    method = DeliveryMethod(delivery_method)
    if method is DeliveryMethod.EXPRESS:
        return EXPRESS_SHIPPING_FEE
    if to_decimal(discounted_subtotal) >= FREE_SHIPPING_THRESHOLD:
        return Decimal(0)
    return STANDARD_SHIPPING_FEE


def price_order(
    subtotal: Number,
    loyalty_discount: Number,
    delivery_method: DeliveryMethod | str,
    payment_method: str,
) -> OrderPricing:
    subtotal = to_decimal(subtotal)
    loyalty_discount = to_decimal(loyalty_discount)
    discounted = max(subtotal - loyalty_discount, Decimal(0))
    vat = calculate_vat(discounted)
    shipping = shipping_fee(delivery_method, discounted)
    surcharge = payment_fee(payment_method)
    return OrderPricing(
        subtotal=subtotal,
        loyalty_discount=loyalty_discount,
        discounted_subtotal=discounted,
        vat=vat,
        shipping_fee=shipping,
        payment_surcharge=surcharge,
        grand_total=discounted + vat + shipping + surcharge,
    )


def price_checkout(
    cart: "CartEngine",
    loyalty: "LoyaltyEngine",
    delivery_method: DeliveryMethod | str,
    payment_method: str,
) -> OrderPricing:
    """Price the session's current cart with its applied reward."""
    return price_order(cart.subtotal, loyalty.applied_discount, delivery_method, payment_method)
