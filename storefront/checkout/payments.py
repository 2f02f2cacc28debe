"""Payment method catalog and the payment gateway boundary.

Gateways themselves (card processors, buy-now-pay-later providers) live
outside this package; checkout only needs a success flag, an optional
redirect URL and a failure reason back from them.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Protocol

from ..helpers import Number, to_decimal


class PaymentType(str, Enum):
    CARD = "card"
    BNPL = "bnpl"
    CASH = "cash"
    WALLET = "wallet"


@dataclass(frozen=True)
class PaymentMethod:
    id: str
    name: str
    type: PaymentType
    description: str
    supported_currencies: tuple[str, ...]
    processing_time: str
    refund_support: bool
    fee: Decimal = Decimal(0)
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None


PAYMENT_METHODS: tuple[PaymentMethod, ...] = (
    PaymentMethod(
        id="credit-card",
        name="Credit / Debit Card",
        type=PaymentType.CARD,
        description="Pay securely with your credit or debit card",
        supported_currencies=("SAR", "USD", "EUR"),
        processing_time="Instant",
        refund_support=True,
    ),
    PaymentMethod(
        id="tabby",
        name="Tabby",
        type=PaymentType.BNPL,
        description="Split your purchase into 4 interest-free payments",
        supported_currencies=("SAR",),
        processing_time="Instant approval",
        refund_support=True,
        min_amount=Decimal("50"),
        max_amount=Decimal("10000"),
    ),
    PaymentMethod(
        id="tamara",
        name="Tamara",
        type=PaymentType.BNPL,
        description="Buy now, pay later with flexible payment plans",
        supported_currencies=("SAR",),
        processing_time="Instant approval",
        refund_support=True,
        min_amount=Decimal("100"),
        max_amount=Decimal("15000"),
    ),
    PaymentMethod(
        id="cod",
        name="Cash on Delivery",
        type=PaymentType.CASH,
        description="Pay when you receive your order",
        supported_currencies=("SAR",),
        processing_time="On delivery",
        refund_support=False,
        fee=Decimal("7.5"),
    ),
)

_METHOD_BY_ID = {method.id: method for method in PAYMENT_METHODS}


def get_payment_method(method_id: str) -> Optional[PaymentMethod]:
    return _METHOD_BY_ID.get(method_id)


def is_payment_method_available(method_id: str, amount: Number, currency: str) -> bool:
    """Whether ``method_id`` accepts an order of ``amount`` in ``currency``."""
    method = get_payment_method(method_id)
    if method is None:
        return False
    if currency not in method.supported_currencies:
        return False
    value = to_decimal(amount)
    if method.min_amount is not None and value < method.min_amount:
        return False
    if method.max_amount is not None and value > method.max_amount:
        return False
    return True


def payment_fee(method_id: str) -> Decimal:
    """Flat surcharge for ``method_id``; unknown methods cost nothing."""
    method = get_payment_method(method_id)
    return method.fee if method is not None else Decimal(0)


@dataclass(frozen=True)
class PaymentLine:
    title: str
    quantity: int
    unit_price: Decimal
    category: str = ""
    sku: Optional[str] = None


@dataclass(frozen=True)
class PaymentRequest:
    """What a gateway is asked to charge."""

    order_id: str
    method_id: str
    amount: Decimal
    currency: str
    items: tuple[PaymentLine, ...] = ()
    shipping_amount: Decimal = Decimal(0)
    tax_amount: Decimal = Decimal(0)
    description: str = ""
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    checkout_url: Optional[str] = None
    payment_id: Optional[str] = None
    error: Optional[str] = None


class PaymentGateway(Protocol):
    """External payment provider."""

    def create_payment(self, request: PaymentRequest) -> PaymentResult:
        ...
