"""Order records handed from checkout to the loyalty engine."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .helpers import to_decimal


@dataclass(frozen=True)
class OrderRecord:
    """A placed order as far as loyalty processing cares.

    Points are earned on ``subtotal``; the discount is carried for the
    record and is not deducted before earning.
    """

    order_id: str
    subtotal: Decimal
    loyalty_discount: Decimal = Decimal(0)
    grand_total: Optional[Decimal] = None
    payment_method: Optional[str] = None
    delivery_method: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "subtotal", to_decimal(self.subtotal))
        object.__setattr__(self, "loyalty_discount", to_decimal(self.loyalty_discount))
        if self.grand_total is not None:
            object.__setattr__(self, "grand_total", to_decimal(self.grand_total))
