"""Cart state: line items and the derived totals."""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from ..helpers import to_decimal

DEFAULT_QUANTITY_CEILING = 99


@dataclass(frozen=True)
class CartLineItem:
    """A product/size pair in the cart.

    ``(product_id, size_variant)`` identifies the line; no two lines in a
    cart share it.
    """

    product_id: str
    size_variant: str
    display_name: str
    unit_price: Decimal
    quantity: int = 1
    brand: str = ""
    category: str = ""
    original_unit_price: Optional[Decimal] = None
    quantity_ceiling: Optional[int] = None
    image: str = ""
    sku: Optional[str] = None
    weight: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        if self.original_unit_price is not None:
            object.__setattr__(
                self, "original_unit_price", to_decimal(self.original_unit_price)
            )
        if not self.product_id:
            raise ValueError("product_id is required")
        if self.unit_price <= 0:
            raise ValueError("unit_price must be positive")
        if self.quantity_ceiling is not None and self.quantity_ceiling < 1:
            raise ValueError("quantity_ceiling must be at least 1")

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_id, self.size_variant)

    @property
    def ceiling(self) -> int:
        return self.quantity_ceiling or DEFAULT_QUANTITY_CEILING

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> "CartLineItem":
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class CartState:
    items: tuple[CartLineItem, ...] = ()
    ready: bool = False
    error: Optional[str] = None
    is_open: bool = False

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal(0))

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_id: str, size_variant: str) -> Optional[CartLineItem]:
        for item in self.items:
            if item.key == (product_id, size_variant):
                return item
        return None
