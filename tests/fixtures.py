"""Shared test values and builders."""

import threading
from datetime import datetime, timezone
from decimal import Decimal

from storefront.cart import CartLineItem
from storefront.storage import MemoryStorage

FIXED_NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def line_item(product_id="P1", size="50ml", price="14.99", **kwargs) -> CartLineItem:
    kwargs.setdefault("display_name", f"Product {product_id}")
    return CartLineItem(
        product_id=product_id,
        size_variant=size,
        unit_price=Decimal(price),
        **kwargs,
    )


# Nested deeply enough that json.loads raises RecursionError, not ValueError.
DEEPLY_NESTED_JSON = "[" * 200000 + "]" * 200000


class GatedStorage(MemoryStorage):
    """Memory storage whose reads block until ``release`` is called."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.gate = threading.Event()

    def release(self):
        self.gate.set()

    def get_item(self, key):
        assert self.gate.wait(timeout=5), "storage gate never released"
        return super().get_item(key)
