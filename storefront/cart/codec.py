"""JSON codec for the persisted cart.

The stored value is a JSON array of line records using the storefront's
browser-era field names (``id``, ``size``, ``price``, ``maxQuantity``...).
"""

import json
from decimal import Decimal
from typing import Any, Optional

from ..helpers import to_decimal
from .state import CartLineItem


def _money(value: Optional[Decimal]) -> Optional[float]:
    return None if value is None else float(value)


def item_to_record(item: CartLineItem) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": item.product_id,
        "name": item.display_name,
        "brand": item.brand,
        "price": _money(item.unit_price),
        "originalPrice": _money(item.original_unit_price),
        "image": item.image,
        "size": item.size_variant,
        "quantity": item.quantity,
        "category": item.category,
    }
    if item.sku is not None:
        record["sku"] = item.sku
    if item.weight is not None:
        record["weight"] = item.weight
    if item.quantity_ceiling is not None:
        record["maxQuantity"] = item.quantity_ceiling
    return record


def item_from_record(record: dict[str, Any]) -> CartLineItem:
    quantity = record["quantity"]
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValueError(f"invalid quantity: {quantity!r}")
    original = record.get("originalPrice")
    return CartLineItem(
        product_id=str(record["id"]),
        size_variant=str(record.get("size", "")),
        display_name=str(record.get("name", "")),
        unit_price=to_decimal(record["price"]),
        quantity=quantity,
        brand=str(record.get("brand", "")),
        category=str(record.get("category", "")),
        original_unit_price=None if original is None else to_decimal(original),
        quantity_ceiling=record.get("maxQuantity"),
        image=str(record.get("image", "")),
        sku=record.get("sku"),
        weight=record.get("weight"),
    )


def dump_items(items: tuple[CartLineItem, ...]) -> str:
    return json.dumps([item_to_record(item) for item in items])


def load_items(payload: str) -> tuple[CartLineItem, ...]:
    """Decode a persisted cart.

    Raises:
        ValueError: The payload is not a JSON array of valid line records,
            or it repeats a line key.
    """
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError("persisted cart is not a list")

    items = []
    seen = set()
    for record in data:
        if not isinstance(record, dict):
            raise ValueError("persisted cart line is not an object")
        try:
            item = item_from_record(record)
        except (KeyError, TypeError, ArithmeticError) as e:
            raise ValueError(f"malformed cart line: {e}") from e
        if item.key in seen:
            raise ValueError(f"duplicate cart line: {item.key}")
        seen.add(item.key)
        items.append(item)
    return tuple(items)
