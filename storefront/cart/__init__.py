"""Cart state engine: line items, quantity guards and persistence."""

from .commands import (
    AddItem,
    CartCommand,
    ClearCart,
    ClearError,
    ClosePanel,
    MarkReady,
    OpenPanel,
    RemoveItem,
    RestoreCart,
    TogglePanel,
    UpdateQuantity,
)
from .engine import DEFAULT_STORAGE_KEY, CartEngine
from .reducer import handle, reduce_cart
from .state import DEFAULT_QUANTITY_CEILING, CartLineItem, CartState

__all__ = [
    "AddItem",
    "CartCommand",
    "CartEngine",
    "CartLineItem",
    "CartState",
    "ClearCart",
    "ClearError",
    "ClosePanel",
    "DEFAULT_QUANTITY_CEILING",
    "DEFAULT_STORAGE_KEY",
    "MarkReady",
    "OpenPanel",
    "RemoveItem",
    "RestoreCart",
    "TogglePanel",
    "UpdateQuantity",
    "handle",
    "reduce_cart",
]
