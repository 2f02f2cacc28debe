"""Cart commands.

Each mutation of the cart is one of these frozen dataclasses, handled by
:func:`storefront.cart.reducer.reduce_cart`.
"""

from dataclasses import dataclass
from typing import Union

from .state import CartLineItem


@dataclass(frozen=True)
class AddItem:
    item: CartLineItem
    quantity: int = 1


@dataclass(frozen=True)
class RemoveItem:
    product_id: str
    size_variant: str


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: str
    size_variant: str
    quantity: int
    enforce_ceiling: bool = False


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class OpenPanel:
    pass


@dataclass(frozen=True)
class ClosePanel:
    pass


@dataclass(frozen=True)
class TogglePanel:
    pass


@dataclass(frozen=True)
class ClearError:
    pass


@dataclass(frozen=True)
class RestoreCart:
    items: tuple[CartLineItem, ...]


@dataclass(frozen=True)
class MarkReady:
    pass


CartCommand = Union[
    AddItem,
    RemoveItem,
    UpdateQuantity,
    ClearCart,
    OpenPanel,
    ClosePanel,
    TogglePanel,
    ClearError,
    RestoreCart,
    MarkReady,
]
