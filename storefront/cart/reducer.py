"""Pure cart state transitions.

``handle`` applies a command and raises :class:`CommandRejectedError` when a
guard fails; ``reduce_cart`` is the total form that records the rejection
as the state's error instead.
"""

from dataclasses import replace
from typing import Callable

from ..errors import CommandRejectedError, errmsg
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
from .state import CartState


def _add_item(state: CartState, cmd: AddItem) -> CartState:
    if cmd.quantity <= 0:
        raise CommandRejectedError(errmsg.QUANTITY_POSITIVE)

    existing = state.find(*cmd.item.key)
    ceiling = cmd.item.quantity_ceiling or (existing.ceiling if existing else cmd.item.ceiling)
    current = existing.quantity if existing else 0
    new_quantity = current + cmd.quantity

    # Over the ceiling the add is refused outright, never clamped.
    if new_quantity > ceiling:
        raise CommandRejectedError(errmsg.QUANTITY_CEILING.format(ceiling=ceiling))

    if existing is None:
        items = state.items + (cmd.item.with_quantity(new_quantity),)
    else:
        items = tuple(
            item.with_quantity(new_quantity) if item.key == existing.key else item
            for item in state.items
        )
    return replace(state, items=items, error=None)


def _remove_item(state: CartState, cmd: RemoveItem) -> CartState:
    key = (cmd.product_id, cmd.size_variant)
    items = tuple(item for item in state.items if item.key != key)
    return replace(state, items=items, error=None)


def _update_quantity(state: CartState, cmd: UpdateQuantity) -> CartState:
    if cmd.quantity <= 0:
        return _remove_item(state, RemoveItem(cmd.product_id, cmd.size_variant))

    key = (cmd.product_id, cmd.size_variant)
    existing = state.find(*key)
    if existing is not None and cmd.enforce_ceiling and cmd.quantity > existing.ceiling:
        raise CommandRejectedError(errmsg.QUANTITY_CEILING.format(ceiling=existing.ceiling))

    items = tuple(
        item.with_quantity(cmd.quantity) if item.key == key else item
        for item in state.items
    )
    return replace(state, items=items, error=None)


def _clear_cart(state: CartState, cmd: ClearCart) -> CartState:
    return replace(state, items=(), error=None)


def _open_panel(state: CartState, cmd: OpenPanel) -> CartState:
    return replace(state, is_open=True)


def _close_panel(state: CartState, cmd: ClosePanel) -> CartState:
    return replace(state, is_open=False)


def _toggle_panel(state: CartState, cmd: TogglePanel) -> CartState:
    return replace(state, is_open=not state.is_open)


def _clear_error(state: CartState, cmd: ClearError) -> CartState:
    return replace(state, error=None)


def _restore_cart(state: CartState, cmd: RestoreCart) -> CartState:
    return replace(state, items=tuple(cmd.items))


def _mark_ready(state: CartState, cmd: MarkReady) -> CartState:
    return replace(state, ready=True)


HANDLERS: dict[type, Callable[[CartState, CartCommand], CartState]] = {
    AddItem: _add_item,
    RemoveItem: _remove_item,
    UpdateQuantity: _update_quantity,
    ClearCart: _clear_cart,
    OpenPanel: _open_panel,
    ClosePanel: _close_panel,
    TogglePanel: _toggle_panel,
    ClearError: _clear_error,
    RestoreCart: _restore_cart,
    MarkReady: _mark_ready,
}


def handle(state: CartState, command: CartCommand) -> CartState:
    """Apply ``command`` to ``state``.

    Raises:
        CommandRejectedError: A guard refused the command.
        ValueError: ``command`` is not a cart command.
    """
    handler = HANDLERS.get(type(command))
    if handler is None:
        raise ValueError(f"{errmsg.UNKNOWN_COMMAND}: {type(command).__name__}")
    return handler(state, command)


def reduce_cart(state: CartState, command: CartCommand) -> CartState:
    """Apply ``command``; a rejected command leaves items untouched and sets the error."""
    try:
        return handle(state, command)
    except CommandRejectedError as e:
        return replace(state, error=str(e))
