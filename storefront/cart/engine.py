"""Cart engine: owns the session's cart and mirrors it to storage."""

import threading
from dataclasses import replace
from decimal import Decimal
from typing import Optional

import structlog

from ..errors import CommandRejectedError
from ..persistence import BackgroundPersister
from .codec import dump_items, load_items
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
from .reducer import handle
from .state import CartLineItem, CartState

logger = structlog.get_logger()

DEFAULT_STORAGE_KEY = "sbtc-cart"


class CartEngine:
    """Mutable cart for one shopper session.

    Mutators return the new state immediately; the item list is written to
    storage in the background once the initial restore has finished.
    """

    def __init__(
        self,
        persister: BackgroundPersister,
        storage_key: str = DEFAULT_STORAGE_KEY,
        enforce_ceiling_on_update: bool = False,
    ) -> None:
        self._persister = persister
        self._storage_key = storage_key
        self._enforce_ceiling_on_update = enforce_ceiling_on_update
        self._state = CartState()
        self._lock = threading.RLock()
        self._ready = threading.Event()
        self.log = logger.bind(component="cart")
        self._restore = persister.submit(self._restore_job)

    # --- State ---

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return self._state.items

    @property
    def item_count(self) -> int:
        return self._state.item_count

    @property
    def subtotal(self) -> Decimal:
        return self._state.subtotal

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    @property
    def ready(self) -> bool:
        return self._state.ready

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout)

    # --- Mutations ---

    def add_item(self, item: CartLineItem, quantity: int = 1) -> CartState:
        """Add ``quantity`` of ``item``, merging with an existing line.

        The item's own ``quantity`` field is ignored. When the merged quantity
        would exceed the line's ceiling nothing changes and ``error`` is set.
        """
        self.log.info(
            "adding_item",
            product_id=item.product_id,
            size=item.size_variant,
            quantity=quantity,
        )
        return self._dispatch(AddItem(item=item, quantity=quantity))

    def remove_item(self, product_id: str, size_variant: str) -> CartState:
        self.log.info("removing_item", product_id=product_id, size=size_variant)
        return self._dispatch(RemoveItem(product_id, size_variant))

    def update_quantity(self, product_id: str, size_variant: str, quantity: int) -> CartState:
        """Overwrite a line's quantity; zero or less removes the line.

        The quantity ceiling is not checked here unless the engine was built
        with ``enforce_ceiling_on_update``.
        """
        self.log.info(
            "updating_quantity",
            product_id=product_id,
            size=size_variant,
            new_quantity=quantity,
        )
        return self._dispatch(
            UpdateQuantity(
                product_id,
                size_variant,
                quantity,
                enforce_ceiling=self._enforce_ceiling_on_update,
            )
        )

    def clear(self) -> CartState:
        self.log.info("clearing_cart", item_count=self.item_count)
        return self._dispatch(ClearCart())

    def open_panel(self) -> CartState:
        return self._dispatch(OpenPanel())

    def close_panel(self) -> CartState:
        return self._dispatch(ClosePanel())

    def toggle_panel(self) -> CartState:
        return self._dispatch(TogglePanel())

    def clear_error(self) -> CartState:
        return self._dispatch(ClearError())

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait for queued storage writes to finish."""
        self._persister.flush(timeout)

    # --- Internals ---

    def _dispatch(self, command: CartCommand) -> CartState:
        with self._lock:
            before = self._state
            try:
                after = handle(before, command)
            except CommandRejectedError as e:
                self.log.warning(
                    "command_rejected",
                    command=type(command).__name__,
                    reason=str(e),
                )
                after = replace(before, error=str(e))
            self._state = after
            if after.ready and after.items != before.items:
                self._persister.save(self._storage_key, dump_items(after.items))
            return after

    def _restore_job(self) -> None:
        items: tuple[CartLineItem, ...] = ()
        try:
            try:
                payload = self._persister.load(self._storage_key)
                if payload:
                    items = load_items(payload)
            except Exception as e:
                # Any unreadable payload, including one too deep to decode, starts empty.
                self.log.warning("restore_failed", key=self._storage_key, error=repr(e))
                items = ()

            with self._lock:
                if items:
                    self._state = handle(self._state, RestoreCart(items))
                self._state = handle(self._state, MarkReady())
        finally:
            self._ready.set()
        self.log.info("cart_ready", restored_items=len(items))
