"""Per-shopper session: owns the engines and their shared persistence worker."""

from typing import Mapping, Optional

import structlog

from .cart.engine import CartEngine
from .checkout.finalize import (
    CheckoutRequest,
    DeliveryScheduler,
    FinalizationResult,
    OrderFinalizer,
)
from .checkout.payments import PaymentGateway
from .checkout.pricing import DeliveryMethod, OrderPricing, price_checkout
from .config import Settings, get_settings
from .helpers import Clock, now
from .logs import configure_logging
from .loyalty.engine import LoyaltyEngine
from .persistence import BackgroundPersister
from .storage import FileStorage, Storage

logger = structlog.get_logger()


class StorefrontSession:
    """Cart, loyalty account and checkout for one shopper.

    Construct one per session and pass it to whatever needs the cart or the
    loyalty account. Use it as a context manager, or call :meth:`close`, so
    queued writes reach storage before the process exits.
    """

    def __init__(
        self,
        storage: Storage,
        settings: Optional[Settings] = None,
        gateways: Optional[Mapping[str, PaymentGateway]] = None,
        delivery: Optional[DeliveryScheduler] = None,
        clock: Clock = now,
    ) -> None:
        self.settings = settings or get_settings()
        self.persister = BackgroundPersister(storage)
        self.cart = CartEngine(
            self.persister,
            storage_key=self.settings.cart_storage_key,
            enforce_ceiling_on_update=self.settings.enforce_ceiling_on_update,
        )
        self.loyalty = LoyaltyEngine(
            self.persister,
            points_key=self.settings.points_storage_key,
            ledger_key=self.settings.ledger_storage_key,
            clock=clock,
        )
        self.finalizer = OrderFinalizer(
            self.cart,
            self.loyalty,
            gateways=gateways,
            delivery=delivery,
            clock=clock,
            ready_timeout=self.settings.ready_timeout,
        )
        self._closed = False

    @classmethod
    def open(cls, settings: Optional[Settings] = None, **kwargs) -> "StorefrontSession":
        """Configure logging and open a session backed by files under ``storage_dir``."""
        settings = settings or get_settings()
        configure_logging(settings.log_level, settings.log_format)
        storage = FileStorage(settings.storage_dir)
        logger.info("session_opened", storage_dir=str(settings.storage_dir))
        return cls(storage, settings=settings, **kwargs)

    @property
    def ready(self) -> bool:
        return self.cart.ready and self.loyalty.ready

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self.cart.wait_until_ready(timeout) and self.loyalty.wait_until_ready(timeout)

    def pricing(
        self,
        delivery_method: DeliveryMethod | str = DeliveryMethod.STANDARD,
        payment_method: str = "credit-card",
    ) -> OrderPricing:
        return price_checkout(self.cart, self.loyalty, delivery_method, payment_method)

    def checkout(self, request: Optional[CheckoutRequest] = None) -> FinalizationResult:
        if request is None:
            request = CheckoutRequest(currency=self.settings.currency)
        return self.finalizer.submit(request)

    def flush(self, timeout: Optional[float] = None) -> None:
        self.persister.flush(timeout)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.persister.close()
        logger.info("session_closed")

    def __enter__(self) -> "StorefrontSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
