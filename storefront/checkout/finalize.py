"""Order submission: payment hand-off, loyalty posting and cart reset."""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Protocol
from urllib.parse import urlencode

import structlog

from ..cart.engine import CartEngine
from ..currency import CURRENCY_CODE
from ..errors import errmsg
from ..helpers import Clock, now, order_id
from ..loyalty.engine import LoyaltyEngine
from ..orders import OrderRecord
from .payments import (
    PaymentGateway,
    PaymentLine,
    PaymentRequest,
    PaymentResult,
    is_payment_method_available,
)
from .pricing import DeliveryMethod, OrderPricing, price_checkout

logger = structlog.get_logger()

SUCCESS_PATH = "/order-success"


class FinalizationStatus(str, Enum):
    COMPLETED = "completed"
    REDIRECT = "redirect"
    FAILED = "failed"


@dataclass(frozen=True)
class CheckoutRequest:
    delivery_method: DeliveryMethod = DeliveryMethod.STANDARD
    payment_method: str = "credit-card"
    currency: str = CURRENCY_CODE
    customer_email: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "delivery_method", DeliveryMethod(self.delivery_method))


@dataclass(frozen=True)
class FinalizationResult:
    status: FinalizationStatus
    order_id: Optional[str] = None
    pricing: Optional[OrderPricing] = None
    points_earned: int = 0
    loyalty_processed: bool = False
    checkout_url: Optional[str] = None
    payment_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not FinalizationStatus.FAILED

    @property
    def success_path(self) -> Optional[str]:
        """Where to send the shopper once the order is complete."""
        if self.status is not FinalizationStatus.COMPLETED:
            return None
        query = urlencode({"orderId": self.order_id, "loyaltyPoints": self.points_earned})
        return f"{SUCCESS_PATH}?{query}"


class DeliveryScheduler(Protocol):
    """External delivery partner selection and tracking."""

    def schedule(self, order_id: str, delivery_method: str) -> None:
        ...


class OrderFinalizer:
    """Sequences payment, loyalty posting and cart clearing for a submitted order.

    Submission first waits up to ``ready_timeout`` seconds for both engines
    to finish restoring from storage, and fails if they have not.

    Methods without a registered gateway (card on file, cash on delivery)
    complete immediately. A gateway that answers with a checkout URL leaves
    the cart and loyalty account untouched; the order is completed after the
    shopper returns from the provider.
    """

    def __init__(
        self,
        cart: CartEngine,
        loyalty: LoyaltyEngine,
        gateways: Optional[Mapping[str, PaymentGateway]] = None,
        delivery: Optional[DeliveryScheduler] = None,
        clock: Clock = now,
        ready_timeout: Optional[float] = 5.0,
    ) -> None:
        self.cart = cart
        self.loyalty = loyalty
        self._gateways: dict[str, PaymentGateway] = dict(gateways or {})
        self._delivery = delivery
        self._clock = clock
        self._ready_timeout = ready_timeout
        self.log = logger.bind(component="checkout")

    def register_gateway(self, method_id: str, gateway: PaymentGateway) -> None:
        self._gateways[method_id] = gateway

    def submit(self, request: CheckoutRequest) -> FinalizationResult:
        # A restore landing after submission would replace the posted ledger.
        if not (
            self.cart.wait_until_ready(self._ready_timeout)
            and self.loyalty.wait_until_ready(self._ready_timeout)
        ):
            self.log.warning("checkout_rejected", reason=errmsg.SESSION_NOT_READY)
            return FinalizationResult(FinalizationStatus.FAILED, error=errmsg.SESSION_NOT_READY)

        if not self.cart.items:
            self.log.warning("checkout_rejected", reason=errmsg.CART_EMPTY)
            return FinalizationResult(FinalizationStatus.FAILED, error=errmsg.CART_EMPTY)

        pricing = price_checkout(
            self.cart, self.loyalty, request.delivery_method, request.payment_method
        )
        number = order_id(self._clock())
        log = self.log.bind(order_id=number, payment_method=request.payment_method)
        log.info("submitting_order", grand_total=str(pricing.grand_total))

        gateway = self._gateways.get(request.payment_method)
        if gateway is not None:
            if not is_payment_method_available(
                request.payment_method, pricing.grand_total, request.currency
            ):
                reason = errmsg.PAYMENT_METHOD_UNAVAILABLE.format(method=request.payment_method)
                log.warning("payment_method_unavailable", currency=request.currency)
                return FinalizationResult(
                    FinalizationStatus.FAILED, order_id=number, pricing=pricing, error=reason
                )

            result = self._create_payment(gateway, request, number, pricing, log)
            if not result.success:
                log.warning("payment_failed", error=result.error)
                return FinalizationResult(
                    FinalizationStatus.FAILED,
                    order_id=number,
                    pricing=pricing,
                    payment_id=result.payment_id,
                    error=result.error or errmsg.PAYMENT_FAILED,
                )
            if result.checkout_url:
                log.info("payment_redirect", payment_id=result.payment_id)
                return FinalizationResult(
                    FinalizationStatus.REDIRECT,
                    order_id=number,
                    pricing=pricing,
                    checkout_url=result.checkout_url,
                    payment_id=result.payment_id,
                )

        order = OrderRecord(
            order_id=number,
            subtotal=pricing.subtotal,
            loyalty_discount=pricing.loyalty_discount,
            grand_total=pricing.grand_total,
            payment_method=request.payment_method,
            delivery_method=request.delivery_method.value,
        )
        loyalty_processed = self.loyalty.process_order(order)
        if not loyalty_processed:
            log.warning("loyalty_not_processed", error=self.loyalty.error)
        points = self.loyalty.points_earned if loyalty_processed else 0

        self.cart.clear()
        self._schedule_delivery(number, request.delivery_method, log)

        log.info("order_completed", points_earned=points)
        return FinalizationResult(
            FinalizationStatus.COMPLETED,
            order_id=number,
            pricing=pricing,
            points_earned=points,
            loyalty_processed=loyalty_processed,
        )

    def _create_payment(
        self,
        gateway: PaymentGateway,
        request: CheckoutRequest,
        number: str,
        pricing: OrderPricing,
        log,
    ) -> PaymentResult:
        items = self.cart.items
        payment = PaymentRequest(
            order_id=number,
            method_id=request.payment_method,
            amount=pricing.grand_total,
            currency=request.currency,
            items=tuple(
                PaymentLine(
                    title=item.display_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    category=item.category,
                    sku=item.sku,
                )
                for item in items
            ),
            shipping_amount=pricing.shipping_fee,
            tax_amount=pricing.vat,
            description=f"Order {number} - {len(items)} items",
            metadata={"customer_email": request.customer_email} if request.customer_email else {},
        )
        try:
            return gateway.create_payment(payment)
        except Exception as e:
            log.exception("payment_gateway_error", error=str(e))
            return PaymentResult(success=False, error=errmsg.PAYMENT_FAILED)

    def _schedule_delivery(self, number: str, method: DeliveryMethod, log) -> None:
        if self._delivery is None:
            return
        try:
            self._delivery.schedule(number, method.value)
        except Exception as e:
            log.exception("delivery_scheduling_failed", error=str(e))
