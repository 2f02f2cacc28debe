"""Loyalty engine: owns the shopper's points ledger and applied reward."""

import threading
from concurrent import futures
from dataclasses import replace
from decimal import Decimal
from typing import Optional

import structlog

from ..errors import CommandRejectedError, errmsg
from ..helpers import Clock, Number, now, to_decimal
from ..orders import OrderRecord
from ..persistence import BackgroundPersister
from . import rules
from .catalog import LoyaltyReward, LoyaltyTier, get_reward
from .codec import dump_ledger, dump_points, export_document, load_ledger, load_points
from .commands import (
    AddBonusPoints,
    ApplyReward,
    ClearError,
    LoyaltyCommand,
    MarkReady,
    ProcessOrder,
    RemoveReward,
    RestoreLedger,
    SetError,
)
from .reducer import handle
from .rules import Eligibility
from .state import LedgerEntry, LoyaltyState

logger = structlog.get_logger()

DEFAULT_POINTS_KEY = "loyaltyPoints"
DEFAULT_LEDGER_KEY = "loyaltyTransactions"


class LoyaltyEngine:
    """Loyalty account for one shopper session.

    The ledger is the source of truth; the balance and tier are derived from
    it. Both the balance and the ledger are mirrored to storage after every
    change.
    """

    def __init__(
        self,
        persister: BackgroundPersister,
        points_key: str = DEFAULT_POINTS_KEY,
        ledger_key: str = DEFAULT_LEDGER_KEY,
        clock: Clock = now,
    ) -> None:
        self._persister = persister
        self._points_key = points_key
        self._ledger_key = ledger_key
        self._clock = clock
        self._state = LoyaltyState()
        self._lock = threading.RLock()
        self._ready = threading.Event()
        self.log = logger.bind(component="loyalty")
        self._restore = persister.submit(self._restore_job)

    # --- State ---

    @property
    def state(self) -> LoyaltyState:
        return self._state

    @property
    def points(self) -> int:
        return self._state.points

    @property
    def tier(self) -> LoyaltyTier:
        return self._state.tier

    @property
    def next_tier(self) -> Optional[LoyaltyTier]:
        return self._state.next_tier

    @property
    def points_to_next_tier(self) -> int:
        return self._state.points_to_next_tier

    @property
    def tier_progress(self) -> Decimal:
        return self._state.tier_progress

    @property
    def transactions(self) -> tuple[LedgerEntry, ...]:
        return self._state.ledger

    @property
    def applied_reward(self) -> Optional[LoyaltyReward]:
        return self._state.applied_reward

    @property
    def applied_discount(self) -> Decimal:
        return self._state.applied_discount

    @property
    def points_earned(self) -> int:
        return self._state.points_earned

    @property
    def available_rewards(self) -> tuple[LoyaltyReward, ...]:
        return self._state.available_rewards

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def ready(self) -> bool:
        return self._state.ready

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout)

    # --- Queries ---

    def validate_reward(self, reward_id: str, order_value: Number) -> Eligibility:
        reward = get_reward(reward_id)
        if reward is None:
            return Eligibility(False, errmsg.REWARD_NOT_FOUND)
        state = self._state
        return rules.reward_eligibility(reward, state.points, order_value, state.tier.name)

    def earning_preview(self, order_value: Number) -> int:
        """Points an order of ``order_value`` would earn at the current tier."""
        return rules.points_earned(order_value, self._state.tier.multiplier)

    def transaction_history(self) -> tuple[LedgerEntry, ...]:
        return self._state.history()

    def export_data(self) -> str:
        state = self._state
        return export_document(state.points, state.tier.name.value, state.history(), self._clock())

    # --- Mutations ---

    def apply_reward(self, reward_id: str, order_value: Number) -> bool:
        """Apply a reward to the current order.

        The discount is computed from ``order_value`` now and is not repriced
        when the cart changes; call again after the subtotal moves.
        """
        self.log.info("applying_reward", reward_id=reward_id, order_value=str(order_value))
        accepted = self._dispatch(ApplyReward(reward_id, to_decimal(order_value)))
        if accepted:
            self.log.info(
                "reward_applied",
                reward_id=reward_id,
                discount=str(self._state.applied_discount),
            )
        return accepted

    def remove_reward(self) -> LoyaltyState:
        self._dispatch(RemoveReward())
        return self._state

    def process_order(self, order: OrderRecord) -> bool:
        """Post redemption, earned points and any tier bonus for ``order``.

        Returns False and sets ``error`` if anything goes wrong; the ledger
        is left untouched in that case.
        """
        self.log.info(
            "processing_order",
            order_id=order.order_id,
            subtotal=str(order.subtotal),
            reward_id=self._state.applied_reward.id if self._state.applied_reward else None,
        )
        tier_before = self._state.tier.name
        try:
            accepted = self._dispatch(ProcessOrder(order, self._clock()))
        except Exception as e:
            self.log.exception("order_processing_failed", order_id=order.order_id, error=str(e))
            self._dispatch(SetError(errmsg.LOYALTY_PROCESSING_FAILED))
            return False
        if accepted:
            self.log.info(
                "order_processed",
                order_id=order.order_id,
                points_earned=self._state.points_earned,
                balance=self._state.points,
                tier=self._state.tier.name.value,
                tier_upgraded=self._state.tier.name is not tier_before,
            )
        return accepted

    def add_bonus_points(self, amount: int, description: str) -> LoyaltyState:
        """Credit ``amount`` promotional points.

        Raises:
            ValueError: ``amount`` is not positive.
        """
        self.log.info("adding_bonus_points", points=amount, description=description)
        self._dispatch(AddBonusPoints(amount, description, self._clock()))
        return self._state

    def clear_error(self) -> LoyaltyState:
        self._dispatch(ClearError())
        return self._state

    def refresh(self) -> futures.Future:
        """Reload the ledger from storage in the background.

        The returned future resolves to True once the in-memory ledger has
        been replaced, or False if storage could not be read.
        """
        return self._persister.submit(self._refresh_job)

    def flush(self, timeout: Optional[float] = None) -> None:
        self._persister.flush(timeout)

    # --- Internals ---

    def _dispatch(self, command: LoyaltyCommand) -> bool:
        with self._lock:
            before = self._state
            try:
                after = handle(before, command)
                accepted = True
            except CommandRejectedError as e:
                self.log.warning(
                    "command_rejected",
                    command=type(command).__name__,
                    reason=str(e),
                )
                after = replace(before, error=str(e))
                accepted = False
            self._state = after
            if after.ready and after.ledger != before.ledger:
                self._save(after)
            return accepted

    def _save(self, state: LoyaltyState) -> None:
        self._persister.save(self._points_key, dump_points(state.points))
        self._persister.save(self._ledger_key, dump_ledger(state.ledger))

    def _read_ledger(self) -> tuple[LedgerEntry, ...]:
        ledger_payload = self._persister.load(self._ledger_key)
        points_payload = self._persister.load(self._points_key)
        ledger = load_ledger(ledger_payload) if ledger_payload else ()
        if points_payload:
            stored_points = load_points(points_payload)
            derived = sum(entry.points for entry in ledger)
            if stored_points != derived:
                self.log.warning(
                    "balance_mismatch",
                    stored=stored_points,
                    derived=derived,
                )
        return ledger

    def _restore_job(self) -> None:
        ledger: tuple[LedgerEntry, ...] = ()
        try:
            try:
                ledger = self._read_ledger()
            except Exception as e:
                self.log.warning("restore_failed", key=self._ledger_key, error=repr(e))
                ledger = ()

            with self._lock:
                if ledger:
                    self._state = handle(self._state, RestoreLedger(ledger))
                self._state = handle(self._state, MarkReady())
        finally:
            self._ready.set()
        self.log.info("loyalty_ready", entries=len(ledger), points=self._state.points)

    def _refresh_job(self) -> bool:
        try:
            ledger = self._read_ledger()
        except Exception as e:
            self.log.warning("refresh_failed", key=self._ledger_key, error=repr(e))
            self._dispatch(SetError(errmsg.LOYALTY_REFRESH_FAILED))
            return False

        with self._lock:
            self._state = replace(handle(self._state, RestoreLedger(ledger)), error=None)
        self.log.info("loyalty_refreshed", entries=len(ledger), points=self._state.points)
        return True
