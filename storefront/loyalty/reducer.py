"""Pure loyalty state transitions.

Same contract as the cart reducer: ``handle`` raises
:class:`CommandRejectedError` on a failed guard, ``reduce_loyalty`` records
the rejection as the state's error. Every transition builds the complete
new ledger before returning, so a failure part-way through leaves the
input state as it was.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Callable

from ..errors import CommandRejectedError, errmsg
from ..helpers import new_id
from . import rules
from .catalog import get_reward
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
from .state import EntryKind, LedgerEntry, LoyaltyState


def _apply_reward(state: LoyaltyState, cmd: ApplyReward) -> LoyaltyState:
    reward = get_reward(cmd.reward_id)
    if reward is None:
        raise CommandRejectedError(errmsg.REWARD_NOT_FOUND)

    check = rules.reward_eligibility(reward, state.points, cmd.order_value, state.tier.name)
    if not check.valid:
        raise CommandRejectedError(check.reason or errmsg.INVALID_REWARD)

    # Priced once, against the order value given here.
    discount = rules.reward_discount(reward, cmd.order_value)
    return replace(state, applied_reward=reward, applied_discount=discount, error=None)


def _remove_reward(state: LoyaltyState, cmd: RemoveReward) -> LoyaltyState:
    return replace(state, applied_reward=None, applied_discount=Decimal(0), error=None)


def _process_order(state: LoyaltyState, cmd: ProcessOrder) -> LoyaltyState:
    order = cmd.order
    tier_before = state.tier
    balance = state.points
    postings: list[LedgerEntry] = []

    reward = state.applied_reward
    if reward is not None:
        check = rules.validate_ledger_entry(
            EntryKind.REDEEMED.value, -reward.points_cost, balance
        )
        if not check.valid:
            raise CommandRejectedError(check.reason)
        postings.append(
            LedgerEntry(
                id=new_id("redeem"),
                kind=EntryKind.REDEEMED,
                points=-reward.points_cost,
                description=f"Redeemed: {reward.name}",
                timestamp=cmd.at,
                order_id=order.order_id,
            )
        )
        balance -= reward.points_cost

    # Earned at the multiplier of the tier held before this order.
    earned = rules.points_earned(order.subtotal, tier_before.multiplier)
    if earned > 0:
        postings.append(
            LedgerEntry(
                id=new_id("earn"),
                kind=EntryKind.EARNED,
                points=earned,
                description=f"Purchase: Order {order.order_id}",
                timestamp=cmd.at,
                order_id=order.order_id,
                expires_at=rules.points_expiry(cmd.at),
            )
        )
        balance += earned

    tier_after = rules.tier_for_points(balance)
    if tier_after.min_points > tier_before.min_points:
        postings.append(
            LedgerEntry(
                id=new_id("tier-bonus"),
                kind=EntryKind.BONUS,
                points=rules.tier_upgrade_bonus(tier_after.name),
                description=f"Tier Upgrade Bonus: Welcome to {tier_after.name.value}!",
                timestamp=cmd.at,
            )
        )

    return replace(
        state,
        ledger=state.ledger + tuple(postings),
        applied_reward=None,
        applied_discount=Decimal(0),
        points_earned=earned,
        error=None,
    )


def _add_bonus_points(state: LoyaltyState, cmd: AddBonusPoints) -> LoyaltyState:
    if cmd.amount <= 0:
        raise ValueError(f"bonus amount must be positive, got {cmd.amount}")
    entry = LedgerEntry(
        id=new_id("bonus"),
        kind=EntryKind.BONUS,
        points=cmd.amount,
        description=cmd.description,
        timestamp=cmd.at,
    )
    return replace(state, ledger=state.ledger + (entry,))


def _restore_ledger(state: LoyaltyState, cmd: RestoreLedger) -> LoyaltyState:
    return replace(state, ledger=tuple(cmd.entries))


def _mark_ready(state: LoyaltyState, cmd: MarkReady) -> LoyaltyState:
    return replace(state, ready=True)


def _clear_error(state: LoyaltyState, cmd: ClearError) -> LoyaltyState:
    return replace(state, error=None)


def _set_error(state: LoyaltyState, cmd: SetError) -> LoyaltyState:
    return replace(state, error=cmd.message)


HANDLERS: dict[type, Callable[[LoyaltyState, LoyaltyCommand], LoyaltyState]] = {
    ApplyReward: _apply_reward,
    RemoveReward: _remove_reward,
    ProcessOrder: _process_order,
    AddBonusPoints: _add_bonus_points,
    RestoreLedger: _restore_ledger,
    MarkReady: _mark_ready,
    ClearError: _clear_error,
    SetError: _set_error,
}


def handle(state: LoyaltyState, command: LoyaltyCommand) -> LoyaltyState:
    """Apply ``command`` to ``state``.

    Raises:
        CommandRejectedError: A guard refused the command.
        ValueError: ``command`` is not a loyalty command, or carries an
            invalid argument.
    """
    handler = HANDLERS.get(type(command))
    if handler is None:
        raise ValueError(f"{errmsg.UNKNOWN_COMMAND}: {type(command).__name__}")
    return handler(state, command)


def reduce_loyalty(state: LoyaltyState, command: LoyaltyCommand) -> LoyaltyState:
    try:
        return handle(state, command)
    except CommandRejectedError as e:
        return replace(state, error=str(e))
