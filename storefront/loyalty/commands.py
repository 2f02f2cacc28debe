"""Commands accepted by the loyalty reducer."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Union

from ..orders import OrderRecord
from .state import LedgerEntry


@dataclass(frozen=True)
class ApplyReward:
    reward_id: str
    order_value: Decimal


@dataclass(frozen=True)
class RemoveReward:
    pass


@dataclass(frozen=True)
class ProcessOrder:
    order: OrderRecord
    at: datetime


@dataclass(frozen=True)
class AddBonusPoints:
    amount: int
    description: str
    at: datetime


@dataclass(frozen=True)
class RestoreLedger:
    entries: tuple[LedgerEntry, ...]


@dataclass(frozen=True)
class MarkReady:
    pass


@dataclass(frozen=True)
class ClearError:
    pass


@dataclass(frozen=True)
class SetError:
    message: str


LoyaltyCommand = Union[
    ApplyReward,
    RemoveReward,
    ProcessOrder,
    AddBonusPoints,
    RestoreLedger,
    MarkReady,
    ClearError,
    SetError,
]
