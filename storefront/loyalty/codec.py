"""JSON codec for the persisted points balance and ledger."""

import json
from typing import Any

from ..helpers import format_timestamp, parse_timestamp
from .state import EntryKind, LedgerEntry


def entry_to_record(entry: LedgerEntry) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": entry.id,
        "type": entry.kind.value,
        "points": entry.points,
        "description": entry.description,
        "timestamp": format_timestamp(entry.timestamp),
    }
    if entry.order_id is not None:
        record["orderId"] = entry.order_id
    if entry.expires_at is not None:
        record["expiryDate"] = format_timestamp(entry.expires_at)
    return record


def entry_from_record(record: dict[str, Any]) -> LedgerEntry:
    points = record["points"]
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValueError(f"invalid points: {points!r}")
    expiry = record.get("expiryDate")
    return LedgerEntry(
        id=str(record["id"]),
        kind=EntryKind(record["type"]),
        points=points,
        description=str(record.get("description", "")),
        timestamp=parse_timestamp(record["timestamp"]),
        order_id=record.get("orderId"),
        expires_at=parse_timestamp(expiry) if expiry else None,
    )


def dump_ledger(ledger: tuple[LedgerEntry, ...]) -> str:
    return json.dumps([entry_to_record(entry) for entry in ledger])


def load_ledger(payload: str) -> tuple[LedgerEntry, ...]:
    """Decode a persisted ledger into chronological order.

    Raises:
        ValueError: The payload is not a JSON array of valid entries.
    """
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError("persisted ledger is not a list")

    entries = []
    for record in data:
        if not isinstance(record, dict):
            raise ValueError("persisted ledger entry is not an object")
        try:
            entries.append(entry_from_record(record))
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"malformed ledger entry: {e}") from e
    return tuple(sorted(entries, key=lambda entry: entry.timestamp))


def dump_points(points: int) -> str:
    return json.dumps(points)


def load_points(payload: str) -> int:
    value = json.loads(payload)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"persisted points balance is not an integer: {value!r}")
    return value


def export_document(points: int, tier: str, ledger: tuple[LedgerEntry, ...], exported_at) -> str:
    """Pretty-printed account export for the shopper."""
    return json.dumps(
        {
            "points": points,
            "tier": tier,
            "transactions": [entry_to_record(entry) for entry in ledger],
            "exportDate": format_timestamp(exported_at),
        },
        indent=2,
    )
