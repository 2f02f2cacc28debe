"""Small shared helpers: clocks, identifiers and timestamp codecs."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Union

Clock = Callable[[], datetime]

Number = Union[Decimal, int, float, str]


def now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Return a unique identifier such as ``earn-3f9c...``."""
    return f"{prefix}-{uuid.uuid4().hex[:16]}"


def order_id(at: datetime) -> str:
    """Return an order number of the form ``ORD-<epoch millis>``."""
    return f"ORD-{int(at.timestamp() * 1000)}"


def to_decimal(value: Number) -> Decimal:
    """Coerce a number to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def format_timestamp(value: datetime) -> str:
    """Serialize a datetime as ISO-8601 with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
