"""Saudi Riyal formatting and VAT helpers.

All amounts are ``Decimal``; floats and ints are accepted and converted.
"""

from decimal import ROUND_HALF_UP, Decimal

from .helpers import Number, to_decimal

CURRENCY_CODE = "SAR"
VAT_RATE = Decimal("0.15")
USD_TO_SAR_RATE = Decimal("3.75")

_COMPACT_STEP = Decimal(1000)
_COMPACT_UNITS = ("K", "M", "B", "T")


def calculate_vat(amount: Number) -> Decimal:
    """Return the 15% Saudi VAT due on ``amount``."""
    return to_decimal(amount) * VAT_RATE


def total_with_vat(amount: Number) -> Decimal:
    """Return ``amount`` plus its VAT."""
    value = to_decimal(amount)
    return value + calculate_vat(value)


def usd_to_sar(amount: Number) -> Decimal:
    """Convert USD to SAR at the pegged rate (1 USD = 3.75 SAR)."""
    return to_decimal(amount) * USD_TO_SAR_RATE


def _format_number(value: Decimal, min_fraction: int, max_fraction: int) -> str:
    quantum = Decimal(1).scaleb(-max_fraction)
    rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.{max_fraction}f}"
    if max_fraction > min_fraction and "." in text:
        whole, frac = text.split(".")
        frac = frac.rstrip("0")
        if len(frac) < min_fraction:
            frac = frac.ljust(min_fraction, "0")
        text = f"{whole}.{frac}" if frac else whole
    return text


def _compact(value: Decimal, max_fraction: int) -> tuple[Decimal, str]:
    """Scale ``value`` up a unit while it still reads 1000 or more once rounded."""
    quantum = Decimal(1).scaleb(-max_fraction)
    suffix = ""
    for unit in _COMPACT_UNITS:
        if value < _COMPACT_STEP:
            if value.quantize(quantum, rounding=ROUND_HALF_UP) < _COMPACT_STEP:
                break
        value = value / _COMPACT_STEP
        suffix = unit
    return value, suffix


def format_sar(
    amount: Number,
    compact: bool = False,
    min_fraction: int = 2,
    max_fraction: int = 2,
) -> str:
    """Format an amount as Saudi Riyal, e.g. ``SAR 1,234.50``.

    Args:
        amount: Value to format.
        compact: Abbreviate large values (``SAR 1.2K``, ``SAR 3.5M``).
        min_fraction: Minimum number of fraction digits shown.
        max_fraction: Maximum number of fraction digits shown.
    """
    if min_fraction > max_fraction:
        raise ValueError("min_fraction cannot exceed max_fraction")

    value = to_decimal(amount)
    sign = "-" if value < 0 else ""
    value = abs(value)

    suffix = ""
    if compact:
        value, suffix = _compact(value, max_fraction)

    return f"{sign}{CURRENCY_CODE} {_format_number(value, min_fraction, max_fraction)}{suffix}"


def format_sar_range(min_price: Number, max_price: Number) -> str:
    """Format a price range, e.g. ``SAR 10.00 - SAR 25.00``."""
    return f"{format_sar(min_price)} - {format_sar(max_price)}"
