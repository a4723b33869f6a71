"""Integer-cents money helpers.

Prices, bids and demand values are stored and computed as int cents. The API
speaks decimal numbers; conversion happens once at the schema boundary with
ROUND_HALF_UP to two decimal places, so arithmetic on the stored values is
exact.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_CENT = Decimal("0.01")


def is_number(value: object) -> bool:
    """JSON numbers only: bool is an int subclass and is rejected explicitly."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_cents(value: int | float | str | Decimal) -> int:
    """Convert a decimal amount to cents: 12.345 -> 1235, 100 -> 10000.

    Raises ValueError for NaN/inf or anything that is not a number.
    """
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return int((amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def from_cents(cents: int) -> float:
    """Cents to an API number: 1235 -> 12.35."""
    return float(Decimal(cents) / 100)


def average_cents(total: int, count: int) -> int:
    """Average rounded half-up to the cent; 0 for an empty set."""
    if count == 0:
        return 0
    return int((Decimal(total) / count).quantize(Decimal(1), rounding=ROUND_HALF_UP))
