"""
Currency conversion against a base-anchored RateTable.

Four branches, chosen by which side of the request is the table's base:

    from == to    -> amount
    from == base  -> amount * rates[to]
    to == base    -> amount / rates[from]
    otherwise     -> amount / rates[from] * rates[to]

Arithmetic is full-precision Decimal, rounded half-up to cents once at the end.
"""

from decimal import ROUND_HALF_UP, Decimal

from stock_tracker.shared.models.rates import ConversionRequest, RateTable

TWO_PLACES = Decimal("0.01")


class Unavailable:
    """Marker for a conversion that cannot be computed (missing or zero rate)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return "N/A"

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = Unavailable()


def _usable(rate: Decimal | None) -> bool:
    return rate is not None and rate > 0


def convert(request: ConversionRequest, rate_table: RateTable) -> Decimal | Unavailable:
    """
    Convert request.amount from request.from_currency to request.to_currency.

    Returns:
        Amount rounded to two places, or UNAVAILABLE when a required rate is
        missing or zero
    """
    amount = request.amount
    source = request.from_currency
    target = request.to_currency
    base = rate_table.base

    if source == target:
        return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    if source == base:
        rate = rate_table.rates.get(target)
        if not _usable(rate):
            return UNAVAILABLE
        result = amount * rate
    elif target == base:
        rate = rate_table.rates.get(source)
        if not _usable(rate):
            return UNAVAILABLE
        result = amount / rate
    else:
        from_rate = rate_table.rates.get(source)
        to_rate = rate_table.rates.get(target)
        if not (_usable(from_rate) and _usable(to_rate)):
            return UNAVAILABLE
        result = amount / from_rate * to_rate

    return result.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal | Unavailable) -> str:
    """Thousands-separated two-decimal rendering; "N/A" for UNAVAILABLE."""
    if isinstance(value, Unavailable):
        return str(value)
    return f"{value:,.2f}"
