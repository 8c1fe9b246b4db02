"""
Dashboard helpers built on convert(): instrument valuation, the rate board,
and rate formatting.
"""

from dataclasses import dataclass
from decimal import Decimal

from stock_tracker.config.state import DisplayConfig, ExchangePairConfig, MarketConfig
from stock_tracker.conversion.engine import UNAVAILABLE, Unavailable, convert
from stock_tracker.infrastructure.observability import get_conversion_logger
from stock_tracker.shared.models.enums import Market
from stock_tracker.shared.models.instruments import Instrument
from stock_tracker.shared.models.rates import ConversionRequest, RateTable

# Currencies quoted without fractional units on the board
WHOLE_UNIT_CURRENCIES = frozenset({"JPY", "KRW"})

logger = get_conversion_logger("valuation")


@dataclass(frozen=True)
class RateQuote:
    """One "1 base = rate code" row of the rate board."""

    base: str
    code: str
    rate: Decimal | Unavailable

    @property
    def display(self) -> str:
        return f"1 {self.base} = {format_rate(self.rate, self.code)} {self.code}"


@dataclass(frozen=True)
class Valuation:
    """An instrument's price expressed in another currency."""

    symbol: str
    source_currency: str
    target_currency: str
    price: Decimal
    converted: Decimal | Unavailable


def market_currency(market: Market, config: MarketConfig | None = None) -> str:
    """Quote currency of a market: KRW for domestic, USD for foreign by default."""
    config = config or MarketConfig()
    if market == Market.DOMESTIC:
        return config.domestic_currency
    return config.foreign_currency


def format_rate(rate: Decimal | Unavailable, code: str) -> str:
    if isinstance(rate, Unavailable) or rate is None:
        return str(UNAVAILABLE)
    places = 2 if code.upper() in WHOLE_UNIT_CURRENCIES else 4
    return f"{rate:,.{places}f}"


def valuate(
    instrument: Instrument,
    rate_table: RateTable,
    target: str,
    config: MarketConfig | None = None,
) -> Valuation:
    """Convert an instrument's price from its market currency to target."""
    source = market_currency(instrument.market, config)
    request = ConversionRequest(
        amount=instrument.price, from_currency=source, to_currency=target
    )
    converted = convert(request, rate_table)
    if isinstance(converted, Unavailable):
        logger.debug(
            "valuation_unavailable",
            symbol=instrument.symbol,
            source=source,
            target=request.to_currency,
        )
    return Valuation(
        symbol=instrument.symbol,
        source_currency=source,
        target_currency=request.to_currency,
        price=instrument.price,
        converted=converted,
    )


def rate_board(
    rate_table: RateTable, currencies: list[str] | None = None
) -> list[RateQuote]:
    """Rows for every listed currency except the table's base."""
    if currencies is None:
        currencies = DisplayConfig().major_currencies

    rows = []
    for code in currencies:
        code = code.upper()
        if code == rate_table.base:
            continue
        rate = rate_table.rates.get(code)
        rows.append(
            RateQuote(
                base=rate_table.base,
                code=code,
                rate=rate if rate else UNAVAILABLE,
            )
        )
    return rows


def pair_rate(
    pair: ExchangePairConfig, rate_table: RateTable
) -> Decimal | Unavailable:
    """Unrounded cross rate for a preset pair: 1 from = rate to."""
    from_code = pair.from_currency.upper()
    to_code = pair.to_currency.upper()
    from_rate = rate_table.rate_for(from_code)
    to_rate = rate_table.rate_for(to_code)
    if not from_rate or not to_rate:
        return UNAVAILABLE
    return to_rate / from_rate


def exchange_pairs(
    rate_table: RateTable, display: DisplayConfig | None = None
) -> list[tuple[str, Decimal | Unavailable]]:
    """(label, rate) for the dashboard's preset pairs."""
    display = display or DisplayConfig()
    return [(pair.label, pair_rate(pair, rate_table)) for pair in display.exchange_pairs]
