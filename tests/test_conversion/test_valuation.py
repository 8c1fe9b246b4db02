"""
Tests for valuation, the rate board and rate formatting.
"""

from decimal import Decimal

import pytest

from stock_tracker.config.state import DisplayConfig, MarketConfig
from stock_tracker.conversion import (
    UNAVAILABLE,
    exchange_pairs,
    format_rate,
    market_currency,
    rate_board,
    valuate,
)
from stock_tracker.shared.models.enums import Market
from stock_tracker.shared.models.rates import RateTable
from tests.fixtures import make_instrument


@pytest.fixture
def usd_table():
    return RateTable(
        base="USD",
        rates={
            "KRW": Decimal("1350.00"),
            "EUR": Decimal("0.92"),
            "JPY": Decimal("157.25"),
        },
    )


class TestMarketCurrency:
    def test_defaults(self):
        assert market_currency(Market.DOMESTIC) == "KRW"
        assert market_currency(Market.FOREIGN) == "USD"

    def test_configurable(self):
        config = MarketConfig(domestic_currency="JPY")
        assert market_currency(Market.DOMESTIC, config) == "JPY"


class TestValuate:
    def test_foreign_instrument_to_krw(self, usd_table):
        valuation = valuate(make_instrument("AAPL", "100.00"), usd_table, "KRW")

        assert valuation.source_currency == "USD"
        assert valuation.target_currency == "KRW"
        assert valuation.converted == Decimal("135000.00")

    def test_domestic_instrument_to_usd(self, usd_table):
        valuation = valuate(make_instrument("005930.KS", "71500"), usd_table, "usd")

        assert valuation.source_currency == "KRW"
        assert valuation.converted == Decimal("52.96")

    def test_missing_target_is_unavailable(self, usd_table):
        valuation = valuate(make_instrument("AAPL"), usd_table, "GBP")
        assert valuation.converted is UNAVAILABLE


class TestRateBoard:
    def test_skips_base_and_marks_missing(self, usd_table):
        rows = rate_board(usd_table, ["KRW", "USD", "EUR", "GBP"])

        assert [r.code for r in rows] == ["KRW", "EUR", "GBP"]
        assert rows[0].display == "1 USD = 1,350.00 KRW"
        assert rows[1].display == "1 USD = 0.9200 EUR"
        assert rows[2].rate is UNAVAILABLE
        assert rows[2].display == "1 USD = N/A GBP"

    def test_defaults_to_major_currencies(self, usd_table):
        rows = rate_board(usd_table)
        assert [r.code for r in rows] == ["KRW", "EUR", "JPY", "CNY", "GBP"]


class TestFormatRate:
    @pytest.mark.parametrize(
        "rate, code, expected",
        [
            (Decimal("157.254"), "JPY", "157.25"),
            (Decimal("1350"), "KRW", "1,350.00"),
            (Decimal("0.785"), "GBP", "0.7850"),
            (Decimal("7.24"), "cny", "7.2400"),
            (UNAVAILABLE, "EUR", "N/A"),
        ],
    )
    def test_precision_by_currency(self, rate, code, expected):
        assert format_rate(rate, code) == expected


class TestExchangePairs:
    def test_preset_pairs(self, usd_table):
        pairs = dict(exchange_pairs(usd_table))

        assert list(pairs) == ["USD → KRW", "USD → JPY", "EUR → KRW"]
        assert pairs["USD → KRW"] == Decimal("1350.00")
        assert pairs["USD → JPY"] == Decimal("157.25")
        assert pairs["EUR → KRW"].quantize(Decimal("0.01")) == Decimal("1467.39")

    def test_pair_with_missing_rate(self):
        table = RateTable(base="USD", rates={"KRW": Decimal("1350")})
        pairs = dict(exchange_pairs(table, DisplayConfig()))

        assert pairs["USD → JPY"] is UNAVAILABLE
        assert pairs["EUR → KRW"] is UNAVAILABLE
