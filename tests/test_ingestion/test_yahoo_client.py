"""
Tests for the Yahoo quote client and its chart response mapper.
"""

import asyncio
from decimal import Decimal

import aiohttp
import pytest

from stock_tracker.config.state import QuoteServiceConfig
from stock_tracker.ingestion.adapters.yahoo_plugin import (
    YahooQuoteClient,
    classify_market,
    normalize_symbol,
    parse_chart_response,
)
from stock_tracker.shared.exceptions import QuoteUnavailable
from stock_tracker.shared.models.enums import Market
from stock_tracker.shared.models.instruments import UNKNOWN_VOLUME
from tests.fixtures import load_fixture, make_response

# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def client(mock_http_client):
    return YahooQuoteClient(QuoteServiceConfig(), http_client=mock_http_client)


# ============================================================================
# SYMBOL NORMALIZATION
# ============================================================================


class TestNormalizeSymbol:
    def test_trims_and_uppercases(self):
        assert normalize_symbol("  aapl ") == ("AAPL", Market.FOREIGN)

    def test_six_digit_code_gets_default_suffix(self):
        assert normalize_symbol("005930") == ("005930.KS", Market.DOMESTIC)

    def test_kosdaq_suffix_is_domestic(self):
        assert normalize_symbol("035720.kq") == ("035720.KQ", Market.DOMESTIC)

    def test_custom_default_suffix(self):
        symbol, market = normalize_symbol("035720", default_suffix=".KQ")
        assert symbol == "035720.KQ"
        assert market == Market.DOMESTIC

    def test_blank_symbol_rejected(self):
        with pytest.raises(ValueError):
            normalize_symbol("   ")

    def test_other_suffixes_are_foreign(self):
        assert classify_market("7203.T") == Market.FOREIGN
        assert classify_market("BRK.B") == Market.FOREIGN


# ============================================================================
# RESPONSE MAPPING
# ============================================================================


class TestParseChartResponse:
    def test_full_payload(self):
        snapshot = parse_chart_response(
            "AAPL", Market.FOREIGN, load_fixture("yahoo_chart_apple")
        )
        instrument = snapshot.instrument

        assert instrument.symbol == "AAPL"
        assert instrument.price == Decimal("189.5")
        # chartPreviousClose wins over previousClose
        assert instrument.previous_close == Decimal("187.25")
        assert instrument.change == Decimal("2.25")
        assert instrument.change_percent == Decimal("1.20")
        assert instrument.day_high == Decimal("190.1")
        assert instrument.day_low == Decimal("186.9")
        assert instrument.volume == "51234567"

    def test_null_closes_dropped_from_history(self):
        snapshot = parse_chart_response(
            "AAPL", Market.FOREIGN, load_fixture("yahoo_chart_apple")
        )

        assert len(snapshot.history) == 2
        assert [p.close for p in snapshot.history] == [
            Decimal("186.0"),
            Decimal("189.5"),
        ]
        assert snapshot.history[0].timestamp.timestamp() == 1717372800

    def test_sparse_meta_fails_soft(self):
        snapshot = parse_chart_response(
            "TSLA", Market.FOREIGN, load_fixture("yahoo_chart_sparse_meta")
        )
        instrument = snapshot.instrument

        assert instrument.day_high == instrument.price == Decimal("250.0")
        assert instrument.day_low == Decimal("250.0")
        assert instrument.volume == UNKNOWN_VOLUME
        assert instrument.previous_close == Decimal("255.0")
        assert instrument.change == Decimal("-5.0")
        assert instrument.change_percent == Decimal("-1.96")
        assert snapshot.history == []

    def test_reported_zero_day_range_is_kept(self):
        body = load_fixture("yahoo_chart_apple")
        meta = body["chart"]["result"][0]["meta"]
        meta["regularMarketDayHigh"] = 0
        meta["regularMarketDayLow"] = 0.0

        instrument = parse_chart_response("AAPL", Market.FOREIGN, body).instrument

        assert instrument.day_high == Decimal("0")
        assert instrument.day_low == Decimal("0")
        assert instrument.price == Decimal("189.5")

    def test_zero_previous_close_leaves_change_absent(self):
        snapshot = parse_chart_response(
            "NEWCO", Market.FOREIGN, load_fixture("yahoo_chart_zero_previous_close")
        )

        assert snapshot.instrument.change is None
        assert snapshot.instrument.change_percent is None
        assert snapshot.instrument.change_percent_display == "N/A"

    @pytest.mark.parametrize(
        "fixture_name",
        [
            "yahoo_chart_not_found",
            "yahoo_chart_no_price",
            "yahoo_chart_no_previous_close",
        ],
    )
    def test_unusable_payloads_raise(self, fixture_name):
        with pytest.raises(QuoteUnavailable) as exc_info:
            parse_chart_response("X", Market.FOREIGN, load_fixture(fixture_name))
        assert exc_info.value.transient is False

    def test_non_dict_body_raises(self):
        with pytest.raises(QuoteUnavailable):
            parse_chart_response("X", Market.FOREIGN, {"error": "<html>"})


# ============================================================================
# CLIENT
# ============================================================================


class TestYahooQuoteClient:
    @pytest.mark.asyncio
    async def test_fetch_quote_requests_chart_endpoint(self, client, mock_http_client):
        mock_http_client.get.return_value = make_response(
            load_fixture("yahoo_chart_apple")
        )

        snapshot = await client.fetch_quote(" aapl")

        url = mock_http_client.get.await_args.args[0]
        params = mock_http_client.get.await_args.kwargs["params"]
        assert url == "https://query1.finance.yahoo.com/v8/finance/chart/AAPL"
        assert params == {"range": "1mo", "interval": "1d"}
        assert snapshot.symbol == "AAPL"
        assert snapshot.instrument.market == Market.FOREIGN

    @pytest.mark.asyncio
    async def test_domestic_code_is_suffixed(self, client, mock_http_client):
        mock_http_client.get.return_value = make_response(
            load_fixture("yahoo_chart_samsung")
        )

        snapshot = await client.fetch_quote("005930")

        assert mock_http_client.get.await_args.args[0].endswith("/005930.KS")
        assert snapshot.symbol == "005930.KS"
        assert snapshot.instrument.market == Market.DOMESTIC
        assert snapshot.instrument.change == Decimal("1500")
        assert snapshot.instrument.change_percent == Decimal("2.14")

    @pytest.mark.asyncio
    async def test_blank_symbol_never_hits_network(self, client, mock_http_client):
        with pytest.raises(QuoteUnavailable):
            await client.fetch_quote("  ")
        mock_http_client.get.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, transient",
        [(404, False), (400, False), (429, True), (500, True), (503, True)],
    )
    async def test_http_errors(self, client, mock_http_client, status_code, transient):
        mock_http_client.get.return_value = make_response(
            load_fixture("yahoo_chart_not_found"), status_code=status_code
        )

        with pytest.raises(QuoteUnavailable) as exc_info:
            await client.fetch_quote("ZZZZ")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.transient is transient
        assert exc_info.value.symbol == "ZZZZ"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [aiohttp.ClientConnectionError("connection reset"), asyncio.TimeoutError()],
    )
    async def test_transport_errors_are_transient(self, client, mock_http_client, error):
        mock_http_client.get.side_effect = error

        with pytest.raises(QuoteUnavailable) as exc_info:
            await client.fetch_quote("AAPL")

        assert exc_info.value.transient is True
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_malformed_json_is_not_transient(self, client, mock_http_client):
        mock_http_client.get.side_effect = ValueError("Expecting value")

        with pytest.raises(QuoteUnavailable) as exc_info:
            await client.fetch_quote("AAPL")

        assert exc_info.value.transient is False

    @pytest.mark.asyncio
    async def test_lookup_matches_fetch_quote(self, client, mock_http_client):
        mock_http_client.get.return_value = make_response(
            load_fixture("yahoo_chart_apple")
        )

        looked_up = await client.lookup("AAPL")
        fetched = await client.fetch_quote("AAPL")

        assert looked_up == fetched

    @pytest.mark.asyncio
    async def test_close_leaves_injected_transport_open(self, client, mock_http_client):
        await client.close()
        mock_http_client.close.assert_not_awaited()
