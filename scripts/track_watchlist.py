#!/usr/bin/env python3
"""
Sign in as a user, optionally add symbols, refresh once and print the
watchlist with converted prices.

    python scripts/track_watchlist.py user-123 --add AAPL 005930 --target KRW
"""

import argparse
import asyncio
import json

from stock_tracker.config import get_config
from stock_tracker.conversion import format_amount, format_rate, rate_board
from stock_tracker.infrastructure.database import DatabaseAdapter
from stock_tracker.infrastructure.impls import StaticIdentityProvider
from stock_tracker.infrastructure.observability import setup_logging_from_config
from stock_tracker.ingestion.adapters.exchangerate_plugin import ExchangeRateClient
from stock_tracker.ingestion.adapters.yahoo_plugin import YahooQuoteClient
from stock_tracker.orchestration import TrackerSession
from stock_tracker.shared.exceptions import QuoteUnavailable
from stock_tracker.storage.repositories import WatchlistRepository


async def run(user_id: str, add: list[str], target: str) -> None:
    config = get_config()
    setup_logging_from_config(config.logging)

    db = DatabaseAdapter(config.database)
    await db.connect()
    repository = WatchlistRepository(db, table=config.database.table)
    await repository.ensure_schema()

    session = TrackerSession(
        StaticIdentityProvider(user_id),
        YahooQuoteClient(config.quotes, market_config=config.market),
        ExchangeRateClient(config.rates),
        repository,
        config=config,
    )

    try:
        await session.sign_in()
        for symbol in add:
            try:
                instrument = await session.add_symbol(symbol)
                print(f"➕ tracking {instrument.symbol}")
            except QuoteUnavailable as e:
                print(f"❌ {e}")

        result = await session.refresh()
        print(json.dumps(result.to_dict(), indent=2))

        table = await session.load_rates()
        for valuation in session.valuations(target):
            instrument = session.store.get(valuation.symbol)
            print(
                f"{valuation.symbol:<12} {format_amount(valuation.price):>14} "
                f"{valuation.source_currency}  "
                f"{instrument.change_percent_display:>8}  "
                f"≈ {format_amount(valuation.converted)} {valuation.target_currency}"
            )

        if table is not None:
            for row in rate_board(table, config.display.major_currencies):
                print(f"1 {row.base} = {format_rate(row.rate, row.code)} {row.code}")

        summary = session.summary()
        print(f"rising {summary.rising} / falling {summary.falling}")
    finally:
        await session.sign_out(close_clients=True)
        await db.disconnect()


def main() -> None:
    parser = argparse.ArgumentParser(description="Refresh and print a user's watchlist")
    parser.add_argument("user_id", help="User whose watchlist to load")
    parser.add_argument("--add", nargs="*", default=[], help="Symbols to start tracking")
    parser.add_argument("--target", default="KRW", help="Currency for converted prices")
    args = parser.parse_args()

    asyncio.run(run(args.user_id, args.add, args.target.upper()))


if __name__ == "__main__":
    main()
