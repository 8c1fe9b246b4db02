"""ExchangeRate-API plugin."""

from .client import ExchangeRateClient, parse_rates_response

__all__ = ["ExchangeRateClient", "parse_rates_response"]
