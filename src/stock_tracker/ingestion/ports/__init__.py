"""Ingestion ports: HTTP transport and data sources."""

from .data_ports import QuoteSourcePort, RateSourcePort
from .http import HttpResponse, IHttpClient, is_transient_status

__all__ = [
    "HttpResponse",
    "IHttpClient",
    "QuoteSourcePort",
    "RateSourcePort",
    "is_transient_status",
]
