"""
Shared pytest fixtures for the stock tracker test-suite.
"""

import logging
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure src on path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from stock_tracker.config.state import SyncConfig  # noqa: E402

logger = logging.getLogger(__name__)


@pytest.fixture
def mock_http_client():
    """IHttpClient double; set .get.return_value / .get.side_effect per test."""
    client = MagicMock()
    client.get = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def mock_gateway():
    """Persistence gateway double with an empty remote store."""
    gateway = MagicMock()
    gateway.load = AsyncMock(return_value=None)
    gateway.save = AsyncMock(return_value=None)
    return gateway


@pytest.fixture
def fast_sync_config():
    """One retry, no delay between attempts."""
    return SyncConfig(quote_retries=1, retry_delay_seconds=0)
