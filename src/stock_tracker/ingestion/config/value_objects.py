"""Value objects injected into ingestion components instead of ConfigState."""

from dataclasses import dataclass


@dataclass(frozen=True)
class HttpClientConfig:
    """Session-wide HTTP defaults; requests may override the timeout."""

    timeout: float = 10.0
    user_agent: str = "Mozilla/5.0"
