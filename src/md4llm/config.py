"""Fetch configuration management."""

import os
from collections.abc import Callable
from dataclasses import dataclass

from md4llm.exceptions import ConfigurationError, generate_correlation_id

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 2
DEFAULT_CONCURRENCY = 3
DEFAULT_BACKOFF = 1.0
MAX_REDIRECTS = 5

Number = int | float


@dataclass(frozen=True)
class FetchConfig:
    """Immutable settings for the URL fetcher.

    Attributes:
        timeout: Per-request timeout in seconds.
        retries: Extra attempts after the first failure.
        concurrency: Maximum in-flight requests for batch fetches.
        backoff: Base delay in seconds; attempt N waits backoff * 2**N.
    """

    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    concurrency: int = DEFAULT_CONCURRENCY
    backoff: float = DEFAULT_BACKOFF

    def __post_init__(self) -> None:
        """Validate configuration after initialisation."""
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive", context={"timeout": self.timeout})
        if self.retries < 0:
            raise ConfigurationError("retries must not be negative", context={"retries": self.retries})
        if self.concurrency < 1:
            raise ConfigurationError("concurrency must be at least 1", context={"concurrency": self.concurrency})
        if self.backoff < 0:
            raise ConfigurationError("backoff must not be negative", context={"backoff": self.backoff})


def _read_number(name: str, default: Number, cast: Callable[[str], Number], correlation_id: str) -> Number:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid {name}: {raw!r}",
            variable=name,
            correlation_id=correlation_id,
        ) from e


def load_fetch_config() -> FetchConfig:
    """
    Load fetch configuration from environment variables.

    Reads MD4LLM_TIMEOUT, MD4LLM_RETRIES, MD4LLM_CONCURRENCY and MD4LLM_BACKOFF;
    unset variables keep their defaults.

    Returns:
        FetchConfig with validated settings.

    Raises:
        ConfigurationError: If a variable is set but invalid.
    """
    correlation_id = generate_correlation_id()
    return FetchConfig(
        timeout=_read_number("MD4LLM_TIMEOUT", DEFAULT_TIMEOUT, float, correlation_id),
        retries=_read_number("MD4LLM_RETRIES", DEFAULT_RETRIES, int, correlation_id),
        concurrency=_read_number("MD4LLM_CONCURRENCY", DEFAULT_CONCURRENCY, int, correlation_id),
        backoff=_read_number("MD4LLM_BACKOFF", DEFAULT_BACKOFF, float, correlation_id),
    )
