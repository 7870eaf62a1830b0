"""Utility functions for md4llm."""

import logging
import re
from typing import Any
from urllib.parse import urlsplit

from md4llm.exceptions import generate_correlation_id

LOGGER = logging.getLogger(__name__)

# Returned by get_domain_from_url when no host can be parsed
DEFAULT_DOMAIN = "output"

MAX_FILENAME_LENGTH = 100

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")
_UNDERSCORE_RUNS = re.compile(r"_+")
_SELECTOR_CHARS = re.compile(r"^[a-zA-Z0-9\-_#.\[\]=\"':,\s*>+~()]+$")


def log_with_correlation(
    logger: logging.Logger,
    level: int,
    message: str,
    correlation_id: str | None = None,
    **kwargs: Any,
) -> None:
    """
    Log a message with correlation ID and additional context.

    Args:
        logger: Logger instance to use.
        level: Logging level (e.g., logging.INFO, logging.ERROR).
        message: Log message format string.
        correlation_id: Optional correlation ID. If None, generates a new one.
        **kwargs: Additional context to include in log extra fields.
    """
    corr_id = correlation_id or generate_correlation_id()
    extra = {"correlation_id": corr_id, **kwargs}
    logger.log(level, message, extra=extra)


def sanitize_filename(name: str) -> str:
    """
    Make a string safe for use as a file name.

    Every character outside ``[a-zA-Z0-9-_]`` becomes an underscore, runs of
    underscores collapse to one, and the result is cut to 100 characters.

    Args:
        name: Arbitrary name (URL, title, ...).

    Returns:
        Sanitised file name stem.
    """
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name)
    cleaned = _UNDERSCORE_RUNS.sub("_", cleaned)
    return cleaned[:MAX_FILENAME_LENGTH]


def get_domain_from_url(url: str) -> str:
    """
    Extract the host of a URL without a leading ``www.``.

    Args:
        url: Absolute URL.

    Returns:
        Host name, or "output" when the URL has no parsable host.
    """
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return DEFAULT_DOMAIN
    if not hostname:
        return DEFAULT_DOMAIN
    return hostname.removeprefix("www.")


def is_valid_selector(selector: str) -> bool:
    """
    Cheap syntactic check that a CSS selector only uses expected characters.

    This does not parse the selector; an accepted selector may still fail
    to compile.
    """
    return bool(_SELECTOR_CHARS.match(selector))
