"""Exception hierarchy for md4llm.

Every error carries a short correlation id (also attached to fetch log
records) and a context dict of the offending field, variable or URL.
"""

import uuid
from typing import Any


def generate_correlation_id() -> str:
    """Return an 8-character UUID-based correlation ID."""
    return str(uuid.uuid4())[:8]


def _merge_context(context: dict[str, Any] | None, **fields: Any) -> dict[str, Any]:
    merged = dict(context or {})
    merged.update({key: value for key, value in fields.items() if value is not None})
    return merged


class Md4llmError(Exception):
    """Base exception for md4llm.

    Attributes:
        message: Human-readable message, printed by the CLI as ``Error: <message>``
        correlation_id: Id tying the error to related log records
        context: Extra debugging fields
    """

    def __init__(
        self,
        message: str,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.correlation_id = correlation_id or generate_correlation_id()
        self.context = context or {}
        super().__init__(f"{message} [correlation_id={self.correlation_id}]")


class ValidationError(Md4llmError):
    """Raised for bad caller input: non-string HTML, unknown options, missing files."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        shown = None if value is None else str(value)
        super().__init__(message, correlation_id, _merge_context(context, field=field, value=shown))


class ConfigurationError(Md4llmError):
    """Raised when an MD4LLM_* environment variable is invalid."""

    def __init__(
        self,
        message: str,
        variable: str | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, correlation_id, _merge_context(context, variable=variable))


class ConversionError(Md4llmError):
    """Raised when an HTML document cannot be converted at all."""


class FetchError(Md4llmError):
    """Raised when a URL cannot be fetched.

    ``status_code`` is set when the server answered with an HTTP error.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, correlation_id, _merge_context(context, url=url, status_code=status_code))
