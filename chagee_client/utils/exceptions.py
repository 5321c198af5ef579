"""
Exception hierarchy for the CHAGEE API client.

These exceptions are raised inside the request engine and converted into
result envelopes before a call returns, so callers of ``ChageeClient.request``
never see them.
"""

from typing import Any


class ChageeClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ChageeClientError):
    """Raised when required settings are missing or invalid."""


class TransportError(ChageeClientError):
    """Raised when no HTTP response could be obtained."""


class RequestTimeoutError(TransportError):
    """Raised when an attempt exceeds the configured wall-clock timeout."""

    def __init__(
        self, timeout: float, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(f"Request timed out after {timeout}s", details=details)
        self.timeout = timeout
