"""
Exception classes for the writecraft SDK.
"""

from typing import Any


class WritecraftError(Exception):
    """Base exception for all writecraft errors."""

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class NetworkError(WritecraftError):
    """Raised when the transport fails before or during a stream."""


class APIError(WritecraftError):
    """Raised for non-success responses and in-stream error events."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.error_type = error_type


class AuthenticationError(APIError):
    """Raised when the API rejects the key."""

    @classmethod
    def invalid_api_key(cls) -> "AuthenticationError":
        """Create the canonical error for a rejected key."""
        return cls(
            "Invalid API key",
            status_code=401,
            error_type="authentication_error",
            code="invalid_api_key",
        )


class RateLimitError(APIError):
    """Raised when rate limits are exceeded.

    The message is the raw server text so callers can drive their own backoff.
    """

    def __init__(self, message: str, retry_after: float | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("status_code", 429)
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class NoApiKeyError(WritecraftError):
    """Raised when no API key could be resolved."""

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        if message is None:
            message = (
                "No API key configured. Choose one of:\n"
                "  • Store a key: writecraft key set\n"
                '  • Set environment variable: export WRITECRAFT_API_KEY="your-key"\n'
            )
        kwargs.setdefault("code", "no_api_key")
        super().__init__(message, **kwargs)


class StreamProtocolError(WritecraftError):
    """Raised when the event stream breaks block ordering (strict mode only), or
    when a result is requested from a stream whose iteration was abandoned."""
