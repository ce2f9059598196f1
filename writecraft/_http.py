"""Thin HTTP client wrapping requests.Session with API-key auth and error mapping."""

import logging
from typing import Any

import requests

from .exceptions import APIError, AuthenticationError, NetworkError, RateLimitError

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"
USER_AGENT = "writecraft-python/0.1.0"


def _error_message(resp: requests.Response) -> str:
    """Server message from ``{"error": {"message"}}``, else the raw body."""
    body = resp.text or ""
    try:
        data = resp.json()
        message = data["error"]["message"]
        if isinstance(message, str):
            return message
    except (ValueError, KeyError, TypeError):
        logger.debug("Failed to parse error body: %s", body[:200] if body else "empty")
    return body


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        logger.debug("Unparseable Retry-After header: %s", value)
        return None


def _raise_for_status(resp: requests.Response) -> None:
    """Map a non-success response to a typed SDK exception."""
    status = resp.status_code
    message = _error_message(resp)
    retry_after = _parse_retry_after(resp.headers.get("Retry-After"))
    resp.close()

    if status == 401:
        raise AuthenticationError.invalid_api_key()
    if status == 429:
        raise RateLimitError(message, retry_after=retry_after, code="rate_limited")
    if status == 400:
        raise APIError(message, status_code=status)
    if 500 <= status <= 599:
        raise APIError(f"Server error: {message}", status_code=status)
    raise APIError(f"Error ({status}): {message}", status_code=status)


class HTTPClient:
    """Minimal HTTP client for the Messages API. Does not retry."""

    def __init__(self, base_url: str, api_key: str | None = None, timeout: float = 600):
        self._session = requests.Session()
        self._session.headers.update(
            {
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
                "User-Agent": USER_AGENT,
            }
        )
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.api_key = api_key

    def _send(
        self,
        method: str,
        path: str,
        *,
        api_key: str,
        is_stream: bool = False,
        **kwargs: Any,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            resp = self._session.request(
                method,
                url,
                headers={"x-api-key": api_key},
                timeout=self.timeout,
                stream=is_stream,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise NetworkError(f"Network error: {e!s}") from e
        return resp

    def request_raw(
        self, method: str, path: str, *, api_key: str | None = None, **kwargs: Any
    ) -> requests.Response:
        """Send request and return the response whatever its status."""
        return self._send(method, path, api_key=api_key or self.api_key or "", **kwargs)

    def stream(
        self, method: str, path: str, *, api_key: str | None = None, **kwargs: Any
    ) -> requests.Response:
        """Send request with stream=True for SSE parsing."""
        resp = self._send(
            method, path, api_key=api_key or self.api_key or "", is_stream=True, **kwargs
        )
        if not resp.ok:
            _raise_for_status(resp)
        return resp

    def close(self) -> None:
        self._session.close()
