"""Shared httpx helpers for provider adapters."""

import asyncio
import logging
from typing import Any

import httpx

from ..errors import (
    AuthConfigError,
    NotFound,
    ProviderError,
    RateLimited,
    TransientProviderError,
    is_transient_status,
)

logger = logging.getLogger(__name__)

USER_AGENT = "daoman-bot/1.0"


def error_for_status(response: httpx.Response, provider: str) -> ProviderError:
    """Map an unsuccessful response to the error taxonomy."""
    status = response.status_code
    detail = _detail(response) or response.reason_phrase or "request failed"
    message = f"{provider} error {status}: {detail}"

    if status == 429:
        return RateLimited(message, status=status)
    if status in (401, 403):
        return AuthConfigError(message, status=status)
    if status == 404:
        return NotFound(message, status=status)
    if is_transient_status(status):
        return TransientProviderError(message, status=status)
    return ProviderError(message, status=status)


def _detail(response: httpx.Response) -> str:
    """Best-effort extraction of a provider's error message."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200].strip()

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        detail = data.get("detail") or data.get("message")
        if isinstance(detail, dict):
            return str(detail.get("message") or detail)
        if detail:
            return str(detail)
    return ""


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    provider: str,
    timeout: float,
    retries: int = 0,
    backoff: float = 0.5,
    **kwargs: Any,
) -> Any:
    """Send a request and decode JSON, retrying transient failures.

    Args:
        client: Shared async client.
        method: HTTP method.
        url: Absolute URL.
        provider: Name used in error messages and logs.
        timeout: Per-request timeout in seconds.
        retries: Extra attempts for 429/5xx/timeouts.
        backoff: First retry delay; doubles per attempt.

    Raises:
        ProviderError (or a subclass) once attempts are exhausted.
    """
    last_error: ProviderError | None = None

    for attempt in range(retries + 1):
        try:
            response = await client.request(method, url, timeout=timeout, **kwargs)
        except httpx.TimeoutException as e:
            last_error = TransientProviderError(f"{provider} timed out after {timeout}s: {e}")
        except httpx.RequestError as e:
            last_error = TransientProviderError(f"{provider} request failed: {e}")
        else:
            if response.is_success:
                try:
                    return response.json()
                except ValueError as e:
                    raise ProviderError(f"{provider} returned invalid JSON: {e}") from e
            last_error = error_for_status(response, provider)
            if not isinstance(last_error, TransientProviderError):
                raise last_error

        if attempt < retries:
            delay = backoff * (2**attempt)
            logger.debug(f"{provider} attempt {attempt + 1} failed ({last_error}); retrying in {delay}s")
            await asyncio.sleep(delay)

    assert last_error is not None
    raise last_error


def new_client() -> httpx.AsyncClient:
    """Client with the default user agent; callers own closing it."""
    return httpx.AsyncClient(headers={"User-Agent": USER_AGENT}, follow_redirects=True)
