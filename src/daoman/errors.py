"""Error taxonomy shared by providers, the relay and the chat transport."""

import logging

logger = logging.getLogger(__name__)


class DaomanError(Exception):
    """Base exception for daoman errors."""


class InvalidInput(DaomanError):
    """Caller supplied input that cannot be processed (e.g. empty prompt)."""


class ProviderError(DaomanError):
    """An external provider failed.

    Attributes:
        status: HTTP status reported by the provider, if any.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class TransientProviderError(ProviderError):
    """Rate limit, server-side failure or timeout. Expected to clear on retry."""


class RateLimited(TransientProviderError):
    """Provider reported a rate-limit status."""


class NotFound(ProviderError):
    """Unknown symbol, unresolvable contract, missing voice."""


class AuthConfigError(ProviderError):
    """Missing or rejected credential for a required provider."""


class EmptyResult(ProviderError):
    """Provider succeeded but returned nothing usable."""


class EmptyResponse(EmptyResult):
    """Completion provider returned a blank answer."""


def is_transient_status(status: int | None) -> bool:
    """Return True for statuses worth retrying (429 and 5xx)."""
    if status is None:
        return False
    return status == 429 or status >= 500


def user_message(error: Exception) -> str:
    """Convert an exception into a short user-facing message."""
    if isinstance(error, RateLimited):
        return "AI is rate-limited. Try again shortly."
    if isinstance(error, InvalidInput):
        return str(error)
    if isinstance(error, AuthConfigError):
        return f"Configuration error: {error}"
    if isinstance(error, NotFound):
        return f"Not found: {error}"
    if isinstance(error, EmptyResult):
        return f"{error} Please try again."
    if isinstance(error, ProviderError):
        return f"AI error: {error}"

    logger.error(f"Unexpected error: {type(error).__name__}: {error}")
    return "Something went wrong. Please try again later."
