"""Groq chat completion client with retry on transient failures."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import groq
from groq import AsyncGroq

from ..config import CompletionConfig
from ..errors import (
    AuthConfigError,
    EmptyResponse,
    ProviderError,
    RateLimited,
    TransientProviderError,
    is_transient_status,
)

if TYPE_CHECKING:
    from ..logging import JSONLLogger

logger = logging.getLogger(__name__)


def _detail(error: groq.APIError) -> str:
    """Provider-supplied error message, if there is one."""
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict) and inner.get("message"):
            return str(inner["message"])
        if body.get("message"):
            return str(body["message"])
    return getattr(error, "message", "") or str(error)


class CompletionClient:
    """Sends assembled conversations to Groq and returns the answer text.

    Retries 429, 5xx and timeouts up to ``config.max_retries`` times with
    exponential backoff. Anything else fails on the first attempt. The SDK's
    own retry loop is disabled so this policy is the only one.
    """

    def __init__(
        self,
        client: AsyncGroq | None = None,
        config: CompletionConfig | None = None,
        event_log: JSONLLogger | None = None,
    ) -> None:
        self.config = config or CompletionConfig()
        self._client = client
        self.event_log = event_log

    def _get_client(self) -> AsyncGroq:
        if self._client is None:
            if not self.config.api_key:
                raise AuthConfigError("Missing GROQ_API_KEY")
            self._client = AsyncGroq(
                api_key=self.config.api_key,
                timeout=self.config.timeout,
                max_retries=0,
            )
        return self._client

    def _to_error(self, error: groq.APIError, status: int | None) -> ProviderError:
        message = _detail(error) or "AI error."
        if status == 429:
            return RateLimited(message, status=status)
        if status in (401, 403):
            return AuthConfigError(message, status=status)
        if isinstance(error, groq.APITimeoutError) or is_transient_status(status):
            return TransientProviderError(message, status=status)
        return ProviderError(message, status=status)

    async def complete(self, messages: list[dict[str, Any]], **overrides: Any) -> str:
        """Return the stripped answer for a message list.

        Args:
            messages: Conversation turns, oldest first.
            **overrides: Model parameters overriding the configured ones.

        Raises:
            EmptyResponse: The provider answered with blank content.
            RateLimited: Still rate-limited after the last retry.
            AuthConfigError: Missing key, or the provider rejected it.
            ProviderError: Any other provider failure.
        """
        client = self._get_client()
        params = {**self.config.params(), **overrides}
        max_retries = max(0, self.config.max_retries)

        for attempt in range(max_retries + 1):
            try:
                response = await client.chat.completions.create(messages=messages, **params)
            except groq.APIStatusError as e:
                error: groq.APIError = e
                status: int | None = e.status_code
                retryable = is_transient_status(status)
            except groq.APITimeoutError as e:
                error = e
                status = None
                retryable = True
            except groq.APIConnectionError as e:
                # DNS failure, refused connection
                error = e
                status = None
                retryable = False
            else:
                content = response.choices[0].message.content or ""
                if not content.strip():
                    raise EmptyResponse("Empty AI response.")
                return content.strip()

            if not retryable or attempt == max_retries:
                raise self._to_error(error, status) from error

            delay = self.config.backoff_base * (2**attempt)
            logger.info(f"Completion attempt {attempt + 1} failed (status={status}); retrying in {delay}s")
            if self.event_log is not None:
                self.event_log.log_completion_retry(
                    attempt + 1, status=status, delay_s=delay, error=_detail(error)
                )
            await asyncio.sleep(delay)

        raise ProviderError("AI error.")  # pragma: no cover
