"""Web search providers: Tavily, Serper (Google), Brave and DuckDuckGo.

All providers normalize to ``SearchResult``. ``search_from_env`` builds a
fallback chain from whichever API keys are configured; DuckDuckGo needs no
key and always closes the chain.
"""

import logging
import os
from typing import Any, Iterable, Sequence

import httpx

from ..errors import AuthConfigError, ProviderError
from .base import SearchProvider, SearchResult
from .http import new_client, request_json

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 5
SEARCH_TIMEOUT = 15.0


def normalize(items: Iterable[Any], source: str) -> list[SearchResult]:
    """Map provider-specific result dicts to ``SearchResult``; drop url-less hits."""
    results = []
    for item in items:
        if not isinstance(item, dict):
            continue
        url = item.get("link") or item.get("url") or item.get("URL") or item.get("FirstURL") or ""
        if not url:
            continue
        results.append(
            SearchResult(
                title=str(item.get("title") or item.get("name") or item.get("Title") or item.get("Text") or ""),
                snippet=str(
                    item.get("snippet")
                    or item.get("content")
                    or item.get("description")
                    or item.get("Snippet")
                    or item.get("Text")
                    or ""
                ),
                url=str(url),
                source=source,
            )
        )
    return results


class TavilySearch:
    """Search via the Tavily API, optimized for LLM grounding."""

    name = "tavily"

    def __init__(self, api_key: str | None = None, max_results: int = DEFAULT_MAX_RESULTS) -> None:
        self._api_key = api_key or os.getenv("TAVILY_API_KEY")
        if not self._api_key:
            raise AuthConfigError("TAVILY_API_KEY environment variable is required")
        self._max_results = min(max(1, max_results), 20)
        self._client = None

    def _get_client(self):
        """Get or create the Tavily async client."""
        if self._client is None:
            try:
                from tavily import AsyncTavilyClient
            except ImportError:
                raise ImportError(
                    "tavily-python is required for Tavily search. "
                    "Install it with: pip install tavily-python"
                )
            self._client = AsyncTavilyClient(api_key=self._api_key)
        return self._client

    async def search(self, query: str) -> list[SearchResult]:
        client = self._get_client()
        response = await client.search(
            query=query.strip(),
            search_depth="basic",
            max_results=self._max_results,
            include_answer=False,
            timeout=int(SEARCH_TIMEOUT),
        )
        return normalize(response.get("results", []), self.name)


class SerperSearch:
    """Google results via serper.dev."""

    name = "serper"

    def __init__(self, api_key: str, client: httpx.AsyncClient | None = None) -> None:
        if not api_key:
            raise AuthConfigError("SERPER_API_KEY is required")
        self._api_key = api_key
        self._client = client or new_client()

    async def search(self, query: str) -> list[SearchResult]:
        data = await request_json(
            self._client,
            "POST",
            "https://google.serper.dev/search",
            provider=self.name,
            timeout=SEARCH_TIMEOUT,
            json={"q": query, "num": DEFAULT_MAX_RESULTS},
            headers={"X-API-KEY": self._api_key},
        )
        return normalize(data.get("organic") or [], self.name)


class BraveSearch:
    """Brave Search web results."""

    name = "brave"

    def __init__(self, api_key: str, client: httpx.AsyncClient | None = None) -> None:
        if not api_key:
            raise AuthConfigError("BRAVE_API_KEY is required")
        self._api_key = api_key
        self._client = client or new_client()

    async def search(self, query: str) -> list[SearchResult]:
        data = await request_json(
            self._client,
            "GET",
            "https://api.search.brave.com/res/v1/web/search",
            provider=self.name,
            timeout=SEARCH_TIMEOUT,
            params={"q": query, "count": DEFAULT_MAX_RESULTS},
            headers={"X-Subscription-Token": self._api_key},
        )
        return normalize((data.get("web") or {}).get("results") or [], self.name)


class DuckDuckGoSearch:
    """DuckDuckGo instant answers. Keyless, weaker coverage."""

    name = "duckduckgo"

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or new_client()

    async def search(self, query: str) -> list[SearchResult]:
        data = await request_json(
            self._client,
            "GET",
            "https://api.duckduckgo.com/",
            provider=self.name,
            timeout=SEARCH_TIMEOUT,
            params={"q": query, "format": "json", "no_html": 1, "skip_disambig": 1},
        )
        items: list[dict[str, Any]] = []
        if data.get("AbstractText"):
            items.append({
                "Title": data.get("Heading"),
                "Snippet": data.get("AbstractText"),
                "URL": data.get("AbstractURL"),
            })
        for topic in data.get("RelatedTopics") or []:
            if isinstance(topic, dict):
                items.append({"Text": topic.get("Text"), "FirstURL": topic.get("FirstURL")})
        return normalize(items[:DEFAULT_MAX_RESULTS], self.name)


class FallbackSearch:
    """Try providers in order; the first one that doesn't raise wins."""

    name = "fallback"

    def __init__(self, providers: Sequence[SearchProvider]) -> None:
        if not providers:
            raise ValueError("FallbackSearch needs at least one provider")
        self.providers = list(providers)

    async def search(self, query: str) -> list[SearchResult]:
        last_error: Exception | None = None
        for provider in self.providers:
            try:
                return await provider.search(query)
            except Exception as e:
                logger.warning(f"{provider.name} search failed: {e}")
                last_error = e

        raise ProviderError(f"All search providers failed: {last_error}")


def search_from_env(client: httpx.AsyncClient | None = None) -> SearchProvider | None:
    """Build the search chain from configured keys.

    Returns None only when no provider at all can be constructed, so callers
    can treat web search as an optional capability.
    """
    providers: list[SearchProvider] = []
    serper_key = os.getenv("SERPER_API_KEY", "").strip()
    tavily_key = os.getenv("TAVILY_API_KEY", "").strip()
    brave_key = os.getenv("BRAVE_API_KEY", "").strip()

    try:
        if serper_key:
            providers.append(SerperSearch(serper_key, client=client))
        if tavily_key:
            providers.append(TavilySearch(api_key=tavily_key))
        if brave_key:
            providers.append(BraveSearch(brave_key, client=client))
        providers.append(DuckDuckGoSearch(client=client))
    except Exception as e:
        logger.error(f"Web search setup failed: {e}")

    if not providers:
        return None
    if len(providers) == 1:
        return providers[0]
    return FallbackSearch(providers)
