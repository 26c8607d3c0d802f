"""CoinPaprika adapter: symbol resolution, quotes and the global snapshot.

No API key is needed. The coin list is large, so it is cached for 30 minutes;
quotes are cached for 60 seconds to stay clear of rate limits.
"""

import logging
import time
from typing import Any, Callable
from urllib.parse import quote

import httpx

from ..errors import NotFound, ProviderError
from .base import CoinQuote, GlobalSnapshot
from .http import new_client, request_json

logger = logging.getLogger(__name__)

PAPRIKA_BASE = "https://api.coinpaprika.com"
COINS_TTL = 30 * 60
QUOTE_TTL = 60


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    return float(value) if isinstance(value, (int, float)) else None


class CoinPaprikaClient:
    """Price and market provider backed by the CoinPaprika public API."""

    name = "coinpaprika"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str = PAPRIKA_BASE,
        retries: int = 3,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client or new_client()
        self._owns_client = client is None
        self._base_url = base_url.rstrip("/")
        self._retries = retries
        self._clock = clock
        self._coins: list[dict[str, Any]] | None = None
        self._coins_ts: float = 0.0
        self._quotes: dict[str, tuple[float, CoinQuote]] = {}

    async def _get(self, path: str, *, timeout: float, params: dict | None = None) -> Any:
        return await request_json(
            self._client,
            "GET",
            f"{self._base_url}{path}",
            provider=self.name,
            timeout=timeout,
            retries=self._retries,
            params=params,
        )

    async def _load_coins(self) -> list[dict[str, Any]]:
        now = self._clock()
        if self._coins is None or now - self._coins_ts > COINS_TTL:
            data = await self._get("/v1/coins", timeout=20.0)
            if not isinstance(data, list):
                raise ProviderError("coinpaprika returned an unexpected coin list")
            self._coins = [
                c for c in data
                if isinstance(c, dict) and c.get("is_active") and c.get("type") == "coin"
            ]
            self._coins_ts = now
        return self._coins

    async def resolve_asset_id(self, symbol_or_name: str) -> str:
        """Resolve "btc", "bitcoin" or "btc-bitcoin" to a CoinPaprika id.

        Match order: exact id, exact symbol, exact name, symbol prefix, name
        substring, then the search endpoint.

        Raises:
            NotFound: Nothing matched.
        """
        query = (symbol_or_name or "").strip()
        if not query:
            raise NotFound("Empty symbol.")

        coins = await self._load_coins()
        lower = query.lower()

        def field(coin: dict[str, Any], key: str) -> str:
            return str(coin.get(key) or "").lower()

        matchers: list[Callable[[dict[str, Any]], bool]] = [
            lambda c: field(c, "id") == lower,
            lambda c: field(c, "symbol") == lower,
            lambda c: field(c, "name") == lower,
            lambda c: field(c, "symbol").startswith(lower),
            lambda c: lower in field(c, "name"),
        ]
        for matches in matchers:
            for coin in coins:
                if matches(coin):
                    return str(coin["id"])

        try:
            found = await self._get(
                "/v1/search",
                timeout=15.0,
                params={"q": query, "c": "currencies", "limit": 5},
            )
        except ProviderError as e:
            logger.debug(f"coinpaprika search fallback failed for {query!r}: {e}")
        else:
            currencies = found.get("currencies") if isinstance(found, dict) else None
            if currencies and isinstance(currencies[0], dict) and currencies[0].get("id"):
                return str(currencies[0]["id"])

        raise NotFound(f"Coin {query!r} not found on CoinPaprika.")

    async def get_quote(self, asset_id: str) -> CoinQuote:
        """Current USD price and 24h change for a CoinPaprika id."""
        now = self._clock()
        cached = self._quotes.get(asset_id)
        if cached and now - cached[0] < QUOTE_TTL:
            return cached[1]

        data = await self._get(
            f"/v1/tickers/{quote(asset_id, safe='')}",
            timeout=12.0,
            params={"quotes": "USD"},
        )
        usd = (data.get("quotes") or {}).get("USD") if isinstance(data, dict) else None
        price = _number(usd.get("price")) if isinstance(usd, dict) else None
        if price is None:
            raise NotFound(f"Price not available for {asset_id}.")

        result = CoinQuote(
            asset_id=asset_id,
            price=price,
            change_24h_pct=_number(usd.get("percent_change_24h")),
        )
        self._quotes[asset_id] = (now, result)
        return result

    async def get_global(self) -> GlobalSnapshot:
        """Total market cap, 24h volume and BTC dominance."""
        data = await self._get("/v1/global", timeout=10.0)
        if not isinstance(data, dict):
            raise ProviderError("coinpaprika returned an unexpected global snapshot")
        return GlobalSnapshot(
            market_cap_usd=_number(data.get("market_cap_usd")),
            volume_24h_usd=_number(data.get("volume_24h_usd")),
            dominance_pct=_number(data.get("bitcoin_dominance_percentage")),
        )

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()
