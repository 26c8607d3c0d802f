"""DexScreener adapter: token metadata and price by contract address.

DexScreener detects the chain from the address, so EVM and Solana contracts
go through the same endpoint.
"""

from typing import Any

import httpx

from ..errors import NotFound
from .base import TokenInfo
from .http import new_client, request_json

DEXSCREENER_BASE = "https://api.dexscreener.com/latest/dex"


def _float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class DexScreenerClient:
    """Token provider backed by the DexScreener public API."""

    name = "dexscreener"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str = DEXSCREENER_BASE,
        timeout: float = 10.0,
    ) -> None:
        self._client = client or new_client()
        self._owns_client = client is None
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def get_token_by_contract(self, address: str) -> TokenInfo:
        """Pick the most liquid pair quoted in USD for a contract.

        Raises:
            NotFound: No pairs, or none with a USD price.
        """
        address = (address or "").strip()
        if not address:
            raise NotFound("Empty contract address.")

        data = await request_json(
            self._client,
            "GET",
            f"{self._base_url}/tokens/{address}",
            provider=self.name,
            timeout=self._timeout,
        )
        pairs = data.get("pairs") if isinstance(data, dict) else None
        if not pairs:
            raise NotFound("Token not found on DexScreener.")

        priced = [p for p in pairs if isinstance(p, dict) and _float(p.get("priceUsd")) is not None]
        if not priced:
            raise NotFound("No price data with USD liquidity found.")

        best = max(priced, key=lambda p: _float((p.get("liquidity") or {}).get("usd")) or 0.0)
        base_token = best.get("baseToken") or {}
        change = (best.get("priceChange") or {}).get("h24")

        return TokenInfo(
            name=str(base_token.get("name") or ""),
            symbol=str(base_token.get("symbol") or ""),
            price_usd=_float(best.get("priceUsd")) or 0.0,
            chain=str(best.get("chainId") or ""),
            dex=str(best.get("dexId") or ""),
            liquidity_usd=_float((best.get("liquidity") or {}).get("usd")) or 0.0,
            fdv_usd=_float(best.get("fdv")),
            price_change_24h_pct=_float(change),
            pair_url=str(best.get("url") or ""),
        )

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()
