"""Normalized provider shapes and the interfaces the fact assembler consumes."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class SearchResult:
    """A single web search hit."""

    title: str
    snippet: str
    url: str
    source: str = ""


@dataclass(frozen=True)
class CoinQuote:
    """Current USD quote for a resolved asset."""

    asset_id: str
    price: float
    change_24h_pct: float | None = None


@dataclass(frozen=True)
class TokenInfo:
    """Token metadata and price for a contract address."""

    name: str
    symbol: str
    price_usd: float
    chain: str
    dex: str
    liquidity_usd: float = 0.0
    fdv_usd: float | None = None
    price_change_24h_pct: float | None = None
    pair_url: str = ""


@dataclass(frozen=True)
class GlobalSnapshot:
    """Whole-market snapshot."""

    market_cap_usd: float | None = None
    volume_24h_usd: float | None = None
    dominance_pct: float | None = None


class SearchProvider(Protocol):
    """Anything that can run a web search."""

    name: str

    async def search(self, query: str) -> list[SearchResult]:
        """Return normalized results; may raise on transport failure."""
        ...


class PriceProvider(Protocol):
    """Symbol resolution and quotes."""

    async def resolve_asset_id(self, symbol_or_name: str) -> str:
        """Resolve a symbol or name to a provider asset id. Raises NotFound."""
        ...

    async def get_quote(self, asset_id: str) -> CoinQuote:
        """Current quote for an asset id."""
        ...


class TokenProvider(Protocol):
    """Token lookups by contract address."""

    async def get_token_by_contract(self, address: str) -> TokenInfo:
        """Token info for a contract. Raises NotFound."""
        ...


class MarketProvider(Protocol):
    """Global market snapshot."""

    async def get_global(self) -> GlobalSnapshot:
        """Current snapshot of the whole market."""
        ...
