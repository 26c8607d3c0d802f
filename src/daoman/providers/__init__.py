"""External data providers used for grounding."""

from .base import (
    CoinQuote,
    GlobalSnapshot,
    MarketProvider,
    PriceProvider,
    SearchProvider,
    SearchResult,
    TokenInfo,
    TokenProvider,
)
from .coinpaprika import CoinPaprikaClient
from .dexscreener import DexScreenerClient
from .web_search import (
    BraveSearch,
    DuckDuckGoSearch,
    FallbackSearch,
    SerperSearch,
    TavilySearch,
    search_from_env,
)

__all__ = [
    "BraveSearch",
    "CoinPaprikaClient",
    "CoinQuote",
    "DexScreenerClient",
    "DuckDuckGoSearch",
    "FallbackSearch",
    "GlobalSnapshot",
    "MarketProvider",
    "PriceProvider",
    "SearchProvider",
    "SearchResult",
    "SerperSearch",
    "TavilySearch",
    "TokenInfo",
    "TokenProvider",
    "search_from_env",
]
