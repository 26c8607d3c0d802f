"""FACTS block assembly.

Each lookup (web, coins, tokens, global) runs inside its own failure boundary
and yields a ``LookupResult``. ``combine_results`` keeps the category order
fixed regardless of which lookup finished first, and ``FactAssembler`` never
raises: the worst case is an empty block and an ungrounded answer.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Sequence

from .heuristic import (
    KeywordTable,
    expand_abbreviations,
    extract_candidates,
    needs_external_data,
)

if TYPE_CHECKING:
    from ..logging import JSONLLogger
    from ..providers import MarketProvider, PriceProvider, SearchProvider, TokenProvider

logger = logging.getLogger(__name__)

MAX_WEB_RESULTS = 5
MAX_SYMBOL_LOOKUPS = 3
MAX_CONTRACT_LOOKUPS = 2

WEB_HEADER = "WEB RESULTS:"
WEB_UNAVAILABLE = "WEB RESULTS: (unavailable)"
WEB_ERROR = "WEB RESULTS: (error)"


@dataclass
class LookupResult:
    """Outcome of one fact lookup.

    A failed lookup may still carry sentinel lines (e.g. "search errored")
    that belong in the block.
    """

    source: str
    success: bool
    lines: list[str] = field(default_factory=list)
    error: str | None = None
    duration_ms: float | None = None


def format_usd(value: Any) -> str:
    """Format a USD amount: sub-dollar prices keep 8 decimals, others 2."""
    if value is None or isinstance(value, bool):
        return "n/a"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "n/a"
    if not math.isfinite(number):
        return "n/a"

    text = f"{number:,.8f}" if abs(number) < 1 else f"{number:,.2f}"
    return text.rstrip("0").rstrip(".")


def format_pct(value: float | None, default: str = "n/a") -> str:
    if value is None or not math.isfinite(value):
        return default
    return f"{value:.2f}%"


async def run_lookup(
    source: str,
    lookup: Callable[[], Awaitable[list[str]]],
    error_lines: Sequence[str] = (),
) -> LookupResult:
    """Run a lookup inside its own failure boundary."""
    started = time.monotonic()
    try:
        lines = await lookup()
    except Exception as e:
        return LookupResult(
            source=source,
            success=False,
            lines=list(error_lines),
            error=f"{type(e).__name__}: {e}",
            duration_ms=(time.monotonic() - started) * 1000,
        )
    return LookupResult(
        source=source,
        success=True,
        lines=lines,
        duration_ms=(time.monotonic() - started) * 1000,
    )


def combine_results(results: Sequence[LookupResult]) -> list[str]:
    """Concatenate lines in the given order; failures are logged, not raised."""
    lines: list[str] = []
    for result in results:
        if not result.success:
            logger.warning(f"{result.source} lookup failed: {result.error}")
        lines.extend(result.lines)
    return lines


class FactAssembler:
    """Builds the timestamped FACTS block for a query.

    Any provider may be None; its section is simply skipped (web search
    notes the unavailability instead, since the query asked for live data).
    """

    def __init__(
        self,
        search: SearchProvider | None = None,
        prices: PriceProvider | None = None,
        tokens: TokenProvider | None = None,
        market: MarketProvider | None = None,
        static_context: Sequence[str] = (),
        context_label: str = "CONTEXT:",
        keywords: KeywordTable | None = None,
        now: Callable[[], datetime] | None = None,
        event_log: JSONLLogger | None = None,
    ) -> None:
        self.search = search
        self.prices = prices
        self.tokens = tokens
        self.market = market
        self.static_context = [line for line in static_context if line.strip()]
        self.context_label = context_label
        self.keywords = keywords
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.event_log = event_log

    async def _web_lines(self, query: str) -> list[str]:
        if self.search is None:
            return [WEB_UNAVAILABLE]

        results = await self.search.search(expand_abbreviations(query))
        if not results:
            return []
        lines = [WEB_HEADER]
        for r in results[:MAX_WEB_RESULTS]:
            lines.append(f"• {r.title} — {r.snippet} ({r.url})")
        return lines

    async def _coin_lines(self, symbols: Sequence[str]) -> list[str]:
        if self.prices is None:
            return []

        lines = []
        seen: set[str] = set()
        for raw in symbols[:MAX_SYMBOL_LOOKUPS]:
            try:
                asset_id = await self.prices.resolve_asset_id(raw)
                if asset_id in seen:
                    continue
                quote = await self.prices.get_quote(asset_id)
            except Exception as e:
                logger.debug(f"No quote for {raw!r}: {e}")
                continue

            change = quote.change_24h_pct if quote.change_24h_pct is not None else 0.0
            arrow = "🟢" if change >= 0 else "🔴"
            lines.append(
                f"COIN {raw.upper()}: ${format_usd(quote.price)} "
                f"({arrow} {format_pct(quote.change_24h_pct, '0.00%')} 24h)"
            )
            seen.add(asset_id)
        return lines

    async def _token_lines(self, contracts: Sequence[str]) -> list[str]:
        if self.tokens is None:
            return []

        lines = []
        for address in contracts[:MAX_CONTRACT_LOOKUPS]:
            try:
                token = await self.tokens.get_token_by_contract(address)
            except Exception as e:
                logger.debug(f"No token data for {address}: {e}")
                continue

            line = (
                f"TOKEN {token.symbol or '?'} ({token.chain} • {token.dex}): "
                f"${format_usd(token.price_usd)} (24h {format_pct(token.price_change_24h_pct)}), "
                f"liquidity ~${format_usd(token.liquidity_usd)}, FDV ~${format_usd(token.fdv_usd)}"
            )
            if token.pair_url:
                line += f" ({token.pair_url})"
            lines.append(line)
        return lines

    async def _global_lines(self) -> list[str]:
        if self.market is None:
            return []

        snapshot = await self.market.get_global()
        dominance = format_pct(snapshot.dominance_pct)
        return [
            f"GLOBAL: MCAP ~${format_usd(snapshot.market_cap_usd)}, "
            f"VOL24h ~${format_usd(snapshot.volume_24h_usd)}, BTC.D {dominance}"
        ]

    def _context_lines(self) -> list[str]:
        if not self.static_context:
            return []
        return [self.context_label, *self.static_context]

    async def gather(self, query: str) -> list[LookupResult]:
        """Run every applicable lookup concurrently; results in category order."""
        candidates = extract_candidates(query)

        async def skipped() -> list[str]:
            return []

        web = (
            run_lookup("web", lambda: self._web_lines(query), error_lines=[WEB_ERROR])
            if needs_external_data(query, self.keywords)
            else run_lookup("web", skipped)
        )
        results = await asyncio.gather(
            web,
            run_lookup("coins", lambda: self._coin_lines(candidates.symbols)),
            run_lookup("tokens", lambda: self._token_lines(candidates.contracts)),
            run_lookup("global", self._global_lines),
        )

        if self.event_log is not None:
            for result in results:
                self.event_log.log_lookup(
                    result.source,
                    result.success,
                    lines=len(result.lines),
                    duration_ms=result.duration_ms,
                    error=result.error,
                )
        return list(results)

    async def build_facts(self, query: str) -> str:
        """Return the FACTS block for a query, or "" when nothing was gathered."""
        if not isinstance(query, str) or not query.strip():
            return ""

        try:
            facts = combine_results(await self.gather(query)) + self._context_lines()
        except Exception:
            logger.exception("Fact assembly failed")
            facts = self._context_lines()

        if not facts:
            return ""

        timestamp = self._now().isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return f"FACTS @ {timestamp}:\n- " + "\n- ".join(facts)
