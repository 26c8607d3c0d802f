"""Heuristics that decide when a query needs live data, and what to look up.

Everything here is pure and stateless: no network, no exceptions. The keyword
tables are plain data so deployments can swap or extend them.
"""

import re
from dataclasses import dataclass, field
from typing import Mapping, Sequence

KeywordTable = Mapping[str, Sequence[str]]

DEFAULT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "temporal": (
        "today", "yesterday", "last night", "this morning", "this afternoon",
        "latest", "breaking", "update", "updated", "just now", "recent",
        "right now", "this week", "this month", "tonight", "live",
    ),
    "sports": (
        "roster", "lineup", "starters", "injury", "score", "result", "schedule",
        "game", "match", "season", "standings", "transfer", "coach", "manager",
        "record", "playoffs", "final", "cup",
    ),
    "leagues": (
        "nba", "euroleague", "epl", "premier league", "la liga", "mlb", "nfl",
        "nhl", "ucl", "champions league", "euros", "ncaa", "serie a",
        "bundesliga", "ligue 1", "f1", "formula 1", "motogp",
    ),
    "teams": (
        "lakers", "warriors", "celtics", "mavericks", "real madrid", "barcelona",
        "olympiacos", "panathinaikos", "fenerbahce", "maccabi", "man city",
        "arsenal", "liverpool", "bayern", "psg", "juventus", "inter", "milan",
    ),
    "finance": (
        "stock", "stocks", "dividend", "earnings", "eps", "guidance", "nasdaq",
        "dow", "s&p 500", "premarket", "after-hours", "ticker", "sec filing",
        "10-k", "10q", "ipo", "halt", "resume trading",
    ),
    "tech": (
        "latest version", "release notes", "changelog", "patch notes",
        "security advisory", "cve", "vulnerability", "outage", "status page",
        "incident", "downtime",
    ),
    "weather": (
        "weather", "forecast", "temperature", "rain", "snow", "storm",
        "hurricane", "tornado", "earthquake", "wildfire", "flood", "heatwave",
        "aqi", "tsunami",
    ),
    "transport": (
        "flight", "flight status", "delayed", "train", "subway", "metro",
        "traffic", "road closure", "ferry", "airport",
    ),
    "politics": (
        "election", "vote", "polls", "results", "ballot", "referendum",
        "candidate", "debate", "coalition", "turnout",
    ),
    "entertainment": (
        "box office", "premiere", "release date", "episode", "cast change",
        "trailer", "setlist", "tour dates",
    ),
    "shopping": (
        "in stock", "restock", "availability", "preorder", "price drop", "deal",
        "discount", "coupon",
    ),
}

YEAR_PATTERN = re.compile(r"\b(19|20)\d{2}\b")
DATE_PATTERNS = (
    re.compile(
        r"\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*"
        r"\s+\d{1,2}(?:,\s*\d{4})?\b"
    ),
    re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b"),
)

CONTRACT_PATTERN = re.compile(r"\b(0x[a-fA-F0-9]{40}|[1-9A-HJ-NP-Za-km-z]{32,44})\b")
WORD_PATTERN = re.compile(r"\b[a-z0-9.+-]{2,10}\b", re.IGNORECASE)
NUMERIC_PATTERN = re.compile(r"[0-9.+-]+")

MAX_CONTRACTS = 2
MAX_SYMBOLS = 5

SYMBOL_BLACKLIST = frozenset({
    "the", "and", "you", "are", "with", "this", "that", "about", "is", "it",
    "to", "for", "of", "in", "on", "at", "how", "what", "why", "where", "when",
    "should", "will", "can", "do", "does", "did", "be", "am", "was", "were",
    "me", "my", "we", "our", "an", "or", "so", "if", "no", "not", "any",
    "who", "won", "now", "today", "tell", "show", "give", "check", "vs",
    "price", "prices", "token", "coin", "coins", "chart", "dman", "dao", "man",
    "lal", "gsw", "bos", "dal", "nba", "ucl", "epl", "f1",
})

ABBREVIATIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bLAL\b", re.IGNORECASE), "Los Angeles Lakers"),
    (re.compile(r"\bGSW\b", re.IGNORECASE), "Golden State Warriors"),
    (re.compile(r"\bBOS\b", re.IGNORECASE), "Boston Celtics"),
    (re.compile(r"\bDAL\b", re.IGNORECASE), "Dallas Mavericks"),
    (re.compile(r"\bUCL\b", re.IGNORECASE), "UEFA Champions League"),
    (re.compile(r"\bEPL\b", re.IGNORECASE), "English Premier League"),
    # Leave an existing "S&P 500" alone so expansion stays idempotent
    (re.compile(r"\bS&P\b(?!\s*500)", re.IGNORECASE), "S&P 500"),
    (re.compile(r"\bDJIA\b", re.IGNORECASE), "Dow Jones Industrial Average"),
)


@dataclass
class Candidates:
    """Lookup candidates found in a query."""

    symbols: list[str] = field(default_factory=list)
    contracts: list[str] = field(default_factory=list)


def _has_any(text: str, needles: Sequence[str]) -> bool:
    return any(needle in text for needle in needles)


def needs_external_data(query: str | None, keywords: KeywordTable | None = None) -> bool:
    """Return True when the query likely needs live or external information.

    Biased toward recall: a false positive costs one search call, a false
    negative produces a stale answer.
    """
    if not query:
        return False

    text = str(query).lower()
    table = DEFAULT_KEYWORDS if keywords is None else keywords

    if any(_has_any(text, words) for words in table.values()):
        return True
    if YEAR_PATTERN.search(text):
        return True
    if any(pattern.search(text) for pattern in DATE_PATTERNS):
        return True
    return "who won" in text or text.startswith("what happened")


def _unique(items: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def extract_candidates(query: str | None) -> Candidates:
    """Extract contract addresses and ticker-like symbols from a query.

    Contracts keep their original case; symbols are lower-cased. Both lists
    keep order of first appearance without duplicates.
    """
    if not query:
        return Candidates()

    text = str(query)
    contracts = _unique([m.group(0) for m in CONTRACT_PATTERN.finditer(text)])

    # Blank out addresses so their fragments don't turn into symbols
    remainder = CONTRACT_PATTERN.sub(" ", text)
    words = [m.group(0).rstrip(".").lower() for m in WORD_PATTERN.finditer(remainder)]
    symbols = _unique([
        w for w in words
        if len(w) >= 2 and w not in SYMBOL_BLACKLIST and not NUMERIC_PATTERN.fullmatch(w)
    ])

    return Candidates(
        symbols=symbols[:MAX_SYMBOLS],
        contracts=contracts[:MAX_CONTRACTS],
    )


def expand_abbreviations(query: str | None) -> str:
    """Replace known team/league/index shorthand with full names."""
    if not query:
        return ""

    text = str(query)
    for pattern, replacement in ABBREVIATIONS:
        text = pattern.sub(replacement, text)
    return text
