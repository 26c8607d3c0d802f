"""Grounding: deciding when live data is needed and assembling FACTS."""

from .facts import FactAssembler, LookupResult, combine_results, format_usd, run_lookup
from .heuristic import (
    DEFAULT_KEYWORDS,
    Candidates,
    expand_abbreviations,
    extract_candidates,
    needs_external_data,
)

__all__ = [
    "Candidates",
    "DEFAULT_KEYWORDS",
    "FactAssembler",
    "LookupResult",
    "combine_results",
    "expand_abbreviations",
    "extract_candidates",
    "format_usd",
    "needs_external_data",
    "run_lookup",
]
