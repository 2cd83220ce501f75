"""Módulo de cruce app ↔ agenda de proveedores."""

from conciliapagos.matching.engine import Matcher, find_matches, select_results
from conciliapagos.matching.index import build_provider_index
from conciliapagos.matching.schema import MatchConfidence, MatchResult, MatchSummary

__all__ = [
    "Matcher",
    "MatchConfidence",
    "MatchResult",
    "MatchSummary",
    "build_provider_index",
    "find_matches",
    "select_results",
]
