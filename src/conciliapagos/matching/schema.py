"""Esquemas y tipos del cruce."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from conciliapagos.columns import CanonicalRecord


class MatchConfidence(str, Enum):
    """Clasificación de un resultado del cruce."""

    EXACT = "exact"
    WARNING = "warning"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class MatchResult:
    """Resultado del cruce para un registro de la app que pasó los filtros."""

    id: str
    row_index: int
    cuit: str | None
    provider_name: str
    cbu: str
    amount: Any
    date: Any
    description: str
    match_confidence: MatchConfidence
    error: str | None = None
    email: str = ""
    email_message: str = ""
    payment_order: str | None = None
    ledger_record: CanonicalRecord | None = None
    provider_record: CanonicalRecord | None = None

    @property
    def is_matched(self) -> bool:
        return self.match_confidence != MatchConfidence.NO_MATCH

    def __repr__(self) -> str:
        return f"MatchResult(id={self.id!r}, cuit={self.cuit!r}, confidence={self.match_confidence.value})"


@dataclass(frozen=True)
class MatchSummary:
    """Contadores de diagnóstico de una corrida (no forman parte del archivo)."""

    total_records: int = 0
    ignored_by_filter: int = 0
    ignored_by_special_cuit: int = 0
    ignored_by_provider_name: int = 0
    ignored_by_blacklist: int = 0
    ignored_by_retention: int = 0
    matched: int = 0
    no_match: int = 0

    @property
    def total_ignored(self) -> int:
        return (
            self.ignored_by_filter
            + self.ignored_by_special_cuit
            + self.ignored_by_provider_name
            + self.ignored_by_blacklist
            + self.ignored_by_retention
        )

    def as_dict(self) -> dict[str, int]:
        return asdict(self)
