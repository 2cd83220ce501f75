"""Detección de la fila de encabezados en planillas con filas de título."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from conciliapagos.normalize import safe_str

HEADER_SCAN_ROWS = 15
TAX_ID_TOKENS = ("cuit", "cuil")
NAME_TOKENS = ("nombre", "razsocial", "beneficiario")
HEADER_VOCABULARY = TAX_ID_TOKENS + NAME_TOKENS + ("importe", "haber", "detalle", "cbu")
MIN_HEADER_SCORE = 2


def _row_text(row: Sequence[Any]) -> str:
    return "|".join(safe_str(cell) for cell in row).lower()


def score_row(row: Sequence[Any], vocabulary: Sequence[str] = HEADER_VOCABULARY) -> int:
    """Cantidad de tokens del vocabulario presentes (como subcadena) en la fila."""
    text = _row_text(row)
    return sum(1 for token in vocabulary if token in text)


def is_header_row(row: Sequence[Any], vocabulary: Sequence[str] = HEADER_VOCABULARY) -> bool:
    return score_row(row, vocabulary) >= MIN_HEADER_SCORE


def locate_header_row(
    rows: Sequence[Sequence[Any]],
    *,
    max_rows: int = HEADER_SCAN_ROWS,
    vocabulary: Sequence[str] = HEADER_VOCABULARY,
) -> int:
    """
    Devuelve el índice (base 0) de la fila de encabezados.

    Las exportaciones traen filas de título o metadatos antes de los
    encabezados y su cantidad varía según la configuración de exportación.
    Se toma la primera fila que reúne al menos dos tokens del vocabulario.

    Args:
        rows: Filas crudas (celdas mixtas), normalmente solo el prefijo.
        max_rows: Cantidad máxima de filas a examinar.
        vocabulary: Tokens de encabezado esperados (minúsculas).

    Returns:
        Índice de la fila de encabezados, 0 si ninguna califica.
    """
    for idx, row in enumerate(rows[:max_rows]):
        if is_header_row(row, vocabulary):
            return idx
    return 0
