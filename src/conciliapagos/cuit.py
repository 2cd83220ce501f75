"""Extracción del CUIT/CUIL de un registro."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from conciliapagos.columns import CanonicalRecord
from conciliapagos.normalize import digits_only, is_empty, norm_key

CUIT_LENGTH = 11
CUIT_KEY_TERMS = ("cuit", "cuil", "nro_doc", "identificacion", "tax_id")


def _items(record: CanonicalRecord) -> Iterator[tuple[str, Any]]:
    yield "cuit", record.cuit
    yield from record.extra.items()
    for key, val in record.source.items():
        yield norm_key(key), val


def extract_cuit(record: CanonicalRecord) -> str | None:
    """
    Devuelve el CUIT del registro, solo dígitos, o None.

    Primero busca una columna cuyo nombre contenga un término de
    identificación (cuit, cuil, nro_doc, ...). Si no hay, toma el primer
    valor que, quitando separadores, tenga exactamente 11 dígitos.
    """
    for key, val in _items(record):
        if is_empty(val):
            continue
        if any(term in key for term in CUIT_KEY_TERMS):
            return digits_only(val) or None

    for _, val in _items(record):
        digits = digits_only(val)
        if len(digits) == CUIT_LENGTH:
            return digits
    return None
