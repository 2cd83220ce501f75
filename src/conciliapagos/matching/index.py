"""Índice de proveedores por CUIT."""

from __future__ import annotations

from collections.abc import Iterable

from conciliapagos.columns import CanonicalRecord
from conciliapagos.cuit import extract_cuit


def build_provider_index(providers: Iterable[CanonicalRecord]) -> dict[str, CanonicalRecord]:
    """
    Construye el índice CUIT → registro de proveedor.

    Los registros sin CUIT se ignoran. Ante CUITs repetidos queda el último
    visto (no se combinan).
    """
    index: dict[str, CanonicalRecord] = {}
    for record in providers:
        cuit = extract_cuit(record)
        if cuit:
            index[cuit] = record
    return index
