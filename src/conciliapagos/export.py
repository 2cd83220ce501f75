"""Armado de los archivos de salida: transferencias y E-Cheqs."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

from conciliapagos.columns import CanonicalRecord
from conciliapagos.config import Config, ConciliaPagosError
from conciliapagos.cuit import extract_cuit
from conciliapagos.matching.index import build_provider_index
from conciliapagos.matching.schema import MatchResult
from conciliapagos.normalize import is_empty, norm_key, safe_str, to_number

logger = logging.getLogger(__name__)

TRANSFER_COLUMNS = [
    "CBU/CVU destino",
    "Importe",
    "Motivo",
    "Referencia",
    "Email destinatario",
    "Mensaje del email",
]
TRANSFER_SHEET = "Transferencias"

ECHEQ_MARKER = "E-CHEQ"
CHECK_NUMBER_MARKER = "EC GAL -"
ECHEQ_MEMO_WIDTH = 14
ECHEQ_CHUNK_SIZE = 25
ECHEQ_SHEET = "Plantilla para emision"
ECHEQ_SINGLE_FILENAME = "ECHEQS_GALICIA_GENERADO.xlsx"
ECHEQ_PART_FILENAME = "ECHEQS_GALICIA_PARTE_{n}.xlsx"
ECHEQ_DISPLAY_COLUMN = "Razon Social"
ECHEQ_NOT_FOUND = "No encontrado"
ECHEQ_COLUMNS = [
    "Tipo de documento",
    "Nro. de documento",
    ECHEQ_DISPLAY_COLUMN,
    "Monto",
    "Fecha de pago",
    "Motivo de pago",
    "Descripcion 1",
    "Descripcion 2",
    "Mail",
    "Clausula",
    "Nro de cheque",
]

# Día 0 de las fechas seriales de planilla.
SPREADSHEET_EPOCH = datetime(1899, 12, 30)


class NoChequeRecordsError(ConciliaPagosError):
    """Ningún registro de la app lleva la marca de E-Cheq."""


@dataclass(frozen=True)
class ExportTable:
    """Una tabla de salida lista para codificar en una planilla."""

    filename: str
    sheet_name: str
    frame: pd.DataFrame


def transfer_filename(today: date | None = None) -> str:
    return f"transferencias_banco_{(today or date.today()).isoformat()}.xlsx"


def email_allowed(provider_name: str, whitelist: Iterable[str]) -> bool:
    """True si el nombre del proveedor contiene alguna palabra habilitada para avisos."""
    name = provider_name.lower()
    return any(term.lower() in name for term in whitelist if term)


def build_transfer_table(
    results: Sequence[MatchResult],
    *,
    config: Config | None = None,
    reason: str | Callable[[MatchResult], str] | None = None,
    today: date | None = None,
) -> ExportTable:
    """
    Construye la tabla de transferencias para el banco.

    Los campos de email solo se completan si el proveedor figura en la lista
    habilitada (`config.email_whitelist`); si no, quedan vacíos para no
    disparar avisos no deseados.

    Args:
        results: Resultados seleccionados para transferir.
        config: Configuración (motivo por defecto y lista de emails).
        reason: Motivo fijo o función que lo calcula por resultado.
        today: Fecha usada en el nombre del archivo.
    """
    config = config or Config()
    reason = reason if reason is not None else config.transfer_reason

    rows = []
    for r in results:
        notify = email_allowed(r.provider_name, config.email_whitelist)
        amount = to_number(r.amount)
        rows.append(
            {
                "CBU/CVU destino": r.cbu,
                "Importe": amount if amount is not None else 0.0,
                "Motivo": reason(r) if callable(reason) else reason,
                "Referencia": r.description,
                "Email destinatario": r.email if notify else "",
                "Mensaje del email": (r.email_message or r.description) if notify and r.email else "",
            }
        )
    if not config.email_whitelist and any(r.email for r in results):
        logger.warning("email_whitelist vacía: los emails de proveedores no se exportan")
    frame = pd.DataFrame(rows, columns=TRANSFER_COLUMNS)
    return ExportTable(transfer_filename(today), TRANSFER_SHEET, frame)


def extract_check_number(detail: Any) -> str:
    """Número de cheque: dígitos que siguen a "EC GAL -" en el detalle."""
    text = safe_str(detail).upper()
    pos = text.find(CHECK_NUMBER_MARKER)
    if pos == -1:
        return ""
    remainder = text[pos + len(CHECK_NUMBER_MARKER):].lstrip()
    digits = []
    for char in remainder:
        if not char.isdigit():
            break
        digits.append(char)
    return "".join(digits)


def serial_to_date_text(val: Any) -> str:
    """
    Convierte una fecha serial de planilla en "dd/mm/yyyy".

    Se cuentan días enteros desde el 30/12/1899, sin otra corrección. Las
    celdas ya tipadas como fecha se formatean tal cual; el texto no numérico
    y los números fuera del rango de fechas se devuelven sin cambios.
    """
    if is_empty(val):
        return ""
    if isinstance(val, (datetime, date)):
        return val.strftime("%d/%m/%Y")
    try:
        days = float(val)
    except (TypeError, ValueError):
        return str(val)
    if math.isnan(days):
        return ""
    try:
        return (SPREADSHEET_EPOCH + timedelta(days=days)).strftime("%d/%m/%Y")
    except (OverflowError, ValueError):
        # fuera del rango de fechas, p. ej. un CUIT pegado en la columna
        return safe_str(val)


def _source_value(record: CanonicalRecord, key: str) -> Any:
    for k, v in record.source.items():
        if norm_key(k) == key and not is_empty(v):
            return v
    return None


def _is_echeq(record: CanonicalRecord) -> bool:
    detail = safe_str(record.first("filter_detail", "detalle"))
    return ECHEQ_MARKER in detail.upper()


def build_echeq_rows(
    ledger: Sequence[CanonicalRecord],
    providers: Sequence[CanonicalRecord] = (),
) -> pd.DataFrame:
    """
    Filtra los registros de E-Cheq de la app y los lleva al formato del banco.

    La columna "Razon Social" es solo para mostrar; `build_echeq_tables` la
    quita antes de exportar.

    Raises:
        NoChequeRecordsError: Si ningún registro contiene "E-CHEQ" en el detalle.
    """
    selected = [r for r in ledger if _is_echeq(r)]
    if not selected:
        raise NoChequeRecordsError('No se encontraron registros de "E-CHEQ" en el archivo de la app.')

    index = build_provider_index(providers)
    rows = []
    for record in selected:
        cuit = extract_cuit(record) or ""
        name = record.first("provider_name", "nombre", "razon_social", default=ECHEQ_NOT_FOUND)
        provider = index.get(cuit) if cuit else None
        if provider is not None:
            name = provider.first("provider_name", "razon_social", "nombre", default=name)

        memo = _source_value(record, "coment")
        if memo is None:
            memo = record.payment_detail
        amount = to_number(record.amount)

        rows.append(
            {
                "Tipo de documento": "CUIT",
                "Nro. de documento": cuit,
                ECHEQ_DISPLAY_COLUMN: safe_str(name),
                "Monto": amount if amount is not None else 0.0,
                "Fecha de pago": serial_to_date_text(record.first("check_date", "fcheqpro")),
                "Motivo de pago": "FACTURA",
                "Descripcion 1": safe_str(memo)[:ECHEQ_MEMO_WIDTH],
                "Descripcion 2": "FLETE",
                "Mail": "",
                "Clausula": "A la orden",
                "Nro de cheque": extract_check_number(record.first("filter_detail", "detalle")),
            }
        )
    return pd.DataFrame(rows, columns=ECHEQ_COLUMNS)


def build_echeq_tables(
    rows: pd.DataFrame,
    *,
    chunk_size: int = ECHEQ_CHUNK_SIZE,
) -> list[ExportTable]:
    """
    Parte las filas de E-Cheq en tablas de `chunk_size` filas.

    Una sola tabla se llama ECHEQS_GALICIA_GENERADO.xlsx; si hay más, cada una
    lleva el sufijo PARTE_<n> (desde 1).
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size debe ser >= 1 (got {chunk_size})")
    clean = rows.drop(columns=[ECHEQ_DISPLAY_COLUMN], errors="ignore")
    total = max(math.ceil(len(clean) / chunk_size), 1)
    if total == 1:
        return [ExportTable(ECHEQ_SINGLE_FILENAME, ECHEQ_SHEET, clean.reset_index(drop=True))]

    tables = []
    for i in range(total):
        chunk = clean.iloc[i * chunk_size : (i + 1) * chunk_size].reset_index(drop=True)
        tables.append(ExportTable(ECHEQ_PART_FILENAME.format(n=i + 1), ECHEQ_SHEET, chunk))
    return tables
