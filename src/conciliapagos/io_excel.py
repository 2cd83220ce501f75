"""I/O de planillas: lectura de hojas/registros y escritura de tablas de salida."""

from __future__ import annotations

import io
import logging
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Union

import pandas as pd

from conciliapagos.columns import AliasTable, CanonicalRecord, normalize_records
from conciliapagos.config import ConciliaPagosError
from conciliapagos.export import ExportTable
from conciliapagos.headers import HEADER_SCAN_ROWS, locate_header_row
from conciliapagos.normalize import is_empty

logger = logging.getLogger(__name__)

SUPPORTED_INPUT_EXTENSIONS = (".xlsx", ".xlsm", ".xls", ".ods")
PROVIDER_SHEET = "AGENDA"

Source = Union[str, Path, bytes]


class ExcelFileError(ConciliaPagosError):
    """Error al cargar un archivo (inexistente, ilegible, hoja inexistente)."""


class NoRecognizableColumnsError(ConciliaPagosError):
    """El archivo no produjo ningún registro con columnas reconocibles."""


def _get_engine(path: Path) -> str | None:
    """Devuelve el motor de pandas según la extensión, o None para autodetectar."""
    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xlsm"):
        return "openpyxl"
    if suffix == ".xls":
        return "xlrd"
    if suffix == ".ods":
        return "odf"
    return None


def open_workbook(source: Source) -> pd.ExcelFile:
    """
    Abre un libro desde una ruta o desde los bytes del archivo.

    Raises:
        ExcelFileError: Si el archivo no existe o no se puede leer.
    """
    if isinstance(source, bytes):
        target: Any = io.BytesIO(source)
        engine = None
        label = "<bytes>"
    else:
        path = Path(source)
        if not path.exists():
            raise ExcelFileError(f"Archivo inexistente: {path}")
        target = path
        engine = _get_engine(path)
        label = str(path)

    try:
        return pd.ExcelFile(target, engine=engine) if engine else pd.ExcelFile(target)
    except ImportError as e:
        raise ExcelFileError(f"Falta el motor para leer {label}: {e}") from e
    except Exception as e:
        raise ExcelFileError(f"No se puede leer el archivo {label}: {e}") from e


def list_sheets(source: Source) -> list[str]:
    """Lista los nombres de las hojas de un libro."""
    xl = open_workbook(source)
    return [str(s) for s in xl.sheet_names]


def choose_sheet(sheet_names: Sequence[str], preferred: str | None = PROVIDER_SHEET) -> str:
    """Hoja a usar: la preferida ("AGENDA") si existe, si no la primera."""
    if not sheet_names:
        raise ExcelFileError("El libro no tiene hojas")
    if preferred and preferred in sheet_names:
        return preferred
    return sheet_names[0]


def load_raw_rows(xl: pd.ExcelFile, sheet_name: str, *, limit: int | None = None) -> list[list[Any]]:
    """Filas crudas de una hoja (sin encabezados), opcionalmente solo el prefijo."""
    try:
        df = pd.read_excel(xl, sheet_name=sheet_name, header=None, dtype=object, nrows=limit)
    except Exception as e:
        raise ExcelFileError(f"Error en la hoja '{sheet_name}': {e}") from e
    return df.values.tolist()


def load_sheet_records(xl: pd.ExcelFile, sheet_name: str, *, header_row: int = 0) -> list[dict[str, Any]]:
    """
    Registros de una hoja usando `header_row` (base 0) como encabezados.

    Las celdas vacías se omiten y las filas sin ningún valor se descartan.
    """
    if sheet_name not in xl.sheet_names:
        sheets = ", ".join(str(s) for s in xl.sheet_names)
        raise ExcelFileError(f"Hoja '{sheet_name}' inexistente. Hojas: {sheets}")
    try:
        df = pd.read_excel(xl, sheet_name=sheet_name, header=header_row, dtype=object)
    except Exception as e:
        raise ExcelFileError(f"Error en la hoja '{sheet_name}': {e}") from e

    records = []
    for row in df.to_dict(orient="records"):
        record = {str(k): v for k, v in row.items() if not is_empty(v)}
        if record:
            records.append(record)
    return records


def read_records(
    source: Source,
    *,
    sheet_name: str | None = None,
    preferred_sheet: str | None = PROVIDER_SHEET,
    header_scan_rows: int = HEADER_SCAN_ROWS,
) -> list[dict[str, Any]]:
    """
    Lee los registros de origen de un archivo.

    Elige la hoja (la indicada, o "AGENDA" si existe, o la primera), detecta la
    fila de encabezados en el prefijo y decodifica las filas siguientes.
    """
    xl = open_workbook(source)
    names = [str(s) for s in xl.sheet_names]
    if sheet_name is None:
        sheet_name = choose_sheet(names, preferred_sheet)
    elif sheet_name not in names:
        raise ExcelFileError(f"Hoja '{sheet_name}' inexistente. Hojas: {', '.join(names)}")

    prefix = load_raw_rows(xl, sheet_name, limit=header_scan_rows)
    header_row = locate_header_row(prefix, max_rows=header_scan_rows)
    records = load_sheet_records(xl, sheet_name, header_row=header_row)
    logger.info("Hoja '%s': encabezados en fila %d, %d registros", sheet_name, header_row, len(records))
    return records


def load_canonical(
    source: Source,
    aliases: AliasTable,
    *,
    label: str = "archivo",
    sheet_name: str | None = None,
    preferred_sheet: str | None = PROVIDER_SHEET,
    header_scan_rows: int = HEADER_SCAN_ROWS,
) -> list[CanonicalRecord]:
    """
    Lee y normaliza un archivo.

    Raises:
        NoRecognizableColumnsError: Si ninguna fila produce un registro con
            alguna columna reconocida.
    """
    raw = read_records(
        source,
        sheet_name=sheet_name,
        preferred_sheet=preferred_sheet,
        header_scan_rows=header_scan_rows,
    )
    records = normalize_records(raw, aliases)
    if not any(any(v is not None for v in r.canonical_fields().values()) for r in records):
        raise NoRecognizableColumnsError(
            f"El {label} no tiene columnas reconocibles (CUIT, razón social, importe, detalle, CBU)."
        )
    return records


def write_tables(
    out_dir: str | Path,
    tables: Sequence[ExportTable],
    *,
    delay: float = 0.0,
) -> list[Path]:
    """
    Escribe cada tabla en su propio archivo xlsx dentro de `out_dir`.

    Args:
        out_dir: Carpeta de salida (se crea si no existe).
        tables: Tablas a escribir, en orden.
        delay: Pausa en segundos entre archivos.

    Returns:
        Rutas escritas.
    """
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    written = []
    for i, table in enumerate(tables):
        if i and delay > 0:
            time.sleep(delay)
        path = out / table.filename
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            # Excel limita los nombres de hoja a 31 caracteres
            table.frame.to_excel(writer, sheet_name=table.sheet_name[:31], index=False)
        logger.info("Archivo escrito: %s (%d filas)", path, len(table.frame))
        written.append(path)
    return written
