"""Resumen del cruce: tabla REPORT y salida por consola."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

import pandas as pd

from conciliapagos import __version__
from conciliapagos.config import Config
from conciliapagos.export import ExportTable
from conciliapagos.matching.schema import MatchResult, MatchSummary
from conciliapagos.normalize import format_date

REPORT_SHEET = "REPORT"
SUMMARY_LABELS = [
    ("total_records", "Registros de la app"),
    ("ignored_by_filter", "Ignorados por detalle"),
    ("ignored_by_special_cuit", "Ignorados por CUIT especial"),
    ("ignored_by_blacklist", "Ignorados por CUIT bloqueado"),
    ("ignored_by_provider_name", "Ignorados por proveedor excluido"),
    ("ignored_by_retention", "Ignorados por retención"),
    ("matched", "Con proveedor"),
    ("no_match", "Sin proveedor"),
]


def build_report_df(summary: MatchSummary, config: Config) -> pd.DataFrame:
    """
    Construye la tabla de resumen: contadores, parámetros, fecha y versión.
    """
    rows: list[tuple[str, object]] = [("Metric", "Value")]
    rows.extend((key, value) for key, value in summary.as_dict().items())
    rows.extend(
        [
            ("", ""),
            ("Parameters", ""),
            ("variant", config.variant),
            ("detail_match_mode", config.detail_match_mode),
            ("detail_marker", config.detail_marker),
            ("payment_order_width", config.payment_order_width),
            ("alias_profile", config.alias_profile),
            ("", ""),
            ("timestamp", datetime.now().isoformat()),
            ("version", __version__),
        ]
    )
    return pd.DataFrame(rows, columns=["Key", "Value"])


def report_filename(today: date | None = None) -> str:
    return f"resumen_cruce_{(today or date.today()).isoformat()}.xlsx"


def build_report_table(summary: MatchSummary, config: Config, *, today: date | None = None) -> ExportTable:
    """Resumen del cruce como tabla de salida, en su propio libro."""
    return ExportTable(report_filename(today), REPORT_SHEET, build_report_df(summary, config))


def results_frame(results: Sequence[MatchResult]) -> pd.DataFrame:
    """Tabla de resultados para revisión (una fila por resultado)."""
    return pd.DataFrame(
        [
            {
                "id": r.id,
                "fecha": format_date(r.date),
                "proveedor": r.provider_name,
                "cuit": r.cuit or "",
                "cbu": r.cbu,
                "detalle": r.description,
                "monto": r.amount,
                "estado": r.match_confidence.value,
                "error": r.error or "",
            }
            for r in results
        ],
        columns=["id", "fecha", "proveedor", "cuit", "cbu", "detalle", "monto", "estado", "error"],
    )


def print_report_console(summary: MatchSummary, results: Sequence[MatchResult] = ()) -> None:
    """Muestra el resumen en consola, con el desglose de exclusiones."""
    values = summary.as_dict()
    print("\n=== Cruce de transferencias ===")
    for key, label in SUMMARY_LABELS:
        print(f"  {label + ':':<34}{values[key]}")
    if results:
        total = sum(float(r.amount or 0) for r in results)
        print(f"  {'Monto total:':<34}{total:,.2f}")
    else:
        print("  Sin resultados: revise el desglose de exclusiones.")
    print(f"  {'Versión:':<34}{__version__}")
    print("===============================\n")
