"""Tests del módulo report."""

from datetime import date

import pytest

from conciliapagos.config import Config
from conciliapagos.matching import MatchConfidence, MatchResult, MatchSummary
from conciliapagos.report import build_report_df, build_report_table, print_report_console, results_frame


@pytest.fixture
def summary() -> MatchSummary:
    return MatchSummary(
        total_records=10,
        ignored_by_filter=4,
        ignored_by_special_cuit=1,
        ignored_by_provider_name=1,
        ignored_by_blacklist=1,
        ignored_by_retention=1,
        matched=1,
        no_match=1,
    )


@pytest.fixture
def results() -> list[MatchResult]:
    return [
        MatchResult("match-0", 0, "30123456789", "Tech SRL", "0001", 1500.5, "01/10/2025", "Fletes",
                    MatchConfidence.EXACT),
        MatchResult("unmatched-3", 3, None, "Proveedor Desconocido", "", 10, "01/10/2025", "Varios",
                    MatchConfidence.NO_MATCH, error="Registro sin CUIT"),
    ]


def test_summary_totals(summary: MatchSummary) -> None:
    assert summary.total_ignored == 8
    assert summary.as_dict()["ignored_by_filter"] == 4


def test_build_report_df(summary: MatchSummary) -> None:
    df = build_report_df(summary, Config.for_variant("lenient"))
    values = dict(zip(df["Key"], df["Value"]))
    assert values["total_records"] == 10
    assert values["ignored_by_retention"] == 1
    assert values["variant"] == "lenient"
    assert "timestamp" in values
    assert "version" in values


def test_build_report_table(summary: MatchSummary) -> None:
    table = build_report_table(summary, Config(), today=date(2026, 10, 19))
    assert table.filename == "resumen_cruce_2026-10-19.xlsx"
    assert table.sheet_name == "REPORT"
    assert list(table.frame.columns) == ["Key", "Value"]


def test_results_frame(results: list[MatchResult]) -> None:
    df = results_frame(results)
    assert df["estado"].tolist() == ["exact", "no_match"]
    assert df["cuit"].tolist() == ["30123456789", ""]
    assert df["error"].tolist() == ["", "Registro sin CUIT"]


def test_print_report_console(summary: MatchSummary, results: list[MatchResult], capsys: pytest.CaptureFixture) -> None:
    print_report_console(summary, results)
    out = capsys.readouterr().out
    assert "Cruce de transferencias" in out
    assert "Ignorados por detalle:" in out
    assert "1,510.50" in out


def test_print_report_console_without_results(summary: MatchSummary, capsys: pytest.CaptureFixture) -> None:
    print_report_console(summary, [])
    out = capsys.readouterr().out
    assert "Sin resultados" in out
    assert "Ignorados por CUIT especial:" in out
