"""Tests de detección de la fila de encabezados."""

from conciliapagos.headers import is_header_row, locate_header_row, score_row


def test_header_after_banner_rows() -> None:
    rows = [
        ["REPORTE DE PAGOS PENDIENTES"],
        ["Emitido", "01/10/2025"],
        ["Fecha", "Detalle", "CUIT", "RazSocial", "Haber"],
        ["01/10/2025", "D.Directo DD", "30-12345678-9", "Tech SRL", 150000],
    ]
    assert locate_header_row(rows) == 2


def test_header_first_row() -> None:
    rows = [["CUIT", "Nombre", "CBU"], ["30123456789", "Tech", "0001"]]
    assert locate_header_row(rows) == 0


def test_no_qualifying_row_defaults_to_zero() -> None:
    rows = [["a", "b"], ["c", "d"], [1, 2]]
    assert locate_header_row(rows) == 0


def test_empty_and_short_input() -> None:
    assert locate_header_row([]) == 0
    assert locate_header_row([[]]) == 0


def test_single_token_is_not_enough() -> None:
    rows = [["CBU a confirmar"], ["cuit", "nombre"]]
    assert score_row(rows[0]) == 1
    assert not is_header_row(rows[0])
    assert locate_header_row(rows) == 1


def test_tax_id_and_name_row_is_selected() -> None:
    rows = [["Listado"], ["Sucursal", 12], ["C.U.I.T / CUIL", "Beneficiario"], ["x", "y"]]
    assert locate_header_row(rows) == 2


def test_mixed_cell_types() -> None:
    rows = [[float("nan"), 12, None], ["CUIT", "Importe"]]
    assert locate_header_row(rows) == 1


def test_scan_is_bounded() -> None:
    rows = [["x"]] * 20 + [["CUIT", "Nombre"]]
    assert locate_header_row(rows) == 0
    assert locate_header_row(rows, max_rows=25) == 20
