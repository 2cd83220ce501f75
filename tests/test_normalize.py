"""Tests de normalización de valores."""

from datetime import date

import pandas as pd

from conciliapagos.normalize import digits_only, format_date, is_empty, norm_key, norm_text, safe_str, to_number


def test_norm_key_collapses_whitespace() -> None:
    assert norm_key("  Email  Destinatario ") == "email_destinatario"
    assert norm_key("RazSocial") == "razsocial"
    assert norm_key("Nro\tDoc") == "nro_doc"


def test_norm_text_basic() -> None:
    assert norm_text("  Hola   Mundo ") == "hola mundo"
    assert norm_text("  Hola  ", lower=False) == "Hola"
    assert norm_text(None) == ""


def test_digits_only() -> None:
    assert digits_only("30-12345678-9") == "30123456789"
    assert digits_only(30123456789) == "30123456789"
    # float entero tal como lo devuelve una planilla
    assert digits_only(30123456789.0) == "30123456789"
    assert digits_only(None) == ""
    assert digits_only(float("nan")) == ""
    assert digits_only(True) == ""


def test_to_number() -> None:
    assert to_number(150000) == 150000.0
    assert to_number("150.000,50") == 150000.5
    assert to_number("$ 1500") == 1500.0
    assert to_number("1.234.567") == 1234567.0
    assert to_number("150.000") == 150000.0
    assert to_number("$ 2.500") == 2500.0
    assert to_number("-1.500") == -1500.0
    # un solo punto sin grupo de miles es decimal
    assert to_number("12.5") == 12.5
    assert to_number("1500.75") == 1500.75
    assert to_number("abc") is None
    assert to_number("") is None
    assert to_number(None) is None


def test_is_empty() -> None:
    assert is_empty(None)
    assert is_empty(float("nan"))
    assert is_empty("   ")
    assert is_empty(pd.NaT)
    assert not is_empty(0)
    assert not is_empty("x")


def test_safe_str_and_format_date() -> None:
    assert safe_str(150000.0) == "150000"
    assert safe_str(12.5) == "12.5"
    assert safe_str(None) == ""
    assert format_date(date(2025, 1, 2)) == "02/01/2025"
    assert format_date(pd.Timestamp("2025-03-05")) == "05/03/2025"
    assert format_date("sin fecha") == "sin fecha"
