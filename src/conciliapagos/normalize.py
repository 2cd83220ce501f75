"""Normalización de textos, claves de columna y valores de celda."""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from typing import Any

import pandas as pd

_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s+")
_DOT_THOUSANDS = re.compile(r"^-?\d{1,3}(\.\d{3})+$")


def is_empty(val: Any) -> bool:
    """True si la celda está vacía (None, NaN, NaT o texto en blanco)."""
    if val is None:
        return True
    if isinstance(val, str):
        return val.strip() == ""
    return bool(pd.api.types.is_scalar(val) and pd.isna(val))


def safe_str(val: Any) -> str:
    """Convierte un valor en cadena para mostrar/guardar."""
    if is_empty(val):
        return ""
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    return str(val)


def norm_text(s: Any, *, lower: bool = True) -> str:
    """
    Normaliza un texto: NFKC, espacios múltiples → espacio simple, strip, lower.

    Args:
        s: Valor a normalizar (convertido en str si es numérico).
        lower: Pasar a minúsculas.

    Returns:
        Cadena normalizada.
    """
    text = unicodedata.normalize("NFKC", safe_str(s))
    text = _WHITESPACE.sub(" ", text).strip()
    if lower:
        text = text.lower()
    return text


def norm_key(key: Any) -> str:
    """Normaliza un nombre de columna: minúsculas, sin bordes, espacios → "_"."""
    return _WHITESPACE.sub("_", str(key).strip().lower())


def digits_only(val: Any) -> str:
    """
    Deja solo los dígitos de un valor.

    Los float enteros (30123456789.0, como los devuelve una planilla) se tratan
    como enteros para no arrastrar el decimal.
    """
    if isinstance(val, bool) or is_empty(val):
        return ""
    return _NON_DIGITS.sub("", safe_str(val))


def to_number(val: Any) -> float | None:
    """
    Convierte un importe a float.

    Acepta números y textos con formato local ("150.000,50", "150.000",
    "$ 1500"). Un punto seguido de grupos de tres dígitos y sin coma es
    separador de miles.
    Devuelve None si no hay un número reconocible.
    """
    if isinstance(val, bool) or is_empty(val):
        return None
    if isinstance(val, (int, float)):
        return float(val)
    text = re.sub(r"[^\d,.\-]", "", str(val))
    if not text:
        return None
    if "," in text:
        # Formato es-AR: punto de miles, coma decimal.
        text = text.replace(".", "").replace(",", ".")
    elif _DOT_THOUSANDS.match(text):
        text = text.replace(".", "")
    try:
        return float(text)
    except ValueError:
        return None


def format_date(val: Any) -> str:
    """Formatea fechas como dd/mm/yyyy; otros valores se devuelven como texto."""
    if isinstance(val, (datetime, date)):
        return val.strftime("%d/%m/%Y")
    return safe_str(val)
