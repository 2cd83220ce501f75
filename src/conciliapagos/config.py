"""Configuración, variantes de reglas y carga del archivo config JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

VALID_VARIANTS = frozenset({"strict", "lenient"})
VALID_DETAIL_MODES = frozenset({"exact", "contains"})
VALID_ALIAS_PROFILES = frozenset({"generic", "payment_order"})

# CUITs de "anticipos choferes": nunca se transfieren desde este circuito.
SPECIAL_CUITS = frozenset(
    {
        "20271370440",
        "20280864588",
        "20304161923",
        "20264164371",
        "20313523862",
        "20180310046",
    }
)

# Cuentas de retenciones/devoluciones (AFIP).
BLACKLISTED_CUITS = frozenset({"33693450239"})


class ConciliaPagosError(Exception):
    """Excepción base de conciliapagos."""


class ConfigError(ConciliaPagosError, ValueError):
    """Error de validación de la configuración."""


class ConfigFileError(ConciliaPagosError):
    """Error al cargar el archivo de configuración (ausente, JSON inválido)."""


@dataclass
class Config:
    """Configuración principal del cruce y de los archivos de salida."""

    variant: str = "strict"
    detail_match_mode: str = "exact"  # exact, contains
    detail_marker: str = "D.Directo DD"
    lenient_detail_terms: tuple[str, ...] = ("directo", "dd")
    payment_order_width: int = 10
    alias_profile: str = "generic"  # generic, payment_order
    extra_aliases: dict[str, str] = field(default_factory=dict)

    special_cuits: frozenset[str] = SPECIAL_CUITS
    blacklisted_cuits: frozenset[str] = BLACKLISTED_CUITS
    excluded_vendor_terms: tuple[str, ...] = ("carganet",)
    retention_terms: tuple[str, ...] = ("retenci",)

    email_whitelist: tuple[str, ...] = ()  # vacía: no se exportan emails
    transfer_reason: str = "FAC"
    echeq_chunk_size: int = 25

    header_scan_rows: int = 15
    provider_sheet: str = "AGENDA"

    @classmethod
    def for_variant(cls, variant: str) -> Config:
        """
        Devuelve la configuración por defecto de una variante con nombre.

        - strict: detalle exacto "D.Directo DD", orden de pago a 10 caracteres.
        - lenient: detalle por subcadena ("directo"/"dd"), orden de pago a 12
          caracteres, archivo de la app con columnas de orden de pago.
        """
        if variant not in VALID_VARIANTS:
            raise ConfigError(f"variant inválida: {variant!r}. Válidas: {sorted(VALID_VARIANTS)}")
        if variant == "lenient":
            return cls(
                variant="lenient",
                detail_match_mode="contains",
                payment_order_width=12,
                alias_profile="payment_order",
            )
        return cls()

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Config:
        base = cls.for_variant(d.get("variant", "strict"))

        detail_match_mode = d.get("detail_match_mode", base.detail_match_mode)
        alias_profile = d.get("alias_profile", base.alias_profile)
        payment_order_width = int(d.get("payment_order_width", base.payment_order_width))
        echeq_chunk_size = int(d.get("echeq_chunk_size", base.echeq_chunk_size))
        header_scan_rows = int(d.get("header_scan_rows", base.header_scan_rows))
        extra_aliases = d.get("extra_aliases", {})

        if detail_match_mode not in VALID_DETAIL_MODES:
            raise ConfigError(
                f"detail_match_mode inválido: {detail_match_mode!r}. Válidos: {sorted(VALID_DETAIL_MODES)}"
            )
        if alias_profile not in VALID_ALIAS_PROFILES:
            raise ConfigError(
                f"alias_profile inválido: {alias_profile!r}. Válidos: {sorted(VALID_ALIAS_PROFILES)}"
            )
        if payment_order_width < 1:
            raise ConfigError(f"payment_order_width debe ser >= 1 (got {payment_order_width})")
        if echeq_chunk_size < 1:
            raise ConfigError(f"echeq_chunk_size debe ser >= 1 (got {echeq_chunk_size})")
        if header_scan_rows < 1:
            raise ConfigError(f"header_scan_rows debe ser >= 1 (got {header_scan_rows})")
        if not isinstance(extra_aliases, dict):
            raise ConfigError("extra_aliases debe ser un objeto {columna: campo}")

        return replace(
            base,
            detail_match_mode=detail_match_mode,
            detail_marker=d.get("detail_marker", base.detail_marker),
            lenient_detail_terms=tuple(d.get("lenient_detail_terms", base.lenient_detail_terms)),
            payment_order_width=payment_order_width,
            alias_profile=alias_profile,
            extra_aliases={str(k): str(v) for k, v in extra_aliases.items()},
            special_cuits=frozenset(str(c) for c in d.get("special_cuits", base.special_cuits)),
            blacklisted_cuits=frozenset(str(c) for c in d.get("blacklisted_cuits", base.blacklisted_cuits)),
            excluded_vendor_terms=tuple(d.get("excluded_vendor_terms", base.excluded_vendor_terms)),
            retention_terms=tuple(d.get("retention_terms", base.retention_terms)),
            email_whitelist=tuple(d.get("email_whitelist", base.email_whitelist)),
            transfer_reason=d.get("transfer_reason", base.transfer_reason),
            echeq_chunk_size=echeq_chunk_size,
            header_scan_rows=header_scan_rows,
            provider_sheet=d.get("provider_sheet", base.provider_sheet),
        )

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """
        Carga la configuración desde un archivo JSON.

        Raises:
            ConfigFileError: Si el archivo no existe o el JSON es inválido.
            ConfigError: Si la configuración es inválida.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigFileError(f"Archivo de configuración inexistente: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                d = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(f"JSON inválido en {path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"No se puede leer {path}: {e}") from e

        if not isinstance(d, dict):
            raise ConfigFileError(f"Archivo de configuración inválido: {path} debe contener un objeto JSON")

        return cls.from_dict(d)
