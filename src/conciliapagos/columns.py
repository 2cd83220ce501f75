"""Normalización de columnas: registros de origen → CanonicalRecord."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from conciliapagos.config import ConfigError
from conciliapagos.normalize import digits_only, is_empty, norm_key

# campo canónico -> clave exportada por to_dict()
CANONICAL_KEYS = {
    "provider_name": "providerName",
    "amount": "amount",
    "cuit": "cuit",
    "cbu": "cbu",
    "date": "date",
    "email": "email",
    "filter_detail": "filterDetail",
    "payment_order": "paymentOrder",
    "invoice_number": "invoiceNumber",
    "payment_detail": "paymentDetail",
    "email_message": "emailMessage",
    "check_date": "checkDate",
}

_GENERIC_ALIASES = {
    "razsocial": "provider_name",
    "beneficiario": "provider_name",
    "haber": "amount",
    "detalle": "filter_detail",
    "coment": "payment_detail",
    "cuit": "cuit",
    "cuil": "cuit",
    "cbu": "cbu",
    "fecha": "date",
    "fecval": "date",
    "email": "email",
    "email_destinatario": "email",
    "mail": "email",
    "fcheqpro": "check_date",
}

_PAYMENT_ORDER_ALIASES = {
    **_GENERIC_ALIASES,
    "orden": "payment_order",
    "op": "payment_order",
    "descrip": "invoice_number",
    "descrip2": "payment_detail",
    "coment": "email_message",
}


@dataclass(frozen=True)
class AliasTable:
    """Tabla de alias: clave normalizada de columna → campo canónico."""

    name: str
    aliases: Mapping[str, str]

    def lookup(self, key: str) -> str | None:
        return self.aliases.get(key)

    def extended(self, extra: Mapping[str, str]) -> AliasTable:
        """Devuelve una tabla nueva con alias adicionales (las claves se normalizan)."""
        unknown = sorted(set(extra.values()) - set(CANONICAL_KEYS))
        if unknown:
            raise ConfigError(f"Campos canónicos desconocidos en alias: {unknown}")
        merged = dict(self.aliases)
        merged.update({norm_key(k): v for k, v in extra.items()})
        return replace(self, aliases=merged)


def _with_canonical_names(aliases: Mapping[str, str]) -> dict[str, str]:
    # Un registro ya normalizado vuelve a mapearse sobre sí mismo.
    out = {norm_key(key): name for name, key in CANONICAL_KEYS.items()}
    out.update(aliases)
    return out


ALIAS_PROFILES = {
    "generic": AliasTable("generic", _with_canonical_names(_GENERIC_ALIASES)),
    "payment_order": AliasTable("payment_order", _with_canonical_names(_PAYMENT_ORDER_ALIASES)),
}


def get_alias_table(profile: str, extra: Mapping[str, str] | None = None) -> AliasTable:
    """Tabla de alias de un perfil con nombre, extendida con alias de configuración."""
    try:
        table = ALIAS_PROFILES[profile]
    except KeyError:
        raise ConfigError(f"Perfil de alias desconocido: {profile!r}. Válidos: {sorted(ALIAS_PROFILES)}") from None
    return table.extended(extra) if extra else table


@dataclass(frozen=True)
class CanonicalRecord:
    """
    Registro normalizado.

    Los campos con nombre son las columnas semánticas reconocidas (None si la
    columna no se encontró bajo ningún alias). `extra` guarda las columnas no
    reconocidas con su clave normalizada y `source` el registro original tal
    cual, para búsquedas de respaldo.
    """

    provider_name: Any = None
    amount: Any = None
    cuit: str | None = None
    cbu: Any = None
    date: Any = None
    email: Any = None
    filter_detail: Any = None
    payment_order: Any = None
    invoice_number: Any = None
    payment_detail: Any = None
    email_message: Any = None
    check_date: Any = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    source: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Busca una clave en campos canónicos, luego en `extra`, luego en `source`."""
        if key in CANONICAL_KEYS:
            val = getattr(self, key)
            if not is_empty(val):
                return val
        for mapping in (self.extra, self.source):
            val = mapping.get(key)
            if not is_empty(val):
                return val
        return default

    def first(self, *keys: str, default: Any = None) -> Any:
        """Primer valor no vacío entre varias claves."""
        for key in keys:
            val = self.get(key)
            if val is not None:
                return val
        return default

    def canonical_fields(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in CANONICAL_KEYS}

    def to_dict(self) -> dict[str, Any]:
        """Claves originales + claves normalizadas + claves canónicas."""
        out: dict[str, Any] = dict(self.source)
        out.update(self.extra)
        for name, key in CANONICAL_KEYS.items():
            val = getattr(self, name)
            if val is not None:
                out[key] = val
        return out


_RECORD_FIELDS = {f.name for f in fields(CanonicalRecord)}


def normalize_record(record: Mapping[str, Any], aliases: AliasTable) -> CanonicalRecord:
    """
    Normaliza un registro de origen.

    Cada clave se pasa a minúsculas, sin bordes y con espacios como "_", y se
    busca en la tabla de alias. Las claves sin alias quedan en `extra` con su
    nombre normalizado. Luego se aplican los respaldos: nombre ← "nombre",
    importe ← "monto" y después "importe". Nunca falla por campos ausentes.
    """
    values: dict[str, Any] = {}
    extra: dict[str, Any] = {}

    for key, val in record.items():
        nkey = norm_key(key)
        canonical = aliases.lookup(nkey)
        if canonical is None:
            extra[nkey] = val
            continue
        if canonical == "cuit":
            val = digits_only(val) or None
        if canonical not in values or is_empty(values[canonical]):
            values[canonical] = val

    if is_empty(values.get("provider_name")) and not is_empty(extra.get("nombre")):
        values["provider_name"] = extra["nombre"]
    if is_empty(values.get("amount")):
        for fallback in ("monto", "importe"):
            if not is_empty(extra.get(fallback)):
                values["amount"] = extra[fallback]
                break

    values = {k: v for k, v in values.items() if k in _RECORD_FIELDS}
    return CanonicalRecord(**values, extra=extra, source=dict(record))


def normalize_records(
    records: Iterable[Mapping[str, Any]],
    aliases: AliasTable,
) -> list[CanonicalRecord]:
    """Normaliza una secuencia de registros (misma cardinalidad)."""
    return [normalize_record(r, aliases) for r in records]
