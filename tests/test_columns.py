"""Tests de normalización de columnas."""

import pytest

from conciliapagos.columns import AliasTable, CanonicalRecord, get_alias_table, normalize_record, normalize_records
from conciliapagos.config import ConfigError


@pytest.fixture
def generic() -> AliasTable:
    return get_alias_table("generic")


@pytest.fixture
def payment_order() -> AliasTable:
    return get_alias_table("payment_order")


def test_razsocial_maps_to_provider_name(generic: AliasTable) -> None:
    r = normalize_record({"RazSocial": "Tech SRL"}, generic)
    assert r.provider_name == "Tech SRL"


def test_cuit_is_digits_only(generic: AliasTable) -> None:
    r = normalize_record({"CUIT": "30-12345678-9"}, generic)
    assert r.cuit == "30123456789"
    r = normalize_record({"cuil": 20111111112}, generic)
    assert r.cuit == "20111111112"


def test_source_keys_are_preserved(generic: AliasTable) -> None:
    src = {"RazSocial": "Tech SRL", "Otra Col": "x"}
    r = normalize_record(src, generic)
    assert r.source == src
    assert r.extra == {"otra_col": "x"}
    assert r.get("otra_col") == "x"
    assert r.get("Otra Col") == "x"


def test_normalization_is_idempotent(generic: AliasTable) -> None:
    r = normalize_record(
        {"RazSocial": "Tech SRL", "CUIT": "30-12345678-9", "Haber": 150000, "Detalle": "D.Directo DD", "Otra": 1},
        generic,
    )
    again = normalize_record(r.to_dict(), generic)
    assert again.canonical_fields() == r.canonical_fields()
    assert r.to_dict()["providerName"] == "Tech SRL"
    assert r.to_dict()["filterDetail"] == "D.Directo DD"


def test_generic_aliases(generic: AliasTable) -> None:
    r = normalize_record(
        {
            "Beneficiario": "Juan",
            "Haber": 10,
            "Detalle": "D.Directo DD",
            "Coment": "Flete",
            "CBU": "0001",
            "FecVal": "01/10/2025",
            "Email destinatario": "a@b.com",
            "FCheqPro": 45658,
        },
        generic,
    )
    assert r.provider_name == "Juan"
    assert r.amount == 10
    assert r.filter_detail == "D.Directo DD"
    assert r.payment_detail == "Flete"
    assert r.cbu == "0001"
    assert r.date == "01/10/2025"
    assert r.email == "a@b.com"
    assert r.check_date == 45658
    assert r.email_message is None


def test_payment_order_aliases(payment_order: AliasTable) -> None:
    r = normalize_record(
        {"Orden": "0001-00012345", "Descrip": "FC A 0001-123", "Descrip2": "Pago flete", "Coment": "Gracias"},
        payment_order,
    )
    assert r.payment_order == "0001-00012345"
    assert r.invoice_number == "FC A 0001-123"
    assert r.payment_detail == "Pago flete"
    assert r.email_message == "Gracias"


def test_name_and_amount_fallbacks(generic: AliasTable) -> None:
    r = normalize_record({"Nombre": "Juan", "Monto": 3, "Importe": 5}, generic)
    assert r.provider_name == "Juan"
    assert r.amount == 3
    r = normalize_record({"Importe": 5}, generic)
    assert r.amount == 5
    r = normalize_record({"RazSocial": "Tech", "Nombre": "Otro", "Haber": 1, "Monto": 2}, generic)
    assert r.provider_name == "Tech"
    assert r.amount == 1


def test_missing_fields_are_not_errors(generic: AliasTable) -> None:
    r = normalize_record({"foo": 1}, generic)
    assert all(v is None for v in r.canonical_fields().values())


def test_normalize_records_keeps_cardinality(generic: AliasTable) -> None:
    out = normalize_records([{"a": 1}, {"CUIT": "1"}, {}], generic)
    assert len(out) == 3
    assert all(isinstance(r, CanonicalRecord) for r in out)


def test_extra_aliases() -> None:
    table = get_alias_table("generic", {"Razon Social": "provider_name"})
    r = normalize_record({"Razon Social": "Tech SRL"}, table)
    assert r.provider_name == "Tech SRL"


def test_extra_aliases_unknown_field() -> None:
    with pytest.raises(ConfigError, match="desconocidos"):
        get_alias_table("generic", {"x": "no_existe"})


def test_unknown_profile() -> None:
    with pytest.raises(ConfigError, match="Perfil de alias"):
        get_alias_table("otro")


def test_first_skips_empty_values(generic: AliasTable) -> None:
    r = normalize_record({"nombre": "  ", "razon_social": "ACME"}, generic)
    assert r.first("provider_name", "nombre", "razon_social") == "ACME"
    assert r.first("proveedor", default="x") == "x"
