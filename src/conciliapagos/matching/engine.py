"""Motor de cruce: filtros de negocio, join por CUIT y clasificación."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from datetime import date

from conciliapagos.columns import CanonicalRecord
from conciliapagos.config import Config
from conciliapagos.cuit import extract_cuit
from conciliapagos.matching.index import build_provider_index
from conciliapagos.matching.schema import MatchConfidence, MatchResult, MatchSummary
from conciliapagos.normalize import format_date, is_empty, norm_text, safe_str, to_number

logger = logging.getLogger(__name__)

NOT_FOUND_PROVIDER = "Proveedor Desconocido"
FOUND_PROVIDER_DEFAULT = "Proveedor Encontrado"
DEFAULT_DESCRIPTION = "Varios"
PAYMENT_ORDER_PREFIX = "Orden de pago: "
MISSING_CBU_MESSAGE = "Falta CBU en la agenda de proveedores"
NOT_FOUND_MESSAGE = "CUIT no encontrado en la agenda de proveedores"
MISSING_CUIT_MESSAGE = "Registro sin CUIT"

PROVIDER_NAME_KEYS = ("provider_name", "nombre", "razon_social", "proveedor")
PROVIDER_CBU_KEYS = ("cbu", "cuenta")
PROVIDER_EMAIL_KEYS = ("email", "email_destinatario")


class Matcher:
    """Cruza los registros de la app contra la agenda de proveedores."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()

    def passes_detail_filter(self, record: CanonicalRecord) -> bool:
        """Verifica la marca de débito directo en el detalle del registro."""
        detail = safe_str(record.first("filter_detail", "detalle"))
        if self.config.detail_match_mode == "contains":
            text = norm_text(detail)
            return any(term.lower() in text for term in self.config.lenient_detail_terms)
        return detail.strip() == self.config.detail_marker

    def truncate_payment_order(self, value: object) -> str | None:
        """Deja los últimos `payment_order_width` caracteres de la orden de pago."""
        text = safe_str(value).strip()
        if not text:
            return None
        width = self.config.payment_order_width
        return text[-width:] if len(text) > width else text

    def describe(self, record: CanonicalRecord, payment_order: str | None) -> str:
        """Descripción a mostrar: detalle de pago, factura, orden de pago o "Varios"."""
        for val in (record.payment_detail, record.invoice_number):
            if not is_empty(val):
                return safe_str(val)
        if payment_order:
            return f"{PAYMENT_ORDER_PREFIX}{payment_order}"
        return DEFAULT_DESCRIPTION

    def _is_excluded_vendor(self, provider_name: str) -> bool:
        name = provider_name.lower()
        return any(term.lower() in name for term in self.config.excluded_vendor_terms)

    def _is_retention(self, description: str) -> bool:
        text = description.lower()
        return any(term.lower() in text for term in self.config.retention_terms)

    def run(
        self,
        ledger: Sequence[CanonicalRecord],
        providers: Sequence[CanonicalRecord],
        *,
        today: date | None = None,
    ) -> tuple[list[MatchResult], MatchSummary]:
        """
        Ejecuta el cruce para todos los registros de la app, en orden.

        Args:
            ledger: Registros normalizados del archivo de la app.
            providers: Registros normalizados de la agenda de proveedores.
            today: Fecha usada cuando el registro no trae fecha (por defecto, hoy).

        Returns:
            (resultados, resumen). Los registros excluidos por reglas de negocio
            no aparecen en los resultados; solo se cuentan en el resumen.
        """
        fallback_date = format_date(today or date.today())
        index = build_provider_index(providers)
        counts: Counter[str] = Counter()
        results: list[MatchResult] = []

        for row_index, record in enumerate(ledger):
            if not self.passes_detail_filter(record):
                counts["ignored_by_filter"] += 1
                continue

            cuit = extract_cuit(record)
            if cuit and cuit in self.config.special_cuits:
                logger.debug("Fila %d excluida: CUIT especial %s", row_index, cuit)
                counts["ignored_by_special_cuit"] += 1
                continue
            if cuit and cuit in self.config.blacklisted_cuits:
                logger.debug("Fila %d excluida: CUIT bloqueado %s", row_index, cuit)
                counts["ignored_by_blacklist"] += 1
                continue

            payment_order = self.truncate_payment_order(record.payment_order)
            description = self.describe(record, payment_order)
            provider = index.get(cuit) if cuit else None

            if provider is not None:
                provider_name = safe_str(provider.first(*PROVIDER_NAME_KEYS, default=FOUND_PROVIDER_DEFAULT))
                if self._is_excluded_vendor(provider_name):
                    logger.debug("Fila %d excluida: proveedor %r", row_index, provider_name)
                    counts["ignored_by_provider_name"] += 1
                    continue
                cbu = safe_str(provider.first(*PROVIDER_CBU_KEYS, default="")).strip()
                email = safe_str(provider.first(*PROVIDER_EMAIL_KEYS, default="")).strip()
                confidence = MatchConfidence.EXACT if cbu else MatchConfidence.WARNING
                error = None if cbu else MISSING_CBU_MESSAGE
                result_id = f"match-{row_index}"
            else:
                provider_name = NOT_FOUND_PROVIDER
                cbu = ""
                email = ""
                confidence = MatchConfidence.NO_MATCH
                error = NOT_FOUND_MESSAGE if cuit else MISSING_CUIT_MESSAGE
                result_id = f"unmatched-{row_index}"

            if self._is_retention(description):
                logger.debug("Fila %d excluida: retención (%r)", row_index, description)
                counts["ignored_by_retention"] += 1
                continue

            amount = to_number(record.amount)
            result = MatchResult(
                id=result_id,
                row_index=row_index,
                cuit=cuit,
                provider_name=provider_name,
                cbu=cbu,
                amount=amount if amount is not None else 0.0,
                date=record.date if not is_empty(record.date) else fallback_date,
                description=description,
                match_confidence=confidence,
                error=error,
                email=email,
                email_message=safe_str(record.email_message),
                payment_order=payment_order,
                ledger_record=record,
                provider_record=provider,
            )
            results.append(result)
            counts["matched" if result.is_matched else "no_match"] += 1

        summary = MatchSummary(total_records=len(ledger), **counts)
        logger.info(
            "Cruce: %d registros, %d con proveedor, %d sin proveedor, %d excluidos",
            summary.total_records,
            summary.matched,
            summary.no_match,
            summary.total_ignored,
        )
        return results, summary


def find_matches(
    ledger: Sequence[CanonicalRecord],
    providers: Sequence[CanonicalRecord],
    config: Config | None = None,
    *,
    today: date | None = None,
) -> tuple[list[MatchResult], MatchSummary]:
    """Atajo funcional de `Matcher(config).run(...)`."""
    return Matcher(config).run(ledger, providers, today=today)


def select_results(
    results: Sequence[MatchResult],
    confidences: Sequence[MatchConfidence | str] = (MatchConfidence.EXACT,),
) -> list[MatchResult]:
    """Selecciona los resultados a exportar según su clasificación."""
    wanted = {MatchConfidence(c) for c in confidences}
    return [r for r in results if r.match_confidence in wanted]
