"""Interfaz de línea de comandos de conciliapagos."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from conciliapagos import __version__
from conciliapagos.columns import get_alias_table
from conciliapagos.config import ConciliaPagosError, Config
from conciliapagos.export import build_echeq_rows, build_echeq_tables, build_transfer_table
from conciliapagos.io_excel import list_sheets, load_canonical, write_tables
from conciliapagos.matching import MatchConfidence, Matcher, select_results
from conciliapagos.report import build_report_table, print_report_console, results_frame


def _load_config(config_path: str | None, variant: str | None) -> Config:
    if config_path:
        config = Config.load(config_path)
        if variant and variant != config.variant:
            print(f"Aviso: --variant {variant} ignorado, se usa la variante del archivo ({config.variant}).")
        return config
    return Config.for_variant(variant or "strict")


def cmd_list_sheets(filepath: str) -> int:
    """Lista las hojas de un libro."""
    sheets = list_sheets(filepath)
    print(f"Hojas en {filepath}:")
    for s in sheets:
        print(f"  - {s}")
    return 0


def cmd_match(
    providers_path: str,
    ledger_path: str,
    output_dir: str | None,
    *,
    config_path: str | None = None,
    variant: str | None = None,
    include_warnings: bool = False,
    dry_run: bool = False,
    report: bool = False,
    today: date | None = None,
) -> int:
    """Cruza la app con la agenda y genera el archivo de transferencias."""
    config = _load_config(config_path, variant)
    aliases = get_alias_table(config.alias_profile, config.extra_aliases)

    providers = load_canonical(
        providers_path,
        aliases,
        label="archivo de proveedores",
        preferred_sheet=config.provider_sheet,
        header_scan_rows=config.header_scan_rows,
    )
    ledger = load_canonical(
        ledger_path,
        aliases,
        label="archivo de la app",
        preferred_sheet=config.provider_sheet,
        header_scan_rows=config.header_scan_rows,
    )

    results, summary = Matcher(config).run(ledger, providers, today=today)
    if results:
        print(results_frame(results).to_string(index=False))
    print_report_console(summary, results)

    confidences = [MatchConfidence.EXACT]
    if include_warnings:
        confidences.append(MatchConfidence.WARNING)
    selected = select_results(results, confidences)

    if dry_run:
        print(f"Modo dry-run: {len(selected)} transferencias seleccionadas, no se escribe el archivo.")
        return 0
    if report:
        (report_path,) = write_tables(output_dir or ".", [build_report_table(summary, config, today=today)])
        print(f"Resumen del cruce: {report_path}")
    if not selected:
        print("No hay transferencias para exportar.")
        return 0

    table = build_transfer_table(selected, config=config, today=today)
    (path,) = write_tables(output_dir or ".", [table])
    print(f"Archivo de transferencias: {path}")
    return 0


def cmd_echeq(
    ledger_path: str,
    output_dir: str | None,
    *,
    providers_path: str | None = None,
    config_path: str | None = None,
    chunk_size: int | None = None,
    delay: float = 0.0,
) -> int:
    """Genera las planillas de emisión de E-Cheqs."""
    config = _load_config(config_path, None)
    aliases = get_alias_table(config.alias_profile, config.extra_aliases)

    ledger = load_canonical(
        ledger_path,
        aliases,
        label="archivo de la app",
        preferred_sheet=config.provider_sheet,
        header_scan_rows=config.header_scan_rows,
    )
    providers = []
    if providers_path:
        providers = load_canonical(
            providers_path,
            aliases,
            label="archivo de proveedores",
            preferred_sheet=config.provider_sheet,
            header_scan_rows=config.header_scan_rows,
        )

    rows = build_echeq_rows(ledger, providers)
    print(rows.to_string(index=False))
    tables = build_echeq_tables(rows, chunk_size=chunk_size or config.echeq_chunk_size)
    for path in write_tables(output_dir or ".", tables, delay=delay):
        print(f"Archivo de E-Cheqs: {path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="conciliapagos",
        description="Cruce de pagos pendientes con la agenda de proveedores (transferencias y E-Cheqs)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Más detalle en el log (-vv: debug)")

    subparsers = parser.add_subparsers(dest="command", help="Comandos")

    p_list = subparsers.add_parser("list-sheets", help="Listar las hojas de un libro")
    p_list.add_argument("file", help="Archivo de planilla")

    p_match = subparsers.add_parser("match", help="Cruzar y generar el archivo de transferencias")
    p_match.add_argument("--providers", "-p", required=True, help="Agenda de proveedores (hoja AGENDA)")
    p_match.add_argument("--ledger", "-l", required=True, help="Exportación de la app")
    p_match.add_argument("--config", "-c", help="Archivo config JSON")
    p_match.add_argument("--variant", choices=["strict", "lenient"], help="Variante de reglas")
    p_match.add_argument("--output", "-o", help="Carpeta de salida")
    p_match.add_argument("--include-warnings", action="store_true", help="Exportar también los que no tienen CBU")
    p_match.add_argument("--dry-run", action="store_true", help="No escribir el archivo de salida")
    p_match.add_argument(
        "--report", action="store_true", help="Escribir también el resumen del cruce (hoja REPORT)"
    )

    p_echeq = subparsers.add_parser("echeq", help="Generar planillas de E-Cheqs")
    p_echeq.add_argument("--ledger", "-l", required=True, help="Exportación de la app")
    p_echeq.add_argument("--providers", "-p", help="Agenda de proveedores (para la razón social)")
    p_echeq.add_argument("--config", "-c", help="Archivo config JSON")
    p_echeq.add_argument("--output", "-o", help="Carpeta de salida")
    p_echeq.add_argument("--chunk-size", type=int, help="Registros por archivo")
    p_echeq.add_argument("--delay", type=float, default=0.0, help="Pausa en segundos entre archivos")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "list-sheets":
            return cmd_list_sheets(args.file)

        if args.command == "match":
            return cmd_match(
                args.providers,
                args.ledger,
                args.output,
                config_path=args.config,
                variant=args.variant,
                include_warnings=args.include_warnings,
                dry_run=args.dry_run,
                report=args.report,
            )

        if args.command == "echeq":
            if args.chunk_size is not None and args.chunk_size < 1:
                parser.error("--chunk-size debe ser >= 1")
            return cmd_echeq(
                args.ledger,
                args.output,
                providers_path=args.providers,
                config_path=args.config,
                chunk_size=args.chunk_size,
                delay=args.delay,
            )
    except ConciliaPagosError as e:
        print(f"Error: {e}")
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
