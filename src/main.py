# src/main.py - v2
"""CLI entry point: compare, batch, models commands.

Usage:
    packqc compare <pdf> --sheet <xlsx> [options]
    packqc batch <directory> --sheet <xlsx> [options]
    packqc models
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from packqc.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        from packqc.config.settings import load_settings

        settings = load_settings()
    except Exception as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="packqc",
        description=f"packqc v{__version__} - packaging PDF vs SAP export reconciliation",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- compare ---
    p_compare = subparsers.add_parser(
        "compare", help="Check a single PDF against the reference sheet",
    )
    p_compare.add_argument("file", type=Path, help="Path to packaging PDF")
    _add_common_options(p_compare)
    p_compare.add_argument(
        "-c", "--column", action="append", dest="columns", default=None,
        help="Only check this reference column (repeatable)",
    )
    p_compare.set_defaults(func=_cmd_compare)

    # --- batch ---
    p_batch = subparsers.add_parser(
        "batch", help="Check every PDF in a directory",
    )
    p_batch.add_argument("directory", type=Path, help="Directory of PDFs")
    _add_common_options(p_batch)
    p_batch.add_argument(
        "-r", "--recursive", action="store_true",
        help="Scan subdirectories",
    )
    p_batch.set_defaults(func=_cmd_batch)

    # --- models ---
    p_models = subparsers.add_parser(
        "models", help="List extraction models available to the provider",
    )
    p_models.set_defaults(func=_cmd_models)

    return parser


def _add_common_options(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-s", "--sheet", type=Path, required=True,
        help="Reference spreadsheet (SAP export, .xlsx)",
    )
    p.add_argument(
        "-m", "--model", default=None,
        help="Extraction model ID (default: DEFAULT_MODEL_ID setting)",
    )
    p.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write the JSON result to this file",
    )


async def _cmd_compare(args: argparse.Namespace, settings: Any) -> int:
    """Execute single-document comparison."""
    from packqc.api.facade import auto_populate, compare_document
    from packqc.api.models import DocumentInput
    from packqc.extraction.service_factory import create_extraction_service

    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1

    sheet = _load_sheet(args.sheet, settings)
    model_id = args.model or settings.default_model_id

    populated = auto_populate(file_path.name, sheet.rows, model_id, settings)
    if populated.parsed_filename is None:
        logger.error("Cannot parse filename %s (expected SKU_VERSION_TYPE_*.pdf)", file_path.name)
        return 1
    if populated.failure is not None:
        logger.error("No reference row for %s: %s", file_path.name, populated.failure.message)
        return 1

    selected = populated.selected_inputs
    if args.columns:
        selected = [s for s in selected if s.column in args.columns]

    service = create_extraction_service(settings=settings)
    try:
        result = await compare_document(
            DocumentInput.from_path(file_path), selected, model_id, service, settings,
        )
    finally:
        await service.aclose()

    for verdict in result.results:
        print(f"  [{verdict.status:9s}] {verdict.field}: pdf={verdict.pdf_value!r} excel={verdict.excel_value!r}")
    print(
        f"\n{result.summary.correct} correct, {result.summary.incorrect} incorrect, "
        f"{result.summary.not_found} not found"
    )
    _write_json(args.output, result.model_dump(mode="json"))
    return 0 if result.summary.incorrect == 0 else 2


async def _cmd_batch(args: argparse.Namespace, settings: Any) -> int:
    """Execute batch directory processing."""
    from packqc.api.models import DocumentInput
    from packqc.batch.orchestrator import BatchOrchestrator
    from packqc.batch.scanner import scan_pdfs
    from packqc.extraction.service_factory import create_extraction_service

    directory: Path = args.directory
    if not directory.is_dir():
        logger.error("Not a directory: %s", directory)
        return 1

    sheet = _load_sheet(args.sheet, settings)
    entries = scan_pdfs(directory, recursive=args.recursive)
    if not entries:
        logger.error("No PDF files found in %s", directory)
        return 1
    documents = [DocumentInput.from_path(Path(e.file_path)) for e in entries]

    service = create_extraction_service(settings=settings)
    orchestrator = BatchOrchestrator(
        service, settings=settings,
        on_progress=lambda i, n, name: print(f"[{i + 1}/{n}] {name}", file=sys.stderr),
    )
    try:
        report = await orchestrator.run(documents, sheet.rows, args.model)
    finally:
        await service.aclose()

    s = report.summary
    print("\nBatch complete:")
    print(f"  Documents:    {s.total_documents}")
    print(f"  Succeeded:    {s.successful_documents}")
    print(f"  Failed:       {s.failed_documents} {s.failures_by_type or ''}")
    print(f"  Fields:       {s.correct} correct, {s.incorrect} incorrect, {s.not_found} not found")
    print(f"  Duration:     {report.duration_seconds:.1f}s")
    _write_json(args.output, report.to_json_dict())
    return 0


async def _cmd_models(args: argparse.Namespace, settings: Any) -> int:
    """List provider models, custom models first."""
    from packqc.extraction.service_factory import create_extraction_service

    service = create_extraction_service(settings=settings)
    try:
        models = await service.list_models()
    finally:
        await service.aclose()

    for model in sorted(models, key=lambda m: (m.is_prebuilt, m.model_id)):
        kind = "prebuilt" if model.is_prebuilt else "custom"
        print(f"  {model.model_id:40s} {kind:8s} {model.description}")
    return 0


def _load_sheet(path: Path, settings: Any) -> Any:
    from packqc.reference.loader import load_spreadsheet
    from packqc.reference.normalizer import normalize_grid

    grid = load_spreadsheet(path)
    return normalize_grid(
        grid,
        header_row_index=settings.sheet_header_row_index,
        column_overrides=settings.sheet_column_overrides,
    )


def _write_json(path: Path | None, payload: dict[str, Any]) -> None:
    if path is None:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote %s", path)


def _setup_logging(settings: Any, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from packqc.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
