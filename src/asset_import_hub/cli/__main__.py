"""
Command-line entry point for Asset Import Hub.

Usage:
    python -m asset_import_hub.cli <command> [options]

Available commands:
    discover  - List the importable fields of a form definition
    map       - Suggest column mappings for a spreadsheet
    confirm   - Record a confirmed column mapping in a history file

Examples:
    # Fields of an asset form (workspace gadget format)
    python -m asset_import_hub.cli discover --form asset_form.json --gadget-format

    # Suggest mappings for the first sheet of a workbook
    python -m asset_import_hub.cli map --form asset_form.json --file assets.xlsx \\
        --document-type asset --history mapping_history.yml

    # Remember that "Equipment No" means asset_tag for assets
    python -m asset_import_hub.cli confirm --history mapping_history.yml \\
        --document-type asset --header "Equipment No" --target asset_tag
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

from asset_import_hub.config import get_settings, load_alias_table
from asset_import_hub.domain.column_mapping import (
    ColumnMapper,
    ColumnMapping,
    YamlHistoryStore,
    summarize_mappings,
)
from asset_import_hub.domain.exceptions import AssetImportError, MetadataError
from asset_import_hub.domain.field_discovery import (
    FieldDefinition,
    discover_fields,
    form_definition_from_gadgets,
    load_static_fields,
)
from asset_import_hub.io.readers import ExcelReader, ExcelReadError
from asset_import_hub.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _load_form(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise MetadataError(f"Form definition file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise MetadataError(f"Invalid JSON in form definition {path}: {e}") from e


def _fields_from_args(args: argparse.Namespace) -> List[FieldDefinition]:
    form = _load_form(args.form)
    if getattr(args, "gadget_format", False):
        form = form_definition_from_gadgets(form, args.document_type)
    static = load_static_fields(args.static) if getattr(args, "static", None) else None
    return discover_fields(args.document_type, form, static)


def print_mappings(mappings: Sequence[ColumnMapping]) -> None:
    width = max([len(m.source_column) for m in mappings] + [len("Column")])
    print(f"{'Column'.ljust(width)}  {'Target':<32} {'Conf':>4}  Technique")
    print("-" * (width + 52))
    for m in mappings:
        print(
            f"{m.source_column.ljust(width)}  {m.target_path:<32} "
            f"{m.confidence:>4}  {m.technique.value}"
        )

    summary = summarize_mappings(mappings)
    print()
    print(f"Mapped {summary.mapped}/{summary.total} columns")
    print(
        "Confidence: "
        + ", ".join(f"{band}={count}" for band, count in summary.by_band.items())
    )
    if summary.unmapped_columns:
        print("Unmapped: " + ", ".join(summary.unmapped_columns))


def cmd_discover(args: argparse.Namespace) -> int:
    fields = _fields_from_args(args)
    print(
        json.dumps(
            [f.model_dump(mode="json") for f in fields], indent=2, ensure_ascii=False
        )
    )
    return 0


def cmd_map(args: argparse.Namespace) -> int:
    settings = get_settings()
    fields = _fields_from_args(args)

    reader = ExcelReader(
        header_scan_rows=settings.header_scan_rows,
        sample_rows=settings.pattern_sample_limit,
    )
    sheet: Any = int(args.sheet) if args.sheet.isdigit() else args.sheet
    sheet_data = reader.read_sheet(args.file, sheet=sheet)

    alias_table = None
    if args.aliases:
        alias_table = load_alias_table(
            args.aliases,
            document_type=args.document_type or None,
            default_confidence=settings.alias_confidence,
        )

    history_path = args.history or settings.history_store_path
    history = YamlHistoryStore(history_path) if history_path else None

    mapper = ColumnMapper(alias_table=alias_table, settings=settings)
    mappings = mapper.map_columns(
        sheet_data.headers,
        sheet_data.sample_rows,
        fields,
        history=history,
        document_type=args.document_type,
    )
    print_mappings(mappings)
    return 0


def cmd_confirm(args: argparse.Namespace) -> int:
    store = YamlHistoryStore(args.history)
    store.record_confirmed_mapping(args.document_type, args.header, args.target)
    print(
        f"Recorded '{args.header}' -> {args.target} "
        f"for {args.document_type} in {Path(args.history)}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asset_import_hub.cli",
        description="Asset Import Hub CLI - field discovery and column mapping",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log DEBUG events to stderr"
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
        help="Command to execute",
    )

    discover_parser = subparsers.add_parser(
        "discover",
        help="List importable fields of a form definition",
        description="Discover fields from a form definition and print them as JSON",
    )
    discover_parser.add_argument("--form", required=True, help="Form definition JSON file")
    discover_parser.add_argument("--static", help="YAML list of curated static fields")
    discover_parser.add_argument("--document-type", default="", help="Document type")
    discover_parser.add_argument(
        "--gadget-format",
        action="store_true",
        help="Form file is a workspace document with a document-form-gadget",
    )
    discover_parser.set_defaults(handler=cmd_discover)

    map_parser = subparsers.add_parser(
        "map",
        help="Suggest column mappings for a spreadsheet",
        description="Map spreadsheet headers to discovered fields",
    )
    map_parser.add_argument("--form", required=True, help="Form definition JSON file")
    map_parser.add_argument("--file", required=True, help="Spreadsheet (.xlsx) to map")
    map_parser.add_argument("--sheet", default="0", help="Sheet name or index (default: 0)")
    map_parser.add_argument("--document-type", default="", help="Document type")
    map_parser.add_argument("--aliases", help="Alias table YAML (default: shipped table)")
    map_parser.add_argument("--history", help="History YAML of confirmed mappings")
    map_parser.add_argument(
        "--gadget-format",
        action="store_true",
        help="Form file is a workspace document with a document-form-gadget",
    )
    map_parser.set_defaults(handler=cmd_map)

    confirm_parser = subparsers.add_parser(
        "confirm",
        help="Record a confirmed column mapping",
        description="Store a user-confirmed header to field mapping",
    )
    confirm_parser.add_argument("--history", required=True, help="History YAML file")
    confirm_parser.add_argument("--document-type", required=True, help="Document type")
    confirm_parser.add_argument("--header", required=True, help="Spreadsheet header")
    confirm_parser.add_argument("--target", required=True, help="Target field path")
    confirm_parser.set_defaults(handler=cmd_confirm)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point with subcommand routing.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for processing errors; argparse exits
        with 2 on usage errors)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        configure_logging("DEBUG")

    try:
        return args.handler(args)
    except (AssetImportError, ExcelReadError, FileNotFoundError) as e:
        logger.error("cli.command_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
