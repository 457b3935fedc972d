# File: zodgen/cli.py
"""
zodgen - Command-Line Interface
===============================

Built on the standard-library ``argparse`` module.

Usage examples::

    # Basic generation (configuration discovered in the working directory)
    python -m zodgen --schema schema.yaml --output ./generated

    # Explicit configuration file, lean output, verbose logging
    python -m zodgen -s schema.json -o ./out -c zod-generator.config.json --lean -v

    # Validate the data model and configuration only
    python -m zodgen -s schema.yaml --validate-only

    # Render everything, write nothing, print the per-model report
    python -m zodgen -s schema.yaml -o ./out --dry-run --report

Exit codes:
    0 - success
    1 - validation error
    2 - generation error
    3 - export error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from zodgen.config import ConfigParseError, ParseResult, create_config_error_message

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``zodgen`` logger.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))

    root_logger: logging.Logger = logging.getLogger("zodgen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    from zodgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="zodgen",
        description=(
            "zodgen - Zod schema generator.\n\n"
            "Turns a data model description (JSON/YAML) into TypeScript "
            "modules of Zod validation schemas, one per model."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s schema.yaml -o ./generated\n"
            "  %(prog)s -s schema.json -o ./out --lean --zod-target v4\n"
            "  %(prog)s -s schema.yaml --validate-only\n"
        ),
    )

    parser.add_argument("--version", action="version", version=f"zodgen v{__version__}")

    # --- Input / output ---
    parser.add_argument(
        "-s", "--schema",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the data model file (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help=(
            "Output directory for generated schemas. Falls back to the "
            "configuration's 'output'. Required unless --validate-only is set."
        ),
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Configuration file. Discovered next to the data model when omitted.",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the data model and configuration.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write files to disk.",
    )
    mode_group.add_argument(
        "--report",
        action="store_true",
        default=False,
        help="Print the per-model schema report after generation.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--lean",
        action="store_true",
        default=None,
        help="Emit lean modules (no headers, docs or statistics).",
    )
    config_group.add_argument(
        "--zod-target",
        type=str,
        default=None,
        choices=["auto", "v3", "v4"],
        help="Zod import target.",
    )
    config_group.add_argument(
        "--optional-field-behavior",
        type=str,
        default=None,
        choices=["optional", "nullable", "nullish"],
        help="Modifier appended to optional fields.",
    )
    config_group.add_argument(
        "--decimal-mode",
        type=str,
        default=None,
        choices=["string", "number", "decimal"],
        help="How Decimal fields are represented.",
    )
    config_group.add_argument(
        "--date-time-strategy",
        type=str,
        default=None,
        choices=["date", "coerce", "isoString"],
        help="How DateTime fields are represented.",
    )
    config_group.add_argument(
        "--json-schema-compatible",
        action="store_true",
        default=None,
        help="Only emit JSON-Schema-representable types.",
    )
    config_group.add_argument(
        "--include-relations",
        action="store_true",
        default=None,
        help="Include relation fields in pure models.",
    )
    config_group.add_argument(
        "--provider",
        type=str,
        default=None,
        metavar="NAME",
        help="Override the database provider (e.g. postgresql, mysql).",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--clean",
        action="store_true",
        default=False,
        help="Clean output directory before generation.",
    )
    behaviour_group.add_argument(
        "--no-strict",
        action="store_true",
        default=False,
        help="Continue even if validation has errors.",
    )
    behaviour_group.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat validation warnings as errors.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """camelCase configuration keys for every override flag given."""
    overrides: Dict[str, Any] = {}

    if args.lean:
        overrides["pureModelsLean"] = True
    if args.zod_target is not None:
        overrides["zodImportTarget"] = args.zod_target
    if args.optional_field_behavior is not None:
        overrides["optionalFieldBehavior"] = args.optional_field_behavior
    if args.decimal_mode is not None:
        overrides["decimalMode"] = args.decimal_mode
    if args.date_time_strategy is not None:
        overrides["dateTimeStrategy"] = args.date_time_strategy
    if args.json_schema_compatible:
        overrides["jsonSchemaCompatible"] = True
    if args.include_relations:
        overrides["pureModelsIncludeRelations"] = True
    if args.provider is not None:
        overrides["provider"] = args.provider
    return overrides


def _load_config(args: argparse.Namespace, schema_path: Path) -> ParseResult:
    from zodgen.config import parse_configuration

    return parse_configuration(
        config_path=args.config,
        base_dir=schema_path.parent if args.config is None else None,
        overrides=_build_config_overrides(args),
    )


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(schema_path: Path, parsed: ParseResult) -> int:
    from zodgen.generator import load_data_model_file, parse_raw_data_model
    from zodgen.utils import Timer
    from zodgen.validators import validate_full

    logger.info("Running validation-only mode for: %s", schema_path)

    try:
        data_model = parse_raw_data_model(load_data_model_file(schema_path))
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load data model: %s", exc)
        return EXIT_INPUT_ERROR

    with Timer("validation") as t:
        result = validate_full(data_model, parsed.config)

    print(f"\n{'=' * 50}")
    print("  Data Model Validation Report")
    print(f"{'=' * 50}")
    print(f"  File:     {schema_path.name}")
    print(f"  Config:   {parsed.config_path or '(defaults)'}")
    print(f"  Models:   {len(data_model.models)}")
    print(f"  Enums:    {len(data_model.enums)}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({len(result.errors)}):")
        for err in result.errors:
            print(f"    ✗ {err}")

    if result.warnings:
        print(f"\n  Warnings ({len(result.warnings)}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")

    if result.is_valid and not result.warnings:
        print("\n  ✅ All validations passed!")

    print(f"{'=' * 50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _run_generation(
    schema_path: Path,
    output_dir: Path,
    parsed: ParseResult,
    args: argparse.Namespace,
) -> int:
    from zodgen.collection import SchemaCollectionGenerator
    from zodgen.generator import GenerationReport, ZodSchemaGenerator

    generator: ZodSchemaGenerator = ZodSchemaGenerator(
        strict_validation=not args.no_strict,
        fail_on_warnings=args.fail_on_warnings,
        clean_output=args.clean,
        dry_run=args.dry_run,
    )

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    report: GenerationReport = generator.generate_from_file(
        schema_path, output_dir, parsed.config
    )
    print(report.summary())

    if args.report and report.collection is not None:
        schema_report = SchemaCollectionGenerator(parsed.config).generate_validation_report(
            report.collection
        )
        print(schema_report.format_report())

    if not report.success:
        if report.validation_errors:
            return EXIT_VALIDATION_ERROR
        if report.generation_errors:
            return EXIT_GENERATION_ERROR
        if report.export_errors:
            return EXIT_EXPORT_ERROR
        return EXIT_GENERATION_ERROR
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
    _setup_logging(verbosity)

    schema_path: Path = Path(args.schema).resolve()
    if not schema_path.exists():
        logger.error("Data model file not found: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)
    if not schema_path.is_file():
        logger.error("Data model path is not a file: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)

    try:
        parsed: ParseResult = _load_config(args, schema_path)
    except ConfigParseError as exc:
        print(create_config_error_message(exc), file=sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    if args.validate_only:
        sys.exit(_run_validate_only(schema_path, parsed))

    output: Optional[str] = args.output or parsed.config.output
    if output is None:
        logger.error(
            "Output directory is required for generation. "
            "Use -o/--output, set 'output' in the configuration, or use --validate-only."
        )
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    output_dir: Path = Path(output).resolve()
    logger.info("Data model: %s", schema_path)
    logger.info("Config:     %s", parsed.config_path or "(defaults)")
    logger.info("Output:     %s", output_dir)

    exit_code: int = _run_generation(schema_path, output_dir, parsed, args)
    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)
    sys.exit(exit_code)


def main() -> None:
    """Console-script entry point."""
    cli_main()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("zodgen.cli loaded.")
