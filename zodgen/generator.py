# File: zodgen/generator.py
"""
zodgen - Master Generation Pipeline (Orchestrator)
==================================================

Connects every phase together:

    Data Model Input → Validation → Composition & Rendering → Dependency Check → Export

Workflow::

    1. Load the data model from a JSON/YAML file (or accept a ``DataModel``).
    2. Parse it into descriptors (models.py).
    3. Run the validation pipeline (validators.py).
    4. Compose and render every model, enum and the index (collection.py).
    5. Report missing cross-model schemas and circular references.
    6. Hand the modules to ``SchemaExporter`` (exporters.py).
    7. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Validation errors are collected and surfaced, not swallowed.
    - Field and model failures degrade locally and surface as warnings.
    - Dependency issues (missing schemas, cycles) are warnings.
    - Export errors are recorded in the report.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml
from pydantic import ValidationError

from zodgen.collection import SchemaCollection, SchemaCollectionGenerator
from zodgen.exporters import ExportManifest, ExportResult, SchemaExporter, collection_files
from zodgen.models import DataModel, GeneratorConfig
from zodgen.utils import Timer, count_lines
from zodgen.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(slots=True)
class GenerationReport:
    """
    Report produced by ``ZodSchemaGenerator.generate()``.

    Contains timing information, file counts, validation results, and
    any errors/warnings encountered.
    """

    success: bool = False
    output_directory: str = ""
    dry_run: bool = False

    # Metrics
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_models_processed: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    generation_warnings: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    skipped_models: List[str] = field(default_factory=list)

    manifest: Optional[ExportManifest] = None
    collection: Optional[SchemaCollection] = None
    files: Dict[str, str] = field(default_factory=dict)

    def summary(self) -> str:
        """Human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append("═" * 60)
        lines.append("  zodgen - Generation Report")
        lines.append("═" * 60)
        lines.append(f"  Status:           {status}{' (dry run)' if self.dry_run else ''}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Models processed: {self.total_models_processed}")
        lines.append(f"  Files generated:  {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append("─" * 60)

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        sections = (
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Generation Warnings", self.generation_warnings, "⚠"),
            ("Export Errors", self.export_errors, "✗"),
            ("Skipped Models", self.skipped_models, "⊘"),
        )
        for title, items, icon in sections:
            if not items:
                continue
            lines.append("─" * 60)
            lines.append(f"  {title} ({len(items)}):")
            lines.extend(f"    {icon} {item}" for item in items)

        lines.append("═" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Data model loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at top level, got {type(data).__name__}.")
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at top level, got {type(data).__name__}.")
    return data


def load_data_model_file(path: Path) -> Dict[str, Any]:
    """
    Load a data model file (JSON or YAML), dispatching on the extension.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the content cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data model file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Data model path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s'; trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def parse_raw_data_model(raw: Dict[str, Any]) -> DataModel:
    """
    Parse a raw mapping into a validated ``DataModel``.

    Accepted shapes:
        - ``{"models": [...], "enums": [...], "provider": "..."}``
        - ``{"datamodel": {"models": [...], "enums": [...]}, "datasource": {...}}``

    Raises:
        ValueError: If no models key is present or validation fails.
    """
    payload: Any = raw.get("datamodel", raw)
    if not isinstance(payload, dict) or (
        "models" not in payload and "enums" not in payload
    ):
        raise ValueError(
            "Cannot find a data model in input. "
            "Expected top-level 'models'/'enums' or a 'datamodel' mapping."
        )

    data: Dict[str, Any] = {
        "models": payload.get("models") or [],
        "enums": payload.get("enums") or [],
    }
    provider: Any = payload.get("provider", raw.get("provider"))
    datasource: Any = raw.get("datasource")
    if provider is None and isinstance(datasource, dict):
        provider = datasource.get("provider")
    if provider is not None:
        data["provider"] = provider

    try:
        return DataModel.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Data model validation failed: {exc}") from exc


# ---------------------------------------------------------------------------
# ZodSchemaGenerator: master orchestrator
# ---------------------------------------------------------------------------


class ZodSchemaGenerator:
    """
    Master pipeline orchestrator.

    Usage::

        generator = ZodSchemaGenerator()
        report = generator.generate_from_file(
            Path("schema.yaml"), Path("./generated"), config
        )
        print(report.summary())

    Reusable: create once, call ``generate()`` many times.
    """

    def __init__(
        self,
        *,
        strict_validation: bool = True,
        fail_on_warnings: bool = False,
        clean_output: bool = False,
        dry_run: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            strict_validation: Abort before composing on any validation error.
            fail_on_warnings: Treat validation warnings as errors.
            clean_output: Wipe the output directory before writing.
            dry_run: Compose and render, but write nothing.
            clock: Timestamp source for generated headers.
        """
        self._strict_validation: bool = strict_validation
        self._fail_on_warnings: bool = fail_on_warnings
        self._clean_output: bool = clean_output
        self._dry_run: bool = dry_run
        self._clock: Optional[Callable[[], datetime]] = clock

        logger.debug(
            "ZodSchemaGenerator initialised: strict=%s, fail_on_warnings=%s, clean=%s, dry=%s.",
            strict_validation,
            fail_on_warnings,
            clean_output,
            dry_run,
        )

    # -- Public API --------------------------------------------------------------

    def generate_from_file(
        self,
        data_model_path: Path,
        output_dir: Path,
        config: Optional[GeneratorConfig] = None,
    ) -> GenerationReport:
        """Full pipeline: load file → validate → compose → export."""
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)
        report.output_directory = str(Path(output_dir).resolve())

        load_error: Optional[str] = None
        data_model: Optional[DataModel] = None
        with Timer("load_data_model") as t_load:
            try:
                data_model = parse_raw_data_model(load_data_model_file(data_model_path))
            except (FileNotFoundError, ValueError) as exc:
                load_error = str(exc)

        if data_model is None:
            logger.error("Failed to load data model: %s", load_error)
            report.generation_errors.append(load_error or "Failed to load data model")
            report.step_metrics.append(GenerationStepMetric(
                step_name="Load Data Model",
                success=False,
                elapsed_seconds=t_load.elapsed,
                detail=load_error or "",
            ))
            return self._finalise_report(report, t_load.elapsed)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Load Data Model",
            success=True,
            elapsed_seconds=t_load.elapsed,
            detail=f"{len(data_model.models)} models from {Path(data_model_path).name}",
        ))
        logger.info(
            "Loaded data model %s: %d models, %d enums.",
            data_model_path,
            len(data_model.models),
            len(data_model.enums),
        )
        return self._run_pipeline(
            data_model, config or GeneratorConfig(), Path(output_dir), report
        )

    def generate(
        self,
        data_model: DataModel,
        config: GeneratorConfig,
        output_dir: Path,
    ) -> GenerationReport:
        """Full pipeline from a pre-parsed data model."""
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)
        report.output_directory = str(Path(output_dir).resolve())
        return self._run_pipeline(data_model, config, Path(output_dir), report)

    def build_collection(
        self, data_model: DataModel, config: GeneratorConfig
    ) -> SchemaCollection:
        """Compose and render without validation or export."""
        generator: SchemaCollectionGenerator = SchemaCollectionGenerator(
            config,
            provider=data_model.provider,
            enum_names=data_model.enum_names,
            clock=self._clock,
        )
        return generator.generate(data_model.models, data_model.enums)

    # -- Internal: master pipeline -----------------------------------------------

    def _run_pipeline(
        self,
        data_model: DataModel,
        config: GeneratorConfig,
        output_dir: Path,
        report: GenerationReport,
    ) -> GenerationReport:
        pipeline_start: float = time.perf_counter()

        validation_ok: bool = self._step_validate(data_model, config, report)
        if not validation_ok and self._strict_validation:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        collection: Optional[SchemaCollection] = self._step_generate(data_model, config, report)
        if collection is None:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        self._step_check_dependencies(collection, report)

        files: Dict[str, str] = collection_files(collection)
        report.files = files
        if self._dry_run:
            report.total_files = len(files)
            report.total_lines = sum(count_lines(c) for c in files.values())
            report.total_bytes = sum(len(c.encode("utf-8")) for c in files.values())
            logger.info("Dry run: %d files rendered, nothing written.", len(files))
        else:
            self._step_export(files, output_dir, report)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    def _step_validate(
        self,
        data_model: DataModel,
        config: GeneratorConfig,
        report: GenerationReport,
    ) -> bool:
        """Returns True if validation passed (warnings allowed unless fail_on_warnings)."""
        with Timer("validation") as t:
            result: ValidationResult = validate_full(data_model, config)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.has_errors:
            detail: str = f"{result.error_count} error(s)"
        elif result.has_warnings:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        report.step_metrics.append(GenerationStepMetric(
            step_name="Validate Data Model",
            success=result.is_valid,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

        if result.has_errors:
            logger.error("Validation failed with %d error(s).", result.error_count)
            for err in result.errors:
                logger.error("  ✗ %s", err)
            return False

        if result.has_warnings:
            logger.warning("Validation passed with %d warning(s).", result.warning_count)
            for warn in result.warnings:
                logger.warning("  ⚠ %s", warn)
            if self._fail_on_warnings:
                report.validation_errors.append(
                    f"{result.warning_count} warning(s) treated as errors (--fail-on-warnings)"
                )
                return False
        return True

    def _step_generate(
        self,
        data_model: DataModel,
        config: GeneratorConfig,
        report: GenerationReport,
    ) -> Optional[SchemaCollection]:
        collection: Optional[SchemaCollection] = None
        error_msg: str = ""
        with Timer("composition") as t:
            try:
                collection = self.build_collection(data_model, config)
            except Exception as exc:
                error_msg = f"Fatal generation error: {type(exc).__name__}: {exc}"
                logger.error(error_msg, exc_info=True)

        if collection is None:
            report.generation_errors.append(error_msg)
            report.step_metrics.append(GenerationStepMetric(
                step_name="Compose Schemas",
                success=False,
                elapsed_seconds=t.elapsed,
                detail=error_msg,
            ))
            return None

        summary = collection.summary
        report.collection = collection
        report.total_models_processed = summary.processed_models
        report.skipped_models.extend(collection.skipped_models)
        report.generation_warnings.extend(
            w for w in summary.warnings if w not in collection.dependency_report.errors
        )

        detail_str: str = (
            f"{summary.processed_models}/{summary.total_models} models, "
            f"{summary.processed_fields} fields, {summary.enhanced_fields} enhanced"
        )
        report.step_metrics.append(GenerationStepMetric(
            step_name="Compose Schemas",
            success=summary.error_count == 0,
            elapsed_seconds=t.elapsed,
            detail=detail_str,
        ))
        logger.info("Composition complete: %s in %.3fs.", detail_str, t.elapsed)
        return collection

    def _step_check_dependencies(
        self, collection: SchemaCollection, report: GenerationReport
    ) -> None:
        dependency_report = collection.dependency_report
        report.generation_warnings.extend(dependency_report.errors)
        report.step_metrics.append(GenerationStepMetric(
            step_name="Check Dependencies",
            success=True,
            elapsed_seconds=0.0,
            detail=(
                f"{len(dependency_report.graph)} models, "
                f"{len(dependency_report.missing)} missing, "
                f"{len(dependency_report.cycles)} cycle(s)"
            ),
        ))

    def _step_export(
        self,
        files: Dict[str, str],
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        with Timer("export") as t:
            exporter: SchemaExporter = SchemaExporter(
                output_dir,
                clean_before_export=self._clean_output,
                atomic_writes=True,
                generate_manifest=True,
            )
            export_result: ExportResult = exporter.export(files)

        report.total_files = export_result.manifest.total_files
        report.total_bytes = export_result.manifest.total_bytes
        report.total_lines = export_result.manifest.total_lines
        report.export_errors.extend(export_result.errors)
        report.manifest = export_result.manifest

        report.step_metrics.append(GenerationStepMetric(
            step_name="Export to Filesystem",
            success=export_result.success,
            elapsed_seconds=t.elapsed,
            detail=(
                f"{export_result.manifest.total_files} files, "
                f"{export_result.manifest.total_bytes:,} bytes"
            ),
        ))

    def _finalise_report(
        self, report: GenerationReport, total_elapsed: float
    ) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.validation_errors or report.generation_errors or report.export_errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GenerationReport",
    "GenerationStepMetric",
    "ZodSchemaGenerator",
    "load_data_model_file",
    "parse_raw_data_model",
]

logger.debug("zodgen.generator loaded.")
