# File: zodgen/collection.py
"""
zodgen - Collection Orchestrator
================================
Drives composition and rendering over every model of a data model.

A model that fails as a whole is recorded as a summary warning (with the
error count incremented) and the run continues.  Once every model is
composed, the cross-model dependency graph is built and checked for
missing schemas and cycles; those findings are warnings too.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from zodgen.composer import Clock, ModelComposer, ModelSchemaComposition
from zodgen.models import (
    EnumDescriptor,
    FieldDescriptor,
    FieldKind,
    GeneratorConfig,
    ModelDescriptor,
)
from zodgen.templates import OutputModule, SchemaRenderer
from zodgen.validators import DependencyReport, build_dependency_graph

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.collection")

# Below this share of enhanced fields the report suggests adding directives.
_ENHANCED_RATIO_HINT: float = 0.1


@dataclass(slots=True)
class GenerationSummary:
    total_models: int = 0
    processed_models: int = 0
    total_fields: int = 0
    processed_fields: int = 0
    enhanced_fields: int = 0
    error_count: int = 0
    warnings: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_models": self.total_models,
            "processed_models": self.processed_models,
            "total_fields": self.total_fields,
            "processed_fields": self.processed_fields,
            "enhanced_fields": self.enhanced_fields,
            "error_count": self.error_count,
            "warnings": list(self.warnings),
        }


@dataclass(slots=True)
class GeneratedSchema:
    composition: ModelSchemaComposition
    module: OutputModule
    processing_errors: List[str] = field(default_factory=list)


@dataclass(slots=True)
class SchemaCollection:
    """Every generated model and enum module of one run."""

    schemas: Dict[str, GeneratedSchema] = field(default_factory=dict)
    enum_modules: Dict[str, OutputModule] = field(default_factory=dict)
    index_module: Optional[OutputModule] = None
    global_imports: Set[str] = field(default_factory=set)
    dependencies: Dict[str, List[str]] = field(default_factory=dict)
    dependency_report: DependencyReport = field(default_factory=DependencyReport)
    skipped_models: List[str] = field(default_factory=list)
    summary: GenerationSummary = field(default_factory=GenerationSummary)

    @property
    def compositions(self) -> Dict[str, ModelSchemaComposition]:
        return {name: s.composition for name, s in self.schemas.items()}

    @property
    def model_names(self) -> List[str]:
        return sorted(self.schemas)

    def modules(self) -> List[OutputModule]:
        """Model modules sorted by model name, then the index."""
        modules: List[OutputModule] = [self.schemas[n].module for n in self.model_names]
        if self.index_module is not None:
            modules.append(self.index_module)
        return modules


@dataclass(slots=True)
class ModelValidationReport:
    model_name: str
    is_valid: bool
    field_count: int
    processed_fields: int
    enhanced_fields: int
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass(slots=True)
class SchemaValidationReport:
    is_valid: bool
    summary: GenerationSummary
    model_reports: List[ModelValidationReport] = field(default_factory=list)
    global_issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def format_report(self) -> str:
        lines: List[str] = [
            f"Schema report: {'valid' if self.is_valid else 'issues found'} "
            f"({self.summary.processed_models}/{self.summary.total_models} models, "
            f"{self.summary.processed_fields}/{self.summary.total_fields} fields)",
        ]
        for model_report in self.model_reports:
            marker: str = "✅" if model_report.is_valid else "❌"
            lines.append(
                f"  {marker} {model_report.model_name}: "
                f"{model_report.processed_fields}/{model_report.field_count} fields, "
                f"{model_report.enhanced_fields} enhanced"
            )
            lines.extend(f"       issue: {issue}" for issue in model_report.issues)
            lines.extend(f"       warning: {warning}" for warning in model_report.warnings)
        lines.extend(f"  ⚠️  {issue}" for issue in self.global_issues)
        lines.extend(f"  💡 {hint}" for hint in self.recommendations)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class SchemaCollectionGenerator:
    """
    Compose and render a whole set of models under one configuration.

    The composer and renderer share one naming resolver, so file names in
    imports and in the index always agree with the modules written.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        *,
        provider: Optional[str] = None,
        enum_names: Iterable[str] = (),
        clock: Optional[Clock] = None,
        composer: Optional[ModelComposer] = None,
        renderer: Optional[SchemaRenderer] = None,
    ) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._composer: ModelComposer = composer or ModelComposer(
            self._config,
            provider=provider,
            enum_names=enum_names,
            clock=clock,
        )
        self._renderer: SchemaRenderer = renderer or SchemaRenderer(
            self._config, self._composer.naming
        )

    @property
    def composer(self) -> ModelComposer:
        return self._composer

    @property
    def renderer(self) -> SchemaRenderer:
        return self._renderer

    def generate(
        self,
        models: Sequence[ModelDescriptor],
        enums: Sequence[EnumDescriptor] = (),
    ) -> SchemaCollection:
        """Compose, render and cross-check ``models``; never raises per model."""
        collection: SchemaCollection = SchemaCollection()
        summary: GenerationSummary = collection.summary

        for model in models:
            if not self._config.is_model_enabled(model.name):
                logger.info("Skipping disabled model %s", model.name)
                collection.skipped_models.append(model.name)
                continue
            summary.total_models += 1
            try:
                logger.debug("Generating schema for model: %s", model.name)
                composition: ModelSchemaComposition = self._composer.compose(model)
                module: OutputModule = self._renderer.render(composition)
            except Exception as exc:
                logger.error("Failed to process model %s: %s", model.name, exc, exc_info=True)
                summary.error_count += 1
                summary.warnings.append(f"Model {model.name}: {exc}")
                continue

            collection.schemas[model.name] = GeneratedSchema(
                composition=composition,
                module=module,
                processing_errors=[
                    f.documentation or f"Field {f.field_name} failed"
                    for f in composition.fields
                    if f.is_fallback
                ],
            )
            summary.processed_models += 1
            summary.total_fields += composition.statistics.total_fields
            summary.processed_fields += composition.statistics.processed_fields
            summary.enhanced_fields += composition.statistics.enhanced_fields
            collection.global_imports.update(composition.imports)
            if module.dependencies:
                collection.dependencies[model.name] = list(module.dependencies)

        for enum in enums:
            collection.enum_modules[enum.name] = self._renderer.render_enum(enum)

        collection.index_module = self._renderer.render_index(collection.schemas)

        collection.dependency_report = build_dependency_graph(collection.compositions)
        summary.warnings.extend(collection.dependency_report.errors)

        logger.info(
            "Generated %d/%d model schemas (%d fields, %d enhanced, %d error(s))",
            summary.processed_models,
            summary.total_models,
            summary.processed_fields,
            summary.enhanced_fields,
            summary.error_count,
        )
        return collection

    # -- Reporting ---------------------------------------------------------------

    def generate_validation_report(self, collection: SchemaCollection) -> SchemaValidationReport:
        summary: GenerationSummary = collection.summary
        report: SchemaValidationReport = SchemaValidationReport(is_valid=True, summary=summary)

        for model_name in collection.model_names:
            generated: GeneratedSchema = collection.schemas[model_name]
            stats = generated.composition.statistics
            model_report: ModelValidationReport = ModelValidationReport(
                model_name=model_name,
                is_valid=True,
                field_count=stats.total_fields,
                processed_fields=stats.processed_fields,
                enhanced_fields=stats.enhanced_fields,
            )
            if generated.processing_errors:
                model_report.is_valid = False
                model_report.issues.extend(generated.processing_errors)
            if model_report.processed_fields < model_report.field_count:
                model_report.warnings.append(
                    f"Not all fields processed: "
                    f"{model_report.processed_fields}/{model_report.field_count}"
                )
            undocumented: int = sum(
                1 for f in generated.composition.fields if not f.documentation
            )
            if undocumented:
                model_report.warnings.append(f"{undocumented} fields lack documentation")
            report.model_reports.append(model_report)
            if not model_report.is_valid:
                report.is_valid = False

        dependency_report: DependencyReport = collection.dependency_report
        if not dependency_report.is_valid:
            report.is_valid = False
            report.global_issues.extend(dependency_report.errors)

        if summary.enhanced_fields < summary.total_fields * _ENHANCED_RATIO_HINT:
            report.recommendations.append(
                "Consider adding @zod validations to more fields for enhanced type safety"
            )
        if summary.error_count > 0:
            report.recommendations.append(
                "Review and fix field processing errors for complete schema generation"
            )
        return report

    @staticmethod
    def type_mapping_statistics(fields: Iterable[FieldDescriptor]) -> Dict[str, Any]:
        """Counts of ``fields`` by kind, list-ness, optionality and declared type."""
        field_list: List[FieldDescriptor] = list(fields)
        type_counts: Counter[str] = Counter(f.type for f in field_list)
        return {
            "total_fields": len(field_list),
            "scalar_fields": sum(1 for f in field_list if f.kind == FieldKind.SCALAR),
            "enum_fields": sum(1 for f in field_list if f.is_enum),
            "relation_fields": sum(1 for f in field_list if f.is_relation),
            "list_fields": sum(1 for f in field_list if f.is_list),
            "optional_fields": sum(1 for f in field_list if not f.is_required),
            "type_counts": dict(sorted(type_counts.items())),
        }


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GeneratedSchema",
    "GenerationSummary",
    "ModelValidationReport",
    "SchemaCollection",
    "SchemaCollectionGenerator",
    "SchemaValidationReport",
]

logger.debug("zodgen.collection loaded.")
