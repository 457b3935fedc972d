# File: zodgen/composer.py
"""
zodgen - Model Composer
=======================
Turns one ``ModelDescriptor`` into a ``ModelSchemaComposition``: the
ordered field schemas, aggregated imports and exports, model-level
validation, statistics and a generation stamp.

A failing field never aborts its model; it is replaced by a permissive
fallback field that carries the error message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from zodgen import __version__
from zodgen.annotations import CustomImport, ModelExtraction
from zodgen.documentation import render_model_documentation
from zodgen.expressions import Modifier, SchemaExpr
from zodgen.models import (
    FieldDescriptor,
    GeneratorConfig,
    ModelDescriptor,
    TypeMappingConfig,
)
from zodgen.naming import NamingResolver
from zodgen.type_mapper import (
    COMPLEX_SCALARS,
    ZOD_IMPORT,
    FieldMappingResult,
    TypeMapper,
)
from zodgen.utils import stable_hash

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.composer")

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Composition records
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ComposedFieldSchema:
    """One field of a composed model, ready for rendering."""

    field_name: str
    declared_type: str
    expression: SchemaExpr
    is_relation: bool = False
    is_list: bool = False
    is_optional: bool = False
    has_default_value: bool = False
    is_auto_generated: bool = False
    has_custom_validations: bool = False
    optionality_reason: Optional[str] = None
    documentation: Optional[str] = None
    notes: List[str] = field(default_factory=list)
    imports: Set[str] = field(default_factory=set)
    database_constraints: List[str] = field(default_factory=list)
    custom_imports: List[CustomImport] = field(default_factory=list)
    is_fallback: bool = False

    @property
    def zod_schema(self) -> str:
        return self.expression.render()


@dataclass(slots=True)
class ModelStatistics:
    total_fields: int = 0
    processed_fields: int = 0
    validated_fields: int = 0
    enhanced_fields: int = 0
    relation_fields: int = 0
    complex_type_fields: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "total_fields": self.total_fields,
            "processed_fields": self.processed_fields,
            "validated_fields": self.validated_fields,
            "enhanced_fields": self.enhanced_fields,
            "relation_fields": self.relation_fields,
            "complex_type_fields": self.complex_type_fields,
        }


@dataclass(frozen=True, slots=True)
class GenerationMetadata:
    timestamp: str
    generator_version: str
    config_hash: str


@dataclass(slots=True)
class ModelSchemaComposition:
    """Per-model aggregate produced by ``ModelComposer.compose``."""

    model_name: str
    schema_name: str
    type_name: str
    metadata: GenerationMetadata
    legacy_alias: Optional[str] = None
    fields: List[ComposedFieldSchema] = field(default_factory=list)
    imports: Set[str] = field(default_factory=lambda: {ZOD_IMPORT})
    exports: List[str] = field(default_factory=list)
    documentation: Optional[str] = None
    model_level_validation: Tuple[Modifier, ...] = ()
    custom_imports: List[CustomImport] = field(default_factory=list)
    statistics: ModelStatistics = field(default_factory=ModelStatistics)
    enum_symbols: Set[str] = field(default_factory=set)
    model_symbols: Dict[str, str] = field(default_factory=dict)

    def add_export(self, symbol: str) -> None:
        if symbol not in self.exports:
            self.exports.append(symbol)

    @property
    def field_names(self) -> List[str]:
        return [f.field_name for f in self.fields]

    @property
    def related_symbols(self) -> List[str]:
        """Referenced model schema symbols other than this model's own."""
        return sorted(s for s in self.model_symbols if s != self.schema_name)


def config_fingerprint(config: TypeMappingConfig) -> str:
    """Deterministic digest of the active type-mapping configuration."""
    payload: Dict[str, Any] = config.model_dump(mode="json")
    return stable_hash(payload)


def merge_custom_imports(groups: Iterable[Iterable[CustomImport]]) -> List[CustomImport]:
    """De-duplicate by statement, sorted by statement text."""
    merged: Dict[str, CustomImport] = {}
    for group in groups:
        for custom_import in group:
            merged.setdefault(custom_import.statement, custom_import)
    return [merged[key] for key in sorted(merged)]


# ---------------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------------


class ModelComposer:
    """
    Compose models under one generator configuration.

    The type mapper (and through it the naming resolver and annotation
    extractor) is shared across every model of a run.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        *,
        type_mapper: Optional[TypeMapper] = None,
        naming: Optional[NamingResolver] = None,
        provider: Optional[str] = None,
        enum_names: Iterable[str] = (),
        clock: Optional[Clock] = None,
    ) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._naming: NamingResolver = naming or NamingResolver(self._config.naming)
        self._mapper: TypeMapper = type_mapper or TypeMapper(
            self._config.type_mapping_config(provider), naming=self._naming
        )
        self._enum_names: FrozenSet[str] = frozenset(enum_names)
        self._clock: Clock = clock or _utc_now
        self._fingerprint: str = config_fingerprint(self._mapper.config)

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def naming(self) -> NamingResolver:
        return self._naming

    @property
    def type_mapper(self) -> TypeMapper:
        return self._mapper

    @property
    def fingerprint(self) -> str:
        return self._fingerprint

    # -- Symbols ---------------------------------------------------------------

    def schema_name(self, model_name: str) -> str:
        return self._mapper.model_symbol(model_name)

    def type_name(self, model_name: str, schema_name: str) -> str:
        """Inferred-type alias name; falls back to the model name on an enum clash."""
        alias: str = self._naming.type_alias_name(model_name, schema_name)
        if alias in self._enum_names:
            logger.debug("Type alias %s collides with an enum; using %s", alias, model_name)
            return model_name
        return alias

    def legacy_alias(self, model_name: str, schema_name: str) -> Optional[str]:
        if self._config.pure_models:
            return None
        if not self._naming.legacy_aliases_enabled(self._config.legacy_model_alias):
            return None
        alias: str = NamingResolver.legacy_alias_name(model_name)
        return None if alias == schema_name else alias

    # -- Field selection -------------------------------------------------------

    def fields_to_process(self, model: ModelDescriptor) -> List[FieldDescriptor]:
        excluded: FrozenSet[str] = self._config.excluded_fields(model.name)
        selected: List[FieldDescriptor] = [f for f in model.fields if f.name not in excluded]
        if self._config.pure_models and not self._config.pure_models_include_relations:
            selected = [f for f in selected if not f.is_relation]
        return selected

    # -- Composition -----------------------------------------------------------

    def compose(self, model: ModelDescriptor) -> ModelSchemaComposition:
        """Compose ``model``; per-field failures become fallback fields."""
        schema_name: str = self.schema_name(model.name)
        model_extraction: ModelExtraction = self._extract_model(model)
        fields: List[FieldDescriptor] = self.fields_to_process(model)

        composition: ModelSchemaComposition = ModelSchemaComposition(
            model_name=model.name,
            schema_name=schema_name,
            type_name=self.type_name(model.name, schema_name),
            legacy_alias=self.legacy_alias(model.name, schema_name),
            metadata=GenerationMetadata(
                timestamp=self._clock().isoformat(),
                generator_version=__version__,
                config_hash=self._fingerprint,
            ),
            documentation=render_model_documentation(model),
            model_level_validation=model_extraction.validation,
        )
        composition.statistics.total_fields = len(fields)

        field_imports: List[List[CustomImport]] = [model_extraction.custom_imports]
        for field_desc in fields:
            try:
                composed = self._compose_field(field_desc, model, composition)
            except Exception as exc:
                logger.error(
                    "Failed to process field %s in model %s: %s",
                    field_desc.name,
                    model.name,
                    exc,
                    exc_info=True,
                )
                composition.fields.append(self._fallback_field(field_desc, exc))
                continue
            composition.fields.append(composed)
            field_imports.append(composed.custom_imports)

        composition.custom_imports = merge_custom_imports(field_imports)

        composition.add_export(composition.schema_name)
        composition.add_export(composition.type_name)
        if composition.legacy_alias:
            composition.add_export(composition.legacy_alias)

        logger.debug(
            "Composed %s: %d/%d fields",
            model.name,
            composition.statistics.processed_fields,
            composition.statistics.total_fields,
        )
        return composition

    def _extract_model(self, model: ModelDescriptor) -> ModelExtraction:
        """Model-level directives; an extractor failure means none."""
        try:
            return self._mapper.extractor.extract_model(model.documentation, model.name)
        except Exception as exc:
            logger.warning(
                "Failed to read model-level @zod annotations on %s: %s",
                model.name,
                exc,
                exc_info=True,
            )
            return ModelExtraction(errors=[f"Annotation extraction failed: {exc}"])

    def _compose_field(
        self,
        field_desc: FieldDescriptor,
        model: ModelDescriptor,
        composition: ModelSchemaComposition,
    ) -> ComposedFieldSchema:
        mapping: FieldMappingResult = self._mapper.map_field(field_desc, model)
        optionality = mapping.optionality

        composed: ComposedFieldSchema = ComposedFieldSchema(
            field_name=field_desc.name,
            declared_type=field_desc.type,
            expression=mapping.expression,
            is_relation=field_desc.is_relation,
            is_list=field_desc.is_list,
            is_optional=not field_desc.is_required,
            has_default_value=field_desc.has_default_value,
            is_auto_generated=optionality.is_auto_generated if optionality else False,
            has_custom_validations=mapping.requires_special_handling,
            optionality_reason=optionality.reason.value if optionality else None,
            documentation=mapping.documentation,
            notes=list(mapping.notes),
            imports=set(mapping.imports),
            database_constraints=list(mapping.database_constraints),
            custom_imports=list(mapping.custom_imports),
        )

        stats: ModelStatistics = composition.statistics
        stats.processed_fields += 1
        if mapping.notes:
            stats.validated_fields += 1
        if mapping.requires_special_handling:
            stats.enhanced_fields += 1
        if field_desc.is_relation:
            stats.relation_fields += 1
        if field_desc.scalar_kind in COMPLEX_SCALARS:
            stats.complex_type_fields += 1

        composition.imports.update(mapping.imports)
        composition.enum_symbols.update(mapping.enum_symbols)
        composition.model_symbols.update(mapping.model_symbols)
        return composed

    def _fallback_field(self, field_desc: FieldDescriptor, exc: Exception) -> ComposedFieldSchema:
        permissive: str = (
            "z.any()" if self._mapper.config.json_schema_compatible else "z.unknown()"
        )
        return ComposedFieldSchema(
            field_name=field_desc.name,
            declared_type=field_desc.type,
            expression=SchemaExpr(base=permissive),
            is_relation=field_desc.is_relation,
            is_list=field_desc.is_list,
            is_optional=not field_desc.is_required,
            has_default_value=field_desc.has_default_value,
            documentation=f"// Error processing field: {exc}",
            notes=[f"// Failed to process {field_desc.type} field"],
            imports={ZOD_IMPORT},
            is_fallback=True,
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ComposedFieldSchema",
    "GenerationMetadata",
    "ModelComposer",
    "ModelSchemaComposition",
    "ModelStatistics",
    "config_fingerprint",
    "merge_custom_imports",
]

logger.debug("zodgen.composer loaded.")
