# File: zodgen/validators.py
"""
zodgen - Data Model, Configuration & Dependency Validators
==========================================================
Pydantic handles per-field structural correctness of the descriptors and
the configuration.  This module adds **cross-entity semantic validation**:

    - duplicate / malformed model, enum and field names
    - relation targets and ``relationFromFields`` that do not resolve
    - enum references that are not declared
    - configuration combinations that cannot produce sensible schemas
    - the cross-model dependency graph of composed schemas, with cycle
      detection

Every issue found is non-fatal at this layer; callers decide, from the
returned ``ValidationResult``, whether to stop.

Usage by downstream modules:
    from zodgen.validators import validate_full
    result = validate_full(data_model, config)
    if not result:
        raise SystemExit(1)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
)

from zodgen.composer import ModelSchemaComposition
from zodgen.models import (
    DataModel,
    FieldKind,
    GeneratorConfig,
    RelationField,
    ScalarField,
    SUPPORTED_PROVIDERS,
    UnsupportedField,
)
from zodgen.type_mapper import PRISMA_IMPORT, ZOD_IMPORT

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``ValidationIssue`` instances produced by the validators."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationIssue]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {
                "error": "❌",
                "warning": "⚠️",
                "info": "ℹ️",
            }.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for key, value in item.context.items():
                lines.append(f"       {key}: {value}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Names a generated module cannot bind without shadowing its own imports.
_RESERVED_SYMBOLS: Set[str] = {ZOD_IMPORT, PRISMA_IMPORT}

_DECIMAL_MODES = ("string", "number", "decimal")
_JSON_MODES = ("unknown", "record", "any")

# Digits a JavaScript number holds without rounding.
_SAFE_NUMBER_DIGITS: int = 15


# ---------------------------------------------------------------------------
# Data model validators
# ---------------------------------------------------------------------------


def validate_entity_names(data_model: DataModel) -> ValidationResult:
    """Duplicate and malformed model / enum names, and model-enum clashes."""
    result: ValidationResult = ValidationResult()
    seen_models: Set[str] = set()
    seen_enums: Set[str] = set()

    for model in data_model.models:
        ctx: Dict[str, Any] = {"model": model.name}
        if model.name in seen_models:
            result.add_error(
                "DUPLICATE_MODEL_NAME", f"Model '{model.name}' is defined more than once.", ctx
            )
        seen_models.add(model.name)
        if not _IDENTIFIER_RE.match(model.name):
            result.add_error(
                "INVALID_MODEL_NAME", f"Model name '{model.name}' is not a valid identifier.", ctx
            )
        elif model.name in _RESERVED_SYMBOLS:
            result.add_error(
                "MODEL_NAME_RESERVED",
                f"Model name '{model.name}' clashes with a generated import.",
                ctx,
            )

    for enum in data_model.enums:
        ctx = {"enum": enum.name}
        if enum.name in seen_enums:
            result.add_error(
                "DUPLICATE_ENUM_NAME", f"Enum '{enum.name}' is defined more than once.", ctx
            )
        seen_enums.add(enum.name)
        if not _IDENTIFIER_RE.match(enum.name):
            result.add_error(
                "INVALID_ENUM_NAME", f"Enum name '{enum.name}' is not a valid identifier.", ctx
            )
        if enum.name in seen_models:
            result.add_error(
                "MODEL_ENUM_NAME_CLASH",
                f"'{enum.name}' is used both as a model and as an enum name.",
                ctx,
            )
        if not enum.values:
            result.add_warning(
                "EMPTY_ENUM", f"Enum '{enum.name}' has no values; z.enum([]) never matches.", ctx
            )

    logger.debug(
        "validate_entity_names: %d models, %d enums, %d issue(s).",
        len(data_model.models),
        len(data_model.enums),
        len(result),
    )
    return result


def validate_field_names(data_model: DataModel) -> ValidationResult:
    """Duplicate and malformed field names within each model."""
    result: ValidationResult = ValidationResult()
    for model in data_model.models:
        seen: Set[str] = set()
        for field_desc in model.fields:
            ctx: Dict[str, Any] = {"model": model.name, "field": field_desc.name}
            if field_desc.name in seen:
                result.add_error(
                    "DUPLICATE_FIELD_NAME",
                    f"Field '{model.name}.{field_desc.name}' is defined more than once.",
                    ctx,
                )
            seen.add(field_desc.name)
            if not _IDENTIFIER_RE.match(field_desc.name):
                result.add_error(
                    "INVALID_FIELD_NAME",
                    f"Field name '{model.name}.{field_desc.name}' is not a valid identifier.",
                    ctx,
                )
    return result


def validate_relations(data_model: DataModel) -> ValidationResult:
    """Every relation must target an existing model through existing fields."""
    result: ValidationResult = ValidationResult()
    model_names: Set[str] = set(data_model.model_names)

    for model in data_model.models:
        for field_desc in model.fields:
            variant = field_desc.variant
            if not isinstance(variant, RelationField):
                continue
            ctx: Dict[str, Any] = {
                "model": model.name,
                "field": field_desc.name,
                "target": variant.target_model,
            }
            if variant.target_model not in model_names:
                result.add_error(
                    "UNKNOWN_RELATION_TARGET",
                    f"Relation '{model.name}.{field_desc.name}' targets unknown model "
                    f"'{variant.target_model}'.",
                    ctx,
                )
            if not variant.relation_name:
                result.add_warning(
                    "MISSING_RELATION_NAME",
                    f"Relation '{model.name}.{field_desc.name}' has no relation name; "
                    f"it will be generated as a permissive schema.",
                    ctx,
                )
            for fk_name in variant.from_fields:
                if model.get_field(fk_name) is None:
                    result.add_error(
                        "MISSING_RELATION_FIELD",
                        f"Relation '{model.name}.{field_desc.name}' references missing "
                        f"field '{fk_name}'.",
                        {**ctx, "from_field": fk_name},
                    )
    return result


def validate_field_types(
    data_model: DataModel, config: Optional[GeneratorConfig] = None
) -> ValidationResult:
    """Enum references, custom scalars without a mapping, unsupported kinds."""
    result: ValidationResult = ValidationResult()
    enum_names: Set[str] = set(data_model.enum_names)
    custom_mappings: Mapping[str, str] = config.custom_type_mappings if config else {}

    for model in data_model.models:
        for field_desc in model.fields:
            ctx: Dict[str, Any] = {"model": model.name, "field": field_desc.name}
            variant = field_desc.variant
            if field_desc.kind == FieldKind.ENUM and field_desc.type not in enum_names:
                result.add_error(
                    "UNKNOWN_ENUM_REFERENCE",
                    f"Field '{model.name}.{field_desc.name}' references undeclared enum "
                    f"'{field_desc.type}'.",
                    ctx,
                )
            elif (
                isinstance(variant, ScalarField)
                and variant.scalar is None
                and variant.type_name not in custom_mappings
            ):
                result.add_warning(
                    "UNMAPPED_CUSTOM_SCALAR",
                    f"Field '{model.name}.{field_desc.name}' has custom scalar type "
                    f"'{variant.type_name}' without a customTypeMappings entry.",
                    {**ctx, "type": variant.type_name},
                )
            elif isinstance(variant, UnsupportedField):
                result.add_warning(
                    "UNSUPPORTED_FIELD_KIND",
                    f"Field '{model.name}.{field_desc.name}' has unsupported kind "
                    f"'{variant.kind}'.",
                    ctx,
                )
    return result


def validate_data_model(
    data_model: DataModel, config: Optional[GeneratorConfig] = None
) -> ValidationResult:
    """Run every data-model validator; returns a merged ``ValidationResult``."""
    result: ValidationResult = ValidationResult()
    if not data_model.models:
        result.add_warning("EMPTY_DATA_MODEL", "The data model declares no models.")

    validators: List[Callable[[DataModel], ValidationResult]] = [
        validate_entity_names,
        validate_field_names,
        validate_relations,
    ]
    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(data_model))
    result.merge(validate_field_types(data_model, config))

    if data_model.provider and data_model.provider not in SUPPORTED_PROVIDERS:
        result.add_warning(
            "UNKNOWN_PROVIDER",
            f"Datasource provider '{data_model.provider}' is not recognised; "
            f"provider-specific notes are skipped.",
            {"provider": data_model.provider},
        )

    logger.info("Data model validation complete: %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Configuration validators
# ---------------------------------------------------------------------------


def validate_type_mapping(raw: Mapping[str, Any]) -> List[str]:
    """Plain-text errors for an unvalidated type-mapping mapping."""
    errors: List[str] = []
    decimal_mode = raw.get("decimalMode", raw.get("decimal_mode"))
    if decimal_mode and decimal_mode not in _DECIMAL_MODES:
        errors.append('decimalMode must be "string", "number", or "decimal"')
    json_mode = raw.get("jsonMode", raw.get("json_mode"))
    if json_mode and json_mode not in _JSON_MODES:
        errors.append('jsonMode must be "unknown", "record", or "any"')
    provider = raw.get("provider")
    if provider and provider not in SUPPORTED_PROVIDERS:
        errors.append(f"provider must be one of: {', '.join(sorted(SUPPORTED_PROVIDERS))}")
    return errors


def _parse_date(value: str) -> Optional[datetime]:
    text: str = value.strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def validate_generator_config(config: GeneratorConfig) -> ValidationResult:
    """Sanity checks on option combinations Pydantic cannot see."""
    result: ValidationResult = ValidationResult()
    complex_types = config.complex_types

    decimal = complex_types.decimal
    if decimal.max_scale > decimal.max_precision:
        result.add_error(
            "DECIMAL_SCALE_EXCEEDS_PRECISION",
            f"complexTypes.decimal.maxScale ({decimal.max_scale}) exceeds "
            f"maxPrecision ({decimal.max_precision}).",
        )
    if config.decimal_mode == "number" and decimal.max_precision > _SAFE_NUMBER_DIGITS:
        result.add_warning(
            "DECIMAL_NUMBER_PRECISION_LOSS",
            f"decimalMode 'number' cannot represent {decimal.max_precision} digits exactly; "
            f"values beyond {_SAFE_NUMBER_DIGITS} digits lose precision.",
            {"maxPrecision": decimal.max_precision},
        )

    bytes_options = complex_types.bytes_options
    if bytes_options.min_size > bytes_options.max_size:
        result.add_error(
            "BYTES_MIN_EXCEEDS_MAX",
            f"complexTypes.bytes.minSize ({bytes_options.min_size}) exceeds "
            f"maxSize ({bytes_options.max_size}).",
        )

    date_time = complex_types.date_time
    if not date_time.allow_future and not date_time.allow_past:
        result.add_error(
            "DATETIME_NO_RANGE",
            "complexTypes.dateTime disallows both future and past dates; "
            "no value can validate.",
        )
    bounds: Dict[str, Optional[datetime]] = {}
    for key, value in (("minDate", date_time.min_date), ("maxDate", date_time.max_date)):
        if value is None:
            continue
        parsed: Optional[datetime] = _parse_date(value)
        if parsed is None:
            result.add_error(
                "INVALID_DATE_BOUND",
                f"complexTypes.dateTime.{key} is not an ISO 8601 date: {value!r}.",
                {key: value},
            )
        bounds[key] = parsed
    low, high = bounds.get("minDate"), bounds.get("maxDate")
    if low is not None and high is not None:
        try:
            inverted: bool = low >= high
        except TypeError:
            inverted = low.replace(tzinfo=None) >= high.replace(tzinfo=None)
        if inverted:
            result.add_error(
                "DATE_BOUNDS_INVERTED",
                f"complexTypes.dateTime.minDate ({date_time.min_date}) must be before "
                f"maxDate ({date_time.max_date}).",
            )

    if config.provider and config.provider not in SUPPORTED_PROVIDERS:
        result.add_error(
            "UNKNOWN_PROVIDER",
            f"provider '{config.provider}' must be one of: "
            f"{', '.join(sorted(SUPPORTED_PROVIDERS))}.",
        )

    if config.pure_models_include_relations and not config.pure_models:
        result.add_info(
            "INCLUDE_RELATIONS_WITHOUT_PURE_MODELS",
            "pureModelsIncludeRelations has no effect unless pureModels is enabled.",
        )

    logger.info("Config validation complete: %s", result.summary())
    return result


def validate_model_options(data_model: DataModel, config: GeneratorConfig) -> ValidationResult:
    """Per-model options and exclusions that name unknown models or fields."""
    result: ValidationResult = ValidationResult()
    for model_name, options in config.models.items():
        model = data_model.get_model(model_name)
        if model is None:
            result.add_warning(
                "MODEL_OPTIONS_UNKNOWN_MODEL",
                f"Options are defined for model '{model_name}' which does not exist.",
                {"model": model_name},
            )
            continue
        for excluded in sorted(config.excluded_fields(model_name) - set(model.field_names)):
            if excluded in config.global_exclusions.pure:
                continue
            result.add_warning(
                "EXCLUDED_FIELD_UNKNOWN",
                f"Excluded field '{model_name}.{excluded}' does not exist.",
                {"model": model_name, "field": excluded},
            )
        if options.enabled is False:
            result.add_info(
                "MODEL_DISABLED", f"Model '{model_name}' is disabled and will be skipped."
            )
    return result


def validate_full(data_model: DataModel, config: GeneratorConfig) -> ValidationResult:
    """
    **Master validation entry point.**

    Runs the data-model validators, the configuration validators and the
    cross-cutting per-model option checks.
    """
    logger.info(
        "Starting full validation: %d models, %d enums",
        len(data_model.models),
        len(data_model.enums),
    )
    result: ValidationResult = ValidationResult()
    result.merge(validate_data_model(data_model, config))
    result.merge(validate_generator_config(config))
    result.merge(validate_model_options(data_model, config))

    if result.has_errors:
        logger.error(
            "Validation FAILED with %d error(s). %s", result.error_count, result.summary()
        )
    else:
        logger.info("Validation PASSED. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Dependency graph & cycle detection
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class DependencyReport:
    """Cross-model dependency analysis of a set of compositions."""

    graph: Dict[str, List[str]] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)
    cycles: List[List[str]] = field(default_factory=list)

    @property
    def cycle_messages(self) -> List[str]:
        return [f"Circular dependency detected: {' -> '.join(c)}" for c in self.cycles]

    @property
    def errors(self) -> List[str]:
        return self.missing + self.cycle_messages

    @property
    def is_valid(self) -> bool:
        return not self.missing and not self.cycles


def referenced_symbols(composition: ModelSchemaComposition) -> List[str]:
    """Imported symbols that point at other model schemas."""
    excluded: Set[str] = {composition.schema_name, ZOD_IMPORT, PRISMA_IMPORT}
    excluded.update(composition.enum_symbols)
    return sorted(s for s in composition.imports if s not in excluded)


def detect_cycles(graph: Mapping[str, Sequence[str]]) -> List[List[str]]:
    """
    Iterative DFS over ``graph``; one cycle per back-edge.

    A cycle is the path from the first occurrence of the repeated node
    through the repeated node again, e.g. ``[A, B, C, A]``.  Edges to
    nodes absent from ``graph`` are skipped.
    """
    cycles: List[List[str]] = []
    visited: Set[str] = set()

    for start in sorted(graph):
        if start in visited:
            continue
        visited.add(start)
        path: List[str] = [start]
        on_path: Set[str] = {start}
        stack: List[Iterator[str]] = [iter(sorted(graph[start]))]

        while stack:
            neighbour: Optional[str] = next(stack[-1], None)
            if neighbour is None:
                stack.pop()
                on_path.discard(path.pop())
                continue
            if neighbour not in graph:
                continue
            if neighbour in on_path:
                cycles.append(path[path.index(neighbour):] + [neighbour])
                continue
            if neighbour in visited:
                continue
            visited.add(neighbour)
            on_path.add(neighbour)
            path.append(neighbour)
            stack.append(iter(sorted(graph[neighbour])))

    return cycles


def build_dependency_graph(
    compositions: Mapping[str, ModelSchemaComposition],
) -> DependencyReport:
    """
    Model-name dependency graph of ``compositions`` (keyed by model name).

    A referenced symbol that no composition exports is a missing
    dependency.  Self-references never form an edge.
    """
    report: DependencyReport = DependencyReport()
    symbol_owner: Dict[str, str] = {
        c.schema_name: name for name, c in compositions.items()
    }

    for model_name in sorted(compositions):
        composition: ModelSchemaComposition = compositions[model_name]
        edges: List[str] = []
        for symbol in referenced_symbols(composition):
            owner: Optional[str] = symbol_owner.get(symbol)
            if owner is None:
                target: str = composition.model_symbols.get(symbol, symbol)
                report.missing.append(
                    f"Model {model_name} depends on missing schema: {target}"
                )
                continue
            if owner != model_name and owner not in edges:
                edges.append(owner)
        report.graph[model_name] = edges

    report.cycles = detect_cycles(report.graph)
    for message in report.cycle_messages:
        logger.warning(message)
    for message in report.missing:
        logger.warning(message)
    return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DependencyReport",
    "ValidationIssue",
    "ValidationResult",
    "build_dependency_graph",
    "detect_cycles",
    "referenced_symbols",
    "validate_data_model",
    "validate_entity_names",
    "validate_field_names",
    "validate_field_types",
    "validate_full",
    "validate_generator_config",
    "validate_model_options",
    "validate_relations",
    "validate_type_mapping",
]

logger.debug("zodgen.validators loaded.")
