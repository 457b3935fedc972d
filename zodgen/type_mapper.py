# File: zodgen/type_mapper.py
"""
zodgen - Type Mapper
====================
Maps one field descriptor to a Zod expression plus the metadata needed to
render it (imports, notes, documentation, database constraints).

Pipeline for a single field:

    1. ``@zod.custom.use(expr)`` / ``@zod.custom({...})`` overrides
    2. dispatch on the closed field variant (scalar strategies, enum,
       relation, unsupported)
    3. list wrapping, exactly once
    4. ``@zod`` directive merge
    5. optionality and default-value modifiers
    6. database constraints and generated JSDoc

``TypeMapper.map_field`` is total: any failure degrades to ``z.unknown()``
(``z.any()`` when JSON-Schema compatible) with a warning note.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set, Tuple

from zodgen.annotations import (
    AnnotationExtractor,
    CustomImport,
    ExtractionResult,
    FieldContext,
    ZodAnnotationExtractor,
    normalize_documentation,
)
from zodgen.documentation import collect_field_metadata, render_field_jsdoc
from zodgen.expressions import (
    Modifier,
    ModifierOrigin,
    SchemaExpr,
    find_closing,
    schema_from_json_value,
)
from zodgen.merge import MERGE_FAILURE_NOTE, MergeError, merge_directives
from zodgen.models import (
    EnumField,
    FieldDescriptor,
    ModelDescriptor,
    RelationField,
    ScalarField,
    ScalarKind,
    TypeMappingConfig,
    UnsupportedField,
)
from zodgen.naming import EntityKind, NamingResolver
from zodgen.optionality import OptionalityResult, resolve_optionality
from zodgen.utils import format_file_size

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.type_mapper")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PRISMA_IMPORT: str = "Prisma"
ZOD_IMPORT: str = "z"

COMPLEX_SCALARS: Tuple[ScalarKind, ...] = (
    ScalarKind.DECIMAL,
    ScalarKind.JSON,
    ScalarKind.BYTES,
    ScalarKind.DATETIME,
)

_BASE64_PATTERN: str = r"/^[A-Za-z0-9+/]*={0,2}$/"
_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"[A-Za-z_$][\w$]*")
_CUSTOM_USE_RE: re.Pattern[str] = re.compile(r"@zod\.custom\.use\(")
_CUSTOM_RE: re.Pattern[str] = re.compile(r"@zod\.custom\(")


@dataclass(slots=True)
class FieldMappingResult:
    """Type mapper output for one field; consumed by the composer."""

    expression: SchemaExpr = field(default_factory=SchemaExpr)
    imports: Set[str] = field(default_factory=lambda: {ZOD_IMPORT})
    notes: List[str] = field(default_factory=list)
    requires_special_handling: bool = False
    documentation: Optional[str] = None
    database_constraints: List[str] = field(default_factory=list)
    database_optimizations: List[str] = field(default_factory=list)
    custom_imports: List[CustomImport] = field(default_factory=list)
    optionality: Optional[OptionalityResult] = None
    enum_symbols: Set[str] = field(default_factory=set)
    model_symbols: Dict[str, str] = field(default_factory=dict)

    @property
    def zod_schema(self) -> str:
        return self.expression.render()


def supported_scalar_types() -> List[str]:
    return [kind.value for kind in ScalarKind]


def _parse_iso_date(value: str) -> Optional[datetime]:
    text: str = value.strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _custom_payload(text: str, pattern: re.Pattern[str]) -> Optional[Tuple[str, str]]:
    """(payload, chained rest of line) for a ``@zod.custom`` override, if any."""
    match = pattern.search(text)
    if match is None:
        return None
    open_index: int = match.end() - 1
    close: int = find_closing(text, open_index)
    if close < 0:
        return None
    payload: str = text[open_index + 1:close].strip()
    line_end: int = text.find("\n", close)
    rest: str = text[close + 1:line_end if line_end >= 0 else len(text)].strip()
    return payload, rest


# ---------------------------------------------------------------------------
# Type mapper
# ---------------------------------------------------------------------------


class TypeMapper:
    """
    Field-level mapper, configured once per generation run.

    The configuration is frozen; the naming resolver and the annotation
    extractor are collaborators injected by the composer.
    """

    def __init__(
        self,
        config: TypeMappingConfig,
        *,
        naming: Optional[NamingResolver] = None,
        extractor: Optional[AnnotationExtractor] = None,
    ) -> None:
        self._config: TypeMappingConfig = config
        self._naming: NamingResolver = naming or NamingResolver()
        self._extractor: AnnotationExtractor = extractor or ZodAnnotationExtractor(
            config.zod_import_target
        )
        self._scalar_handlers: Dict[
            ScalarKind, Callable[[FieldDescriptor, ModelDescriptor, FieldMappingResult], None]
        ] = {
            ScalarKind.STRING: self._map_string,
            ScalarKind.INT: self._map_int,
            ScalarKind.BIGINT: self._map_bigint,
            ScalarKind.FLOAT: self._map_float,
            ScalarKind.DECIMAL: self._map_decimal,
            ScalarKind.BOOLEAN: self._map_boolean,
            ScalarKind.DATETIME: self._map_datetime,
            ScalarKind.JSON: self._map_json,
            ScalarKind.BYTES: self._map_bytes,
        }

    @property
    def config(self) -> TypeMappingConfig:
        return self._config

    @property
    def naming(self) -> NamingResolver:
        return self._naming

    @property
    def extractor(self) -> AnnotationExtractor:
        return self._extractor

    @property
    def scalar_handlers(self) -> Dict[ScalarKind, Callable[..., None]]:
        return dict(self._scalar_handlers)

    def _permissive(self) -> SchemaExpr:
        return SchemaExpr(base="z.any()" if self._config.json_schema_compatible else "z.unknown()")

    # -- Entry point ----------------------------------------------------------

    def map_field(self, field_desc: FieldDescriptor, model: ModelDescriptor) -> FieldMappingResult:
        """Map one field of ``model``; never raises."""
        result: FieldMappingResult = FieldMappingResult()
        try:
            if self._apply_custom_override(field_desc, result):
                self._collect_custom_imports(field_desc, model, result)
                return result

            self._dispatch(field_desc, model, result)

            if field_desc.is_list:
                result.expression = result.expression.as_array()
                result.notes.append("// Array field")

            self._apply_directives(field_desc, model, result)

            optionality: OptionalityResult = resolve_optionality(
                field_desc, model, self._config.provider
            )
            result.optionality = optionality
            if optionality.is_optional or optionality.has_default_value:
                self._apply_optionality(result, optionality)

            if self._config.include_database_validations:
                self._add_database_validations(field_desc, result)

            result.documentation = self._build_documentation(field_desc, model, result)
        except Exception as exc:
            logger.warning(
                "Failed to map field %s.%s of type %s: %s",
                model.name,
                field_desc.name,
                field_desc.type,
                exc,
                exc_info=True,
            )
            result.expression = self._permissive()
            result.notes.append(
                f"// Warning: Failed to map type {field_desc.type}, using "
                f"{'any' if self._config.json_schema_compatible else 'unknown'}"
            )
        return result

    # -- Step 1: overrides ----------------------------------------------------

    def _apply_custom_override(
        self, field_desc: FieldDescriptor, result: FieldMappingResult
    ) -> bool:
        text: str = normalize_documentation(field_desc.documentation)
        if "@zod.custom" not in text:
            return False

        use: Optional[Tuple[str, str]] = _custom_payload(text, _CUSTOM_USE_RE)
        if use is not None and use[0]:
            payload, rest = use
            result.expression = SchemaExpr.parse(payload + rest, ModifierOrigin.DIRECTIVE)
            result.notes.append("// Replaced base schema via @zod.custom.use")
            result.requires_special_handling = True
            return True

        custom: Optional[Tuple[str, str]] = _custom_payload(text, _CUSTOM_RE)
        if custom is None or not custom[0]:
            return False
        payload, rest = custom
        schema: str
        if payload.startswith("{") or payload.startswith("["):
            try:
                schema = schema_from_json_value(json.loads(payload))
            except json.JSONDecodeError:
                wrapper: str = "z.object" if payload.startswith("{") else "z.array"
                schema = f"{wrapper}({payload})"
        else:
            schema = payload
        result.expression = SchemaExpr.parse(schema + rest, ModifierOrigin.DIRECTIVE)
        result.notes.append("// Replaced base schema via @zod.custom")
        result.requires_special_handling = True
        return True

    # -- Step 2: dispatch on the closed variant -------------------------------

    def _dispatch(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        variant = field_desc.variant
        if isinstance(variant, ScalarField):
            if variant.scalar is None:
                self._map_custom_scalar(variant, result)
            else:
                self._scalar_handlers[variant.scalar](field_desc, model, result)
        elif isinstance(variant, EnumField):
            self._map_enum(variant, result)
        elif isinstance(variant, RelationField):
            self._map_relation(variant, result)
        elif isinstance(variant, UnsupportedField):
            self._map_unsupported(variant, model, field_desc, result)

    # -- Scalars ----------------------------------------------------------------

    def _map_string(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        result.expression = SchemaExpr(base="z.string()")

    def _map_int(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        result.expression = SchemaExpr(base="z.number()").call("int")
        result.notes.append("// Integer validation applied")

    def _map_bigint(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        if self._config.json_schema_compatible:
            if self._config.json_schema_options.big_int_format == "string":
                result.expression = SchemaExpr(base="z.string()").call(
                    "regex", r'/^\d+$/, "Invalid bigint string"'
                )
                result.notes.append("// BigInt as string for JSON Schema compatibility")
            else:
                result.expression = SchemaExpr(base="z.number()").call("int")
                result.notes.append(
                    "// BigInt as number for JSON Schema compatibility (may lose precision)"
                )
            return
        result.expression = SchemaExpr(base="z.bigint()")
        if self._config.validate_big_int:
            result.notes.append("// BigInt validation enabled")

    def _map_float(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        result.expression = SchemaExpr(base="z.number()")

    def _map_boolean(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        result.expression = SchemaExpr(base="z.boolean()")

    def _map_custom_scalar(self, variant: ScalarField, result: FieldMappingResult) -> None:
        mapping: Optional[str] = self._config.custom_type_mappings.get(variant.type_name)
        if mapping:
            result.expression = SchemaExpr.parse(mapping)
            result.requires_special_handling = True
            return
        result.expression = SchemaExpr(base="z.string()")
        result.notes.append(f"// Unknown scalar type: {variant.type_name}, mapped to string")

    # -- Decimal ----------------------------------------------------------------

    @staticmethod
    def decimal_pattern(
        *, allow_negative: bool, validate_precision: bool, max_precision: int, max_scale: int
    ) -> str:
        """Regex source (without slashes) for decimals in string mode."""
        pattern: str = "^"
        if allow_negative:
            pattern += "-?"
        if validate_precision and max_precision:
            integer_digits: int = max_precision - max_scale
            if not integer_digits:
                # every digit is fractional: only a leading zero is allowed
                pattern += rf"(?:0|0?\.\d{{1,{max_scale}}})"
            elif max_scale > 0:
                pattern += rf"\d{{1,{integer_digits}}}(?:\.\d{{1,{max_scale}}})?"
            else:
                pattern += rf"\d{{1,{integer_digits}}}"
        else:
            pattern += r"\d*\.?\d+"
        return pattern + "$"

    def _map_decimal(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        options = self._config.complex_types.decimal
        mode: str = self._config.decimal_mode

        if mode == "string":
            pattern: str = self.decimal_pattern(
                allow_negative=options.allow_negative,
                validate_precision=options.validate_precision,
                max_precision=options.max_precision,
                max_scale=options.max_scale,
            )
            result.expression = SchemaExpr(base="z.string()").call(
                "regex", f'/{pattern}/, "Invalid decimal format"'
            )
            if options.validate_precision:
                result.notes.append(
                    f"// Precision: max {options.max_precision} digits, scale {options.max_scale}"
                )
            if not options.allow_negative:
                result.notes.append("// Positive values only")
        elif mode == "number":
            result.expression = SchemaExpr(base="z.number()")
            if not options.allow_negative:
                result.expression = result.expression.call(
                    "min", '0, "Negative values not allowed"'
                )
            result.notes.append(
                "// Warning: Decimal as number - precision may be lost for large values"
            )
            if options.validate_precision and options.max_precision > 15:
                result.notes.append(
                    "// Warning: JavaScript numbers lose precision beyond 15-16 digits"
                )
        else:
            message: str = (
                f"Field '{field_desc.name}' must be a Decimal. "
                f"Location: ['Models', '{model.name}']"
            )
            result.expression = SchemaExpr(
                base=f'z.instanceof(Prisma.Decimal, {{\n  message: "{message}",\n}})'
            )
            result.notes.append("// Decimal field using Prisma.Decimal type")
            result.imports.add(PRISMA_IMPORT)
            result.requires_special_handling = True
            return

        result.requires_special_handling = True
        result.notes.append(f"// Decimal field mapped as {mode} with enhanced validation")

    # -- DateTime ---------------------------------------------------------------

    def _map_datetime(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        options = self._config.complex_types.date_time

        if self._config.json_schema_compatible:
            if self._config.json_schema_options.date_time_format == "isoDate":
                result.expression = SchemaExpr(base="z.string()").call(
                    "regex", r'/^\d{4}-\d{2}-\d{2}$/, "Invalid ISO date"'
                )
                result.notes.append("// DateTime as ISO date string for JSON Schema compatibility")
            else:
                result.expression = SchemaExpr(base="z.string()").call(
                    "regex",
                    r'/^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$/, "Invalid ISO datetime"',
                )
                result.notes.append("// DateTime as ISO string for JSON Schema compatibility")
            return

        strategy: str = self._config.date_time_strategy
        if strategy == "isoString":
            result.expression = (
                SchemaExpr(base="z.string()")
                .call(
                    "regex",
                    r'/\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z/, "Invalid ISO datetime"',
                )
                .call("transform", "v => new Date(v)")
            )
            result.notes.append("// DateTime mapped from ISO string")
        elif strategy == "coerce":
            result.expression = SchemaExpr(base="z.coerce.date()")
            result.notes.append("// DateTime coerced from input")
        elif self._config.strict_date_validation:
            result.expression = SchemaExpr(base="z.date()")
            result.notes.append("// Strict date validation enabled")
        else:
            result.expression = SchemaExpr(base="z.union([z.date(), z.string().datetime()])")
            result.notes.append("// Flexible date/string input with ISO 8601 validation")

        bounds: List[Modifier] = []
        if options.min_date:
            if _parse_iso_date(options.min_date) is None:
                result.notes.append(f"// Warning: Invalid minDate format: {options.min_date}")
            else:
                bounds.append(Modifier(
                    "refine",
                    f'(date) => date >= new Date("{options.min_date}"), '
                    f'"Date must be after {options.min_date}"',
                ))
                result.notes.append(f"// Minimum date: {options.min_date}")
        if options.max_date:
            if _parse_iso_date(options.max_date) is None:
                result.notes.append(f"// Warning: Invalid maxDate format: {options.max_date}")
            else:
                bounds.append(Modifier(
                    "refine",
                    f'(date) => date <= new Date("{options.max_date}"), '
                    f'"Date must be before {options.max_date}"',
                ))
                result.notes.append(f"// Maximum date: {options.max_date}")
        if not options.allow_future:
            bounds.append(
                Modifier("refine", '(date) => date <= new Date(), "Future dates not allowed"')
            )
            result.notes.append("// Future dates not allowed")
        if not options.allow_past:
            bounds.append(
                Modifier("refine", '(date) => date >= new Date(), "Past dates not allowed"')
            )
            result.notes.append("// Past dates not allowed")

        if bounds:
            if self._config.strict_date_validation:
                result.expression = result.expression.chain(*bounds)
            else:
                result.notes.append("// Date range validations applied to Date objects only")

        timezone_notes: Dict[str, str] = {
            "utc": "// Timezone: All dates normalized to UTC",
            "local": "// Timezone: All dates converted to local timezone",
            "preserve": "// Timezone: Original timezone information preserved",
        }
        if options.timezone_mode in timezone_notes:
            result.notes.append(timezone_notes[options.timezone_mode])
        result.requires_special_handling = True

    # -- Json -------------------------------------------------------------------

    def _map_json(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        options = self._config.complex_types.json_options
        permissive: str = "z.any()" if self._config.json_schema_compatible else "z.unknown()"
        mode: str = self._config.json_mode

        if mode == "record":
            result.expression = SchemaExpr(base=f"z.record({permissive})")
        elif mode == "any":
            result.expression = SchemaExpr(base="z.any()")
        else:
            result.expression = SchemaExpr(base=permissive)

        if options.validate_structure:
            result.expression = result.expression.call(
                "refine",
                "(val) => { try { JSON.stringify(val); return true; } catch { return false; } }, "
                '"Must be valid JSON serializable data"',
            )
            result.notes.append("// JSON structure validation enabled")

        if options.max_depth:
            depth: int = options.max_depth
            result.expression = result.expression.call(
                "refine",
                "(val) => { const getDepth = (obj: unknown, depth: number = 0): number => { "
                f"if (depth > {depth}) return depth; "
                "if (obj === null || typeof obj !== 'object') return depth; "
                "const values = Object.values(obj as Record<string, unknown>); "
                "if (values.length === 0) return depth; "
                "return Math.max(...values.map(v => getDepth(v, depth + 1))); }; "
                f"return getDepth(val) <= {depth}; }}, "
                f'"JSON nesting depth exceeds maximum of {depth}"',
            )
            result.notes.append(f"// Maximum nesting depth: {depth}")

        if options.max_length:
            result.expression = result.expression.call(
                "refine",
                f"(val) => JSON.stringify(val).length <= {options.max_length}, "
                '"JSON string representation too long"',
            )
            result.notes.append(f"// Maximum JSON string length: {options.max_length} characters")

        if mode == "record" and options.allow_null:
            result.expression = result.expression.call("nullable")

        if not options.allow_null and mode == "record":
            result.notes.append("// Null values not allowed in JSON structure")
        elif options.allow_null:
            result.notes.append("// Null values allowed in JSON structure")

        result.requires_special_handling = True
        result.notes.append(f"// JSON field mapped as {mode} with enhanced validation")

    # -- Bytes ------------------------------------------------------------------

    @staticmethod
    def base64_length(byte_count: int) -> int:
        """Characters needed to base64-encode ``byte_count`` bytes (unpadded bound)."""
        return math.ceil(byte_count * 4 / 3)

    def _map_bytes(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        options = self._config.complex_types.bytes_options

        if self._config.json_schema_compatible:
            if self._config.json_schema_options.bytes_format == "base64String":
                result.expression = SchemaExpr(base="z.string()").call(
                    "regex", f'{_BASE64_PATTERN}, "Invalid base64 string"'
                )
                result.notes.append("// Bytes as base64 string for JSON Schema compatibility")
            else:
                result.expression = SchemaExpr(base="z.string()").call(
                    "regex", '/^[0-9a-fA-F]*$/, "Invalid hex string"'
                )
                result.notes.append("// Bytes as hex string for JSON Schema compatibility")
            return

        if options.use_base64:
            expression: SchemaExpr = SchemaExpr(base="z.string()").call(
                "regex", f'{_BASE64_PATTERN}, "Must be valid base64 string"'
            )
            if options.min_size > 0:
                expression = expression.call(
                    "min", f'{self.base64_length(options.min_size)}, "Base64 string too short"'
                )
                result.notes.append(f"// Minimum size: {options.min_size} bytes")
            if options.max_size > 0:
                expression = expression.call(
                    "max", f'{self.base64_length(options.max_size)}, "Base64 string too long"'
                )
                result.notes.append(
                    f"// Maximum size: {options.max_size} bytes "
                    f"({format_file_size(options.max_size)})"
                )
            result.expression = expression
            result.notes.append("// Bytes field mapped to base64 string")
        else:
            expression = SchemaExpr(base="z.instanceof(Uint8Array)")
            if options.min_size > 0:
                expression = expression.call(
                    "refine", f'(buffer) => buffer.length >= {options.min_size}, "File too small"'
                )
                result.notes.append(f"// Minimum size: {options.min_size} bytes")
            if options.max_size > 0:
                expression = expression.call(
                    "refine", f'(buffer) => buffer.length <= {options.max_size}, "File too large"'
                )
                result.notes.append(
                    f"// Maximum size: {options.max_size} bytes "
                    f"({format_file_size(options.max_size)})"
                )
            result.expression = expression
            result.notes.append("// Bytes field mapped to Uint8Array")

        if options.allowed_mime_types:
            result.notes.append(f"// Allowed MIME types: {', '.join(options.allowed_mime_types)}")
            if not options.use_base64:
                result.notes.append(
                    "// Note: MIME type validation requires additional file-type detection library"
                )

        result.requires_special_handling = True
        result.notes.append(
            "// Bytes field with enhanced validation "
            f"({'base64' if options.use_base64 else 'Uint8Array'})"
        )

    # -- Enum / relation / unsupported --------------------------------------------

    def enum_symbol(self, enum_name: str) -> str:
        symbol: str = self._naming.schema_symbol(EntityKind.ENUM, enum_name)
        if not _IDENTIFIER_RE.fullmatch(symbol):
            logger.warning("Enum naming produced %r for %s; using default", symbol, enum_name)
            return f"{enum_name}Schema"
        return symbol

    def model_symbol(self, model_name: str) -> str:
        symbol: str = self._naming.schema_symbol(EntityKind.MODEL, model_name)
        if not _IDENTIFIER_RE.fullmatch(symbol):
            logger.warning("Model naming produced %r for %s; using default", symbol, model_name)
            return f"{model_name}Schema"
        return symbol

    def _map_enum(self, variant: EnumField, result: FieldMappingResult) -> None:
        symbol: str = self.enum_symbol(variant.enum_name)
        result.expression = SchemaExpr(base=symbol)
        result.imports.add(symbol)
        result.enum_symbols.add(symbol)
        result.notes.append(f"// Enum type: {variant.enum_name}")

    def _map_relation(self, variant: RelationField, result: FieldMappingResult) -> None:
        if not variant.relation_name:
            result.expression = self._permissive()
            result.notes.append(f"// Unknown object type: {variant.target_model}")
            return
        symbol: str = self.model_symbol(variant.target_model)
        result.expression = SchemaExpr.ref(
            symbol, variant.target_model, lazy=not self._config.uses_v4
        )
        result.imports.add(symbol)
        result.model_symbols[symbol] = variant.target_model
        result.requires_special_handling = True
        if variant.is_back_relation:
            result.notes.append(f"// Back-relation to {variant.target_model}")
        else:
            result.notes.append(f"// Relation to {variant.target_model}")

    def _map_unsupported(
        self,
        variant: UnsupportedField,
        model: ModelDescriptor,
        field_desc: FieldDescriptor,
        result: FieldMappingResult,
    ) -> None:
        result.expression = self._permissive()
        result.notes.append(f"// Unsupported field kind: {variant.kind}")
        logger.warning(
            "Unsupported field kind %s for field %s.%s", variant.kind, model.name, field_desc.name
        )

    # -- Step 4: directives -------------------------------------------------------

    def extract_directives(
        self, field_desc: FieldDescriptor, model: ModelDescriptor
    ) -> ExtractionResult:
        return self._extractor.extract(
            field_desc.documentation, FieldContext.for_field(field_desc, model.name)
        )

    def _collect_custom_imports(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        try:
            extraction: ExtractionResult = self.extract_directives(field_desc, model)
        except Exception as exc:
            logger.warning(
                "Failed to read @zod imports on %s.%s: %s",
                model.name,
                field_desc.name,
                exc,
                exc_info=True,
            )
            result.notes.append(MERGE_FAILURE_NOTE)
            return
        result.custom_imports.extend(extraction.custom_imports)

    def _apply_directives(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> None:
        if not field_desc.documentation or "@zod" not in field_desc.documentation:
            return
        try:
            extraction: ExtractionResult = self.extract_directives(field_desc, model)
            if extraction.parse_errors or extraction.mapping_errors:
                logger.warning(
                    "Ignoring @zod annotations on %s.%s: %s",
                    model.name,
                    field_desc.name,
                    "; ".join(extraction.parse_errors + extraction.mapping_errors),
                )
            outcome = merge_directives(
                result.expression,
                field_desc,
                extraction,
                json_schema_compatible=self._config.json_schema_compatible,
            )
        except Exception as exc:
            logger.warning(
                "Failed to apply @zod validations on %s.%s: %s",
                model.name,
                field_desc.name,
                exc,
                exc_info=not isinstance(exc, MergeError),
            )
            result.notes.append(MERGE_FAILURE_NOTE)
            return
        result.expression = outcome.expression
        result.notes.extend(outcome.notes)
        result.custom_imports.extend(outcome.custom_imports)
        if outcome.applied:
            result.requires_special_handling = True

    # -- Step 5: optionality ------------------------------------------------------

    def _apply_optionality(
        self, result: FieldMappingResult, optionality: OptionalityResult
    ) -> None:
        modifiers: List[Modifier] = list(optionality.modifiers)
        if result.expression.has("default"):
            modifiers = [m for m in modifiers if m.name != "default"]
        result.expression = result.expression.chain(*modifiers)
        result.notes.append(f"// Field optionality: {optionality.reason.value}")
        result.notes.extend(f"// {note}" for note in optionality.notes)
        if optionality.is_auto_generated:
            result.requires_special_handling = True
            result.notes.append("// Auto-generated field - handle with care in mutations")

    # -- Step 6: database info and documentation ----------------------------------

    def _add_database_validations(
        self, field_desc: FieldDescriptor, result: FieldMappingResult
    ) -> None:
        if field_desc.is_id:
            result.database_constraints.append("Primary key field")
        if field_desc.is_unique:
            result.database_constraints.append("Unique constraint")
        if field_desc.is_updated_at:
            result.database_constraints.append("Updated at timestamp")
        if field_desc.has_default_value:
            result.database_constraints.append("Has default value")

        provider: str = self._config.provider
        scalar: Optional[ScalarKind] = field_desc.scalar_kind
        if provider == "postgresql":
            if scalar == ScalarKind.STRING and field_desc.is_id:
                result.database_optimizations.append(
                    "Consider UUID type for PostgreSQL primary keys"
                )
            if scalar == ScalarKind.JSON:
                result.database_optimizations.append(
                    "PostgreSQL JSONB provides better performance than JSON"
                )
        elif provider == "mysql":
            if scalar == ScalarKind.STRING and field_desc.is_list:
                result.database_optimizations.append(
                    "Consider using separate table for array data in MySQL"
                )
        elif provider == "mongodb":
            if scalar == ScalarKind.STRING and field_desc.is_id:
                result.database_optimizations.append("MongoDB uses ObjectId for _id fields")
            if field_desc.is_list:
                result.database_optimizations.append("MongoDB natively supports arrays")

    def _build_documentation(
        self, field_desc: FieldDescriptor, model: ModelDescriptor, result: FieldMappingResult
    ) -> str:
        optionality: Optional[OptionalityResult] = result.optionality
        metadata = collect_field_metadata(
            field_desc,
            model.name,
            result.zod_schema,
            result.notes,
            is_optional=optionality.is_optional if optionality else not field_desc.is_required,
            is_nullable=result.expression.has("nullable", "nullish"),
            optionality_reason=optionality.reason.value if optionality else None,
            has_custom_validations=result.requires_special_handling,
            constraints=result.database_constraints,
        )
        return render_field_jsdoc(metadata)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "COMPLEX_SCALARS",
    "FieldMappingResult",
    "PRISMA_IMPORT",
    "TypeMapper",
    "ZOD_IMPORT",
    "supported_scalar_types",
]

logger.debug("zodgen.type_mapper loaded.")
