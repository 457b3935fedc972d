# File: zodgen/documentation.py
"""
zodgen - Generated Documentation
================================
JSDoc blocks attached to every generated field and model.

A field block reads, top to bottom::

    /// Display name for the user
    /**
     * Display name for the user
     *
     * @type {string | undefined}
     * @unique Unique constraint
     * @optional schema optional
     *
     * @validations
     * - @zod.min(1)
     *
     * @example
     * "example string"
     *
     * @generated Zod schema for User.name
    */

Lean output drops these blocks entirely; nothing here affects the
validation semantics of the generated schema.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from zodgen.annotations import clean_description
from zodgen.expressions import render_literal
from zodgen.models import DefaultValue, FieldDescriptor, FieldKind, ModelDescriptor

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.documentation")

_ZOD_BASE_RE: re.Pattern[str] = re.compile(r"z\.(\w+)")
_NOTE_PREFIX_RE: re.Pattern[str] = re.compile(r"^// ")

_READABLE_TYPES: Dict[str, str] = {
    "string": "string",
    "number": "number",
    "boolean": "boolean",
    "date": "Date",
    "bigint": "BigInt",
    "array": "Array",
    "unknown": "unknown",
    "any": "any",
}

# Single-line descriptions shorter than this are echoed as a /// line.
_ECHO_LIMIT: int = 200


@dataclass(slots=True)
class FieldDocMetadata:
    """Everything that ends up in one field's JSDoc block."""

    model_name: str
    field_name: str
    declared_type: str
    zod_type: str
    description: str = ""
    is_list: bool = False
    is_optional: bool = False
    is_nullable: bool = False
    optionality_reason: Optional[str] = None
    applied_validations: List[str] = field(default_factory=list)
    inline_validations: List[str] = field(default_factory=list)
    constraints: List[str] = field(default_factory=list)
    default_value: Optional[str] = None
    is_id: bool = False
    is_unique: bool = False
    is_updated_at: bool = False
    has_custom_validations: bool = False


# ---------------------------------------------------------------------------
# Metadata collection
# ---------------------------------------------------------------------------


def extract_zod_base_type(expression_text: str) -> str:
    """First ``z.<name>`` of an expression, e.g. ``number`` for ``z.number().int()``."""
    match = _ZOD_BASE_RE.search(expression_text)
    if match is not None:
        return match.group(1)
    if expression_text.startswith("."):
        return "string"
    return "unknown"


def format_default_value(default: Optional[DefaultValue]) -> Optional[str]:
    if default is None:
        return None
    if default.is_function:
        return f"{default.function}()"
    if default.value is None:
        return None
    return render_literal(default.value)


def collect_field_metadata(
    field_desc: FieldDescriptor,
    model_name: str,
    expression_text: str,
    notes: Sequence[str],
    *,
    is_optional: bool,
    is_nullable: bool = False,
    optionality_reason: Optional[str] = None,
    has_custom_validations: bool = False,
    constraints: Sequence[str] = (),
) -> FieldDocMetadata:
    inline: List[str] = [_NOTE_PREFIX_RE.sub("", n) for n in notes if "@zod" in n]
    applied: List[str] = [
        _NOTE_PREFIX_RE.sub("", n) for n in notes if "@zod" not in n and "Warning" not in n
    ]
    return FieldDocMetadata(
        model_name=model_name,
        field_name=field_desc.name,
        declared_type=field_desc.type,
        zod_type=extract_zod_base_type(expression_text),
        description=clean_description(field_desc.documentation),
        is_list=field_desc.is_list,
        is_optional=is_optional,
        is_nullable=is_nullable,
        optionality_reason=optionality_reason,
        applied_validations=applied,
        inline_validations=inline,
        constraints=list(constraints),
        default_value=format_default_value(field_desc.default),
        is_id=field_desc.is_id,
        is_unique=field_desc.is_unique,
        is_updated_at=field_desc.is_updated_at,
        has_custom_validations=has_custom_validations,
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _type_description(meta: FieldDocMetadata) -> str:
    text: str = _READABLE_TYPES.get(meta.zod_type, meta.zod_type)
    if meta.is_list:
        text = f"{text}[]"
    if meta.is_optional:
        text = f"{text} | undefined"
    if meta.is_nullable:
        text = f"{text} | null"
    return text


def _field_properties(meta: FieldDocMetadata) -> List[str]:
    properties: List[str] = []
    if meta.is_id:
        properties.append("@primary Primary key field")
    if meta.is_unique:
        properties.append("@unique Unique constraint")
    if meta.is_updated_at:
        properties.append("@updatedAt Auto-updated timestamp")
    if meta.default_value:
        properties.append(f"@default {meta.default_value}")
    if meta.optionality_reason and meta.optionality_reason != "required":
        properties.append(f"@optional {meta.optionality_reason.replace('_', ' ')}")
    if meta.has_custom_validations:
        properties.append("@enhanced Custom validations applied")
    return properties


def field_example(meta: FieldDocMetadata, *, as_element: bool = False) -> Optional[str]:
    """A representative literal for the field, when one is obvious."""
    inline: str = " ".join(meta.inline_validations)
    if meta.declared_type == "String":
        example: str = '"example string"'
        if "email" in inline:
            example = '"user@example.com"'
        elif "url" in inline:
            example = '"https://example.com"'
        elif "uuid" in inline:
            example = '"550e8400-e29b-41d4-a716-446655440000"'
    elif meta.declared_type == "Int":
        if meta.is_id:
            example = "1"
        elif "min(0)" in inline:
            example = "42"
        else:
            example = "123"
    elif meta.declared_type == "Boolean":
        example = "true"
    elif meta.declared_type == "DateTime":
        example = "new Date()"
    elif meta.is_list and not as_element:
        inner: Optional[str] = field_example(meta, as_element=True)
        return f"[{inner}]" if inner else "[]"
    else:
        return None
    if meta.is_list and not as_element:
        return f"[{example}]"
    return example


def render_field_jsdoc(meta: FieldDocMetadata) -> str:
    lines: List[str] = []
    description: str = meta.description
    if description and "\n" not in description and len(description) < _ECHO_LIMIT:
        lines.append(f"/// {description}")

    lines.append("/**")
    if description:
        lines.append(f" * {description}")
        lines.append(" *")

    lines.append(f" * @type {{{_type_description(meta)}}}")
    lines.extend(f" * {prop}" for prop in _field_properties(meta))

    if meta.inline_validations:
        lines.append(" *")
        lines.append(" * @validations")
        lines.extend(f" * - {v}" for v in meta.inline_validations)

    if meta.constraints:
        lines.append(" *")
        lines.append(" * @database")
        lines.extend(f" * - {c}" for c in meta.constraints)

    example: Optional[str] = field_example(meta)
    if example:
        lines.append(" *")
        lines.append(" * @example")
        lines.append(f" * {example}")

    lines.append(" *")
    lines.append(f" * @generated Zod schema for {meta.model_name}.{meta.field_name}")
    lines.append(" */")
    return "\n".join(lines)


def render_model_documentation(model: ModelDescriptor) -> str:
    """Model-level JSDoc with field counts by kind."""
    scalars: int = sum(1 for f in model.fields if f.kind == FieldKind.SCALAR)
    relations: int = sum(1 for f in model.fields if f.kind == FieldKind.OBJECT)
    enums: int = sum(1 for f in model.fields if f.kind == FieldKind.ENUM)

    lines: List[str] = [
        "/**",
        f" * Zod schema for {model.name} model",
        " *",
        f" * @model {model.name}",
        f" * @fields {len(model.fields)}",
    ]
    if scalars:
        lines.append(f" * @scalars {scalars}")
    if relations:
        lines.append(f" * @relations {relations}")
    if enums:
        lines.append(f" * @enums {enums}")
    description: str = clean_description(model.documentation)
    if description:
        lines.append(" *")
        lines.append(f" * {description}")
    lines.append(" *")
    lines.append(" * Generated with enhanced type mapping, validation, and documentation.")
    lines.append(" */")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FieldDocMetadata",
    "collect_field_metadata",
    "extract_zod_base_type",
    "field_example",
    "format_default_value",
    "render_field_jsdoc",
    "render_model_documentation",
]

logger.debug("zodgen.documentation loaded.")
