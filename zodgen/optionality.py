# File: zodgen/optionality.py
"""
zodgen - Optionality Resolver
=============================
Decides whether a field may be omitted on input, and why.

Reasons are checked in a fixed order and the first one that applies wins:

    1. schema_optional        field is declared optional
    2. has_default            default value that is safe to omit
    3. auto_generated         id with default, @updatedAt, DateTime now()
    4. back_relation          relation without local foreign keys
    5. nullable_foreign_keys  every local foreign key is optional
    6. required               nothing above applied

Default-value information (the ``.default(...)`` modifier and notes) is
collected whenever the field has a default, whichever reason won.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from zodgen.expressions import Modifier, ModifierOrigin, render_literal
from zodgen.models import (
    DatabaseProvider,
    FieldDescriptor,
    ModelDescriptor,
    RelationField,
    ScalarKind,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.optionality")


class OptionalityReason(str, Enum):
    SCHEMA_OPTIONAL = "schema_optional"
    HAS_DEFAULT = "has_default"
    AUTO_GENERATED = "auto_generated"
    BACK_RELATION = "back_relation"
    NULLABLE_FOREIGN_KEYS = "nullable_foreign_keys"
    REQUIRED = "required"


@dataclass(slots=True)
class OptionalityResult:
    """Outcome of optionality resolution for one field."""

    reason: OptionalityReason = OptionalityReason.REQUIRED
    is_optional: bool = False
    is_nullable: bool = False
    has_default_value: bool = False
    is_auto_generated: bool = False
    modifiers: List[Modifier] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def modifier_text(self) -> str:
        return "".join(m.render() for m in self.modifiers)

    @property
    def default_modifiers(self) -> List[Modifier]:
        return [m for m in self.modifiers if m.origin == ModifierOrigin.DEFAULT]


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_auto_generated(field_desc: FieldDescriptor) -> bool:
    """Id with a default, ``@updatedAt``, or a DateTime defaulting to ``now()``."""
    if field_desc.is_id and field_desc.has_default_value:
        return True
    if field_desc.is_updated_at:
        return True
    return (
        field_desc.scalar_kind == ScalarKind.DATETIME
        and field_desc.has_default_value
        and field_desc.default_function == "now"
    )


def is_safe_default(field_desc: FieldDescriptor) -> bool:
    """Whether a defaulted field can be left out of input without surprises."""
    if is_auto_generated(field_desc):
        return True
    scalar: Optional[ScalarKind] = field_desc.scalar_kind
    if scalar == ScalarKind.STRING and field_desc.is_id and field_desc.has_default_value:
        return True
    if scalar == ScalarKind.DATETIME and field_desc.has_default_value:
        return True
    if (
        scalar in (ScalarKind.INT, ScalarKind.BIGINT)
        and field_desc.is_id
        and field_desc.has_default_value
    ):
        return True
    return not field_desc.is_required


# ---------------------------------------------------------------------------
# Default value information
# ---------------------------------------------------------------------------


def _format_default_literal(field_desc: FieldDescriptor, value: object) -> str:
    if (
        field_desc.scalar_kind == ScalarKind.FLOAT
        and isinstance(value, (int, float))
        and not isinstance(value, bool)
        and float(value).is_integer()
    ):
        return f"{int(value)}.0"
    return render_literal(value)


def _collect_default_info(field_desc: FieldDescriptor, result: OptionalityResult) -> None:
    default = field_desc.default
    if default is None:
        return
    scalar: Optional[ScalarKind] = field_desc.scalar_kind
    if default.is_function:
        name: str = default.function or ""
        result.notes.append(f"Default function: {name}()")
        if name == "now" and scalar == ScalarKind.DATETIME:
            result.modifiers.append(
                Modifier("default", "() => new Date()", ModifierOrigin.DEFAULT)
            )
        elif name == "uuid" and scalar == ScalarKind.STRING:
            result.notes.append("UUID default detected; no inline generator emitted")
        elif name == "cuid" and scalar == ScalarKind.STRING:
            result.notes.append("CUID default detected; no inline generator emitted")
        return
    literal: str = _format_default_literal(field_desc, default.value)
    result.modifiers.append(Modifier("default", literal, ModifierOrigin.DEFAULT))
    result.notes.append(f"Default value: {literal}")


# ---------------------------------------------------------------------------
# Provider notes
# ---------------------------------------------------------------------------


def _postgresql_notes(field_desc: FieldDescriptor) -> List[str]:
    notes: List[str] = []
    scalar = field_desc.scalar_kind
    if scalar == ScalarKind.STRING and field_desc.is_id and field_desc.has_default_value:
        notes.append("PostgreSQL UUID primary key with default generation")
    if (
        scalar in (ScalarKind.INT, ScalarKind.BIGINT)
        and field_desc.is_id
        and field_desc.has_default_value
    ):
        notes.append("PostgreSQL serial/bigserial primary key")
    return notes


def _mysql_notes(field_desc: FieldDescriptor) -> List[str]:
    notes: List[str] = []
    scalar = field_desc.scalar_kind
    if (
        scalar in (ScalarKind.INT, ScalarKind.BIGINT)
        and field_desc.is_id
        and field_desc.has_default_value
    ):
        notes.append("MySQL AUTO_INCREMENT primary key")
    if scalar == ScalarKind.DATETIME and field_desc.has_default_value:
        notes.append("MySQL TIMESTAMP with default value")
    return notes


def _sqlite_notes(field_desc: FieldDescriptor) -> List[str]:
    if field_desc.scalar_kind == ScalarKind.INT and field_desc.is_id:
        return ["SQLite INTEGER PRIMARY KEY (ROWID alias)"]
    return []


def _mongodb_notes(field_desc: FieldDescriptor) -> List[str]:
    notes: List[str] = []
    if field_desc.is_id and field_desc.name == "id":
        notes.append("MongoDB _id field (ObjectId)")
    if not field_desc.is_required:
        notes.append("MongoDB field allows undefined values")
    return notes


_PROVIDER_NOTES: Dict[str, Callable[[FieldDescriptor], List[str]]] = {
    DatabaseProvider.POSTGRESQL.value: _postgresql_notes,
    DatabaseProvider.MYSQL.value: _mysql_notes,
    DatabaseProvider.SQLITE.value: _sqlite_notes,
    DatabaseProvider.MONGODB.value: _mongodb_notes,
}


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


def _relation_reason(
    field_desc: FieldDescriptor, model: ModelDescriptor
) -> Optional[OptionalityReason]:
    variant = field_desc.variant
    if not isinstance(variant, RelationField) or not variant.relation_name:
        return None
    if variant.is_back_relation:
        return OptionalityReason.BACK_RELATION
    for fk_name in variant.from_fields:
        fk_field: Optional[FieldDescriptor] = model.get_field(fk_name)
        if fk_field is None or fk_field.is_required:
            return None
    return OptionalityReason.NULLABLE_FOREIGN_KEYS


_REASON_NOTES: Dict[OptionalityReason, str] = {
    OptionalityReason.SCHEMA_OPTIONAL: "Field marked as optional in the data model",
    OptionalityReason.HAS_DEFAULT: "Field has default value, making it optional for input",
    OptionalityReason.AUTO_GENERATED: "Auto-generated field, optional for input",
    OptionalityReason.BACK_RELATION: "Back-relation field, typically optional",
    OptionalityReason.NULLABLE_FOREIGN_KEYS: (
        "Foreign key fields are nullable, making relation optional"
    ),
}


def resolve_optionality(
    field_desc: FieldDescriptor,
    model: ModelDescriptor,
    provider: Optional[str] = None,
) -> OptionalityResult:
    """
    Classify ``field_desc`` into exactly one optionality reason.

    Total: every field yields a result, ``required`` being the fallback.
    """
    result: OptionalityResult = OptionalityResult(
        has_default_value=field_desc.has_default_value,
        is_auto_generated=is_auto_generated(field_desc),
    )

    candidates: List[OptionalityReason] = []
    if not field_desc.is_required:
        candidates.append(OptionalityReason.SCHEMA_OPTIONAL)
    if field_desc.has_default_value and is_safe_default(field_desc):
        candidates.append(OptionalityReason.HAS_DEFAULT)
    if result.is_auto_generated:
        candidates.append(OptionalityReason.AUTO_GENERATED)
    relation_reason: Optional[OptionalityReason] = _relation_reason(field_desc, model)
    if relation_reason is not None:
        candidates.append(relation_reason)

    if candidates:
        result.reason = candidates[0]
        result.is_optional = True
        result.modifiers.append(Modifier("optional", "", ModifierOrigin.OPTIONALITY))
        result.notes.append(_REASON_NOTES[result.reason])

    if field_desc.has_default_value:
        _collect_default_info(field_desc, result)

    if field_desc.scalar_kind == ScalarKind.JSON and field_desc.is_required:
        result.notes.append("JSON field is required - consider validation complexity")
    if field_desc.scalar_kind == ScalarKind.BYTES:
        result.notes.append("Bytes field - consider file upload requirements")

    if provider:
        notes_for: Optional[Callable[[FieldDescriptor], List[str]]] = _PROVIDER_NOTES.get(provider)
        if notes_for is not None:
            result.notes.extend(notes_for(field_desc))

    logger.debug(
        "Optionality %s.%s: %s", model.name, field_desc.name, result.reason.value
    )
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "OptionalityReason",
    "OptionalityResult",
    "is_auto_generated",
    "is_safe_default",
    "resolve_optionality",
]

logger.debug("zodgen.optionality loaded.")
