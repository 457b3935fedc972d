# File: zodgen/merge.py
"""
zodgen - Annotation Merge Step
==============================
Folds ``@zod`` directives into the expression produced by type mapping.

Rules, in order of application:

* invalid annotations leave the expression untouched and are reported as
  notes (``// @zod parsing errors: ...`` / ``// @zod mapping errors: ...``).
* a chain starting with a replacement method (``enum``, ``literal``, ...)
  supersedes the base expression.
* scalar fields: a directive ``.optional()`` is dropped (optionality
  belongs to the resolver); ``.nullable()`` / ``.nullish()`` are moved to
  the end of the chain, once, ``nullable`` winning when both appear.
* relation fields keep directive modifiers exactly as written.
* Json fields with a ``.record(p)`` directive are rebuilt on
  ``z.record(p)``.
* element-level directives on list fields apply inside ``z.array(...)``;
  the trailing nullability stays on the array.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from zodgen.annotations import CustomImport, ExtractionResult, ZodDirective
from zodgen.expressions import Modifier, ModifierOrigin, SchemaExpr
from zodgen.models import FieldDescriptor, ScalarKind

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.merge")

ENHANCED_NOTE: str = "// Enhanced with @zod inline validations"
MERGE_FAILURE_NOTE: str = "// Warning: Failed to apply @zod validations"


class MergeError(ValueError):
    """Directive chain that cannot be merged into the base expression."""


@dataclass(slots=True)
class MergeOutcome:
    expression: SchemaExpr
    notes: List[str] = field(default_factory=list)
    custom_imports: List[CustomImport] = field(default_factory=list)
    applied: bool = False


def normalize_nullability(
    modifiers: Sequence[Modifier], *, strip_optional: bool = True
) -> Tuple[List[Modifier], Optional[Modifier]]:
    """
    Split directive modifiers into (body, trailing nullability).

    ``.optional()`` is removed when ``strip_optional``; any number of
    ``.nullable()`` / ``.nullish()`` collapse into a single trailing call.
    """
    kept: List[Modifier] = [
        m for m in modifiers if not (strip_optional and m.name == "optional")
    ]
    has_nullable: bool = any(m.name == "nullable" for m in kept)
    has_nullish: bool = any(m.name == "nullish" for m in kept)
    body: List[Modifier] = [m for m in kept if m.name not in ("nullable", "nullish")]
    trailing: Optional[Modifier] = None
    if has_nullable:
        trailing = Modifier("nullable", "", ModifierOrigin.DIRECTIVE)
    elif has_nullish:
        trailing = Modifier("nullish", "", ModifierOrigin.DIRECTIVE)
    return body, trailing


def _split_replacement(
    directives: Sequence[ZodDirective],
) -> Tuple[Optional[SchemaExpr], List[Modifier]]:
    if not directives:
        return None, []
    replacement: Optional[SchemaExpr] = None
    rest: Sequence[ZodDirective] = directives
    if directives[0].replacement:
        replacement = directives[0].to_expression()
        rest = directives[1:]
    for directive in rest:
        if directive.replacement:
            raise MergeError(
                f"Replacement directive @zod.{directive.method} must start the chain"
            )
    modifiers: List[Modifier] = [d.to_modifier() for d in rest]
    if replacement is not None and replacement.modifiers:
        modifiers = list(replacement.modifiers) + modifiers
        replacement = replacement.with_modifiers(())
    return replacement, modifiers


def merge_directives(
    base: SchemaExpr,
    field_desc: FieldDescriptor,
    extraction: ExtractionResult,
    *,
    json_schema_compatible: bool = False,
) -> MergeOutcome:
    """
    Merge extracted directives into ``base``.

    Raises ``MergeError`` for chains that cannot be merged; callers keep
    the unmerged expression in that case.
    """
    outcome: MergeOutcome = MergeOutcome(expression=base)
    outcome.custom_imports.extend(extraction.custom_imports)

    if extraction.parse_errors:
        outcome.notes.append(f"// @zod parsing errors: {', '.join(extraction.parse_errors)}")
    if extraction.mapping_errors:
        outcome.notes.append(f"// @zod mapping errors: {', '.join(extraction.mapping_errors)}")
    if not extraction.is_valid or not extraction.directives:
        return outcome

    replacement, modifiers = _split_replacement(extraction.directives)

    # relations keep their own .optional()
    trailing: Optional[Modifier]
    body, trailing = normalize_nullability(
        modifiers, strip_optional=not field_desc.is_relation
    )

    merged: SchemaExpr
    record: Optional[Modifier] = next((m for m in body if m.name == "record"), None)
    if (
        replacement is None
        and record is not None
        and field_desc.scalar_kind == ScalarKind.JSON
    ):
        value_schema: str = record.arguments or (
            "z.any()" if json_schema_compatible else "z.unknown()"
        )
        remaining: List[Modifier] = [m for m in body if m is not record]
        merged = SchemaExpr.parse(f"z.record({value_schema})", ModifierOrigin.DIRECTIVE)
        merged = merged.chain(*remaining)
    elif field_desc.is_list and extraction.element_level and base.element is not None:
        element: SchemaExpr = replacement if replacement is not None else base.element
        merged = dataclasses.replace(base, element=element.chain(*body))
    elif replacement is not None:
        merged = replacement.chain(*body)
    else:
        merged = base.chain(*body)

    if trailing is not None:
        merged = merged.chain(trailing)

    outcome.expression = merged
    outcome.applied = True
    outcome.notes.append(ENHANCED_NOTE)
    outcome.notes.extend(f"// {d.describe()}" for d in extraction.directives)
    return outcome


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ENHANCED_NOTE",
    "MERGE_FAILURE_NOTE",
    "MergeError",
    "MergeOutcome",
    "merge_directives",
    "normalize_nullability",
]

logger.debug("zodgen.merge loaded.")
