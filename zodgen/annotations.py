# File: zodgen/annotations.py
"""
zodgen - Annotation Extractor
=============================
Reads ``@zod`` directives out of field and model documentation.

Field documentation::

    /// User e-mail address @zod.string.email().max(255)
    /// @zod.enum(["draft", "published"])
    /// Tags, each array element validated @zod.min(1).max(32)
    /// @zod.import(["import { isSlug } from '../lib/slug'"]).refine(isSlug)

Model documentation::

    /// @zod.import(["import { checkDates } from '../lib/dates'"]).refine(checkDates)

The engine talks to extractors through the ``AnnotationExtractor``
protocol only; ``ZodAnnotationExtractor`` is the implementation shipped
with zodgen.  Parse problems (unbalanced parentheses, bare method names)
and applicability problems (``.email()`` on an ``Int``) are reported, never
raised: an invalid annotation yields no directives.
"""

from __future__ import annotations

import ast
import logging
import re
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Protocol, Tuple

from zodgen.expressions import (
    Modifier,
    ModifierOrigin,
    SchemaExpr,
    find_closing,
    split_arguments,
)
from zodgen.models import FieldDescriptor, ZodImportTarget

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.annotations")

# ---------------------------------------------------------------------------
# Method tables
# ---------------------------------------------------------------------------

COMMON_METHODS: FrozenSet[str] = frozenset({
    "optional", "nullable", "nullish", "default", "describe", "refine",
    "superRefine", "transform", "catch", "brand", "readonly", "pipe", "record",
})

STRING_METHODS: FrozenSet[str] = frozenset({
    "min", "max", "length", "email", "url", "uuid", "cuid", "cuid2", "ulid",
    "regex", "startsWith", "endsWith", "includes", "trim", "toLowerCase",
    "toUpperCase", "datetime", "date", "time", "ip", "emoji", "nanoid",
    "base64", "nonempty",
})

NUMBER_METHODS: FrozenSet[str] = frozenset({
    "min", "max", "int", "positive", "negative", "nonnegative", "nonpositive",
    "multipleOf", "finite", "safe", "gt", "gte", "lt", "lte", "step",
})

DATE_METHODS: FrozenSet[str] = frozenset({"min", "max"})

ARRAY_METHODS: FrozenSet[str] = frozenset({"min", "max", "length", "nonempty"})

REPLACEMENT_METHODS: FrozenSet[str] = frozenset({"enum", "literal", "union", "nativeEnum"})

# Bare qualifiers like ``@zod.string.min(3)``; skipped when not called.
TYPE_QUALIFIERS: FrozenSet[str] = frozenset({
    "string", "number", "bigint", "date", "boolean", "array", "json",
})

_TYPE_METHODS = {
    "String": STRING_METHODS,
    "Int": NUMBER_METHODS,
    "Float": NUMBER_METHODS,
    "BigInt": NUMBER_METHODS,
    "Decimal": NUMBER_METHODS | STRING_METHODS,
    "DateTime": DATE_METHODS,
    "Boolean": frozenset(),
    "Json": frozenset(),
    "Bytes": STRING_METHODS,
}

_ALL_METHODS: FrozenSet[str] = (
    COMMON_METHODS | STRING_METHODS | NUMBER_METHODS | DATE_METHODS | ARRAY_METHODS
)

_ZOD_MARKER_RE: re.Pattern[str] = re.compile(r"@zod(?![\w$])")
_CHAIN_SEGMENT_RE: re.Pattern[str] = re.compile(r"[ \t]*\.[ \t]*([A-Za-z_$][\w$]*)")
_COMMENT_PREFIX_RE: re.Pattern[str] = re.compile(r"^\s*/{2,3}\s?")
_NAMED_IMPORTS_RE: re.Pattern[str] = re.compile(r"\{([^}]*)\}")
_NAMESPACE_IMPORT_RE: re.Pattern[str] = re.compile(r"\*\s*as\s+([A-Za-z_$][\w$]*)")
_DEFAULT_IMPORT_RE: re.Pattern[str] = re.compile(
    r"^import\s+(?:type\s+)?([A-Za-z_$][\w$]*)\s*(?:,|from\b)"
)
_IMPORT_STATEMENT_RE: re.Pattern[str] = re.compile(
    r"^import\s.+\sfrom\s+['\"][^'\"]+['\"];?$", re.S
)


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FieldContext:
    """Where a piece of documentation came from."""

    model_name: str
    field_name: str
    field_type: str
    is_optional: bool = False
    is_list: bool = False

    @classmethod
    def for_field(cls, field_desc: FieldDescriptor, model_name: str) -> "FieldContext":
        return cls(
            model_name=model_name,
            field_name=field_desc.name,
            field_type=field_desc.type,
            is_optional=not field_desc.is_required,
            is_list=field_desc.is_list,
        )

    @property
    def location(self) -> str:
        return f"{self.model_name}.{self.field_name}"


@dataclass(frozen=True, slots=True)
class CustomImport:
    """A verbatim import statement and the identifiers it binds."""

    statement: str
    imported_items: Tuple[str, ...] = ()

    @classmethod
    def from_statement(cls, statement: str) -> "CustomImport":
        text: str = statement.strip()
        if not text.endswith(";"):
            text = f"{text};"
        items: List[str] = []
        named = _NAMED_IMPORTS_RE.search(text)
        if named is not None:
            for part in named.group(1).split(","):
                part = part.strip()
                if part.startswith("type "):
                    part = part[5:].strip()
                if not part:
                    continue
                items.append(part.split(" as ")[-1].strip())
        namespace = _NAMESPACE_IMPORT_RE.search(text)
        if namespace is not None:
            items.append(namespace.group(1))
        default = _DEFAULT_IMPORT_RE.match(text)
        if default is not None and default.group(1) != "type":
            items.append(default.group(1))
        return cls(statement=text, imported_items=tuple(items))


@dataclass(frozen=True, slots=True)
class ZodDirective:
    """One ``@zod`` method call with its source-text arguments."""

    method: str
    arguments: Tuple[str, ...] = ()
    replacement: bool = False

    @property
    def argument_text(self) -> str:
        return ", ".join(self.arguments)

    def describe(self) -> str:
        return f"@zod.{self.method}({self.argument_text})"

    def to_modifier(self) -> Modifier:
        return Modifier(self.method, self.argument_text, ModifierOrigin.DIRECTIVE)

    def to_expression(self) -> SchemaExpr:
        """Full-replacement schema, e.g. ``z.enum([...])``."""
        return SchemaExpr.parse(f"z.{self.method}({self.argument_text})", ModifierOrigin.DIRECTIVE)


@dataclass(slots=True)
class ExtractionResult:
    directives: List[ZodDirective] = field(default_factory=list)
    parse_errors: List[str] = field(default_factory=list)
    mapping_errors: List[str] = field(default_factory=list)
    element_level: bool = False
    custom_imports: List[CustomImport] = field(default_factory=list)
    description: str = ""

    @property
    def has_directives(self) -> bool:
        return bool(self.directives)

    @property
    def is_valid(self) -> bool:
        return not self.parse_errors and not self.mapping_errors


@dataclass(slots=True)
class ModelExtraction:
    custom_imports: List[CustomImport] = field(default_factory=list)
    validation: Tuple[Modifier, ...] = ()
    errors: List[str] = field(default_factory=list)


class AnnotationExtractor(Protocol):
    """Collaborator interface consumed by the type mapper and composer."""

    def extract(self, documentation: Optional[str], context: FieldContext) -> ExtractionResult:
        ...

    def extract_model(self, documentation: Optional[str], model_name: str) -> ModelExtraction:
        ...


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def normalize_documentation(documentation: Optional[str]) -> str:
    """Drop ``//`` / ``///`` prefixes line by line."""
    if not documentation:
        return ""
    lines: List[str] = [_COMMENT_PREFIX_RE.sub("", line) for line in documentation.splitlines()]
    return "\n".join(line.rstrip() for line in lines).strip()


def _read_chain(
    text: str, pos: int
) -> Tuple[List[Tuple[str, Optional[str]]], int, Optional[str]]:
    """
    Read ``.name`` / ``.name(args)`` segments starting at ``pos``.

    Returns (segments, end index, error message or None).
    """
    segments: List[Tuple[str, Optional[str]]] = []
    n: int = len(text)
    while True:
        segment = _CHAIN_SEGMENT_RE.match(text, pos)
        if segment is None:
            break
        name: str = segment.group(1)
        pos = segment.end()
        arguments: Optional[str] = None
        if pos < n and text[pos] == "(":
            close: int = find_closing(text, pos)
            if close < 0:
                return segments, pos, f"Unbalanced parentheses in @zod.{name}"
            arguments = text[pos + 1:close].strip()
            pos = close + 1
        segments.append((name, arguments))
    return segments, pos, None


def clean_description(documentation: Optional[str]) -> str:
    """Documentation text with every ``@zod`` chain removed, on one line."""
    text: str = normalize_documentation(documentation)
    if not text:
        return ""
    pieces: List[str] = []
    last: int = 0
    for marker in _ZOD_MARKER_RE.finditer(text):
        if marker.start() < last:
            continue
        pieces.append(text[last:marker.start()])
        _, end, _ = _read_chain(text, marker.end())
        last = end
    pieces.append(text[last:])
    words: List[str] = " ".join(pieces).split()
    return " ".join(words)


def parse_import_payload(payload: str) -> Tuple[List[CustomImport], List[str]]:
    """Decode ``@zod.import([...])`` arguments into import statements."""
    try:
        value = ast.literal_eval(payload)
    except (ValueError, SyntaxError) as exc:
        return [], [f"Invalid @zod.import payload: {exc}"]
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        return [], ["@zod.import expects an array of import statements"]
    imports: List[CustomImport] = []
    errors: List[str] = []
    for statement in value:
        if not _IMPORT_STATEMENT_RE.match(statement.strip()):
            errors.append(f"Invalid import statement: {statement}")
            continue
        imports.append(CustomImport.from_statement(statement))
    return imports, errors


# ---------------------------------------------------------------------------
# Default extractor
# ---------------------------------------------------------------------------


class ZodAnnotationExtractor:
    """Parse ``@zod`` chains with per-type method checks."""

    def __init__(self, zod_target: ZodImportTarget = "auto") -> None:
        self._zod_target: str = zod_target

    # -- Fields ---------------------------------------------------------------

    def extract(self, documentation: Optional[str], context: FieldContext) -> ExtractionResult:
        result: ExtractionResult = ExtractionResult()
        text: str = normalize_documentation(documentation)
        if not text:
            return result

        result.description = clean_description(text)
        result.element_level = "array element" in text.lower()

        for marker in _ZOD_MARKER_RE.finditer(text):
            segments, _, error = _read_chain(text, marker.end())
            if error is not None:
                result.parse_errors.append(error)
                continue
            if not segments:
                result.parse_errors.append("Empty @zod annotation")
                continue
            if segments[0][0] == "custom":
                # custom.use(...) / custom(...) are type-mapping overrides
                continue
            self._interpret(segments, context, result)

        if not result.is_valid:
            logger.debug(
                "Discarding @zod directives on %s: %s",
                context.location,
                result.parse_errors + result.mapping_errors,
            )
            result.directives = []
        return result

    def _interpret(
        self,
        segments: List[Tuple[str, Optional[str]]],
        context: FieldContext,
        result: ExtractionResult,
    ) -> None:
        for name, arguments in segments:
            if arguments is None:
                if name == "element":
                    result.element_level = True
                elif name not in TYPE_QUALIFIERS:
                    result.parse_errors.append(
                        f"@zod.{name} must be called with parentheses"
                    )
                    return
                continue
            if name == "import":
                imports, errors = parse_import_payload(arguments)
                result.custom_imports.extend(imports)
                result.parse_errors.extend(errors)
                continue
            if not self._is_applicable(name, context):
                result.mapping_errors.append(
                    f"Unsupported @zod.{name} for {context.field_type} field "
                    f"{context.location}"
                )
                continue
            if name == "nonempty" and self._zod_target == "v4":
                result.directives.append(ZodDirective("min", ("1",)))
                continue
            result.directives.append(
                ZodDirective(
                    method=name,
                    arguments=tuple(split_arguments(arguments)),
                    replacement=name in REPLACEMENT_METHODS,
                )
            )

    @staticmethod
    def _is_applicable(method: str, context: FieldContext) -> bool:
        if method in COMMON_METHODS or method in REPLACEMENT_METHODS:
            return True
        if context.is_list and method in ARRAY_METHODS:
            return True
        allowed: Optional[FrozenSet[str]] = _TYPE_METHODS.get(context.field_type)
        if allowed is None:
            return method in _ALL_METHODS
        return method in allowed

    # -- Models ---------------------------------------------------------------

    def extract_model(self, documentation: Optional[str], model_name: str) -> ModelExtraction:
        result: ModelExtraction = ModelExtraction()
        text: str = normalize_documentation(documentation)
        if not text:
            return result

        validation: List[Modifier] = []
        for marker in _ZOD_MARKER_RE.finditer(text):
            segments, _, error = _read_chain(text, marker.end())
            if error is not None:
                result.errors.append(error)
                continue
            for name, arguments in segments:
                if arguments is None:
                    result.errors.append(f"@zod.{name} must be called with parentheses")
                    break
                if name == "import":
                    imports, errors = parse_import_payload(arguments)
                    result.custom_imports.extend(imports)
                    result.errors.extend(errors)
                else:
                    validation.append(Modifier(name, arguments, ModifierOrigin.DIRECTIVE))

        if result.errors:
            logger.warning(
                "Model-level @zod annotation issues on %s: %s",
                model_name,
                "; ".join(result.errors),
            )
        result.validation = tuple(validation)
        return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ARRAY_METHODS",
    "AnnotationExtractor",
    "COMMON_METHODS",
    "CustomImport",
    "ExtractionResult",
    "FieldContext",
    "ModelExtraction",
    "REPLACEMENT_METHODS",
    "ZodAnnotationExtractor",
    "ZodDirective",
    "clean_description",
    "normalize_documentation",
    "parse_import_payload",
]

logger.debug("zodgen.annotations loaded.")
