# File: zodgen/expressions.py
"""
zodgen - Schema Expression Builder
==================================
A small AST for Zod schema expressions.

Generated schemas are built as structured values instead of concatenated
strings:

* ``SchemaExpr`` is a *base* constructor (``z.string()``), an array
  *element* (rendered as ``z.array(<element>)``) or a deferred model
  *reference*, followed by an ordered tuple of ``Modifier`` calls.
* every ``Modifier`` remembers its origin (type mapping, ``@zod``
  directive, optionality resolution, default value) so later stages can
  strip or reorder modifiers without regular expressions over text.
* ``DeferredRef`` names another model's schema symbol; it is only turned
  into text when the expression is rendered.

``SchemaExpr.parse`` lifts arbitrary chain text (custom mappings, directive
payloads) into the same structure.  The scanner understands nested
parentheses, brackets and braces, string literals and regex literals, so
``.regex(/^\\d{1,3}(?:\\.\\d+)?$/, "msg")`` is one modifier.  Text that does
not look like a chain is kept verbatim as an opaque base.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterator, List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.expressions")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

OPTIONALITY_MODIFIERS: FrozenSet[str] = frozenset({"optional", "nullable", "nullish"})

_OPENERS: str = "([{"
_CLOSERS: str = ")]}"
_PAIRS = {"(": ")", "[": "]", "{": "}"}
_QUOTES: str = "\"'`"
# A '/' after one of these starts a regex literal rather than a division.
_REGEX_PRECEDERS: FrozenSet[str] = frozenset("(,=:[!&|?{};+")

_IDENT_RE: re.Pattern[str] = re.compile(r"[A-Za-z_$][\w$]*")
_MEMBER_RE: re.Pattern[str] = re.compile(r"\.([A-Za-z_$][\w$]*)")
_SEGMENT_RE: re.Pattern[str] = re.compile(r"\s*\.\s*([A-Za-z_$][\w$]*)\s*(?=\()")


class ModifierOrigin(str, Enum):
    """Which stage attached a modifier."""

    GENERATED = "generated"
    DIRECTIVE = "directive"
    OPTIONALITY = "optionality"
    DEFAULT = "default"


# ---------------------------------------------------------------------------
# Lexical scanning
# ---------------------------------------------------------------------------


def _skip_string(text: str, start: int) -> int:
    """Return the index just past the string literal opening at ``start``."""
    quote: str = text[start]
    i: int = start + 1
    n: int = len(text)
    while i < n:
        ch: str = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return n


def _starts_regex(text: str, index: int) -> bool:
    nxt: str = text[index + 1] if index + 1 < len(text) else ""
    if nxt in ("/", "*", ""):
        return False
    k: int = index - 1
    while k >= 0 and text[k].isspace():
        k -= 1
    return k < 0 or text[k] in _REGEX_PRECEDERS


def _skip_regex(text: str, start: int) -> int:
    """Return the index just past the regex literal (and flags) at ``start``."""
    i: int = start + 1
    n: int = len(text)
    in_class: bool = False
    while i < n:
        ch: str = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "\n":
            return i
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
        elif ch == "/":
            i += 1
            while i < n and text[i].isalpha():
                i += 1
            return i
        i += 1
    return n


def _top_level_positions(text: str) -> Iterator[int]:
    """Yield indices of characters outside any bracket, string or regex."""
    depth: int = 0
    i: int = 0
    n: int = len(text)
    while i < n:
        ch: str = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch == "/" and _starts_regex(text, i):
            i = _skip_regex(text, i)
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif depth == 0:
            yield i
        i += 1


def find_closing(text: str, open_index: int) -> int:
    """
    Index of the bracket closing the one at ``open_index``, or -1.

    Brackets inside string and regex literals are ignored; mismatched
    nesting is reported as -1.
    """
    stack: List[str] = []
    i: int = open_index
    n: int = len(text)
    while i < n:
        ch: str = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch == "/" and stack and _starts_regex(text, i):
            i = _skip_regex(text, i)
            continue
        if ch in _OPENERS:
            stack.append(_PAIRS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                return -1
            if not stack:
                return i
        i += 1
    return -1


def split_arguments(text: str) -> List[str]:
    """Split an argument list at top-level commas."""
    parts: List[str] = []
    last: int = 0
    for i in _top_level_positions(text):
        if text[i] == ",":
            parts.append(text[last:i].strip())
            last = i + 1
    tail: str = text[last:].strip()
    if tail:
        parts.append(tail)
    return [p for p in parts if p]


def _constructor_end(source: str) -> int:
    """
    End index of the leading constructor of a chain, or -1.

    ``z.<path>(...)`` ends at its first call; any other root is either a
    call (``makeSchema()``) or a bare identifier (``UserSchema``).
    """
    m = _IDENT_RE.match(source)
    if m is None:
        return -1
    pos: int = m.end()
    if m.group(0) == "z":
        while True:
            member = _MEMBER_RE.match(source, pos)
            if member is None:
                return -1
            pos = member.end()
            if pos < len(source) and source[pos] == "(":
                close: int = find_closing(source, pos)
                return close + 1 if close >= 0 else -1
    if pos < len(source) and source[pos] == "(":
        close = find_closing(source, pos)
        return close + 1 if close >= 0 else -1
    return pos


# ---------------------------------------------------------------------------
# AST nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Modifier:
    """One ``.name(arguments)`` call in a chain."""

    name: str
    arguments: str = ""
    origin: ModifierOrigin = ModifierOrigin.GENERATED

    def render(self) -> str:
        return f".{self.name}({self.arguments})"

    @property
    def is_optionality(self) -> bool:
        return self.name in OPTIONALITY_MODIFIERS


@dataclass(frozen=True, slots=True)
class DeferredRef:
    """Reference to another model's schema symbol."""

    symbol: str
    model_name: str
    lazy: bool = True

    def render(self) -> str:
        if self.lazy:
            return f"z.lazy(() => {self.symbol})"
        return self.symbol


@dataclass(frozen=True, slots=True)
class SchemaExpr:
    """
    A schema expression: base (or array element, or reference) + modifiers.

    Exactly one of ``element`` / ``reference`` / ``base`` determines how
    the head renders, in that order of precedence.
    """

    base: str = "z.unknown()"
    modifiers: Tuple[Modifier, ...] = ()
    element: Optional[SchemaExpr] = None
    reference: Optional[DeferredRef] = None

    # -- Construction -------------------------------------------------------

    @classmethod
    def parse(
        cls,
        text: str,
        origin: ModifierOrigin = ModifierOrigin.GENERATED,
    ) -> SchemaExpr:
        """Lift chain text into an expression; unparsable text stays opaque."""
        source: str = text.strip()
        if not source:
            return cls()
        pos: int = _constructor_end(source)
        if pos < 0:
            return cls(base=source)
        base: str = source[:pos]
        modifiers: List[Modifier] = []
        while pos < len(source):
            if not source[pos:].strip():
                break
            segment = _SEGMENT_RE.match(source, pos)
            if segment is None:
                return cls(base=source)
            open_index: int = segment.end()
            close: int = find_closing(source, open_index)
            if close < 0:
                return cls(base=source)
            modifiers.append(
                Modifier(segment.group(1), source[open_index + 1:close].strip(), origin)
            )
            pos = close + 1
        if base.startswith("z.array(") and base.endswith(")"):
            inner: List[str] = split_arguments(base[len("z.array("):-1])
            if len(inner) == 1:
                return cls(modifiers=tuple(modifiers), element=cls.parse(inner[0], origin))
        return cls(base=base, modifiers=tuple(modifiers))

    @classmethod
    def parse_chain(
        cls,
        text: str,
        origin: ModifierOrigin = ModifierOrigin.GENERATED,
    ) -> Optional[Tuple[Modifier, ...]]:
        """Parse a bare ``.a().b(x)`` chain; None if it is not one."""
        source: str = text.strip()
        pos: int = 0
        modifiers: List[Modifier] = []
        while pos < len(source):
            if not source[pos:].strip():
                break
            segment = _SEGMENT_RE.match(source, pos)
            if segment is None:
                return None
            open_index: int = segment.end()
            close: int = find_closing(source, open_index)
            if close < 0:
                return None
            modifiers.append(
                Modifier(segment.group(1), source[open_index + 1:close].strip(), origin)
            )
            pos = close + 1
        return tuple(modifiers)

    @classmethod
    def ref(cls, symbol: str, model_name: str, *, lazy: bool = True) -> SchemaExpr:
        return cls(reference=DeferredRef(symbol, model_name, lazy))

    # -- Rendering ----------------------------------------------------------

    def render_head(self) -> str:
        if self.element is not None:
            return f"z.array({self.element.render()})"
        if self.reference is not None:
            return self.reference.render()
        return self.base

    def render(self) -> str:
        return self.render_head() + "".join(m.render() for m in self.modifiers)

    def __str__(self) -> str:
        return self.render()

    # -- Queries ------------------------------------------------------------

    @property
    def is_array(self) -> bool:
        return self.element is not None

    @property
    def target_reference(self) -> Optional[DeferredRef]:
        """The model reference carried directly or by the array element."""
        if self.reference is not None:
            return self.reference
        if self.element is not None:
            return self.element.reference
        return None

    def has(self, *names: str, origin: Optional[ModifierOrigin] = None) -> bool:
        return any(
            m.name in names and (origin is None or m.origin == origin)
            for m in self.modifiers
        )

    def has_optionality(self, origin: Optional[ModifierOrigin] = None) -> bool:
        return self.has(*OPTIONALITY_MODIFIERS, origin=origin)

    # -- Transformation (all return new expressions) ------------------------

    def chain(self, *modifiers: Modifier) -> SchemaExpr:
        return dataclasses.replace(self, modifiers=self.modifiers + tuple(modifiers))

    def call(
        self,
        name: str,
        arguments: str = "",
        origin: ModifierOrigin = ModifierOrigin.GENERATED,
    ) -> SchemaExpr:
        return self.chain(Modifier(name, arguments, origin))

    def without(self, *names: str, origin: Optional[ModifierOrigin] = None) -> SchemaExpr:
        kept: Tuple[Modifier, ...] = tuple(
            m for m in self.modifiers
            if not (m.name in names and (origin is None or m.origin == origin))
        )
        return dataclasses.replace(self, modifiers=kept)

    def without_origin(self, origin: ModifierOrigin) -> SchemaExpr:
        return dataclasses.replace(
            self, modifiers=tuple(m for m in self.modifiers if m.origin != origin)
        )

    def with_modifiers(self, modifiers: Tuple[Modifier, ...]) -> SchemaExpr:
        return dataclasses.replace(self, modifiers=tuple(modifiers))

    def as_array(self) -> SchemaExpr:
        """Wrap as ``z.array(self)``."""
        return SchemaExpr(element=self)


# ---------------------------------------------------------------------------
# Literal inference
# ---------------------------------------------------------------------------


def schema_from_json_value(value: Any) -> str:
    """
    Infer a structural schema from a decoded JSON value.

    Arrays are typed by their first element; objects become ``z.object``
    with one entry per key.
    Numbers with no fractional part count as integers, so ``1.0`` and
    ``1`` infer the same schema.
    """
    if value is None:
        return "z.null()"
    if isinstance(value, bool):
        return "z.boolean()"
    if isinstance(value, int) or (isinstance(value, float) and value.is_integer()):
        return "z.number().int()"
    if isinstance(value, float):
        return "z.number()"
    if isinstance(value, str):
        return "z.string()"
    if isinstance(value, list):
        inner: str = schema_from_json_value(value[0]) if value else "z.unknown()"
        return f"z.array({inner})"
    if isinstance(value, dict):
        if not value:
            return "z.object({})"
        entries: str = ", ".join(
            f"{json.dumps(str(k))}: {schema_from_json_value(v)}" for k, v in value.items()
        )
        return f"z.object({{ {entries} }})"
    return "z.unknown()"


def render_literal(value: Any) -> str:
    """Render a Python literal as TypeScript source."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(value)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DeferredRef",
    "Modifier",
    "ModifierOrigin",
    "OPTIONALITY_MODIFIERS",
    "SchemaExpr",
    "find_closing",
    "render_literal",
    "schema_from_json_value",
    "split_arguments",
]

logger.debug("zodgen.expressions loaded.")
