# File: zodgen/templates.py
"""
zodgen - File Content Assembler
===============================
Turns composed models into TypeScript module text.

Outputs:
    1. one schema module per model (``SchemaRenderer.render``)
    2. one module per enum (``SchemaRenderer.render_enum``)
    3. the models index (``SchemaRenderer.render_index``)

**Rendering contract:**
    - String assembly uses ``List[str]`` + ``"\\n".join()``.
    - The schema body is rendered first; imports are then filtered down
      to the symbols the body actually references.
    - Lean mode only drops comments (header, JSDoc, notes, statistics);
      the validation semantics of the output are identical.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from zodgen.annotations import CustomImport
from zodgen.composer import ComposedFieldSchema, ModelSchemaComposition
from zodgen.expressions import ModifierOrigin, SchemaExpr
from zodgen.models import EnumDescriptor, GeneratorConfig
from zodgen.naming import EntityKind, NamingResolver
from zodgen.type_mapper import PRISMA_IMPORT, ZOD_IMPORT
from zodgen.utils import indent_lines, word_pattern

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

GENERATOR_NAME: str = "zodgen"
INDEX_FILE_NAME: str = "index.ts"
_ENUM_IMPORT_DIR: str = "../enums"


@dataclass(slots=True)
class OutputModule:
    """Rendered text of one generated module plus what it imports and exports."""

    filename: str
    content: str
    imports: Set[str] = field(default_factory=set)
    exports: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)


def zod_import_statement(zod_target: str) -> str:
    module: str = "zod/v4" if zod_target == "v4" else "zod"
    return f"import * as z from '{module}';"


def _quote(value: str) -> str:
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class SchemaRenderer:
    """
    Stateless renderer bound to one generator configuration.

    Safe to reuse for every model and enum of a run.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        naming: Optional[NamingResolver] = None,
    ) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._naming: NamingResolver = naming or NamingResolver(self._config.naming)
        self._lean: bool = self._config.pure_models_lean
        self._extension: str = self._config.import_file_extension

    @property
    def lean(self) -> bool:
        return self._lean

    @property
    def naming(self) -> NamingResolver:
        return self._naming

    # -- Model modules ---------------------------------------------------------

    def model_file_name(self, model_name: str) -> str:
        return self._naming.file_name(EntityKind.MODEL, model_name)

    def render(self, composition: ModelSchemaComposition) -> OutputModule:
        """Render one model module; see the module docstring for the layout."""
        lines: List[str] = []

        if not self._lean:
            lines.append("/**")
            lines.append(f" * Generated Zod schema for {composition.model_name} model")
            lines.append(f" * @generated {composition.metadata.timestamp}")
            lines.append(f" * @generator {GENERATOR_NAME}")
            lines.append(" */")
            lines.append("")

        definition: List[str] = self.render_schema_definition(composition)
        type_definition: List[str] = self.render_type_definition(composition)
        body: str = "\n".join(definition + type_definition)

        import_lines: List[str] = self.render_imports(composition, body)
        if import_lines:
            lines.extend(import_lines)
            lines.append("")

        if not self._lean and composition.documentation:
            lines.append(composition.documentation)

        lines.extend(definition)
        lines.append("")
        lines.extend(type_definition)
        lines.append("")

        if not self._lean:
            lines.extend(self.render_statistics(composition))

        return OutputModule(
            filename=self.model_file_name(composition.model_name),
            content="\n".join(lines),
            imports=set(composition.imports),
            exports=list(composition.exports),
            dependencies=self.schema_dependencies(composition, body),
        )

    def render_imports(self, composition: ModelSchemaComposition, body: str) -> List[str]:
        """Import statements for every symbol ``body`` references."""
        lines: List[str] = []
        if ZOD_IMPORT in composition.imports:
            lines.append(zod_import_statement(self._config.zod_import_target))

        lines.extend(
            custom.statement
            for custom in self._used_custom_imports(composition.custom_imports, body)
        )

        for symbol in sorted(composition.enum_symbols):
            if not word_pattern(symbol).search(body):
                continue
            enum_name: str = self._enum_name_for(symbol)
            specifier: str = self._naming.module_specifier(
                EntityKind.ENUM, enum_name, self._extension
            )
            lines.append(f"import {{ {symbol} }} from '{_ENUM_IMPORT_DIR}/{specifier}';")

        if PRISMA_IMPORT in composition.imports and word_pattern(PRISMA_IMPORT).search(body):
            lines.append(f"import {{ {PRISMA_IMPORT} }} from '@prisma/client';")

        for symbol in composition.related_symbols:
            if not word_pattern(symbol).search(body):
                continue
            model_name: str = composition.model_symbols[symbol]
            specifier = self._naming.module_specifier(
                EntityKind.MODEL, model_name, self._extension
            )
            lines.append(f"import {{ {symbol} }} from './{specifier}';")
        return lines

    @staticmethod
    def _used_custom_imports(
        custom_imports: Iterable[CustomImport], body: str
    ) -> List[CustomImport]:
        used: List[CustomImport] = []
        for custom in custom_imports:
            if not custom.imported_items or any(
                word_pattern(item).search(body) for item in custom.imported_items
            ):
                used.append(custom)
        return sorted(used, key=lambda c: c.statement)

    def _enum_name_for(self, symbol: str) -> str:
        parsed: Optional[str] = self._naming.parse_symbol(EntityKind.ENUM, symbol)
        if parsed:
            return parsed
        if symbol.endswith("Schema"):
            return symbol[: -len("Schema")]
        return symbol

    def schema_dependencies(self, composition: ModelSchemaComposition, body: str) -> List[str]:
        """Names of the other models whose schemas ``body`` references."""
        return sorted(
            {
                composition.model_symbols[symbol]
                for symbol in composition.related_symbols
                if word_pattern(symbol).search(body)
            }
        )

    # -- Schema body -------------------------------------------------------------

    def field_expression(self, composed: ComposedFieldSchema) -> SchemaExpr:
        """
        Final expression for one field.

        The resolver's ``.optional()`` is removed; schema-optional fields get
        the configured behavior unless their chain already carries optionality.
        Required fields with a default therefore stay required here.
        """
        expression: SchemaExpr = composed.expression.without(
            "optional", origin=ModifierOrigin.OPTIONALITY
        )
        if composed.is_optional and not expression.has_optionality():
            behavior: str = self._config.optional_field_behavior
            expression = expression.call(behavior, origin=ModifierOrigin.OPTIONALITY)
        return expression

    @staticmethod
    def getter_return_type(expression: SchemaExpr) -> str:
        reference = expression.target_reference
        target: str = reference.symbol if reference is not None else expression.render_head()
        return_type: str = (
            f"z.ZodArray<typeof {target}>" if expression.is_array else f"typeof {target}"
        )
        if expression.has("nullish"):
            return f"z.ZodOptional<z.ZodNullable<{return_type}>>"
        if expression.has("nullable"):
            return_type = f"z.ZodNullable<{return_type}>"
        if expression.has("optional"):
            return_type = f"z.ZodOptional<{return_type}>"
        return return_type

    def render_field(self, composed: ComposedFieldSchema) -> str:
        expression: SchemaExpr = self.field_expression(composed)
        if (
            self._config.uses_v4
            and composed.is_relation
            and expression.target_reference is not None
        ):
            return (
                f"  get {composed.field_name}(): {self.getter_return_type(expression)} "
                f"{{ return {expression.render()}; }},"
            )
        return f"  {composed.field_name}: {expression.render()},"

    def render_schema_definition(self, composition: ModelSchemaComposition) -> List[str]:
        lines: List[str] = [f"export const {composition.schema_name} = z.object({{"]

        for composed in composition.fields:
            if not self._lean and composed.documentation:
                lines.extend(indent_lines(composed.documentation.split("\n")))
            lines.append(self.render_field(composed))
            if not self._lean:
                lines.extend(f"  {note}" for note in composed.notes)
                lines.append("")

        if lines[-1] == "":
            lines.pop()

        chain: str = "".join(m.render() for m in composition.model_level_validation)
        lines.append(f"}}){chain};")
        return lines

    def render_type_definition(self, composition: ModelSchemaComposition) -> List[str]:
        lines: List[str] = []
        if not self._lean:
            lines.append("/**")
            lines.append(f" * Inferred TypeScript type for {composition.model_name}")
            lines.append(" */")
        lines.append(
            f"export type {composition.type_name} = z.infer<typeof {composition.schema_name}>;"
        )
        if composition.legacy_alias:
            lines.append("")
            lines.append(f"export const {composition.legacy_alias} = {composition.schema_name};")
        return lines

    @staticmethod
    def render_statistics(composition: ModelSchemaComposition) -> List[str]:
        stats = composition.statistics
        return [
            "/**",
            " * Schema Statistics:",
            f" * - Total fields: {stats.total_fields}",
            f" * - Processed fields: {stats.processed_fields}",
            f" * - Fields with validations: {stats.validated_fields}",
            f" * - Enhanced fields: {stats.enhanced_fields}",
            f" * - Relation fields: {stats.relation_fields}",
            f" * - Complex type fields: {stats.complex_type_fields}",
            " */",
        ]

    # -- Enum modules ------------------------------------------------------------

    def render_enum(self, enum: EnumDescriptor) -> OutputModule:
        symbol: str = self._naming.schema_symbol(EntityKind.ENUM, enum.name)
        values: str = ", ".join(_quote(v) for v in enum.values)
        lines: List[str] = []
        if not self._lean:
            lines.append("/**")
            lines.append(f" * Generated Zod schema for {enum.name} enum")
            lines.append(f" * @generator {GENERATOR_NAME}")
            lines.append(" */")
            lines.append("")
        lines.append(zod_import_statement(self._config.zod_import_target))
        lines.append("")
        lines.append(f"export const {symbol} = z.enum([{values}]);")
        lines.append("")
        lines.append(f"export type {enum.name} = z.infer<typeof {symbol}>;")
        lines.append("")
        return OutputModule(
            filename=self._naming.file_name(EntityKind.ENUM, enum.name),
            content="\n".join(lines),
            imports={ZOD_IMPORT},
            exports=[symbol, enum.name],
        )

    # -- Index -------------------------------------------------------------------

    def render_index(self, model_names: Iterable[str]) -> OutputModule:
        """Re-export every model module, sorted by model name."""
        names: List[str] = sorted(set(model_names))
        lines: List[str] = [
            "/**",
            " * Generated Zod schemas index",
            f" * @generated automatically by {GENERATOR_NAME}",
            " */",
            "",
        ]
        if names:
            for name in names:
                specifier: str = self._naming.module_specifier(
                    EntityKind.MODEL, name, self._extension
                )
                lines.append(f"export * from './{specifier}';")
        else:
            lines.append("// No schemas generated")
        lines.append("")
        return OutputModule(
            filename=INDEX_FILE_NAME,
            content="\n".join(lines),
            dependencies=names,
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GENERATOR_NAME",
    "INDEX_FILE_NAME",
    "OutputModule",
    "SchemaRenderer",
    "zod_import_statement",
]

logger.debug("zodgen.templates loaded.")
