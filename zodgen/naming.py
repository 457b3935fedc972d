# File: zodgen/naming.py
"""
zodgen - Naming Resolver
========================
Turns model and enum names into file names and export symbols, and back.

Naming is driven by *patterns* with tokens:

    {Model} / {Enum}     entity name as declared
    {model} / {enum}     entity name, lower-cased
    {camel}              camelCase entity name
    {kebab}              kebab-case entity name (file names only)
    {SchemaSuffix}       configured schema suffix
    {TypeSuffix}         configured type suffix

A preset supplies every value; explicit ``naming.pureModel`` /
``naming.enum`` options override single entries.  Export patterns are
invertible: ``parse_symbol`` maps a generated symbol back to the entity
name, which is how imports are traced to the modules that define them.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from zodgen.models import EnumNamingOptions, NamingConfig, PureModelNamingOptions
from zodgen.utils import to_camel_case, to_kebab_case, upper_first

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.naming")

_TOKEN_SPLIT_RE: re.Pattern[str] = re.compile(r"(\{[A-Za-z]+\})")


class EntityKind(str, Enum):
    MODEL = "model"
    ENUM = "enum"


@dataclass(frozen=True, slots=True)
class ModelNaming:
    """Resolved naming for model schema modules."""

    file_pattern: str
    schema_suffix: str
    type_suffix: str
    export_name_pattern: str
    legacy_aliases: bool


@dataclass(frozen=True, slots=True)
class EnumNaming:
    """Resolved naming for enum schema modules."""

    file_pattern: str
    export_name_pattern: str


NAMING_PRESETS: Dict[str, ModelNaming] = {
    "default": ModelNaming(
        file_pattern="{Model}.schema.ts",
        schema_suffix="Schema",
        type_suffix="Type",
        export_name_pattern="{Model}{SchemaSuffix}",
        legacy_aliases=False,
    ),
    "zod-prisma": ModelNaming(
        file_pattern="{model}.ts",
        schema_suffix="Model",
        type_suffix="",
        export_name_pattern="{Model}{SchemaSuffix}",
        legacy_aliases=True,
    ),
    "zod-prisma-types": ModelNaming(
        file_pattern="{Model}.schema.ts",
        schema_suffix="Schema",
        type_suffix="",
        export_name_pattern="{Model}{SchemaSuffix}",
        legacy_aliases=False,
    ),
    "legacy-model-suffix": ModelNaming(
        file_pattern="{Model}.model.ts",
        schema_suffix="Model",
        type_suffix="",
        export_name_pattern="{Model}{SchemaSuffix}",
        legacy_aliases=False,
    ),
}

DEFAULT_ENUM_NAMING: EnumNaming = EnumNaming(
    file_pattern="{Enum}.schema.ts",
    export_name_pattern="{Enum}Schema",
)


# ---------------------------------------------------------------------------
# Pattern helpers
# ---------------------------------------------------------------------------


def _entity_token(kind: EntityKind) -> str:
    return "Model" if kind == EntityKind.MODEL else "Enum"


def apply_pattern(
    pattern: str,
    name: str,
    *,
    kind: EntityKind = EntityKind.MODEL,
    schema_suffix: str = "",
    type_suffix: str = "",
) -> str:
    """Substitute every naming token of ``pattern`` for entity ``name``."""
    token: str = _entity_token(kind)
    replacements: Dict[str, str] = {
        "{" + token + "}": name,
        "{" + token.lower() + "}": name.lower(),
        "{camel}": to_camel_case(name),
        "{kebab}": to_kebab_case(name),
        "{SchemaSuffix}": schema_suffix,
        "{TypeSuffix}": type_suffix,
    }
    result: str = pattern
    for placeholder, value in replacements.items():
        result = result.replace(placeholder, value)
    return result


def parse_pattern_symbol(
    symbol: str,
    pattern: str,
    *,
    kind: EntityKind = EntityKind.MODEL,
    schema_suffix: str = "",
    type_suffix: str = "",
) -> Optional[str]:
    """
    Invert ``apply_pattern`` for an export symbol.

    Returns the entity name, or None when ``symbol`` was not produced by
    ``pattern``.  ``{model}`` can only be inverted up to capitalisation of
    the first letter.
    """
    token: str = _entity_token(kind)
    exact: str = "{" + token + "}"
    lowered: str = "{" + token.lower() + "}"
    parts: List[str] = []
    capitalise: bool = False
    seen_name: bool = False

    for piece in _TOKEN_SPLIT_RE.split(pattern):
        if not piece:
            continue
        if piece in (exact, lowered, "{camel}"):
            if seen_name:
                parts.append("(?P=name)")
            else:
                parts.append(r"(?P<name>[A-Za-z_$][\w$]*?)")
                capitalise = piece != exact
                seen_name = True
        elif piece == "{SchemaSuffix}":
            parts.append(re.escape(schema_suffix))
        elif piece == "{TypeSuffix}":
            parts.append(re.escape(type_suffix))
        else:
            parts.append(re.escape(piece))

    if not seen_name:
        return None
    match = re.fullmatch("".join(parts), symbol)
    if match is None:
        return None
    name: str = match.group("name")
    return upper_first(name) if capitalise else name


def resolve_model_naming(config: Optional[NamingConfig]) -> ModelNaming:
    """Preset values, overridden by explicit ``pureModel`` options."""
    preset_name: str = (config.preset if config and config.preset else "default")
    base: ModelNaming = NAMING_PRESETS.get(preset_name, NAMING_PRESETS["default"])
    overrides: Optional[PureModelNamingOptions] = config.pure_model if config else None
    if overrides is None:
        return base
    return dataclasses.replace(
        base,
        **{
            key: value
            for key, value in (
                ("file_pattern", overrides.file_pattern),
                ("schema_suffix", overrides.schema_suffix),
                ("type_suffix", overrides.type_suffix),
                ("export_name_pattern", overrides.export_name_pattern),
                ("legacy_aliases", overrides.legacy_aliases),
            )
            if value is not None
        },
    )


def resolve_enum_naming(config: Optional[NamingConfig]) -> EnumNaming:
    overrides: Optional[EnumNamingOptions] = config.enum if config else None
    if overrides is None:
        return DEFAULT_ENUM_NAMING
    return EnumNaming(
        file_pattern=overrides.file_pattern or DEFAULT_ENUM_NAMING.file_pattern,
        export_name_pattern=(
            overrides.export_name_pattern or DEFAULT_ENUM_NAMING.export_name_pattern
        ),
    )


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class NamingResolver:
    """
    Resolve symbols and file names for models and enums.

    Stateless apart from the resolved naming; safe to share for a run.
    """

    def __init__(self, naming: Optional[NamingConfig] = None) -> None:
        self._config: Optional[NamingConfig] = naming
        self._model: ModelNaming = resolve_model_naming(naming)
        self._enum: EnumNaming = resolve_enum_naming(naming)
        logger.debug(
            "NamingResolver: preset=%s file=%s export=%s",
            naming.preset if naming else None,
            self._model.file_pattern,
            self._model.export_name_pattern,
        )

    @property
    def model_naming(self) -> ModelNaming:
        return self._model

    @property
    def enum_naming(self) -> EnumNaming:
        return self._enum

    @property
    def type_suffix(self) -> str:
        return self._model.type_suffix

    @property
    def legacy_aliases(self) -> Optional[bool]:
        """
        Legacy-alias choice made by naming options or forced by a preset.

        None means naming has no opinion and ``legacyModelAlias`` decides.
        """
        explicit: Optional[PureModelNamingOptions] = (
            self._config.pure_model if self._config else None
        )
        if explicit is not None and explicit.legacy_aliases is not None:
            return explicit.legacy_aliases
        if self._config is not None and self._config.preset is not None:
            return True if self._model.legacy_aliases else None
        return None

    def legacy_aliases_enabled(self, legacy_model_alias: bool = True) -> bool:
        choice: Optional[bool] = self.legacy_aliases
        return legacy_model_alias if choice is None else choice

    def _patterns(self, kind: EntityKind) -> Tuple[str, str]:
        if kind == EntityKind.MODEL:
            return self._model.file_pattern, self._model.export_name_pattern
        return self._enum.file_pattern, self._enum.export_name_pattern

    def schema_symbol(self, kind: EntityKind, name: str) -> str:
        _, export_pattern = self._patterns(kind)
        return apply_pattern(
            export_pattern,
            name,
            kind=kind,
            schema_suffix=self._model.schema_suffix,
            type_suffix=self._model.type_suffix,
        )

    def file_name(self, kind: EntityKind, name: str) -> str:
        file_pattern, _ = self._patterns(kind)
        return apply_pattern(
            file_pattern,
            name,
            kind=kind,
            schema_suffix=self._model.schema_suffix,
            type_suffix=self._model.type_suffix,
        )

    def module_specifier(self, kind: EntityKind, name: str, extension: str = "") -> str:
        """File name without ``.ts``, plus the configured import extension."""
        file_name: str = self.file_name(kind, name)
        if file_name.endswith(".ts"):
            file_name = file_name[:-3]
        return f"{file_name}{extension}"

    def parse_symbol(self, kind: EntityKind, symbol: str) -> Optional[str]:
        _, export_pattern = self._patterns(kind)
        return parse_pattern_symbol(
            symbol,
            export_pattern,
            kind=kind,
            schema_suffix=self._model.schema_suffix,
            type_suffix=self._model.type_suffix,
        )

    def type_alias_name(self, model_name: str, schema_name: str) -> str:
        default_schema: str = apply_pattern(
            "{Model}{SchemaSuffix}", model_name, schema_suffix=self._model.schema_suffix
        )
        if schema_name == default_schema:
            return f"{model_name}{self._model.type_suffix}"
        if self._model.type_suffix:
            return f"{schema_name}{self._model.type_suffix}"
        return model_name

    @staticmethod
    def legacy_alias_name(model_name: str) -> str:
        return f"{model_name}Model"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_ENUM_NAMING",
    "EntityKind",
    "EnumNaming",
    "ModelNaming",
    "NAMING_PRESETS",
    "NamingResolver",
    "apply_pattern",
    "parse_pattern_symbol",
    "resolve_enum_naming",
    "resolve_model_naming",
]

logger.debug("zodgen.naming loaded.")
