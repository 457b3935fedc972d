# File: zodgen/models.py
"""
zodgen - Core Data Models
=========================
Pydantic V2 models for the two inputs of the schema engine:

* the **data model** (models, fields, enums) as delivered by an upstream
  schema parser, in DMMF-like shape, and
* the **generator configuration** that tunes type mapping, optionality,
  naming and output.

Descriptors are frozen once validated.  Keys are accepted both in their
on-disk camelCase spelling (``isList``, ``relationFromFields``) and in
snake_case.

The closed field variant (``ScalarField | EnumField | RelationField |
UnsupportedField``) is what the type mapper dispatches on; ``FieldKind``
is the raw tag read from the input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.models")

# ---------------------------------------------------------------------------
# Enums - fixed sets used across the entire project
# ---------------------------------------------------------------------------


class FieldKind(str, Enum):
    """Raw field kind tag, as found in the data model document."""

    SCALAR = "scalar"
    ENUM = "enum"
    OBJECT = "object"
    UNSUPPORTED = "unsupported"


class ScalarKind(str, Enum):
    """The closed set of built-in scalar types the mapper knows about."""

    STRING = "String"
    INT = "Int"
    BIGINT = "BigInt"
    FLOAT = "Float"
    DECIMAL = "Decimal"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    JSON = "Json"
    BYTES = "Bytes"

    @classmethod
    def from_type_name(cls, type_name: str) -> Optional["ScalarKind"]:
        for member in cls:
            if member.value == type_name:
                return member
        return None


class DatabaseProvider(str, Enum):
    """Datasource providers with provider-specific notes."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"
    MONGODB = "mongodb"
    COCKROACHDB = "cockroachdb"


OptionalFieldBehavior = Literal["optional", "nullable", "nullish"]
DecimalMode = Literal["string", "number", "decimal"]
JsonMode = Literal["unknown", "record", "any"]
DateTimeStrategy = Literal["date", "coerce", "isoString"]
ZodImportTarget = Literal["auto", "v3", "v4"]
NamingPreset = Literal["default", "zod-prisma", "zod-prisma-types", "legacy-model-suffix"]

SUPPORTED_PROVIDERS: FrozenSet[str] = frozenset(p.value for p in DatabaseProvider)


# ---------------------------------------------------------------------------
# Mixin: shared model configuration
# ---------------------------------------------------------------------------

# Descriptors come from an external parser that carries extra keys
# (dbName, isGenerated, nativeType, ...); they are ignored, not rejected.
_DESCRIPTOR_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=True,
    frozen=True,
    extra="ignore",
    alias_generator=to_camel,
)

# Config files grow keys over time; unknown keys are tolerated.
_OPTIONS_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    use_enum_values=True,
    frozen=False,
    extra="ignore",
    alias_generator=to_camel,
)


# ---------------------------------------------------------------------------
# Closed field variant
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ScalarField:
    """A scalar field. ``scalar`` is None for custom (unknown) scalar names."""

    type_name: str
    scalar: Optional[ScalarKind]


@dataclass(frozen=True, slots=True)
class EnumField:
    enum_name: str


@dataclass(frozen=True, slots=True)
class RelationField:
    """A reference to another model; ``relation_name`` None means unresolved."""

    target_model: str
    relation_name: Optional[str]
    from_fields: Tuple[str, ...]

    @property
    def is_back_relation(self) -> bool:
        return not self.from_fields


@dataclass(frozen=True, slots=True)
class UnsupportedField:
    kind: str
    type_name: str


FieldVariant = Union[ScalarField, EnumField, RelationField, UnsupportedField]


# ---------------------------------------------------------------------------
# Data model descriptors
# ---------------------------------------------------------------------------


class DefaultValue(BaseModel):
    """
    Field default descriptor.

    Either a generator function (``now()``, ``uuid()``, ``autoincrement()``)
    or a literal value.
    """

    model_config = _DESCRIPTOR_CONFIG

    function: Optional[str] = Field(
        default=None, description="Generator function name, e.g. 'now'."
    )
    args: List[Any] = Field(default_factory=list, description="Function arguments.")
    value: Any = Field(default=None, description="Literal default value.")

    @property
    def is_function(self) -> bool:
        return self.function is not None

    def describe(self) -> str:
        if self.function is not None:
            return f"{self.function}()"
        return str(self.value)


class FieldDescriptor(BaseModel):
    """
    One field of one model.

    The most granular building block: every field of every model becomes
    exactly one ``FieldDescriptor`` and, later, one composed field schema.
    """

    model_config = _DESCRIPTOR_CONFIG

    name: str = Field(..., min_length=1, description="Field name.")
    kind: str = Field(
        default=FieldKind.SCALAR.value,
        description="Field kind tag: scalar, enum, object; anything else is unsupported.",
    )
    type: str = Field(..., min_length=1, description="Scalar, enum or model name.")
    is_list: bool = Field(default=False)
    is_required: bool = Field(default=True)
    has_default_value: bool = Field(default=False)
    default: Optional[DefaultValue] = Field(default=None)
    is_id: bool = Field(default=False)
    is_unique: bool = Field(default=False)
    is_updated_at: bool = Field(default=False)
    relation_name: Optional[str] = Field(default=None)
    relation_from_fields: List[str] = Field(default_factory=list)
    documentation: Optional[str] = Field(default=None)

    @field_validator("default", mode="before")
    @classmethod
    def _coerce_default(cls, v: Any) -> Any:
        if v is None or isinstance(v, DefaultValue):
            return v
        if isinstance(v, dict):
            if "name" in v:
                return {"function": v["name"], "args": v.get("args") or []}
            if "function" in v or "value" in v:
                return v
        return {"value": v}

    @model_validator(mode="before")
    @classmethod
    def _default_implies_flag(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("default") is not None:
            if "hasDefaultValue" not in data and "has_default_value" not in data:
                data = dict(data)
                data["has_default_value"] = True
        return data

    # -- Derived helpers ----------------------------------------------------

    @property
    def variant(self) -> FieldVariant:
        """Project the raw kind/type pair onto the closed variant."""
        if self.kind == FieldKind.SCALAR:
            return ScalarField(self.type, ScalarKind.from_type_name(self.type))
        if self.kind == FieldKind.ENUM:
            return EnumField(self.type)
        if self.kind == FieldKind.OBJECT:
            return RelationField(
                self.type, self.relation_name, tuple(self.relation_from_fields)
            )
        return UnsupportedField(self.kind, self.type)

    @property
    def scalar_kind(self) -> Optional[ScalarKind]:
        if self.kind != FieldKind.SCALAR:
            return None
        return ScalarKind.from_type_name(self.type)

    @property
    def is_relation(self) -> bool:
        return self.kind == FieldKind.OBJECT

    @property
    def is_enum(self) -> bool:
        return self.kind == FieldKind.ENUM

    @property
    def default_function(self) -> Optional[str]:
        if self.default is None:
            return None
        return self.default.function

    def __repr__(self) -> str:
        suffix = "[]" if self.is_list else ("" if self.is_required else "?")
        return f"<FieldDescriptor {self.name}: {self.type}{suffix}>"


class ModelDescriptor(BaseModel):
    """A named, ordered collection of fields."""

    model_config = _DESCRIPTOR_CONFIG

    name: str = Field(..., min_length=1, description="Model name (PascalCase).")
    fields: List[FieldDescriptor] = Field(default_factory=list)
    documentation: Optional[str] = Field(default=None)

    _field_map: Dict[str, FieldDescriptor] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _build_field_map(self) -> "ModelDescriptor":
        self._field_map = {f.name: f for f in self.fields}
        return self

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        """O(1) field lookup by name."""
        return self._field_map.get(name)

    @computed_field  # type: ignore[misc]
    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @computed_field  # type: ignore[misc]
    @property
    def relation_fields(self) -> List[str]:
        return [f.name for f in self.fields if f.is_relation]

    def __repr__(self) -> str:
        return f"<ModelDescriptor {self.name} ({len(self.fields)} fields)>"


class EnumDescriptor(BaseModel):
    """A named, ordered set of string values."""

    model_config = _DESCRIPTOR_CONFIG

    name: str = Field(..., min_length=1)
    values: List[str] = Field(default_factory=list)
    documentation: Optional[str] = Field(default=None)

    @field_validator("values", mode="before")
    @classmethod
    def _flatten_values(cls, v: Any) -> Any:
        # DMMF lists enum values as {"name": ..., "dbName": ...}
        if isinstance(v, list):
            return [item["name"] if isinstance(item, dict) else item for item in v]
        return v

    @field_validator("values")
    @classmethod
    def _unique_values(cls, v: List[str]) -> List[str]:
        if len(v) != len(set(v)):
            dupes: List[str] = sorted({x for x in v if v.count(x) > 1})
            raise ValueError(f"Duplicate enum values detected: {dupes}")
        return v


class DataModel(BaseModel):
    """The whole parsed data model: models, enums and datasource provider."""

    model_config = _DESCRIPTOR_CONFIG

    models: List[ModelDescriptor] = Field(default_factory=list)
    enums: List[EnumDescriptor] = Field(default_factory=list)
    provider: Optional[str] = Field(default=None, description="Datasource provider.")

    _model_map: Dict[str, ModelDescriptor] = PrivateAttr(default_factory=dict)
    _enum_map: Dict[str, EnumDescriptor] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _build_lookup_maps(self) -> "DataModel":
        self._model_map = {m.name: m for m in self.models}
        self._enum_map = {e.name: e for e in self.enums}
        return self

    def get_model(self, name: str) -> Optional[ModelDescriptor]:
        return self._model_map.get(name)

    def get_enum(self, name: str) -> Optional[EnumDescriptor]:
        return self._enum_map.get(name)

    @property
    def model_names(self) -> List[str]:
        return [m.name for m in self.models]

    @property
    def enum_names(self) -> List[str]:
        return [e.name for e in self.enums]


# ---------------------------------------------------------------------------
# Complex type options
# ---------------------------------------------------------------------------


class DecimalOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    validate_precision: bool = Field(default=True)
    max_precision: int = Field(default=18, ge=1)
    max_scale: int = Field(default=8, ge=0)
    allow_negative: bool = Field(default=True)

    @model_validator(mode="after")
    def _scale_within_precision(self) -> "DecimalOptions":
        if self.max_scale > self.max_precision:
            raise ValueError(
                f"maxScale ({self.max_scale}) cannot exceed "
                f"maxPrecision ({self.max_precision})."
            )
        return self


class DateTimeOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    allow_future: bool = Field(default=True)
    allow_past: bool = Field(default=True)
    min_date: Optional[str] = Field(default=None, description="ISO 8601 lower bound.")
    max_date: Optional[str] = Field(default=None, description="ISO 8601 upper bound.")
    timezone_mode: Literal["utc", "local", "preserve"] = Field(default="preserve")


class JsonOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    max_depth: Optional[int] = Field(default=10, ge=1)
    max_length: Optional[int] = Field(default=None, ge=1)
    allow_null: bool = Field(default=True)
    validate_structure: bool = Field(default=False)


class BytesOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    max_size: int = Field(default=16 * 1024 * 1024, ge=0, description="Bytes.")
    min_size: int = Field(default=0, ge=0, description="Bytes.")
    allowed_mime_types: List[str] = Field(default_factory=list)
    use_base64: bool = Field(default=True)


class ComplexTypeOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    decimal: DecimalOptions = Field(default_factory=DecimalOptions)
    date_time: DateTimeOptions = Field(default_factory=DateTimeOptions)
    json_options: JsonOptions = Field(default_factory=JsonOptions, alias="json")
    bytes_options: BytesOptions = Field(default_factory=BytesOptions, alias="bytes")


class JsonSchemaOptions(BaseModel):
    """Representation choices used when schemas must be JSON-Schema friendly."""

    model_config = _OPTIONS_CONFIG

    date_time_format: Literal["isoString", "isoDate"] = Field(default="isoString")
    big_int_format: Literal["string", "number"] = Field(default="string")
    bytes_format: Literal["base64String", "hexString"] = Field(default="base64String")
    conversion_options: Dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Type-mapping configuration (read-only during a run)
# ---------------------------------------------------------------------------


class TypeMappingConfig(BaseModel):
    """
    Everything the type mapper needs, frozen for the duration of a run.

    Built by ``GeneratorConfig.type_mapping_config`` and threaded through
    every mapping call explicitly.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
    )

    decimal_mode: DecimalMode = Field(default="decimal")
    json_mode: JsonMode = Field(default="unknown")
    strict_date_validation: bool = Field(default=True)
    validate_big_int: bool = Field(default=True)
    include_database_validations: bool = Field(default=True)
    provider: str = Field(default="postgresql")
    zod_import_target: ZodImportTarget = Field(default="auto")
    json_schema_compatible: bool = Field(default=False)
    json_schema_options: JsonSchemaOptions = Field(default_factory=JsonSchemaOptions)
    date_time_strategy: DateTimeStrategy = Field(default="date")
    custom_type_mappings: Dict[str, str] = Field(default_factory=dict)
    complex_types: ComplexTypeOptions = Field(default_factory=ComplexTypeOptions)

    @property
    def uses_v4(self) -> bool:
        return self.zod_import_target == "v4"


# ---------------------------------------------------------------------------
# Naming configuration
# ---------------------------------------------------------------------------


class PureModelNamingOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    file_pattern: Optional[str] = Field(default=None)
    schema_suffix: Optional[str] = Field(default=None)
    type_suffix: Optional[str] = Field(default=None)
    export_name_pattern: Optional[str] = Field(default=None)
    legacy_aliases: Optional[bool] = Field(default=None)

    @field_validator("file_pattern")
    @classmethod
    def _ts_file(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.endswith(".ts"):
            raise ValueError(f"filePattern must end with '.ts', got {v!r}.")
        return v

    @field_validator("export_name_pattern")
    @classmethod
    def _has_model_token(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not any(t in v for t in ("{Model}", "{model}", "{camel}")):
            raise ValueError(
                f"exportNamePattern must contain {{Model}}, {{model}} or {{camel}}, got {v!r}."
            )
        return v


class EnumNamingOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    file_pattern: Optional[str] = Field(default=None)
    export_name_pattern: Optional[str] = Field(default=None)

    @field_validator("file_pattern")
    @classmethod
    def _ts_file(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.endswith(".ts"):
            raise ValueError(f"filePattern must end with '.ts', got {v!r}.")
        return v


class NamingConfig(BaseModel):
    model_config = _OPTIONS_CONFIG

    preset: Optional[NamingPreset] = Field(default=None)
    pure_model: Optional[PureModelNamingOptions] = Field(default=None)
    enum: Optional[EnumNamingOptions] = Field(default=None)


# ---------------------------------------------------------------------------
# Per-model / variant configuration
# ---------------------------------------------------------------------------


class VariantOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    enabled: Optional[bool] = Field(default=None)
    suffix: Optional[str] = Field(default=None)
    exclude_fields: List[str] = Field(default_factory=list)


class ModelFieldOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    exclude: List[str] = Field(default_factory=list)


class ModelOptions(BaseModel):
    model_config = _OPTIONS_CONFIG

    enabled: Optional[bool] = Field(default=None)
    fields: Optional[ModelFieldOptions] = Field(default=None)
    variants: Dict[str, VariantOptions] = Field(default_factory=dict)


class GlobalExclusions(BaseModel):
    model_config = _OPTIONS_CONFIG

    pure: List[str] = Field(default_factory=list)
    input: List[str] = Field(default_factory=list)
    result: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Generator configuration (root)
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """
    Root configuration object, as produced by the configuration provider.

    Only ``type_mapping_config()`` output reaches the type mapper; the rest
    drives composition, naming and rendering.
    """

    model_config = _OPTIONS_CONFIG

    output: Optional[str] = Field(default=None, description="Output directory.")

    # -- Output shape -------------------------------------------------------
    pure_models: bool = Field(default=False)
    pure_models_lean: bool = Field(default=False)
    pure_models_include_relations: bool = Field(default=False)
    optional_field_behavior: OptionalFieldBehavior = Field(default="nullish")
    legacy_model_alias: bool = Field(default=True)
    import_file_extension: str = Field(default="")
    zod_import_target: ZodImportTarget = Field(default="auto")

    # -- Type mapping -------------------------------------------------------
    provider: Optional[str] = Field(default=None)
    decimal_mode: DecimalMode = Field(default="decimal")
    json_mode: JsonMode = Field(default="unknown")
    date_time_strategy: DateTimeStrategy = Field(default="date")
    json_schema_compatible: bool = Field(default=False)
    json_schema_options: JsonSchemaOptions = Field(default_factory=JsonSchemaOptions)
    strict_date_validation: bool = Field(default=True)
    validate_big_int: bool = Field(default=True)
    include_database_validations: bool = Field(default=True)
    custom_type_mappings: Dict[str, str] = Field(default_factory=dict)
    complex_types: ComplexTypeOptions = Field(default_factory=ComplexTypeOptions)

    # -- Naming / selection -------------------------------------------------
    naming: NamingConfig = Field(default_factory=NamingConfig)
    global_exclusions: GlobalExclusions = Field(default_factory=GlobalExclusions)
    models: Dict[str, ModelOptions] = Field(default_factory=dict)
    variants: Dict[str, VariantOptions] = Field(default_factory=dict)

    # -- Legacy keys, accepted and carried --------------------------------
    add_select_type: Optional[bool] = Field(default=None)
    add_include_type: Optional[bool] = Field(default=None)

    @field_validator("import_file_extension")
    @classmethod
    def _normalise_extension(cls, v: str) -> str:
        if v and not v.startswith("."):
            return f".{v}"
        return v

    def type_mapping_config(self, provider: Optional[str] = None) -> TypeMappingConfig:
        """Freeze the type-mapping slice of this configuration for one run."""
        resolved_provider: str = self.provider or provider or DatabaseProvider.POSTGRESQL.value
        return TypeMappingConfig(
            decimal_mode=self.decimal_mode,
            json_mode=self.json_mode,
            strict_date_validation=self.strict_date_validation,
            validate_big_int=self.validate_big_int,
            include_database_validations=self.include_database_validations,
            provider=resolved_provider,
            zod_import_target=self.zod_import_target,
            json_schema_compatible=self.json_schema_compatible,
            json_schema_options=self.json_schema_options.model_copy(deep=True),
            date_time_strategy=self.date_time_strategy,
            custom_type_mappings=dict(self.custom_type_mappings),
            complex_types=self.complex_types.model_copy(deep=True),
        )

    def is_model_enabled(self, model_name: str) -> bool:
        options: Optional[ModelOptions] = self.models.get(model_name)
        return options is None or options.enabled is not False

    def excluded_fields(self, model_name: str) -> FrozenSet[str]:
        """Fields dropped from the pure model of ``model_name``."""
        excluded: List[str] = list(self.global_exclusions.pure)
        options: Optional[ModelOptions] = self.models.get(model_name)
        if options is not None:
            if options.fields is not None:
                excluded.extend(options.fields.exclude)
            pure_variant: Optional[VariantOptions] = options.variants.get("pure")
            if pure_variant is not None:
                excluded.extend(pure_variant.exclude_fields)
        return frozenset(excluded)

    @property
    def uses_v4(self) -> bool:
        return self.zod_import_target == "v4"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "BytesOptions",
    "ComplexTypeOptions",
    "DataModel",
    "DatabaseProvider",
    "DateTimeOptions",
    "DecimalOptions",
    "DefaultValue",
    "EnumDescriptor",
    "EnumField",
    "EnumNamingOptions",
    "FieldDescriptor",
    "FieldKind",
    "FieldVariant",
    "GeneratorConfig",
    "GlobalExclusions",
    "JsonOptions",
    "JsonSchemaOptions",
    "ModelDescriptor",
    "ModelFieldOptions",
    "ModelOptions",
    "NamingConfig",
    "PureModelNamingOptions",
    "RelationField",
    "ScalarField",
    "ScalarKind",
    "SUPPORTED_PROVIDERS",
    "TypeMappingConfig",
    "UnsupportedField",
    "VariantOptions",
]

logger.debug("zodgen.models loaded.")
