# File: zodgen/__init__.py
"""
zodgen - Zod Schema Generator
=============================

Turns a relational data model description (JSON/YAML) into TypeScript
modules of Zod validation schemas: one module per model, one per enum and
an index re-exporting every model module.  Field types are mapped with
provider-aware database constraints, ``@zod`` documentation directives
are merged onto the generated base types, and cross-model references are
checked for missing schemas and cycles.

Architecture overview::

    ┌──────────────┐     ┌─────────────────────┐     ┌──────────────────────┐
    │  CLI / Entry │────▶│ ZodSchemaGenerator  │────▶│ SchemaCollection-    │
    │   (cli.py)   │     │   (generator.py)    │     │ Generator            │
    └──────┬───────┘     └──────────┬──────────┘     │ (collection.py)      │
           │                        │                └──────────┬───────────┘
           ▼                        ▼                           ▼
    ┌──────────────┐     ┌─────────────────────┐     ┌──────────────────────┐
    │    config    │     │ validators/exporters│     │ ModelComposer        │
    │    (.py)     │     │      (.py)          │     │ → TypeMapper         │
    └──────────────┘     └─────────────────────┘     │ → SchemaRenderer     │
                                                     └──────────────────────┘

Usage::

    # As a library
    from zodgen import ZodSchemaGenerator, parse_configuration
    config = parse_configuration().config
    report = ZodSchemaGenerator().generate_from_file(
        Path("schema.yaml"), Path("./generated"), config
    )

    # From the command line
    python -m zodgen --schema schema.yaml --output ./generated --verbose

Public API:
    - ZodSchemaGenerator         - Master orchestrator
    - SchemaCollectionGenerator  - Compose and render a set of models
    - ModelComposer              - Per-model composition
    - TypeMapper                 - Field → Zod expression mapping
    - SchemaRenderer             - TypeScript module rendering
    - GeneratorConfig            - Configuration model
    - DataModel                  - Input data model
    - validate_full              - Validation entry point
"""

from __future__ import annotations

__version__: str = "1.0.0"
__author__: str = "zodgen contributors"
__license__: str = "MIT"

# ---------------------------------------------------------------------------
# Public imports
# ---------------------------------------------------------------------------

from zodgen.models import (
    DataModel,
    DatabaseProvider,
    DefaultValue,
    EnumDescriptor,
    FieldDescriptor,
    FieldKind,
    GeneratorConfig,
    ModelDescriptor,
    ScalarKind,
    TypeMappingConfig,
)
from zodgen.expressions import SchemaExpr
from zodgen.naming import NamingResolver
from zodgen.type_mapper import FieldMappingResult, TypeMapper
from zodgen.composer import ModelComposer, ModelSchemaComposition
from zodgen.templates import OutputModule, SchemaRenderer
from zodgen.validators import ValidationResult, build_dependency_graph, validate_full
from zodgen.collection import SchemaCollection, SchemaCollectionGenerator
from zodgen.config import ConfigParseError, ParseResult, parse_configuration
from zodgen.exporters import ExportManifest, ExportResult, SchemaExporter
from zodgen.generator import GenerationReport, ZodSchemaGenerator
from zodgen.utils import Timer

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Core orchestrator
    "ZodSchemaGenerator",
    "GenerationReport",
    "SchemaCollection",
    "SchemaCollectionGenerator",
    # Models
    "DataModel",
    "DatabaseProvider",
    "DefaultValue",
    "EnumDescriptor",
    "FieldDescriptor",
    "FieldKind",
    "GeneratorConfig",
    "ModelDescriptor",
    "ScalarKind",
    "TypeMappingConfig",
    # Mapping & composition
    "FieldMappingResult",
    "ModelComposer",
    "ModelSchemaComposition",
    "NamingResolver",
    "SchemaExpr",
    "TypeMapper",
    # Rendering
    "OutputModule",
    "SchemaRenderer",
    # Validation
    "ValidationResult",
    "build_dependency_graph",
    "validate_full",
    # Configuration
    "ConfigParseError",
    "ParseResult",
    "parse_configuration",
    # Exporters
    "ExportManifest",
    "ExportResult",
    "SchemaExporter",
    # Utilities
    "Timer",
]
