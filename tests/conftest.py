"""
tests/conftest.py
Shared fixtures for the zodgen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
Timestamps are pinned with a fixed clock so rendered output is stable.
"""

from __future__ import annotations

import copy
import pathlib
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest
import yaml

from zodgen.generator import parse_raw_data_model
from zodgen.models import DataModel, FieldDescriptor, GeneratorConfig, ModelDescriptor


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
SCHEMA_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "schema_example.yaml"

FIXED_TIMESTAMP: datetime = datetime(2024, 1, 15, 12, 30, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Raw data model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_schema_dict() -> Dict[str, Any]:
    """Load the reference schema_example.yaml once per session and return as dict."""
    assert SCHEMA_EXAMPLE_PATH.exists(), (
        f"Reference data model not found at {SCHEMA_EXAMPLE_PATH}. "
        "Make sure schema_example.yaml is in the project root."
    )
    with open(SCHEMA_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def schema_dict(raw_schema_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_schema_dict)


@pytest.fixture()
def data_model(schema_dict: Dict[str, Any]) -> DataModel:
    return parse_raw_data_model(schema_dict)


@pytest.fixture()
def schema_yaml_path(schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the data model dict to a temporary YAML file and return its path."""
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(schema_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


@pytest.fixture()
def cyclic_schema_dict() -> Dict[str, Any]:
    """Three models referencing each other in a ring: A -> B -> C -> A."""
    models: List[Dict[str, Any]] = []
    for name, target in (("A", "B"), ("B", "C"), ("C", "A")):
        models.append({
            "name": name,
            "fields": [
                {"name": "id", "kind": "scalar", "type": "Int", "isId": True},
                {"name": f"{target.lower()}Id", "kind": "scalar", "type": "Int"},
                {
                    "name": target.lower(),
                    "kind": "object",
                    "type": target,
                    "relationName": f"{name}To{target}",
                    "relationFromFields": [f"{target.lower()}Id"],
                },
            ],
        })
    return {"models": models, "enums": []}


# ---------------------------------------------------------------------------
# Descriptor factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_field() -> Callable[..., FieldDescriptor]:
    """Build a FieldDescriptor from camelCase keyword arguments."""

    def _make(name: str = "value", type: str = "String", **kwargs: Any) -> FieldDescriptor:
        data: Dict[str, Any] = {"name": name, "type": type}
        data.update(kwargs)
        return FieldDescriptor.model_validate(data)

    return _make


@pytest.fixture()
def make_model() -> Callable[..., ModelDescriptor]:
    def _make(
        name: str = "Thing",
        fields: Optional[List[Any]] = None,
        documentation: Optional[str] = None,
    ) -> ModelDescriptor:
        return ModelDescriptor.model_validate({
            "name": name,
            "fields": list(fields or []),
            "documentation": documentation,
        })

    return _make


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_TIMESTAMP


@pytest.fixture()
def default_config() -> GeneratorConfig:
    return GeneratorConfig()


@pytest.fixture()
def lean_config() -> GeneratorConfig:
    return GeneratorConfig.model_validate({"pureModelsLean": True})


@pytest.fixture()
def v4_config() -> GeneratorConfig:
    return GeneratorConfig.model_validate({"zodImportTarget": "v4"})
