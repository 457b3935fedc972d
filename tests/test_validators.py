"""
tests/test_validators.py
Unit tests for zodgen.validators.

Tests cover:
- ValidationResult / ValidationIssue containers
- Data model validators (names, fields, relations, field types, provider)
- Configuration validators
- Per-model option checks
- Dependency graph construction and cycle detection
"""

from __future__ import annotations

import copy
from typing import Any, Dict

import pytest
from pydantic import ValidationError

from zodgen.composer import ModelComposer
from zodgen.generator import parse_raw_data_model
from zodgen.models import DataModel, EnumDescriptor, GeneratorConfig
from zodgen.validators import (
    ValidationIssue,
    ValidationResult,
    build_dependency_graph,
    detect_cycles,
    validate_data_model,
    validate_entity_names,
    validate_field_names,
    validate_field_types,
    validate_full,
    validate_generator_config,
    validate_model_options,
    validate_relations,
    validate_type_mapping,
)


def _model(*models: Dict[str, Any], enums=None, provider=None) -> DataModel:
    return DataModel.model_validate(
        {"models": list(models), "enums": enums or [], "provider": provider}
    )


def _compositions(data_model: DataModel):
    composer = ModelComposer(enum_names=data_model.enum_names)
    return {m.name: composer.compose(m) for m in data_model.models}


# ===========================================================================
# Containers
# ===========================================================================


class TestValidationResult:
    def test_empty_is_valid(self) -> None:
        result = ValidationResult()
        assert result.is_valid
        assert bool(result) is True
        assert len(result) == 0

    def test_error_makes_invalid(self) -> None:
        result = ValidationResult()
        result.add_error("E1", "bad")
        result.add_warning("W1", "meh")
        assert not result
        assert result.error_count == 1
        assert result.warning_count == 1
        assert result.codes == ["E1", "W1"]

    def test_merge(self) -> None:
        a, b = ValidationResult(), ValidationResult()
        a.add_info("I1", "fyi")
        b.add_error("E1", "bad")
        a.merge(b)
        assert a.codes == ["I1", "E1"]

    def test_issue_str(self) -> None:
        issue = ValidationIssue("error", "CODE", "message")
        assert str(issue) == "[ERROR] CODE: message"
        assert issue.to_dict()["context"] == {}

    def test_format_report_hides_info(self) -> None:
        result = ValidationResult()
        result.add_info("I1", "fyi")
        result.add_warning("W1", "meh", {"model": "User"})
        report = result.format_report()
        assert "[W1] meh" in report
        assert "model: User" in report
        assert "I1" not in report
        assert "I1" in result.format_report(include_info=True)


# ===========================================================================
# Data model validators
# ===========================================================================


class TestDataModelValidators:
    def test_example_schema_is_valid(self, data_model) -> None:
        result = validate_data_model(data_model)
        assert result.is_valid, result.format_report()

    def test_empty_data_model_warns(self) -> None:
        assert "EMPTY_DATA_MODEL" in validate_data_model(DataModel()).codes

    def test_duplicate_and_invalid_model_names(self) -> None:
        data_model = _model({"name": "A"}, {"name": "A"}, {"name": "Bad-Name"})
        codes = validate_entity_names(data_model).codes
        assert "DUPLICATE_MODEL_NAME" in codes
        assert "INVALID_MODEL_NAME" in codes

    def test_reserved_model_name(self) -> None:
        assert "MODEL_NAME_RESERVED" in validate_entity_names(_model({"name": "Prisma"})).codes

    def test_model_enum_clash_and_empty_enum(self) -> None:
        data_model = _model(
            {"name": "Role"}, enums=[{"name": "Role", "values": []}]
        )
        codes = validate_entity_names(data_model).codes
        assert "MODEL_ENUM_NAME_CLASH" in codes
        assert "EMPTY_ENUM" in codes

    def test_duplicate_enum_values_rejected_on_load(self) -> None:
        with pytest.raises(ValidationError):
            EnumDescriptor.model_validate({"name": "Role", "values": ["A", "A"]})

    def test_duplicate_and_invalid_field_names(self) -> None:
        data_model = _model(
            {
                "name": "A",
                "fields": [
                    {"name": "x", "type": "Int"},
                    {"name": "x", "type": "Int"},
                    {"name": "1st", "type": "Int"},
                ],
            }
        )
        codes = validate_field_names(data_model).codes
        assert codes == ["DUPLICATE_FIELD_NAME", "INVALID_FIELD_NAME"]

    def test_relation_checks(self) -> None:
        data_model = _model(
            {
                "name": "A",
                "fields": [
                    {
                        "name": "ghost",
                        "kind": "object",
                        "type": "Ghost",
                        "relationName": "AToGhost",
                        "relationFromFields": ["ghostId"],
                    },
                    {"name": "b", "kind": "object", "type": "A"},
                ],
            }
        )
        codes = validate_relations(data_model).codes
        assert "UNKNOWN_RELATION_TARGET" in codes
        assert "MISSING_RELATION_FIELD" in codes
        assert "MISSING_RELATION_NAME" in codes

    def test_field_type_checks(self) -> None:
        data_model = _model(
            {
                "name": "A",
                "fields": [
                    {"name": "status", "kind": "enum", "type": "Status"},
                    {"name": "shape", "type": "Geometry"},
                    {"name": "geo", "kind": "unsupported", "type": "point"},
                ],
            }
        )
        result = validate_field_types(data_model)
        assert result.codes == [
            "UNKNOWN_ENUM_REFERENCE",
            "UNMAPPED_CUSTOM_SCALAR",
            "UNSUPPORTED_FIELD_KIND",
        ]

    def test_custom_scalar_with_mapping_is_fine(self) -> None:
        data_model = _model({"name": "A", "fields": [{"name": "shape", "type": "Geometry"}]})
        config = GeneratorConfig.model_validate(
            {"customTypeMappings": {"Geometry": "z.string()"}}
        )
        assert validate_field_types(data_model, config).codes == []

    def test_unknown_provider_warns(self) -> None:
        result = validate_data_model(_model({"name": "A"}, provider="oracle"))
        assert "UNKNOWN_PROVIDER" in result.codes
        assert result.is_valid


# ===========================================================================
# Configuration validators
# ===========================================================================


class TestConfigValidators:
    def test_default_config_is_clean(self) -> None:
        assert len(validate_generator_config(GeneratorConfig())) == 0

    def test_number_mode_precision_loss(self) -> None:
        config = GeneratorConfig.model_validate({"decimalMode": "number"})
        assert "DECIMAL_NUMBER_PRECISION_LOSS" in validate_generator_config(config).codes

    def test_bytes_bounds(self) -> None:
        config = GeneratorConfig.model_validate(
            {"complexTypes": {"bytes": {"minSize": 10, "maxSize": 5}}}
        )
        assert "BYTES_MIN_EXCEEDS_MAX" in validate_generator_config(config).codes

    def test_date_checks(self) -> None:
        config = GeneratorConfig.model_validate(
            {
                "complexTypes": {
                    "dateTime": {
                        "allowFuture": False,
                        "allowPast": False,
                        "minDate": "2030-01-01",
                        "maxDate": "2020-01-01",
                    }
                }
            }
        )
        codes = validate_generator_config(config).codes
        assert "DATETIME_NO_RANGE" in codes
        assert "DATE_BOUNDS_INVERTED" in codes

    def test_invalid_date_bound(self) -> None:
        config = GeneratorConfig.model_validate(
            {"complexTypes": {"dateTime": {"minDate": "not-a-date"}}}
        )
        assert "INVALID_DATE_BOUND" in validate_generator_config(config).codes

    def test_unknown_provider_is_error(self) -> None:
        config = GeneratorConfig.model_validate({"provider": "oracle"})
        assert validate_generator_config(config).has_errors

    def test_validate_type_mapping(self) -> None:
        errors = validate_type_mapping(
            {"decimalMode": "float", "jsonMode": "object", "provider": "oracle"}
        )
        assert len(errors) == 3
        assert validate_type_mapping({"decimalMode": "string"}) == []

    def test_model_options(self, data_model) -> None:
        config = GeneratorConfig.model_validate(
            {
                "models": {
                    "Ghost": {"enabled": False},
                    "User": {"enabled": False, "fields": {"exclude": ["nope"]}},
                }
            }
        )
        codes = validate_model_options(data_model, config).codes
        assert codes == ["MODEL_OPTIONS_UNKNOWN_MODEL", "EXCLUDED_FIELD_UNKNOWN", "MODEL_DISABLED"]

    def test_validate_full(self, data_model) -> None:
        result = validate_full(data_model, GeneratorConfig())
        assert result.is_valid


# ===========================================================================
# Dependency graph
# ===========================================================================


class TestDependencies:
    def test_detect_single_ring(self) -> None:
        assert detect_cycles({"A": ["B"], "B": ["C"], "C": ["A"]}) == [["A", "B", "C", "A"]]

    def test_acyclic_graph(self) -> None:
        assert detect_cycles({"A": ["B"], "B": ["C"], "C": []}) == []

    def test_edges_to_unknown_nodes_are_skipped(self) -> None:
        assert detect_cycles({"A": ["X"]}) == []

    def test_example_schema_cycles(self, data_model) -> None:
        report = build_dependency_graph(_compositions(data_model))
        assert report.graph == {"Post": ["User"], "Profile": ["User"], "User": ["Post", "Profile"]}
        assert report.cycles == [["Post", "User", "Post"], ["User", "Profile", "User"]]
        assert report.missing == []

    def test_ring_schema(self, cyclic_schema_dict) -> None:
        data_model = parse_raw_data_model(copy.deepcopy(cyclic_schema_dict))
        report = build_dependency_graph(_compositions(data_model))
        assert report.cycles == [["A", "B", "C", "A"]]
        assert report.missing == []
        assert report.cycle_messages == ["Circular dependency detected: A -> B -> C -> A"]

    def test_missing_dependency(self, data_model) -> None:
        compositions = _compositions(data_model)
        del compositions["Profile"]
        report = build_dependency_graph(compositions)
        assert report.missing == ["Model User depends on missing schema: Profile"]
        assert not report.is_valid

    def test_self_reference_is_not_an_edge(self) -> None:
        data_model = _model(
            {
                "name": "Node",
                "fields": [
                    {"name": "id", "type": "Int", "isId": True},
                    {
                        "name": "children",
                        "kind": "object",
                        "type": "Node",
                        "isList": True,
                        "relationName": "NodeTree",
                    },
                ],
            }
        )
        report = build_dependency_graph(_compositions(data_model))
        assert report.graph == {"Node": []}
        assert report.is_valid
