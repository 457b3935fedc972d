"""
tests/test_config.py
Unit tests for zodgen.config.

Tests cover:
- Discovery order and explicit paths
- JSON and YAML decoding
- Legacy fields.exclude transformation
- Overrides
- Error reporting
"""

from __future__ import annotations

import json
import pathlib

import pytest
import yaml

from zodgen.config import (
    CONFIG_FILE_NAMES,
    ConfigParseError,
    build_config,
    create_config_error_message,
    discover_config_file,
    parse_config_text,
    parse_configuration,
    transform_legacy_config,
)


class TestDiscovery:
    def test_no_file_means_defaults(self, tmp_path: pathlib.Path) -> None:
        result = parse_configuration(base_dir=tmp_path)
        assert result.is_default
        assert result.config_path is None
        assert result.config.optional_field_behavior == "nullish"

    def test_json_wins_over_yaml(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / ".zod-generator.yaml").write_text("pureModelsLean: true\n", encoding="utf-8")
        (tmp_path / "zod-generator.config.json").write_text("{}", encoding="utf-8")
        assert discover_config_file(tmp_path) == tmp_path / "zod-generator.config.json"

    def test_hidden_file_is_last_resort(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / ".zod-generator.yaml").write_text("pureModelsLean: true\n", encoding="utf-8")
        result = parse_configuration(base_dir=tmp_path)
        assert result.config_path == tmp_path / ".zod-generator.yaml"
        assert result.config.pure_models_lean is True
        assert not result.is_default

    def test_search_order_constant(self) -> None:
        assert CONFIG_FILE_NAMES[0] == "zod-generator.config.json"
        assert CONFIG_FILE_NAMES[-1] == ".zod-generator.yaml"

    def test_explicit_relative_path(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "custom.yml").write_text("decimalMode: string\n", encoding="utf-8")
        result = parse_configuration("custom.yml", base_dir=tmp_path)
        assert result.config.decimal_mode == "string"

    def test_explicit_missing_path(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigParseError, match="not found"):
            parse_configuration(tmp_path / "missing.json")

    def test_directory_is_not_a_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigParseError, match="not a file"):
            parse_configuration(tmp_path)


class TestDecoding:
    def test_json(self) -> None:
        assert parse_config_text('{"jsonMode": "record"}') == {"jsonMode": "record"}

    def test_yaml(self) -> None:
        text = yaml.safe_dump({"naming": {"preset": "zod-prisma"}})
        assert parse_config_text(text, pathlib.Path("x.yaml")) == {
            "naming": {"preset": "zod-prisma"}
        }

    def test_empty_yaml_is_empty_mapping(self) -> None:
        assert parse_config_text("", pathlib.Path("x.yml")) == {}

    def test_invalid_json(self) -> None:
        with pytest.raises(ConfigParseError, match="Invalid JSON"):
            parse_config_text("{nope", pathlib.Path("x.json"))

    def test_invalid_yaml(self) -> None:
        with pytest.raises(ConfigParseError, match="Invalid YAML"):
            parse_config_text("a: [unclosed", pathlib.Path("x.yaml"))

    def test_non_mapping(self) -> None:
        with pytest.raises(ConfigParseError, match="mapping at top level"):
            parse_config_text("[1, 2]")

    def test_validation_failure(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "zod-generator.config.json"
        path.write_text(json.dumps({"decimalMode": "float"}), encoding="utf-8")
        with pytest.raises(ConfigParseError) as exc_info:
            parse_configuration(base_dir=tmp_path)
        assert exc_info.value.file_path == str(path)
        assert exc_info.value.cause is not None


class TestLegacyTransform:
    def test_fields_exclude_copied_to_variants(self) -> None:
        raw = {
            "models": {
                "User": {
                    "fields": {"exclude": ["password", "salt"]},
                    "variants": {"input": {"excludeFields": ["id", "salt"]}},
                }
            }
        }
        transformed = transform_legacy_config(raw)
        variants = transformed["models"]["User"]["variants"]
        assert variants["pure"]["excludeFields"] == ["password", "salt"]
        assert variants["input"]["excludeFields"] == ["id", "salt", "password"]
        assert variants["result"]["excludeFields"] == ["password", "salt"]
        assert transformed["models"]["User"]["fields"]["exclude"] == ["password", "salt"]

    def test_input_not_mutated(self) -> None:
        raw = {"models": {"User": {"fields": {"exclude": ["password"]}}}}
        transform_legacy_config(raw)
        assert "variants" not in raw["models"]["User"]

    def test_legacy_flags_preserved(self) -> None:
        config = build_config({"addSelectType": 1, "addIncludeType": False})
        assert config.add_select_type is True
        assert config.add_include_type is False

    def test_excluded_fields_after_transform(self) -> None:
        config = build_config({"models": {"User": {"fields": {"exclude": ["password"]}}}})
        assert config.excluded_fields("User") == frozenset({"password"})


class TestOverrides:
    def test_overrides_applied_on_top_of_file(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "zod-generator.config.json").write_text(
            json.dumps({"pureModelsLean": False, "complexTypes": {"decimal": {"maxScale": 4}}}),
            encoding="utf-8",
        )
        result = parse_configuration(
            base_dir=tmp_path,
            overrides={"pureModelsLean": True, "complexTypes": {"decimal": {"maxPrecision": 10}}},
        )
        assert result.config.pure_models_lean is True
        assert result.config.complex_types.decimal.max_scale == 4
        assert result.config.complex_types.decimal.max_precision == 10


class TestErrorMessage:
    def test_message_with_file(self) -> None:
        error = ConfigParseError("boom", cause=ValueError("why"), file_path="/tmp/c.json")
        message = create_config_error_message(error)
        assert message.startswith("Configuration Error: boom")
        assert "  File: /tmp/c.json" in message
        assert "  Cause: why" in message
        assert "Troubleshooting:" in message

    def test_message_without_file_suggests_creating_one(self) -> None:
        message = create_config_error_message(ConfigParseError("boom"))
        assert "  - Consider creating a zod-generator.config.json file" in message
