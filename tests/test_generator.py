"""
tests/test_generator.py
Integration tests for zodgen.generator (ZodSchemaGenerator).

Tests cover:
- Data model loading (YAML, JSON, unknown extensions, wrapped payloads)
- The full pipeline writing models, enums, index and manifest
- Dry runs, clean output, disabled models
- Strict / non-strict validation and --fail-on-warnings
- Report contents
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict

import pytest

from zodgen.generator import (
    GenerationReport,
    ZodSchemaGenerator,
    load_data_model_file,
    parse_raw_data_model,
)
from zodgen.models import GeneratorConfig


EXPECTED_FILES = {
    "models/Post.schema.ts",
    "models/Profile.schema.ts",
    "models/User.schema.ts",
    "models/index.ts",
    "enums/Role.schema.ts",
}


def _steps(report: GenerationReport):
    return [s.step_name for s in report.step_metrics]


# ===========================================================================
# Loading
# ===========================================================================


class TestLoading:
    def test_load_yaml(self, schema_yaml_path: pathlib.Path) -> None:
        raw = load_data_model_file(schema_yaml_path)
        assert [m["name"] for m in raw["models"]] == ["User", "Post", "Profile"]

    def test_load_json(self, schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(schema_dict), encoding="utf-8")
        assert load_data_model_file(path)["provider"] == "postgresql"

    def test_unknown_extension_falls_back_to_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.dmmf"
        path.write_text("models:\n  - name: A\n", encoding="utf-8")
        assert load_data_model_file(path) == {"models": [{"name": "A"}]}

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_data_model_file(tmp_path / "nope.yaml")

    def test_non_mapping(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError, match="Expected a JSON object"):
            load_data_model_file(path)

    def test_wrapped_payload_with_datasource(self) -> None:
        data_model = parse_raw_data_model(
            {
                "datamodel": {"models": [{"name": "A"}], "enums": []},
                "datasource": {"provider": "mysql"},
            }
        )
        assert data_model.model_names == ["A"]
        assert data_model.provider == "mysql"

    def test_no_models_key(self) -> None:
        with pytest.raises(ValueError, match="Cannot find a data model"):
            parse_raw_data_model({"tables": []})

    def test_invalid_descriptor(self) -> None:
        with pytest.raises(ValueError, match="Data model validation failed"):
            parse_raw_data_model({"models": [{"fields": []}]})


# ===========================================================================
# Full pipeline
# ===========================================================================


class TestPipeline:
    def test_generate_from_file(
        self, schema_yaml_path: pathlib.Path, tmp_path: pathlib.Path, fixed_clock
    ) -> None:
        out = tmp_path / "generated"
        report = ZodSchemaGenerator(clock=fixed_clock).generate_from_file(schema_yaml_path, out)

        assert report.success, report.summary()
        for rel_path in EXPECTED_FILES:
            assert (out / rel_path).is_file(), rel_path
        assert (out / "manifest.json").is_file()
        assert report.total_files == len(EXPECTED_FILES)
        assert report.total_models_processed == 3
        assert _steps(report) == [
            "Load Data Model",
            "Validate Data Model",
            "Compose Schemas",
            "Check Dependencies",
            "Export to Filesystem",
        ]

    def test_written_content(self, schema_yaml_path, tmp_path: pathlib.Path, fixed_clock) -> None:
        out = tmp_path / "generated"
        ZodSchemaGenerator(clock=fixed_clock).generate_from_file(schema_yaml_path, out)
        user = (out / "models" / "User.schema.ts").read_text(encoding="utf-8")
        index = (out / "models" / "index.ts").read_text(encoding="utf-8")
        assert "export const UserSchema = z.object({" in user
        assert "export * from './User.schema';" in index

    def test_manifest(self, schema_yaml_path, tmp_path: pathlib.Path) -> None:
        out = tmp_path / "generated"
        report = ZodSchemaGenerator().generate_from_file(schema_yaml_path, out)
        manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
        assert {f["relative_path"] for f in manifest["files"]} == EXPECTED_FILES
        assert report.manifest is not None
        assert all(len(f.sha256) == 64 for f in report.manifest.files)

    def test_cycles_reported_as_warnings(self, schema_yaml_path, tmp_path: pathlib.Path) -> None:
        report = ZodSchemaGenerator().generate_from_file(schema_yaml_path, tmp_path / "out")
        assert report.success
        assert "Circular dependency detected: Post -> User -> Post" in report.generation_warnings
        assert report.generation_warnings.count(
            "Circular dependency detected: Post -> User -> Post"
        ) == 1

    def test_rerun_is_identical(self, schema_yaml_path, tmp_path, fixed_clock) -> None:
        generator = ZodSchemaGenerator(clock=fixed_clock)
        first = generator.generate_from_file(schema_yaml_path, tmp_path / "a")
        second = generator.generate_from_file(schema_yaml_path, tmp_path / "b")
        assert [f.sha256 for f in first.manifest.files] == [
            f.sha256 for f in second.manifest.files
        ]

    def test_generate_from_data_model(self, data_model, tmp_path: pathlib.Path) -> None:
        report = ZodSchemaGenerator().generate(data_model, GeneratorConfig(), tmp_path / "out")
        assert report.success
        assert "Load Data Model" not in _steps(report)


class TestModes:
    def test_dry_run_writes_nothing(self, schema_yaml_path, tmp_path: pathlib.Path) -> None:
        out = tmp_path / "generated"
        report = ZodSchemaGenerator(dry_run=True).generate_from_file(schema_yaml_path, out)
        assert report.success
        assert report.dry_run
        assert not out.exists()
        assert set(report.files) == EXPECTED_FILES
        assert report.total_files == len(EXPECTED_FILES)
        assert report.total_bytes > 0
        assert "(dry run)" in report.summary()

    def test_clean_output(self, schema_yaml_path, tmp_path: pathlib.Path) -> None:
        out = tmp_path / "generated"
        out.mkdir()
        stale = out / "stale.ts"
        stale.write_text("// old", encoding="utf-8")
        ZodSchemaGenerator(clean_output=True).generate_from_file(schema_yaml_path, out)
        assert not stale.exists()
        assert (out / "models" / "User.schema.ts").exists()

    def test_disabled_model(self, schema_yaml_path, tmp_path: pathlib.Path) -> None:
        out = tmp_path / "generated"
        config = GeneratorConfig.model_validate({"models": {"Profile": {"enabled": False}}})
        report = ZodSchemaGenerator().generate_from_file(schema_yaml_path, out, config)
        assert report.skipped_models == ["Profile"]
        assert not (out / "models" / "Profile.schema.ts").exists()
        assert "Model User depends on missing schema: Profile" in report.generation_warnings

    def test_lean_config(self, schema_yaml_path, tmp_path: pathlib.Path, lean_config) -> None:
        report = ZodSchemaGenerator(dry_run=True).generate_from_file(
            schema_yaml_path, tmp_path / "out", lean_config
        )
        assert "/**" not in report.files["models/User.schema.ts"]


# ===========================================================================
# Failure handling
# ===========================================================================


class TestFailures:
    def test_missing_data_model(self, tmp_path: pathlib.Path) -> None:
        report = ZodSchemaGenerator().generate_from_file(tmp_path / "nope.yaml", tmp_path / "out")
        assert not report.success
        assert report.generation_errors[0].startswith("Data model file not found")
        assert report.step_metrics[0].success is False

    def test_invalid_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.yaml"
        path.write_text("models: [unclosed", encoding="utf-8")
        report = ZodSchemaGenerator().generate_from_file(path, tmp_path / "out")
        assert not report.success
        assert "Invalid YAML" in report.generation_errors[0]

    def test_strict_validation_stops_pipeline(
        self, schema_dict: Dict[str, Any], tmp_path: pathlib.Path
    ) -> None:
        schema_dict["models"][0]["fields"][3]["type"] = "Status"
        data_model = parse_raw_data_model(schema_dict)
        out = tmp_path / "out"
        report = ZodSchemaGenerator().generate(data_model, GeneratorConfig(), out)
        assert not report.success
        assert any("UNKNOWN_ENUM_REFERENCE" in e for e in report.validation_errors)
        assert "Compose Schemas" not in _steps(report)
        assert not out.exists()

    def test_non_strict_validation_continues(
        self, schema_dict: Dict[str, Any], tmp_path: pathlib.Path
    ) -> None:
        schema_dict["models"][0]["fields"][3]["type"] = "Status"
        data_model = parse_raw_data_model(schema_dict)
        out = tmp_path / "out"
        report = ZodSchemaGenerator(strict_validation=False).generate(
            data_model, GeneratorConfig(), out
        )
        assert not report.success
        assert "Compose Schemas" in _steps(report)
        assert (out / "models" / "User.schema.ts").exists()

    def test_fail_on_warnings(self, schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> None:
        schema_dict["provider"] = "oracle"
        data_model = parse_raw_data_model(schema_dict)
        lenient = ZodSchemaGenerator(dry_run=True).generate(
            data_model, GeneratorConfig(), tmp_path / "a"
        )
        strict = ZodSchemaGenerator(dry_run=True, fail_on_warnings=True).generate(
            data_model, GeneratorConfig(), tmp_path / "b"
        )
        assert lenient.success
        assert any("UNKNOWN_PROVIDER" in w for w in lenient.validation_warnings)
        assert not strict.success
        assert strict.validation_errors[-1] == (
            "1 warning(s) treated as errors (--fail-on-warnings)"
        )

    def test_summary_lists_errors(self, tmp_path: pathlib.Path) -> None:
        report = ZodSchemaGenerator().generate_from_file(tmp_path / "nope.yaml", tmp_path / "out")
        summary = report.summary()
        assert "zodgen - Generation Report" in summary
        assert "FAILED" in summary
        assert "Generation Errors (1):" in summary
