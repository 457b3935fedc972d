"""
tests/test_composer.py
Unit tests for zodgen.composer.
"""

from __future__ import annotations

from zodgen.annotations import CustomImport
from zodgen.composer import ModelComposer, config_fingerprint, merge_custom_imports
from zodgen.merge import MERGE_FAILURE_NOTE
from zodgen.models import GeneratorConfig, TypeMappingConfig
from zodgen.type_mapper import TypeMapper


class TestCompose:
    def test_exports_and_names(self, data_model, fixed_clock) -> None:
        composer = ModelComposer(clock=fixed_clock, enum_names=data_model.enum_names)
        composition = composer.compose(data_model.get_model("User"))
        assert composition.schema_name == "UserSchema"
        assert composition.type_name == "UserType"
        assert composition.exports == ["UserSchema", "UserType", "UserModel"]

    def test_field_order_preserved(self, data_model) -> None:
        user = data_model.get_model("User")
        composition = ModelComposer().compose(user)
        assert composition.field_names == user.field_names

    def test_imports_and_symbols(self, data_model) -> None:
        composition = ModelComposer().compose(data_model.get_model("User"))
        assert "RoleSchema" in composition.enum_symbols
        assert composition.related_symbols == ["PostSchema", "ProfileSchema"]
        assert composition.statistics.relation_fields == 2

    def test_metadata_uses_clock(self, data_model, fixed_clock) -> None:
        composition = ModelComposer(clock=fixed_clock).compose(data_model.get_model("Post"))
        assert composition.metadata.timestamp == fixed_clock().isoformat()
        assert len(composition.metadata.config_hash) == 16

    def test_zero_field_model(self, make_model) -> None:
        composition = ModelComposer().compose(make_model("Empty"))
        assert composition.fields == []
        assert composition.statistics.total_fields == 0
        assert composition.exports == ["EmptySchema", "EmptyType", "EmptyModel"]

    def test_model_level_validation(self, make_model, make_field) -> None:
        model = make_model(
            "Range",
            fields=[make_field("start", "Int"), make_field("end", "Int")],
            documentation="@zod.refine((d) => d.start < d.end)",
        )
        composition = ModelComposer().compose(model)
        assert [m.name for m in composition.model_level_validation] == ["refine"]

    def test_statistics(self, data_model) -> None:
        composition = ModelComposer().compose(data_model.get_model("Profile"))
        stats = composition.statistics
        assert stats.total_fields == stats.processed_fields == 6
        assert stats.complex_type_fields == 2


class TestSelection:
    def test_type_alias_collides_with_enum(self, make_model) -> None:
        composer = ModelComposer(enum_names=["ThingType"])
        assert composer.compose(make_model("Thing")).type_name == "Thing"

    def test_excluded_fields(self, data_model) -> None:
        config = GeneratorConfig.model_validate(
            {
                "models": {"User": {"fields": {"exclude": ["email"]}}},
                "globalExclusions": {"pure": ["createdAt"]},
            }
        )
        composition = ModelComposer(config).compose(data_model.get_model("User"))
        assert "email" not in composition.field_names
        assert "createdAt" not in composition.field_names

    def test_pure_models_drop_relations_and_alias(self, data_model) -> None:
        config = GeneratorConfig.model_validate({"pureModels": True})
        composition = ModelComposer(config).compose(data_model.get_model("User"))
        assert "posts" not in composition.field_names
        assert composition.legacy_alias is None

    def test_pure_models_with_relations(self, data_model) -> None:
        config = GeneratorConfig.model_validate(
            {"pureModels": True, "pureModelsIncludeRelations": True}
        )
        composition = ModelComposer(config).compose(data_model.get_model("User"))
        assert "posts" in composition.field_names


class TestLegacyAlias:
    def test_disabled_by_flag(self, make_model) -> None:
        config = GeneratorConfig.model_validate({"legacyModelAlias": False})
        assert ModelComposer(config).compose(make_model("Thing")).legacy_alias is None

    def test_not_emitted_when_equal_to_schema_name(self, make_model) -> None:
        config = GeneratorConfig.model_validate({"naming": {"preset": "zod-prisma"}})
        composition = ModelComposer(config).compose(make_model("Thing"))
        assert composition.schema_name == "ThingModel"
        assert composition.legacy_alias is None
        assert composition.exports.count("ThingModel") == 1


class _BrokenMapper(TypeMapper):
    def map_field(self, field_desc, model):
        if field_desc.name == "broken":
            raise RuntimeError("cannot map")
        return super().map_field(field_desc, model)


class _ExplodingExtractor:
    def extract(self, documentation, context):
        raise RuntimeError("extractor exploded")

    def extract_model(self, documentation, model_name):
        raise RuntimeError("extractor exploded")


class TestFallback:
    def test_failing_field_becomes_fallback(self, make_model, make_field) -> None:
        model = make_model("Thing", fields=[make_field("ok"), make_field("broken")])
        composer = ModelComposer(type_mapper=_BrokenMapper(TypeMappingConfig()))
        composition = composer.compose(model)
        assert composition.field_names == ["ok", "broken"]
        fallback = composition.fields[1]
        assert fallback.is_fallback
        assert fallback.zod_schema == "z.unknown()"
        assert fallback.documentation == "// Error processing field: cannot map"
        assert composition.statistics.processed_fields == 1

    def test_extractor_failure_drops_model_validation(self, make_model, make_field) -> None:
        model = make_model(
            "Event",
            fields=[make_field("email", documentation="@zod.email()")],
            documentation="@zod.refine((d) => d.email.length > 0)",
        )
        mapper = TypeMapper(TypeMappingConfig(), extractor=_ExplodingExtractor())
        composition = ModelComposer(type_mapper=mapper).compose(model)
        assert composition.model_level_validation == ()
        assert composition.custom_imports == []
        assert composition.fields[0].zod_schema == "z.string()"
        assert not composition.fields[0].is_fallback
        assert MERGE_FAILURE_NOTE in composition.fields[0].notes


class TestHelpers:
    def test_fingerprint_is_deterministic(self) -> None:
        assert config_fingerprint(TypeMappingConfig()) == config_fingerprint(TypeMappingConfig())
        assert config_fingerprint(TypeMappingConfig()) != config_fingerprint(
            TypeMappingConfig(decimal_mode="string")
        )

    def test_merge_custom_imports(self) -> None:
        a = CustomImport.from_statement("import { b } from 'b';")
        b = CustomImport.from_statement("import { a } from 'a';")
        merged = merge_custom_imports([[a], [b, a]])
        assert [c.statement for c in merged] == [b.statement, a.statement]
