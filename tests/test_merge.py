"""
tests/test_merge.py
Unit tests for zodgen.merge.
"""

from __future__ import annotations

import pytest

from zodgen.annotations import ExtractionResult, FieldContext, ZodAnnotationExtractor
from zodgen.expressions import Modifier, ModifierOrigin, SchemaExpr
from zodgen.merge import (
    ENHANCED_NOTE,
    MergeError,
    merge_directives,
    normalize_nullability,
)
from zodgen.models import FieldDescriptor


def _extract(doc: str, field_desc: FieldDescriptor) -> ExtractionResult:
    context = FieldContext(
        model_name="Thing",
        field_name=field_desc.name,
        field_type=field_desc.type,
        is_list=field_desc.is_list,
    )
    return ZodAnnotationExtractor().extract(doc, context)


class TestNormalizeNullability:
    def test_optional_is_dropped(self) -> None:
        body, trailing = normalize_nullability([Modifier("optional"), Modifier("min", "1")])
        assert [m.name for m in body] == ["min"]
        assert trailing is None

    def test_nullable_wins_over_nullish(self) -> None:
        body, trailing = normalize_nullability(
            [Modifier("nullish"), Modifier("email"), Modifier("nullable")]
        )
        assert [m.name for m in body] == ["email"]
        assert trailing is not None
        assert trailing.name == "nullable"

    def test_optional_kept_when_not_stripping(self) -> None:
        body, _ = normalize_nullability([Modifier("optional")], strip_optional=False)
        assert [m.name for m in body] == ["optional"]


class TestMergeScalars:
    def test_modifiers_appended(self, make_field) -> None:
        field = make_field("email", "String")
        outcome = merge_directives(
            SchemaExpr.parse("z.string()"), field, _extract("@zod.email().max(255)", field)
        )
        assert outcome.applied
        assert outcome.expression.render() == "z.string().email().max(255)"
        assert ENHANCED_NOTE in outcome.notes

    def test_nullability_moves_to_end(self, make_field) -> None:
        field = make_field("email", "String")
        outcome = merge_directives(
            SchemaExpr.parse("z.string()"),
            field,
            _extract("@zod.nullable().email().optional().nullish()", field),
        )
        assert outcome.expression.render() == "z.string().email().nullable()"

    def test_directive_modifiers_carry_origin(self, make_field) -> None:
        field = make_field("age", "Int")
        outcome = merge_directives(
            SchemaExpr.parse("z.number().int()"), field, _extract("@zod.positive()", field)
        )
        assert outcome.expression.modifiers[-1].origin == ModifierOrigin.DIRECTIVE

    def test_invalid_annotation_leaves_base(self, make_field) -> None:
        field = make_field("age", "Int")
        base = SchemaExpr.parse("z.number().int()")
        outcome = merge_directives(base, field, _extract("@zod.email()", field))
        assert not outcome.applied
        assert outcome.expression == base
        assert outcome.notes[0].startswith("// @zod mapping errors:")

    def test_replacement_supersedes_base(self, make_field) -> None:
        field = make_field("status", "String")
        outcome = merge_directives(
            SchemaExpr.parse("z.string()"),
            field,
            _extract('@zod.enum(["draft", "live"]).describe("state")', field),
        )
        assert outcome.expression.render() == 'z.enum(["draft", "live"]).describe("state")'

    def test_replacement_must_come_first(self, make_field) -> None:
        field = make_field("status", "String")
        extraction = _extract('@zod.min(1).enum(["a"])', field)
        with pytest.raises(MergeError):
            merge_directives(SchemaExpr.parse("z.string()"), field, extraction)


class TestMergeSpecialCases:
    def test_relation_keeps_optional(self, make_field) -> None:
        field = make_field("author", "User", kind="object", relationName="PostToUser")
        outcome = merge_directives(
            SchemaExpr.ref("UserSchema", "User"),
            field,
            _extract("@zod.optional().nullable()", field),
        )
        assert outcome.expression.render() == "z.lazy(() => UserSchema).optional().nullable()"

    def test_relation_nullability_collapses_to_one_trailing_call(self, make_field) -> None:
        field = make_field("author", "User", kind="object", relationName="PostToUser")
        outcome = merge_directives(
            SchemaExpr.ref("UserSchema", "User"),
            field,
            _extract("@zod.nullable().optional().nullish()", field),
        )
        assert outcome.expression.render() == "z.lazy(() => UserSchema).optional().nullable()"

    def test_json_record_rebuilds_base(self, make_field) -> None:
        field = make_field("settings", "Json")
        outcome = merge_directives(
            SchemaExpr.parse("z.unknown()"), field, _extract("@zod.record(z.string())", field)
        )
        assert outcome.expression.render() == "z.record(z.string())"

    def test_json_record_without_argument(self, make_field) -> None:
        field = make_field("settings", "Json")
        outcome = merge_directives(
            SchemaExpr.parse("z.unknown()"),
            field,
            _extract("@zod.record()", field),
            json_schema_compatible=True,
        )
        assert outcome.expression.render() == "z.record(z.any())"

    def test_element_level_directives_apply_inside_array(self, make_field) -> None:
        field = make_field("tags", "String", isList=True)
        outcome = merge_directives(
            SchemaExpr.parse("z.array(z.string())"),
            field,
            _extract("Each array element validated @zod.min(2).nullable()", field),
        )
        assert outcome.expression.render() == "z.array(z.string().min(2)).nullable()"

    def test_array_level_directives_apply_outside(self, make_field) -> None:
        field = make_field("tags", "String", isList=True)
        outcome = merge_directives(
            SchemaExpr.parse("z.array(z.string())"), field, _extract("@zod.max(5)", field)
        )
        assert outcome.expression.render() == "z.array(z.string()).max(5)"

    def test_custom_imports_forwarded(self, make_field) -> None:
        field = make_field("slug", "String")
        extraction = _extract(
            "@zod.import([\"import { isSlug } from '../lib/slug'\"]).refine(isSlug)", field
        )
        outcome = merge_directives(SchemaExpr.parse("z.string()"), field, extraction)
        assert [c.imported_items for c in outcome.custom_imports] == [("isSlug",)]
        assert outcome.expression.render() == "z.string().refine(isSlug)"
