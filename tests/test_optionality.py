"""
tests/test_optionality.py
Unit tests for zodgen.optionality.

Tests cover:
- Reason precedence (first applicable reason wins)
- Auto-generated and safe-default detection
- Default-value modifiers, collected regardless of the winning reason
- Relation-based reasons
- Provider notes
"""

from __future__ import annotations

from typing import Any, Callable

from zodgen.expressions import ModifierOrigin
from zodgen.optionality import (
    OptionalityReason,
    is_auto_generated,
    is_safe_default,
    resolve_optionality,
)


class TestReasons:
    def test_required_field(self, make_field: Callable[..., Any], make_model) -> None:
        field = make_field("title", "String")
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.reason == OptionalityReason.REQUIRED
        assert not result.is_optional
        assert result.modifiers == []

    def test_schema_optional(self, make_field, make_model) -> None:
        field = make_field("bio", "String", isRequired=False)
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.reason == OptionalityReason.SCHEMA_OPTIONAL
        assert result.modifier_text == ".optional()"

    def test_schema_optional_wins_over_default(self, make_field, make_model) -> None:
        field = make_field("count", "Int", isRequired=False, default=0)
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.reason == OptionalityReason.SCHEMA_OPTIONAL
        assert result.modifier_text == ".optional().default(0)"

    def test_has_default_wins_over_auto_generated(self, make_field, make_model) -> None:
        field = make_field("id", "Int", isId=True, default={"name": "autoincrement"})
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.reason == OptionalityReason.HAS_DEFAULT
        assert result.is_auto_generated

    def test_updated_at_is_auto_generated(self, make_field, make_model) -> None:
        field = make_field("updatedAt", "DateTime", isUpdatedAt=True)
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.reason == OptionalityReason.AUTO_GENERATED

    def test_literal_default_on_plain_field_is_not_safe(self, make_field, make_model) -> None:
        field = make_field("published", "Boolean", default=False)
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.reason == OptionalityReason.REQUIRED
        assert result.modifier_text == ".default(false)"
        assert result.default_modifiers[0].origin == ModifierOrigin.DEFAULT

    def test_back_relation(self, make_field, make_model) -> None:
        field = make_field("posts", "Post", kind="object", isList=True, relationName="PostToUser")
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.reason == OptionalityReason.BACK_RELATION

    def test_nullable_foreign_keys(self, make_field, make_model) -> None:
        fk = make_field("authorId", "Int", isRequired=False)
        relation = make_field(
            "author",
            "User",
            kind="object",
            relationName="PostToUser",
            relationFromFields=["authorId"],
        )
        result = resolve_optionality(relation, make_model(fields=[fk, relation]))
        assert result.reason == OptionalityReason.NULLABLE_FOREIGN_KEYS

    def test_required_foreign_key_keeps_relation_required(self, make_field, make_model) -> None:
        fk = make_field("authorId", "Int")
        relation = make_field(
            "author",
            "User",
            kind="object",
            relationName="PostToUser",
            relationFromFields=["authorId"],
        )
        result = resolve_optionality(relation, make_model(fields=[fk, relation]))
        assert result.reason == OptionalityReason.REQUIRED


class TestDefaults:
    def test_now_default(self, make_field, make_model) -> None:
        field = make_field("createdAt", "DateTime", default={"name": "now"})
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.modifier_text == ".optional().default(() => new Date())"

    def test_uuid_default_emits_no_generator(self, make_field, make_model) -> None:
        field = make_field("id", "String", isId=True, default={"name": "uuid"})
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.modifier_text == ".optional()"
        assert "UUID default detected; no inline generator emitted" in result.notes

    def test_float_default_keeps_decimal_point(self, make_field, make_model) -> None:
        field = make_field("ratio", "Float", default=1)
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.modifier_text == ".default(1.0)"

    def test_string_default_is_quoted(self, make_field, make_model) -> None:
        field = make_field("status", "String", default="draft")
        result = resolve_optionality(field, make_model(fields=[field]))
        assert result.modifier_text == '.default("draft")'


class TestPredicates:
    def test_is_auto_generated(self, make_field) -> None:
        assert is_auto_generated(make_field("id", "Int", isId=True, default={"name": "cuid"}))
        assert not is_auto_generated(make_field("id", "Int", isId=True))

    def test_is_safe_default(self, make_field) -> None:
        assert is_safe_default(make_field("at", "DateTime", default="2024-01-01"))
        assert not is_safe_default(make_field("n", "Int", default=3))


class TestProviderNotes:
    def test_postgresql_serial(self, make_field, make_model) -> None:
        field = make_field("id", "Int", isId=True, default={"name": "autoincrement"})
        result = resolve_optionality(field, make_model(fields=[field]), "postgresql")
        assert "PostgreSQL serial/bigserial primary key" in result.notes

    def test_unknown_provider_adds_nothing(self, make_field, make_model) -> None:
        field = make_field("id", "Int", isId=True)
        result = resolve_optionality(field, make_model(fields=[field]), "oracle")
        assert result.notes == []
