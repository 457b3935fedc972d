"""
tests/test_documentation.py
Unit tests for zodgen.documentation (generated JSDoc).
"""

from __future__ import annotations

from zodgen.documentation import (
    FieldDocMetadata,
    collect_field_metadata,
    extract_zod_base_type,
    field_example,
    format_default_value,
    render_field_jsdoc,
    render_model_documentation,
)


def _meta(**kwargs) -> FieldDocMetadata:
    data = {
        "model_name": "User",
        "field_name": "value",
        "declared_type": "String",
        "zod_type": "string",
    }
    data.update(kwargs)
    return FieldDocMetadata(**data)


class TestHelpers:
    def test_base_type(self) -> None:
        assert extract_zod_base_type("z.number().int()") == "number"
        assert extract_zod_base_type("z.array(z.string())") == "array"
        assert extract_zod_base_type(".min(1)") == "string"
        assert extract_zod_base_type("RoleSchema") == "unknown"

    def test_format_default_value(self, make_field) -> None:
        assert format_default_value(None) is None
        now = make_field("createdAt", "DateTime", default={"name": "now", "args": []})
        role = make_field("role", "Role", kind="enum", default="USER")
        assert format_default_value(now.default) == "now()"
        assert format_default_value(role.default) == '"USER"'

    def test_collect_splits_notes(self, make_field) -> None:
        field_desc = make_field("email", "String", isUnique=True)
        meta = collect_field_metadata(
            field_desc,
            "User",
            "z.string().email()",
            ["// @zod.email()", "// Unique field", "// Warning: something odd"],
            is_optional=False,
        )
        assert meta.inline_validations == ["@zod.email()"]
        assert meta.applied_validations == ["Unique field"]
        assert meta.zod_type == "string"
        assert meta.is_unique


class TestExamples:
    def test_string_examples_follow_validations(self) -> None:
        assert field_example(_meta()) == '"example string"'
        assert field_example(_meta(inline_validations=["@zod.email()"])) == '"user@example.com"'
        assert field_example(_meta(inline_validations=["@zod.url()"])) == '"https://example.com"'

    def test_int_examples(self) -> None:
        assert field_example(_meta(declared_type="Int", is_id=True)) == "1"
        assert field_example(_meta(declared_type="Int")) == "123"

    def test_lists(self) -> None:
        assert field_example(_meta(is_list=True)) == '["example string"]'
        assert field_example(_meta(declared_type="Json", is_list=True)) == "[]"

    def test_no_obvious_example(self) -> None:
        assert field_example(_meta(declared_type="Json")) is None


class TestFieldJsDoc:
    def test_full_block(self) -> None:
        meta = _meta(
            field_name="email",
            description="Login address.",
            is_unique=True,
            inline_validations=["@zod.email()"],
            constraints=["Unique constraint"],
        )
        lines = render_field_jsdoc(meta).splitlines()
        assert lines[0] == "/// Login address."
        assert lines[1] == "/**"
        assert " * @type {string}" in lines
        assert " * @unique Unique constraint" in lines
        assert " * @validations" in lines
        assert " * - @zod.email()" in lines
        assert " * @database" in lines
        assert ' * "user@example.com"' in lines
        assert lines[-2] == " * @generated Zod schema for User.email"
        assert lines[-1] == " */"

    def test_type_description(self) -> None:
        meta = _meta(zod_type="date", declared_type="DateTime", is_optional=True, is_nullable=True)
        assert " * @type {Date | undefined | null}" in render_field_jsdoc(meta)

    def test_optional_reason(self) -> None:
        meta = _meta(optionality_reason="auto_generated", default_value="now()")
        block = render_field_jsdoc(meta)
        assert " * @default now()" in block
        assert " * @optional auto generated" in block

    def test_required_reason_is_not_listed(self) -> None:
        assert "@optional" not in render_field_jsdoc(_meta(optionality_reason="required"))

    def test_no_echo_without_description(self) -> None:
        assert render_field_jsdoc(_meta()).startswith("/**")


class TestModelDocumentation:
    def test_counts_and_description(self, data_model) -> None:
        block = render_model_documentation(data_model.get_model("User"))
        assert " * @model User" in block
        assert " * @fields 7" in block
        assert " * @scalars 4" in block
        assert " * @relations 2" in block
        assert " * @enums 1" in block
        assert " * A registered account." in block
        assert block.endswith(" */")

    def test_empty_model(self, make_model) -> None:
        block = render_model_documentation(make_model("Empty"))
        assert " * @fields 0" in block
        assert "@scalars" not in block
