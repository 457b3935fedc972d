"""
tests/test_annotations.py
Unit tests for zodgen.annotations.

Tests cover:
- Directive extraction from field documentation
- Parse errors and per-type applicability errors
- Custom imports and the identifiers they bind
- Model-level validation chains
- Description cleanup
"""

from __future__ import annotations

from zodgen.annotations import (
    CustomImport,
    FieldContext,
    ZodAnnotationExtractor,
    clean_description,
    normalize_documentation,
    parse_import_payload,
)


def _ctx(field_type: str = "String", *, is_list: bool = False) -> FieldContext:
    return FieldContext(
        model_name="User", field_name="value", field_type=field_type, is_list=is_list
    )


class TestFieldExtraction:
    def test_simple_chain(self) -> None:
        result = ZodAnnotationExtractor().extract("/// @zod.min(1).max(255)", _ctx())
        assert result.is_valid
        assert [d.method for d in result.directives] == ["min", "max"]
        assert result.directives[1].arguments == ("255",)

    def test_type_qualifier_is_skipped(self) -> None:
        result = ZodAnnotationExtractor().extract("@zod.string.email()", _ctx())
        assert [d.method for d in result.directives] == ["email"]

    def test_no_documentation(self) -> None:
        result = ZodAnnotationExtractor().extract(None, _ctx())
        assert not result.has_directives
        assert result.is_valid

    def test_missing_parentheses_is_parse_error(self) -> None:
        result = ZodAnnotationExtractor().extract("@zod.email", _ctx())
        assert result.parse_errors
        assert result.directives == []

    def test_unbalanced_parentheses(self) -> None:
        result = ZodAnnotationExtractor().extract("@zod.min(1", _ctx())
        assert any("Unbalanced" in e for e in result.parse_errors)

    def test_method_not_applicable_to_type(self) -> None:
        result = ZodAnnotationExtractor().extract("@zod.email()", _ctx("Int"))
        assert result.mapping_errors
        assert not result.is_valid
        assert result.directives == []

    def test_array_methods_allowed_on_lists(self) -> None:
        result = ZodAnnotationExtractor().extract(
            "@zod.nonempty()", _ctx("Boolean", is_list=True)
        )
        assert result.is_valid

    def test_replacement_flagged(self) -> None:
        result = ZodAnnotationExtractor().extract('@zod.enum(["a", "b"])', _ctx())
        assert result.directives[0].replacement
        assert result.directives[0].to_expression().render() == 'z.enum(["a", "b"])'

    def test_nonempty_rewritten_for_v4(self) -> None:
        result = ZodAnnotationExtractor("v4").extract("@zod.nonempty()", _ctx())
        assert result.directives[0].method == "min"
        assert result.directives[0].arguments == ("1",)

    def test_element_level_marker(self) -> None:
        result = ZodAnnotationExtractor().extract(
            "Each array element validated @zod.min(2)", _ctx(is_list=True)
        )
        assert result.element_level

    def test_custom_override_is_not_a_directive(self) -> None:
        result = ZodAnnotationExtractor().extract("@zod.custom.use(z.string())", _ctx())
        assert result.directives == []
        assert result.is_valid

    def test_description_is_cleaned(self) -> None:
        result = ZodAnnotationExtractor().extract("Login address. @zod.email()", _ctx())
        assert result.description == "Login address."


class TestImports:
    def test_import_directive(self) -> None:
        result = ZodAnnotationExtractor().extract(
            "@zod.import([\"import { isSlug } from '../lib/slug'\"]).refine(isSlug)", _ctx()
        )
        assert result.is_valid
        assert result.custom_imports[0].imported_items == ("isSlug",)
        assert [d.method for d in result.directives] == ["refine"]

    def test_statement_gets_semicolon(self) -> None:
        custom = CustomImport.from_statement("import { a, b as c } from 'x'")
        assert custom.statement.endswith(";")
        assert custom.imported_items == ("a", "c")

    def test_default_and_namespace_imports(self) -> None:
        assert CustomImport.from_statement("import dayjs from 'dayjs';").imported_items == (
            "dayjs",
        )
        assert CustomImport.from_statement("import * as v from 'v';").imported_items == ("v",)

    def test_invalid_payload(self) -> None:
        imports, errors = parse_import_payload("not a list")
        assert imports == []
        assert errors

    def test_invalid_statement(self) -> None:
        imports, errors = parse_import_payload('["const x = 1"]')
        assert imports == []
        assert errors == ["Invalid import statement: const x = 1"]


class TestModelExtraction:
    def test_model_validation_chain(self) -> None:
        extraction = ZodAnnotationExtractor().extract_model(
            "/// @zod.refine((d) => d.a < d.b)", "Range"
        )
        assert [m.name for m in extraction.validation] == ["refine"]
        assert extraction.errors == []

    def test_model_import(self) -> None:
        extraction = ZodAnnotationExtractor().extract_model(
            "@zod.import([\"import { check } from './check'\"]).refine(check)", "Range"
        )
        assert extraction.custom_imports[0].statement == "import { check } from './check';"

    def test_model_without_docs(self) -> None:
        extraction = ZodAnnotationExtractor().extract_model(None, "Range")
        assert extraction.validation == ()


class TestTextHelpers:
    def test_normalize_documentation(self) -> None:
        assert normalize_documentation("/// first\n// second") == "first\nsecond"

    def test_clean_description(self) -> None:
        assert clean_description("Title text @zod.min(1).max(5) trailing") == (
            "Title text trailing"
        )
