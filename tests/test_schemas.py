"""Tests for schema loading and validator compilation."""

import pytest
from conftest import ADDRESS_SCHEMA, PERSON_SCHEMA, PERSON_SCHEMA_ID, write_json, write_text

from jsontree_validate.errors import RegexCompileError, SchemaLoadError
from jsontree_validate.schemas import build_validator, compile_validator, load_schemas


class TestLoadSchemas:
    def test_documents_are_registered_by_path_and_id(self, schema_dir):
        schemas = load_schemas(str(schema_dir))

        assert set(schemas.files) == {"address.json", "person.json"}
        assert schemas.get(PERSON_SCHEMA_ID) == PERSON_SCHEMA
        assert schemas.get("person.json") == PERSON_SCHEMA
        assert schemas.get("person") == PERSON_SCHEMA
        assert schemas.get("address") == ADDRESS_SCHEMA

    def test_schemas_are_discovered_recursively(self, tmp_path):
        write_json(tmp_path / "s" / "nested" / "deep.json", {"type": "string"})

        schemas = load_schemas(str(tmp_path / "s"))

        assert schemas.get("nested/deep") == {"type": "string"}

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SchemaLoadError, match="not found"):
            load_schemas(str(tmp_path / "nope"))

    def test_empty_setting(self):
        with pytest.raises(SchemaLoadError):
            load_schemas("")

    def test_directory_without_schemas(self, tmp_path):
        with pytest.raises(SchemaLoadError, match="no schema documents"):
            load_schemas(str(tmp_path))

    def test_malformed_document(self, tmp_path):
        write_text(tmp_path / "broken.json", "{")

        with pytest.raises(SchemaLoadError, match="broken.json"):
            load_schemas(str(tmp_path))

    def test_document_failing_meta_schema(self, tmp_path):
        write_json(tmp_path / "bad.json", {"type": 12})

        with pytest.raises(SchemaLoadError, match="invalid schema"):
            load_schemas(str(tmp_path))

    def test_invalid_regex(self, tmp_path):
        write_json(tmp_path / "re.json", {"type": "string", "pattern": "(unclosed"})

        with pytest.raises(RegexCompileError) as excinfo:
            load_schemas(str(tmp_path))
        assert excinfo.value.pattern == "(unclosed"

    def test_invalid_pattern_properties_regex(self, tmp_path):
        write_json(tmp_path / "re.json", {"patternProperties": {"[a-": {}}})

        with pytest.raises(RegexCompileError):
            load_schemas(str(tmp_path))

    def test_marker_mid_pattern_passes_meta_schema(self, tmp_path):
        write_json(tmp_path / "ok.json", {"type": "string", "pattern": "^x(?i)abc$"})

        assert load_schemas(str(tmp_path)).get("ok")

    def test_enum_values_are_not_treated_as_patterns(self, tmp_path):
        write_json(tmp_path / "enum.json", {"enum": [{"pattern": "(unclosed"}]})

        assert load_schemas(str(tmp_path)).get("enum")

    def test_duplicate_id(self, tmp_path):
        write_json(tmp_path / "one.json", {"$id": "https://example.com/same"})
        write_json(tmp_path / "two.json", {"$id": "https://example.com/same"})

        with pytest.raises(SchemaLoadError, match="declared by both"):
            load_schemas(str(tmp_path))


class TestSelect:
    def test_unknown_identifier(self, schema_dir):
        with pytest.raises(SchemaLoadError, match="not found"):
            build_validator(str(schema_dir), "https://example.com/schemas/missing.json")

    def test_identifier_required_with_several_documents(self, schema_dir):
        with pytest.raises(SchemaLoadError, match="identifier is required"):
            build_validator(str(schema_dir))

    def test_single_document_needs_no_identifier(self, tmp_path):
        write_json(tmp_path / "only.json", {"type": "object", "required": ["a"]})

        validator = build_validator(str(tmp_path))

        assert validator.is_valid({"a": 1})
        assert not validator.is_valid({})


class TestCompiledValidator:
    def test_ref_between_documents_with_ids(self, schema_dir):
        validator = build_validator(str(schema_dir), PERSON_SCHEMA_ID)

        assert validator.is_valid({"name": "Ada", "address": {"city": "London"}})
        assert not validator.is_valid({"name": "Ada", "address": {}})

    def test_ref_by_relative_path_without_ids(self, tmp_path):
        write_json(tmp_path / "main.json", {"properties": {"kind": {"$ref": "defs/kind.json"}}})
        write_json(tmp_path / "defs" / "kind.json", {"enum": ["a", "b"]})

        validator = build_validator(str(tmp_path), "main")

        assert validator.is_valid({"kind": "a"})
        assert not validator.is_valid({"kind": "c"})

    def test_pattern_marker_is_case_insensitive(self, tmp_path):
        write_json(tmp_path / "code.json", {"type": "string", "pattern": "(?i)^ABC$"})
        validator = build_validator(str(tmp_path))

        assert validator.is_valid("abc")
        assert validator.is_valid("ABC")
        assert not validator.is_valid("abd")

    def test_pattern_without_marker_is_case_sensitive(self, tmp_path):
        write_json(tmp_path / "code.json", {"type": "string", "pattern": "^ABC$"})
        validator = build_validator(str(tmp_path))

        assert validator.is_valid("ABC")
        assert not validator.is_valid("abc")

    def test_pattern_properties_and_additional_properties(self, tmp_path):
        schema = {
            "type": "object",
            "properties": {"id": {"type": "integer"}},
            "patternProperties": {"(?i)^x-": {"type": "string"}},
            "additionalProperties": False,
        }
        write_json(tmp_path / "headers.json", schema)
        validator = build_validator(str(tmp_path))

        assert validator.is_valid({"id": 1, "X-Trace": "abc", "x-span": "def"})
        assert not validator.is_valid({"X-Trace": 1})

        errors = list(validator.iter_errors({"other": 1}))
        assert len(errors) == 1
        assert "'other'" in errors[0].message

    def test_additional_properties_without_pattern_properties(self, tmp_path):
        write_json(tmp_path / "closed.json", {"properties": {"a": {}}, "additionalProperties": False})
        validator = build_validator(str(tmp_path))

        errors = list(validator.iter_errors({"a": 1, "b": 2}))
        assert [e.message for e in errors] == ["Additional properties are not allowed ('b' was unexpected)"]

    def test_additional_properties_schema(self, tmp_path):
        write_json(tmp_path / "map.json", {"additionalProperties": {"type": "integer"}})
        validator = build_validator(str(tmp_path))

        assert validator.is_valid({"a": 1})
        assert not validator.is_valid({"a": "1"})

    def test_formats_are_checked(self, tmp_path):
        write_json(tmp_path / "mail.json", {"type": "string", "format": "email"})
        validator = build_validator(str(tmp_path))

        assert validator.is_valid("someone@example.com")
        assert not validator.is_valid("not-an-email")

    def test_draft_7_schema(self, tmp_path):
        schema = {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "$id": "https://example.com/legacy.json",
            "type": "object",
            "properties": {"code": {"type": "string", "pattern": "(?i)^ok$"}},
        }
        write_json(tmp_path / "legacy.json", schema)

        validator = compile_validator(load_schemas(str(tmp_path)), "https://example.com/legacy.json")

        assert validator.is_valid({"code": "OK"})
        assert not validator.is_valid({"code": "nope"})


class TestUnevaluatedProperties:
    def test_pattern_properties_marker(self, tmp_path):
        write_json(tmp_path / "s.json", {"patternProperties": {"^x-(?i)abc$": {}}, "unevaluatedProperties": False})
        validator = build_validator(str(tmp_path))

        assert validator.is_valid({"x-ABC": 1})
        assert not validator.is_valid({"x-ABC": 1, "y": 2})

    def test_keys_evaluated_through_all_of_and_ref(self, tmp_path):
        schema = {
            "$defs": {"named": {"properties": {"name": {"type": "string"}}}},
            "allOf": [{"$ref": "#/$defs/named"}, {"patternProperties": {"(?i)^TAG-": {}}}],
            "unevaluatedProperties": False,
        }
        write_json(tmp_path / "s.json", schema)
        validator = build_validator(str(tmp_path))

        assert validator.is_valid({"name": "a", "tag-1": 1})
        errors = list(validator.iter_errors({"name": "a", "extra": 1, "more": 2}))
        assert [e.message for e in errors] == [
            "Unevaluated properties are not allowed ('extra', 'more' were unexpected)"
        ]

    def test_unevaluated_properties_schema(self, tmp_path):
        write_json(tmp_path / "s.json", {"properties": {"a": {}}, "unevaluatedProperties": {"type": "integer"}})
        validator = build_validator(str(tmp_path))

        assert validator.is_valid({"a": "x", "b": 1})
        assert not validator.is_valid({"a": "x", "b": "y"})

    def test_if_then_branch(self, tmp_path):
        schema = {
            "if": {"properties": {"kind": {"const": "a"}}, "required": ["kind"]},
            "then": {"patternProperties": {"(?i)^A_": {}}},
            "properties": {"kind": {}},
            "unevaluatedProperties": False,
        }
        write_json(tmp_path / "s.json", schema)
        validator = build_validator(str(tmp_path))

        assert validator.is_valid({"kind": "a", "a_x": 1})
        assert not validator.is_valid({"kind": "b", "a_x": 1})
