import json
from pathlib import Path

import pytest

from json_schema_to_validator import DiagnosticKind, accepts, convert_to_runtime, generate, generate_code, to_canonical
from json_schema_to_validator.pipeline.ast_backends.pydantic_backend import safe_field_name

TEST_DATA = Path(__file__).parent / "test_data"
TARGET = "pydantic"


def load_schema(name):
    with open(TEST_DATA / name) as f:
        return json.load(f)


def check(schema, options=None):
    result = convert_to_runtime(schema, TARGET, options)
    return lambda value: accepts(TARGET, result.schema, value)


class TestPydanticCode:
    """Test cases for generated pydantic code"""

    def test_object_matches_reference(self):
        code = generate_code(load_schema("person.schema.json"), TARGET, {"schema_name": "PersonSchema"})
        assert code == (TEST_DATA / "person_pydantic.py").read_text()

    def test_without_type_inference(self):
        code = generate_code({"type": "string"}, TARGET, {"schema_name": "Name", "generate_type_inference": False})
        assert "Name = TypeAdapter(StrictStr)" in code
        assert "NameType" not in code

    def test_type_name_appends_type(self):
        code = generate_code({"type": "boolean"}, TARGET, {"schema_name": "Flag"})
        assert "FlagType = StrictBool\nFlag = TypeAdapter(FlagType)" in code
        assert '__all__ = ["FlagType", "Flag"]' in code

    def test_enum_uses_literal(self):
        code = generate_code({"type": "string", "enum": ["a", "b"]}, TARGET)
        assert 'Literal["a", "b"]' in code

    def test_union_and_nullable(self):
        code = generate_code({"oneOf": [{"type": "string"}, {"type": "integer"}], "nullable": True}, TARGET)
        assert "Optional[Union[StrictStr, StrictInt]]" in code
        assert "from typing import Optional, Union" in code

    def test_no_imports(self):
        code = generate_code({"type": "string"}, TARGET, {"include_imports": False, "export_schema": False})
        assert "import" not in code
        assert "__all__" not in code

    def test_unsafe_property_names_are_aliased(self):
        schema = {
            "type": "object",
            "properties": {"class": {"type": "string"}, "_id": {"type": "integer"}, "model_name": {"type": "string"}},
            "required": ["class"],
        }
        code = generate_code(schema, TARGET)
        assert 'field_class=(StrictStr, Field(..., alias="class"))' in code
        assert 'id=(StrictInt, Field(None, alias="_id"))' in code
        assert 'field_model_name=(StrictStr, Field(None, alias="model_name"))' in code

    def test_description_goes_to_field(self):
        code = generate_code({"type": "object", "properties": {"a": {"type": "string", "description": "The A"}}}, TARGET)
        assert 'a=(StrictStr, Field(None, description="The A"))' in code


@pytest.mark.parametrize(
    "key,expected",
    [("name", "name"), ("class", "field_class"), ("first-name", "first_name"), ("2nd", "field_2nd"), ("json", "field_json")],
)
def test_safe_field_name(key, expected):
    assert safe_field_name(key, set()) == expected


def test_safe_field_name_deduplicates():
    used = set()
    assert safe_field_name("a-b", used) == "a_b"
    assert safe_field_name("a b", used) == "a_b_2"


class TestPydanticRuntime:
    """Test cases for pydantic validator behaviour"""

    def test_object(self):
        valid = check(load_schema("person.schema.json"))
        assert valid({"name": "Ada", "age": 36, "tags": ["x"]})
        assert valid({"name": "Ada", "unknown": True})
        assert not valid({"name": ""})
        assert not valid({"age": 3})
        assert not valid({"name": "Ada", "age": -1})
        assert not valid({"name": "Ada", "tags": [1]})

    def test_aliased_properties_validate_by_original_key(self):
        valid = check({"type": "object", "properties": {"class": {"type": "string"}}, "required": ["class"]})
        assert valid({"class": "x"})
        assert not valid({"field_class": "x"})

    @pytest.mark.parametrize(
        "encoding,missing_ok,null_ok",
        [("null", False, True), ("optional", True, False), ("nullish", True, True)],
    )
    def test_nullable_encodings(self, encoding, missing_ok, null_ok):
        schema = {"type": "object", "properties": {"nick": {"type": "string", "nullable": True}}, "required": ["nick"]}
        valid = check(schema, {"nullable": encoding})
        assert valid({"nick": "x"})
        assert valid({}) is missing_ok
        assert valid({"nick": None}) is null_ok

    def test_extra_keys(self):
        schema = {"type": "object", "properties": {"a": {"type": "string"}}}
        assert check(schema)({"b": 1})
        assert check(schema, {"additional_properties": False})({"b": 1})
        assert not check(schema, {"additional_properties": False, "strict": True})({"b": 1})
        assert not check({**schema, "additionalProperties": False})({"b": 1})

    def test_map(self):
        valid = check({"type": "object", "additionalProperties": {"type": "integer"}})
        assert valid({"a": 1})
        assert not valid({"a": "x"})

    def test_tuple(self):
        valid = check({"type": "array", "items": [{"type": "string"}, {"type": "integer"}]})
        assert valid(["a", 1])
        assert not valid(["a"])
        assert not valid(["a", 1, 2])

    def test_multiple_of_is_native(self):
        result = convert_to_runtime({"type": "integer", "multipleOf": 3}, TARGET)
        assert result.diagnostics == []
        assert accepts(TARGET, result.schema, 9)
        assert not accepts(TARGET, result.schema, 10)

    def test_formats(self):
        assert check({"type": "string", "format": "email"})("a@example.com")
        assert not check({"type": "string", "format": "email"})("nope")
        assert check({"type": "string", "format": "uuid"})("1b4e28ba-2fa1-11d2-883f-0016d3cca427")
        assert not check({"type": "string", "format": "date"})("yesterday")


class TestPydanticDiagnostics:
    """Test cases for what pydantic cannot express"""

    def test_unique_items(self):
        result = generate({"type": "array", "items": {"type": "integer"}, "uniqueItems": True, "maxItems": 2}, TARGET)
        assert [d.kind for d in result.diagnostic_details] == [DiagnosticKind.UNSUPPORTED_CONSTRAINT]
        assert "Field(max_length=2)" in result.code

    def test_format_with_length(self):
        result = generate({"type": "string", "format": "email", "maxLength": 5}, TARGET)
        assert [d.kind for d in result.diagnostic_details] == [DiagnosticKind.UNSUPPORTED_FORMAT]
        assert "EmailStr" not in result.code

    def test_unknown_format(self):
        result = generate({"type": "string", "format": "hostname"}, TARGET)
        assert [d.kind for d in result.diagnostic_details] == [DiagnosticKind.UNSUPPORTED_FORMAT]

    def test_structured_enum_falls_back(self):
        result = generate({"enum": [{"a": 1}, [1]]}, TARGET)
        assert [d.kind for d in result.diagnostic_details] == [DiagnosticKind.FALLBACK_USED]
        assert "Any" in result.code

    def test_typed_extras_next_to_properties(self):
        schema = {"type": "object", "properties": {"a": {"type": "string"}}, "additionalProperties": {"type": "integer"}}
        result = generate(schema, TARGET)
        assert [d.kind for d in result.diagnostic_details] == [DiagnosticKind.UNSUPPORTED_CONSTRAINT]
        assert 'extra="allow"' in result.code


class TestPydanticToCanonical:
    """Test cases for reading pydantic types back into a schema"""

    def test_type_adapter(self):
        result = convert_to_runtime(load_schema("person.schema.json"), TARGET)
        canonical = to_canonical(TARGET, result.schema)
        assert canonical["type"] == "object"
        assert canonical["required"] == ["name"]
        assert canonical["properties"]["name"]["minLength"] == 1
        assert canonical["properties"]["age"]["minimum"] == 0

    def test_model_class_and_plain_type(self):
        from pydantic import BaseModel

        class Pet(BaseModel):
            name: str

        assert to_canonical(TARGET, Pet)["required"] == ["name"]
        assert to_canonical(TARGET, list[int]) == {"type": "array", "items": {"type": "integer"}}

    def test_nested_models_use_local_refs(self):
        schema = {
            "type": "object",
            "properties": {
                "address": {"type": "object", "properties": {"city": {"type": "string"}}, "required": ["city"]},
            },
            "required": ["address"],
        }
        canonical = to_canonical(TARGET, convert_to_runtime(schema, TARGET).schema)
        assert "$defs" in canonical
        rebuilt = convert_to_runtime(canonical, "jsonschema", {"root_document": canonical})
        assert rebuilt.diagnostics == []
        assert accepts("jsonschema", rebuilt.schema, {"address": {"city": "Paris"}})
        assert not accepts("jsonschema", rebuilt.schema, {"address": {}})
