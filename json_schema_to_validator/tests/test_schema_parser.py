import unittest
from unittest import TestCase

import pytest

from json_schema_to_validator.pipeline.errors import InvalidSchemaError
from json_schema_to_validator.pipeline.schema_ast import UNSET, CanonicalSchema, SchemaParser


class TestSchemaParser(TestCase):
    def setUp(self):
        self.parser = SchemaParser()

    def test_keywords_are_snake_cased(self):
        node = self.parser.parse(
            {
                "type": "string",
                "minLength": 1,
                "maxLength": 10,
                "pattern": "^a",
                "readOnly": True,
                "description": "A name",
            }
        )
        self.assertEqual(node.type, "string")
        self.assertEqual(node.min_length, 1)
        self.assertEqual(node.max_length, 10)
        self.assertEqual(node.pattern, "^a")
        self.assertTrue(node.read_only)
        self.assertEqual(node.description, "A name")

    def test_default_and_const_use_unset(self):
        node = self.parser.parse({"type": "string"})
        self.assertIs(node.default, UNSET)
        self.assertFalse(node.has_default)
        self.assertFalse(node.has_const)

        with_null_default = self.parser.parse({"type": "string", "default": None})
        self.assertTrue(with_null_default.has_default)
        self.assertIsNone(with_null_default.default)

    def test_openapi_30_boolean_exclusive_bounds(self):
        node = self.parser.parse({"type": "number", "minimum": 0, "exclusiveMinimum": True, "maximum": 5, "exclusiveMaximum": False})
        self.assertIsNone(node.minimum)
        self.assertEqual(node.exclusive_minimum, 0)
        self.assertEqual(node.maximum, 5)
        self.assertIsNone(node.exclusive_maximum)

    def test_numeric_exclusive_bounds(self):
        node = self.parser.parse({"type": "integer", "exclusiveMinimum": 1, "exclusiveMaximum": 9})
        self.assertEqual(node.exclusive_minimum, 1)
        self.assertEqual(node.exclusive_maximum, 9)

    def test_type_list_with_null_becomes_nullable(self):
        node = self.parser.parse({"type": ["string", "null"], "maxLength": 3})
        self.assertEqual(node.type, "string")
        self.assertTrue(node.nullable)
        self.assertEqual(node.max_length, 3)

    def test_type_list_with_several_types_becomes_any_of(self):
        node = self.parser.parse({"type": ["string", "integer", "null"], "description": "id"})
        self.assertIsNone(node.type)
        self.assertTrue(node.nullable)
        self.assertEqual([member.type for member in node.any_of], ["string", "integer"])
        self.assertEqual(node.description, "id")

    def test_tuple_items(self):
        node = self.parser.parse({"type": "array", "items": [{"type": "string"}, {"type": "integer"}]})
        self.assertTrue(node.is_tuple)
        self.assertEqual([item.type for item in node.items], ["string", "integer"])

    def test_prefix_items(self):
        node = self.parser.parse({"type": "array", "prefixItems": [{"type": "boolean"}]})
        self.assertTrue(node.is_tuple)
        self.assertEqual(node.items[0].type, "boolean")

    def test_properties_and_required(self):
        node = self.parser.parse(
            {
                "type": "object",
                "properties": {"a": {"type": "string"}, "b": {"$ref": "#/defs/B"}},
                "required": ["a", "a"],
                "additionalProperties": {"type": "integer"},
            }
        )
        self.assertEqual(list(node.properties), ["a", "b"])
        self.assertEqual(node.properties["b"].ref, "#/defs/B")
        self.assertEqual(node.required, ("a",))
        self.assertEqual(node.additional_properties.type, "integer")

    def test_composites_and_extensions(self):
        node = self.parser.parse({"oneOf": [{"type": "string"}, {"type": "null"}], "x-internal": True})
        self.assertEqual(len(node.one_of), 2)
        self.assertEqual(node.extensions, {"x-internal": True})

    def test_true_schema_is_universal(self):
        self.assertEqual(self.parser.parse(True), CanonicalSchema())
        self.assertEqual(CanonicalSchema.from_dict({}), CanonicalSchema())

    def test_coerce_keeps_nodes(self):
        node = CanonicalSchema(type="string")
        self.assertIs(CanonicalSchema.coerce(node), node)


@pytest.mark.parametrize(
    "schema",
    [
        False,
        "string",
        {"type": "object", "required": "a"},
        {"$ref": 5},
        {"allOf": {"type": "string"}},
        {"properties": {"a": 3}},
    ],
)
def test_invalid_schemas_raise(schema):
    with pytest.raises(InvalidSchemaError):
        SchemaParser().parse(schema)


if __name__ == "__main__":
    unittest.main()
