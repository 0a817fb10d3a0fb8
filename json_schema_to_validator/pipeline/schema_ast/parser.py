"""
Canonical schema parser.

Turns OpenAPI 3.0/3.1 or JSON Schema dictionaries into ``CanonicalSchema``
nodes, normalizing the few places where the dialects disagree.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import InvalidSchemaError
from .nodes import UNSET, CanonicalSchema

# Keywords copied verbatim: (schema key, node field)
SCALAR_KEYWORDS = (
    ("format", "format"),
    ("minLength", "min_length"),
    ("maxLength", "max_length"),
    ("pattern", "pattern"),
    ("multipleOf", "multiple_of"),
    ("minItems", "min_items"),
    ("maxItems", "max_items"),
    ("uniqueItems", "unique_items"),
    ("title", "title"),
    ("description", "description"),
    ("deprecated", "deprecated"),
    ("nullable", "nullable"),
    ("readOnly", "read_only"),
    ("writeOnly", "write_only"),
)

COMPOSITE_KEYWORDS = (("allOf", "all_of"), ("oneOf", "one_of"), ("anyOf", "any_of"))


class SchemaParser:
    """Parses schema dictionaries into canonical nodes."""

    def parse(self, schema: Any, path: str = "#") -> CanonicalSchema:
        """
        Parse a schema dictionary recursively.

        Args:
            schema: The schema dictionary (or a boolean schema)
            path: Current path in the schema (for error messages)

        Returns:
            The canonical node
        """
        if isinstance(schema, CanonicalSchema):
            return schema
        if schema is True:
            return CanonicalSchema()
        if schema is False:
            raise InvalidSchemaError(f"Boolean 'false' schemas are not supported at {path}")
        if not isinstance(schema, Mapping):
            raise InvalidSchemaError(f"Expected a schema object at {path}, got {type(schema).__name__}")

        type_value = schema.get("type")
        if isinstance(type_value, list):
            return self._parse_type_list(schema, type_value, path)

        attrs: dict[str, Any] = {}
        if type_value is not None:
            if not isinstance(type_value, str):
                raise InvalidSchemaError(f"Expected 'type' to be a string or list at {path}")
            attrs["type"] = type_value

        for key, attr in SCALAR_KEYWORDS:
            if key in schema:
                attrs[attr] = schema[key]

        self._parse_bounds(schema, attrs)

        if "$ref" in schema:
            if not isinstance(schema["$ref"], str):
                raise InvalidSchemaError(f"Expected '$ref' to be a string at {path}")
            attrs["ref"] = schema["$ref"]

        for key, attr in COMPOSITE_KEYWORDS:
            if key in schema:
                members = schema[key]
                if not isinstance(members, list):
                    raise InvalidSchemaError(f"Expected '{key}' to be a list at {path}")
                attrs[attr] = tuple(self.parse(m, f"{path}/{key}/{i}") for i, m in enumerate(members))

        if "properties" in schema:
            properties = schema["properties"]
            if not isinstance(properties, Mapping):
                raise InvalidSchemaError(f"Expected 'properties' to be an object at {path}")
            attrs["properties"] = {name: self.parse(prop, f"{path}/properties/{name}") for name, prop in properties.items()}

        if "required" in schema:
            required = schema["required"]
            if not isinstance(required, list) or not all(isinstance(name, str) for name in required):
                raise InvalidSchemaError(f"Expected 'required' to be a list of names at {path}")
            attrs["required"] = tuple(dict.fromkeys(required))

        if "additionalProperties" in schema:
            extra = schema["additionalProperties"]
            attrs["additional_properties"] = extra if isinstance(extra, bool) else self.parse(extra, f"{path}/additionalProperties")

        # 3.1 tuple form takes precedence over a list-valued "items"
        if "prefixItems" in schema:
            attrs["items"] = tuple(self.parse(item, f"{path}/prefixItems/{i}") for i, item in enumerate(schema["prefixItems"]))
        elif "items" in schema:
            items = schema["items"]
            if isinstance(items, list):
                attrs["items"] = tuple(self.parse(item, f"{path}/items/{i}") for i, item in enumerate(items))
            else:
                attrs["items"] = self.parse(items, f"{path}/items")

        if "enum" in schema:
            if not isinstance(schema["enum"], list):
                raise InvalidSchemaError(f"Expected 'enum' to be a list at {path}")
            attrs["enum"] = tuple(schema["enum"])
        if "const" in schema:
            attrs["const"] = schema["const"]
        attrs["default"] = schema.get("default", UNSET)

        extensions = {k: v for k, v in schema.items() if isinstance(k, str) and k.startswith("x-")}
        if extensions:
            attrs["extensions"] = extensions

        return CanonicalSchema(**attrs)

    def _parse_bounds(self, schema: Mapping, attrs: dict[str, Any]) -> None:
        """Parse numeric bounds, accepting OpenAPI 3.0 boolean exclusive flags."""
        minimum = schema.get("minimum")
        maximum = schema.get("maximum")
        exclusive_minimum = schema.get("exclusiveMinimum")
        exclusive_maximum = schema.get("exclusiveMaximum")

        if isinstance(exclusive_minimum, bool):
            exclusive_minimum, minimum = (minimum, None) if exclusive_minimum else (None, minimum)
        if isinstance(exclusive_maximum, bool):
            exclusive_maximum, maximum = (maximum, None) if exclusive_maximum else (None, maximum)

        for attr, value in (
            ("minimum", minimum),
            ("maximum", maximum),
            ("exclusive_minimum", exclusive_minimum),
            ("exclusive_maximum", exclusive_maximum),
        ):
            if value is not None:
                attrs[attr] = value

    def _parse_type_list(self, schema: Mapping, types: list, path: str) -> CanonicalSchema:
        """Parse a 3.1 ``type`` list into ``type`` + ``nullable`` or an ``anyOf``."""
        non_null = [t for t in types if t != "null"]
        nullable = len(non_null) != len(types) or bool(schema.get("nullable"))

        if len(non_null) <= 1:
            single = dict(schema)
            single["type"] = non_null[0] if non_null else "null"
            if nullable and non_null:
                single["nullable"] = True
            return self.parse(single, path)

        variants = []
        for i, type_name in enumerate(non_null):
            variant = {k: v for k, v in schema.items() if k not in ("nullable", "default", "title", "description")}
            variant["type"] = type_name
            variants.append(self.parse(variant, f"{path}/type/{i}"))

        return CanonicalSchema(
            any_of=tuple(variants),
            nullable=nullable or None,
            title=schema.get("title"),
            description=schema.get("description"),
            default=schema.get("default", UNSET),
        )
