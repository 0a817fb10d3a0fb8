"""
JSON Schema target.

Schemas are re-emitted as Draft 2020-12 documents and checked with
``jsonschema.Draft202012Validator`` and its format checker.
"""

from __future__ import annotations

import copy
from typing import Any

from ..config import ConversionOptions
from .base import ExtrasMode, SchemaBuilder, Target, TargetCapabilities
from .expr_nodes import Const, DictExpr, Expr, ListExpr, Name, RegexLiteral, call, const_kwargs, dict_expr

# Format name on input -> format keyword emitted
FORMATS = {
    "email": "email",
    "uri": "uri",
    "url": "uri",
    "uuid": "uuid",
    "date-time": "date-time",
    "date": "date",
    "time": "time",
    "ipv4": "ipv4",
    "ipv6": "ipv6",
    "hostname": "hostname",
    "duration": "duration",
}

# Metadata attribute -> keyword
ANNOTATIONS = {
    "title": "title",
    "description": "description",
    "deprecated": "deprecated",
    "read_only": "readOnly",
    "write_only": "writeOnly",
    "default": "default",
}

NULL_SCHEMA = dict_expr({"type": Const("null")})


class JsonSchemaBuilder(SchemaBuilder):
    """Builds Draft 2020-12 schema documents."""

    def any(self) -> Expr:
        return DictExpr()

    def null(self) -> Expr:
        return NULL_SCHEMA

    def string(self, min_length=None, max_length=None, pattern=None, format=None) -> Expr:
        keywords: dict[str, Expr] = {"type": Const("string")}
        if format is not None:
            keywords["format"] = Const(FORMATS[format])
        keywords.update(const_kwargs(minLength=min_length, maxLength=max_length))
        if pattern is not None:
            keywords["pattern"] = RegexLiteral(pattern)
        return dict_expr(keywords)

    def _numeric(self, schema_type, minimum, maximum, exclusive_minimum, exclusive_maximum, multiple_of) -> Expr:
        return dict_expr(
            {
                "type": Const(schema_type),
                **const_kwargs(
                    minimum=minimum,
                    maximum=maximum,
                    exclusiveMinimum=exclusive_minimum,
                    exclusiveMaximum=exclusive_maximum,
                    multipleOf=multiple_of,
                ),
            }
        )

    def number(self, minimum=None, maximum=None, exclusive_minimum=None, exclusive_maximum=None, multiple_of=None) -> Expr:
        return self._numeric("number", minimum, maximum, exclusive_minimum, exclusive_maximum, multiple_of)

    def integer(self, minimum=None, maximum=None, exclusive_minimum=None, exclusive_maximum=None, multiple_of=None) -> Expr:
        return self._numeric("integer", minimum, maximum, exclusive_minimum, exclusive_maximum, multiple_of)

    def boolean(self) -> Expr:
        return dict_expr({"type": Const("boolean")})

    def array(self, item, min_items=None, max_items=None, unique_items=False) -> Expr:
        keywords: dict[str, Expr] = {"type": Const("array")}
        if item != DictExpr():
            keywords["items"] = item
        keywords.update(const_kwargs(minItems=min_items, maxItems=max_items, uniqueItems=True if unique_items else None))
        return dict_expr(keywords)

    def tuple(self, items) -> Expr:
        return dict_expr(
            {
                "type": Const("array"),
                "prefixItems": ListExpr(tuple(items)),
                "minItems": Const(len(items)),
                "maxItems": Const(len(items)),
            }
        )

    def object(self, name, properties, extras, extras_schema=None) -> Expr:
        keywords: dict[str, Expr] = {"type": Const("object")}
        if properties:
            keywords["properties"] = dict_expr(
                {prop.name: self.nullable(prop.expr) if prop.allow_null else prop.expr for prop in properties}
            )
        required = [prop.name for prop in properties if prop.required]
        if required:
            keywords["required"] = ListExpr(tuple(Const(n) for n in required))
        if extras == ExtrasMode.FORBID:
            keywords["additionalProperties"] = Const(False)
        elif extras == ExtrasMode.SCHEMA:
            keywords["additionalProperties"] = extras_schema
        return dict_expr(keywords)

    def mapping(self, value) -> Expr:
        return dict_expr({"type": Const("object"), "additionalProperties": value})

    def union(self, branches, exclusive) -> Expr:
        return dict_expr({"oneOf" if exclusive else "anyOf": ListExpr(tuple(branches))})

    def literal(self, value, type_name=None) -> Expr:
        return dict_expr({"const": Const(value)})

    def enum(self, values, type_name=None) -> Expr:
        return dict_expr({"enum": Const(list(values))})

    def nullable(self, expr) -> Expr:
        if expr in (DictExpr(), NULL_SCHEMA):
            return expr
        return dict_expr({"anyOf": ListExpr((expr, NULL_SCHEMA))})

    def annotate(self, expr, metadata) -> Expr:
        if not isinstance(expr, DictExpr):
            return expr
        return expr.with_items(**{ANNOTATIONS[key]: Const(value) for key, value in metadata.items()})


class JsonSchemaTarget(Target):
    """jsonschema Draft 2020-12 validators."""

    NAME = "jsonschema"
    DISTRIBUTION = "jsonschema[format-nongpl]"

    CAPABILITIES = TargetCapabilities(
        native_union=True,
        native_enum=True,
        multiple_of=True,
        unique_items=True,
        typed_extras_with_properties=True,
        format_with_string_constraints=True,
        structured_literals=True,
        formats=frozenset(FORMATS),
    )

    IMPORTS = {"Draft202012Validator": "jsonschema"}

    def builder(self) -> JsonSchemaBuilder:
        return JsonSchemaBuilder()

    def _validator(self, schema: Expr) -> Expr:
        return call("Draft202012Validator", schema, format_checker=Name("Draft202012Validator.FORMAT_CHECKER"))

    def declarations(self, root: Expr, schema_name: str, type_name: str, options: ConversionOptions) -> list[tuple[str, Expr]]:
        if options.generate_type_inference:
            return [(type_name, root), (schema_name, self._validator(Name(type_name)))]
        return [(schema_name, self._validator(root))]

    def accepts(self, runtime_schema: Any, value: Any) -> bool:
        return runtime_schema.is_valid(value)

    def to_canonical(self, runtime_schema: Any) -> dict[str, Any]:
        return copy.deepcopy(runtime_schema.schema)
