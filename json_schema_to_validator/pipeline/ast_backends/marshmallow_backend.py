"""
Marshmallow target.

Object roots become ``Schema.from_dict`` schema instances; every other node is
a ``fields`` instance with ``validate`` validators attached.
"""

from __future__ import annotations

import logging
from typing import Any

from ..config import ConversionOptions
from .base import ExtrasMode, PropertySpec, SchemaBuilder, Target, TargetCapabilities
from .expr_nodes import Call, Const, Expr, ListExpr, Name, RegexLiteral, TupleExpr, call, const_kwargs, dict_expr

logger = logging.getLogger(__name__)

FORMAT_FIELDS = {
    "email": "fields.Email",
    "uri": "fields.Url",
    "url": "fields.Url",
    "uuid": "fields.UUID",
    "date-time": "fields.DateTime",
    "date": "fields.Date",
    "ipv4": "fields.IPv4",
    "ipv6": "fields.IPv6",
}

UNKNOWN_MODES = {
    ExtrasMode.ALLOW: "INCLUDE",
    ExtrasMode.IGNORE: "EXCLUDE",
    ExtrasMode.FORBID: "RAISE",
}


SEARCH_PREFIX = "(?s:.*?)(?:"


def search_pattern(pattern: str) -> str:
    """
    Rewrite ``pattern`` so that ``validate.Regexp``, which matches at the start
    of the string, finds it anywhere.
    """
    return f"{SEARCH_PREFIX}{pattern})"


def source_pattern(regex: str) -> str:
    """The unanchored pattern a ``validate.Regexp`` expression tests for."""
    if regex.startswith(SEARCH_PREFIX) and regex.endswith(")"):
        return regex[len(SEARCH_PREFIX) : -1]
    return f"^(?:{regex})"


def _validators(validators: list[Expr]) -> Expr | None:
    if not validators:
        return None
    if len(validators) == 1:
        return validators[0]
    return ListExpr(tuple(validators))


class MarshmallowBuilder(SchemaBuilder):
    """Builds marshmallow field expressions."""

    def any(self) -> Expr:
        return call("fields.Raw", allow_none=Const(True))

    def null(self) -> Expr:
        return call("fields.Raw", allow_none=Const(True), validate=call("validate.Equal", Const(None)))

    def string(self, min_length=None, max_length=None, pattern=None, format=None) -> Expr:
        if format is not None:
            return call(FORMAT_FIELDS[format])
        validators = []
        if min_length is not None or max_length is not None:
            validators.append(call("validate.Length", **const_kwargs(min=min_length, max=max_length)))
        if pattern is not None:
            validators.append(call("validate.Regexp", RegexLiteral(search_pattern(pattern))))
        return call("fields.String", validate=_validators(validators))

    def _ranges(self, minimum, maximum, exclusive_minimum, exclusive_maximum) -> list[Expr]:
        validators = []
        if minimum is not None or maximum is not None:
            validators.append(call("validate.Range", **const_kwargs(min=minimum, max=maximum)))
        if exclusive_minimum is not None or exclusive_maximum is not None:
            validators.append(
                call(
                    "validate.Range",
                    **const_kwargs(
                        min=exclusive_minimum,
                        max=exclusive_maximum,
                        min_inclusive=False if exclusive_minimum is not None else None,
                        max_inclusive=False if exclusive_maximum is not None else None,
                    ),
                )
            )
        return validators

    def number(self, minimum=None, maximum=None, exclusive_minimum=None, exclusive_maximum=None, multiple_of=None) -> Expr:
        return call("fields.Float", validate=_validators(self._ranges(minimum, maximum, exclusive_minimum, exclusive_maximum)))

    def integer(self, minimum=None, maximum=None, exclusive_minimum=None, exclusive_maximum=None, multiple_of=None) -> Expr:
        return call(
            "fields.Integer",
            strict=Const(True),
            validate=_validators(self._ranges(minimum, maximum, exclusive_minimum, exclusive_maximum)),
        )

    def boolean(self) -> Expr:
        return call("fields.Boolean")

    def array(self, item, min_items=None, max_items=None, unique_items=False) -> Expr:
        length = None
        if min_items is not None or max_items is not None:
            length = call("validate.Length", **const_kwargs(min=min_items, max=max_items))
        return call("fields.List", item, validate=length)

    def tuple(self, items) -> Expr:
        return call("fields.Tuple", TupleExpr(tuple(items)))

    def object(self, name, properties, extras, extras_schema=None) -> Expr:
        field_map = {prop.name: self._field(prop) for prop in properties}
        schema = call("Schema.from_dict", dict_expr(field_map), name=Const(name))
        return call("fields.Nested", schema, unknown=Name(UNKNOWN_MODES[extras]))

    def _field(self, prop: PropertySpec) -> Expr:
        field = prop.expr
        kwargs: dict[str, Expr] = {}
        if prop.required:
            kwargs["required"] = Const(True)
        if prop.allow_null:
            kwargs["allow_none"] = Const(True)
        if prop.has_default and not prop.required:
            kwargs["load_default"] = Const(prop.default)
        if prop.description is not None:
            kwargs["metadata"] = Const({"description": prop.description})
        return field.with_kwargs(**kwargs) if kwargs else field

    def mapping(self, value) -> Expr:
        return call("fields.Dict", keys=call("fields.String"), values=value)

    def union(self, branches, exclusive) -> Expr:
        return self.any()

    def _base_field(self, values: list[Any]) -> str:
        if all(isinstance(v, str) for v in values):
            return "fields.String"
        if all(isinstance(v, bool) for v in values):
            return "fields.Boolean"
        if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            return "fields.Integer"
        return "fields.Raw"

    def _typed_field(self, values: list[Any], validator: Expr, allow_none: bool = False) -> Expr:
        base = self._base_field(values)
        kwargs: dict[str, Expr] = {}
        if base == "fields.Integer":
            kwargs["strict"] = Const(True)
        if allow_none:
            kwargs["allow_none"] = Const(True)
        kwargs["validate"] = validator
        return call(base, **kwargs)

    def literal(self, value, type_name=None) -> Expr:
        return self._typed_field([value], call("validate.Equal", Const(value)))

    def enum(self, values, type_name=None) -> Expr:
        choices = [v for v in values if v is not None]
        return self._typed_field(
            choices,
            call("validate.OneOf", ListExpr(tuple(Const(v) for v in choices))),
            allow_none=len(choices) != len(values),
        )

    def nullable(self, expr) -> Expr:
        return expr.with_kwargs(allow_none=Const(True))


# Field class -> schema keywords, subclasses before their bases
FIELD_SCHEMAS = (
    ("Email", {"type": "string", "format": "email"}),
    ("Url", {"type": "string", "format": "uri"}),
    ("UUID", {"type": "string", "format": "uuid"}),
    ("Date", {"type": "string", "format": "date"}),
    ("Time", {"type": "string", "format": "time"}),
    ("DateTime", {"type": "string", "format": "date-time"}),
    ("IPv4", {"type": "string", "format": "ipv4"}),
    ("IPv6", {"type": "string", "format": "ipv6"}),
    ("String", {"type": "string"}),
    ("Integer", {"type": "integer"}),
    ("Number", {"type": "number"}),
    ("Boolean", {"type": "boolean"}),
)


def schema_to_dict(schema: Any, unknown: str | None = None) -> dict[str, Any]:
    """
    Describe a marshmallow ``Schema`` instance as an object schema.

    Keys come from each field's ``data_key`` when set. ``unknown`` (the
    schema's own setting when None) of RAISE maps to
    ``additionalProperties: false``.
    """
    from marshmallow import RAISE

    properties: dict[str, Any] = {}
    required = []
    for name, field in schema.fields.items():
        key = field.data_key or name
        properties[key] = field_to_dict(field)
        if field.required:
            required.append(key)
    result: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        result["required"] = required
    if (unknown or schema.unknown) == RAISE:
        result["additionalProperties"] = False
    return result


def field_to_dict(field: Any) -> dict[str, Any]:
    """Describe a marshmallow field, its validators and its presence rules."""
    from marshmallow import fields, missing

    if isinstance(field, fields.Nested):
        result = schema_to_dict(field.schema, field.unknown)
    elif isinstance(field, fields.List):
        result = {"type": "array", "items": field_to_dict(field.inner)}
    elif isinstance(field, fields.Tuple):
        items = [field_to_dict(f) for f in field.tuple_fields]
        result = {"type": "array", "prefixItems": items, "minItems": len(items), "maxItems": len(items)}
    elif isinstance(field, fields.Dict):
        result = {"type": "object"}
        if field.value_field is not None:
            result["additionalProperties"] = field_to_dict(field.value_field)
    else:
        result = next((dict(keywords) for name, keywords in FIELD_SCHEMAS if isinstance(field, getattr(fields, name))), {})

    for validator in field.validators:
        result.update(_validator_keywords(validator, result.get("type")))

    if field.allow_none and result and result.get("type") != "null":
        result["nullable"] = True
    if field.load_default is not missing and not callable(field.load_default):
        result["default"] = field.load_default
    description = field.metadata.get("description")
    if description is not None:
        result["description"] = description
    return result


def _validator_keywords(validator: Any, type_name: str | None) -> dict[str, Any]:
    from marshmallow import validate

    if isinstance(validator, validate.Length):
        if validator.equal is not None:
            bounds = (validator.equal, validator.equal)
        else:
            bounds = (validator.min, validator.max)
        names = ("minItems", "maxItems") if type_name == "array" else ("minLength", "maxLength")
        return {key: value for key, value in zip(names, bounds) if value is not None}
    if isinstance(validator, validate.Range):
        keywords = {}
        if validator.min is not None:
            keywords["minimum" if validator.min_inclusive else "exclusiveMinimum"] = validator.min
        if validator.max is not None:
            keywords["maximum" if validator.max_inclusive else "exclusiveMaximum"] = validator.max
        return keywords
    if isinstance(validator, validate.Regexp):
        return {"pattern": source_pattern(validator.regex.pattern)}
    if isinstance(validator, validate.OneOf):
        return {"enum": list(validator.choices)}
    if isinstance(validator, validate.Equal):
        if validator.comparable is None:
            return {"type": "null"}
        return {"const": validator.comparable}
    logger.debug("No schema keyword for validator %r", validator)
    return {}


class MarshmallowTarget(Target):
    """Marshmallow 3 schemas and fields."""

    NAME = "marshmallow"
    DISTRIBUTION = "marshmallow"

    CAPABILITIES = TargetCapabilities(
        native_union=False,
        native_enum=True,
        multiple_of=False,
        unique_items=False,
        typed_extras_with_properties=False,
        format_with_string_constraints=False,
        structured_literals=True,
        formats=frozenset(FORMAT_FIELDS),
    )

    IMPORTS = {
        "EXCLUDE": "marshmallow",
        "INCLUDE": "marshmallow",
        "RAISE": "marshmallow",
        "Schema": "marshmallow",
        "fields": "marshmallow",
        "validate": "marshmallow",
    }

    def builder(self) -> MarshmallowBuilder:
        return MarshmallowBuilder()

    def declarations(self, root: Expr, schema_name: str, type_name: str, options: ConversionOptions) -> list[tuple[str, Expr]]:
        # A plain object root is exposed as a Schema instance rather than a Nested field
        if isinstance(root, Call) and root.func == Name("fields.Nested") and [k for k, _ in root.kwargs] == ["unknown"]:
            schema_class = root.args[0]
            unknown = root.kwargs
            if options.generate_type_inference:
                return [(type_name, schema_class), (schema_name, Call(Name(type_name), kwargs=unknown))]
            return [(schema_name, Call(schema_class, kwargs=unknown))]
        return [(schema_name, root)]

    def accepts(self, runtime_schema: Any, value: Any) -> bool:
        from marshmallow import Schema, ValidationError

        try:
            if isinstance(runtime_schema, Schema):
                runtime_schema.load(value)
            else:
                runtime_schema.deserialize(value)
        except ValidationError:
            return False
        return True

    def to_canonical(self, runtime_schema: Any) -> dict[str, Any]:
        from marshmallow import Schema

        if isinstance(runtime_schema, Schema):
            return schema_to_dict(runtime_schema)
        return field_to_dict(runtime_schema)
