"""
Pydantic target.

Schemas become type expressions (``Annotated``, ``Literal``, ``create_model``
models...) wrapped in a ``TypeAdapter``.
"""

from __future__ import annotations

import keyword
import re
from typing import Any

from ..config import ConversionOptions
from .base import ExtrasMode, PropertySpec, SchemaBuilder, Target, TargetCapabilities
from .expr_nodes import Call, Const, Expr, Name, RegexLiteral, TupleExpr, call, const_kwargs, subscript

FORMAT_TYPES = {
    "email": "EmailStr",
    "uri": "AnyUrl",
    "url": "AnyUrl",
    "uuid": "UUID",
    "date-time": "datetime",
    "date": "date",
    "ipv4": "IPv4Address",
    "ipv6": "IPv6Address",
}

EXTRA_MODES = {
    ExtrasMode.ALLOW: "allow",
    ExtrasMode.IGNORE: "ignore",
    ExtrasMode.FORBID: "forbid",
}

# BaseModel attributes a field must not shadow
RESERVED_FIELD_NAMES = frozenset(
    {
        "construct",
        "copy",
        "dict",
        "from_orm",
        "json",
        "parse_file",
        "parse_obj",
        "parse_raw",
        "schema",
        "schema_json",
        "update_forward_refs",
        "validate",
    }
)


def safe_field_name(key: str, used: set[str]) -> str:
    """
    Map a property key to a field name pydantic accepts.

    Args:
        key: Property key as it appears in the data
        used: Field names already taken in the same model

    Returns:
        ``key`` itself when it is safe, otherwise a derived identifier
    """
    candidate = key
    if not key.isidentifier() or key.startswith("_") or keyword.iskeyword(key) or key.startswith("model_") or key in RESERVED_FIELD_NAMES:
        candidate = re.sub(r"\W", "_", key).strip("_")
        if not candidate or candidate[0].isdigit() or keyword.iskeyword(candidate) or candidate.startswith("model_") or candidate in RESERVED_FIELD_NAMES:
            candidate = f"field_{candidate}"
    base, counter = candidate, 2
    while candidate in used:
        candidate = f"{base}_{counter}"
        counter += 1
    used.add(candidate)
    return candidate


class PydanticBuilder(SchemaBuilder):
    """Builds pydantic type expressions."""

    def any(self) -> Expr:
        return Name("Any")

    def null(self) -> Expr:
        return Const(None)

    def _constrained(self, base: str | Expr, **constraints: Expr) -> Expr:
        """Attach ``Field`` constraints to a type through ``Annotated``."""
        base_expr = Name(base) if isinstance(base, str) else base
        if not constraints:
            return base_expr
        return subscript("Annotated", base_expr, call("Field", **constraints))

    def string(self, min_length=None, max_length=None, pattern=None, format=None) -> Expr:
        if format is not None:
            return Name(FORMAT_TYPES[format])
        constraints = const_kwargs(min_length=min_length, max_length=max_length)
        if pattern is not None:
            constraints["pattern"] = RegexLiteral(pattern)
        return self._constrained("StrictStr", **constraints)

    def _numeric(self, base: str, minimum, maximum, exclusive_minimum, exclusive_maximum, multiple_of) -> Expr:
        return self._constrained(
            base,
            **const_kwargs(ge=minimum, le=maximum, gt=exclusive_minimum, lt=exclusive_maximum, multiple_of=multiple_of),
        )

    def number(self, minimum=None, maximum=None, exclusive_minimum=None, exclusive_maximum=None, multiple_of=None) -> Expr:
        return self._numeric("StrictFloat", minimum, maximum, exclusive_minimum, exclusive_maximum, multiple_of)

    def integer(self, minimum=None, maximum=None, exclusive_minimum=None, exclusive_maximum=None, multiple_of=None) -> Expr:
        return self._numeric("StrictInt", minimum, maximum, exclusive_minimum, exclusive_maximum, multiple_of)

    def boolean(self) -> Expr:
        return Name("StrictBool")

    def array(self, item, min_items=None, max_items=None, unique_items=False) -> Expr:
        return self._constrained(subscript("list", item), **const_kwargs(min_length=min_items, max_length=max_items))

    def tuple(self, items) -> Expr:
        return subscript("tuple", *items)

    def object(self, name, properties, extras, extras_schema=None) -> Expr:
        if not properties and extras in (ExtrasMode.ALLOW, ExtrasMode.IGNORE):
            return self.mapping(self.any())

        kwargs: list[tuple[str, Expr]] = [("__config__", call("ConfigDict", extra=Const(EXTRA_MODES[extras])))]
        used: set[str] = set()
        for prop in properties:
            field_name = safe_field_name(prop.name, used)
            kwargs.append((field_name, self._field(prop, alias=prop.name if field_name != prop.name else None)))
        return Call(Name("create_model"), (Const(name),), tuple(kwargs), multiline=True)

    def _field(self, prop: PropertySpec, alias: str | None) -> Expr:
        annotation = self.nullable(prop.expr) if prop.allow_null else prop.expr
        if prop.required:
            default: Expr = Const(...)
        elif prop.has_default:
            default = Const(prop.default)
        else:
            default = Const(None)
        if alias is not None or prop.description is not None:
            default = call("Field", default, **const_kwargs(alias=alias, description=prop.description))
        return TupleExpr((annotation, default))

    def mapping(self, value) -> Expr:
        return subscript("dict", Name("str"), value)

    def union(self, branches, exclusive) -> Expr:
        return subscript("Union", *branches)

    def literal(self, value, type_name=None) -> Expr:
        return subscript("Literal", Const(value))

    def enum(self, values, type_name=None) -> Expr:
        return subscript("Literal", *(Const(v) for v in values))

    def nullable(self, expr) -> Expr:
        if expr in (Name("Any"), Const(None)):
            return expr
        return subscript("Optional", expr)


class PydanticTarget(Target):
    """Pydantic v2 validators."""

    NAME = "pydantic"
    DISTRIBUTION = "pydantic[email]"

    CAPABILITIES = TargetCapabilities(
        native_union=True,
        native_enum=True,
        multiple_of=True,
        unique_items=False,
        typed_extras_with_properties=False,
        format_with_string_constraints=False,
        structured_literals=False,
        formats=frozenset(FORMAT_TYPES),
    )

    IMPORTS = {
        "Annotated": "typing",
        "Any": "typing",
        "Literal": "typing",
        "Optional": "typing",
        "Union": "typing",
        "UUID": "uuid",
        "date": "datetime",
        "datetime": "datetime",
        "IPv4Address": "ipaddress",
        "IPv6Address": "ipaddress",
        "AnyUrl": "pydantic",
        "ConfigDict": "pydantic",
        "EmailStr": "pydantic",
        "Field": "pydantic",
        "StrictBool": "pydantic",
        "StrictFloat": "pydantic",
        "StrictInt": "pydantic",
        "StrictStr": "pydantic",
        "TypeAdapter": "pydantic",
        "create_model": "pydantic",
    }

    def builder(self) -> PydanticBuilder:
        return PydanticBuilder()

    def declarations(self, root: Expr, schema_name: str, type_name: str, options: ConversionOptions) -> list[tuple[str, Expr]]:
        if options.generate_type_inference:
            return [(type_name, root), (schema_name, call("TypeAdapter", Name(type_name)))]
        return [(schema_name, call("TypeAdapter", root))]

    def accepts(self, runtime_schema: Any, value: Any) -> bool:
        from pydantic import ValidationError

        try:
            runtime_schema.validate_python(value)
        except ValidationError:
            return False
        return True

    def to_canonical(self, runtime_schema: Any) -> dict[str, Any]:
        from pydantic import BaseModel, TypeAdapter

        if isinstance(runtime_schema, type) and issubclass(runtime_schema, BaseModel):
            return runtime_schema.model_json_schema()
        if not isinstance(runtime_schema, TypeAdapter):
            runtime_schema = TypeAdapter(runtime_schema)
        return runtime_schema.json_schema()
