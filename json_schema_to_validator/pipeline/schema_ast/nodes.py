"""
Canonical schema node definition.

A canonical schema is the OpenAPI/JSON-Schema-shaped tree every target
conversion starts from. Nodes are immutable: callers own them and the
pipeline never mutates its input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class _Unset:
    """Marker for keywords that are absent (``None`` is a legal JSON value)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNSET: Any = _Unset()

PRIMITIVE_TYPES = ("string", "number", "integer", "boolean", "array", "object", "null")


@dataclass(frozen=True)
class CanonicalSchema:
    """A canonical schema node."""

    type: str | None = None
    format: str | None = None

    # String constraints
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None

    # Numeric constraints
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: float | None = None
    exclusive_maximum: float | None = None
    multiple_of: float | None = None

    # Array constraints; a tuple of schemas is the fixed-length tuple form
    items: CanonicalSchema | tuple[CanonicalSchema, ...] | None = None
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool | None = None

    # Object shape
    properties: dict[str, CanonicalSchema] = field(default_factory=dict)
    required: tuple[str, ...] = ()
    additional_properties: bool | CanonicalSchema | None = None

    # Composition and references
    all_of: tuple[CanonicalSchema, ...] | None = None
    one_of: tuple[CanonicalSchema, ...] | None = None
    any_of: tuple[CanonicalSchema, ...] | None = None
    ref: str | None = None

    # Value constraints
    enum: tuple[Any, ...] | None = None
    const: Any = UNSET

    # Metadata
    title: str | None = None
    description: str | None = None
    deprecated: bool | None = None
    default: Any = UNSET
    nullable: bool | None = None
    read_only: bool | None = None
    write_only: bool | None = None

    # x-* extension keywords
    extensions: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(data: Any) -> CanonicalSchema:
        """Parse an OpenAPI/JSON-Schema dictionary into a canonical node."""
        from .parser import SchemaParser

        return SchemaParser().parse(data)

    @staticmethod
    def coerce(value: Any) -> CanonicalSchema:
        """Return ``value`` as a canonical node, parsing it when needed."""
        if isinstance(value, CanonicalSchema):
            return value
        return CanonicalSchema.from_dict(value)

    @property
    def has_default(self) -> bool:
        return self.default is not UNSET

    @property
    def has_const(self) -> bool:
        return self.const is not UNSET

    @property
    def is_tuple(self) -> bool:
        return isinstance(self.items, tuple)

    def has_string_constraints(self) -> bool:
        return self.min_length is not None or self.max_length is not None or self.pattern is not None


ANY_SCHEMA = CanonicalSchema()
