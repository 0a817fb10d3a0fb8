"""
Configuration for a single conversion call.

Options are immutable; every top-level call resolves its own instance and
discards it on return.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any

from .errors import InvalidOptionsError


class NullableEncoding(str, Enum):
    """How a nullable property is encoded on the target.

    Mirrors the three ways a JSON value can be "empty": an explicit null,
    an absent key, or either of the two.
    """

    NULL = "null"  # Value may be null, key keeps its required-ness
    OPTIONAL = "optional"  # Key may be absent, null is rejected
    NULLISH = "nullish"  # Key may be absent and value may be null


DEFAULT_SCHEMA_NAME = "GeneratedSchema"


@dataclass(frozen=True)
class ConversionOptions:
    """Configuration options for schema conversion and code generation."""

    # Nullable property encoding
    nullable: NullableEncoding = NullableEncoding.NULL

    # Whether objects accept keys they do not declare (when the schema is silent)
    additional_properties: bool = True

    # Treat every declared property as required
    default_required: bool = False

    # Emit import lines in generated code
    include_imports: bool = True

    # Name of the generated validator declaration
    schema_name: str | None = None

    # Emit __all__ listing the generated declarations
    export_schema: bool = True

    # Also bind the schema expression to a type name
    generate_type_inference: bool = True

    # Root document used to resolve local $ref fragments
    root_document: dict[str, Any] | None = None

    # Named schema definitions consulted when the root document cannot resolve a $ref
    definitions: dict[str, Any] | None = None

    # Indentation unit for nested constructs in generated code
    indent: str = "    "

    # Forbid undeclared keys instead of dropping them when extras are disallowed
    strict: bool = False

    # Comment line placed at the top of generated modules
    generation_comment: str | None = None

    def __post_init__(self):
        if not isinstance(self.nullable, NullableEncoding):
            try:
                encoding = NullableEncoding(self.nullable)
            except ValueError as exc:
                allowed = ", ".join(e.value for e in NullableEncoding)
                raise InvalidOptionsError(f"Invalid nullable encoding {self.nullable!r}. Expected one of: {allowed}") from exc
            object.__setattr__(self, "nullable", encoding)

    @staticmethod
    def from_dict(d: dict) -> ConversionOptions:
        """Create options from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(ConversionOptions)}
        return ConversionOptions(**{k: v for k, v in d.items() if k in known})

    def to_dict(self) -> dict:
        """Convert options to a dictionary."""
        return {
            "nullable": self.nullable.value,
            "additional_properties": self.additional_properties,
            "default_required": self.default_required,
            "include_imports": self.include_imports,
            "schema_name": self.schema_name,
            "export_schema": self.export_schema,
            "generate_type_inference": self.generate_type_inference,
            "root_document": self.root_document,
            "definitions": self.definitions,
            "indent": self.indent,
            "strict": self.strict,
            "generation_comment": self.generation_comment,
        }

    def with_changes(self, **changes: Any) -> ConversionOptions:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def resolve_options(options: ConversionOptions | dict | None) -> ConversionOptions:
    """Normalize the options argument accepted by the public functions."""
    if options is None:
        return ConversionOptions()
    if isinstance(options, ConversionOptions):
        return options
    return ConversionOptions.from_dict(options)
