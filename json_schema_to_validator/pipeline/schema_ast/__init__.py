"""
Canonical schema model and parser.
"""

from __future__ import annotations

from .nodes import ANY_SCHEMA, PRIMITIVE_TYPES, UNSET, CanonicalSchema
from .parser import SchemaParser

__all__ = [
    "ANY_SCHEMA",
    "PRIMITIVE_TYPES",
    "UNSET",
    "CanonicalSchema",
    "SchemaParser",
]
