"""
Pipeline - canonical schema to validator conversion.

1. Phase 1 (Parser): Parse OpenAPI/JSON Schema dictionaries into canonical nodes
2. Phase 2 (Analyzer): Resolve references, merge allOf, collect diagnostics
3. Phase 3 (Translator): Drive a target builder into an expression tree
4. Phase 4a (Realizer): Evaluate the tree into a live validator object
5. Phase 4b (Serializer + Generator): Render the same tree as Python source
"""

from __future__ import annotations

from .analyzer import Diagnostic, DiagnosticCollector, DiagnosticKind, merge_all_of, merge_schemas, resolve_ref, try_resolve_ref
from .config import ConversionOptions, NullableEncoding
from .errors import ConversionError, InvalidOptionsError, InvalidSchemaError, ResolutionError, TargetLibraryUnavailableError, UnsupportedTargetError
from .schema_ast import UNSET, CanonicalSchema, SchemaParser

__all__ = [
    "CanonicalSchema",
    "ConversionError",
    "ConversionOptions",
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticKind",
    "InvalidOptionsError",
    "InvalidSchemaError",
    "NullableEncoding",
    "ResolutionError",
    "SchemaParser",
    "TargetLibraryUnavailableError",
    "UNSET",
    "UnsupportedTargetError",
    "merge_all_of",
    "merge_schemas",
    "resolve_ref",
    "try_resolve_ref",
]
