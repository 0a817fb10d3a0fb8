"""JSON Schema to Validator

Converts OpenAPI/JSON Schema trees into runtime validator objects and
equivalent Python source for pydantic, marshmallow and jsonschema.
"""

__version__ = "1.0.0"

from .converter import (
    SUPPORTED_TARGETS,
    CodeGenerationResult,
    ConversionResult,
    accepts,
    convert_to_runtime,
    generate,
    generate_all_targets_code,
    generate_code,
    get_target,
    is_valid_target,
    to_canonical,
)
from .pipeline import (
    CanonicalSchema,
    ConversionError,
    ConversionOptions,
    Diagnostic,
    DiagnosticCollector,
    DiagnosticKind,
    InvalidOptionsError,
    InvalidSchemaError,
    NullableEncoding,
    ResolutionError,
    TargetLibraryUnavailableError,
    UnsupportedTargetError,
    merge_schemas,
    resolve_ref,
    try_resolve_ref,
)

__all__ = [
    "SUPPORTED_TARGETS",
    "CanonicalSchema",
    "CodeGenerationResult",
    "ConversionError",
    "ConversionOptions",
    "ConversionResult",
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticKind",
    "InvalidOptionsError",
    "InvalidSchemaError",
    "NullableEncoding",
    "ResolutionError",
    "TargetLibraryUnavailableError",
    "UnsupportedTargetError",
    "accepts",
    "convert_to_runtime",
    "generate",
    "generate_all_targets_code",
    "generate_code",
    "get_target",
    "is_valid_target",
    "merge_schemas",
    "resolve_ref",
    "to_canonical",
    "try_resolve_ref",
]
