"""
Conversion facade.

Selects the target, runs the shared translation once per call and packages
either the runtime validator object, the generated source, or both.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .pipeline.analyzer.diagnostics import Diagnostic, DiagnosticCollector
from .pipeline.ast_backends import JsonSchemaTarget, MarshmallowTarget, PydanticTarget, Target
from .pipeline.ast_backends.expr_nodes import Expr
from .pipeline.ast_backends.realizer import ExpressionRealizer
from .pipeline.ast_backends.serializer import normalize_schema_name
from .pipeline.config import ConversionOptions, resolve_options
from .pipeline.errors import UnsupportedTargetError
from .pipeline.generator import ModuleGenerator
from .pipeline.schema_ast.nodes import CanonicalSchema
from .pipeline.translator import SchemaTranslator

logger = logging.getLogger(__name__)

TARGETS: dict[str, Target] = {
    "pydantic": PydanticTarget(),
    "marshmallow": MarshmallowTarget(),
    "jsonschema": JsonSchemaTarget(),
}

SUPPORTED_TARGETS: tuple[str, ...] = tuple(TARGETS)


@dataclass(frozen=True)
class ConversionResult:
    """A runtime validator object, its equivalent source, and the diagnostics."""

    runtime_schema: Any
    generated_code: str
    diagnostics: list[str]
    diagnostic_details: list[Diagnostic]

    @property
    def schema(self) -> Any:
        return self.runtime_schema

    @property
    def code(self) -> str:
        return self.generated_code

    @property
    def warnings(self) -> list[str]:
        return self.diagnostics


@dataclass(frozen=True)
class CodeGenerationResult:
    """Generated source, its import lines, and the diagnostics."""

    code: str
    imports: list[str]
    diagnostics: list[str]
    diagnostic_details: list[Diagnostic]


def is_valid_target(value: Any) -> bool:
    """Whether ``value`` names a supported target."""
    return isinstance(value, str) and value in TARGETS


def get_target(target: Any) -> Target:
    """
    Look up a target by identifier.

    Raises:
        UnsupportedTargetError: If the identifier is unknown
    """
    if not is_valid_target(target):
        raise UnsupportedTargetError(target, SUPPORTED_TARGETS)
    return TARGETS[target]


def declaration_names(schema_name: str | None, target: Target) -> tuple[str, str, str]:
    """
    Derive the names a conversion binds.

    Returns:
        (validator name, type name, root model name); the type name is the
        validator name without a trailing ``Schema``, else the name plus ``Type``
    """
    name = normalize_schema_name(schema_name)
    if name.endswith("Schema") and len(name) > len("Schema"):
        model_name = type_name = name[: -len("Schema")]
    else:
        model_name, type_name = name, f"{name}Type"

    reserved = target.reserved_names()
    if name in reserved:
        name += "_"
    if type_name in reserved:
        type_name += "_"
    return name, type_name, model_name


def _translate(
    schema: Any, target: Target, options: ConversionOptions
) -> tuple[list[tuple[str, Expr]], DiagnosticCollector]:
    node = CanonicalSchema.coerce(schema)
    diagnostics = DiagnosticCollector()
    schema_name, type_name, model_name = declaration_names(options.schema_name, target)
    translator = SchemaTranslator(target.builder(), target.CAPABILITIES, options, diagnostics, target.NAME)
    root = translator.translate(node, model_name)
    return target.declarations(root, schema_name, type_name, options), diagnostics


def generate(schema: Any, target: str, options: ConversionOptions | dict | None = None) -> CodeGenerationResult:
    """
    Generate validator source for a target without importing its library.

    Args:
        schema: Canonical schema node or schema dictionary
        target: Target identifier
        options: Conversion options (object or dictionary)

    Returns:
        The generated code, its import lines and the diagnostics
    """
    selected = get_target(target)
    options = resolve_options(options)
    logger.debug("Generating %s code for %s", target, options.schema_name or "<unnamed>")
    declarations, diagnostics = _translate(schema, selected, options)
    module = ModuleGenerator(options).render(selected, declarations)
    return CodeGenerationResult(
        code=module.code,
        imports=module.imports,
        diagnostics=diagnostics.messages(),
        diagnostic_details=diagnostics.details(),
    )


def generate_code(schema: Any, target: str, options: ConversionOptions | dict | None = None) -> str:
    """Generate validator source for a target."""
    return generate(schema, target, options).code


def generate_all_targets_code(schema: Any, options: ConversionOptions | dict | None = None) -> dict[str, str]:
    """Generate validator source for every supported target."""
    return {target: generate_code(schema, target, options) for target in SUPPORTED_TARGETS}


def convert_to_runtime(schema: Any, target: str, options: ConversionOptions | dict | None = None) -> ConversionResult:
    """
    Build a live validator object and its equivalent source.

    The target library is imported before any node is converted; the object
    is built from the same declarations the generated source binds.

    Args:
        schema: Canonical schema node or schema dictionary
        target: Target identifier
        options: Conversion options (object or dictionary)

    Returns:
        The validator object, the source and the diagnostics

    Raises:
        UnsupportedTargetError: If the target is unknown
        TargetLibraryUnavailableError: If the target library cannot be imported
    """
    selected = get_target(target)
    options = resolve_options(options)
    namespace = selected.load_namespace()
    logger.debug("Converting schema to a %s runtime validator", target)

    declarations, diagnostics = _translate(schema, selected, options)
    bound = ExpressionRealizer(namespace).bind(declarations)
    module = ModuleGenerator(options).render(selected, declarations)
    return ConversionResult(
        runtime_schema=bound[declarations[-1][0]],
        generated_code=module.code,
        diagnostics=diagnostics.messages(),
        diagnostic_details=diagnostics.details(),
    )


def accepts(target: str, runtime_schema: Any, value: Any) -> bool:
    """Whether a target's validator object accepts ``value``."""
    return get_target(target).accepts(runtime_schema, value)


def to_canonical(target: str, runtime_schema: Any) -> dict[str, Any]:
    """
    Describe a target's validator object as a schema dictionary.

    The reverse of ``convert_to_runtime``: pydantic objects go through their
    JSON Schema export, jsonschema validators hand back their schema, and
    marshmallow schemas are read field by field.

    Args:
        target: Target identifier
        runtime_schema: A validator object of that target's library

    Returns:
        A dictionary ``CanonicalSchema.from_dict`` accepts; pass it as
        ``root_document`` too when it carries ``$ref`` pointers

    Raises:
        UnsupportedTargetError: If the target is unknown
    """
    selected = get_target(target)
    logger.debug("Describing a %s validator as a schema", target)
    return selected.to_canonical(runtime_schema)
