"""
Schema translator.

Walks a canonical schema once, resolving references and merging ``allOf``,
records every diagnostic the target's capabilities call for, and drives the
target's builder. The runtime and code paths both start from the expression
this produces.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any

from .analyzer.diagnostics import DiagnosticCollector, DiagnosticKind
from .analyzer.normalizer import alternation_shape, distribute_alternation, merge_all_of
from .analyzer.reference_resolver import try_resolve_ref
from .ast_backends.base import ExtrasMode, PropertySpec, SchemaBuilder, TargetCapabilities, to_pascal
from .ast_backends.expr_nodes import Expr
from .config import ConversionOptions, NullableEncoding
from .schema_ast.nodes import ANY_SCHEMA, CanonicalSchema

logger = logging.getLogger(__name__)

_METADATA_FIELDS = ("title", "description", "deprecated", "read_only", "write_only")


def is_valid_pattern(pattern: str) -> bool:
    """Whether ``pattern`` compiles on its own and as a group inside a larger expression."""
    try:
        re.compile(pattern)
        re.compile(f"(?:{pattern})")
    except re.error:
        return False
    return True


class SchemaTranslator:
    """Translates canonical schemas into a target's expression tree."""

    def __init__(
        self,
        builder: SchemaBuilder,
        capabilities: TargetCapabilities,
        options: ConversionOptions,
        diagnostics: DiagnosticCollector,
        target_name: str = "",
    ):
        """
        Initialize the translator.

        Args:
            builder: The target's structural constructors
            capabilities: What the target expresses natively
            options: Conversion options for this call
            diagnostics: Collector shared by the whole call
            target_name: Target identifier used in diagnostic messages
        """
        self.builder = builder
        self.capabilities = capabilities
        self.options = options
        self.diagnostics = diagnostics
        self.target_name = target_name

    def translate(self, schema: CanonicalSchema, name: str) -> Expr:
        """Translate the root schema; ``name`` seeds nested model names."""
        return self.convert(schema, name, "#")

    def convert(self, schema: CanonicalSchema, name: str, path: str) -> Expr:
        """Convert a node, admitting null when the node is nullable."""
        node, unresolved = self._normalize(schema, path)
        expr = self._annotate(self._build(node, name, path, unresolved), node)
        if node.nullable:
            expr = self.builder.nullable(expr)
        return expr

    def _normalize(self, node: CanonicalSchema, path: str) -> tuple[CanonicalSchema, bool]:
        """Resolve references, merge allOf, fold shared keywords into alternations and unwrap single-member composites."""
        unresolved = False
        while True:
            if node.ref is not None:
                resolved = try_resolve_ref(node.ref, self.options.root_document, self.diagnostics, self.options.definitions, path)
                unresolved = resolved is ANY_SCHEMA
                node = replace(resolved, nullable=True) if node.nullable and not resolved.nullable else resolved
                continue
            if node.all_of is not None:
                logger.debug("Merging %d allOf members at %s", len(node.all_of), path)
                node = merge_all_of(node, self.options.root_document, self.diagnostics, self.options.definitions, path)
                continue
            if node.one_of is not None or node.any_of is not None:
                distributed = self._fold_alternation(node, path)
                if distributed is not node:
                    node = distributed
                    continue
            members = node.one_of if node.one_of is not None else node.any_of
            if members is not None and len(members) == 1:
                member = members[0]
                node = replace(member, nullable=True) if node.nullable and not member.nullable else member
                continue
            return node, unresolved

    def _fold_alternation(self, node: CanonicalSchema, path: str) -> CanonicalSchema:
        """Move keywords written beside oneOf/anyOf into the branches, or keep only those keywords where the target has no unions."""
        branches = node.one_of if node.one_of is not None else node.any_of
        if self.capabilities.native_union or len(branches) == 1:
            return distribute_alternation(node, self.options.root_document, self.diagnostics, self.options.definitions, path)
        if alternation_shape(node) == ANY_SCHEMA:
            return node
        keyword = "oneOf" if node.one_of is not None else "anyOf"
        self.diagnostics.add(
            DiagnosticKind.COMPLEX_COMPOSITION,
            f"{keyword} with {len(branches)} branches is not supported by {self.target_name}; only the keywords beside it are enforced",
            path,
        )
        return replace(node, one_of=None, any_of=None)

    def _build(self, node: CanonicalSchema, name: str, path: str, unresolved: bool = False) -> Expr:
        if node.one_of is not None:
            return self._union(node.one_of, name, f"{path}/oneOf", exclusive=True)
        if node.any_of is not None:
            return self._union(node.any_of, name, f"{path}/anyOf", exclusive=False)
        if node.enum is not None:
            return self._enum(list(node.enum), node.type, path)
        if node.has_const:
            return self._literal(node.const, node.type, path)

        schema_type = node.type
        if schema_type is None:
            if node.properties or node.additional_properties is not None:
                schema_type = "object"
            elif node.items is not None:
                schema_type = "array"
            elif unresolved:
                return self.builder.any()
            else:
                self.diagnostics.add(DiagnosticKind.UNSUPPORTED_TYPE, "Schema has no type; accepting any value", path)
                return self.builder.any()

        if schema_type == "string":
            return self._string(node, path)
        if schema_type in ("number", "integer"):
            return self._number(node, schema_type, path)
        if schema_type == "boolean":
            return self.builder.boolean()
        if schema_type == "null":
            return self.builder.null()
        if schema_type == "array":
            return self._array(node, name, path)
        if schema_type == "object":
            return self._object(node, name, path)

        self.diagnostics.add(DiagnosticKind.UNSUPPORTED_TYPE, f"Unknown type {schema_type!r}; accepting any value", path)
        return self.builder.any()

    def _annotate(self, expr: Expr, node: CanonicalSchema) -> Expr:
        metadata: dict[str, Any] = {f: getattr(node, f) for f in _METADATA_FIELDS if getattr(node, f) is not None}
        if node.has_default:
            metadata["default"] = node.default
        return self.builder.annotate(expr, metadata) if metadata else expr

    def _union(self, members: tuple[CanonicalSchema, ...], name: str, path: str, exclusive: bool) -> Expr:
        keyword = "oneOf" if exclusive else "anyOf"
        if not members:
            self.diagnostics.add(DiagnosticKind.FALLBACK_USED, f"Empty {keyword}; accepting any value", path)
            return self.builder.any()
        if not self.capabilities.native_union:
            self.diagnostics.add(
                DiagnosticKind.COMPLEX_COMPOSITION,
                f"{keyword} with {len(members)} branches is not supported by {self.target_name}; accepting any value",
                path,
            )
            return self.builder.any()
        branches = [self.convert(member, f"{name}Option{i}", f"{path}/{i}") for i, member in enumerate(members)]
        return self.builder.union(branches, exclusive)

    def _literal(self, value: Any, type_name: str | None, path: str) -> Expr:
        if value is None:
            return self.builder.null()
        if isinstance(value, (list, dict)) and not self.capabilities.structured_literals:
            self.diagnostics.add(
                DiagnosticKind.FALLBACK_USED,
                f"Literal {value!r} cannot be expressed by {self.target_name}; accepting any value",
                path,
            )
            return self.builder.any()
        return self.builder.literal(value, type_name)

    def _enum(self, values: list[Any], type_name: str | None, path: str) -> Expr:
        if not values:
            self.diagnostics.add(DiagnosticKind.FALLBACK_USED, "Empty enum; accepting any value", path)
            return self.builder.any()
        if len(values) == 1:
            return self._literal(values[0], type_name, path)
        if not self.capabilities.structured_literals and any(isinstance(v, (list, dict)) for v in values):
            self.diagnostics.add(
                DiagnosticKind.FALLBACK_USED,
                f"Enum with object or array values cannot be expressed by {self.target_name}; accepting any value",
                path,
            )
            return self.builder.any()
        if self.capabilities.native_enum:
            return self.builder.enum(values, type_name)
        if self.capabilities.native_union:
            return self.builder.union([self._literal(v, type_name, path) for v in values], exclusive=False)
        self.diagnostics.add(DiagnosticKind.COMPLEX_COMPOSITION, "Enum cannot be expressed; accepting any value", path)
        return self.builder.any()

    def _string(self, node: CanonicalSchema, path: str) -> Expr:
        if node.pattern is not None and not is_valid_pattern(node.pattern):
            self.diagnostics.add(
                DiagnosticKind.UNSUPPORTED_CONSTRAINT,
                f"Pattern {node.pattern!r} is not a valid Python regular expression; constraint ignored",
                path,
            )
            node = replace(node, pattern=None)

        string_format = node.format
        if string_format is not None:
            if string_format not in self.capabilities.formats:
                self.diagnostics.add(
                    DiagnosticKind.UNSUPPORTED_FORMAT,
                    f"Format {node.format!r} is not supported by {self.target_name}; validated as a plain string",
                    path,
                )
                string_format = None
            elif node.has_string_constraints() and not self.capabilities.format_with_string_constraints:
                self.diagnostics.add(
                    DiagnosticKind.UNSUPPORTED_FORMAT,
                    f"Format {node.format!r} cannot be combined with length or pattern constraints on {self.target_name}; format ignored",
                    path,
                )
                string_format = None
        return self.builder.string(node.min_length, node.max_length, node.pattern, string_format)

    def _number(self, node: CanonicalSchema, schema_type: str, path: str) -> Expr:
        multiple_of = node.multiple_of
        if multiple_of is not None and not self.capabilities.multiple_of:
            self.diagnostics.add(
                DiagnosticKind.UNSUPPORTED_CONSTRAINT,
                f"multipleOf={multiple_of} is not supported by {self.target_name}; constraint ignored",
                path,
            )
            multiple_of = None
        build = self.builder.integer if schema_type == "integer" else self.builder.number
        return build(node.minimum, node.maximum, node.exclusive_minimum, node.exclusive_maximum, multiple_of)

    def _array(self, node: CanonicalSchema, name: str, path: str) -> Expr:
        if node.is_tuple:
            items = [self.convert(item, f"{name}Item{i}", f"{path}/items/{i}") for i, item in enumerate(node.items)]
            return self.builder.tuple(items)

        item = self.convert(node.items, f"{name}Item", f"{path}/items") if node.items is not None else self.builder.any()
        unique_items = bool(node.unique_items)
        if unique_items and not self.capabilities.unique_items:
            self.diagnostics.add(
                DiagnosticKind.UNSUPPORTED_CONSTRAINT,
                f"uniqueItems is not supported by {self.target_name}; constraint ignored",
                path,
            )
            unique_items = False
        return self.builder.array(item, node.min_items, node.max_items, unique_items)

    def _object(self, node: CanonicalSchema, name: str, path: str) -> Expr:
        required = set()
        for key in node.required:
            if key in node.properties:
                required.add(key)
            else:
                self.diagnostics.add(
                    DiagnosticKind.UNSUPPORTED_CONSTRAINT,
                    f"Required property {key!r} is not declared in properties; ignored",
                    path,
                )

        extras_schema = None
        extra = node.additional_properties
        if extra is False:
            extras = ExtrasMode.FORBID
        elif extra is True:
            extras = ExtrasMode.ALLOW
        elif isinstance(extra, CanonicalSchema):
            value = self.convert(extra, f"{name}Value", f"{path}/additionalProperties")
            if not node.properties:
                return self.builder.mapping(value)
            if self.capabilities.typed_extras_with_properties:
                extras, extras_schema = ExtrasMode.SCHEMA, value
            else:
                self.diagnostics.add(
                    DiagnosticKind.UNSUPPORTED_CONSTRAINT,
                    f"Typed additionalProperties next to properties is not supported by {self.target_name}; extra keys are not checked",
                    path,
                )
                extras = ExtrasMode.ALLOW
        elif self.options.additional_properties:
            extras = ExtrasMode.ALLOW
        elif self.options.strict:
            extras = ExtrasMode.FORBID
        else:
            extras = ExtrasMode.IGNORE

        properties = [
            self._property(key, prop, key in required, f"{name}{to_pascal(key)}", f"{path}/properties/{key}")
            for key, prop in node.properties.items()
        ]
        return self.builder.object(name, properties, extras, extras_schema)

    def _property(self, key: str, prop: CanonicalSchema, listed_required: bool, name: str, path: str) -> PropertySpec:
        node, unresolved = self._normalize(prop, path)
        expr = self._annotate(self._build(node, name, path, unresolved), node)

        required = (self.options.default_required or listed_required) and not node.has_default
        allow_null = False
        if node.nullable:
            encoding = self.options.nullable
            if encoding in (NullableEncoding.NULL, NullableEncoding.NULLISH):
                allow_null = True
            if encoding in (NullableEncoding.OPTIONAL, NullableEncoding.NULLISH):
                required = False

        return PropertySpec(
            name=key,
            expr=expr,
            required=required,
            allow_null=allow_null,
            default=node.default,
            has_default=node.has_default,
            description=node.description,
        )

