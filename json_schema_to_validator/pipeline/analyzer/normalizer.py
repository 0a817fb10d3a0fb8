"""
Composite-schema normalizer.

``allOf`` members are merged into a single node. ``oneOf``/``anyOf`` are
never merged with each other: they are true alternation and each target
decides how to represent them. Keywords written next to an alternation are
folded into its branches.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields, replace
from typing import Any

from ..schema_ast.nodes import UNSET, CanonicalSchema
from .diagnostics import DiagnosticCollector, DiagnosticKind
from .reference_resolver import try_resolve_ref

# Fields with their own merge rule
_COLLECTION_FIELDS = ("properties", "required", "extensions", "all_of")

_ALTERNATION_FIELDS = ("one_of", "any_of")
_KEYWORDS = {"one_of": "oneOf", "any_of": "anyOf"}

# Keywords that describe a node as a whole rather than its shape, with their unset values
_OUTER_DEFAULTS = {
    "title": None,
    "description": None,
    "deprecated": None,
    "default": UNSET,
    "nullable": None,
    "read_only": None,
    "write_only": None,
    "extensions": {},
}


def _is_set(value: Any) -> bool:
    return value is not None and value is not UNSET


def merge_schemas(base: CanonicalSchema, override: CanonicalSchema) -> CanonicalSchema:
    """
    Merge two schemas, ``override`` winning on every field it sets.

    Args:
        base: The schema merged into
        override: The schema whose set fields take precedence

    Returns:
        A new node: properties unioned (later keys overwrite), required
        unioned keeping first-seen order, scalars last-write-wins
    """
    changes: dict[str, Any] = {}
    for f in fields(CanonicalSchema):
        if f.name in _COLLECTION_FIELDS:
            continue
        value = getattr(override, f.name)
        if _is_set(value):
            changes[f.name] = value

    if override.properties:
        changes["properties"] = {**base.properties, **override.properties}
    if override.required:
        changes["required"] = tuple(dict.fromkeys(base.required + override.required))
    if override.extensions:
        changes["extensions"] = {**base.extensions, **override.extensions}
    return replace(base, **changes)


def merge_all_of(
    schema: CanonicalSchema,
    root_document: Mapping[str, Any] | None,
    diagnostics: DiagnosticCollector,
    definitions: Mapping[str, Any] | None = None,
    path: str = "#",
) -> CanonicalSchema:
    """
    Collapse an ``allOf`` node into one schema.

    Members are resolved and merged left to right; nested ``allOf`` members
    are flattened; the node's own sibling keywords are overlaid last. The
    first ``oneOf``/``anyOf`` found among the members and siblings is kept on
    the result; any later one is dropped with a diagnostic.

    Args:
        schema: A node carrying ``all_of``
        root_document: Document used for ``$ref`` members
        diagnostics: Collector for unresolved references
        definitions: Named schemas used as a resolution fallback
        path: Location of the node (for diagnostics)

    Returns:
        The merged node, without ``all_of``
    """
    members = schema.all_of or ()
    parts = [
        (_flatten_member(member, root_document, diagnostics, definitions, f"{path}/allOf/{i}"), f"{path}/allOf/{i}")
        for i, member in enumerate(members)
    ]
    parts.append((replace(schema, all_of=None), path))

    merged = CanonicalSchema()
    alternation: dict[str, tuple[CanonicalSchema, ...]] = {}
    for part, part_path in parts:
        for keyword in _ALTERNATION_FIELDS:
            branches = getattr(part, keyword)
            if branches is None:
                continue
            if alternation:
                diagnostics.add(
                    DiagnosticKind.COMPLEX_COMPOSITION,
                    f"allOf combines more than one oneOf/anyOf; {_KEYWORDS[keyword]} ignored",
                    part_path,
                )
            else:
                alternation[keyword] = branches
        merged = merge_schemas(merged, replace(part, one_of=None, any_of=None))
    return replace(merged, **alternation)


def alternation_shape(schema: CanonicalSchema) -> CanonicalSchema:
    """The keywords of a node other than its alternation and its metadata."""
    return replace(schema, one_of=None, any_of=None, **_OUTER_DEFAULTS)


def distribute_alternation(
    schema: CanonicalSchema,
    root_document: Mapping[str, Any] | None,
    diagnostics: DiagnosticCollector,
    definitions: Mapping[str, Any] | None = None,
    path: str = "#",
) -> CanonicalSchema:
    """
    Fold the shape a node declares next to ``oneOf``/``anyOf`` into every branch.

    ``{"type": "object", "required": ["a"], "oneOf": [B, C]}`` becomes
    ``{"oneOf": [base + B, base + C]}`` so that a target building only the
    alternation still enforces the shared keywords. Metadata stays on the
    outer node.

    Returns:
        The node with its shape moved into the branches (unchanged when it
        carries no shape)
    """
    if schema.one_of is not None and schema.any_of is not None:
        diagnostics.add(
            DiagnosticKind.COMPLEX_COMPOSITION,
            "oneOf and anyOf on the same schema cannot be combined; anyOf ignored",
            path,
        )
        schema = replace(schema, any_of=None)

    keyword = "one_of" if schema.one_of is not None else "any_of"
    branches = getattr(schema, keyword)
    if branches is None:
        return schema

    shape = alternation_shape(schema)
    if shape == CanonicalSchema():
        return schema

    folded = tuple(
        merge_schemas(shape, _flatten_member(branch, root_document, diagnostics, definitions, f"{path}/{_KEYWORDS[keyword]}/{i}"))
        for i, branch in enumerate(branches)
    )
    outer = {name: getattr(schema, name) for name in _OUTER_DEFAULTS}
    return CanonicalSchema(**outer, **{keyword: folded})


def _flatten_member(
    member: CanonicalSchema,
    root_document: Mapping[str, Any] | None,
    diagnostics: DiagnosticCollector,
    definitions: Mapping[str, Any] | None,
    path: str,
) -> CanonicalSchema:
    if member.ref is not None:
        resolved = try_resolve_ref(member.ref, root_document, diagnostics, definitions, path)
        if member.nullable and not resolved.nullable:
            resolved = replace(resolved, nullable=True)
        member = resolved
    if member.all_of:
        member = merge_all_of(member, root_document, diagnostics, definitions, path)
    return member
