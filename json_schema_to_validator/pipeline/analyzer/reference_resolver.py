"""
Reference resolver for $ref resolution.

Resolves local ``#/...`` fragments against a root document. Only local
fragments are supported; external documents are never fetched.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from ..errors import InvalidSchemaError, ResolutionError
from ..schema_ast.nodes import ANY_SCHEMA, CanonicalSchema
from ..schema_ast.parser import SchemaParser
from .diagnostics import DiagnosticCollector, DiagnosticKind

logger = logging.getLogger(__name__)


def _unescape(segment: str) -> str:
    """Decode a JSON Pointer segment (``~1`` is ``/``, ``~0`` is ``~``)."""
    return segment.replace("~1", "/").replace("~0", "~")


def split_fragment(ref: str) -> list[str]:
    """
    Split a local fragment into decoded path segments.

    Args:
        ref: Reference string such as ``#/components/schemas/User``

    Returns:
        The decoded segments (empty for ``#``)

    Raises:
        ResolutionError: If the reference is not a local fragment
    """
    if not isinstance(ref, str) or not ref.startswith("#"):
        raise ResolutionError(f"Only local '#/...' references are supported, got {ref!r}")
    pointer = ref[1:]
    if not pointer:
        return []
    if not pointer.startswith("/"):
        raise ResolutionError(f"Malformed reference {ref!r}")
    return [_unescape(segment) for segment in pointer[1:].split("/")]


def _walk(ref: str, root_document: Any) -> Any:
    """Walk the document segment by segment, failing on the first missing one."""
    current = root_document
    for segment in split_fragment(ref):
        if isinstance(current, Mapping):
            if segment not in current:
                raise ResolutionError(f"Segment {segment!r} of {ref!r} not found")
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, str):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise ResolutionError(f"Segment {segment!r} of {ref!r} not found") from exc
        else:
            raise ResolutionError(f"Segment {segment!r} of {ref!r} not found")
    return current


def _to_schema(ref: str, target: Any) -> CanonicalSchema:
    if not (isinstance(target, (Mapping, CanonicalSchema)) or target is True):
        raise ResolutionError(f"Reference {ref!r} does not point to a schema object")
    try:
        return SchemaParser().parse(target, ref)
    except InvalidSchemaError as exc:
        raise ResolutionError(f"Reference {ref!r} points to an invalid schema: {exc}") from exc


def resolve_ref(ref: str, root_document: Any, definitions: Mapping[str, Any] | None = None) -> CanonicalSchema:
    """
    Resolve a reference, following chained references.

    Args:
        ref: Local fragment to resolve
        root_document: Document the fragment is evaluated against
        definitions: Named schemas consulted by the last fragment segment

    Returns:
        The referenced schema node (never itself a ``$ref``)

    Raises:
        ResolutionError: If the reference is not local, a segment is missing,
            or the target is not a schema
    """
    seen: set[str] = set()
    nullable = False
    while True:
        if ref in seen:
            raise ResolutionError(f"Reference cycle through {ref!r}")
        seen.add(ref)
        node = _resolve_once(ref, root_document, definitions)
        nullable = nullable or bool(node.nullable)
        if node.ref is None:
            return replace(node, nullable=True) if nullable and not node.nullable else node
        ref = node.ref


def _resolve_once(ref: str, root_document: Any, definitions: Mapping[str, Any] | None) -> CanonicalSchema:
    segments = split_fragment(ref)
    walk_error: ResolutionError | None = None
    if root_document is not None:
        try:
            return _to_schema(ref, _walk(ref, root_document))
        except ResolutionError as exc:
            walk_error = exc
    if definitions and segments and segments[-1] in definitions:
        logger.debug("Resolved %s from definitions", ref)
        return _to_schema(ref, definitions[segments[-1]])
    if walk_error is not None:
        raise walk_error
    raise ResolutionError(f"No root document to resolve {ref!r} against")


def try_resolve_ref(
    ref: str,
    root_document: Any,
    diagnostics: DiagnosticCollector,
    definitions: Mapping[str, Any] | None = None,
    path: str | None = None,
) -> CanonicalSchema:
    """
    Resolve a reference without ever raising.

    On failure an ``unresolved-ref`` diagnostic is recorded and the universal
    schema is returned instead.
    """
    try:
        return resolve_ref(ref, root_document, definitions)
    except ResolutionError as exc:
        diagnostics.add(DiagnosticKind.UNRESOLVED_REF, f"Could not resolve $ref {ref!r}: {exc}", path)
        return ANY_SCHEMA
