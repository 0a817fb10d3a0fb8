"""
Reference resolution, allOf normalization and diagnostics.
"""

from __future__ import annotations

from .diagnostics import Diagnostic, DiagnosticCollector, DiagnosticKind
from .normalizer import distribute_alternation, merge_all_of, merge_schemas
from .reference_resolver import resolve_ref, try_resolve_ref

__all__ = [
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticKind",
    "distribute_alternation",
    "merge_all_of",
    "merge_schemas",
    "resolve_ref",
    "try_resolve_ref",
]
