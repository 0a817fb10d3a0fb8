"""
Diagnostic collection for a single conversion call.

Diagnostics describe schema features a target could not fully express. They
are data-quality notes, never errors: a result that carries diagnostics is
still valid and usable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class DiagnosticKind(str, Enum):
    """Kinds of non-fatal conversion notes."""

    UNSUPPORTED_FORMAT = "unsupported-format"
    UNSUPPORTED_CONSTRAINT = "unsupported-constraint"
    UNSUPPORTED_TYPE = "unsupported-type"
    UNRESOLVED_REF = "unresolved-ref"
    COMPLEX_COMPOSITION = "complex-composition"
    FALLBACK_USED = "fallback-used"


@dataclass(frozen=True)
class Diagnostic:
    """A single conversion note."""

    kind: DiagnosticKind
    message: str
    path: str | None = None

    def __str__(self) -> str:
        return f"[{self.path}] {self.message}" if self.path else self.message


class DiagnosticCollector:
    """Accumulates diagnostics in emission order."""

    def __init__(self):
        self._diagnostics: list[Diagnostic] = []

    def add(self, kind: DiagnosticKind, message: str, path: str | None = None) -> None:
        """Record a diagnostic."""
        diagnostic = Diagnostic(DiagnosticKind(kind), message, path)
        logger.debug("%s: %s", diagnostic.kind.value, diagnostic)
        self._diagnostics.append(diagnostic)

    def messages(self) -> list[str]:
        """Return diagnostics rendered as ``[path] message`` strings."""
        return [str(d) for d in self._diagnostics]

    def details(self) -> list[Diagnostic]:
        """Return a copy of the collected diagnostics."""
        return list(self._diagnostics)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self._diagnostics if d.kind == kind]

    def has_diagnostics(self) -> bool:
        return bool(self._diagnostics)

    def clear(self) -> None:
        self._diagnostics = []

    def __len__(self) -> int:
        return len(self._diagnostics)
