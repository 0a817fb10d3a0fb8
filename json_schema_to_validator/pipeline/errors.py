"""
Hard errors raised by the conversion pipeline.

Non-fatal translation problems are never raised; they are collected as
diagnostics (see ``analyzer.diagnostics``).
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for all fatal conversion errors."""


class UnsupportedTargetError(ConversionError):
    """Raised when a target identifier is not one of the supported targets."""

    def __init__(self, target: object, supported: tuple[str, ...]):
        self.target = target
        self.supported = supported
        super().__init__(f"Unsupported target {target!r}. Expected one of: {', '.join(supported)}")


class TargetLibraryUnavailableError(ConversionError):
    """Raised when the runtime path needs a validation library that is not installed."""

    def __init__(self, target: str, package: str):
        self.target = target
        self.package = package
        super().__init__(f"The {package} package is required to build {target} validators. Install it with: pip install {package}")


class ResolutionError(ConversionError):
    """Raised when a $ref cannot be resolved against the root document."""


class InvalidSchemaError(ConversionError):
    """Raised when the input is not a structurally valid canonical schema."""


class InvalidOptionsError(ConversionError):
    """Raised when conversion options carry a value outside their allowed set."""
