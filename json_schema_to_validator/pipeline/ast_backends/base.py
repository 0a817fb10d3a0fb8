"""
Base classes for validator targets.

A target pairs a ``SchemaBuilder`` (the structural constructors the shared
translator calls) with the knowledge needed to turn the built expression
into declarations, imports and a live validator object.
"""

from __future__ import annotations

import importlib
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..config import ConversionOptions
from ..errors import TargetLibraryUnavailableError
from .expr_nodes import Expr, Name, walk

logger = logging.getLogger(__name__)

STDLIB_MODULES = frozenset({"datetime", "ipaddress", "typing", "uuid"})


@dataclass(frozen=True)
class TargetCapabilities:
    """What a target can express natively."""

    native_union: bool
    native_enum: bool
    multiple_of: bool
    unique_items: bool
    typed_extras_with_properties: bool
    format_with_string_constraints: bool
    structured_literals: bool
    formats: frozenset[str]


class ExtrasMode(str, Enum):
    """Handling of keys an object schema does not declare."""

    ALLOW = "allow"  # Accepted and kept
    IGNORE = "ignore"  # Accepted and dropped where the target can drop them
    FORBID = "forbid"  # Rejected
    SCHEMA = "schema"  # Accepted when they match the extras schema


@dataclass(frozen=True)
class PropertySpec:
    """A converted object property and its presence rules."""

    name: str
    expr: Expr
    required: bool
    allow_null: bool
    default: Any
    has_default: bool
    description: str | None = None


class SchemaBuilder(ABC):
    """Structural constructors each target implements."""

    @abstractmethod
    def any(self) -> Expr:
        """The universal schema."""

    @abstractmethod
    def null(self) -> Expr:
        """A schema accepting only null."""

    @abstractmethod
    def string(
        self,
        min_length: int | None = None,
        max_length: int | None = None,
        pattern: str | None = None,
        format: str | None = None,
    ) -> Expr:
        """
        A string schema.

        Args:
            min_length: Minimum length
            max_length: Maximum length
            pattern: Regex source
            format: A format the target supports (already filtered)
        """

    @abstractmethod
    def number(
        self,
        minimum: float | None = None,
        maximum: float | None = None,
        exclusive_minimum: float | None = None,
        exclusive_maximum: float | None = None,
        multiple_of: float | None = None,
    ) -> Expr:
        """A number schema; ``multiple_of`` is only passed when supported."""

    @abstractmethod
    def integer(
        self,
        minimum: float | None = None,
        maximum: float | None = None,
        exclusive_minimum: float | None = None,
        exclusive_maximum: float | None = None,
        multiple_of: float | None = None,
    ) -> Expr:
        """An integer schema; ``multiple_of`` is only passed when supported."""

    @abstractmethod
    def boolean(self) -> Expr:
        """A boolean schema."""

    @abstractmethod
    def array(self, item: Expr, min_items: int | None = None, max_items: int | None = None, unique_items: bool = False) -> Expr:
        """A homogeneous array; ``unique_items`` is only set when supported."""

    @abstractmethod
    def tuple(self, items: list[Expr]) -> Expr:
        """A fixed-length array whose length equals the number of items."""

    @abstractmethod
    def object(self, name: str, properties: list[PropertySpec], extras: ExtrasMode, extras_schema: Expr | None = None) -> Expr:
        """
        An object schema.

        Args:
            name: Model name derived from the schema path
            properties: Converted properties in declaration order
            extras: How undeclared keys are handled
            extras_schema: Schema for extra values when ``extras`` is SCHEMA
        """

    @abstractmethod
    def mapping(self, value: Expr) -> Expr:
        """An object with arbitrary string keys and uniformly typed values."""

    @abstractmethod
    def union(self, branches: list[Expr], exclusive: bool) -> Expr:
        """An alternation (``oneOf`` when ``exclusive``, else ``anyOf``)."""

    @abstractmethod
    def literal(self, value: Any, type_name: str | None = None) -> Expr:
        """A schema accepting exactly ``value``."""

    @abstractmethod
    def enum(self, values: list[Any], type_name: str | None = None) -> Expr:
        """A schema accepting any one of ``values``."""

    @abstractmethod
    def nullable(self, expr: Expr) -> Expr:
        """Wrap a schema so it also admits null."""

    def annotate(self, expr: Expr, metadata: dict[str, Any]) -> Expr:
        """Attach schema metadata (title, description, default...) where the target keeps it."""
        return expr


class Target(ABC):
    """A validator family: builder, declarations and runtime loading."""

    # Target identifier
    NAME: str = ""

    # Distribution to install for the runtime path
    DISTRIBUTION: str = ""

    CAPABILITIES: TargetCapabilities

    # Imported name -> module it is imported from
    IMPORTS: dict[str, str] = {}

    @abstractmethod
    def builder(self) -> SchemaBuilder:
        """Create a fresh builder for one conversion call."""

    @abstractmethod
    def declarations(self, root: Expr, schema_name: str, type_name: str, options: ConversionOptions) -> list[tuple[str, Expr]]:
        """
        Turn the root expression into ordered module-level declarations.

        Args:
            root: The translated root schema expression
            schema_name: Name bound to the validator object
            type_name: Name bound to the schema type when type inference is on
            options: Conversion options

        Returns:
            (name, expression) pairs; the last one binds ``schema_name``
        """

    @abstractmethod
    def accepts(self, runtime_schema: Any, value: Any) -> bool:
        """Whether the validator object accepts ``value``."""

    @abstractmethod
    def to_canonical(self, runtime_schema: Any) -> dict[str, Any]:
        """
        Describe a validator object of this family as a schema dictionary.

        The result is accepted by ``CanonicalSchema.from_dict``; ``$ref``
        pointers it contains resolve against the result itself.
        """

    def load_namespace(self) -> dict[str, Any]:
        """
        Import every name generated code may reference.

        Raises:
            TargetLibraryUnavailableError: If the target library cannot be imported
        """
        logger.debug("Loading %s runtime library", self.NAME)
        namespace: dict[str, Any] = {}
        modules: dict[str, Any] = {}
        try:
            for imported, module_name in self.IMPORTS.items():
                if module_name not in modules:
                    modules[module_name] = importlib.import_module(module_name)
                try:
                    namespace[imported] = getattr(modules[module_name], imported)
                except AttributeError:
                    # Submodule not yet loaded as a package attribute
                    namespace[imported] = importlib.import_module(f"{module_name}.{imported}")
        except ImportError as exc:
            raise TargetLibraryUnavailableError(self.NAME, self.DISTRIBUTION) from exc
        return namespace

    def import_groups(self, exprs: Iterable[Expr]) -> list[list[str]]:
        """
        Build import lines for the names the expressions reference.

        Returns:
            Import lines grouped stdlib first, then third-party; modules and
            names sorted within each group
        """
        by_module: dict[str, set[str]] = {}
        for expr in exprs:
            for node in walk(expr):
                if isinstance(node, Name) and node.root in self.IMPORTS:
                    by_module.setdefault(self.IMPORTS[node.root], set()).add(node.root)

        stdlib = [m for m in sorted(by_module) if m.split(".")[0] in STDLIB_MODULES]
        third_party = [m for m in sorted(by_module) if m.split(".")[0] not in STDLIB_MODULES]
        groups = []
        for modules in (stdlib, third_party):
            if modules:
                groups.append([f"from {m} import {', '.join(sorted(by_module[m]))}" for m in modules])
        return groups

    def reserved_names(self) -> set[str]:
        return set(self.IMPORTS)


def to_pascal(text: str) -> str:
    """Convert a property key such as ``shipping_address`` to ``ShippingAddress``."""
    words = re.findall(r"[A-Za-z][a-z]*|[0-9]+", text)
    return "".join(word[0].upper() + word[1:] for word in words)
