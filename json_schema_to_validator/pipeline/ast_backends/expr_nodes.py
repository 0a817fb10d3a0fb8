"""
Expression tree shared by the runtime and code generation paths.

Target builders produce these nodes; the realizer evaluates them against the
target library namespace and the serializer renders them as Python source.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class Expr:
    """Base class for expression nodes."""

    def children(self) -> Iterator[Expr]:
        return iter(())


@dataclass(frozen=True)
class Name(Expr):
    """A dotted reference such as ``fields.String``."""

    path: str

    @property
    def root(self) -> str:
        return self.path.split(".", 1)[0]


@dataclass(frozen=True)
class Const(Expr):
    """A JSON-shaped literal value (``...`` included)."""

    value: Any


@dataclass(frozen=True)
class RegexLiteral(Expr):
    """A regular expression source string."""

    pattern: str


@dataclass(frozen=True)
class Call(Expr):
    """A call with positional and keyword arguments."""

    func: Expr
    args: tuple[Expr, ...] = ()
    kwargs: tuple[tuple[str, Expr], ...] = ()
    multiline: bool = False

    def children(self) -> Iterator[Expr]:
        yield self.func
        yield from self.args
        for _, value in self.kwargs:
            yield value

    def with_kwargs(self, **kwargs: Expr) -> Call:
        """Return a copy with ``kwargs`` set, replacing same-named ones in place."""
        merged = dict(self.kwargs)
        merged.update(kwargs)
        return replace(self, kwargs=tuple(merged.items()))


@dataclass(frozen=True)
class Subscript(Expr):
    """A subscription such as ``list[int]``."""

    value: Expr
    args: tuple[Expr, ...]

    def children(self) -> Iterator[Expr]:
        yield self.value
        yield from self.args


@dataclass(frozen=True)
class DictExpr(Expr):
    """A dict display."""

    items: tuple[tuple[Expr, Expr], ...] = ()

    def children(self) -> Iterator[Expr]:
        for key, value in self.items:
            yield key
            yield value

    def with_items(self, **items: Expr) -> DictExpr:
        return DictExpr(self.items + tuple((Const(k), v) for k, v in items.items()))


@dataclass(frozen=True)
class ListExpr(Expr):
    """A list display."""

    items: tuple[Expr, ...] = ()

    def children(self) -> Iterator[Expr]:
        yield from self.items


@dataclass(frozen=True)
class TupleExpr(Expr):
    """A tuple display."""

    items: tuple[Expr, ...] = ()

    def children(self) -> Iterator[Expr]:
        yield from self.items


def call(func: str | Expr, /, *args: Expr, multiline: bool = False, **kwargs: Expr | None) -> Call:
    """
    Build a call node, dropping keyword arguments whose value is ``None``.

    Args:
        func: Callee, as a dotted name or an expression
        *args: Positional arguments
        multiline: Render one argument per line
        **kwargs: Keyword arguments, in order

    Returns:
        The call node
    """
    callee = Name(func) if isinstance(func, str) else func
    return Call(callee, tuple(args), tuple((k, v) for k, v in kwargs.items() if v is not None), multiline)


def subscript(value: str | Expr, *args: Expr) -> Subscript:
    return Subscript(Name(value) if isinstance(value, str) else value, tuple(args))


def dict_expr(items: dict[str, Expr]) -> DictExpr:
    return DictExpr(tuple((Const(k), v) for k, v in items.items()))


def const_kwargs(**values: Any) -> dict[str, Const]:
    """Wrap the non-``None`` values as constants, for use as ``call`` kwargs."""
    return {k: Const(v) for k, v in values.items() if v is not None}


def walk(expr: Expr) -> Iterator[Expr]:
    """Yield ``expr`` and every node below it, depth first."""
    yield expr
    for child in expr.children():
        yield from walk(child)
