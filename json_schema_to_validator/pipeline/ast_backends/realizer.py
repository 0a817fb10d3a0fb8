"""
Expression realizer.

Evaluates expression trees against a namespace holding the target library's
names, producing the same objects the serialized source would bind.
"""

from __future__ import annotations

import builtins
import copy
from typing import Any

from .expr_nodes import Call, Const, DictExpr, Expr, ListExpr, Name, RegexLiteral, Subscript, TupleExpr


class ExpressionRealizer:
    """Evaluates expression nodes in a namespace."""

    def __init__(self, namespace: dict[str, Any]):
        self.namespace = namespace

    def realize(self, expr: Expr) -> Any:
        if isinstance(expr, Name):
            root, *attributes = expr.path.split(".")
            if root in self.namespace:
                value = self.namespace[root]
            elif hasattr(builtins, root):
                value = getattr(builtins, root)
            else:
                raise NameError(f"name {root!r} is not defined")
            for attribute in attributes:
                value = getattr(value, attribute)
            return value
        if isinstance(expr, Const):
            # Fresh copy per realization, like a literal evaluated in source
            return copy.deepcopy(expr.value)
        if isinstance(expr, RegexLiteral):
            return expr.pattern
        if isinstance(expr, Call):
            func = self.realize(expr.func)
            args = [self.realize(arg) for arg in expr.args]
            kwargs = {key: self.realize(value) for key, value in expr.kwargs}
            return func(*args, **kwargs)
        if isinstance(expr, Subscript):
            value = self.realize(expr.value)
            if len(expr.args) == 1:
                return value[self.realize(expr.args[0])]
            return value[tuple(self.realize(arg) for arg in expr.args)]
        if isinstance(expr, DictExpr):
            return {self.realize(k): self.realize(v) for k, v in expr.items}
        if isinstance(expr, ListExpr):
            return [self.realize(item) for item in expr.items]
        if isinstance(expr, TupleExpr):
            return tuple(self.realize(item) for item in expr.items)
        raise TypeError(f"Unknown expression node {type(expr).__name__}")

    def bind(self, declarations: list[tuple[str, Expr]]) -> dict[str, Any]:
        """Realize declarations in order, binding each name for the next ones."""
        bound = {}
        for target_name, expr in declarations:
            bound[target_name] = self.namespace[target_name] = self.realize(expr)
        return bound
