"""
Python expression serializer.

Renders expression trees as Python source. Calls flagged ``multiline`` and
displays holding nested containers or calls are laid out one element per
line, indented with the configured unit repeated by depth.
"""

from __future__ import annotations

import keyword
import math
import re
from typing import Any

from ..config import DEFAULT_SCHEMA_NAME
from .expr_nodes import Call, Const, DictExpr, Expr, ListExpr, Name, RegexLiteral, Subscript, TupleExpr

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_string(value: str) -> str:
    """Escape a string for use inside a double-quoted Python literal."""
    out = []
    for char in value:
        if char in _STRING_ESCAPES:
            out.append(_STRING_ESCAPES[char])
        elif ord(char) < 0x20 or char == "\x7f":
            out.append(f"\\x{ord(char):02x}")
        else:
            out.append(char)
    return "".join(out)


def escape_regex_pattern(pattern: str) -> str:
    """Escape a regex source for a double-quoted literal; regex syntax passes through."""
    return pattern.replace("\\", "\\\\").replace('"', '\\"')


def render_literal(value: Any) -> str:
    """
    Render a JSON-shaped value as a Python literal.

    Args:
        value: None, bool, int, float, str, Ellipsis, or a list/tuple/dict of those

    Returns:
        Python source for the value

    Raises:
        TypeError: If the value has no literal form
    """
    if value is None:
        return "None"
    if value is Ellipsis:
        return "..."
    # bool first: it is an int subclass
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return f'float("{value}")'
        return repr(value)
    if isinstance(value, str):
        return f'"{escape_string(value)}"'
    if isinstance(value, list):
        return "[" + ", ".join(render_literal(v) for v in value) + "]"
    if isinstance(value, tuple):
        if len(value) == 1:
            return f"({render_literal(value[0])},)"
        return "(" + ", ".join(render_literal(v) for v in value) + ")"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{render_literal(k)}: {render_literal(v)}" for k, v in value.items()) + "}"
    raise TypeError(f"Cannot render {type(value).__name__} as a Python literal")


def normalize_schema_name(name: str | None) -> str:
    """
    Sanitize a requested declaration name into a Python identifier.

    Args:
        name: Requested name (may be empty or None)

    Returns:
        The identifier: first letter upper-cased, invalid characters dropped,
        ``_`` prefixed to a leading digit and appended to a keyword
    """
    cleaned = re.sub(r"[^A-Za-z0-9_]", "", name or "")
    if not cleaned:
        return DEFAULT_SCHEMA_NAME
    cleaned = cleaned[0].upper() + cleaned[1:]
    if cleaned[0].isdigit():
        cleaned = "_" + cleaned
    if keyword.iskeyword(cleaned):
        cleaned += "_"
    return cleaned


class ExpressionSerializer:
    """Serializes expression nodes to Python source."""

    def __init__(self, indent: str = "    "):
        self.indent = indent

    def serialize(self, expr: Expr, depth: int = 0) -> str:
        """Serialize an expression whose first line sits at ``depth``."""
        if isinstance(expr, Name):
            return expr.path
        if isinstance(expr, Const):
            return render_literal(expr.value)
        if isinstance(expr, RegexLiteral):
            return f'"{escape_regex_pattern(expr.pattern)}"'
        if isinstance(expr, Call):
            return self._serialize_call(expr, depth)
        if isinstance(expr, Subscript):
            if not expr.args:
                return f"{self.serialize(expr.value, depth)}[()]"
            args = ", ".join(self.serialize(arg, depth) for arg in expr.args)
            return f"{self.serialize(expr.value, depth)}[{args}]"
        if isinstance(expr, DictExpr):
            parts = [f"{self.serialize(k, depth + 1)}: {self.serialize(v, depth + 1)}" for k, v in expr.items]
            return self._display("{", "}", parts, self._is_nested(v for _, v in expr.items), depth)
        if isinstance(expr, ListExpr):
            parts = [self.serialize(item, depth + 1) for item in expr.items]
            return self._display("[", "]", parts, self._is_nested(expr.items), depth)
        if isinstance(expr, TupleExpr):
            parts = [self.serialize(item, depth + 1) for item in expr.items]
            return self._display("(", ")", parts, self._is_nested(expr.items, inline_calls=True), depth)
        raise TypeError(f"Unknown expression node {type(expr).__name__}")

    def _serialize_call(self, expr: Call, depth: int) -> str:
        func = self.serialize(expr.func, depth)
        inner = depth + 1 if expr.multiline else depth
        parts = [self.serialize(arg, inner) for arg in expr.args]
        parts.extend(f"{key}={self.serialize(value, inner)}" for key, value in expr.kwargs)
        if not expr.multiline or not parts:
            return f"{func}({', '.join(parts)})"
        return self._block(f"{func}(", ")", parts, depth)

    def _display(self, open_: str, close: str, parts: list[str], nested: bool, depth: int) -> str:
        if not parts:
            return open_ + close
        if not nested:
            trailing = "," if open_ == "(" and len(parts) == 1 else ""
            return open_ + ", ".join(parts) + trailing + close
        return self._block(open_, close, parts, depth)

    def _block(self, head: str, close: str, parts: list[str], depth: int) -> str:
        inner = self.indent * (depth + 1)
        lines = [head]
        lines.extend(f"{inner}{part}," for part in parts)
        lines.append(f"{self.indent * depth}{close}")
        return "\n".join(lines)

    @staticmethod
    def _is_nested(values, inline_calls: bool = False) -> bool:
        """
        A display goes multi-line when it holds a call or a non-empty container.

        With ``inline_calls`` only multi-line calls count, so a pair such as
        ``(StrictStr, Field(...))`` stays on one line.
        """
        for value in values:
            if isinstance(value, Call) and (value.multiline or not inline_calls):
                return True
            if isinstance(value, (DictExpr, ListExpr, TupleExpr)) and value.items:
                return True
        return False
