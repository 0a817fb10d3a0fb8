"""
Module generator.

Serializes declarations and renders them, with their imports, through the
module template.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import jinja2

from .ast_backends.base import Target
from .ast_backends.expr_nodes import Expr
from .ast_backends.serializer import ExpressionSerializer
from .config import ConversionOptions

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


@dataclass(frozen=True)
class RenderedModule:
    """Generated source and the import lines it needs."""

    code: str
    imports: list[str]


class ModuleGenerator:
    """Renders generated validator modules."""

    def __init__(self, options: ConversionOptions):
        """
        Initialize the generator.

        Args:
            options: Conversion options (indent, imports, exports, comment)
        """
        self.options = options
        self.serializer = ExpressionSerializer(options.indent)
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
            lstrip_blocks=True,
            trim_blocks=True,
        )
        self.template = self.jinja_env.get_template("module.py.jinja2")

    def render(self, target: Target, declarations: list[tuple[str, Expr]]) -> RenderedModule:
        """
        Render a module binding ``declarations`` in order.

        Args:
            target: Target whose import table resolves referenced names
            declarations: (name, expression) pairs

        Returns:
            The module source and its import lines
        """
        import_groups = target.import_groups(expr for _, expr in declarations)
        code = self.template.render(
            generation_comment=self.options.generation_comment,
            import_groups=import_groups if self.options.include_imports else [],
            declarations=[(name, self.serializer.serialize(expr)) for name, expr in declarations],
            exports=[f'"{name}"' for name, _ in declarations] if self.options.export_schema else [],
        )
        return RenderedModule(code=code.rstrip("\n") + "\n", imports=[line for group in import_groups for line in group])
