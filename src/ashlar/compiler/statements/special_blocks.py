"""Special block compilation: <% capture %>.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ashlar.compiler.expressions import is_reserved_name

if TYPE_CHECKING:
    from ashlar.compiler.accumulator import OutputAccumulator
    from ashlar.environment.exceptions import TemplateSyntaxError
    from ashlar.nodes import Capture, Node


class SpecialBlockMixin:
    """Mixin for compiling capture blocks."""

    if TYPE_CHECKING:
        def _compile_body(self, nodes: Sequence[Node], acc: OutputAccumulator) -> None: ...
        def _reserved_name_error(self, name: str, node: Node) -> TemplateSyntaxError: ...

    def _compile_capture(self, node: Capture, acc: OutputAccumulator) -> None:
        """Compile <% capture name %>...<% end %>.

        The body renders into a local instead of the output:

            name = _Safe(<body data>)

        so a later <%= name %> emits it without escaping it again.
        """
        if is_reserved_name(node.name):
            raise self._reserved_name_error(node.name, node)
        child = acc.child()
        self._compile_body(node.body, child)
        acc.add_statements([
            *child.statements,
            ast.Assign(
                targets=[ast.Name(id=node.name, ctx=ast.Store())],
                value=ast.Call(
                    func=ast.Name(id="_Safe", ctx=ast.Load()),
                    args=[child.data_expr()],
                    keywords=[],
                ),
            ),
        ])
