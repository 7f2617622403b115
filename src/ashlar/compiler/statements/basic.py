"""Basic statement compilation: text, printed expressions, silent code.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ashlar.compiler.accumulator import OutputAccumulator
    from ashlar.nodes import Code, Data, Node, Output


class BasicStatementMixin:
    """Mixin for compiling text and expression segments."""

    if TYPE_CHECKING:
        def _parse_expression(self, code: str, node: Node) -> ast.expr: ...
        def _parse_statements(self, code: str, node: Node) -> list[ast.stmt]: ...
        def _try_static_escape(self, expr: ast.expr) -> str | None: ...
        def _make_line_marker(self, lineno: int) -> ast.stmt: ...

    def _compile_data(self, node: Data, acc: OutputAccumulator) -> None:
        """Literal text becomes a slot as is."""
        acc.push_text(node.value)

    def _compile_output(self, node: Output, acc: OutputAccumulator) -> None:
        """Compile <%= expr %>.

        Literals are escaped now and inlined as text; anything else is bound
        to a temporary through the runtime escape dispatch:

            _tmp1 = _e(<expr>)
        """
        expr = self._parse_expression(node.code, node)
        static = self._try_static_escape(expr)
        if static is not None:
            acc.push_text(static)
            return
        acc.add_statements([self._make_line_marker(node.lineno)])
        acc.push_binding(
            ast.Call(func=ast.Name(id="_e", ctx=ast.Load()), args=[expr], keywords=[])
        )

    def _compile_code(self, node: Code, acc: OutputAccumulator) -> None:
        """Compile <% stmt %>: statements only, no slot."""
        stmts = self._parse_statements(node.code, node)
        if stmts:
            acc.add_statements([self._make_line_marker(node.lineno), *stmts])
