"""Control flow statement compilation: if / for / while.

Each construct compiles its bodies with child accumulators and binds the
result to one temporary, which becomes a single slot of the enclosing
body:

    ```
    <% if @admin %>Hi boss<% else %>Hi <%= @name %><% end %>
    ```
    becomes::

        if _fetch_assign(assigns, 'admin'):
            _tmp1 = 'Hi boss'
        else:
            _tmp2 = _e(_fetch_assign(assigns, 'name'))
            _tmp1 = ['Hi ', _tmp2]

Loops collect one entry per iteration in a list.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ashlar.nodes import Node

if TYPE_CHECKING:
    from ashlar.compiler.accumulator import OutputAccumulator
    from ashlar.nodes import For, If, While


def _assign(name: str, value: ast.expr) -> ast.Assign:
    return ast.Assign(targets=[ast.Name(id=name, ctx=ast.Store())], value=value)


def _append(name: str, value: ast.expr) -> ast.Expr:
    return ast.Expr(
        value=ast.Call(
            func=ast.Attribute(value=ast.Name(id=name, ctx=ast.Load()), attr="append", ctx=ast.Load()),
            args=[value],
            keywords=[],
        )
    )


class ControlFlowMixin:
    """Mixin for compiling control flow blocks."""

    if TYPE_CHECKING:
        def _parse_expression(self, code: str, node: Node) -> ast.expr: ...
        def _parse_for_header(self, header: str, node: Node) -> tuple[ast.expr, ast.expr]: ...
        def _make_line_marker(self, lineno: int) -> ast.stmt: ...
        def _compile_body(self, nodes: Sequence[Node], acc: OutputAccumulator) -> None: ...

    def _compile_branch(self, nodes: Sequence[Node], acc: OutputAccumulator, temp: str) -> list[ast.stmt]:
        """Compile a branch body into statements ending in ``temp = <data>``."""
        child = acc.child()
        self._compile_body(nodes, child)
        return child.bind_to(temp)

    def _compile_if(self, node: If, acc: OutputAccumulator) -> None:
        """Compile <% if %>...<% elif %>...<% else %>...<% end %>.

        A missing else branch binds the empty string.
        """
        temp = acc.new_temp()
        test = self._parse_expression(node.test, node)
        body = self._compile_branch(node.body, acc, temp)

        if node.else_:
            orelse = self._compile_branch(node.else_, acc, temp)
        else:
            orelse = [_assign(temp, ast.Constant(value=""))]

        # Build the elif chain from the innermost outward
        for elif_test, elif_lineno, elif_body in reversed(node.elif_):
            cond = self._parse_expression(elif_test, Node(elif_lineno, node.col_offset))
            orelse = [
                self._make_line_marker(elif_lineno),
                ast.If(test=cond, body=self._compile_branch(elif_body, acc, temp), orelse=orelse),
            ]

        acc.add_statements([
            self._make_line_marker(node.lineno),
            ast.If(test=test, body=body, orelse=orelse),
        ])
        acc.push_name(temp)

    def _compile_for(self, node: For, acc: OutputAccumulator) -> None:
        """Compile <% for target in iter %>...<% else %>...<% end %>.

        Generates:
            _tmp1 = []
            for target in iter:
                ...body statements...
                _tmp1.append(<body data>)
            if not _tmp1:
                ...empty statements...
                _tmp1.append(<empty data>)
        """
        temp = acc.new_temp()
        target, iter_ = self._parse_for_header(node.header, node)

        child = acc.child()
        self._compile_body(node.body, child)
        loop_body = [*child.statements, _append(temp, child.data_expr())]

        stmts: list[ast.stmt] = [
            self._make_line_marker(node.lineno),
            _assign(temp, ast.List(elts=[], ctx=ast.Load())),
            ast.For(target=target, iter=iter_, body=loop_body, orelse=[]),
        ]
        if node.empty:
            empty = acc.child()
            self._compile_body(node.empty, empty)
            stmts.append(
                ast.If(
                    test=ast.UnaryOp(op=ast.Not(), operand=ast.Name(id=temp, ctx=ast.Load())),
                    body=[*empty.statements, _append(temp, empty.data_expr())],
                    orelse=[],
                )
            )
        acc.add_statements(stmts)
        acc.push_name(temp)

    def _compile_while(self, node: While, acc: OutputAccumulator) -> None:
        """Compile <% while cond %>...<% end %> into a list-collecting loop."""
        temp = acc.new_temp()
        test = self._parse_expression(node.test, node)

        child = acc.child()
        self._compile_body(node.body, child)

        acc.add_statements([
            self._make_line_marker(node.lineno),
            _assign(temp, ast.List(elts=[], ctx=ast.Load())),
            ast.While(test=test, body=[*child.statements, _append(temp, child.data_expr())], orelse=[]),
        ])
        acc.push_name(temp)
