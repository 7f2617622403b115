"""Ashlar Compiler Core: main Compiler class.

The Compiler transforms an ashlar template AST into a Python AST, then
compiles it to an executable code object. Uses a mixin-based design for
maintainability.

Design Principles:
1. **AST-to-AST**: Generate `ast.Module`, not source strings
2. **Accumulator**: Output goes into ordered slots, never a string buffer
3. **Evaluate once**: Every printed expression is bound to its own temporary
4. **O(1) dispatch**: Dict-based node type → handler lookup

The generated module defines a single function:

    ```python
    def render(assigns):
        _ctx = _get_render_ctx()
        _e = _escape
        _ctx.line = 1
        _tmp1 = _e(_fetch_assign(assigns, 'name'))
        return _Safe(['Hello ', _tmp1, '!'])
    ```

The result is nested iodata wrapped in ``Safe``; no string concatenation
happens until the caller converts it.

"""

from __future__ import annotations

import ast
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from ashlar.compiler.accumulator import OutputAccumulator
from ashlar.compiler.expressions import ExpressionCompilationMixin
from ashlar.compiler.statements import StatementCompilationMixin

if TYPE_CHECKING:
    import types

    from ashlar.environment import Environment
    from ashlar.nodes import Node
    from ashlar.nodes import Template as TemplateNode

logger = logging.getLogger(__name__)


class Compiler(
    ExpressionCompilationMixin,
    StatementCompilationMixin,
):
    """Compile ashlar AST to Python code objects.

    The Compiler transforms a Template node into an `ast.Module`, then
    compiles it to a code object ready for `exec()`. The generated code
    defines a `render(assigns)` function returning a ``Safe``.

    Attributes:
        _env: Parent Environment, if any
        _name: Template name for error messages
        _filename: Source file path for compile()
        _source: Template source, for syntax error snippets
        _assign_keys: Assign keys referenced by the template, in first-seen order

    Node Dispatch:
        Uses O(1) dict lookup for node type → handler:
            ```python
            dispatch = {
                "Data": self._compile_data,
                "Output": self._compile_output,
                "If": self._compile_if,
                ...
            }
            handler = dispatch[type(node).__name__]
            ```

    Line Tracking:
        Before any code that can fail at render time the compiler emits
        `_ctx.line = N`, updating the ContextVar-stored RenderContext so
        runtime errors can point at the template line.

    Example:
            >>> from ashlar.compiler import Compiler
            >>> from ashlar.parser import Parser
            >>> from ashlar.lexer import tokenize
            >>>
            >>> node = Parser(tokenize("Hello, <%= @name %>!")).parse()
            >>> code = Compiler().compile(node, name="greeting.html.eex")

    """

    __slots__ = (
        "_assign_keys",
        "_env",
        "_filename",
        "_name",
        "_node_dispatch",
        "_source",
    )

    def __init__(self, env: Environment | None = None):
        self._env = env
        self._name: str | None = None
        self._filename: str | None = None
        self._source: str | None = None
        self._assign_keys: list[str] = []
        self._node_dispatch: dict[str, Callable[[Node, OutputAccumulator], None]] | None = None

    @property
    def assign_keys(self) -> tuple[str, ...]:
        """Assign keys referenced by the last compiled template."""
        return tuple(self._assign_keys)

    def compile(
        self,
        node: TemplateNode,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ) -> types.CodeType:
        """Compile template AST to code object.

        Args:
            node: Root Template node
            name: Template name for error messages
            filename: Source filename for error messages
            source: Template source, used in syntax error snippets

        Returns:
            Compiled code object ready for exec()
        """
        module = self.compile_to_ast(node, name=name, filename=filename, source=source)
        return compile(module, filename or name or "<template>", "exec")

    def compile_to_ast(
        self,
        node: TemplateNode,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ) -> ast.Module:
        """Compile template AST to a Python module AST without byte-compiling it."""
        self._name = name
        self._filename = filename
        self._source = source
        self._assign_keys = []

        module = ast.Module(body=[self._make_render_function(node)], type_ignores=[])
        ast.fix_missing_locations(module)
        logger.debug(
            "Compiled %s: %d top-level nodes, assigns %s",
            name or "<template>",
            len(node.body),
            self._assign_keys,
        )
        return module

    def _make_render_function(self, node: TemplateNode) -> ast.FunctionDef:
        """Generate ``def render(assigns): ...`` for the whole template."""
        acc = OutputAccumulator()
        self._compile_body(node.body, acc)

        prologue: list[ast.stmt] = [
            ast.Assign(
                targets=[ast.Name(id="_ctx", ctx=ast.Store())],
                value=ast.Call(
                    func=ast.Name(id="_get_render_ctx", ctx=ast.Load()),
                    args=[],
                    keywords=[],
                ),
            ),
            ast.Assign(
                targets=[ast.Name(id="_e", ctx=ast.Store())],
                value=ast.Name(id="_escape", ctx=ast.Load()),
            ),
        ]
        for stmt in prologue:
            stmt.lineno = stmt.end_lineno = 1
            stmt.col_offset = stmt.end_col_offset = 0

        return ast.FunctionDef(
            name="render",
            args=ast.arguments(
                posonlyargs=[],
                args=[ast.arg(arg="assigns")],
                vararg=None,
                kwonlyargs=[],
                kw_defaults=[],
                kwarg=None,
                defaults=[],
            ),
            body=[*prologue, *acc.finalize()],
            decorator_list=[],
            returns=None,
            type_params=[],
            lineno=1,
            col_offset=0,
        )

    def _make_line_marker(self, lineno: int) -> ast.stmt:
        """Generate RenderContext line update for error tracking.

        Generates: _ctx.line = lineno
        """
        return ast.Assign(
            targets=[
                ast.Attribute(
                    value=ast.Name(id="_ctx", ctx=ast.Load()),
                    attr="line",
                    ctx=ast.Store(),
                )
            ],
            value=ast.Constant(value=lineno),
            lineno=lineno,
            col_offset=0,
            end_lineno=lineno,
            end_col_offset=0,
        )

    def _compile_body(self, nodes: Sequence[Node], acc: OutputAccumulator) -> None:
        """Compile a sequence of nodes into ``acc``, in source order."""
        dispatch = self._get_node_dispatch()
        for node in nodes:
            dispatch[type(node).__name__](node, acc)

    def _get_node_dispatch(self) -> dict[str, Callable[[Node, OutputAccumulator], None]]:
        """Get node type dispatch table (cached on first call)."""
        if self._node_dispatch is None:
            self._node_dispatch = {
                "Data": self._compile_data,
                "Output": self._compile_output,
                "Code": self._compile_code,
                "If": self._compile_if,
                "For": self._compile_for,
                "While": self._compile_while,
                "Match": self._compile_match,
                "Capture": self._compile_capture,
            }
        return self._node_dispatch
