"""Expression compilation: template code text to Python AST.

Provides the mixin that parses the Python code inside ``<% %>`` segments,
rewrites ``@name`` assign references, maps syntax errors back to template
lines, and decides whether a printed expression can be escaped while
compiling.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
import logging
import re
import textwrap
from typing import TYPE_CHECKING, Any

from ashlar.compiler.assigns import (
    AssignRewriter,
    ReadOnlyAssignError,
    mark_assign_refs,
    pattern_assign_ref,
)
from ashlar.environment.exceptions import ErrorCode, TemplateError, TemplateSyntaxError
from ashlar.safe import escape_value
from ashlar.utils.html import iodata_to_string

if TYPE_CHECKING:
    from ashlar.nodes import Node

logger = logging.getLogger(__name__)


class _UnsupportedCodeFinder(ast.NodeVisitor):
    """Find the first statement or expression a render function cannot host.

    ``return``, ``yield``, ``await``, ``global`` and ``nonlocal`` would change
    the render function itself; ``break``/``continue`` are only allowed inside
    loops written within the same segment. Nested functions and classes are
    their own scope and are not inspected.
    """

    def __init__(self) -> None:
        self.loop_depth = 0
        self.found: ast.AST | None = None

    def _flag(self, node: ast.AST) -> None:
        if self.found is None:
            self.found = node

    def _skip(self, node: ast.AST) -> None:
        pass

    visit_FunctionDef = visit_AsyncFunctionDef = visit_Lambda = visit_ClassDef = _skip

    def _visit_loop(self, node: ast.For | ast.While) -> None:
        if isinstance(node, ast.For):
            self.visit(node.target)
            self.visit(node.iter)
        else:
            self.visit(node.test)
        self.loop_depth += 1
        for stmt in node.body:
            self.visit(stmt)
        self.loop_depth -= 1
        for stmt in node.orelse:
            self.visit(stmt)

    visit_For = visit_While = _visit_loop

    def visit_Break(self, node: ast.Break) -> None:
        if not self.loop_depth:
            self._flag(node)

    visit_Continue = visit_Break

    def visit_Return(self, node: ast.AST) -> None:
        self._flag(node)

    visit_Yield = visit_YieldFrom = visit_Await = visit_Global = visit_Nonlocal = visit_Return
    visit_AsyncFor = visit_AsyncWith = visit_Return


_UNSUPPORTED_NAMES = {
    "Break": "break",
    "Continue": "continue",
    "Return": "return",
    "Yield": "yield",
    "YieldFrom": "yield from",
    "Await": "await",
    "Global": "global",
    "Nonlocal": "nonlocal",
    "AsyncFor": "async for",
    "AsyncWith": "async with",
}


# Locals and helpers of the generated render function
RESERVED_NAMES = frozenset({
    "assigns",
    "_ctx",
    "_e",
    "_Safe",
    "_escape",
    "_fetch_assign",
    "_get_render_ctx",
})
_TEMP_NAME_RE = re.compile(r"_tmp\d+\Z")


def is_reserved_name(name: str) -> bool:
    return name in RESERVED_NAMES or _TEMP_NAME_RE.match(name) is not None


class _ReservedBindingFinder(ast.NodeVisitor):
    """Find the first binding of a name the render function relies on."""

    def __init__(self) -> None:
        self.found: str | None = None

    def _check(self, name: str | None) -> None:
        if name is not None and self.found is None and is_reserved_name(name):
            self.found = name

    def visit_Name(self, node: ast.Name) -> None:
        if not isinstance(node.ctx, ast.Load):
            self._check(node.id)

    def _visit_named(self, node: Any) -> None:
        self._check(node.name)
        self.generic_visit(node)

    visit_FunctionDef = visit_AsyncFunctionDef = visit_ClassDef = _visit_named
    visit_ExceptHandler = visit_MatchAs = visit_MatchStar = _visit_named

    def visit_MatchMapping(self, node: ast.MatchMapping) -> None:
        self._check(node.rest)
        self.generic_visit(node)

    def visit_alias(self, node: ast.alias) -> None:
        self._check(node.asname or node.name.partition(".")[0])


class ExpressionCompilationMixin:
    """Mixin for turning segment code into Python AST nodes."""

    if TYPE_CHECKING:
        _name: str | None
        _filename: str | None
        _source: str | None
        _assign_keys: list[str]

    # -- errors -------------------------------------------------------------

    def _syntax_error(
        self,
        message: str,
        lineno: int,
        col_offset: int | None = None,
        code: ErrorCode = ErrorCode.INVALID_EXPRESSION,
    ) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            lineno=lineno,
            name=self._name,
            filename=self._filename,
            source=self._source,
            col_offset=col_offset,
            code=code,
        )

    def _reserved_name_error(self, name: str, node: Node) -> TemplateSyntaxError:
        return self._syntax_error(
            f"'{name}' is reserved by the template engine and cannot be assigned",
            node.lineno,
            node.col_offset,
        )

    def _parse(self, text: str, mode: str, node: Node, first_line: int, what: str) -> Any:
        """Parse ``text``, rewrite assigns and shift line numbers to the template.

        ``first_line`` is the line of ``text`` holding the segment's first line.
        """
        marked = mark_assign_refs(text)
        try:
            tree = ast.parse(marked, mode=mode)
        except SyntaxError as exc:
            rel = (exc.lineno or first_line) - first_line
            raise self._syntax_error(
                f"invalid Python {what}: {exc.msg}", node.lineno + max(rel, 0), node.col_offset
            ) from None

        finder = _UnsupportedCodeFinder()
        finder.visit(tree)
        if finder.found is not None:
            keyword = _UNSUPPORTED_NAMES[type(finder.found).__name__]
            raise self._syntax_error(
                f"'{keyword}' is not supported in templates",
                node.lineno,
                node.col_offset,
                code=ErrorCode.UNSUPPORTED_STATEMENT,
            )

        binding = _ReservedBindingFinder()
        binding.visit(tree)
        if binding.found is not None:
            raise self._reserved_name_error(binding.found, node)

        rewriter = AssignRewriter()
        try:
            tree = rewriter.visit(tree)
        except ReadOnlyAssignError as exc:
            raise self._syntax_error(str(exc), node.lineno, node.col_offset) from None
        for key in rewriter.keys:
            if key not in self._assign_keys:
                self._assign_keys.append(key)

        ast.increment_lineno(tree, node.lineno - first_line)
        return tree

    # -- entry points -------------------------------------------------------

    def _parse_expression(self, code: str, node: Node) -> ast.expr:
        """Parse a single expression; newlines inside it are allowed."""
        if not code.strip():
            raise self._syntax_error("empty expression", node.lineno, node.col_offset)
        tree = self._parse(f"(\n{code}\n)", "eval", node, 2, "expression")
        return tree.body

    def _parse_statements(self, code: str, node: Node) -> list[ast.stmt]:
        """Parse silent code: one or more simple or compound statements.

        The first line is stripped and the remaining lines are dedented
        together, so code may start on the tag line and continue below it.
        A first line opening a block keeps the indentation of its body.
        """
        first, sep, rest = code.partition("\n")
        first = first.strip()
        if not first.endswith(":"):
            rest = textwrap.dedent(rest)
        text = (first + sep + rest).rstrip()
        if not text.strip():
            return []
        tree = self._parse(text, "exec", node, 1, "statement")
        return tree.body

    def _parse_for_header(self, header: str, node: Node) -> tuple[ast.expr, ast.expr]:
        tree = self._parse(f"for {header}:\n    pass", "exec", node, 1, "for loop")
        loop = tree.body[0] if len(tree.body) == 1 else None
        if not isinstance(loop, ast.For):
            raise self._syntax_error("expected 'for target in iterable'", node.lineno, node.col_offset)
        return loop.target, loop.iter

    def _parse_case(self, pattern: str, node: Node) -> tuple[ast.pattern, ast.expr | None]:
        tree = self._parse(f"match _:\n    case {pattern}:\n        pass", "exec", node, 2, "case pattern")
        match = tree.body[0]
        if not isinstance(match, ast.Match) or len(match.cases) != 1:
            raise self._syntax_error("expected 'case pattern [if guard]'", node.lineno, node.col_offset)
        case = match.cases[0]
        key = pattern_assign_ref(case.pattern)
        if key is not None:
            raise self._syntax_error(
                f"@{key} cannot be used as a case pattern; compare it in a guard: "
                f"'case value if value == @{key}'",
                node.lineno,
                node.col_offset,
            )
        return case.pattern, case.guard

    # -- compile-time escaping ----------------------------------------------

    def _try_static_escape(self, expr: ast.expr) -> str | None:
        """Escape a literal expression now, or return None to defer to runtime.

        Any conversion failure defers too, so the error (if any) surfaces at
        render time exactly as it would without this shortcut.
        """
        if not isinstance(expr, (ast.Constant, ast.UnaryOp, ast.Tuple, ast.List)):
            return None
        try:
            value = ast.literal_eval(expr)
        except (ValueError, TypeError, SyntaxError, RecursionError):
            return None
        try:
            escaped = iodata_to_string(escape_value(value))
        except (TemplateError, ValueError, TypeError):
            return None
        logger.debug("Inlined literal output %r in %s", escaped, self._name or "<template>")
        return escaped
