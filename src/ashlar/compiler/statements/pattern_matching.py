"""Pattern matching compilation: <% match %> / <% case %>.

Compiles to a native Python ``match`` statement. Each case body binds the
block's temporary; when no case matches the block renders nothing.

    ```
    <% match @status %>
      <% case "ok" %>All good
      <% case code if code >= 500 %>Server error <%= code %>
    <% end %>
    ```

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ashlar.compiler.accumulator import OutputAccumulator
    from ashlar.nodes import Match, Node


class PatternMatchingMixin:
    """Mixin for compiling match blocks."""

    if TYPE_CHECKING:
        def _parse_expression(self, code: str, node: Node) -> ast.expr: ...
        def _parse_case(self, pattern: str, node: Node) -> tuple[ast.pattern, ast.expr | None]: ...
        def _make_line_marker(self, lineno: int) -> ast.stmt: ...
        def _compile_branch(
            self, nodes: Sequence[Node], acc: OutputAccumulator, temp: str
        ) -> list[ast.stmt]: ...

    def _compile_match(self, node: Match, acc: OutputAccumulator) -> None:
        """Compile a match block.

        Generates:
            _tmp1 = ''
            match subject:
                case pattern if guard:
                    ...case statements...
                    _tmp1 = <case data>
        """
        temp = acc.new_temp()
        subject = self._parse_expression(node.subject, node)

        cases: list[ast.match_case] = []
        for case in node.cases:
            pattern, guard = self._parse_case(case.pattern, case)
            body = [self._make_line_marker(case.lineno), *self._compile_branch(case.body, acc, temp)]
            cases.append(ast.match_case(pattern=pattern, guard=guard, body=body))

        acc.add_statements([
            self._make_line_marker(node.lineno),
            ast.Assign(targets=[ast.Name(id=temp, ctx=ast.Store())], value=ast.Constant(value="")),
            ast.Match(subject=subject, cases=cases),
        ])
        acc.push_name(temp)
