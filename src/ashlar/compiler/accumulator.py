"""Output accumulator: the compiler's working state for one template body.

An accumulator records, in source order:

- ``statements``: Python statements to run (temporary bindings, silent
  code, control-flow blocks), and
- ``slots``: where each piece of output goes, either a literal string or
  the name of a temporary bound by one of the statements.

Every printed expression is evaluated exactly once, by its own binding
statement, in source order; the slots only reference the result. When the
body is finalized, runs of adjacent literal slots are fused into one
string and the slot list becomes the payload of a single ``Safe``:

    ```
    Hello <%= @name %>, you have <%= 3 %> new <%= @kind %>s.
    ```
    becomes::

        _tmp1 = _e(_fetch_assign(assigns, 'name'))
        _tmp2 = _e(_fetch_assign(assigns, 'kind'))
        return _Safe(['Hello ', _tmp1, ', you have 3 new ', _tmp2, 's.'])

Nested bodies (branches, loop bodies) get a child accumulator that shares
the temporary-name counter, so names stay unique across the whole render
function while statements and slots stay separate.

"""

from __future__ import annotations

import ast
import itertools
from collections.abc import Iterator

Slot = str | ast.Name


class OutputAccumulator:
    """Ordered statements, output slots and a shared temporary counter."""

    __slots__ = ("_counter", "slots", "statements")

    def __init__(self, counter: Iterator[int] | None = None):
        self._counter = counter if counter is not None else itertools.count(1)
        self.statements: list[ast.stmt] = []
        self.slots: list[Slot] = []

    def child(self) -> OutputAccumulator:
        """Accumulator for a nested body, sharing this one's counter."""
        return OutputAccumulator(self._counter)

    def new_temp(self) -> str:
        return f"_tmp{next(self._counter)}"

    def push_text(self, text: str) -> None:
        """Append a literal (already safe) fragment."""
        if text:
            self.slots.append(text)

    def push_binding(self, value: ast.expr) -> str:
        """Bind ``value`` to a fresh temporary and append it as a slot."""
        name = self.new_temp()
        self.statements.append(
            ast.Assign(targets=[ast.Name(id=name, ctx=ast.Store())], value=value)
        )
        self.slots.append(ast.Name(id=name, ctx=ast.Load()))
        return name

    def push_name(self, name: str) -> None:
        """Append a temporary that a recorded statement binds."""
        self.slots.append(ast.Name(id=name, ctx=ast.Load()))

    def add_statements(self, statements: list[ast.stmt]) -> None:
        self.statements.extend(statements)

    def fused_slots(self) -> list[Slot]:
        """Slots with adjacent literals joined."""
        fused: list[Slot] = []
        pending: list[str] = []
        for slot in self.slots:
            if isinstance(slot, str):
                pending.append(slot)
                continue
            if pending:
                fused.append("".join(pending))
                pending = []
            fused.append(slot)
        if pending:
            fused.append("".join(pending))
        return fused

    def data_expr(self) -> ast.expr:
        """Expression building this body's iodata from its slots."""
        fused = self.fused_slots()
        if not fused:
            return ast.Constant(value="")
        if len(fused) == 1:
            only = fused[0]
            return ast.Constant(value=only) if isinstance(only, str) else only
        return ast.List(
            elts=[ast.Constant(value=s) if isinstance(s, str) else s for s in fused],
            ctx=ast.Load(),
        )

    def bind_to(self, name: str) -> list[ast.stmt]:
        """This body's statements followed by ``name = <data>``."""
        return [
            *self.statements,
            ast.Assign(targets=[ast.Name(id=name, ctx=ast.Store())], value=self.data_expr()),
        ]

    def finalize(self) -> list[ast.stmt]:
        """Statements followed by ``return _Safe(<data>)``.

        Consumes the accumulator; it must not be used afterwards.
        """
        body = [
            *self.statements,
            ast.Return(
                value=ast.Call(
                    func=ast.Name(id="_Safe", ctx=ast.Load()),
                    args=[self.data_expr()],
                    keywords=[],
                )
            ),
        ]
        self.statements = []
        self.slots = []
        return body
