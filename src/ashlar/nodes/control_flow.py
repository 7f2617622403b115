"""Control flow nodes for the ashlar template AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ashlar.nodes.base import Node


@dataclass(frozen=True, slots=True)
class If(Node):
    """Conditional: <% if cond %>...<% elif cond %>...<% else %>...<% end %>"""

    test: str
    body: Sequence[Node]
    elif_: Sequence[tuple[str, int, Sequence[Node]]] = ()
    else_: Sequence[Node] = ()


@dataclass(frozen=True, slots=True)
class For(Node):
    """Loop: <% for target in iter %>...<% else %>...<% end %>

    ``header`` is the ``target in iter`` text; ``empty`` renders when the
    loop ran zero times.
    """

    header: str
    body: Sequence[Node]
    empty: Sequence[Node] = ()


@dataclass(frozen=True, slots=True)
class While(Node):
    """While loop: <% while cond %>...<% end %>"""

    test: str
    body: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Case(Node):
    """One ``<% case pattern [if guard] %>`` arm of a Match."""

    pattern: str
    body: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Match(Node):
    """Pattern matching: <% match subject %><% case pattern %>...<% end %>"""

    subject: str
    cases: Sequence[Case]
