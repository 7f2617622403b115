"""Text and expression segment nodes.

Python code inside segments is kept as source text; the compiler parses it
after rewriting ``@name`` assign references.
"""

from __future__ import annotations

from dataclasses import dataclass

from ashlar.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Literal text between tags."""

    value: str


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Printed expression: <%= expr %>"""

    code: str


@dataclass(frozen=True, slots=True)
class Code(Node):
    """Silent statement(s): <% stmt %>"""

    code: str
