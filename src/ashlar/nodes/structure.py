"""Template structure nodes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ashlar.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Template(Node):
    """Root node of a parsed template."""

    body: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Capture(Node):
    """Bind rendered content to a name: <% capture name %>...<% end %>

    The body is not emitted where it appears; ``name`` becomes a local
    holding its Safe value.
    """

    name: str
    body: Sequence[Node]
