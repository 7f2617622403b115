"""Immutable AST nodes produced by the parser and consumed by the compiler.

Node Hierarchy:
Node (base)
├── Template          # root
├── Data              # literal text
├── Output            # <%= expr %>
├── Code              # <% stmt %>
├── If / For / While  # control flow
├── Match / Case      # structural pattern matching
└── Capture           # <% capture name %>
"""

from ashlar.nodes.base import Node
from ashlar.nodes.control_flow import Case, For, If, Match, While
from ashlar.nodes.output import Code, Data, Output
from ashlar.nodes.structure import Capture, Template

__all__ = [
    "Capture",
    "Case",
    "Code",
    "Data",
    "For",
    "If",
    "Match",
    "Node",
    "Output",
    "Template",
    "While",
]
