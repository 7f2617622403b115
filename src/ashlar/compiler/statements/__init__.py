"""Statement compilation for the ashlar compiler.

The statements package is organized into logical modules:
- basic: text, printed expressions and silent code
- control_flow: if / for / while
- pattern_matching: match / case
- special_blocks: capture

Each handler takes a node and the OutputAccumulator of the body it appears
in, and pushes statements and slots onto it.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from ashlar.compiler.statements.basic import BasicStatementMixin
from ashlar.compiler.statements.control_flow import ControlFlowMixin
from ashlar.compiler.statements.pattern_matching import PatternMatchingMixin
from ashlar.compiler.statements.special_blocks import SpecialBlockMixin


class StatementCompilationMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    PatternMatchingMixin,
    SpecialBlockMixin,
):
    """Combined mixin for compiling all statement types."""
