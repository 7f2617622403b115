"""Template compiler: ashlar AST to Python code objects."""

from ashlar.compiler.core import Compiler

__all__ = ["Compiler"]
