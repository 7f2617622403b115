"""Parser: token stream to immutable template AST."""

from ashlar.parser.core import Parser

__all__ = ["Parser"]
