"""Token types produced by the ashlar lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Segment kinds in template source.

    DATA      literal text (``<%%`` already unescaped to ``<%``)
    OUTPUT    ``<%= expr %>``
    CODE      ``<% stmt %>``
    COMMENT   ``<%# text %>``
    EOF       end of input
    """

    DATA = "data"
    OUTPUT = "output"
    CODE = "code"
    COMMENT = "comment"
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    """One lexed segment.

    ``lineno``/``col_offset`` point at the opening delimiter (or the first
    character of text); ``value`` holds the text between the delimiters.
    """

    type: TokenType
    value: str
    lineno: int
    col_offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.lineno}:{self.col_offset})"
