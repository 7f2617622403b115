"""Lexer: split template source into text and ``<% %>`` segments.

Grammar:
    ```
    <%= expr %>    OUTPUT
    <%  stmt %>    CODE
    <%# text %>    COMMENT
    <%%            literal "<%" inside text
    ```

The closing ``%>`` is the first one after the opening delimiter; Python
code inside a tag therefore cannot contain the two characters ``%>``
adjacent (write ``% >`` or use a variable).

Adjacent DATA tokens are merged, so a ``<%%`` escape never splits the
surrounding text.

"""

from __future__ import annotations

import re

from ashlar._types import Token, TokenType
from ashlar.environment.exceptions import ErrorCode, TemplateSyntaxError

_TAG_START_RE = re.compile(r"<%(%|=|#)?")


class Lexer:
    """Tokenize one template source.

    Example:
            >>> Lexer("Hi <%= @name %>!").tokenize()
            [Token(DATA, 'Hi ', 1:0), Token(OUTPUT, ' @name ', 1:3),
             Token(DATA, '!', 1:15), Token(EOF, '', 1:16)]
    """

    __slots__ = ("_filename", "_name", "_source")

    def __init__(self, source: str, name: str | None = None, filename: str | None = None):
        self._source = source
        self._name = name
        self._filename = filename

    def _position(self, offset: int) -> tuple[int, int]:
        lineno = self._source.count("\n", 0, offset) + 1
        line_start = self._source.rfind("\n", 0, offset) + 1
        return lineno, offset - line_start

    def tokenize(self) -> list[Token]:
        source = self._source
        tokens: list[Token] = []
        text: list[str] = []
        text_start = 0
        pos = 0

        def flush_text() -> None:
            if text:
                lineno, col = self._position(text_start)
                tokens.append(Token(TokenType.DATA, "".join(text), lineno, col))
                text.clear()

        while True:
            match = _TAG_START_RE.search(source, pos)
            if match is None:
                if pos < len(source):
                    if not text:
                        text_start = pos
                    text.append(source[pos:])
                break

            if match.start() > pos:
                if not text:
                    text_start = pos
                text.append(source[pos : match.start()])

            marker = match.group(1)
            if marker == "%":
                if not text:
                    text_start = match.start()
                text.append("<%")
                pos = match.end()
                continue

            end = source.find("%>", match.end())
            if end == -1:
                lineno, col = self._position(match.start())
                raise TemplateSyntaxError(
                    "Unclosed tag: missing '%>'",
                    lineno=lineno,
                    name=self._name,
                    filename=self._filename,
                    source=source,
                    col_offset=col,
                    code=ErrorCode.UNCLOSED_TAG,
                )

            flush_text()
            lineno, col = self._position(match.start())
            body = source[match.end() : end]
            if marker == "=":
                tokens.append(Token(TokenType.OUTPUT, body, lineno, col))
            elif marker == "#":
                tokens.append(Token(TokenType.COMMENT, body, lineno, col))
            else:
                tokens.append(Token(TokenType.CODE, body, lineno, col))
            pos = end + 2

        flush_text()
        lineno, col = self._position(len(source))
        tokens.append(Token(TokenType.EOF, "", lineno, col))
        return tokens


def tokenize(source: str, name: str | None = None, filename: str | None = None) -> list[Token]:
    """Convenience wrapper around ``Lexer(source).tokenize()``."""
    return Lexer(source, name, filename).tokenize()
