"""Parser core: token navigation, segment classification and the body loop.

Every ``<% %>`` / ``<%= %>`` segment is either a block tag (``if``, ``for``,
``while``, ``match``, ``capture`` and their continuations ``elif``, ``else``,
``case``, ``end``) or plain Python code. Block tags may end in ``:`` or
``do``; both are stripped. A keyword below the tag's first line, or a
header followed by its own indented body, makes the segment plain code.

Block bodies are parsed recursively with the set of continuation keywords
that terminate them, so ``<% end %>`` always closes the innermost block.

"""

from __future__ import annotations

import re
from collections.abc import Callable

from ashlar._types import Token, TokenType
from ashlar.environment.exceptions import ErrorCode, ParseError
from ashlar.nodes import Code, Data, Node, Output, Template
from ashlar.parser.blocks import BlockParsingMixin

# the keyword must sit on the tag's first line; `<%\nfor ...:` is plain code
_HEADER_RE = re.compile(
    r"[ \t]*(if|elif|else|for|while|match|case|capture|end)(?![\w.])(.*)\Z",
    re.DOTALL,
)
_DO_SUFFIX_RE = re.compile(r"(?:\s+do|:)\s*\Z")
# `match = ...`, `case.attr`, `end += 1`: soft keywords used as names
_NAME_USE_RE = re.compile(r"\s*(?:(?://|\*\*|<<|>>|[-+*/%&|^@])?=(?!=)|\.|:=)")
# `match(...)`, `case[0]`: a call or subscript unless the tag ends like a header
_CALL_RE = re.compile(r"\s*[(\[]")
# `for x in items:\n    total += x`: a compound statement with its body inline
_INLINE_BODY_RE = re.compile(r"[^\n]*:[ \t]*\n\s*\S")

_SOFT_KEYWORDS = frozenset({"match", "case", "capture", "end"})


class Parser(BlockParsingMixin):
    """Build a Template node from lexer tokens.

    Example:
            >>> from ashlar.lexer import tokenize
            >>> Parser(tokenize("<% if @x %>yes<% end %>")).parse()
            Template(lineno=1, col_offset=0, body=(If(...),))
    """

    __slots__ = ("_block_stack", "_filename", "_name", "_pos", "_source", "_tokens")

    def __init__(
        self,
        tokens: list[Token],
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ):
        self._tokens = tokens
        self._pos = 0
        self._name = name
        self._filename = filename
        self._source = source
        self._block_stack: list[tuple[str, Token]] = []

    def parse(self) -> Template:
        body = self._parse_body(frozenset())
        return Template(lineno=1, col_offset=0, body=tuple(body))

    # -- token navigation ---------------------------------------------------

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type is not TokenType.EOF:
            self._pos += 1
        return token

    def _error(
        self,
        message: str,
        token: Token | None = None,
        *,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ) -> ParseError:
        token = token or self._current
        return ParseError(
            message,
            lineno=token.lineno,
            name=self._name,
            filename=self._filename,
            source=self._source,
            col_offset=token.col_offset,
            code=code,
            suggestion=suggestion,
        )

    # -- classification -----------------------------------------------------

    def _split_header(self, token: Token) -> tuple[str | None, str]:
        """Return ``(keyword, rest)`` for block tags, ``(None, code)`` otherwise."""
        if token.type not in (TokenType.CODE, TokenType.OUTPUT):
            return None, token.value
        match = _HEADER_RE.match(token.value)
        if match is None:
            return None, token.value
        keyword, rest = match.group(1), match.group(2)
        if keyword in _SOFT_KEYWORDS and _NAME_USE_RE.match(rest):
            return None, token.value
        if keyword in ("match", "case") and self._is_call(keyword, rest):
            return None, token.value
        if _INLINE_BODY_RE.match(rest):
            return None, token.value
        stripped = _DO_SUFFIX_RE.sub("", rest).strip()
        if keyword == "end" and stripped:
            # `end(...)`, `end[0]`: a call or subscript on a name
            return None, token.value
        if keyword == "capture" and not stripped.isidentifier():
            return None, token.value
        return keyword, stripped

    def _is_call(self, keyword: str, rest: str) -> bool:
        """Whether ``match(...)``/``case[...]`` is a call or subscript on a name.

        A trailing ``:`` or ``do`` keeps the header reading, and a ``case``
        directly inside a match block is always a pattern.
        """
        if not _CALL_RE.match(rest) or _DO_SUFFIX_RE.search(rest):
            return False
        if keyword == "case":
            return not (self._block_stack and self._block_stack[-1][0] == "match")
        return True

    # -- body loop ----------------------------------------------------------

    def _block_parsers(self) -> dict[str, Callable[[Token, str], Node]]:
        return {
            "if": self._parse_if,
            "for": self._parse_for,
            "while": self._parse_while,
            "match": self._parse_match,
            "capture": self._parse_capture,
        }

    def _parse_body(self, stop: frozenset[str]) -> list[Node]:
        """Parse nodes until EOF or a block tag whose keyword is in ``stop``.

        The terminating tag is left unconsumed for the caller.
        """
        nodes: list[Node] = []
        parsers = self._block_parsers()
        while True:
            token = self._current
            kind = token.type

            if kind is TokenType.EOF:
                if stop:
                    opened, start = self._block_stack[-1]
                    raise self._error(
                        f"Unclosed '{opened}' block (opened at line {start.lineno})",
                        start,
                        suggestion="Close the block with <% end %>",
                        code=ErrorCode.UNCLOSED_BLOCK,
                    )
                return nodes

            if kind is TokenType.DATA:
                self._advance()
                nodes.append(Data(token.lineno, token.col_offset, token.value))
                continue

            if kind is TokenType.COMMENT:
                self._advance()
                continue

            keyword, rest = self._split_header(token)
            if keyword is None:
                self._advance()
                if kind is TokenType.OUTPUT:
                    nodes.append(Output(token.lineno, token.col_offset, token.value))
                else:
                    nodes.append(Code(token.lineno, token.col_offset, token.value))
                continue

            if keyword in stop:
                return nodes

            parser = parsers.get(keyword)
            if parser is None:
                raise self._unexpected(keyword, token)
            nodes.append(parser(token, rest))

    def _unexpected(self, keyword: str, token: Token) -> ParseError:
        if self._block_stack:
            opened, start = self._block_stack[-1]
            where = f"inside '{opened}' block opened at line {start.lineno}"
        else:
            where = "outside of any block"
        return self._error(
            f"Unexpected '<% {keyword} %>' {where}",
            token,
            suggestion="Check that every block has exactly one matching <% end %>",
        )

    def _push_block(self, keyword: str, token: Token) -> None:
        self._block_stack.append((keyword, token))

    def _consume_end(self) -> None:
        """Consume the ``<% end %>`` closing the innermost block."""
        token = self._current
        keyword, _ = self._split_header(token)
        if keyword != "end":
            raise self._unexpected(keyword or token.value.strip(), token)
        self._block_stack.pop()
        self._advance()
