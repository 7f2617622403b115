"""Block tag parsing: if / for / while / match / capture.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ashlar._types import Token, TokenType
from ashlar.environment.exceptions import ErrorCode
from ashlar.nodes import Capture, Case, For, If, Match, While

if TYPE_CHECKING:
    from ashlar.environment.exceptions import ParseError
    from ashlar.nodes import Node

_IF_STOP = frozenset({"elif", "else", "end"})
_FOR_STOP = frozenset({"else", "end"})
_END_STOP = frozenset({"end"})
_CASE_STOP = frozenset({"case", "end"})


class BlockParsingMixin:
    """Mixin for parsing block tags into control-flow nodes."""

    if TYPE_CHECKING:
        _block_stack: list[tuple[str, Token]]

        @property
        def _current(self) -> Token: ...

        def _advance(self) -> Token: ...
        def _error(
            self,
            message: str,
            token: Token | None = None,
            *,
            suggestion: str | None = None,
            code: ErrorCode | None = None,
        ) -> ParseError: ...
        def _split_header(self, token: Token) -> tuple[str | None, str]: ...
        def _parse_body(self, stop: frozenset[str]) -> list[Node]: ...
        def _push_block(self, keyword: str, token: Token) -> None: ...
        def _consume_end(self) -> None: ...

    def _require(self, rest: str, token: Token, keyword: str, what: str) -> None:
        if not rest:
            raise self._error(
                f"'{keyword}' requires {what}",
                token,
                code=ErrorCode.INVALID_EXPRESSION,
            )

    def _open(self, keyword: str, token: Token) -> None:
        self._push_block(keyword, token)
        self._advance()

    def _parse_if(self, start: Token, test: str) -> If:
        """Parse <% if %>...<% elif %>...<% else %>...<% end %>."""
        self._require(test, start, "if", "a condition")
        self._open("if", start)
        body = self._parse_body(_IF_STOP)

        elif_: list[tuple[str, int, tuple[Node, ...]]] = []
        else_: tuple[Node, ...] = ()
        while True:
            token = self._current
            keyword, rest = self._split_header(token)
            if keyword == "elif":
                self._require(rest, token, "elif", "a condition")
                self._advance()
                elif_.append((rest, token.lineno, tuple(self._parse_body(_IF_STOP))))
            elif keyword == "else":
                self._no_argument(rest, token, "else")
                self._advance()
                else_ = tuple(self._parse_body(_END_STOP))
                break
            else:
                break
        self._consume_end()

        return If(
            lineno=start.lineno,
            col_offset=start.col_offset,
            test=test,
            body=tuple(body),
            elif_=tuple(elif_),
            else_=else_,
        )

    def _parse_for(self, start: Token, header: str) -> For:
        """Parse <% for x in items %>...<% else %>...<% end %>."""
        self._require(header, start, "for", "'target in iterable'")
        self._open("for", start)
        body = self._parse_body(_FOR_STOP)

        empty: tuple[Node, ...] = ()
        token = self._current
        keyword, rest = self._split_header(token)
        if keyword == "else":
            self._no_argument(rest, token, "else")
            self._advance()
            empty = tuple(self._parse_body(_END_STOP))
        self._consume_end()

        return For(
            lineno=start.lineno,
            col_offset=start.col_offset,
            header=header,
            body=tuple(body),
            empty=empty,
        )

    def _parse_while(self, start: Token, test: str) -> While:
        """Parse <% while cond %>...<% end %>."""
        self._require(test, start, "while", "a condition")
        self._open("while", start)
        body = self._parse_body(_END_STOP)
        self._consume_end()
        return While(lineno=start.lineno, col_offset=start.col_offset, test=test, body=tuple(body))

    def _parse_match(self, start: Token, subject: str) -> Match:
        """Parse <% match subject %><% case pattern %>...<% end %>.

        Only whitespace and comments may appear between the match tag and
        the first case.
        """
        self._require(subject, start, "match", "a subject")
        self._open("match", start)

        while True:
            token = self._current
            if token.type is TokenType.COMMENT or (
                token.type is TokenType.DATA and not token.value.strip()
            ):
                self._advance()
                continue
            break

        cases: list[Case] = []
        while True:
            token = self._current
            keyword, pattern = self._split_header(token)
            if keyword != "case":
                break
            self._require(pattern, token, "case", "a pattern")
            self._advance()
            body = self._parse_body(_CASE_STOP)
            cases.append(
                Case(lineno=token.lineno, col_offset=token.col_offset, pattern=pattern, body=tuple(body))
            )

        if not cases:
            raise self._error(
                "'match' block needs at least one '<% case pattern %>'",
                self._current if self._current.type is not TokenType.EOF else start,
                code=ErrorCode.UNEXPECTED_TAG,
            )
        self._consume_end()
        return Match(lineno=start.lineno, col_offset=start.col_offset, subject=subject, cases=tuple(cases))

    def _parse_capture(self, start: Token, name: str) -> Capture:
        """Parse <% capture name %>...<% end %>."""
        self._open("capture", start)
        body = self._parse_body(_END_STOP)
        self._consume_end()
        return Capture(lineno=start.lineno, col_offset=start.col_offset, name=name, body=tuple(body))

    def _no_argument(self, rest: str, token: Token, keyword: str) -> None:
        if rest:
            raise self._error(
                f"'{keyword}' takes no argument, got {rest!r}",
                token,
                suggestion="Use <% elif condition %> for chained conditions",
            )
