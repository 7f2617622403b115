"""Tests for the template lexer."""

from __future__ import annotations

import pytest
from hypothesis import given, settings

from ashlar import ErrorCode, TemplateSyntaxError
from ashlar._types import Token, TokenType
from ashlar.lexer import Lexer, tokenize

from .strategies import comment_tags, literal_pieces


def types(source: str) -> list[TokenType]:
    return [token.type for token in tokenize(source)]


class TestTokenKinds:
    """Each delimiter produces its own token kind."""

    def test_plain_text(self):
        assert tokenize("hello") == [
            Token(TokenType.DATA, "hello", 1, 0),
            Token(TokenType.EOF, "", 1, 5),
        ]

    def test_empty_source(self):
        assert tokenize("") == [Token(TokenType.EOF, "", 1, 0)]

    def test_output_tag(self):
        tokens = tokenize("Hi <%= @name %>!")
        assert tokens == [
            Token(TokenType.DATA, "Hi ", 1, 0),
            Token(TokenType.OUTPUT, " @name ", 1, 3),
            Token(TokenType.DATA, "!", 1, 15),
            Token(TokenType.EOF, "", 1, 16),
        ]

    def test_code_tag(self):
        assert types("<% x = 1 %>") == [TokenType.CODE, TokenType.EOF]
        assert tokenize("<% x = 1 %>")[0].value == " x = 1 "

    def test_comment_tag(self):
        tokens = tokenize("a<%# note %>b")
        assert [t.type for t in tokens] == [
            TokenType.DATA,
            TokenType.COMMENT,
            TokenType.DATA,
            TokenType.EOF,
        ]
        assert tokens[1].value == " note "

    def test_percent_gt_in_text_is_literal(self):
        assert tokenize("100%> done")[0].value == "100%> done"

    def test_repr(self):
        assert repr(Token(TokenType.OUTPUT, " x ", 2, 4)) == "Token(OUTPUT, ' x ', 2:4)"


class TestLiteralDelimiter:
    """``<%%`` produces a literal ``<%`` in text."""

    def test_escape_is_merged_with_surrounding_text(self):
        assert tokenize("a<%%b") == [
            Token(TokenType.DATA, "a<%b", 1, 0),
            Token(TokenType.EOF, "", 1, 5),
        ]

    def test_escaped_output_tag_stays_text(self):
        tokens = tokenize("<%%= @x %>")
        assert tokens[0] == Token(TokenType.DATA, "<%= @x %>", 1, 0)
        assert len(tokens) == 2

    def test_escape_followed_by_real_tag(self):
        tokens = tokenize("<%% <%= 1 %>")
        assert [t.type for t in tokens] == [TokenType.DATA, TokenType.OUTPUT, TokenType.EOF]
        assert tokens[0].value == "<% "


class TestPositions:
    """Line and column numbers point at the opening delimiter."""

    def test_multiline(self):
        tokens = tokenize("line one\n  <% x = 1 %>\n<%= x %>")
        code = tokens[1]
        output = tokens[3]
        assert (code.lineno, code.col_offset) == (2, 2)
        assert (output.lineno, output.col_offset) == (3, 0)

    def test_tag_spanning_lines(self):
        tokens = tokenize("<%\n x = 1\n%>after")
        assert tokens[0].type is TokenType.CODE
        assert tokens[1] == Token(TokenType.DATA, "after", 3, 2)


class TestErrors:
    def test_unclosed_tag(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            Lexer("ok\nthen <%= @x", name="page.html.eex").tokenize()
        err = exc_info.value
        assert err.code is ErrorCode.UNCLOSED_TAG
        assert err.lineno == 2
        assert err.col_offset == 5
        assert "Unclosed tag" in str(err)
        assert "page.html.eex:2:5" in str(err)

    def test_unclosed_comment(self):
        with pytest.raises(TemplateSyntaxError, match="missing '%>'"):
            tokenize("<%# never closed")


class TestLexerProperties:
    """Property-based checks over generated sources."""

    @given(pieces=literal_pieces)
    @settings(max_examples=200)
    def test_literal_source_is_one_data_token(self, pieces):
        source = "".join(pieces)
        tokens = tokenize(source)
        assert [t.type for t in tokens] == [TokenType.DATA, TokenType.EOF]
        assert tokens[0].value == source

    @given(pieces=literal_pieces, comment=comment_tags)
    @settings(max_examples=200)
    def test_comments_never_become_text(self, pieces, comment):
        source = comment.join(pieces)
        data = "".join(t.value for t in tokenize(source) if t.type is TokenType.DATA)
        assert data == "".join(pieces)
