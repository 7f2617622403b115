"""Tests for block structure parsing and structural errors."""

from __future__ import annotations

import pytest

from ashlar import ErrorCode, ParseError, TemplateSyntaxError
from ashlar.lexer import tokenize
from ashlar.nodes import Capture, Code, Data, For, If, Match, Output, While
from ashlar.parser import Parser


def parse(source: str, name: str | None = None):
    return Parser(tokenize(source), name=name, source=source).parse()


class TestSegments:
    def test_text_and_output(self):
        body = parse("Hi <%= @name %>").body
        assert body == (Data(1, 0, "Hi "), Output(1, 3, " @name "))

    def test_comments_are_dropped(self):
        body = parse("a<%# hidden %>b").body
        assert body == (Data(1, 0, "a"), Data(1, 14, "b"))

    def test_plain_code(self):
        (node,) = parse("<% total = 0 %>").body
        assert isinstance(node, Code)
        assert node.code == " total = 0 "


class TestBlocks:
    def test_if_elif_else(self):
        (node,) = parse("<% if @a %>A<% elif @b %>B<% else %>C<% end %>").body
        assert isinstance(node, If)
        assert node.test == "@a"
        assert node.body == (Data(1, 11, "A"),)
        assert [(test, lineno) for test, lineno, _ in node.elif_] == [("@b", 1)]
        assert node.else_ == (Data(1, 36, "C"),)

    @pytest.mark.parametrize("suffix", [":", " do", "  :  "])
    def test_block_suffixes_are_stripped(self, suffix):
        (node,) = parse(f"<% if @a{suffix} %>yes<% end %>").body
        assert node.test == "@a"

    def test_for_with_empty_branch(self):
        (node,) = parse("<% for x in @items %><%= x %><% else %>none<% end %>").body
        assert isinstance(node, For)
        assert node.header == "x in @items"
        assert isinstance(node.body[0], Output)
        assert node.empty == (Data(1, 39, "none"),)

    def test_while(self):
        (_, node) = parse("<% n = 3 %><% while n %><% n -= 1 %>.<% end %>").body
        assert isinstance(node, While)
        assert node.test == "n"
        assert len(node.body) == 2

    def test_match_skips_whitespace_before_first_case(self):
        source = '<% match @status %>\n  <%# arms %>\n  <% case "ok" %>fine<% case _ %>other<% end %>'
        (node,) = parse(source).body
        assert isinstance(node, Match)
        assert node.subject == "@status"
        assert [case.pattern for case in node.cases] == ['"ok"', "_"]
        assert node.cases[1].body == (Data(3, 33, "other"),)

    def test_capture(self):
        (node, _) = parse("<% capture greeting %>Hi<% end %><%= greeting %>").body
        assert isinstance(node, Capture)
        assert node.name == "greeting"
        assert node.body == (Data(1, 22, "Hi"),)

    def test_nested_blocks_close_innermost_first(self):
        (node,) = parse("<% if @a %><% for x in @xs %><%= x %><% end %>after<% end %>").body
        assert isinstance(node.body[0], For)
        assert node.body[1] == Data(1, 46, "after")

    def test_output_tag_can_open_a_block(self):
        (node,) = parse("<%= if @a do %>yes<% end %>").body
        assert isinstance(node, If)


class TestSoftKeywords:
    """Block keywords used as ordinary names stay plain code."""

    @pytest.mark.parametrize(
        "code",
        [
            " match = 1 ",
            " end(1) ",
            " case.value ",
            " capture += 1 ",
            " end[0] ",
            ' match("x") ',
            " match[0] ",
            " case(1) ",
        ],
    )
    def test_name_uses(self, code):
        (node,) = parse(f"<%{code}%>").body
        assert isinstance(node, Code)

    def test_capture_needs_an_identifier(self):
        (node,) = parse("<% capture(1) %>").body
        assert isinstance(node, Code)

    def test_keyword_prefix_is_not_a_keyword(self):
        (node,) = parse("<% ending = 1 %>").body
        assert isinstance(node, Code)

    def test_call_in_output_tag(self):
        (node,) = parse('<%= match("x") %>').body
        assert isinstance(node, Output)

    def test_parenthesized_subject_with_suffix_opens_a_block(self):
        (node,) = parse("<% match (1, 2): %><% case (a, b) %>x<% end %>").body
        assert isinstance(node, Match)
        assert node.subject == "(1, 2)"
        assert node.cases[0].pattern == "(a, b)"


class TestMultiLineCode:
    """Keywords below the tag's first line belong to plain statements."""

    @pytest.mark.parametrize(
        "source",
        [
            "<%\nfor x in @xs:\n    total = x\n%>",
            "<%\nif @a:\n    x = 1\nelse:\n    x = 2\n%>",
            "<%\nwhile n:\n    n -= 1\n%>",
            "<%\nmatch @x:\n    case 1:\n        y = 1\n%>",
        ],
    )
    def test_compound_statement_after_newline(self, source):
        (node,) = parse(source).body
        assert isinstance(node, Code)

    def test_header_with_inline_body(self):
        (node,) = parse("<% for x in @xs:\n    total = x\n%>").body
        assert isinstance(node, Code)

    def test_multi_line_header_condition(self):
        (node,) = parse("<% if @a and\n      @b %>x<% end %>").body
        assert isinstance(node, If)


class TestStructuralErrors:
    def test_unclosed_block(self):
        with pytest.raises(ParseError) as exc_info:
            parse("<% if @x %>\nyes", name="page.html.eex")
        err = exc_info.value
        assert err.code is ErrorCode.UNCLOSED_BLOCK
        assert err.lineno == 1
        assert "Unclosed 'if' block (opened at line 1)" in str(err)
        assert "Suggestion: Close the block with <% end %>" in str(err)

    def test_outer_unclosed_block_is_reported(self):
        with pytest.raises(ParseError, match=r"Unclosed 'if' block \(opened at line 1\)"):
            parse("<% if @a %>\n<% for x in @xs %>\n<% end %>")

    def test_stray_end(self):
        with pytest.raises(ParseError) as exc_info:
            parse("text<% end %>")
        assert exc_info.value.code is ErrorCode.UNEXPECTED_TAG
        assert "Unexpected '<% end %>' outside of any block" in str(exc_info.value)

    def test_continuation_in_wrong_block(self):
        with pytest.raises(ParseError, match="Unexpected '<% elif %>' inside 'for' block opened at line 1"):
            parse("<% for x in @xs %><% elif @y %><% end %>")

    def test_else_outside_block(self):
        with pytest.raises(ParseError, match="outside of any block"):
            parse("<% else %>")

    def test_missing_condition(self):
        with pytest.raises(ParseError) as exc_info:
            parse("<% if %>x<% end %>")
        assert exc_info.value.code is ErrorCode.INVALID_EXPRESSION
        assert "'if' requires a condition" in str(exc_info.value)

    def test_else_with_argument(self):
        with pytest.raises(ParseError, match="'else' takes no argument"):
            parse("<% if @a %>a<% else @b %>b<% end %>")

    def test_match_without_case(self):
        with pytest.raises(ParseError, match="at least one"):
            parse("<% match @x %>text<% end %>")

    def test_parse_error_is_a_syntax_error(self):
        with pytest.raises(TemplateSyntaxError):
            parse("<% while @x %>")
