"""Tests for tag builders, attribute escaping and form tags."""

from __future__ import annotations

import pytest

from ashlar import CsrfTokenError, Safe
from ashlar.html import (
    attributes_escape,
    content_tag,
    csrf_input_tag,
    csrf_meta_tag,
    dasherize,
    form_tag,
    img_tag,
    tag,
)


def s(value: Safe) -> str:
    assert isinstance(value, Safe)
    return str(value)


class TestTag:
    def test_void_tag(self):
        assert s(tag("br")) == "<br>"

    def test_attributes_are_sorted(self):
        assert s(tag("input", type="text", name="user_id")) == '<input name="user_id" type="text">'

    def test_boolean_attributes(self):
        assert s(tag("audio", autoplay=True)) == "<audio autoplay>"
        assert s(tag("input", disabled=False, value=None)) == "<input>"

    def test_values_are_escaped(self):
        assert s(tag("div", title="<x> & 'y'")) == '<div title="&lt;x&gt; &amp; &#39;y&#39;">'

    def test_safe_values_are_kept(self):
        assert s(tag("div", title=Safe("&amp;"))) == '<div title="&amp;">'

    def test_non_string_values(self):
        assert s(tag("input", value=5, step=0.5)) == '<input step="0.5" value="5">'

    def test_keyword_names_are_dasherized(self):
        assert s(tag("div", data_id=1, aria_label="x")) == '<div aria-label="x" data-id="1">'

    def test_trailing_underscore_is_stripped(self):
        assert s(tag("label", for_="name", class_="l")) == '<label class="l" for="name">'

    def test_explicit_mapping_keys_are_verbatim(self):
        assert s(tag("div", {"data_x": "1", "<k>": "v"})) == '<div &lt;k&gt;="v" data_x="1">'

    def test_pairs_as_attributes(self):
        assert s(tag("meta", [("name", "a"), ("content", "b")])) == '<meta content="b" name="a">'

    def test_nested_data_attributes(self):
        result = tag("div", data={"toggle": {"target": "#x"}, "user_id": 1})
        assert s(result) == '<div data-toggle-target="#x" data-user-id="1">'

    def test_nested_aria_and_phx(self):
        assert s(tag("button", aria={"hidden": "true"})) == '<button aria-hidden="true">'
        assert s(tag("button", phx={"click": "save"})) == '<button phx-click="save">'

    def test_nested_none_is_dropped(self):
        assert s(tag("div", data={"a": None, "b": "2"})) == '<div data-b="2">'

    def test_class_list(self):
        assert s(tag("div", class_=["a", None, False, "", "b"])) == '<div class="a b">'

    def test_class_list_is_escaped(self):
        assert s(tag("div", class_=["<x>"])) == '<div class="&lt;x&gt;">'

    def test_numeric_id_is_rejected(self):
        with pytest.raises(ValueError, match="DOM ID cannot be set to a number"):
            tag("div", id=1)

    def test_string_id(self):
        assert s(tag("div", id="main")) == '<div id="main">'


class TestContentTag:
    def test_content_is_escaped(self):
        assert s(content_tag("p", "<Hello>", class_="test")) == '<p class="test">&lt;Hello&gt;</p>'

    def test_safe_content(self):
        assert s(content_tag("p", Safe("<b>hi</b>"))) == "<p><b>hi</b></p>"

    def test_nested_tags(self):
        inner = content_tag("span", "x")
        assert s(content_tag("div", inner)) == "<div><span>x</span></div>"

    def test_empty_content(self):
        assert s(content_tag("span")) == "<span></span>"

    def test_attrs_and_keywords(self):
        result = content_tag("option", "Display", {"value": "v"}, data={"foo": "bar"})
        assert s(result) == '<option data-foo="bar" value="v">Display</option>'


class TestAttributesEscape:
    def test_keeps_order(self):
        result = attributes_escape({"title": "the title", "id": "the id", "selected": True})
        assert s(result) == ' title="the title" id="the id" selected'

    def test_keywords(self):
        assert s(attributes_escape(class_="btn", data={"confirm": "ok?"})) == (
            ' class="btn" data-confirm="ok?"'
        )

    def test_numeric_id_is_rejected(self):
        with pytest.raises(ValueError):
            attributes_escape({"id": 1.5})

    def test_empty(self):
        assert s(attributes_escape({})) == ""


class TestDasherize:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("data_id", "data-id"), ("class_", "class"), ("plain", "plain"), ("http_equiv", "http-equiv")],
    )
    def test_dasherize(self, name, expected):
        assert dasherize(name) == expected


class TestImgTag:
    def test_src(self):
        assert s(img_tag("user.png", alt="<me>")) == '<img alt="&lt;me&gt;" src="user.png">'

    def test_srcset_mapping_is_sorted(self):
        result = img_tag("user.png", srcset={"small.png": "1x", "big.png": "2x"})
        assert s(result) == '<img src="user.png" srcset="big.png 2x, small.png 1x">'

    def test_srcset_list(self):
        result = img_tag("a.png", srcset=["a.png", ("b.png", "2x")])
        assert s(result) == '<img src="a.png" srcset="a.png, b.png 2x">'

    def test_srcset_string(self):
        assert s(img_tag("a.png", srcset="a.png 1x")) == '<img src="a.png" srcset="a.png 1x">'


class TestFormTag:
    def test_get(self):
        assert s(form_tag("/", method="get")) == '<form action="/" method="get">'

    def test_post_without_token(self):
        assert s(form_tag("/", csrf_token=False)) == '<form action="/" method="post">'

    def test_multipart(self):
        assert s(form_tag("/", csrf_token=False, multipart=True)) == (
            '<form action="/" enctype="multipart/form-data" method="post">'
        )

    def test_method_override_with_explicit_token(self):
        assert s(form_tag("/items/1", method="put", csrf_token="tok&")) == (
            '<form action="/items/1" method="post">'
            '<input name="_method" type="hidden" value="put">'
            '<input name="_csrf_token" type="hidden" value="tok&amp;">'
        )

    def test_token_from_context(self, csrf_context, csrf_reads):
        assert s(form_tag("/posts")) == (
            '<form action="/posts" method="post">'
            '<input name="_csrf_token" type="hidden" value="token-self">'
        )
        assert csrf_reads == [None]

    def test_token_for_other_host(self, csrf_context):
        assert 'value="token-other.example.com"' in s(form_tag("https://other.example.com/x"))

    def test_token_required_without_context(self):
        with pytest.raises(CsrfTokenError):
            form_tag("/posts")

    def test_get_never_needs_a_token(self):
        assert s(form_tag("/search", method="GET")) == '<form action="/search" method="GET">'

    def test_content_closes_the_form(self):
        assert s(form_tag("/", "<b>", method="get")) == '<form action="/" method="get">&lt;b&gt;</form>'
        assert s(form_tag("/", Safe("<b>"), method="get")) == '<form action="/" method="get"><b></form>'

    def test_extra_attributes(self):
        assert s(form_tag("/", method="get", class_="f", id="search")) == (
            '<form action="/" class="f" id="search" method="get">'
        )

    def test_action_is_escaped(self):
        assert s(form_tag("/?a=1&b=2", method="get")) == '<form action="/?a=1&amp;b=2" method="get">'


class TestCsrfTags:
    def test_meta_tag(self, csrf_context):
        assert s(csrf_meta_tag()) == '<meta content="token-self" name="csrf-token">'

    def test_meta_tag_extra_attributes(self, csrf_context):
        assert s(csrf_meta_tag(id="csrf")) == '<meta content="token-self" id="csrf" name="csrf-token">'

    def test_input_tag(self, csrf_context, csrf_reads):
        result = csrf_input_tag("https://api.example.com/submit")
        assert s(result) == '<input name="_csrf_token" type="hidden" value="token-api.example.com">'
        assert csrf_reads == ["api.example.com"]
