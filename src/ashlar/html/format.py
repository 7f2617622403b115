"""Plain text to HTML paragraphs."""

from __future__ import annotations

import re
from typing import Any

from ashlar.html.tag import Attrs, content_tag, tag
from ashlar.safe import html_escape
from ashlar.utils.html import Safe, iodata_to_string

_PARAGRAPH_RE = re.compile(r"\r\n\r\n|\n\n")
_LINE_RE = re.compile(r"\r\n|\n")


def _blank(text: str) -> bool:
    return not text.strip(" \r\n")


def _split_lines(text: str) -> list[str]:
    return [line for line in _LINE_RE.split(text) if line]


def text_to_html(
    text: Any,
    *,
    escape: bool = True,
    wrapper_tag: str = "p",
    attributes: Attrs = (),
    insert_brs: bool = True,
) -> Safe:
    """Transform text into HTML using simple formatting rules.

    Two consecutive newlines (``\\n\\n`` or ``\\r\\n\\r\\n``) separate
    paragraphs, each wrapped in ``wrapper_tag``. A single newline becomes a
    ``<br>`` (or a space when ``insert_brs`` is false).

    ``Safe`` input is trusted; with ``escape=False`` plain strings are too.

    Example:
        >>> str(text_to_html("Hello\\n\\nWorld"))
        '<p>Hello</p>\\n<p>World</p>\\n'
        >>> str(text_to_html("Hello\\nWorld"))
        '<p>Hello<br>\\nWorld</p>\\n'
        >>> str(text_to_html("Hello\\n\\nWorld", wrapper_tag="div", attributes={"class": "p"}))
        '<div class="p">Hello</div>\\n<div class="p">World</div>\\n'
    """
    if escape or not isinstance(text, str):
        text = iodata_to_string(html_escape(text).data)

    br = [tag("br").data, "\n"]
    parts: list[Any] = []
    for paragraph in _PARAGRAPH_RE.split(text):
        if _blank(paragraph):
            continue
        lines = _split_lines(paragraph)
        if insert_brs:
            body: list[Any] = []
            for i, line in enumerate(lines):
                if i:
                    body.append(br)
                body.append(line)
        else:
            body = [" ".join(lines)]
        parts.append([content_tag(wrapper_tag, Safe(body), attributes).data, "\n"])
    return Safe(parts)
