"""HTML-safe value type and the escaping primitive.

``Safe`` wraps *iodata*: a tree of ``str``, ``bytes``, byte-valued ``int``
and nested lists or ``Safe`` values whose content is already HTML-safe.
Nothing inside a ``Safe`` is escaped again, no matter how deeply it is
embedded in another ``Safe``.

Flattening (``iodata_to_string`` / ``iodata_to_bytes``) carries no escaping
logic; it only walks the tree. Integers are raw bytes, so consecutive
integers may spell out a multi-byte UTF-8 sequence.

Complexity:
- ``escape_string()``: O(n) single pass via ``str.translate()``
- ``iodata_to_string()``: O(n) in the size of the tree

"""

from __future__ import annotations

from typing import Any

# The five HTML-significant characters and nothing else.
_ESCAPE_TABLE = str.maketrans(
    {
        "<": "&lt;",
        ">": "&gt;",
        "&": "&amp;",
        '"': "&quot;",
        "'": "&#39;",
    }
)

# Same substitutions keyed by byte value, for raw byte lists.
BYTE_ENTITIES: dict[int, str] = {
    0x3C: "&lt;",
    0x3E: "&gt;",
    0x26: "&amp;",
    0x22: "&quot;",
    0x27: "&#39;",
}

_ESCAPE_CHARS = frozenset("<>&\"'")


def escape_string(text: str) -> str:
    """Escape the five HTML-significant characters in ``text``.

    Example:
        >>> escape_string("<a href='x'>Tom & \\"Jerry\\"</a>")
        '&lt;a href=&#39;x&#39;&gt;Tom &amp; &quot;Jerry&quot;&lt;/a&gt;'
    """
    if _ESCAPE_CHARS.isdisjoint(text):
        return text
    return text.translate(_ESCAPE_TABLE)


def _collect(data: Any, out: bytearray) -> None:
    if isinstance(data, str):
        out += data.encode("utf-8")
    elif isinstance(data, int) and not isinstance(data, bool):
        if not 0 <= data <= 255:
            raise ValueError(f"iodata integers must be bytes (0..255), got {data!r}")
        out.append(data)
    elif isinstance(data, list):
        for item in data:
            _collect(item, out)
    elif isinstance(data, Safe):
        _collect(data.data, out)
    elif isinstance(data, (bytes, bytearray)):
        out += data
    else:
        raise TypeError(f"invalid iodata element: {data!r}")


def iodata_to_bytes(data: Any) -> bytes:
    """Flatten an iodata tree into UTF-8 bytes."""
    if isinstance(data, str):
        return data.encode("utf-8")
    out = bytearray()
    _collect(data, out)
    return bytes(out)


def iodata_to_string(data: Any) -> str:
    """Flatten an iodata tree into a ``str``.

    Strings are the overwhelmingly common leaves, so a list made only of
    strings is joined directly without a round trip through bytes.
    """
    if isinstance(data, str):
        return data
    if isinstance(data, Safe):
        return iodata_to_string(data.data)
    if isinstance(data, list) and all(type(item) is str for item in data):
        return "".join(data)
    return iodata_to_bytes(data).decode("utf-8")


class Safe:
    """Content certified not to need further HTML escaping.

    Holds an iodata tree. Instances are never mutated; compose them by
    nesting one ``Safe`` (or its ``data``) inside another.

    Implements the ``__html__`` protocol, so other libraries that honour it
    (and ``to_safe``) embed the content verbatim.

    Example:
        >>> s = Safe(["<b>", "Tom &amp; Jerry", "</b>"])
        >>> str(s)
        '<b>Tom &amp; Jerry</b>'
        >>> s == Safe("<b>Tom &amp; Jerry</b>")
        True
    """

    __slots__ = ("data",)

    def __init__(self, data: Any = ""):
        self.data = data

    def __html__(self) -> str:
        return iodata_to_string(self.data)

    def __str__(self) -> str:
        return iodata_to_string(self.data)

    def __bytes__(self) -> bytes:
        return iodata_to_bytes(self.data)

    def __repr__(self) -> str:
        return f"Safe({iodata_to_bytes(self.data).decode('utf-8', 'replace')!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Safe):
            return iodata_to_bytes(self.data) == iodata_to_bytes(other.data)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Safe, iodata_to_bytes(self.data)))

    def __bool__(self) -> bool:
        return bool(iodata_to_bytes(self.data))

    def __setattr__(self, name: str, value: Any) -> None:
        if hasattr(self, "data"):
            raise AttributeError("Safe values are immutable")
        object.__setattr__(self, name, value)


_JS_ESCAPES = {
    "\\": "\\\\",
    "</": "<\\/",
    "\r\n": "\\n",
    "\n": "\\n",
    "\r": "\\n",
    '"': '\\"',
    "'": "\\'",
    "`": "\\`",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
    "\x00": "\\u0000",
}


def _escape_js_text(text: str) -> str:
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        pair = text[i : i + 2]
        if pair in ("</", "\r\n"):
            out.append(_JS_ESCAPES[pair])
            i += 2
            continue
        ch = text[i]
        out.append(_JS_ESCAPES.get(ch, ch))
        i += 1
    return "".join(out)


def javascript_escape(value: str | Safe) -> str | Safe:
    """Escape text for embedding inside a JavaScript string literal.

    Plain strings come back as strings; ``Safe`` input stays ``Safe`` (its
    flattened content is escaped). Quotes, backticks, backslashes, newlines,
    ``</``, NUL and the U+2028/U+2029 separators are escaped.

    Example:
        >>> print(javascript_escape('"Hi" </script>'))
        \\"Hi\\" <\\/script>
    """
    if isinstance(value, Safe):
        return Safe(_escape_js_text(iodata_to_string(value.data)))
    if isinstance(value, str):
        return _escape_js_text(value)
    raise TypeError(f"javascript_escape() expects str or Safe, got {type(value).__name__}")
