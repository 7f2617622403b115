"""Tag builders: tag, content_tag, attributes, img and form tags, CSRF.

All builders return ``Safe``. Attribute values are escaped through the
safe-value protocol; attribute names given as keyword arguments are
dasherised (``data_id`` → ``data-id``, ``class_`` → ``class``) while
names given in an explicit mapping are kept verbatim and escaped.

Attribute rules:

- ``True`` renders the bare name, ``False`` and ``None`` drop the attribute
- ``data``, ``aria`` and ``phx`` accept a mapping that nests:
  ``data={"toggle": {"target": "#x"}}`` → ``data-toggle-target="#x"``
- ``class`` accepts a list; falsy entries are skipped, the rest are
  joined with spaces
- ``id`` must not be a number

``tag`` and ``content_tag`` sort attributes by name so output does not
depend on argument order; ``attributes_escape`` keeps the given order.

    >>> str(tag("input", type="text", name="user_id"))
    '<input name="user_id" type="text">'
    >>> str(content_tag("p", "<Hello>", class_="test"))
    '<p class="test">&lt;Hello&gt;</p>'

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any
from urllib.parse import urlsplit

from ashlar.render_context import get_render_context
from ashlar.safe import escape_value, html_escape
from ashlar.utils.html import Safe, escape_string

CSRF_PARAM = "_csrf_token"
METHOD_PARAM = "_method"

_NESTED_ATTRIBUTES = frozenset({"data", "aria", "phx"})

Attrs = Mapping[Any, Any] | Iterable[tuple[Any, Any]]


def dasherize(name: str) -> str:
    """Turn a Python keyword name into an attribute name."""
    return name.rstrip("_").replace("_", "-")


def _attr_value(value: Any) -> Any:
    if isinstance(value, Safe):
        return value.data
    if value is None:
        return ""
    if type(value) is str:
        return escape_string(value)
    return escape_value(value)


def _key(name: Any, *, keyword: bool) -> str:
    if isinstance(name, Safe):
        return str(name)
    if keyword:
        return dasherize(name)
    return escape_string(str(name))


def _class_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return escape_string(" ".join(str(v) for v in value if v))
    return _attr_value(value)


def _id_value(value: Any) -> Any:
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        raise ValueError(
            f"attempting to set id attribute to {value!r}, "
            "but the DOM ID cannot be set to a number"
        )
    return _attr_value(value)


def _nested(prefix: str, values: Mapping[Any, Any], out: list[tuple[str, Any]]) -> None:
    for name, value in values.items():
        key = f"{prefix}-{_key(name, keyword=isinstance(name, str))}"
        if isinstance(value, Mapping):
            _nested(key, value, out)
        elif value is not None:
            out.append((key, _attr_value(value)))


def _items(attrs: Attrs) -> Iterable[tuple[Any, Any]]:
    if isinstance(attrs, Mapping):
        return attrs.items()
    return attrs


def build_attrs(attrs: Attrs = (), kwargs: Mapping[str, Any] | None = None) -> list[tuple[str, Any]]:
    """Normalise attributes into ``(name, escaped_value)`` pairs.

    A value of ``True`` marks a bare attribute (``value is True`` in the
    result). Explicit ``attrs`` come first, keyword attributes after.
    """
    out: list[tuple[str, Any]] = []
    sources: list[tuple[Iterable[tuple[Any, Any]], bool]] = [(_items(attrs), False)]
    if kwargs:
        sources.append((kwargs.items(), True))

    for items, keyword in sources:
        for name, value in items:
            key = _key(name, keyword=keyword)
            if value is True:
                out.append((key, True))
            elif value is False or value is None:
                continue
            elif key in _NESTED_ATTRIBUTES and isinstance(value, Mapping):
                _nested(key, value, out)
            elif key == "class":
                out.append((key, _class_value(value)))
            elif key == "id":
                out.append((key, _id_value(value)))
            else:
                out.append((key, _attr_value(value)))
    return out


def _render_attrs(pairs: Iterable[tuple[str, Any]]) -> list[Any]:
    rendered: list[Any] = []
    for key, value in pairs:
        if value is True:
            rendered.append(f" {key}")
        else:
            rendered.append([f' {key}="', value, '"'])
    return rendered


def _sorted_attrs(attrs: Attrs, kwargs: Mapping[str, Any]) -> list[Any]:
    pairs = build_attrs(attrs, kwargs)
    pairs.sort(key=lambda pair: pair[0])
    return _render_attrs(pairs)


def attributes_escape(attrs: Attrs = (), /, **kwargs: Any) -> Safe:
    """Render attributes in the given order, each with a leading space.

    Example:
        >>> str(attributes_escape({"title": "the title", "id": "the id", "selected": True}))
        ' title="the title" id="the id" selected'
    """
    return Safe(_render_attrs(build_attrs(attrs, kwargs)))


def tag(name: str, attrs: Attrs = (), /, **kwargs: Any) -> Safe:
    """Create a void HTML tag (no closing tag).

    Example:
        >>> str(tag("br"))
        '<br>'
        >>> str(tag("audio", autoplay=True))
        '<audio autoplay>'
    """
    return Safe(["<", name, _sorted_attrs(attrs, kwargs), ">"])


def content_tag(name: str, content: Any = "", attrs: Attrs = (), /, **kwargs: Any) -> Safe:
    """Create an HTML tag wrapping escaped ``content``.

    Example:
        >>> str(content_tag("option", "Display", {"value": "v"}, data={"foo": "bar"}))
        '<option data-foo="bar" value="v">Display</option>'
    """
    escaped = html_escape(content)
    return Safe(["<", name, _sorted_attrs(attrs, kwargs), ">", escaped.data, "</", name, ">"])


def _stringify_srcset(srcset: Any) -> str:
    if isinstance(srcset, str):
        return srcset
    if isinstance(srcset, Mapping):
        entries: Iterable[Any] = sorted(srcset.items())
    else:
        entries = srcset
    parts = []
    for entry in entries:
        if isinstance(entry, tuple):
            src, descriptor = entry
            parts.append(f"{src} {descriptor}")
        else:
            parts.append(str(entry))
    return ", ".join(parts)


def img_tag(src: Any, *, srcset: Any = None, **kwargs: Any) -> Safe:
    """Generate an ``<img>`` tag.

    ``srcset`` may be a string, a mapping of ``url → descriptor`` (sorted by
    url) or a list of urls and ``(url, descriptor)`` pairs.

    Example:
        >>> str(img_tag("user.png", srcset={"big.png": "2x", "small.png": "1x"}))
        '<img src="user.png" srcset="big.png 2x, small.png 1x">'
    """
    if srcset is not None:
        kwargs["srcset"] = _stringify_srcset(srcset)
    return tag("img", {"src": src}, **kwargs)


# -- CSRF ---------------------------------------------------------------------


def _csrf_host(to: Any) -> str | None:
    if to is None:
        return None
    if isinstance(to, Safe):
        to = str(to)
    elif isinstance(to, tuple):
        return None
    elif not isinstance(to, str):
        to = getattr(to, "geturl", lambda: str(to))()
    host = urlsplit(to).hostname
    return host or None


def csrf_token_value(to: Any = None) -> str:
    """Return the CSRF token for requests to ``to``.

    The token comes from the current render context's strategy, which is
    called with the destination host (``None`` for the current host) at
    most once per host per render.

    Raises:
        CsrfTokenError: If no strategy is configured
    """
    ctx = get_render_context()
    if ctx is None:
        from ashlar.environment.exceptions import CsrfTokenError

        raise CsrfTokenError(to if isinstance(to, str) else None)
    return ctx.csrf_token(_csrf_host(to))


def csrf_meta_tag(**kwargs: Any) -> Safe:
    """Generate ``<meta name="csrf-token" content="...">``."""
    attrs = {"name": "csrf-token", "content": csrf_token_value()}
    return tag("meta", attrs, **kwargs)


def csrf_input_tag(to: Any, **kwargs: Any) -> Safe:
    """Generate the hidden CSRF input for a hand-written form posting to ``to``."""
    attrs = {"type": "hidden", "name": CSRF_PARAM, "value": csrf_token_value(to)}
    return tag("input", attrs, **kwargs)


def _csrf_input(action: Any, csrf_token: bool | str) -> list[Any]:
    if csrf_token is False or csrf_token is None:
        return []
    token = csrf_token_value(action) if csrf_token is True else csrf_token
    return [f'<input name="{CSRF_PARAM}" type="hidden" value="', escape_string(str(token)), '">']


def form_tag(
    action: Any,
    content: Any = None,
    *,
    method: str = "post",
    multipart: bool = False,
    csrf_token: bool | str = True,
    **kwargs: Any,
) -> Safe:
    """Generate a ``<form>`` opening tag, or a whole form when ``content`` is given.

    Methods other than GET and POST are sent as POST with a hidden
    ``_method`` input. Non-GET forms carry a hidden ``_csrf_token`` input
    unless ``csrf_token=False``; a string is used as the token itself.

    Example:
        >>> str(form_tag("/", method="get"))
        '<form action="/" method="get">'
        >>> str(form_tag("/", method="post", csrf_token=False, multipart=True))
        '<form action="/" enctype="multipart/form-data" method="post">'
    """
    method = str(method)
    lowered = method.lower()
    extra: list[Any] = []
    if lowered == "get":
        form_method = method
    else:
        if lowered != "post":
            extra.append(
                [f'<input name="{METHOD_PARAM}" type="hidden" value="', escape_string(method), '">']
            )
        extra.append(_csrf_input(action, csrf_token))
        form_method = "post"

    attrs: dict[str, Any] = {"action": action, "method": form_method}
    if multipart:
        attrs["enctype"] = "multipart/form-data"

    parts: list[Any] = [tag("form", attrs, **kwargs).data, extra]
    if content is not None:
        parts.extend([html_escape(content).data, "</form>"])
    return Safe(parts)
