"""Links and buttons, with destination validation.

Non-GET links and buttons do not submit anything by themselves: they carry
``data-method``, ``data-to`` and ``data-csrf`` attributes for a small
client-side script to turn into a form submission.

Destinations are checked before rendering. Relative paths and a fixed set
of schemes pass; anything else that looks like ``scheme:...`` is rejected
so user-controlled URLs cannot smuggle in ``javascript:``. An explicit
``(scheme, rest)`` tuple opts into any scheme.

"""

from __future__ import annotations

from typing import Any

from ashlar.html.tag import content_tag, csrf_token_value
from ashlar.utils.html import Safe, iodata_to_string

VALID_SCHEMES = (
    "http:",
    "https:",
    "ftp:",
    "ftps:",
    "mailto:",
    "news:",
    "irc:",
    "gopher:",
    "nntp:",
    "feed:",
    "telnet:",
    "mms:",
    "rtsp:",
    "svn:",
    "tel:",
    "fax:",
    "xmpp:",
)


def _valid_string_destination(to: str) -> str:
    if to.startswith(VALID_SCHEMES):
        return to
    if not to.startswith("/") and ":" in to:
        raise ValueError(
            "unsupported scheme given as link. In case you want to link to an "
            'unknown or unsafe scheme, such as javascript, use a tuple: ("javascript", rest)'
        )
    return to


def valid_destination(to: Any) -> str | Safe:
    """Validate a link destination.

    Example:
        >>> valid_destination("/world")
        '/world'
        >>> valid_destination(("javascript", "alert(1)"))
        'javascript:alert(1)'
        >>> valid_destination("javascript:alert(1)")
        Traceback (most recent call last):
        ...
        ValueError: unsupported scheme given as link. ...
    """
    if isinstance(to, Safe):
        return Safe(_valid_string_destination(iodata_to_string(to.data)))
    if isinstance(to, tuple):
        scheme, rest = to
        return f"{scheme}:{rest}"
    geturl = getattr(to, "geturl", None)
    if callable(geturl):
        to = geturl()
    if isinstance(to, (bytes, list)):
        to = iodata_to_string(to)
    if not isinstance(to, str):
        raise TypeError(f"link destination must be a string, got {type(to).__name__}")
    return _valid_string_destination(to)


def _csrf_data(to: Any, csrf_token: bool | str) -> dict[str, Any]:
    if csrf_token is True:
        return {"csrf": csrf_token_value(to)}
    if csrf_token:
        return {"csrf": csrf_token}
    return {}


def link_attributes(to: Any, *, method: str = "get", csrf_token: bool | str = True) -> dict[str, Any]:
    """Return the ``data`` attributes for a link element.

    Example:
        >>> link_attributes("/world")
        {'data': {'method': 'get', 'to': '/world'}}
    """
    to = valid_destination(to)
    data: dict[str, Any] = {"method": method, "to": to}
    if method != "get":
        data = {**_csrf_data(to, csrf_token), **data}
    return {"data": data}


def _pop_data(kwargs: dict[str, Any]) -> dict[str, Any]:
    extra = kwargs.pop("data", None)
    return dict(extra) if extra else {}


def link(text: Any, *, to: Any = None, method: str = "get", csrf_token: bool | str = True, **kwargs: Any) -> Safe:
    """Generate an ``<a>`` element.

    Example:
        >>> str(link("hello", to="/world"))
        '<a href="/world">hello</a>'
        >>> str(link("hello", to="/world", method="delete", csrf_token="T"))
        '<a data-csrf="T" data-method="delete" data-to="/world" href="#" rel="nofollow">hello</a>'

    Raises:
        ValueError: If ``to`` is missing or uses an unsupported scheme
    """
    if to is None:
        raise ValueError("expected non-nil value for to in link()")
    to = valid_destination(to)

    if method == "get":
        return content_tag("a", text, {"href": to}, **kwargs)

    data = {**_csrf_data(to, csrf_token), "method": method, "to": to, **_pop_data(kwargs)}
    kwargs.setdefault("rel", "nofollow")
    return content_tag("a", text, {"href": "#"}, data=data, **kwargs)


def button(text: Any, *, to: Any = None, method: str = "post", csrf_token: bool | str = True, **kwargs: Any) -> Safe:
    """Generate a ``<button>`` that submits to ``to`` through the client script.

    Example:
        >>> str(button("hello", to="/world", method="get", class_="btn"))
        '<button class="btn" data-method="get" data-to="/world">hello</button>'

    Raises:
        ValueError: If ``to`` is missing or uses an unsupported scheme
    """
    if to is None:
        raise ValueError("option to is required in button()")
    to = valid_destination(to)

    data: dict[str, Any] = {"method": method, "to": to}
    if method != "get":
        data = {**_csrf_data(to, csrf_token), **data}
    data.update(_pop_data(kwargs))
    return content_tag("button", text, data=data, **kwargs)
