"""Safe-value protocol: converting application values into escaped iodata.

``to_safe(value)`` is a ``functools.singledispatch`` generic. Every built-in
variant returns iodata (see ``ashlar.utils.html``) whose content is safe to
emit verbatim. Types without a registration fail loudly with
``UnescapableValueError``; there is no stringify-everything fallback, so
structured data never leaks into markup unescaped by accident.

Built-in variants:

============================  ============================================
Input                         Result
============================  ============================================
``Safe``                      its payload, unchanged
``None``                      ``""``
``str``                       escaped text
``bool``                      ``"true"`` / ``"false"``
``int``, ``float``, Decimal   canonical decimal text
``list``, bytes, bytearray    byte-list rule (see ``_escape_byte_list``)
``("safe", payload)``         ``payload``
``date``, ``time``            ISO-8601
``datetime``                  ISO-8601, escaped
``timedelta``                 ISO-8601 duration (``PT1H30M``)
URL split/parse results       ``geturl()``, escaped
objects with ``__html__``     ``value.__html__()``
============================  ============================================

Extending:
    ```python
    from ashlar import to_safe

    @to_safe.register(Money)
    def _(value: Money):
        return escape_string(f"{value.amount} {value.currency}")
    ```

``escape_value`` is the runtime dispatch compiled templates call for every
printed expression. It short-circuits the two most common shapes (already
safe, plain ``str``) and otherwise defers to ``to_safe``; both paths
produce identical output.

"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from functools import singledispatch
from typing import Any
from urllib.parse import DefragResult, ParseResult, SplitResult

from ashlar.environment.exceptions import MalformedByteListError, UnescapableValueError
from ashlar.utils.html import BYTE_ENTITIES, Safe, escape_string, iodata_to_string

_BYTE_INT_MESSAGE = (
    "lists in templates only support byte-oriented data, not code points. "
    "Integers may only represent bytes (0..255), got: {!r}. "
    "It's likely you meant to pass a string instead of a list of characters"
)


@singledispatch
def to_safe(value: Any) -> Any:
    """Convert ``value`` to escaped iodata.

    Raises:
        UnescapableValueError: No conversion is registered for the type
        MalformedByteListError: A list holds something other than bytes,
            strings, safe values or nested lists
    """
    html = getattr(value, "__html__", None)
    if callable(html):
        return html()
    raise UnescapableValueError(value)


@to_safe.register(Safe)
def _safe(value: Safe) -> Any:
    return value.data


@to_safe.register(type(None))
def _none(value: None) -> str:
    return ""


@to_safe.register(str)
def _str(value: str) -> str:
    # str subclasses such as markupsafe.Markup carry their own safety marker
    if type(value) is not str:
        html = getattr(value, "__html__", None)
        if callable(html):
            return html()
    return escape_string(value)


@to_safe.register(bool)
def _bool(value: bool) -> str:
    return "true" if value else "false"


@to_safe.register(int)
@to_safe.register(float)
@to_safe.register(Decimal)
def _number(value: int | float | Decimal) -> str:
    return str(value)


def _escape_byte_list(items: Any) -> list[Any]:
    """Escape a raw byte list element by element.

    Integers are raw bytes and pass through, except the five byte values of
    the HTML-significant characters, which become entities. Strings are
    escaped, safe payloads are spliced in, nested lists recurse.
    """
    out: list[Any] = []
    for item in items:
        cls = type(item)
        if cls is int:
            if not 0 <= item <= 255:
                raise MalformedByteListError(item, _BYTE_INT_MESSAGE.format(item))
            out.append(BYTE_ENTITIES.get(item, item))
        elif cls is str:
            out.append(escape_string(item))
        elif isinstance(item, (list, bytes, bytearray)):
            out.append(_escape_byte_list(item))
        elif isinstance(item, Safe):
            out.append(item.data)
        elif cls is tuple and len(item) == 2 and item[0] == "safe":
            out.append(item[1])
        else:
            raise MalformedByteListError(item)
    return out


@to_safe.register(list)
@to_safe.register(bytes)
@to_safe.register(bytearray)
def _byte_list(value: list[Any] | bytes | bytearray) -> list[Any]:
    return _escape_byte_list(value)


@to_safe.register(tuple)
def _tuple(value: tuple[Any, ...]) -> Any:
    if len(value) == 2 and isinstance(value[0], str) and value[0] == "safe":
        return value[1]
    raise UnescapableValueError(value)


@to_safe.register(date)
@to_safe.register(time)
def _date_or_time(value: date | time) -> str:
    return value.isoformat()


@to_safe.register(datetime)
def _datetime(value: datetime) -> str:
    # tzinfo implementations control part of this text
    return escape_string(value.isoformat())


def iso8601_duration(value: timedelta) -> str:
    """Format a ``timedelta`` as an ISO-8601 duration.

    Example:
        >>> iso8601_duration(timedelta(days=1, hours=2, seconds=3.5))
        'P1DT2H3.5S'
        >>> iso8601_duration(timedelta(0))
        'PT0S'
    """
    total = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if total < 0 else ""
    seconds, micros = divmod(abs(total), 1_000_000)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)

    time_part = ""
    if hours:
        time_part += f"{hours}H"
    if minutes:
        time_part += f"{minutes}M"
    if seconds or micros:
        secs = f"{seconds}.{micros:06d}".rstrip("0") if micros else str(seconds)
        time_part += f"{secs}S"

    if not days and not time_part:
        return "PT0S"
    date_part = f"{days}D" if days else ""
    return f"{sign}P{date_part}" + (f"T{time_part}" if time_part else "")


@to_safe.register(timedelta)
def _timedelta(value: timedelta) -> str:
    return iso8601_duration(value)


@to_safe.register(SplitResult)
@to_safe.register(ParseResult)
@to_safe.register(DefragResult)
def _url(value: SplitResult | ParseResult | DefragResult) -> str:
    return escape_string(value.geturl())


def escape_value(value: Any) -> Any:
    """Escape one printed expression result.

    Already-safe values and exact ``str`` take a fast path; everything else
    goes through ``to_safe``.
    """
    cls = type(value)
    if cls is Safe:
        return value.data
    if cls is str:
        return escape_string(value)
    return to_safe(value)


def html_escape(value: Any) -> Safe:
    """Escape ``value`` into a ``Safe``; ``Safe`` input is returned as is.

    Example:
        >>> html_escape("<hello>")
        Safe('&lt;hello&gt;')
        >>> html_escape(html_escape("<hello>"))
        Safe('&lt;hello&gt;')
    """
    if isinstance(value, Safe):
        return value
    return Safe(escape_value(value))


def raw(value: Any) -> Safe:
    """Mark trusted markup as safe without escaping it.

    Accepts strings, bytes and iodata lists; ``None`` becomes empty content.
    Never call this on user input.
    """
    if isinstance(value, Safe):
        return value
    if value is None:
        return Safe("")
    if isinstance(value, (str, bytes, bytearray, list)):
        return Safe(value)
    raise TypeError(f"raw() expects str, bytes, list or None, got {type(value).__name__}")


def safe_to_string(value: Safe) -> str:
    """Flatten a ``Safe`` (or any ``__html__`` object) into a string."""
    if isinstance(value, Safe):
        return iodata_to_string(value.data)
    html = getattr(value, "__html__", None)
    if callable(html):
        return html()
    raise TypeError(f"safe_to_string() expects a Safe value, got {type(value).__name__}")
