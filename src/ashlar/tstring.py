"""Template string support (PEP 750).

Provides the ``html`` tag for Python 3.14+ t-strings: literal parts are
trusted markup, interpolated values are escaped exactly as ``<%= %>``
escapes them.

    >>> name = "<World>"
    >>> str(html(t"<p>Hello {name}!</p>"))
    '<p>Hello &lt;World&gt;!</p>'

"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ashlar.safe import escape_value
from ashlar.utils.html import Safe

_CONVERSIONS = {"r": repr, "s": str, "a": ascii}


@runtime_checkable
class TemplateProtocol(Protocol):
    strings: tuple[str, ...]
    interpolations: tuple[Any, ...]


def _interpolation_value(interpolation: Any) -> Any:
    value = interpolation.value
    conversion = getattr(interpolation, "conversion", None)
    format_spec = getattr(interpolation, "format_spec", "")
    if conversion:
        value = _CONVERSIONS[conversion](value)
    if format_spec:
        value = format(value, format_spec)
    return value


def html(template: TemplateProtocol) -> Safe:
    """Render a t-string into ``Safe`` iodata.

    ``{value!r}`` conversions and ``{value:.2f}`` format specs are applied
    before escaping. Accepts any object with ``strings`` and
    ``interpolations`` attributes, so it also works on interpreters without
    t-string syntax.

    Raises:
        TypeError: If ``template`` is not a template object
        UnescapableValueError: If an interpolated value has no safe conversion
    """
    if not isinstance(template, TemplateProtocol):
        raise TypeError("html() expects a string.templatelib.Template or compatible object")

    strings = template.strings
    interpolations = template.interpolations
    parts: list[Any] = []

    for i, text in enumerate(strings):
        if text:
            parts.append(text)
        if i < len(interpolations):
            parts.append(escape_value(_interpolation_value(interpolations[i])))

    return Safe(parts)
