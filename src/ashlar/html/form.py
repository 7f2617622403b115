"""Form builders.

Input helpers take a ``Form`` (or a bare form name) and a field, and derive
the ``id``, ``name`` and ``value`` attributes from it; any keyword argument
overrides the derived attribute of the same name.

    ```
    <%= f := form_for(@params, "/search", as_="search") %>
      <%= label(f, "query") %>
      <%= text_input(f, "query", class_="wide") %>
      <%= submit("Search") %>
    </form>
    ```

A ``Form`` renders as its opening ``<form>`` tag, so printing the result of
``form_for`` opens the form and the template closes it.

"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime, time
from typing import Any

from ashlar.html.form_data import Form, FormField, field_id, field_name, to_form
from ashlar.html.tag import content_tag, dasherize, form_tag, tag
from ashlar.safe import html_escape, to_safe
from ashlar.utils.html import Safe, iodata_to_string

__all__ = [
    "Form",
    "FormField",
    "checkbox",
    "color_input",
    "date_input",
    "datetime_local_input",
    "email_input",
    "file_input",
    "form_for",
    "hidden_input",
    "hidden_inputs_for",
    "humanize",
    "input_id",
    "input_name",
    "input_type",
    "input_validations",
    "input_value",
    "inputs_for",
    "label",
    "multiple_select",
    "number_input",
    "options_for_select",
    "password_input",
    "radio_button",
    "range_input",
    "reset",
    "search_input",
    "select",
    "submit",
    "telephone_input",
    "text_input",
    "textarea",
    "time_input",
    "to_form",
    "url_input",
]

FormLike = Form | str

INPUT_TYPE_MAPPING = {
    "url": "url_input",
    "email": "email_input",
    "search": "search_input",
    "password": "password_input",
}

_TIMESPECS = {
    "minute": "minutes",
    "second": "seconds",
    "millisecond": "milliseconds",
    "microsecond": "microseconds",
}


@to_safe.register(Form)
def _form(value: Form) -> Any:
    return form_tag(value.action, **value.options).data


def _text(value: Any) -> str:
    return iodata_to_string(html_escape(value).data)


def _attrs(kwargs: Mapping[str, Any]) -> dict[str, Any]:
    return {dasherize(key): value for key, value in kwargs.items()}


# -- forms --------------------------------------------------------------------


def humanize(field: Any) -> str:
    """Convert a field name into a label.

    Example:
        >>> humanize("username")
        'Username'
        >>> humanize("created_at")
        'Created at'
        >>> humanize("user_id")
        'User'
    """
    text = str(field)
    if text.endswith("_id"):
        text = text[:-3]
    return text.replace("_", " ").capitalize()


def form_for(
    source: Any,
    action: Any,
    fun: Callable[[Form], Any] | None = None,
    **options: Any,
) -> Form | Safe:
    """Build a form for ``source`` submitting to ``action``.

    Without ``fun`` the ``Form`` itself is returned; printing it emits the
    opening tag. With ``fun`` the whole form is returned: the opening tag,
    whatever ``fun(form)`` produces, and ``</form>``.

    Example:
        >>> f = form_for({"user": {"name": "Ann"}}, "/users", as_="user", csrf_token=False)
        >>> str(text_input(f, "name"))
        '<input id="user_name" name="user[name]" type="text" value="Ann">'
    """
    form = replace(to_form(source, **options), action=action)
    if fun is None:
        return form
    return Safe([to_safe(form), html_escape(fun(form)).data, "</form>"])


def inputs_for(
    form: Form,
    field: str,
    fun: Callable[[Form], Any] | None = None,
    **options: Any,
) -> list[Form] | Safe:
    """Build the nested forms for ``field``.

    Returns the list of nested forms, or, with ``fun``, each form's hidden
    inputs followed by ``fun(nested_form)`` (``skip_hidden=True`` leaves the
    hidden inputs out).
    """
    skip_hidden = options.pop("skip_hidden", False) if fun is not None else False
    merged = {key: form.options[key] for key in ("multipart",) if key in form.options}
    merged.update(options)
    forms = form.impl.nested_forms(form.source, form, str(field), **merged)
    if fun is None:
        return forms

    parts: list[Any] = []
    for nested in forms:
        if not skip_hidden:
            parts.append([hidden.data for hidden in hidden_inputs_for(nested)])
        parts.append(html_escape(fun(nested)).data)
    return Safe(parts)


# -- names, ids and values ----------------------------------------------------


def input_value(form: FormLike, field: Any) -> Any:
    """Value of ``field``: the submitted param if any, else the form data."""
    if isinstance(form, str):
        return None
    return form.impl.input_value(form.source, form, str(field))


def input_id(form: FormLike, field: Any, value: Any = None) -> str:
    """Id for ``field``; with ``value``, an id unique to that value.

    Example:
        >>> input_id("search", "key", "a b")
        'search_key_a_b'
    """
    if isinstance(form, str):
        base = f"{form}_{field}"
    else:
        base = field_id(form, str(field))
    if value is None:
        return base
    suffix = re.sub(r"\W", "_", _text(value))
    return f"{base}_{suffix}"


def input_name(form: FormLike, field: Any) -> str:
    """Name for ``field`` (``user[email]``)."""
    if isinstance(form, str):
        return f"{form}[{field}]"
    return field_name(form, str(field))


def input_type(form: Form, field: Any, mapping: Mapping[str, str] = INPUT_TYPE_MAPPING) -> str:
    """Helper name suited to ``field`` (``text_input``, ``email_input``, ...).

    A generic ``text_input`` is refined by matching the field name against
    ``mapping``: a field containing ``email`` gives ``email_input``.
    """
    kind = form.impl.input_type(form.source, form, str(field))
    if kind == "text_input":
        for fragment, refined in mapping.items():
            if fragment in str(field):
                return refined
    return kind


def input_validations(form: Form, field: Any) -> dict[str, Any]:
    """HTML5 validation attributes for ``field``."""
    return form.impl.input_validations(form.source, form, str(field))


# -- inputs -------------------------------------------------------------------


def _generic_input(kind: str, form: FormLike, field: Any, kwargs: Mapping[str, Any]) -> Safe:
    attrs = _attrs(kwargs)
    attrs.setdefault("type", kind)
    attrs.setdefault("id", input_id(form, field))
    attrs.setdefault("name", input_name(form, field))
    if "value" not in attrs:
        attrs["value"] = input_value(form, field)
    if attrs["value"] is not None:
        attrs["value"] = html_escape(attrs["value"])
    return tag("input", attrs)


def text_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    """Generate a text input.

    Example:
        >>> str(text_input("search", "key", value="<x>"))
        '<input id="search_key" name="search[key]" type="text" value="&lt;x&gt;">'
    """
    return _generic_input("text", form, field, kwargs)


def hidden_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    return _generic_input("hidden", form, field, kwargs)


def email_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    return _generic_input("email", form, field, kwargs)


def number_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    return _generic_input("number", form, field, kwargs)


def url_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    return _generic_input("url", form, field, kwargs)


def search_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    return _generic_input("search", form, field, kwargs)


def telephone_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    return _generic_input("tel", form, field, kwargs)


def color_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    return _generic_input("color", form, field, kwargs)


def range_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    return _generic_input("range", form, field, kwargs)


def date_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    return _generic_input("date", form, field, kwargs)


def password_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    """Generate a password input; the current value is never filled in."""
    attrs = _attrs(kwargs)
    attrs.setdefault("type", "password")
    attrs.setdefault("id", input_id(form, field))
    attrs.setdefault("name", input_name(form, field))
    return tag("input", attrs)


def datetime_local_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    """Generate a ``datetime-local`` input; datetimes render to the minute."""
    value = kwargs["value"] if "value" in kwargs else input_value(form, field)
    if isinstance(value, datetime):
        value = value.strftime("%Y-%m-%dT%H:%M")
    return _generic_input("datetime-local", form, field, {**kwargs, "value": value})


def time_input(form: FormLike, field: Any, *, precision: str = "minute", **kwargs: Any) -> Safe:
    """Generate a time input.

    ``precision`` (``minute``, ``second``, ``millisecond``, ``microsecond``)
    truncates ``time`` values.
    """
    value = kwargs.get("value") or input_value(form, field)
    if isinstance(value, time):
        value = value.isoformat(timespec=_TIMESPECS.get(precision, precision))
    return _generic_input("time", form, field, {**kwargs, "value": value})


def textarea(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    """Generate a textarea.

    Content starts with a newline, which browsers drop, so a value that
    itself starts with a newline survives.

    Example:
        >>> str(textarea("user", "bio", value="hi"))
        '<textarea id="user_bio" name="user[bio]">\\nhi</textarea>'
    """
    attrs = _attrs(kwargs)
    attrs.setdefault("id", input_id(form, field))
    attrs.setdefault("name", input_name(form, field))
    value = attrs.pop("value") if "value" in attrs else input_value(form, field)
    content = Safe(["\n", html_escape("" if value is None else value).data])
    return content_tag("textarea", content, attrs)


def file_input(form: FormLike, field: Any, **kwargs: Any) -> Safe:
    """Generate a file input.

    Raises:
        ValueError: If ``form`` was not built with ``multipart=True``
    """
    if isinstance(form, Form) and not form.options.get("multipart"):
        raise ValueError(
            "file_input() requires the enclosing form_for() to be configured with multipart=True"
        )
    attrs = _attrs(kwargs)
    attrs.setdefault("type", "file")
    attrs.setdefault("id", input_id(form, field))
    attrs.setdefault("name", input_name(form, field))
    if attrs.get("multiple"):
        attrs["name"] = f"{attrs['name']}[]"
    return tag("input", attrs)


def submit(value: Any, **kwargs: Any) -> Safe:
    """Generate a submit button.

    Example:
        >>> str(submit("Save", class_="btn"))
        '<button class="btn" type="submit">Save</button>'
    """
    attrs = _attrs(kwargs)
    attrs.setdefault("type", "submit")
    return content_tag("button", value, attrs)


def reset(value: Any, **kwargs: Any) -> Safe:
    attrs = _attrs(kwargs)
    attrs.setdefault("type", "reset")
    attrs.setdefault("value", value)
    return tag("input", attrs)


def radio_button(form: FormLike, field: Any, value: Any, **kwargs: Any) -> Safe:
    """Generate a radio button, checked when ``value`` is the field's value."""
    escaped = html_escape(value)
    attrs = _attrs(kwargs)
    attrs.setdefault("type", "radio")
    attrs.setdefault("id", input_id(form, field, escaped))
    attrs.setdefault("name", input_name(form, field))
    if escaped == html_escape(input_value(form, field)):
        attrs.setdefault("checked", True)
    return tag("input", {"value": escaped, **attrs})


def checkbox(
    form: FormLike,
    field: Any,
    *,
    checked_value: Any = True,
    unchecked_value: Any = False,
    hidden_input: bool = True,
    **kwargs: Any,
) -> Safe:
    """Generate a checkbox.

    Unchecked boxes are not submitted by browsers, so by default a hidden
    input carrying ``unchecked_value`` precedes the box under the same name.

    Example:
        >>> str(checkbox("search", "key"))
        '<input name="search[key]" type="hidden" value="false"><input id="search_key" name="search[key]" type="checkbox" value="true">'
    """
    attrs = _attrs(kwargs)
    attrs.setdefault("type", "checkbox")
    attrs.setdefault("id", input_id(form, field))
    attrs.setdefault("name", input_name(form, field))
    value = attrs.pop("value") if "value" in attrs else input_value(form, field)

    checked = html_escape(checked_value)
    if html_escape(value) == checked:
        attrs.setdefault("checked", True)

    box = tag("input", {"value": checked, **attrs})
    if not hidden_input:
        return box

    hidden_attrs: dict[str, Any] = {"type": "hidden", "value": html_escape(unchecked_value)}
    for key in ("name", "disabled"):
        if key in attrs:
            hidden_attrs[key] = attrs[key]
    return Safe([tag("input", hidden_attrs).data, box.data])


def _wrap(values: Any) -> list[Any]:
    if values is None:
        return []
    if isinstance(values, (list, tuple, set, frozenset)):
        return list(values)
    return [values]


def _option(key: Any, value: Any, extra: Mapping[str, Any], selected: list[str]) -> Any:
    if not extra and isinstance(value, (list, Mapping)):
        group = Safe(_escaped_options(value, selected))
        return content_tag("optgroup", group, {"label": key}).data
    escaped = html_escape(value)
    attrs = {"value": escaped, "selected": str(escaped) in selected, **extra}
    return content_tag("option", key, attrs).data


def _escaped_options(options: Any, selected: list[str]) -> list[Any]:
    items: Iterable[Any] = options.items() if isinstance(options, Mapping) else options
    out: list[Any] = []
    for entry in items:
        if isinstance(entry, tuple) and len(entry) == 2:
            out.append(_option(entry[0], entry[1], {}, selected))
        elif isinstance(entry, Mapping):
            extra = _attrs(entry)
            if "key" not in extra:
                raise ValueError(f"expected 'key' when building <option> from mapping: {entry!r}")
            if "value" not in extra:
                raise ValueError(f"expected 'value' when building <option> from mapping: {entry!r}")
            key = extra.pop("key")
            value = extra.pop("value")
            out.append(_option(key, value, extra, selected))
        else:
            out.append(_option(entry, entry, {}, selected))
    return out


def options_for_select(options: Any, selected_values: Any) -> Safe:
    """Render ``<option>`` elements.

    ``options`` may be a mapping of label to value, or a list whose entries
    are plain values, ``(label, value)`` pairs or mappings with ``key`` and
    ``value`` plus extra attributes (``disabled``). A list or mapping as a
    value makes an ``<optgroup>``.

    Example:
        >>> str(options_for_select([("Admin", "admin"), ("User", "user")], "admin"))
        '<option selected value="admin">Admin</option><option value="user">User</option>'
    """
    selected = [_text(value) for value in _wrap(selected_values)]
    return Safe(_escaped_options(options, selected))


def _selected(form: FormLike, field: Any, attrs: dict[str, Any]) -> Any:
    value = attrs.pop("value", None)
    chosen = attrs.pop("selected", None)
    if value is not None:
        return value
    if isinstance(form, Form) and str(field) in form.params:
        return form.params[str(field)]
    return chosen if chosen is not None else input_value(form, field)


def select(form: FormLike, field: Any, options: Any, *, prompt: Any = None, **kwargs: Any) -> Safe:
    """Generate a select with ``options`` (see ``options_for_select``).

    The selected option comes from ``value=``, then the submitted param, then
    ``selected=``, then the form data.

    Example:
        >>> str(select("search", "key", ["foo", "bar"], value="bar"))
        '<select id="search_key" name="search[key]"><option value="foo">foo</option><option selected value="bar">bar</option></select>'
    """
    attrs = _attrs(kwargs)
    selected = _selected(form, field, attrs)
    body: list[Any] = []
    if prompt is not None:
        body.append(content_tag("option", prompt, {"value": ""}).data)
    body.append(options_for_select(options, selected).data)

    attrs.setdefault("id", input_id(form, field))
    attrs.setdefault("name", input_name(form, field))
    return content_tag("select", Safe(body), attrs)


def multiple_select(form: FormLike, field: Any, options: Any, **kwargs: Any) -> Safe:
    """Generate a select accepting several values, submitted as ``name[]``."""
    attrs = _attrs(kwargs)
    selected = _selected(form, field, attrs)
    attrs.setdefault("id", input_id(form, field))
    attrs.setdefault("name", f"{input_name(form, field)}[]")
    attrs.setdefault("multiple", "")
    return content_tag("select", options_for_select(options, selected), attrs)


def label(form: FormLike, field: Any, text: Any = None, **kwargs: Any) -> Safe:
    """Generate a label for ``field``; the text defaults to ``humanize(field)``.

    Example:
        >>> str(label("search", "first_name"))
        '<label for="search_first_name">First name</label>'
    """
    attrs = _attrs(kwargs)
    attrs.setdefault("for", input_id(form, field))
    return content_tag("label", humanize(field) if text is None else text, attrs)


def hidden_inputs_for(form: Form) -> list[Safe]:
    """Hidden inputs for the form's ``hidden`` pairs."""
    return [hidden_input(form, key, value=value) for key, value in form.hidden]
