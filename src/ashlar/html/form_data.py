"""Form data: turning application data into ``Form`` values.

``to_form(source, **options)`` is a ``functools.singledispatch`` generic.
Each registration returns a ``Form`` whose ``impl`` is an adapter object
answering the per-field questions (value, type, validations, nested forms)
for that kind of source.

Built-in sources:

- ``str``: a form name with no request data (``to_form("user")``);
  ``params=`` supplies values
- ``Mapping``: request params; ``as_="user"`` picks ``params["user"]``
  and names the inputs ``user[...]``

Adding a source:
    ```python
    @to_form.register(Changeset)
    def _(source: Changeset, **options):
        return Form(source=source, impl=ChangesetFormData(), ...)
    ```

"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import singledispatch
from typing import Any, Protocol


class FormDataImpl(Protocol):
    """Per-source adapter stored on ``Form.impl``."""

    def nested_forms(self, source: Any, form: Form, field: str, **options: Any) -> list[Form]: ...

    def input_value(self, source: Any, form: Form, field: str) -> Any: ...

    def input_type(self, source: Any, form: Form, field: str) -> str: ...

    def input_validations(self, source: Any, form: Form, field: str) -> dict[str, Any]: ...


@dataclass(frozen=True, slots=True)
class Form:
    """A form bound to its source data.

    Attributes:
        source: The data the form was built from
        impl: Adapter answering per-field questions for ``source``
        id: Prefix for input ids (``None`` leaves field names bare)
        name: Prefix for input names (``user`` gives ``user[email]``)
        params: Submitted values, keyed by field name
        hidden: ``(field, value)`` pairs rendered by ``hidden_inputs_for``
        options: Remaining options, passed to the ``<form>`` tag
        errors: ``(field, message)`` pairs
        data: Values shown when ``params`` has none for a field
        index: Position among sibling nested forms
        action: Where the form submits to
    """

    source: Any = None
    impl: FormDataImpl | None = None
    id: str | None = None
    name: str | None = None
    params: Mapping[str, Any] = field(default_factory=dict)
    hidden: tuple[tuple[str, Any], ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)
    errors: tuple[tuple[str, Any], ...] = ()
    data: Any = field(default_factory=dict)
    index: int | None = None
    action: Any = None

    def __getitem__(self, field: str) -> FormField:
        field = str(field)
        return FormField(
            id=field_id(self, field),
            name=field_name(self, field),
            errors=[message for key, message in self.errors if key == field],
            field=field,
            form=self,
            value=self.impl.input_value(self.source, self, field),
        )


@dataclass(frozen=True, slots=True)
class FormField:
    """One field of a ``Form``, as returned by ``form[field]``."""

    id: str
    name: str
    errors: list[Any]
    field: str
    form: Form
    value: Any


def field_id(form: Form, field: str) -> str:
    return f"{form.id}_{field}" if form.id is not None else str(field)


def field_name(form: Form, field: str) -> str:
    return f"{form.name}[{field}]" if form.name is not None else str(field)


def _pairs(value: Any) -> tuple[tuple[str, Any], ...]:
    if not value:
        return ()
    if isinstance(value, Mapping):
        return tuple((str(k), v) for k, v in value.items())
    return tuple((str(k), v) for k, v in value)


def _index_key(key: str) -> tuple[int, int | str]:
    if re.fullmatch(r"\d+", key):
        return (0, int(key))
    return (1, key)


def _entries(params: Any) -> list[Any]:
    """Submitted nested entries in index order (``"10"`` after ``"9"``)."""
    if isinstance(params, Mapping):
        return [params[key] for key in sorted(params, key=lambda k: _index_key(str(k)))]
    return list(params)


class ParamsFormData:
    """Adapter for forms backed by plain request params."""

    __slots__ = ()

    def nested_forms(self, source: Any, form: Form, field: str, **options: Any) -> list[Form]:
        """Build the forms for a nested field.

        A mapping ``default`` gives one nested form; a list ``default`` gives
        one form per submitted entry (or per ``prepend + default + append``
        item when nothing was submitted), ids and names suffixed with the
        index.
        """
        default = options.pop("default", {})
        prepend = options.pop("prepend", [])
        append = options.pop("append", [])
        name = options.pop("as_", None)
        id = options.pop("id", None)
        hidden = _pairs(options.pop("hidden", ()))

        id = str(id or field_id(form, field))
        name = str(name or field_name(form, field))
        params = form.params.get(str(field))

        if isinstance(default, Mapping):
            return [
                Form(
                    source=source,
                    impl=self,
                    id=id,
                    name=name,
                    data=default,
                    params=params or {},
                    hidden=hidden,
                    options=options,
                )
            ]

        if params:
            entries = [({}, entry) for entry in _entries(params)]
        else:
            entries = [(data, {}) for data in [*prepend, *default, *append]]

        return [
            Form(
                source=source,
                impl=self,
                index=index,
                id=f"{id}_{index}",
                name=f"{name}[{index}]",
                data=data,
                params=entry_params,
                hidden=hidden,
                options=options,
            )
            for index, (data, entry_params) in enumerate(entries)
        ]

    def input_value(self, source: Any, form: Form, field: str) -> Any:
        key = str(field)
        if key in form.params:
            return form.params[key]
        data = form.data
        if isinstance(data, Mapping):
            return data.get(field)
        return getattr(data, key, None)

    def input_type(self, source: Any, form: Form, field: str) -> str:
        return "text_input"

    def input_validations(self, source: Any, form: Form, field: str) -> dict[str, Any]:
        return {}


PARAMS_FORM_DATA = ParamsFormData()


def _build_form(source: Any, name: str | None, params: Any, options: dict[str, Any]) -> Form:
    errors = _pairs(options.pop("errors", ()))
    id = options.get("id") or name
    if id is not None and not isinstance(id, str):
        raise ValueError(f"id option in form_for must be a string, got: {id!r}")
    return Form(
        source=source,
        impl=PARAMS_FORM_DATA,
        id=id,
        name=name,
        params=params,
        data={},
        errors=errors,
        options=options,
    )


@singledispatch
def to_form(source: Any, **options: Any) -> Form:
    """Convert ``source`` into a ``Form``.

    Raises:
        TypeError: If no conversion is registered for the source type
    """
    raise TypeError(
        f"cannot build a form from {type(source).__name__}; "
        "register one with @to_form.register"
    )


@to_form.register(str)
def _from_name(source: str, **options: Any) -> Form:
    params = options.pop("params", None) or {}
    return _build_form(source, source, params, options)


@to_form.register(Mapping)
def _from_params(source: Mapping[str, Any], **options: Any) -> Form:
    name = options.pop("as_", None)
    if name is None:
        return _build_form(source, None, source, options)
    name = str(name)
    return _build_form(source, name, source.get(name) or {}, options)
