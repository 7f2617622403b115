"""Ashlar: HTML-safe templates and helpers for Python.

Templates compile to Python functions that return nested *iodata* wrapped
in ``Safe``. Every printed value is escaped unless it is already safe, and
nothing is concatenated until the caller asks for a string.

Quickstart:
    >>> from ashlar import Environment
    >>> env = Environment()
    >>> template = env.from_string("Hello, <%= @name %>!")
    >>> str(template.render(name="<World>"))
    'Hello, &lt;World&gt;!'

File-based templates:
    >>> from ashlar import Environment, FileSystemLoader
    >>> env = Environment(loader=FileSystemLoader("templates/"))
    >>> env.render("users/show.html.eex", user=user)

Architecture:
Template Source → Lexer → Parser → ashlar AST → Compiler → Python AST → exec()

Pipeline stages:
1. **Lexer**: Splits source into text, ``<%= %>``, ``<% %>`` and comment tokens
2. **Parser**: Builds an immutable ashlar AST, pairing blocks with ``end``
3. **Compiler**: Transforms the ashlar AST into a Python ``render(assigns)``
   function, escaping literals at compile time and fusing adjacent text
4. **Template**: Wraps the compiled code with the ``render()`` interface

Safe values:
``to_safe`` is a ``functools.singledispatch`` generic; register your own
types with ``@to_safe.register(MyType)`` or give them an ``__html__``
method. Unknown types fail loudly instead of being stringified.

Thread-Safety:
All public APIs are thread-safe:
- Template compilation is idempotent (same input → same output)
- Rendering uses only local state and a per-render ContextVar context
- The Environment's template cache is guarded by a lock

Free-Threading (PEP 703):
Declares GIL-independence via the ``_Py_mod_gil = 0`` attribute.

"""

from ashlar.environment import (
    ChoiceLoader,
    CsrfTokenError,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    Loader,
    MalformedByteListError,
    MissingAssignError,
    ParseError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UnescapableValueError,
    build_source_snippet,
)
from ashlar.html import (
    attributes_escape,
    button,
    content_tag,
    csrf_input_tag,
    csrf_meta_tag,
    csrf_token_value,
    form_for,
    form_tag,
    img_tag,
    inputs_for,
    link,
    number_with_delimiter,
    number_with_precision,
    tag,
    text_to_html,
)
from ashlar.render_context import (
    RenderContext,
    get_render_context,
    get_render_context_required,
    render_context,
)
from ashlar.safe import escape_value, html_escape, raw, safe_to_string, to_safe
from ashlar.template import Template
from ashlar.utils.html import (
    Safe,
    escape_string,
    iodata_to_bytes,
    iodata_to_string,
    javascript_escape,
)

__version__ = "0.1.0"

__all__ = [
    "ChoiceLoader",
    "CsrfTokenError",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "Loader",
    "MalformedByteListError",
    "MissingAssignError",
    "ParseError",
    "RenderContext",
    "Safe",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UnescapableValueError",
    "__version__",
    "attributes_escape",
    "build_source_snippet",
    "button",
    "content_tag",
    "csrf_input_tag",
    "csrf_meta_tag",
    "csrf_token_value",
    "escape_string",
    "escape_value",
    "form_for",
    "form_tag",
    "get_render_context",
    "get_render_context_required",
    "html_escape",
    "img_tag",
    "inputs_for",
    "iodata_to_bytes",
    "iodata_to_string",
    "javascript_escape",
    "link",
    "number_with_delimiter",
    "number_with_precision",
    "raw",
    "render_context",
    "safe_to_string",
    "tag",
    "text_to_html",
    "to_safe",
]


def __getattr__(name: str) -> object:
    """Module-level getattr for the free-threading declaration."""
    if name == "_Py_mod_gil":
        # 0 = Py_MOD_GIL_NOT_USED
        return 0
    raise AttributeError(f"module 'ashlar' has no attribute {name!r}")
