"""Ashlar Template: compiled template object ready for rendering.

The Template class wraps a compiled code object and provides the ``render()``
API. Templates are immutable and thread-safe for concurrent rendering.

Architecture:
    ```
    Template
    ├── _env_ref: WeakRef[Environment]  # Prevents circular refs
    ├── _code: code object              # Compiled Python bytecode
    ├── _render_func: callable          # Extracted render() function
    └── _name, _filename, _source       # For error messages
    ```

Iodata Result:
Generated code binds each printed expression once and returns nested
iodata wrapped in ``Safe``:
    ```python
    def render(assigns):
        _ctx = _get_render_ctx()
        _e = _escape
        _ctx.line = 1
        _tmp1 = _e(_fetch_assign(assigns, 'name'))
        return _Safe(['Hello, ', _tmp1, '!'])
    ```
The caller decides when (and whether) to flatten it with ``str()``.

Memory Safety:
Uses ``weakref.ref(env)`` to break potential cycles:
``Template → (weak) → Environment → cache → Template``

Thread-Safety:
- Templates are immutable after construction
- ``render()`` creates only local state
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

import ast
import weakref
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ashlar.template.helpers import STATIC_NAMESPACE

if TYPE_CHECKING:
    import types

    from ashlar.environment import Environment
    from ashlar.render_context import RenderContext
    from ashlar.utils.html import Safe


class Template:
    """Compiled template ready for rendering.

    Wraps a compiled code object containing a ``render(assigns)`` function.
    Templates are immutable and thread-safe for concurrent ``render()`` calls.

    Attributes:
        name: Template identifier (for error messages)
        filename: Source file path (for error messages)
        referenced_assigns: ``@name`` keys the template reads, in first-seen order

    Methods:
        render(assigns, **kw): Render with the given assigns, returns Safe
        render_async(assigns, **kw): Render in a worker thread

    Error Enhancement:
        Exceptions raised by template code are re-raised as
        TemplateRuntimeError with the template line that was executing:
            ```
            Runtime Error: division by zero
              Location: invoice.html.eex:12
               |
            > 12 | <%= @total / @count %>
               |
            ```
        Template errors (missing assigns, unescapable values, CSRF) are
        raised as they are.

    Example:
            >>> from ashlar import Environment
            >>> env = Environment()
            >>> t = env.from_string("Hello, <%= @name %>!")
            >>> str(t.render(name="<World>"))
            'Hello, &lt;World&gt;!'

    """

    __slots__ = (
        "_assign_keys",
        "_code",
        "_env_ref",
        "_filename",
        "_module_ast",
        "_name",
        "_namespace",
        "_render_func",
        "_source",
    )

    def __init__(
        self,
        env: Environment,
        code: types.CodeType,
        name: str | None,
        filename: str | None,
        source: str | None = None,
        assign_keys: tuple[str, ...] = (),
        module_ast: ast.Module | None = None,
    ):
        """Initialize template with compiled code.

        Args:
            env: Parent Environment (stored as weak reference)
            code: Compiled Python code object
            name: Template name (for error messages)
            filename: Source filename (for error messages)
            source: Template source for runtime error snippets
            assign_keys: Assign keys referenced by the template
            module_ast: Generated Python AST, kept for ``source_code``
        """
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._code = code
        self._name = name
        self._filename = filename
        self._source = source
        self._assign_keys = assign_keys
        self._module_ast = module_ast

        namespace: dict[str, Any] = STATIC_NAMESPACE.copy()
        namespace.update(env.globals)
        exec(code, namespace)
        self._namespace = namespace
        self._render_func = namespace.get("render")

    @property
    def _env(self) -> Environment:
        env = self._env_ref()
        if env is None:
            raise RuntimeError("Environment has been garbage collected")
        return env

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def filename(self) -> str | None:
        return self._filename

    @property
    def referenced_assigns(self) -> tuple[str, ...]:
        """Assign keys the template reads, in the order they first appear."""
        return self._assign_keys

    @property
    def source_code(self) -> str | None:
        """Python source of the generated render function (for debugging)."""
        if self._module_ast is None:
            return None
        return ast.unparse(self._module_ast)

    def render(self, assigns: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Safe:
        """Render template with the given assigns.

        Args:
            assigns: Mapping of assign names to values
            **kwargs: More assigns; they win over ``assigns`` on conflict

        Returns:
            The rendered document as Safe iodata

        Example:
            >>> str(t.render(name="World"))
            'Hello, World!'
            >>> str(t.render({"name": "World"}))
            'Hello, World!'
        """
        from ashlar.environment.exceptions import TemplateError
        from ashlar.render_context import get_render_context, render_context

        if assigns is not None and not isinstance(assigns, Mapping):
            raise TypeError(
                f"render() assigns must be a mapping, got {type(assigns).__name__}"
            )

        merged: dict[str, Any] = dict(assigns) if assigns else {}
        merged.update(kwargs)
        snapshot = MappingProxyType(merged)

        render_func = self._render_func
        if render_func is None:
            raise RuntimeError(f"Template '{self._name or '(inline)'}' not properly compiled")

        # An enclosing render (or framework) context keeps its CSRF strategy
        outer = get_render_context()
        reader = None
        if outer is None or outer.csrf_token_reader is None:
            reader = self._env.csrf_token_reader

        with render_context(
            template_name=self._name,
            filename=self._filename,
            source=self._source,
            csrf_token_reader=reader,
        ) as render_ctx:
            try:
                return render_func(snapshot)
            except TemplateError:
                raise
            except Exception as e:
                raise self._enhance_error(e, render_ctx) from e

    async def render_async(self, assigns: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Safe:
        """Async wrapper for synchronous render.

        Runs the synchronous ``render()`` method in a thread pool to avoid
        blocking the event loop. The current render context is carried over.
        """
        import asyncio

        return await asyncio.to_thread(self.render, assigns, **kwargs)

    def _enhance_error(
        self,
        error: Exception,
        render_ctx: RenderContext,
    ) -> Exception:
        """Enhance a generic exception with template context from RenderContext.

        Converts generic Python exceptions into TemplateRuntimeError with
        template name, line number, and source snippet context.
        """
        from ashlar.environment.exceptions import TemplateRuntimeError, build_source_snippet

        lineno = render_ctx.line or None
        error_str = str(error).strip()

        # Handle empty error messages (e.g., StopIteration, bare exceptions)
        if not error_str:
            error_str = f"{type(error).__name__} (no details available)"
        else:
            error_str = f"{type(error).__name__}: {error_str}"

        snippet = None
        if self._source and lineno:
            snippet = build_source_snippet(self._source, lineno)

        return TemplateRuntimeError(
            error_str,
            template_name=self._name,
            lineno=lineno,
            source_snippet=snippet,
        )

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"
