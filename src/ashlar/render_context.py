"""RenderContext: per-render state kept out of the assigns.

Generated code records the template line it is executing here, error
reporting reads it back, and HTML helpers find request-scoped data
(framework metadata, the CSRF token strategy) without it travelling
through the assigns mapping.

Thread Safety:
    The context lives in a ContextVar, so each thread and asyncio task sees
    its own RenderContext.

Framework integration:
    ```python
    from ashlar.render_context import render_context

    with render_context(csrf_token_reader=session.csrf_token) as ctx:
        ctx.set_meta("current_user", request.user)
        body = template.render(page=page)
    ```

Templates rendered inside the ``with`` block inherit the metadata and the
CSRF strategy of the enclosing context.

"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

CsrfTokenReader = Callable[[str | None], str]


@dataclass
class RenderContext:
    """Per-render state isolated from the assigns.

    Attributes:
        template_name: Current template name for error messages
        filename: Source file path for error messages
        source: Template source for runtime error snippets
        line: Current line number (updated during render by generated code)
        csrf_token_reader: Strategy returning the CSRF token for a host
            (``None`` means the current host)
        csrf_tokens: Tokens already resolved in this request, keyed by host
    """

    template_name: str | None = None
    filename: str | None = None
    source: str | None = None
    line: int = 0

    csrf_token_reader: CsrfTokenReader | None = None
    csrf_tokens: dict[str | None, str] = field(default_factory=dict)

    # Framework metadata (current user, request id, ...)
    _meta: dict[str, object] = field(default_factory=dict)

    def get_meta(self, key: str, default: object = None) -> object:
        """Get framework-specific metadata."""
        return self._meta.get(key, default)

    def set_meta(self, key: str, value: object) -> None:
        """Set framework-specific metadata."""
        self._meta[key] = value

    def csrf_token(self, to: str | None = None) -> str:
        """Resolve the CSRF token for ``to``, calling the reader at most once per host.

        Raises:
            CsrfTokenError: If no reader is configured
        """
        try:
            return self.csrf_tokens[to]
        except KeyError:
            pass
        if self.csrf_token_reader is None:
            from ashlar.environment.exceptions import CsrfTokenError

            raise CsrfTokenError(to, template_name=self.template_name, lineno=self.line or None)
        token = self.csrf_token_reader(to)
        self.csrf_tokens[to] = token
        return token

    def child_context(
        self,
        template_name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ) -> RenderContext:
        """Create the context for a template rendered inside this one.

        Shares the metadata, CSRF strategy and resolved tokens (they are
        request-wide); position tracking starts fresh.
        """
        return RenderContext(
            template_name=template_name,
            filename=filename,
            source=source,
            csrf_token_reader=self.csrf_token_reader,
            csrf_tokens=self.csrf_tokens,
            _meta=self._meta,
        )


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "ashlar_render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


def get_render_context_required() -> RenderContext:
    """Get current render context, raise if not in render.

    Used by generated code for line tracking.

    Raises:
        RuntimeError: If not in a render context
    """
    ctx = _render_context.get()
    if ctx is None:
        raise RuntimeError("Not in a render context")
    return ctx


@contextmanager
def render_context(
    template_name: str | None = None,
    filename: str | None = None,
    source: str | None = None,
    *,
    csrf_token_reader: CsrfTokenReader | None = None,
    parent_meta: dict[str, object] | None = None,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext, makes it current for the duration of the
    ``with`` block and restores the previous one on exit.

    When a context is already active, the new one inherits its metadata,
    CSRF strategy and resolved tokens unless they are given explicitly.

    Args:
        template_name: Template name for error messages
        filename: Source file path for error messages
        source: Template source for runtime error snippets
        csrf_token_reader: CSRF token strategy for helpers
        parent_meta: Metadata to start from
    """
    outer = _render_context.get()
    if outer is not None and csrf_token_reader is None:
        ctx = outer.child_context(template_name, filename, source)
        if parent_meta:
            ctx._meta = {**outer._meta, **parent_meta}
    else:
        ctx = RenderContext(
            template_name=template_name,
            filename=filename,
            source=source,
            csrf_token_reader=csrf_token_reader,
            _meta=dict(parent_meta) if parent_meta else (dict(outer._meta) if outer else {}),
        )
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)


def set_render_context(ctx: RenderContext) -> Token[RenderContext | None]:
    """Set a RenderContext and return the reset token."""
    return _render_context.set(ctx)


def reset_render_context(token: Token[RenderContext | None]) -> None:
    """Reset render context using a token from set_render_context."""
    _render_context.reset(token)
