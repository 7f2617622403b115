"""Pure runtime helper functions injected into the template namespace.

These functions are called by compiled template code at render time.
None of them close over Environment state; they use only their
parameters and the current RenderContext.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

import builtins
from collections.abc import Mapping
from typing import Any

from ashlar.environment.exceptions import MissingAssignError, build_source_snippet
from ashlar.render_context import get_render_context, get_render_context_required
from ashlar.safe import escape_value
from ashlar.utils.html import Safe

# =============================================================================
# Shared Base Namespace
# =============================================================================
# Static entries shared across all Template instances. Copied once per
# Template.__init__ instead of constructed fresh each time.
#
# Template code is ordinary Python, so the full builtins are available.
# Thread-Safety: This dict is read-only after module load.
# =============================================================================


def fetch_assign(assigns: Mapping[str, Any], key: str) -> Any:
    """Look up ``@key``, raising MissingAssignError when it is absent.

    A key that is present with the value ``None`` is returned as ``None``.
    """
    try:
        return assigns[key]
    except KeyError:
        pass

    ctx = get_render_context()
    template_name = lineno = snippet = None
    if ctx is not None:
        template_name = ctx.template_name
        lineno = ctx.line or None
        if ctx.source and lineno:
            snippet = build_source_snippet(ctx.source, lineno)
    raise MissingAssignError(
        key,
        tuple(sorted(assigns, key=str)),
        template_name=template_name,
        lineno=lineno,
        source_snippet=snippet,
    ) from None


STATIC_NAMESPACE: dict[str, Any] = {
    "__builtins__": builtins,
    "_Safe": Safe,
    "_escape": escape_value,
    "_fetch_assign": fetch_assign,
    "_get_render_ctx": get_render_context_required,
}
