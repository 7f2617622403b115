"""Ashlar Environment: compilation entry point and template cache.

The Environment owns everything shared between templates: the loader,
the CSRF token strategy used by the HTML helpers, extra globals visible to
template code, and an LRU cache of compiled templates.

Pipeline:
    ```
    source → Lexer → Parser → ashlar AST → Compiler → Python AST → Template
    ```

Thread-Safety:
Compilation is idempotent; two threads compiling the same name race
harmlessly and the cache keeps one result. Cache bookkeeping is guarded
by a lock.

"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ashlar.compiler import Compiler
from ashlar.environment.exceptions import TemplateNotFoundError
from ashlar.lexer import Lexer
from ashlar.parser import Parser
from ashlar.template import Template

if TYPE_CHECKING:
    import types

    from ashlar.environment.loaders import Loader
    from ashlar.render_context import CsrfTokenReader
    from ashlar.utils.html import Safe

logger = logging.getLogger(__name__)


class Environment:
    """Central configuration and template cache.

    Attributes:
        loader: Template source provider, or None for string-only use
        csrf_token_reader: Strategy called with the target host (or None)
            to obtain a CSRF token; used when no enclosing render context
            provides one
        cache_size: Maximum number of compiled templates kept (0 disables)
        globals: Extra names visible to template code

    Example:
            >>> from ashlar import Environment, DictLoader
            >>> env = Environment(loader=DictLoader({"hi.html.eex": "Hi <%= @who %>"}))
            >>> str(env.render("hi.html.eex", who="<Ann>"))
            'Hi &lt;Ann&gt;'

    """

    def __init__(
        self,
        loader: Loader | None = None,
        *,
        csrf_token_reader: CsrfTokenReader | None = None,
        cache_size: int = 400,
        globals: Mapping[str, Any] | None = None,
    ):
        if cache_size < 0:
            raise ValueError(f"cache_size must be >= 0, got {cache_size}")
        self.loader = loader
        self.csrf_token_reader = csrf_token_reader
        self.cache_size = cache_size
        self.globals: dict[str, Any] = dict(globals) if globals else {}
        self._cache: OrderedDict[str, Template] = OrderedDict()
        self._cache_lock = threading.RLock()

    # -- compilation --------------------------------------------------------

    def compile(
        self,
        source: str,
        name: str | None = None,
        filename: str | None = None,
    ) -> Template:
        """Compile ``source`` into a Template without caching it.

        Raises:
            TemplateSyntaxError: If the source is malformed
        """
        start = time.perf_counter()
        tokens = Lexer(source, name=name, filename=filename).tokenize()
        node = Parser(tokens, name=name, filename=filename, source=source).parse()
        compiler = Compiler(self)
        module = compiler.compile_to_ast(node, name=name, filename=filename, source=source)
        code: types.CodeType = compile(module, filename or name or "<template>", "exec")
        logger.debug(
            "Compiled template %s in %.2fms",
            name or "<string>",
            (time.perf_counter() - start) * 1000,
        )
        return Template(
            self,
            code,
            name,
            filename,
            source=source,
            assign_keys=compiler.assign_keys,
            module_ast=module,
        )

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Compile a template from a string (not cached)."""
        return self.compile(source, name=name)

    def get_template(self, name: str) -> Template:
        """Load, compile and cache a template by name.

        Raises:
            TemplateNotFoundError: If there is no loader or it cannot find ``name``
            TemplateSyntaxError: If the source is malformed
        """
        with self._cache_lock:
            cached = self._cache.get(name)
            if cached is not None:
                self._cache.move_to_end(name)
                logger.debug("Template cache hit: %s", name)
                return cached

        if self.loader is None:
            raise TemplateNotFoundError(f"Template '{name}' not found: no loader configured")

        logger.debug("Loading template %s via %s", name, type(self.loader).__name__)
        source, filename = self.loader.get_source(name)
        template = self.compile(source, name=name, filename=filename)

        if self.cache_size:
            with self._cache_lock:
                self._cache[name] = template
                self._cache.move_to_end(name)
                while len(self._cache) > self.cache_size:
                    evicted, _ = self._cache.popitem(last=False)
                    logger.debug("Template cache evicted: %s", evicted)
        return template

    def render(self, name: str, assigns: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Safe:
        """Shortcut for ``get_template(name).render(assigns, **kwargs)``."""
        return self.get_template(name).render(assigns, **kwargs)

    def clear_cache(self) -> None:
        """Drop every cached template."""
        with self._cache_lock:
            self._cache.clear()

    def cache_info(self) -> dict[str, int]:
        """Current cache occupancy."""
        with self._cache_lock:
            return {"size": len(self._cache), "max_size": self.cache_size}
