"""Template loaders for the ashlar environment.

Loaders provide template source to the Environment. They implement
`get_source(name)` returning `(source, filename)`.

Built-in Loaders:
- `FileSystemLoader`: Load from filesystem directories
- `DictLoader`: Load from in-memory dictionary (testing/embedded)
- `ChoiceLoader`: Try multiple loaders in order (theme fallback)

Custom Loaders:
Implement the Loader protocol:
    ```python
    class DatabaseLoader:
        def get_source(self, name: str) -> tuple[str, str | None]:
            row = db.query("SELECT source FROM templates WHERE name = ?", name)
            if not row:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return row.source, f"db://{name}"

        def list_templates(self) -> list[str]:
            return [r.name for r in db.query("SELECT name FROM templates")]
    ```

Thread-Safety:
Loaders should be thread-safe for concurrent `get_source()` calls.
All built-in loaders are.

"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from difflib import get_close_matches
from pathlib import Path
from typing import Protocol

from ashlar.environment.exceptions import TemplateNotFoundError

DEFAULT_EXTENSIONS = (".eex", ".heex")


class Loader(Protocol):
    """Anything with a ``get_source(name)`` method."""

    def get_source(self, name: str) -> tuple[str, str | None]: ...


class FileSystemLoader:
    """Load templates from filesystem directories.

    Searches one or more directories for templates by name. The first matching
    file is returned. Names are relative paths; a name that would resolve
    outside a search directory is never found.

    Search Order:
        Directories are searched in order. First match wins:
            ```python
            loader = FileSystemLoader(["themes/custom/", "themes/default/"])
            # Looks in themes/custom/ first, then themes/default/
            ```

    Example:
            >>> loader = FileSystemLoader("templates/")
            >>> source, filename = loader.get_source("users/show.html.eex")
            >>> print(filename)
            'templates/users/show.html.eex'

    Raises:
        TemplateNotFoundError: If template not found in any search path

    """

    __slots__ = ("_encoding", "_extensions", "_paths")

    def __init__(
        self,
        paths: str | Path | Sequence[str | Path],
        encoding: str = "utf-8",
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding
        self._extensions = tuple(extensions)

    def get_source(self, name: str) -> tuple[str, str]:
        """Load template source from filesystem."""
        for base in self._paths:
            path = base / name
            if not path.is_file():
                continue
            if not path.resolve().is_relative_to(base.resolve()):
                continue
            return path.read_text(self._encoding), str(path)

        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(str(p) for p in self._paths)}"
        )

    def list_templates(self) -> list[str]:
        """List all templates with a known extension in the search paths."""
        templates = set()
        for base in self._paths:
            if not base.is_dir():
                continue
            for path in base.rglob("*"):
                if path.is_file() and path.name.endswith(self._extensions):
                    templates.add(path.relative_to(base).as_posix())
        return sorted(templates)


class DictLoader:
    """Load templates from an in-memory dictionary.

    Maps template names to source strings. Useful for testing, embedded
    templates, or dynamically generated templates.

    Note:
        Returns `None` as filename since templates are not file-backed.
        Error messages will show the template name instead of a path.

    Example:
            >>> loader = DictLoader({"hello.html.eex": "Hi <%= @name %>"})
            >>> env = Environment(loader=loader)
            >>> str(env.render("hello.html.eex", name="Ann"))
            'Hi Ann'

    Raises:
        TemplateNotFoundError: If template name not in mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str]):
        self._mapping = mapping

    def get_source(self, name: str) -> tuple[str, None]:
        if name not in self._mapping:
            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise TemplateNotFoundError(msg)
        return self._mapping[name], None

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match.

    Example:
            >>> custom = DictLoader({"nav.html.eex": "<nav>Custom</nav>"})
            >>> default = DictLoader({
            ...     "nav.html.eex": "<nav>Default</nav>",
            ...     "footer.html.eex": "<footer>Default</footer>",
            ... })
            >>> env = Environment(loader=ChoiceLoader([custom, default]))
            >>> str(env.render("nav.html.eex"))
            '<nav>Custom</nav>'

    Raises:
        TemplateNotFoundError: If no loader can find the template
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: Sequence[Loader]):
        self._loaders = list(loaders)

    def get_source(self, name: str) -> tuple[str, str | None]:
        """Try each loader in order, return first match."""
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )

    def list_templates(self) -> list[str]:
        """Merge template lists from all loaders (deduplicated, sorted)."""
        templates: set[str] = set()
        for loader in self._loaders:
            if hasattr(loader, "list_templates"):
                templates.update(loader.list_templates())
        return sorted(templates)
