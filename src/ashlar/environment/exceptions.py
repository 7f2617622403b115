"""Exceptions for the ashlar template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Template not found by loader
├── TemplateSyntaxError       # Compile-time error in template source
│   └── ParseError            # Structural error (tags, blocks)
├── TemplateRuntimeError      # Render-time error with location context
│   └── CsrfTokenError        # No CSRF token strategy configured
├── MissingAssignError        # @name referenced but not in assigns
├── UnescapableValueError     # No safe-value conversion for a type
└── MalformedByteListError    # Byte list with a non-byte entry

The three render-time conversion errors also subclass the matching
builtin (KeyError, TypeError, ValueError) so callers that already catch
those keep working.

Example:
    ```
    A-RUN-001: assign @titl not available in article.html:5. Did you mean 'title'?
       |
    >  5 | <h1><%= @titl %></h1>
       |
    Available assigns: ['body', 'title']
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any

from ashlar.environment import terminal

_DOCS_BASE = "docs/errors.md"


class ErrorCode(Enum):
    """Searchable error codes.

    Format: A-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), RUN (runtime), TPL (template loading)
    """

    # Lexer errors (A-LEX-xxx)
    UNCLOSED_TAG = "A-LEX-001"

    # Parser errors (A-PAR-xxx)
    UNEXPECTED_TAG = "A-PAR-001"
    UNCLOSED_BLOCK = "A-PAR-002"
    INVALID_EXPRESSION = "A-PAR-003"
    UNSUPPORTED_STATEMENT = "A-PAR-004"

    # Runtime errors (A-RUN-xxx)
    MISSING_ASSIGN = "A-RUN-001"
    UNESCAPABLE_VALUE = "A-RUN-002"
    MALFORMED_BYTE_LIST = "A-RUN-003"
    RUNTIME_ERROR = "A-RUN-004"
    CSRF_TOKEN = "A-RUN-005"

    # Template loading errors (A-TPL-xxx)
    TEMPLATE_NOT_FOUND = "A-TPL-001"
    SYNTAX_ERROR = "A-TPL-002"

    @property
    def docs_url(self) -> str:
        """Documentation anchor for this error code."""
        return f"{_DOCS_BASE}#{self.value.lower()}"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'lexer', 'parser', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet in a compiler-diagnostic style, colored when supported."""
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            parts.append(
                terminal.format_source_line(lineno, content, is_error=lineno == self.error_line)
            )
        if self.column is not None:
            caret = " " * self.column + "^"
            parts.append(f"{terminal.dim_text('   |')} {terminal.error_line(caret)}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


def _location(template_name: str | None, lineno: int | None) -> str:
    loc = template_name or "<template>"
    if lineno:
        loc += f":{lineno}"
    return loc


class TemplateError(Exception):
    """Base exception for all ashlar template errors.

        >>> try:
        ...     template.render(assigns)
        ... except TemplateError as e:
        ...     log.error("Template error: %s", e.format_compact())

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a short diagnostic: code, message and docs anchor."""
        parts: list[str] = []
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        parts.append(header)
        if self.code:
            parts.append(f"  Docs: {self.code.docs_url}")
        return "\n".join(parts)


class TemplateNotFoundError(TemplateError):
    """Template not found by any configured loader."""

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Compile-time error in template source.

    Raised for malformed delimiters, unbalanced blocks and Python syntax
    errors inside ``<% %>`` segments. When ``source`` and ``lineno`` are
    given the message includes the offending line, with a caret when
    ``col_offset`` is known.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        *,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.filename = filename
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _source_lines(self) -> list[str]:
        if not (self.source and self.lineno):
            return []
        lines = self.source.splitlines()
        if not 0 < self.lineno <= len(lines):
            return []
        out = ["   |", f"{self.lineno:>3} | {lines[self.lineno - 1]}"]
        if self.col_offset is not None:
            out.append(f"   | {' ' * self.col_offset}^")
        return out

    def _format_message(self) -> str:
        location = self.filename or self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return "\n".join([f"Syntax Error: {self.message}", f"  --> {location}", *self._source_lines()])

    def format_compact(self) -> str:
        code_prefix = f"{self.code.value}: " if self.code else ""
        parts = [
            f"{code_prefix}{self.message}",
            f"  --> {_location(self.filename or self.name, self.lineno)}",
            *self._source_lines(),
        ]
        if self.code:
            parts.append(f"  Docs: {self.code.docs_url}")
        return "\n".join(parts)


class ParseError(TemplateSyntaxError):
    """Structural template error: stray ``end``, unclosed block, misplaced ``else``.

    Adds an optional ``suggestion`` line to the syntax error output.
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_TAG

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        *,
        code: ErrorCode | None = None,
        suggestion: str | None = None,
    ):
        self.suggestion = suggestion
        super().__init__(message, lineno, name, filename, source, col_offset, code=code)

    def _format_message(self) -> str:
        msg = super()._format_message()
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg


class TemplateRuntimeError(TemplateError):
    """Render-time error with template location.

    Wraps exceptions raised by user expressions during ``render()`` so the
    message points at the template line that was executing.

    Output Format:
            ```
            Runtime Error: division by zero
              Location: invoice.html:12
               |
            > 12 | <%= @total / @count %>
               |
            ```
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        values: dict[str, Any] | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
    ):
        self.message = message
        self.expression = expression
        self.values = values or {}
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]
        if self.template_name or self.lineno:
            parts.append(f"  Location: {terminal.location(_location(self.template_name, self.lineno))}")
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type(value).__name__})")
        if self.suggestion:
            parts.append(f"\n  {terminal.hint('Suggestion:')} {self.suggestion}")
        return "\n".join(parts)

    def format_compact(self) -> str:
        parts: list[str] = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  Location: {terminal.location(_location(self.template_name, self.lineno))}",
        ]
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        if self.code:
            parts.append(f"  {terminal.dim_text('Docs:')} {terminal.docs_url(self.code.docs_url)}")
        return "\n".join(parts)


class CsrfTokenError(TemplateRuntimeError):
    """A CSRF helper ran without a token strategy.

    Configure one with ``Environment(csrf_token_reader=...)`` or
    ``render_context(csrf_token_reader=...)``.
    """

    code: ErrorCode | None = ErrorCode.CSRF_TOKEN

    def __init__(self, to: str | None = None, **kwargs: Any):
        self.to = to
        target = f" for {to!r}" if to else ""
        super().__init__(
            f"no CSRF token reader configured{target}",
            suggestion=(
                "Pass csrf_token_reader= to Environment or render_context(), "
                "or disable the token with csrf_token=False"
            ),
            **kwargs,
        )


class MissingAssignError(TemplateError, KeyError):
    """An ``@name`` assign was referenced but is absent from the assigns.

    Attributes:
        key: The missing assign name.
        available: Sorted tuple of the keys that were supplied.
        template_name: Template being rendered, if known.
        lineno: Template line of the reference, if known.
    """

    code: ErrorCode | None = ErrorCode.MISSING_ASSIGN

    def __init__(
        self,
        key: str,
        available: tuple[Any, ...] = (),
        *,
        template_name: str | None = None,
        lineno: int | None = None,
        source_snippet: SourceSnippet | None = None,
    ):
        self.key = key
        self.available = available
        self.template_name = template_name
        self.lineno = lineno
        self.source_snippet = source_snippet
        self.message = self._format_message()
        super().__init__(self.message)

    def _suggestion(self) -> str | None:
        names = [k for k in self.available if isinstance(k, str)]
        matches = get_close_matches(self.key, names, n=1, cutoff=0.6)
        return matches[0] if matches else None

    def _format_message(self) -> str:
        loc = _location(self.template_name, self.lineno)
        msg = f"assign @{self.key} not available in {terminal.location(loc)}"
        close = self._suggestion()
        if close:
            msg += f". Did you mean '{terminal.suggestion(close)}'?"
        if self.source_snippet:
            msg += "\n" + self.source_snippet.format()
        msg += (
            "\n\nPlease make sure all proper assigns have been set. If this template "
            "is rendered on behalf of another one, make sure the caller passes "
            "every required assign."
            f"\n\nAvailable assigns: {list(self.available)!r}"
        )
        return msg

    def __str__(self) -> str:
        return self.message

    def format_compact(self) -> str:
        parts = [
            terminal.format_error_header(
                self.code.value if self.code else None,
                f"assign @{self.key} not available in {_location(self.template_name, self.lineno)}",
            )
        ]
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        parts.append(f"  Available assigns: {list(self.available)!r}")
        if self.code:
            parts.append(f"  {terminal.dim_text('Docs:')} {terminal.docs_url(self.code.docs_url)}")
        return "\n".join(parts)


class UnescapableValueError(TemplateError, TypeError):
    """No safe-value conversion exists for a value's type.

    Register one with ``@to_safe.register(MyType)`` or give the type an
    ``__html__()`` method.
    """

    code: ErrorCode | None = ErrorCode.UNESCAPABLE_VALUE

    def __init__(self, value: Any, message: str | None = None):
        self.value = value
        self.type_name = type(value).__name__
        super().__init__(
            message
            or (
                f"cannot convert {value!r} of type {self.type_name} to safe HTML. "
                f"Convert it to a string explicitly, register a conversion with "
                f"@to_safe.register({self.type_name}), or implement __html__()"
            )
        )


class MalformedByteListError(TemplateError, ValueError):
    """A byte list contained something other than bytes, strings, lists or safe data."""

    code: ErrorCode | None = ErrorCode.MALFORMED_BYTE_LIST

    def __init__(self, element: Any, message: str | None = None):
        self.element = element
        super().__init__(
            message
            or (
                "lists in templates may only contain integers representing bytes, "
                f"strings, safe values or other lists, got invalid entry: {element!r}"
            )
        )
