"""Terminal color utilities for error diagnostics.

ANSI color codes with TTY detection and NO_COLOR / FORCE_COLOR support.
Only the handful of semantic styles used by ``format_compact()`` live here.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "cyan": "\033[36m",
    "yellow": "\033[33m",
    "green": "\033[32m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_blue": "\033[94m",
}

ColorName = Literal[
    "reset", "bold", "dim", "cyan", "yellow", "green",
    "bright_red", "bright_green", "bright_blue",
]

_ANSI_RE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _should_use_colors() -> bool:
    """Decide once whether diagnostics get colored.

    FORCE_COLOR wins over NO_COLOR (https://no-color.org/); otherwise
    colors are used only when stdout is a TTY.
    """
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _should_use_colors()


def supports_color() -> bool:
    return _USE_COLORS


def colorize(text: str, *colors: ColorName) -> str:
    """Wrap ``text`` in the given ANSI styles when colors are enabled."""
    if not _USE_COLORS or not colors:
        return text
    prefix = "".join(_COLORS.get(color, "") for color in colors)
    if not prefix:
        return text
    return f"{prefix}{text}{_COLORS['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI escape sequences from ``text``."""
    return _ANSI_RE.sub("", text)


def error_code(text: str) -> str:
    return colorize(text, "bright_red", "bold")


def location(text: str) -> str:
    return colorize(text, "cyan")


def line_number(text: str) -> str:
    return colorize(text, "yellow")


def error_line(text: str) -> str:
    return colorize(text, "bright_red")


def hint(text: str) -> str:
    return colorize(text, "green")


def suggestion(text: str) -> str:
    return colorize(text, "bright_green", "bold")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def docs_url(text: str) -> str:
    return colorize(text, "bright_blue")


def format_error_header(code: str | None, message: str) -> str:
    """Prefix ``message`` with a colored error code when one is given.

    Example:
        >>> format_error_header("A-RUN-001", "assign @user not available")
        'A-RUN-001: assign @user not available'  # without colors
    """
    if code:
        return f"{error_code(code)}: {message}"
    return message


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """Format one numbered source line, marking the error line with ``>``."""
    marker = ">" if is_error else " "
    num_colored = line_number(f"{marker}{lineno:>3}")
    content_colored = error_line(content) if is_error else dim_text(content)
    return f"{num_colored} | {content_colored}"
