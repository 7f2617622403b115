"""Ashlar Template package: compiled template objects ready for rendering."""

from ashlar.template.core import Template
from ashlar.utils.html import Safe

__all__ = [
    "Safe",
    "Template",
]
