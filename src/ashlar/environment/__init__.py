"""Ashlar environment: configuration, loaders and exceptions."""

from ashlar.environment.core import Environment
from ashlar.environment.exceptions import (
    CsrfTokenError,
    ErrorCode,
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
from ashlar.environment.loaders import ChoiceLoader, DictLoader, FileSystemLoader, Loader

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
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UnescapableValueError",
    "build_source_snippet",
]
