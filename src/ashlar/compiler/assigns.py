"""Assign references: ``@name`` in template code.

Rewriting happens in two passes:

1. ``mark_assign_refs`` scans the code with ``tokenize`` and replaces every
   ``@name`` in prefix position with a placeholder identifier. An ``@``
   that follows an operand (``a @ b``) is the matrix-multiply operator and
   is left alone; ``@`` inside strings and comments is never touched.
2. ``AssignRewriter`` walks the parsed Python AST and turns each
   placeholder into ``_fetch_assign(assigns, "name")``, which fails with
   ``MissingAssignError`` when the key is absent.

Example:
    ```
    <%= @user.name if @user else "guest" %>
    ```
    compiles to::

        _fetch_assign(assigns, 'user').name if _fetch_assign(assigns, 'user') else 'guest'

"""

from __future__ import annotations

import ast
import io
import keyword
import tokenize

PLACEHOLDER_PREFIX = "__ashlar_assign_"

# Token types that can end an operand; an '@' right after one is binary.
_OPERAND_END_TYPES = frozenset({tokenize.NAME, tokenize.NUMBER, tokenize.STRING})
_CLOSING_BRACKETS = frozenset({")", "]", "}"})
_SKIPPED_TYPES = frozenset(
    {tokenize.NL, tokenize.COMMENT, tokenize.INDENT, tokenize.DEDENT, tokenize.ENCODING}
)
_VALUE_KEYWORDS = frozenset({"True", "False", "None"})
# Soft keywords that start a statement; an "@" after them is a prefix
_STATEMENT_SOFT_KEYWORDS = frozenset({"case", "match"})

if hasattr(tokenize, "FSTRING_END"):
    _OPERAND_END_TYPES = _OPERAND_END_TYPES | {tokenize.FSTRING_END}


def _ends_operand(token: tokenize.TokenInfo | None) -> bool:
    if token is None:
        return False
    if token.type == tokenize.OP:
        return token.string in _CLOSING_BRACKETS
    if token.type == tokenize.NAME:
        if token.string in _STATEMENT_SOFT_KEYWORDS:
            return False
        return not keyword.iskeyword(token.string) or token.string in _VALUE_KEYWORDS
    return token.type in _OPERAND_END_TYPES


def mark_assign_refs(code: str) -> str:
    """Replace prefix-position ``@name`` with placeholder identifiers.

    Code that does not tokenize is returned unchanged so the Python parser
    can report the real syntax error.
    """
    if "@" not in code:
        return code

    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(code).readline))
    except (tokenize.TokenError, SyntaxError):
        return code

    line_starts = [0]
    for line in code.splitlines(keepends=True):
        line_starts.append(line_starts[-1] + len(line))

    def offset(pos: tuple[int, int]) -> int:
        return line_starts[pos[0] - 1] + pos[1]

    spans: list[tuple[int, int, str]] = []
    prev: tokenize.TokenInfo | None = None
    for i, tok in enumerate(tokens):
        if tok.type in _SKIPPED_TYPES:
            continue
        if tok.type == tokenize.OP and tok.string == "@" and i + 1 < len(tokens):
            nxt = tokens[i + 1]
            if nxt.type == tokenize.NAME and nxt.start == tok.end and not _ends_operand(prev):
                spans.append((offset(tok.start), offset(nxt.end), nxt.string))
        prev = tok

    if not spans:
        return code

    parts: list[str] = []
    last = 0
    for start, end, name in spans:
        parts.append(code[last:start])
        parts.append(PLACEHOLDER_PREFIX + name)
        last = end
    parts.append(code[last:])
    return "".join(parts)


class ReadOnlyAssignError(Exception):
    """Raised by AssignRewriter when template code binds or deletes ``@name``."""

    def __init__(self, key: str, node: ast.AST):
        self.key = key
        self.node = node
        super().__init__(f"assigns are read-only; cannot assign to or delete @{key}")


class AssignRewriter(ast.NodeTransformer):
    """Turn placeholder names into ``_fetch_assign(assigns, key)`` calls.

    Collects the referenced keys, in first-seen order, on ``keys``.
    """

    def __init__(self) -> None:
        self.keys: list[str] = []

    def visit_Name(self, node: ast.Name) -> ast.AST:
        if not node.id.startswith(PLACEHOLDER_PREFIX):
            return node
        key = node.id[len(PLACEHOLDER_PREFIX) :]
        if not isinstance(node.ctx, ast.Load):
            raise ReadOnlyAssignError(key, node)
        if key not in self.keys:
            self.keys.append(key)
        call = ast.Call(
            func=ast.Name(id="_fetch_assign", ctx=ast.Load()),
            args=[ast.Name(id="assigns", ctx=ast.Load()), ast.Constant(value=key)],
            keywords=[],
        )
        return ast.copy_location(call, node)


def pattern_assign_ref(pattern: ast.AST) -> str | None:
    """Return the first ``@name`` used as a capture target inside a match pattern."""
    for node in ast.walk(pattern):
        name = getattr(node, "name", None) if isinstance(node, (ast.MatchAs, ast.MatchStar)) else None
        if isinstance(node, ast.MatchMapping):
            name = node.rest
        if name and name.startswith(PLACEHOLDER_PREFIX):
            return name[len(PLACEHOLDER_PREFIX) :]
    return None
