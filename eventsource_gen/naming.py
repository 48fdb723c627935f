"""Derive client function names and parameter identifiers.

Function names: stream{CamelCasedName}
  - operationId, when declared, is the name source
  - otherwise the last path segment that is not a {template} parameter

Examples:
  GET /events/round-started                    -> streamRoundStarted
  GET /games/{gameId}/events                   -> streamEvents
  GET /games/{gameId}  operationId=game_feed   -> streamGameFeed
  GET /                                        -> streamRoot

Query parameters are lower-cased to match the query-string key they are
sent under: gameId -> gameid.
"""

from __future__ import annotations

import re

FUNCTION_PREFIX = "stream"

# Words the emitted TypeScript cannot use as parameter names
_RESERVED_WORDS = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with",
    # strict mode (the output is an ES module)
    "arguments", "await", "eval", "implements", "interface", "let",
    "package", "private", "protected", "public", "static", "yield",
})

_WORD_SPLIT = re.compile(r"[^0-9A-Za-z]+")


def _camel_words(text: str) -> str:
    """Upper-case the first letter of each separated word and join them."""
    words = [w for w in _WORD_SPLIT.split(text) if w]
    return "".join(w[0].upper() + w[1:] for w in words)


def _last_segment(path: str) -> str | None:
    """Last meaningful path segment, skipping {params}."""
    parts = [p for p in path.split("/") if p and not p.startswith("{")]
    return parts[-1] if parts else None


def build_function_name(path: str, operation_id: str | None = None) -> str:
    """Build a stream function name from operationId or route path.

    Returns a name like 'streamRoundStarted'.
    """
    if operation_id:
        name = _camel_words(operation_id)
        if name:
            return FUNCTION_PREFIX + name

    segment = _last_segment(path)
    name = _camel_words(segment) if segment else ""
    return FUNCTION_PREFIX + (name or "Root")


def normalize_param_name(name: str) -> str:
    """Case-fold a declared query parameter name to its wire key."""
    return name.lower()


def to_identifier(normalized: str) -> str:
    """Make a normalized parameter name usable as a function argument."""
    ident = re.sub(r"\W", "_", normalized, flags=re.ASCII)
    if not ident or ident[0].isdigit() or ident in _RESERVED_WORDS:
        ident = "_" + ident
    return ident
