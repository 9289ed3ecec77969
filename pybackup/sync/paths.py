"""Separator-agnostic path keys.

Object keys written from Windows may use backslashes while local relative
paths on POSIX use forward slashes. Both are reduced to a tuple of segments
so they compare equal regardless of where they came from.
"""

import re

PathKey = tuple[str, ...]
"""Ordered, non-empty path segments. Comparison is case-sensitive."""

_SEPARATORS = re.compile(r"[/\\]")

CANONICAL_SEPARATOR = "/"


def normalize_key(raw: str) -> PathKey:
    """Split a key or path on ``/`` and ``\\`` into its segments.

    Empty segments from leading, trailing or repeated separators are
    dropped, so malformed input just yields fewer segments.

    Examples:
        >>> normalize_key("a/b/c") == normalize_key("a\\\\b\\\\c")
        True
        >>> normalize_key("//a//b/")
        ('a', 'b')
    """
    return tuple(segment for segment in _SEPARATORS.split(raw) if segment)


def serialize_key(key: PathKey) -> str:
    """Join segments with the canonical remote separator."""
    return CANONICAL_SEPARATOR.join(key)
