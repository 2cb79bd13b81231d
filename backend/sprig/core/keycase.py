"""Key case translation between column names (``created_at``) and field names (``createdAt``)."""

import re

_SEPARATORS = re.compile(r"[-_\s]+")
_UPPER_BOUNDARY = re.compile(r"(?<!^)([A-Z])")


def to_internal_case(key):
    """Convert an external (word-separated) key to camelCase. Non-strings pass through."""
    if not isinstance(key, str) or not key:
        return key
    words = [w for w in _SEPARATORS.split(key) if w]
    if not words:
        return key
    joined = "".join(w[0].upper() + w[1:] for w in words)
    return joined[0].lower() + joined[1:]


def to_external_case(key):
    """Convert a camelCase field name to snake_case. Non-strings pass through."""
    if not isinstance(key, str):
        return key
    return _UPPER_BOUNDARY.sub(r"_\1", key).lower()
