"""String sanitizers for values read from the store or echoed into HTML."""

import re

from sprig.core.keycase import to_external_case

_TAG = re.compile(r"<[A-Za-z!/?][^>]*>?")
_NON_SLUG = re.compile(r"[^a-z0-9_]")
_RUNS = re.compile(r"_{2,}")
# Entities already present in the value are kept as-is.
_BARE_AMP = re.compile(r"&(?!#\d+;|#x[0-9a-fA-F]+;|[A-Za-z][A-Za-z0-9]*;)")


def _strip_slashes(value: str) -> str:
    return re.sub(r"\\(.?)", r"\1", value)


def _add_slashes(value: str) -> str:
    return re.sub(r"([\\'\"])", r"\\\1", value)


def esc(value: str) -> str:
    """Sanitize a stored string for display.

    Tags are stripped, ``& < >`` are escaped without double-encoding, double
    quotes become ``&#34;`` and quotes are backslash-protected.
    """
    value = _strip_slashes(_TAG.sub("", value))
    value = _BARE_AMP.sub("&amp;", value).replace("<", "&lt;").replace(">", "&gt;")
    value = value.replace('"', "&#34;").replace("&#039;", "'")
    return _add_slashes(value)


def attr(value) -> str:
    """Render a value for use inside a single-quoted HTML attribute."""
    return _strip_slashes(str(value)).replace("'", "&#39;")


def sanitize_string(value: str, space: str = "_") -> str:
    """Lowercase slug of ``value`` using ``space`` as the word separator."""
    value = value.strip().lower().replace(" ", "_").replace("-", "_").strip("_")
    value = _RUNS.sub("_", _NON_SLUG.sub("", value))
    return value.replace("_", space)


def format_title(title: str) -> str:
    """Turn a field or column name into a human title: ``createdAt`` -> ``Created At``."""
    return sanitize_string(to_external_case(title), " ").title()
