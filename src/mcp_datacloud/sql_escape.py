"""SQL string literal escaping for Data Cloud queries."""
from typing import Any

# Applied in order; later rules must not see the output of earlier ones twice.
_REPLACEMENTS = (
    ("'", "''"),
    ("\\", "\\\\"),
    ("\x00", ""),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\x1a", "\\Z"),
)


def to_text(value: Any) -> str:
    """Stringify a filter value the way JavaScript coerces it to a string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else to_text(item) for item in value)
    return str(value)


def escape_sql_string(value: Any) -> str:
    """
    Escape a value for embedding inside a single-quoted SQL literal.

    This is string sanitization for inline literals only. It does not make
    arbitrary input safe the way bound parameters would, and it is not
    idempotent: escaping an already escaped string escapes it again.
    """
    escaped = to_text(value)
    for target, replacement in _REPLACEMENTS:
        escaped = escaped.replace(target, replacement)
    return escaped
