"""Type conversion helpers for loosely-typed JSON from external services."""

from typing import Any


def safe_float(val: Any, default: float | None = 0.0) -> float | None:
    """Safely convert a value to float.

    Args:
        val: Value to convert (can be str, int, float, None, etc.)
        default: Value to return if conversion fails

    Returns:
        Converted float or default value

    Examples:
        >>> safe_float("3.14")
        3.14
        >>> safe_float(None)
        0.0
        >>> safe_float("invalid", default=None) is None
        True
    """
    if val is None or val == "" or isinstance(val, bool):
        return default
    try:
        return float(val)
    except (ValueError, TypeError):
        return default


def safe_str(val: Any) -> str | None:
    """Return a stripped string, or None for empty/missing values."""
    if val is None:
        return None
    s = str(val).strip()
    return s or None
