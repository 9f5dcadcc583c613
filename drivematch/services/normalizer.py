"""Attribute normalizer: numeric magnitude from unit-tagged catalog values.

Catalog specs are free-form strings ("1497cc", "18.4 km/l", "2,50,000").
Scoring and range filters need plain numbers, so everything goes through
``parse_number``: every character other than a digit or a dot is stripped
and the leading float of what remains is read. A string holding several
numbers collapses into one ("118 bhp @ 6600rpm" reads as 1186600). Anything
that yields no number normalizes to 0.
"""

import math
import re
from typing import Any

_NON_NUMERIC_RE = re.compile(r"[^\d.]")
_LEADING_FLOAT_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_number(value: Any) -> float:
    """Numeric magnitude of ``value`` after stripping non-numeric characters.

    Unit suffixes, separators and the sign are removed before parsing; a
    second dot ends the number ("1.2.3" reads as 1.2).

    Examples:
        >>> parse_number("1497cc")
        1497.0
        >>> parse_number("18.4 km/l")
        18.4
        >>> parse_number("118 bhp @ 6600rpm")
        1186600.0
        >>> parse_number(None)
        0.0
        >>> parse_number("N/A")
        0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = abs(float(value))
        return 0.0 if math.isnan(number) or math.isinf(number) else number

    digits = _NON_NUMERIC_RE.sub("", str(value))
    match = _LEADING_FLOAT_RE.match(digits)
    if not match:
        return 0.0
    return float(match.group(0))


def guarded_denominator(value: float) -> float:
    """Denominator policy for relative differences: ``max(value, 1)``.

    A reference value that normalized to 0 (missing or unparsable) makes
    the relative diff equal to the candidate's raw value. Scores built on
    that attribute are distorted; this is accepted, not corrected.
    """
    return max(value, 1.0)


def relative_diff(base: float, candidate: float) -> float:
    """``|base - candidate| / max(base, 1)``; may exceed 1."""
    return abs(base - candidate) / guarded_denominator(base)
