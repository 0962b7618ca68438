"""
Pagination Window
Turns untrusted limit/skip query values into a bounded query window.
"""

import math
import sys
from dataclasses import dataclass
from typing import Optional, Union

RawParam = Optional[Union[str, int, float]]


@dataclass(frozen=True)
class PageWindow:
    """Clamped window applied to a catalog query."""

    limit: int
    skip: int
    max_limit: int
    max_skip: int


def parse_number(raw: RawParam) -> Optional[int]:
    """
    Parse a query value the lenient way browsers' ``Number()`` does.

    Returns None for absent, blank, non-numeric or NaN values. Fractions
    are truncated toward zero. Infinite values (``"Infinity"``, or an
    overflow such as ``"1e400"``) become ``±sys.maxsize`` so callers clamp
    them like any other out-of-range number.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        return None

    if isinstance(raw, str):
        raw = raw.strip()
        # float() accepts digit separators, query strings should not
        if not raw or "_" in raw:
            return None
        # float() also takes "inf" and "nan" in any case; Number() only "Infinity"
        word = raw.lstrip("+-")
        if word.isalpha() and word != "Infinity":
            return None
        try:
            value = float(raw)
        except ValueError:
            return None
    else:
        value = float(raw)

    if math.isnan(value):
        return None
    if math.isinf(value):
        return sys.maxsize if value > 0 else -sys.maxsize

    return int(value)


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def resolve_window(total: int, limit: RawParam, skip: RawParam, max_limit: int) -> PageWindow:
    """
    Compute a safe page window.

    Malformed or out-of-range values are clamped, never rejected:
    - limit: missing, non-numeric or zero means ``max_limit``; otherwise
      clamped into [0, max_limit]
    - skip: missing or non-numeric means 0; otherwise clamped into
      [0, max(total - 1, 0)]

    Args:
        total: Current record count
        limit: Requested page size (untrusted)
        skip: Requested offset (untrusted)
        max_limit: Configured page size ceiling

    Returns:
        PageWindow with the effective limit/skip and the bounds
    """
    max_limit = max(max_limit, 0)
    max_skip = max(total - 1, 0)

    requested_limit = parse_number(limit)
    effective_limit = requested_limit if requested_limit else max_limit
    effective_limit = clamp(effective_limit, 0, max_limit)

    requested_skip = parse_number(skip)
    effective_skip = requested_skip if requested_skip is not None else 0
    effective_skip = clamp(effective_skip, 0, max_skip)

    return PageWindow(
        limit=effective_limit,
        skip=effective_skip,
        max_limit=max_limit,
        max_skip=max_skip,
    )
