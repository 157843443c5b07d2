"""Tolerant number parsing for coupon documents."""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    """Coupon number as float: `2.35`, `"2,35"`, `"1 234,5"`; None when unusable.

    Booleans, blanks and non-finite values (`nan`, `inf`) are rejected.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = "".join(value.split()).replace(",", ".")
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_share(value: Any) -> float | None:
    """Parse a public-money share given as a fraction or a percentage.

    Values above 1 are read as percentages (`55` -> 0.55).
    """
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    share = safe_float(value)
    if share is None or share < 0 or share > 100:
        return None
    if share > 1:
        return share / 100.0
    return share
