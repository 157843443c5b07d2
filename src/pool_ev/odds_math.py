"""Shared odds conversion and normalization helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

K = TypeVar("K")


def usable_odds(decimal_odds: float | None) -> float | None:
    """Return decimal odds when they pay more than the stake, else None."""
    if decimal_odds is None or decimal_odds <= 1.0:
        return None
    return float(decimal_odds)


def raw_prob_from_decimal(decimal_odds: float | None) -> float | None:
    """Convert decimal odds to raw (vig-inclusive) implied probability."""
    odds = usable_odds(decimal_odds)
    if odds is None:
        return None
    return 1.0 / odds


def normalize_probs(raw: Mapping[K, float]) -> dict[K, float]:
    """Scale raw probabilities so the present values sum to 1.0.

    An empty input or a non-positive total yields an empty mapping.
    """
    total = sum(raw.values())
    if total <= 0:
        return {}
    return {key: value / total for key, value in raw.items()}
