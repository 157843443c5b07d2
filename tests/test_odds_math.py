from __future__ import annotations

import pytest

from pool_ev.odds_math import normalize_probs, raw_prob_from_decimal, usable_odds


@pytest.mark.parametrize(
    ("decimal_odds", "expected"),
    [
        (2.0, 0.5),
        (4.0, 0.25),
        (1.0, None),
        (0.0, None),
        (-3.0, None),
        (None, None),
    ],
)
def test_raw_prob_from_decimal(decimal_odds: float | None, expected: float | None) -> None:
    assert raw_prob_from_decimal(decimal_odds) == expected


def test_usable_odds_rejects_non_paying_prices() -> None:
    assert usable_odds(1.01) == 1.01
    assert usable_odds(1.0) is None
    assert usable_odds(0.5) is None


def test_normalize_probs_sums_to_one() -> None:
    normalized = normalize_probs({"1": 0.5, "X": 1 / 3, "2": 0.25})

    assert sum(normalized.values()) == pytest.approx(1.0, abs=1e-9)
    assert normalized["1"] == pytest.approx(0.461538, abs=1e-6)
    assert normalized["X"] == pytest.approx(0.307692, abs=1e-6)
    assert normalized["2"] == pytest.approx(0.230769, abs=1e-6)


def test_normalize_probs_handles_empty_and_zero_total() -> None:
    assert normalize_probs({}) == {}
    assert normalize_probs({"1": 0.0}) == {}
