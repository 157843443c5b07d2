from __future__ import annotations

from pool_ev.lookup import ADVISORY_PARTIAL_COVERAGE, apply_odds_lookup
from pool_ev.models import Match
from pool_ev.pricing import compute_all


def _matches() -> list[Match]:
    return [
        Match(id="M1", home="A", away="B", odds={"1": 2.0, "X": 3.0, "2": 4.0}),
        Match(id="M2", home="C", away="D", fallback_odds={"1": 2.2, "X": 3.1, "2": 3.3}),
        Match(id="M3", home="E", away="F", shares={"1": 0.5, "X": 0.3, "2": 0.2}),
    ]


def test_lookup_replaces_found_matches_only() -> None:
    updated, coverage = apply_odds_lookup(
        _matches(), {"M1": {"1": 1.8, "X": 3.5, "2": 4.5}, "M9": {"1": 2.0}}
    )

    assert updated[0].odds == {"1": 1.8, "X": 3.5, "2": 4.5}
    assert updated[1] == _matches()[1]
    assert coverage.found == 1
    assert coverage.total == 3
    assert coverage.missing_ids == ("M2", "M3")
    advisory = coverage.advisory()
    assert advisory is not None
    assert advisory.code == ADVISORY_PARTIAL_COVERAGE


def test_lookup_ignores_unusable_prices() -> None:
    updated, coverage = apply_odds_lookup(_matches(), {"M1": {"1": 0.0, "X": -2.0}})

    assert updated[0].odds == {"1": 2.0, "X": 3.0, "2": 4.0}
    assert "M1" in coverage.missing_ids


def test_unmatched_games_fall_back_during_normalization() -> None:
    updated, _coverage = apply_odds_lookup(_matches(), {"M1": {"1": 1.8, "X": 3.5, "2": 4.5}})

    computed = compute_all(updated)

    assert [item.probability_source for item in computed] == [
        "odds",
        "fallback_odds",
        "public_share",
    ]


def test_full_coverage_has_no_advisory() -> None:
    replacements = {match.id: {"1": 2.0, "X": 3.0, "2": 4.0} for match in _matches()}

    _updated, coverage = apply_odds_lookup(_matches(), replacements)

    assert coverage.complete is True
    assert coverage.advisory() is None
