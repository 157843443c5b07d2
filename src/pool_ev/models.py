"""Coupon, match and row value types."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Literal

Outcome = Literal["1", "X", "2"]
OUTCOMES: tuple[Outcome, ...] = ("1", "X", "2")

ProbabilitySource = Literal["odds", "fallback_odds", "mixed", "public_share", "none"]

OutcomeValues = dict[Outcome, float]
SelectionSet = Mapping[str, Sequence[Outcome]]

_OUTCOME_ALIASES: dict[str, Outcome] = {
    "1": "1",
    "x": "X",
    "2": "2",
    "home": "1",
    "draw": "X",
    "away": "2",
}


def parse_outcome(value: str) -> Outcome | None:
    """Resolve `1/X/2` or `home/draw/away` tags to an outcome."""
    return _OUTCOME_ALIASES.get(str(value).strip().lower())


def match_id_sort_key(match_id: str) -> tuple[tuple[int, int | str], ...]:
    """Sort key that orders `M2` before `M10`."""
    parts = re.split(r"(\d+)", match_id)
    return tuple((0, int(part)) if part.isdecimal() else (1, part) for part in parts if part)


@dataclass(frozen=True)
class Match:
    """One coupon match as supplied by the coupon source."""

    id: str
    home: str
    away: str
    odds: OutcomeValues = field(default_factory=dict)
    shares: OutcomeValues = field(default_factory=dict)
    fallback_odds: OutcomeValues | None = None


@dataclass(frozen=True)
class ComputedMatch:
    """Match with normalized implied probabilities and value differentials."""

    match: Match
    probabilities: OutcomeValues
    differentials: OutcomeValues
    probability_source: ProbabilitySource

    @property
    def id(self) -> str:
        return self.match.id

    @property
    def shares(self) -> OutcomeValues:
        return self.match.shares

    def has_probabilities(self) -> bool:
        return bool(self.probabilities)


@dataclass(frozen=True)
class Row:
    """One ticket: a single outcome per match plus its scores.

    The three money fields are only set once a pool has been supplied.
    """

    picks: dict[str, Outcome]
    joint_probability: float
    joint_share: float
    value_index: float
    money_ev: float | None = None
    expected_payout: float | None = None
    expected_winners: float | None = None

    def key(self, match_ids: tuple[str, ...] | list[str]) -> str:
        """Canonical key: picks concatenated in match order."""
        return "-".join(self.picks[match_id] for match_id in match_ids)

    def sorted_picks(self) -> dict[str, Outcome]:
        ordered = sorted(self.picks, key=match_id_sort_key)
        return {match_id: self.picks[match_id] for match_id in ordered}

    @property
    def has_money(self) -> bool:
        return self.money_ev is not None


@dataclass(frozen=True)
class Advisory:
    """Recoverable condition surfaced alongside results rather than raised."""

    code: str
    message: str
    match_id: str = ""
