"""Round-level summaries: hit chance, outcome spread and coupon classification."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from pool_ev.models import OUTCOMES, ComputedMatch, Outcome, Row

POSITIVE_EV_THRESHOLD = 1.1

CouponType = Literal["favorite", "mixed", "even"]


def hit_probability(rows: Sequence[Row]) -> float:
    """Chance that one of `rows` wins: sum of their joint probabilities."""
    return sum(row.joint_probability for row in rows)


def positive_ev_count(rows: Sequence[Row], threshold: float = POSITIVE_EV_THRESHOLD) -> int:
    return sum(1 for row in rows if row.value_index > threshold)


def outcome_distribution(
    matches: Sequence[ComputedMatch], rows: Sequence[Row]
) -> dict[str, dict[Outcome, int]]:
    """Per match, how many rows pick each outcome."""
    counts: dict[str, dict[Outcome, int]] = {
        computed.id: {outcome: 0 for outcome in OUTCOMES} for computed in matches
    }
    for row in rows:
        for match_id, outcome in row.picks.items():
            if match_id in counts:
                counts[match_id][outcome] += 1
    return counts


def outcome_percentages(
    matches: Sequence[ComputedMatch], rows: Sequence[Row]
) -> dict[str, dict[Outcome, float]]:
    total = len(rows)
    out: dict[str, dict[Outcome, float]] = {}
    for match_id, counts in outcome_distribution(matches, rows).items():
        out[match_id] = {
            outcome: (count / total) * 100.0 if total else 0.0 for outcome, count in counts.items()
        }
    return out


@dataclass(frozen=True)
class RowSetSummary:
    row_count: int
    hit_probability: float
    positive_ev_count: int
    positive_ev_share: float
    total_money_ev: float | None
    mean_money_ev: float | None


def summarize_rows(
    rows: Sequence[Row], *, positive_ev_threshold: float = POSITIVE_EV_THRESHOLD
) -> RowSetSummary:
    positives = positive_ev_count(rows, positive_ev_threshold)
    money = [row.money_ev for row in rows if row.money_ev is not None]
    total_money = sum(money) if money else None
    return RowSetSummary(
        row_count=len(rows),
        hit_probability=hit_probability(rows),
        positive_ev_count=positives,
        positive_ev_share=(positives / len(rows)) * 100.0 if rows else 0.0,
        total_money_ev=total_money,
        mean_money_ev=(total_money / len(rows)) if total_money is not None else None,
    )


@dataclass(frozen=True)
class OutcomeDistribution:
    counts: dict[str, dict[Outcome, int]]
    percentages: dict[str, dict[Outcome, float]]


def summarize_outcomes(
    matches: Sequence[ComputedMatch], rows: Sequence[Row]
) -> OutcomeDistribution:
    """Per-match pick counts and percentages over `rows`."""
    return OutcomeDistribution(
        counts=outcome_distribution(matches, rows),
        percentages=outcome_percentages(matches, rows),
    )


@dataclass(frozen=True)
class CouponTargets:
    rows: str
    max_odds: str
    max_payout: str


_SMALL_COUPON_TARGETS: dict[CouponType, CouponTargets] = {
    "favorite": CouponTargets(rows="50-150", max_odds="2,000-5,000", max_payout="10k-50k"),
    "mixed": CouponTargets(rows="150-400", max_odds="5,000-20,000", max_payout="50k-200k"),
    "even": CouponTargets(rows="400-1,000", max_odds="20,000-100,000", max_payout="200k-1M"),
}

_LARGE_COUPON_TARGETS: dict[CouponType, CouponTargets] = {
    "favorite": CouponTargets(rows="200-500", max_odds="50,000-200,000", max_payout="500k-2M"),
    "mixed": CouponTargets(rows="500-2,000", max_odds="200,000-1M", max_payout="2M-10M"),
    "even": CouponTargets(rows="2,000-10,000", max_odds="1M-10M", max_payout="10M-50M"),
}

SMALL_COUPON_MAX_MATCHES = 10


@dataclass(frozen=True)
class CouponClassification:
    coupon_type: CouponType
    match_count: int
    avg_max_probability: float
    clear_favorites: int
    very_even_matches: int
    targets: CouponTargets


def _favorite_metrics(computed: ComputedMatch) -> tuple[float, float]:
    ordered = sorted(
        (computed.probabilities.get(outcome, 0.0) for outcome in OUTCOMES), reverse=True
    )
    return ordered[0], ordered[0] - ordered[1]


def classify_coupon(matches: Sequence[ComputedMatch]) -> CouponClassification | None:
    """Classify a coupon as favourite-heavy, even or mixed; None when it has no matches.

    A clear favourite has probability >= 0.55 and leads the next outcome by more
    than 0.15. A very even match has no outcome at 0.42 or above.
    """
    if not matches:
        return None
    metrics = [_favorite_metrics(computed) for computed in matches]
    match_count = len(matches)
    clear_favorites = sum(1 for top, gap in metrics if top >= 0.55 and gap > 0.15)
    very_even = sum(1 for top, _gap in metrics if top < 0.42)
    avg_max = sum(top for top, _gap in metrics) / match_count

    coupon_type: CouponType
    if clear_favorites >= match_count * 0.6:
        coupon_type = "favorite"
    elif very_even >= match_count * 0.5 or avg_max < 0.40:
        coupon_type = "even"
    else:
        coupon_type = "mixed"

    table = (
        _SMALL_COUPON_TARGETS if match_count <= SMALL_COUPON_MAX_MATCHES else _LARGE_COUPON_TARGETS
    )
    return CouponClassification(
        coupon_type=coupon_type,
        match_count=match_count,
        avg_max_probability=avg_max,
        clear_favorites=clear_favorites,
        very_even_matches=very_even,
        targets=table[coupon_type],
    )
