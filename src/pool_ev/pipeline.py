"""End-to-end round analysis: normalize, generate, score, price and filter."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from pool_ev.filters import (
    FULL_BAND,
    FilterParams,
    FilterResult,
    apply_filter_chain,
)
from pool_ev.lookup import LookupCoverage, apply_odds_lookup
from pool_ev.models import Advisory, ComputedMatch, Match, OutcomeValues, Row, SelectionSet
from pool_ev.payout import PayoutStats, PoolParams, attach_money_ev, get_adjustment, payout_stats
from pool_ev.pricing import compute_all, match_advisories
from pool_ev.row_builder import (
    calculate_row_count,
    filter_rows_by_min_value_index,
    generate_rows,
    generate_value_rows,
    selection_advisories,
)
from pool_ev.settings import Settings
from pool_ev.summary import (
    CouponClassification,
    OutcomeDistribution,
    RowSetSummary,
    classify_coupon,
    summarize_outcomes,
    summarize_rows,
)

logger = logging.getLogger(__name__)

ADVISORY_POOL_REQUIRED = "pool_required"


@dataclass(frozen=True)
class RoundAnalysis:
    matches: list[ComputedMatch]
    row_count: int
    all_rows: list[Row]
    filtered: FilterResult
    advisories: list[Advisory] = field(default_factory=list)
    pool: PoolParams | None = None
    payout: PayoutStats | None = None
    built_summary: RowSetSummary | None = None
    kept_summary: RowSetSummary | None = None
    outcome_distribution: OutcomeDistribution | None = None
    classification: CouponClassification | None = None
    coverage: LookupCoverage | None = None

    @property
    def kept_rows(self) -> list[Row]:
        return self.filtered.rows

    @property
    def sampled(self) -> bool:
        return self.row_count > len(self.all_rows)


def _needs_pool(filters: FilterParams) -> bool:
    return (
        filters.money_ev_band != FULL_BAND
        or filters.payout_band != FULL_BAND
        or filters.top_n is not None
    )


def analyze_selection(
    matches: Sequence[Match],
    selections: SelectionSet,
    *,
    filters: FilterParams | None = None,
    pool: PoolParams | None = None,
    lookup_odds: Mapping[str, OutcomeValues] | None = None,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> RoundAnalysis:
    """Run the full pipeline for one coupon and selection set.

    Invalid input (unknown match ids, repeated outcomes or match ids) raises;
    missing data and uncovered matches surface as advisories and empty rows.
    """
    settings = settings or Settings()
    filters = filters or FilterParams()
    advisories: list[Advisory] = []

    coverage: LookupCoverage | None = None
    if lookup_odds is not None:
        matches, coverage = apply_odds_lookup(matches, lookup_odds)
        lookup_advisory = coverage.advisory()
        if lookup_advisory is not None:
            advisories.append(lookup_advisory)

    computed = compute_all(matches)
    match_ids = [item.id for item in computed]
    rows = generate_rows(
        computed,
        selections,
        max_rows=settings.max_generated_rows,
        rng=rng if rng is not None else random.Random(settings.sample_seed),
    )
    advisories.extend(match_advisories(computed))
    advisories.extend(
        selection_advisories(computed, selections, max_rows=settings.max_generated_rows)
    )

    adjustment = get_adjustment(settings.winner_adjustment)
    if pool is not None and pool.active:
        rows = attach_money_ev(rows, pool, adjustment=adjustment)
    elif _needs_pool(filters):
        advisories.append(
            Advisory(
                code=ADVISORY_POOL_REQUIRED,
                message="monetary EV filters need a turnover; those stages were skipped",
            )
        )

    filtered = apply_filter_chain(rows, filters)
    row_count = calculate_row_count(selections, match_ids)
    logger.info("built %d rows (space %d), kept %d", len(rows), row_count, len(filtered.rows))
    return RoundAnalysis(
        matches=computed,
        row_count=row_count,
        all_rows=rows,
        filtered=filtered,
        advisories=advisories,
        pool=pool,
        payout=(
            payout_stats(filtered.rows, pool, adjustment=adjustment) if pool is not None else None
        ),
        built_summary=summarize_rows(rows, positive_ev_threshold=settings.positive_ev_threshold),
        kept_summary=summarize_rows(
            filtered.rows, positive_ev_threshold=settings.positive_ev_threshold
        ),
        outcome_distribution=summarize_outcomes(computed, filtered.rows),
        classification=classify_coupon(computed),
        coverage=coverage,
    )


def analyze_round(
    matches: Sequence[Match],
    *,
    min_value_index: float = 1.0,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> tuple[list[Row], list[Row]]:
    """Rows over every priced outcome, and those at or above `min_value_index`."""
    settings = settings or Settings()
    computed = compute_all(matches)
    all_rows = generate_value_rows(
        computed,
        max_rows=settings.max_generated_rows,
        rng=rng if rng is not None else random.Random(settings.sample_seed),
    )
    return all_rows, filter_rows_by_min_value_index(all_rows, min_value_index)
