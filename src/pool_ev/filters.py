"""Ordered percentile filter chain for generated rows."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from pool_ev.errors import PercentileBoundsError
from pool_ev.models import Row

logger = logging.getLogger(__name__)

FULL_BAND: tuple[float, float] = (0.0, 100.0)

STAGE_VALUE_INDEX = "value_index_top_percent"
STAGE_PROBABILITY = "probability_top_percent"
STAGE_MONEY_EV_BAND = "money_ev_band"
STAGE_PAYOUT_BAND = "payout_band"
STAGE_TOP_N = "top_n_money_ev"

SKIP_KEEP_ALL = "keep_all"
SKIP_POOL_REQUIRED = "pool_required"
SKIP_EMPTY = "empty"


def _check_percent(value: float, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise PercentileBoundsError(f"{label} must be a number in [0, 100]")
    if value < 0 or value > 100:
        raise PercentileBoundsError(f"{label} must be in [0, 100], got {value}")
    return float(value)


def _check_band(band: tuple[float, float], label: str) -> tuple[float, float]:
    low = _check_percent(band[0], f"{label} min")
    high = _check_percent(band[1], f"{label} max")
    if low > high:
        raise PercentileBoundsError(f"{label} min percentile {low} exceeds max {high}")
    return low, high


@dataclass(frozen=True)
class FilterParams:
    """Parameters for each chain stage; defaults keep every row."""

    value_keep_percent: float = 100.0
    probability_keep_percent: float = 100.0
    money_ev_band: tuple[float, float] = FULL_BAND
    payout_band: tuple[float, float] = FULL_BAND
    top_n: int | None = None

    def __post_init__(self) -> None:
        _check_percent(self.value_keep_percent, "value_keep_percent")
        _check_percent(self.probability_keep_percent, "probability_keep_percent")
        _check_band(self.money_ev_band, "money_ev_band")
        _check_band(self.payout_band, "payout_band")
        if self.top_n is not None and self.top_n < 0:
            raise ValueError("top_n must be non-negative")


@dataclass(frozen=True)
class StageReport:
    stage: str
    rows_in: int
    rows_out: int
    skipped: str = ""
    low: float | None = None
    high: float | None = None


@dataclass(frozen=True)
class FilterResult:
    rows: list[Row]
    stages: list[StageReport] = field(default_factory=list)

    def stage(self, name: str) -> StageReport | None:
        for report in self.stages:
            if report.stage == name:
                return report
        return None


def _keep_top_percent(
    rows: Sequence[Row], keep_percent: float, key: Callable[[Row], float]
) -> list[Row]:
    if keep_percent >= 100:
        return list(rows)
    ordered = sorted(rows, key=key, reverse=True)
    keep_count = math.ceil((keep_percent / 100.0) * len(ordered))
    return ordered[:keep_count]


def filter_rows_by_value_percentile(rows: Sequence[Row], keep_percent: float) -> list[Row]:
    """Keep the top `keep_percent` percent of rows by value index."""
    keep_percent = _check_percent(keep_percent, "keep_percent")
    return _keep_top_percent(rows, keep_percent, lambda row: row.value_index)


def filter_rows_by_probability_percentile(rows: Sequence[Row], keep_percent: float) -> list[Row]:
    """Keep the top `keep_percent` percent of rows by joint probability."""
    keep_percent = _check_percent(keep_percent, "keep_percent")
    return _keep_top_percent(rows, keep_percent, lambda row: row.joint_probability)


def order_statistic(sorted_values: Sequence[float], percent: float) -> float:
    """Value at index floor(percent/100 * (n-1)) of an ascending sequence."""
    if not sorted_values:
        raise ValueError("order_statistic requires at least one value")
    index = math.floor((percent / 100.0) * (len(sorted_values) - 1))
    return sorted_values[index]


def _money_ev(row: Row) -> float:
    if row.money_ev is None:
        raise ValueError("row has no monetary EV attached")
    return row.money_ev


def _expected_payout(row: Row) -> float:
    if row.expected_payout is None:
        raise ValueError("row has no expected payout attached")
    return row.expected_payout


def _band_bounds(
    rows: Sequence[Row], band: tuple[float, float], value: Callable[[Row], float]
) -> tuple[float, float]:
    values = sorted(value(row) for row in rows)
    return order_statistic(values, band[0]), order_statistic(values, band[1])


def _filter_band(
    rows: Sequence[Row], band: tuple[float, float], value: Callable[[Row], float]
) -> tuple[list[Row], float, float]:
    low, high = _band_bounds(rows, band, value)
    return [row for row in rows if low <= value(row) <= high], low, high


def filter_rows_by_money_ev_band(rows: Sequence[Row], band: tuple[float, float]) -> list[Row]:
    """Keep rows whose monetary EV lies between the band's order statistics."""
    band = _check_band(band, "money_ev_band")
    if not rows:
        return []
    kept, _low, _high = _filter_band(rows, band, _money_ev)
    return kept


def filter_rows_by_payout_band(rows: Sequence[Row], band: tuple[float, float]) -> list[Row]:
    """Keep rows whose expected payout on a win lies between the band's order statistics."""
    band = _check_band(band, "payout_band")
    if not rows:
        return []
    kept, _low, _high = _filter_band(rows, band, _expected_payout)
    return kept


def keep_top_n_by_money_ev(rows: Sequence[Row], top_n: int) -> list[Row]:
    ordered = sorted(rows, key=_money_ev, reverse=True)
    return ordered[: max(0, top_n)]


def apply_filter_chain(rows: Sequence[Row], params: FilterParams) -> FilterResult:
    """Run the five stages in order, each on the previous stage's output.

    The two band stages and the top-N cap need monetary EV on every row; they are
    skipped with reason `pool_required` otherwise.
    """
    current = list(rows)
    stages: list[StageReport] = []

    def _record(
        stage: str,
        rows_in: int,
        *,
        skipped: str = "",
        low: float | None = None,
        high: float | None = None,
    ) -> None:
        stages.append(
            StageReport(
                stage=stage,
                rows_in=rows_in,
                rows_out=len(current),
                skipped=skipped,
                low=low,
                high=high,
            )
        )
        logger.debug("%s: %d -> %d rows %s", stage, rows_in, len(current), skipped)

    for stage, keep_percent, key in (
        (STAGE_VALUE_INDEX, params.value_keep_percent, lambda row: row.value_index),
        (STAGE_PROBABILITY, params.probability_keep_percent, lambda row: row.joint_probability),
    ):
        rows_in = len(current)
        if keep_percent >= 100:
            _record(stage, rows_in, skipped=SKIP_KEEP_ALL)
            continue
        current = _keep_top_percent(current, keep_percent, key)
        _record(stage, rows_in)

    has_money = bool(current) and all(row.has_money for row in current)

    for stage, band, value in (
        (STAGE_MONEY_EV_BAND, params.money_ev_band, _money_ev),
        (STAGE_PAYOUT_BAND, params.payout_band, _expected_payout),
    ):
        rows_in = len(current)
        if band == FULL_BAND:
            _record(stage, rows_in, skipped=SKIP_KEEP_ALL)
            continue
        if not current:
            _record(stage, rows_in, skipped=SKIP_EMPTY)
            continue
        if not has_money:
            logger.warning("%s skipped: rows carry no monetary EV (no pool supplied)", stage)
            _record(stage, rows_in, skipped=SKIP_POOL_REQUIRED)
            continue
        current, low, high = _filter_band(current, band, value)
        _record(stage, rows_in, low=low, high=high)

    rows_in = len(current)
    if params.top_n is None:
        _record(STAGE_TOP_N, rows_in, skipped=SKIP_KEEP_ALL)
    elif not current:
        _record(STAGE_TOP_N, rows_in, skipped=SKIP_EMPTY)
    elif not has_money:
        logger.warning("%s skipped: rows carry no monetary EV (no pool supplied)", STAGE_TOP_N)
        _record(STAGE_TOP_N, rows_in, skipped=SKIP_POOL_REQUIRED)
    else:
        current = keep_top_n_by_money_ev(current, params.top_n)
        _record(STAGE_TOP_N, rows_in)

    return FilterResult(rows=current, stages=stages)
