"""Pool payout and monetary EV estimates for generated rows."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Protocol

from pool_ev.models import Row

PAYOUT_RETENTION = 0.70
ROW_STAKE = 1.0


@dataclass(frozen=True)
class PoolParams:
    """Pool size inputs: total stake volume (one unit per row) plus bonus money."""

    turnover: float
    bonus: float = 0.0
    retention: float = PAYOUT_RETENTION
    stake: float = ROW_STAKE

    def __post_init__(self) -> None:
        if self.turnover < 0:
            raise ValueError("turnover must be non-negative")
        if self.bonus < 0:
            raise ValueError("bonus must be non-negative")
        if not 0 < self.retention <= 1:
            raise ValueError("retention must be in (0, 1]")

    @property
    def pool(self) -> float:
        return (self.turnover * self.retention) + self.bonus

    @property
    def active(self) -> bool:
        return self.turnover > 0


class WinnerAdjustment(Protocol):
    """Maps a raw expected co-winner count to the count used for payouts."""

    name: str

    def adjust(self, expected_winners: float) -> float:
        raise NotImplementedError


@dataclass(frozen=True)
class GraduatedSafetyMultiplier:
    """Inflate small co-winner expectations so rare rows are not overvalued."""

    name: str = "graduated"

    def adjust(self, expected_winners: float) -> float:
        if expected_winners < 0.5:
            return max(1.0, expected_winners * 1.5)
        if expected_winners < 1:
            return max(1.0, expected_winners * 1.2)
        if expected_winners < 3:
            return expected_winners * 1.2
        return expected_winners


@dataclass(frozen=True)
class RawExpectation:
    """No adjustment beyond requiring at least one winner."""

    name: str = "raw"

    def adjust(self, expected_winners: float) -> float:
        return max(1.0, expected_winners)


DEFAULT_ADJUSTMENT = GraduatedSafetyMultiplier()


def _adjustments() -> dict[str, WinnerAdjustment]:
    plugins: Iterable[WinnerAdjustment] = [GraduatedSafetyMultiplier(), RawExpectation()]
    return {plugin.name: plugin for plugin in plugins}


def get_adjustment(name: str) -> WinnerAdjustment:
    registry = _adjustments()
    plugin = registry.get(name.strip().lower())
    if plugin is None:
        options = ",".join(sorted(registry))
        raise ValueError(f"unknown winner adjustment: {name} (options: {options})")
    return plugin


@dataclass(frozen=True)
class RowPayout:
    expected_winners: float
    adjusted_winners: float
    expected_payout: float
    money_ev: float


def estimate_row_payout(
    row: Row,
    params: PoolParams,
    *,
    adjustment: WinnerAdjustment = DEFAULT_ADJUSTMENT,
) -> RowPayout:
    """Expected co-winners, payout per winner (capped at the pool) and monetary EV."""
    pool = params.pool
    expected_winners = params.turnover * row.joint_share
    adjusted = adjustment.adjust(expected_winners)
    payout = pool if adjusted <= 0 else min(pool / adjusted, pool)
    money_ev = (payout * row.joint_probability) - params.stake
    return RowPayout(
        expected_winners=expected_winners,
        adjusted_winners=adjusted,
        expected_payout=payout,
        money_ev=money_ev,
    )


def attach_money_ev(
    rows: Iterable[Row],
    params: PoolParams,
    *,
    adjustment: WinnerAdjustment = DEFAULT_ADJUSTMENT,
) -> list[Row]:
    """Return copies of `rows` carrying monetary EV, payout and co-winner fields."""
    out: list[Row] = []
    for row in rows:
        estimate = estimate_row_payout(row, params, adjustment=adjustment)
        out.append(
            replace(
                row,
                money_ev=estimate.money_ev,
                expected_payout=estimate.expected_payout,
                expected_winners=estimate.expected_winners,
            )
        )
    return out


@dataclass(frozen=True)
class PayoutStats:
    pool: float
    avg_payout: float
    min_payout: float
    max_payout: float
    max_odds: float


def payout_stats(
    rows: Sequence[Row],
    params: PoolParams,
    *,
    adjustment: WinnerAdjustment = DEFAULT_ADJUSTMENT,
) -> PayoutStats | None:
    """Aggregate payout figures for a row set; None without rows or pool."""
    if not rows or not params.active:
        return None
    payouts = [
        estimate_row_payout(row, params, adjustment=adjustment).expected_payout for row in rows
    ]
    valid = [value for value in payouts if value > 0 and math.isfinite(value)]
    if not valid:
        return None
    lowest_probability = min(row.joint_probability for row in rows)
    return PayoutStats(
        pool=params.pool,
        avg_payout=sum(valid) / len(valid),
        min_payout=min(valid),
        max_payout=max(valid),
        max_odds=(1.0 / lowest_probability) if lowest_probability > 0 else 0.0,
    )
