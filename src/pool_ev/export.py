"""Flat row records and tables handed to export collaborators."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import polars as pl

from pool_ev.models import Row, match_id_sort_key

SCORE_COLUMNS: tuple[str, ...] = ("joint_probability", "joint_share", "value_index")
MONEY_COLUMNS: tuple[str, ...] = ("money_ev", "expected_payout", "expected_winners")
VALUE_INDEX_DECIMALS = 3


def row_record(row: Row, match_ids: Sequence[str] | None = None) -> dict[str, Any]:
    """Picks sorted by match id followed by the score fields.

    With `match_ids` there is one pick column per listed match, sorted by id, and a
    match the row does not cover gets an empty pick. Money fields are included only
    when the row carries them.
    """
    if match_ids is None:
        record: dict[str, Any] = dict(row.sorted_picks())
    else:
        record = {
            match_id: row.picks.get(match_id, "")
            for match_id in sorted(match_ids, key=match_id_sort_key)
        }
    record["joint_probability"] = row.joint_probability
    record["joint_share"] = row.joint_share
    record["value_index"] = row.value_index
    if row.has_money:
        record["money_ev"] = row.money_ev
        record["expected_payout"] = row.expected_payout
        record["expected_winners"] = row.expected_winners
    return record


def _match_columns(rows: Sequence[Row]) -> list[str]:
    ids: set[str] = set()
    for row in rows:
        ids.update(row.picks)
    return sorted(ids, key=match_id_sort_key)


def rows_frame(rows: Sequence[Row]) -> pl.DataFrame:
    """One column per match (sorted by id), then score and money columns."""
    match_columns = _match_columns(rows)
    with_money = bool(rows) and all(row.has_money for row in rows)
    score_columns = list(SCORE_COLUMNS) + (list(MONEY_COLUMNS) if with_money else [])
    schema: dict[str, Any] = {column: pl.Utf8 for column in match_columns}
    schema.update({column: pl.Float64 for column in score_columns})
    data: dict[str, list[Any]] = {column: [] for column in schema}
    for row in rows:
        for column in match_columns:
            data[column].append(row.picks.get(column, ""))
        data["joint_probability"].append(row.joint_probability)
        data["joint_share"].append(row.joint_share)
        data["value_index"].append(row.value_index)
        if with_money:
            data["money_ev"].append(row.money_ev)
            data["expected_payout"].append(row.expected_payout)
            data["expected_winners"].append(row.expected_winners)
    return pl.DataFrame(data, schema=schema)


def _fixed_decimals(column: str, decimals: int) -> pl.Expr:
    return pl.col(column).map_elements(
        lambda value: f"{value:.{decimals}f}", return_dtype=pl.Utf8
    )


def rows_to_csv(rows: Sequence[Row], *, float_precision: int = 6) -> str:
    """CSV text: value index at 3 decimals, other scores at `float_precision`."""
    if not rows:
        return ""
    frame = rows_frame(rows).with_columns(_fixed_decimals("value_index", VALUE_INDEX_DECIMALS))
    return frame.write_csv(float_precision=float_precision)
