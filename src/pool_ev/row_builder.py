"""Row generation and scoring from per-match selections."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Iterable, Sequence
from itertools import product

from pool_ev.errors import InvalidSelectionError
from pool_ev.models import (
    OUTCOMES,
    Advisory,
    ComputedMatch,
    Outcome,
    Row,
    SelectionSet,
)

logger = logging.getLogger(__name__)

MAX_GENERATED_ROWS = 50_000

ADVISORY_UNSCORED_PICK = "unscored_pick"
ADVISORY_SAMPLED = "sampled"


def calculate_row_count(
    selections: SelectionSet, match_ids: Sequence[str] | None = None
) -> int:
    """Size of the row space: product of selection sizes, 0 if any match is uncovered."""
    keys = list(match_ids) if match_ids is not None else list(selections.keys())
    if not keys:
        return 0
    return math.prod(len(selections.get(match_id, ())) for match_id in keys)


def score_picks(
    matches: Iterable[ComputedMatch], picks: dict[str, Outcome]
) -> tuple[float, float, float]:
    """Return (joint probability, joint share, value index) for one set of picks.

    Picks without a probability or share contribute a factor of 1.0.
    """
    joint_probability = 1.0
    joint_share = 1.0
    for computed in matches:
        outcome = picks.get(computed.id)
        if outcome is None:
            continue
        probability = computed.probabilities.get(outcome)
        if probability is not None:
            joint_probability *= probability
        share = computed.shares.get(outcome)
        if share is not None:
            joint_share *= share
    value_index = joint_probability / joint_share if joint_share > 0 else 0.0
    return joint_probability, joint_share, value_index


def score_row(matches: Sequence[ComputedMatch], picks: dict[str, Outcome]) -> Row:
    joint_probability, joint_share, value_index = score_picks(matches, picks)
    return Row(
        picks=picks,
        joint_probability=joint_probability,
        joint_share=joint_share,
        value_index=value_index,
    )


def validate_selections(matches: Sequence[ComputedMatch], selections: SelectionSet) -> None:
    """Reject selections that reference unknown matches or repeat an outcome."""
    known = {computed.id for computed in matches}
    for match_id, outcomes in selections.items():
        if match_id not in known:
            raise InvalidSelectionError(f"selection references unknown match id: {match_id}")
        for outcome in outcomes:
            if outcome not in OUTCOMES:
                raise InvalidSelectionError(f"{match_id}: unknown outcome {outcome!r}")
        if len(set(outcomes)) != len(outcomes):
            raise InvalidSelectionError(f"{match_id}: outcome selected more than once")


def _expand(
    matches: Sequence[ComputedMatch],
    match_ids: list[str],
    choices: list[tuple[Outcome, ...]],
    *,
    max_rows: int,
    rng: random.Random,
) -> list[Row]:
    total = math.prod(len(options) for options in choices)
    if total <= max_rows:
        logger.debug("expanding %d combinations exhaustively", total)
        return [
            score_row(matches, dict(zip(match_ids, combination, strict=True)))
            for combination in product(*choices)
        ]

    logger.debug("sampling %d of %d combinations", max_rows, total)
    sizes = [len(options) for options in choices]
    seen: set[tuple[int, ...]] = set()
    rows: list[Row] = []
    # max_rows < total here, so the loop always reaches its target.
    while len(rows) < max_rows:
        indices = tuple(rng.randrange(size) for size in sizes)
        if indices in seen:
            continue
        seen.add(indices)
        picks = {
            match_id: options[index]
            for match_id, options, index in zip(match_ids, choices, indices, strict=True)
        }
        rows.append(score_row(matches, picks))
    return rows


def generate_rows(
    matches: Sequence[ComputedMatch],
    selections: SelectionSet,
    *,
    max_rows: int = MAX_GENERATED_ROWS,
    seed: int | None = None,
    rng: random.Random | None = None,
) -> list[Row]:
    """Build every row of the selection cross-product.

    Match order in `matches` and outcome order in each selection define the row
    order. Spaces larger than `max_rows` are sampled uniformly without
    replacement down to exactly `max_rows` distinct rows. Any uncovered match
    yields an empty list.
    """
    validate_selections(matches, selections)
    if max_rows <= 0:
        raise ValueError("max_rows must be positive")
    if not matches:
        return []
    match_ids = [computed.id for computed in matches]
    choices: list[tuple[Outcome, ...]] = []
    for match_id in match_ids:
        outcomes = tuple(selections.get(match_id, ()))
        if not outcomes:
            return []
        choices.append(outcomes)
    return _expand(
        matches,
        match_ids,
        choices,
        max_rows=max_rows,
        rng=rng if rng is not None else random.Random(seed),
    )


def value_outcomes(computed: ComputedMatch) -> tuple[Outcome, ...]:
    """Outcomes that carry both an implied probability and a public-money share."""
    return tuple(
        outcome
        for outcome in OUTCOMES
        if outcome in computed.probabilities and outcome in computed.shares
    )


def generate_value_rows(
    matches: Sequence[ComputedMatch],
    *,
    max_rows: int = MAX_GENERATED_ROWS,
    seed: int | None = None,
    rng: random.Random | None = None,
) -> list[Row]:
    """Rows over every fully priced outcome; matches with none are left out of the picks."""
    match_ids: list[str] = []
    choices: list[tuple[Outcome, ...]] = []
    for computed in matches:
        outcomes = value_outcomes(computed)
        if outcomes:
            match_ids.append(computed.id)
            choices.append(outcomes)
    if not choices:
        return []
    return _expand(
        matches,
        match_ids,
        choices,
        max_rows=max_rows,
        rng=rng if rng is not None else random.Random(seed),
    )


def filter_rows_by_min_value_index(rows: Iterable[Row], min_value_index: float) -> list[Row]:
    return [row for row in rows if row.value_index >= min_value_index]


def is_sampled(selections: SelectionSet, match_ids: Sequence[str], max_rows: int) -> bool:
    return calculate_row_count(selections, match_ids) > max_rows


def selection_advisories(
    matches: Sequence[ComputedMatch],
    selections: SelectionSet,
    *,
    max_rows: int = MAX_GENERATED_ROWS,
) -> list[Advisory]:
    """Advisories for selected outcomes that score as identity and for sampled spaces."""
    advisories: list[Advisory] = []
    for computed in matches:
        unscored = [
            outcome
            for outcome in selections.get(computed.id, ())
            if outcome not in computed.probabilities
        ]
        if unscored:
            advisories.append(
                Advisory(
                    code=ADVISORY_UNSCORED_PICK,
                    message=(
                        f"{computed.id}: no implied probability for {','.join(unscored)}; "
                        "joint probability is biased upward"
                    ),
                    match_id=computed.id,
                )
            )
    match_ids = [computed.id for computed in matches]
    if is_sampled(selections, match_ids, max_rows):
        total = calculate_row_count(selections, match_ids)
        advisories.append(
            Advisory(
                code=ADVISORY_SAMPLED,
                message=f"{total} combinations sampled down to {max_rows} distinct rows",
            )
        )
    return advisories
