"""Implied probabilities and public-money differentials per match."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pool_ev.errors import DuplicateMatchError
from pool_ev.models import (
    OUTCOMES,
    Advisory,
    ComputedMatch,
    Match,
    OutcomeValues,
    ProbabilitySource,
)
from pool_ev.odds_math import normalize_probs, raw_prob_from_decimal

logger = logging.getLogger(__name__)

ADVISORY_MISSING_PROBABILITY = "missing_probability"
ADVISORY_MISSING_SHARE = "missing_share"


def _resolve_odds(match: Match) -> tuple[OutcomeValues, ProbabilitySource]:
    raw: OutcomeValues = {}
    primary_used = False
    fallback_used = False
    for outcome in OUTCOMES:
        primary = raw_prob_from_decimal(match.odds.get(outcome))
        if primary is not None:
            raw[outcome] = primary
            primary_used = True
            continue
        if match.fallback_odds:
            secondary = raw_prob_from_decimal(match.fallback_odds.get(outcome))
            if secondary is not None:
                raw[outcome] = secondary
                fallback_used = True
    if primary_used and fallback_used:
        return raw, "mixed"
    if primary_used:
        return raw, "odds"
    if fallback_used:
        return raw, "fallback_odds"
    return raw, "none"


def _share_probs(match: Match) -> OutcomeValues:
    raw: OutcomeValues = {}
    for outcome in OUTCOMES:
        share = match.shares.get(outcome)
        if share is not None and share > 0:
            raw[outcome] = share
    return raw


def implied_probabilities(match: Match) -> tuple[OutcomeValues, ProbabilitySource]:
    """Normalized implied probability per outcome and where it came from.

    Primary odds win per outcome, then fallback odds. When neither source prices
    any outcome the public-money shares are used as fair odds. An empty mapping
    means the match cannot be scored.
    """
    raw, source = _resolve_odds(match)
    if not raw:
        raw = _share_probs(match)
        source = "public_share" if raw else "none"
    probabilities = normalize_probs(raw)
    if not probabilities:
        source = "none"
    return probabilities, source


def differentials(probabilities: OutcomeValues, shares: OutcomeValues) -> OutcomeValues:
    """Implied probability minus public-money share, where both exist."""
    out: OutcomeValues = {}
    for outcome in OUTCOMES:
        probability = probabilities.get(outcome)
        share = shares.get(outcome)
        if probability is None or share is None:
            continue
        out[outcome] = probability - share
    return out


def compute_match(match: Match) -> ComputedMatch:
    probabilities, source = implied_probabilities(match)
    return ComputedMatch(
        match=match,
        probabilities=probabilities,
        differentials=differentials(probabilities, match.shares),
        probability_source=source,
    )


def compute_all(matches: Iterable[Match]) -> list[ComputedMatch]:
    """Compute every match, rejecting repeated identifiers."""
    computed: list[ComputedMatch] = []
    seen: set[str] = set()
    for match in matches:
        if match.id in seen:
            raise DuplicateMatchError(f"duplicate match id: {match.id}")
        seen.add(match.id)
        computed.append(compute_match(match))
    return computed


def match_advisories(matches: Iterable[ComputedMatch]) -> list[Advisory]:
    """Advisories for matches that cannot be fully scored."""
    advisories: list[Advisory] = []
    for computed in matches:
        if not computed.has_probabilities():
            logger.warning("match %s has no usable odds or public-money share", computed.id)
            advisories.append(
                Advisory(
                    code=ADVISORY_MISSING_PROBABILITY,
                    message=f"{computed.id}: no usable odds; picks score as 1.0",
                    match_id=computed.id,
                )
            )
        missing_shares = [outcome for outcome in OUTCOMES if outcome not in computed.shares]
        if missing_shares:
            advisories.append(
                Advisory(
                    code=ADVISORY_MISSING_SHARE,
                    message=f"{computed.id}: no public-money share for {','.join(missing_shares)}",
                    match_id=computed.id,
                )
            )
    return advisories
