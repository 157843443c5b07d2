"""Merge odds returned by an external lookup into coupon matches."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace

from pool_ev.models import Advisory, Match, OutcomeValues
from pool_ev.odds_math import usable_odds

logger = logging.getLogger(__name__)

ADVISORY_PARTIAL_COVERAGE = "partial_odds_coverage"


@dataclass(frozen=True)
class LookupCoverage:
    found: int
    total: int
    missing_ids: tuple[str, ...]

    @property
    def complete(self) -> bool:
        return self.found == self.total

    def advisory(self) -> Advisory | None:
        if self.complete:
            return None
        if self.found == 0:
            message = "odds lookup matched no games; coupon odds or public shares are used"
        else:
            message = (
                f"odds found for {self.found} of {self.total} matches; "
                "the rest keep coupon odds or public shares"
            )
        return Advisory(code=ADVISORY_PARTIAL_COVERAGE, message=message)


def apply_odds_lookup(
    matches: Sequence[Match], replacements: Mapping[str, OutcomeValues]
) -> tuple[list[Match], LookupCoverage]:
    """Replace primary odds for matches found by the lookup.

    Matches without a usable replacement keep their current odds; the
    normalizer then falls back to fallback odds or public shares.
    """
    updated: list[Match] = []
    missing: list[str] = []
    for match in matches:
        raw = replacements.get(match.id)
        odds: OutcomeValues = {}
        if raw:
            for outcome, value in raw.items():
                price = usable_odds(value)
                if price is not None:
                    odds[outcome] = price
        if not odds:
            missing.append(match.id)
            updated.append(match)
            continue
        updated.append(replace(match, odds=odds))
    coverage = LookupCoverage(
        found=len(matches) - len(missing),
        total=len(matches),
        missing_ids=tuple(missing),
    )
    if missing:
        logger.warning(
            "odds lookup covered %d of %d matches (missing: %s)",
            coverage.found,
            coverage.total,
            ",".join(missing),
        )
    return updated, coverage
