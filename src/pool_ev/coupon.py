"""JSON coupon documents: matches, optional selections and round metadata."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pool_ev.errors import CouponFormatError
from pool_ev.models import Match, Outcome, OutcomeValues, parse_outcome
from pool_ev.util.parsing import parse_share, safe_float


@dataclass(frozen=True)
class Coupon:
    matches: list[Match]
    selections: dict[str, list[Outcome]] = field(default_factory=dict)
    sport: str = ""
    round_id: str = ""
    lookup_odds: dict[str, OutcomeValues] = field(default_factory=dict)


def _expect_dict(value: Any, context: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise CouponFormatError(f"{context} must be an object")
    return value


def _expect_list(value: Any, context: str) -> list[Any]:
    if not isinstance(value, list):
        raise CouponFormatError(f"{context} must be a list")
    return value


def _outcome_key(raw: Any, context: str) -> Outcome:
    outcome = parse_outcome(str(raw))
    if outcome is None:
        raise CouponFormatError(f"{context}: unknown outcome {raw!r}")
    return outcome


def _odds_map(value: Any, context: str) -> OutcomeValues:
    if value is None:
        return {}
    out: OutcomeValues = {}
    for raw_key, raw_value in _expect_dict(value, context).items():
        odds = safe_float(raw_value)
        if odds is None:
            continue
        out[_outcome_key(raw_key, context)] = odds
    return out


def _share_map(value: Any, context: str) -> OutcomeValues:
    if value is None:
        return {}
    out: OutcomeValues = {}
    for raw_key, raw_value in _expect_dict(value, context).items():
        share = parse_share(raw_value)
        if share is None:
            continue
        out[_outcome_key(raw_key, context)] = share
    return out


def _parse_match(value: Any, index: int) -> Match:
    context = f"matches[{index}]"
    item = _expect_dict(value, context)
    match_id = str(item.get("id", "")).strip() or f"M{index + 1}"
    fallback = item.get("fallback_odds", item.get("svs_odds"))
    return Match(
        id=match_id,
        home=str(item.get("home", "")),
        away=str(item.get("away", "")),
        odds=_odds_map(item.get("odds"), f"{context}.odds"),
        shares=_share_map(item.get("shares", item.get("streck")), f"{context}.shares"),
        fallback_odds=_odds_map(fallback, f"{context}.fallback_odds") if fallback else None,
    )


def _parse_selections(value: Any) -> dict[str, list[Outcome]]:
    if value is None:
        return {}
    out: dict[str, list[Outcome]] = {}
    for match_id, raw in _expect_dict(value, "selections").items():
        if isinstance(raw, str):
            raw = list(raw.replace(",", "").replace(" ", ""))
        items = _expect_list(raw, f"selections.{match_id}")
        out[str(match_id)] = [_outcome_key(item, f"selections.{match_id}") for item in items]
    return out


def parse_coupon(payload: Any) -> Coupon:
    """Build a coupon from a decoded JSON document."""
    doc = _expect_dict(payload, "coupon")
    matches = [
        _parse_match(item, index)
        for index, item in enumerate(_expect_list(doc.get("matches", []), "matches"))
    ]
    lookup: dict[str, OutcomeValues] = {}
    for match_id, odds in _expect_dict(doc.get("lookup_odds", {}), "lookup_odds").items():
        lookup[str(match_id)] = _odds_map(odds, f"lookup_odds.{match_id}")
    return Coupon(
        matches=matches,
        selections=_parse_selections(doc.get("selections")),
        sport=str(doc.get("sport", "")),
        round_id=str(doc.get("round", "")),
        lookup_odds=lookup,
    )


def load_coupon(path: Path) -> Coupon:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CouponFormatError(f"invalid coupon JSON in {path}: {exc}") from exc
    return parse_coupon(payload)
