from __future__ import annotations

import json
from pathlib import Path

import pytest

from pool_ev.coupon import load_coupon, parse_coupon
from pool_ev.errors import CouponFormatError


def _payload() -> dict[str, object]:
    return {
        "sport": "Topptipset",
        "round": 3825,
        "matches": [
            {
                "id": "M1",
                "home": "Alpha",
                "away": "Beta",
                "odds": {"1": "2,10", "x": 3.4, "2": 3.6},
                "streck": {"1": 48, "X": 27, "2": 25},
            },
            {
                "home": "Gamma",
                "away": "Delta",
                "odds": {"home": 1.9},
                "svs_odds": {"1": 1.95, "X": 3.5, "2": 4.1},
                "shares": {"1": 0.55, "X": 0.25, "2": 0.2},
            },
        ],
        "selections": {"M1": ["1", "X"], "M2": "12"},
        "lookup_odds": {"M2": {"1": 1.85, "X": 3.6, "2": 4.4}},
    }


def test_parse_coupon_normalizes_inputs() -> None:
    coupon = parse_coupon(_payload())

    assert coupon.sport == "Topptipset"
    assert coupon.round_id == "3825"
    first, second = coupon.matches
    assert first.odds == {"1": 2.1, "X": 3.4, "2": 3.6}
    assert first.shares == pytest.approx({"1": 0.48, "X": 0.27, "2": 0.25})
    assert first.fallback_odds is None
    assert second.id == "M2"
    assert second.odds == {"1": 1.9}
    assert second.fallback_odds == {"1": 1.95, "X": 3.5, "2": 4.1}
    assert coupon.selections == {"M1": ["1", "X"], "M2": ["1", "2"]}
    assert coupon.lookup_odds["M2"]["2"] == 4.4


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"matches": {}},
        {"matches": [{"id": "M1", "odds": {"4": 2.0}}]},
        {"matches": [], "selections": {"M1": ["1", "Y"]}},
    ],
)
def test_parse_coupon_rejects_malformed_documents(payload: object) -> None:
    with pytest.raises(CouponFormatError):
        parse_coupon(payload)


def test_load_coupon_reads_json(tmp_path: Path) -> None:
    path = tmp_path / "coupon.json"
    path.write_text(json.dumps(_payload()), encoding="utf-8")

    coupon = load_coupon(path)

    assert len(coupon.matches) == 2


def test_load_coupon_reports_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "coupon.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(CouponFormatError, match="invalid coupon JSON"):
        load_coupon(path)
