from __future__ import annotations

import json
from pathlib import Path

import pytest

from pool_ev.cli import main


def _write_coupon(tmp_path: Path, selections: dict[str, list[str]] | None = None) -> Path:
    payload = {
        "sport": "Topptipset",
        "round": "3825",
        "matches": [
            {
                "id": "M1",
                "home": "Alpha",
                "away": "Beta",
                "odds": {"1": 2.0, "X": 3.0, "2": 4.0},
                "shares": {"1": 50, "X": 30, "2": 20},
            },
            {
                "id": "M2",
                "home": "Gamma",
                "away": "Delta",
                "odds": {"1": 1.5, "X": 4.0, "2": 6.0},
                "shares": {"1": 70, "X": 20, "2": 10},
            },
        ],
        "selections": (
            selections if selections is not None else {"M1": ["1", "X", "2"], "M2": ["1", "X"]}
        ),
    }
    path = tmp_path / "coupon.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("POOL_EV_MAX_GENERATED_ROWS", "POOL_EV_SAMPLE_SEED"):
        monkeypatch.delenv(name, raising=False)


def test_cli_count(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["count", "--coupon", str(_write_coupon(tmp_path))])

    assert code == 0
    assert capsys.readouterr().out.strip() == "6"


def test_cli_analyze_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(
        [
            "analyze",
            "--coupon",
            str(_write_coupon(tmp_path)),
            "--keep-value",
            "50",
            "--turnover",
            "100000",
            "--bonus",
            "5000",
            "--top-n",
            "2",
        ]
    )

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["row_count"] == 6
    assert report["kept"]["row_count"] == 2
    assert report["payout"]["pool"] == pytest.approx(75_000)
    assert [stage["stage"] for stage in report["stages"]][-1] == "top_n_money_ev"
    assert list(report["rows"][0])[:2] == ["M1", "M2"]
    assert "money_ev" in report["rows"][0]


def test_cli_analyze_csv(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["analyze", "--coupon", str(_write_coupon(tmp_path)), "--format", "csv"])

    assert code == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "M1,M2,joint_probability,joint_share,value_index"
    assert len(lines) == 7


def test_cli_classify(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["classify", "--coupon", str(_write_coupon(tmp_path))])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["match_count"] == 2
    assert payload["coupon_type"] in {"favorite", "mixed", "even"}


def test_cli_rejects_inverted_band(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(
        [
            "analyze",
            "--coupon",
            str(_write_coupon(tmp_path)),
            "--turnover",
            "1000",
            "--money-ev-band",
            "80",
            "20",
        ]
    )

    assert code == 2
    assert "exceeds max" in capsys.readouterr().err


def test_cli_rejects_unknown_selection(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_coupon(tmp_path, {"M1": ["1"], "M2": ["1"], "M9": ["X"]})

    code = main(["analyze", "--coupon", str(path)])

    assert code == 2
    assert "unknown match id" in capsys.readouterr().err


def test_cli_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["count", "--coupon", str(tmp_path / "missing.json")])

    assert code == 2
    assert "not found" in capsys.readouterr().err


def test_cli_without_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 0
    assert "pool-ev" in capsys.readouterr().out


def test_cli_analyze_reports_outcome_distribution(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["analyze", "--coupon", str(_write_coupon(tmp_path))])

    assert code == 0
    distribution = json.loads(capsys.readouterr().out)["outcome_distribution"]
    assert distribution["counts"]["M1"] == {"1": 2, "X": 2, "2": 2}
    assert distribution["counts"]["M2"] == {"1": 3, "X": 3, "2": 0}
    assert distribution["percentages"]["M2"]["1"] == pytest.approx(50.0)


def test_cli_explicit_top_n_zero_keeps_no_rows(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(
        ["analyze", "--coupon", str(_write_coupon(tmp_path)), "--turnover", "1000", "--top-n", "0"]
    )

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["kept"]["row_count"] == 0
    assert report["rows"] == []


def test_cli_bare_top_n_uses_settings_default(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("POOL_EV_DEFAULT_TOP_N", "4")
    code = main(
        ["analyze", "--coupon", str(_write_coupon(tmp_path)), "--turnover", "1000", "--top-n"]
    )

    assert code == 0
    assert json.loads(capsys.readouterr().out)["kept"]["row_count"] == 4
