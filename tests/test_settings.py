import pytest
from pydantic import ValidationError

from pool_ev.settings import Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("POOL_EV_SAMPLE_SEED", raising=False)
    monkeypatch.delenv("POOL_EV_MAX_GENERATED_ROWS", raising=False)

    settings = Settings(_env_file=None)

    assert settings.max_generated_rows == 50_000
    assert settings.payout_retention == 0.70
    assert settings.row_stake == 1.0
    assert settings.sample_seed is None
    assert settings.positive_ev_threshold == 1.1
    assert settings.default_top_n == 500
    assert settings.winner_adjustment == "graduated"


def test_settings_read_prefixed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POOL_EV_SAMPLE_SEED", "42")
    monkeypatch.setenv("POOL_EV_MAX_GENERATED_ROWS", "1000")
    monkeypatch.setenv("POOL_EV_PAYOUT_RETENTION", "0.65")

    settings = Settings(_env_file=None)

    assert settings.sample_seed == 42
    assert settings.max_generated_rows == 1000
    assert settings.payout_retention == 0.65


def test_settings_reject_invalid_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POOL_EV_MAX_GENERATED_ROWS", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
