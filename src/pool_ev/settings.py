"""Application settings for pool-ev."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pool_ev.payout import PAYOUT_RETENTION, ROW_STAKE
from pool_ev.row_builder import MAX_GENERATED_ROWS
from pool_ev.summary import POSITIVE_EV_THRESHOLD


class Settings(BaseSettings):
    """Defaults for row generation, payout estimation and summaries."""

    model_config = SettingsConfigDict(
        env_prefix="POOL_EV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_generated_rows: int = Field(default=MAX_GENERATED_ROWS, gt=0)
    payout_retention: float = Field(default=PAYOUT_RETENTION, gt=0.0, le=1.0)
    row_stake: float = Field(default=ROW_STAKE, gt=0.0)
    sample_seed: int | None = None
    positive_ev_threshold: float = POSITIVE_EV_THRESHOLD
    default_top_n: int = Field(default=500, gt=0)
    winner_adjustment: str = "graduated"
