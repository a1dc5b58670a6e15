"""
Backtester configuration using pydantic-settings.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class BacktesterSettings(BaseSettings):
    """Backtester configuration, overridable with BACKTESTER_* environment variables."""

    # Price cache
    data_dir: Path = Path("data/priceHistories")

    # Price source
    exchange_id: str = "binance"
    quote_currency: str = "USDT"
    fetch_limit: int = Field(default=1000, gt=0)

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # Sweeps (None = sequential)
    max_workers: int | None = Field(default=None, ge=1)

    model_config = {"env_prefix": "BACKTESTER_", "env_file": ".env", "extra": "ignore"}


settings = BacktesterSettings()
