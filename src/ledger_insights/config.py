"""Application settings for ledger-insights."""

from functools import lru_cache
from typing import Dict, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Business defaults and runtime options, read from ``LEDGER_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    currency: str = Field(default="AED", description="Default invoice currency")
    default_vat_rate: float = Field(
        default=5.0, description="VAT percentage applied to line items without one"
    )
    forecast_horizon: int = Field(default=3, ge=1, description="Months to forecast")
    history_months: int = Field(
        default=6, ge=1, description="Trailing months shown on the dashboard"
    )
    revenue_goals: Dict[str, float] = Field(
        default_factory=dict,
        description="Monthly revenue targets keyed by YYYY-MM, given as JSON",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
