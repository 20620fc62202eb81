"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path

from typing import Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = Field("OMMA Availability API", alias="APP_NAME")
    api_v1_prefix: str = Field("/api/v1", alias="API_V1_PREFIX")

    timezone: str = Field("America/Mexico_City", alias="OMMA_TIMEZONE")
    extended_start_hour: int = Field(7, alias="EXTENDED_START_HOUR")
    extended_end_hour: int = Field(22, alias="EXTENDED_END_HOUR")
    special_surcharge_credits: int = Field(1, alias="SPECIAL_SURCHARGE_CREDITS")
    late_cancellation_penalty_credits: int = Field(
        4, alias="LATE_CANCELLATION_PENALTY_CREDITS"
    )
    late_cancellation_window_hours: int = Field(
        24, alias="LATE_CANCELLATION_WINDOW_HOURS"
    )

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:4200",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        case_sensitive=False,
    )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
