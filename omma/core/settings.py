"""Engine configuration adapted from application settings."""

from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from omma.core.config import get_settings


class EngineConfig(BaseModel):
    """Slim, explicit configuration threaded through every engine call.

    The timezone has no default: callers must say which local zone slot hours
    and "today" are evaluated in.
    """

    timezone: str
    extended_start_hour: int = Field(default=7, ge=0, le=23)
    extended_end_hour: int = Field(default=22, ge=1, le=24)
    special_surcharge_credits: int = Field(default=1, ge=0)
    late_cancellation_penalty_credits: int = Field(default=4, ge=0)
    late_cancellation_window_hours: int = Field(default=24, ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @model_validator(mode="after")
    def _ordered_envelope(self) -> "EngineConfig":
        if self.extended_start_hour >= self.extended_end_hour:
            raise ValueError("extended_start_hour must be before extended_end_hour")
        return self

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def envelope_hours(self) -> range:
        """Hours offered by the extended operating envelope."""
        return range(self.extended_start_hour, self.extended_end_hour)


def get_engine_config() -> EngineConfig:
    """Return the engine configuration derived from application settings."""

    settings = get_settings()
    return EngineConfig(
        timezone=settings.timezone,
        extended_start_hour=settings.extended_start_hour,
        extended_end_hour=settings.extended_end_hour,
        special_surcharge_credits=settings.special_surcharge_credits,
        late_cancellation_penalty_credits=settings.late_cancellation_penalty_credits,
        late_cancellation_window_hours=settings.late_cancellation_window_hours,
    )
