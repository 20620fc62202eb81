"""Common API dependencies."""

from __future__ import annotations

from datetime import UTC, date, datetime

from omma.core.settings import EngineConfig, get_engine_config


def get_config() -> EngineConfig:
    """Provide the engine configuration for a request."""
    return get_engine_config()


def resolve_now(value: datetime | None) -> datetime:
    """Use the client-supplied instant or the current time."""
    return value if value is not None else datetime.now(UTC)


def local_today(config: EngineConfig) -> date:
    return datetime.now(config.tz).date()
