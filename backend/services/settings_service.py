"""
User-mutable runtime settings stored under settings/.

Refresh settings are loaded when needed, changed by the user through the
config API and written back on every change.
"""
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.result_cache import result_cache

logger = logging.getLogger(__name__)

DATA_REFRESH_PATH = "settings/data_refresh"
REFRESH_INTERVALS = (1, 5, 15, 30, 60)   # minutes


class RefreshSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auto_refresh: bool = Field(True, alias="autoRefresh")
    refresh_interval: int = Field(5, alias="refreshInterval")
    last_refresh: Optional[int] = Field(None, alias="lastRefresh")   # epoch ms

    @field_validator("refresh_interval")
    @classmethod
    def _known_interval(cls, value):
        if value not in REFRESH_INTERVALS:
            raise ValueError(f"refreshInterval must be one of {REFRESH_INTERVALS}")
        return value


def apply_cache_ttl(settings: RefreshSettings) -> None:
    """Cached results live no longer than one refresh interval"""
    result_cache.ttl_seconds = settings.refresh_interval * 60


async def load_refresh_settings(db) -> RefreshSettings:
    """Stored refresh settings, defaults when none are stored"""
    raw = await db.get_record(DATA_REFRESH_PATH)
    settings = RefreshSettings()
    if isinstance(raw, dict):
        try:
            settings = RefreshSettings.model_validate(raw)
        except ValueError as e:
            logger.warning(f"Invalid stored refresh settings, using defaults: {e}")
    apply_cache_ttl(settings)
    return settings


async def save_refresh_settings(db, settings: RefreshSettings) -> RefreshSettings:
    await db.set(DATA_REFRESH_PATH, settings.model_dump(by_alias=True))
    apply_cache_ttl(settings)
    logger.info(
        f"Saved refresh settings: auto={settings.auto_refresh}, interval={settings.refresh_interval}m"
    )
    return settings
