"""
Configuration API endpoints - data refresh settings
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator

from database import get_db
from auth import get_current_user
from jobs.data_refresh import refresh_all
from services.audit_service import AuditCategory, log_action
from services.settings_service import (
    REFRESH_INTERVALS,
    load_refresh_settings,
    save_refresh_settings,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class RefreshSettingsUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auto_refresh: Optional[bool] = Field(None, alias="autoRefresh")
    refresh_interval: Optional[int] = Field(None, alias="refreshInterval")

    @field_validator("refresh_interval")
    @classmethod
    def _known_interval(cls, value):
        if value is not None and value not in REFRESH_INTERVALS:
            raise ValueError(f"refreshInterval must be one of {REFRESH_INTERVALS}")
        return value


@router.get("/refresh")
async def get_refresh_settings(
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    settings = await load_refresh_settings(db)
    return {**settings.model_dump(), "intervals": list(REFRESH_INTERVALS)}


@router.put("/refresh")
async def update_refresh_settings(
    changes: RefreshSettingsUpdate,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Change auto refresh settings; the change is stored immediately.
    """
    settings = await load_refresh_settings(db)
    for field, value in changes.model_dump(exclude_none=True).items():
        setattr(settings, field, value)
    await save_refresh_settings(db, settings)

    await log_action(
        db,
        "settings_updated",
        AuditCategory.SETTINGS,
        f"Auto refresh {'on' if settings.auto_refresh else 'off'}, every {settings.refresh_interval} minutes",
        user=current_user,
    )
    return settings.model_dump()


@router.post("/refresh/run")
async def run_refresh_now(
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Refresh all: drop every cached result so the next requests refetch.
    """
    last_refresh = await refresh_all(db)
    logger.info(f"Manual refresh by {current_user.get('email')}")
    return {"status": "refreshed", "last_refresh": last_refresh}
