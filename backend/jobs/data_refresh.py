"""
Data refresh job
Drops cached analytics results once the configured refresh interval has passed
"""
import logging
import time
from typing import Optional

from database import create_client
from services.firebase_client import FirebaseAPIError
from services.result_cache import result_cache
from services.settings_service import load_refresh_settings, save_refresh_settings

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


async def refresh_all(db, current_ms: Optional[int] = None) -> int:
    """
    Invalidate every cached result and stamp lastRefresh.

    Returns:
        The new lastRefresh value (epoch ms)
    """
    current_ms = current_ms or now_ms()
    result_cache.invalidate_all()

    settings = await load_refresh_settings(db)
    settings.last_refresh = current_ms
    await save_refresh_settings(db, settings)
    return current_ms


async def run_data_refresh(db=None, current_ms: Optional[int] = None) -> bool:
    """
    Refresh when auto refresh is on and the interval has elapsed.

    Returns:
        True if a refresh ran
    """
    if db is None:
        async with create_client() as client:
            return await run_data_refresh(client, current_ms)

    current_ms = current_ms or now_ms()
    try:
        settings = await load_refresh_settings(db)
    except FirebaseAPIError as e:
        logger.error(f"Data refresh skipped, could not load settings: {e}")
        return False

    if not settings.auto_refresh:
        logger.debug("Auto refresh disabled")
        return False

    interval_ms = settings.refresh_interval * 60 * 1000
    if settings.last_refresh is not None and current_ms - settings.last_refresh < interval_ms:
        return False

    try:
        await refresh_all(db, current_ms)
    except FirebaseAPIError as e:
        logger.error(f"Data refresh could not persist lastRefresh: {e}")
        return False

    logger.info(f"Auto refresh ran (interval {settings.refresh_interval}m)")
    return True
