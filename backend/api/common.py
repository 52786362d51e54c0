"""
Shared helpers for analytics endpoints
"""
import dataclasses
import logging
from datetime import date
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional, Tuple

from fastapi import HTTPException
from pydantic import BaseModel

from services.result_cache import result_cache
from services.snapshot import load_snapshot
from utils import MAX_WINDOW_DAYS, default_window, validate_window

logger = logging.getLogger(__name__)


def resolve_window(
    from_date: Optional[date],
    to_date: Optional[date],
    days: int = 30,
    max_days: int = MAX_WINDOW_DAYS
) -> Tuple[date, date]:
    """Fill missing bounds (last `days` days) and reject windows that cannot be served"""
    try:
        start, end = default_window(from_date, to_date, days=days)
    except OverflowError:
        raise HTTPException(status_code=400, detail=f"to_date {to_date} is too early for a {days}-day window")
    try:
        validate_window(start, end, max_days)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return start, end


def to_response(value: Any) -> Any:
    """Convert analytics results (dataclasses, records, enums) to JSON-ready data"""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_response(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_response(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_response(item) for item in value]
    if isinstance(value, date):
        return value.isoformat()
    return value


async def cached_view(
    name: str,
    params: dict,
    db,
    collections: Iterable[str],
    compute: Callable[[Any], Any]
) -> dict:
    """
    Load a snapshot, run a pure view over it and cache the response.

    The response carries the view result under "data" and the number of
    malformed records skipped per collection under "decode_errors".
    """
    async def _run() -> dict:
        snapshot = await load_snapshot(db, collections)
        return {
            "data": to_response(compute(snapshot)),
            "decode_errors": dict(snapshot.decode_errors),
        }

    return await result_cache.get_or_compute(name, params, _run)
