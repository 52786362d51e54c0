"""
Audit log API endpoints
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from database import get_db
from auth import get_current_user
from api.common import to_response
from services.audit_service import AuditCategory, list_entries, log_action

router = APIRouter()


class AuditEntryCreate(BaseModel):
    action: str = Field(..., min_length=1)
    category: AuditCategory
    description: str = ""
    metadata: Optional[Dict[str, Any]] = None


@router.get("")
async def get_audit_log(
    limit: int = Query(50, ge=1, le=500),
    category: str = Query("all", description="Category filter or 'all'"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Most recent audit entries, newest first.
    """
    entries = await list_entries(db, limit=limit, category=category)
    return to_response(entries)


@router.post("")
async def create_audit_entry(
    entry: AuditEntryCreate,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Record a user action. A failed write is logged, never raised.
    """
    entry_id = await log_action(
        db,
        entry.action,
        entry.category,
        entry.description,
        user=current_user,
        metadata=entry.metadata,
    )
    return {"status": "logged" if entry_id else "not_logged", "id": entry_id}
