"""
Goals API endpoints - goal CRUD and progress tracking
"""
import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from database import get_db
from auth import get_current_user
from api.common import cached_view, to_response
from services.analytics.goals import evaluate_goals
from services.audit_service import AuditCategory, log_action
from services.records import Goal, GoalPeriod, GoalType, decode_collection
from services.result_cache import result_cache
from services.snapshot import CORE_COLLECTIONS, GOALS

logger = logging.getLogger(__name__)

router = APIRouter()


class GoalCreate(BaseModel):
    type: GoalType
    target: float = Field(..., gt=0)
    period: GoalPeriod
    month: int = Field(..., ge=0, le=11, description="0 = January")
    year: int = Field(..., ge=2000, le=2100)


def _invalidate_goal_results():
    result_cache.invalidate("goal_progress")


@router.get("")
async def list_goals(
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    All goals, newest first.
    """
    raw = await db.get_collection(GOALS)
    goals, skipped = decode_collection(raw, Goal, GOALS)
    goals.sort(key=lambda g: g.created_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
    return {"data": to_response(goals), "decode_errors": {GOALS: skipped} if skipped else {}}


@router.post("")
async def create_goal(
    goal: GoalCreate,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    record = {
        **goal.model_dump(mode="json"),
        "createdAt": datetime.now(timezone.utc).isoformat(),
        "createdBy": current_user.get("id"),
    }
    goal_id = await db.push(GOALS, record)
    _invalidate_goal_results()

    await log_action(
        db,
        "goal_created",
        AuditCategory.GOAL,
        f"Created {goal.period.value} {goal.type.value} goal of {goal.target:g}",
        user=current_user,
        metadata={"goalId": goal_id},
    )
    logger.info(f"Goal {goal_id} created by {current_user.get('email')}")

    return to_response(Goal.model_validate({**record, "id": goal_id}))


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: str,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    existing = await db.get_record(f"{GOALS}/{goal_id}")
    if existing is None:
        raise HTTPException(status_code=404, detail=f"Goal {goal_id} not found")

    await db.delete(f"{GOALS}/{goal_id}")
    _invalidate_goal_results()

    await log_action(
        db,
        "goal_deleted",
        AuditCategory.GOAL,
        f"Deleted goal {goal_id}",
        user=current_user,
        metadata={"goalId": goal_id},
    )
    return {"status": "deleted", "id": goal_id}


@router.get("/progress")
async def get_goal_progress(
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Progress of every goal against its period.

    Day counts only change at midnight, so results are cached per day.
    """
    now = datetime.now()
    return await cached_view(
        "goal_progress", {"day": date.today()}, db, CORE_COLLECTIONS + (GOALS,),
        lambda s: evaluate_goals(s.goals, s, now),
    )
