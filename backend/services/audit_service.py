"""
Audit log writes and reads.

Audit writes are best-effort: a failure is logged and never fails the
request that triggered it.
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from services.firebase_client import FirebaseAPIError
from services.records import AuditLogEntry, decode_collection

logger = logging.getLogger(__name__)

AUDIT_COLLECTION = "audit_logs"


class AuditCategory(str, Enum):
    BOOKING = "booking"
    PAYMENT = "payment"
    GUEST = "guest"
    ROOM = "room"
    POS = "pos"
    SETTINGS = "settings"
    AUTH = "auth"
    REPORT = "report"
    GOAL = "goal"


async def log_action(
    db,
    action: str,
    category: AuditCategory,
    description: str,
    user: Optional[dict] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Optional[str]:
    """
    Append an audit entry.

    Returns:
        The new entry key, or None when the write failed
    """
    user = user or {}
    entry = {
        "action": action,
        "category": AuditCategory(category).value,
        "description": description,
        "userId": user.get("id"),
        "userName": user.get("name"),
        "userEmail": user.get("email"),
        "userRole": user.get("role"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "metadata": metadata or {},
    }

    try:
        return await db.push(AUDIT_COLLECTION, entry)
    except FirebaseAPIError as e:
        logger.error(f"Failed to write audit entry {action}: {e}")
        return None


async def list_entries(db, limit: int = 50, category: Optional[str] = None) -> List[AuditLogEntry]:
    """
    Newest audit entries first.

    The last limit x 2 entries by timestamp are fetched so a category
    filter still has enough rows to fill the page.
    """
    raw = await db.get_latest(AUDIT_COLLECTION, order_by="timestamp", limit=limit * 2)
    entries, _ = decode_collection(raw, AuditLogEntry, AUDIT_COLLECTION)

    if category and category != "all":
        entries = [e for e in entries if e.category == category]

    entries.sort(key=lambda e: e.timestamp, reverse=True)
    return entries[:limit]
