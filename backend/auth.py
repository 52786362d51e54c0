"""
Authentication utilities - Firebase Auth ID token verification

Sign-in happens in the browser against Firebase Auth. The API only checks
the ID token sent as a bearer token (Identity Toolkit accounts:lookup) and
reads the user's role from users/<uid> in the Realtime Database.
"""
import os
import logging
from typing import Optional

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from database import get_db
from services.firebase_client import FirebaseAPIError

logger = logging.getLogger(__name__)

# Configuration
FIREBASE_API_KEY = os.getenv("FIREBASE_API_KEY")
IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:lookup"

APP_ROLES = ("hotel_manager", "finance_manager", "operations_manager")
DEFAULT_ROLE = "hotel_manager"

# Security scheme
security = HTTPBearer()


class UserResponse(BaseModel):
    id: str
    email: Optional[str]
    name: Optional[str]
    role: str


async def verify_id_token(id_token: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> Optional[dict]:
    """
    Look up the account behind a Firebase ID token.

    Returns:
        The Identity Toolkit user record, or None when the token is invalid
    """
    if not FIREBASE_API_KEY:
        logger.error("FIREBASE_API_KEY not configured, cannot verify tokens")
        return None

    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            response = await client.post(
                IDENTITY_TOOLKIT_URL,
                params={"key": FIREBASE_API_KEY},
                json={"idToken": id_token}
            )
    except httpx.HTTPError as e:
        logger.error(f"Token verification request failed: {e}")
        return None

    if response.status_code != 200:
        logger.info(f"Token rejected by identity provider ({response.status_code})")
        return None

    users = response.json().get("users") or []
    return users[0] if users else None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db=Depends(get_db)
) -> dict:
    """Get current user from a Firebase ID token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    account = await verify_id_token(credentials.credentials)
    if account is None or not account.get("localId"):
        raise credentials_exception

    uid = account["localId"]
    try:
        profile = await db.get_record(f"users/{uid}") or {}
    except FirebaseAPIError as e:
        logger.warning(f"Could not load profile for {uid}, using default role: {e}")
        profile = {}

    if profile.get("disabled"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    role = profile.get("role")
    if role not in APP_ROLES:
        role = DEFAULT_ROLE

    return {
        "id": uid,
        "email": account.get("email"),
        "name": profile.get("name") or account.get("displayName") or account.get("email"),
        "role": role,
    }
