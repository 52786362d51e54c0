"""
Realtime Database connection settings and client management
"""
import os

from services.firebase_client import FirebaseClient

FIREBASE_DATABASE_URL = os.getenv("FIREBASE_DATABASE_URL", "http://localhost:9000")
FIREBASE_AUTH_TOKEN = os.getenv("FIREBASE_AUTH_TOKEN")


def create_client() -> FirebaseClient:
    """Create a database client for scheduler jobs (use as an async context manager)"""
    return FirebaseClient(database_url=FIREBASE_DATABASE_URL, auth_token=FIREBASE_AUTH_TOKEN)


async def get_db():
    """Dependency for FastAPI endpoints"""
    async with create_client() as client:
        yield client
