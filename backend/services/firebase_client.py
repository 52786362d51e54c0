"""
Firebase Realtime Database REST Client

Collections are read whole: GET <url>/<collection>.json returns a map of
record id -> record, or null for an empty node. Analytics never writes
booking, room or POS data. The only writes go to the nodes this service
owns: goals, scheduled_reports, audit_logs and settings.
"""
import os
import httpx
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "http://localhost:9000"


class FirebaseAPIError(Exception):
    """Raised when the Realtime Database rejects a request or cannot be reached"""
    pass


class FirebaseClient:
    """
    Async client for the Firebase Realtime Database REST API

    Usage:
        async with FirebaseClient() as db:
            bookings = await db.get_collection("bookings")
    """

    def __init__(
        self,
        database_url: str = None,
        auth_token: str = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        # Use provided settings or fall back to environment variables
        self.database_url = (database_url or os.getenv("FIREBASE_DATABASE_URL", DEFAULT_DATABASE_URL)).rstrip("/")
        self.auth_token = auth_token or os.getenv("FIREBASE_AUTH_TOKEN")
        self.timeout = timeout
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

        if not self.auth_token:
            logger.debug("Firebase auth token not configured, using unauthenticated access")

    def _get_url(self, path: str) -> str:
        """Get full REST URL for a database path"""
        return f"{self.database_url}/{path.strip('/')}.json"

    def _get_params(self, extra: Optional[dict] = None) -> dict:
        params = {}
        if self.auth_token:
            params["auth"] = self.auth_token
        if extra:
            params.update(extra)
        return params

    async def __aenter__(self):
        self.client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    async def _request(self, method: str, path: str, json: Any = None, params: Optional[dict] = None) -> Any:
        try:
            response = await self.client.request(
                method,
                self._get_url(path),
                json=json,
                params=self._get_params(params)
            )
        except httpx.HTTPError as e:
            logger.error(f"Firebase {method} {path} failed: {e}")
            raise FirebaseAPIError(f"{method} {path} failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Firebase API error {response.status_code} on {method} {path}: {response.text}")
            raise FirebaseAPIError(f"{method} {path} returned {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Firebase {method} {path} returned a non-JSON body: {response.text[:200]}")
            raise FirebaseAPIError(f"{method} {path} returned invalid JSON") from e

    async def test_connection(self) -> bool:
        """Test database connection with a shallow read of the root node"""
        try:
            await self._request("GET", "", params={"shallow": "true"})
            return True
        except FirebaseAPIError:
            return False

    async def get_collection(self, path: str) -> Dict[str, Any]:
        """
        Fetch every record under a collection node.

        Args:
            path: Collection path, e.g. "bookings"

        Returns:
            Dict of record id -> raw record (empty dict for a missing node)
        """
        data = await self._request("GET", path)

        if data is None:
            return {}

        # Nodes keyed by small integers come back as JSON arrays with null gaps
        if isinstance(data, list):
            data = {str(index): value for index, value in enumerate(data) if value is not None}

        if not isinstance(data, dict):
            logger.warning(f"Collection {path} is not an object node, treating as empty")
            return {}

        logger.info(f"Fetched {len(data)} records from {path}")
        return data

    async def get_latest(self, path: str, order_by: str, limit: int) -> Dict[str, Any]:
        """
        Fetch the last `limit` records of a collection ordered by a child key.

        Requires an ".indexOn" rule for the child key in the database rules.
        """
        data = await self._request(
            "GET",
            path,
            params={"orderBy": f'"{order_by}"', "limitToLast": limit}
        )
        return data if isinstance(data, dict) else {}

    async def get_record(self, path: str) -> Optional[Any]:
        """Fetch a single node, None when it does not exist"""
        return await self._request("GET", path)

    async def push(self, path: str, value: dict) -> str:
        """
        Append a record under a collection with a generated key.

        Returns:
            The generated record key
        """
        data = await self._request("POST", path, json=value)
        key = data.get("name") if isinstance(data, dict) else None
        if not key:
            raise FirebaseAPIError(f"POST {path} returned no record key")
        return key

    async def set(self, path: str, value: Any) -> Any:
        """Replace a node"""
        return await self._request("PUT", path, json=value)

    async def update(self, path: str, values: dict) -> Any:
        """Merge fields into a node"""
        return await self._request("PATCH", path, json=values)

    async def delete(self, path: str) -> None:
        """Remove a node"""
        await self._request("DELETE", path)
