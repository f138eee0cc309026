# =============================================================================
# Realtime Database Store
# =============================================================================
#
# Talks to a Firebase-style realtime database over its REST API:
#
#   GET    {DATABASE_URL}/path.json   -> value or null
#   PUT    {DATABASE_URL}/path.json   -> replace
#   POST   {DATABASE_URL}/path.json   -> {"name": "<generated key>"}
#   DELETE {DATABASE_URL}/path.json   -> null
#
# Requests carry the service account's OAuth2 token as "access_token", or
# a legacy DATABASE_AUTH secret as "auth".
#
# =============================================================================

import json
import logging
from typing import Any

import httpx

from tapvote.storage.base import DocumentStore, StoreError, split_path
from tapvote.storage.credentials import ServiceAccountCredentials

logger = logging.getLogger(__name__)


class RealtimeDatabaseStore(DocumentStore):
    """DocumentStore backed by a remote realtime database."""
    
    def __init__(
        self,
        database_url: str,
        auth: str = "",
        credentials: ServiceAccountCredentials | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not database_url:
            raise ValueError("database_url is required")
        self.database_url = database_url.rstrip("/")
        self.auth = auth
        self.credentials = credentials
        self._transport = transport
    
    def url_for(self, path: str) -> str:
        return f"{self.database_url}/{'/'.join(split_path(path))}.json"
    
    async def _request(self, method: str, path: str, value: Any = None, send_body: bool = False) -> Any:
        params: dict[str, str] = {}
        if self.credentials is not None:
            params["access_token"] = await self.credentials.access_token()
        elif self.auth:
            params["auth"] = self.auth
        kwargs: dict[str, Any] = {"params": params or None}
        if send_body:
            # json.dumps so that a None value is sent as "null", not omitted
            kwargs["content"] = json.dumps(value)
            kwargs["headers"] = {"Content-Type": "application/json"}
        
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.request(method, self.url_for(path), **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {path} failed: {e}") from e
        
        if not response.is_success:
            logger.warning(f"Database {method} {path} returned {response.status_code}: {response.text}")
            raise StoreError(f"{method} {path} returned {response.status_code}")
        
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"{method} {path} returned a non-JSON body") from e
    
    async def read(self, path: str) -> Any | None:
        return await self._request("GET", path)
    
    async def write(self, path: str, value: Any) -> None:
        await self._request("PUT", path, value, send_body=True)
    
    async def push(self, path: str, value: Any) -> str:
        result = await self._request("POST", path, value, send_body=True)
        if not isinstance(result, dict) or "name" not in result:
            raise StoreError(f"POST {path} did not return a generated key")
        return result["name"]
    
    async def delete(self, path: str) -> None:
        await self._request("DELETE", path)
