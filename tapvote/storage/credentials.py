# =============================================================================
# Service Account Credentials
# =============================================================================
#
# Turns the service-account file named by GOOGLE_APPLICATION_CREDENTIALS
# into OAuth2 access tokens for the realtime database, using the
# JWT bearer grant:
#
#   1. Sign an assertion (RS256) with the account's private key
#   2. POST it to the account's token_uri
#   3. Send the returned access_token with every database request
#
# A token is reused until shortly before it expires.
#
# =============================================================================

import json
import logging
import time
from pathlib import Path
from typing import Any

import httpx
import jwt

from tapvote.storage.base import StoreError

logger = logging.getLogger(__name__)


class ServiceAccountCredentials:
    """Access tokens for a service account."""
    
    SCOPES = (
        "https://www.googleapis.com/auth/firebase.database",
        "https://www.googleapis.com/auth/userinfo.email",
    )
    DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
    GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
    LIFETIME_SECONDS = 3600
    REFRESH_MARGIN_SECONDS = 60
    
    def __init__(
        self,
        info: dict[str, Any],
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        try:
            self.client_email = info["client_email"]
            self.private_key = info["private_key"]
        except KeyError as e:
            raise ValueError(f"Service account is missing {e.args[0]}") from e
        self.private_key_id = info.get("private_key_id")
        self.token_uri = info.get("token_uri") or self.DEFAULT_TOKEN_URI
        self._transport = transport
        self._token: str | None = None
        self._expires_at = 0.0
    
    @classmethod
    def from_file(cls, path: str, transport: httpx.AsyncBaseTransport | None = None) -> "ServiceAccountCredentials":
        info = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(info, transport=transport)
    
    def _assertion(self, now: int) -> str:
        claims = {
            "iss": self.client_email,
            "scope": " ".join(self.SCOPES),
            "aud": self.token_uri,
            "iat": now,
            "exp": now + self.LIFETIME_SECONDS,
        }
        headers = {"kid": self.private_key_id} if self.private_key_id else None
        return jwt.encode(claims, self.private_key, algorithm="RS256", headers=headers)
    
    async def access_token(self) -> str:
        """A valid access token, fetching a new one when needed."""
        if self._token and time.time() < self._expires_at - self.REFRESH_MARGIN_SECONDS:
            return self._token
        
        now = int(time.time())
        try:
            assertion = self._assertion(now)
        except (jwt.PyJWTError, ValueError) as e:
            raise StoreError(f"Could not sign service account assertion: {e}") from e
        
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.token_uri,
                    data={"grant_type": self.GRANT_TYPE, "assertion": assertion},
                )
        except httpx.HTTPError as e:
            raise StoreError(f"Token request failed: {e}") from e
        
        if response.status_code != 200:
            logger.warning(f"Service account token request returned {response.status_code}: {response.text}")
            raise StoreError(f"Token request returned {response.status_code}")
        
        try:
            data = response.json()
            self._token = data["access_token"]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreError("Token response has no access_token") from e
        self._expires_at = now + int(data.get("expires_in", self.LIFETIME_SECONDS))
        return self._token
