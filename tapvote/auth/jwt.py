# =============================================================================
# JWT Verification
# =============================================================================
#
# Two IdentityVerifier implementations:
#   - FirebaseTokenVerifier: ID tokens issued by the identity platform
#     (RS256, keys published as a JWKS)
#   - SharedSecretVerifier: HS256 tokens signed with JWT_SECRET_KEY, for
#     local development
#
# Neither caches anything: each verify() is a fresh check, and the
# Firebase verifier refetches the signing keys on every call.
#
# =============================================================================

import logging
from typing import Any

import httpx
import jwt

from tapvote.auth.verifier import (
    Identity,
    IdentityVerifier,
    TokenExpiredError,
    TokenInvalidError,
    VerifierUnavailableError,
)
from tapvote.config import Settings

logger = logging.getLogger(__name__)


def _identity_from_claims(claims: dict[str, Any]) -> Identity:
    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise TokenInvalidError("Token has no subject")
    return Identity(uid=subject, claims=claims)


# =============================================================================
# Firebase ID Tokens
# =============================================================================


class FirebaseTokenVerifier(IdentityVerifier):
    """
    Verify ID tokens issued for a Firebase project.
    
    Checks signature (against the current JWKS), expiry, issue time,
    audience (the project id) and issuer.
    """
    
    ISSUER_PREFIX = "https://securetoken.google.com/"
    
    def __init__(
        self,
        project_id: str,
        jwks_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not project_id:
            raise ValueError("Firebase project id is required for token verification")
        self.project_id = project_id
        self.jwks_url = jwks_url
        self._transport = transport
    
    @property
    def issuer(self) -> str:
        return f"{self.ISSUER_PREFIX}{self.project_id}"
    
    async def fetch_keys(self) -> dict[str, dict[str, Any]]:
        """Fetch the signing keys, indexed by key id."""
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(self.jwks_url)
        except httpx.HTTPError as e:
            raise VerifierUnavailableError(f"Could not fetch signing keys: {e}") from e
        
        if response.status_code != 200:
            raise VerifierUnavailableError(f"Signing key fetch failed: {response.status_code}")
        
        try:
            keys = response.json()["keys"]
        except (ValueError, KeyError, TypeError) as e:
            raise VerifierUnavailableError("Signing key response is not a JWKS") from e
        return {key["kid"]: key for key in keys if "kid" in key}
    
    async def verify(self, token: str) -> Identity:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}") from e
        
        if header.get("alg") != "RS256":
            raise TokenInvalidError(f"Unexpected algorithm: {header.get('alg')}")
        
        keys = await self.fetch_keys()
        jwk = keys.get(header.get("kid", ""))
        if jwk is None:
            raise TokenInvalidError("Token signed with an unknown key")
        
        try:
            signing_key = jwt.PyJWK(jwk, algorithm="RS256").key
            claims = jwt.decode(
                token,
                signing_key,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.PyJWTError as e:
            raise TokenInvalidError(f"Invalid token: {e}") from e
        
        return _identity_from_claims(claims)


# =============================================================================
# Shared Secret (development)
# =============================================================================


class SharedSecretVerifier(IdentityVerifier):
    """Verify tokens signed with a shared secret."""
    
    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm
    
    async def verify(self, token: str) -> Identity:
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                # Audience is not configured for development tokens
                options={"require": ["exp", "sub"], "verify_aud": False},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}") from e
        
        return _identity_from_claims(claims)


# =============================================================================
# Factory
# =============================================================================


def create_verifier(settings: Settings) -> IdentityVerifier:
    """Build the verifier named by IDENTITY_VERIFIER."""
    kind = settings.identity_verifier.lower()
    
    if kind == "firebase":
        return FirebaseTokenVerifier(
            project_id=settings.resolve_project_id(),
            jwks_url=settings.firebase_jwks_url,
        )
    
    if kind == "shared_secret":
        if settings.is_production:
            logger.warning("Shared secret token verification is enabled in production")
        return SharedSecretVerifier(settings.jwt_secret_key, settings.jwt_algorithm)
    
    raise ValueError(f"Unknown identity verifier: {settings.identity_verifier}")
