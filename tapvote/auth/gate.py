"""
Auth gate - turns an Authorization header into an Identity, or nothing.

Every gated route asks the gate first. Missing headers and rejected
tokens look the same to the caller: both come back as None and the
route answers 401.
"""

from __future__ import annotations

import logging

from tapvote.auth.verifier import Identity, IdentityVerifier, TokenError

logger = logging.getLogger(__name__)


def extract_token(authorization: str | None) -> str | None:
    """
    Pull the token out of an "<scheme> <token>" header value.
    
    The scheme is not checked; only the second field is used.
    """
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) < 2:
        return None
    return parts[1]


class AuthGate:
    """Authenticate requests against an IdentityVerifier."""
    
    def __init__(self, verifier: IdentityVerifier):
        self.verifier = verifier
    
    async def authenticate(self, authorization: str | None) -> Identity | None:
        """
        Verify the bearer token in an Authorization header value.
        
        Returns the verified identity, or None if the header is missing
        or the verifier rejects the token for any reason.
        """
        token = extract_token(authorization)
        if token is None:
            return None
        
        try:
            return await self.verifier.verify(token)
        except TokenError as e:
            logger.info("Token rejected: %s", type(e).__name__)
        except Exception:
            logger.warning("Token verification failed unexpectedly", exc_info=True)
        return None
