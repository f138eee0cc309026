"""
Identity verification capability.

The service never issues tokens. It hands bearer tokens to an
IdentityVerifier and trusts the subject it returns. Implementations live
in tapvote.auth.jwt; tests substitute their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Identity:
    """
    A verified caller.
    
    Only lives for the duration of one request. The uid namespaces
    every store path the request touches.
    """
    
    uid: str
    claims: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


# =============================================================================
# Errors
# =============================================================================


class TokenError(Exception):
    """Base exception for token verification failures."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is malformed, badly signed, or has the wrong claims."""
    pass


class VerifierUnavailableError(TokenError):
    """The identity provider could not be reached."""
    pass


# =============================================================================
# Interface
# =============================================================================


class IdentityVerifier(ABC):
    """Validates bearer tokens against an identity provider."""
    
    @abstractmethod
    async def verify(self, token: str) -> Identity:
        """
        Verify a token and return the identity it was issued to.
        
        Raises:
            TokenError: on any verification failure
        """
        pass
