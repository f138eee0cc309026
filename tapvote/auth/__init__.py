"""
Authentication - delegated to an external identity provider.

Routes never look at tokens directly. They ask the AuthGate, which asks
an IdentityVerifier, which answers with an Identity or raises.
"""

from tapvote.auth.verifier import (
    Identity,
    IdentityVerifier,
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    VerifierUnavailableError,
)
from tapvote.auth.gate import AuthGate, extract_token
from tapvote.auth.jwt import (
    FirebaseTokenVerifier,
    SharedSecretVerifier,
    create_verifier,
)

__all__ = [
    # Gate
    "AuthGate",
    "extract_token",
    # Types
    "Identity",
    "IdentityVerifier",
    # Errors
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "VerifierUnavailableError",
    # Implementations
    "FirebaseTokenVerifier",
    "SharedSecretVerifier",
    "create_verifier",
]
