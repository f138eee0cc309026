"""
Shared fixtures: in-memory collaborators and an API client wired to them.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from tapvote.api.app import create_app
from tapvote.auth import Identity, IdentityVerifier, TokenInvalidError
from tapvote.config import Settings
from tapvote.storage import InMemoryDocumentStore, StoreError


# =============================================================================
# Test Doubles
# =============================================================================


class FakeVerifier(IdentityVerifier):
    """Accepts a fixed set of tokens, each mapped to a uid."""
    
    def __init__(self, tokens: dict[str, str]):
        self.tokens = tokens
        self.calls: list[str] = []
    
    async def verify(self, token: str) -> Identity:
        self.calls.append(token)
        if token not in self.tokens:
            raise TokenInvalidError("unknown token")
        return Identity(uid=self.tokens[token], claims={"sub": self.tokens[token]})


class RecordingStore(InMemoryDocumentStore):
    """In-memory store that remembers every operation."""
    
    def __init__(self):
        super().__init__()
        self.operations: list[tuple[str, str]] = []
    
    async def read(self, path: str) -> Any | None:
        self.operations.append(("read", path))
        return await super().read(path)
    
    async def write(self, path: str, value: Any) -> None:
        self.operations.append(("write", path))
        await super().write(path, value)
    
    async def push(self, path: str, value: Any) -> str:
        self.operations.append(("push", path))
        return await super().push(path, value)
    
    async def delete(self, path: str) -> None:
        self.operations.append(("delete", path))
        await super().delete(path)


class FailingStore(InMemoryDocumentStore):
    """Every operation fails."""
    
    async def read(self, path: str) -> Any | None:
        raise StoreError("database unreachable")
    
    async def write(self, path: str, value: Any) -> None:
        raise StoreError("database unreachable")
    
    async def push(self, path: str, value: Any) -> str:
        raise StoreError("database unreachable")
    
    async def delete(self, path: str) -> None:
        raise StoreError("database unreachable")


# =============================================================================
# Fixtures
# =============================================================================


ALICE_TOKEN = "token-alice"
BOB_TOKEN = "token-bob"


@pytest.fixture
def settings():
    return Settings(_env_file=None, identity_verifier="shared_secret")


@pytest.fixture
def verifier():
    return FakeVerifier({ALICE_TOKEN: "alice", BOB_TOKEN: "bob"})


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def client(verifier, store, settings):
    return TestClient(create_app(verifier=verifier, store=store, settings=settings))


@pytest.fixture
def alice():
    return {"Authorization": f"Bearer {ALICE_TOKEN}"}


@pytest.fixture
def bob():
    return {"Authorization": f"Bearer {BOB_TOKEN}"}


@pytest.fixture
def questionnaire() -> dict[str, Any]:
    return {
        "name": "Onboarding survey",
        "sections": [
            {
                "name": "About you",
                "questions": [
                    {"type": "free_response", "question": "What is your role?", "answer": "Engineer"},
                    {"type": "multiple_choice", "question": "Years of experience", "answer": "3-5"},
                ],
            },
        ],
    }
