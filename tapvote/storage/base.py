"""
Document store abstraction.

All persistence goes through this interface: a path-addressed tree of
JSON values, like a realtime database. Swapping the remote database for
the in-memory tree (or a test double) needs no change in the handlers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StoreError(Exception):
    """Any failure talking to the document store."""
    pass


# =============================================================================
# Store Interface
# =============================================================================


class DocumentStore(ABC):
    """
    Hierarchical key-value store.
    
    Paths look like "/questionnaires/uid/id". Values are anything that
    serializes to JSON. A missing node reads as None.
    """
    
    @abstractmethod
    async def read(self, path: str) -> Any | None:
        """Read the value (or whole subtree) at a path."""
        pass
    
    @abstractmethod
    async def write(self, path: str, value: Any) -> None:
        """Replace the value at a path."""
        pass
    
    @abstractmethod
    async def push(self, path: str, value: Any) -> str:
        """Add a child under a path with a store-generated key, return the key."""
        pass
    
    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove the node at a path. Removing a missing node is not an error."""
        pass


# =============================================================================
# Paths
# =============================================================================


class Paths:
    """Where questionnaires live in the store."""
    
    QUESTIONNAIRES = "/questionnaires"
    PUBLISHED = "/published"
    
    @classmethod
    def user_questionnaires(cls, uid: str) -> str:
        return f"{cls.QUESTIONNAIRES}/{uid}"
    
    @classmethod
    def user_questionnaire(cls, uid: str, questionnaire_id: str) -> str:
        return f"{cls.QUESTIONNAIRES}/{uid}/{questionnaire_id}"
    
    @classmethod
    def published(cls, questionnaire_id: str) -> str:
        return f"{cls.PUBLISHED}/{questionnaire_id}"


def split_path(path: str) -> list[str]:
    """Break a store path into its non-empty segments."""
    return [segment for segment in path.split("/") if segment]
