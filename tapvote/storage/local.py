"""
In-memory document store for development and tests.

Behaves like a realtime database tree: null values and empty branches
are not stored, and reading a missing path gives None.
"""

from __future__ import annotations

import copy
import itertools
import uuid
from typing import Any

from tapvote.storage.base import DocumentStore, split_path


def _normalize(value: Any) -> Any:
    """Drop null leaves and empty branches, as the remote database does."""
    if isinstance(value, dict):
        cleaned = {}
        for key, child in value.items():
            child = _normalize(child)
            if child is not None:
                cleaned[str(key)] = child
        return cleaned or None
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    return value


class InMemoryDocumentStore(DocumentStore):
    """A JSON tree held in a dict."""
    
    def __init__(self, initial: dict[str, Any] | None = None):
        self._root: dict[str, Any] = _normalize(copy.deepcopy(initial or {})) or {}
        self._push_counter = itertools.count()
    
    def _node(self, segments: list[str]) -> Any | None:
        node: Any = self._root
        for segment in segments:
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return node
    
    def _set(self, segments: list[str], value: Any) -> None:
        if not segments:
            self._root = value if isinstance(value, dict) else {}
            return
        
        # Walk down, creating branches, remembering the trail for pruning
        trail: list[tuple[dict[str, Any], str]] = []
        node = self._root
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                if value is None:
                    return
                child = {}
                node[segment] = child
            trail.append((node, segment))
            node = child
        
        leaf = segments[-1]
        if value is None:
            node.pop(leaf, None)
        else:
            node[leaf] = value
        
        # Prune branches left empty
        for parent, segment in reversed(trail):
            if parent[segment]:
                break
            del parent[segment]
    
    def _next_push_key(self) -> str:
        # Counter prefix keeps keys in creation order when sorted
        return f"{next(self._push_counter):012d}{uuid.uuid4().hex[:8]}"
    
    async def read(self, path: str) -> Any | None:
        node = self._node(split_path(path))
        if node == {}:
            return None
        return copy.deepcopy(node)
    
    async def write(self, path: str, value: Any) -> None:
        self._set(split_path(path), _normalize(copy.deepcopy(value)))
    
    async def push(self, path: str, value: Any) -> str:
        key = self._next_push_key()
        await self.write(f"{path.rstrip('/')}/{key}", value)
        return key
    
    async def delete(self, path: str) -> None:
        self._set(split_path(path), None)
    
    def snapshot(self) -> dict[str, Any]:
        """Copy of the whole tree."""
        return copy.deepcopy(self._root)
