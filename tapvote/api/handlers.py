"""
Questionnaire request handlers.

Each handler takes a description of the request (Authorization header,
path parameters, raw body) and returns an ApiResponse. Nothing here
touches the HTTP framework; tapvote.api.app binds these to routes.

Every gated handler has the same shape:

    1. Ask the AuthGate; no identity → 401, and the store is never called
    2. Do exactly one store operation
    3. Any failure → 500 with no body; otherwise 200 with JSON
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from tapvote.auth import AuthGate, Identity
from tapvote.core.utils import generate_id
from tapvote.integrations.sentry import capture_exception
from tapvote.storage import DocumentStore, Paths


class MalformedBodyError(Exception):
    """Request body is not valid JSON."""
    pass


def decode_body(raw: bytes) -> Any:
    """Decode a JSON request body. An empty body decodes to {}."""
    if not raw or not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedBodyError(f"Request body is not JSON: {e}") from e


# =============================================================================
# Response Description
# =============================================================================


class ResponseKind(str, Enum):
    JSON = "json"      # body serialized as JSON (None becomes null)
    EMPTY = "empty"    # JSON content type, no body
    STATUS = "status"  # bare status code


@dataclass(frozen=True)
class ApiResponse:
    status: int
    body: Any = None
    kind: ResponseKind = ResponseKind.JSON
    
    @classmethod
    def ok(cls, body: Any) -> ApiResponse:
        return cls(200, body)
    
    @classmethod
    def empty(cls) -> ApiResponse:
        return cls(200, kind=ResponseKind.EMPTY)
    
    @classmethod
    def unauthorized(cls) -> ApiResponse:
        return cls(401, kind=ResponseKind.STATUS)
    
    @classmethod
    def server_error(cls) -> ApiResponse:
        return cls(500, kind=ResponseKind.STATUS)


# =============================================================================
# Handlers
# =============================================================================


Action = Callable[[], Awaitable[ApiResponse]]
GatedAction = Callable[[Identity], Awaitable[ApiResponse]]


class QuestionnaireHandlers:
    """The questionnaire operations, wired to an auth gate and a store."""
    
    def __init__(self, gate: AuthGate, store: DocumentStore):
        self.gate = gate
        self.store = store
    
    async def _run(self, operation: str, action: Action) -> ApiResponse:
        try:
            return await action()
        except Exception as e:
            capture_exception(e, operation=operation)
            return ApiResponse.server_error()
    
    async def _gated(self, operation: str, authorization: str | None, action: GatedAction) -> ApiResponse:
        identity = await self.gate.authenticate(authorization)
        if identity is None:
            return ApiResponse.unauthorized()
        return await self._run(operation, lambda: action(identity))
    
    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    
    async def list_mine(self, authorization: str | None) -> ApiResponse:
        """All of the caller's questionnaires, keyed by id."""
        async def action(identity: Identity) -> ApiResponse:
            return ApiResponse.ok(await self.store.read(Paths.user_questionnaires(identity.uid)))
        
        return await self._gated("list_mine", authorization, action)
    
    async def get_mine(self, authorization: str | None, questionnaire_id: str) -> ApiResponse:
        """One of the caller's questionnaires, or null."""
        async def action(identity: Identity) -> ApiResponse:
            path = Paths.user_questionnaire(identity.uid, questionnaire_id)
            return ApiResponse.ok(await self.store.read(path))
        
        return await self._gated("get_mine", authorization, action)
    
    async def get_published(self, questionnaire_id: str) -> ApiResponse:
        """A published questionnaire, or null. Public."""
        async def action() -> ApiResponse:
            return ApiResponse.ok(await self.store.read(Paths.published(questionnaire_id)))
        
        return await self._run("get_published", action)
    
    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    
    async def create(self, authorization: str | None, raw_body: bytes) -> ApiResponse:
        """Append under the caller's namespace; the store picks the key."""
        async def action(identity: Identity) -> ApiResponse:
            questionnaire = decode_body(raw_body)
            key = await self.store.push(Paths.user_questionnaires(identity.uid), questionnaire)
            return ApiResponse.ok({"key": key})
        
        return await self._gated("create", authorization, action)
    
    async def create_with_id(self, authorization: str | None, raw_body: bytes) -> ApiResponse:
        """Assign a fresh id, stamp it on the document, and write it there."""
        async def action(identity: Identity) -> ApiResponse:
            questionnaire = decode_body(raw_body)
            questionnaire_id = generate_id()
            if isinstance(questionnaire, dict):
                questionnaire = {**questionnaire, "id": questionnaire_id}
            await self.store.write(Paths.user_questionnaire(identity.uid, questionnaire_id), questionnaire)
            return ApiResponse.ok({"id": questionnaire_id})
        
        return await self._gated("create_with_id", authorization, action)
    
    async def update(self, authorization: str | None, questionnaire_id: str, raw_body: bytes) -> ApiResponse:
        async def action(identity: Identity) -> ApiResponse:
            questionnaire = decode_body(raw_body)
            await self.store.write(Paths.user_questionnaire(identity.uid, questionnaire_id), questionnaire)
            return ApiResponse.empty()
        
        return await self._gated("update", authorization, action)
    
    async def delete(self, authorization: str | None, questionnaire_id: str) -> ApiResponse:
        # Leaves any published copy in place
        async def action(identity: Identity) -> ApiResponse:
            await self.store.delete(Paths.user_questionnaire(identity.uid, questionnaire_id))
            return ApiResponse.empty()
        
        return await self._gated("delete", authorization, action)
    
    # -------------------------------------------------------------------------
    # Publishing
    #
    # Any authenticated caller may publish or unlist any id; ownership of
    # the id is not checked.
    # -------------------------------------------------------------------------
    
    async def publish(self, authorization: str | None, questionnaire_id: str, raw_body: bytes) -> ApiResponse:
        """Copy the given questionnaire into the public namespace."""
        async def action(identity: Identity) -> ApiResponse:
            questionnaire = decode_body(raw_body)
            await self.store.write(Paths.published(questionnaire_id), questionnaire)
            return ApiResponse.empty()
        
        return await self._gated("publish", authorization, action)
    
    async def unpublish(self, authorization: str | None, questionnaire_id: str) -> ApiResponse:
        """Remove the public copy only; the owner's copy is untouched."""
        async def action(identity: Identity) -> ApiResponse:
            await self.store.delete(Paths.published(questionnaire_id))
            return ApiResponse.empty()
        
        return await self._gated("unpublish", authorization, action)
