"""
FastAPI application for the Tap Vote questionnaire API.

Routes are thin: they pull the Authorization header, path parameters and
raw body off the request, hand them to QuestionnaireHandlers, and turn
the ApiResponse back into an HTTP response.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Header, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tapvote.api.handlers import ApiResponse, QuestionnaireHandlers, ResponseKind
from tapvote.auth import AuthGate, IdentityVerifier, create_verifier
from tapvote.config import Settings, get_settings
from tapvote.core.models import Question, QuestionType, Questionnaire, Section
from tapvote.integrations.sentry import init_sentry
from tapvote.storage import DocumentStore, create_store

logger = logging.getLogger(__name__)

API_BASE = "/api/v1"


# =============================================================================
# Binding
# =============================================================================


def to_response(result: ApiResponse) -> Response:
    """Render a handler result."""
    if result.kind == ResponseKind.JSON:
        return JSONResponse(content=result.body, status_code=result.status)
    if result.kind == ResponseKind.EMPTY:
        return Response(status_code=result.status, media_type="application/json")
    return Response(status_code=result.status)


def get_handlers(request: Request) -> QuestionnaireHandlers:
    return request.app.state.handlers


# Bodies are stored as received, so the schema is documentation only
_EXAMPLE = Questionnaire(
    name="Team retro",
    sections=[
        Section(
            name="Looking back",
            questions=[
                Question(type=QuestionType.FREE_RESPONSE, question="What went well?"),
                Question(type=QuestionType.MULTIPLE_CHOICE, question="Rate the sprint", answer="4"),
            ],
        ),
    ],
).to_document()

QUESTIONNAIRE_BODY = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"example": _EXAMPLE}},
    }
}


# =============================================================================
# Routes
# =============================================================================


router = APIRouter(prefix=API_BASE, tags=["questionnaires"])


@router.get("/welcome")
async def welcome():
    return {"message": "hello"}


@router.get("/questionnaires")
async def list_questionnaires(
    authorization: str | None = Header(default=None),
    handlers: QuestionnaireHandlers = Depends(get_handlers),
):
    """List the caller's questionnaires."""
    return to_response(await handlers.list_mine(authorization))


# Registered before /questionnaires/{questionnaire_id} so it is not shadowed
@router.get("/questionnaires/published/{questionnaire_id}")
async def get_published_questionnaire(
    questionnaire_id: str,
    handlers: QuestionnaireHandlers = Depends(get_handlers),
):
    """Fetch a published questionnaire. No authentication."""
    return to_response(await handlers.get_published(questionnaire_id))


@router.get("/questionnaires/{questionnaire_id}")
async def get_questionnaire(
    questionnaire_id: str,
    authorization: str | None = Header(default=None),
    handlers: QuestionnaireHandlers = Depends(get_handlers),
):
    return to_response(await handlers.get_mine(authorization, questionnaire_id))


@router.post("/questionnaires", openapi_extra=QUESTIONNAIRE_BODY)
async def create_questionnaire(
    request: Request,
    authorization: str | None = Header(default=None),
    handlers: QuestionnaireHandlers = Depends(get_handlers),
):
    """Create a questionnaire under a store-generated key. Returns {key}."""
    return to_response(await handlers.create(authorization, await request.body()))


@router.post("/questionnaires2", openapi_extra=QUESTIONNAIRE_BODY)
async def create_questionnaire_with_id(
    request: Request,
    authorization: str | None = Header(default=None),
    handlers: QuestionnaireHandlers = Depends(get_handlers),
):
    """Create a questionnaire under a fresh server-assigned id. Returns {id}."""
    return to_response(await handlers.create_with_id(authorization, await request.body()))


@router.put("/questionnaires/list/{questionnaire_id}", openapi_extra=QUESTIONNAIRE_BODY)
async def publish_questionnaire(
    questionnaire_id: str,
    request: Request,
    authorization: str | None = Header(default=None),
    handlers: QuestionnaireHandlers = Depends(get_handlers),
):
    """Copy a questionnaire into the published namespace."""
    return to_response(await handlers.publish(authorization, questionnaire_id, await request.body()))


@router.delete("/questionnaires/unlist/{questionnaire_id}")
async def unpublish_questionnaire(
    questionnaire_id: str,
    authorization: str | None = Header(default=None),
    handlers: QuestionnaireHandlers = Depends(get_handlers),
):
    """Remove a questionnaire from the published namespace."""
    return to_response(await handlers.unpublish(authorization, questionnaire_id))


@router.put("/questionnaires/{questionnaire_id}", openapi_extra=QUESTIONNAIRE_BODY)
async def update_questionnaire(
    questionnaire_id: str,
    request: Request,
    authorization: str | None = Header(default=None),
    handlers: QuestionnaireHandlers = Depends(get_handlers),
):
    return to_response(await handlers.update(authorization, questionnaire_id, await request.body()))


@router.delete("/questionnaires/{questionnaire_id}")
async def delete_questionnaire(
    questionnaire_id: str,
    authorization: str | None = Header(default=None),
    handlers: QuestionnaireHandlers = Depends(get_handlers),
):
    return to_response(await handlers.delete(authorization, questionnaire_id))


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    verifier: IdentityVerifier | None = None,
    store: DocumentStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the API.
    
    The verifier and store are built from settings at startup unless
    passed in; tests pass their own.
    """
    settings = settings or get_settings()
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_sentry(settings)
        
        if app.state.handlers is None:
            app.state.handlers = QuestionnaireHandlers(
                AuthGate(verifier or create_verifier(settings)),
                store or create_store(settings),
            )
        
        logger.info(f"Tap Vote API starting in {settings.environment} mode")
        yield
        logger.info("Tap Vote API shutting down")
    
    app = FastAPI(
        title="Tap Vote API",
        description="Create, share and publish questionnaires",
        version="0.1.0",
        lifespan=lifespan,
    )
    
    app.state.handlers = None
    if verifier is not None and store is not None:
        app.state.handlers = QuestionnaireHandlers(AuthGate(verifier), store)
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "tapvote-api"}
    
    app.include_router(router)
    return app
