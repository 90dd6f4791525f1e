"""
Sitewright Conversation Router - The intelligent-conversation endpoint.

POST /intelligent-conversation (also mounted under /api)
    Body: {message, conversationId?, currentCode?, projectId?, history?}
    200 -> success envelope
    400 -> {"error": "Message is required"} (nothing stored)
    500 -> {"success": false, "error", "code", "stack"?}

OPTIONS /intelligent-conversation -> 204 with permissive CORS headers.

A bearer token is resolved to a user id when present; resolution failures
are logged and the request proceeds anonymously.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from config import runtime_config
from errors import ValidationError, error_response
from routers.conversation_orchestration import (
    ContextLoader,
    ConversationPipeline,
    ResponseAssembler,
    build_default_router,
    get_classifier,
)
from services.auth import TokenResolver, get_token_resolver
from services.conversation_store import ConversationStore
from services.database import get_database
from services.llm_client import get_llm_client
from services.status_snapshot import DatabaseStatusProvider

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

MESSAGE_REQUIRED = "Message is required"


# ---------------------------------------------------------------------------
# Request model
# ---------------------------------------------------------------------------


class HistoryTurn(BaseModel):
    role: Optional[str] = "user"
    content: Optional[str] = ""


class ConversationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: Optional[str] = None
    conversationId: Optional[str] = None
    currentCode: Optional[str] = None
    projectId: Optional[str] = None
    history: Optional[List[HistoryTurn]] = None


def parse_request(body: Any) -> ConversationRequest:
    """Validate the JSON body.

    Raises:
        ValidationError: Body is not an object, fields have the wrong type,
            or ``message`` is missing or empty
    """
    if not isinstance(body, dict):
        raise ValidationError(MESSAGE_REQUIRED, parameter="message")
    try:
        req = ConversationRequest.model_validate(body)
    except PydanticValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field_name = ".".join(str(p) for p in first.get("loc", ())) or "body"
        raise ValidationError(
            f"Invalid field: {field_name}",
            details=first.get("msg"),
            parameter=field_name,
            expected="valid JSON value",
        ) from e
    if not req.message:
        raise ValidationError(MESSAGE_REQUIRED, parameter="message")
    return req


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


async def get_pipeline() -> ConversationPipeline:
    """Wire the pipeline against the shared database and gateway client."""
    db = await get_database()
    store = ConversationStore(db)
    llm = get_llm_client()
    return ConversationPipeline(
        loader=ContextLoader.from_config(store),
        classifier=get_classifier(),
        router=build_default_router(llm, DatabaseStatusProvider(store), runtime_config),
        assembler=ResponseAssembler(store),
    )


def get_resolver() -> TokenResolver:
    return get_token_resolver()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.options("/intelligent-conversation")
async def conversation_preflight():
    """CORS preflight."""
    return Response(status_code=204, headers=CORS_HEADERS)


@router.post("/intelligent-conversation")
async def intelligent_conversation(
    request: Request,
    authorization: Optional[str] = Header(None),
    pipeline: ConversationPipeline = Depends(get_pipeline),
    resolver: TokenResolver = Depends(get_resolver),
):
    """Classify a chat message, run its capability and return the envelope."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    try:
        req = parse_request(body)
    except ValidationError as e:
        logger.info(f"Rejected conversation request: {e}")
        content: Dict[str, Any] = {"error": e.message}
        if e.message != MESSAGE_REQUIRED:
            content["details"] = e.details
        return JSONResponse(status_code=400, content=content, headers=CORS_HEADERS)

    user_id = resolver.resolve(authorization)

    try:
        envelope = await pipeline.handle(
            req.message,
            user_id=user_id,
            conversation_id=req.conversationId,
            current_code=req.currentCode,
            project_id=req.projectId,
            history=[turn.model_dump() for turn in req.history] if req.history else None,
        )
    except Exception as e:
        logger.error(f"Intelligent conversation failed: {e}")
        return JSONResponse(
            status_code=500,
            content=error_response(e, include_stack=runtime_config.expose_error_stack),
            headers=CORS_HEADERS,
        )

    return JSONResponse(content=envelope, headers=CORS_HEADERS)
