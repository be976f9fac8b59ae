from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from backend.app.status import ActionLogEntry, action_log_store
from inbox_actions.actions.dispatcher import ActionDispatcher, default_dispatcher
from inbox_actions.config.settings import CREDENTIALS_PATH, TOKEN_PATH
from inbox_actions.errors import AuthenticationError, UnknownActionTypeError
from inbox_actions.google.credentials import (
    AccessTokenProvider,
    FileTokenProvider,
    GoogleAuthConfig,
    StaticTokenProvider,
)
from inbox_actions.models import ActionSuggestion, ParsedMessage

logger = logging.getLogger(__name__)

router = APIRouter()


class ActionIn(BaseModel):
    id: str = ""
    type: str
    title: str = ""
    description: str = ""
    confidence: int = 50
    params: Dict[str, Any] = Field(default_factory=dict)


class MessageIn(BaseModel):
    id: str
    threadId: Optional[str] = None
    subject: str = ""
    sender: str = ""
    senderEmail: str = ""
    date: str = ""
    snippet: str = ""
    labels: List[str] = Field(default_factory=list)
    body: Optional[str] = None


class ExecuteRequest(BaseModel):
    action: Optional[ActionIn] = None
    emailIds: List[str] = Field(default_factory=list)
    messages: Optional[List[MessageIn]] = None
    debug: bool = False


def get_token_provider(request: Request) -> AccessTokenProvider:
    """Bearer header wins; otherwise fall back to the stored OAuth token."""
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return StaticTokenProvider(header[7:])
    return FileTokenProvider(GoogleAuthConfig(credentials_path=CREDENTIALS_PATH, token_path=TOKEN_PATH))


def get_dispatcher() -> ActionDispatcher:
    return default_dispatcher()


@router.post("/actions/execute")
async def execute_action(
    req: ExecuteRequest,
    provider: AccessTokenProvider = Depends(get_token_provider),
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
) -> dict:
    ids = [mid for mid in req.emailIds if mid]
    if req.action is None or not ids:
        raise HTTPException(status_code=400, detail="Action and email IDs are required")

    try:
        # Token refresh does blocking I/O.
        token = await run_in_threadpool(provider.get_access_token)
    except AuthenticationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    action = ActionSuggestion.from_dict(req.action.model_dump())
    messages = [ParsedMessage.from_dict(m.model_dump()) for m in (req.messages or [])]

    try:
        result = await dispatcher.execute(
            action,
            ids,
            access_token=token,
            messages=messages,
            debug=req.debug,
        )
    except AuthenticationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except UnknownActionTypeError as exc:
        logger.error("Action execution error: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to execute action") from exc
    except Exception as exc:
        logger.exception("Action execution error")
        raise HTTPException(status_code=500, detail="Failed to execute action") from exc

    action_log_store.record(
        ActionLogEntry(
            type=action.type,
            title=action.title,
            success=result.success,
            message=result.message,
            targets=len(ids),
        )
    )
    return result.to_dict()


@router.get("/actions/recent")
async def recent_actions() -> dict:
    return {"ok": True, "actions": action_log_store.snapshot()}
