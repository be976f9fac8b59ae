from __future__ import annotations

import json
import logging
import re
from datetime import timezone
from typing import Any, Dict, Optional

from inbox_actions.actions.executors.base import (
    RECOVERABLE_ERRORS,
    ActionExecutor,
    ExecutionContext,
    Trace,
)
from inbox_actions.google.api import DRIVE_UPLOAD_API, GMAIL_API
from inbox_actions.models import ActionResult, ActionSuggestion, ParsedMessage
from inbox_actions.parsing.parser import parse_message
from inbox_actions.pipeline.grouping import message_datetime

logger = logging.getLogger(__name__)

BOUNDARY = "-------314159265358979323846"
_UNSAFE = re.compile(r"[^a-zA-Z0-9\s]")


def sanitize(value: str) -> str:
    return _UNSAFE.sub("", value or "")


def email_document(message: ParsedMessage) -> str:
    return (
        f"Subject: {message.subject}\n"
        f"From: {_from_line(message)}\n"
        f"Date: {message.date}\n\n"
        "---\n\n"
        f"{message.body or message.snippet}"
    )


def _from_line(message: ParsedMessage) -> str:
    if message.sender and message.sender_email and message.sender != message.sender_email:
        return f"{message.sender} <{message.sender_email}>"
    return message.sender or message.sender_email


def build_file_name(message: ParsedMessage, fallback_date: str) -> str:
    sender = sanitize(message.sender).strip()
    if not sender:
        sender = (message.sender_email or "unknown").split("@")[0]
    subject = sanitize(message.subject)[:50]
    parsed = message_datetime(message.date)
    day = parsed.astimezone(timezone.utc).date().isoformat() if parsed else fallback_date
    return f"{sender} - {subject} - {day}.txt"


def multipart_body(metadata: Dict[str, Any], content: str) -> bytes:
    delimiter = f"\r\n--{BOUNDARY}\r\n"
    close = f"\r\n--{BOUNDARY}--"
    body = (
        delimiter
        + "Content-Type: application/json\r\n\r\n"
        + json.dumps(metadata)
        + delimiter
        + f"Content-Type: {metadata['mimeType']}\r\n\r\n"
        + content
        + close
    )
    return body.encode("utf-8")


class DriveExecutor(ActionExecutor):
    service = "Drive"
    permission = "Drive file"
    scope = "https://www.googleapis.com/auth/drive.file"

    async def _load_message(self, ctx: ExecutionContext, message_id: str, trace: Trace) -> ParsedMessage:
        known = ctx.message(message_id)
        if known is not None and known.body:
            return known
        trace.add(f"Fetching full message {message_id}")
        resource = await ctx.api.get(
            "Gmail",
            f"{GMAIL_API}/messages/{message_id}",
            params={"format": "full"},
        )
        return parse_message(resource)

    async def execute(self, action: ActionSuggestion, ctx: ExecutionContext) -> ActionResult:
        trace = Trace(logger)
        message_id = action.params.get("messageId") or ctx.target_ids[0]

        try:
            message = await self._load_message(ctx, message_id, trace)
        except RECOVERABLE_ERRORS as exc:
            return self.failure(exc, trace, "Failed to read email for Drive")

        custom: Optional[str] = action.params.get("fileName")
        file_name = custom or build_file_name(message, ctx.now().date().isoformat())
        metadata: Dict[str, Any] = {
            "name": file_name,
            "mimeType": "text/plain",
            "description": f"Email: {message.subject} from {_from_line(message)}",
        }
        folder_id = action.params.get("folderId")
        if folder_id:
            metadata["parents"] = [folder_id]
        trace.add(f"Uploading {file_name}")

        try:
            uploaded = await ctx.api.post(
                "Drive",
                f"{DRIVE_UPLOAD_API}/files",
                params={"uploadType": "multipart"},
                content=multipart_body(metadata, email_document(message)),
                headers={"Content-Type": f'multipart/related; boundary="{BOUNDARY}"'},
            )
        except RECOVERABLE_ERRORS as exc:
            return self.failure(exc, trace, "Failed to save email to Drive")

        file_id = uploaded.get("id")
        link = uploaded.get("webViewLink") or f"https://drive.google.com/file/d/{file_id}/view"
        trace.add(f"Uploaded file {file_id}")
        return ActionResult(
            success=True,
            message=f"Saved email to Drive: {file_name}",
            details={"fileId": file_id, "fileName": uploaded.get("name", file_name), "webViewLink": link},
            debug=trace.lines,
        )
