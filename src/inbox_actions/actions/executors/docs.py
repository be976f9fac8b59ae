from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from inbox_actions.actions.executors.base import (
    RECOVERABLE_ERRORS,
    ActionExecutor,
    ExecutionContext,
    Trace,
)
from inbox_actions.google.api import DOCS_API, DRIVE_API
from inbox_actions.models import ActionResult, ActionSuggestion

logger = logging.getLogger(__name__)


def _entries(action: ActionSuggestion, ctx: ExecutionContext) -> List[Dict[str, str]]:
    known = ctx.selected_messages()
    if known:
        return [
            {
                "subject": m.subject,
                "from": m.sender_email if m.sender in ("", m.sender_email) else f"{m.sender} <{m.sender_email}>",
                "date": m.date,
                "snippet": m.snippet,
            }
            for m in known
        ]

    supplied = action.params.get("emails")
    if isinstance(supplied, list) and supplied:
        return [
            {k: str(item.get(k) or "") for k in ("subject", "from", "date", "snippet")}
            for item in supplied
            if isinstance(item, dict)
        ]

    return [{"subject": f"Email {mid}", "from": "", "date": "", "snippet": ""} for mid in ctx.target_ids]


def summary_report(entries: List[Dict[str, str]], generated: datetime) -> str:
    lines = [
        "Email Summary Report",
        f"Generated: {generated:%Y-%m-%d %H:%M}",
        f"Total Emails: {len(entries)}",
        "",
        "---",
        "",
    ]
    for index, entry in enumerate(entries, start=1):
        lines.append(f"{index}. {entry['subject']}")
        lines.append(f"   From: {entry['from']}")
        lines.append(f"   Date: {entry['date']}")
        lines.append(f"   Preview: {entry['snippet']}")
        lines.append("")
    return "\n".join(lines) + "\n"


class DocsExecutor(ActionExecutor):
    """
    Writes a summary report of the selected emails into a new Google Doc.

    Steps run strictly in order (create, insert text, optional folder move).
    The first failing step stops the sequence and the result reports
    success=False with the document id (if any) and the steps that did
    complete, so callers never assume a later step happened.
    """

    service = "Docs"
    permission = "Google Docs"
    scope = "https://www.googleapis.com/auth/documents"

    async def _move_to_folder(self, ctx: ExecutionContext, document_id: str, folder_id: str) -> None:
        current = await ctx.api.get(
            "Drive",
            f"{DRIVE_API}/files/{document_id}",
            params={"fields": "parents"},
        )
        previous = ",".join(current.get("parents") or [])
        await ctx.api.patch(
            "Drive",
            f"{DRIVE_API}/files/{document_id}",
            params={"addParents": folder_id, "removeParents": previous},
            json={},
        )

    async def execute(self, action: ActionSuggestion, ctx: ExecutionContext) -> ActionResult:
        trace = Trace(logger)
        now = ctx.now()
        entries = _entries(action, ctx)
        title = action.params.get("docTitle") or action.params.get("title") or f"Email Summary - {now:%Y-%m-%d}"
        folder_id: Optional[str] = action.params.get("folderId")

        completed: List[str] = []
        document_id: Optional[str] = None

        def stopped(exc: BaseException, message: str) -> ActionResult:
            details: Dict[str, Any] = {"documentId": document_id, "completedSteps": list(completed)}
            return self.failure(exc, trace, message, details=details)

        try:
            created = await ctx.api.post("Docs", f"{DOCS_API}/documents", json={"title": title})
        except RECOVERABLE_ERRORS as exc:
            return stopped(exc, "Failed to create document")
        document_id = created.get("documentId")
        completed.append("create")
        trace.add(f"Created document {document_id}")

        try:
            await ctx.api.post(
                "Docs",
                f"{DOCS_API}/documents/{document_id}:batchUpdate",
                json={"requests": [{"insertText": {"location": {"index": 1}, "text": summary_report(entries, now)}}]},
            )
        except RECOVERABLE_ERRORS as exc:
            return stopped(exc, "Failed to write summary into document")
        completed.append("insertText")
        trace.add(f"Inserted summary of {len(entries)} email(s)")

        if folder_id:
            try:
                await self._move_to_folder(ctx, document_id, folder_id)
            except RECOVERABLE_ERRORS as exc:
                return stopped(exc, "Failed to move document into folder")
            completed.append("moveToFolder")
            trace.add(f"Moved document into folder {folder_id}")

        return ActionResult(
            success=True,
            message=f"Created summary document: {title}",
            details={
                "documentId": document_id,
                "documentUrl": f"https://docs.google.com/document/d/{document_id}/edit",
                "title": created.get("title", title),
                "emailCount": len(entries),
                "completedSteps": completed,
            },
            debug=trace.lines,
        )
