from __future__ import annotations

import logging

from inbox_actions.actions.executors.base import ActionExecutor, ExecutionContext, Trace, settle_all
from inbox_actions.google.api import GMAIL_API
from inbox_actions.models import ActionResult, ActionSuggestion

logger = logging.getLogger(__name__)


class ArchiveExecutor(ActionExecutor):
    service = "Gmail"
    permission = "Gmail modify"
    scope = "https://www.googleapis.com/auth/gmail.modify"

    async def _archive_one(self, ctx: ExecutionContext, message_id: str) -> None:
        await ctx.api.post(
            "Gmail",
            f"{GMAIL_API}/messages/{message_id}/modify",
            json={"removeLabelIds": ["INBOX"]},
        )

    async def execute(self, action: ActionSuggestion, ctx: ExecutionContext) -> ActionResult:
        trace = Trace(logger)
        trace.add(f"Archiving {len(ctx.target_ids)} email(s)")

        outcomes = await settle_all(self._archive_one(ctx, mid) for mid in ctx.target_ids)

        failed = 0
        for mid, outcome in zip(ctx.target_ids, outcomes):
            if isinstance(outcome, BaseException):
                failed += 1
                logger.warning("Archive of %s failed: %s", mid, outcome)
                if ctx.debug:
                    trace.add(f"Failed to archive {mid}: {outcome}")
        successful = len(ctx.target_ids) - failed

        message = f"Archived {successful} emails"
        if failed:
            message += f", {failed} failed"
        trace.add(message)
        # Partial failure still reports success; the counts carry the outcome.
        return ActionResult(
            success=True,
            message=message,
            details={"successful": successful, "failed": failed},
            debug=trace.lines,
        )
