from __future__ import annotations

from inbox_actions.actions.executors.base import ActionExecutor, ExecutionContext
from inbox_actions.models import ActionResult, ActionSuggestion


class CustomExecutor(ActionExecutor):
    # No external effect; the caller gets the suggestion echoed back.
    async def execute(self, action: ActionSuggestion, ctx: ExecutionContext) -> ActionResult:
        return ActionResult(
            success=True,
            message=f"Custom action: {action.title}",
            details=dict(action.params),
            debug=[],
        )
