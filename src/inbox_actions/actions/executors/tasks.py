from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from inbox_actions.actions.executors.base import (
    RECOVERABLE_ERRORS,
    ActionExecutor,
    ExecutionContext,
    Trace,
    settle_all,
)
from inbox_actions.extractors.event_time import to_rfc3339_utc
from inbox_actions.google.api import TASKS_API
from inbox_actions.models import ActionResult, ActionSuggestion

logger = logging.getLogger(__name__)

DEFAULT_LIST_TITLES = ("My Tasks", "Tasks")


def task_body(title: str, notes: Optional[str] = None, due: Optional[str] = None) -> Dict[str, str]:
    body = {"title": title}
    if notes:
        body["notes"] = notes
    if due:
        body["due"] = due
    return body


class TaskExecutor(ActionExecutor):
    service = "Tasks"
    permission = "Google Tasks"
    scope = "https://www.googleapis.com/auth/tasks"

    async def resolve_list_id(self, ctx: ExecutionContext, trace: Trace) -> str:
        listing = await ctx.api.get("Tasks", f"{TASKS_API}/users/@me/lists")
        lists = listing.get("items") or []
        for task_list in lists:
            if task_list.get("title") in DEFAULT_LIST_TITLES:
                trace.add(f"Using task list '{task_list.get('title')}'")
                return task_list["id"]
        if lists:
            trace.add(f"Using first task list '{lists[0].get('title')}'")
            return lists[0]["id"]

        created = await ctx.api.post("Tasks", f"{TASKS_API}/users/@me/lists", json={"title": "My Tasks"})
        trace.add("Created task list 'My Tasks'")
        return created["id"]

    async def _create(self, ctx: ExecutionContext, list_id: str, body: Dict[str, str]) -> Dict[str, Any]:
        return await ctx.api.post("Tasks", f"{TASKS_API}/lists/{list_id}/tasks", json=body)

    def _single_body(self, action: ActionSuggestion, ctx: ExecutionContext) -> Dict[str, str]:
        params = action.params
        message = ctx.message(ctx.target_ids[0])
        if message is not None:
            subject = message.subject
            sender = message.sender or message.sender_email
            snippet = message.snippet
        else:
            subject = params.get("subject") or action.title
            sender = params.get("sender") or ""
            snippet = params.get("snippet") or action.description or ""
        due = to_rfc3339_utc(params.get("dueDate") or params.get("due"), ctx.now())
        return task_body(f"Follow up: {subject}", f"From: {sender}\n\n{snippet}", due)

    def _batch_bodies(self, items: List[Any], ctx: ExecutionContext) -> List[Dict[str, str]]:
        bodies = []
        for item in items:
            if isinstance(item, str):
                item = {"title": item}
            if not isinstance(item, dict) or not item.get("title"):
                continue
            due = to_rfc3339_utc(item.get("dueDate") or item.get("due"), ctx.now())
            bodies.append(task_body(str(item["title"]), item.get("notes"), due))
        return bodies

    async def execute(self, action: ActionSuggestion, ctx: ExecutionContext) -> ActionResult:
        trace = Trace(logger)
        try:
            list_id = await self.resolve_list_id(ctx, trace)
        except RECOVERABLE_ERRORS as exc:
            return self.failure(exc, trace, "Failed to find a task list")

        items = action.params.get("tasks")
        if isinstance(items, list):
            return await self._create_many(self._batch_bodies(items, ctx), list_id, ctx, trace)

        body = self._single_body(action, ctx)
        try:
            task = await self._create(ctx, list_id, body)
        except RECOVERABLE_ERRORS as exc:
            return self.failure(exc, trace, "Failed to create task")

        trace.add(f"Created task {task.get('id')}")
        return ActionResult(
            success=True,
            message=f"Task created: {body['title']}",
            details={
                "taskId": task.get("id"),
                "title": task.get("title", body["title"]),
                "due": task.get("due"),
                "taskListId": list_id,
                "webViewLink": f"https://tasks.google.com/task/{task.get('id')}",
            },
            debug=trace.lines,
        )

    async def _create_many(
        self,
        bodies: List[Dict[str, str]],
        list_id: str,
        ctx: ExecutionContext,
        trace: Trace,
    ) -> ActionResult:
        outcomes = await settle_all(self._create(ctx, list_id, body) for body in bodies)

        failed = 0
        for body, outcome in zip(bodies, outcomes):
            if isinstance(outcome, BaseException):
                failed += 1
                logger.warning("Task '%s' failed: %s", body["title"], outcome)
                if ctx.debug:
                    trace.add(f"Failed to create task '{body['title']}': {outcome}")
        successful = len(bodies) - failed

        message = f"Created {successful} tasks"
        if failed:
            message += f", {failed} failed"
        trace.add(message)
        return ActionResult(
            success=True,
            message=message,
            details={"successful": successful, "failed": failed, "taskListId": list_id},
            debug=trace.lines,
        )
