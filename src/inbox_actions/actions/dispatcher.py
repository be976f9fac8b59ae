from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

import httpx

from inbox_actions.actions.executors.archive import ArchiveExecutor
from inbox_actions.actions.executors.base import ActionExecutor, ExecutionContext, local_now
from inbox_actions.actions.executors.calendar import CalendarExecutor
from inbox_actions.actions.executors.custom import CustomExecutor
from inbox_actions.actions.executors.docs import DocsExecutor
from inbox_actions.actions.executors.drive import DriveExecutor
from inbox_actions.actions.executors.tasks import TaskExecutor
from inbox_actions.config.settings import Settings, load_settings
from inbox_actions.errors import ActionValidationError, UnknownActionTypeError
from inbox_actions.google.api import GoogleSession
from inbox_actions.models import ActionResult, ActionSuggestion, ParsedMessage

logger = logging.getLogger(__name__)


@dataclass
class ActionDispatcher:
    executors: Dict[str, ActionExecutor]
    timeout: float = 30.0
    # Always collect per-item failures in debug traces.
    force_debug: bool = False
    transport: Optional[httpx.AsyncBaseTransport] = None
    clock: Callable[[], datetime] = local_now

    async def execute(
        self,
        action: Optional[ActionSuggestion],
        target_ids: List[str],
        *,
        access_token: str,
        messages: Optional[Iterable[ParsedMessage]] = None,
        debug: bool = False,
    ) -> ActionResult:
        """
        Route one confirmed suggestion to its executor.

        Raises ActionValidationError before any call when the action or the
        targets are missing, and UnknownActionTypeError for a type outside
        the registered set. Executor results always come back with a debug list.
        """
        if action is None:
            raise ActionValidationError("Action and email IDs are required")
        ids = [mid for mid in (target_ids or []) if mid]
        if not ids:
            raise ActionValidationError("Action and email IDs are required")

        executor = self.executors.get(action.type)
        if executor is None:
            raise UnknownActionTypeError(action.type)

        logger.info("Executing %s action '%s' on %d email(s)", action.type, action.title, len(ids))
        async with GoogleSession(access_token, timeout=self.timeout, transport=self.transport) as api:
            ctx = ExecutionContext(
                target_ids=ids,
                api=api,
                messages={m.id: m for m in (messages or [])},
                debug=debug or self.force_debug,
                clock=self.clock,
            )
            result = await executor.execute(action, ctx)

        if result.debug is None:
            result = replace(result, debug=[])
        logger.info("%s action finished success=%s: %s", action.type, result.success, result.message)
        return result


def default_dispatcher(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ActionDispatcher:
    settings = settings or load_settings()
    return ActionDispatcher(
        executors={
            "archive": ArchiveExecutor(),
            "calendar": CalendarExecutor(time_zone=settings.time_zone),
            "drive": DriveExecutor(),
            "docs": DocsExecutor(),
            "task": TaskExecutor(),
            "custom": CustomExecutor(),
        },
        timeout=settings.http_timeout,
        force_debug=settings.debug_trace,
        transport=transport,
    )
