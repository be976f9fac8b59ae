from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

import httpx

from inbox_actions.errors import AuthenticationError, GoogleApiError
from inbox_actions.google.api import GoogleSession
from inbox_actions.models import ActionResult, ActionSuggestion, ParsedMessage

# Failures an executor turns into ActionResult(success=False); anything else propagates.
RECOVERABLE_ERRORS = (GoogleApiError, AuthenticationError, httpx.HTTPError)


def local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class ExecutionContext:
    target_ids: List[str]
    api: GoogleSession
    messages: Dict[str, ParsedMessage] = field(default_factory=dict)
    debug: bool = False
    clock: Callable[[], datetime] = local_now

    def now(self) -> datetime:
        return self.clock()

    def message(self, message_id: str) -> Optional[ParsedMessage]:
        return self.messages.get(message_id)

    def selected_messages(self) -> List[ParsedMessage]:
        """Known metadata for the targets, in target order."""
        return [self.messages[mid] for mid in self.target_ids if mid in self.messages]


class Trace:
    """Ordered step log returned to the caller as ActionResult.debug."""

    def __init__(self, log: logging.Logger) -> None:
        self._log = log
        self.lines: List[str] = []

    def add(self, message: str) -> None:
        self.lines.append(message)
        self._log.debug(message)


async def settle_all(calls: Iterable[Awaitable[Any]]) -> List[Any]:
    """Run every call concurrently and wait for all; exceptions come back as values."""
    return await asyncio.gather(*calls, return_exceptions=True)


def is_auth_failure(exc: BaseException) -> bool:
    if isinstance(exc, AuthenticationError):
        return True
    return isinstance(exc, GoogleApiError) and exc.is_auth_error


class ActionExecutor(ABC):
    service: str = "Google"
    permission: str = "Google"
    scope: Optional[str] = None

    @abstractmethod
    async def execute(self, action: ActionSuggestion, ctx: ExecutionContext) -> ActionResult:
        """Carry out one confirmed suggestion."""
        ...

    def auth_message(self) -> str:
        scope = f" ({self.scope})" if self.scope else ""
        return (
            f"{self.service} access denied. Please sign out and sign in again "
            f"to grant the {self.permission} permission{scope}."
        )

    def failure(
        self,
        exc: BaseException,
        trace: Trace,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> ActionResult:
        trace.add(f"Error: {type(exc).__name__}: {exc}")
        if is_auth_failure(exc):
            message = self.auth_message()
        return ActionResult(
            success=False,
            message=message,
            details=details,
            error=str(exc),
            debug=trace.lines,
        )
