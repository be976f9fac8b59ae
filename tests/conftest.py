from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, List

import httpx
import pytest

from inbox_actions.actions.dispatcher import default_dispatcher
from inbox_actions.config.settings import Settings
from inbox_actions.models import ActionResult

FIXED_NOW = datetime(2025, 3, 3, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def sent() -> List[httpx.Request]:
    """Requests seen by the fake Google transport, in order."""
    return []


@pytest.fixture
def run_action(sent: List[httpx.Request]) -> Callable[..., ActionResult]:
    def _run(
        handler: Callable[[httpx.Request], httpx.Response],
        action: Any,
        target_ids: List[str],
        settings: Settings = Settings(),
        **kwargs: Any,
    ) -> ActionResult:
        def recording(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        dispatcher = default_dispatcher(settings, transport=httpx.MockTransport(recording))
        dispatcher.clock = lambda: FIXED_NOW
        return asyncio.run(dispatcher.execute(action, target_ids, access_token="test-token", **kwargs))

    return _run
