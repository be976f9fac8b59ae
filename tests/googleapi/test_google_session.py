from __future__ import annotations

import asyncio

import httpx
import pytest

from inbox_actions.errors import GoogleApiError
from inbox_actions.google.api import GoogleSession


def _get(response: httpx.Response):
    async def run():
        transport = httpx.MockTransport(lambda request: response)
        async with GoogleSession("tok", transport=transport) as api:
            return await api.get("Drive", "https://www.googleapis.com/drive/v3/files/f1")

    return asyncio.run(run())


def test_session_returns_json_object() -> None:
    assert _get(httpx.Response(200, json={"id": "f1"})) == {"id": "f1"}


def test_session_empty_body_is_empty_dict() -> None:
    assert _get(httpx.Response(204)) == {}


def test_session_rejects_non_json_body() -> None:
    with pytest.raises(GoogleApiError) as info:
        _get(httpx.Response(200, text="<html>proxy ok</html>"))

    assert info.value.status == 200
    assert info.value.is_auth_error is False


def test_session_rejects_json_array_body() -> None:
    with pytest.raises(GoogleApiError):
        _get(httpx.Response(200, json=[1, 2]))
