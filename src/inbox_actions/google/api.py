from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from inbox_actions.errors import AuthenticationError, GoogleApiError

logger = logging.getLogger(__name__)

GMAIL_API = "https://gmail.googleapis.com/gmail/v1/users/me"
CALENDAR_API = "https://www.googleapis.com/calendar/v3"
DRIVE_API = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_API = "https://www.googleapis.com/upload/drive/v3"
DOCS_API = "https://docs.googleapis.com/v1"
TASKS_API = "https://tasks.googleapis.com/tasks/v1"


class GoogleSession:
    """
    Async REST session bound to one access token.

    Opened per dispatched action and closed afterwards; nothing is cached
    between actions. Non-2xx responses raise GoogleApiError carrying the
    status and raw body so executors can tell auth failures apart.
    """

    def __init__(
        self,
        access_token: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not access_token:
            raise AuthenticationError("Not authenticated - no access token supplied.")
        self._client = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GoogleSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        service: str,
        method: str,
        url: str,
        *,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        logger.debug("%s %s %s", service, method, url)
        resp = await self._client.request(
            method,
            url,
            json=json,
            content=content,
            headers=headers,
            params=params,
        )
        if resp.status_code >= 400:
            logger.warning("%s API responded %s for %s %s", service, resp.status_code, method, url)
            raise GoogleApiError(service, resp.status_code, resp.text)
        if not resp.content:
            return {}
        try:
            payload = resp.json()
        except (ValueError, RecursionError):
            payload = None
        # Google resources are JSON objects; anything else is an unusable reply.
        if not isinstance(payload, dict):
            logger.warning("%s API returned a non-object body for %s %s", service, method, url)
            raise GoogleApiError(service, resp.status_code, resp.text)
        return payload

    async def get(self, service: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        return await self.request(service, "GET", url, **kwargs)

    async def post(self, service: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        return await self.request(service, "POST", url, **kwargs)

    async def patch(self, service: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        return await self.request(service, "PATCH", url, **kwargs)
