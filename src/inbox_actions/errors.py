from __future__ import annotations

from typing import Optional


class ActionValidationError(ValueError):
    """Request rejected before any executor ran (missing action, no targets)."""


class UnknownActionTypeError(ValueError):
    def __init__(self, action_type: str) -> None:
        super().__init__(f"Unknown action type: {action_type}")
        self.action_type = action_type


class AuthenticationError(RuntimeError):
    """No usable bearer token, or the upstream service rejected it."""

    def __init__(self, message: str, scope: Optional[str] = None) -> None:
        super().__init__(message)
        self.scope = scope


class GoogleApiError(RuntimeError):
    def __init__(self, service: str, status: int, body: str) -> None:
        super().__init__(f"{service} API error: {status} - {body}")
        self.service = service
        self.status = status
        self.body = body

    @property
    def is_auth_error(self) -> bool:
        return self.status in (401, 403)
