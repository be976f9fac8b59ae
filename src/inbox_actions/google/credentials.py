from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from inbox_actions.errors import AuthenticationError


# Gmail modify covers archiving and the full-format reads used for Drive saves.
SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/tasks",
]


@dataclass(frozen=True)
class GoogleAuthConfig:
    # Path to OAuth client credentials downloaded from Google Cloud Console.
    credentials_path: Path
    # Authorized-user token written by the login flow.
    token_path: Path


class AccessTokenProvider(Protocol):
    def get_access_token(self) -> str: ...


class StaticTokenProvider:
    """Hands out a token obtained elsewhere (e.g. a bearer header)."""

    def __init__(self, token: Optional[str]) -> None:
        self._token = (token or "").strip()

    def get_access_token(self) -> str:
        if not self._token:
            raise AuthenticationError("Not authenticated - no access token supplied.")
        return self._token


class FileTokenProvider:
    """Reads the stored authorized-user token and refreshes it when expired."""

    def __init__(self, cfg: GoogleAuthConfig) -> None:
        self._cfg = cfg

    def load_credentials(self) -> Credentials:
        if not self._cfg.token_path.exists():
            raise AuthenticationError(
                f"Not authenticated - no stored token at {self._cfg.token_path}."
            )
        creds = Credentials.from_authorized_user_file(str(self._cfg.token_path), SCOPES)

        if not creds.valid:
            if not (creds.expired and creds.refresh_token):
                raise AuthenticationError("Stored Google token is invalid. Please sign in again.")
            try:
                creds.refresh(Request())
            except RefreshError as exc:
                raise AuthenticationError(f"Token refresh failed: {exc}") from exc
            # Save the refreshed token for the next run.
            self._cfg.token_path.write_text(creds.to_json(), encoding="utf-8")
        return creds

    def get_access_token(self) -> str:
        creds = self.load_credentials()
        if not creds.token:
            raise AuthenticationError("Stored Google token carries no access token.")
        return creds.token
