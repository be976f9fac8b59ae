from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from inbox_actions.config.settings import CREDENTIALS_PATH, TOKEN_PATH
from inbox_actions.google.credentials import SCOPES, GoogleAuthConfig
from inbox_actions.models import ParsedMessage
from inbox_actions.parsing.parser import parse_message

logger = logging.getLogger(__name__)


def load_auth_config() -> GoogleAuthConfig:
    if not CREDENTIALS_PATH.exists():
        raise RuntimeError(
            f"Missing Google credentials at {CREDENTIALS_PATH}. "
            "Did you configure INBOX_ACTIONS_SECRETS_DIR?"
        )
    return GoogleAuthConfig(credentials_path=CREDENTIALS_PATH, token_path=TOKEN_PATH)


class GmailClient:
    """Blocking Gmail reader used to build email groups for analysis."""

    def __init__(self, cfg: GoogleAuthConfig, user_id: str = "me"):
        self._cfg = cfg
        self._user_id = user_id
        self._creds: Optional[Credentials] = None
        self._service = None

    def connect(self) -> None:
        """Create an authenticated Gmail API service client."""
        creds = None

        if self._cfg.token_path.exists():
            creds = Credentials.from_authorized_user_file(str(self._cfg.token_path), SCOPES)

        # If there are no (valid) credentials available, let the user log in.
        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            else:
                flow = InstalledAppFlow.from_client_secrets_file(
                    str(self._cfg.credentials_path),
                    SCOPES,
                )
                creds = flow.run_local_server(port=0)

            # Save the credentials for the next run.
            self._cfg.token_path.parent.mkdir(parents=True, exist_ok=True)
            self._cfg.token_path.write_text(creds.to_json(), encoding="utf-8")

        self._creds = creds
        self._service = build("gmail", "v1", credentials=creds)

    @property
    def service(self):
        if self._service is None:
            raise RuntimeError("GmailClient is not connected. Call connect() first.")
        return self._service

    @property
    def access_token(self) -> str:
        if self._creds is None or not self._creds.token:
            raise RuntimeError("GmailClient is not connected. Call connect() first.")
        return self._creds.token

    def list_messages(self, query: str = "", max_results: int = 10) -> List[str]:
        """
        List message IDs matching a Gmail search query.
        Example query: 'label:INBOX newer_than:7d'
        """
        resp = (
            self.service.users()
            .messages()
            .list(userId=self._user_id, q=query, maxResults=max_results)
            .execute()
        )
        msgs = resp.get("messages", [])
        return [m["id"] for m in msgs]

    def get_message(self, message_id: str, fmt: str = "full") -> Dict[str, Any]:
        """
        Fetch a message resource.
        fmt: 'full' | 'metadata' | 'minimal' | 'raw'
        """
        return (
            self.service.users()
            .messages()
            .get(userId=self._user_id, id=message_id, format=fmt)
            .execute()
        )

    def fetch_messages(self, query: str = "label:INBOX", max_results: int = 50) -> List[ParsedMessage]:
        """List and parse messages; ones that vanish between list and get are skipped."""
        parsed: List[ParsedMessage] = []
        for mid in self.list_messages(query=query, max_results=max_results):
            try:
                parsed.append(parse_message(self.get_message(mid, fmt="full")))
            except Exception as exc:
                logger.warning("Skipping message %s: %s: %s", mid, type(exc).__name__, exc)
        return parsed
