from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Loaded once, before any variable below is read.
load_dotenv()

# Repository root, independent of the working directory.
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def resolve_dir(env_key: str, default: str, root: Path = PROJECT_ROOT) -> Path:
    """Directory from ENV; relative values are taken from `root`. Created on demand."""
    path = Path(os.getenv(env_key, "").strip() or default)
    if not path.is_absolute():
        path = root / path
    path.mkdir(parents=True, exist_ok=True)
    return path


# Holds the OAuth client file and the authorized-user token.
SECRETS_DIR = resolve_dir("INBOX_ACTIONS_SECRETS_DIR", "secrets")
CREDENTIALS_PATH = SECRETS_DIR / "credentials.json"
TOKEN_PATH = SECRETS_DIR / "google_token.json"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    openai_model: str = "gpt-4.1-mini"
    # Seconds before a single Google API call is abandoned.
    http_timeout: float = 30.0
    # IANA zone attached to calendar events, e.g. "Europe/Berlin".
    time_zone: Optional[str] = None
    # Collect per-item error text in archive/batch debug traces.
    debug_trace: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        openai_model=os.getenv("INBOX_ACTIONS_OPENAI_MODEL", "").strip() or "gpt-4.1-mini",
        http_timeout=_env_float("INBOX_ACTIONS_HTTP_TIMEOUT", 30.0),
        time_zone=os.getenv("INBOX_ACTIONS_TIME_ZONE", "").strip() or None,
        debug_trace=_env_flag("INBOX_ACTIONS_DEBUG"),
        log_level=os.getenv("LOG_LEVEL", "").strip().upper() or "INFO",
    )
