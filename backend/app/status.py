from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from time import time
from typing import Any, Dict, List

MAX_ENTRIES = 50


@dataclass
class ActionLogEntry:
    type: str
    title: str
    success: bool
    message: str
    targets: int
    at: float = field(default_factory=time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "success": self.success,
            "message": self.message,
            "targets": self.targets,
            "at": self.at,
        }


class ActionLogStore:
    def __init__(self, limit: int = MAX_ENTRIES) -> None:
        self._lock = Lock()
        self._limit = limit
        self._entries: List[ActionLogEntry] = []

    def record(self, entry: ActionLogEntry) -> None:
        # Keep newest first and cap memory/response size.
        with self._lock:
            self._entries.insert(0, entry)
            del self._entries[self._limit :]

    def snapshot(self) -> List[Dict[str, Any]]:
        # Return copies to avoid mutation by callers.
        with self._lock:
            return [e.to_dict() for e in self._entries]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


action_log_store = ActionLogStore()
