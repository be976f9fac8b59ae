from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

ActionType = Literal["archive", "calendar", "drive", "docs", "task", "custom"]

ACTION_TYPES: Tuple[str, ...] = ("archive", "calendar", "drive", "docs", "task", "custom")


@dataclass(frozen=True)
class ParsedMessage:
    id: str
    subject: str
    sender: str
    sender_email: str
    date: str
    snippet: str
    thread_id: Optional[str] = None
    labels: List[str] = field(default_factory=list)
    body: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedMessage":
        return cls(
            id=str(data.get("id") or ""),
            thread_id=data.get("threadId"),
            subject=str(data.get("subject") or ""),
            sender=str(data.get("sender") or ""),
            sender_email=str(data.get("senderEmail") or ""),
            date=str(data.get("date") or ""),
            snippet=str(data.get("snippet") or ""),
            labels=[str(x) for x in (data.get("labels") or [])],
            body=data.get("body"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "subject": self.subject,
            "sender": self.sender,
            "senderEmail": self.sender_email,
            "date": self.date,
            "snippet": self.snippet,
            "labels": list(self.labels),
        }
        if self.thread_id is not None:
            payload["threadId"] = self.thread_id
        if self.body is not None:
            payload["body"] = self.body
        return payload


@dataclass(frozen=True)
class EmailGroup:
    sender_key: str
    sender_name: str
    sender_email: str
    messages: List[ParsedMessage]
    total_count: int
    unread_count: int
    latest_date: str
    related_emails: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmailGroup":
        messages = [ParsedMessage.from_dict(m) for m in (data.get("messages") or [])]
        return cls(
            sender_key=str(data.get("senderKey") or ""),
            sender_name=str(data.get("senderName") or ""),
            sender_email=str(data.get("senderEmail") or ""),
            related_emails=[str(x) for x in (data.get("relatedEmails") or [])],
            messages=messages,
            total_count=int(data.get("totalCount") or len(messages)),
            unread_count=int(data.get("unreadCount") or 0),
            latest_date=str(data.get("latestDate") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "senderKey": self.sender_key,
            "senderName": self.sender_name,
            "senderEmail": self.sender_email,
            "relatedEmails": list(self.related_emails),
            "messages": [m.to_dict() for m in self.messages],
            "totalCount": self.total_count,
            "unreadCount": self.unread_count,
            "latestDate": self.latest_date,
        }


@dataclass(frozen=True)
class ActionSuggestion:
    id: str
    type: str
    title: str
    description: str
    confidence: int = 50
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActionSuggestion":
        return cls(
            id=str(data.get("id") or ""),
            type=str(data.get("type") or ""),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            confidence=int(data.get("confidence", 50)),
            params=dict(data.get("params") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "confidence": self.confidence,
            "params": dict(self.params),
        }


@dataclass(frozen=True)
class ActionResult:
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    # Diagnostic trace only; never inspected for control flow.
    debug: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "debug": list(self.debug or []),
        }
        if self.details is not None:
            payload["details"] = self.details
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class EmailAnalysis:
    email_group: EmailGroup
    suggestions: List[ActionSuggestion]
    reasoning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "emailGroup": self.email_group.to_dict(),
            "suggestions": [s.to_dict() for s in self.suggestions],
            "reasoning": self.reasoning,
        }
