from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, Iterable, List, Optional

from inbox_actions.models import EmailGroup, ParsedMessage

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def sender_key(message: ParsedMessage) -> str:
    # Normalize "Name <mail@domain>" senders for exact comparisons.
    return (message.sender_email or message.sender).strip().lower()


def message_datetime(value: str) -> Optional[datetime]:
    """Parse an RFC 2822 Date header (or ISO string) into an aware datetime."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _sort_key(message: ParsedMessage) -> datetime:
    return message_datetime(message.date) or _EPOCH


def group_by_sender(messages: Iterable[ParsedMessage]) -> List[EmailGroup]:
    """
    Cluster messages by sender address.

    Messages inside a group are newest first; groups are ordered by size,
    then by their newest message.
    """
    buckets: Dict[str, List[ParsedMessage]] = {}
    for message in messages:
        key = sender_key(message)
        if not key:
            continue
        buckets.setdefault(key, []).append(message)

    groups: List[EmailGroup] = []
    for key, bucket in buckets.items():
        ordered = sorted(bucket, key=_sort_key, reverse=True)
        latest = ordered[0]
        related = sorted({m.sender_email.strip() for m in ordered if m.sender_email.strip()})
        groups.append(
            EmailGroup(
                sender_key=key,
                sender_name=latest.sender,
                sender_email=latest.sender_email,
                related_emails=related,
                messages=ordered,
                total_count=len(ordered),
                unread_count=sum(1 for m in ordered if "UNREAD" in m.labels),
                latest_date=latest.date,
            )
        )

    groups.sort(
        key=lambda g: (g.total_count, _sort_key(g.messages[0])),
        reverse=True,
    )
    return groups
