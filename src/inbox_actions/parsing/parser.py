from __future__ import annotations

import base64
import re
from email.utils import parseaddr
from typing import Any, Dict, Optional, Tuple

from inbox_actions.models import ParsedMessage


def extract_body_from_payload(payload: dict) -> str:
    """
    Extract plain text body from Gmail message payload.
    Falls back to HTML if plain text is unavailable.
    """
    def decode(data: str) -> str:
        # Gmail strips base64url padding.
        padded = data + "=" * (-len(data) % 4)
        return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")

    def find_part(part: dict, mime_type: str) -> Optional[str]:
        # Depth-first search through multipart payloads.
        if part.get("mimeType") == mime_type and part.get("body", {}).get("data"):
            return decode(part["body"]["data"])
        for child in part.get("parts", []) or []:
            found = find_part(child, mime_type)
            if found:
                return found
        return None

    if payload.get("body", {}).get("data"):
        return decode(payload["body"]["data"])

    text = find_part(payload, "text/plain")
    if text:
        return text

    html = find_part(payload, "text/html")
    if html:
        return html

    return ""


def header_map(payload: dict) -> Dict[str, str]:
    return {
        h["name"]: h["value"]
        for h in payload.get("headers", []) or []
        if h.get("name") and h.get("value") is not None
    }


def split_sender(from_header: str) -> Tuple[str, str]:
    """Return (display name, address) for a From header.

    A header without a display name yields the address for both values.
    """
    raw = (from_header or "").strip()
    display, address = parseaddr(raw)
    if not address:
        match = re.search(r"<(.+?)>", raw)
        address = match.group(1) if match else raw
    display = display.strip().strip('"').strip()
    return display or address, address


def parse_message(msg: Dict[str, Any]) -> ParsedMessage:
    """Normalize a Gmail message resource (format=full) into a ParsedMessage."""
    payload = msg.get("payload", {}) or {}
    headers = header_map(payload)
    sender, sender_email = split_sender(headers.get("From", ""))
    body = extract_body_from_payload(payload)

    return ParsedMessage(
        id=str(msg.get("id") or ""),
        thread_id=msg.get("threadId"),
        subject=headers.get("Subject") or "No Subject",
        sender=sender,
        sender_email=sender_email,
        date=headers.get("Date", ""),
        snippet=msg.get("snippet", ""),
        labels=[str(x) for x in (msg.get("labelIds") or [])],
        body=body or None,
    )
