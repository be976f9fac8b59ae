from __future__ import annotations

import base64

from inbox_actions.parsing.parser import extract_body_from_payload, parse_message, split_sender


def _b64(text: str) -> str:
    # Gmail returns unpadded base64url.
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def test_parse_message_reads_headers_and_plain_body() -> None:
    resource = {
        "id": "m1",
        "threadId": "t1",
        "snippet": "Quarterly numbers attached",
        "labelIds": ["INBOX", "UNREAD"],
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": [
                {"name": "Subject", "value": "Q1 report"},
                {"name": "From", "value": '"Dana Scully" <dana@fbi.example>'},
                {"name": "Date", "value": "Mon, 3 Mar 2025 09:15:00 +0000"},
            ],
            "parts": [
                {"mimeType": "text/html", "body": {"data": _b64("<p>html</p>")}},
                {"mimeType": "text/plain", "body": {"data": _b64("plain body!")}},
            ],
        },
    }

    msg = parse_message(resource)

    assert msg.id == "m1"
    assert msg.thread_id == "t1"
    assert msg.subject == "Q1 report"
    assert msg.sender == "Dana Scully"
    assert msg.sender_email == "dana@fbi.example"
    assert msg.date == "Mon, 3 Mar 2025 09:15:00 +0000"
    assert msg.labels == ["INBOX", "UNREAD"]
    assert msg.body == "plain body!"


def test_parse_message_defaults_missing_subject_and_body() -> None:
    msg = parse_message({"id": "m2", "payload": {"headers": [{"name": "From", "value": "bot@example.com"}]}})

    assert msg.subject == "No Subject"
    assert msg.sender == "bot@example.com"
    assert msg.sender_email == "bot@example.com"
    assert msg.body is None


def test_extract_body_falls_back_to_html() -> None:
    payload = {
        "mimeType": "multipart/mixed",
        "parts": [
            {
                "mimeType": "multipart/alternative",
                "parts": [{"mimeType": "text/html", "body": {"data": _b64("<b>only html</b>")}}],
            }
        ],
    }

    assert extract_body_from_payload(payload) == "<b>only html</b>"


def test_split_sender_without_display_name() -> None:
    assert split_sender("<alerts@bank.example>") == ("alerts@bank.example", "alerts@bank.example")
