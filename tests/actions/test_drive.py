from __future__ import annotations

import base64
import json

import httpx

from inbox_actions.actions.executors.drive import BOUNDARY, build_file_name
from inbox_actions.models import ActionSuggestion, ParsedMessage

SAVE = ActionSuggestion(id="s1", type="drive", title="Save invoice", description="Keep a copy")

FULL_MESSAGE = {
    "id": "m1",
    "snippet": "Invoice #42",
    "payload": {
        "mimeType": "text/plain",
        "headers": [
            {"name": "Subject", "value": "Invoice #42: March (final!)"},
            {"name": "From", "value": "Acme Billing <billing@acme.example>"},
            {"name": "Date", "value": "Fri, 28 Feb 2025 16:00:00 +0000"},
        ],
        "body": {"data": base64.urlsafe_b64encode(b"Total due: 10 EUR").decode("ascii").rstrip("=")},
    },
}


def _drive_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.startswith("/gmail/"):
        return httpx.Response(200, json=FULL_MESSAGE)
    return httpx.Response(200, json={"id": "file-1", "name": "saved.txt"})


def test_drive_hydrates_and_uploads_multipart(run_action, sent) -> None:
    result = run_action(_drive_handler, SAVE, ["m1"])

    assert result.success is True
    assert result.details["fileId"] == "file-1"
    assert result.details["webViewLink"] == "https://drive.google.com/file/d/file-1/view"

    fetch, upload = sent
    assert fetch.method == "GET"
    assert fetch.url.path == "/gmail/v1/users/me/messages/m1"
    assert fetch.url.params["format"] == "full"

    assert upload.url.path == "/upload/drive/v3/files"
    assert upload.url.params["uploadType"] == "multipart"
    assert upload.headers["Content-Type"] == f'multipart/related; boundary="{BOUNDARY}"'
    body = upload.content.decode("utf-8")
    metadata = json.loads(body.split("Content-Type: application/json\r\n\r\n")[1].split("\r\n--")[0])
    assert metadata["name"] == "Acme Billing - Invoice 42 March final - 2025-02-28.txt"
    assert metadata["mimeType"] == "text/plain"
    assert "Total due: 10 EUR" in body
    assert body.endswith(f"\r\n--{BOUNDARY}--")


def test_drive_uses_supplied_body_without_fetching(run_action, sent) -> None:
    message = ParsedMessage(
        id="m2",
        subject="Notes",
        sender="Kim",
        sender_email="kim@example.com",
        date="Mon, 3 Mar 2025 08:00:00 +0000",
        snippet="see notes",
        body="Full notes here",
    )
    action = ActionSuggestion(
        id="s2",
        type="drive",
        title="Save notes",
        description="",
        params={"messageId": "m2", "fileName": "notes.txt", "folderId": "folder-9"},
    )

    result = run_action(_drive_handler, action, ["m1", "m2"], messages=[message])

    assert result.success is True
    (upload,) = sent
    body = upload.content.decode("utf-8")
    assert '"name": "notes.txt"' in body
    assert '"parents": ["folder-9"]' in body
    assert "Full notes here" in body


def test_drive_fetch_unauthorized_is_auth_failure(run_action) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="Invalid Credentials")

    result = run_action(handler, SAVE, ["m1"])

    assert result.success is False
    assert "sign in again" in result.message


def test_build_file_name_sanitizes_and_truncates() -> None:
    message = ParsedMessage(
        id="m",
        subject="Ü" + "a" * 80,
        sender="",
        sender_email="no-reply@service.example",
        date="garbage",
        snippet="",
    )

    name = build_file_name(message, "2025-03-03")

    assert name == f"no-reply - {'a' * 50} - 2025-03-03.txt"


def test_build_file_name_uses_utc_date() -> None:
    message = ParsedMessage(
        id="m",
        subject="Late note",
        sender="Night Owl",
        sender_email="owl@example.com",
        date="Mon, 3 Mar 2025 23:30:00 -0500",
        snippet="",
    )

    assert build_file_name(message, "2000-01-01") == "Night Owl - Late note - 2025-03-04.txt"
