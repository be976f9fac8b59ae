from __future__ import annotations

import json

import httpx

from inbox_actions.models import ActionSuggestion, ParsedMessage


def _summary(params: dict | None = None) -> ActionSuggestion:
    return ActionSuggestion(
        id="s1",
        type="docs",
        title="Summarize thread",
        description="Several updates",
        params=params or {},
    )


MESSAGES = [
    ParsedMessage(
        id=f"m{i}",
        subject=f"Status {i}",
        sender="Ops",
        sender_email="ops@example.com",
        date=f"Mon, {i} Mar 2025 08:00:00 +0000",
        snippet=f"all green {i}",
    )
    for i in (1, 2)
]


def test_docs_creates_document_and_inserts_report(run_action, sent) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/documents":
            return httpx.Response(200, json={"documentId": "doc-1", "title": "Weekly ops"})
        return httpx.Response(200, json={})

    result = run_action(handler, _summary({"title": "Weekly ops"}), ["m1", "m2"], messages=MESSAGES)

    assert result.success is True
    assert result.details["documentId"] == "doc-1"
    assert result.details["documentUrl"] == "https://docs.google.com/document/d/doc-1/edit"
    assert result.details["completedSteps"] == ["create", "insertText"]

    create, insert = sent
    assert json.loads(create.content) == {"title": "Weekly ops"}
    assert insert.url.path == "/v1/documents/doc-1:batchUpdate"
    request = json.loads(insert.content)["requests"][0]["insertText"]
    assert request["location"] == {"index": 1}
    text = request["text"]
    assert text.startswith("Email Summary Report\nGenerated: 2025-03-03 10:30\nTotal Emails: 2\n")
    assert "1. Status 1\n   From: Ops <ops@example.com>\n" in text
    assert "   Preview: all green 2\n" in text


def test_docs_insert_failure_stops_before_folder_move(run_action, sent) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/documents":
            return httpx.Response(200, json={"documentId": "doc-2"})
        return httpx.Response(400, text="Invalid requests[0].insertText")

    result = run_action(handler, _summary({"folderId": "folder-1"}), ["m1"], messages=MESSAGES)

    assert result.success is False
    assert result.message == "Failed to write summary into document"
    assert result.details == {"documentId": "doc-2", "completedSteps": ["create"]}
    assert "Docs API error: 400" in result.error
    # no Drive calls after the failed insert
    assert len(sent) == 2


def test_docs_moves_document_into_folder(run_action, sent) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/documents":
            return httpx.Response(200, json={"documentId": "doc-3"})
        if request.method == "GET":
            return httpx.Response(200, json={"parents": ["root-a", "root-b"]})
        return httpx.Response(200, json={})

    result = run_action(handler, _summary({"folderId": "folder-1"}), ["m1"])

    assert result.success is True
    assert result.details["completedSteps"] == ["create", "insertText", "moveToFolder"]
    lookup, move = sent[2], sent[3]
    assert lookup.url.path == "/drive/v3/files/doc-3"
    assert lookup.url.params["fields"] == "parents"
    assert move.method == "PATCH"
    assert move.url.params["addParents"] == "folder-1"
    assert move.url.params["removeParents"] == "root-a,root-b"


def test_docs_create_forbidden_reports_auth_failure(run_action, sent) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="forbidden")

    result = run_action(handler, _summary(), ["m1"])

    assert result.success is False
    assert "Google Docs permission" in result.message
    assert result.details == {"documentId": None, "completedSteps": []}
    assert len(sent) == 1
