from __future__ import annotations

import json

import httpx

from inbox_actions.models import ActionSuggestion

ARCHIVE = ActionSuggestion(id="s1", type="archive", title="Archive promos", description="Old promotions")


def test_archive_all_succeed(run_action, sent) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": request.url.path.split("/")[-2]})

    result = run_action(handler, ARCHIVE, ["m1", "m2", "m3"])

    assert result.success is True
    assert result.message == "Archived 3 emails"
    assert result.details == {"successful": 3, "failed": 0}
    assert len(sent) == 3
    for request in sent:
        assert request.method == "POST"
        assert request.url.path.endswith("/modify")
        assert request.headers["Authorization"] == "Bearer test-token"
        assert json.loads(request.content) == {"removeLabelIds": ["INBOX"]}


def test_archive_partial_failure_counts_every_item(run_action, sent) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if "/messages/bad" in request.url.path:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, json={})

    ids = ["m1", "bad1", "m2", "bad2", "m3", "m4", "m5", "m6", "m7"]
    result = run_action(handler, ARCHIVE, ids)

    assert result.success is True
    assert result.details["successful"] + result.details["failed"] == len(ids)
    assert result.message == "Archived 7 emails, 2 failed"
    # every call attempted exactly once
    assert sorted(r.url.path.split("/")[-2] for r in sent) == sorted(ids)
    assert not any("bad1" in line for line in result.debug)


def test_archive_debug_trace_lists_failures_on_request(run_action) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="backend error")

    result = run_action(handler, ARCHIVE, ["m1"], debug=True)

    assert result.message == "Archived 0 emails, 1 failed"
    assert any("Failed to archive m1" in line for line in result.debug)
