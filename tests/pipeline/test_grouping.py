from __future__ import annotations

from inbox_actions.models import ParsedMessage
from inbox_actions.pipeline.grouping import group_by_sender, message_datetime


def _msg(mid: str, sender_email: str, date: str, labels: list[str] | None = None) -> ParsedMessage:
    return ParsedMessage(
        id=mid,
        subject=f"Subject {mid}",
        sender=sender_email.split("@")[0].title(),
        sender_email=sender_email,
        date=date,
        snippet="",
        labels=labels or [],
    )


def test_group_by_sender_merges_case_variants_and_counts_unread() -> None:
    messages = [
        _msg("a1", "news@shop.example", "Mon, 3 Mar 2025 08:00:00 +0000", ["INBOX", "UNREAD"]),
        _msg("b1", "boss@work.example", "Sun, 2 Mar 2025 12:00:00 +0000"),
        _msg("a2", "NEWS@shop.example", "Tue, 4 Mar 2025 08:00:00 +0000", ["UNREAD"]),
        _msg("a3", "news@shop.example", "Sat, 1 Mar 2025 08:00:00 +0000"),
    ]

    groups = group_by_sender(messages)

    assert [g.sender_key for g in groups] == ["news@shop.example", "boss@work.example"]
    news = groups[0]
    assert [m.id for m in news.messages] == ["a2", "a1", "a3"]
    assert news.total_count == 3
    assert news.unread_count == 2
    assert news.latest_date == "Tue, 4 Mar 2025 08:00:00 +0000"
    assert news.related_emails == ["NEWS@shop.example", "news@shop.example"]


def test_group_by_sender_breaks_ties_by_newest_message() -> None:
    messages = [
        _msg("x", "old@example.com", "Mon, 3 Feb 2025 08:00:00 +0000"),
        _msg("y", "new@example.com", "Mon, 3 Mar 2025 08:00:00 +0000"),
    ]

    assert [g.sender_key for g in group_by_sender(messages)] == ["new@example.com", "old@example.com"]


def test_unparseable_dates_sort_last() -> None:
    messages = [
        _msg("bad", "a@example.com", "not a date"),
        _msg("good", "a@example.com", "2025-03-01T10:00:00+00:00"),
    ]

    group = group_by_sender(messages)[0]

    assert [m.id for m in group.messages] == ["good", "bad"]
    assert message_datetime("not a date") is None
