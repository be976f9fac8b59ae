from __future__ import annotations

from pathlib import Path

import pytest

from inbox_actions.config.settings import load_settings, resolve_dir


def test_resolve_dir_relative_to_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INBOX_ACTIONS_TEST_DIR", "nested/secrets")

    path = resolve_dir("INBOX_ACTIONS_TEST_DIR", "unused", root=tmp_path)

    assert path == tmp_path / "nested" / "secrets"
    assert path.is_dir()


def test_resolve_dir_falls_back_to_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("INBOX_ACTIONS_TEST_DIR", raising=False)

    assert resolve_dir("INBOX_ACTIONS_TEST_DIR", "secrets", root=tmp_path) == tmp_path / "secrets"


def test_load_settings_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INBOX_ACTIONS_HTTP_TIMEOUT", "not-a-number")
    monkeypatch.setenv("INBOX_ACTIONS_DEBUG", "yes")
    monkeypatch.setenv("INBOX_ACTIONS_TIME_ZONE", "Europe/Berlin")

    settings = load_settings()

    assert settings.http_timeout == 30.0
    assert settings.debug_trace is True
    assert settings.time_zone == "Europe/Berlin"
