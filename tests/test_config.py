# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from daylist.config import Settings


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (
        "DAYLIST_APP_NAME",
        "DAYLIST_LOG_LEVEL",
        "DAYLIST_DATA_DIR",
        "DAYLIST_SUPABASE_URL",
        "DAYLIST_SUPABASE_ANON_KEY",
        "DAYLIST_REQUEST_TIMEOUT",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults_without_backend(clean_env: pytest.MonkeyPatch) -> None:
    s = Settings.from_env()

    assert s.app_name == "daylist"
    assert s.log_level == "INFO"
    assert s.data_dir == Path(".local/daylist")
    assert s.request_timeout == 15.0
    assert s.backend_configured is False


def test_prefixed_names_win_over_plain_ones(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SUPABASE_URL", "https://plain.supabase.co")
    clean_env.setenv("SUPABASE_ANON_KEY", "plain-key")
    clean_env.setenv("DAYLIST_SUPABASE_URL", "https://prefixed.supabase.co/")

    s = Settings.from_env()

    assert s.supabase_url == "https://prefixed.supabase.co"
    assert s.supabase_anon_key == "plain-key"
    assert s.backend_configured is True


def test_bad_timeout_falls_back_and_is_clamped(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("DAYLIST_REQUEST_TIMEOUT", "soon")
    assert Settings.from_env().request_timeout == 15.0

    clean_env.setenv("DAYLIST_REQUEST_TIMEOUT", "0.1")
    assert Settings.from_env().request_timeout == 1.0
