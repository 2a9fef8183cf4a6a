from __future__ import annotations

from landing_api.settings import get_log_level, load_settings


def test_log_level_is_read_once_and_upper_cased(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert get_log_level() == "DEBUG"
    assert load_settings().log_level == "DEBUG"


def test_log_level_defaults_to_info(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert get_log_level() == "INFO"
