"""
Tests for environment-driven configuration.
"""

import pytest
from pydantic import ValidationError

from reminder_sync.config.settings import Settings

REQUIRED = [
    "OPENAI_API_KEY",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_PRIVATE_KEY",
    "GOOGLE_SHEET_ID",
    "GOOGLE_SHEET_NAME",
]


@pytest.mark.parametrize("missing", REQUIRED)
def test_missing_required_setting_is_fatal(monkeypatch, missing):
    monkeypatch.delenv(missing, raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.llm_model == "gpt-4o-mini"
    assert settings.default_icon == "alert"
    assert settings.default_status == "To DO"
    assert settings.sync_interval_minutes == 60
    assert settings.bridge_token is None


def test_private_key_newlines_are_unescaped(monkeypatch):
    monkeypatch.setenv("GOOGLE_PRIVATE_KEY", "-----BEGIN-----\\nabc\\n-----END-----")

    settings = Settings(_env_file=None)

    assert settings.google_private_key == "-----BEGIN-----\nabc\n-----END-----"
