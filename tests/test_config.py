"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from nonceguard.config import Settings


def test_defaults(monkeypatch):
    for name in (
        "NONCE_DATABASE_URL",
        "NONCE_SWEEP_INTERVAL_SECONDS",
        "NONCE_LOG_FORMAT",
        "NONCE_ALERTS_WEBHOOK_URL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite:///./nonces.db"
    assert settings.sweep_interval_seconds == 86400
    assert settings.log_format == "console"
    assert settings.alerts_webhook_url is None


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("NONCE_SWEEP_INTERVAL_SECONDS", "0.05")
    monkeypatch.setenv("NONCE_DATABASE_URL", "postgresql://localhost/nonces")
    monkeypatch.setenv("NONCE_LOG_FORMAT", "JSON")

    settings = Settings(_env_file=None)

    assert settings.sweep_interval_seconds == 0.05
    assert settings.database_url == "postgresql://localhost/nonces"
    assert settings.log_format == "json"


def test_rejects_unknown_log_format(monkeypatch):
    monkeypatch.setenv("NONCE_LOG_FORMAT", "xml")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
