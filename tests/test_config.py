import logging

from mycare.config import Settings
from mycare.log import configure_logging


def test_defaults():
    settings = Settings(DATABASE_URL="sqlite://")
    assert settings.agent_backend == "llm"
    assert settings.agent_timeout_seconds == 60.0
    assert settings.record_answers is True
    assert settings.cors_origin_list == ["*"]


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("AGENT_BACKEND", "webhook")
    monkeypatch.setenv("AGENT_WEBHOOK_URL", "https://n8n.local/webhook/agent")
    monkeypatch.setenv("AGENT_TIMEOUT_SECONDS", "15")
    monkeypatch.setenv("RECORD_ANSWERS", "false")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000, https://mycare.app ,")

    settings = Settings()
    assert settings.agent_backend == "webhook"
    assert settings.agent_webhook_url == "https://n8n.local/webhook/agent"
    assert settings.agent_timeout_seconds == 15.0
    assert settings.record_answers is False
    assert settings.cors_origin_list == ["http://localhost:3000", "https://mycare.app"]


def test_configure_logging_is_idempotent():
    configure_logging("debug")
    configure_logging("info")
    logger = logging.getLogger("mycare")
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
