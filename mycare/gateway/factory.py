# mycare/gateway/factory.py
from __future__ import annotations

from mycare.config import Settings
from mycare.gateway.base import AgentGateway
from mycare.gateway.llm import LLMAgentGateway
from mycare.gateway.webhook import WebhookAgentGateway
from mycare.llm import OpenAILLMClient


def build_agent_gateway(settings: Settings) -> AgentGateway:
    """
    Pick the upstream from AGENT_BACKEND. Missing credentials fail here,
    at startup, rather than as a parse error on the first turn.
    """
    if settings.agent_backend == "webhook":
        if not settings.agent_webhook_url:
            raise RuntimeError(
                "AGENT_WEBHOOK_URL is not set in environment (.env) "
                "but AGENT_BACKEND=webhook."
            )
        return WebhookAgentGateway(
            settings.agent_webhook_url,
            timeout_seconds=settings.agent_timeout_seconds,
        )

    return LLMAgentGateway(
        OpenAILLMClient(),
        temperature=settings.llm_temperature,
    )
