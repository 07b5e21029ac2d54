# mycare/gateway/webhook.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from mycare.gateway.base import (
    AgentGateway,
    AgentReply,
    AgentTransportError,
    SessionContext,
)
from mycare.gateway.decoder import decode_agent_reply

logger = logging.getLogger(__name__)


class WebhookAgentGateway(AgentGateway):
    """
    Delegates the interview to an external workflow (e.g. an n8n agent)
    reachable through a single POST webhook.

    The workflow receives the running context and answers with the model
    output, usually wrapped as [{"output": "```json ...```"}].
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 60.0,
        client: Optional[httpx.Client] = None,
    ):
        self.url = url
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0)
        )

    def build_payload(self, context: SessionContext) -> Dict[str, Any]:
        return {
            "chatInput": context.chat_input,
            "sessionId": context.session_id,
            "turn": context.turn,
            "mainQuestion": context.main_question,
            "answers": context.answers_payload(),
        }

    def send(self, context: SessionContext) -> AgentReply:
        payload = self.build_payload(context)
        try:
            response = self.client.post(self.url, json=payload)
            # any non-2xx, redirects included
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AgentTransportError(
                f"Agent webhook returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise AgentTransportError(f"Failed to reach agent webhook: {exc}") from exc

        logger.debug("Webhook raw reply for session %s: %s", context.session_id, response.text)
        return decode_agent_reply(response.text)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()
