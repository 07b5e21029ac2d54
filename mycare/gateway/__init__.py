# mycare/gateway/__init__.py
from .base import (
    AgentGateway,
    AgentReply,
    AgentReplyError,
    AgentTransportError,
    AssessmentReply,
    GatewayError,
    QuestionReply,
    SessionContext,
)
from .decoder import decode_agent_reply
from .factory import build_agent_gateway
from .llm import LLMAgentGateway
from .webhook import WebhookAgentGateway

__all__ = [
    "AgentGateway",
    "AgentReply",
    "AgentReplyError",
    "AgentTransportError",
    "AssessmentReply",
    "GatewayError",
    "QuestionReply",
    "SessionContext",
    "decode_agent_reply",
    "build_agent_gateway",
    "LLMAgentGateway",
    "WebhookAgentGateway",
]
