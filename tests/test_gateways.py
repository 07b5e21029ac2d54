import json

import httpx
import pytest

from mycare.config import Settings
from mycare.gateway import (
    AgentReplyError,
    AgentTransportError,
    AssessmentReply,
    LLMAgentGateway,
    QuestionReply,
    SessionContext,
    WebhookAgentGateway,
    build_agent_gateway,
)
from mycare.intake import InterviewSession
from mycare.llm import LLMClient, LLMError
from mycare.questions import parse_question

WEBHOOK_URL = "https://agent.example.test/webhook/pregnancy-agent"


def _context() -> SessionContext:
    session = InterviewSession(id="chat-1")
    turn = session.submit_query("Nausea in the mornings")
    session.apply_question(
        parse_question({"questionId": "q1", "question": "Could you be pregnant?", "type": "yes-no"}),
        turn,
    )
    session.submit_answer("q1", "Yes")
    return SessionContext.from_session(session)


def _webhook(handler) -> WebhookAgentGateway:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return WebhookAgentGateway(WEBHOOK_URL, client=client)


def test_webhook_posts_context_and_decodes_envelope():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        output = '```json\n{"questionId":"q2","question":"Weeks along?","type":"number-picker","min":1,"max":42}\n```'
        return httpx.Response(200, json=[{"output": output}])

    reply = _webhook(handler).send(_context())

    assert isinstance(reply, QuestionReply)
    assert reply.question.question_id == "q2"
    assert seen["url"] == WEBHOOK_URL
    assert seen["body"]["chatInput"] == "Nausea in the mornings - q1: Yes"
    assert seen["body"]["sessionId"] == "chat-1"
    assert seen["body"]["turn"] == 2
    assert seen["body"]["answers"] == [
        {
            "questionId": "q1",
            "question": "Could you be pregnant?",
            "type": "yes-no",
            "answer": "Yes",
            "options": None,
        }
    ]


def test_webhook_http_error_is_a_transport_error():
    gateway = _webhook(lambda request: httpx.Response(503, text="busy"))
    with pytest.raises(AgentTransportError):
        gateway.send(_context())


def test_webhook_redirect_is_a_transport_error():
    gateway = _webhook(
        lambda request: httpx.Response(302, headers={"Location": "https://elsewhere.test/"}, json={"finalDiagnosis": "x"})
    )
    with pytest.raises(AgentTransportError, match="302"):
        gateway.send(_context())


def test_webhook_connection_failure_is_a_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(AgentTransportError):
        _webhook(handler).send(_context())


def test_webhook_garbage_is_a_reply_error():
    gateway = _webhook(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(AgentReplyError):
        gateway.send(_context())


class FakeLLM(LLMClient):
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def chat(self, messages, temperature=0.2, model=None):
        self.calls.append((messages, temperature))
        if self.error:
            raise self.error
        return self.reply


def test_llm_gateway_prompts_with_answers_and_decodes():
    llm = FakeLLM(reply='```json\n{"finalDiagnosis": "Possible early pregnancy.", "recommendations": ["Take a test"]}\n```')
    reply = LLMAgentGateway(llm, temperature=0.3).send(_context())

    assert reply == AssessmentReply(text="Possible early pregnancy.", recommendations=["Take a test"])
    messages, temperature = llm.calls[0]
    assert temperature == 0.3
    assert messages[0]["role"] == "system"
    assert "finalDiagnosis" in messages[0]["content"]
    assert "Nausea in the mornings" in messages[1]["content"]
    assert "Could you be pregnant?" in messages[1]["content"]
    assert "user: Could you be pregnant? - Yes" in messages[1]["content"]


def test_llm_failure_is_a_transport_error():
    gateway = LLMAgentGateway(FakeLLM(error=LLMError("quota")))
    with pytest.raises(AgentTransportError):
        gateway.send(_context())


def _settings(**env) -> Settings:
    base = {"DATABASE_URL": "sqlite://", "OPENAI_API_KEY": None}
    base.update(env)
    return Settings(**base)


def test_factory_builds_webhook_gateway():
    gateway = build_agent_gateway(_settings(AGENT_BACKEND="webhook", AGENT_WEBHOOK_URL=WEBHOOK_URL))
    try:
        assert isinstance(gateway, WebhookAgentGateway)
        assert gateway.url == WEBHOOK_URL
    finally:
        gateway.close()


def test_factory_fails_fast_without_webhook_url():
    with pytest.raises(RuntimeError, match="AGENT_WEBHOOK_URL"):
        build_agent_gateway(_settings(AGENT_BACKEND="webhook"))


def test_factory_fails_fast_without_api_key(monkeypatch):
    import mycare.llm.client as client_mod

    monkeypatch.setattr(client_mod, "get_settings", lambda: _settings(AGENT_BACKEND="llm"))
    with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
        build_agent_gateway(_settings(AGENT_BACKEND="llm"))
