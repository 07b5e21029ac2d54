import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# mycare.db builds its engine at import time, so the env must be set first
_TMP_DIR = tempfile.mkdtemp(prefix="mycare-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["AGENT_BACKEND"] = "llm"

from mycare.gateway import AgentGateway, SessionContext, decode_agent_reply  # noqa: E402
from mycare.services import ChatService, db_session, init_db  # noqa: E402
from mycare.models import Tool  # noqa: E402


class ScriptedGateway(AgentGateway):
    """
    Replays queued agent outputs (raw text, dicts, or exceptions to raise)
    and remembers every context it was sent.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.contexts: list[SessionContext] = []

    def queue(self, *replies) -> "ScriptedGateway":
        self.replies.extend(replies)
        return self

    def send(self, context: SessionContext):
        self.contexts.append(context)
        if not self.replies:
            raise AssertionError("ScriptedGateway ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return decode_agent_reply(reply)


@pytest.fixture(scope="session", autouse=True)
def _tables():
    init_db()
    yield


@pytest.fixture(autouse=True)
def clean_tools():
    with db_session() as session:
        session.query(Tool).delete()
    yield


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def service(gateway) -> ChatService:
    return ChatService(gateway)


@pytest.fixture
def client(service):
    from fastapi.testclient import TestClient

    from mycare.api.routes import get_chat_service
    from mycare.main import app

    app.dependency_overrides[get_chat_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
