# mycare/gateway/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Union

from mycare.intake.state import AnsweredQuestion, InterviewSession, Message
from mycare.questions import BaseQuestion


class GatewayError(Exception):
    """Base class for anything that stops the agent from producing a reply."""


class AgentTransportError(GatewayError):
    """The upstream agent could not be reached or answered with an error."""


class AgentReplyError(GatewayError):
    """The upstream agent answered, but not with a usable reply."""


@dataclass(frozen=True)
class QuestionReply:
    question: BaseQuestion
    kind: str = field(default="question", init=False)


@dataclass(frozen=True)
class AssessmentReply:
    text: str
    recommendations: List[str] = field(default_factory=list)
    kind: str = field(default="assessment", init=False)


AgentReply = Union[QuestionReply, AssessmentReply]


@dataclass(frozen=True)
class SessionContext:
    """
    Everything an agent needs to continue one interview.

    `chat_input` is the single-string encoding used by workflow webhooks:
    the query itself, or "<title> - <questionId>: <answer>" after an answer.
    """

    session_id: str
    turn: int
    main_question: str
    chat_input: str
    messages: List[Message] = field(default_factory=list)
    answers: List[AnsweredQuestion] = field(default_factory=list)

    @classmethod
    def from_session(cls, session: InterviewSession) -> "SessionContext":
        return cls(
            session_id=session.id,
            turn=session.turn,
            main_question=session.title,
            chat_input=session.last_input,
            messages=list(session.messages),
            answers=list(session.answers),
        )

    def answers_payload(self) -> List[Dict[str, Any]]:
        payload = []
        for a in self.answers:
            item = asdict(a)
            payload.append(
                {
                    "questionId": item["question_id"],
                    "question": item["question"],
                    "type": item["type"],
                    "answer": item["answer"],
                    "options": item["options"],
                }
            )
        return payload


class AgentGateway(ABC):
    """
    Produces the next question or the final assessment for a session.
    Implementations raise GatewayError (never anything else) on failure.
    """

    @abstractmethod
    def send(self, context: SessionContext) -> AgentReply:
        ...

    def close(self) -> None:
        pass
