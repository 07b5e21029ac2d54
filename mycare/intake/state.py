# mycare/intake/state.py
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional

from mycare.intake.stages import Phase
from mycare.questions import Answer, BaseQuestion, format_answer

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"


class InvalidTransition(Exception):
    """Raised when an event is not allowed in the session's current phase."""


@dataclass(frozen=True)
class Message:
    role: Literal["user", "assistant"]
    content: str


@dataclass(frozen=True)
class AnsweredQuestion:
    question_id: str
    question: str
    type: str
    answer: Answer
    options: Optional[List[str]] = None


@dataclass
class InterviewSession:
    """
    One chat: the visible transcript plus the interview state machine.

    Phases (derived, never stored):
      - awaiting_first_query: nothing asked yet, or the first call failed
      - awaiting_agent_reply: a gateway call for `turn` is in flight
      - awaiting_answer:      `current_question` is pending
      - terminal:             `final_assessment` is set

    `current_question` and `final_assessment` are never set together.
    """

    id: str
    title: str = DEFAULT_TITLE
    messages: List[Message] = field(default_factory=list)
    current_question: Optional[BaseQuestion] = None
    final_assessment: Optional[str] = None
    recommendations: List[str] = field(default_factory=list)

    # Answers given since the latest top-level query
    answers: List[AnsweredQuestion] = field(default_factory=list)

    # Outbound gateway calls so far; replies are matched against it
    turn: int = 0
    pending: bool = False
    last_input: str = ""

    @property
    def phase(self) -> Phase:
        if self.pending:
            return Phase.AWAITING_AGENT_REPLY
        if self.final_assessment is not None:
            return Phase.TERMINAL
        if self.current_question is not None:
            return Phase.AWAITING_ANSWER
        return Phase.AWAITING_FIRST_QUERY

    # ------------------------------------------------------------------
    # User events
    # ------------------------------------------------------------------

    def submit_query(self, query: str) -> int:
        """
        Start (or restart) the interview with a free-text complaint.
        Returns the turn number the gateway reply must carry.
        """
        self.ensure_can_query()

        text = query.strip()
        if not text:
            raise ValueError("Query must not be empty")

        self.title = text
        self.messages.append(Message(role="user", content=text))
        self.answers = []
        self.last_input = text
        return self._begin_turn()

    def ensure_can_query(self) -> None:
        phase = self.phase
        if phase not in (Phase.AWAITING_FIRST_QUERY, Phase.TERMINAL):
            raise InvalidTransition(f"Cannot submit a new query while {phase.value}")

    def submit_answer(self, question_id: str, answer: Answer) -> int:
        """
        Answer the pending question. `answer` must already be normalised.
        """
        phase = self.phase
        if phase != Phase.AWAITING_ANSWER:
            raise InvalidTransition(f"Cannot answer while {phase.value}")

        question = self.current_question
        if not question.answerable:
            raise InvalidTransition(f"Question {question.question_id} cannot be answered")
        if question_id != question.question_id:
            raise InvalidTransition(
                f"Answer is for {question_id!r} but {question.question_id!r} is pending"
            )

        shown = format_answer(answer)
        self.messages.append(Message(role="user", content=f"{question.question} - {shown}"))

        record = AnsweredQuestion(
            question_id=question.question_id,
            question=question.question,
            type=question.type,
            answer=answer,
            options=list(getattr(question, "options", None) or []) or None,
        )
        # a retry after a failed call replaces the previous attempt
        if self.answers and self.answers[-1].question_id == question.question_id:
            self.answers[-1] = record
        else:
            self.answers.append(record)

        self.last_input = f"{self.title} - {question.question_id}: {shown}"
        return self._begin_turn()

    # ------------------------------------------------------------------
    # Gateway outcomes
    # ------------------------------------------------------------------

    def apply_question(self, question: BaseQuestion, turn: int) -> bool:
        if not self._accepts(turn):
            return False
        self.current_question = question
        self.final_assessment = None
        self.recommendations = []
        self.pending = False
        return True

    def apply_assessment(
        self,
        text: str,
        turn: int,
        recommendations: Optional[List[str]] = None,
    ) -> bool:
        if not self._accepts(turn):
            return False
        self.messages.append(Message(role="assistant", content=text))
        self.final_assessment = text
        self.recommendations = list(recommendations or [])
        self.current_question = None
        self.pending = False
        return True

    def reply_failed(self, turn: int) -> bool:
        """
        Leave transcript and question untouched; only stop waiting.
        """
        if not self._accepts(turn):
            return False
        self.pending = False
        return True

    def snapshot(self) -> "InterviewSession":
        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _begin_turn(self) -> int:
        self.turn += 1
        self.pending = True
        return self.turn

    def _accepts(self, turn: int) -> bool:
        if not self.pending or turn != self.turn:
            logger.info(
                "Discarding stale reply for session %s (turn %s, latest %s, pending=%s)",
                self.id,
                turn,
                self.turn,
                self.pending,
            )
            return False
        return True
