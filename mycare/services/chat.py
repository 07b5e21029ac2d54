# mycare/services/chat.py
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from mycare.gateway import (
    AgentGateway,
    AssessmentReply,
    GatewayError,
    SessionContext,
)
from mycare.intake import ConversationStore, InterviewSession, InvalidTransition, Phase
from mycare.questions import Answer, BaseQuestion, Control, Widget, build_widget, normalize_answer
from mycare.services.tools import ToolRecordService

logger = logging.getLogger(__name__)


class ChatService:
    """
    Service that coordinates:
      - the conversation store (which chat is selected, per-chat state)
      - the agent gateway (next question / final assessment)
      - one widget per pending question, holding the user's partial input
      - optionally persisting each answer as a tool record

    Gateway replies are applied to the chat id and turn they were issued
    for, never to whatever chat happens to be selected when they return.
    """

    def __init__(
        self,
        gateway: AgentGateway,
        store: Optional[ConversationStore] = None,
        recorder: Optional[ToolRecordService] = None,
    ):
        self.gateway = gateway
        self.store = store or ConversationStore()
        self.recorder = recorder
        # chat id -> (turn the question arrived with, widget)
        self._widgets: Dict[str, Tuple[int, Widget]] = {}
        self._widgets_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Chat selection
    # ------------------------------------------------------------------

    def create_chat(self) -> InterviewSession:
        chat_id = self.store.create_session()
        return self.store.get(chat_id)

    def select_chat(self, chat_id: str) -> bool:
        return self.store.select_session(chat_id)

    def list_chats(self) -> List[InterviewSession]:
        return self.store.list_sessions()

    def get_chat(self, chat_id: str) -> InterviewSession:
        return self.store.get(chat_id)

    def active_chat(self) -> Optional[InterviewSession]:
        return self.store.get_active()

    # ------------------------------------------------------------------
    # Interview events
    # ------------------------------------------------------------------

    def submit_query(self, query: str, chat_id: Optional[str] = None) -> InterviewSession:
        """
        Route a free-text complaint to `chat_id` (a new chat if that id is
        unknown), else the selected chat, else a brand-new chat, then ask
        the agent for the first question.

        A refused query leaves the chat list and the selection untouched.
        """
        if not query.strip():
            raise ValueError("Query must not be empty")

        if chat_id is not None:
            target = chat_id if chat_id in self.store else None
        else:
            target = self.store.active_id

        if target is None:
            target = self.store.create_session()
        else:
            self.store.read(target, lambda s: s.ensure_can_query())
            self.store.select_session(target)

        def transition(session: InterviewSession) -> SessionContext:
            session.submit_query(query)
            return SessionContext.from_session(session)

        context = self.store.mutate(target, transition)
        return self._call_agent(target, context)

    def submit_answer(self, chat_id: str, question_id: str, raw_answer: Any) -> InterviewSession:
        """
        Validate a raw answer against the pending question and submit it.
        Raises AnswerRejected for values the question does not accept.
        """
        question = self.store.read(chat_id, lambda s: s.current_question)
        if question is None:
            raise InvalidTransition("There is no pending question to answer")
        answer = normalize_answer(question, raw_answer)
        return self._answer(chat_id, question_id, answer)

    def handle_input(self, chat_id: str, event: str, value: Any = None) -> InterviewSession:
        """
        Forward one widget event. Only a committed answer reaches the agent.
        """
        session = self.store.get(chat_id)
        widget = self._widget_for(session)
        if widget is None:
            raise InvalidTransition(f"Cannot send input while {session.phase.value}")

        with self._widgets_lock:
            emission = widget.handle(event, value)
        if emission is None:
            return session
        return self._answer(chat_id, emission.question_id, emission.answer)

    def control_for(self, session: InterviewSession) -> Optional[Control]:
        widget = self._widget_for(session)
        if widget is None:
            return None
        with self._widgets_lock:
            return widget.render()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _widget_for(self, session: InterviewSession) -> Optional[Widget]:
        """
        The widget for the session's pending question; a new question (new
        turn) always gets a fresh widget with empty input state.
        """
        if session.phase != Phase.AWAITING_ANSWER:
            return None
        with self._widgets_lock:
            entry = self._widgets.get(session.id)
            if entry is None or entry[0] != session.turn:
                entry = (session.turn, build_widget(session.current_question))
                self._widgets[session.id] = entry
            return entry[1]

    def _answer(self, chat_id: str, question_id: str, answer: Answer) -> InterviewSession:
        def transition(session: InterviewSession) -> Tuple[SessionContext, BaseQuestion]:
            question = session.current_question
            session.submit_answer(question_id, answer)
            return SessionContext.from_session(session), question

        context, question = self.store.mutate(chat_id, transition)
        self._record(context, question, answer)
        return self._call_agent(chat_id, context)

    def _call_agent(self, chat_id: str, context: SessionContext) -> InterviewSession:
        logger.info("Calling agent for session %s (turn %s)", chat_id, context.turn)
        try:
            reply = self.gateway.send(context)
        except Exception as exc:
            # whatever happened, the chat must not stay "loading"
            self.store.mutate(chat_id, lambda s: s.reply_failed(context.turn))
            if isinstance(exc, GatewayError):
                logger.error("Agent call failed for session %s: %s", chat_id, exc)
                raise
            logger.exception("Unexpected error from agent for session %s", chat_id)
            raise GatewayError(f"Unexpected agent failure: {exc}") from exc

        if isinstance(reply, AssessmentReply):
            logger.info("Session %s reached its final assessment", chat_id)
            self.store.mutate(
                chat_id,
                lambda s: s.apply_assessment(reply.text, context.turn, reply.recommendations),
            )
        else:
            logger.info(
                "Session %s received question %s (%s)",
                chat_id,
                reply.question.question_id,
                reply.question.type,
            )
            self.store.mutate(chat_id, lambda s: s.apply_question(reply.question, context.turn))

        return self.store.get(chat_id)

    def _record(self, context: SessionContext, question: BaseQuestion, answer: Answer) -> None:
        if self.recorder is None:
            return
        try:
            self.recorder.create(
                question_id=question.question_id,
                main_question=context.main_question,
                question=question.question,
                answer=answer,
                type=question.type,
                options=list(getattr(question, "options", None) or []) or None,
            )
        except SQLAlchemyError:
            logger.exception(
                "Could not store answer to %s for session %s",
                question.question_id,
                context.session_id,
            )
