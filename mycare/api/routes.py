# mycare/api/routes.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from mycare.config import get_settings
from mycare.gateway import GatewayError, build_agent_gateway
from mycare.intake import InterviewSession, InvalidTransition, SessionNotFound
from mycare.services import ChatService, ToolRecordService
from .schemas import (
    AnswerRequest,
    ChatListResponse,
    ChatSummary,
    ChatView,
    ControlSchema,
    InputRequest,
    MessageSchema,
    QueryRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_chat_service() -> ChatService:
    settings = get_settings()
    recorder = ToolRecordService() if settings.record_answers else None
    return ChatService(build_agent_gateway(settings), recorder=recorder)


@contextmanager
def _domain_errors():
    """
    Map interview/gateway exceptions onto HTTP status codes.
    """
    try:
        yield
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=f"Chat {exc.args[0]} not found.")
    except InvalidTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        # AnswerRejected, empty query
        logger.info("Rejected input: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))
    except GatewayError as exc:
        raise HTTPException(
            status_code=502,
            detail=f"The assistant is unavailable right now, please try again. ({exc})",
        )


def _view(
    service: ChatService,
    session: InterviewSession,
    selected: bool = True,
) -> ChatView:
    question = session.current_question
    control = service.control_for(session)
    return ChatView(
        id=session.id,
        title=session.title,
        phase=session.phase.value,
        messages=[MessageSchema(role=m.role, content=m.content) for m in session.messages],
        current_question=question.to_wire() if question is not None else None,
        final_assessment=session.final_assessment,
        recommendations=list(session.recommendations),
        loading=session.pending,
        control=ControlSchema.model_validate(control.model_dump()) if control else None,
        selected=selected,
    )


@router.post("/chats", response_model=ChatView, status_code=status.HTTP_201_CREATED)
def create_chat(service: ChatService = Depends(get_chat_service)) -> ChatView:
    """
    "New chat": empty session, selected immediately.
    """
    return _view(service, service.create_chat())


@router.get("/chats", response_model=ChatListResponse)
def list_chats(service: ChatService = Depends(get_chat_service)) -> ChatListResponse:
    active_id = service.store.active_id
    return ChatListResponse(
        chats=[
            ChatSummary(id=s.id, title=s.title, phase=s.phase.value, active=s.id == active_id)
            for s in service.list_chats()
        ],
        active_id=active_id,
    )


@router.get("/chats/active", response_model=ChatView)
def get_active_chat(service: ChatService = Depends(get_chat_service)) -> ChatView:
    session = service.active_chat()
    if session is None:
        raise HTTPException(status_code=404, detail="No chat is selected.")
    return _view(service, session)


@router.get("/chats/{chat_id}", response_model=ChatView)
def get_chat(chat_id: str, service: ChatService = Depends(get_chat_service)) -> ChatView:
    with _domain_errors():
        session = service.get_chat(chat_id)
    return _view(service, session, selected=service.store.active_id == chat_id)


@router.post("/chats/{chat_id}/select", response_model=Optional[ChatView])
def select_chat(chat_id: str, service: ChatService = Depends(get_chat_service)) -> Optional[ChatView]:
    """
    Unknown ids are ignored: the currently active chat (if any) comes back
    with selected=false.
    """
    if service.select_chat(chat_id):
        return _view(service, service.get_chat(chat_id))
    session = service.active_chat()
    if session is None:
        return None
    return _view(service, session, selected=False)


@router.post("/query", response_model=ChatView)
def submit_query(payload: QueryRequest, service: ChatService = Depends(get_chat_service)) -> ChatView:
    with _domain_errors():
        session = service.submit_query(payload.query, chat_id=payload.chat_id)
    return _view(service, session)


@router.post("/chats/{chat_id}/answer", response_model=ChatView)
def submit_answer(
    chat_id: str,
    payload: AnswerRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatView:
    with _domain_errors():
        session = service.submit_answer(chat_id, payload.question_id, payload.answer)
    return _view(service, session, selected=service.store.active_id == chat_id)


@router.post("/chats/{chat_id}/input", response_model=ChatView)
def widget_input(
    chat_id: str,
    payload: InputRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatView:
    with _domain_errors():
        session = service.handle_input(chat_id, payload.event, payload.value)
    return _view(service, session, selected=service.store.active_id == chat_id)
