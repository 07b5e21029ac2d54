# mycare/api/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mycare.questions import Control


class CamelModel(BaseModel):
    """
    snake_case in Python, camelCase on the wire.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageSchema(CamelModel):
    role: str
    content: str


class ControlSchema(Control):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatSummary(CamelModel):
    id: str
    title: str
    phase: str
    active: bool


class ChatListResponse(CamelModel):
    chats: List[ChatSummary]
    active_id: Optional[str] = None


class ChatView(CamelModel):
    id: str
    title: str
    phase: str
    messages: List[MessageSchema]
    current_question: Optional[Dict[str, Any]] = None
    final_assessment: Optional[str] = None
    recommendations: List[str] = Field(default_factory=list)
    loading: bool = False
    control: Optional[ControlSchema] = None
    selected: bool = True


class QueryRequest(CamelModel):
    query: str = Field(..., min_length=1)
    chat_id: Optional[str] = None


class AnswerRequest(CamelModel):
    question_id: str
    answer: Any = None


class InputRequest(CamelModel):
    event: str
    value: Any = None


class ToolCreate(CamelModel):
    question_id: Optional[str] = None
    main_question: Optional[str] = None
    question: Optional[str] = None
    answer: Any = None
    type: Optional[str] = None
    options: Optional[List[str]] = None


class ToolRecord(ToolCreate):
    id: str
    created_at: datetime
