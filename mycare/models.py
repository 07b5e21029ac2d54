# mycare/models.py
from datetime import datetime, timezone
from typing import Any
import uuid

from sqlalchemy import String, DateTime, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from mycare.db import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tool(Base):
    """
    One answered interview question ("tool" record).

    `answer` is stored as JSON because its shape depends on the question
    type: "Yes"/"No", free text, an ISO date, a number or a list of options.
    """
    __tablename__ = "tools"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=generate_uuid
    )
    question_id: Mapped[str | None] = mapped_column(String, nullable=True)
    main_question: Mapped[str | None] = mapped_column(Text, nullable=True)
    question: Mapped[str | None] = mapped_column(Text, nullable=True)
    answer: Mapped[Any] = mapped_column(JSON, nullable=True)
    type: Mapped[str | None] = mapped_column(String, nullable=True)
    options: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
