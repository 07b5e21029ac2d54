# mycare/services/tools.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from mycare.db import SessionLocal, engine, Base
from mycare.models import Tool


@contextmanager
def db_session():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """
    Create all tables.
    Call this once at startup.
    """
    Base.metadata.create_all(bind=engine)


def _as_dict(tool: Tool) -> Dict[str, Any]:
    return {
        "id": tool.id,
        "question_id": tool.question_id,
        "main_question": tool.main_question,
        "question": tool.question,
        "answer": tool.answer,
        "type": tool.type,
        "options": tool.options,
        "created_at": tool.created_at,
    }


class ToolRecordService:
    """
    Stores answered interview questions ("tools") and lists them back.
    SQLAlchemy errors propagate to the caller.
    """

    def create(
        self,
        question_id: Optional[str],
        main_question: Optional[str],
        question: Optional[str],
        answer: Any,
        type: Optional[str],
        options: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        with db_session() as session:
            tool = Tool(
                question_id=question_id,
                main_question=main_question,
                question=question,
                answer=answer,
                type=type,
                options=options,
            )
            session.add(tool)
            session.flush()  # to get tool.id / created_at
            session.refresh(tool)
            return _as_dict(tool)

    def list(self) -> List[Dict[str, Any]]:
        with db_session() as session:
            stmt = select(Tool).order_by(Tool.created_at.asc(), Tool.id.asc())
            return [_as_dict(t) for t in session.scalars(stmt)]
