# mycare/services/__init__.py
from .tools import ToolRecordService, db_session, init_db
from .chat import ChatService

__all__ = ["ToolRecordService", "db_session", "init_db", "ChatService"]
