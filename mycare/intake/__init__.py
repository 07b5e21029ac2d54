# mycare/intake/__init__.py
from .stages import Phase
from .state import AnsweredQuestion, InterviewSession, InvalidTransition, Message
from .store import ConversationStore, SessionNotFound

__all__ = [
    "Phase",
    "AnsweredQuestion",
    "InterviewSession",
    "InvalidTransition",
    "Message",
    "ConversationStore",
    "SessionNotFound",
]
