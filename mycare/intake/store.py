# mycare/intake/store.py
from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Dict, List, Optional, TypeVar

from mycare.intake.state import DEFAULT_TITLE, InterviewSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionNotFound(KeyError):
    """Raised when a session id is not in the store."""


class ConversationStore:
    """
    In-memory mapping of chat id -> InterviewSession plus the selected id.

    Every read or mutation runs under one lock, held only for that single
    call, so transitions on the shared mapping are serialised even when
    FastAPI runs handlers on its threadpool. Sessions never share mutable
    state; `mutate` touches exactly one of them.
    """

    def __init__(self):
        self._sessions: Dict[str, InterviewSession] = {}
        self._active_id: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    def create_session(self, title: str = DEFAULT_TITLE) -> str:
        session = InterviewSession(id=uuid.uuid4().hex, title=title)
        with self._lock:
            self._sessions[session.id] = session
            self._active_id = session.id
        logger.info("Created chat session %s", session.id)
        return session.id

    def select_session(self, session_id: str) -> bool:
        """
        Switch the active chat. Unknown ids are ignored (returns False).
        """
        with self._lock:
            if session_id not in self._sessions:
                logger.info("Ignoring selection of unknown session %s", session_id)
                return False
            self._active_id = session_id
        return True

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def get(self, session_id: str) -> InterviewSession:
        """
        Returns a snapshot; changes to it do not reach the store.
        """
        return self.read(session_id, lambda s: s.snapshot())

    def get_active(self) -> Optional[InterviewSession]:
        with self._lock:
            if self._active_id is None:
                return None
            return self._sessions[self._active_id].snapshot()

    def list_sessions(self) -> List[InterviewSession]:
        with self._lock:
            # dicts keep insertion order == creation order
            return [s.snapshot() for s in self._sessions.values()]

    def read(self, session_id: str, fn: Callable[[InterviewSession], T]) -> T:
        with self._lock:
            return fn(self._lookup(session_id))

    def mutate(self, session_id: str, fn: Callable[[InterviewSession], T]) -> T:
        """
        Apply one state transition to one session, atomically.
        """
        with self._lock:
            return fn(self._lookup(session_id))

    def _lookup(self, session_id: str) -> InterviewSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None
