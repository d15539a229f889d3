import random
import string
import threading
from typing import Dict, Optional

from poker.models import Session

SESSION_ID_ALPHABET = string.ascii_letters + string.digits + '_-'

_rng = random.SystemRandom()


class SessionNotFound(LookupError):
    """Raised when a session id does not resolve to a live session."""

    def __init__(self, session_id: Optional[str]):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


def generate_session_id(length: int = 8) -> str:
    """Generate a short, URL-safe session id."""
    return ''.join(_rng.choices(SESSION_ID_ALPHABET, k=length))


class SessionRegistry:
    """Process-local table of live sessions keyed by public id.

    Owns creation and destruction only; per-session mutation happens under
    each session's own lock.
    """

    def __init__(self, id_length: int = 8):
        self.id_length = id_length
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, creator_id: str, name: str, handle: Optional[str] = None) -> Session:
        with self._lock:
            # Retry on the (unlikely) collision with a live session
            while True:
                session_id = generate_session_id(self.id_length)
                if session_id not in self._sessions:
                    break
            session = Session(session_id=session_id, creator_id=creator_id)
            session.add_participant(creator_id, name, handle=handle)
            self._sessions[session_id] = session
        return session

    def lookup(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        with self._lock:
            return self._sessions.get(session_id)

    def get(self, session_id: Optional[str]) -> Session:
        session = self.lookup(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def destroy(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __contains__(self, session_id) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
