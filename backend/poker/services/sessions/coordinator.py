import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from poker.models import Session
from . import commands
from .registry import SessionNotFound, SessionRegistry
from .snapshot import project
from .supervisor import ReconnectionSupervisor

Binding = Tuple[str, str]


class SessionCoordinator:
    """Applies participant commands to sessions and broadcasts the result.

    Connections are identified by an opaque handle (the Socket.IO sid). A
    handle is bound to a (session, participant) pair by ``create_session`` or
    ``join``; every other command acts on behalf of that binding and is
    ignored for unbound handles.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        broadcaster,
        supervisor: ReconnectionSupervisor,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.supervisor = supervisor
        self.logger = logger or logging.getLogger(__name__)
        self._bindings: Dict[str, Binding] = {}
        self._bindings_lock = threading.Lock()

    # ---- bindings ----

    def binding(self, handle: str) -> Optional[Binding]:
        with self._bindings_lock:
            return self._bindings.get(handle)

    def _bind(self, handle: Optional[str], session_id: str, participant_id: str) -> Optional[Binding]:
        """Point the handle at a new binding and return the one it replaced."""
        if handle is None:
            return None
        with self._bindings_lock:
            previous = self._bindings.get(handle)
            self._bindings[handle] = (session_id, participant_id)
        self.broadcaster.attach(handle, session_id)
        return previous

    def _leave(self, handle: str, previous: Optional[Binding], current: Binding) -> None:
        """Disconnect the handle's former participant after it moved to ``current``.

        Called without any session lock held.
        """
        if previous is None or previous == current:
            return
        self._mark_gone(handle, *previous)
        if previous[0] != current[0]:
            self.broadcaster.detach(handle, previous[0])

    # ---- commands ----

    def create_session(self, handle: Optional[str], participant_id: str, name: str) -> Session:
        session = self.registry.create(participant_id, name, handle=handle)
        self.logger.info(f"[session-create] session={session.session_id} creator={participant_id}")
        with session.lock:
            previous = self._bind(handle, session.session_id, participant_id)
            if handle is not None:
                self.broadcaster.send(
                    handle,
                    'session-created',
                    {'sessionId': session.session_id, 'participantId': participant_id},
                )
            self.publish(session)
        if handle is not None:
            self._leave(handle, previous, (session.session_id, participant_id))
        return session

    def join(self, handle: Optional[str], session_id: str, participant_id: str, name: str) -> Session:
        session = self.registry.get(session_id)
        with session.lock:
            # The session may have been emptied while we waited for the lock
            if self.registry.lookup(session_id) is not session:
                raise SessionNotFound(session_id)
            reconnect = participant_id in session.participants
            self.supervisor.cancel(session_id, participant_id)
            commands.join(session, participant_id, name, handle=handle)
            previous = self._bind(handle, session_id, participant_id)
            self.logger.info(
                f"[participant-{'reconnect' if reconnect else 'join'}] session={session_id} participant={participant_id}"
            )
            self.publish(session)
        if handle is not None:
            self._leave(handle, previous, (session_id, participant_id))
        return session

    def set_role(self, handle: str, role: str) -> bool:
        return self._apply(handle, 'set_role', lambda s, pid: commands.set_role(s, pid, role))

    def cast_vote(self, handle: str, value) -> bool:
        return self._apply(handle, 'cast_vote', lambda s, pid: commands.cast_vote(s, pid, value))

    def reveal_votes(self, handle: str) -> bool:
        return self._apply(handle, 'reveal_votes', commands.reveal_votes)

    def start_round(self, handle: str, description: Optional[str] = None) -> bool:
        return self._apply(handle, 'start_round', lambda s, pid: commands.start_round(s, pid, description))

    def disconnect(self, handle: str) -> bool:
        """Detach a connection and start the grace timer for its participant."""
        with self._bindings_lock:
            bound = self._bindings.pop(handle, None)
        if bound is None:
            return False
        return self._mark_gone(handle, *bound)

    def _mark_gone(self, handle: str, session_id: str, participant_id: str) -> bool:
        session = self.registry.lookup(session_id)
        if session is None:
            self.logger.info(f"[disconnect-stale] session={session_id} participant={participant_id}")
            return False
        with session.lock:
            if not commands.mark_disconnected(session, participant_id, handle=handle):
                return False
            self.logger.info(f"[participant-disconnect] session={session_id} participant={participant_id}")
            self.publish(session)
            self.supervisor.schedule(session_id, participant_id, self.expire)
        return True

    def expire(self, session_id: str, participant_id: str) -> bool:
        """Grace period elapsed: drop the participant unless they came back."""
        session = self.registry.lookup(session_id)
        if session is None:
            return False
        with session.lock:
            participant = session.participants.get(participant_id)
            if participant is None or participant.connected:
                self.logger.info(f"[timer-abort] session={session_id} participant={participant_id} reconnected")
                return False
            # Reconnected and dropped again since this timer fired
            if self.supervisor.is_pending(session_id, participant_id):
                self.logger.info(f"[timer-abort] session={session_id} participant={participant_id} superseded")
                return False
            was_creator = session.is_creator(participant_id)
            commands.remove_participant(session, participant_id)
            self.logger.info(f"[participant-remove] session={session_id} participant={participant_id}")
            if session.is_empty:
                self.destroy(session_id)
                return True
            if was_creator and not session.is_creator(participant_id):
                self.logger.info(f"[creator-promote] session={session_id} creator={session.creator_id}")
            self.publish(session)
        return True

    def destroy(self, session_id: str) -> bool:
        if not self.registry.destroy(session_id):
            return False
        self.supervisor.cancel_session(session_id)
        with self._bindings_lock:
            for handle in [h for h, b in self._bindings.items() if b[0] == session_id]:
                del self._bindings[handle]
        self.broadcaster.close(session_id)
        self.logger.info(f"[session-destroy] session={session_id}")
        return True

    # ---- projection ----

    def snapshot(self, session_id: str) -> Dict[str, Any]:
        session = self.registry.get(session_id)
        with session.lock:
            return project(session)

    def publish(self, session: Session) -> None:
        self.broadcaster.publish(session.session_id, project(session))

    def _apply(self, handle: str, name: str, transition: Callable[[Session, str], bool]) -> bool:
        bound = self.binding(handle)
        if bound is None:
            self.logger.debug(f"[ignored] command={name} handle={handle} unbound")
            return False
        session_id, participant_id = bound
        session = self.registry.lookup(session_id)
        if session is None:
            self.logger.info(f"[stale-binding] command={name} session={session_id} participant={participant_id}")
            return False
        with session.lock:
            if not transition(session, participant_id):
                self.logger.debug(f"[ignored] command={name} session={session_id} participant={participant_id}")
                return False
            self.publish(session)
        return True
