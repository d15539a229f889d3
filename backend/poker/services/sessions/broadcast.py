from typing import Any, Dict

from flask_socketio import SocketIO


def room_for(session_id: str) -> str:
    return f"session:{session_id}"


class Broadcaster:
    """Delivers events to Socket.IO rooms, one room per session.

    Uses the server-level API so it works both inside event handlers and
    from background timer tasks.
    """

    def __init__(self, socketio: SocketIO, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def attach(self, handle: str, session_id: str) -> None:
        self.socketio.server.enter_room(handle, room_for(session_id), namespace=self.namespace)

    def detach(self, handle: str, session_id: str) -> None:
        self.socketio.server.leave_room(handle, room_for(session_id), namespace=self.namespace)

    def publish(self, session_id: str, snapshot: Dict[str, Any]) -> None:
        self.socketio.emit('session-state', snapshot, to=room_for(session_id), namespace=self.namespace)

    def send(self, handle: str, event: str, payload: Dict[str, Any]) -> None:
        self.socketio.emit(event, payload, to=handle, namespace=self.namespace)

    def close(self, session_id: str) -> None:
        self.socketio.close_room(room_for(session_id), namespace=self.namespace)
