import math
from numbers import Real

from flask import current_app, request
from flask_socketio import emit
from poker import socketio
from poker.services.sessions import SessionNotFound


def _coordinator():
    return current_app.extensions['poker']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _name(data) -> str:
    name = data.get('name')
    return str(name) if name is not None else ''


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def handle_connect(auth=None):
    emit('connected', {'message': f"Connected to {request.namespace}"})


def handle_disconnect(*args):
    # Newer python-socketio passes a disconnect reason
    _coordinator().disconnect(_get_sid())


def handle_create_session(data):
    data = data or {}
    participant_id = data.get('participantId')
    if not participant_id:
        emit('error', {'message': 'participantId is required'})
        return
    _coordinator().create_session(_get_sid(), str(participant_id), _name(data))


def handle_join_session(data):
    data = data or {}
    session_id = data.get('sessionId')
    participant_id = data.get('participantId')
    if not session_id:
        emit('error', {'message': 'sessionId is required'})
        return
    if not participant_id:
        emit('error', {'message': 'participantId is required'})
        return
    try:
        _coordinator().join(_get_sid(), str(session_id), str(participant_id), _name(data))
    except SessionNotFound:
        emit('error', {'message': 'Session not found.'})


def handle_set_role(data):
    role = (data or {}).get('role')
    if isinstance(role, str):
        _coordinator().set_role(_get_sid(), role)


def handle_cast_vote(data):
    value = (data or {}).get('value')
    # bool is a Real subclass but never a vote
    if isinstance(value, bool) or not isinstance(value, Real) or not _is_finite(value):
        return
    if current_app.config.get('STRICT_VOTE_VALUES') and value not in current_app.config.get('VOTE_VALUES', []):
        return
    _coordinator().cast_vote(_get_sid(), value)


def handle_reveal_votes(data=None):
    _coordinator().reveal_votes(_get_sid())


def handle_start_new_round(data=None):
    description = (data or {}).get('description')
    if description is not None and not isinstance(description, str):
        description = str(description)
    _coordinator().start_round(_get_sid(), description)


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the session namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create-session', handle_create_session, namespace=namespace)
    socketio.on_event('join-session', handle_join_session, namespace=namespace)
    socketio.on_event('set-role', handle_set_role, namespace=namespace)
    socketio.on_event('cast-vote', handle_cast_vote, namespace=namespace)
    socketio.on_event('reveal-votes', handle_reveal_votes, namespace=namespace)
    socketio.on_event('start-new-round', handle_start_new_round, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
