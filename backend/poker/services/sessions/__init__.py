"""Session domain services: state transitions, snapshots and timers.

This package holds the in-memory estimation engine. HTTP routes and socket
handlers go through ``SessionCoordinator`` and never mutate sessions
directly, keeping transport concerns separate from session rules.
"""
from .broadcast import Broadcaster, room_for
from .coordinator import SessionCoordinator
from .registry import SessionNotFound, SessionRegistry
from .snapshot import project
from .supervisor import ReconnectionSupervisor

__all__ = [
    'Broadcaster',
    'ReconnectionSupervisor',
    'SessionCoordinator',
    'SessionNotFound',
    'SessionRegistry',
    'project',
    'room_for',
]
