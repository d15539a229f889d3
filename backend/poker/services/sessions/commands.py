"""Session state transitions.

Every command takes the session aggregate and the acting participant id,
mutates the session in place and returns True when something observable
changed (the caller must broadcast) or False when the command was ignored.
Callers hold ``session.lock`` while applying a command.
"""
from typing import Optional

from poker.models import DEVELOPER, ROLES, Round, Session


def join(session: Session, participant_id: str, name: str, handle: Optional[str] = None) -> bool:
    """Add a new participant, or mark a known one connected again.

    Reconnecting keeps role, join order and any vote in the current round.
    """
    participant = session.participants.get(participant_id)
    if participant is None:
        session.add_participant(participant_id, name, handle=handle)
    else:
        participant.connected = True
        participant.handle = handle
    # A creator that left while nobody was connected is replaced on the next join
    if session.creator_id not in session.participants:
        promote_creator(session)
    return True


def set_role(session: Session, participant_id: str, role: str) -> bool:
    participant = session.participants.get(participant_id)
    if participant is None or role not in ROLES:
        return False
    if role != DEVELOPER and session.current_round is not None:
        session.current_round.votes.pop(participant_id, None)
    participant.role = role
    return True


def cast_vote(session: Session, participant_id: str, value) -> bool:
    current = session.current_round
    if current is None or current.revealed:
        return False
    participant = session.participants.get(participant_id)
    if participant is None or participant.role != DEVELOPER:
        return False
    current.votes[participant_id] = value
    return True


def reveal_votes(session: Session, participant_id: str) -> bool:
    current = session.current_round
    if current is None or current.revealed:
        return False
    if not session.is_creator(participant_id):
        return False
    current.revealed = True
    return True


def start_round(session: Session, participant_id: str, description: Optional[str] = None) -> bool:
    """Replace whatever round exists with a fresh, unrevealed one."""
    if not session.is_creator(participant_id):
        return False
    session.current_round = Round(description=description or '')
    return True


def mark_disconnected(session: Session, participant_id: str, handle: Optional[str] = None) -> bool:
    participant = session.participants.get(participant_id)
    if participant is None:
        return False
    # Late disconnect of a connection the participant already replaced
    if handle is not None and participant.handle is not None and participant.handle != handle:
        return False
    participant.connected = False
    participant.handle = None
    return True


def remove_participant(session: Session, participant_id: str) -> bool:
    """Permanently drop a participant, their vote and, if needed, the creator seat."""
    participant = session.participants.pop(participant_id, None)
    if participant is None:
        return False
    if session.current_round is not None:
        session.current_round.votes.pop(participant_id, None)
    if session.is_creator(participant_id):
        promote_creator(session)
    return True


def promote_creator(session: Session) -> Optional[str]:
    """Hand the creator seat to the earliest-joined connected participant.

    Role is not considered. With nobody connected the current creator id is
    left in place and None is returned.
    """
    connected = [p for p in session.participants.values() if p.connected]
    if not connected:
        return None
    successor = min(connected, key=lambda p: p.join_order)
    session.creator_id = successor.participant_id
    return successor.participant_id
