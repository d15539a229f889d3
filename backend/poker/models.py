import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

DEVELOPER = 'developer'
OBSERVER = 'observer'
ROLES = (DEVELOPER, OBSERVER)


@dataclass
class Participant:
    participant_id: str
    name: str
    role: str = DEVELOPER
    connected: bool = True
    joined_at: float = field(default_factory=time.time)
    join_seq: int = 0
    handle: Optional[str] = None

    @property
    def status(self) -> str:
        return 'connected' if self.connected else 'disconnected'

    @property
    def join_order(self):
        return (self.joined_at, self.join_seq)

    def to_dict(self):
        return {
            'participantId': self.participant_id,
            'name': self.name,
            'role': self.role,
            'status': self.status,
            'joinedAt': int(self.joined_at * 1000),
        }


@dataclass
class Round:
    description: str = ''
    revealed: bool = False
    votes: Dict[str, float] = field(default_factory=dict)


@dataclass
class Session:
    session_id: str
    creator_id: str
    participants: Dict[str, Participant] = field(default_factory=dict)
    current_round: Optional[Round] = None
    # Serialises commands and timer expiry for this session
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)
    _join_counter: itertools.count = field(default_factory=itertools.count, repr=False, compare=False)

    def add_participant(self, participant_id: str, name: str, handle: Optional[str] = None) -> Participant:
        participant = Participant(
            participant_id=participant_id,
            name=name,
            join_seq=next(self._join_counter),
            handle=handle,
        )
        self.participants[participant_id] = participant
        return participant

    def ordered_participants(self):
        """Roster in join order (timestamp, then join sequence)."""
        return sorted(self.participants.values(), key=lambda p: p.join_order)

    def is_creator(self, participant_id: str) -> bool:
        return self.creator_id == participant_id

    @property
    def is_empty(self) -> bool:
        return not self.participants
