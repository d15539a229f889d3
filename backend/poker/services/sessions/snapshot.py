import math
from typing import Any, Dict, Optional

from poker.models import DEVELOPER, Session


def round_half_up(value: float, places: int = 1) -> float:
    factor = 10 ** places
    scaled = value * factor + 0.5
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled) / factor


def vote_stats(values) -> Optional[Dict[str, Any]]:
    values = list(values)
    if not values:
        return None
    try:
        mean = sum(values) / len(values)
    except OverflowError:
        mean = math.nan
    return {
        # Undefined for non-finite or out-of-range votes
        'average': round_half_up(mean) if math.isfinite(mean) else None,
        'min': min(values),
        'max': max(values),
    }


def project(session: Session) -> Dict[str, Any]:
    """Build the snapshot broadcast to every participant of a session.

    The result is the same for every recipient: vote values stay null until
    the round is revealed, and statistics only appear after reveal.
    """
    ordered = session.ordered_participants()

    round_payload = None
    current = session.current_round
    if current is not None:
        voter_statuses = []
        cast = []
        for p in ordered:
            if p.role != DEVELOPER:
                continue
            has_voted = p.participant_id in current.votes
            vote = current.votes.get(p.participant_id) if current.revealed else None
            if has_voted:
                cast.append(current.votes[p.participant_id])
            voter_statuses.append({
                'participantId': p.participant_id,
                'name': p.name,
                'hasVoted': has_voted,
                'vote': vote,
            })
        round_payload = {
            'description': current.description,
            'revealed': current.revealed,
            'voterStatuses': voter_statuses,
            'stats': vote_stats(cast) if current.revealed else None,
        }

    return {
        'sessionId': session.session_id,
        'creatorId': session.creator_id,
        'participants': [p.to_dict() for p in ordered],
        'round': round_payload,
    }
