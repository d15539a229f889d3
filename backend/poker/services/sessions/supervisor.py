import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

TimerKey = Tuple[str, str]


@dataclass
class RemovalTimer:
    """Cancellation token for one pending participant removal."""
    session_id: str
    participant_id: str
    deadline: float
    cancelled: bool = field(default=False)

    @property
    def key(self) -> TimerKey:
        return (self.session_id, self.participant_id)


class ReconnectionSupervisor:
    """Grace-period timers keyed by (session, participant).

    ``start_task`` and ``sleep`` default to the plain threading versions; the
    app wires in ``socketio.start_background_task`` and ``socketio.sleep`` so
    timers follow the server's async mode.
    """

    def __init__(
        self,
        grace_period: float = 30.0,
        start_task: Optional[Callable] = None,
        sleep: Optional[Callable[[float], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.grace_period = grace_period
        self._start_task = start_task or _start_thread
        self._sleep = sleep or time.sleep
        self.logger = logger or logging.getLogger(__name__)
        self._pending: Dict[TimerKey, RemovalTimer] = {}
        self._lock = threading.Lock()

    def schedule(self, session_id: str, participant_id: str, on_expire: Callable[[str, str], None]) -> RemovalTimer:
        """Start the grace timer; an outstanding timer for the same key is cancelled."""
        timer = RemovalTimer(session_id, participant_id, time.time() + self.grace_period)
        with self._lock:
            previous = self._pending.get(timer.key)
            if previous is not None:
                previous.cancelled = True
            self._pending[timer.key] = timer
        self.logger.info(
            f"[timer-set] session={session_id} participant={participant_id} grace={self.grace_period}s deadline={timer.deadline}"
        )
        self._start_task(self._worker, timer, on_expire)
        return timer

    def cancel(self, session_id: str, participant_id: str) -> bool:
        """Cancel a pending timer. Returns False when none was outstanding."""
        with self._lock:
            timer = self._pending.pop((session_id, participant_id), None)
            if timer is None:
                return False
            timer.cancelled = True
        self.logger.info(f"[timer-cancel] session={session_id} participant={participant_id}")
        return True

    def cancel_session(self, session_id: str) -> int:
        with self._lock:
            keys = [k for k in self._pending if k[0] == session_id]
            for k in keys:
                self._pending.pop(k).cancelled = True
        return len(keys)

    def is_pending(self, session_id: str, participant_id: str) -> bool:
        with self._lock:
            return (session_id, participant_id) in self._pending

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def _worker(self, timer: RemovalTimer, on_expire: Callable[[str, str], None]) -> None:
        self._sleep(max(0.0, timer.deadline - time.time()))
        with self._lock:
            if timer.cancelled or self._pending.get(timer.key) is not timer:
                self.logger.info(
                    f"[timer-abort] session={timer.session_id} participant={timer.participant_id} cancelled"
                )
                return
            del self._pending[timer.key]
        self.logger.info(f"[timer-fire] session={timer.session_id} participant={timer.participant_id}")
        try:
            on_expire(timer.session_id, timer.participant_id)
        except Exception:
            # Background task: log instead of propagating
            self.logger.exception(
                f"[timer-error] session={timer.session_id} participant={timer.participant_id}"
            )


def _start_thread(target, *args):
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    return thread
