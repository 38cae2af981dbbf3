import itertools
import logging
from typing import Callable, Dict, Optional


class RoomCleanupScheduler:
    """Deferred deletion of rooms whose last player has gone.

    - One pending ticket per room id; scheduling again supersedes the old one
    - ``cancel`` drops the ticket so the sleeping task aborts when it wakes
    - At fire time the room is only deleted if it is still empty
    """

    def __init__(
        self,
        registry,
        delay_sec: float = 60.0,
        start_task: Optional[Callable] = None,
        sleep: Optional[Callable[[float], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if start_task is None or sleep is None:
            from puzzle_room import socketio
            start_task = start_task or socketio.start_background_task
            sleep = sleep or socketio.sleep
        self.registry = registry
        self.delay_sec = delay_sec
        self.start_task = start_task
        self.sleep = sleep
        self._logger = logger or logging.getLogger(__name__)
        self._tickets = itertools.count(1)
        self._pending: Dict[str, int] = {}

    def schedule(self, room_id: str) -> int:
        ticket = next(self._tickets)
        self._pending[room_id] = ticket
        self._logger.info(f"[cleanup-set] room={room_id} ticket={ticket} delay={self.delay_sec}s")
        self.start_task(self._runner, room_id, ticket)
        return ticket

    def cancel(self, room_id: str) -> bool:
        ticket = self._pending.pop(room_id, None)
        if ticket is not None:
            self._logger.info(f"[cleanup-cancel] room={room_id} ticket={ticket}")
        return ticket is not None

    def pending(self, room_id: str) -> bool:
        return room_id in self._pending

    def _runner(self, room_id: str, ticket: int) -> None:
        if self.delay_sec:
            self.sleep(self.delay_sec)
        with self.registry.lock:
            if self._pending.get(room_id) != ticket:
                self._logger.info(f"[cleanup-abort] room={room_id} ticket={ticket} superseded or cancelled")
                return
            del self._pending[room_id]
            if self.registry.delete_if_empty(room_id):
                self._logger.info(f"[cleanup-fire] room={room_id} removed due to inactivity")
            else:
                self._logger.info(f"[cleanup-abort] room={room_id} no longer empty")
