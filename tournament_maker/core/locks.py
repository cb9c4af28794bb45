import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class TournamentLockRegistry:
    """Hands out one lock per tournament id so read-decide-write sequences on a
    tournament never interleave."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def lock_for(self, tournament_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(tournament_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[tournament_id] = lock
            return lock

    @contextmanager
    def hold(self, tournament_id: str) -> Iterator[None]:
        with self.lock_for(tournament_id):
            yield

    def discard(self, tournament_id: str) -> None:
        with self._guard:
            self._locks.pop(tournament_id, None)
