"""Per-event locks for mutations that must not interleave."""
import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from uuid import UUID


class EventLocks:
    """Registry of one re-entrant lock per event id.

    Sync route handlers run on a thread pool, so two requests can touch the
    same event at once. Attendee insertion, status updates, event copies and
    form attachment hold the event's lock. Locks are re-entrant because the
    invitation dispatcher holds the lock while calling ``attach_form``.

    Entries are weak: a lock is dropped once no caller holds or waits on it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[UUID, threading.RLock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, event_id: UUID) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(event_id)
            if lock is None:
                lock = self._locks[event_id] = threading.RLock()
            return lock

    def __len__(self) -> int:
        return len(self._locks)

    @contextmanager
    def hold(self, event_id: UUID) -> Iterator[None]:
        lock = self._lock_for(event_id)
        with lock:
            yield
