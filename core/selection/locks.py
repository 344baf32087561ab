#!/usr/bin/env python3
"""
Per-path locking for the score -> rank -> allocate sequence.

Two concurrent passes over the same (period, path) must not interleave,
otherwise one run's ranks can be overwritten halfway by another. Each
(period_id, path_id) key gets:

- an in-process threading.Lock (covers threads of one web worker), and
- a PostgreSQL transaction-level advisory lock when the session is bound to
  PostgreSQL (covers other processes; released at commit/rollback).
"""

import contextlib
import logging
import threading
from typing import Dict, Iterator, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

PathKey = Tuple[int, int]


class PathLockRegistry:
    """Hands out one lock per (period_id, path_id)."""

    def __init__(self):
        self._locks: Dict[PathKey, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: PathKey) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def is_locked(self, period_id: int, path_id: int) -> bool:
        return self._lock_for((period_id, path_id)).locked()

    @contextlib.contextmanager
    def hold(self, period_id: int, path_id: int, session: Optional[Session] = None) -> Iterator[None]:
        """Block until the path is free, then hold it for the duration of the block."""
        lock = self._lock_for((period_id, path_id))
        if not lock.acquire(blocking=False):
            logger.info(f"Path {path_id} of period {period_id} is busy; waiting for the running pass")
            lock.acquire()
        try:
            if session is not None and _is_postgres(session):
                session.execute(
                    text("SELECT pg_advisory_xact_lock(:period_id, :path_id)"),
                    {'period_id': period_id, 'path_id': path_id}
                )
            yield
        finally:
            lock.release()


def _is_postgres(session: Session) -> bool:
    bind = session.get_bind()
    return bind is not None and bind.dialect.name == 'postgresql'


# Shared by every SelectionService in the process
path_locks = PathLockRegistry()
