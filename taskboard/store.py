"""
Task Store — In-Memory Data Layer
===================================
The single source of truth for all tasks. Pure data layer: no HTTP,
no JSON, no validation of titles (the router does that).

Components:
    Task           — A to-do item (id, title, completed, created_at)
    ReadWriteLock  — Many readers or one writer, writers preferred
    TaskStore      — Owned map of tasks guarded by a ReadWriteLock

Ownership:
    The store owns every Task it holds. Anything handed out is a
    snapshot copy, so callers can never mutate stored state.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional


STATUS_FILTERS = ("all", "active", "done")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ─────────────────────────────────────────────────────────────
#  Task
# ─────────────────────────────────────────────────────────────

@dataclass
class Task:
    """A single to-do item."""

    id: int
    title: str
    completed: bool = False
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dict."""
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "created_at": self.created_at.isoformat(),
        }


# ─────────────────────────────────────────────────────────────
#  Readers-Writer Lock
# ─────────────────────────────────────────────────────────────

class ReadWriteLock:
    """Readers-writer lock on top of threading.Condition.

    Any number of readers may hold the lock at once. A writer holds it
    alone. Once a writer is waiting, new readers queue behind it.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        with self._cond:
            return self._readers

    @property
    def write_held(self) -> bool:
        with self._cond:
            return self._writer


# ─────────────────────────────────────────────────────────────
#  Task Store
# ─────────────────────────────────────────────────────────────

class TaskStore:
    """Concurrent in-memory task store.

    Mutations (add, toggle, delete) take the write lock; reads
    (list, get) take the read lock. Identifiers start at 1 and are
    never reused, even after the task holding one is deleted.

    Args:
        clock: Returns the creation timestamp for new tasks.
        witness: Optional TaskWitness told about every mutation.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None, witness=None):
        self._tasks: dict[int, Task] = {}
        self._next_id = 1
        self._lock = ReadWriteLock()
        self._clock = clock or _utcnow
        self.witness = witness

    # ─── Mutations ────────────────────────────────────────

    def add(self, title: str) -> Task:
        """Create a task with the next sequential id."""
        with self._lock.write_locked():
            task = Task(id=self._next_id, title=title, created_at=self._clock())
            self._tasks[task.id] = task
            self._next_id += 1
            snapshot = replace(task)
        self._observe("add", {"id": snapshot.id, "title": snapshot.title})
        return snapshot

    def toggle(self, task_id: int) -> bool:
        """Flip the completion flag. Returns whether the id existed."""
        return self.toggle_task(task_id) is not None

    def toggle_task(self, task_id: int) -> Optional[Task]:
        """Flip the completion flag and return the updated task, or None."""
        with self._lock.write_locked():
            task = self._tasks.get(task_id)
            if task is None:
                snapshot = None
            else:
                task.completed = not task.completed
                snapshot = replace(task)
        if snapshot is None:
            self._observe("toggle_missing", {"id": task_id})
        else:
            self._observe("toggle", {"id": task_id, "completed": snapshot.completed})
        return snapshot

    def delete(self, task_id: int) -> bool:
        """Remove a task. Returns whether the id existed."""
        with self._lock.write_locked():
            existed = self._tasks.pop(task_id, None) is not None
        self._observe("delete" if existed else "delete_missing", {"id": task_id})
        return existed

    # ─── Reads ────────────────────────────────────────────

    def list(self, status: str = "all") -> list[Task]:
        """All tasks matching a status filter: all, active or done.

        Tasks come back in insertion order, but callers should not
        depend on it.
        """
        if status not in STATUS_FILTERS:
            raise ValueError(
                f"Unknown status filter '{status}'. Expected one of: {', '.join(STATUS_FILTERS)}"
            )
        with self._lock.read_locked():
            tasks = [replace(t) for t in self._tasks.values()]
        if status == "active":
            return [t for t in tasks if not t.completed]
        if status == "done":
            return [t for t in tasks if t.completed]
        return tasks

    def get(self, task_id: int) -> Optional[Task]:
        """Return a snapshot of one task, or None."""
        with self._lock.read_locked():
            task = self._tasks.get(task_id)
            return replace(task) if task is not None else None

    @property
    def next_id(self) -> int:
        with self._lock.read_locked():
            return self._next_id

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._tasks)

    def _observe(self, action: str, details: dict) -> None:
        if self.witness is not None:
            self.witness.log_action(action, details)
