from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from threading import RLock
from typing import List, Optional, Tuple

from .models import TaskEntity
from .schemas import TaskCreate, TaskUpdate
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListQuery:
    """
    One page of a single owner's tasks, newest first.
    """
    owner_id: int
    page: int = 1
    per_page: int = 10

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * max(self.per_page, 0)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def create(self, owner_id: int, data: TaskCreate) -> TaskEntity:
        """Create and return a new TaskEntity owned by owner_id."""

    @abstractmethod
    def get(self, task_id: int) -> Optional[TaskEntity]:
        """Return a TaskEntity by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: int, data: TaskUpdate) -> Optional[TaskEntity]:
        """Apply the provided fields of data. Return the updated entity or None if not found."""

    @abstractmethod
    def delete(self, task_id: int) -> bool:
        """Delete a TaskEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list_for_owner(self, query: ListQuery) -> Tuple[List[TaskEntity], int]:
        """
        Return one page of the owner's tasks and the owner's total task count.
        - Only tasks whose owner_id matches
        - Sorted by created_at descending, newer ids first on ties
        """


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TaskEntity] = {}
        self._next_id = 1
        logger.info("Using in-memory task repository")

    def _now(self) -> datetime:
        return datetime.now()

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def create(self, owner_id: int, data: TaskCreate) -> TaskEntity:
        now = self._now()
        entity: TaskEntity = {
            "id": self._allocate_id(),
            "owner_id": owner_id,
            "title": data.title,
            "description": data.description,
            "completed": data.completed,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def get(self, task_id: int) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def update(self, task_id: int, data: TaskUpdate) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None

            updated = existing.copy()
            for name, value in data.changes().items():
                updated[name] = value  # type: ignore[literal-required]
            updated["updated_at"] = self._now()

            self._items[task_id] = updated
            return updated.copy()

    def delete(self, task_id: int) -> bool:
        with self._lock:
            return self._items.pop(task_id, None) is not None

    def list_for_owner(self, query: ListQuery) -> Tuple[List[TaskEntity], int]:
        with self._lock:
            owned = [t for t in self._items.values() if t["owner_id"] == query.owner_id]
            owned.sort(key=lambda t: (t["created_at"], t["id"]), reverse=True)

            start = query.offset
            page = owned[start:start + max(query.per_page, 0)]

            # Return copies to avoid external mutation
            return [t.copy() for t in page], len(owned)


# PUBLIC_INTERFACE
def get_repository(settings: Settings) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository
    """
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path)
    return InMemoryRepository()
