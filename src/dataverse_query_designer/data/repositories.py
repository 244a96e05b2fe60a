# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Persistence interfaces for environments and saved queries.

The designer depends only on the :class:`EnvironmentRepository` and
:class:`SavedQueryRepository` protocols. The in-memory implementations below keep
records in process and hand out deep copies so callers never share mutable state
with the store.
"""

from __future__ import annotations

import copy
import threading
from typing import Dict, List, Optional, Protocol, runtime_checkable

from ..models.environment import Environment
from ..models.saved_query import SavedQuery


@runtime_checkable
class EnvironmentRepository(Protocol):
    def get(self, environment_id: str) -> Optional[Environment]: ...

    def list_by_user(self, user_id: str) -> List[Environment]: ...

    def add(self, environment: Environment) -> Environment: ...

    def save(self, environment: Environment) -> Environment: ...

    def remove(self, environment_id: str) -> bool: ...


@runtime_checkable
class SavedQueryRepository(Protocol):
    def add(self, saved_query: SavedQuery) -> SavedQuery: ...

    def get(self, saved_query_id: str) -> Optional[SavedQuery]: ...

    def list_by_user(self, user_id: str) -> List[SavedQuery]: ...

    def save(self, saved_query: SavedQuery) -> SavedQuery: ...

    def remove(self, saved_query_id: str) -> bool: ...


class InMemoryEnvironmentRepository:
    """Process-local :class:`EnvironmentRepository`."""

    def __init__(self, environments: Optional[List[Environment]] = None) -> None:
        self._lock = threading.Lock()
        self._items: Dict[str, Environment] = {}
        for environment in environments or []:
            self.add(environment)

    def get(self, environment_id: str) -> Optional[Environment]:
        with self._lock:
            item = self._items.get(environment_id)
            return copy.deepcopy(item) if item is not None else None

    def list_by_user(self, user_id: str) -> List[Environment]:
        with self._lock:
            return [copy.deepcopy(e) for e in self._items.values() if e.user_id == user_id]

    def add(self, environment: Environment) -> Environment:
        with self._lock:
            if environment.id in self._items:
                raise KeyError(f"Environment '{environment.id}' already exists.")
            self._items[environment.id] = copy.deepcopy(environment)
        return environment

    def save(self, environment: Environment) -> Environment:
        with self._lock:
            self._items[environment.id] = copy.deepcopy(environment)
        return environment

    def remove(self, environment_id: str) -> bool:
        with self._lock:
            return self._items.pop(environment_id, None) is not None


class InMemorySavedQueryRepository:
    """Process-local :class:`SavedQueryRepository`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: Dict[str, SavedQuery] = {}

    def add(self, saved_query: SavedQuery) -> SavedQuery:
        with self._lock:
            if saved_query.id in self._items:
                raise KeyError(f"Saved query '{saved_query.id}' already exists.")
            self._items[saved_query.id] = saved_query.copy()
        return saved_query

    def get(self, saved_query_id: str) -> Optional[SavedQuery]:
        with self._lock:
            item = self._items.get(saved_query_id)
            return item.copy() if item is not None else None

    def list_by_user(self, user_id: str) -> List[SavedQuery]:
        with self._lock:
            return [q.copy() for q in self._items.values() if q.user_id == user_id]

    def save(self, saved_query: SavedQuery) -> SavedQuery:
        with self._lock:
            self._items[saved_query.id] = saved_query.copy()
        return saved_query

    def remove(self, saved_query_id: str) -> bool:
        with self._lock:
            return self._items.pop(saved_query_id, None) is not None


__all__ = [
    "EnvironmentRepository",
    "SavedQueryRepository",
    "InMemoryEnvironmentRepository",
    "InMemorySavedQueryRepository",
]
