"""
In-process row store.

A small stand-in for a hosted relational backend: named tables of dict rows,
equality filters, and per-table unique constraints. Every inserted row gets
an ``id`` and a ``created_at`` timestamp.
"""
from __future__ import annotations

import copy
import threading
import time
import uuid
from typing import Any

TABLES: dict[str, list[tuple[str, ...]]] = {
    # table name -> unique constraints (column tuples)
    "profiles": [("username_key",)],
    "saved_restaurants": [("user_id", "restaurant_id")],
    "user_tags": [("user_id", "tag_name")],
    "restaurant_tags": [("user_id", "restaurant_id", "tag_id")],
    "app_feedback": [],
}


class StorageError(Exception):
    """Base class for row store failures."""


class UnknownTable(StorageError):
    pass


class UniqueViolation(StorageError):
    def __init__(self, table: str, columns: tuple[str, ...]):
        super().__init__(f"duplicate key in {table} on ({', '.join(columns)})")
        self.table = table
        self.columns = columns


class RowNotFound(StorageError):
    pass


def _matches(row: dict[str, Any], filters: dict[str, Any]) -> bool:
    for key, expected in filters.items():
        if isinstance(expected, (list, tuple, set, frozenset)):
            if row.get(key) not in expected:
                return False
        elif row.get(key) != expected:
            return False
    return True


class RowStore:
    def __init__(self, tables: dict[str, list[tuple[str, ...]]] | None = None):
        self._constraints = dict(tables if tables is not None else TABLES)
        self._rows: dict[str, list[dict[str, Any]]] = {name: [] for name in self._constraints}
        self._lock = threading.Lock()

    def _table(self, name: str) -> list[dict[str, Any]]:
        if name not in self._rows:
            raise UnknownTable(name)
        return self._rows[name]

    def _check_unique(
        self, table: str, candidate: dict[str, Any], ignore_id: str | None = None,
    ) -> None:
        for columns in self._constraints[table]:
            key = tuple(candidate.get(c) for c in columns)
            if any(v is None for v in key):
                continue
            for row in self._rows[table]:
                if row["id"] == ignore_id:
                    continue
                if tuple(row.get(c) for c in columns) == key:
                    raise UniqueViolation(table, columns)

    def insert(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return a copy of it as stored."""
        with self._lock:
            rows = self._table(table)
            row = {"id": uuid.uuid4().hex, "created_at": time.time(), **copy.deepcopy(values)}
            self._check_unique(table, row)
            rows.append(row)
            return copy.deepcopy(row)

    def select(self, table: str, **filters: Any) -> list[dict[str, Any]]:
        """Rows whose columns equal ``filters`` (a collection value means IN)."""
        with self._lock:
            return [copy.deepcopy(r) for r in self._table(table) if _matches(r, filters)]

    def select_one(self, table: str, **filters: Any) -> dict[str, Any] | None:
        rows = self.select(table, **filters)
        return rows[0] if rows else None

    def update(self, table: str, values: dict[str, Any], **filters: Any) -> list[dict[str, Any]]:
        """Apply ``values`` to every matching row; raises RowNotFound if none match."""
        with self._lock:
            targets = [r for r in self._table(table) if _matches(r, filters)]
            if not targets:
                raise RowNotFound(f"no {table} row matching {filters}")
            for row in targets:
                self._check_unique(table, {**row, **values}, ignore_id=row["id"])
            for row in targets:
                row.update(copy.deepcopy(values))
            return [copy.deepcopy(r) for r in targets]

    def delete(self, table: str, **filters: Any) -> int:
        """Delete matching rows and return how many were removed."""
        with self._lock:
            rows = self._table(table)
            keep = [r for r in rows if not _matches(r, filters)]
            removed = len(rows) - len(keep)
            rows[:] = keep
            return removed

    def clear(self) -> None:
        with self._lock:
            for rows in self._rows.values():
                rows.clear()


_store = RowStore()


def get_store() -> RowStore:
    return _store


def clear_store() -> None:
    _store.clear()
