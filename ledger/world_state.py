"""Ordered key/value World State with point access and range scans."""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import cast


@dataclass(frozen=True)
class KeyValue:
    key: str
    value: bytes


def _require_key(key: object) -> str:
    if not isinstance(key, str):
        raise ValueError("key must be a string")
    if not key:
        raise ValueError("key must not be empty")
    return key


def _require_value(value: object) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise ValueError("value must be bytes")
    data = bytes(value)
    if not data:
        raise ValueError("value must not be empty")
    return data


def _in_range(key: str, start_key: str, end_key: str) -> bool:
    if start_key and key < start_key:
        return False
    if end_key and key >= end_key:
        return False
    return True


class StateIterator:
    """Single-pass, forward-only cursor over a key range.

    Iterating yields ``KeyValue`` entries in key order. The cursor is also a
    context manager; once closed or exhausted it yields nothing more and the
    underlying rows are released.
    """

    def __init__(self, rows: Iterator[KeyValue]) -> None:
        self._rows: Iterator[KeyValue] | None = rows

    @property
    def closed(self) -> bool:
        return self._rows is None

    def __iter__(self) -> "StateIterator":
        return self

    def __next__(self) -> KeyValue:
        if self._rows is None:
            raise StopIteration
        try:
            return next(self._rows)
        except StopIteration:
            self.close()
            raise

    def close(self) -> None:
        rows = self._rows
        self._rows = None
        close = getattr(rows, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "StateIterator":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class WorldState(ABC):
    """Abstract ordered key/value map scoped to one transaction."""

    @abstractmethod
    def get_state(self, key: str) -> bytes | None:
        """Return the stored value for key, or None when absent."""

    @abstractmethod
    def put_state(self, key: str, value: bytes) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def delete_state(self, key: str) -> None:
        """Remove key. Deleting an absent key is a no-op."""

    @abstractmethod
    def get_state_by_range(self, start_key: str = "", end_key: str = "") -> StateIterator:
        """Open a cursor over ``start_key <= key < end_key``.

        Empty bounds are open-ended, so ``("", "")`` covers the whole keyspace.
        """


class InMemoryWorldState(WorldState):
    """Dict-backed World State. Range cursors snapshot matching entries."""

    def __init__(self, data: Mapping[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(data) if data is not None else {}

    def get_state(self, key: str) -> bytes | None:
        return self._data.get(_require_key(key))

    def put_state(self, key: str, value: bytes) -> None:
        self._data[_require_key(key)] = _require_value(value)

    def delete_state(self, key: str) -> None:
        _ = self._data.pop(_require_key(key), None)

    def get_state_by_range(self, start_key: str = "", end_key: str = "") -> StateIterator:
        snapshot = [
            KeyValue(key, value)
            for key, value in sorted(self._data.items())
            if _in_range(key, start_key, end_key)
        ]
        return StateIterator(iter(snapshot))

    def snapshot(self) -> dict[str, bytes]:
        return dict(self._data)

    def __len__(self) -> int:
        return len(self._data)


class SqliteWorldState(WorldState):
    """World State stored in the ``world_state`` table of an open connection.

    Range scans page through the table by key (``key > last_key``) instead of
    holding one statement open, so the caller may write or delete while
    iterating without disturbing entries still to come.
    """

    def __init__(self, connection: sqlite3.Connection, page_size: int = 100) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.connection: sqlite3.Connection = connection
        self.page_size: int = page_size

    def get_state(self, key: str) -> bytes | None:
        row = cast(
            sqlite3.Row | None,
            self.connection.execute(
                "SELECT value FROM world_state WHERE key = ?",
                (_require_key(key),),
            ).fetchone(),
        )
        if row is None:
            return None
        return bytes(cast(bytes, row["value"]))

    def put_state(self, key: str, value: bytes) -> None:
        _ = self.connection.execute(
            "INSERT OR REPLACE INTO world_state (key, value) VALUES (?, ?)",
            (_require_key(key), sqlite3.Binary(_require_value(value))),
        )

    def delete_state(self, key: str) -> None:
        _ = self.connection.execute(
            "DELETE FROM world_state WHERE key = ?",
            (_require_key(key),),
        )

    def get_state_by_range(self, start_key: str = "", end_key: str = "") -> StateIterator:
        return StateIterator(self._iter_pages(start_key, end_key))

    def _iter_pages(self, start_key: str, end_key: str) -> Iterator[KeyValue]:
        lower_op, lower = ">=", start_key
        while True:
            sql = f"SELECT key, value FROM world_state WHERE key {lower_op} ?"
            params: list[object] = [lower]
            if end_key:
                sql += " AND key < ?"
                params.append(end_key)
            sql += " ORDER BY key LIMIT ?"
            params.append(self.page_size)
            rows = self.connection.execute(sql, params).fetchall()
            for row in rows:
                typed_row = cast(sqlite3.Row, row)
                yield KeyValue(
                    key=cast(str, typed_row["key"]),
                    value=bytes(cast(bytes, typed_row["value"])),
                )
            if len(rows) < self.page_size:
                return
            lower_op, lower = ">", cast(str, cast(sqlite3.Row, rows[-1])["key"])
