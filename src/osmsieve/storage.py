"""Ordered key-value engines backing the staging store."""

from __future__ import annotations

import logging
import os
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol, runtime_checkable

from osmsieve.errors import StorageBackendError

logger = logging.getLogger(__name__)


def prefix_upper_bound(prefix: str) -> str | None:
    """Return the smallest key greater than every key starting with ``prefix``.

    None means the range is unbounded above.
    """
    stripped = prefix.rstrip(chr(0x10FFFF))
    if not stripped:
        return None
    return stripped[:-1] + chr(ord(stripped[-1]) + 1)


@runtime_checkable
class KeyValueEngine(Protocol):
    """Single-writer ordered key-value contract used by the staging store."""

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def scan(self, lower: str = "", upper: str | None = None) -> Iterator[tuple[str, str]]: ...

    def iterate(self, prefix: str = "") -> Iterator[tuple[str, str]]: ...

    def count(self, lower: str = "", upper: str | None = None) -> int: ...

    def commit(self) -> None: ...

    def clear(self) -> None: ...

    def close(self) -> None: ...


class SqliteEngine:
    """SQLite-backed key-value engine.

    Writes are grouped into transactions of ``commit_every`` operations. Reads on
    the same connection see uncommitted writes, so callers need not commit
    between a put and a following get. A ``read_only`` engine neither creates
    the table nor changes the journal mode, and every write fails with
    :class:`StorageBackendError`.
    """

    def __init__(
        self,
        db_path: str,
        *,
        commit_every: int = 10000,
        batch_size: int = 1000,
        read_only: bool = False,
    ) -> None:
        self.db_path = db_path
        self.commit_every = max(1, commit_every)
        self.batch_size = max(1, batch_size)
        self.read_only = read_only
        self._pending = 0
        with self._wrap("open"):
            if read_only:
                uri = Path(db_path).resolve().as_uri() + "?mode=ro"
                self._conn = sqlite3.connect(uri, uri=True)
            else:
                self._conn = sqlite3.connect(db_path)
                self._conn.execute("PRAGMA journal_mode=WAL")
                self._conn.execute("PRAGMA synchronous=OFF")
                self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS kv (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            ) WITHOUT ROWID;
        """)
        self._conn.commit()

    @contextmanager
    def _wrap(self, operation: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as e:
            raise StorageBackendError(operation, str(e)) from e

    def _wrote(self) -> None:
        self._pending += 1
        if self._pending >= self.commit_every:
            self.commit()

    def get(self, key: str) -> str | None:
        with self._wrap("get"):
            row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return None if row is None else row[0]

    def put(self, key: str, value: str) -> None:
        with self._wrap("put"):
            self._conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
        self._wrote()

    def delete(self, key: str) -> None:
        with self._wrap("delete"):
            self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._wrote()

    def scan(self, lower: str = "", upper: str | None = None) -> Iterator[tuple[str, str]]:
        """Yield (key, value) pairs with ``lower <= key < upper`` in key order.

        Rows are fetched in batches keyed on the last key seen, so no statement
        stays open between batches and the caller may write to the engine while
        iterating. Keys written ahead of the current position are picked up by
        later batches.
        """
        bound_sql = "" if upper is None else " AND key < ?"
        bound_params: tuple[str, ...] = () if upper is None else (upper,)
        op = ">="
        last = lower
        while True:
            with self._wrap("scan"):
                rows = self._conn.execute(
                    f"SELECT key, value FROM kv WHERE key {op} ?{bound_sql} ORDER BY key LIMIT ?",
                    (last, *bound_params, self.batch_size),
                ).fetchall()
            if not rows:
                break
            yield from rows
            last = rows[-1][0]
            op = ">"

    def iterate(self, prefix: str = "") -> Iterator[tuple[str, str]]:
        """Yield every (key, value) whose key starts with ``prefix``."""
        return self.scan(prefix, prefix_upper_bound(prefix))

    def count(self, lower: str = "", upper: str | None = None) -> int:
        with self._wrap("count"):
            if upper is None:
                row = self._conn.execute("SELECT COUNT(*) FROM kv WHERE key >= ?", (lower,))
            else:
                row = self._conn.execute(
                    "SELECT COUNT(*) FROM kv WHERE key >= ? AND key < ?", (lower, upper)
                )
            return int(row.fetchone()[0])

    def commit(self) -> None:
        with self._wrap("commit"):
            self._conn.commit()
        self._pending = 0

    def clear(self) -> None:
        with self._wrap("clear"):
            self._conn.execute("DELETE FROM kv")
            self._conn.commit()
        self._pending = 0

    def close(self) -> None:
        with self._wrap("close"):
            self._conn.commit()
            self._conn.close()


def open_engine(
    db_path: str,
    *,
    commit_every: int = 10000,
    batch_size: int = 1000,
    read_only: bool = False,
) -> SqliteEngine:
    """Open (creating if needed, unless ``read_only``) the SQLite engine at ``db_path``."""
    if db_path != ":memory:" and not read_only:
        parent = os.path.dirname(os.path.abspath(db_path))
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as e:
            raise StorageBackendError("open", f"cannot create {parent}: {e}") from e
    logger.debug("Opening staging engine at %s", db_path)
    return SqliteEngine(
        db_path, commit_every=commit_every, batch_size=batch_size, read_only=read_only
    )
