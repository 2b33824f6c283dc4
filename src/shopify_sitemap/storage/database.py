from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import TYPE_CHECKING

from .sql import SCHEMA_SQL

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

IN_MEMORY = ":memory:"


class Database:
    """Lazily opened sqlite connection holding the cache tables."""

    def __init__(self, path: Path | str = IN_MEMORY) -> None:
        self._path = path
        self._connection: sqlite3.Connection | None = None

    @property
    def path(self) -> Path | str:
        return self._path

    def connect(self) -> sqlite3.Connection:
        if self._connection is None:
            self._connection = sqlite3.connect(self._path, isolation_level=None)
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def initialize(self) -> None:
        self.connect().executescript(SCHEMA_SQL)

    def execute(
        self,
        query: str,
        params: Sequence[object] | None = None,
    ) -> sqlite3.Cursor:
        return self.connect().execute(query, params or ())

    def fetch_one(self, query: str, params: Sequence[object] | None = None) -> sqlite3.Row | None:
        row: sqlite3.Row | None = self.execute(query, params).fetchone()
        return row

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        connection = self.connect()
        connection.execute("BEGIN IMMEDIATE")
        try:
            yield connection
        except BaseException:
            connection.execute("ROLLBACK")
            raise
        connection.execute("COMMIT")

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
