"""
SQLite database for notes, task lists, calendar events, and key-value settings.
"""

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import regex

from paradesk.config.logger import get_logger
from paradesk.config.settings import global_settings
from paradesk.errors import InvalidInput
from paradesk.util.format_utils import fmt_path

log = get_logger(__name__)


_SQL_IDENTIFIER_PATTERN = regex.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

IN_MEMORY = ":memory:"


class Database:
    """
    A SQLite file with one connection per thread, in autocommit mode. Use
    `transaction()` to group writes.
    """

    def __init__(self, db_path: Optional[Path | str] = None):
        self.db_path = str(db_path) if db_path else str(global_settings().db_path)
        self._local = threading.local()
        # An in-memory database only exists on its connection, so share one.
        self._shared_connection: Optional[sqlite3.Connection] = None
        self._shared_lock = threading.RLock()
        if self.db_path != IN_MEMORY:
            Path(self.db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        return connection

    @property
    def connection(self) -> sqlite3.Connection:
        """
        Current thread's connection.
        """
        if self.db_path == IN_MEMORY:
            with self._shared_lock:
                if self._shared_connection is None:
                    self._shared_connection = self._connect()
                return self._shared_connection

        if getattr(self._local, "connection", None) is None:
            self._local.connection = self._connect()
            log.debug("Opened database: %s", fmt_path(self.db_path))
        return self._local.connection

    def execute(self, sql: str, params: Tuple[Any, ...] = ()) -> sqlite3.Cursor:
        return self.connection.execute(sql, params)

    def fetchone(self, sql: str, params: Tuple[Any, ...] = ()) -> Optional[sqlite3.Row]:
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Tuple[Any, ...] = ()) -> List[sqlite3.Row]:
        return self.execute(sql, params).fetchall()

    def safe_update(
        self,
        table: str,
        values: Dict[str, Any],
        where: str,
        where_params: Tuple[Any, ...],
    ) -> sqlite3.Cursor:
        """
        UPDATE with dynamic columns. Table and column names are checked against a
        plain identifier pattern; values always go through parameters.
        """
        if not values:
            return self.connection.cursor()

        if not _SQL_IDENTIFIER_PATTERN.match(table):
            raise InvalidInput(f"Invalid table name: {table!r}")

        set_clauses: List[str] = []
        update_params: List[Any] = []
        for col, val in values.items():
            if not _SQL_IDENTIFIER_PATTERN.match(col):
                raise InvalidInput(f"Invalid column name: {col!r}")
            set_clauses.append(f"{col} = ?")
            update_params.append(val)

        sql = f"UPDATE {table} SET {', '.join(set_clauses)} WHERE {where}"
        return self.execute(sql, tuple(update_params) + where_params)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Group statements into one transaction, rolled back if anything raises:

            with db.transaction() as conn:
                conn.execute("INSERT ...")
                conn.execute("UPDATE ...")
        """
        conn = self.connection
        conn.execute("BEGIN")
        try:
            yield conn
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise

    def migrate(self) -> int:
        """
        Apply any pending schema migrations. Returns the number applied.
        """
        from paradesk.db.migrations import run_migrations

        return run_migrations(self)

    def close(self) -> None:
        """
        Close the current thread's connection.
        """
        if self._shared_connection is not None:
            self._shared_connection.close()
            self._shared_connection = None
        if getattr(self._local, "connection", None) is not None:
            self._local.connection.close()
            self._local.connection = None


def open_database(db_path: Optional[Path | str] = None) -> Database:
    """
    Open the database (default from settings) and bring its schema up to date.
    """
    db = Database(db_path)
    applied = db.migrate()
    if applied:
        log.info("Applied %s migration(s) to %s", applied, fmt_path(db.db_path))
    return db


## Tests


def test_transaction_rolls_back(tmp_path):
    db = Database(tmp_path / "test.db")
    db.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
    try:
        with db.transaction() as conn:
            conn.execute("INSERT INTO t (name) VALUES ('a')")
            raise RuntimeError("fail")
    except RuntimeError:
        pass
    assert db.fetchall("SELECT * FROM t") == []

    with db.transaction() as conn:
        conn.execute("INSERT INTO t (name) VALUES ('b')")
    assert [row["name"] for row in db.fetchall("SELECT * FROM t")] == ["b"]
    db.close()


def test_safe_update_checks_identifiers():
    db = Database(IN_MEMORY)
    db.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
    db.execute("INSERT INTO t (name) VALUES ('a')")
    cursor = db.safe_update("t", {"name": "b"}, "id = ?", (1,))
    assert cursor.rowcount == 1
    assert dict(db.fetchone("SELECT * FROM t")) == {"id": 1, "name": "b"}
    try:
        db.safe_update("t", {"name; DROP TABLE t": "x"}, "id = ?", (1,))
        assert False
    except InvalidInput:
        pass
    db.close()
