"""
Schema migrations, applied in order and recorded in `schema_version`.
"""

from typing import List, Tuple

from paradesk.config.logger import get_logger
from paradesk.db.database import Database

log = get_logger(__name__)

# (version, description, sql)
MIGRATIONS: List[Tuple[int, str, str]] = [
    (
        1,
        "Create schema_version table",
        """
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TEXT NOT NULL DEFAULT (datetime('now'))
        );
        """,
    ),
    (
        2,
        "Create kv_storage table",
        """
        CREATE TABLE IF NOT EXISTS kv_storage (
            key TEXT PRIMARY KEY,
            value TEXT
        );
        """,
    ),
    (
        3,
        "Create scratchpad_notes table",
        """
        CREATE TABLE IF NOT EXISTS scratchpad_notes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            content TEXT,
            created_at TIMESTAMP NOT NULL DEFAULT (datetime('now'))
        );
        """,
    ),
    (
        4,
        "Create task_lists table",
        """
        CREATE TABLE IF NOT EXISTS task_lists (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            content TEXT NOT NULL DEFAULT '',
            created_at TIMESTAMP NOT NULL DEFAULT (datetime('now')),
            updated_at TIMESTAMP NOT NULL DEFAULT (datetime('now'))
        );
        """,
    ),
    (
        5,
        "Add display_order to task_lists",
        """
        ALTER TABLE task_lists ADD COLUMN display_order INTEGER NOT NULL DEFAULT 0;
        """,
    ),
    (
        6,
        "Create calendar_events table",
        """
        CREATE TABLE IF NOT EXISTS calendar_events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            date DATE NOT NULL,
            title TEXT NOT NULL,
            content TEXT NOT NULL DEFAULT '',
            is_urgent_pin BOOLEAN NOT NULL DEFAULT 0,
            is_future_reminder_pin BOOLEAN NOT NULL DEFAULT 0,
            created_at TIMESTAMP NOT NULL DEFAULT (datetime('now')),
            updated_at TIMESTAMP NOT NULL DEFAULT (datetime('now'))
        );
        CREATE INDEX IF NOT EXISTS idx_calendar_events_date ON calendar_events(date);
        """,
    ),
]


def get_current_version(db: Database) -> int:
    """
    Current schema version, or 0 for a new database.
    """
    row = db.fetchone(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'schema_version'"
    )
    if row is None:
        return 0
    row = db.fetchone("SELECT MAX(version) AS version FROM schema_version")
    return row["version"] if row and row["version"] else 0


def run_migrations(db: Database) -> int:
    """
    Run pending migrations, each in its own transaction. Returns the number applied.
    """
    current_version = get_current_version(db)
    applied = 0

    for version, description, sql in MIGRATIONS:
        if version <= current_version:
            continue
        log.debug("Applying migration %s: %s", version, description)
        try:
            with db.transaction() as conn:
                for statement in sql.strip().split(";"):
                    statement = statement.strip()
                    if statement:
                        conn.execute(statement)
                conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
        except Exception as e:
            log.error("Migration %s failed: %s", version, e)
            raise
        applied += 1

    if applied:
        log.debug("Applied %s migration(s), now at version %s", applied, MIGRATIONS[-1][0])

    return applied


## Tests


def test_migrations_are_idempotent(tmp_path):
    db = Database(tmp_path / "test.db")
    assert run_migrations(db) == len(MIGRATIONS)
    assert get_current_version(db) == MIGRATIONS[-1][0]
    assert run_migrations(db) == 0

    columns = [row["name"] for row in db.fetchall("PRAGMA table_info(task_lists)")]
    assert "display_order" in columns
    db.close()
