"""
Key-value settings: the "most important task" note, UI theme, and the last
folder opened in each sidebar mode.
"""

from typing import Optional

from paradesk.db.database import Database
from paradesk.errors import InvalidInput

MIT_KEY = "mit"

THEME_KEY = "theme"

THEMES = ("light", "dark")


def last_path_key(mode: str) -> str:
    return f"last_path_{mode}"


def get_value(db: Database, key: str) -> Optional[str]:
    row = db.fetchone("SELECT value FROM kv_storage WHERE key = ?", (key,))
    return row["value"] if row else None


def set_value(db: Database, key: str, value: Optional[str]) -> None:
    if not key:
        raise InvalidInput("Key must not be empty")
    db.execute(
        "INSERT INTO kv_storage (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
        (key, value),
    )


def get_last_path_for_mode(db: Database, mode: str) -> Optional[str]:
    return get_value(db, last_path_key(mode))


def set_last_path_for_mode(db: Database, mode: str, path: str) -> None:
    if not mode:
        raise InvalidInput("Mode must not be empty")
    set_value(db, last_path_key(mode), path)


def get_mit(db: Database) -> Optional[str]:
    return get_value(db, MIT_KEY)


def set_mit(db: Database, content: str) -> None:
    set_value(db, MIT_KEY, content)


def get_theme(db: Database) -> Optional[str]:
    return get_value(db, THEME_KEY)


def set_theme(db: Database, theme: str) -> None:
    if theme not in THEMES:
        raise InvalidInput(f"Unknown theme: {theme!r} (expected one of {', '.join(THEMES)})")
    set_value(db, THEME_KEY, theme)


## Tests


def test_kv_store():
    from paradesk.db.database import IN_MEMORY, open_database

    db = open_database(IN_MEMORY)
    assert get_value(db, "missing") is None
    set_value(db, "a", "1")
    set_value(db, "a", "2")
    assert get_value(db, "a") == "2"

    set_mit(db, "Ship it")
    assert get_mit(db) == "Ship it"

    set_last_path_for_mode(db, "notes", "/tmp/notes")
    assert get_last_path_for_mode(db, "notes") == "/tmp/notes"
    assert get_value(db, "last_path_notes") == "/tmp/notes"
    assert get_last_path_for_mode(db, "images") is None

    set_theme(db, "dark")
    assert get_theme(db) == "dark"
    try:
        set_theme(db, "purple")
        assert False
    except InvalidInput:
        pass
    assert get_theme(db) == "dark"
    db.close()
