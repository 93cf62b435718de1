from typing import List, Optional

from paradesk.db.database import Database
from paradesk.errors import UnexpectedError
from paradesk.model.store_model import ScratchpadNote


def list_notes(db: Database) -> List[ScratchpadNote]:
    rows = db.fetchall("SELECT * FROM scratchpad_notes ORDER BY created_at ASC, id ASC")
    return [ScratchpadNote(**dict(row)) for row in rows]


def get_note(db: Database, note_id: int) -> Optional[ScratchpadNote]:
    row = db.fetchone("SELECT * FROM scratchpad_notes WHERE id = ?", (note_id,))
    return ScratchpadNote(**dict(row)) if row else None


def add_note(db: Database, content: str) -> ScratchpadNote:
    cursor = db.execute("INSERT INTO scratchpad_notes (content) VALUES (?)", (content,))
    note = get_note(db, cursor.lastrowid)  # type: ignore[arg-type]
    if not note:
        raise UnexpectedError(f"Note missing right after insert: {cursor.lastrowid}")
    return note


def update_note(db: Database, note_id: int, content: str) -> Optional[ScratchpadNote]:
    cursor = db.execute(
        "UPDATE scratchpad_notes SET content = ? WHERE id = ?", (content, note_id)
    )
    if cursor.rowcount == 0:
        return None
    return get_note(db, note_id)


def delete_note(db: Database, note_id: int) -> bool:
    cursor = db.execute("DELETE FROM scratchpad_notes WHERE id = ?", (note_id,))
    return cursor.rowcount > 0


## Tests


def test_scratchpad_notes():
    from paradesk.db.database import IN_MEMORY, open_database

    db = open_database(IN_MEMORY)
    first = add_note(db, "first")
    second = add_note(db, "second")
    assert [note.content for note in list_notes(db)] == ["first", "second"]

    updated = update_note(db, first.id, "first, edited")
    assert updated and updated.content == "first, edited"
    assert update_note(db, 999, "nope") is None

    assert delete_note(db, second.id)
    assert not delete_note(db, second.id)
    assert [note.id for note in list_notes(db)] == [first.id]
    db.close()


def test_add_note_missing_after_insert():
    from paradesk.db.database import IN_MEMORY, open_database

    db = open_database(IN_MEMORY)
    db.execute(
        "CREATE TRIGGER drop_notes AFTER INSERT ON scratchpad_notes "
        "BEGIN DELETE FROM scratchpad_notes WHERE id = NEW.id; END"
    )
    try:
        add_note(db, "gone")
        assert False
    except UnexpectedError as e:
        assert "missing right after insert" in str(e)
    assert list_notes(db) == []
    db.close()
