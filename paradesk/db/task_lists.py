"""
Named task lists, each holding raw Markdown and a display position.
"""

from typing import List, Optional, Sequence

from paradesk.config.logger import get_logger
from paradesk.db.database import Database
from paradesk.errors import InvalidInput, UnexpectedError
from paradesk.model.store_model import TaskList

log = get_logger(__name__)


def _from_row(row) -> TaskList:
    return TaskList(**dict(row))


def list_task_lists(db: Database) -> List[TaskList]:
    rows = db.fetchall("SELECT * FROM task_lists ORDER BY display_order ASC, id ASC")
    return [_from_row(row) for row in rows]


def get_task_list(db: Database, task_list_id: int) -> Optional[TaskList]:
    row = db.fetchone("SELECT * FROM task_lists WHERE id = ?", (task_list_id,))
    return _from_row(row) if row else None


def create_task_list(db: Database, name: str) -> TaskList:
    """
    Create an empty task list at the end of the display order.
    """
    name = name.strip()
    if not name:
        raise InvalidInput("Task list name must not be empty")

    with db.transaction() as conn:
        row = conn.execute("SELECT MAX(display_order) AS max_order FROM task_lists").fetchone()
        max_order = row["max_order"] or 0
        cursor = conn.execute(
            "INSERT INTO task_lists (name, display_order) VALUES (?, ?)",
            (name, max_order + 1),
        )
        new_id = cursor.lastrowid

    task_list = get_task_list(db, new_id)  # type: ignore[arg-type]
    if not task_list:
        raise UnexpectedError(f"Task list missing right after insert: {new_id}")
    log.info("Created task list %s: %r", task_list.id, task_list.name)
    return task_list


def update_task_list_content(db: Database, task_list_id: int, content: str) -> Optional[TaskList]:
    cursor = db.execute(
        "UPDATE task_lists SET content = ?, updated_at = datetime('now') WHERE id = ?",
        (content, task_list_id),
    )
    if cursor.rowcount == 0:
        return None
    return get_task_list(db, task_list_id)


def rename_task_list(db: Database, task_list_id: int, name: str) -> Optional[TaskList]:
    name = name.strip()
    if not name:
        raise InvalidInput("Task list name must not be empty")
    cursor = db.execute(
        "UPDATE task_lists SET name = ?, updated_at = datetime('now') WHERE id = ?",
        (name, task_list_id),
    )
    if cursor.rowcount == 0:
        return None
    return get_task_list(db, task_list_id)


def delete_task_list(db: Database, task_list_id: int) -> bool:
    cursor = db.execute("DELETE FROM task_lists WHERE id = ?", (task_list_id,))
    return cursor.rowcount > 0


def reorder_task_lists(db: Database, ordered_ids: Sequence[int]) -> bool:
    """
    Set each list's display order to its index in `ordered_ids`. All or nothing;
    returns False (and logs) if the update fails.
    """
    try:
        with db.transaction() as conn:
            for index, task_list_id in enumerate(ordered_ids):
                conn.execute(
                    "UPDATE task_lists SET display_order = ? WHERE id = ?",
                    (index, task_list_id),
                )
    except Exception as e:
        log.error("Failed to update task lists order: %s", e)
        return False
    return True


## Tests


def test_task_list_order():
    from paradesk.db.database import IN_MEMORY, open_database

    db = open_database(IN_MEMORY)
    work = create_task_list(db, " Work ")
    home = create_task_list(db, "Home")
    assert work.name == "Work"
    assert (work.display_order, home.display_order) == (1, 2)

    assert reorder_task_lists(db, [home.id, work.id])
    assert [tl.name for tl in list_task_lists(db)] == ["Home", "Work"]

    # New lists go after the current maximum.
    errands = create_task_list(db, "Errands")
    assert errands.display_order == 2
    assert [tl.name for tl in list_task_lists(db)] == ["Home", "Work", "Errands"]
    db.close()


def test_task_list_edits():
    from paradesk.db.database import IN_MEMORY, open_database

    db = open_database(IN_MEMORY)
    task_list = create_task_list(db, "Work")
    assert task_list.content == ""

    updated = update_task_list_content(db, task_list.id, "- [ ] a [pinned]\n")
    assert updated and updated.content == "- [ ] a [pinned]\n"
    renamed = rename_task_list(db, task_list.id, "Job")
    assert renamed and renamed.name == "Job"
    assert update_task_list_content(db, 999, "x") is None
    assert rename_task_list(db, 999, "x") is None

    try:
        create_task_list(db, "  ")
        assert False
    except InvalidInput:
        pass

    assert delete_task_list(db, task_list.id)
    assert get_task_list(db, task_list.id) is None
    assert list_task_lists(db) == []
    db.close()
