"""
Calendar events, including the two dashboard pins (urgent and future reminder).
"""

import datetime
from typing import Any, Dict, List, Optional

from paradesk.db.database import Database
from paradesk.errors import InvalidInput, UnexpectedError
from paradesk.model.store_model import CalendarEvent

EDITABLE_FIELDS = ("date", "title", "content", "is_urgent_pin", "is_future_reminder_pin")


def _from_row(row) -> CalendarEvent:
    return CalendarEvent(**dict(row))


def _check_date(value: datetime.date | str) -> str:
    if isinstance(value, datetime.date):
        return value.isoformat()
    try:
        return datetime.date.fromisoformat(value).isoformat()
    except ValueError:
        raise InvalidInput(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def list_events(
    db: Database,
    start_date: Optional[datetime.date | str] = None,
    end_date: Optional[datetime.date | str] = None,
) -> List[CalendarEvent]:
    """
    Events ordered by date, optionally limited to an inclusive date range.
    """
    clauses: List[str] = []
    params: List[Any] = []
    if start_date is not None:
        clauses.append("date >= ?")
        params.append(_check_date(start_date))
    if end_date is not None:
        clauses.append("date <= ?")
        params.append(_check_date(end_date))
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = db.fetchall(
        f"SELECT * FROM calendar_events {where} ORDER BY date ASC, id ASC", tuple(params)
    )
    return [_from_row(row) for row in rows]


def get_event(db: Database, event_id: int) -> Optional[CalendarEvent]:
    row = db.fetchone("SELECT * FROM calendar_events WHERE id = ?", (event_id,))
    return _from_row(row) if row else None


def create_event(
    db: Database,
    date: datetime.date | str,
    title: str,
    content: str = "",
    is_urgent_pin: bool = False,
    is_future_reminder_pin: bool = False,
) -> CalendarEvent:
    title = title.strip()
    if not title:
        raise InvalidInput("Event title must not be empty")
    cursor = db.execute(
        "INSERT INTO calendar_events "
        "(date, title, content, is_urgent_pin, is_future_reminder_pin) VALUES (?, ?, ?, ?, ?)",
        (_check_date(date), title, content, is_urgent_pin, is_future_reminder_pin),
    )
    event = get_event(db, cursor.lastrowid)  # type: ignore[arg-type]
    if not event:
        raise UnexpectedError(f"Event missing right after insert: {cursor.lastrowid}")
    return event


def update_event(db: Database, event_id: int, **fields: Any) -> Optional[CalendarEvent]:
    """
    Update some of an event's fields. Unknown field names are rejected.
    """
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise InvalidInput(f"Unknown event fields: {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = dict(fields)
    if "date" in values:
        values["date"] = _check_date(values["date"])
    if "title" in values and not str(values["title"]).strip():
        raise InvalidInput("Event title must not be empty")
    if not values:
        return get_event(db, event_id)

    cursor = db.safe_update("calendar_events", values, "id = ?", (event_id,))
    if cursor.rowcount == 0:
        return None
    db.execute("UPDATE calendar_events SET updated_at = datetime('now') WHERE id = ?", (event_id,))
    return get_event(db, event_id)


def delete_event(db: Database, event_id: int) -> bool:
    cursor = db.execute("DELETE FROM calendar_events WHERE id = ?", (event_id,))
    return cursor.rowcount > 0


def pinned_events(db: Database) -> List[CalendarEvent]:
    """
    Events pinned to the dashboard, either as urgent or as a future reminder.
    """
    rows = db.fetchall(
        "SELECT * FROM calendar_events WHERE is_urgent_pin OR is_future_reminder_pin "
        "ORDER BY date ASC, id ASC"
    )
    return [_from_row(row) for row in rows]


## Tests


def test_calendar_events():
    from paradesk.db.database import IN_MEMORY, open_database

    db = open_database(IN_MEMORY)
    later = create_event(db, "2025-03-01", "Dentist", is_future_reminder_pin=True)
    sooner = create_event(db, datetime.date(2025, 2, 1), "Taxes", is_urgent_pin=True)
    plain = create_event(db, "2025-02-15", "Lunch")

    assert [e.title for e in list_events(db)] == ["Taxes", "Lunch", "Dentist"]
    assert [e.title for e in list_events(db, "2025-02-10", "2025-03-01")] == [
        "Lunch",
        "Dentist",
    ]
    assert [e.id for e in pinned_events(db)] == [sooner.id, later.id]

    updated = update_event(db, plain.id, title="Lunch with Ana", is_urgent_pin=True)
    assert updated and updated.title == "Lunch with Ana" and updated.is_urgent_pin
    assert update_event(db, 999, title="x") is None

    for bad in ({"date": "March 1"}, {"title": " "}, {"color": "red"}):
        try:
            update_event(db, plain.id, **bad)
            assert False
        except InvalidInput:
            pass

    assert delete_event(db, plain.id)
    assert get_event(db, plain.id) is None
    db.close()
