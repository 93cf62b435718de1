"""
Bridge routes for the UI process. Each route is one named channel (for example
`POST /api/parse-markdown-tasks`) taking a small JSON body and returning JSON.
Tasks and file entries use camelCase keys, stored records use their column names.
"""

import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from paradesk.db import calendar_events, kv_store, scratchpad, task_lists
from paradesk.db.database import Database
from paradesk.errors import RecordNotFound
from paradesk.file_tools import file_browser
from paradesk.model.store_model import CalendarEvent, ScratchpadNote, TaskList
from paradesk.model.tasks_model import CamelModel
from paradesk.tasks.task_parser import parse_markdown_tasks
from paradesk.tasks.task_summary import collect_pinned_tasks, pinned_progress, task_progress


router = APIRouter(prefix="/api")


def get_db(request: Request) -> Database:
    return request.app.state.db


def _found(value, what: str, id: int):
    if value is None:
        raise RecordNotFound(f"{what} not found: {id}")
    return value


## Request bodies


class ContentBody(BaseModel):
    content: str


class KeyValueBody(BaseModel):
    key: str
    value: Optional[str] = None


class KeyBody(BaseModel):
    key: str


class ModeBody(BaseModel):
    mode: str


class ModePathBody(BaseModel):
    mode: str
    path: str


class ThemeBody(BaseModel):
    theme: str


class IdBody(BaseModel):
    id: int


class IdContentBody(BaseModel):
    id: int
    content: str


class NameBody(BaseModel):
    name: str


class IdNameBody(BaseModel):
    id: int
    name: str


class OrderBody(BaseModel):
    ordered_ids: List[int]


class DateRangeBody(BaseModel):
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None


class NewEventBody(BaseModel):
    date: datetime.date
    title: str
    content: str = ""
    is_urgent_pin: bool = False
    is_future_reminder_pin: bool = False


class EventUpdateBody(BaseModel):
    id: int
    date: Optional[datetime.date] = None
    title: Optional[str] = None
    content: Optional[str] = None
    is_urgent_pin: Optional[bool] = None
    is_future_reminder_pin: Optional[bool] = None


class DirectoryBody(CamelModel):
    directory_path: str


class PathBody(CamelModel):
    file_path: str


class SaveFileBody(CamelModel):
    file_path: str
    content: str


class NewEntryBody(CamelModel):
    parent_dir: str
    name: str
    root_path: str


class RenameBody(CamelModel):
    old_path: str
    new_name: str


## Tasks


@router.post("/parse-markdown-tasks")
def parse_markdown_tasks_route(body: ContentBody) -> List[Dict[str, Any]]:
    return [task.to_json_dict() for task in parse_markdown_tasks(body.content)]


@router.post("/task-progress")
def task_progress_route(body: ContentBody) -> Dict[str, Any]:
    return task_progress(parse_markdown_tasks(body.content)).to_json_dict()


@router.post("/pinned-tasks")
def pinned_tasks_route(db: Database = Depends(get_db)) -> Dict[str, Any]:
    pinned = collect_pinned_tasks(task_lists.list_task_lists(db))
    return {
        "tasks": [task.to_json_dict() for task in pinned],
        "progress": pinned_progress(pinned).to_json_dict(),
    }


## Key-value


@router.post("/get-value")
def get_value_route(body: KeyBody, db: Database = Depends(get_db)) -> Optional[str]:
    return kv_store.get_value(db, body.key)


@router.post("/set-value")
def set_value_route(body: KeyValueBody, db: Database = Depends(get_db)) -> None:
    kv_store.set_value(db, body.key, body.value)


@router.post("/get-mit")
def get_mit_route(db: Database = Depends(get_db)) -> Optional[str]:
    return kv_store.get_mit(db)


@router.post("/set-mit")
def set_mit_route(body: ContentBody, db: Database = Depends(get_db)) -> None:
    kv_store.set_mit(db, body.content)


@router.post("/get-theme")
def get_theme_route(db: Database = Depends(get_db)) -> Optional[str]:
    return kv_store.get_theme(db)


@router.post("/set-theme")
def set_theme_route(body: ThemeBody, db: Database = Depends(get_db)) -> None:
    kv_store.set_theme(db, body.theme)


@router.post("/get-last-path-for-mode")
def get_last_path_route(body: ModeBody, db: Database = Depends(get_db)) -> Optional[str]:
    return kv_store.get_last_path_for_mode(db, body.mode)


@router.post("/set-last-path-for-mode")
def set_last_path_route(body: ModePathBody, db: Database = Depends(get_db)) -> None:
    kv_store.set_last_path_for_mode(db, body.mode, body.path)


## Scratchpad


@router.post("/get-scratchpad-notes")
def get_notes_route(db: Database = Depends(get_db)) -> List[ScratchpadNote]:
    return scratchpad.list_notes(db)


@router.post("/add-scratchpad-note")
def add_note_route(body: ContentBody, db: Database = Depends(get_db)) -> ScratchpadNote:
    return scratchpad.add_note(db, body.content)


@router.post("/update-scratchpad-note")
def update_note_route(body: IdContentBody, db: Database = Depends(get_db)) -> ScratchpadNote:
    return _found(scratchpad.update_note(db, body.id, body.content), "Note", body.id)


@router.post("/delete-scratchpad-note")
def delete_note_route(body: IdBody, db: Database = Depends(get_db)) -> bool:
    return scratchpad.delete_note(db, body.id)


## Task lists


@router.post("/get-task-lists")
def get_task_lists_route(db: Database = Depends(get_db)) -> List[TaskList]:
    return task_lists.list_task_lists(db)


@router.post("/get-task-list")
def get_task_list_route(body: IdBody, db: Database = Depends(get_db)) -> TaskList:
    return _found(task_lists.get_task_list(db, body.id), "Task list", body.id)


@router.post("/create-task-list")
def create_task_list_route(body: NameBody, db: Database = Depends(get_db)) -> TaskList:
    return task_lists.create_task_list(db, body.name)


@router.post("/update-task-list-content")
def update_task_list_content_route(
    body: IdContentBody, db: Database = Depends(get_db)
) -> TaskList:
    return _found(
        task_lists.update_task_list_content(db, body.id, body.content), "Task list", body.id
    )


@router.post("/rename-task-list")
def rename_task_list_route(body: IdNameBody, db: Database = Depends(get_db)) -> TaskList:
    return _found(task_lists.rename_task_list(db, body.id, body.name), "Task list", body.id)


@router.post("/delete-task-list")
def delete_task_list_route(body: IdBody, db: Database = Depends(get_db)) -> bool:
    return task_lists.delete_task_list(db, body.id)


@router.post("/update-task-lists-order")
def reorder_task_lists_route(body: OrderBody, db: Database = Depends(get_db)) -> bool:
    return task_lists.reorder_task_lists(db, body.ordered_ids)


## Calendar


@router.post("/get-calendar-events")
def get_events_route(
    body: Optional[DateRangeBody] = None, db: Database = Depends(get_db)
) -> List[CalendarEvent]:
    body = body or DateRangeBody()
    return calendar_events.list_events(db, body.start_date, body.end_date)


@router.post("/get-pinned-calendar-events")
def get_pinned_events_route(db: Database = Depends(get_db)) -> List[CalendarEvent]:
    return calendar_events.pinned_events(db)


@router.post("/create-calendar-event")
def create_event_route(body: NewEventBody, db: Database = Depends(get_db)) -> CalendarEvent:
    return calendar_events.create_event(db, **body.model_dump())


@router.post("/update-calendar-event")
def update_event_route(body: EventUpdateBody, db: Database = Depends(get_db)) -> CalendarEvent:
    fields = body.model_dump(exclude={"id"}, exclude_none=True)
    return _found(calendar_events.update_event(db, body.id, **fields), "Event", body.id)


@router.post("/delete-calendar-event")
def delete_event_route(body: IdBody, db: Database = Depends(get_db)) -> bool:
    return calendar_events.delete_event(db, body.id)


## Files


@router.post("/get-files")
def get_files_route(body: DirectoryBody) -> Dict[str, Any]:
    return file_browser.get_files(body.directory_path).to_json_dict()


@router.post("/read-file")
def read_file_route(body: PathBody) -> Dict[str, Any]:
    return file_browser.read_file(body.file_path).to_json_dict()


@router.post("/save-file")
def save_file_route(body: SaveFileBody) -> bool:
    file_browser.save_file(body.file_path, body.content)
    return True


@router.post("/create-file")
def create_file_route(body: NewEntryBody) -> Dict[str, Any]:
    return file_browser.create_file(body.parent_dir, body.name, body.root_path).to_json_dict()


@router.post("/create-folder")
def create_folder_route(body: NewEntryBody) -> Dict[str, Any]:
    return file_browser.create_folder(body.parent_dir, body.name, body.root_path).to_json_dict()


@router.post("/delete-entry")
def delete_entry_route(body: PathBody) -> bool:
    return file_browser.delete_entry(body.file_path)


@router.post("/rename-entry")
def rename_entry_route(body: RenameBody) -> str:
    return file_browser.rename_entry(body.old_path, body.new_name)
