import datetime
from typing import List, Optional

from pydantic import BaseModel

from paradesk.model.tasks_model import CamelModel


class ScratchpadNote(BaseModel):
    id: int
    content: str
    created_at: datetime.datetime


class TaskList(BaseModel):
    """
    A named Markdown checklist document. Only `content` is parsed into tasks.
    """

    id: int
    name: str
    content: str = ""
    display_order: int = 0
    created_at: datetime.datetime
    updated_at: datetime.datetime


class CalendarEvent(BaseModel):
    id: int
    date: datetime.date
    title: str
    content: str = ""
    is_urgent_pin: bool = False
    """Pinned to the dashboard as a most urgent item."""
    is_future_reminder_pin: bool = False
    """Pinned to the dashboard as a reminder of something coming up."""
    created_at: datetime.datetime
    updated_at: datetime.datetime


class FileEntry(CamelModel):
    name: str
    path: str
    is_directory: bool
    children: Optional[List["FileEntry"]] = None


class FolderListing(CamelModel):
    folder_name: str
    files: List[FileEntry]
    root_path: str


class NewEntryResult(CamelModel):
    """
    Result of creating a file or folder: its path and the refreshed root listing.
    """

    new_path: str
    files: List[FileEntry]


class ReadFileResult(CamelModel):
    content: str
    """File text, or base64 for binary files."""
    is_binary: bool
    mime_type: Optional[str] = None
