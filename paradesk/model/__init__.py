"""
The core data classes: parsed tasks and the records kept in local storage.

We include essential logic here but try to keep logic and dependencies minimal.
"""

from paradesk.model.store_model import (
    CalendarEvent,
    FileEntry,
    FolderListing,
    NewEntryResult,
    ReadFileResult,
    ScratchpadNote,
    TaskList,
)
from paradesk.model.tasks_model import CamelModel, PinnedTask, Task, TaskProgress

__all__ = [
    "CalendarEvent",
    "CamelModel",
    "FileEntry",
    "FolderListing",
    "NewEntryResult",
    "PinnedTask",
    "ReadFileResult",
    "ScratchpadNote",
    "Task",
    "TaskList",
    "TaskProgress",
]
