from typing import Any, Dict, List, Optional

from pydantic import BaseModel, computed_field, ConfigDict
from pydantic.alias_generators import to_camel


TASK_ID_PREFIX = "task-"

PIN_MARKER = "[pinned]"
"""Literal marker that pins a task to the cross-list pinned view."""

DUE_DATE_TAG_PREFIX = "[截止:"
"""Due-date tags look like `[截止:2025-08-15]`."""


class CamelModel(BaseModel):
    """
    Models that travel over the bridge use camelCase keys (`isCompleted`) in JSON
    but snake_case attributes in Python.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Task(CamelModel):
    """
    One checklist item parsed from Markdown, with any nested checklist as children.
    """

    id: str
    """Sequential id like `task-0`. Only unique within a single parse."""

    content: str
    """Display text, with pin marker and due-date tag removed."""

    is_completed: bool = False

    is_pinned: bool = False

    due_date: Optional[str] = None
    """ISO date `YYYY-MM-DD`, if the item had a due-date tag."""

    children: List["Task"] = []

    def walk(self):
        """
        Yield this task and all descendants, parents before children.
        """
        yield self
        for child in self.children:
            yield from child.walk()


class PinnedTask(Task):
    """
    A pinned task along with the task list it came from.
    """

    source_list: str

    source_list_id: int


class TaskProgress(CamelModel):
    total: int = 0

    completed: int = 0

    @computed_field  # type: ignore[misc]
    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 0.0

    def __str__(self) -> str:
        return f"{self.completed}/{self.total}"


## Tests


def test_task_json_uses_camel_case():
    task = Task(id="task-0", content="Pay rent", is_completed=True, is_pinned=True)
    assert task.to_json_dict() == {
        "id": "task-0",
        "content": "Pay rent",
        "isCompleted": True,
        "isPinned": True,
        "dueDate": None,
        "children": [],
    }
    assert Task.model_validate(task.to_json_dict()) == task


def test_task_walk_and_progress():
    child = Task(id="task-1", content="Child", is_completed=True)
    parent = Task(id="task-0", content="Parent", children=[child])
    assert [t.id for t in parent.walk()] == ["task-0", "task-1"]

    assert TaskProgress(total=4, completed=1).fraction == 0.25
    assert TaskProgress().fraction == 0.0
    assert str(TaskProgress(total=3, completed=2)) == "2/3"
