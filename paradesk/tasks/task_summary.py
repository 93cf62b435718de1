"""
Views across parsed tasks: pinned tasks gathered from every task list, and
completion counts.
"""

from typing import Iterable, List, Sequence

from paradesk.config.logger import get_logger
from paradesk.model.store_model import TaskList
from paradesk.model.tasks_model import PinnedTask, Task, TaskProgress
from paradesk.tasks.task_parser import parse_markdown_tasks
from paradesk.util.log_calls import log_calls

log = get_logger(__name__)


def find_pinned_tasks(
    tasks: Iterable[Task], source_list: str, source_list_id: int
) -> List[PinnedTask]:
    """
    All pinned tasks at any depth, parents before children. A pinned task keeps its
    children, and pinned descendants are also listed on their own.
    """
    return [
        PinnedTask(
            **task.model_dump(), source_list=source_list, source_list_id=source_list_id
        )
        for top in tasks
        for task in top.walk()
        if task.is_pinned
    ]


@log_calls(level="info", show_return=False)
def collect_pinned_tasks(task_lists: Sequence[TaskList]) -> List[PinnedTask]:
    """
    Re-parse each task list and gather its pinned tasks, in list order.
    """
    pinned: List[PinnedTask] = []
    for task_list in task_lists:
        if not task_list.content:
            continue
        tasks = parse_markdown_tasks(task_list.content)
        pinned.extend(find_pinned_tasks(tasks, task_list.name, task_list.id))
    return pinned


def task_progress(tasks: Iterable[Task]) -> TaskProgress:
    """
    Count all tasks and completed tasks, at every nesting level.
    """
    progress = TaskProgress()
    for top in tasks:
        for task in top.walk():
            progress.total += 1
            if task.is_completed:
                progress.completed += 1
    return progress


def pinned_progress(pinned: Sequence[PinnedTask]) -> TaskProgress:
    """
    Count pinned tasks and completed pinned tasks. Only the pinned tasks themselves
    count, not their children.
    """
    return TaskProgress(
        total=len(pinned),
        completed=sum(1 for task in pinned if task.is_completed),
    )


## Tests


def _task_list(id: int, name: str, content: str, display_order: int = 0) -> TaskList:
    from datetime import datetime

    now = datetime(2025, 8, 15, 12, 0, 0)
    return TaskList(
        id=id,
        name=name,
        content=content,
        display_order=display_order,
        created_at=now,
        updated_at=now,
    )


def test_find_pinned_tasks_nested():
    tasks = parse_markdown_tasks(
        "- [ ] Plan trip [pinned]\n  - [x] Book hotel [pinned]\n  - [ ] Pack\n- [ ] Other\n"
    )
    pinned = find_pinned_tasks(tasks, "Travel", 7)
    assert [t.content for t in pinned] == ["Plan trip", "Book hotel"]
    assert all(t.source_list == "Travel" and t.source_list_id == 7 for t in pinned)
    assert len(pinned[0].children) == 2
    assert pinned[1].id == "task-1"


def test_collect_pinned_tasks_across_lists():
    lists = [
        _task_list(1, "Work", "- [x] Ship release [pinned]\n- [ ] Review\n"),
        _task_list(2, "Empty", ""),
        _task_list(3, "Home", "- [ ] Fix sink [pinned] [截止:2025-09-01]\n"),
    ]
    pinned = collect_pinned_tasks(lists)
    assert [(t.source_list, t.content) for t in pinned] == [
        ("Work", "Ship release"),
        ("Home", "Fix sink"),
    ]
    assert pinned[1].due_date == "2025-09-01"
    assert pinned[1].to_json_dict()["sourceListId"] == 3

    progress = pinned_progress(pinned)
    assert (progress.total, progress.completed) == (2, 1)


def test_task_progress_counts_nested():
    tasks = parse_markdown_tasks("- [x] a\n  - [x] b\n  - [ ] c\n- d\n")
    progress = task_progress(tasks)
    assert (progress.total, progress.completed) == (4, 2)
    assert progress.fraction == 0.5
    assert task_progress([]).total == 0
