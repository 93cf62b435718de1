"""
Parse Markdown checklists into nested `Task`s.

Each list item becomes a task. Completion comes from the GFM checkbox (`- [x]`),
and two plain-text conventions inside the item's text add metadata:

- `[pinned]` anywhere in the text pins the task.
- `[截止:YYYY-MM-DD]` sets a due date.

Both markers are removed from the displayed content. Task ids (`task-0`,
`task-1`, ...) are assigned parent-first in document order and restart at 0 on
every call, so they identify tasks for display only and shift when the text is
edited.
"""

import itertools
from typing import Iterator, List, Optional, Tuple

import regex

from paradesk.config.logger import get_logger
from paradesk.model.tasks_model import DUE_DATE_TAG_PREFIX, PIN_MARKER, Task, TASK_ID_PREFIX
from paradesk.text_formatting.markdown_blocks import (
    first_child,
    flatten_text,
    ListBlock,
    ListItemBlock,
    parse_blocks,
    ParagraphBlock,
)

log = get_logger(__name__)


DUE_DATE_PATTERN = regex.compile(regex.escape(DUE_DATE_TAG_PREFIX) + r"(\d{4}-\d{2}-\d{2})\]")


def extract_due_date(text: str) -> Tuple[str, Optional[str]]:
    """
    Remove the first due-date tag from the text, returning `(text, due_date)`.
    Any later tags are left as they are.
    """
    match = DUE_DATE_PATTERN.search(text)
    if not match:
        return text, None
    return text[: match.start()] + text[match.end() :], match.group(1)


def extract_pin(text: str) -> Tuple[str, bool]:
    """
    Remove all pin markers from the text, returning `(text, is_pinned)`.
    """
    if PIN_MARKER not in text:
        return text, False
    return text.replace(PIN_MARKER, ""), True


def _task_from_item(item: ListItemBlock, ids: Iterator[int]) -> Task:
    paragraph = first_child(item, ParagraphBlock)
    text = flatten_text(paragraph) if paragraph else ""

    text, due_date = extract_due_date(text)
    text, is_pinned = extract_pin(text)

    # Parent takes its id before any children do.
    task_id = f"{TASK_ID_PREFIX}{next(ids)}"

    sub_list = first_child(item, ListBlock)
    children = _tasks_from_list(sub_list, ids) if isinstance(sub_list, ListBlock) else []

    return Task(
        id=task_id,
        content=text.strip(),
        is_completed=item.checked is True,
        is_pinned=is_pinned,
        due_date=due_date,
        children=children,
    )


def _tasks_from_list(list_block: ListBlock, ids: Iterator[int]) -> List[Task]:
    return [_task_from_item(item, ids) for item in list_block.children]


def parse_markdown_tasks(markdown: str) -> List[Task]:
    """
    Parse a Markdown document into tasks, one per list item of each top-level list,
    nested as the lists are nested. Text outside lists is ignored, so empty or
    list-free input gives an empty list.
    """
    root = parse_blocks(markdown)

    # Fresh counter per call, so concurrent calls never share ids.
    ids = itertools.count()
    tasks: List[Task] = []
    for node in root.children:
        match node:
            case ListBlock():
                tasks.extend(_tasks_from_list(node, ids))
            case _:
                pass

    log.debug("Parsed %d top-level tasks from %d chars of Markdown", len(tasks), len(markdown))
    return tasks


## Tests


def _summary(task: Task) -> dict:
    return {
        "content": task.content,
        "is_completed": task.is_completed,
        "is_pinned": task.is_pinned,
        "due_date": task.due_date,
    }


def test_checklist_with_pin():
    tasks = parse_markdown_tasks("- [ ] Buy milk\n- [x] Pay rent [pinned]\n")
    assert [_summary(t) for t in tasks] == [
        {"content": "Buy milk", "is_completed": False, "is_pinned": False, "due_date": None},
        {"content": "Pay rent", "is_completed": True, "is_pinned": True, "due_date": None},
    ]
    assert [t.id for t in tasks] == ["task-0", "task-1"]


def test_due_date():
    tasks = parse_markdown_tasks("- [ ] Finish report [截止:2025-08-15]\n")
    assert len(tasks) == 1
    assert tasks[0].content == "Finish report"
    assert tasks[0].due_date == "2025-08-15"
    assert not tasks[0].is_pinned


def test_nested_children():
    tasks = parse_markdown_tasks("- [ ] Parent\n  - [x] Child\n")
    assert len(tasks) == 1
    parent = tasks[0]
    assert parent.content == "Parent"
    assert not parent.is_completed
    assert len(parent.children) == 1
    assert parent.children[0].content == "Child"
    assert parent.children[0].is_completed
    assert parent.children[0].children == []


def test_empty_and_list_free_input():
    assert parse_markdown_tasks("") == []
    assert parse_markdown_tasks("Just a paragraph, no list.\n") == []
    assert parse_markdown_tasks("# Heading\n\nSome text.\n\n> quoted\n") == []


def test_checkbox_states():
    tasks = parse_markdown_tasks("- [x] Done\n- [X] Also done\n- [ ] Todo\n- Todo\n")
    assert [t.is_completed for t in tasks] == [True, True, False, False]
    assert [t.content for t in tasks] == ["Done", "Also done", "Todo", "Todo"]


def test_ids_are_preorder_and_restart_each_call():
    text = "- [ ] a\n  - [ ] b\n    - [ ] c\n  - [ ] d\n- [ ] e\n"
    tasks = parse_markdown_tasks(text)
    all_tasks = [t for top in tasks for t in top.walk()]
    assert [t.content for t in all_tasks] == ["a", "b", "c", "d", "e"]
    assert [t.id for t in all_tasks] == [f"task-{i}" for i in range(5)]

    again = parse_markdown_tasks(text)
    assert [t.id for top in again for t in top.walk()] == [t.id for t in all_tasks]


def test_markers_removed_anywhere_in_text():
    tasks = parse_markdown_tasks("- [ ] [pinned] Call [截止:2024-01-02] Bob [pinned]\n")
    task = tasks[0]
    assert task.is_pinned
    assert task.due_date == "2024-01-02"
    assert "[pinned]" not in task.content
    assert "[截止:" not in task.content
    assert task.content == "Call  Bob"


def test_only_first_due_date_is_used():
    tasks = parse_markdown_tasks("- [ ] Pay [截止:2025-01-01] [截止:2025-02-01]\n")
    assert tasks[0].due_date == "2025-01-01"
    assert tasks[0].content == "Pay  [截止:2025-02-01]"


def test_malformed_markers_stay_in_text():
    tasks = parse_markdown_tasks("- [ ] Ship [截止:2025-8-1] [Pinned]\n")
    assert tasks[0].due_date is None
    assert not tasks[0].is_pinned
    assert tasks[0].content == "Ship [截止:2025-8-1] [Pinned]"


def test_multiple_top_level_lists_and_formatting():
    text = "Intro\n\n- [ ] **Bold** task\n\nMiddle\n\n1. [x] Numbered *one*\n"
    tasks = parse_markdown_tasks(text)
    assert [t.content for t in tasks] == ["Bold task", "Numbered one"]
    assert [t.id for t in tasks] == ["task-0", "task-1"]
    assert tasks[1].is_completed


def test_item_without_paragraph():
    tasks = parse_markdown_tasks("-\n- [ ] next\n")
    assert tasks[0].content == ""
    assert not tasks[0].is_completed
    assert tasks[1].content == "next"


def test_extractors():
    assert extract_due_date("a [截止:2025-08-15] b") == ("a  b", "2025-08-15")
    assert extract_due_date("nothing") == ("nothing", None)
    assert extract_pin("x [pinned] y [pinned]") == ("x  y ", True)
    assert extract_pin("x") == ("x", False)


def test_character_references_are_decoded():
    tasks = parse_markdown_tasks("- [ ] Tom &amp; Jerry &copy; &#35;1 [pinned]\n")
    assert tasks[0].content == "Tom & Jerry © #1"
    assert tasks[0].is_pinned


def test_line_breaks():
    soft = parse_markdown_tasks("- [ ] first\n  second\n")
    assert soft[0].content == "first\nsecond"
    hard = parse_markdown_tasks("- [ ] first  \n  second\n- [ ] one\\\n  two\n")
    assert [t.content for t in hard] == ["firstsecond", "onetwo"]


def test_concurrent_calls_number_independently():
    from concurrent.futures import ThreadPoolExecutor

    inputs = [
        "".join(f"- [ ] item {i}\n  - [x] sub {i}\n" for i in range(n)) for n in range(1, 30)
    ]
    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(parse_markdown_tasks, inputs * 4))

    for text, tasks in zip(inputs * 4, results):
        all_tasks = [t for top in tasks for t in top.walk()]
        assert [t.id for t in all_tasks] == [f"task-{i}" for i in range(len(all_tasks))]
        assert len(all_tasks) == 2 * text.count("- [ ] item")
        assert [t.content for t in all_tasks[:2]] == ["item 0", "sub 0"]
