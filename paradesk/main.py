"""
Main entry point for paradesk: runs the local bridge server, or inspects task
lists from the command line.
"""

import sys
from pathlib import Path
from typing import List, Optional

from rich import print as rprint
from rich.tree import Tree

# Keeping initial imports/deps minimal.
from paradesk.config.logger import get_logger
from paradesk.config.settings import APP_NAME
from paradesk.config.setup import setup
from paradesk.config.text_styles import (
    COLOR_HINT,
    COLOR_PINNED,
    EMOJI_FALSE,
    EMOJI_PINNED,
    EMOJI_TRUE,
)
from paradesk.errors import FileNotFound, InvalidCommand, is_fatal
from paradesk.model.tasks_model import Task
from paradesk.version import get_version


# Ensure logging is set up before anything else.
setup()

log = get_logger(__name__)

__version__ = get_version()

APP_VERSION = f"{APP_NAME} {__version__}"

USAGE = f"""\
Usage: {APP_NAME} COMMAND [ARGS]

Commands:
  serve        Run the local bridge server for the UI.
  parse FILE   Parse a Markdown file and show its tasks as a tree.
  pinned       Show pinned tasks from all saved task lists.

Options:
  --version    Show the version and exit.
  --help       Show this message and exit.
"""


def _task_label(task: Task) -> str:
    mark = EMOJI_TRUE if task.is_completed else EMOJI_FALSE
    parts = [f"{mark} {task.content}"]
    if task.is_pinned:
        parts.append(f"[{COLOR_PINNED}]{EMOJI_PINNED}[/{COLOR_PINNED}]")
    if task.due_date:
        parts.append(f"[{COLOR_HINT}]due {task.due_date}[/{COLOR_HINT}]")
    parts.append(f"[{COLOR_HINT}]({task.id})[/{COLOR_HINT}]")
    return " ".join(parts)


def task_tree(label: str, tasks: List[Task]) -> Tree:
    tree = Tree(label)

    def add(parent: Tree, task: Task):
        branch = parent.add(_task_label(task))
        for child in task.children:
            add(branch, child)

    for task in tasks:
        add(tree, task)
    return tree


def run_serve():
    from paradesk.server import local_server

    server_thread = local_server.start_server()
    try:
        server_thread.join()
    except KeyboardInterrupt:
        local_server.stop_server()


def run_parse(file_path: str):
    from paradesk.tasks.task_parser import parse_markdown_tasks
    from paradesk.tasks.task_summary import task_progress

    path = Path(file_path)
    if not path.is_file():
        raise FileNotFound(f"File not found: {file_path}")
    tasks = parse_markdown_tasks(path.read_text(encoding="utf-8"))
    rprint(task_tree(f"{path.name} [{COLOR_HINT}]{task_progress(tasks)}[/{COLOR_HINT}]", tasks))


def run_pinned():
    from paradesk.db import task_lists
    from paradesk.db.database import open_database
    from paradesk.tasks.task_summary import collect_pinned_tasks

    db = open_database()
    pinned = collect_pinned_tasks(task_lists.list_task_lists(db))
    if not pinned:
        rprint(f"[{COLOR_HINT}]No pinned tasks.[/{COLOR_HINT}]")
        return

    by_list: dict[str, List[Task]] = {}
    for task in pinned:
        by_list.setdefault(task.source_list, []).append(task)
    for list_name, tasks in by_list.items():
        rprint(task_tree(list_name, tasks))


def parse_args(args: List[str]) -> Optional[List[str]]:
    # Do our own arg parsing, since there are only a few commands.
    if args == ["--version"]:
        print(APP_VERSION)
        return None
    elif args == ["--help"] or not args:
        print(USAGE)
        return None
    elif args[0].startswith("-"):
        raise InvalidCommand(f"Unrecognized option: {args[0]}")
    return args


def run_command(args: List[str]):
    match args:
        case ["serve"]:
            run_serve()
        case ["parse", file_path]:
            run_parse(file_path)
        case ["pinned"]:
            run_pinned()
        case _:
            raise InvalidCommand(f"Unrecognized command: {' '.join(args)}")


def main():
    try:
        args = parse_args(sys.argv[1:])
        if args is not None:
            run_command(args)
    except Exception as e:
        if is_fatal(e):
            log.error("Error: %s", e, exc_info=True)
            sys.exit(1)
        else:
            log.error("Error: %s", e)
            sys.exit(2 if isinstance(e, InvalidCommand) else 1)


if __name__ == "__main__":
    main()
