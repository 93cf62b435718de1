"""
Logging for paradesk: everything at the file log level goes to a log file, and
important messages go to the console through Rich.

Use `get_logger(__name__)` and prefer `log.message()` for things the user
should see on the console even when not debugging.
"""

import logging
import threading
from functools import cache
from logging import Formatter, WARNING
from pathlib import Path
from typing import List, Optional

import rich
from rich import reconfigure
from rich.logging import RichHandler
from rich.theme import Theme

from paradesk.config.settings import global_settings, LogLevel
from paradesk.config.text_styles import EMOJI_ERROR, EMOJI_WARN, ParadeskHighlighter, RICH_STYLES

LOG_FILE_NAME = "paradesk.log"

# Third-party loggers that are too chatty at the root level.
QUIET_LOGGERS = ["uvicorn", "uvicorn.access", "httpx"]

_log_lock = threading.RLock()

_handlers: List[logging.Handler] = []


def log_file_path() -> Path:
    return global_settings().log_dir / LOG_FILE_NAME


@cache
def get_highlighter():
    return ParadeskHighlighter()


@cache
def get_theme():
    return Theme(RICH_STYLES)


reconfigure(theme=get_theme(), highlighter=get_highlighter())


def _file_handler(path: Path, level: LogLevel) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level.value)
    handler.setFormatter(Formatter("%(asctime)s %(levelname).1s %(name)s - %(message)s"))
    return handler


def _console_handler(level: LogLevel) -> RichHandler:
    handler = RichHandler(
        console=rich.get_console(),
        level=level.value,
        show_time=False,
        show_path=False,
        show_level=False,
        highlighter=get_highlighter(),
        markup=True,
    )
    handler.setFormatter(Formatter("%(message)s"))
    return handler


def logging_setup(log_file: Optional[Path] = None):
    """
    Set up logging from the current settings, replacing the handlers from any previous
    call. Safe to call again after settings change.
    """
    settings = global_settings()
    with _log_lock:
        root = logging.getLogger()
        while _handlers:
            handler = _handlers.pop()
            root.removeHandler(handler)
            handler.close()

        _handlers.append(_console_handler(settings.console_log_level))
        _handlers.append(_file_handler(log_file or log_file_path(), settings.file_log_level))
        root.setLevel(min(settings.file_log_level.value, settings.console_log_level.value))
        for handler in _handlers:
            root.addHandler(handler)

        # Server access logs go to their own file (see local_server).
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(WARNING)


def prefix(line, emoji: str = "", warn_emoji: str = ""):
    emojis = f"{warn_emoji}{emoji}".strip()
    return " ".join(filter(None, [emojis, line]))


def prefix_args(args, emoji: str = "", warn_emoji: str = ""):
    if len(args) > 0:
        args = (prefix(args[0], emoji, warn_emoji),) + args[1:]
    return args


class CustomLogger:
    """
    Custom logger to be clearer about user messages.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def debug(self, *args, **kwargs):
        self.logger.debug(*prefix_args(args), **kwargs)

    def info(self, *args, **kwargs):
        self.logger.info(*prefix_args(args), **kwargs)

    def message(self, *args, **kwargs):
        self.logger.warning(*prefix_args(args), **kwargs)

    def warning(self, *args, **kwargs):
        self.logger.warning(*prefix_args(args, warn_emoji=EMOJI_WARN), **kwargs)

    def error(self, *args, **kwargs):
        self.logger.error(*prefix_args(args, warn_emoji=EMOJI_ERROR), **kwargs)

    def log(self, level: LogLevel, *args, **kwargs):
        getattr(self, level.name)(*args, **kwargs)

    # Fallback for other attributes/methods.
    def __getattr__(self, attr):
        return getattr(self.logger, attr)


def get_logger(name: str) -> CustomLogger:
    return CustomLogger(name)


## Tests


def test_logging_setup(tmp_path):
    log_file = tmp_path / "test.log"
    logging_setup(log_file)
    try:
        get_logger("paradesk.test").info("parsed %s tasks", 3)
        get_logger("paradesk.test").warning("missing %s", "notes")
        for handler in _handlers:
            handler.flush()
        text = log_file.read_text()
        assert "parsed 3 tasks" in text
        assert f"{EMOJI_WARN} missing notes" in text
    finally:
        while _handlers:
            handler = _handlers.pop()
            logging.getLogger().removeHandler(handler)
            handler.close()
