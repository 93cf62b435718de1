"""
A decorator for logging calls to slower operations (re-parsing every task list,
scanning folders) along with how long they took.
"""

import functools
import time
from typing import Any, Callable, Literal, Optional, Sequence

from pydantic import BaseModel
from strif import abbrev_str

from paradesk.config.logger import get_logger
from paradesk.config.text_styles import EMOJI_CALL_BEGIN, EMOJI_CALL_END, EMOJI_TIMING
from paradesk.util.format_utils import single_line

log = get_logger(__name__)

LogLevelStr = Literal["debug", "info", "warning", "message", "error"]

DEFAULT_TRUNCATE = 60


def summarize_arg(value: Any, truncate_length: int = DEFAULT_TRUNCATE) -> str:
    """
    A short form of an argument for a log line. Long text is shortened, sequences
    are shown by length, and records by their class and id.
    """
    if isinstance(value, str):
        text = single_line(value)
        short = abbrev_str(text, truncate_length, indicator="…")
        return repr(short) if short == text else f"{short!r} ({len(value)} chars)"
    elif isinstance(value, BaseModel) and hasattr(value, "id"):
        return f"{type(value).__name__}(id={value.id!r})"
    elif isinstance(value, Sequence):
        return f"[{len(value)} items]"
    else:
        return abbrev_str(single_line(repr(value)), truncate_length, indicator="…")


def format_duration(seconds: float) -> str:
    if seconds < 100.0 / 1000.0:
        return f"{seconds * 1000:.2f}ms"
    elif seconds < 1.0:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 100.0:
        return f"{seconds:.2f}s"
    else:
        return f"{seconds:.0f}s"


def func_and_module_name(func: Callable) -> str:
    short_module = func.__module__.split(".")[-1] if func.__module__ else None
    return f"{short_module}.{func.__qualname__}" if short_module else func.__qualname__


def log_calls(
    level: LogLevelStr = "info",
    show_args: bool = True,
    show_return: bool = False,
    if_slower_than: Optional[float] = None,
):
    """
    Log calls to the decorated function with the time taken. With `if_slower_than`
    (in seconds), only calls slower than that are logged. Calls that raise are
    logged with the error and the exception propagates.
    """
    log_func = getattr(log, level)

    def decorator(func):
        func_name = func_and_module_name(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if if_slower_than is None:
                if show_args:
                    arg_strs = [summarize_arg(arg) for arg in args]
                    arg_strs += [f"{k}={summarize_arg(v)}" for k, v in kwargs.items()]
                    log_func("%s Call: %s(%s)", EMOJI_CALL_BEGIN, func_name, ", ".join(arg_strs))
                else:
                    log_func("%s Call: %s", EMOJI_CALL_BEGIN, func_name)

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log.warning("Call to %s failed: %s", func_name, e)
                raise
            elapsed = time.perf_counter() - start_time

            if if_slower_than is None:
                done = f"{EMOJI_CALL_END} Call done: {func_name}() in {format_duration(elapsed)}"
                if show_return:
                    log_func("%s: %s", done, summarize_arg(result))
                else:
                    log_func("%s", done)
            elif elapsed > if_slower_than:
                log_func(
                    "%s Call to %s took %s.", EMOJI_TIMING, func_name, format_duration(elapsed)
                )

            return result

        return wrapper

    return decorator


## Tests


def test_summarize_arg():
    assert summarize_arg("Buy milk") == "'Buy milk'"
    long_value = "- [ ] task\n" * 20
    summary = summarize_arg(long_value, truncate_length=20)
    assert summary.endswith("(220 chars)")
    assert "…" in summary and "\n" not in summary
    assert summarize_arg([1, 2, 3]) == "[3 items]"
    assert summarize_arg(42) == "42"


def test_format_duration():
    assert format_duration(0.0123) == "12.30ms"
    assert format_duration(0.5) == "500ms"
    assert format_duration(12.5) == "12.50s"
    assert format_duration(250) == "250s"


def test_log_calls_passes_through():
    @log_calls(level="debug", show_return=True)
    def add(a, b):
        return a + b

    assert add(2, b=3) == 5
    assert add.__name__ == "add"

    @log_calls(if_slower_than=10.0)
    def fail():
        raise ValueError("no")

    try:
        fail()
        assert False
    except ValueError as e:
        assert str(e) == "no"
