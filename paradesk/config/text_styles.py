"""
Settings that define the visual appearance of console and log output.
"""

import re

from rich.highlighter import _combine_regex, RegexHighlighter
from rich.style import Style

## Colors

COLOR_HINT = "bright_black"

COLOR_KEY = "cyan"

COLOR_VALUE = "bright_blue"

COLOR_PATH = "blue"

COLOR_ERROR = "red"

COLOR_TIMING = "magenta"

COLOR_SAVED = "bright_cyan"

COLOR_CALL = "yellow"

COLOR_PINNED = "bright_yellow"

## Symbols and emojis

EMOJI_WARN = "△"

EMOJI_ERROR = EMOJI_WARN + EMOJI_WARN

EMOJI_SAVED = "⩣"

EMOJI_TIMING = "⏱"

EMOJI_CALL_BEGIN = "≫"

EMOJI_CALL_END = "≪"

EMOJI_TRUE = "✓"

EMOJI_FALSE = "✗"

EMOJI_PINNED = "📌"


## Rich setup

URL_CHARS = r"-0-9a-zA-Z$_+!`(),.?/;:&=%#~"


class ParadeskHighlighter(RegexHighlighter):
    """
    Highlighter based on the repr highlighter with additions for task markers.
    """

    base_style = "paradesk."
    highlights = [
        _combine_regex(
            f"(?P<timing>{re.escape(EMOJI_TIMING)})",
            f"(?P<warn>{re.escape(EMOJI_WARN)})",
            f"(?P<saved>{re.escape(EMOJI_SAVED)})",
            f"(?P<pinned>{re.escape(EMOJI_PINNED)}|\\[pinned\\])",
            f"(?P<log_call>{re.escape(EMOJI_CALL_BEGIN)}|{re.escape(EMOJI_CALL_END)})",
        ),
        _combine_regex(
            r"(?P<due_date>\[截止:\d{4}-\d{2}-\d{2}\])",
            r"\b(?P<task_id>task-\d+)\b",
            r"\b(?P<duration>(?<!\w)\-?[0-9]+\.?[0-9]*(ms|s)\b(?!\-\w))\b",
        ),
        _combine_regex(
            r"(?P<ellipsis>(\.\.\.|…))",
            r"(?P<ipv4>[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3})",
            r"(?P<call>[\w.]*?)\(",
            r"\b(?P<bool_true>True)\b|\b(?P<bool_false>False)\b|\b(?P<none>None)\b",
            r"(?P<path>\B(/[-\w._+]+)*\/)(?P<filename>[-\w._+]*)?",
            r"(?<![\\\w])(?P<str>b?'''.*?(?<!\\)'''|b?'.*?(?<!\\)'|b?\"\"\".*?(?<!\\)\"\"\"|b?\".*?(?<!\\)\")",
            rf"(?P<url>(file|https|http|ws|wss)://[{URL_CHARS}]*)",
            r"(?P<code_span>`[^`\n]+`)",
        ),
    ]


RICH_STYLES = {
    "paradesk.ellipsis": Style(color=COLOR_HINT),
    "paradesk.error": Style(color=COLOR_ERROR, bold=True),
    "paradesk.str": Style(color=COLOR_VALUE, italic=False, bold=False),
    "paradesk.ipv4": Style(color=COLOR_KEY),
    "paradesk.duration": Style(color=COLOR_KEY, italic=False),
    "paradesk.code_span": Style(color=COLOR_VALUE, italic=False),
    "paradesk.bool_true": Style(color=COLOR_VALUE, italic=True),
    "paradesk.bool_false": Style(color=COLOR_VALUE, italic=True),
    "paradesk.none": Style(color=COLOR_VALUE, italic=True),
    "paradesk.url": Style(underline=True, color=COLOR_VALUE, italic=False, bold=False),
    "paradesk.call": Style(italic=True),
    "paradesk.path": Style(color=COLOR_PATH),
    "paradesk.filename": Style(color=COLOR_VALUE),
    "paradesk.task_id": Style(color=COLOR_HINT),
    "paradesk.due_date": Style(color=COLOR_KEY, bold=True),
    # Emoji colors:
    "paradesk.timing": Style(color=COLOR_TIMING, bold=True),
    "paradesk.warn": Style(color=COLOR_VALUE, bold=True),
    "paradesk.saved": Style(color=COLOR_SAVED, bold=True),
    "paradesk.pinned": Style(color=COLOR_PINNED, bold=True),
    "paradesk.log_call": Style(color=COLOR_CALL, bold=True),
}
