import shlex
from pathlib import Path

import regex


def single_line(text: str) -> str:
    """
    Convert newlines and other whitespace to spaces.
    """
    return regex.sub(r"\s+", " ", text).strip()


def fmt_path(path: str | Path, resolve: bool = True) -> str:
    """
    Format a path or filename for display. This quotes it if it contains whitespace.

    :param resolve: If true paths are resolved. If they are within the current working
    directory, they are formatted as relative. Otherwise, they are formatted as absolute.
    """
    if resolve:
        path = Path(path).resolve()
        cwd = Path.cwd().resolve()
        if path.is_relative_to(cwd):
            path = path.relative_to(cwd)
    else:
        path = Path(path)

    return shlex.quote(str(path))


## Tests


def test_fmt_path():
    assert fmt_path("/tmp/some file.md", resolve=False) == "'/tmp/some file.md'"
    assert fmt_path("notes/a.md", resolve=False) == "notes/a.md"
    assert fmt_path(Path.cwd() / "x.md") == "x.md"


def test_single_line():
    assert single_line("  Buy\n milk \t now ") == "Buy milk now"
