"""
File browsing for the sidebar: a depth-limited tree of notes and images under a
root folder, plus reading, saving, and simple edits of entries.
"""

import base64
import shutil
from pathlib import Path
from typing import Dict, List

from strif import atomic_output_file

from paradesk.config.logger import get_logger
from paradesk.config.text_styles import EMOJI_SAVED
from paradesk.errors import FileExists, FileNotFound, InvalidFilename, InvalidInput
from paradesk.model.store_model import (
    FileEntry,
    FolderListing,
    NewEntryResult,
    ReadFileResult,
)
from paradesk.util.file_utils import read_partial_text
from paradesk.util.format_utils import fmt_path
from paradesk.util.log_calls import log_calls

log = get_logger(__name__)


ALLOWED_EXTENSIONS = [".md", ".txt", ".svg", ".png", ".jpg", ".jpeg", ".gif", ".pdf"]

MAX_DEPTH = 5

SKIPPED_NAMES = {".git", "node_modules"}

BINARY_MIME_TYPES: Dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".svg": "image/svg+xml",
}

DEFAULT_BINARY_MIME_TYPE = "application/octet-stream"


def is_skipped(name: str) -> bool:
    return name in SKIPPED_NAMES or name.startswith(".")


def list_directory(dir_path: Path | str, depth: int = 0) -> List[FileEntry]:
    """
    List a folder recursively, directories first, then by name. Hidden entries are
    skipped, files must have an allowed extension, and nothing below `MAX_DEPTH`
    levels is listed.
    """
    if depth >= MAX_DEPTH:
        return []

    dir_path = Path(dir_path)
    entries: List[FileEntry] = []
    for child in dir_path.iterdir():
        if is_skipped(child.name):
            continue
        if child.is_dir():
            entries.append(
                FileEntry(
                    name=child.name,
                    path=str(child),
                    is_directory=True,
                    children=list_directory(child, depth + 1),
                )
            )
        elif child.suffix.lower() in ALLOWED_EXTENSIONS:
            entries.append(FileEntry(name=child.name, path=str(child), is_directory=False))

    entries.sort(key=lambda entry: (not entry.is_directory, entry.name.lower(), entry.name))
    return entries


@log_calls(level="info", if_slower_than=0.5)
def get_files(dir_path: Path | str) -> FolderListing:
    dir_path = Path(dir_path).expanduser()
    if not dir_path.is_dir():
        raise FileNotFound(f"Directory not found: {fmt_path(dir_path)}")
    return FolderListing(
        folder_name=dir_path.name,
        files=list_directory(dir_path),
        root_path=str(dir_path),
    )


def read_file(file_path: Path | str) -> ReadFileResult:
    """
    Read a file for display. Images, PDFs, and anything that isn't UTF-8 text come
    back base64-encoded with a MIME type.
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFound(f"File not found: {fmt_path(path)}")

    mime_type = BINARY_MIME_TYPES.get(path.suffix.lower())
    if not mime_type and read_partial_text(path) is None:
        mime_type = DEFAULT_BINARY_MIME_TYPE

    if mime_type:
        content = base64.b64encode(path.read_bytes()).decode("ascii")
        return ReadFileResult(content=content, is_binary=True, mime_type=mime_type)
    else:
        # Only the start was sniffed. Later bad bytes become U+FFFD.
        text = path.read_text(encoding="utf-8", errors="replace")
        return ReadFileResult(content=text, is_binary=False)


def save_file(file_path: Path | str, content: str) -> None:
    path = Path(file_path)
    with atomic_output_file(path) as tmp_path:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
    log.info("%s Saved: %s", EMOJI_SAVED, fmt_path(path))


def _check_entry_name(name: str) -> None:
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        raise InvalidFilename(f"Invalid name: {name!r}")


def create_file(parent_dir: Path | str, file_name: str, root_path: Path | str) -> NewEntryResult:
    """
    Create an empty file and return its path with the refreshed listing of the root.
    """
    _check_entry_name(file_name)
    if not root_path:
        raise InvalidInput("Root path is required")
    full_path = Path(parent_dir) / file_name
    try:
        with open(full_path, "x", encoding="utf-8"):
            pass
    except FileExistsError:
        raise FileExists(f"File already exists: {fmt_path(full_path)}")
    log.info("Created file: %s", fmt_path(full_path))
    return NewEntryResult(new_path=str(full_path), files=list_directory(root_path))


def create_folder(
    parent_dir: Path | str, folder_name: str, root_path: Path | str
) -> NewEntryResult:
    _check_entry_name(folder_name)
    if not root_path:
        raise InvalidInput("Root path is required")
    full_path = Path(parent_dir) / folder_name
    try:
        full_path.mkdir(parents=False)
    except FileExistsError:
        raise FileExists(f"Folder already exists: {fmt_path(full_path)}")
    log.info("Created folder: %s", fmt_path(full_path))
    return NewEntryResult(new_path=str(full_path), files=list_directory(root_path))


def delete_entry(entry_path: Path | str) -> bool:
    """
    Delete a file or a whole folder. Returns False if there was nothing to delete.
    """
    path = Path(entry_path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
    else:
        return False
    log.info("Deleted: %s", fmt_path(path))
    return True


def rename_entry(old_path: Path | str, new_name: str) -> str:
    """
    Rename a file or folder in place, returning its new path.
    """
    _check_entry_name(new_name)
    old = Path(old_path)
    if not old.exists():
        raise FileNotFound(f"Not found: {fmt_path(old)}")
    new = old.parent / new_name
    if new.exists():
        raise FileExists(f"Already exists: {fmt_path(new)}")
    old.rename(new)
    log.info("Renamed: %s -> %s", fmt_path(old), fmt_path(new))
    return str(new)


## Tests


def _make_tree(root: Path) -> None:
    (root / "b.md").write_text("# B")
    (root / "A.txt").write_text("a")
    (root / "script.py").write_text("print()")
    (root / ".hidden.md").write_text("")
    (root / "zeta").mkdir()
    (root / "zeta" / "pic.PNG").write_bytes(b"\x89PNG")
    (root / "Alpha").mkdir()
    (root / "node_modules").mkdir()
    (root / "node_modules" / "x.md").write_text("")


def test_list_directory_order_and_filters(tmp_path):
    _make_tree(tmp_path)
    entries = list_directory(tmp_path)
    assert [e.name for e in entries] == ["Alpha", "zeta", "A.txt", "b.md"]
    assert entries[0].is_directory and entries[0].children == []
    assert entries[2].children is None
    zeta = entries[1]
    assert zeta.children and [e.name for e in zeta.children] == ["pic.PNG"]


def test_list_directory_depth_limit(tmp_path):
    current = tmp_path
    for i in range(MAX_DEPTH + 1):
        current = current / f"d{i}"
        current.mkdir()
        (current / "note.md").write_text("")

    names = []
    entries = list_directory(tmp_path)
    while entries:
        directory = entries[0]
        names.append(directory.name)
        entries = directory.children or []
    # Directories at the depth limit are listed, but not their contents.
    assert names == [f"d{i}" for i in range(MAX_DEPTH)]


def test_get_files_json(tmp_path):
    _make_tree(tmp_path)
    listing = get_files(tmp_path)
    data = listing.to_json_dict()
    assert data["folderName"] == tmp_path.name
    assert data["rootPath"] == str(tmp_path)
    assert data["files"][2] == {
        "name": "A.txt",
        "path": str(tmp_path / "A.txt"),
        "isDirectory": False,
        "children": None,
    }
    try:
        get_files(tmp_path / "missing")
        assert False
    except FileNotFoundError:
        pass


def test_read_file(tmp_path):
    (tmp_path / "note.md").write_text("- [ ] 任务\n", encoding="utf-8")
    (tmp_path / "pic.png").write_bytes(b"\x89PNG")
    (tmp_path / "blob.txt").write_bytes(b"\xff\xfe\x81")

    text = read_file(tmp_path / "note.md")
    assert (text.content, text.is_binary, text.mime_type) == ("- [ ] 任务\n", False, None)

    image = read_file(tmp_path / "pic.png")
    assert image.is_binary and image.mime_type == "image/png"
    assert base64.b64decode(image.content) == b"\x89PNG"

    blob = read_file(tmp_path / "blob.txt")
    assert blob.is_binary and blob.mime_type == DEFAULT_BINARY_MIME_TYPE


def test_read_file_with_late_bad_byte(tmp_path):
    (tmp_path / "notes.md").write_bytes(b"a" * 9000 + b"\xff\n")
    result = read_file(tmp_path / "notes.md")
    assert not result.is_binary
    assert result.content == "a" * 9000 + "\ufffd\n"


def test_create_rename_delete(tmp_path):
    result = create_file(tmp_path, "todo.md", tmp_path)
    assert result.new_path == str(tmp_path / "todo.md")
    assert [e.name for e in result.files] == ["todo.md"]

    try:
        create_file(tmp_path, "todo.md", tmp_path)
        assert False
    except FileExists:
        pass
    for bad_name in ("", "a/b.md", ".."):
        try:
            create_file(tmp_path, bad_name, tmp_path)
            assert False
        except InvalidFilename:
            pass

    folder = create_folder(tmp_path, "archive", tmp_path)
    assert [e.name for e in folder.files] == ["archive", "todo.md"]

    save_file(tmp_path / "todo.md", "- [x] done\n")
    assert (tmp_path / "todo.md").read_text() == "- [x] done\n"

    new_path = rename_entry(tmp_path / "todo.md", "done.md")
    assert new_path == str(tmp_path / "done.md")
    try:
        rename_entry(tmp_path / "todo.md", "other.md")
        assert False
    except FileNotFound:
        pass

    (tmp_path / "archive" / "old.md").write_text("")
    assert delete_entry(tmp_path / "archive")
    assert delete_entry(tmp_path / "done.md")
    assert not delete_entry(tmp_path / "done.md")
    assert list(tmp_path.iterdir()) == []
