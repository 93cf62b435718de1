from pathlib import Path
from typing import Optional


def read_partial_text(
    path: Path, max_bytes: int = 8 * 1024, encoding: str = "utf-8", errors: str = "strict"
) -> Optional[str]:
    """
    Read the start of a file as text, or None if that part doesn't decode.
    """
    try:
        with path.open("r", encoding=encoding, errors=errors) as file:
            return file.read(max_bytes)
    except UnicodeDecodeError:
        return None


## Tests


def test_read_partial_text(tmp_path):
    text_file = tmp_path / "a.txt"
    text_file.write_text("plain")
    binary_file = tmp_path / "b.bin"
    binary_file.write_bytes(b"\xff\xfe\x00\x81")
    assert read_partial_text(text_file) == "plain"
    assert read_partial_text(binary_file) is None
    assert read_partial_text(binary_file, errors="replace") == "\ufffd\ufffd\x00\ufffd"
