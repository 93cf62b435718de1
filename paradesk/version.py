"""
The version shown by `paradesk --version`.
"""

import subprocess
import tomllib
from importlib import metadata
from pathlib import Path
from typing import Optional

import regex

PACKAGE_NAME = "paradesk"

SOURCE_ROOT = Path(__file__).parent.parent

_VERSION_PATTERN = regex.compile(r"^\d+\.\d+\.\d+\S*$")


def source_checkout_version() -> Optional[str]:
    """
    The version declared in `pyproject.toml` when running from a source checkout,
    or None when there is no such file beside the package.
    """
    pyproject_path = SOURCE_ROOT / "pyproject.toml"
    if not pyproject_path.is_file():
        return None
    project = tomllib.loads(pyproject_path.read_text(encoding="utf-8")).get("project", {})
    return project.get("version")


def source_checkout_commit() -> Optional[str]:
    if not (SOURCE_ROOT / ".git").exists():
        return None
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=SOURCE_ROOT,
            capture_output=True,
            text=True,
            check=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
    return result.stdout.strip() or None


def get_version() -> str:
    """
    The source checkout version (with the commit, when in a git checkout) takes
    precedence, so an editable install reports what is actually running.
    Otherwise the installed distribution's version.
    """
    version = source_checkout_version()
    if version:
        commit = source_checkout_commit()
        return f"{version}+{commit}" if commit else version
    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0+unknown"


## Tests


def test_get_version():
    version = get_version()
    assert _VERSION_PATTERN.match(version)

    declared = source_checkout_version()
    if declared:
        assert version.split("+")[0] == declared
