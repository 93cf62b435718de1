import os
import threading
from contextlib import contextmanager
from enum import Enum
from logging import DEBUG, ERROR, INFO, WARNING
from pathlib import Path
from typing import Optional

from pydantic.dataclasses import dataclass


APP_NAME = "paradesk"

DEFAULT_DB_PATH = "~/.local/paradesk/paradesk.db"

DEFAULT_LOG_DIR = "~/.local/paradesk/logs"

LOCAL_SERVER_LOG_FILE = DEFAULT_LOG_DIR + "/local_server_{port}.log"
LOCAL_SERVER_HOST = "127.0.0.1"
LOCAL_SERVER_PORT_START = 4570
LOCAL_SERVER_PORTS_MAX = 30

ENV_DB_PATH = "PARADESK_DB_PATH"
ENV_LOG_LEVEL = "PARADESK_LOG_LEVEL"


def resolve_and_create_dirs(path: Path | str, is_dir: bool = False) -> Path:
    """
    Resolve a path to an absolute path, handling ~ for the home directory
    and creating any missing parent directories.
    """
    full_path = Path(path).expanduser().resolve()
    if not full_path.exists():
        if is_dir:
            os.makedirs(full_path, exist_ok=True)
        else:
            os.makedirs(full_path.parent, exist_ok=True)
    return full_path


class LogLevel(Enum):
    debug = DEBUG
    info = INFO
    warning = WARNING
    message = WARNING  # Same as warning, just for important console messages.
    error = ERROR

    @classmethod
    def parse(cls, level_str: str):
        canon_name = level_str.strip().lower()
        if canon_name == "warn":
            canon_name = "warning"
        try:
            return cls[canon_name]
        except KeyError:
            raise ValueError(
                f"Invalid log level: `{level_str}`. Valid options are: {', '.join(f'`{name}`' for name in cls.__members__)}"
            )

    def __str__(self):
        return self.name


@dataclass
class Settings:
    db_path: Path
    """The SQLite database holding notes, task lists, and calendar events."""

    log_dir: Path
    """Directory for the main log file."""

    console_log_level: LogLevel
    """The log level for console-based logging."""

    file_log_level: LogLevel
    """The log level for file-based logging."""

    local_server_host: str
    """The host the local bridge server binds to."""

    local_server_ports_start: int
    """The start of the range of ports to try to run the local server on."""

    local_server_ports_max: int
    """The maximum number of ports to try to run the local server on."""

    local_server_port: int
    """Actual port number the local server is running on."""


# Initial default settings.
_settings = Settings(
    db_path=Path(DEFAULT_DB_PATH).expanduser(),
    log_dir=Path(DEFAULT_LOG_DIR).expanduser(),
    file_log_level=LogLevel.info,
    console_log_level=LogLevel.warning,
    local_server_host=LOCAL_SERVER_HOST,
    local_server_ports_start=LOCAL_SERVER_PORT_START,
    local_server_ports_max=LOCAL_SERVER_PORTS_MAX,
    local_server_port=0,
)


def global_settings() -> Settings:
    """
    Read access to global settings.
    """
    return _settings


_settings_lock = threading.RLock()


@contextmanager
def update_global_settings():
    """
    Context manager for thread-safe updates to global settings.
    """
    with _settings_lock:
        yield _settings


def apply_env_overrides(environ: Optional[dict] = None) -> Settings:
    """
    Apply `PARADESK_*` environment variables to the global settings.
    """
    environ = os.environ if environ is None else environ
    with update_global_settings() as settings:
        db_path = environ.get(ENV_DB_PATH)
        if db_path:
            settings.db_path = Path(db_path).expanduser()
        log_level = environ.get(ENV_LOG_LEVEL)
        if log_level:
            settings.console_log_level = LogLevel.parse(log_level)
    return _settings


## Tests


def test_log_level_parse():
    assert LogLevel.parse("WARN") == LogLevel.warning
    assert LogLevel.parse(" debug ") == LogLevel.debug
    try:
        LogLevel.parse("loud")
        assert False
    except ValueError as e:
        assert "loud" in str(e)


def test_env_overrides(tmp_path):
    old_db_path = global_settings().db_path
    old_level = global_settings().console_log_level
    try:
        apply_env_overrides({ENV_DB_PATH: str(tmp_path / "x.db"), ENV_LOG_LEVEL: "error"})
        assert global_settings().db_path == tmp_path / "x.db"
        assert global_settings().console_log_level == LogLevel.error
    finally:
        with update_global_settings() as settings:
            settings.db_path = old_db_path
            settings.console_log_level = old_level
