"""
The local bridge server: a FastAPI app over one database, run by uvicorn on a
background thread at the first free port in the configured range.
"""

import asyncio
import threading
from functools import cache
from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    import uvicorn
    from fastapi import FastAPI

from paradesk.config.logger import get_logger
from paradesk.config.settings import (
    global_settings,
    LOCAL_SERVER_LOG_FILE,
    resolve_and_create_dirs,
    update_global_settings,
)
from paradesk.db.database import Database, open_database
from paradesk.errors import FileNotFound, InvalidInput, InvalidState, RecordNotFound
from paradesk.server import server_routes
from paradesk.server.port_tools import find_available_local_port, wait_until_listening
from paradesk.util.format_utils import fmt_path

log = get_logger(__name__)

SHUTDOWN_TIMEOUT = 5.0


@cache
def log_file_path(port: int) -> Path:
    # One log file per port, so concurrent instances don't share a file.
    return resolve_and_create_dirs(LOCAL_SERVER_LOG_FILE.format(port=port))


def _uvicorn_log_config(port: int) -> Dict[str, Any]:
    to_file = {"handlers": ["file"], "level": "INFO", "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(asctime)s %(levelname).1s %(name)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "file": {
                "formatter": "plain",
                "class": "logging.FileHandler",
                "filename": str(log_file_path(port)),
                "encoding": "utf-8",
            }
        },
        "loggers": {name: to_file for name in ("uvicorn", "uvicorn.error", "uvicorn.access")},
    }


def _error_response(status_code: int, message: str):
    from fastapi.responses import JSONResponse

    return JSONResponse(status_code=status_code, content={"message": message})


def app_setup(db: Database) -> "FastAPI":
    """
    The bridge app, serving every channel against the given database.
    """
    from fastapi import FastAPI, Request

    app = FastAPI(title="paradesk")
    app.state.db = db
    app.include_router(server_routes.router)

    # Handlers are picked by the most specific exception class, so the not-found
    # errors map to 404 even though they are also InvalidInput.
    @app.exception_handler(FileNotFound)
    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(request: Request, exc: Exception):
        return _error_response(404, f"File not found: {exc}")

    @app.exception_handler(RecordNotFound)
    async def record_not_found_handler(request: Request, exc: RecordNotFound):
        return _error_response(404, str(exc))

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput):
        return _error_response(400, f"Invalid input: {exc}")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        log.error("Error on %s: %s", request.url.path, exc, exc_info=exc)
        return _error_response(500, "Internal server error.")

    return app


def _pick_port() -> int:
    """
    Pick a free port in the configured range and record it in the settings.
    """
    settings = global_settings()
    start = settings.local_server_ports_start
    port = find_available_local_port(
        settings.local_server_host, range(start, start + settings.local_server_ports_max)
    )
    with update_global_settings() as settings:
        settings.local_server_port = port
    return port


class LocalServer:
    """
    Runs the bridge app on a daemon thread. The database is opened (and migrated)
    on first start.
    """

    def __init__(self, db_path: Optional[Path | str] = None):
        self.db_path = db_path
        self.lock = threading.RLock()
        self.server: Optional["uvicorn.Server"] = None
        self.thread: Optional[threading.Thread] = None
        self.did_exit = threading.Event()
        self._db: Optional[Database] = None

    @property
    def url(self) -> Optional[str]:
        with self.lock:
            if not self.server:
                return None
            return f"http://{self.server.config.host}:{self.server.config.port}"

    def _serve(self, server: "uvicorn.Server"):
        try:
            asyncio.run(server.serve())
        except Exception as e:
            log.error("Server failed with error: %s", e)
        finally:
            self.did_exit.set()
            with self.lock:
                if self.server is server:
                    self.server = None

    def start(self, wait: bool = True) -> threading.Thread:
        """
        Start the server thread, or return the running one. With `wait`, returns
        once the server accepts connections.
        """
        import uvicorn

        with self.lock:
            if self.server and self.thread:
                log.warning("Server already running at %s", self.url)
                return self.thread

            if self._db is None:
                self._db = open_database(self.db_path)
            host = global_settings().local_server_host
            port = _pick_port()
            config = uvicorn.Config(
                app_setup(self._db), host=host, port=port, log_config=_uvicorn_log_config(port)
            )
            self.server = uvicorn.Server(config)
            self.did_exit.clear()
            self.thread = threading.Thread(
                target=self._serve, args=(self.server,), name="paradesk-server", daemon=True
            )
            self.thread.start()

        log.message("Local server on %s:%s (db: %s)", host, port, fmt_path(self._db.db_path))
        log.message("Local server logs: %s", fmt_path(log_file_path(port)))
        if wait:
            wait_until_listening(host, port)
        return self.thread

    def stop(self):
        with self.lock:
            server = self.server
        if not server:
            log.warning("Server already stopped.")
            return

        server.should_exit = True
        if not self.did_exit.wait(timeout=SHUTDOWN_TIMEOUT):
            log.warning("Server did not stop within %ss, forcing exit.", SHUTDOWN_TIMEOUT)
            server.force_exit = True
            if not self.did_exit.wait(timeout=SHUTDOWN_TIMEOUT):
                raise InvalidState(f"Server did not stop within {SHUTDOWN_TIMEOUT}s")
        log.message("Server stopped.")


_local_server: Optional[LocalServer] = None

_server_lock = threading.Lock()


def get_server() -> LocalServer:
    """
    The process-wide server, using the database path from the settings.
    """
    global _local_server
    with _server_lock:
        if _local_server is None:
            _local_server = LocalServer()
        return _local_server


def start_server(wait: bool = True) -> threading.Thread:
    return get_server().start(wait=wait)


def stop_server():
    get_server().stop()
