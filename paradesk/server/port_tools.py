import socket
import time
from typing import Iterable

from paradesk.config.logger import get_logger
from paradesk.errors import SetupError


log = get_logger(__name__)


def local_port_is_free(host: str, port: int) -> bool:
    """
    True if nothing is bound to the port yet.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
            return True
        except OSError:
            return False


def find_available_local_port(host: str, ports: Iterable[int]) -> int:
    """
    First free port from `ports`. Raises SetupError if none are free.
    """
    tried = []
    for port in ports:
        if local_port_is_free(host, port):
            log.info("Found available port: %s:%s", host, port)
            return port
        tried.append(port)
    span = f"{tried[0]}-{tried[-1]}" if tried else "(none)"
    raise SetupError(f"No available ports on {host} in range {span}")


def wait_until_listening(host: str, port: int, timeout: float = 10.0) -> None:
    """
    Block until a server accepts connections on the port, polling every 0.1s.
    Raises SetupError after `timeout` seconds.
    """
    deadline = time.monotonic() + timeout
    while True:
        try:
            with socket.create_connection((host, port), timeout=0.5):
                return
        except OSError:
            if time.monotonic() > deadline:
                raise SetupError(f"Server not listening on {host}:{port} after {timeout}s")
            time.sleep(0.1)


## Tests


def test_port_checks():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen()
        busy_port = sock.getsockname()[1]

        assert not local_port_is_free("127.0.0.1", busy_port)
        wait_until_listening("127.0.0.1", busy_port, timeout=1.0)
        try:
            find_available_local_port("127.0.0.1", [busy_port])
            assert False
        except SetupError as e:
            assert str(busy_port) in str(e)
