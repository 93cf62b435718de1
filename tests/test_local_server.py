import httpx

from paradesk.config.settings import global_settings
from paradesk.server.local_server import LocalServer


def test_server_start_and_stop(tmp_path):
    server = LocalServer(tmp_path / "paradesk.db")
    server.start(wait=True)
    try:
        assert server.url
        assert global_settings().local_server_port == int(server.url.rsplit(":", 1)[1])

        response = httpx.post(
            f"{server.url}/api/parse-markdown-tasks", json={"content": "- [x] done [pinned]"}
        )
        assert response.status_code == 200
        assert response.json()[0]["isPinned"] is True

        # Starting again returns the running thread.
        assert server.start() is server.thread
    finally:
        server.stop()

    assert server.url is None
    assert server.did_exit.is_set()
