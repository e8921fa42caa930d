import socket
import threading
import time
import unittest
from datetime import timedelta

import uvicorn

from healthprobe.models import HealthCheck
from healthprobe.testserver import build_app

SLOW_DELAY_S = 1.0


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class FixtureServerTests(unittest.TestCase):
    server: uvicorn.Server
    thread: threading.Thread
    base_url: str

    @classmethod
    def setUpClass(cls) -> None:
        port = _free_port()
        config = uvicorn.Config(
            build_app(slow_delay_s=SLOW_DELAY_S),
            host="127.0.0.1",
            port=port,
            log_level="warning",
        )
        cls.server = uvicorn.Server(config)
        cls.thread = threading.Thread(target=cls.server.run, daemon=True)
        cls.thread.start()
        deadline = time.monotonic() + 10
        while not cls.server.started:
            if time.monotonic() > deadline:
                raise RuntimeError("fixture server did not start")
            time.sleep(0.05)
        cls.base_url = f"http://127.0.0.1:{port}"

    @classmethod
    def tearDownClass(cls) -> None:
        cls.server.should_exit = True
        cls.thread.join(timeout=10)

    def _check(self, path: str, code: int, timeout: timedelta = timedelta(seconds=5)) -> HealthCheck:
        return HealthCheck(url=f"{self.base_url}{path}", response_timeout=timeout, healthy_status_code=code)

    def test_healthz_matches_200(self) -> None:
        self.assertTrue(self._check("/healthz", 200).do().ok)
        self.assertFalse(self._check("/healthz", 204).do().ok)

    def test_redirect_status_is_not_followed(self) -> None:
        res = self._check("/healthz2", 301).do()
        self.assertTrue(res.ok)
        self.assertEqual(res.status_code, 301)
        self.assertFalse(self._check("/healthz2", 200).do().ok)

    def test_slow_endpoint_respects_timeout(self) -> None:
        res = self._check("/healthz3", 200, timeout=timedelta(seconds=SLOW_DELAY_S / 4)).do()
        self.assertFalse(res.ok)
        self.assertIsNotNone(res.cause)

        self.assertTrue(self._check("/healthz3", 200, timeout=timedelta(seconds=SLOW_DELAY_S * 5)).do().ok)
        self.assertTrue(self._check("/healthz3", 200, timeout=timedelta(0)).do().ok)

    def test_connection_refused_is_unhealthy(self) -> None:
        url = f"http://127.0.0.1:{_free_port()}/healthz"
        for code in (200, 301, 500):
            with self.subTest(code=code):
                res = HealthCheck(url=url, response_timeout="2s", healthy_status_code=code).do()
                self.assertFalse(res.ok)
                self.assertIsNotNone(res.error)


class TrickleServerTests(unittest.TestCase):
    """Headers arrive in pieces, each within the socket timeout but late overall."""

    GAP_S = 0.6

    def setUp(self) -> None:
        self.listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.listener.bind(("127.0.0.1", 0))
        self.listener.listen(1)
        self.port = self.listener.getsockname()[1]
        self.thread = threading.Thread(target=self._serve_one, daemon=True)
        self.thread.start()

    def tearDown(self) -> None:
        self.listener.close()
        self.thread.join(timeout=5)

    def _serve_one(self) -> None:
        conn, _ = self.listener.accept()
        with conn:
            conn.recv(4096)
            for part in (b"HTTP/1.1 200 OK\r\n", b"Content-Length: 7\r\n", b"\r\nhealthy"):
                try:
                    conn.sendall(part)
                except OSError:
                    return
                time.sleep(self.GAP_S)

    def test_slow_headers_exceed_whole_request_timeout(self) -> None:
        check = HealthCheck(
            url=f"http://127.0.0.1:{self.port}/healthz",
            response_timeout="1s",
            healthy_status_code=200,
        )

        res = check.do()

        self.assertFalse(res.ok)
        self.assertIn("timed out", res.error)


if __name__ == "__main__":
    unittest.main()
