"""Pytest configuration and fixtures for rest-client tests.

This file provides:
- PortReservation: Race-free port allocation for test servers
- MockServer: Subprocess management for the mock API server
- Fixtures: Shared test infrastructure (server, response factories)
"""

from __future__ import annotations

import socket
import subprocess
import sys
import time
from pathlib import Path
from typing import Any, Generator

import httpx
import pytest

from rest_client.models import Response

# Project root for running the mock server module
PROJECT_ROOT = Path(__file__).parent.parent
MOCK_SERVER_MODULE = "tests.integration.mock_server"


def make_response(
    status_code: int = 200,
    body: str = "",
    headers: dict[str, list[str]] | None = None,
) -> Response:
    """Create a normalized Response for testing.

    Prefer this over constructing Response directly - it provides
    sensible defaults.
    """
    return Response(status_code=status_code, body=body, headers=headers or {})


class FaultyStream(httpx.SyncByteStream):
    """Byte stream that raises on read and records close() calls."""

    def __init__(self, exc: BaseException) -> None:
        self._exc = exc
        self.close_calls = 0

    def __iter__(self):
        raise self._exc

    def close(self) -> None:
        self.close_calls += 1


class TrackingStream(httpx.SyncByteStream):
    """Byte stream that yields fixed chunks and records close() calls."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks
        self.close_calls = 0

    def __iter__(self):
        yield from self._chunks

    def close(self) -> None:
        self.close_calls += 1


class PortReservation:
    """An ephemeral localhost port, bound until the server is about to start."""

    def __init__(self) -> None:
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._socket.bind(("127.0.0.1", 0))
        self.port = self._socket.getsockname()[1]

    def release(self) -> int:
        self._socket.close()
        return self.port


def wait_for_server_ready(host: str, port: int, timeout: float = 10.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            with socket.create_connection((host, port), timeout=1.0):
                return True
        except OSError:
            time.sleep(0.1)
    return False


class MockServer:
    """tests/integration/mock_server.py running under uvicorn in a subprocess."""

    def __init__(self, reservation: PortReservation) -> None:
        self._reservation = reservation
        self.host = "127.0.0.1"
        self.port = reservation.port
        self.base_url = f"http://{self.host}:{self.port}"
        self._process: subprocess.Popen | None = None

    def start(self) -> None:
        self._reservation.release()
        self._process = subprocess.Popen(
            [sys.executable, "-m", MOCK_SERVER_MODULE, "--host", self.host, "--port", str(self.port)],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=PROJECT_ROOT,
        )
        if not wait_for_server_ready(self.host, self.port):
            self._process.kill()
            _, stderr = self._process.communicate()
            self._process = None
            raise RuntimeError(
                f"mock server did not start on port {self.port}: "
                f"{stderr.decode(errors='replace') or '(no stderr)'}"
            )

    def stop(self) -> None:
        if self._process is None:
            return
        self._process.terminate()
        try:
            self._process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            self._process.kill()
            self._process.wait()
        self._process = None

    def __enter__(self) -> MockServer:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()


# =============================================================================
# Pytest Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def mock_server() -> Generator[MockServer, None, None]:
    """Session-scoped mock server; starts once per test session."""
    with MockServer(PortReservation()) as server:
        yield server


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Automatically apply markers based on test location.

    Enables running subsets via:
        pytest -m integration  # only integration tests
        pytest -m unit         # only unit tests
    """
    for item in items:
        test_path = Path(item.fspath)
        if "integration" in test_path.parts:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
