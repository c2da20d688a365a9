"""Shared fixtures and helpers for latviz tests."""

import threading
import time
from datetime import datetime, timezone

import pytest
from PySide6.QtCore import QCoreApplication, QEventLoop, QTimer

from latviz.models import Measurement


@pytest.fixture(scope="session")
def qapp():
    """Create QCoreApplication instance for tests."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


def wait_ms(ms):
    """Wait for specified milliseconds in Qt event loop."""
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


def wait_until(predicate, timeout_ms=3000):
    """Process Qt events until predicate() is true or the timeout elapses."""
    deadline = time.monotonic() + timeout_ms / 1000.0
    while time.monotonic() < deadline:
        QCoreApplication.processEvents(QEventLoop.AllEvents, 50)
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def make_measurement(id=1, latency_ms=10, status=200, ok=None, timestamp=None):
    """Build a Measurement with sensible defaults."""
    if ok is None:
        ok = status is not None and 200 <= status < 300
    return Measurement(
        id=id,
        timestamp=timestamp or datetime.now(timezone.utc),
        latency_ms=latency_ms,
        status=status,
        ok=ok,
    )


class StubExecutor:
    """Executor returning canned latencies instantly, recording each URL probed."""

    def __init__(self, id_source, latencies=None, status=200):
        self._id_source = id_source
        self._latencies = list(latencies or [])
        self._status = status
        self._lock = threading.Lock()
        self.urls = []

    def execute_probe(self, url):
        with self._lock:
            self.urls.append(url)
            latency = self._latencies.pop(0) if self._latencies else 10
        return make_measurement(id=self._id_source(), latency_ms=latency, status=self._status)

    def close(self):
        pass


class GatedExecutor(StubExecutor):
    """Executor whose first call blocks until release() is called."""

    def __init__(self, id_source, latencies=None):
        super().__init__(id_source, latencies)
        self._gate = threading.Event()
        self._first = True
        self.first_started = threading.Event()

    def execute_probe(self, url):
        with self._lock:
            is_first = self._first
            self._first = False
        if is_first:
            self.first_started.set()
            self._gate.wait(5)
        return super().execute_probe(url)

    def release(self):
        self._gate.set()
