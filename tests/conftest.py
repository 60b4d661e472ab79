"""Shared test fixtures for wordscrub tests."""

from __future__ import annotations

import threading
import time
from typing import Callable

import pytest

from wordscrub.config import ScanRequest, build_request
from wordscrub.models import FileScanResult


@pytest.fixture
def out_dir(tmp_path) -> str:
    """Output directory path. Not created, so tests see it appear."""
    return str(tmp_path / "out")


@pytest.fixture
def scan_root(tmp_path) -> str:
    root = tmp_path / "root"
    root.mkdir()
    return str(root)


@pytest.fixture
def make_request(out_dir, scan_root) -> Callable[..., ScanRequest]:
    """Build a request scoped to scan_root/out_dir; keyword overrides allowed."""

    def _make(words=("secret",), **overrides) -> ScanRequest:
        kwargs = {
            "output_dir": out_dir,
            "extensions": (".txt",),
            "roots": (scan_root,),
            "max_concurrency": 4,
            "drain_timeout": 10.0,
        }
        kwargs.update(overrides)
        return build_request(words, **kwargs)

    return _make


class SlowScanner:
    """Scanner stand-in that records concurrency and can be held open."""

    def __init__(self, delay: float = 0.0, match_every: int = 0) -> None:
        self.delay = delay
        self.match_every = match_every
        self.release = threading.Event()
        self.release.set()
        self._lock = threading.Lock()
        self.active = 0
        self.max_active = 0
        self.calls = 0

    def scan(self, path: str, request: ScanRequest) -> FileScanResult | None:
        with self._lock:
            self.active += 1
            self.calls += 1
            self.max_active = max(self.max_active, self.active)
            n = self.calls
        try:
            self.release.wait()
            if self.delay:
                time.sleep(self.delay)
            if self.match_every and n % self.match_every == 0:
                return FileScanResult(path=path, size=1, word_counts={"w": 1}, total_replacements=1)
            return None
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def slow_scanner() -> Callable[..., SlowScanner]:
    return SlowScanner


def populate(root: str, count: int, text: str = "nothing here", ext: str = ".txt") -> list[str]:
    """Create count files directly under root."""
    import os

    paths = []
    for i in range(count):
        p = os.path.join(root, f"file_{i:04d}{ext}")
        with open(p, "w", encoding="utf-8") as f:
            f.write(text)
        paths.append(p)
    return paths


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
