"""Shared test doubles for mdassets."""

from contextlib import contextmanager
from pathlib import Path

import pytest

from mdassets.adapters.log_sink import RecordingSink
from mdassets.assets.store import AssetStore


class FakeResponse:
    def __init__(self, body: bytes = b"", status_code: int = 200, headers: dict | None = None, reason: str = "OK"):
        self.body = body
        self.status_code = status_code
        self.reason = reason
        self.headers = headers if headers is not None else {"Content-Type": "image/png"}

    def iter_content(self, chunk_size: int):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]


class FakeHttpClient:
    """Scripted client: each URL maps to a list of responses or exceptions."""

    def __init__(self, script: dict | None = None):
        self.script = {url: list(items) for url, items in (script or {}).items()}
        self.calls: list[tuple[str, dict]] = []

    @contextmanager
    def get(self, url, headers):
        self.calls.append((url, dict(headers)))
        queue = self.script.get(url)
        if not queue:
            raise AssertionError(f"unexpected request: {url}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        yield item

    def attempts(self, url: str) -> int:
        return sum(1 for called, _ in self.calls if called == url)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def store(tmp_path: Path, sink):
    return AssetStore(tmp_path / "assets", sink)


@pytest.fixture
def respond():
    return FakeResponse


@pytest.fixture
def fake_http():
    return FakeHttpClient
