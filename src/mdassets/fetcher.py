"""Remote image retrieval with bounded retries and linear backoff."""

import os
import tempfile
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

import requests

from .assets.store import AssetStore
from .core.errors import AssetIOError, FetchErrorKind
from .core.ports import HttpClient, LogSink

MAX_IMAGE_BYTES = 50 * 1024 * 1024
CHUNK_SIZE = 8192
PROGRESS_STEP = 1024 * 1024


@dataclass(frozen=True)
class Downloaded:
    """Attempt outcome: the body is in the temporary file."""
    size: int


@dataclass(frozen=True)
class Retryable:
    """Attempt outcome: failed, another attempt may succeed."""
    kind: FetchErrorKind
    reason: str


@dataclass(frozen=True)
class Fatal:
    """Attempt outcome: failed, further attempts are pointless."""
    kind: FetchErrorKind
    reason: str


AttemptOutcome = Downloaded | Retryable | Fatal


@dataclass(frozen=True)
class Fetched:
    name: str


@dataclass(frozen=True)
class FetchFailed:
    kind: FetchErrorKind | None
    message: str


FetchResult = Fetched | FetchFailed


def referer_for(url: str) -> str | None:
    """`<scheme>://<host>/` of the URL itself."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.hostname:
        return None
    return f"{parsed.scheme}://{parsed.hostname}/"


def declared_length(headers: Mapping[str, str]) -> int | None:
    value = headers.get("Content-Length")
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ImageFetcher:
    """
    Download one image and hand it to the asset store.

    Every attempt ends in a tagged outcome. Retryable outcomes wait
    `attempt * base_delay` seconds before the next attempt; a fatal outcome or
    the last failed attempt ends the fetch with a stable, human-readable
    message of the form `Download failed: <url> - <reason>`.
    """

    def __init__(
        self,
        client: HttpClient,
        store: AssetStore,
        sink: LogSink,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        max_bytes: int = MAX_IMAGE_BYTES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.store = store
        self.sink = sink
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_bytes = max_bytes
        self.sleep = sleep

    def fetch(self, url: str, desired_name: str) -> FetchResult:
        try:
            urlparse(url)
        except ValueError:
            return FetchFailed("unreachable", f"Download failed: {url} - invalid URL")

        fd, tmp_name = tempfile.mkstemp(prefix="mdassets-", suffix=Path(desired_name).suffix)
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            return self._fetch_into(url, desired_name, tmp_path)
        finally:
            tmp_path.unlink(missing_ok=True)

    def _fetch_into(self, url: str, desired_name: str, tmp_path: Path) -> FetchResult:
        failure: Retryable | Fatal = Retryable("unreachable", "no attempt made")

        for attempt in range(1, self.max_attempts + 1):
            self.sink.emit("info", f"Downloading (attempt {attempt}/{self.max_attempts}): {url}")
            outcome = self._attempt(url, tmp_path)

            if isinstance(outcome, Downloaded):
                try:
                    assigned = self.store.put(desired_name, tmp_path, move=True)
                except AssetIOError as e:
                    return FetchFailed(None, f"Download failed: {url} - {e}")
                self.sink.emit(
                    "success",
                    f"Downloaded {url} -> {assigned} ({outcome.size / 1024:.1f} KB)",
                )
                return Fetched(assigned)

            failure = outcome
            if isinstance(outcome, Fatal):
                break
            self.sink.emit(
                "warning",
                f"Attempt {attempt}/{self.max_attempts} failed: {url} - {outcome.reason}",
            )
            if attempt < self.max_attempts:
                self.sleep(attempt * self.base_delay)

        reason = failure.reason
        if isinstance(failure, Retryable) and failure.kind == "timeout":
            reason = f"timed out after {self.max_attempts} attempts"
        return FetchFailed(failure.kind, f"Download failed: {url} - {reason}")

    def _attempt(self, url: str, tmp_path: Path) -> AttemptOutcome:
        headers: dict[str, str] = {}
        referer = referer_for(url)
        if referer:
            headers["Referer"] = referer

        size = 0
        try:
            with self.client.get(url, headers) as resp:
                if not 200 <= resp.status_code < 300:
                    return Retryable("http_status", f"HTTP {resp.status_code} {resp.reason}".rstrip())

                content_type = resp.headers.get("Content-Type", "")
                if content_type and not content_type.lower().startswith("image/"):
                    self.sink.emit("warning", f"Response is not an image ({content_type}): {url}")

                length = declared_length(resp.headers)
                if length is not None:
                    if length > self.max_bytes:
                        return Fatal("oversized", f"image too large ({length / 1024 / 1024:.1f} MB)")
                    self.sink.emit("info", f"Image size: {length / 1024:.1f} KB")

                next_mark = PROGRESS_STEP
                with tmp_path.open("wb") as f:
                    for chunk in resp.iter_content(CHUNK_SIZE):
                        if not chunk:
                            continue
                        size += len(chunk)
                        if size > self.max_bytes:
                            return Fatal("oversized", f"image exceeds {self.max_bytes // (1024 * 1024)} MB")
                        f.write(chunk)
                        if length and (size >= next_mark or size == length):
                            self._progress(size, length)
                            while next_mark <= size:
                                next_mark += PROGRESS_STEP
        except requests.Timeout:
            return Retryable("timeout", "timed out")
        except (requests.RequestException, OSError) as e:
            return Retryable("unreachable", f"connection error ({type(e).__name__})")

        if size == 0:
            return Retryable("empty_body", "downloaded file is empty")
        return Downloaded(size)

    def _progress(self, size: int, length: int) -> None:
        self.sink.emit(
            "info",
            f"Download progress: {size / length * 100:.1f}% ({size / 1024:.1f} KB / {length / 1024:.1f} KB)",
        )
