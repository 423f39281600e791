from typing import Literal, Protocol, Iterator, Mapping
from contextlib import AbstractContextManager
from pathlib import Path

LogLevel = Literal["info", "success", "warning", "error", "step"]


class LogSink(Protocol):
    """
    Leveled status messages. Emitting never blocks and never fails the run.
    """

    def emit(self, level: LogLevel, message: str) -> None:
        pass


class HttpResponse(Protocol):
    status_code: int
    reason: str
    headers: Mapping[str, str]

    def iter_content(self, chunk_size: int) -> Iterator[bytes]:
        pass


class HttpClient(Protocol):
    """
    GET with per-request headers and a streamed body. Identification headers,
    timeout and TLS policy are the client's own configuration.
    """

    def get(
        self, url: str, headers: Mapping[str, str]
    ) -> AbstractContextManager[HttpResponse]:
        pass


class DocumentStorage(Protocol):
    """
    Flat store: the documents directly inside one directory.
    """

    def list_documents(self) -> list[Path]:
        pass

    def read(self, path: Path) -> str:
        pass

    def write(self, path: Path, contents: str) -> None:
        pass
