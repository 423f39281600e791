"""Run-scoped mutable state shared between pipeline phases."""

from .ports import LogSink


class RenameLedger:
    """
    Map from an asset's original filename to the name it was stored under.

    Entries are added once and never overwritten; a ledger lives for a single
    run and is discarded afterwards.
    """

    def __init__(self) -> None:
        self._names: dict[str, str] = {}

    def record(self, original: str, assigned: str) -> None:
        self._names.setdefault(original, assigned)

    def get(self, original: str, default: str | None = None) -> str | None:
        return self._names.get(original, default)

    def __len__(self) -> int:
        return len(self._names)


class ErrorLog:
    """Surface each distinct error message at most once per run."""

    def __init__(self, sink: LogSink):
        self.sink = sink
        self._seen: set[str] = set()
        self._messages: list[str] = []

    def report(self, message: str) -> bool:
        """
        Emit `message` at error level unless the identical text was seen.

        Returns:
            True if the message was emitted, False if it was a repeat
        """
        if message in self._seen:
            return False
        self._seen.add(message)
        self._messages.append(message)
        self.sink.emit("error", message)
        return True

    @property
    def messages(self) -> list[str]:
        return list(self._messages)
