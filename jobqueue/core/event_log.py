"""
Append-only audit trail of job lifecycle transitions.
"""

import logging
import threading
from collections import deque

from jobqueue.constants import EVENT_LOGGER_NAME
from jobqueue.types.events import LogEntry, LogSink
from jobqueue.types.job import utcnow

logger = logging.getLogger(__name__)


def console_sink(entry: LogEntry) -> None:
    """Forward an event log line to the structured console logger."""
    logging.getLogger(EVENT_LOGGER_NAME).info(entry.line)


class EventLog:
    """
    Thread-safe, append-only event log.

    Entries are appended under an exclusive lock. Sinks are notified after
    the lock is released. Readers always receive a copy.
    """

    def __init__(
        self,
        sinks: list[LogSink] | None = None,
        max_entries: int | None = None,
    ):
        """
        Initialize the event log.

        Args:
            sinks: Observers notified on every append.
            max_entries: Retain only the newest entries when set.
        """
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._sinks: list[LogSink] = list(sinks or [])
        self._lock = threading.Lock()

    def add_sink(self, sink: LogSink) -> None:
        """Register an observer for new entries."""
        with self._lock:
            self._sinks.append(sink)

    def remove_sink(self, sink: LogSink) -> None:
        """Unregister an observer. Unknown sinks are ignored."""
        with self._lock:
            if sink in self._sinks:
                self._sinks.remove(sink)

    def append(self, message: str) -> LogEntry:
        """
        Timestamp and append a message.

        Args:
            message: Free-text log message.

        Returns:
            The stored entry.
        """
        entry = LogEntry(timestamp=utcnow(), message=message)
        with self._lock:
            self._entries.append(entry)
            sinks = list(self._sinks)

        for sink in sinks:
            try:
                sink(entry)
            except Exception:
                logger.exception("Event log sink failed")

        return entry

    def snapshot(self) -> list[LogEntry]:
        """Get an independent copy of all entries in append order."""
        with self._lock:
            return list(self._entries)

    def lines(self) -> list[str]:
        """Get all entries rendered as log lines."""
        return [entry.line for entry in self.snapshot()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
