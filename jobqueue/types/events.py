"""
Event type definitions for the event log.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from jobqueue.constants import LOG_TIMESTAMP_FORMAT


@dataclass(frozen=True)
class LogEntry:
    """A single immutable line of the event log."""

    timestamp: datetime
    message: str

    @property
    def line(self) -> str:
        """Render the entry as a timestamped log line."""
        return f"[{self.timestamp.strftime(LOG_TIMESTAMP_FORMAT)}] {self.message}"

    def __str__(self) -> str:
        return self.line


# Observer notified on every append
LogSink = Callable[[LogEntry], None]
