"""
Queue core.
Contains the job store, event log, dispatch queue and the job queue service.
"""

from jobqueue.core.dispatch import DispatchQueue
from jobqueue.core.event_log import EventLog, console_sink
from jobqueue.core.service import JobQueue
from jobqueue.core.store import JobStore

__all__ = [
    "DispatchQueue",
    "EventLog",
    "JobQueue",
    "JobStore",
    "console_sink",
]
