"""
In-process Job Queue

An asynchronous job-processing core: a bounded dispatch queue with fail-fast
admission, a fixed pool of cooperative workers with bounded retry, and a
concurrency-safe job store and event log observed by the HTTP API.
"""

__version__ = "1.0.0"
