"""Service layer for orchestrating rate fetches."""

from .rate_monitor import (
    FetchFailed,
    FetchStarted,
    FetchSucceeded,
    RateMonitor,
    RepeatingTimer,
    reduce_state,
)

__all__ = [
    "FetchFailed",
    "FetchStarted",
    "FetchSucceeded",
    "RateMonitor",
    "RepeatingTimer",
    "reduce_state",
]
