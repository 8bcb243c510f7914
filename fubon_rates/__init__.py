"""Taipei Fubon Bank exchange rate monitor."""

from .models import Citation, ErrorKind, FetchResult, FetchStatus, MonitorState, RateRecord

__all__ = [
    "Citation",
    "ErrorKind",
    "FetchResult",
    "FetchStatus",
    "MonitorState",
    "RateRecord",
]
