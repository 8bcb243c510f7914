"""Polling controller that owns the exchange rate monitor state."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional, Union
import logging
import threading

from ..ai_processor import MISSING_CREDENTIAL_MESSAGE, ExtractionError, fetch_latest_rates
from ..config import Config
from ..models import ErrorKind, FetchResult, FetchStatus, MonitorState

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "發生未知錯誤"


@dataclass(frozen=True)
class FetchStarted:
    pass


@dataclass(frozen=True)
class FetchSucceeded:
    result: FetchResult
    at: datetime


@dataclass(frozen=True)
class FetchFailed:
    message: str
    kind: ErrorKind = ErrorKind.UNKNOWN


MonitorEvent = Union[FetchStarted, FetchSucceeded, FetchFailed]


def reduce_state(state: MonitorState, event: MonitorEvent) -> MonitorState:
    """Return the state that follows ``state`` once ``event`` is applied.

    Failures keep the previous result so stale rows stay visible beneath the
    error banner.
    """

    if isinstance(event, FetchStarted):
        return replace(state, status=FetchStatus.LOADING, error=None, error_kind=None)
    if isinstance(event, FetchSucceeded):
        return replace(
            state,
            status=FetchStatus.SUCCESS,
            result=event.result,
            error=None,
            error_kind=None,
            last_attempt=event.at,
        )
    if isinstance(event, FetchFailed):
        return replace(
            state,
            status=FetchStatus.ERROR,
            error=event.message,
            error_kind=event.kind,
        )
    raise TypeError(f"Unknown monitor event: {event!r}")


class RepeatingTimer:
    """Call ``callback`` every ``interval`` seconds on a daemon thread."""

    def __init__(self, interval: float, callback: Callable[[], object]) -> None:
        self.interval = interval
        self._callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name="fx-rate-timer", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        while not self._cancelled.wait(self.interval):
            try:
                self._callback()
            except Exception:  # pragma: no cover - keep the timer alive
                logger.error("Scheduled rate refresh failed", exc_info=True)


def _spawn_thread(target: Callable[[], object]) -> None:
    threading.Thread(target=target, name="fx-rate-refresh", daemon=True).start()


class RateMonitor:
    """Fetch the rate table on start, on a timer and on demand.

    Only one fetch is in flight at a time: triggers that arrive while a
    fetch is running are dropped, not queued.
    """

    def __init__(
        self,
        fetcher: Callable[[], FetchResult] = fetch_latest_rates,
        interval_seconds: Optional[float] = None,
        credential_check: Callable[[], bool] = Config.has_credentials,
        timer_factory: Callable[[float, Callable[[], object]], RepeatingTimer] = RepeatingTimer,
        dispatcher: Callable[[Callable[[], object]], None] = _spawn_thread,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._fetcher = fetcher
        self.interval_seconds = (
            Config.POLL_INTERVAL_SECONDS if interval_seconds is None else interval_seconds
        )
        self._credential_check = credential_check
        self._timer_factory = timer_factory
        self._dispatcher = dispatcher
        self._clock = clock

        self._lock = threading.Lock()
        self._state = MonitorState()
        self._timer: Optional[RepeatingTimer] = None
        self._started = False
        self._stopped = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def state(self) -> MonitorState:
        with self._lock:
            return self._state

    def start(self) -> None:
        """Start the polling timer and kick off the first fetch.

        The state moves to ``LOADING`` before this returns; only the network
        call itself runs on the dispatcher.
        """

        with self._lock:
            if self._started or self._stopped:
                return
            self._started = True
            if self.interval_seconds > 0:
                self._timer = self._timer_factory(self.interval_seconds, self.refresh)
                self._timer.start()

        logger.info("Rate monitor started (interval=%ss)", self.interval_seconds)
        if self._begin():
            self._dispatcher(self._run_fetch)

    def stop(self) -> None:
        """Cancel the timer; results that arrive afterwards are discarded."""

        with self._lock:
            self._stopped = True
            timer, self._timer = self._timer, None

        if timer is not None:
            timer.cancel()
        logger.info("Rate monitor stopped")

    def trigger(self) -> bool:
        """Manually request a refresh; returns ``False`` when it is dropped."""

        outcome = self._begin()
        if outcome is None:
            logger.info("Manual refresh ignored: fetch in flight or monitor stopped")
            return False
        if outcome:
            self._dispatcher(self._run_fetch)
        return True

    def refresh(self) -> bool:
        """Run one fetch cycle; returns ``False`` when the cycle was skipped."""

        outcome = self._begin()
        if outcome is None:
            logger.debug("Refresh skipped: fetch already in flight or monitor stopped")
            return False
        if outcome:
            self._run_fetch()
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _begin(self) -> Optional[bool]:
        """Claim the single fetch slot.

        Returns ``None`` when the cycle is dropped, ``False`` when it ended
        immediately in the missing-credential error, and ``True`` when the
        state is now ``LOADING`` and the caller must run :meth:`_run_fetch`.
        """

        with self._lock:
            if self._stopped or self._state.is_loading:
                return None

            if not self._credential_check():
                logger.warning("No API key configured; skipping network call")
                self._state = reduce_state(
                    self._state,
                    FetchFailed(MISSING_CREDENTIAL_MESSAGE, ErrorKind.MISSING_CREDENTIAL),
                )
                return False

            self._state = reduce_state(self._state, FetchStarted())
            return True

    def _run_fetch(self) -> None:
        logger.info("Fetching latest exchange rates")
        try:
            result = self._fetcher()
        except ExtractionError as exc:
            logger.error("Failed to fetch exchange rates: %s", exc)
            self._apply(FetchFailed(str(exc), exc.kind))
        except Exception:
            logger.error("Unexpected error while fetching exchange rates", exc_info=True)
            self._apply(FetchFailed(UNEXPECTED_ERROR_MESSAGE, ErrorKind.UNKNOWN))
        else:
            logger.info("Fetched %s exchange rate rows", len(result.rows))
            self._apply(FetchSucceeded(result, self._clock()))

    def _apply(self, event: MonitorEvent) -> None:
        with self._lock:
            if self._stopped:
                logger.info("Discarding fetch outcome received after shutdown")
                return
            self._state = reduce_state(self._state, event)
