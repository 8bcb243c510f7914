"""Shared data shapes for exchange rate rows, fetch results and monitor state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

MISSING_VALUE = "-"

# Wire keys used by the completion service, in display order.
RATE_FIELDS: Tuple[str, ...] = (
    "currency",
    "currencyCode",
    "cashBuy",
    "cashSell",
    "spotBuy",
    "spotSell",
)


def _display_value(value: Any) -> str:
    if value is None:
        return MISSING_VALUE
    text = str(value).strip()
    return text or MISSING_VALUE


class FetchStatus(str, Enum):
    IDLE = "IDLE"
    LOADING = "LOADING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class ErrorKind(str, Enum):
    """Failure categories the page distinguishes when showing guidance."""

    MISSING_CREDENTIAL = "missing_credential"
    CREDENTIAL = "credential"
    QUOTA = "quota"
    TRANSPORT = "transport"
    EMPTY_RESPONSE = "empty_response"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RateRecord:
    """One currency row of the published rate table.

    Rates are kept as display strings because the bank publishes ``-`` for
    values it does not quote.
    """

    currency: str
    currency_code: str
    cash_buy: str = MISSING_VALUE
    cash_sell: str = MISSING_VALUE
    spot_buy: str = MISSING_VALUE
    spot_sell: str = MISSING_VALUE

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RateRecord":
        """Build a record from a provider row, filling gaps with ``-``."""

        return cls(
            currency=_display_value(payload.get("currency")),
            currency_code=_display_value(payload.get("currencyCode")),
            cash_buy=_display_value(payload.get("cashBuy")),
            cash_sell=_display_value(payload.get("cashSell")),
            spot_buy=_display_value(payload.get("spotBuy")),
            spot_sell=_display_value(payload.get("spotSell")),
        )

    def as_row(self) -> Tuple[str, str, str, str, str, str]:
        return (
            self.currency,
            self.currency_code,
            self.cash_buy,
            self.cash_sell,
            self.spot_buy,
            self.spot_sell,
        )

    def to_dict(self) -> Dict[str, str]:
        return dict(zip(RATE_FIELDS, self.as_row()))


@dataclass(frozen=True)
class Citation:
    title: Optional[str] = None
    uri: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"title": self.title, "uri": self.uri}


@dataclass(frozen=True)
class FetchResult:
    """Structured result of one successful extraction call."""

    announced_timestamp: str
    rows: Tuple[RateRecord, ...]
    source_url: str
    citations: Tuple[Citation, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.announced_timestamp,
            "rates": [row.to_dict() for row in self.rows],
            "source_url": self.source_url,
            "citations": [citation.to_dict() for citation in self.citations],
        }


@dataclass(frozen=True)
class MonitorState:
    """Immutable snapshot of the polling controller's state."""

    status: FetchStatus = FetchStatus.IDLE
    result: Optional[FetchResult] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    last_attempt: Optional[datetime] = field(default=None)

    @property
    def is_loading(self) -> bool:
        return self.status is FetchStatus.LOADING

    @property
    def has_rows(self) -> bool:
        return self.result is not None and bool(self.result.rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "last_attempt": self.last_attempt.isoformat() if self.last_attempt else None,
            "data": self.result.to_dict() if self.result else None,
        }
