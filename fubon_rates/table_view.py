"""Rendering of the rate table and the monitor page."""

from __future__ import annotations

from typing import Sequence

from jinja2 import Environment

from .config import Config
from .models import FetchStatus, MonitorState, RateRecord
from .ui_template import HTML_TEMPLATE, RATE_TABLE_TEMPLATE

TABLE_HEADERS = ("幣別", "代碼", "現鈔買入", "現鈔賣出", "即期買入", "即期賣出")

_env = Environment(autoescape=True)
_table_template = _env.from_string(RATE_TABLE_TEMPLATE)
_page_template = _env.from_string(HTML_TEMPLATE)


def render_rate_table(rows: Sequence[RateRecord]) -> str:
    """Render one table row per record, in the order given.

    An empty sequence renders as an empty string rather than an empty table.
    """

    if not rows:
        return ""
    return _table_template.render(headers=TABLE_HEADERS, rates=list(rows))


def status_indicator(state: MonitorState):
    """Return the ``(css class, label)`` pair for the status badge."""

    if state.status is FetchStatus.LOADING:
        return "loading", "資料擷取中"
    if state.status is FetchStatus.ERROR:
        return "error", "連線失敗"
    if state.status is FetchStatus.SUCCESS:
        return "online", "系統在線"
    return "idle", "待命中"


def render_page(
    state: MonitorState,
    poll_interval_seconds: float = 0,
    source_url: str = Config.FUBON_RATE_URL,
) -> str:
    status_class, status_label = status_indicator(state)
    rows = state.result.rows if state.result else ()
    return _page_template.render(
        state=state,
        bank_name=Config.BANK_NAME,
        status_class=status_class,
        status_label=status_label,
        error_kind=state.error_kind.value if state.error_kind else None,
        rate_table=render_rate_table(rows),
        poll_interval_seconds=int(poll_interval_seconds),
        source_url=source_url,
    )
