from datetime import datetime

from bs4 import BeautifulSoup

from conftest import make_result
from fubon_rates.models import Citation, ErrorKind, FetchResult, FetchStatus, MonitorState, RateRecord
from fubon_rates.table_view import TABLE_HEADERS, render_page, render_rate_table


def table_cells(html):
    soup = BeautifulSoup(html, "html.parser")
    return [[td.get_text(strip=True) for td in tr.find_all("td")] for tr in soup.select("tbody tr")]


def test_renders_one_row_per_record_in_order():
    rows = [
        RateRecord("美金", "USD", "31.0", "31.6", "31.3", "31.4"),
        RateRecord("南非幣", "ZAR", "-", "-", "1.71", "1.79"),
        RateRecord("美金", "USD", "31.0", "31.6", "31.3", "31.4"),
    ]

    cells = table_cells(render_rate_table(rows))

    assert cells == [
        ["美金", "USD", "31.0", "31.6", "31.3", "31.4"],
        ["南非幣", "ZAR", "-", "-", "1.71", "1.79"],
        ["美金", "USD", "31.0", "31.6", "31.3", "31.4"],
    ]


def test_headers_are_fixed_labels():
    soup = BeautifulSoup(render_rate_table([RateRecord("日圓", "JPY")]), "html.parser")

    assert tuple(th.get_text(strip=True) for th in soup.select("thead th")) == TABLE_HEADERS


def test_empty_input_renders_nothing():
    assert render_rate_table([]) == ""
    assert render_rate_table(()) == ""


def test_values_are_escaped():
    html = render_rate_table([RateRecord("<script>alert(1)</script>", "XSS")])

    assert "<script>alert" not in html
    assert table_cells(html)[0][0] == "<script>alert(1)</script>"


def test_page_shows_stale_rows_under_error_banner():
    state = MonitorState(
        status=FetchStatus.ERROR,
        result=make_result("USD", "JPY"),
        error="無法從富邦銀行擷取最新匯率，請稍後再試。",
        error_kind=ErrorKind.TRANSPORT,
        last_attempt=datetime(2026, 10, 19, 9, 30, 5),
    )

    soup = BeautifulSoup(render_page(state, poll_interval_seconds=300), "html.parser")

    panel = soup.select_one(".error-panel")
    assert "無法從富邦銀行擷取最新匯率" in panel.get_text()
    assert panel.select_one(".btn-retry") is not None
    assert len(soup.select("tbody tr")) == 2
    assert "連線失敗" in soup.select_one(".status-badge").get_text()
    assert "09:30:05" in soup.get_text()


def test_quota_error_gets_distinct_panel():
    state = MonitorState(status=FetchStatus.ERROR, error="quota", error_kind=ErrorKind.QUOTA)

    soup = BeautifulSoup(render_page(state), "html.parser")

    assert "quota" in soup.select_one(".error-panel")["class"]


def test_missing_credential_shows_setup_hint_instead_of_retry():
    state = MonitorState(
        status=FetchStatus.ERROR,
        error="未偵測到有效的 API Key。",
        error_kind=ErrorKind.MISSING_CREDENTIAL,
    )

    soup = BeautifulSoup(render_page(state), "html.parser")

    assert "OPENROUTER_API_KEY" in soup.select_one(".error-panel .hint").get_text()
    assert soup.select_one(".btn-retry") is None


def test_export_disabled_without_rows():
    idle = BeautifulSoup(render_page(MonitorState()), "html.parser")
    empty = MonitorState(
        status=FetchStatus.SUCCESS,
        result=FetchResult(announced_timestamp="t", rows=(), source_url="u"),
    )
    empty_soup = BeautifulSoup(render_page(empty), "html.parser")

    assert "disabled" in idle.select_one("#btn-export")["class"]
    assert "disabled" in empty_soup.select_one("#btn-export")["class"]
    assert empty_soup.select_one("table") is None
    assert "待命中" in idle.select_one(".status-badge").get_text()


def test_loading_disables_refresh_button():
    state = MonitorState(status=FetchStatus.LOADING)

    soup = BeautifulSoup(render_page(state), "html.parser")

    assert soup.select_one("#btn-refresh").has_attr("disabled")
    assert soup.select_one(".placeholder") is not None
    assert "資料擷取中" in soup.select_one(".status-badge").get_text()


def test_success_lists_citations():
    result = FetchResult(
        announced_timestamp="2026/10/19 09:30",
        rows=(RateRecord("美金", "USD", "31.0", "31.6", "31.3", "31.4"),),
        source_url="https://www.fubon.com/rates",
        citations=(
            Citation(title="富邦匯率", uri="https://www.fubon.com/a"),
            Citation(uri="https://example.com/b"),
        ),
    )
    state = MonitorState(status=FetchStatus.SUCCESS, result=result)

    soup = BeautifulSoup(render_page(state), "html.parser")

    links = [(a.get_text(strip=True), a["href"]) for a in soup.select(".citations a")]
    assert links == [
        ("富邦匯率", "https://www.fubon.com/a"),
        ("https://example.com/b", "https://example.com/b"),
    ]
    assert "disabled" not in soup.select_one("#btn-export")["class"]
    assert "系統在線" in soup.select_one(".status-badge").get_text()
