import pytest

from fubon_rates.models import Citation, FetchResult, RateRecord


class FakeTimer:
    """Stand-in for :class:`RepeatingTimer` that fires only when told to."""

    instances = []

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False
        FakeTimer.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled:
            self.callback()


def run_inline(target):
    target()


def make_result(*codes, timestamp="2026/10/19 09:30"):
    rows = tuple(
        RateRecord(
            currency=f"幣別{code}",
            currency_code=code,
            cash_buy="1.0",
            cash_sell="1.2",
            spot_buy="1.05",
            spot_sell="1.15",
        )
        for code in codes
    )
    return FetchResult(
        announced_timestamp=timestamp,
        rows=rows,
        source_url="https://www.fubon.com/rates",
        citations=(Citation(title="Fubon", uri="https://www.fubon.com/rates"),),
    )


@pytest.fixture(autouse=True)
def reset_fake_timers():
    FakeTimer.instances = []
    yield
    FakeTimer.instances = []


@pytest.fixture
def usd_result():
    return FetchResult(
        announced_timestamp="2026/10/19 09:30",
        rows=(
            RateRecord(
                currency="美金",
                currency_code="USD",
                cash_buy="31.0",
                cash_sell="31.6",
                spot_buy="31.3",
                spot_sell="31.4",
            ),
        ),
        source_url="https://www.fubon.com/rates",
    )
