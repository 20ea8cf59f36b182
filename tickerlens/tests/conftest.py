"""
TICKERLENS - Test Configuration & Fixtures
Shared fixtures for all test modules.
"""
import pytest
import numpy as np
from typing import List, Optional

from tickerlens.config.settings import StreamSettings
from tickerlens.data.adapters.base import HistoryProvider, QuoteProvider
from tickerlens.data.models import HistoricalSeries, PricePoint, Quote
from tickerlens.session.dashboard import DashboardSession
from tickerlens.utils.errors import EmptyHistoryError, HistoricalDataError


def make_points(values, start: int = 0, step: int = 1) -> List[PricePoint]:
    """Build a series with evenly spaced timestamps."""
    return [PricePoint(time=start + i * step, value=float(v)) for i, v in enumerate(values)]


@pytest.fixture
def rising_points():
    """(0,100), (1,101), ... (19,119)."""
    return make_points(range(100, 120))


@pytest.fixture
def flat_points():
    return make_points([50.0] * 30)


@pytest.fixture
def random_walk_points():
    """A realistic 1-minute close series."""
    np.random.seed(42)
    n = 300
    returns = np.random.normal(0.0001, 0.002, n)
    prices = 100.0 * np.exp(np.cumsum(returns))
    return make_points(prices, start=1_700_000_000, step=60)


@pytest.fixture
def session():
    return DashboardSession(stream=StreamSettings(), symbol="AAPL")


class FakeQuoteProvider(QuoteProvider):
    """Serves queued quotes; ``None`` once the queue is empty."""

    def __init__(self, quotes: Optional[List[Quote]] = None):
        super().__init__(source="fake")
        self.quotes = list(quotes or [])
        self.requested: List[str] = []

    async def get_quote(self, symbol: str) -> Optional[Quote]:
        self.requested.append(symbol)
        if not self.quotes:
            return None
        return self.quotes.pop(0)

    async def disconnect(self) -> None:
        pass


class FakeHistoryProvider(HistoryProvider):
    """Returns a fixed daily series, or raises for unknown symbols."""

    def __init__(self, closes=(150.0, 151.5, 149.0, 152.25, 153.0)):
        super().__init__(source="fake")
        self.closes = list(closes)

    async def get_history(self, symbol, start_date, end_date) -> HistoricalSeries:
        if str(start_date) >= str(end_date):
            raise HistoricalDataError("Start date must be before end date")
        if symbol == "NOPE":
            raise EmptyHistoryError(f"No historical data found for symbol: {symbol}")
        points = make_points(self.closes, start=1_704_067_200, step=86_400)
        quote = Quote(
            symbol=symbol,
            current=points[-1].value,
            change=points[-1].value - points[-2].value,
            previous_close=points[-2].value,
            timestamp=points[-1].time,
        )
        return HistoricalSeries(symbol=symbol, quote=quote, points=points)

    async def disconnect(self) -> None:
        pass


@pytest.fixture
def fake_quotes():
    return FakeQuoteProvider()


@pytest.fixture
def fake_history():
    return FakeHistoryProvider()
