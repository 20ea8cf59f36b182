"""
TICKERLENS - Dashboard Session
Single-owner session state: active symbol, price buffer, indicator
instances, and the series last computed from them.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tickerlens.config.settings import AppSettings, StreamSettings
from tickerlens.data.buffer import StreamingBuffer
from tickerlens.data.models import (
    DerivedSeries, HistoricalSeries, IndicatorInstance, PricePoint, Quote, UsefulSource,
)
from tickerlens.indicators.processor import process_indicators
from tickerlens.utils.logger import get_logger

logger = get_logger("dashboard_session")

MODE_REALTIME = "realtime"
MODE_HISTORICAL = "historical"


class DashboardSession:
    """
    Holds everything one dashboard renders. Mutated only from discrete
    events (tick, symbol change, history load, indicator edit); every
    change that affects the chart triggers a synchronous recompute.
    """

    def __init__(self, stream: Optional[StreamSettings] = None, symbol: Optional[str] = None):
        stream = stream or StreamSettings()
        self.symbol: str = symbol or stream.default_symbol
        self.buffer = StreamingBuffer(
            retention_seconds=stream.retention_seconds,
            min_delta=stream.min_price_delta,
        )
        self.quote: Optional[Quote] = None
        self.mode: str = MODE_REALTIME
        self.history_range: Optional[Tuple[str, str]] = None
        self.useful_sources: List[UsefulSource] = []
        self._instances: List[IndicatorInstance] = []
        self._series: List[DerivedSeries] = []

    # ─── Price data ─────────────────────────────────────────────

    def switch_symbol(self, symbol: str) -> bool:
        """Make ``symbol`` active. Returns False when it already was."""
        if symbol == self.symbol and self.mode == MODE_REALTIME:
            return False
        logger.info("symbol_switched", old=self.symbol, new=symbol)
        self.symbol = symbol
        self.quote = None
        self.mode = MODE_REALTIME
        self.history_range = None
        self.buffer.reset()
        self.recompute()
        return True

    def ingest_point(self, point: PricePoint) -> bool:
        """Hand one live sample to the buffer; recompute when accepted."""
        accepted = self.buffer.append(point)
        if accepted:
            self.recompute()
        return accepted

    def ingest_quote(self, quote: Quote) -> bool:
        """Apply a feed quote. Quotes for another symbol are ignored."""
        if quote.symbol != self.symbol or self.mode != MODE_REALTIME:
            logger.debug("quote_ignored", symbol=quote.symbol, active=self.symbol, mode=self.mode)
            return False
        self.quote = quote
        return self.ingest_point(quote.to_point())

    def load_history(self, history: HistoricalSeries,
                     date_range: Optional[Tuple[str, str]] = None) -> int:
        """Replace the buffer with a historical range."""
        self.symbol = history.symbol
        self.quote = history.quote
        self.mode = MODE_HISTORICAL
        self.history_range = date_range
        stored = self.buffer.replace(history.points)
        logger.info("history_applied", symbol=history.symbol, points=stored)
        self.recompute()
        return stored

    @property
    def points(self) -> Tuple[PricePoint, ...]:
        return self.buffer.snapshot()

    # ─── Indicators ─────────────────────────────────────────────

    @property
    def instances(self) -> List[IndicatorInstance]:
        """Read-only copy of the instance list."""
        return list(self._instances)

    def set_indicators(self, instances: Sequence[IndicatorInstance]) -> None:
        self._instances = list(instances)
        self.recompute()

    def recompute(self) -> List[DerivedSeries]:
        self._series = process_indicators(self.buffer.snapshot(), self._instances)
        return self._series

    @property
    def series(self) -> List[DerivedSeries]:
        return list(self._series)

    # ─── Summary ────────────────────────────────────────────────

    def summary(self) -> Dict[str, Any]:
        latest = self.buffer.latest
        return {
            "symbol": self.symbol,
            "mode": self.mode,
            "history_range": list(self.history_range) if self.history_range else None,
            "points": len(self.buffer),
            "latest": latest.to_dict() if latest else None,
            "quote": self.quote.model_dump() if self.quote else None,
            "indicators": len(self._instances),
        }


def build_session(settings: AppSettings) -> DashboardSession:
    """Create the session once at startup from resolved settings."""
    return DashboardSession(stream=settings.stream)
