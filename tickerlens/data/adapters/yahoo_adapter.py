"""
TICKERLENS - Yahoo Finance Historical Adapter
Daily closes for a calendar range, used to bulk-load the buffer.
"""
from datetime import date, datetime, timezone
from typing import Optional, Tuple

import pandas as pd
from cachetools import TTLCache

from tickerlens.config.settings import DataSourceSettings
from tickerlens.data.adapters.base import HistoryProvider, DateLike
from tickerlens.data.models import HistoricalSeries, PricePoint, Quote
from tickerlens.utils.errors import EmptyHistoryError, HistoricalDataError, MarketDataError
from tickerlens.utils.helpers import to_yahoo_symbol, pct_change
from tickerlens.utils.logger import get_logger

logger = get_logger("yahoo_adapter")

# Daily bars only change once per session
HISTORY_CACHE_TTL_SECONDS = 15 * 60


def _parse_date(value: DateLike, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise HistoricalDataError(f"Invalid {name} {value!r}. Use YYYY-MM-DD format") from None


def _unix(d: date) -> int:
    return int(datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp())


class YahooHistoricalAdapter(HistoryProvider):
    """Yahoo Finance v8 chart endpoint, daily interval."""

    def __init__(self, settings: Optional[DataSourceSettings] = None):
        super().__init__(source="yahoo", settings=settings)
        self.base_url = self.settings.yahoo_base_url.rstrip("/")
        self._cache: TTLCache = TTLCache(maxsize=64, ttl=HISTORY_CACHE_TTL_SECONDS)

    def _headers(self):
        return {"User-Agent": "Mozilla/5.0 (tickerlens)"}

    async def get_history(
        self, symbol: str, start_date: DateLike, end_date: DateLike
    ) -> HistoricalSeries:
        start = _parse_date(start_date, "start date")
        end = _parse_date(end_date, "end date")
        if start >= end:
            raise HistoricalDataError("Start date must be before end date")

        key: Tuple[str, date, date] = (symbol, start, end)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("history_cache_hit", symbol=symbol)
            return cached

        yahoo_symbol = to_yahoo_symbol(symbol)
        try:
            status, data = await self._get_json(
                f"{self.base_url}/v8/finance/chart/{yahoo_symbol}",
                params={"period1": _unix(start), "period2": _unix(end), "interval": "1d"},
            )
        except Exception as e:
            logger.error("yahoo_history_exception", symbol=symbol, error=str(e))
            raise MarketDataError(f"Failed to fetch historical data: {e}") from e

        if data is None:
            logger.warning("yahoo_history_error", status=status, symbol=symbol)
            raise EmptyHistoryError(f"No historical data found for symbol: {symbol}")

        history = self.parse_chart(symbol, data)
        self._cache[key] = history
        logger.info("history_loaded", symbol=symbol, points=len(history.points))
        return history

    @staticmethod
    def chart_to_dataframe(data: dict) -> pd.DataFrame:
        """Flatten a chart payload into a time-indexed OHLC frame."""
        results = (data.get("chart") or {}).get("result") or []
        if not results:
            return pd.DataFrame(columns=["open", "high", "low", "close"])
        result = results[0]
        timestamps = result.get("timestamp") or []
        quotes = ((result.get("indicators") or {}).get("quote") or [{}])[0]

        df = pd.DataFrame(
            {col: quotes.get(col) or [None] * len(timestamps)
             for col in ("open", "high", "low", "close")},
            index=pd.Index(timestamps, name="time"),
            dtype=float,
        )
        # Yahoo pads holidays and the in-progress session with nulls
        df = df.dropna(subset=["close"])
        df = df[~df.index.duplicated(keep="last")]
        return df.sort_index()

    @classmethod
    def parse_chart(cls, symbol: str, data: dict) -> HistoricalSeries:
        df = cls.chart_to_dataframe(data)
        if df.empty:
            raise EmptyHistoryError(f"No historical data found for symbol: {symbol}")

        latest = df.iloc[-1]
        previous = df.iloc[-2] if len(df) > 1 else latest
        change = float(latest["close"] - previous["close"])

        def _opt(v) -> Optional[float]:
            return None if pd.isna(v) else float(v)

        quote = Quote(
            symbol=symbol,
            current=float(latest["close"]),
            change=change,
            percent_change=pct_change(float(previous["close"]), float(latest["close"])),
            high=_opt(latest["high"]),
            low=_opt(latest["low"]),
            open=_opt(latest["open"]),
            previous_close=float(previous["close"]),
            timestamp=int(df.index[-1]),
        )
        points = [PricePoint(time=int(t), value=float(v)) for t, v in df["close"].items()]
        return HistoricalSeries(symbol=symbol, quote=quote, points=points)
