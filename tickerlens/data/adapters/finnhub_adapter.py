"""
TICKERLENS - Finnhub Quote Adapter
Live quote source polled by the feed.
"""
from typing import Optional

from tickerlens.config.settings import DataSourceSettings
from tickerlens.data.adapters.base import QuoteProvider
from tickerlens.data.models import Quote
from tickerlens.utils.helpers import unix_now
from tickerlens.utils.logger import get_logger

logger = get_logger("finnhub_adapter")


class FinnhubQuoteAdapter(QuoteProvider):
    """Finnhub /quote endpoint."""

    def __init__(self, settings: Optional[DataSourceSettings] = None):
        super().__init__(source="finnhub", settings=settings)
        self.base_url = self.settings.finnhub_base_url.rstrip("/")

    async def get_quote(self, symbol: str) -> Optional[Quote]:
        if not self.settings.finnhub_api_key:
            logger.warning("finnhub_api_key_missing")
            return None
        try:
            status, data = await self._get_json(
                f"{self.base_url}/quote",
                params={"symbol": symbol, "token": self.settings.finnhub_api_key},
            )
            if data is None:
                logger.warning("finnhub_quote_error", status=status, symbol=symbol)
                return None
            return self.parse_quote(symbol, data)
        except Exception as e:
            logger.error("finnhub_quote_exception", symbol=symbol, error=str(e))
            return None

    @staticmethod
    def parse_quote(symbol: str, data: dict) -> Optional[Quote]:
        """Map a Finnhub payload (c, d, dp, h, l, o, pc, t) to a Quote."""
        current = float(data.get("c") or 0)
        ts = int(data.get("t") or 0)
        # Finnhub answers unknown symbols with an all-zero payload
        if current <= 0 and ts == 0:
            logger.warning("finnhub_unknown_symbol", symbol=symbol)
            return None

        return Quote(
            symbol=symbol,
            current=current,
            change=float(data.get("d") or 0),
            percent_change=float(data.get("dp") or 0),
            high=data.get("h"),
            low=data.get("l"),
            open=data.get("o"),
            previous_close=data.get("pc"),
            timestamp=ts or unix_now(),
        )
