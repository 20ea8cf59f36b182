"""
TICKERLENS - Base Data Adapter Interfaces
Quote providers feed the live buffer; history providers bulk-load it.
"""
import aiohttp
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, Optional, Union

from tickerlens.config.settings import DataSourceSettings
from tickerlens.data.models import Quote, HistoricalSeries
from tickerlens.utils.logger import get_logger

logger = get_logger("data_adapter")

DateLike = Union[date, str]


class BaseDataAdapter(ABC):
    """Owns an aiohttp session against one market data source."""

    def __init__(self, source: str, settings: Optional[DataSourceSettings] = None):
        self.source = source
        self.settings = settings or DataSourceSettings()
        self._session: Optional[aiohttp.ClientSession] = None

    def _headers(self) -> Dict[str, str]:
        return {}

    async def connect(self) -> None:
        """Initialize connection / session."""
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout_seconds)
        self._session = aiohttp.ClientSession(headers=self._headers(), timeout=timeout)
        logger.info("adapter_connected", source=self.source)

    async def disconnect(self) -> None:
        """Clean up connection / session."""
        if self._session:
            await self._session.close()
            self._session = None
        logger.info("adapter_disconnected", source=self.source)

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None):
        """GET ``url`` and return ``(status, json_or_none)``."""
        if not self._session:
            await self.connect()
        async with self._session.get(url, params=params) as resp:
            if resp.status != 200:
                return resp.status, None
            return resp.status, await resp.json()


class QuoteProvider(BaseDataAdapter):
    @abstractmethod
    async def get_quote(self, symbol: str) -> Optional[Quote]:
        """Fetch the latest quote; ``None`` when unavailable."""
        pass


class HistoryProvider(BaseDataAdapter):
    @abstractmethod
    async def get_history(
        self, symbol: str, start_date: DateLike, end_date: DateLike
    ) -> HistoricalSeries:
        """Fetch daily closes for a date range.

        Raises HistoricalDataError when the range is invalid or empty.
        """
        pass
