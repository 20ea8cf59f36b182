"""
TICKERLENS - Quote Feed
Polls a quote provider for the session's active symbol and hands each quote
synchronously to the session.
"""
import asyncio
from typing import Optional

from tickerlens.data.adapters.base import QuoteProvider
from tickerlens.session.dashboard import DashboardSession
from tickerlens.utils.logger import get_logger

logger = get_logger("quote_feed")


class QuoteFeed:
    """Background polling loop; one quote per interval."""

    def __init__(self, provider: QuoteProvider, session: DashboardSession, interval_seconds: float = 1.0):
        self.provider = provider
        self.session = session
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self.stats = {"polls": 0, "accepted": 0, "rejected": 0, "errors": 0}

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> bool:
        """Fetch one quote for the active symbol. Returns whether it was stored."""
        symbol = self.session.symbol
        self.stats["polls"] += 1
        quote = await self.provider.get_quote(symbol)
        if quote is None:
            self.stats["errors"] += 1
            return False
        # The symbol may have switched while the request was in flight
        if symbol != self.session.symbol:
            logger.debug("stale_quote_dropped", symbol=symbol)
            return False
        accepted = self.session.ingest_quote(quote)
        self.stats["accepted" if accepted else "rejected"] += 1
        return accepted

    async def _run(self) -> None:
        logger.info("quote_feed_started", interval=self.interval_seconds)
        while True:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.stats["errors"] += 1
                logger.error("quote_feed_error", symbol=self.session.symbol, error=str(e))
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("quote_feed_stopped", **self.stats)
