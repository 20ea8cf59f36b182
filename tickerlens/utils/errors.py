"""
TICKERLENS - Exception Hierarchy
"""


class TickerLensError(Exception):
    """Base class for all tickerlens errors."""


class UnknownIndicatorKind(TickerLensError, KeyError):
    """Lookup of an indicator kind outside the closed catalog."""

    def __str__(self) -> str:
        return f"Unknown indicator kind: {self.args[0]!r}" if self.args else "Unknown indicator kind"


class ToolArgumentError(TickerLensError, ValueError):
    """Agent tool call arguments failed validation."""


class MarketDataError(TickerLensError):
    """A market data provider returned an unusable response."""


class HistoricalDataError(MarketDataError):
    """A historical range could not be loaded."""


class EmptyHistoryError(HistoricalDataError):
    """The provider had no bars for the requested symbol and range."""
