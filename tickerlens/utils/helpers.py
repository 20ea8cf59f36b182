"""
TICKERLENS - Common Utility Functions
"""
from datetime import datetime, timezone
import time
import uuid


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> str:
    """Return current UTC timestamp as ISO string."""
    return utc_now().isoformat()


def unix_now() -> int:
    """Current time in whole unix seconds."""
    return int(time.time())


def pct_change(old_val: float, new_val: float) -> float:
    """Calculate percentage change between two values."""
    if old_val == 0:
        return 0.0
    return ((new_val - old_val) / abs(old_val)) * 100.0


def to_yahoo_symbol(symbol: str) -> str:
    """Map exchange-qualified crypto pairs to Yahoo tickers.

    BINANCE:BTCUSDT -> BTC-USD, COINBASE:ETHUSD -> ETH-USD, AAPL -> AAPL.
    """
    if ":" not in symbol:
        return symbol
    pair = symbol.split(":", 1)[1].upper()
    if pair.endswith("USDT"):
        return f"{pair[:-4]}-USD"
    if pair.endswith("USD"):
        return f"{pair[:-3]}-USD"
    return symbol


def new_id(prefix: str) -> str:
    """Short unique identifier, e.g. ``sma_3f9a1c2b``."""
    return f"{prefix}_{uuid.uuid4().hex[:8]}"
