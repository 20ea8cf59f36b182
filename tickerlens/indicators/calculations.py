"""
TICKERLENS - Indicator Calculations
Pure functions over an ordered close-price series.

Every calculator takes a sequence of PricePoint and returns new PricePoint
lists; inputs are never mutated. Output points carry the time of the input
point that closes their window, so series from different indicators line up
on a shared time axis. A series too short for the first window yields an
empty result, never an exception. Invalid parameters raise ValueError.
"""
import math
import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import List, Sequence

from tickerlens.data.models import PricePoint


@dataclass
class BollingerBandsResult:
    upper: List[PricePoint] = field(default_factory=list)
    middle: List[PricePoint] = field(default_factory=list)
    lower: List[PricePoint] = field(default_factory=list)


@dataclass
class MACDResult:
    macd: List[PricePoint] = field(default_factory=list)
    signal: List[PricePoint] = field(default_factory=list)
    histogram: List[PricePoint] = field(default_factory=list)


@dataclass
class StochasticResult:
    k: List[PricePoint] = field(default_factory=list)
    d: List[PricePoint] = field(default_factory=list)


# ─── Helpers ────────────────────────────────────────────────────

def validate_window(value, name: str) -> int:
    """Validate a window length: a positive whole number."""
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not float(value).is_integer() or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def validate_multiplier(value, name: str) -> float:
    """Validate a band multiplier: a finite number >= 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(float(value)) or value < 0:
        raise ValueError(f"{name} must be a non-negative number, got {value!r}")
    return float(value)


def _series(data: Sequence[PricePoint]) -> pd.Series:
    """Close prices indexed by time."""
    return pd.Series(
        [p.value for p in data],
        index=pd.Index([p.time for p in data], dtype="int64", name="time"),
        dtype=float,
    )


def _points(series: pd.Series) -> List[PricePoint]:
    return [PricePoint(time=int(t), value=float(v)) for t, v in series.dropna().items()]


def _seeded_ewm(series: pd.Series, period: int, alpha: float) -> pd.Series:
    """Recursive average whose first value is the SMA of the first ``period`` values."""
    seeded = series.iloc[period - 1:].copy()
    seeded.iloc[0] = series.iloc[:period].mean()
    return seeded.ewm(alpha=alpha, adjust=False).mean()


def _ema(series: pd.Series, period: int) -> pd.Series:
    if len(series) < period:
        return series.iloc[0:0]
    return _seeded_ewm(series, period, alpha=2.0 / (period + 1))


# ─── Moving Averages ────────────────────────────────────────────

def calculate_sma(data: Sequence[PricePoint], period: int) -> List[PricePoint]:
    """Simple Moving Average of the trailing ``period`` values."""
    period = validate_window(period, "period")
    if len(data) < period:
        return []
    return _points(_series(data).rolling(window=period).mean())


def calculate_ema(data: Sequence[PricePoint], period: int) -> List[PricePoint]:
    """Exponential Moving Average, first point emitted at index ``period - 1``."""
    period = validate_window(period, "period")
    if len(data) < period:
        return []
    return _points(_ema(_series(data), period))


# ─── Momentum ───────────────────────────────────────────────────

def calculate_rsi(data: Sequence[PricePoint], period: int = 14) -> List[PricePoint]:
    """Relative Strength Index with Wilder smoothing.

    The averages are seeded with the simple mean of the first ``period``
    gains/losses, then smoothed as ``avg = (avg * (period - 1) + x) / period``.
    A window without losses reads 100.
    """
    period = validate_window(period, "period")
    if len(data) < period + 1:
        return []

    delta = _series(data).diff().iloc[1:]
    avg_gain = _seeded_ewm(delta.clip(lower=0), period, alpha=1.0 / period)
    avg_loss = _seeded_ewm((-delta).clip(lower=0), period, alpha=1.0 / period)

    rs = avg_gain / avg_loss.replace(0, np.nan)
    rsi = (100.0 - 100.0 / (1.0 + rs)).where(avg_loss != 0, 100.0)
    return _points(rsi)


def calculate_stochastic(
    data: Sequence[PricePoint], k_period: int = 14, d_period: int = 3
) -> StochasticResult:
    """Stochastic Oscillator on closes; %D is the SMA of %K.

    A flat window (max == min) reads 50.
    """
    k_period = validate_window(k_period, "k_period")
    d_period = validate_window(d_period, "d_period")
    if len(data) < k_period:
        return StochasticResult()

    close = _series(data)
    low_min = close.rolling(window=k_period).min()
    high_max = close.rolling(window=k_period).max()
    hl_range = high_max - low_min

    stoch_k = ((close - low_min) / hl_range.replace(0, np.nan) * 100.0).where(hl_range != 0, 50.0)
    stoch_k = stoch_k.dropna()
    stoch_d = stoch_k.rolling(window=d_period).mean()
    return StochasticResult(k=_points(stoch_k), d=_points(stoch_d))


def calculate_macd(
    data: Sequence[PricePoint],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult:
    """MACD line, signal line and histogram.

    The fast and slow EMAs start at different offsets; the line is their
    difference over the timestamps both carry, and the signal is the EMA of
    that aligned line. The histogram is returned for callers but the chart
    only renders the line and signal.
    """
    fast_period = validate_window(fast_period, "fast_period")
    slow_period = validate_window(slow_period, "slow_period")
    signal_period = validate_window(signal_period, "signal_period")
    if len(data) < max(fast_period, slow_period) + signal_period:
        return MACDResult()

    close = _series(data)
    macd_line = (_ema(close, fast_period) - _ema(close, slow_period)).dropna()
    signal_line = _ema(macd_line, signal_period)
    histogram = macd_line - signal_line
    return MACDResult(
        macd=_points(macd_line),
        signal=_points(signal_line),
        histogram=_points(histogram),
    )


# ─── Volatility ─────────────────────────────────────────────────

def calculate_bollinger_bands(
    data: Sequence[PricePoint], period: int = 20, std_dev: float = 2.0
) -> BollingerBandsResult:
    """SMA middle band with bands at +/- ``std_dev`` population deviations."""
    period = validate_window(period, "period")
    std_dev = validate_multiplier(std_dev, "std_dev")
    if len(data) < period:
        return BollingerBandsResult()

    rolling = _series(data).rolling(window=period)
    middle = rolling.mean()
    width = std_dev * rolling.std(ddof=0)
    return BollingerBandsResult(
        upper=_points(middle + width),
        middle=_points(middle),
        lower=_points(middle - width),
    )


def calculate_atr(data: Sequence[PricePoint], period: int = 14) -> List[PricePoint]:
    """Average True Range on closes only.

    True range is ``abs(p[t] - p[t-1])``; the ATR is its SMA over ``period``
    ranges, stamped with the later point of the last range.
    """
    period = validate_window(period, "period")
    if len(data) < period + 1:
        return []
    true_range = _series(data).diff().abs()
    return _points(true_range.rolling(window=period).mean())


# ─── Composite ──────────────────────────────────────────────────

def calculate_vwap(data: Sequence[PricePoint]) -> List[PricePoint]:
    """Running mean of price.

    Volume is not available on the close-only feed, so every sample carries
    equal weight.
    """
    if len(data) == 0:
        return []
    return _points(_series(data).expanding().mean())
