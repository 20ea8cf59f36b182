"""
TICKERLENS - Data Models
Canonical data structures shared by the buffer, calculators, processor and API.
"""
from dataclasses import dataclass
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Union
from enum import Enum

from tickerlens.utils.helpers import new_id, unix_now


class IndicatorKind(str, Enum):
    SMA = "sma"
    EMA = "ema"
    RSI = "rsi"
    BOLLINGER = "bollinger"
    MACD = "macd"
    VWAP = "vwap"
    ATR = "atr"
    STOCHASTIC = "stochastic"


@dataclass(frozen=True)
class PricePoint:
    """One sample of a scalar price series (close price)."""
    time: int  # unix seconds
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.time, "value": self.value}


@dataclass
class DerivedSeries:
    """Output of applying one indicator instance to the price buffer."""
    id: str
    label: str
    points: List[PricePoint]
    color: str
    stroke_width: int = 2

    @property
    def latest(self) -> Optional[PricePoint]:
        return self.points[-1] if self.points else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "color": self.color,
            "stroke_width": self.stroke_width,
            "points": [p.to_dict() for p in self.points],
        }


class IndicatorInstance(BaseModel):
    """A user (or agent) configured indicator on the chart."""
    id: str = ""
    kind: IndicatorKind
    display_name: str
    parameters: Dict[str, Union[int, float]] = Field(default_factory=dict)
    color: str
    visible: bool = True

    def model_post_init(self, __context: Any) -> None:
        if not self.id:
            self.id = new_id(self.kind.value)


class Quote(BaseModel):
    """Latest quote plus summary stats for a symbol."""
    symbol: str
    current: float
    change: float = 0.0
    percent_change: float = 0.0
    high: Optional[float] = None
    low: Optional[float] = None
    open: Optional[float] = None
    previous_close: Optional[float] = None
    timestamp: int  # unix seconds

    def to_point(self) -> PricePoint:
        return PricePoint(time=self.timestamp, value=self.current)


class HistoricalSeries(BaseModel):
    """Daily closes for a date range plus the derived quote-like stats."""
    symbol: str
    quote: Quote
    points: List[PricePoint]


class UsefulSource(BaseModel):
    """A web resource the assistant saved for later reference."""
    id: str = Field(default_factory=lambda: new_id("source"))
    title: str
    url: str
    snippet: str
    added_at: int = Field(default_factory=unix_now)
