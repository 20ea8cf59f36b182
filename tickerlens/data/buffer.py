"""
TICKERLENS - Streaming Price Buffer
Canonical, de-duplicated, time-ordered price history for the active symbol.
"""
import math
from collections import deque
from typing import Deque, Iterable, Iterator, Optional, Tuple

from tickerlens.data.models import PricePoint
from tickerlens.utils.logger import get_logger

logger = get_logger("price_buffer")

DEFAULT_RETENTION_SECONDS = 3600
DEFAULT_MIN_DELTA = 0.01
# float subtraction can round a one-cent move just below 0.01 by a few ulps
_DELTA_ULPS = 4


class StreamingBuffer:
    """
    Live price series with append-time filtering.

    - Samples at or before the last stored time are dropped.
    - Samples within ``min_delta`` of the last stored value are dropped.
    - After an accepted append, points older than ``retention_seconds``
      relative to the newest point are trimmed from the front.

    Rejections are silent; ``append`` returns whether the point was kept.
    """

    def __init__(
        self,
        retention_seconds: int = DEFAULT_RETENTION_SECONDS,
        min_delta: float = DEFAULT_MIN_DELTA,
    ):
        if retention_seconds < 0:
            raise ValueError("retention_seconds must be >= 0")
        if min_delta < 0:
            raise ValueError("min_delta must be >= 0")
        self.retention_seconds = retention_seconds
        self.min_delta = min_delta
        self._points: Deque[PricePoint] = deque()

    def reset(self) -> None:
        """Drop every stored point."""
        self._points.clear()

    def append(self, point: PricePoint) -> bool:
        last = self.latest
        if last is not None:
            if point.time <= last.time:
                logger.debug("tick_rejected_stale", time=point.time, last_time=last.time)
                return False
            if self._below_min_delta(point.value, last.value):
                logger.debug("tick_rejected_delta", value=point.value, last_value=last.value)
                return False

        self._points.append(point)
        self._trim(point.time - self.retention_seconds)
        return True

    def _below_min_delta(self, value: float, last_value: float) -> bool:
        diff = abs(value - last_value)
        if diff >= self.min_delta:
            return False
        rounding = _DELTA_ULPS * math.ulp(max(abs(value), abs(last_value)))
        return not math.isclose(diff, self.min_delta, rel_tol=0.0, abs_tol=rounding)

    def replace(self, points: Iterable[PricePoint]) -> int:
        """Bulk-load already-deduplicated history (e.g. daily bars).

        Bypasses the minimum-delta filter and the retention window but still
        drops samples that would break strict time ordering. Returns the
        number of points stored.
        """
        self.reset()
        for point in points:
            if self._points and point.time <= self._points[-1].time:
                continue
            self._points.append(point)
        return len(self._points)

    def _trim(self, cutoff: int) -> None:
        while self._points and self._points[0].time < cutoff:
            self._points.popleft()

    def snapshot(self) -> Tuple[PricePoint, ...]:
        """Immutable copy of the current contents."""
        return tuple(self._points)

    @property
    def latest(self) -> Optional[PricePoint]:
        return self._points[-1] if self._points else None

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[PricePoint]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return (f"StreamingBuffer(points={len(self._points)}, "
                f"retention={self.retention_seconds}s, min_delta={self.min_delta})")
