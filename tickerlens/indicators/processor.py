"""
TICKERLENS - Indicator Processor
Turns the price buffer and the active indicator instances into the list of
DerivedSeries handed to the chart renderer.
"""
from typing import Callable, Dict, List, Sequence

from tickerlens.data.models import DerivedSeries, IndicatorInstance, IndicatorKind, PricePoint
from tickerlens.indicators.catalog import resolve_parameters
from tickerlens.indicators.calculations import (
    calculate_sma,
    calculate_ema,
    calculate_rsi,
    calculate_bollinger_bands,
    calculate_macd,
    calculate_vwap,
    calculate_atr,
    calculate_stochastic,
)
from tickerlens.utils.logger import get_logger

logger = get_logger("indicator_processor")

MACD_SIGNAL_COLOR = "#2196F3"
STOCHASTIC_D_COLOR = "#E91E63"

SeriesBuilder = Callable[[Sequence[PricePoint], IndicatorInstance, Dict], List[DerivedSeries]]


def _windowed(calculator) -> SeriesBuilder:
    """Single-output kinds labelled ``<name> (<period>)``."""
    def build(points, ind, params):
        period = params["period"]
        return [DerivedSeries(
            id=ind.id,
            label=f"{ind.display_name} ({period})",
            points=calculator(points, period),
            color=ind.color,
        )]
    return build


def _bollinger(points, ind, params):
    bands = calculate_bollinger_bands(points, params["period"], params["std_dev"])
    return [
        DerivedSeries(f"{ind.id}_upper", f"{ind.display_name} Upper", bands.upper, ind.color, 1),
        DerivedSeries(f"{ind.id}_middle", f"{ind.display_name} Middle", bands.middle, ind.color, 2),
        DerivedSeries(f"{ind.id}_lower", f"{ind.display_name} Lower", bands.lower, ind.color, 1),
    ]


def _macd(points, ind, params):
    result = calculate_macd(
        points, params["fast_period"], params["slow_period"], params["signal_period"]
    )
    return [
        DerivedSeries(f"{ind.id}_macd", f"{ind.display_name} Line", result.macd, ind.color),
        DerivedSeries(f"{ind.id}_signal", f"{ind.display_name} Signal", result.signal, MACD_SIGNAL_COLOR),
    ]


def _vwap(points, ind, params):
    return [DerivedSeries(ind.id, ind.display_name, calculate_vwap(points), ind.color)]


def _stochastic(points, ind, params):
    result = calculate_stochastic(points, params["k_period"], params["d_period"])
    return [
        DerivedSeries(f"{ind.id}_k", f"{ind.display_name} %K", result.k, ind.color),
        DerivedSeries(f"{ind.id}_d", f"{ind.display_name} %D", result.d, STOCHASTIC_D_COLOR),
    ]


SERIES_BUILDERS: Dict[IndicatorKind, SeriesBuilder] = {
    IndicatorKind.SMA: _windowed(calculate_sma),
    IndicatorKind.EMA: _windowed(calculate_ema),
    IndicatorKind.RSI: _windowed(calculate_rsi),
    IndicatorKind.BOLLINGER: _bollinger,
    IndicatorKind.MACD: _macd,
    IndicatorKind.VWAP: _vwap,
    IndicatorKind.ATR: _windowed(calculate_atr),
    IndicatorKind.STOCHASTIC: _stochastic,
}


def process_indicators(
    points: Sequence[PricePoint], instances: Sequence[IndicatorInstance]
) -> List[DerivedSeries]:
    """
    Compute every visible indicator over the given price snapshot.

    Output follows the instance order; multi-output kinds emit their
    sub-series in a fixed order (Bollinger upper/middle/lower, MACD
    line/signal, Stochastic %K/%D). A failing indicator is logged and
    omitted without affecting the others.
    """
    series: List[DerivedSeries] = []

    for ind in instances:
        if not ind.visible:
            continue
        try:
            params = resolve_parameters(ind.kind, ind.parameters)
            series.extend(SERIES_BUILDERS[ind.kind](points, ind, params))
        except Exception as e:
            logger.error("indicator_compute_error", indicator=ind.id,
                         kind=getattr(ind.kind, "value", ind.kind), error=str(e))

    return series
