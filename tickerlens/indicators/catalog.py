"""
TICKERLENS - Indicator Catalog
Static registry of the available indicator kinds: display name, default
parameters, default color and description. Shared by the processor, the
agent tools and the editing surface.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from tickerlens.data.models import IndicatorKind, IndicatorInstance
from tickerlens.indicators.calculations import validate_multiplier, validate_window
from tickerlens.utils.errors import UnknownIndicatorKind

Number = Union[int, float]

# camelCase spellings sent by the browser client
PARAMETER_ALIASES: Dict[str, str] = {
    "fastPeriod": "fast_period",
    "slowPeriod": "slow_period",
    "signalPeriod": "signal_period",
    "stdDev": "std_dev",
    "stdDevMultiplier": "std_dev",
    "std_dev_multiplier": "std_dev",
    "kPeriod": "k_period",
    "dPeriod": "d_period",
}


@dataclass(frozen=True)
class IndicatorSpec:
    kind: IndicatorKind
    display_name: str
    default_params: Dict[str, Number]
    color: str
    description: str
    primary_param: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "display_name": self.display_name,
            "default_params": dict(self.default_params),
            "color": self.color,
            "description": self.description,
        }


INDICATOR_CATALOG: Dict[IndicatorKind, IndicatorSpec] = {
    spec.kind: spec for spec in (
        IndicatorSpec(
            IndicatorKind.SMA, "SMA", {"period": 20}, "#2196F3",
            "Simple Moving Average - Shows the average price over a specified period",
            primary_param="period",
        ),
        IndicatorSpec(
            IndicatorKind.EMA, "EMA", {"period": 12}, "#FF9800",
            "Exponential Moving Average - Gives more weight to recent prices",
            primary_param="period",
        ),
        IndicatorSpec(
            IndicatorKind.RSI, "RSI", {"period": 14}, "#9C27B0",
            "Relative Strength Index - Measures momentum on a scale of 0-100",
            primary_param="period",
        ),
        IndicatorSpec(
            IndicatorKind.BOLLINGER, "Bollinger Bands", {"period": 20, "std_dev": 2.0}, "#4CAF50",
            "Bollinger Bands - Shows volatility with upper and lower bands",
            primary_param="period",
        ),
        IndicatorSpec(
            IndicatorKind.MACD, "MACD",
            {"fast_period": 12, "slow_period": 26, "signal_period": 9}, "#F44336",
            "MACD - Shows relationship between two moving averages",
            primary_param="slow_period",
        ),
        IndicatorSpec(
            IndicatorKind.VWAP, "VWAP", {}, "#00BCD4",
            "Volume Weighted Average Price - Average price weighted by volume",
        ),
        IndicatorSpec(
            IndicatorKind.ATR, "ATR", {"period": 14}, "#FF5722",
            "Average True Range - Measures market volatility",
            primary_param="period",
        ),
        IndicatorSpec(
            IndicatorKind.STOCHASTIC, "Stochastic", {"k_period": 14, "d_period": 3}, "#673AB7",
            "Stochastic Oscillator - Compares closing price to price range",
            primary_param="k_period",
        ),
    )
}


def get_indicator_spec(kind: Union[IndicatorKind, str]) -> IndicatorSpec:
    """Look up a kind. Unknown kinds are a programming error."""
    try:
        return INDICATOR_CATALOG[IndicatorKind(kind)]
    except (ValueError, KeyError):
        raise UnknownIndicatorKind(kind) from None


def resolve_parameters(
    kind: Union[IndicatorKind, str], overrides: Optional[Mapping[str, Any]] = None
) -> Dict[str, Number]:
    """Merge parameter overrides over the kind's defaults.

    Aliases are normalized, unknown keys dropped and ``None`` treated as
    missing.
    """
    spec = get_indicator_spec(kind)
    params: Dict[str, Number] = dict(spec.default_params)
    for key, value in (overrides or {}).items():
        key = PARAMETER_ALIASES.get(key, key)
        if key in params and value is not None:
            params[key] = value
    return params


def validate_parameters(
    kind: Union[IndicatorKind, str], params: Mapping[str, Any]
) -> Dict[str, Number]:
    """Check resolved parameters against the kind's shape.

    ``std_dev`` must be a finite number >= 0; every other key is a window and
    must be a positive integer. Raises ValueError naming the first bad key.
    """
    spec = get_indicator_spec(kind)
    checked: Dict[str, Number] = {}
    for key, value in params.items():
        if key not in spec.default_params:
            raise ValueError(f"{spec.display_name} has no parameter {key!r}")
        if key == "std_dev":
            checked[key] = validate_multiplier(value, key)
        else:
            checked[key] = validate_window(value, key)
    return checked


def create_instance(
    kind: Union[IndicatorKind, str],
    overrides: Optional[Mapping[str, Any]] = None,
    color: Optional[str] = None,
    visible: bool = True,
) -> IndicatorInstance:
    """Build a fresh indicator instance from catalog defaults."""
    spec = get_indicator_spec(kind)
    return IndicatorInstance(
        kind=spec.kind,
        display_name=spec.display_name,
        parameters=validate_parameters(spec.kind, resolve_parameters(spec.kind, overrides)),
        color=color or spec.color,
        visible=visible,
    )


def describe_catalog() -> List[Dict[str, Any]]:
    """Serializable listing of every kind, in declaration order."""
    return [spec.to_dict() for spec in INDICATOR_CATALOG.values()]
