"""
TICKERLENS - Agent Tools
Typed tool calls the chat assistant may issue against the dashboard session,
and their execution. Every tool returns a human-readable confirmation for
the assistant to relay; targets that match nothing produce a message, not
an exception.
"""
import json
from typing import Annotated, Any, Callable, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from tickerlens.data.models import IndicatorInstance, IndicatorKind, UsefulSource
from tickerlens.indicators.catalog import (
    create_instance, get_indicator_spec, resolve_parameters, validate_parameters,
)
from tickerlens.session.dashboard import DashboardSession, MODE_HISTORICAL
from tickerlens.utils.errors import ToolArgumentError
from tickerlens.utils.helpers import unix_now
from tickerlens.utils.logger import get_logger

logger = get_logger("agent_tools")

PositivePeriod = Annotated[int, Field(gt=0)]


class _ToolCall(BaseModel):
    model_config = {"extra": "ignore"}


class AddIndicatorCall(_ToolCall):
    tool: Literal["add_indicator"] = "add_indicator"
    indicator_type: IndicatorKind
    period: Optional[PositivePeriod] = None
    fast_period: Optional[PositivePeriod] = None
    slow_period: Optional[PositivePeriod] = None
    signal_period: Optional[PositivePeriod] = None
    std_dev: Optional[Annotated[float, Field(ge=0)]] = None
    k_period: Optional[PositivePeriod] = None
    d_period: Optional[PositivePeriod] = None

    @field_validator("indicator_type", mode="before")
    @classmethod
    def _lower(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    def overrides(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"tool", "indicator_type"}, exclude_none=True)


class _TargetedCall(_ToolCall):
    indicator_name: Annotated[str, Field(min_length=1)]

    @field_validator("indicator_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class RemoveIndicatorCall(_TargetedCall):
    tool: Literal["remove_indicator"] = "remove_indicator"


class ModifyIndicatorCall(_TargetedCall):
    tool: Literal["modify_indicator"] = "modify_indicator"
    new_period: Optional[PositivePeriod] = None
    parameters: Optional[Dict[str, Union[int, float]]] = None
    visible: Optional[bool] = None


class ListIndicatorsCall(_ToolCall):
    tool: Literal["list_indicators"] = "list_indicators"


class GetMarketDataCall(_ToolCall):
    tool: Literal["get_market_data"] = "get_market_data"


class AnalyzeChartCall(_ToolCall):
    tool: Literal["analyze_chart"] = "analyze_chart"
    focus: Optional[str] = None


class AddUsefulSourceCall(_ToolCall):
    tool: Literal["add_useful_source"] = "add_useful_source"
    title: Annotated[str, Field(min_length=1)]
    url: Annotated[str, Field(min_length=1)]
    snippet: Annotated[str, Field(min_length=1)]

    @field_validator("title", "url", "snippet", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


ToolCall = Annotated[
    Union[
        AddIndicatorCall,
        RemoveIndicatorCall,
        ModifyIndicatorCall,
        ListIndicatorsCall,
        GetMarketDataCall,
        AnalyzeChartCall,
        AddUsefulSourceCall,
    ],
    Field(discriminator="tool"),
]

_TOOL_CALL_ADAPTER: TypeAdapter = TypeAdapter(ToolCall)

TOOL_NAMES = (
    "add_indicator", "remove_indicator", "modify_indicator", "list_indicators",
    "get_market_data", "analyze_chart", "add_useful_source",
)


def parse_tool_call(name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolCall:
    """Validate raw JSON-shaped arguments into the matching tool variant."""
    if name not in TOOL_NAMES:
        raise ToolArgumentError(f"Unknown tool: {name}")
    payload = dict(arguments or {})
    payload["tool"] = name
    try:
        return _TOOL_CALL_ADAPTER.validate_python(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:]) or name}: {err['msg']}" for err in e.errors()
        )
        raise ToolArgumentError(f"Invalid arguments for {name}: {problems}") from e


# ─── Execution ──────────────────────────────────────────────────

def matches(instance: IndicatorInstance, query: str) -> bool:
    """Exact id, or case-insensitive substring of the display name or kind."""
    q = query.lower()
    return (
        instance.id == query
        or q in instance.display_name.lower()
        or q in instance.kind.value
    )


def _not_found(query: str) -> str:
    return f'No indicator found matching "{query}"'


def _add(call: AddIndicatorCall, session: DashboardSession) -> str:
    try:
        instance = create_instance(call.indicator_type, call.overrides())
    except ValueError as e:
        raise ToolArgumentError(f"Invalid parameters for {call.indicator_type.value}: {e}") from e
    session.set_indicators(session.instances + [instance])
    logger.info("indicator_added", id=instance.id, kind=instance.kind.value)
    return (f"Added {instance.display_name} indicator with parameters: "
            f"{json.dumps(instance.parameters)}")


def _remove(call: RemoveIndicatorCall, session: DashboardSession) -> str:
    current = session.instances
    kept = [ind for ind in current if not matches(ind, call.indicator_name)]
    removed = len(current) - len(kept)
    if removed == 0:
        return _not_found(call.indicator_name)

    session.set_indicators(kept)
    logger.info("indicators_removed", query=call.indicator_name, count=removed)
    return f'Removed {removed} indicator(s) matching "{call.indicator_name}"'


def _modify(call: ModifyIndicatorCall, session: DashboardSession) -> str:
    current = session.instances
    targets = [ind for ind in current if matches(ind, call.indicator_name)]
    if not targets:
        return _not_found(call.indicator_name)
    if call.new_period is None and not call.parameters and call.visible is None:
        return f'No changes requested for indicator(s) matching "{call.indicator_name}"'

    # validate every target before committing any of them
    updates: List[Dict[str, Any]] = []
    for ind in targets:
        params = dict(ind.parameters)
        if call.parameters:
            params.update(call.parameters)
        if call.new_period is not None:
            key = get_indicator_spec(ind.kind).primary_param
            if key is not None:
                params[key] = call.new_period
        try:
            updates.append(validate_parameters(ind.kind, resolve_parameters(ind.kind, params)))
        except ValueError as e:
            raise ToolArgumentError(f"Invalid parameters for {ind.display_name}: {e}") from e

    changes: List[str] = []
    for ind, params in zip(targets, updates):
        ind.parameters = params
        if call.visible is not None:
            ind.visible = call.visible
        changes.append(f"{ind.display_name} {json.dumps(ind.parameters)}"
                       + ("" if ind.visible else " (hidden)"))

    session.set_indicators(current)
    logger.info("indicators_modified", query=call.indicator_name, count=len(targets))
    return (f'Modified {len(targets)} indicator(s) matching "{call.indicator_name}": '
            + ", ".join(changes))


def _list(call: ListIndicatorsCall, session: DashboardSession) -> str:
    instances = session.instances
    if not instances:
        return "No indicators are currently active on the chart."
    lines = [
        f"{i}. {ind.display_name} [{ind.id}] - Parameters: {json.dumps(ind.parameters)}"
        f" - Visible: {ind.visible}"
        for i, ind in enumerate(instances, start=1)
    ]
    return "Active indicators:\n" + "\n".join(lines)


def _price_line(session: DashboardSession) -> str:
    quote = session.quote
    latest = session.buffer.latest
    if quote is None and latest is None:
        return "Price: N/A"
    price = quote.current if quote else latest.value
    line = f"Price: ${price:.2f}"
    if quote is not None:
        sign = "+" if quote.change >= 0 else "-"
        line += f"\n- Change: {sign}${abs(quote.change):.2f} ({quote.percent_change:.2f}%)"
    return line


def _market_data(call: GetMarketDataCall, session: DashboardSession) -> str:
    points = session.points
    if session.mode == MODE_HISTORICAL and session.history_range:
        span = f"Historical {session.history_range[0]} to {session.history_range[1]}"
    elif points:
        span = f"Last {round((unix_now() - points[0].time) / 60)} minutes"
    else:
        span = "N/A"
    return (f"Current Market Data for {session.symbol}:\n"
            f"- {_price_line(session)}\n"
            f"- Data Points: {len(points)} price points available\n"
            f"- Time Range: {span}")


def _analyze(call: AnalyzeChartCall, session: DashboardSession) -> str:
    parts = [f"Chart Analysis for {session.symbol}:", "", _price_line(session), ""]

    instances = session.instances
    if instances:
        parts.append(f"Active Indicators ({len(instances)}):")
        for s in session.series:
            reading = f"{s.latest.value:.2f}" if s.latest else "collecting data"
            parts.append(f"- {s.label}: {reading}")
        hidden = [ind.display_name for ind in instances if not ind.visible]
        if hidden:
            parts.append(f"Hidden: {', '.join(hidden)}")
        if not session.series:
            parts.append("- no indicator output yet")
    else:
        parts.append("No technical indicators are currently active. Consider adding "
                     "indicators like SMA, RSI, or MACD for better analysis.")

    if call.focus:
        parts.extend(["", f"Focus: {call.focus}"])
    return "\n".join(parts)


def _add_source(call: AddUsefulSourceCall, session: DashboardSession) -> str:
    session.useful_sources.append(UsefulSource(title=call.title, url=call.url, snippet=call.snippet))
    return f'Added "{call.title}" to Useful Sources'


_HANDLERS: Dict[type, Callable[[Any, DashboardSession], str]] = {
    AddIndicatorCall: _add,
    RemoveIndicatorCall: _remove,
    ModifyIndicatorCall: _modify,
    ListIndicatorsCall: _list,
    GetMarketDataCall: _market_data,
    AnalyzeChartCall: _analyze,
    AddUsefulSourceCall: _add_source,
}


def execute_tool(call: ToolCall, session: DashboardSession) -> str:
    """Apply a validated tool call to the session and describe the outcome."""
    return _HANDLERS[type(call)](call, session)


def run_tool(name: str, arguments: Optional[Mapping[str, Any]], session: DashboardSession) -> str:
    """Parse then execute; raises ToolArgumentError on bad arguments."""
    return execute_tool(parse_tool_call(name, arguments), session)
