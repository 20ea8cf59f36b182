"""
TICKERLENS - Unit Tests for Agent Tools
Parsing and execution of assistant tool calls against a session.
"""
import pytest

from tickerlens.agent.tools import (
    AddIndicatorCall,
    ModifyIndicatorCall,
    execute_tool,
    matches,
    parse_tool_call,
    run_tool,
)
from tickerlens.data.models import HistoricalSeries, IndicatorKind, Quote
from tickerlens.indicators.catalog import create_instance
from tickerlens.utils.errors import ToolArgumentError
from conftest import make_points


class TestParsing:
    def test_add_indicator_variant(self):
        call = parse_tool_call("add_indicator", {"indicator_type": "SMA", "period": 50})
        assert isinstance(call, AddIndicatorCall)
        assert call.indicator_type is IndicatorKind.SMA
        assert call.overrides() == {"period": 50}

    def test_unknown_tool(self):
        with pytest.raises(ToolArgumentError, match="Unknown tool: search_everything"):
            parse_tool_call("search_everything", {})

    def test_unknown_indicator_type(self):
        with pytest.raises(ToolArgumentError, match="add_indicator"):
            parse_tool_call("add_indicator", {"indicator_type": "ichimoku"})

    @pytest.mark.parametrize("period", [0, -5, "abc"])
    def test_invalid_period(self, period):
        with pytest.raises(ToolArgumentError):
            parse_tool_call("add_indicator", {"indicator_type": "rsi", "period": period})

    def test_missing_target(self):
        with pytest.raises(ToolArgumentError):
            parse_tool_call("remove_indicator", {})

    def test_extra_arguments_ignored(self):
        call = parse_tool_call("list_indicators", {"verbose": True})
        assert call.tool == "list_indicators"

    def test_tool_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_tool_call("modify_indicator", {"indicator_name": "   "})


class TestMatching:
    def test_exact_id(self):
        ind = create_instance("sma")
        assert matches(ind, ind.id)

    def test_display_name_substring_case_insensitive(self):
        ind = create_instance("bollinger")
        assert matches(ind, "bollinger")
        assert matches(ind, "BANDS")
        assert not matches(ind, "rsi")

    def test_kind(self):
        assert matches(create_instance("stochastic"), "stoch")


class TestAddRemove:
    def test_add_appends_with_defaults(self, session):
        message = run_tool("add_indicator", {"indicator_type": "macd", "fast_period": 8}, session)
        assert message.startswith("Added MACD indicator with parameters:")
        [ind] = session.instances
        assert ind.parameters == {"fast_period": 8, "slow_period": 26, "signal_period": 9}

    def test_add_recomputes_series(self, session, random_walk_points):
        session.buffer.replace(random_walk_points)
        run_tool("add_indicator", {"indicator_type": "sma"}, session)
        assert len(session.series) == 1
        assert session.series[0].points

    def test_remove_all_matches(self, session):
        session.set_indicators([create_instance("sma"), create_instance("sma"), create_instance("rsi")])
        message = run_tool("remove_indicator", {"indicator_name": "sma"}, session)
        assert message == 'Removed 2 indicator(s) matching "sma"'
        assert [ind.kind for ind in session.instances] == [IndicatorKind.RSI]

    def test_remove_not_found_leaves_list(self, session):
        session.set_indicators([create_instance("ema")])
        before = session.instances
        message = run_tool("remove_indicator", {"indicator_name": "vwap"}, session)
        assert message == 'No indicator found matching "vwap"'
        assert session.instances == before


class TestModify:
    def test_new_period_routes_to_primary_param(self, session):
        session.set_indicators([create_instance("macd"), create_instance("stochastic")])
        run_tool("modify_indicator", {"indicator_name": "macd", "new_period": 30}, session)
        run_tool("modify_indicator", {"indicator_name": "stochastic", "new_period": 21}, session)
        macd, stoch = session.instances
        assert macd.parameters["slow_period"] == 30
        assert stoch.parameters["k_period"] == 21

    def test_keeps_id_and_position(self, session):
        first, second = create_instance("sma"), create_instance("ema")
        session.set_indicators([first, second])
        run_tool("modify_indicator", {"indicator_name": second.id, "new_period": 5}, session)
        assert [ind.id for ind in session.instances] == [first.id, second.id]
        assert session.instances[1].parameters == {"period": 5}

    def test_parameters_and_visibility(self, session):
        session.set_indicators([create_instance("bollinger")])
        message = run_tool(
            "modify_indicator",
            {"indicator_name": "bollinger", "parameters": {"stdDev": 3}, "visible": False},
            session,
        )
        [ind] = session.instances
        assert ind.parameters["std_dev"] == 3
        assert ind.visible is False
        assert "(hidden)" in message

    @pytest.mark.parametrize("parameters", [{"period": -3}, {"period": 0}, {"period": 2.5}])
    def test_invalid_parameters_rejected(self, session, random_walk_points, parameters):
        session.buffer.replace(random_walk_points)
        run_tool("add_indicator", {"indicator_type": "sma", "period": 5}, session)
        assert len(session.series) == 1

        with pytest.raises(ToolArgumentError, match="Invalid parameters for SMA"):
            run_tool("modify_indicator", {"indicator_name": "sma", "parameters": parameters}, session)
        assert session.instances[0].parameters == {"period": 5}
        assert len(session.series) == 1

    def test_negative_std_dev_rejected(self, session):
        session.set_indicators([create_instance("bollinger")])
        with pytest.raises(ToolArgumentError, match="std_dev"):
            run_tool("modify_indicator",
                     {"indicator_name": "bollinger", "parameters": {"std_dev": -1}}, session)
        assert session.instances[0].parameters["std_dev"] == 2.0

    def test_failed_modify_leaves_all_matches(self, session):
        session.set_indicators([create_instance("sma"), create_instance("sma", {"period": 9})])
        with pytest.raises(ToolArgumentError):
            run_tool("modify_indicator",
                     {"indicator_name": "sma", "parameters": {"period": -1}, "visible": False}, session)
        assert [ind.parameters["period"] for ind in session.instances] == [20, 9]
        assert all(ind.visible for ind in session.instances)

    def test_no_changes_requested(self, session):
        session.set_indicators([create_instance("rsi")])
        message = execute_tool(ModifyIndicatorCall(indicator_name="rsi"), session)
        assert message.startswith("No changes requested")

    def test_not_found(self, session):
        message = run_tool("modify_indicator", {"indicator_name": "atr", "new_period": 3}, session)
        assert message == 'No indicator found matching "atr"'
        assert session.instances == []


class TestReadOnlyTools:
    def test_list_empty(self, session):
        assert run_tool("list_indicators", {}, session) == "No indicators are currently active on the chart."

    def test_list_entries(self, session):
        ind = create_instance("rsi")
        session.set_indicators([ind])
        message = run_tool("list_indicators", None, session)
        assert message.startswith("Active indicators:")
        assert f"1. RSI [{ind.id}]" in message

    def test_market_data_without_prices(self, session):
        message = run_tool("get_market_data", {}, session)
        assert "Current Market Data for AAPL" in message
        assert "Price: N/A" in message
        assert "0 price points" in message

    def test_market_data_historical(self, session):
        points = make_points([10.0, 11.0, 12.0], start=1_704_067_200, step=86_400)
        quote = Quote(symbol="MSFT", current=12.0, change=1.0, percent_change=9.09, timestamp=points[-1].time)
        session.load_history(HistoricalSeries(symbol="MSFT", quote=quote, points=points),
                             ("2024-01-01", "2024-01-04"))
        message = run_tool("get_market_data", {}, session)
        assert "Price: $12.00" in message
        assert "+$1.00 (9.09%)" in message
        assert "Historical 2024-01-01 to 2024-01-04" in message

    def test_analyze_chart(self, session, random_walk_points):
        session.buffer.replace(random_walk_points)
        session.set_indicators([create_instance("rsi"), create_instance("sma", visible=False)])
        message = run_tool("analyze_chart", {"focus": "momentum"}, session)
        assert message.startswith("Chart Analysis for AAPL:")
        assert "RSI (14):" in message
        assert "Hidden: SMA" in message
        assert message.endswith("Focus: momentum")

    def test_analyze_without_indicators(self, session):
        assert "No technical indicators" in run_tool("analyze_chart", {}, session)

    def test_add_useful_source(self, session):
        message = run_tool(
            "add_useful_source",
            {"title": "RSI primer", "url": "https://example.com/rsi", "snippet": "Wilder's RSI"},
            session,
        )
        assert message == 'Added "RSI primer" to Useful Sources'
        assert session.useful_sources[0].url == "https://example.com/rsi"
