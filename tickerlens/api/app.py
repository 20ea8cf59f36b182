"""
TICKERLENS - FastAPI Application
HTTP surface for the dashboard: price ingestion, history loads, indicator
series and agent tool calls against one session.
"""
import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from tickerlens.agent.tools import run_tool
from tickerlens.config.settings import AppSettings, load_settings
from tickerlens.data.adapters.base import HistoryProvider, QuoteProvider
from tickerlens.data.adapters.finnhub_adapter import FinnhubQuoteAdapter
from tickerlens.data.adapters.yahoo_adapter import YahooHistoricalAdapter
from tickerlens.data.feed import QuoteFeed
from tickerlens.data.models import PricePoint
from tickerlens.indicators.catalog import describe_catalog
from tickerlens.session.dashboard import DashboardSession, build_session
from tickerlens.utils.errors import (
    EmptyHistoryError, HistoricalDataError, MarketDataError, TickerLensError, ToolArgumentError,
)
from tickerlens.utils.helpers import utc_timestamp
from tickerlens.utils.logger import get_logger, setup_logging

logger = get_logger("api")


# ─── Request Models ─────────────────────────────────────────────

class SymbolRequest(BaseModel):
    symbol: str = Field(min_length=1)


class TickRequest(BaseModel):
    time: int
    value: float


class HistoryRequest(BaseModel):
    symbol: str = Field(min_length=1)
    start_date: date
    end_date: date


def create_app(
    settings: Optional[AppSettings] = None,
    quote_provider: Optional[QuoteProvider] = None,
    history_provider: Optional[HistoryProvider] = None,
) -> FastAPI:
    """Build the application. Collaborators are injected, never global."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - startup and shutdown."""
        resolved = settings or load_settings()
        setup_logging(resolved)

        app.state.settings = resolved
        app.state.session = build_session(resolved)
        app.state.quotes = quote_provider or FinnhubQuoteAdapter(resolved.data)
        app.state.history = history_provider or YahooHistoricalAdapter(resolved.data)
        app.state.feed = QuoteFeed(app.state.quotes, app.state.session,
                                   resolved.stream.feed_interval_seconds)
        app.state.instance_id = str(uuid.uuid4())[:8]
        app.state.started_at = utc_timestamp()

        logger.info("tickerlens_starting", version=resolved.version,
                    instance=app.state.instance_id, symbol=app.state.session.symbol)
        if resolved.stream.stream_on_startup:
            app.state.feed.start()

        yield

        logger.info("tickerlens_shutting_down")
        await app.state.feed.stop()
        await app.state.quotes.disconnect()
        await app.state.history.disconnect()

    app = FastAPI(
        title="TICKERLENS",
        description="Live price charting with streaming technical indicators",
        version="0.1.0",
        lifespan=lifespan,
    )

    # ─── Health ─────────────────────────────────────────────────

    @app.get("/healthz", tags=["System"])
    async def health_check(request: Request):
        state = request.app.state
        return JSONResponse(
            status_code=200,
            content={
                "status": "healthy",
                "instance": state.instance_id,
                "uptime_since": state.started_at,
                "streaming": state.feed.is_running,
                "feed": state.feed.stats,
                "timestamp": utc_timestamp(),
            },
        )

    # ─── Indicators ─────────────────────────────────────────────

    @app.get("/api/v1/indicators/catalog", tags=["Indicators"])
    async def indicator_catalog():
        """Every indicator kind with its defaults and description."""
        return {"indicators": describe_catalog()}

    @app.get("/api/v1/indicators", tags=["Indicators"])
    async def list_instances(request: Request):
        session: DashboardSession = request.app.state.session
        return {"indicators": [ind.model_dump(mode="json") for ind in session.instances]}

    @app.get("/api/v1/series", tags=["Indicators"])
    async def get_series(request: Request):
        """Price points plus every computed indicator series."""
        session: DashboardSession = request.app.state.session
        return {
            "session": session.summary(),
            "prices": [p.to_dict() for p in session.points],
            "series": [s.to_dict() for s in session.series],
        }

    # ─── Price Data ─────────────────────────────────────────────

    @app.post("/api/v1/symbol", tags=["Data"])
    async def switch_symbol(body: SymbolRequest, request: Request):
        session: DashboardSession = request.app.state.session
        changed = session.switch_symbol(body.symbol.strip())
        return {"changed": changed, "session": session.summary()}

    @app.post("/api/v1/ticks", tags=["Data"])
    async def ingest_ticks(ticks: List[TickRequest], request: Request):
        """Push live samples for the active symbol, in delivery order."""
        session: DashboardSession = request.app.state.session
        accepted = sum(
            session.ingest_point(PricePoint(time=t.time, value=t.value)) for t in ticks
        )
        return {"received": len(ticks), "accepted": accepted, "points": len(session.buffer)}

    @app.post("/api/v1/history", tags=["Data"])
    async def load_history(body: HistoryRequest, request: Request):
        """Replace the buffer with daily closes for a date range."""
        state = request.app.state
        try:
            history = await state.history.get_history(body.symbol, body.start_date, body.end_date)
        except EmptyHistoryError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except HistoricalDataError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except MarketDataError as e:
            raise HTTPException(status_code=502, detail=str(e))
        stored = state.session.load_history(
            history, (body.start_date.isoformat(), body.end_date.isoformat())
        )
        return {"stored": stored, "quote": history.quote.model_dump(), "session": state.session.summary()}

    @app.post("/api/v1/stream/{action}", tags=["Data"])
    async def control_stream(action: str, request: Request):
        feed: QuoteFeed = request.app.state.feed
        if action == "start":
            feed.start()
        elif action == "stop":
            await feed.stop()
        else:
            raise HTTPException(status_code=404, detail=f"Unknown stream action: {action}")
        return {"streaming": feed.is_running, "stats": feed.stats}

    # ─── Agent Tools ────────────────────────────────────────────

    @app.post("/api/v1/tools/{name}", tags=["Agent"])
    async def call_tool(name: str, request: Request, arguments: Optional[Dict[str, Any]] = None):
        """Execute one assistant tool call and return its confirmation text."""
        session: DashboardSession = request.app.state.session
        try:
            message = run_tool(name, arguments, session)
        except ToolArgumentError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except TickerLensError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error("tool_execution_error", tool=name, error=str(e))
            raise HTTPException(status_code=500, detail=str(e))
        return {"tool": name, "result": message}

    @app.get("/api/v1/sources", tags=["Agent"])
    async def useful_sources(request: Request):
        session: DashboardSession = request.app.state.session
        return {"sources": [s.model_dump() for s in session.useful_sources]}

    return app
