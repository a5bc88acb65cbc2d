"""
FastAPI Application - Rank Board Market Data API

Serves the ranked board of tracked coins (price, 24h change, volume, market
cap, FDV) and L1/L2 gas prices.

Quote Sources:
    - CoinGecko (primary)
    - Binance, OKX, Bybit, Bitget spot tickers (fallback, in configured order)

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from core.aggregator import MarketAggregator
from core.config import settings, validate_configuration
from core.errors import AggregationError
from core.logging import logger
from core.provider_chain import ProviderChain
from core.schemas import Quote, RankBoardSnapshot
from core.symbols import SymbolTable
from core.utils.time import current_utc_datetime
from exchanges.coingecko import CoinGeckoClient
from services.formatting import render_gas_prices
from services.gas_tracker import GasTracker
from services.rank_board import RankBoard
from storage.supply_cache import SupplyCache


# ============================================
# Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the services, start the board loop, tear everything down on exit."""
    # Startup
    logger.info("=== Application Starting ===")
    try:
        validate_configuration()

        primary = CoinGeckoClient(
            api_key=settings.coingecko_api_key,
            base_url=settings.coingecko_base_url,
            timeout=settings.request_timeout,
        )
        chain = ProviderChain.from_names(settings.fallback_providers_list, timeout=settings.request_timeout)
        cache = SupplyCache(settings.supply_ttl, settings.volume_ttl)
        aggregator = MarketAggregator(primary, chain, SymbolTable.from_file(settings.symbols_file), cache)

        app.state.primary = primary
        app.state.chain = chain
        app.state.cache = cache
        app.state.board = RankBoard(aggregator, settings.assets_list, settings.refresh_interval_seconds)
        app.state.gas = GasTracker(settings.gas_endpoints_dict, timeout=settings.request_timeout)

        await primary.initialize()
        await chain.initialize_all()
        await app.state.board.start()
        logger.info("=== Started Successfully ===")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    # Shutdown
    logger.info("=== Shutting Down ===")
    try:
        await app.state.board.stop()
    except Exception as e:
        logger.error(f"Error stopping RankBoard: {e}")
    try:
        await app.state.gas.shutdown()
        await app.state.primary.shutdown()
        await app.state.chain.shutdown_all()
        logger.info("=== Shutdown Complete ===")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title="Rank Board Market Data API",
    description=(
        "Ranked market data for tracked coins with exchange fallback.\n\n"
        "## REST Endpoints\n"
        "- `GET /rank` - Last published board (JSON, ranked by FDV)\n"
        "- `GET /rank/text` - Last published board (plain text)\n"
        "- `GET /coins/{asset_id}` - On-demand quote for one tracked coin\n"
        "- `GET /gas` - Current gas prices (gwei)\n"
        "- `GET /providers` - Primary source and fallback order\n"
        "- `GET /health` - Health check\n\n"
        "Market cap, FDV and volume on fallback quotes come from the last "
        "successful CoinGecko fetch and are reported as 0 once expired."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"]
)


# ============================================
# System Endpoints
# ============================================

@app.get("/", tags=["System"])
async def root(request: Request):
    """API information and tracked coins."""
    return {
        "name": "Rank Board Market Data API",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs",
        "assets": [asset.id for asset in request.app.state.board.assets]
    }


@app.get("/health", tags=["System"])
async def health_check(request: Request):
    """Health check - reports board freshness and cache fill."""
    snapshot = await request.app.state.board.latest()
    available = sum(1 for r in snapshot.results if r.available)
    return {
        "status": "healthy" if snapshot.updated_at and available == len(snapshot.results) else "degraded",
        "board_updated_at": snapshot.updated_at.isoformat() if snapshot.updated_at else None,
        "assets_available": available,
        "assets_total": len(request.app.state.board.assets),
        "cached_supply_entries": len(request.app.state.cache)
    }


@app.get("/providers", tags=["System"])
async def list_providers(request: Request):
    """Primary source and the fallback order."""
    return {
        "primary": request.app.state.primary.name,
        "fallbacks": request.app.state.chain.names()
    }


# ============================================
# Market Data Endpoints
# ============================================

@app.get("/rank", response_model=RankBoardSnapshot, tags=["Market Data"])
async def get_rank(request: Request):
    """Last published board, ranked by FDV (unavailable coins last)."""
    return await request.app.state.board.latest()


@app.get("/rank/text", response_class=PlainTextResponse, tags=["Market Data"])
async def get_rank_text(request: Request):
    """Last published board rendered as text."""
    snapshot = await request.app.state.board.latest()
    if snapshot.updated_at is None:
        raise HTTPException(status_code=503, detail="Rank board not ready yet")
    return snapshot.text


@app.get("/coins/{asset_id}", response_model=Quote, tags=["Market Data"])
async def get_coin(asset_id: str, request: Request):
    """
    Fetch one tracked coin now (primary source, then fallbacks).

    Returns 404 for an untracked coin and 503 when every source failed.
    """
    board = request.app.state.board
    if board.get_asset(asset_id) is None:
        raise HTTPException(status_code=404, detail=f"Asset '{asset_id}' is not tracked")

    try:
        return await board.fetch_one(asset_id)
    except AggregationError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/gas", tags=["Market Data"])
async def get_gas(request: Request):
    """Gas prices in gwei per network (null when the RPC call failed)."""
    prices = await request.app.state.gas.get_gas_prices()
    return {
        "prices": prices,
        "text": render_gas_prices(prices, current_utc_datetime())
    }
