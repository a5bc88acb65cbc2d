"""
Normalized Data Schemas

This module defines Pydantic models for the market-data aggregation layer.

Key Principle:
    Regardless of which source produced a price (CoinGecko, Binance, OKX, ...),
    it gets normalized into a Quote. Supply context that only the primary
    source can provide is kept in a SupplySnapshot and borrowed when a
    fallback exchange answers instead.

Models:
    - Asset: A tracked coin (id + display name)
    - ExchangeSymbolSet: Per-exchange trading-pair symbols for one asset
    - Quote: Price, 24h change and derived market figures (USD)
    - SupplySnapshot: Cached circulating/full supply and volume with a timestamp
    - AssetResult: Outcome of one asset fetch inside a batch
    - RankBoardSnapshot: The published, rendered batch
"""

from datetime import datetime, timedelta
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


# ============================================
# Asset Identity
# ============================================

class Asset(BaseModel):
    """
    A tracked asset.

    Attributes:
        id: Primary-source identifier (CoinGecko coin id, e.g. "scroll")
        display_name: Human readable name (e.g. "Scroll")
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Primary-source coin id", examples=["scroll", "starknet"])
    display_name: str = Field(..., description="Human readable name", examples=["Scroll"])


class ExchangeSymbolSet(BaseModel):
    """
    Trading-pair symbols of one asset on each fallback exchange.

    An empty string means the exchange does not list the asset.

    Example:
        >>> ExchangeSymbolSet(binance="SCRUSDT", okx="SCR-USDT").for_provider("okx")
        'SCR-USDT'
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    binance: str = ""
    okx: str = ""
    bybit: str = ""
    bitget: str = ""

    def for_provider(self, name: str) -> str:
        """Return the symbol for a provider name, or "" when unset or unknown."""
        if name not in type(self).model_fields:
            return ""
        return getattr(self, name) or ""


# ============================================
# Quote
# ============================================

class Quote(BaseModel):
    """
    Normalized market quote in USD.

    Derived figures (market cap, FDV, volume) are 0.0 when unknown, which the
    renderer shows as "N/A".

    Attributes:
        price: Last price in USD
        change_pct_24h: 24h price change in percent (e.g. -3.2 for -3.2%)
        market_cap_usd: Market capitalization
        fdv_usd: Fully diluted valuation
        volume_usd_24h: 24h trading volume
        source: Name of the source that produced the price
    """

    price: float
    change_pct_24h: float
    market_cap_usd: float = 0.0
    fdv_usd: float = 0.0
    volume_usd_24h: float = 0.0
    source: str = Field(default="", examples=["coingecko", "binance"])


# ============================================
# Supply Snapshot
# ============================================

class SupplySnapshot(BaseModel):
    """
    Cached supply context for one asset, taken from a primary-source quote.

    Supply and volume expire independently: a snapshot can be supply-valid
    and volume-expired at the same time. Validity uses a strict comparison,
    so a snapshot aged exactly one TTL is expired.
    """

    model_config = ConfigDict(frozen=True)

    circulating_supply: float = 0.0
    full_supply: float = 0.0
    volume_usd_24h: float = 0.0
    updated_at: datetime

    @classmethod
    def from_quote(cls, quote: Quote, fetched_at: datetime) -> "SupplySnapshot":
        """
        Derive supply figures from a primary-source quote.

        circulating = market_cap / price and full = fdv / price, only when the
        price is positive. A zero numerator leaves the figure at 0.
        """
        circulating = 0.0
        full = 0.0
        if quote.price > 0:
            if quote.market_cap_usd > 0:
                circulating = quote.market_cap_usd / quote.price
            if quote.fdv_usd > 0:
                full = quote.fdv_usd / quote.price

        return cls(
            circulating_supply=circulating,
            full_supply=full,
            volume_usd_24h=quote.volume_usd_24h,
            updated_at=fetched_at,
        )

    def supply_valid(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.updated_at < ttl

    def volume_valid(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.updated_at < ttl


# ============================================
# Batch Results
# ============================================

class AssetResult(BaseModel):
    """
    Outcome of fetching one asset in a batch.

    Exactly one of quote/error is set.
    """

    asset: Asset
    quote: Optional[Quote] = None
    error: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.quote is not None


class RankBoardSnapshot(BaseModel):
    """Published rank board: ranked results plus their rendered text."""

    model_config = ConfigDict(frozen=True)

    results: List[AssetResult] = Field(default_factory=list)
    text: str = ""
    updated_at: Optional[datetime] = None
