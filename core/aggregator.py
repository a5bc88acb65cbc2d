"""
Market Aggregator - Primary Source, Fallback Chain, Supply Cache

For one asset the aggregator runs a small state machine:

    TryPrimary ──success──> Done (supply cache overwritten)
        │
      failure
        ▼
    TryFallback[0] ──success──> Done (composed from cached supply)
        │ ...
    TryFallback[n-1]
        │
      exhausted
        ▼
    Failed (AllSourcesFailedError | NoSupportedSourceError)

Exchanges give price and 24h change but no supply figures, so market cap, FDV
and volume are "borrowed" from the last successful primary fetch, each part
decaying on its own TTL.

The aggregator keeps no per-call state of its own; it is safe to run
fetch_coin_data for different assets concurrently.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from core.errors import (
    AllSourcesFailedError,
    MarketDataError,
    NoSupportedSourceError,
    ProviderError,
    SymbolNotSupportedError,
    UnexpectedProviderError,
)
from core.logging import get_logger
from core.provider_chain import ProviderChain
from core.schemas import Asset, Quote, SupplySnapshot
from core.symbols import SymbolTable
from core.utils.time import current_utc_datetime
from storage.supply_cache import SupplyCache


logger = get_logger(__name__)


def compose_quote(
    price: float,
    change_pct_24h: float,
    snapshot: Optional[SupplySnapshot],
    now: datetime,
    supply_ttl: timedelta,
    volume_ttl: timedelta,
    source: str = ""
) -> Quote:
    """
    Build a Quote from a fallback price and the cached supply snapshot.

    - market cap = price × circulating supply, if supply-valid and circulating > 0
    - FDV = price × full supply, if supply-valid and full supply > 0
    - volume = cached volume, if volume-valid
    - anything else (including no snapshot) is 0.0

    Pure function of its inputs.

    Example:
        >>> snap = SupplySnapshot(circulating_supply=500_000, updated_at=now)
        >>> compose_quote(0.05, -3.2, snap, now, timedelta(hours=24), timedelta(minutes=30)).market_cap_usd
        25000.0
    """
    market_cap = 0.0
    fdv = 0.0
    volume = 0.0

    if snapshot is not None:
        if snapshot.supply_valid(now, supply_ttl):
            if snapshot.circulating_supply > 0:
                market_cap = price * snapshot.circulating_supply
            if snapshot.full_supply > 0:
                fdv = price * snapshot.full_supply
        if snapshot.volume_valid(now, volume_ttl):
            volume = snapshot.volume_usd_24h

    return Quote(
        price=price,
        change_pct_24h=change_pct_24h,
        market_cap_usd=market_cap,
        fdv_usd=fdv,
        volume_usd_24h=volume,
        source=source,
    )


class MarketAggregator:
    """
    Resolves a Quote per asset from CoinGecko or the fallback exchanges.

    Attributes:
        primary: Primary source exposing `fetch_coin_data(coin_id) -> Quote`
        chain: Fallback providers, tried in order
        symbols: Exchange symbol table
        cache: Supply cache (written from primary successes only)
        clock: Returns the current UTC time

    Example:
        >>> aggregator = MarketAggregator(CoinGeckoClient(), ProviderChain.from_names(), SymbolTable(), SupplyCache())
        >>> quote = await aggregator.fetch_coin_data(Asset(id="scroll", display_name="Scroll"))
    """

    def __init__(
        self,
        primary,
        chain: ProviderChain,
        symbols: SymbolTable,
        cache: SupplyCache,
        clock: Callable[[], datetime] = current_utc_datetime
    ):
        self.primary = primary
        self.chain = chain
        self.symbols = symbols
        self.cache = cache
        self.clock = clock

    async def fetch_coin_data(self, asset: Asset) -> Quote:
        """
        Fetch a quote for one asset.

        Raises:
            AllSourcesFailedError: Primary and every attempted fallback failed
            NoSupportedSourceError: Primary failed and no fallback could be tried
        """
        try:
            quote = await self.primary.fetch_coin_data(asset.id)
        except MarketDataError as e:
            logger.warning(f"[{asset.id}] source=coingecko status=failed error={e}, trying exchanges")
        except Exception as e:
            logger.error(
                f"[{asset.id}] source=coingecko status=unexpected error={type(e).__name__}: {e}, trying exchanges"
            )
        else:
            await self._update_supply_cache(asset.id, quote)
            logger.info(f"[{asset.id}] source=coingecko status=success")
            return quote

        try:
            quote = await self._fetch_from_fallbacks(asset)
        except MarketDataError as e:
            logger.error(f"[{asset.id}] source=all status=failed error={e}")
            raise

        logger.info(f"[{asset.id}] source={quote.source} status=success")
        return quote

    # ============================================
    # Primary Path
    # ============================================

    async def _update_supply_cache(self, asset_id: str, quote: Quote) -> None:
        snapshot = SupplySnapshot.from_quote(quote, self.clock())
        await self.cache.put(asset_id, snapshot)
        logger.info(
            f"[{asset_id}] cache_update circulating={snapshot.circulating_supply:.2f} "
            f"full={snapshot.full_supply:.2f} volume={snapshot.volume_usd_24h:.2f}"
        )

    # ============================================
    # Fallback Path
    # ============================================

    async def _fetch_from_fallbacks(self, asset: Asset) -> Quote:
        symbol_set = self.symbols.get(asset.id)
        last_error: Optional[ProviderError] = None

        for provider in self.chain:
            symbol = symbol_set.for_provider(provider.name)
            if not symbol:
                logger.debug(f"[{asset.id}] provider={provider.name} status=no_symbol")
                continue

            try:
                price, change_pct = await provider.get_price_and_change(symbol)
            except SymbolNotSupportedError:
                logger.debug(f"[{asset.id}] provider={provider.name} symbol={symbol} status=not_supported")
                continue
            except ProviderError as e:
                logger.warning(f"[{asset.id}] provider={provider.name} symbol={symbol} status={e.kind} error={e}")
                last_error = e
                continue
            except Exception as e:
                last_error = UnexpectedProviderError.wrap(provider.name, symbol, e)
                logger.error(f"[{asset.id}] provider={provider.name} symbol={symbol} status=unexpected error={last_error}")
                continue

            logger.info(
                f"[{asset.id}] provider={provider.name} symbol={symbol} "
                f"price={price:.4f} change={change_pct:.2f}%"
            )
            return await self.compose(asset.id, price, change_pct, provider.name)

        if last_error is not None:
            raise AllSourcesFailedError(asset.id, last_error) from last_error
        raise NoSupportedSourceError(asset.id)

    async def compose(self, asset_id: str, price: float, change_pct_24h: float, source: str = "") -> Quote:
        """Compose a fallback quote with this asset's cached supply snapshot."""
        snapshot = await self.cache.get(asset_id)
        now = self.clock()
        quote = compose_quote(
            price,
            change_pct_24h,
            snapshot,
            now,
            self.cache.supply_ttl,
            self.cache.volume_ttl,
            source,
        )

        if snapshot is None:
            logger.info(f"[{asset_id}] cache_miss: no cached supply data")
            return quote

        if snapshot.supply_valid(now, self.cache.supply_ttl):
            logger.info(f"[{asset_id}] cache_hit supply: mc={quote.market_cap_usd:.2f} fdv={quote.fdv_usd:.2f}")
        else:
            logger.info(f"[{asset_id}] cache_expired supply")

        if snapshot.volume_valid(now, self.cache.volume_ttl):
            logger.info(f"[{asset_id}] cache_hit volume: {quote.volume_usd_24h:.2f}")
        else:
            logger.info(f"[{asset_id}] cache_expired volume")

        return quote
