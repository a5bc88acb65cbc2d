"""
Rank Board Service

Periodically refreshes every tracked asset through the aggregator, ranks the
results by FDV and publishes the rendered board. Readers (API handlers) get
the last published RankBoardSnapshot; the refresh loop is the only writer.

Publishing replaces the whole snapshot under the writer side of an
aiorwlock.RWLock, so a reader sees either the previous board or the new one.
Batches never overlap: the loop awaits each refresh before sleeping.
"""

import asyncio
import contextlib
from typing import Dict, List, Optional, Sequence

import aiorwlock

from core.fanout import fetch_batch, rank_key
from core.logging import get_logger
from core.schemas import Asset, Quote, RankBoardSnapshot
from core.utils.time import current_utc_datetime
from services.formatting import render_rank_board


class RankBoard:
    """
    Background service publishing the ranked, rendered board.

    Attributes:
        aggregator: MarketAggregator (or anything exposing fetch_coin_data)
        assets: Tracked assets
        refresh_interval: Seconds between refreshes
    """

    def __init__(self, aggregator, assets: Sequence[Asset], refresh_interval: float = 300, clock=current_utc_datetime) -> None:
        self._logger = get_logger(__name__)
        self.aggregator = aggregator
        self.assets: List[Asset] = list(assets)
        self._assets_by_id: Dict[str, Asset] = {asset.id: asset for asset in self.assets}
        self.refresh_interval = refresh_interval
        self.clock = clock
        self._snapshot = RankBoardSnapshot()
        self._lock = aiorwlock.RWLock()
        self._running = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    # ============================================
    # Lifecycle
    # ============================================

    async def start(self) -> None:
        if self._running.is_set():
            return
        self._running.set()
        self._logger.info(f"Starting rank board (every {self.refresh_interval}s, {len(self.assets)} asset(s))")
        self._task = asyncio.create_task(self._run(), name="rank_board")

    async def stop(self) -> None:
        if not self._running.is_set():
            return
        self._logger.info("Stopping rank board...")
        self._running.clear()
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        while self._running.is_set():
            cycle_start = asyncio.get_running_loop().time()
            try:
                await self.refresh()
            except Exception as e:
                # Keep serving the previous board
                self._logger.error(f"Rank board refresh failed: {e}")
            elapsed = asyncio.get_running_loop().time() - cycle_start
            self._logger.info(f"Rank board cycle finished in {elapsed:.1f}s; sleeping {self.refresh_interval}s")
            await asyncio.sleep(self.refresh_interval)

    # ============================================
    # Refresh / Read
    # ============================================

    async def refresh(self) -> RankBoardSnapshot:
        """Run one batch, rank, render and publish it."""
        results = await fetch_batch(self.aggregator, self.assets, sort_key=rank_key)
        now = self.clock()
        snapshot = RankBoardSnapshot(
            results=results,
            text=render_rank_board(results, now),
            updated_at=now,
        )

        async with self._lock.writer_lock:
            self._snapshot = snapshot

        self._logger.info(f"Rank board updated at {now.isoformat()}")
        return snapshot

    async def latest(self) -> RankBoardSnapshot:
        """Last published board (empty before the first refresh)."""
        async with self._lock.reader_lock:
            return self._snapshot

    async def fetch_one(self, asset_id: str) -> Quote:
        """
        Fetch a single tracked asset on demand.

        Raises:
            KeyError: asset_id is not tracked
            AggregationError: every source failed
        """
        asset = self._assets_by_id[asset_id]
        return await self.aggregator.fetch_coin_data(asset)

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return self._assets_by_id.get(asset_id)
