"""
Supply Cache

One SupplySnapshot per asset, written only after a successful primary-source
fetch and read when a fallback exchange supplies the price instead.

Concurrency:
    Guarded by an aiorwlock.RWLock: many concurrent readers (fallback
    compositions, API handlers), one writer at a time. A write replaces the
    asset's snapshot object whole; snapshots are immutable, so a reader never
    sees a partially updated entry.

Entries are never evicted: an old snapshot stays and is simply reported as
supply-expired / volume-expired by its validity checks.
"""

from datetime import timedelta
from typing import Dict, Optional

import aiorwlock

from core.schemas import SupplySnapshot


DEFAULT_SUPPLY_TTL = timedelta(hours=24)
DEFAULT_VOLUME_TTL = timedelta(minutes=30)


class SupplyCache:
    """
    Per-asset supply snapshots with independent supply/volume lifetimes.

    Attributes:
        supply_ttl: Lifetime of circulating/full supply
        volume_ttl: Lifetime of the cached 24h volume
    """

    def __init__(
        self,
        supply_ttl: timedelta = DEFAULT_SUPPLY_TTL,
        volume_ttl: timedelta = DEFAULT_VOLUME_TTL
    ):
        self.supply_ttl = supply_ttl
        self.volume_ttl = volume_ttl
        self._snapshots: Dict[str, SupplySnapshot] = {}
        self._lock = aiorwlock.RWLock()

    async def get(self, asset_id: str) -> Optional[SupplySnapshot]:
        async with self._lock.reader_lock:
            return self._snapshots.get(asset_id)

    async def put(self, asset_id: str, snapshot: SupplySnapshot) -> None:
        """Overwrite the asset's snapshot (last writer wins)."""
        async with self._lock.writer_lock:
            self._snapshots[asset_id] = snapshot

    def __len__(self) -> int:
        return len(self._snapshots)
