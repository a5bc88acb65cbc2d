"""
Storage Package

In-memory caching for the aggregation layer.

Current implementation:
- SupplyCache: per-asset supply/volume snapshots borrowed by fallback quotes

Nothing here survives a restart; a cold cache simply means fallback quotes
carry price and change only until the primary source answers again.
"""

from storage.supply_cache import SupplyCache

__all__ = ["SupplyCache"]
