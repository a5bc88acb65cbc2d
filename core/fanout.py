"""
Concurrent Fan-out Driver

Runs one aggregator fetch per asset concurrently and joins them before
anything is published. Each asset's outcome is captured in an AssetResult;
a failed or slow asset never cancels or delays the collation of its siblings
beyond its own per-request timeouts.

Results are collated by a caller-supplied key (asset id by default), never
by completion order.
"""

import asyncio
from typing import Any, Callable, List, Optional, Sequence

from core.logging import get_logger
from core.schemas import Asset, AssetResult


logger = get_logger(__name__)


def rank_key(result: AssetResult) -> tuple:
    """
    Ranking used by the rank board.

    Available quotes first, by FDV descending; unavailable assets last.
    Ties are broken by asset id so the order is stable across runs.
    """
    if result.quote is None:
        return (1, 0.0, result.asset.id)
    return (0, -result.quote.fdv_usd, result.asset.id)


async def fetch_batch(
    aggregator,
    assets: Sequence[Asset],
    sort_key: Optional[Callable[[AssetResult], Any]] = None
) -> List[AssetResult]:
    """
    Fetch all assets concurrently.

    Args:
        aggregator: Object exposing `fetch_coin_data(asset) -> Quote`
        assets: Assets to fetch
        sort_key: Ordering of the returned list (default: asset id)

    Returns:
        One AssetResult per asset; failures carry the error message
    """
    outcomes = await asyncio.gather(
        *(aggregator.fetch_coin_data(asset) for asset in assets),
        return_exceptions=True
    )

    results = []
    for asset, outcome in zip(assets, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, Exception):
            logger.error(f"[{asset.id}] fetch failed: {type(outcome).__name__}: {outcome}")
            results.append(AssetResult(asset=asset, error=str(outcome) or type(outcome).__name__))
        else:
            results.append(AssetResult(asset=asset, quote=outcome))

    available = sum(1 for r in results if r.available)
    logger.info(f"Batch finished: {available}/{len(results)} asset(s) available")

    return sorted(results, key=sort_key or (lambda r: r.asset.id))
