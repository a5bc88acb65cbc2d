"""
Unit Tests for the Concurrent Fan-out Driver

Run with:
    pytest tests/unit/test_fanout.py -v
"""

import asyncio

import pytest

from core.errors import NoSupportedSourceError
from core.fanout import fetch_batch, rank_key
from core.schemas import Asset, AssetResult, Quote


STRK = Asset(id="starknet", display_name="Starknet")
SCR = Asset(id="scroll", display_name="Scroll")
TAIKO = Asset(id="taiko", display_name="Taiko")


class ScriptedAggregator:
    """Answers per asset id after a per-asset delay; tracks concurrency."""

    def __init__(self, outcomes, delays=None):
        self.outcomes = outcomes
        self.delays = delays or {}
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_coin_data(self, asset):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(asset.id, 0))
            outcome = self.outcomes[asset.id]
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1


def quote(fdv):
    return Quote(price=1.0, change_pct_24h=0.0, fdv_usd=fdv)


class TestFetchBatch:

    @pytest.mark.asyncio
    async def test_one_result_per_asset_sorted_by_id(self):
        aggregator = ScriptedAggregator(
            {"starknet": quote(3), "scroll": quote(2), "taiko": quote(1)},
            delays={"scroll": 0.03, "taiko": 0.01},
        )

        results = await fetch_batch(aggregator, [STRK, SCR, TAIKO])

        assert [r.asset.id for r in results] == ["scroll", "starknet", "taiko"]
        assert all(r.available for r in results)

    @pytest.mark.asyncio
    async def test_runs_concurrently(self):
        aggregator = ScriptedAggregator(
            {"starknet": quote(1), "scroll": quote(1), "taiko": quote(1)},
            delays={"starknet": 0.02, "scroll": 0.02, "taiko": 0.02},
        )

        await fetch_batch(aggregator, [STRK, SCR, TAIKO])

        assert aggregator.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self):
        aggregator = ScriptedAggregator({
            "starknet": quote(3),
            "scroll": NoSupportedSourceError("scroll"),
            "taiko": RuntimeError("boom"),
        })

        results = {r.asset.id: r for r in await fetch_batch(aggregator, [STRK, SCR, TAIKO])}

        assert results["starknet"].quote == quote(3)
        assert results["scroll"].quote is None
        assert results["scroll"].error == "no supported source found for scroll"
        assert results["taiko"].error == "boom"

    @pytest.mark.asyncio
    async def test_custom_sort_key(self):
        aggregator = ScriptedAggregator({"starknet": quote(1), "scroll": quote(5), "taiko": quote(3)})

        results = await fetch_batch(aggregator, [STRK, SCR, TAIKO], sort_key=rank_key)

        assert [r.asset.id for r in results] == ["scroll", "taiko", "starknet"]

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        assert await fetch_batch(ScriptedAggregator({}), []) == []


class TestRankKey:

    def test_unavailable_last_and_ties_by_id(self):
        results = [
            AssetResult(asset=TAIKO, error="down"),
            AssetResult(asset=STRK, quote=quote(10)),
            AssetResult(asset=SCR, quote=quote(10)),
            AssetResult(asset=Asset(id="linea", display_name="Linea"), quote=quote(50)),
        ]

        ordered = sorted(results, key=rank_key)

        assert [r.asset.id for r in ordered] == ["linea", "scroll", "starknet", "taiko"]
