"""
Unit Tests for the RankBoard Service

Run with:
    pytest tests/unit/test_rank_board.py -v
"""

import asyncio
from datetime import datetime, timezone

import pytest

from core.errors import NoSupportedSourceError
from core.schemas import Asset, Quote
from services.rank_board import RankBoard


NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
ASSETS = [
    Asset(id="starknet", display_name="Starknet"),
    Asset(id="scroll", display_name="Scroll"),
    Asset(id="taiko", display_name="Taiko"),
]


class FakeAggregator:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = 0

    async def fetch_coin_data(self, asset):
        self.calls += 1
        outcome = self.outcomes[asset.id]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def quote(fdv):
    return Quote(price=1.0, change_pct_24h=1.0, fdv_usd=fdv)


def make_board(outcomes, refresh_interval=300):
    return RankBoard(FakeAggregator(outcomes), ASSETS, refresh_interval=refresh_interval, clock=lambda: NOW)


class TestRefresh:

    @pytest.mark.asyncio
    async def test_empty_before_first_refresh(self):
        board = make_board({})
        snapshot = await board.latest()
        assert snapshot.results == []
        assert snapshot.updated_at is None

    @pytest.mark.asyncio
    async def test_publishes_ranked_board(self):
        board = make_board({
            "starknet": quote(1_000_000),
            "scroll": NoSupportedSourceError("scroll"),
            "taiko": quote(5_000_000),
        })

        published = await board.refresh()
        latest = await board.latest()

        assert latest is published
        assert [r.asset.id for r in latest.results] == ["taiko", "starknet", "scroll"]
        assert latest.updated_at == NOW
        assert latest.text.startswith("Date: 2025-01-01 12:00:00 (UTC)\n\nTaiko:")
        assert "Scroll:\nData unavailable" in latest.text

    @pytest.mark.asyncio
    async def test_refresh_replaces_snapshot(self):
        board = make_board({"starknet": quote(1), "scroll": quote(2), "taiko": quote(3)})

        first = await board.refresh()
        board.aggregator.outcomes["starknet"] = quote(10)
        second = await board.refresh()

        assert first is not second
        assert (await board.latest()).results[0].asset.id == "starknet"


class TestFetchOne:

    @pytest.mark.asyncio
    async def test_fetch_tracked_asset(self):
        board = make_board({"scroll": quote(2)})
        assert await board.fetch_one("scroll") == quote(2)

    @pytest.mark.asyncio
    async def test_unknown_asset(self):
        board = make_board({})
        with pytest.raises(KeyError):
            await board.fetch_one("unknown")
        assert board.get_asset("unknown") is None

    @pytest.mark.asyncio
    async def test_error_propagates(self):
        board = make_board({"scroll": NoSupportedSourceError("scroll")})
        with pytest.raises(NoSupportedSourceError):
            await board.fetch_one("scroll")


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_start_refreshes_and_stop_cancels(self):
        board = make_board({"starknet": quote(1), "scroll": quote(2), "taiko": quote(3)}, refresh_interval=60)

        await board.start()
        for _ in range(50):
            if (await board.latest()).updated_at is not None:
                break
            await asyncio.sleep(0.01)
        await board.stop()

        assert (await board.latest()).updated_at == NOW
        assert board.aggregator.calls == 3
        assert board._task is None

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_board(self, monkeypatch):
        board = make_board({"starknet": quote(1), "scroll": quote(2), "taiko": quote(3)}, refresh_interval=60)
        published = await board.refresh()

        async def broken_refresh():
            raise RuntimeError("render failed")

        monkeypatch.setattr(board, "refresh", broken_refresh)
        await board.start()
        await asyncio.sleep(0.02)
        await board.stop()

        assert await board.latest() is published

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        board = make_board({})
        await board.stop()
