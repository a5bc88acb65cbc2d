"""
Unit Tests for Rank Board and Gas Price Rendering

Run with:
    pytest tests/unit/test_formatting.py -v
"""

from datetime import datetime, timezone

import pytest

from core.schemas import Asset, AssetResult, Quote
from services.formatting import (
    format_asset_block,
    format_price,
    format_value,
    render_gas_prices,
    render_rank_board,
)


NOW = datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
SCROLL = Asset(id="scroll", display_name="Scroll")


class TestFormatValue:

    @pytest.mark.parametrize("value, expected", [
        (0, "N/A"),
        (2_500_000_000, "2.50 B"),
        (1_000_000_000, "1.00 B"),
        (25_000_000, "25.00 M"),
        (25_000, "25000.00"),
    ])
    def test_format_value(self, value, expected):
        assert format_value(value) == expected

    def test_format_price(self):
        assert format_price(0) == "N/A"
        assert format_price(1.23456) == "$1.2346"


class TestAssetBlock:

    def test_full_quote(self):
        result = AssetResult(asset=SCROLL, quote=Quote(
            price=1.2345, change_pct_24h=2.5, market_cap_usd=1_000_000,
            fdv_usd=2_000_000_000, volume_usd_24h=35_000
        ))

        assert format_asset_block(result) == (
            "Scroll:\n"
            "- Price: $1.2345\n"
            "- 24h Price Change: 2.50% ⬆️\n"
            "- 24h Volume (USD): 35000.00\n"
            "- Market Cap: 1.00 M\n"
            "- FDV: 2.00 B"
        )

    def test_fallback_quote_without_supply(self):
        result = AssetResult(asset=SCROLL, quote=Quote(price=0.05, change_pct_24h=-3.2))

        block = format_asset_block(result)

        assert "- 24h Price Change: -3.20% ⬇️" in block
        assert "- Market Cap: N/A" in block
        assert "- FDV: N/A" in block
        assert "- 24h Volume (USD): N/A" in block

    def test_flat_change_has_no_arrow(self):
        result = AssetResult(asset=SCROLL, quote=Quote(price=1, change_pct_24h=0))
        assert "- 24h Price Change: 0.00%\n" in format_asset_block(result)

    def test_unavailable(self):
        result = AssetResult(asset=SCROLL, error="all sources failed")
        assert format_asset_block(result) == "Scroll:\nData unavailable"


class TestRenderers:

    def test_rank_board(self):
        results = [
            AssetResult(asset=SCROLL, error="down"),
            AssetResult(asset=Asset(id="taiko", display_name="Taiko"), error="down"),
        ]

        text = render_rank_board(results, NOW)

        assert text == (
            "Date: 2025-03-04 05:06:07 (UTC)\n\n"
            "Scroll:\nData unavailable\n\n"
            "Taiko:\nData unavailable"
        )

    def test_gas_prices(self):
        text = render_gas_prices({"ethereum": 12.3456, "scroll": None}, NOW)

        assert text == (
            "Current Gas Prices (Gwei):\n\n"
            "- Ethereum: 12.35\n"
            "- Scroll: N/A\n\n"
            "Updated: 2025-03-04 05:06:07 UTC"
        )
