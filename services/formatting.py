"""
Text Rendering for the Rank Board and Gas Prices

Turns AssetResults into the plain-text board served to chat/HTTP clients.
Zero values are rendered as "N/A", so a fallback quote without cached supply
shows its price and change but no market figures.
"""

from datetime import datetime
from typing import Dict, Iterable, Optional

from core.schemas import AssetResult
from core.utils.time import format_utc


def format_value(value: float) -> str:
    """
    Compact USD amount.

    Example:
        >>> format_value(2_500_000_000)
        '2.50 B'
        >>> format_value(0)
        'N/A'
    """
    if value == 0:
        return "N/A"
    if value >= 1e9:
        return f"{value / 1e9:.2f} B"
    if value >= 1e6:
        return f"{value / 1e6:.2f} M"
    return f"{value:.2f}"


def format_price(price: float) -> str:
    if price == 0:
        return "N/A"
    return f"${price:.4f}"


def format_asset_block(result: AssetResult) -> str:
    name = result.asset.display_name
    quote = result.quote
    if quote is None:
        return f"{name}:\nData unavailable"

    arrow = ""
    if quote.change_pct_24h > 0:
        arrow = " ⬆️"
    elif quote.change_pct_24h < 0:
        arrow = " ⬇️"

    return (
        f"{name}:\n"
        f"- Price: {format_price(quote.price)}\n"
        f"- 24h Price Change: {quote.change_pct_24h:.2f}%{arrow}\n"
        f"- 24h Volume (USD): {format_value(quote.volume_usd_24h)}\n"
        f"- Market Cap: {format_value(quote.market_cap_usd)}\n"
        f"- FDV: {format_value(quote.fdv_usd)}"
    )


def render_rank_board(results: Iterable[AssetResult], now: datetime) -> str:
    """Header plus one block per result, in the given order."""
    blocks = [format_asset_block(result) for result in results]
    return f"Date: {format_utc(now)} (UTC)\n\n" + "\n\n".join(blocks)


def render_gas_prices(prices: Dict[str, Optional[float]], now: datetime) -> str:
    """
    Gas prices in gwei, one line per network in the given order.

    A network whose RPC call failed (None) is shown as N/A.
    """
    lines = []
    for network, gwei in prices.items():
        value = "N/A" if gwei is None else f"{gwei:.2f}"
        lines.append(f"- {network.capitalize()}: {value}")

    return "Current Gas Prices (Gwei):\n\n" + "\n".join(lines) + f"\n\nUpdated: {format_utc(now)} UTC"
