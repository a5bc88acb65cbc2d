"""
Binance Spot REST API Client

Fallback price source backed by the Binance spot 24h ticker.

API Documentation:
    https://developers.binance.com/docs/binance-spot-api-docs/rest-api/market-data-endpoints

Usage:
    async with BinanceAPIClient() as client:
        price, change_pct = await client.get_price_and_change("SCRUSDT")
"""

from typing import Tuple

from core.errors import DecodeError
from core.provider_interface import PriceProvider


class BinanceAPIClient(PriceProvider):
    """
    Async client for the Binance spot 24h ticker.

    Symbols are concatenated pairs ("SCRUSDT"). Binance reports the 24h change
    as an already-scaled percentage string, so no conversion is applied.
    """

    name = "binance"
    BASE_URL = "https://api.binance.com"

    async def get_price_and_change(self, symbol: str) -> Tuple[float, float]:
        """
        Fetch last price and 24h change percent.

        Binance Endpoint:
            GET /api/v3/ticker/24hr?symbol=SCRUSDT

        Response Format:
            {
              "symbol": "SCRUSDT",
              "priceChangePercent": "-3.210",
              "lastPrice": "0.05000000",
              ...
            }
        """
        self._require_symbol(symbol)

        data = await self._get_json("/api/v3/ticker/24hr", {"symbol": symbol}, symbol)
        if not isinstance(data, dict):
            raise DecodeError(self.name, symbol, f"unexpected response type {type(data).__name__}")

        price = self._parse_float(data.get("lastPrice"), "lastPrice", symbol)
        change_pct = self._parse_float(data.get("priceChangePercent"), "priceChangePercent", symbol)

        self.logger.debug(f"{symbol}: price={price} change={change_pct:.2f}%")
        return price, change_pct
