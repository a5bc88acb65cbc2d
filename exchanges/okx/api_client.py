"""
OKX REST API Client

Fallback price source backed by the OKX v5 market ticker.

API Documentation:
    https://www.okx.com/docs-v5/en/#public-data-rest-api-get-ticker

Usage:
    async with OKXAPIClient() as client:
        price, change_pct = await client.get_price_and_change("SCR-USDT")
"""

from typing import Tuple

from core.errors import BusinessLogicError, DecodeError
from core.provider_interface import PriceProvider


class OKXAPIClient(PriceProvider):
    """
    Async client for the OKX market ticker.

    Symbols are dash-separated instrument ids ("SCR-USDT"). OKX does not
    report a change percentage, so it is derived from `last` and `open24h`.
    """

    name = "okx"
    BASE_URL = "https://www.okx.com"

    async def get_price_and_change(self, symbol: str) -> Tuple[float, float]:
        """
        Fetch last price and derive the 24h change.

        OKX Endpoint:
            GET /api/v5/market/ticker?instId=SCR-USDT

        Response Format:
            {
              "code": "0",
              "msg": "",
              "data": [{"instId": "SCR-USDT", "last": "0.05", "open24h": "0.0516", ...}]
            }
        """
        self._require_symbol(symbol)

        payload = await self._get_json("/api/v5/market/ticker", {"instId": symbol}, symbol)
        if not isinstance(payload, dict):
            raise DecodeError(self.name, symbol, f"unexpected response type {type(payload).__name__}")

        # OKX returns code "0" for success
        code = str(payload.get("code"))
        if code != "0":
            msg = payload.get("msg") or "unknown error"
            raise BusinessLogicError(self.name, symbol, f"OKX API error: {msg} (code {code})", code=code)

        ticker = self._first_ticker(payload.get("data"), symbol)
        last = self._parse_float(ticker.get("last"), "last", symbol)
        open_24h = self._parse_float(ticker.get("open24h"), "open24h", symbol)

        change_pct = self._change_from_reference(last, open_24h, "open24h", symbol)
        return last, change_pct
