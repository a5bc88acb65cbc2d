"""
Bitget REST API Client

Fallback price source backed by the Bitget v2 spot tickers endpoint.

API Documentation:
    https://www.bitget.com/api-doc/spot/market/Get-Tickers

Usage:
    async with BitgetAPIClient() as client:
        price, change_pct = await client.get_price_and_change("SCRUSDT")
"""

from typing import Tuple

from core.errors import BusinessLogicError, DecodeError
from core.provider_interface import PriceProvider


class BitgetAPIClient(PriceProvider):
    """
    Async client for Bitget spot tickers.

    The 24h change is derived from the last price (`lastPr`) and the 24h
    open (`open`); a zero open is refused rather than divided by.
    """

    name = "bitget"
    BASE_URL = "https://api.bitget.com"

    async def get_price_and_change(self, symbol: str) -> Tuple[float, float]:
        """
        Fetch last price and derive the 24h change.

        Bitget Endpoint:
            GET /api/v2/spot/market/tickers?symbol=SCRUSDT

        Response Format:
            {
              "code": "00000",
              "msg": "success",
              "data": [{"symbol": "SCRUSDT", "lastPr": "0.05", "open": "0.0516", ...}]
            }
        """
        self._require_symbol(symbol)

        payload = await self._get_json("/api/v2/spot/market/tickers", {"symbol": symbol}, symbol)
        if not isinstance(payload, dict):
            raise DecodeError(self.name, symbol, f"unexpected response type {type(payload).__name__}")

        # Bitget returns code "00000" for success
        code = str(payload.get("code"))
        if code != "00000":
            msg = payload.get("msg") or "unknown error"
            raise BusinessLogicError(self.name, symbol, f"Bitget API error: {msg} (code {code})", code=code)

        ticker = self._first_ticker(payload.get("data"), symbol)
        last = self._parse_float(ticker.get("lastPr"), "lastPr", symbol)
        open_price = self._parse_float(ticker.get("open"), "open", symbol)

        change_pct = self._change_from_reference(last, open_price, "open", symbol)
        return last, change_pct
