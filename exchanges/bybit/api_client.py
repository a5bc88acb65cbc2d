"""
Bybit REST API Client

Fallback price source backed by the Bybit v5 spot tickers endpoint.

API Documentation:
    https://bybit-exchange.github.io/docs/v5/market/tickers

Usage:
    async with BybitAPIClient() as client:
        price, change_pct = await client.get_price_and_change("SCRUSDT")
"""

from typing import Tuple

from core.errors import BusinessLogicError, DecodeError
from core.provider_interface import PriceProvider


class BybitAPIClient(PriceProvider):
    """
    Async client for Bybit spot tickers.

    Notes:
        - price24hPcnt is a fraction ("0.0123" means 1.23%), scaled by 100 here
        - retCode != 0 is an application error even on HTTP 200
    """

    name = "bybit"
    BASE_URL = "https://api.bybit.com"

    async def get_price_and_change(self, symbol: str) -> Tuple[float, float]:
        """
        Fetch last price and 24h change percent.

        Bybit Endpoint:
            GET /v5/market/tickers?category=spot&symbol=SCRUSDT

        Response Format:
            {
              "retCode": 0,
              "retMsg": "OK",
              "result": {"category": "spot", "list": [{"lastPrice": "0.05", "price24hPcnt": "-0.032"}]}
            }
        """
        self._require_symbol(symbol)

        params = {"category": "spot", "symbol": symbol}
        payload = await self._get_json("/v5/market/tickers", params, symbol)
        if not isinstance(payload, dict):
            raise DecodeError(self.name, symbol, f"unexpected response type {type(payload).__name__}")

        ret_code = payload.get("retCode")
        if ret_code != 0:
            msg = payload.get("retMsg") or "unknown error"
            raise BusinessLogicError(
                self.name, symbol, f"Bybit API error: {msg} (code {ret_code})", code=str(ret_code)
            )

        result = payload.get("result")
        if not isinstance(result, dict):
            raise DecodeError(self.name, symbol, f"unexpected result {result!r:.100}")

        ticker = self._first_ticker(result.get("list"), symbol)
        price = self._parse_float(ticker.get("lastPrice"), "lastPrice", symbol)
        change_fraction = self._parse_float(ticker.get("price24hPcnt"), "price24hPcnt", symbol)

        return price, change_fraction * 100
