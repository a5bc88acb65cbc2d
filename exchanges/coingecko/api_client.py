"""
CoinGecko REST API Client

Primary data source. Unlike the exchange clients, CoinGecko returns
market-cap-grade figures (market cap, fully diluted valuation, 24h volume)
together with the price, which is what the supply cache is built from.

API Documentation:
    https://docs.coingecko.com/reference/coins-id

Usage:
    async with CoinGeckoClient() as client:
        quote = await client.fetch_coin_data("scroll")
"""

from typing import Any, Dict, Optional, Tuple

from core.errors import BusinessLogicError, DecodeError
from core.provider_interface import PriceProvider
from core.schemas import Quote


class CoinGeckoClient(PriceProvider):
    """
    Async client for CoinGecko coin data.

    The "symbol" for this source is the CoinGecko coin id (e.g. "scroll").

    Notes:
        - Null market cap / FDV / volume (common for new listings) read as 0.0
        - An error body ({"error": ...} or {"status": {"error_code": ...}})
          is a business error even when it arrives with HTTP 200
    """

    name = "coingecko"
    BASE_URL = "https://api.coingecko.com"

    COIN_PARAMS = {
        "localization": "false",
        "tickers": "false",
        "market_data": "true",
        "community_data": "false",
        "developer_data": "false",
        "sparkline": "false",
    }

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        """
        Args:
            api_key: Optional demo API key (sent as x-cg-demo-api-key)
            **kwargs: base_url / timeout / session, see PriceProvider
        """
        super().__init__(**kwargs)
        self.api_key = api_key

    def _request_headers(self) -> Dict[str, str]:
        headers = super()._request_headers()
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def fetch_coin_data(self, coin_id: str) -> Quote:
        """
        Fetch price, 24h change and market figures for a coin.

        CoinGecko Endpoint:
            GET /api/v3/coins/{id}

        Response Format (trimmed):
            {
              "market_data": {
                "current_price": {"usd": 1.2345},
                "price_change_percentage_24h": -3.2,
                "market_cap": {"usd": 1000000},
                "fully_diluted_valuation": {"usd": 2000000},
                "total_volume": {"usd": 35000}
              }
            }

        Returns:
            Quote with source="coingecko"
        """
        self._require_symbol(coin_id)

        payload = await self._get_json(f"/api/v3/coins/{coin_id}", dict(self.COIN_PARAMS), coin_id)
        if not isinstance(payload, dict):
            raise DecodeError(self.name, coin_id, f"unexpected response type {type(payload).__name__}")

        self._raise_for_error_body(payload, coin_id)

        market_data = payload.get("market_data")
        if not isinstance(market_data, dict):
            raise DecodeError(self.name, coin_id, "missing market_data")

        price = _usd(market_data, "current_price")
        if price is None:
            raise DecodeError(self.name, coin_id, "missing current_price.usd")

        quote = Quote(
            price=self._parse_float(price, "current_price.usd", coin_id),
            change_pct_24h=self._optional_float(market_data.get("price_change_percentage_24h"),
                                                "price_change_percentage_24h", coin_id),
            market_cap_usd=self._optional_float(_usd(market_data, "market_cap"), "market_cap.usd", coin_id),
            fdv_usd=self._optional_float(_usd(market_data, "fully_diluted_valuation"),
                                         "fully_diluted_valuation.usd", coin_id),
            volume_usd_24h=self._optional_float(_usd(market_data, "total_volume"), "total_volume.usd", coin_id),
            source=self.name,
        )
        return quote

    async def get_price_and_change(self, symbol: str) -> Tuple[float, float]:
        quote = await self.fetch_coin_data(symbol)
        return quote.price, quote.change_pct_24h

    # ============================================
    # Parsing Helpers
    # ============================================

    def _raise_for_error_body(self, payload: Dict[str, Any], coin_id: str) -> None:
        if "error" in payload:
            raise BusinessLogicError(self.name, coin_id, f"CoinGecko API error: {payload['error']}")

        status = payload.get("status")
        if isinstance(status, dict) and status.get("error_code"):
            code = str(status.get("error_code"))
            msg = status.get("error_message") or "unknown error"
            raise BusinessLogicError(self.name, coin_id, f"CoinGecko API error: {msg} (code {code})", code=code)

    def _optional_float(self, value: Any, field: str, coin_id: str) -> float:
        if value is None:
            return 0.0
        return self._parse_float(value, field, coin_id)


def _usd(market_data: Dict[str, Any], field: str) -> Any:
    values = market_data.get(field)
    if isinstance(values, dict):
        return values.get("usd")
    return None
