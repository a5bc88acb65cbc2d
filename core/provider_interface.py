"""
Price Provider Interface - Abstract Contract for All Quote Sources

This module defines the abstract base class that every quote source (the
CoinGecko primary source and each fallback exchange) implements. By enforcing
a consistent interface, we ensure:
- The aggregator works with PriceProvider, not a specific exchange
- Every provider fails with the same error taxonomy (core.errors)
- HTTP plumbing (session, timeout, status classification) lives in one place

Design Philosophy:
    "Program to an interface, not an implementation"

Example:
    class BinanceAPIClient(PriceProvider):
        name = "binance"
        BASE_URL = "https://api.binance.com"

        async def get_price_and_change(self, symbol):
            self._require_symbol(symbol)
            data = await self._get_json("/api/v3/ticker/24hr", {"symbol": symbol}, symbol)
            ...

Error Classification (_get_json):
    - 429, 418          -> RateLimitedError (not retried; backoff is the caller's job)
    - other non-200     -> TransportError
    - timeout / network -> TransportError
    - invalid JSON      -> DecodeError
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import aiohttp

from core.errors import (
    DecodeError,
    RateLimitedError,
    SymbolNotSupportedError,
    TransportError,
    ZeroReferencePriceError,
)
from core.logging import get_logger, log_api_request, log_api_response


RATE_LIMIT_STATUSES = (429, 418)
USER_AGENT = "rank-board-backend/1.0"


class PriceProvider(ABC):
    """
    Abstract Base Class for Quote Sources

    Class Attributes:
        name: Unique provider identifier (lowercase, e.g. "binance", "okx")
        BASE_URL: Default API base URL

    Abstract Methods (MUST be implemented by all providers):
        - get_price_and_change: Last price and 24h change (percent) for a symbol

    Lifecycle:
        - initialize / shutdown, or `async with provider:`
        - A shared aiohttp.ClientSession may be injected; it is then owned by
          the caller and never closed here.
    """

    name: str
    BASE_URL: str = ""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Args:
            base_url: Override for BASE_URL (tests, proxies)
            timeout: Total timeout for each request, in seconds
            session: Optional shared session owned by the caller
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        self.logger = get_logger(self.__class__.__module__)

    # ============================================
    # Quote Method
    # ============================================

    @abstractmethod
    async def get_price_and_change(self, symbol: str) -> Tuple[float, float]:
        """
        Fetch the last price and 24h change for a provider-specific symbol.

        Args:
            symbol: Provider trading-pair identifier (e.g. "SCRUSDT", "SCR-USDT")

        Returns:
            Tuple of (price in USD, 24h change in percent)

        Raises:
            SymbolNotSupportedError: symbol is empty (no request is made)
            RateLimitedError, TransportError, DecodeError,
            BusinessLogicError, ZeroReferencePriceError
        """
        ...

    # ============================================
    # Lifecycle Methods
    # ============================================

    async def initialize(self) -> None:
        """Create the HTTP session if none exists. Safe to call multiple times."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
            self._owns_session = True
            self.logger.debug(f"{self.name} session created")

    async def shutdown(self) -> None:
        """Close the session if this provider created it."""
        if self.session is not None and self._owns_session and not self.session.closed:
            await self.session.close()
            self.logger.debug(f"{self.name} session closed")
        if self._owns_session:
            self.session = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    # ============================================
    # Helper Methods
    # ============================================

    def _request_headers(self) -> Dict[str, str]:
        """Extra headers for every request (API keys etc.)."""
        return {"Accept": "application/json"}

    def _require_symbol(self, symbol: str) -> None:
        if not symbol:
            raise SymbolNotSupportedError(self.name, symbol)

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]], symbol: str) -> Any:
        """
        Make a single GET request and return the decoded JSON body.

        There is no retry loop: rate limits and transport failures are
        classified and raised so the caller can move on to the next source.

        Args:
            path: Endpoint path appended to base_url
            params: Query parameters
            symbol: Symbol being fetched (carried into errors)

        Returns:
            Parsed JSON response
        """
        if self.session is None or self.session.closed:
            await self.initialize()

        url = f"{self.base_url}{path}"
        log_api_request(self.name, path, params)
        started = time.monotonic()

        try:
            async with self.session.get(
                url,
                params=params,
                headers=self._request_headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                log_api_response(self.name, path, resp.status, time.monotonic() - started)

                if resp.status in RATE_LIMIT_STATUSES:
                    raise RateLimitedError(
                        self.name,
                        symbol,
                        f"HTTP {resp.status}",
                        retry_after=_parse_retry_after(resp.headers),
                    )

                if resp.status != 200:
                    text = await resp.text(errors="replace")
                    raise TransportError(self.name, symbol, f"HTTP {resp.status}: {text[:200]}")

                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise DecodeError(self.name, symbol, f"invalid JSON: {e}") from e

        except asyncio.TimeoutError as e:
            raise TransportError(self.name, symbol, f"timeout after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(self.name, symbol, f"request failed: {e}") from e

    def _parse_float(self, value: Any, field: str, symbol: str) -> float:
        """Parse a numeric field (exchanges send numbers as strings)."""
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise DecodeError(self.name, symbol, f"parse {field}: {value!r}") from e

    def _first_ticker(self, tickers: Any, symbol: str) -> Dict[str, Any]:
        """
        First entry of a ticker list.

        Raises:
            DecodeError: tickers is not a non-empty list of objects
        """
        if not isinstance(tickers, list) or not tickers:
            raise DecodeError(self.name, symbol, "no data returned")
        ticker = tickers[0]
        if not isinstance(ticker, dict):
            raise DecodeError(self.name, symbol, f"unexpected ticker entry {ticker!r:.100}")
        return ticker

    def _change_from_reference(self, last: float, reference: float, field: str, symbol: str) -> float:
        """
        24h change in percent from the last price and a 24h reference price.

        Raises:
            ZeroReferencePriceError: reference is 0 (no Inf/NaN is produced)
        """
        if reference == 0:
            raise ZeroReferencePriceError(self.name, symbol, f"{field} is zero, cannot calculate change")
        return (last / reference - 1) * 100

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name='{self.name}')>"


def _parse_retry_after(headers) -> Optional[float]:
    value = headers.get("Retry-After") if headers is not None else None
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
