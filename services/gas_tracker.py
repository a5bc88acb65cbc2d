"""
Gas Price Tracker

Queries `eth_gasPrice` on a set of EVM JSON-RPC endpoints (Ethereum L1 and
the tracked L2s) concurrently and reports the result in gwei.

A network whose call fails or returns garbage is reported as None rather
than 0, so a dead RPC is distinguishable from a genuinely free chain.
"""

import asyncio
from typing import Dict, Optional

import aiohttp

from core.logging import get_logger
from core.provider_interface import USER_AGENT


logger = get_logger(__name__)

GAS_PRICE_REQUEST = {"jsonrpc": "2.0", "method": "eth_gasPrice", "params": [], "id": 1}


def wei_hex_to_gwei(value: str) -> float:
    """
    Example:
        >>> wei_hex_to_gwei("0x3b9aca00")
        1.0
    """
    return int(value, 16) / 1e9


class GasTracker:
    """
    Concurrent eth_gasPrice reader.

    Attributes:
        endpoints: Network name -> JSON-RPC URL, in display order
        timeout: Total timeout per RPC call, in seconds
    """

    def __init__(
        self,
        endpoints: Dict[str, str],
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.endpoints = dict(endpoints)
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None

    async def initialize(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
            self._owns_session = True

    async def shutdown(self) -> None:
        if self.session is not None and self._owns_session and not self.session.closed:
            await self.session.close()
        if self._owns_session:
            self.session = None

    async def get_gas_prices(self) -> Dict[str, Optional[float]]:
        """
        Gas price per network in gwei (None when the call failed).

        Returns:
            Dict in the configured network order
        """
        if self.session is None or self.session.closed:
            await self.initialize()

        names = list(self.endpoints)
        prices = await asyncio.gather(*(self._fetch_one(name) for name in names))
        return dict(zip(names, prices))

    async def _fetch_one(self, network: str) -> Optional[float]:
        url = self.endpoints[network]
        try:
            async with self.session.post(
                url,
                json=GAS_PRICE_REQUEST,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                if resp.status != 200:
                    logger.warning(f"[gas] {network}: HTTP {resp.status}")
                    return None
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError:
            logger.warning(f"[gas] {network}: timeout after {self.timeout}s")
            return None
        except aiohttp.ClientError as e:
            logger.warning(f"[gas] {network}: request failed: {e}")
            return None
        except ValueError as e:
            logger.warning(f"[gas] {network}: invalid JSON: {e}")
            return None

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, str):
            logger.warning(f"[gas] {network}: unexpected response {str(data)[:200]}")
            return None

        try:
            return wei_hex_to_gwei(result)
        except ValueError:
            logger.warning(f"[gas] {network}: bad gas price {result!r}")
            return None
