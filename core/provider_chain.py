"""
Provider Chain - Ordered Registry of Fallback Sources

This module provides the ordered list of fallback providers the aggregator
walks after the primary source fails.

Design Benefits:
    - Fallback order is an explicit list, identical on every call, so logs and
      outcomes are reproducible
    - Providers are built by name from a registry, so the order is configurable
      (FALLBACK_PROVIDERS in .env) without touching the aggregator
    - Centralized lifecycle management (initialize/shutdown)

Example Usage:
    chain = ProviderChain.from_names(["binance", "okx", "bybit", "bitget"], timeout=10)
    await chain.initialize_all()

    for provider in chain:
        price, change = await provider.get_price_and_change("SCRUSDT")
"""

from typing import Dict, Iterator, List, Optional, Sequence, Type

import aiohttp

from core.logging import logger
from core.provider_interface import PriceProvider


DEFAULT_FALLBACK_ORDER = ("binance", "okx", "bybit", "bitget")


def _registry() -> Dict[str, Type[PriceProvider]]:
    # Import here to avoid circular imports
    # Each exchange module imports from core, so we can't import at module level
    from exchanges.binance import BinanceAPIClient
    from exchanges.bitget import BitgetAPIClient
    from exchanges.bybit import BybitAPIClient
    from exchanges.okx import OKXAPIClient

    return {
        "binance": BinanceAPIClient,
        "okx": OKXAPIClient,
        "bybit": BybitAPIClient,
        "bitget": BitgetAPIClient,
    }


class ProviderChain:
    """
    Immutable, ordered list of fallback providers.

    Attributes:
        providers: Providers in fallback order

    Example:
        >>> chain = ProviderChain.from_names(["okx", "binance"])
        >>> chain.names()
        ['okx', 'binance']
    """

    def __init__(self, providers: Sequence[PriceProvider]):
        """
        Args:
            providers: Providers in the order they must be tried

        Raises:
            ValueError: If two providers share a name
        """
        names = [p.name for p in providers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate providers in chain: {', '.join(duplicates)}")

        self._providers: tuple = tuple(providers)
        logger.info(f"ProviderChain initialized with {len(self._providers)} provider(s): {', '.join(names) or 'none'}")

    @classmethod
    def from_names(
        cls,
        names: Sequence[str] = DEFAULT_FALLBACK_ORDER,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None
    ) -> "ProviderChain":
        """
        Build a chain from registered provider names.

        Args:
            names: Provider names in fallback order (case-insensitive)
            timeout: Per-request timeout handed to every provider
            session: Optional shared session handed to every provider

        Raises:
            ValueError: If a name is not registered or appears twice
        """
        registry = _registry()
        providers = []
        for name in names:
            key = name.lower()
            if key not in registry:
                available = ", ".join(registry.keys())
                raise ValueError(f"Provider '{name}' is not supported. Available providers: {available}")
            providers.append(registry[key](timeout=timeout, session=session))
        return cls(providers)

    # ============================================
    # Retrieval
    # ============================================

    def names(self) -> List[str]:
        return [p.name for p in self._providers]

    def get(self, name: str) -> PriceProvider:
        """
        Get a provider by name.

        Raises:
            ValueError: If the provider is not in the chain
        """
        for provider in self._providers:
            if provider.name == name.lower():
                return provider
        raise ValueError(f"Provider '{name}' is not in the chain. Available: {', '.join(self.names())}")

    def __iter__(self) -> Iterator[PriceProvider]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    # ============================================
    # Lifecycle Management
    # ============================================

    async def initialize_all(self) -> None:
        for provider in self._providers:
            try:
                await provider.initialize()
            except Exception as e:
                # A provider that cannot start is still tried lazily on first request
                logger.error(f"✗ Failed to initialize {provider.name}: {e}")

    async def shutdown_all(self) -> None:
        for provider in self._providers:
            try:
                await provider.shutdown()
            except Exception as e:
                logger.error(f"✗ Error shutting down {provider.name}: {e}")
        logger.info("All providers shut down")

    def __repr__(self) -> str:
        return f"<ProviderChain(providers={self.names()})>"
