"""
CoinGecko Connector

Exposes CoinGeckoClient, the CoinGecko implementation of PriceProvider.
"""

from .api_client import CoinGeckoClient

__all__ = ["CoinGeckoClient"]
