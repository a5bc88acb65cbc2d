"""
Binance Connector

Exposes BinanceAPIClient, the Binance implementation of PriceProvider.
"""

from .api_client import BinanceAPIClient

__all__ = ["BinanceAPIClient"]
