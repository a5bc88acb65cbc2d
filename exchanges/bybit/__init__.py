"""
Bybit Connector

Exposes BybitAPIClient, the Bybit implementation of PriceProvider.
"""

from .api_client import BybitAPIClient

__all__ = ["BybitAPIClient"]
