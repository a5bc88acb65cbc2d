"""
Bitget Connector

Exposes BitgetAPIClient, the Bitget implementation of PriceProvider.
"""

from .api_client import BitgetAPIClient

__all__ = ["BitgetAPIClient"]
