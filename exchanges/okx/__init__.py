"""
OKX Connector

Exposes OKXAPIClient, the OKX implementation of PriceProvider.
"""

from .api_client import OKXAPIClient

__all__ = ["OKXAPIClient"]
