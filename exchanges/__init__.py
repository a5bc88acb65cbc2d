"""
Quote Source Connectors Package

Each source has its own subfolder with an api_client.py implementing
core.provider_interface.PriceProvider:
- coingecko: primary source (price + market cap, FDV, volume)
- binance, okx, bybit, bitget: fallback exchanges (price + 24h change only)

Adding an exchange means adding a subfolder and registering it in
core.provider_chain._registry().
"""
