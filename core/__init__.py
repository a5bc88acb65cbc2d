"""
Core Package

Contains the source-agnostic core logic including:
- PriceProvider: Abstract base class every quote source implements
- ProviderChain: Ordered registry of fallback exchanges
- MarketAggregator: Primary source, fallback walk and supply-cache composition
- fetch_batch: Concurrent fan-out over the tracked assets
- Schemas / errors: Pydantic models and the provider error taxonomy

This layer ensures every source fails and answers the same way, so sources can be added or reordered freely.
"""
