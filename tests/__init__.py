"""
Test Suite

Contains unit tests for the backend system.

Structure:
- tests/unit/: Tests for individual components (providers, aggregator, cache, services, API)

External APIs are never called: HTTP sessions and sources are replaced by in-memory fakes.
Uses pytest with pytest-asyncio for testing async functionality.
"""
