"""
Error Taxonomy for the Aggregation Layer

Provider-level errors all derive from ProviderError and carry the provider
name, the symbol that was requested and the underlying cause. Callers can
branch on the subclass (or the `kind` attribute in log lines) without ever
seeing a provider-specific error shape.

Hierarchy:
    MarketDataError
    ├── ProviderError
    │   ├── SymbolNotSupportedError   (empty symbol; no network call made)
    │   ├── RateLimitedError          (HTTP 429/418; never retried here)
    │   ├── TransportError            (connection error, timeout, non-2xx)
    │   ├── DecodeError               (malformed or incomplete body)
    │   ├── BusinessLogicError        (upstream error code in a 200 body)
    │   ├── ZeroReferencePriceError   (open/reference price of 0)
    │   └── UnexpectedProviderError   (any other exception raised by a provider)
    └── AggregationError
        ├── AllSourcesFailedError     (chain exhausted, last error attached)
        └── NoSupportedSourceError    (no fallback provider could be tried)
"""

from typing import Optional


class MarketDataError(Exception):
    """Base class for every error raised by the aggregation layer."""


# ============================================
# Provider Errors
# ============================================

class ProviderError(MarketDataError):
    """
    Uniform provider failure.

    Attributes:
        provider: Provider name (e.g. "okx")
        symbol: Symbol that was requested (e.g. "SCR-USDT")
        cause: Human readable description of the underlying failure
    """

    kind = "error"

    def __init__(self, provider: str, symbol: str, cause: str):
        self.provider = provider
        self.symbol = symbol
        self.cause = cause
        super().__init__(f"provider={provider} symbol={symbol}: {cause}")


class SymbolNotSupportedError(ProviderError):
    kind = "not_supported"

    def __init__(self, provider: str, symbol: str = "", cause: str = "symbol not supported by this provider"):
        super().__init__(provider, symbol, cause)


class RateLimitedError(ProviderError):
    """Upstream throttling. `retry_after` is in seconds when the upstream sent it."""

    kind = "rate_limited"

    def __init__(self, provider: str, symbol: str, cause: str = "rate limited", retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(provider, symbol, cause)


class TransportError(ProviderError):
    kind = "transport"


class DecodeError(ProviderError):
    kind = "decode"


class BusinessLogicError(ProviderError):
    """Upstream reported an application error code inside a successful response."""

    kind = "business_logic"

    def __init__(self, provider: str, symbol: str, cause: str, code: Optional[str] = None):
        self.code = code
        super().__init__(provider, symbol, cause)


class ZeroReferencePriceError(ProviderError):
    kind = "zero_reference"


class UnexpectedProviderError(ProviderError):
    """A provider raised something outside this taxonomy; the original exception is the __cause__."""

    kind = "unexpected"

    @classmethod
    def wrap(cls, provider: str, symbol: str, exc: Exception) -> "UnexpectedProviderError":
        error = cls(provider, symbol, f"{type(exc).__name__}: {exc}")
        error.__cause__ = exc
        return error


# ============================================
# Aggregation Errors
# ============================================

class AggregationError(MarketDataError):
    """Terminal failure for one asset after every source was considered."""

    def __init__(self, asset_id: str, message: str):
        self.asset_id = asset_id
        super().__init__(message)


class AllSourcesFailedError(AggregationError):
    def __init__(self, asset_id: str, last_error: ProviderError):
        self.last_error = last_error
        super().__init__(asset_id, f"all sources failed for {asset_id}, last error: {last_error}")


class NoSupportedSourceError(AggregationError):
    def __init__(self, asset_id: str):
        super().__init__(asset_id, f"no supported source found for {asset_id}")
