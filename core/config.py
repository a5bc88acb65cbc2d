"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Parses comma-separated lists (tracked assets, fallback providers, gas endpoints)
- Converts TTL settings to timedelta objects
- Handles optional settings with sensible defaults

Usage:
    from core.config import settings

    print(settings.coingecko_base_url)
    print(settings.assets_list)  # Returns a list of Asset objects
"""

from datetime import timedelta
from typing import Dict, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from core.schemas import Asset


KNOWN_PROVIDERS = ("binance", "okx", "bybit", "bitget")


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        coingecko_base_url: Base URL for the CoinGecko API (primary source)
        coingecko_api_key: Optional demo API key sent as x-cg-demo-api-key
        tracked_assets: Comma-separated "id:Display Name" entries
        fallback_providers: Comma-separated exchange names, in fallback order
        symbols_file: Optional JSON file overriding exchange symbols per asset
        request_timeout: Timeout for each outbound HTTP request in seconds
        supply_ttl_seconds: Lifetime of cached circulating/full supply
        volume_ttl_seconds: Lifetime of cached 24h volume
        refresh_interval_seconds: Period of the rank board refresh loop
        gas_rpc_endpoints: Comma-separated "network=url" JSON-RPC endpoints
        app_host: Host address for FastAPI server
        app_port: Port number for FastAPI server
        log_level: Logging level
    """

    # ============================================
    # Primary Source (CoinGecko)
    # ============================================

    coingecko_base_url: str = Field(
        default="https://api.coingecko.com",
        description="CoinGecko API base URL"
    )

    coingecko_api_key: str = Field(
        default="",
        description="CoinGecko demo API key (optional)"
    )

    # ============================================
    # Tracked Assets & Fallback Sources
    # ============================================

    tracked_assets: str = Field(
        default="starknet:Starknet,zksync:ZkSync,taiko:Taiko,scroll:Scroll,movement:Movement",
        description="Comma-separated list of id:Display Name entries"
    )

    fallback_providers: str = Field(
        default="binance,okx,bybit,bitget",
        description="Comma-separated list of fallback exchanges, tried in this order"
    )

    symbols_file: str = Field(
        default="",
        description="JSON file with per-asset exchange symbols (empty = built-in defaults)"
    )

    # ============================================
    # Timeouts, Cache Lifetimes & Scheduling
    # ============================================

    request_timeout: float = Field(
        default=10.0,
        description="HTTP request timeout in seconds"
    )

    supply_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        description="Cached circulating/full supply lifetime (seconds)"
    )

    volume_ttl_seconds: int = Field(
        default=30 * 60,
        description="Cached 24h volume lifetime (seconds)"
    )

    refresh_interval_seconds: int = Field(
        default=5 * 60,
        description="Rank board refresh interval (seconds)"
    )

    # ============================================
    # Gas Price Endpoints
    # ============================================

    gas_rpc_endpoints: str = Field(
        default=(
            "ethereum=https://rpc.mevblocker.io,"
            "zksync=https://mainnet.era.zksync.io,"
            "taiko=https://rpc.mainnet.taiko.xyz,"
            "scroll=https://rpc.scroll.io"
        ),
        description="Comma-separated list of network=url JSON-RPC endpoints"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    # ============================================
    # Parsed Views
    # ============================================

    @property
    def assets_list(self) -> List[Asset]:
        """
        Parse tracked_assets into Asset objects.

        An entry without a display name uses its id as the name.

        Example:
            >>> settings.assets_list[0]
            Asset(id='starknet', display_name='Starknet')
        """
        assets = []
        for entry in self.tracked_assets.split(","):
            entry = entry.strip()
            if not entry:
                continue
            asset_id, _, display_name = entry.partition(":")
            asset_id = asset_id.strip()
            assets.append(Asset(id=asset_id, display_name=display_name.strip() or asset_id))
        return assets

    @property
    def fallback_providers_list(self) -> List[str]:
        """Fallback exchange names in the configured order (lowercase)."""
        return [p.strip().lower() for p in self.fallback_providers.split(",") if p.strip()]

    @property
    def gas_endpoints_dict(self) -> Dict[str, str]:
        """
        Parse gas_rpc_endpoints into a {network: url} mapping.

        Insertion order follows the configured order.
        """
        endpoints = {}
        for entry in self.gas_rpc_endpoints.split(","):
            network, sep, url = entry.strip().partition("=")
            if sep and network.strip() and url.strip():
                endpoints[network.strip().lower()] = url.strip()
        return endpoints

    @property
    def supply_ttl(self) -> timedelta:
        return timedelta(seconds=self.supply_ttl_seconds)

    @property
    def volume_ttl(self) -> timedelta:
        return timedelta(seconds=self.volume_ttl_seconds)


# ============================================
# Global Settings Instance
# ============================================

settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Settings = None) -> None:
    """
    Validate critical configuration settings on application startup.

    Args:
        config: Settings to validate (defaults to the global instance)

    Raises:
        ValueError: If required configuration is missing or invalid
    """
    # Import logger here to avoid circular import
    # (logging.py imports config.py, so we can't import at module level)
    from core.logging import logger

    config = config or settings

    for entry in config.tracked_assets.split(","):
        if entry.strip() and not entry.partition(":")[0].strip():
            raise ValueError(f"Invalid TRACKED_ASSETS entry: '{entry.strip()}' has no asset id")

    assets = config.assets_list
    if not assets:
        raise ValueError("TRACKED_ASSETS must contain at least one asset")

    ids = [asset.id for asset in assets]
    if len(ids) != len(set(ids)):
        raise ValueError(f"TRACKED_ASSETS contains duplicate ids: {', '.join(ids)}")

    for name in config.fallback_providers_list:
        if name not in KNOWN_PROVIDERS:
            raise ValueError(
                f"Unknown fallback provider: '{name}'. "
                f"Must be one of: {', '.join(KNOWN_PROVIDERS)}"
            )

    if config.request_timeout <= 0:
        raise ValueError(f"REQUEST_TIMEOUT must be positive, got {config.request_timeout}")

    for field_name in ("supply_ttl_seconds", "volume_ttl_seconds", "refresh_interval_seconds"):
        if getattr(config, field_name) <= 0:
            raise ValueError(f"{field_name.upper()} must be positive, got {getattr(config, field_name)}")

    if not (1 <= config.app_port <= 65535):
        raise ValueError(f"Invalid port number: {config.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Tracking assets: {', '.join(ids)}")
    logger.info(f"Fallback order: {', '.join(config.fallback_providers_list) or 'none'}")
    logger.info(f"Primary source: {config.coingecko_base_url}")
    logger.info(f"Supply TTL: {config.supply_ttl}, volume TTL: {config.volume_ttl}")
    logger.info(f"Server: {config.app_host}:{config.app_port}")
    logger.info(f"Log level: {config.log_level.upper()}")
