"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Validates the account service endpoint, local currency and block count fallback
- Provides type-safe access to configuration values
- Converts comma-separated strings to lists (CORS origins)

Usage:
    from core.config import settings

    print(settings.service_url)
    print(settings.local_currency)
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


# Local currencies the wallet lets a user pick. The remote price service
# answers price queries for any of these codes.
SUPPORTED_CURRENCIES = [
    "USD", "AUD", "BRL", "CAD", "CHF", "CLP", "CNY", "CZK", "DKK", "EUR", "GBP",
    "HKD", "HUF", "IDR", "ILS", "INR", "JPY", "KRW", "MXN", "MYR", "NOK", "NZD",
    "PHP", "PKR", "PLN", "RUB", "SEK", "SGD", "THB", "TRY", "TWD", "ZAR",
]


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        service_url: WebSocket URL of the remote account/price service
        account_address: Address of the tracked account (empty = no credentials)
        local_currency: Local currency code used for subscribe and price requests
        default_block_count: History count used before any subscribe response arrives
        ws_heartbeat: WebSocket ping interval in seconds
        ws_connect_timeout: Timeout for the WebSocket handshake in seconds
        ws_reconnect: Let the transport reconnect on its own after a disconnect
        ws_max_reconnect_delay: Upper bound for reconnection backoff in seconds
        publisher_max_queue_size: Per-subscriber queue size (0 = unbounded)
        app_host: Host address for the FastAPI bridge
        app_port: Port number for the FastAPI bridge
        log_level: Logging level
        cors_origins: Comma-separated list of allowed CORS origins
    """

    # ============================================
    # Account Service Configuration
    # ============================================

    service_url: str = Field(
        default="wss://raicast.lightrai.com:443",
        description="Account service WebSocket URL"
    )

    account_address: str = Field(
        default="",
        description="Tracked account address (empty when no credentials are stored)"
    )

    local_currency: str = Field(
        default="USD",
        description="Local currency code for price requests"
    )

    default_block_count: int = Field(
        default=10,
        description="History count used until the server reports a block count"
    )

    # ============================================
    # WebSocket Transport
    # ============================================

    ws_heartbeat: int = Field(
        default=30,
        description="WebSocket ping interval (seconds)"
    )

    ws_connect_timeout: int = Field(
        default=10,
        description="WebSocket handshake timeout (seconds)"
    )

    ws_reconnect: bool = Field(
        default=False,
        description="Reconnect automatically after the connection drops"
    )

    ws_max_reconnect_delay: int = Field(
        default=30,
        description="Maximum delay between WebSocket reconnection attempts (seconds)"
    )

    publisher_max_queue_size: int = Field(
        default=0,
        description="Per-subscriber queue size (0 = unbounded)"
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

    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Convert comma-separated CORS origins string to a list.

        Example:
            >>> settings.cors_origins_list
            ['http://localhost:3000', 'http://localhost:5173']
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def has_account(self) -> bool:
        """True when an account address is configured."""
        return bool(self.account_address.strip())


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
        config: Settings to validate (defaults to the global settings)

    Raises:
        ValueError: If required configuration is missing or invalid
    """
    # logging.py imports config.py, so the logger is imported lazily
    from core.logging import logger

    config = config or settings

    if not config.service_url.startswith(("ws://", "wss://")):
        raise ValueError(
            f"Invalid SERVICE_URL: '{config.service_url}'. "
            f"Must start with ws:// or wss://"
        )

    if config.local_currency.upper() not in SUPPORTED_CURRENCIES:
        raise ValueError(
            f"Unsupported LOCAL_CURRENCY: '{config.local_currency}'. "
            f"Must be one of: {', '.join(SUPPORTED_CURRENCIES)}"
        )

    if config.default_block_count < 0:
        raise ValueError(
            f"Invalid DEFAULT_BLOCK_COUNT: {config.default_block_count}. Must be >= 0"
        )

    if config.publisher_max_queue_size < 0:
        raise ValueError(
            f"Invalid PUBLISHER_MAX_QUEUE_SIZE: {config.publisher_max_queue_size}. Must be >= 0"
        )

    if not (1 <= config.app_port <= 65535):
        raise ValueError(f"Invalid port number: {config.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Account service: {config.service_url}")
    logger.info(f"Local currency: {config.local_currency.upper()}")
    logger.info(f"Account configured: {'yes' if config.has_account else 'no'}")
    logger.info(f"Server: {config.app_host}:{config.app_port}")
    logger.info(f"Log level: {config.log_level.upper()}")
