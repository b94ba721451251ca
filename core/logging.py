"""
Unified Logging Configuration

This module sets up a centralized logging system for the entire application.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Connected to account service")

Log Levels (from most to least verbose):
    DEBUG    - Outgoing requests and classified frames
    INFO     - Connection lifecycle (opened, closed)
    WARNING  - Dropped frames, skipped requests
    ERROR    - Send failures, transport failures, malformed frames

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.
"""

import logging
import sys
from typing import Optional


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include module name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Application started")
        2024-01-01 12:00:00 [INFO] raicast: Application started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s:")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    logger = logging.getLogger("raicast")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level if hasattr(settings, 'log_level') else "INFO"
except ImportError:
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger instance for the specified name

    Example:
        # In services/account_service.py:
        logger = get_logger(__name__)  # "raicast.services.account_service"
    """
    return logging.getLogger(f"raicast.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_websocket_event(event: str, url: str = None, details: str = None) -> None:
    """
    Log a WebSocket lifecycle event with consistent formatting.

    Args:
        event: Event type (e.g., "opened", "closed", "error")
        url: Service URL (optional)
        details: Additional details (optional)

    Example:
        >>> log_websocket_event("opened", "wss://raicast.lightrai.com:443")
        [INFO] WebSocket: opened | URL: wss://raicast.lightrai.com:443
    """
    url_str = f" | URL: {url}" if url else ""
    details_str = f" | {details}" if details else ""

    level = logging.ERROR if event == "error" else logging.INFO
    logger.log(level, f"WebSocket: {event}{url_str}{details_str}")


def log_outgoing_request(action: str, payload: str) -> None:
    """
    Log an outgoing request document at DEBUG level.

    Example:
        >>> log_outgoing_request("price", '{"action":"price","currency":"USD"}')
        [DEBUG] Request: price | Payload: {"action":"price","currency":"USD"}
    """
    logger.debug(f"Request: {action} | Payload: {payload}")


logger.debug("Logging system initialized")
