"""Configuration for the print queue.

Usage:
    from print_queue.config import Config

    database_url = Config.DATABASE_URL
    limit = Config.QUEUE_LIST_LIMIT
"""

import logging
import os


class Config:
    """Centralized print queue configuration.

    All configuration values are class variables that can be accessed directly.
    Values are loaded from environment variables with sensible defaults.
    """

    # ========================================================================
    # Helper methods (static)
    # ========================================================================

    @staticmethod
    def _get_value(key: str, default: str) -> str:
        """Get configuration value from environment with optional default."""
        return os.getenv(key, default)

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer configuration value."""
        return int(os.getenv(key, str(default)))

    @staticmethod
    def _get_bool(key: str, default: bool = False) -> bool:
        """Get boolean configuration value."""
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    # ========================================================================
    # Database Configuration
    # ========================================================================

    DATABASE_URL: str = _get_value("PRINT_QUEUE_DATABASE_URL", "sqlite:///print_queue.db")
    DATABASE_ECHO: bool = _get_bool("DATABASE_ECHO", False)

    # ========================================================================
    # Queue Configuration
    # ========================================================================

    LOG_LEVEL: str = _get_value("LOG_LEVEL", "INFO")
    QUEUE_LIST_LIMIT: int = _get_int("QUEUE_LIST_LIMIT", 50)

    # ========================================================================
    # MQTT Configuration
    # ========================================================================

    BROADCAST_TYPE: str = _get_value("BROADCAST_TYPE", "none")
    MQTT_BROKER: str = _get_value("MQTT_BROKER", "localhost")
    MQTT_PORT: int = _get_int("MQTT_PORT", 1883)
    MQTT_TOPIC: str = _get_value("MQTT_TOPIC", "print-queue/events")


def configure_logging(level: str | None = None) -> None:
    """Apply LOG_LEVEL (or ``level``) to the root logger."""
    logging.basicConfig(level=(level or Config.LOG_LEVEL).upper())
