"""Enums shared by configuration and logging."""

import logging
from enum import Enum


class Environment(Enum):
    """Deployment environment."""

    DEVELOPMENT = "dev"
    TESTING = "test"
    STAGING = "staging"
    PRODUCTION = "prod"

    @property
    def is_production(self) -> bool:
        return self == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self == Environment.TESTING


class LogLevel(Enum):
    """Log level names accepted in ``ROLEGATE_LOG_LEVEL``."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        """Standard library level number, e.g. ``20`` for ``INFO``."""
        return logging.getLevelName(self.value)


class LogFormat(Enum):
    """Renderer used for log output."""

    JSON = "json"
    CONSOLE = "console"
    KEY_VALUE = "key_value"
