# ruff: noqa: A005
"""Structured logging on top of structlog.

Modules create their logger once at import time and pass context as
keyword arguments:

    logger = get_logger(__name__)
    logger.warning("Identity record could not be mapped", record_id=record.id)

Loggers are cheap proxies. structlog is configured by
:func:`configure_logging`, or lazily from settings on the first emitted
record, so a logger created at import time always follows the most recent
configuration. Every record passes through the sanitizing processors
(credential masking, message truncation) before it is rendered.
"""

import logging
import re
import sys
from collections.abc import MutableMapping
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from rolegate.core.enums import Environment, LogFormat, LogLevel
from rolegate.core.errors import ConfigurationError

# =====================================================================================
# CONFIGURATION
# =====================================================================================


@dataclass
class LogConfig:
    """
    Logging configuration.

    ``format`` and the caller-info switch follow the environment unless set
    explicitly: console output with call sites in development, key/value
    output at WARNING in testing, JSON elsewhere.

    Usage Example:
        configure_logging(LogConfig(level=LogLevel.DEBUG, environment=Environment.DEVELOPMENT))
    """

    level: LogLevel = LogLevel.INFO
    environment: Environment = Environment.DEVELOPMENT
    format: LogFormat | None = None
    include_caller: bool | None = None
    mask_sensitive_fields: bool = True
    max_message_length: int = 10000

    def __post_init__(self):
        if self.max_message_length < 1000:
            raise ConfigurationError(
                "Maximum log message length must be at least 1000 characters",
                config_key="max_message_length",
            )

        if self.environment == Environment.DEVELOPMENT:
            defaults = (LogFormat.CONSOLE, True)
        elif self.environment == Environment.TESTING:
            defaults = (LogFormat.KEY_VALUE, False)
            self.level = LogLevel.WARNING
        else:
            defaults = (LogFormat.JSON, False)

        if self.format is None:
            self.format = defaults[0]
        if self.include_caller is None:
            self.include_caller = defaults[1]

    @classmethod
    def from_settings(cls) -> "LogConfig":
        from rolegate.core.config import get_settings

        settings = get_settings()
        return cls(level=settings.log_level, environment=settings.environment)


# =====================================================================================
# SANITIZING PROCESSORS
# =====================================================================================


class SensitiveDataFilter:
    """
    structlog processor that masks credential-like fields.

    A field is masked when its name contains one of the sensitive fragments,
    at any nesting depth of dict values.
    """

    MASK = "***[MASKED]"
    DEFAULT_FRAGMENTS = ("password", "secret", "token", "credential", "hash")

    def __init__(self, fragments: tuple[str, ...] = DEFAULT_FRAGMENTS):
        self._pattern = re.compile("|".join(map(re.escape, fragments)), re.IGNORECASE)

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        return self._mask(event_dict)

    def _mask(self, values: MutableMapping[str, Any]) -> dict[str, Any]:
        masked: dict[str, Any] = {}
        for key, value in values.items():
            if key != "event" and self._pattern.search(key):
                masked[key] = None if value is None else self.MASK
            elif isinstance(value, dict):
                masked[key] = self._mask(value)
            else:
                masked[key] = value
        return masked


class MessageLengthFilter:
    """structlog processor that truncates oversized event messages."""

    SUFFIX = "... [TRUNCATED]"

    def __init__(self, max_length: int):
        self.max_length = max_length

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        message = event_dict.get("event")
        if isinstance(message, str) and len(message) > self.max_length:
            event_dict["event"] = message[: self.max_length - len(self.SUFFIX)] + self.SUFFIX
            event_dict["message_truncated"] = True
        return event_dict


def _renderer(log_format: LogFormat) -> Processor:
    if log_format == LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    if log_format == LogFormat.CONSOLE:
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    return structlog.processors.KeyValueRenderer(key_order=["event", "logger", "level"])


def build_processors(config: LogConfig) -> list[Processor]:
    """Processor chain for ``config``, ending with its renderer."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if config.include_caller:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )
    if config.mask_sensitive_fields:
        processors.append(SensitiveDataFilter())
    processors.append(MessageLengthFilter(config.max_message_length))
    processors.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(config.format),
        ]
    )
    return processors


# =====================================================================================
# LOGGERS
# =====================================================================================

_active_config: LogConfig | None = None


def configure_logging(config: LogConfig | None = None) -> LogConfig:
    """
    Configure structlog and the standard library root logger.

    Calling it again replaces the previous configuration; loggers created
    earlier pick up the new one.

    Args:
        config: Logging configuration (built from settings if not provided)

    Returns:
        LogConfig: The configuration now in effect
    """
    global _active_config  # noqa: PLW0603

    config = config or LogConfig.from_settings()

    structlog.configure(
        processors=build_processors(config),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(config.level.numeric)

    noisy_level = logging.WARNING if config.environment.is_production else logging.INFO
    for name in ("sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(name).setLevel(max(noisy_level, config.level.numeric))

    _active_config = config
    return config


class StructuredLogger:
    """
    Module logger with keyword context.

    The methods mirror the standard library logger but take keyword context
    instead of positional format arguments.
    """

    def __init__(self, name: str):
        self.name = name
        self._logger = structlog.get_logger(name)

    def _emit(self, method: str, message: str, **kwargs: Any) -> None:
        if _active_config is None:
            configure_logging()
        getattr(self._logger, method)(message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._emit("debug", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("error", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        kwargs.setdefault("exc_info", True)
        self._emit("error", message, **kwargs)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogger: Logger bound to ``name``
    """
    return StructuredLogger(name)


def log_context(**kwargs: Any) -> AbstractContextManager[None]:
    """
    Bind context to every record logged from the current task inside the block.

    Values bound by an enclosing block are restored on exit.

    Usage Example:
        with log_context(operation="create_user"):
            logger.info("User account created")
    """
    return structlog.contextvars.bound_contextvars(**kwargs)


__all__ = [
    "LogConfig",
    "MessageLengthFilter",
    "SensitiveDataFilter",
    "StructuredLogger",
    "build_processors",
    "configure_logging",
    "get_logger",
    "log_context",
]
