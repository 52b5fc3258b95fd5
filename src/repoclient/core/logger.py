"""Structured logging for the transport and repository layers.

Components obtain a bound structlog logger from :class:`UnifiedLogger` and
emit dotted event names (``http.request.completed``, ``cache.evict``,
``repository.object.ingested``).  Loggers always write through the standard
``logging`` tree, where the ``repoclient`` logger carries a
:class:`logging.NullHandler`; an unconfigured library therefore stays silent.
The CLI, or an embedding application, calls :func:`configure_logging` once.

Credentials never reach the rendered output: fields named in
:attr:`LogConfig.redact_fields` are masked, in headers too, and user info
embedded in URL values is stripped.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Iterator, MutableMapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import IO, Any, Final, cast
from urllib.parse import urlsplit, urlunsplit

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    get_contextvars,
    reset_contextvars,
)
from structlog.stdlib import BoundLogger

__all__ = [
    "DEFAULT_LOG_LEVEL",
    "REDACTED",
    "LogConfig",
    "LogFormat",
    "UnifiedLogger",
    "configure_logging",
    "get_logger",
]


class LogFormat(str, Enum):
    """Renderers available for log lines."""

    JSON = "json"
    KEY_VALUE = "key_value"


DEFAULT_LOG_LEVEL = logging.WARNING
"""Library default; the CLI overrides it with ``--log-level``."""

REDACTED: Final[str] = "***REDACTED***"

_ROOT_LOGGER: Final[str] = "repoclient"

# Leading keys of key/value lines; remaining keys follow in emission order.
_LEADING_KEYS: Sequence[str] = ("timestamp", "level", "component", "message")

logging.getLogger(_ROOT_LOGGER).addHandler(logging.NullHandler())


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Settings applied by :func:`configure_logging`.

    ``stream`` defaults to the standard error stream current at configuration
    time.
    """

    level: int | str = DEFAULT_LOG_LEVEL
    format: LogFormat = LogFormat.KEY_VALUE
    redact_fields: Sequence[str] = ("password", "authorization", "auth")
    stream: IO[str] | None = None


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(level.strip().upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level {level!r}")
    return number


def _strip_userinfo(value: str) -> str:
    parts = urlsplit(value)
    if not parts.scheme or "@" not in parts.netloc:
        return value
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit(parts._replace(netloc=f"{REDACTED}@{host}"))


def _redact_sensitive_values(
    _: Any,
    __: str,
    event_dict: MutableMapping[str, Any],
    *,
    redact_fields: Iterable[str],
) -> MutableMapping[str, Any]:
    """Mask credential fields, credential headers and URL user info."""
    sensitive = {name.lower() for name in redact_fields}
    for key, value in list(event_dict.items()):
        if key.lower() in sensitive:
            event_dict[key] = REDACTED
        elif key == "headers" and isinstance(value, dict):
            event_dict[key] = {
                name: REDACTED if name.lower() in sensitive else header
                for name, header in value.items()
            }
        elif key == "url" and isinstance(value, str):
            event_dict[key] = _strip_userinfo(value)
    return event_dict


def _pre_chain(config: LogConfig) -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        partial(_redact_sensitive_values, redact_fields=config.redact_fields),
        structlog.processors.EventRenamer("message"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(format: LogFormat) -> Any:
    if format is LogFormat.JSON:
        return structlog.processors.JSONRenderer(sort_keys=True, ensure_ascii=False)
    return structlog.processors.KeyValueRenderer(
        key_order=_LEADING_KEYS,
        sort_keys=False,
        drop_missing=True,
    )


def configure_logging(config: LogConfig | None = None) -> None:
    """Route structlog through stdlib logging with the requested renderer.

    Raises:
        ValueError: if ``config.level`` is not a known level name.
    """
    cfg = config or LogConfig()
    level = _level_number(cfg.level)
    pre_chain = _pre_chain(cfg)

    handler = logging.StreamHandler(cfg.stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(cfg.format),
            ],
        )
    )
    logging.basicConfig(handlers=[handler], level=level, force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = _ROOT_LOGGER) -> BoundLogger:
    """Return a structlog logger backed by the stdlib logger ``name``.

    Processors come from the structlog configuration current when the logger
    is first bound.
    """
    return cast(BoundLogger, structlog.wrap_logger(logging.getLogger(name), wrapper_class=BoundLogger))


class UnifiedLogger:
    """Single entry point for obtaining loggers and managing log context."""

    @staticmethod
    def configure(config: LogConfig | None = None) -> None:
        configure_logging(config)

    @staticmethod
    def get(name: str | None = None) -> BoundLogger:
        return get_logger(name or _ROOT_LOGGER)

    @staticmethod
    def bind(**context: Any) -> None:
        """Attach ``context`` to every event emitted from this context."""
        bind_contextvars(**context)

    @staticmethod
    def reset() -> None:
        """Drop all context attached with :meth:`bind` or :meth:`scoped`."""
        clear_contextvars()

    @staticmethod
    @contextmanager
    def scoped(**context: Any) -> Iterator[dict[str, Any]]:
        """Attach ``context`` for the duration of a ``with`` block.

        Values bound before the block are restored on exit.
        """
        tokens = bind_contextvars(**context)
        try:
            yield get_contextvars()
        finally:
            reset_contextvars(**tokens)
