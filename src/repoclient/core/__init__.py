"""Core primitives: errors, logging, caching and delegation."""

from repoclient.core.cache import DEFAULT_CAPACITY, AbstractCache, BoundedCache
from repoclient.core.delegate import Delegate, Reference
from repoclient.core.exceptions import (
    AllocationFailureError,
    ConfigError,
    ErrorContext,
    ErrorDomain,
    ErrorSeverity,
    HandleClosedError,
    HandleConsumedError,
    HttpResponseError,
    InvalidArgumentError,
    InvalidBackingObjectError,
    InvalidOptionError,
    RepositoryClientError,
    RepositoryError,
    RepositoryXmlError,
    TransportError,
    TransportUnavailableError,
    UnsupportedRepositoryError,
)
from repoclient.core.exit_codes import ExitCode
from repoclient.core.logger import LogConfig, LogFormat, UnifiedLogger, configure_logging, get_logger

__all__ = [
    "DEFAULT_CAPACITY",
    "AbstractCache",
    "AllocationFailureError",
    "BoundedCache",
    "ConfigError",
    "Delegate",
    "ErrorContext",
    "ErrorDomain",
    "ErrorSeverity",
    "ExitCode",
    "HandleClosedError",
    "HandleConsumedError",
    "HttpResponseError",
    "InvalidArgumentError",
    "InvalidBackingObjectError",
    "InvalidOptionError",
    "LogConfig",
    "LogFormat",
    "Reference",
    "RepositoryClientError",
    "RepositoryError",
    "RepositoryXmlError",
    "TransportError",
    "TransportUnavailableError",
    "UnifiedLogger",
    "UnsupportedRepositoryError",
    "configure_logging",
    "get_logger",
]
