"""Unified exception hierarchy for the repository client.

Failures are grouped by domain so that callers can tell apart local
precondition failures, an environment that cannot issue requests at all,
requests that never completed, and requests the server answered with an
error status.  Only the last category carries a usable response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from repoclient.transport.response import HttpResponse

__all__ = [
    "ErrorDomain",
    "ErrorSeverity",
    "ErrorContext",
    "RepositoryClientError",
    "InvalidArgumentError",
    "InvalidBackingObjectError",
    "InvalidOptionError",
    "HandleClosedError",
    "HandleConsumedError",
    "TransportUnavailableError",
    "AllocationFailureError",
    "TransportError",
    "HttpResponseError",
    "ConfigError",
    "RepositoryError",
    "RepositoryXmlError",
    "UnsupportedRepositoryError",
]


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"  # Local, recoverable by the caller
    MEDIUM = "medium"  # Request-level failure
    HIGH = "high"  # Environment cannot issue requests
    CRITICAL = "critical"


class ErrorDomain(Enum):
    """Error domains for categorization."""

    ARGUMENT = "argument"
    TRANSPORT = "transport"
    HTTP = "http"
    CACHE = "cache"
    DELEGATION = "delegation"
    REPOSITORY = "repository"
    CONFIG = "config"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Context information attached to every client error."""

    domain: ErrorDomain
    severity: ErrorSeverity
    component: str | None = None
    operation: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


class RepositoryClientError(Exception):
    """Base exception for all repository client errors."""

    domain = ErrorDomain.UNKNOWN
    severity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        component: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = ErrorContext(
            domain=self.domain,
            severity=self.severity,
            component=component,
            operation=operation,
            details=dict(details or {}),
        )
        self.cause = cause

    def __str__(self) -> str:
        base_msg = self.message
        if self.context.component:
            base_msg = f"[{self.context.component}] {base_msg}"
        if self.context.operation:
            base_msg = f"{base_msg} (operation: {self.context.operation})"
        return base_msg

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "domain": self.context.domain.value,
            "severity": self.context.severity.value,
            "component": self.context.component,
            "operation": self.context.operation,
            "details": self.context.details,
            "cause": str(self.cause) if self.cause else None,
        }


# Argument errors
class InvalidArgumentError(RepositoryClientError, ValueError):
    """Raised when construction input is malformed."""

    domain = ErrorDomain.ARGUMENT
    severity = ErrorSeverity.LOW


class InvalidBackingObjectError(InvalidArgumentError):
    """Raised when a delegate is given a backing object it cannot wrap."""

    domain = ErrorDomain.DELEGATION


class InvalidOptionError(InvalidArgumentError, KeyError):
    """Raised when reading a transport option that was never set."""

    def __init__(self, option: Any, **kwargs: Any) -> None:
        super().__init__(
            f"Transport option {option} is not defined",
            component="transport.handle",
            details={"option": str(option)},
            **kwargs,
        )
        self.option = option


class HandleClosedError(InvalidArgumentError):
    """Raised when a released handle is inspected or configured."""


class HandleConsumedError(HandleClosedError):
    """Raised when a handle is passed to the executor a second time."""


# Environment errors
class TransportUnavailableError(RepositoryClientError):
    """Raised when the environment cannot serve a request for the target."""

    domain = ErrorDomain.TRANSPORT
    severity = ErrorSeverity.HIGH


class AllocationFailureError(RepositoryClientError):
    """Raised when a connection object cannot be obtained."""

    domain = ErrorDomain.TRANSPORT
    severity = ErrorSeverity.HIGH


# Request errors
class TransportError(RepositoryClientError):
    """Raised when a request could not be completed at the network level."""

    domain = ErrorDomain.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        code: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message,
            component="transport.executor",
            details={"code": code, "url": url},
            cause=cause,
        )
        self.code = code
        self.url = url


class HttpResponseError(RepositoryClientError):
    """Raised when the server answered with a status outside 2xx."""

    domain = ErrorDomain.HTTP

    def __init__(self, response: HttpResponse, *, cause: Exception | None = None) -> None:
        message = response.status_message() or f"HTTP {response.status}"
        super().__init__(
            message,
            component="transport.executor",
            details={"status_code": response.status, "url": response.url},
            cause=cause,
        )
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status


# Configuration errors
class ConfigError(RepositoryClientError):
    """Raised when configuration files are missing or invalid."""

    domain = ErrorDomain.CONFIG
    severity = ErrorSeverity.HIGH

    def __init__(
        self,
        message: str,
        *,
        config_file: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message,
            component="config",
            details={"config_file": config_file},
            cause=cause,
        )
        self.config_file = config_file


# Repository errors
class RepositoryError(RepositoryClientError):
    """Base class for repository backend failures."""

    domain = ErrorDomain.REPOSITORY


class RepositoryXmlError(RepositoryError):
    """Raised when the repository returned a payload that cannot be parsed."""


class UnsupportedRepositoryError(RepositoryError):
    """Raised when no backend implementation supports the repository."""
