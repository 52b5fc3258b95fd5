"""Standardized exit codes for the command line interface."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes shared by every ``repoclient`` command."""

    OK = 0
    """Successful execution."""

    USAGE_ERROR = 1
    """Invalid arguments (malformed identifiers, bad option values, ...)."""

    HTTP_ERROR = 2
    """The repository answered with a non-2xx status."""

    TRANSPORT_ERROR = 3
    """The request could not be executed (DNS, connection, timeout)."""

    REPOSITORY_ERROR = 4
    """The repository returned something the client cannot understand."""

    CONFIG_ERROR = 5
    """Configuration error (invalid YAML, missing required settings, etc.)."""
