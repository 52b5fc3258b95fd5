"""Names of the options a :class:`~repoclient.transport.handle.TransportHandle` understands."""

from __future__ import annotations

from enum import Enum
from typing import Final

from repoclient.core.exceptions import InvalidArgumentError

__all__ = ["TransportOption", "RESOURCE_OPTIONS", "coerce_option"]


class TransportOption(str, Enum):
    """Request level options recorded on a handle."""

    URL = "url"
    METHOD = "method"
    HEADERS = "headers"
    USER_AGENT = "user_agent"
    AUTH = "auth"
    QUERY = "query"
    POST_FIELDS = "post_fields"
    CONNECT_TIMEOUT = "connect_timeout"
    TIMEOUT = "timeout"
    FOLLOW_REDIRECTS = "follow_redirects"
    VERIFY_SSL = "verify_ssl"
    # Keep the body in HttpResponse.content instead of discarding it.
    RETURN_CONTENT = "return_content"
    # Record the outgoing request line and headers on the response.
    CAPTURE_REQUEST_HEADERS = "capture_request_headers"
    OUTPUT_FILE = "output_file"
    INPUT_FILE = "input_file"
    INPUT_SIZE = "input_size"
    ERROR_STREAM = "error_stream"
    HEADER_STREAM = "header_stream"

    def __str__(self) -> str:
        return self.value


RESOURCE_OPTIONS: Final[tuple[TransportOption, ...]] = (
    TransportOption.OUTPUT_FILE,
    TransportOption.INPUT_FILE,
    TransportOption.ERROR_STREAM,
    TransportOption.HEADER_STREAM,
)
"""Options whose values are open streams owned by the handle."""


def coerce_option(name: TransportOption | str) -> TransportOption:
    """Return the :class:`TransportOption` for ``name``."""
    if isinstance(name, TransportOption):
        return name
    try:
        return TransportOption(str(name).lower())
    except ValueError as exc:
        raise InvalidArgumentError(
            f"Unknown transport option: {name!r}",
            component="transport.handle",
            cause=exc,
        ) from exc
