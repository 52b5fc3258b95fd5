"""Single-use request handles.

A :class:`TransportHandle` records the options of one request and owns the
streams attached to it.  It is executed at most once by
:class:`~repoclient.transport.executor.TransportExecutor`, which releases the
handle afterwards whatever the outcome.
"""

from __future__ import annotations

import io
import os
from collections.abc import Callable, Mapping
from types import TracebackType
from typing import IO, Any

import requests
from requests.exceptions import InvalidSchema, InvalidURL, MissingSchema

from repoclient.core.exceptions import (
    AllocationFailureError,
    HandleClosedError,
    HandleConsumedError,
    InvalidArgumentError,
    InvalidOptionError,
    TransportUnavailableError,
)
from repoclient.core.logger import UnifiedLogger
from repoclient.transport.options import RESOURCE_OPTIONS, TransportOption, coerce_option

__all__ = ["TransportHandle"]

logger = UnifiedLogger.get(__name__)

SessionFactory = Callable[[], requests.Session]


class TransportHandle:
    """Options and resources of one request.

    The handle creates and owns its own :class:`requests.Session` unless a
    shared session is supplied, in which case closing the handle leaves the
    session open.
    """

    def __init__(
        self,
        url: str,
        options: Mapping[TransportOption | str, Any] | None = None,
        *,
        session: requests.Session | None = None,
        session_factory: SessionFactory = requests.Session,
    ) -> None:
        self._closed = False
        self._consumed = False
        self._options: dict[TransportOption, Any] = {}
        self._owns_session = session is None
        if session is None:
            try:
                session = session_factory()
            except Exception as exc:
                raise AllocationFailureError(
                    "Could not allocate a connection object",
                    component="transport.handle",
                    cause=exc,
                ) from exc
            if session is None:
                raise AllocationFailureError(
                    "Could not allocate a connection object",
                    component="transport.handle",
                )
        self._session = session
        try:
            session.get_adapter(url)
        except (InvalidSchema, InvalidURL, MissingSchema) as exc:
            self.close()
            raise TransportUnavailableError(
                f"No transport available for {url!r}",
                component="transport.handle",
                details={"url": url},
                cause=exc,
            ) from exc
        self._options[TransportOption.URL] = url
        if options:
            self.set_options(options)

    def __enter__(self) -> TransportHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __del__(self) -> None:
        # Partially constructed handles have no state to release.
        if getattr(self, "_closed", True) is False:
            self.close()

    def __reduce_ex__(self, protocol: Any) -> Any:
        raise TypeError(f"{type(self).__name__} cannot be serialized")

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<TransportHandle {self._options.get(TransportOption.URL)!r} {state}>"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def consumed(self) -> bool:
        """``True`` once the handle has been executed."""
        return self._consumed

    @property
    def url(self) -> str:
        return self.get_option(TransportOption.URL)

    @property
    def session(self) -> requests.Session:
        """The underlying session. Changes made to it are not tracked."""
        self._ensure_open()
        return self._session

    def _ensure_open(self) -> None:
        if self._consumed:
            raise HandleConsumedError(
                "Handle has already been executed",
                component="transport.handle",
            )
        if self._closed:
            raise HandleClosedError("Handle is closed", component="transport.handle")

    def set_option(self, option: TransportOption | str, value: Any) -> None:
        """Record ``value`` for ``option``, replacing any previous value."""
        self._ensure_open()
        self._options[coerce_option(option)] = value

    def set_options(self, options: Mapping[TransportOption | str, Any]) -> None:
        self._ensure_open()
        resolved = {coerce_option(name): value for name, value in options.items()}
        self._options.update(resolved)

    def has_option(self, option: TransportOption | str) -> bool:
        self._ensure_open()
        return coerce_option(option) in self._options

    def get_option(self, option: TransportOption | str) -> Any:
        """Return the value recorded for ``option``.

        Raises:
            InvalidOptionError: if the option was never set.
        """
        self._ensure_open()
        key = coerce_option(option)
        try:
            return self._options[key]
        except KeyError:
            raise InvalidOptionError(key) from None

    def is_option(self, option: TransportOption | str, value: Any) -> bool:
        """Check whether ``option`` is set and equal to ``value``."""
        self._ensure_open()
        key = coerce_option(option)
        return key in self._options and self._options[key] == value

    def options(self) -> dict[TransportOption, Any]:
        """Return a copy of every recorded option."""
        self._ensure_open()
        return dict(self._options)

    def set_output_file(self, path: str | os.PathLike[str]) -> None:
        """Stream the response body into ``path`` instead of memory.

        A previously attached output file is closed first.
        """
        self._ensure_open()
        self._close_resource(TransportOption.OUTPUT_FILE)
        self._options[TransportOption.OUTPUT_FILE] = open(path, "wb")  # noqa: SIM115

    def set_input_file(self, path: str | os.PathLike[str]) -> None:
        """Send the contents of ``path`` as the request body."""
        self._ensure_open()
        if not os.path.isfile(path):
            raise InvalidArgumentError(
                f"Input file does not exist: {os.fspath(path)}",
                component="transport.handle",
            )
        self._close_resource(TransportOption.INPUT_FILE)
        self._options[TransportOption.INPUT_FILE] = open(path, "rb")  # noqa: SIM115
        self._options[TransportOption.INPUT_SIZE] = os.path.getsize(path)

    def set_input_from_buffer(self, data: bytes | str) -> None:
        """Send ``data`` as the request body."""
        self._ensure_open()
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        self._close_resource(TransportOption.INPUT_FILE)
        self._options[TransportOption.INPUT_FILE] = io.BytesIO(payload)
        self._options[TransportOption.INPUT_SIZE] = len(payload)

    def _close_resource(self, option: TransportOption) -> None:
        stream: IO[Any] | None = self._options.pop(option, None)
        if stream is not None and not getattr(stream, "closed", True):
            stream.close()

    def mark_consumed(self) -> None:
        """Flag the handle as executed and release it."""
        self._consumed = True
        self.close()

    def close(self) -> None:
        """Release attached streams and, if owned, the session.

        Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True
        for option in RESOURCE_OPTIONS:
            try:
                self._close_resource(option)
            except OSError as exc:
                logger.warning("transport.handle.close_failed", option=option.value, error=str(exc))
        session = getattr(self, "_session", None)
        if self._owns_session and session is not None:
            session.close()
