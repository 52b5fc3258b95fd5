"""Connection state shared between handles."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from repoclient.transport.handle import TransportHandle
from repoclient.transport.options import TransportOption

__all__ = ["SharedSession"]


class SharedSession:
    """A :class:`requests.Session` reused by many handles.

    Handles created here share the connection pool and cookie jar.  Closing
    a handle leaves the session open; :meth:`close` releases it.
    """

    def __init__(self, *, pool_connections: int = 10, pool_maxsize: int = 10) -> None:
        self._lock = threading.Lock()
        self._session = requests.Session()
        # Requests are sent exactly once; failures surface to the caller.
        adapter = HTTPAdapter(
            max_retries=Retry(total=0, read=False),
            pool_connections=pool_connections,
            pool_maxsize=pool_maxsize,
        )
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)
        self._closed = False

    def __enter__(self) -> SharedSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def session(self) -> requests.Session:
        return self._session

    @property
    def closed(self) -> bool:
        return self._closed

    def create_handle(
        self,
        url: str,
        options: Mapping[TransportOption | str, Any] | None = None,
    ) -> TransportHandle:
        """Return a new handle bound to the shared session."""
        return TransportHandle(url, options, session=self._session)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._session.close()
