"""HTTP connection to a Fedora 3 REST endpoint."""

from __future__ import annotations

import os
from collections.abc import Mapping
from types import TracebackType
from typing import Any
from urllib.parse import quote

from repoclient.config.models import RepositoryConfig
from repoclient.transport.executor import TransportExecutor
from repoclient.transport.handle import TransportHandle
from repoclient.transport.options import TransportOption
from repoclient.transport.response import HttpResponse
from repoclient.transport.session import SharedSession

__all__ = ["RepositoryConnection", "quote_segment"]


def quote_segment(value: str) -> str:
    """Percent-encode one path segment, keeping PID separators readable."""
    return quote(value, safe=":")


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class RepositoryConnection:
    """Issue requests against the repository described by a config.

    Handles are created per request on a session shared for the lifetime of
    the connection.
    """

    def __init__(
        self,
        config: RepositoryConfig,
        *,
        executor: TransportExecutor | None = None,
        session: SharedSession | None = None,
    ) -> None:
        self.config = config
        self.executor = executor or TransportExecutor()
        self._owns_session = session is None
        self.session = session or SharedSession()

    def __enter__(self) -> RepositoryConnection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def build_url(self, path: str) -> str:
        return f"{self.config.url}/{path.lstrip('/')}"

    def create_handle(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportHandle:
        """Return a handle carrying the configured transport defaults."""
        transport = self.config.transport
        options: dict[TransportOption, Any] = {
            TransportOption.HEADERS: {**transport.headers, **(headers or {})},
            TransportOption.CONNECT_TIMEOUT: transport.connect_timeout_sec,
            TransportOption.TIMEOUT: transport.timeout_sec,
            TransportOption.VERIFY_SSL: transport.verify_ssl,
            TransportOption.FOLLOW_REDIRECTS: transport.follow_redirects,
            TransportOption.RETURN_CONTENT: True,
        }
        if params:
            options[TransportOption.QUERY] = {
                key: _query_value(value) for key, value in params.items() if value is not None
            }
        credentials = self.config.credentials
        if credentials is not None:
            options[TransportOption.AUTH] = credentials
        return self.session.create_handle(self.build_url(path), options)

    def _attach_body(
        self,
        handle: TransportHandle,
        *,
        data: str | bytes | None,
        file: str | os.PathLike[str] | None,
        content_type: str | None,
    ) -> None:
        if file is not None:
            handle.set_input_file(file)
        elif data is not None:
            handle.set_input_from_buffer(data)
        if content_type and (file is not None or data is not None):
            headers = dict(handle.get_option(TransportOption.HEADERS))
            headers["Content-Type"] = content_type
            handle.set_option(TransportOption.HEADERS, headers)

    def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        output_file: str | os.PathLike[str] | None = None,
    ) -> HttpResponse:
        handle = self.create_handle(path, params=params)
        if output_file is not None:
            handle.set_output_file(output_file)
        return self.executor.get(handle)

    def post(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: str | bytes | None = None,
        file: str | os.PathLike[str] | None = None,
        content_type: str | None = None,
    ) -> HttpResponse:
        handle = self.create_handle(path, params=params)
        self._attach_body(handle, data=data, file=file, content_type=content_type)
        return self.executor.post(handle)

    def put(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: str | bytes | None = None,
        file: str | os.PathLike[str] | None = None,
        content_type: str | None = None,
    ) -> HttpResponse:
        handle = self.create_handle(path, params=params)
        self._attach_body(handle, data=data, file=file, content_type=content_type)
        return self.executor.put(handle)

    def delete(self, path: str, *, params: Mapping[str, Any] | None = None) -> HttpResponse:
        return self.executor.delete(self.create_handle(path, params=params))
