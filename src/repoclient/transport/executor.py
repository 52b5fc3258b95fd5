"""Execution of prepared handles.

:class:`TransportExecutor` sends the request described by a
:class:`~repoclient.transport.handle.TransportHandle` exactly once, with no
retries, and turns the outcome into either an
:class:`~repoclient.transport.response.HttpResponse` or an exception:

* :class:`~repoclient.core.exceptions.TransportError` when no response was
  received (DNS, connection, TLS, timeouts);
* :class:`~repoclient.core.exceptions.HttpResponseError` when the server
  answered outside 2xx.  The full response is attached.

The handle is released in every case.
"""

from __future__ import annotations

import io
import time
from collections.abc import Mapping
from typing import IO, Any
from urllib.parse import urlsplit

import requests
from requests.auth import AuthBase, HTTPBasicAuth
from requests.exceptions import (
    ChunkedEncodingError,
    ConnectionError as RequestsConnectionError,
    ConnectTimeout,
    ContentDecodingError,
    InvalidSchema,
    InvalidURL,
    MissingSchema,
    ProxyError,
    RequestException,
    SSLError,
    Timeout,
    TooManyRedirects,
)
from urllib3.exceptions import NameResolutionError

from repoclient.core.exceptions import HttpResponseError, TransportError
from repoclient.core.logger import UnifiedLogger
from repoclient.transport.handle import TransportHandle
from repoclient.transport.options import TransportOption
from repoclient.transport.response import HttpResponse

__all__ = ["TransportExecutor", "error_code_for"]

_HTTP_VERSIONS: Mapping[int, str] = {10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2"}

_CHUNK_SIZE = 64 * 1024


def error_code_for(exc: RequestException) -> str:
    """Map a requests exception onto a stable symbolic error code."""
    # Subclasses of RequestsConnectionError must be checked before it.
    if isinstance(exc, ConnectTimeout):
        return "CONNECT_TIMEOUT"
    if isinstance(exc, SSLError):
        return "SSL_CONNECT_ERROR"
    if isinstance(exc, ProxyError):
        return "PROXY_ERROR"
    if isinstance(exc, RequestsConnectionError):
        reason = getattr(exc.args[0], "reason", None) if exc.args else None
        if isinstance(reason, NameResolutionError):
            return "COULDNT_RESOLVE_HOST"
        return "COULDNT_CONNECT"
    if isinstance(exc, Timeout):
        return "OPERATION_TIMEDOUT"
    if isinstance(exc, TooManyRedirects):
        return "TOO_MANY_REDIRECTS"
    if isinstance(exc, (InvalidURL, InvalidSchema, MissingSchema)):
        return "URL_MALFORMAT"
    if isinstance(exc, (ChunkedEncodingError, ContentDecodingError)):
        return "RECV_ERROR"
    return "TRANSPORT_FAILURE"


def _write(stream: IO[Any], text: str) -> None:
    if isinstance(stream, io.TextIOBase):
        stream.write(text)
    else:
        stream.write(text.encode("iso-8859-1", errors="replace"))


def _header_block(response: requests.Response) -> str:
    raw_version = getattr(response.raw, "version", None)
    version = _HTTP_VERSIONS.get(raw_version, "HTTP/1.1") if isinstance(raw_version, int) else "HTTP/1.1"
    lines = [f"{version} {response.status_code} {response.reason or ''}".rstrip()]
    lines.extend(f"{name}: {value}" for name, value in response.headers.items())
    return "\r\n".join(lines) + "\r\n\r\n"


def _raw_header(response: requests.Response) -> str:
    return "".join(_header_block(item) for item in [*response.history, response])


def _request_header(prepared: requests.PreparedRequest) -> str:
    parts = urlsplit(prepared.url or "")
    lines = [f"{prepared.method} {prepared.path_url} HTTP/1.1", f"Host: {parts.netloc}"]
    lines.extend(f"{name}: {value}" for name, value in prepared.headers.items())
    return "\r\n".join(lines) + "\r\n\r\n"


class TransportExecutor:
    """Send handles and classify their outcome."""

    def __init__(self) -> None:
        self.logger = UnifiedLogger.get(__name__).bind(component="transport.executor")

    def get(self, handle: TransportHandle) -> HttpResponse:
        handle.set_option(TransportOption.METHOD, "GET")
        return self.execute(handle)

    def post(self, handle: TransportHandle) -> HttpResponse:
        handle.set_option(TransportOption.METHOD, "POST")
        return self.execute(handle)

    def put(self, handle: TransportHandle) -> HttpResponse:
        handle.set_option(TransportOption.METHOD, "PUT")
        return self.execute(handle)

    def delete(self, handle: TransportHandle) -> HttpResponse:
        handle.set_option(TransportOption.METHOD, "DELETE")
        return self.execute(handle)

    def execute(self, handle: TransportHandle) -> HttpResponse:
        """Send ``handle`` once and release it.

        Raises:
            HandleConsumedError: if the handle was executed before.
            HandleClosedError: if the handle was closed by its owner.
            TransportError: if no response was received.
            HttpResponseError: if the response status is outside 2xx.
        """
        # Request headers are always captured, whatever the caller set.
        handle.set_option(TransportOption.CAPTURE_REQUEST_HEADERS, True)
        options = handle.options()
        session = handle.session
        url = options[TransportOption.URL]
        method = str(options.get(TransportOption.METHOD, "GET")).upper()

        try:
            prepared = session.prepare_request(self._build_request(method, url, options))
            started = time.perf_counter()
            self.logger.debug("http.request.start", method=method, url=url)
            try:
                response = session.send(prepared, stream=True, **self._send_kwargs(options))
                try:
                    content = self._read_body(response, options)
                finally:
                    response.close()
            except RequestException as exc:
                code = error_code_for(exc)
                error_stream = options.get(TransportOption.ERROR_STREAM)
                if error_stream is not None:
                    _write(error_stream, f"* {code}: {exc}\n")
                self.logger.error(
                    "http.transport.error",
                    method=method,
                    url=url,
                    code=code,
                    error=str(exc),
                )
                raise TransportError(str(exc), code=code, url=url, cause=exc) from exc
            elapsed = time.perf_counter() - started

            header = _raw_header(response)
            header_stream = options.get(TransportOption.HEADER_STREAM)
            if header_stream is not None:
                _write(header_stream, header)
            request_header = _request_header(response.request or prepared)
            info = {
                "url": response.url,
                "method": method,
                "http_code": response.status_code,
                "redirect_count": len(response.history),
                "total_time": elapsed,
                "content_type": response.headers.get("Content-Type"),
                "size_download": len(content) if content is not None else None,
            }
        finally:
            handle.mark_consumed()

        result = HttpResponse(
            status=response.status_code,
            header=header,
            content=content,
            url=response.url,
            request_header=request_header,
            info=info,
        )
        if not result.successful:
            self.logger.warning(
                "http.request.failed",
                method=method,
                url=url,
                status_code=result.status,
                reason=result.status_message(),
            )
            raise HttpResponseError(result)
        self.logger.info(
            "http.request.completed",
            method=method,
            url=url,
            status_code=result.status,
            elapsed_sec=round(elapsed, 4),
        )
        return result

    @staticmethod
    def _build_request(method: str, url: str, options: Mapping[TransportOption, Any]) -> requests.Request:
        headers = dict(options.get(TransportOption.HEADERS) or {})
        user_agent = options.get(TransportOption.USER_AGENT)
        if user_agent:
            headers["User-Agent"] = user_agent

        data: Any = None
        input_stream = options.get(TransportOption.INPUT_FILE)
        if input_stream is not None:
            data = input_stream
            size = options.get(TransportOption.INPUT_SIZE)
            if size is not None:
                headers["Content-Length"] = str(size)
        elif TransportOption.POST_FIELDS in options:
            data = options[TransportOption.POST_FIELDS]

        auth = options.get(TransportOption.AUTH)
        if isinstance(auth, tuple):
            auth = HTTPBasicAuth(*auth)
        elif auth is not None and not isinstance(auth, AuthBase):
            raise TypeError("AUTH must be a (username, password) tuple or a requests AuthBase")

        return requests.Request(
            method=method,
            url=url,
            headers=headers,
            params=options.get(TransportOption.QUERY),
            data=data,
            auth=auth,
        )

    @staticmethod
    def _send_kwargs(options: Mapping[TransportOption, Any]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "allow_redirects": bool(options.get(TransportOption.FOLLOW_REDIRECTS, True)),
            "verify": options.get(TransportOption.VERIFY_SSL, True),
        }
        connect = options.get(TransportOption.CONNECT_TIMEOUT)
        read = options.get(TransportOption.TIMEOUT)
        if connect is not None or read is not None:
            kwargs["timeout"] = (connect, read)
        return kwargs

    @staticmethod
    def _read_body(response: requests.Response, options: Mapping[TransportOption, Any]) -> bytes | None:
        output = options.get(TransportOption.OUTPUT_FILE)
        if output is not None:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if chunk:
                    output.write(chunk)
            output.flush()
            return None
        body = response.content
        if options.get(TransportOption.RETURN_CONTENT):
            return body
        return None
