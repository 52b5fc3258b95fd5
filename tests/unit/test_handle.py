from __future__ import annotations

import io
import pickle
from pathlib import Path

import pytest
import requests

from repoclient.core.exceptions import (
    AllocationFailureError,
    HandleClosedError,
    InvalidArgumentError,
    InvalidOptionError,
    TransportUnavailableError,
)
from repoclient.transport.handle import TransportHandle
from repoclient.transport.options import TransportOption
from repoclient.transport.session import SharedSession

URL = "http://repo.test/fedora/describe"


def test_records_url_and_initial_options() -> None:
    with TransportHandle(URL, {"timeout": 5, TransportOption.VERIFY_SSL: False}) as handle:
        assert handle.url == URL
        assert handle.get_option(TransportOption.TIMEOUT) == 5
        assert handle.is_option("verify_ssl", False)
        assert not handle.is_option(TransportOption.VERIFY_SSL, True)


def test_set_option_replaces_value() -> None:
    with TransportHandle(URL) as handle:
        handle.set_option(TransportOption.METHOD, "GET")
        handle.set_options({TransportOption.METHOD: "POST", "return_content": True})

        assert handle.get_option("method") == "POST"
        assert handle.has_option(TransportOption.RETURN_CONTENT)
        assert not handle.has_option(TransportOption.AUTH)


def test_get_option_raises_for_unset_option() -> None:
    with TransportHandle(URL) as handle:
        with pytest.raises(InvalidOptionError) as exc_info:
            handle.get_option(TransportOption.AUTH)

    assert exc_info.value.option is TransportOption.AUTH
    assert isinstance(exc_info.value, KeyError)


def test_unknown_option_name_rejected() -> None:
    with TransportHandle(URL) as handle:
        with pytest.raises(InvalidArgumentError):
            handle.set_option("no_such_option", 1)


def test_unsupported_scheme_raises_transport_unavailable() -> None:
    with pytest.raises(TransportUnavailableError):
        TransportHandle("ftp://repo.test/file")


def test_missing_connection_object_raises_allocation_failure() -> None:
    with pytest.raises(AllocationFailureError):
        TransportHandle(URL, session_factory=lambda: None)  # type: ignore[arg-type,return-value]


def test_failing_session_factory_raises_allocation_failure() -> None:
    def broken() -> requests.Session:
        raise RuntimeError("no sockets left")

    with pytest.raises(AllocationFailureError) as exc_info:
        TransportHandle(URL, session_factory=broken)

    assert isinstance(exc_info.value.cause, RuntimeError)


def test_close_releases_every_resource(tmp_path: Path) -> None:
    handle = TransportHandle(URL)
    handle.set_output_file(tmp_path / "out.bin")
    handle.set_input_from_buffer(b"payload")
    output = handle.get_option(TransportOption.OUTPUT_FILE)
    upload = handle.get_option(TransportOption.INPUT_FILE)
    errors = io.StringIO()
    headers = io.StringIO()
    handle.set_option(TransportOption.ERROR_STREAM, errors)
    handle.set_option(TransportOption.HEADER_STREAM, headers)

    handle.close()

    assert handle.closed
    assert output.closed
    assert upload.closed
    assert errors.closed
    assert headers.closed


def test_close_is_idempotent() -> None:
    handle = TransportHandle(URL)

    handle.close()
    handle.close()

    assert handle.closed


def test_closed_handle_rejects_option_access() -> None:
    handle = TransportHandle(URL)
    handle.close()

    with pytest.raises(HandleClosedError):
        handle.get_option(TransportOption.URL)
    with pytest.raises(HandleClosedError):
        handle.set_option(TransportOption.TIMEOUT, 1)


def test_new_output_file_closes_previous(tmp_path: Path) -> None:
    with TransportHandle(URL) as handle:
        handle.set_output_file(tmp_path / "first.bin")
        first = handle.get_option(TransportOption.OUTPUT_FILE)

        handle.set_output_file(tmp_path / "second.bin")

        assert first.closed
        assert not handle.get_option(TransportOption.OUTPUT_FILE).closed


def test_input_file_records_size(tmp_path: Path) -> None:
    source = tmp_path / "upload.txt"
    source.write_bytes(b"0123456789")

    with TransportHandle(URL) as handle:
        handle.set_input_file(source)

        assert handle.get_option(TransportOption.INPUT_SIZE) == 10


def test_input_buffer_accepts_text() -> None:
    with TransportHandle(URL) as handle:
        handle.set_input_from_buffer("héllo")

        assert handle.get_option(TransportOption.INPUT_SIZE) == len("héllo".encode())


def test_missing_input_file_rejected(tmp_path: Path) -> None:
    with TransportHandle(URL) as handle:
        with pytest.raises(InvalidArgumentError):
            handle.set_input_file(tmp_path / "missing.txt")


def test_handle_cannot_be_pickled() -> None:
    with TransportHandle(URL) as handle:
        with pytest.raises(TypeError):
            pickle.dumps(handle)


def test_shared_session_survives_handle_close() -> None:
    with SharedSession() as shared:
        handle = shared.create_handle(URL)
        handle.close()

        assert handle.closed
        assert not shared.closed
        assert shared.create_handle(URL).session is shared.session
    assert shared.closed
