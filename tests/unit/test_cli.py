"""Tests for the command-line interface."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest
import responses
from typer.testing import CliRunner

from repoclient.cli import app, exit_code_for
from repoclient.core.exceptions import (
    ConfigError,
    HandleConsumedError,
    RepositoryXmlError,
    TransportError,
)
from repoclient.core.exit_codes import ExitCode
from tests.fixtures.fedora import (
    BASE_URL,
    datastream_profile_xml,
    datastreams_xml,
    describe_xml,
    object_profile_xml,
    pid_list_xml,
)

runner = CliRunner()


@pytest.fixture()
def server() -> Iterator[responses.RequestsMock]:
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        mock.add(responses.GET, f"{BASE_URL}/describe", body=describe_xml(), content_type="text/xml")
        yield mock


@pytest.mark.parametrize(
    "error, expected",
    [
        (ConfigError("bad"), ExitCode.CONFIG_ERROR),
        (TransportError("down", code="COULDNT_CONNECT"), ExitCode.TRANSPORT_ERROR),
        (RepositoryXmlError("garbled"), ExitCode.REPOSITORY_ERROR),
        (HandleConsumedError("used"), ExitCode.USAGE_ERROR),
    ],
)
def test_exit_code_for(error: Exception, expected: ExitCode) -> None:
    assert exit_code_for(error) is expected


def test_describe_prints_json(server: responses.RequestsMock) -> None:
    result = runner.invoke(app, ["describe", "--url", BASE_URL])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["repositoryVersion"] == "3.6.2"
    assert payload["repositoryPID"]["PID-namespaceIdentifier"] == "changeme"


def test_next_id_prints_one_identifier_per_line(server: responses.RequestsMock) -> None:
    server.add(
        responses.POST,
        f"{BASE_URL}/objects/nextPID",
        body=pid_list_xml("demo:1", "demo:2"),
        content_type="text/xml",
    )

    result = runner.invoke(app, ["next-id", "--url", BASE_URL, "--namespace", "demo", "--count", "2"])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert "demo:1" in lines
    assert "demo:2" in lines
    assert "numPIDs=2" in server.calls[-1].request.url


def test_next_id_uuid_does_not_reserve_on_server(server: responses.RequestsMock) -> None:
    result = runner.invoke(app, ["next-id", "--url", BASE_URL, "--uuid"])

    assert result.exit_code == 0, result.output
    assert result.stdout.strip().startswith("changeme:")
    assert not any("nextPID" in call.request.url for call in server.calls)


def test_show_object(server: responses.RequestsMock) -> None:
    server.add(responses.GET, f"{BASE_URL}/objects/demo:1", body=object_profile_xml("demo:1", label="Shown"))
    server.add(
        responses.GET,
        f"{BASE_URL}/objects/demo:1/datastreams",
        body=datastreams_xml("demo:1", {"DC": ("Dublin Core", "text/xml")}),
    )

    result = runner.invoke(app, ["show-object", "demo:1", "--url", BASE_URL])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["id"] == "demo:1"
    assert payload["label"] == "Shown"
    assert payload["datastreams"] == {"DC": {"label": "Dublin Core", "mimetype": "text/xml"}}


def test_show_missing_object_exits_with_http_error(server: responses.RequestsMock) -> None:
    server.add(responses.GET, f"{BASE_URL}/objects/demo:404", body="not found", status=404)

    result = runner.invoke(app, ["show-object", "demo:404", "--url", BASE_URL])

    assert result.exit_code == ExitCode.HTTP_ERROR


@responses.activate
def test_unreachable_repository_exits_with_transport_error() -> None:
    # No mock registered: responses refuses the connection.
    result = runner.invoke(app, ["describe", "--url", BASE_URL])

    assert result.exit_code == ExitCode.TRANSPORT_ERROR


def test_invalid_url_exits_with_config_error() -> None:
    result = runner.invoke(app, ["describe", "--url", "ftp://repo.test"])

    assert result.exit_code == ExitCode.CONFIG_ERROR


def test_invalid_log_format_is_a_usage_error() -> None:
    result = runner.invoke(app, ["describe", "--url", BASE_URL, "--log-format", "xml"])

    # click reports bad parameters with its own usage exit status.
    assert result.exit_code == 2
    assert "Invalid value" in result.output


def test_get_content_to_file(server: responses.RequestsMock, tmp_path: Path) -> None:
    server.add(responses.GET, f"{BASE_URL}/objects/demo:1", body=object_profile_xml("demo:1"))
    server.add(
        responses.GET,
        f"{BASE_URL}/objects/demo:1/datastreams/DC",
        body=datastream_profile_xml("demo:1", "DC"),
    )
    server.add(responses.GET, f"{BASE_URL}/objects/demo:1/datastreams/DC/content", body=b"<dc/>")
    target = tmp_path / "dc.xml"

    result = runner.invoke(app, ["get-content", "demo:1", "DC", "--output", str(target), "--url", BASE_URL])

    assert result.exit_code == 0, result.output
    assert target.read_bytes() == b"<dc/>"


def test_purge_object_with_confirmation_flag(server: responses.RequestsMock) -> None:
    server.add(responses.DELETE, f"{BASE_URL}/objects/demo:1", body="2012-03-02T12:00:00.000Z")

    result = runner.invoke(app, ["purge-object", "demo:1", "--yes", "--url", BASE_URL])

    assert result.exit_code == 0, result.output
    assert "Purged demo:1" in result.stdout


def test_purge_object_aborts_without_confirmation() -> None:
    result = runner.invoke(app, ["purge-object", "demo:1", "--url", BASE_URL], input="n\n")

    assert result.exit_code == 1
