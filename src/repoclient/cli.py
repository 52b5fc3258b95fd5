"""Typer CLI entrypoint."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer

from repoclient.config.loader import load_config, parse_cli_overrides
from repoclient.config.models import RepositoryConfig
from repoclient.core.exceptions import (
    AllocationFailureError,
    ConfigError,
    HttpResponseError,
    InvalidArgumentError,
    RepositoryClientError,
    RepositoryError,
    TransportError,
    TransportUnavailableError,
)
from repoclient.core.exit_codes import ExitCode
from repoclient.core.logger import LogConfig, LogFormat, UnifiedLogger
from repoclient.repository.decorators import Repository

CONFIG_OPTION = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help="Path to a YAML config file.")
URL_OPTION = typer.Option(None, "--url", help="Repository base URL; overrides the config file.")
USERNAME_OPTION = typer.Option(None, "--username", "-u", help="Repository user name.")
PASSWORD_OPTION = typer.Option(None, "--password", "-p", envvar="REPOCLIENT_PASSWORD", help="Repository password.")
SET_OPTION = typer.Option(None, "--set", help="Configuration override in KEY=VALUE form. Repeatable.")
LOG_LEVEL_OPTION = typer.Option("WARNING", "--log-level", help="Logging level.")
LOG_FORMAT_OPTION = typer.Option(LogFormat.KEY_VALUE.value, "--log-format", help="Log format (key_value/json).")

app = typer.Typer(help="Command-line client for digital-object repositories", no_args_is_help=True)

_EXIT_CODES: tuple[tuple[type[RepositoryClientError], ExitCode], ...] = (
    (ConfigError, ExitCode.CONFIG_ERROR),
    (HttpResponseError, ExitCode.HTTP_ERROR),
    (TransportError, ExitCode.TRANSPORT_ERROR),
    (TransportUnavailableError, ExitCode.TRANSPORT_ERROR),
    (AllocationFailureError, ExitCode.TRANSPORT_ERROR),
    (RepositoryError, ExitCode.REPOSITORY_ERROR),
    (InvalidArgumentError, ExitCode.USAGE_ERROR),
)


def exit_code_for(exc: RepositoryClientError) -> ExitCode:
    for error_type, code in _EXIT_CODES:
        if isinstance(exc, error_type):
            return code
    return ExitCode.REPOSITORY_ERROR


@contextmanager
def _handle_errors(command: str) -> Iterator[None]:
    logger = UnifiedLogger.get(__name__)
    try:
        yield
    except RepositoryClientError as exc:
        logger.error("cli.command.failed", command=command, error=exc.to_dict())
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=exit_code_for(exc)) from exc


def _load(
    config: Path | None,
    url: str | None,
    username: str | None,
    password: str | None,
    overrides: list[str] | None,
    log_level: str,
    log_format: str,
) -> RepositoryConfig:
    try:
        UnifiedLogger.configure(LogConfig(level=log_level, format=LogFormat(log_format)))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    assignments: dict[str, Any] = dict(parse_cli_overrides(overrides or []))
    if url is not None:
        assignments["url"] = url
    if username is not None:
        assignments["username"] = username
    if password is not None:
        assignments["password"] = password
    return load_config(config, overrides=assignments)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


@app.command("describe")
def describe_command(
    config: Path | None = CONFIG_OPTION,
    url: str | None = URL_OPTION,
    username: str | None = USERNAME_OPTION,
    password: str | None = PASSWORD_OPTION,
    overrides: list[str] | None = SET_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
    log_format: str = LOG_FORMAT_OPTION,
) -> None:
    """Print the repository description."""
    with _handle_errors("describe"):
        cfg = _load(config, url, username, password, overrides, log_level, log_format)
        with Repository.from_config(cfg) as repository:
            _echo_json(repository.describe())


@app.command("next-id")
def next_id_command(
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="PID namespace."),
    uuid: bool = typer.Option(False, "--uuid", help="Generate UUID based identifiers locally."),
    count: int = typer.Option(1, "--count", min=1, help="Number of identifiers to reserve."),
    config: Path | None = CONFIG_OPTION,
    url: str | None = URL_OPTION,
    username: str | None = USERNAME_OPTION,
    password: str | None = PASSWORD_OPTION,
    overrides: list[str] | None = SET_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
    log_format: str = LOG_FORMAT_OPTION,
) -> None:
    """Reserve identifiers and print one per line."""
    with _handle_errors("next-id"):
        cfg = _load(config, url, username, password, overrides, log_level, log_format)
        with Repository.from_config(cfg) as repository:
            identifiers = repository.get_next_identifier(namespace, uuid, count)
        for identifier in [identifiers] if isinstance(identifiers, str) else identifiers:
            typer.echo(identifier)


@app.command("show-object")
def show_object_command(
    pid: str = typer.Argument(..., help="Object identifier."),
    config: Path | None = CONFIG_OPTION,
    url: str | None = URL_OPTION,
    username: str | None = USERNAME_OPTION,
    password: str | None = PASSWORD_OPTION,
    overrides: list[str] | None = SET_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
    log_format: str = LOG_FORMAT_OPTION,
) -> None:
    """Print the properties and datastreams of an object."""
    with _handle_errors("show-object"):
        cfg = _load(config, url, username, password, overrides, log_level, log_format)
        with Repository.from_config(cfg) as repository:
            obj = repository.get_object(pid)
            _echo_json(
                {
                    "id": obj.id,
                    "label": obj.label,
                    "owner": obj.owner,
                    "state": obj.state,
                    "created_date": obj.created_date,
                    "last_modified_date": obj.last_modified_date,
                    "models": obj.models,
                    "datastreams": obj.datastream_list,
                }
            )


@app.command("purge-object")
def purge_object_command(
    pid: str = typer.Argument(..., help="Object identifier."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    config: Path | None = CONFIG_OPTION,
    url: str | None = URL_OPTION,
    username: str | None = USERNAME_OPTION,
    password: str | None = PASSWORD_OPTION,
    overrides: list[str] | None = SET_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
    log_format: str = LOG_FORMAT_OPTION,
) -> None:
    """Permanently remove an object."""
    if not yes:
        typer.confirm(f"Purge {pid}?", abort=True)
    with _handle_errors("purge-object"):
        cfg = _load(config, url, username, password, overrides, log_level, log_format)
        with Repository.from_config(cfg) as repository:
            repository.purge_object(pid)
        typer.echo(f"Purged {pid}")


@app.command("get-content")
def get_content_command(
    pid: str = typer.Argument(..., help="Object identifier."),
    dsid: str = typer.Argument(..., help="Datastream identifier."),
    output: Path | None = typer.Option(None, "--output", "-o", dir_okay=False, help="Write content to this file."),
    config: Path | None = CONFIG_OPTION,
    url: str | None = URL_OPTION,
    username: str | None = USERNAME_OPTION,
    password: str | None = PASSWORD_OPTION,
    overrides: list[str] | None = SET_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
    log_format: str = LOG_FORMAT_OPTION,
) -> None:
    """Download datastream content to a file or standard output."""
    with _handle_errors("get-content"):
        cfg = _load(config, url, username, password, overrides, log_level, log_format)
        with Repository.from_config(cfg) as repository:
            datastream = repository.get_object(pid).get_datastream(dsid)
            if output is not None:
                datastream.get_content(output)
                typer.echo(f"Wrote {dsid} to {output}")
            else:
                typer.echo(datastream.content or b"", nl=False)


def main() -> None:
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    main()
