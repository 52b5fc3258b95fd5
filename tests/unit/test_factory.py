from __future__ import annotations

import pytest
import responses

from repoclient.config.models import RepositoryConfig
from repoclient.core.exceptions import UnsupportedRepositoryError
from repoclient.fedora3.repository import FedoraRepository
from repoclient.repository.decorators import Repository
from repoclient.repository.factory import RepositoryFactory, parse_version
from tests.fixtures.fedora import BASE_URL, describe_xml


@pytest.mark.parametrize(
    "version, expected",
    [("3.6.2", (3, 6, 2)), ("3.8.1-SNAPSHOT", (3, 8, 1)), ("4", (4,))],
)
def test_parse_version(version: str, expected: tuple[int, ...]) -> None:
    assert parse_version(version) == expected


def test_parse_version_rejects_garbage() -> None:
    with pytest.raises(UnsupportedRepositoryError):
        parse_version("unknown")


@responses.activate
def test_selects_fedora3_backend(repository_config: RepositoryConfig) -> None:
    responses.add(responses.GET, f"{BASE_URL}/describe", body=describe_xml("3.6.2"), content_type="text/xml")

    backend = RepositoryFactory.get_repository(repository_config)

    assert isinstance(backend, FedoraRepository)
    assert backend.cache is repository_config.cache
    assert responses.calls[0].request.url == f"{BASE_URL}/describe?xml=true"
    assert responses.calls[0].request.headers["Authorization"].startswith("Basic ")


@responses.activate
def test_rejects_old_versions(repository_config: RepositoryConfig) -> None:
    responses.add(responses.GET, f"{BASE_URL}/describe", body=describe_xml("2.2.4"), content_type="text/xml")

    with pytest.raises(UnsupportedRepositoryError):
        RepositoryFactory.get_repository(repository_config)


@responses.activate
def test_from_config_wraps_backend(repository_config: RepositoryConfig) -> None:
    responses.add(responses.GET, f"{BASE_URL}/describe", body=describe_xml(), content_type="text/xml")

    repository = Repository.from_config(repository_config)

    assert isinstance(repository, Repository)
    assert isinstance(repository.backing, FedoraRepository)


@responses.activate
def test_repository_context_closes_session_pool(repository_config: RepositoryConfig) -> None:
    responses.add(responses.GET, f"{BASE_URL}/describe", body=describe_xml(), content_type="text/xml")

    with Repository.from_config(repository_config) as repository:
        session = repository.backing.api.connection.session
        assert not session.closed

    assert session.closed


@responses.activate
def test_close_is_idempotent(repository_config: RepositoryConfig) -> None:
    responses.add(responses.GET, f"{BASE_URL}/describe", body=describe_xml(), content_type="text/xml")
    repository = Repository.from_config(repository_config)

    repository.close()
    repository.close()

    assert repository.backing.api.connection.session.closed
