"""Fedora 3 REST payloads and fixtures for a mocked repository."""

from __future__ import annotations

from collections.abc import Mapping

import pytest

from repoclient.config.models import RepositoryConfig

BASE_URL = "http://repo.test/fedora"

_ACCESS_NS = "http://www.fedora.info/definitions/1/0/access/"
_MANAGEMENT_NS = "http://www.fedora.info/definitions/1/0/management/"


def describe_xml(version: str = "3.6.2", namespace: str = "changeme") -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<fedoraRepository xmlns="{_ACCESS_NS}">
  <repositoryName>Fedora Repository</repositoryName>
  <repositoryBaseURL>{BASE_URL}</repositoryBaseURL>
  <repositoryVersion>{version}</repositoryVersion>
  <repositoryPID>
    <PID-namespaceIdentifier>{namespace}</PID-namespaceIdentifier>
    <PID-delimiter>:</PID-delimiter>
    <PID-sample>{namespace}:100</PID-sample>
  </repositoryPID>
  <adminEmail>admin@example.org</adminEmail>
</fedoraRepository>"""


def pid_list_xml(*pids: str) -> str:
    items = "".join(f"<pid>{pid}</pid>" for pid in pids)
    return f'<?xml version="1.0" encoding="UTF-8"?><pidList xmlns="{_MANAGEMENT_NS}">{items}</pidList>'


def object_profile_xml(
    pid: str,
    *,
    label: str = "Example",
    owner: str = "fedoraAdmin",
    state: str = "A",
    models: tuple[str, ...] = ("info:fedora/fedora-system:FedoraObject-3.0",),
) -> str:
    model_items = "".join(f"<model>{model}</model>" for model in models)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<objectProfile xmlns="{_ACCESS_NS}" pid="{pid}">
  <objLabel>{label}</objLabel>
  <objOwnerId>{owner}</objOwnerId>
  <objModels>{model_items}</objModels>
  <objCreateDate>2012-03-01T12:00:00.000Z</objCreateDate>
  <objLastModDate>2012-03-02T12:00:00.000Z</objLastModDate>
  <objState>{state}</objState>
</objectProfile>"""


def datastreams_xml(pid: str, datastreams: Mapping[str, tuple[str, str]]) -> str:
    items = "".join(
        f'<datastream dsid="{dsid}" label="{label}" mimeType="{mime}"/>'
        for dsid, (label, mime) in datastreams.items()
    )
    return f'<?xml version="1.0" encoding="UTF-8"?><objectDatastreams xmlns="{_ACCESS_NS}" pid="{pid}">{items}</objectDatastreams>'


def datastream_profile_xml(
    pid: str,
    dsid: str,
    *,
    label: str = "Dublin Core",
    mimetype: str = "text/xml",
    control_group: str = "X",
    state: str = "A",
    size: int = 42,
) -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<datastreamProfile xmlns="{_MANAGEMENT_NS}" pid="{pid}" dsID="{dsid}">
  <dsLabel>{label}</dsLabel>
  <dsVersionID>{dsid}.0</dsVersionID>
  <dsCreateDate>2012-03-01T12:00:00.000Z</dsCreateDate>
  <dsState>{state}</dsState>
  <dsMIME>{mimetype}</dsMIME>
  <dsControlGroup>{control_group}</dsControlGroup>
  <dsSize>{size}</dsSize>
</datastreamProfile>"""


@pytest.fixture()
def repository_config() -> RepositoryConfig:
    """Configuration pointing at the mocked repository."""
    return RepositoryConfig(url=BASE_URL, username="fedoraAdmin", password="secret")
