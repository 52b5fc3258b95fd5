"""Calls of the Fedora 3 REST API used by the backend."""

from __future__ import annotations

import os
from typing import Any

from repoclient.core.exceptions import InvalidArgumentError
from repoclient.fedora3.connection import RepositoryConnection, quote_segment
from repoclient.fedora3.serializer import FedoraApiSerializer

__all__ = ["FedoraApi"]


def _object_path(pid: str, *segments: str) -> str:
    return "/".join(["objects", quote_segment(pid), *(quote_segment(segment) for segment in segments)])


class FedoraApi:
    """Thin mapping of REST endpoints onto methods returning parsed data."""

    def __init__(self, connection: RepositoryConnection, serializer: FedoraApiSerializer | None = None) -> None:
        self.connection = connection
        self.serializer = serializer or FedoraApiSerializer()

    def describe_repository(self) -> dict[str, Any]:
        response = self.connection.get("describe", params={"xml": True})
        return self.serializer.describe_repository(response)

    def get_next_pid(self, namespace: str | None = None, number: int = 1) -> list[str]:
        if number < 1:
            raise InvalidArgumentError(
                f"Number of identifiers must be positive, got {number}",
                component="fedora3.api",
            )
        response = self.connection.post(
            "objects/nextPID",
            params={"numPIDs": number, "namespace": namespace, "format": "xml"},
        )
        return self.serializer.get_next_pid(response)

    def get_object_profile(self, pid: str) -> dict[str, Any]:
        response = self.connection.get(_object_path(pid), params={"format": "xml"})
        return self.serializer.get_object_profile(response)

    def ingest(
        self,
        pid: str,
        *,
        label: str | None = None,
        owner_id: str | None = None,
        state: str | None = None,
        log_message: str | None = None,
    ) -> str:
        """Create an empty object; returns the PID assigned by the server."""
        response = self.connection.post(
            _object_path(pid),
            params={"label": label, "ownerId": owner_id, "state": state, "logMessage": log_message},
        )
        body = (response.content or b"").decode("utf-8", errors="replace").strip()
        return body or pid

    def modify_object(
        self,
        pid: str,
        *,
        label: str | None = None,
        owner_id: str | None = None,
        state: str | None = None,
        log_message: str | None = None,
    ) -> str:
        """Update object properties; returns the new modification timestamp."""
        response = self.connection.put(
            _object_path(pid),
            params={"label": label, "ownerId": owner_id, "state": state, "logMessage": log_message},
        )
        return (response.content or b"").decode("utf-8", errors="replace").strip()

    def purge_object(self, pid: str, log_message: str | None = None) -> str:
        response = self.connection.delete(_object_path(pid), params={"logMessage": log_message})
        return (response.content or b"").decode("utf-8", errors="replace").strip()

    def list_datastreams(self, pid: str) -> dict[str, dict[str, str]]:
        response = self.connection.get(_object_path(pid, "datastreams"), params={"format": "xml"})
        return self.serializer.list_datastreams(response)

    def get_datastream_profile(self, pid: str, dsid: str) -> dict[str, Any]:
        response = self.connection.get(_object_path(pid, "datastreams", dsid), params={"format": "xml"})
        return self.serializer.get_datastream_profile(response)

    def get_datastream_content(
        self,
        pid: str,
        dsid: str,
        output_file: str | os.PathLike[str] | None = None,
    ) -> bytes | None:
        """Return the content, or stream it into ``output_file`` and return ``None``."""
        response = self.connection.get(
            _object_path(pid, "datastreams", dsid, "content"),
            output_file=output_file,
        )
        return response.content

    def _datastream_params(
        self,
        *,
        control_group: str | None,
        label: str | None,
        mimetype: str | None,
        state: str | None,
        url: str | None,
        log_message: str | None,
    ) -> dict[str, Any]:
        return {
            "controlGroup": control_group,
            "dsLabel": label,
            "mimeType": mimetype,
            "dsState": state,
            "dsLocation": url,
            "logMessage": log_message,
            "format": "xml",
        }

    def add_datastream(
        self,
        pid: str,
        dsid: str,
        *,
        control_group: str,
        label: str | None = None,
        mimetype: str | None = None,
        state: str | None = None,
        string: str | bytes | None = None,
        file: str | os.PathLike[str] | None = None,
        url: str | None = None,
        log_message: str | None = None,
    ) -> dict[str, Any]:
        """Add a datastream and return its profile."""
        response = self.connection.post(
            _object_path(pid, "datastreams", dsid),
            params=self._datastream_params(
                control_group=control_group,
                label=label,
                mimetype=mimetype,
                state=state,
                url=url,
                log_message=log_message,
            ),
            data=string,
            file=file,
            content_type=mimetype,
        )
        return self.serializer.get_datastream_profile(response)

    def modify_datastream(
        self,
        pid: str,
        dsid: str,
        *,
        label: str | None = None,
        mimetype: str | None = None,
        state: str | None = None,
        string: str | bytes | None = None,
        file: str | os.PathLike[str] | None = None,
        url: str | None = None,
        log_message: str | None = None,
    ) -> dict[str, Any]:
        """Modify a datastream and return its updated profile."""
        response = self.connection.put(
            _object_path(pid, "datastreams", dsid),
            params=self._datastream_params(
                control_group=None,
                label=label,
                mimetype=mimetype,
                state=state,
                url=url,
                log_message=log_message,
            ),
            data=string,
            file=file,
            content_type=mimetype,
        )
        return self.serializer.get_datastream_profile(response)

    def purge_datastream(self, pid: str, dsid: str, log_message: str | None = None) -> bool:
        self.connection.delete(_object_path(pid, "datastreams", dsid), params={"logMessage": log_message})
        return True
