"""Repository backend speaking the Fedora 3 REST API."""

from __future__ import annotations

import uuid
from typing import Any

from repoclient.core.cache import AbstractCache
from repoclient.core.exceptions import InvalidArgumentError
from repoclient.core.logger import UnifiedLogger
from repoclient.fedora3.api import FedoraApi
from repoclient.fedora3.datastream import NewFedoraDatastream
from repoclient.fedora3.object import FedoraObject, NewFedoraObject
from repoclient.repository.interfaces import AbstractObject, AbstractRepository

__all__ = ["FedoraRepository"]


class FedoraRepository(AbstractRepository):
    """Fedora 3 implementation of the repository contract.

    Fetched and ingested objects are memoized in ``cache`` keyed by PID.
    """

    def __init__(self, api: FedoraApi, cache: AbstractCache) -> None:
        self.api = api
        self.cache = cache
        self.logger = UnifiedLogger.get(__name__).bind(component="fedora3.repository")
        self._description: dict[str, Any] | None = None

    def close(self) -> None:
        """Close the connection and the session pool it owns."""
        self.api.connection.close()

    def describe(self) -> dict[str, Any]:
        if self._description is None:
            self._description = self.api.describe_repository()
        return self._description

    def _default_namespace(self) -> str:
        pid_info = self.describe().get("repositoryPID", {})
        namespace = pid_info.get("PID-namespaceIdentifier") if isinstance(pid_info, dict) else None
        if not namespace:
            raise InvalidArgumentError(
                "Repository does not advertise a default PID namespace",
                component="fedora3.repository",
            )
        return namespace

    def get_next_identifier(
        self,
        namespace: str | None = None,
        create_uuid: bool = False,
        number: int = 1,
    ) -> str | list[str]:
        if number < 1:
            raise InvalidArgumentError(
                f"Number of identifiers must be positive, got {number}",
                component="fedora3.repository",
            )
        if create_uuid:
            namespace = namespace or self._default_namespace()
            pids = [f"{namespace}:{uuid.uuid4()}" for _ in range(number)]
        else:
            pids = self.api.get_next_pid(namespace, number)
        return pids[0] if number == 1 else pids

    def construct_object(self, id: str | None = None, create_uuid: bool = False) -> NewFedoraObject:
        if id is None or ":" not in id:
            pid = self.get_next_identifier(id, create_uuid)
        else:
            pid = id
        return NewFedoraObject(str(pid), self)

    def add_datastream(self, pid: str, datastream: NewFedoraDatastream) -> dict[str, Any]:
        """Create ``datastream`` on object ``pid`` and return its profile."""
        source = datastream.content_source
        content: dict[str, Any] = {}
        if source is not None:
            kind, value = source
            content[kind] = value
        return self.api.add_datastream(
            pid,
            datastream.id,
            control_group=datastream.control_group,
            label=datastream.label,
            mimetype=datastream.mimetype,
            state=datastream.state,
            **content,
        )

    def ingest_object(self, obj: AbstractObject) -> FedoraObject:
        if not isinstance(obj, NewFedoraObject):
            raise InvalidArgumentError(
                f"Only pending objects can be ingested, got {type(obj).__name__}",
                component="fedora3.repository",
            )
        pid = self.api.ingest(
            obj.id,
            label=obj.label or None,
            owner_id=obj.owner or None,
            state=obj.state,
            log_message=obj.log_message,
        )
        for datastream in obj.pending_datastreams:
            self.add_datastream(pid, datastream)
        ingested = FedoraObject(
            pid,
            self,
            {"pid": pid, "objLabel": obj.label, "objOwnerId": obj.owner, "objState": obj.state, "objModels": []},
        )
        self.cache.set(pid, ingested)
        self.logger.debug("repository.object.created", id=pid, datastreams=len(obj))
        return ingested

    def get_object(self, id: str) -> FedoraObject:
        cached = self.cache.get(id)
        if cached is not None:
            return cached
        obj = FedoraObject(id, self, self.api.get_object_profile(id))
        self.cache.add(id, obj)
        return obj

    def purge_object(self, id: str) -> bool:
        self.api.purge_object(id)
        self.cache.delete(id)
        return True
