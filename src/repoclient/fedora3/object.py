"""Objects of the Fedora 3 backend."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from repoclient.fedora3.datastream import FedoraDatastream, NewFedoraDatastream, normalize_state
from repoclient.repository.interfaces import AbstractDatastream, AbstractObject

if TYPE_CHECKING:
    from repoclient.fedora3.repository import FedoraRepository

__all__ = ["FedoraObject", "NewFedoraObject"]


class NewFedoraObject(AbstractObject):
    """Object held locally until ingested.

    Datastreams attached before ingest are kept in memory and created along
    with the object.
    """

    def __init__(self, id: str, repository: FedoraRepository) -> None:
        self.id = id
        self.repository = repository
        self.label = ""
        self.owner = ""
        self._state = "A"
        self.log_message: str | None = None
        self._datastreams: dict[str, NewFedoraDatastream] = {}

    def __repr__(self) -> str:
        return f"<NewFedoraObject {self.id}>"

    def __str__(self) -> str:
        return self.id

    @property
    def state(self) -> str:
        return self._state

    @state.setter
    def state(self, value: str) -> None:
        self._state = normalize_state(value)

    @property
    def created_date(self) -> str | None:
        return None

    @property
    def last_modified_date(self) -> str | None:
        return None

    @property
    def pending_datastreams(self) -> list[NewFedoraDatastream]:
        return list(self._datastreams.values())

    def delete(self) -> None:
        self.state = "D"

    def get_datastream(self, id: str) -> NewFedoraDatastream:
        return self._datastreams[id]

    def purge_datastream(self, id: str) -> bool:
        return self._datastreams.pop(id, None) is not None

    def construct_datastream(self, id: str, control_group: str = "M") -> NewFedoraDatastream:
        return NewFedoraDatastream(id, control_group, self)

    def ingest_datastream(self, datastream: AbstractDatastream) -> NewFedoraDatastream | bool:
        if not isinstance(datastream, NewFedoraDatastream) or datastream.id in self._datastreams:
            return False
        datastream.parent = self
        self._datastreams[datastream.id] = datastream
        return datastream

    def __len__(self) -> int:
        return len(self._datastreams)

    def __contains__(self, id: object) -> bool:
        return id in self._datastreams

    def __getitem__(self, id: str) -> NewFedoraDatastream:
        return self._datastreams[id]

    def __delitem__(self, id: str) -> None:
        del self._datastreams[id]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._datastreams))


class FedoraObject(AbstractObject):
    """Object persisted in the repository.

    The object profile and datastream list are fetched lazily.  Property
    assignments are sent to the repository immediately.
    """

    def __init__(self, id: str, repository: FedoraRepository, profile: dict[str, Any] | None = None) -> None:
        self.id = id
        self.repository = repository
        self._profile = profile
        self._datastream_list: dict[str, dict[str, str]] | None = None

    def __repr__(self) -> str:
        return f"<FedoraObject {self.id}>"

    def __str__(self) -> str:
        return self.id

    @property
    def api(self) -> Any:
        return self.repository.api

    @property
    def profile(self) -> dict[str, Any]:
        if self._profile is None:
            self._profile = self.api.get_object_profile(self.id)
        return self._profile

    def refresh(self) -> None:
        """Drop cached profile and datastream list."""
        self._profile = None
        self._datastream_list = None

    def _modify(self, profile_key: str, value: str, **changes: Any) -> None:
        modified = self.api.modify_object(self.id, **changes)
        profile = self.profile
        profile[profile_key] = value
        if modified:
            profile["objLastModDate"] = modified

    @property
    def label(self) -> str:
        return self.profile.get("objLabel", "")

    @label.setter
    def label(self, value: str) -> None:
        self._modify("objLabel", value, label=value)

    @property
    def owner(self) -> str:
        return self.profile.get("objOwnerId", "")

    @owner.setter
    def owner(self, value: str) -> None:
        self._modify("objOwnerId", value, owner_id=value)

    @property
    def state(self) -> str:
        return self.profile.get("objState", "")

    @state.setter
    def state(self, value: str) -> None:
        state = normalize_state(value)
        self._modify("objState", state, state=state)

    @property
    def models(self) -> list[str]:
        return list(self.profile.get("objModels", []))

    @property
    def created_date(self) -> str | None:
        return self.profile.get("objCreateDate") or None

    @property
    def last_modified_date(self) -> str | None:
        return self.profile.get("objLastModDate") or None

    @property
    def datastream_list(self) -> dict[str, dict[str, str]]:
        if self._datastream_list is None:
            self._datastream_list = self.api.list_datastreams(self.id)
        return self._datastream_list

    def delete(self) -> None:
        self.state = "D"

    def get_datastream(self, id: str) -> FedoraDatastream:
        profile = self.api.get_datastream_profile(self.id, id)
        return FedoraDatastream(id, self, profile)

    def purge_datastream(self, id: str) -> bool:
        self.api.purge_datastream(self.id, id)
        if self._datastream_list is not None:
            self._datastream_list.pop(id, None)
        return True

    def construct_datastream(self, id: str, control_group: str = "M") -> NewFedoraDatastream:
        return NewFedoraDatastream(id, control_group, self)

    def ingest_datastream(self, datastream: AbstractDatastream) -> FedoraDatastream | bool:
        if not isinstance(datastream, NewFedoraDatastream):
            return False
        profile = self.repository.add_datastream(self.id, datastream)
        if self._datastream_list is not None:
            self._datastream_list[datastream.id] = {"label": datastream.label, "mimetype": datastream.mimetype}
        return FedoraDatastream(datastream.id, self, profile)

    def __len__(self) -> int:
        return len(self.datastream_list)

    def __contains__(self, id: object) -> bool:
        return id in self.datastream_list

    def __getitem__(self, id: str) -> FedoraDatastream:
        if id not in self.datastream_list:
            raise KeyError(id)
        return self.get_datastream(id)

    def __delitem__(self, id: str) -> None:
        if id not in self.datastream_list:
            raise KeyError(id)
        self.purge_datastream(id)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.datastream_list))
