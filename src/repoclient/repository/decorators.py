"""Client-facing wrappers around repository backends.

Every wrapper owns one backing entity and forwards to it whatever it does not
declare.  Operations that return other entities re-wrap them in the variant
matching their lifecycle state and stamp a back-reference to the wrapper that
produced them (``repository`` on objects, ``parent`` on datastreams).

Committing a pending entity yields a *new* persisted wrapper; callers rebind::

    obj = repository.construct_object("demo")
    obj.label = "Example"
    obj = repository.ingest_object(obj)

The pending wrapper handed to the commit moves to the persisted state as well
but is spent: changing it afterwards raises :class:`InvalidArgumentError`.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from os import PathLike
from typing import Any, ClassVar

from repoclient.config.models import RepositoryConfig
from repoclient.core.delegate import Delegate, Reference
from repoclient.core.exceptions import InvalidArgumentError
from repoclient.core.logger import UnifiedLogger
from repoclient.repository.factory import RepositoryFactory
from repoclient.repository.interfaces import (
    AbstractDatastream,
    AbstractObject,
    AbstractRepository,
)

__all__ = [
    "EntityState",
    "Repository",
    "RepositoryObject",
    "NewObject",
    "Datastream",
    "NewDatastream",
    "wrap_object",
    "wrap_datastream",
]

logger = UnifiedLogger.get(__name__)


class EntityState(str, Enum):
    """Lifecycle of a wrapped entity."""

    PENDING = "pending"
    PERSISTED = "persisted"
    DELETED = "deleted"


_TRANSITIONS: dict[EntityState, frozenset[EntityState]] = {
    EntityState.PENDING: frozenset({EntityState.PERSISTED}),
    EntityState.PERSISTED: frozenset({EntityState.DELETED}),
    EntityState.DELETED: frozenset(),
}


def _unwrap(value: Any) -> Any:
    return value.backing if isinstance(value, Delegate) else value


class _Entity(Delegate[Any]):
    initial_state: ClassVar[EntityState] = EntityState.PERSISTED

    def __init__(self, backing: Any) -> None:
        super().__init__(backing)
        self._lifecycle = self.initial_state

    @property
    def lifecycle(self) -> EntityState:
        return self._lifecycle

    def _check_transition(self, target: EntityState) -> None:
        if target not in _TRANSITIONS[self._lifecycle]:
            raise InvalidArgumentError(
                f"{type(self).__name__} cannot move from {self._lifecycle.value} to {target.value}",
                component="repository.decorators",
            )

    def _transition(self, target: EntityState) -> None:
        self._check_transition(target)
        self._lifecycle = target

    def _ensure_pending(self) -> None:
        if self._lifecycle is not EntityState.PENDING:
            raise InvalidArgumentError(
                f"{type(self).__name__} {getattr(self._backing, 'id', '')} was already committed; "
                "use the wrapper returned by the commit",
                component="repository.decorators",
            )


def _is_pending_wrapper(entity: Any) -> bool:
    # Persisted wrappers are left to the backend, which refuses them.
    return isinstance(entity, _Entity) and entity.initial_state is EntityState.PENDING


def _check_commit(entity: Any) -> None:
    if _is_pending_wrapper(entity):
        entity._check_transition(EntityState.PERSISTED)


def _commit(entity: Any) -> None:
    if _is_pending_wrapper(entity):
        entity._transition(EntityState.PERSISTED)


class Datastream(_Entity, AbstractDatastream):
    """Persisted datastream."""

    contract = AbstractDatastream
    local_attributes = frozenset({"parent"})

    def __init__(self, backing: AbstractDatastream, parent: RepositoryObject | None = None) -> None:
        super().__init__(backing)
        self.parent = parent

    def delete(self) -> None:
        self._check_transition(EntityState.DELETED)
        self._backing.delete()
        self._transition(EntityState.DELETED)

    def set_content_from_file(self, path: str | PathLike[str]) -> None:
        return self._backing.set_content_from_file(path)

    def set_content_from_url(self, url: str) -> None:
        return self._backing.set_content_from_url(url)

    def set_content_from_string(self, content: str | bytes) -> None:
        return self._backing.set_content_from_string(content)

    def get_content(self, path: str | PathLike[str]) -> bool:
        return self._backing.get_content(path)


class NewDatastream(Datastream):
    """Datastream that exists only locally."""

    initial_state = EntityState.PENDING

    def __setattr__(self, name: str, value: Any) -> None:
        if not self._is_local(name):
            self._ensure_pending()
        super().__setattr__(name, value)

    def delete(self) -> None:
        # Pending datastreams only record the deleted state for ingest.
        self._ensure_pending()
        self._backing.delete()

    def set_content_from_file(self, path: str | PathLike[str]) -> None:
        self._ensure_pending()
        return self._backing.set_content_from_file(path)

    def set_content_from_url(self, url: str) -> None:
        self._ensure_pending()
        return self._backing.set_content_from_url(url)

    def set_content_from_string(self, content: str | bytes) -> None:
        self._ensure_pending()
        return self._backing.set_content_from_string(content)


class RepositoryObject(_Entity, AbstractObject):
    """Persisted object."""

    contract = AbstractObject
    local_attributes = frozenset({"repository"})

    # Lifecycle of datastreams fetched from this object.
    datastream_state: ClassVar[EntityState] = EntityState.PERSISTED

    def __init__(self, backing: AbstractObject, repository: Repository | None = None) -> None:
        super().__init__(backing)
        self.repository = repository

    def __str__(self) -> str:
        return str(self._backing.id)

    def delete(self) -> None:
        self._check_transition(EntityState.DELETED)
        self._backing.delete()
        self._transition(EntityState.DELETED)

    def get_datastream(self, id: str) -> Datastream:
        return wrap_datastream(self.datastream_state, self._backing.get_datastream(id), self)

    def purge_datastream(self, id: str) -> bool:
        return self._backing.purge_datastream(id)

    def construct_datastream(self, id: str, control_group: str = "M") -> Datastream:
        datastream = self._backing.construct_datastream(id, control_group)
        return wrap_datastream(EntityState.PENDING, datastream, self)

    def ingest_datastream(self, datastream: AbstractDatastream) -> Datastream | bool:
        committing = self.datastream_state is EntityState.PERSISTED
        if committing:
            _check_commit(datastream)
        ref = Reference(_unwrap(datastream))
        result = self.call_by_reference("ingest_datastream", ref)
        if result is False or result is None:
            return False
        if committing:
            _commit(datastream)
        return wrap_datastream(self.datastream_state, ref.value, self)

    def __len__(self) -> int:
        return len(self._backing)

    def __contains__(self, id: object) -> bool:
        return id in self._backing

    def __getitem__(self, id: str) -> Datastream:
        return wrap_datastream(self.datastream_state, self._backing[id], self)

    def __delitem__(self, id: str) -> None:
        del self._backing[id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._backing)


class NewObject(RepositoryObject):
    """Object that exists only locally until ingested.

    Its datastreams are pending too and keep that state when attached.
    """

    initial_state = EntityState.PENDING
    datastream_state = EntityState.PENDING

    def __setattr__(self, name: str, value: Any) -> None:
        if not self._is_local(name):
            self._ensure_pending()
        super().__setattr__(name, value)

    def delete(self) -> None:
        self._ensure_pending()
        self._backing.delete()

    def purge_datastream(self, id: str) -> bool:
        self._ensure_pending()
        return super().purge_datastream(id)

    def construct_datastream(self, id: str, control_group: str = "M") -> Datastream:
        self._ensure_pending()
        return super().construct_datastream(id, control_group)

    def ingest_datastream(self, datastream: AbstractDatastream) -> Datastream | bool:
        self._ensure_pending()
        return super().ingest_datastream(datastream)

    def __delitem__(self, id: str) -> None:
        self._ensure_pending()
        super().__delitem__(id)


class Repository(_Entity, AbstractRepository):
    """Entry point for callers; wraps the backend chosen for a configuration."""

    contract = AbstractRepository

    @classmethod
    def from_config(cls, config: RepositoryConfig) -> Repository:
        return cls(RepositoryFactory.get_repository(config))

    def close(self) -> None:
        """Close the backend's connections."""
        self._backing.close()

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def describe(self) -> dict[str, Any]:
        return self._backing.describe()

    def construct_object(self, id: str | None = None, create_uuid: bool = False) -> RepositoryObject:
        obj = self._backing.construct_object(id, create_uuid)
        return wrap_object(EntityState.PENDING, obj, self)

    def ingest_object(self, obj: AbstractObject) -> RepositoryObject:
        _check_commit(obj)
        ref = Reference(_unwrap(obj))
        self.call_by_reference("ingest_object", ref)
        _commit(obj)
        logger.info("repository.object.ingested", id=str(getattr(ref.value, "id", "")))
        return wrap_object(EntityState.PERSISTED, ref.value, self)

    def get_object(self, id: str) -> RepositoryObject:
        return wrap_object(EntityState.PERSISTED, self._backing.get_object(id), self)

    def purge_object(self, id: str) -> bool:
        return self._backing.purge_object(id)

    def get_next_identifier(
        self,
        namespace: str | None = None,
        create_uuid: bool = False,
        number: int = 1,
    ) -> str | list[str]:
        return self._backing.get_next_identifier(namespace, create_uuid, number)


_OBJECT_VARIANTS: dict[EntityState, type[RepositoryObject]] = {
    EntityState.PENDING: NewObject,
    EntityState.PERSISTED: RepositoryObject,
}

_DATASTREAM_VARIANTS: dict[EntityState, type[Datastream]] = {
    EntityState.PENDING: NewDatastream,
    EntityState.PERSISTED: Datastream,
}


def wrap_object(state: EntityState, backing: AbstractObject, repository: Repository | None = None) -> RepositoryObject:
    """Wrap ``backing`` in the object variant for ``state``."""
    try:
        variant = _OBJECT_VARIANTS[state]
    except KeyError:
        raise InvalidArgumentError(f"No object wrapper for state {state.value}") from None
    return variant(backing, repository)


def wrap_datastream(
    state: EntityState,
    backing: AbstractDatastream,
    parent: RepositoryObject | None = None,
) -> Datastream:
    """Wrap ``backing`` in the datastream variant for ``state``."""
    try:
        variant = _DATASTREAM_VARIANTS[state]
    except KeyError:
        raise InvalidArgumentError(f"No datastream wrapper for state {state.value}") from None
    return variant(backing, parent)
