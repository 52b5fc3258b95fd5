"""Capability contracts implemented by repository backends.

The decoration layer only wraps objects satisfying these contracts.  They
declare methods only; entity properties such as ``id`` or ``label`` are
backend specific and reach callers through attribute forwarding.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from os import PathLike
from typing import Any

__all__ = ["AbstractRepository", "AbstractObject", "AbstractDatastream"]


class AbstractRepository(ABC):
    """Top-level entry point of a repository backend."""

    @abstractmethod
    def describe(self) -> dict[str, Any]:
        """Return information about the repository."""

    @abstractmethod
    def construct_object(self, id: str | None = None, create_uuid: bool = False) -> AbstractObject:
        """Return a pending object that exists only locally until ingested.

        ``id`` may be ``None`` (server assigned), a namespace (server assigned
        within it) or a full ``namespace:local`` identifier used as is.  With
        ``create_uuid`` the local part is a UUID generated client side.
        """

    @abstractmethod
    def ingest_object(self, obj: AbstractObject) -> AbstractObject:
        """Persist a pending object and return its persisted counterpart."""

    @abstractmethod
    def get_object(self, id: str) -> AbstractObject:
        """Fetch a persisted object."""

    @abstractmethod
    def purge_object(self, id: str) -> bool:
        """Permanently remove an object."""

    @abstractmethod
    def get_next_identifier(
        self,
        namespace: str | None = None,
        create_uuid: bool = False,
        number: int = 1,
    ) -> str | list[str]:
        """Reserve identifiers; a single string when ``number`` is 1."""

    def close(self) -> None:
        """Release connections held by the backend."""


class AbstractObject(ABC):
    """A digital object: a container of datastreams."""

    @abstractmethod
    def delete(self) -> None:
        """Mark the object as deleted without purging it."""

    @abstractmethod
    def get_datastream(self, id: str) -> AbstractDatastream:
        ...

    @abstractmethod
    def purge_datastream(self, id: str) -> bool:
        ...

    @abstractmethod
    def construct_datastream(self, id: str, control_group: str = "M") -> AbstractDatastream:
        ...

    @abstractmethod
    def ingest_datastream(self, datastream: AbstractDatastream) -> AbstractDatastream | bool:
        """Attach a pending datastream.

        Returns the replacement for ``datastream`` or ``False`` when it could
        not be attached.
        """

    @abstractmethod
    def __len__(self) -> int:
        ...

    @abstractmethod
    def __contains__(self, id: object) -> bool:
        ...

    @abstractmethod
    def __getitem__(self, id: str) -> AbstractDatastream:
        ...

    @abstractmethod
    def __delitem__(self, id: str) -> None:
        ...

    @abstractmethod
    def __iter__(self) -> Iterator[str]:
        ...


class AbstractDatastream(ABC):
    """A named content stream of an object."""

    @abstractmethod
    def delete(self) -> None:
        ...

    @abstractmethod
    def set_content_from_file(self, path: str | PathLike[str]) -> None:
        ...

    @abstractmethod
    def set_content_from_url(self, url: str) -> None:
        ...

    @abstractmethod
    def set_content_from_string(self, content: str | bytes) -> None:
        ...

    @abstractmethod
    def get_content(self, path: str | PathLike[str]) -> bool:
        """Write the content to ``path``."""
