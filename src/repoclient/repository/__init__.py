"""Repository contracts, decorators and backend selection."""

from repoclient.repository.decorators import (
    Datastream,
    EntityState,
    NewDatastream,
    NewObject,
    Repository,
    RepositoryObject,
    wrap_datastream,
    wrap_object,
)
from repoclient.repository.factory import RepositoryFactory, parse_version
from repoclient.repository.interfaces import AbstractDatastream, AbstractObject, AbstractRepository

__all__ = [
    "AbstractDatastream",
    "AbstractObject",
    "AbstractRepository",
    "Datastream",
    "EntityState",
    "NewDatastream",
    "NewObject",
    "Repository",
    "RepositoryFactory",
    "RepositoryObject",
    "parse_version",
    "wrap_datastream",
    "wrap_object",
]
