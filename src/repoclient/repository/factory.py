"""Selection of the backend implementation for a repository."""

from __future__ import annotations

import re
from typing import Any

from repoclient.config.models import RepositoryConfig
from repoclient.core.exceptions import UnsupportedRepositoryError
from repoclient.core.logger import UnifiedLogger
from repoclient.repository.interfaces import AbstractRepository

__all__ = ["RepositoryFactory", "parse_version"]

logger = UnifiedLogger.get(__name__)

FEDORA3_MIN_VERSION = (3, 0, 0)


def parse_version(version: str) -> tuple[int, ...]:
    """Return the numeric components of ``version``.

    >>> parse_version("3.6.2")
    (3, 6, 2)
    >>> parse_version("3.8.1-SNAPSHOT")
    (3, 8, 1)
    """
    parts = re.findall(r"\d+", version.split("-", 1)[0])
    if not parts:
        raise UnsupportedRepositoryError(
            f"Cannot parse repository version {version!r}",
            component="repository.factory",
        )
    return tuple(int(part) for part in parts)


class RepositoryFactory:
    """Build the backend matching the repository behind a configuration."""

    @staticmethod
    def describe(config: RepositoryConfig) -> dict[str, Any]:
        """Return ``type`` and ``version`` of the repository at ``config.url``."""
        from repoclient.fedora3.api import FedoraApi
        from repoclient.fedora3.connection import RepositoryConnection

        with RepositoryConnection(config) as connection:
            info = FedoraApi(connection).describe_repository()
        return {"type": "fedora", "version": str(info.get("repositoryVersion", "")), "info": info}

    @classmethod
    def get_repository(cls, config: RepositoryConfig) -> AbstractRepository:
        description = cls.describe(config)
        version = description["version"]
        if parse_version(version) >= FEDORA3_MIN_VERSION:
            from repoclient.fedora3.api import FedoraApi
            from repoclient.fedora3.connection import RepositoryConnection
            from repoclient.fedora3.repository import FedoraRepository

            logger.debug("repository.backend.selected", backend="fedora3", version=version)
            return FedoraRepository(FedoraApi(RepositoryConnection(config)), config.cache)
        raise UnsupportedRepositoryError(
            f"{description['type']} {version} is not a supported repository version",
            component="repository.factory",
            details={"version": version},
        )
