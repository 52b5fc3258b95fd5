"""Configuration models and loader."""

from repoclient.config.loader import DEFAULT_ENV_PREFIX, load_config, parse_cli_overrides
from repoclient.config.models import DEFAULT_USER_AGENT, RepositoryConfig, TransportSettings

__all__ = [
    "DEFAULT_ENV_PREFIX",
    "DEFAULT_USER_AGENT",
    "RepositoryConfig",
    "TransportSettings",
    "load_config",
    "parse_cli_overrides",
]
