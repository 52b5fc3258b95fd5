"""Layered loading of :class:`RepositoryConfig`.

Values are merged in increasing precedence: YAML file, environment variables
prefixed with ``REPOCLIENT__`` (``__`` separates nested keys) and explicit
``key.path=value`` overrides, typically from the command line.

Example:
    >>> config = load_config(
    ...     overrides={"url": "http://localhost:8080/fedora", "transport.timeout_sec": "5"},
    ...     env_prefix="",
    ... )
    >>> config.transport.timeout_sec
    5.0
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from repoclient.config.models import RepositoryConfig
from repoclient.core.cache import AbstractCache
from repoclient.core.exceptions import ConfigError
from repoclient.core.logger import UnifiedLogger

__all__ = ["load_config", "parse_cli_overrides", "DEFAULT_ENV_PREFIX"]

DEFAULT_ENV_PREFIX = "REPOCLIENT__"

logger = UnifiedLogger.get(__name__)


def _merge_dicts(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``overrides`` into a copy of ``base``."""
    result = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _assign_path(root: dict[str, Any], path: Iterable[str], value: Any) -> None:
    current = root
    *parents, last = list(path)
    for segment in parents:
        current = current.setdefault(segment, {})
    current[last] = value


def _parse_scalar(value: str) -> Any:
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


def _load_env_overrides(prefix: str) -> dict[str, Any]:
    if not prefix:
        return {}
    result: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        path = [segment.lower() for segment in key[len(prefix) :].split("__") if segment]
        if path:
            _assign_path(result, path, _parse_scalar(value))
    return result


def _normalize_overrides(overrides: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in overrides.items():
        parsed = _parse_scalar(value) if isinstance(value, str) else value
        if isinstance(value, Mapping):
            parsed = _normalize_overrides(value)
        path = [segment.strip() for segment in str(key).split(".") if segment.strip()]
        if path:
            _assign_path(result, path, parsed)
    return result


def parse_cli_overrides(values: Iterable[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` arguments into a dictionary."""
    assignments: dict[str, str] = {}
    for item in values:
        if "=" not in item:
            raise ConfigError(f"Overrides must be in KEY=VALUE format, got {item!r}")
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise ConfigError("Override key must not be empty")
        assignments[key] = value
    return assignments


def load_config(
    path: Path | str | None = None,
    *,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    overrides: Mapping[str, Any] | None = None,
    cache: AbstractCache | None = None,
) -> RepositoryConfig:
    """Load configuration from a YAML file applying layered overrides."""
    base_data: dict[str, Any] = {}
    config_file = str(path) if path is not None else None
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}", config_file=config_file)
        try:
            with config_path.open("r", encoding="utf-8") as file:
                base_data = yaml.safe_load(file) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}", config_file=config_file, cause=exc) from exc
        if not isinstance(base_data, Mapping):
            raise ConfigError(f"Config file {config_path} must contain a mapping", config_file=config_file)

    merged = _merge_dicts(base_data, _load_env_overrides(env_prefix))
    merged = _merge_dicts(merged, _normalize_overrides(overrides or {}))
    if cache is not None:
        merged["cache"] = cache

    try:
        config = RepositoryConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Configuration validation failed: {exc}", config_file=config_file, cause=exc) from exc
    logger.debug("config.loaded", config_file=config_file, url=config.url)
    return config
