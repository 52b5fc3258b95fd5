"""Configuration models for repository clients."""

from __future__ import annotations

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, SecretStr, field_validator

from repoclient import __version__
from repoclient.core.cache import AbstractCache, BoundedCache

__all__ = ["TransportSettings", "RepositoryConfig", "DEFAULT_USER_AGENT"]

DEFAULT_USER_AGENT = f"repoclient/{__version__}"


class TransportSettings(BaseModel):
    """Per-request transport defaults applied to every handle."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    connect_timeout_sec: PositiveFloat | None = Field(
        default=15.0,
        description="Connection timeout in seconds. None waits indefinitely.",
    )
    timeout_sec: PositiveFloat | None = Field(
        default=60.0,
        description="Read timeout in seconds. None waits indefinitely.",
    )
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates.")
    follow_redirects: bool = Field(default=True)
    headers: dict[str, str] = Field(
        default_factory=lambda: {"User-Agent": DEFAULT_USER_AGENT},
        description="Headers sent with every request.",
    )


class RepositoryConfig(BaseModel):
    """Immutable connection settings for one client session."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    url: str = Field(description="Base URL of the repository REST endpoint.")
    username: str | None = None
    password: SecretStr | None = None
    cache: AbstractCache = Field(default_factory=BoundedCache, exclude=True)
    transport: TransportSettings = Field(default_factory=TransportSettings)

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        parts = urlsplit(value.strip())
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise ValueError(f"Repository URL must be an absolute http(s) URL, got {value!r}")
        return value.strip().rstrip("/")

    @property
    def credentials(self) -> tuple[str, str] | None:
        """Basic-auth pair, or ``None`` when no username is configured."""
        if self.username is None:
            return None
        password = self.password.get_secret_value() if self.password is not None else ""
        return self.username, password
