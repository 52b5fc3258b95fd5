"""Datastreams of the Fedora 3 backend."""

from __future__ import annotations

import os
import shutil
from typing import TYPE_CHECKING, Any

from repoclient.core.exceptions import InvalidArgumentError
from repoclient.repository.interfaces import AbstractDatastream

if TYPE_CHECKING:
    from repoclient.fedora3.object import FedoraObject, NewFedoraObject

__all__ = ["CONTROL_GROUPS", "STATES", "FedoraDatastream", "NewFedoraDatastream", "normalize_state"]

# Inline XML, managed, redirect and external content.
CONTROL_GROUPS = frozenset({"X", "M", "R", "E"})

STATES = frozenset({"A", "I", "D"})


def normalize_state(state: str) -> str:
    """Return ``state`` as one of the single-letter states ``A``, ``I`` or ``D``."""
    value = str(state).strip().upper()[:1]
    if value not in STATES:
        raise InvalidArgumentError(f"Invalid state {state!r}; expected one of A, I, D")
    return value


def _normalize_control_group(control_group: str) -> str:
    value = str(control_group).strip().upper()
    if value not in CONTROL_GROUPS:
        raise InvalidArgumentError(f"Invalid control group {control_group!r}; expected one of X, M, R, E")
    return value


class NewFedoraDatastream(AbstractDatastream):
    """Datastream held locally until its object or itself is ingested."""

    def __init__(self, id: str, control_group: str, parent: FedoraObject | NewFedoraObject) -> None:
        self.id = id
        self.control_group = _normalize_control_group(control_group)
        self.parent = parent
        self.label = ""
        self.mimetype = "application/octet-stream"
        self._state = "A"
        # (kind, value) where kind is "string", "file" or "url".
        self._content: tuple[str, Any] | None = None

    def __repr__(self) -> str:
        return f"<NewFedoraDatastream {self.id}>"

    @property
    def state(self) -> str:
        return self._state

    @state.setter
    def state(self, value: str) -> None:
        self._state = normalize_state(value)

    @property
    def size(self) -> int | None:
        if self._content is None:
            return 0
        kind, value = self._content
        if kind == "string":
            return len(value)
        if kind == "file":
            return os.path.getsize(value)
        return None

    @property
    def content(self) -> bytes | None:
        if self._content is None:
            return None
        kind, value = self._content
        if kind == "string":
            return value
        if kind == "file":
            with open(value, "rb") as handle:
                return handle.read()
        return None

    @content.setter
    def content(self, value: str | bytes) -> None:
        self.set_content_from_string(value)

    @property
    def content_source(self) -> tuple[str, Any] | None:
        """Pending content as ``(kind, value)``."""
        return self._content

    def delete(self) -> None:
        self.state = "D"

    def set_content_from_string(self, content: str | bytes) -> None:
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        self._content = ("string", data)

    def set_content_from_file(self, path: str | os.PathLike[str]) -> None:
        if not os.path.isfile(path):
            raise InvalidArgumentError(f"Content file does not exist: {os.fspath(path)}")
        self._content = ("file", os.fspath(path))

    def set_content_from_url(self, url: str) -> None:
        self._content = ("url", url)

    def get_content(self, path: str | os.PathLike[str]) -> bool:
        if self._content is None or self._content[0] == "url":
            return False
        kind, value = self._content
        if kind == "file":
            shutil.copyfile(value, path)
        else:
            with open(path, "wb") as handle:
                handle.write(value)
        return True


class FedoraDatastream(AbstractDatastream):
    """Datastream persisted in the repository.

    Property reads come from the datastream profile, fetched on first use.
    Assignments are sent to the repository immediately.
    """

    def __init__(self, id: str, parent: FedoraObject, profile: dict[str, Any] | None = None) -> None:
        self.id = id
        self.parent = parent
        self._profile = profile

    def __repr__(self) -> str:
        return f"<FedoraDatastream {self.parent.id}/{self.id}>"

    @property
    def api(self) -> Any:
        return self.parent.repository.api

    @property
    def profile(self) -> dict[str, Any]:
        if self._profile is None:
            self._profile = self.api.get_datastream_profile(self.parent.id, self.id)
        return self._profile

    def refresh(self) -> None:
        """Drop the cached profile."""
        self._profile = None

    def _modify(self, **changes: Any) -> None:
        self._profile = self.api.modify_datastream(self.parent.id, self.id, **changes)

    @property
    def label(self) -> str:
        return self.profile.get("dsLabel", "")

    @label.setter
    def label(self, value: str) -> None:
        self._modify(label=value)

    @property
    def mimetype(self) -> str:
        return self.profile.get("dsMIME", "")

    @mimetype.setter
    def mimetype(self, value: str) -> None:
        self._modify(mimetype=value)

    @property
    def state(self) -> str:
        return self.profile.get("dsState", "")

    @state.setter
    def state(self, value: str) -> None:
        self._modify(state=normalize_state(value))

    @property
    def control_group(self) -> str:
        return self.profile.get("dsControlGroup", "")

    @property
    def size(self) -> int | None:
        raw = self.profile.get("dsSize")
        try:
            return int(raw)
        except (TypeError, ValueError):
            return None

    @property
    def created_date(self) -> str | None:
        return self.profile.get("dsCreateDate") or None

    @property
    def content(self) -> bytes | None:
        return self.api.get_datastream_content(self.parent.id, self.id)

    @content.setter
    def content(self, value: str | bytes) -> None:
        self.set_content_from_string(value)

    def delete(self) -> None:
        self.state = "D"

    def set_content_from_string(self, content: str | bytes) -> None:
        self._modify(string=content)

    def set_content_from_file(self, path: str | os.PathLike[str]) -> None:
        if not os.path.isfile(path):
            raise InvalidArgumentError(f"Content file does not exist: {os.fspath(path)}")
        self._modify(file=path)

    def set_content_from_url(self, url: str) -> None:
        self._modify(url=url)

    def get_content(self, path: str | os.PathLike[str]) -> bool:
        self.api.get_datastream_content(self.parent.id, self.id, output_file=path)
        return True
