"""Immutable record of a completed HTTP exchange."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

__all__ = ["HttpResponse"]

_STATUS_LINE = re.compile(r"^HTTP/\S+\s+\d{3}[ \t]*(.*)$")


def _empty_info() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status, raw header text, body and metadata of one response.

    ``header`` holds every header block received, redirects included, each
    terminated by a blank line.  ``content`` is ``None`` when the body was
    written to an output file or not retained.
    """

    status: int
    header: str
    content: bytes | None = None
    url: str | None = None
    request_header: str | None = None
    info: Mapping[str, Any] = field(default_factory=_empty_info)

    def __post_init__(self) -> None:
        if not isinstance(self.info, MappingProxyType):
            object.__setattr__(self, "info", MappingProxyType(dict(self.info)))

    @property
    def successful(self) -> bool:
        """``True`` for any 2xx status."""
        return 200 <= self.status < 300

    def header_blocks(self) -> list[str]:
        """Return the non-empty header blocks, one per response received."""
        return [block for block in re.split(r"\r?\n\r?\n", self.header) if block.strip()]

    def status_message(self) -> str:
        """Reason phrase of the final status line, or ``""`` when absent."""
        blocks = self.header_blocks()
        if not blocks:
            return ""
        first_line = blocks[-1].splitlines()[0]
        match = _STATUS_LINE.match(first_line.strip())
        return match.group(1).strip() if match else ""

    def __reduce_ex__(self, protocol: Any) -> Any:
        raise TypeError(f"{type(self).__name__} cannot be serialized")
