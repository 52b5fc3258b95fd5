"""Single-use HTTP request handles and their executor."""

from repoclient.transport.executor import TransportExecutor, error_code_for
from repoclient.transport.handle import TransportHandle
from repoclient.transport.options import RESOURCE_OPTIONS, TransportOption
from repoclient.transport.response import HttpResponse
from repoclient.transport.session import SharedSession

__all__ = [
    "HttpResponse",
    "RESOURCE_OPTIONS",
    "SharedSession",
    "TransportExecutor",
    "TransportHandle",
    "TransportOption",
    "error_code_for",
]
