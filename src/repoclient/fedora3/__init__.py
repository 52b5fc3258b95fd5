"""Backend for repositories exposing the Fedora 3 REST API."""

from repoclient.fedora3.api import FedoraApi
from repoclient.fedora3.connection import RepositoryConnection
from repoclient.fedora3.datastream import FedoraDatastream, NewFedoraDatastream
from repoclient.fedora3.object import FedoraObject, NewFedoraObject
from repoclient.fedora3.repository import FedoraRepository
from repoclient.fedora3.serializer import FedoraApiSerializer, make_xml_parser

__all__ = [
    "FedoraApi",
    "FedoraApiSerializer",
    "FedoraDatastream",
    "FedoraObject",
    "FedoraRepository",
    "NewFedoraDatastream",
    "NewFedoraObject",
    "RepositoryConnection",
    "make_xml_parser",
]
