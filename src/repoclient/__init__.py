"""Client runtime for digital-object repositories served over HTTP."""

__version__ = "0.3.0"

from repoclient.config import RepositoryConfig, TransportSettings, load_config  # noqa: E402
from repoclient.core import BoundedCache, configure_logging  # noqa: E402
from repoclient.repository import Repository, RepositoryFactory  # noqa: E402
from repoclient.transport import HttpResponse, TransportExecutor, TransportHandle  # noqa: E402

__all__ = [
    "__version__",
    "BoundedCache",
    "HttpResponse",
    "Repository",
    "RepositoryConfig",
    "RepositoryFactory",
    "TransportExecutor",
    "TransportHandle",
    "TransportSettings",
    "configure_logging",
    "load_config",
]
