"""pydockercd - Async Python client for a live Docker-CD stack mirror."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydockercd")
except PackageNotFoundError:
    __version__ = "0+local"

from pydockercd.client import DockerCdClient
from pydockercd.config import DockerCdConfig
from pydockercd.exceptions import (
    DockerCdConfigError,
    DockerCdError,
    DockerCdPayloadError,
    DockerCdTransportError,
)
from pydockercd.models import (
    ContainerInfo,
    RefreshSnapshot,
    RefreshState,
    StackRecord,
    StackStatus,
)
from pydockercd.state.events import (
    ConnectionState,
    DeleteEvent,
    EventKind,
    RefreshStatusEvent,
    SnapshotEvent,
    StreamEvent,
    UpsertEvent,
)
from pydockercd.state.store import StackStore
from pydockercd.stream import EventStreamClient

__all__ = [
    "__version__",
    "ConnectionState",
    "ContainerInfo",
    "DeleteEvent",
    "DockerCdClient",
    "DockerCdConfig",
    "DockerCdConfigError",
    "DockerCdError",
    "DockerCdPayloadError",
    "DockerCdTransportError",
    "EventKind",
    "EventStreamClient",
    "RefreshSnapshot",
    "RefreshState",
    "RefreshStatusEvent",
    "SnapshotEvent",
    "StackRecord",
    "StackStatus",
    "StackStore",
    "StreamEvent",
    "UpsertEvent",
]
