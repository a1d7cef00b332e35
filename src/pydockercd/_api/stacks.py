"""Stack endpoints.

Endpoints:
  - GET /api/stacks
  - GET /api/stacks/containers/{path}
"""

from __future__ import annotations

from urllib.parse import quote

from pydantic import TypeAdapter

from pydockercd._api._common import parse_payload
from pydockercd._constants import CONTAINERS_ENDPOINT, STACKS_ENDPOINT
from pydockercd._transport import Transport
from pydockercd.models.container import ContainerInfo
from pydockercd.models.stack import StackRecord

_STACK_LIST = TypeAdapter(list[StackRecord])
_CONTAINER_LIST = TypeAdapter(list[ContainerInfo])


async def fetch_stacks(transport: Transport) -> list[StackRecord]:
    """Fetch every stack the server currently tracks."""
    payload = await transport.get_json(STACKS_ENDPOINT)
    # The server encodes an empty slice as null.
    return parse_payload(STACKS_ENDPOINT, _STACK_LIST, payload or [])


async def fetch_containers(transport: Transport, stack_path: str) -> list[ContainerInfo]:
    """Fetch the containers of the stack at *stack_path*.

    The path is appended as-is (slashes kept) so nested stack paths such as
    ``apps/web`` resolve to the server's wildcard route.
    """
    path = stack_path.strip().strip("/")
    if not path:
        raise ValueError("stack_path must be non-empty")
    endpoint = f"{CONTAINERS_ENDPOINT}/{quote(path, safe='/')}"
    payload = await transport.get_json(endpoint)
    return parse_payload(endpoint, _CONTAINER_LIST, payload or [])
