"""High-level async client for the Docker-CD API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

import aiohttp

from pydockercd._api import refresh as _refresh_api
from pydockercd._api import stacks as _stacks_api
from pydockercd._constants import EVENTS_ENDPOINT
from pydockercd._transport import HttpTransport
from pydockercd.config import DockerCdConfig
from pydockercd.exceptions import DockerCdError
from pydockercd.models.container import ContainerInfo
from pydockercd.models.refresh import RefreshSnapshot
from pydockercd.models.stack import StackRecord, StackStatus
from pydockercd.state.events import ConnectionState
from pydockercd.state.store import Listener, StackStore
from pydockercd.stream import EventStreamClient

_logger = logging.getLogger(__name__)


class DockerCdClient:
    """Async client keeping a live mirror of Docker-CD stacks.

    The initial fetch and the event stream are started independently and
    race freely; whichever delivers data last wins.

    Usage::

        async with DockerCdClient(config) as client:
            await client.start()
            for stack in client.filtered_stacks:
                print(stack.path, stack.status)
    """

    def __init__(
        self,
        config: DockerCdConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or DockerCdConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: HttpTransport | None = None
        self._load_tasks: set[asyncio.Task[None]] = set()

        self.store = StackStore(
            fetch_stacks=self.get_stacks,
            fetch_refresh_status=self.get_refresh_status,
        )
        self._stream = EventStreamClient(
            open_stream=self._open_event_stream,
            on_event=self.store.handle,
            on_state_change=self.store.set_connection_state,
            max_retries=self._config.max_retries,
            base_delay=self._config.reconnect_base_delay,
            max_delay=self._config.reconnect_max_delay,
            logger=_logger,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DockerCdClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the stream, cancel unfinished loads and release the HTTP session."""
        await self._stream.aclose()
        pending = [task for task in self._load_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._load_tasks.clear()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    def start(self) -> asyncio.Task[None]:
        """Start the initial load and the event stream independently.

        Returns the initial-load task; awaiting it is optional.
        """
        self._require_transport()
        if self._config.stream_enabled:
            self.reconnect()
        task = asyncio.get_running_loop().create_task(self.store.load_initial())
        self._load_tasks.add(task)
        task.add_done_callback(self._load_tasks.discard)
        return task

    def reconnect(self) -> None:
        """Recreate the event stream from scratch."""
        self._require_transport()
        self._stream.close()
        self._stream.connect()

    def connect(self) -> None:
        self._require_transport()
        self._stream.connect()

    def close(self) -> None:
        """Close the event stream.

        A running initial load is left alone; :meth:`aclose` cancels it.
        """
        self._stream.close()

    async def load_initial(self) -> None:
        await self.store.load_initial()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> HttpTransport:
        if self._transport is None:
            raise DockerCdError("Client not initialized. Use 'async with DockerCdClient(...) as client:'")
        return self._transport

    def _open_event_stream(self) -> AbstractAsyncContextManager[AsyncIterator[str]]:
        return self._require_transport().open_event_stream(EVENTS_ENDPOINT)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def get_stacks(self) -> list[StackRecord]:
        """Fetch all stacks from the server (does not touch the store)."""
        return await _stacks_api.fetch_stacks(self._require_transport())

    async def get_refresh_status(self) -> RefreshSnapshot:
        return await _refresh_api.fetch_refresh_status(self._require_transport())

    async def get_containers(self, stack_path: str) -> list[ContainerInfo]:
        """Fetch the containers currently running for *stack_path*."""
        return await _stacks_api.fetch_containers(self._require_transport(), stack_path)

    async def trigger_refresh(self) -> None:
        """Ask the server to re-read its desired state.

        Progress arrives through ``refresh.status`` events.
        """
        await _refresh_api.trigger_refresh(self._require_transport())

    # ------------------------------------------------------------------
    # Store views
    # ------------------------------------------------------------------

    @property
    def config(self) -> DockerCdConfig:
        return self._config

    @property
    def filtered_stacks(self) -> list[StackRecord]:
        return self.store.filtered_stacks

    @property
    def status_counts(self) -> dict[StackStatus, int]:
        return self.store.status_counts

    @property
    def connection_state(self) -> ConnectionState:
        return self.store.connection_state

    @property
    def refresh_status(self) -> RefreshSnapshot | None:
        return self.store.refresh_status

    def set_filter_status(self, status: StackStatus | str | None) -> None:
        self.store.set_filter_status(status)

    def set_search_query(self, query: str) -> None:
        self.store.set_search_query(query)

    def get_stack(self, path: str) -> StackRecord | None:
        return self.store.get_stack(path)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.store.subscribe(listener)
