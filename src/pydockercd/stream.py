"""Resilient SSE client for the Docker-CD event endpoint.

Owns at most one live subscription, parses frames into typed events and
reconnects with exponential backoff after transport failures.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager
from typing import Protocol

from pydockercd._constants import (
    MAX_RECONNECT_RETRIES,
    RECONNECT_BASE_DELAY,
    RECONNECT_MAX_DELAY,
    reconnect_delay,
)
from pydockercd._sse import SseFrame, SseParser
from pydockercd.ingestion.stream import build_event_from_frame
from pydockercd.state.events import ConnectionState, StreamEvent

StreamOpener = Callable[[], AbstractAsyncContextManager[AsyncIterator[str]]]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


class EventStreamClient:
    """Event stream subscription with a connection state machine.

    States: ``disconnected`` (initial) → ``connected`` once the server
    accepts the subscription.  When the transport fails or the server ends
    the stream, the client moves to ``reconnecting`` and retries after
    ``min(base_delay * 2**n, max_delay)`` seconds.  After ``max_retries``
    consecutive failures it settles in ``disconnected`` until
    :meth:`connect` is called again.

    Parameters
    ----------
    open_stream
        Factory returning an async context manager; entering it opens the
        subscription and yields the decoded response lines.
    on_event
        Receives every successfully parsed event, in arrival order.
    on_state_change
        Receives the new state on every actual transition.
    call_later
        Timer factory, ``loop.call_later`` of the running loop by default.
    """

    def __init__(
        self,
        *,
        open_stream: StreamOpener,
        on_event: Callable[[StreamEvent], None],
        on_state_change: Callable[[ConnectionState], None] | None = None,
        max_retries: int = MAX_RECONNECT_RETRIES,
        base_delay: float = RECONNECT_BASE_DELAY,
        max_delay: float = RECONNECT_MAX_DELAY,
        call_later: Scheduler | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._open_stream = open_stream
        self._on_event = on_event
        self._on_state_change = on_state_change
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._call_later = call_later
        self._logger = logger or logging.getLogger(__name__)

        self._state = ConnectionState.DISCONNECTED
        self._retry_count = 0
        self._task: asyncio.Task[None] | None = None
        self._retry_timer: TimerHandle | None = None
        # Bumped on every teardown so a superseded connection never acts.
        self._generation = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def retry_count(self) -> int:
        """Reconnect attempts scheduled since the last successful open."""
        return self._retry_count

    @property
    def has_connection(self) -> bool:
        return self._task is not None

    @property
    def reconnect_pending(self) -> bool:
        return self._retry_timer is not None

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        self._logger.debug("SSE state %s -> %s", self._state, state)
        self._state = state
        if self._on_state_change is not None:
            self._on_state_change(state)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Open a new subscription, replacing any existing one.

        Must be called from a running event loop.
        """
        # Teardown without close(): a timer-driven reconnect stays "reconnecting"
        # instead of flickering through "disconnected".
        self._teardown()
        loop = asyncio.get_running_loop()
        generation = self._generation
        self._logger.debug("SSE connect requested generation=%d", generation)
        self._task = loop.create_task(self._run(generation))

    def close(self) -> None:
        """Cancel any pending reconnect and drop the connection."""
        self._teardown()
        self._set_state(ConnectionState.DISCONNECTED)

    async def aclose(self) -> None:
        """:meth:`close`, then wait for the cancelled connection task to finish."""
        task = self._task
        self.close()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def _teardown(self) -> None:
        self._generation += 1

        timer = self._retry_timer
        self._retry_timer = None
        if timer is not None:
            timer.cancel()

        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def _run(self, generation: int) -> None:
        parser = SseParser()
        try:
            async with self._open_stream() as lines:
                if generation != self._generation:
                    return
                self._handle_open()
                async for line in lines:
                    frame = parser.feed_line(line)
                    if frame is None:
                        continue
                    self._dispatch(frame)
                    if generation != self._generation:
                        return
            self._logger.debug("SSE stream ended by server")
        except Exception:
            self._logger.debug("SSE connection error", exc_info=True)

        if generation == self._generation:
            self._handle_error()

    def _handle_open(self) -> None:
        self._logger.debug("SSE connected")
        self._retry_count = 0
        self._set_state(ConnectionState.CONNECTED)

    def _handle_error(self) -> None:
        self._task = None

        if self._retry_count >= self._max_retries:
            self._logger.debug("SSE giving up after %d retries", self._retry_count)
            self._set_state(ConnectionState.DISCONNECTED)
            return

        self._set_state(ConnectionState.RECONNECTING)
        delay = reconnect_delay(self._retry_count, base=self._base_delay, cap=self._max_delay)
        self._retry_count += 1
        self._logger.debug(
            "SSE reconnect scheduled in %.1fs (retry %d/%d)",
            delay,
            self._retry_count,
            self._max_retries,
        )
        call_later = self._call_later or asyncio.get_running_loop().call_later
        self._retry_timer = call_later(delay, self._reconnect)

    def _reconnect(self) -> None:
        self._retry_timer = None
        self.connect()

    def _dispatch(self, frame: SseFrame) -> None:
        event = build_event_from_frame(frame)
        if event is None:
            return
        try:
            self._on_event(event)
        except Exception:
            self._logger.exception("SSE event handler failed event=%s", frame.event)
