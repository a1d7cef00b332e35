"""In-memory stack store.

This is the only component allowed to mutate the canonical stack map.
Initial HTTP loads and live stream events both go through it; whichever
arrives last wins.
"""

from __future__ import annotations

import asyncio
import locale
import logging
from collections.abc import Awaitable, Callable
from typing import assert_never

from pydockercd.exceptions import DockerCdError
from pydockercd.models.refresh import RefreshSnapshot
from pydockercd.models.stack import StackRecord, StackStatus
from pydockercd.state.events import (
    ConnectionState,
    DeleteEvent,
    RefreshStatusEvent,
    SnapshotEvent,
    StreamEvent,
    UpsertEvent,
)

_logger = logging.getLogger(__name__)

_DEFAULT_LOAD_ERROR = "Failed to load stacks"

Listener = Callable[[], None]
StacksFetcher = Callable[[], Awaitable[list[StackRecord]]]
RefreshStatusFetcher = Callable[[], Awaitable[RefreshSnapshot]]


def _describe_failure(exc: BaseException) -> str:
    return str(exc) or _DEFAULT_LOAD_ERROR


class StackStore:
    """Canonical stack map, filter parameters and derived views.

    Mutations run synchronously on the event loop thread; every mutation
    that changes state notifies subscribers once it has completed.

    Derived views (:attr:`filtered_stacks`, :attr:`status_counts`) are
    recomputed on every read.
    """

    def __init__(
        self,
        *,
        fetch_stacks: StacksFetcher | None = None,
        fetch_refresh_status: RefreshStatusFetcher | None = None,
        collate: Callable[[str], str] = locale.strxfrm,
    ) -> None:
        self._fetch_stacks = fetch_stacks
        self._fetch_refresh_status = fetch_refresh_status
        self._collate = collate
        self._stacks: dict[str, StackRecord] = {}
        self._refresh_status: RefreshSnapshot | None = None
        self._connection_state = ConnectionState.DISCONNECTED
        self._filter_status: str | None = None
        self._search_query = ""
        self._loading = False
        self._error: str | None = None
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a handle that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                _logger.exception("Store listener %r failed", listener)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def apply_snapshot(self, records: list[StackRecord]) -> None:
        """Replace the whole map; paths missing from *records* are removed."""
        self._stacks = {record.path: record for record in records}
        self._notify()

    def apply_upsert(self, record: StackRecord) -> None:
        """Insert or overwrite the entry at ``record.path``."""
        self._stacks[record.path] = record
        self._notify()

    def apply_delete(self, path: str) -> None:
        """Remove the entry at *path*; no-op when absent."""
        if self._stacks.pop(path, None) is None:
            return
        self._notify()

    def apply_refresh_status(self, snapshot: RefreshSnapshot) -> None:
        self._refresh_status = snapshot
        self._notify()

    def handle(self, event: StreamEvent) -> None:
        """Apply one typed stream event."""
        if isinstance(event, SnapshotEvent):
            self.apply_snapshot(event.records)
        elif isinstance(event, UpsertEvent):
            self.apply_upsert(event.record)
        elif isinstance(event, DeleteEvent):
            self.apply_delete(event.path)
        elif isinstance(event, RefreshStatusEvent):
            self.apply_refresh_status(event.snapshot)
        else:
            assert_never(event)

    def set_connection_state(self, state: ConnectionState) -> None:
        if state == self._connection_state:
            return
        self._connection_state = state
        self._notify()

    async def load_initial(self) -> None:
        """Fetch stacks and refresh status concurrently and replace local state.

        On failure :attr:`error` holds the first failure's message and the
        current map is kept as is, so views keep showing the last known
        (possibly stale) stacks.  :attr:`loading` is cleared on every exit.
        """
        if self._fetch_stacks is None or self._fetch_refresh_status is None:
            raise DockerCdError("StackStore has no fetch collaborators configured")

        self._loading = True
        self._error = None
        self._notify()
        try:
            stacks_result, refresh_result = await asyncio.gather(
                self._fetch_stacks(),
                self._fetch_refresh_status(),
                return_exceptions=True,
            )
            for result in (stacks_result, refresh_result):
                if isinstance(result, BaseException) and not isinstance(result, Exception):
                    raise result
            if isinstance(stacks_result, BaseException):
                _logger.debug("Initial stack load failed", exc_info=stacks_result)
                self._error = _describe_failure(stacks_result)
            elif isinstance(refresh_result, BaseException):
                _logger.debug("Initial refresh status load failed", exc_info=refresh_result)
                self._error = _describe_failure(refresh_result)
            else:
                self._stacks = {record.path: record for record in stacks_result}
                self._refresh_status = refresh_result
        finally:
            self._loading = False
            self._notify()

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_filter_status(self, status: StackStatus | str | None) -> None:
        """Restrict :attr:`filtered_stacks` to one status; ``None`` or ``""`` clears."""
        self._filter_status = str(status) if status else None
        self._notify()

    def set_search_query(self, query: str) -> None:
        """Restrict :attr:`filtered_stacks` to paths containing *query* (case-insensitive)."""
        self._search_query = query
        self._notify()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._stacks)

    def __contains__(self, path: object) -> bool:
        return path in self._stacks

    def get_stack(self, path: str) -> StackRecord | None:
        return self._stacks.get(path)

    @property
    def stacks(self) -> list[StackRecord]:
        """All records, in no particular order."""
        return list(self._stacks.values())

    @property
    def filtered_stacks(self) -> list[StackRecord]:
        """Records matching the status filter and search query, sorted by path."""
        result = self.stacks

        if self._filter_status:
            result = [record for record in result if record.status == self._filter_status]

        if self._search_query:
            needle = self._search_query.casefold()
            result = [record for record in result if needle in record.path.casefold()]

        result.sort(key=lambda record: (self._collate(record.path), record.path))
        return result

    @property
    def status_counts(self) -> dict[StackStatus, int]:
        """Number of stacks per status; every known status is present."""
        counts = {status: 0 for status in StackStatus}
        for record in self._stacks.values():
            counts[record.status] += 1
        return counts

    @property
    def filter_status(self) -> str | None:
        return self._filter_status

    @property
    def search_query(self) -> str:
        return self._search_query

    @property
    def refresh_status(self) -> RefreshSnapshot | None:
        return self._refresh_status

    @property
    def connection_state(self) -> ConnectionState:
        return self._connection_state

    @property
    def is_connected(self) -> bool:
        return self._connection_state == ConnectionState.CONNECTED

    @property
    def is_reconnecting(self) -> bool:
        return self._connection_state == ConnectionState.RECONNECTING

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error
