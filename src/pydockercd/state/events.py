"""Typed stream events.

The ingestion layer turns every SSE frame into one of these events. Only
the state/store layer is allowed to apply them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from pydockercd.models.refresh import RefreshSnapshot
from pydockercd.models.stack import StackRecord


class ConnectionState(StrEnum):
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    DISCONNECTED = "disconnected"


class EventKind(StrEnum):
    SNAPSHOT = "snapshot"
    UPSERT = "upsert"
    DELETE = "delete"
    REFRESH_STATUS = "refresh_status"


class _StreamEventBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SnapshotEvent(_StreamEventBase):
    """Authoritative replacement of the whole stack map."""

    kind: Literal[EventKind.SNAPSHOT] = EventKind.SNAPSHOT
    records: list[StackRecord] = Field(default_factory=list)


class UpsertEvent(_StreamEventBase):
    """Insert or overwrite the record at ``record.path``."""

    kind: Literal[EventKind.UPSERT] = EventKind.UPSERT
    record: StackRecord


class DeleteEvent(_StreamEventBase):
    """Remove the record at ``path`` (no-op when absent)."""

    kind: Literal[EventKind.DELETE] = EventKind.DELETE
    path: str


class RefreshStatusEvent(_StreamEventBase):
    """Replace the refresh snapshot."""

    kind: Literal[EventKind.REFRESH_STATUS] = EventKind.REFRESH_STATUS
    snapshot: RefreshSnapshot


StreamEvent = Annotated[
    SnapshotEvent | UpsertEvent | DeleteEvent | RefreshStatusEvent,
    Field(discriminator="kind"),
]
