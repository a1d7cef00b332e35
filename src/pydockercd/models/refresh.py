"""Refresh status model.

Mapped from ``/api/refresh-status`` and the ``refresh.status`` stream event.
The server embeds the full stack list in this payload as well; it is
ignored here because stacks travel through their own events.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydockercd.models._base import DockerCdBaseModel


class RefreshState(StrEnum):
    """State of the most recent desired-state refresh."""

    REFRESHING = "refreshing"
    QUEUED = "queued"
    COMPLETED = "completed"
    FAILED = "failed"


class RefreshSnapshot(DockerCdBaseModel):
    """Summary of the latest refresh.  Always replaced, never merged."""

    revision: str = ""
    """Commit SHA the desired state was read from."""
    commit_message: str | None = None
    ref: str = ""
    """Branch or tag name."""
    ref_type: str = ""
    refreshed_at: datetime | None = None
    refresh_status: RefreshState
    refresh_error: str | None = None

    @property
    def is_active(self) -> bool:
        return self.refresh_status in (RefreshState.REFRESHING, RefreshState.QUEUED)
