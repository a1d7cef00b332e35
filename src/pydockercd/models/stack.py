"""Stack record model.

Mapped from the ``/api/stacks`` response and the ``stack.snapshot`` /
``stack.upsert`` stream events.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import field_validator

from pydockercd.models._base import DockerCdBaseModel


class StackStatus(StrEnum):
    """Sync status of a stack."""

    MISSING = "missing"
    SYNCING = "syncing"
    SYNCED = "synced"
    DELETING = "deleting"
    FAILED = "failed"


class StackRecord(DockerCdBaseModel):
    """One deployable compose stack, keyed by its repository ``path``."""

    path: str
    """Directory of the stack in the desired-state repository."""
    compose_file: str = ""
    """Compose file name inside ``path``."""
    compose_hash: str = ""
    """Hash of the desired compose file content."""
    status: StackStatus

    containers_running: int | None = None
    containers_total: int | None = None

    synced_revision: str | None = None
    synced_commit_message: str | None = None
    synced_compose_hash: str | None = None
    synced_at: str | None = None

    last_sync_at: str | None = None
    last_sync_status: str | None = None
    last_sync_error: str | None = None

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        path = value.strip()
        if not path:
            raise ValueError("path must be non-empty")
        return path
