"""Data models for Docker-CD API payloads."""

from pydockercd.models._base import DockerCdBaseModel
from pydockercd.models.container import ContainerInfo
from pydockercd.models.refresh import RefreshSnapshot, RefreshState
from pydockercd.models.stack import StackRecord, StackStatus

__all__ = [
    "ContainerInfo",
    "DockerCdBaseModel",
    "RefreshSnapshot",
    "RefreshState",
    "StackRecord",
    "StackStatus",
]
