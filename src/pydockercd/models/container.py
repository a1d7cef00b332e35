"""Container model for ``/api/stacks/containers/{path}``."""

from __future__ import annotations

from pydockercd.models._base import DockerCdBaseModel


class ContainerInfo(DockerCdBaseModel):
    """A single container belonging to a stack."""

    id: str
    name: str = ""
    service: str = ""
    state: str = ""
    """``running``, ``exited``, ``paused``, ``restarting``, ``dead`` or ``created``."""
    health: str = ""
    """``healthy``, ``unhealthy``, ``starting`` or ``none``."""
    image: str = ""
    ports: str | None = None

    @property
    def is_running(self) -> bool:
        return self.state == "running"
