"""Custom exception hierarchy for pydockercd."""

from __future__ import annotations


class DockerCdError(Exception):
    """Base exception for all pydockercd errors."""


class DockerCdConfigError(DockerCdError):
    """Invalid or missing configuration."""


class DockerCdTransportError(DockerCdError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class DockerCdPayloadError(DockerCdError):
    """Response body did not match the expected model."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)
