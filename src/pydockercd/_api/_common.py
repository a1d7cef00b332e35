"""Shared helpers for Docker-CD endpoint modules.

It is internal to pydockercd and may change at any time.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from pydockercd.exceptions import DockerCdPayloadError

T = TypeVar("T")


def parse_payload(endpoint: str, adapter: TypeAdapter[T], payload: Any) -> T:
    """Validate a decoded response body, mapping failures to :class:`DockerCdPayloadError`."""
    try:
        return adapter.validate_python(payload)
    except ValidationError as exc:
        raise DockerCdPayloadError(
            f"Unexpected payload from {endpoint}: {exc.error_count()} validation error(s)",
            endpoint=endpoint,
        ) from exc
