"""Client configuration for pydockercd."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pydockercd._constants import (
    BASE_URL,
    MAX_RECONNECT_RETRIES,
    RECONNECT_BASE_DELAY,
    RECONNECT_MAX_DELAY,
)
from pydockercd.exceptions import DockerCdConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class DockerCdConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Docker-CD server base URL, without a trailing slash
        (e.g. ``"http://docker-cd.local:8080"``).
    request_timeout : float
        Total timeout in seconds for one-shot HTTP requests.  The event
        stream has no read timeout; it stays open until the transport
        reports an error.
    reconnect_base_delay : float
        Delay in seconds before the first reconnect attempt.  Each
        further attempt doubles it.
    reconnect_max_delay : float
        Upper bound in seconds for the reconnect delay.
    max_retries : int
        Consecutive failed connection attempts after which the event
        stream gives up and stays ``disconnected`` until ``connect()``
        is called again.
    stream_enabled : bool
        Open the live event stream on ``DockerCdClient.start()``.
    """

    base_url: str = BASE_URL
    request_timeout: float = 10.0
    reconnect_base_delay: float = RECONNECT_BASE_DELAY
    reconnect_max_delay: float = RECONNECT_MAX_DELAY
    max_retries: int = MAX_RECONNECT_RETRIES
    stream_enabled: bool = True

    def __post_init__(self) -> None:
        base_url = self.base_url.strip().rstrip("/")
        if not base_url:
            raise DockerCdConfigError("base_url must be non-empty")
        object.__setattr__(self, "base_url", base_url)
        if self.request_timeout <= 0:
            raise DockerCdConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.reconnect_base_delay <= 0:
            raise DockerCdConfigError(f"reconnect_base_delay must be positive, got {self.reconnect_base_delay}")
        if self.reconnect_max_delay < self.reconnect_base_delay:
            raise DockerCdConfigError("reconnect_max_delay must be >= reconnect_base_delay")
        if self.max_retries < 0:
            raise DockerCdConfigError(f"max_retries must be >= 0, got {self.max_retries}")

    def url(self, endpoint: str) -> str:
        """Absolute URL for an API *endpoint* path."""
        return f"{self.base_url}{endpoint}"

    @classmethod
    def from_env(cls, **overrides: Any) -> DockerCdConfig:
        """Create configuration from environment variables.

        Reads ``DOCKER_CD_API_BASE_URL`` and the optional ``DOCKER_CD_*``
        tuning variables.  Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        DockerCdConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("DOCKER_CD_API_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url

        _ENV_FLOAT_MAP = {
            "DOCKER_CD_REQUEST_TIMEOUT": "request_timeout",
            "DOCKER_CD_RECONNECT_BASE_DELAY": "reconnect_base_delay",
            "DOCKER_CD_RECONNECT_MAX_DELAY": "reconnect_max_delay",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                try:
                    config_kwargs[field_name] = float(val)
                except ValueError as exc:
                    raise DockerCdConfigError(f"{env_key} must be a number, got {val!r}") from exc

        retries_env = env.get("DOCKER_CD_MAX_RETRIES")
        if retries_env is not None and "max_retries" not in overrides:
            try:
                config_kwargs["max_retries"] = int(retries_env)
            except ValueError as exc:
                raise DockerCdConfigError(f"DOCKER_CD_MAX_RETRIES must be an integer, got {retries_env!r}") from exc

        if "stream_enabled" not in overrides:
            config_kwargs["stream_enabled"] = _env_bool(env.get("DOCKER_CD_STREAM_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
