"""HTTP transport for the Docker-CD REST API and event stream."""

from __future__ import annotations

import codecs
import contextlib
import json
import logging
import re
from collections.abc import AsyncIterator
from typing import Any, Protocol

import aiohttp

from pydockercd._constants import USER_AGENT
from pydockercd.config import DockerCdConfig
from pydockercd.exceptions import DockerCdTransportError

_logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> Any: ...

    async def post(self, endpoint: str) -> Any: ...


async def _iter_lines(content: aiohttp.StreamReader) -> AsyncIterator[str]:
    """Yield decoded lines from a streaming response body.

    Reads raw chunks rather than going through aiohttp's line reader, which
    caps line length; a full snapshot arrives as a single ``data:`` line.
    Accepts ``\\r\\n``, ``\\n`` and bare ``\\r`` terminators. A trailing
    unterminated line at end of stream is dropped.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    async for chunk in content.iter_any():
        buffer += decoder.decode(chunk)
        # A trailing "\r" may be the first half of a "\r\n" split across chunks.
        held = ""
        if buffer.endswith("\r"):
            buffer, held = buffer[:-1], "\r"
        *lines, buffer = _LINE_BREAK.split(buffer)
        buffer += held
        for line in lines:
            yield line

    buffer += decoder.decode(b"", final=True)
    *lines, _ = _LINE_BREAK.split(buffer)
    for line in lines:
        yield line


class HttpTransport:
    """JSON-over-HTTP transport plus the SSE stream opener."""

    def __init__(self, config: DockerCdConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self, accept: str = "application/json") -> dict[str, str]:
        return {"accept": accept, "user-agent": USER_AGENT}

    async def _request(self, method: str, endpoint: str) -> str:
        url = self._config.url(endpoint)
        _logger.debug("%s %s", method, url)
        try:
            async with self._http.request(method, url, headers=self._headers(), timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status >= 300:
                    raise DockerCdTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except DockerCdTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise DockerCdTransportError(
                f"Request to {endpoint} failed: {str(exc) or type(exc).__name__}",
                endpoint=endpoint,
            ) from exc
        return text

    async def get_json(self, endpoint: str) -> Any:
        """GET *endpoint* and decode the JSON body."""
        text = await self._request("GET", endpoint)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DockerCdTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

    async def post(self, endpoint: str) -> Any:
        """POST to *endpoint*; returns the decoded JSON body, or ``None`` if empty."""
        text = await self._request("POST", endpoint)
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Side-effect endpoints may reply with plain text.
            return None

    @contextlib.asynccontextmanager
    async def open_event_stream(self, endpoint: str) -> AsyncIterator[AsyncIterator[str]]:
        """Open the SSE stream at *endpoint* and yield its decoded lines.

        Entering the context means the server accepted the subscription.
        Any network failure or non-200 status raises
        :class:`DockerCdTransportError`.
        """
        url = self._config.url(endpoint)
        timeout = aiohttp.ClientTimeout(total=None, connect=self._config.request_timeout, sock_read=None)
        try:
            resp = await self._http.get(
                url,
                headers={**self._headers("text/event-stream"), "cache-control": "no-cache"},
                timeout=timeout,
            )
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise DockerCdTransportError(
                f"Event stream {endpoint} failed: {str(exc) or type(exc).__name__}",
                endpoint=endpoint,
            ) from exc

        try:
            if resp.status != 200:
                text = await resp.text()
                raise DockerCdTransportError(
                    f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                    status_code=resp.status,
                    endpoint=endpoint,
                )
            yield _iter_lines(resp.content)
        finally:
            resp.close()
