from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest

from pydockercd._transport import _iter_lines


class _ChunkedContent:
    """Stand-in for ``aiohttp.StreamReader`` delivering fixed chunks."""

    def __init__(self, *chunks: bytes) -> None:
        self._chunks = chunks

    async def iter_any(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk


async def _collect(content: Any) -> list[str]:
    return [line async for line in _iter_lines(content)]


@pytest.mark.asyncio
async def test_lines_split_across_chunks() -> None:
    content = _ChunkedContent(b"event: stack.del", b"ete\ndata: {\"path\"", b": \"a\"}\n\n")

    assert await _collect(content) == ["event: stack.delete", 'data: {"path": "a"}', ""]


@pytest.mark.asyncio
async def test_crlf_split_across_chunks_is_one_terminator() -> None:
    content = _ChunkedContent(b"data: 1\r", b"\n\r", b"\n")

    assert await _collect(content) == ["data: 1", ""]


@pytest.mark.asyncio
async def test_bare_cr_terminators() -> None:
    content = _ChunkedContent(b"data: 1\rdata: 2\r\r", b"x")

    assert await _collect(content) == ["data: 1", "data: 2", ""]


@pytest.mark.asyncio
async def test_multibyte_character_split_across_chunks() -> None:
    encoded = "data: café\n".encode()
    content = _ChunkedContent(encoded[:10], encoded[10:])

    assert await _collect(content) == ["data: café"]


@pytest.mark.asyncio
async def test_long_line_is_not_truncated() -> None:
    payload = "data: " + "y" * 1_000_000
    raw = (payload + "\n").encode()
    content = _ChunkedContent(*(raw[i : i + 65536] for i in range(0, len(raw), 65536)))

    assert await _collect(content) == [payload]


@pytest.mark.asyncio
async def test_unterminated_tail_is_dropped() -> None:
    content = _ChunkedContent(b"data: done\n", b"data: partial")

    assert await _collect(content) == ["data: done"]
