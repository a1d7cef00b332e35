from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from pydockercd._api import refresh as refresh_api
from pydockercd._api import stacks as stacks_api
from pydockercd.exceptions import DockerCdPayloadError
from pydockercd.models import RefreshState, StackStatus


@dataclass
class _FakeTransport:
    responses: dict[str, Any] = field(default_factory=dict)
    gets: list[str] = field(default_factory=list)
    posts: list[str] = field(default_factory=list)

    async def get_json(self, endpoint: str) -> Any:
        self.gets.append(endpoint)
        return self.responses.get(endpoint)

    async def post(self, endpoint: str) -> Any:
        self.posts.append(endpoint)
        return self.responses.get(endpoint)


@pytest.mark.asyncio
async def test_fetch_stacks_parses_records() -> None:
    transport = _FakeTransport(
        {"/api/stacks": [{"path": "apps/api", "status": "synced"}, {"path": "apps/web", "status": "deleting"}]}
    )

    records = await stacks_api.fetch_stacks(transport)

    assert [(r.path, r.status) for r in records] == [
        ("apps/api", StackStatus.SYNCED),
        ("apps/web", StackStatus.DELETING),
    ]


@pytest.mark.asyncio
async def test_fetch_stacks_null_body_is_empty() -> None:
    assert await stacks_api.fetch_stacks(_FakeTransport({"/api/stacks": None})) == []


@pytest.mark.asyncio
async def test_fetch_stacks_bad_shape_raises_payload_error() -> None:
    transport = _FakeTransport({"/api/stacks": [{"path": "apps/api", "status": "exploded"}]})

    with pytest.raises(DockerCdPayloadError) as excinfo:
        await stacks_api.fetch_stacks(transport)
    assert excinfo.value.endpoint == "/api/stacks"


@pytest.mark.asyncio
async def test_fetch_containers_quotes_path() -> None:
    transport = _FakeTransport({"/api/stacks/containers/apps/my%20stack": [{"id": "1", "state": "running"}]})

    containers = await stacks_api.fetch_containers(transport, "apps/my stack/")

    assert transport.gets == ["/api/stacks/containers/apps/my%20stack"]
    assert containers[0].is_running


@pytest.mark.asyncio
async def test_fetch_containers_rejects_empty_path() -> None:
    transport = _FakeTransport()

    with pytest.raises(ValueError):
        await stacks_api.fetch_containers(transport, " / ")
    assert transport.gets == []


@pytest.mark.asyncio
async def test_fetch_refresh_status() -> None:
    transport = _FakeTransport(
        {
            "/api/refresh-status": {
                "revision": "abc",
                "refreshedAt": "2026-01-02T03:04:05Z",
                "refreshStatus": "queued",
                "stacks": [{"path": "ignored", "status": "synced"}],
            }
        }
    )

    snapshot = await refresh_api.fetch_refresh_status(transport)

    assert snapshot.refresh_status is RefreshState.QUEUED
    assert snapshot.is_active
    assert snapshot.refreshed_at is not None and snapshot.refreshed_at.year == 2026


@pytest.mark.asyncio
async def test_trigger_refresh_posts_once() -> None:
    transport = _FakeTransport()

    await refresh_api.trigger_refresh(transport)

    assert transport.posts == ["/api/refresh"]
