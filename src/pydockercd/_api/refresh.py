"""Refresh endpoints.

Endpoints:
  - GET /api/refresh-status
  - POST /api/refresh
"""

from __future__ import annotations

import logging

from pydantic import TypeAdapter

from pydockercd._api._common import parse_payload
from pydockercd._constants import REFRESH_ENDPOINT, REFRESH_STATUS_ENDPOINT
from pydockercd._transport import Transport
from pydockercd.models.refresh import RefreshSnapshot

_logger = logging.getLogger(__name__)

_REFRESH_SNAPSHOT = TypeAdapter(RefreshSnapshot)


async def fetch_refresh_status(transport: Transport) -> RefreshSnapshot:
    """Fetch the summary of the most recent desired-state refresh."""
    payload = await transport.get_json(REFRESH_STATUS_ENDPOINT)
    return parse_payload(REFRESH_STATUS_ENDPOINT, _REFRESH_SNAPSHOT, payload)


async def trigger_refresh(transport: Transport) -> None:
    """Ask the server to re-read its desired state.

    The outcome is reported later through ``refresh.status`` stream events.
    """
    response = await transport.post(REFRESH_ENDPOINT)
    _logger.debug("Refresh triggered response=%s", response)
