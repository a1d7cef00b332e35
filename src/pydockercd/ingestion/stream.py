"""SSE ingestion helpers.

This module translates raw SSE frames from the event endpoint into typed
:mod:`pydockercd.state.events`. It performs shape validation only; any
frame that is not valid JSON or does not match the expected envelope is
dropped.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from pydockercd._constants import (
    EVENT_REFRESH_STATUS,
    EVENT_STACK_DELETE,
    EVENT_STACK_SNAPSHOT,
    EVENT_STACK_UPSERT,
)
from pydockercd._sse import SseFrame
from pydockercd.state.events import EventKind, StreamEvent

_logger = logging.getLogger(__name__)

_EVENT_ADAPTER: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)


def _snapshot_envelope(body: dict[str, Any]) -> dict[str, Any]:
    # A snapshot without "records" (or with null) is an empty snapshot.
    return {"kind": EventKind.SNAPSHOT, "records": body.get("records") or []}


def _upsert_envelope(body: dict[str, Any]) -> dict[str, Any]:
    return {"kind": EventKind.UPSERT, "record": body.get("record")}


def _delete_envelope(body: dict[str, Any]) -> dict[str, Any]:
    return {"kind": EventKind.DELETE, "path": body.get("path")}


def _refresh_status_envelope(body: dict[str, Any]) -> dict[str, Any]:
    return {"kind": EventKind.REFRESH_STATUS, "snapshot": body}


_ENVELOPES = {
    EVENT_STACK_SNAPSHOT: _snapshot_envelope,
    EVENT_STACK_UPSERT: _upsert_envelope,
    EVENT_STACK_DELETE: _delete_envelope,
    EVENT_REFRESH_STATUS: _refresh_status_envelope,
}


def build_stream_event(event_name: str, data: str) -> StreamEvent | None:
    """Build a typed event from an SSE event name and its ``data`` text.

    Returns ``None`` when the event name is unknown, the data is not a JSON
    object, or the payload fails validation.
    """
    envelope = _ENVELOPES.get(event_name)
    if envelope is None:
        _logger.debug("Ignoring unknown SSE event=%s", event_name)
        return None

    try:
        body = json.loads(data)
    except json.JSONDecodeError:
        _logger.debug("SSE payload is not JSON event=%s", event_name, exc_info=True)
        return None
    if not isinstance(body, dict):
        _logger.debug("SSE payload is not an object event=%s", event_name)
        return None

    try:
        return _EVENT_ADAPTER.validate_python(envelope(body))
    except ValidationError:
        _logger.debug("SSE payload failed validation event=%s", event_name, exc_info=True)
        return None


def build_event_from_frame(frame: SseFrame) -> StreamEvent | None:
    return build_stream_event(frame.event, frame.data)
