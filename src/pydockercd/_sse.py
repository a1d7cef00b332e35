"""Server-Sent Events wire-format parsing.

Implements the ``text/event-stream`` framing rules needed by the Docker-CD
event endpoint: ``event``, ``data`` and ``id`` fields, comment lines, and
blank-line dispatch. ``retry`` hints are ignored because reconnect timing
is owned by :class:`pydockercd.stream.EventStreamClient`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_EVENT = "message"


@dataclass(frozen=True)
class SseFrame:
    """One dispatched SSE event."""

    event: str
    data: str
    id: str | None = None


@dataclass
class SseParser:
    """Incremental line-oriented SSE parser.

    Feed decoded lines (with or without their line terminator) to
    :meth:`feed_line`; a frame is returned whenever a blank line completes
    one.
    """

    _event: str | None = None
    _data: list[str] = field(default_factory=list)
    _id: str | None = None

    def feed_line(self, line: str) -> SseFrame | None:
        line = line.rstrip("\r\n")
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if name == "event":
            self._event = value
        elif name == "data":
            self._data.append(value)
        elif name == "id":
            if "\0" not in value:
                self._id = value
        # "retry" and unknown field names are ignored.
        return None

    def _dispatch(self) -> SseFrame | None:
        event, data, frame_id = self._event, self._data, self._id
        self._event = None
        self._data = []
        self._id = None
        if not data:
            return None
        return SseFrame(event=event or DEFAULT_EVENT, data="\n".join(data), id=frame_id)
