"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8080"
USER_AGENT = "pydockercd"

STACKS_ENDPOINT = "/api/stacks"
CONTAINERS_ENDPOINT = "/api/stacks/containers"
REFRESH_STATUS_ENDPOINT = "/api/refresh-status"
REFRESH_ENDPOINT = "/api/refresh"
EVENTS_ENDPOINT = "/api/events"

# ------------------------------------------------------------------
# SSE event names published by the server
# ------------------------------------------------------------------

EVENT_STACK_SNAPSHOT = "stack.snapshot"
EVENT_STACK_UPSERT = "stack.upsert"
EVENT_STACK_DELETE = "stack.delete"
EVENT_REFRESH_STATUS = "refresh.status"

# ------------------------------------------------------------------
# Reconnect backoff
# ------------------------------------------------------------------

RECONNECT_BASE_DELAY = 1.0
RECONNECT_MAX_DELAY = 30.0
MAX_RECONNECT_RETRIES = 50


def reconnect_delay(
    retry: int,
    *,
    base: float = RECONNECT_BASE_DELAY,
    cap: float = RECONNECT_MAX_DELAY,
) -> float:
    """Seconds to wait before reconnect attempt number *retry* (0-based).

    ``min(base * 2**retry, cap)``. Raises :class:`ValueError` for a negative
    *retry*.
    """
    if retry < 0:
        raise ValueError(f"retry must be >= 0, got {retry}")
    # 2**retry grows without bound; stop doubling once past the cap.
    if retry >= 64:
        return cap
    return min(base * 2**retry, cap)
