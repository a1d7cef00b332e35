"""Ingestion layer.

This package contains adapters that turn data received from Docker-CD
(HTTP fetches, SSE frames) into typed events for the state store.
"""

__all__: list[str] = []
