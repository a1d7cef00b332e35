#!/usr/bin/env python3
"""Follow a Docker-CD server and print the stack table on every change.

Usage
-----
Point the client at a server and run::

    export DOCKER_CD_API_BASE_URL="http://docker-cd.local:8080"
    python scripts/watch_stacks.py

Options::

    --status failed      Only show stacks with this status
    --search api         Only show stacks whose path contains this text
    --once               Print the initial load and exit (no event stream)
    --refresh            Trigger a server-side refresh after connecting
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pydockercd import DockerCdClient, DockerCdConfig, StackStatus  # noqa: E402


def _render(client: DockerCdClient) -> str:
    store = client.store
    lines = [f"-- {client.connection_state}" + (" (loading)" if store.loading else "")]
    if store.error:
        lines.append(f"   error: {store.error}")

    refresh = client.refresh_status
    if refresh is not None:
        lines.append(f"   revision {refresh.revision or '-'} [{refresh.refresh_status}] {refresh.commit_message or ''}")

    tallies = ", ".join(f"{status}={count}" for status, count in client.status_counts.items())
    lines.append(f"   {tallies}")

    for stack in client.filtered_stacks:
        running = ""
        if stack.containers_total is not None:
            running = f" {stack.containers_running or 0}/{stack.containers_total}"
        error = f"  ! {stack.last_sync_error}" if stack.last_sync_error else ""
        lines.append(f"   {stack.status:<9} {stack.path}{running}{error}")
    return "\n".join(lines)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Watch Docker-CD stacks live.")
    parser.add_argument("--status", choices=[s.value for s in StackStatus], help="Only show this status")
    parser.add_argument("--search", default="", help="Only show paths containing this text")
    parser.add_argument("--once", action="store_true", help="Print the initial load and exit")
    parser.add_argument("--refresh", action="store_true", help="Trigger a server-side refresh")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = DockerCdConfig.from_env(stream_enabled=not args.once)

    async with DockerCdClient(config) as client:
        client.set_filter_status(args.status)
        client.set_search_query(args.search)

        if args.once:
            await client.start()
            print(_render(client))
            return

        client.subscribe(lambda: print(_render(client), flush=True))
        await client.start()
        if args.refresh:
            await client.trigger_refresh()

        # Runs until interrupted; reconnects are handled by the client.
        await asyncio.Event().wait()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
