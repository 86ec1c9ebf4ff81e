#!/usr/bin/env python3
"""Passive realtime probe for a POS server.

Connects through possync, prints every domain envelope and lifecycle event,
and shows the merged dashboard metrics whenever they change. Use it to check
which message types a server actually pushes and how often.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from possync import LifecycleTopic, MessageType, PosSyncClient, SyncConfig  # noqa: E402
from possync._redact import redact_for_log  # noqa: E402

_LOG = logging.getLogger("sync_probe")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0] if __doc__ else None)
    parser.add_argument("--url", help="WebSocket URL (default: POS_SYNC_URL or ws://localhost:5000)")
    parser.add_argument("--topics", nargs="*", default=None, help="Server-side topics to request")
    parser.add_argument("--max-attempts", type=int, default=None, help="Reconnect attempts before giving up")
    parser.add_argument("--raw", action="store_true", help="Print payloads without redaction")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args(argv)


def _printer(label: str, raw: bool) -> Any:
    def _print(payload: dict[str, Any]) -> None:
        shown = payload if raw else redact_for_log(payload)
        print(f"[{label}] {json.dumps(shown, default=str, sort_keys=True)}", flush=True)

    return _print


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.url:
        overrides["url"] = args.url
    if args.topics is not None:
        overrides["topics"] = tuple(args.topics)
    if args.max_attempts is not None:
        overrides["max_reconnect_attempts"] = args.max_attempts
    config = SyncConfig.from_env(**overrides)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:  # pragma: no cover - Windows
            pass

    async with PosSyncClient(config) as client:
        for message_type in MessageType:
            client.subscribe(message_type, _printer(message_type.value, args.raw))
        for topic in LifecycleTopic:
            client.subscribe(topic, _printer(f"lifecycle:{topic.value}", True))

        def _on_fatal(payload: dict[str, Any]) -> None:
            if payload.get("fatal"):
                stop.set()

        client.subscribe(LifecycleTopic.ERROR, _on_fatal)
        client.store.add_listener(
            lambda name, aggregate: print(f"[state:{name}] {aggregate.model_dump_json()}", flush=True)
        )

        _LOG.info("Probing %s (Ctrl+C to stop)", config.url)
        await stop.wait()
        status = client.get_status()
        _LOG.info("Stopping state=%s attempts=%d", status.state, status.reconnect_attempts)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
