"""Command-line entry point for the ``settings-sync`` script."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from typing import TYPE_CHECKING

from .config import get_settings
from .container import ApplicationContainer
from .logging_config import configure_logging
from .persistence import create_schema
from .primitives.exceptions import SettingsSyncError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger("settings_sync.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="settings-sync",
        description="Propagate user settings changes over RabbitMQ.",
    )
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("consume", help="consume update messages until interrupted (default)")
    sub.add_parser("sync", help="re-broadcast every stored record once")
    one = sub.add_parser("sync-user", help="re-broadcast a single user's settings")
    one.add_argument("nickname")
    show = sub.add_parser("show", help="print a user's stored settings as JSON")
    show.add_argument("nickname")
    return parser


async def _consume(container: ApplicationContainer) -> int:
    failed = await container.bootstrap.init()
    if failed:
        logger.warning("Running degraded", extra={"failed_services": failed})

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)
    await stop.wait()
    logger.info("Shutting down")
    return 0


async def _sync(container: ApplicationContainer, nickname: str | None) -> int:
    await create_schema(container.db_engine)
    await container.broker.init()
    if nickname is not None:
        sent = await container.engine.send_settings_update_notification(nickname)
        return 0 if sent else 1
    report = await container.engine.synchronize_all()
    return 0 if report.failed == 0 else 1


async def _show(container: ApplicationContainer, nickname: str) -> int:
    await create_schema(container.db_engine)
    record = await container.engine.get_record(nickname)
    if record is None:
        logger.error("No settings stored for %s", nickname)
        return 1
    json.dump(record.to_response(), sys.stdout, sort_keys=True)
    sys.stdout.write("\n")
    return 0


async def run(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    container = ApplicationContainer(settings)
    try:
        if args.command == "sync":
            return await _sync(container, None)
        if args.command == "sync-user":
            return await _sync(container, args.nickname)
        if args.command == "show":
            return await _show(container, args.nickname)
        return await _consume(container)
    except SettingsSyncError as e:
        logger.error("%s failed: %s", args.command or "consume", e)
        return 1
    finally:
        await container.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    return asyncio.run(run(argv))
