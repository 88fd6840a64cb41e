"""Command line entry point: one-off scans, single chat turns, or a watch loop."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from repo_scout.config import Settings, configure_logging, load_settings
from repo_scout.errors import ScanError
from repo_scout.runtime import ScoutService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="repo-scout", description="Scan a GitHub project and chat about it.")
    parser.add_argument(
        "-o",
        "--override",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Hydra-style config override, e.g. scanner.auto_fix=true (repeatable)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("scan", help="Run one scan and print the report as JSON")

    chat = sub.add_parser("chat", help="Send one chat message and print the reply")
    chat.add_argument("message")
    chat.add_argument("--session", default="cli")

    watch = sub.add_parser("watch", help="Scan periodically until interrupted")
    watch.add_argument("--interval", type=float, default=None, help="Seconds between scans")
    return parser


async def _scan(service: ScoutService) -> int:
    try:
        report = await service.scanner.perform_scan()
    except ScanError as exc:
        print(f"Scan failed: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return 0


async def _chat(service: ScoutService, session: str, message: str) -> int:
    print(await service.chat.process_message(session, message))
    return 0


async def _watch(service: ScoutService, interval: Optional[float]) -> int:
    service.scanner.start_periodic(interval)
    try:
        await asyncio.Event().wait()
    except asyncio.CancelledError:
        pass
    return 0


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    service = ScoutService(settings)
    try:
        if args.command == "scan":
            return await _scan(service)
        if args.command == "chat":
            return await _chat(service, args.session, args.message)
        return await _watch(service, args.interval)
    finally:
        await service.stop()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.override)
    configure_logging(settings.log_level)
    try:
        return asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
