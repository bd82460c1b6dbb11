#!/usr/bin/env python3
"""Terminal front-end for the CAN health sync engine.

Connects to the CAN health API, keeps the fleet view in sync and prints it.

Usage
-----
Point the script at the server and run one of the commands::

    export CANHEALTH_BASE_URL="http://127.0.0.1:8008"
    python scripts/fleet_monitor.py watch --oem Bajaj
    python scripts/fleet_monitor.py export --status "Non-Communicating" -o exports/
    python scripts/fleet_monitor.py quality --oem Euler
    python scripts/fleet_monitor.py force-refresh

Common options::

    --oem NAME           OEM filter (default: All)
    --region NAME        Region filter (default: All)
    --status TAB         Status tab (default: All)
    --search TEXT        Vehicle ID search
    --verbose, -v        Enable debug logging
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

from canhealth import (  # noqa: E402
    CanHealthClient,
    CanHealthConfig,
    CanHealthError,
    FilterState,
    StatusTab,
    SyncController,
    ViewState,
    classify,
)
from canhealth._constants import KNOWN_OEMS  # noqa: E402
from canhealth.quality import bucket  # noqa: E402


def _section(title: str) -> str:
    return f"\n{'=' * 60}\n  {title}\n{'=' * 60}"


def _render_listing(view: ViewState) -> str:
    lines: list[str] = []
    summary = view.summary
    if summary is not None:
        lines.append(
            f"  fleet {summary.total_vehicles} | online {summary.communicating_count}"
            f" | offline {summary.non_communicating_count}"
            f" | no API resp. {summary.no_api_response_count}"
            f" | no API {summary.no_api_integration_count}"
            f" | server {summary.status.value}"
        )
    lines.append(f"  page {view.page}/{view.pages} ({view.total} matching) state={view.sync_state.value}")
    if view.error:
        lines.append(f"  ! {view.error}")
    for record in view.items:
        badge = classify(record)
        marker = "*" if badge.emphasized else " "
        lines.append(
            f"  {record.vehicle_id:<14} {record.oem:<10} {record.region or '':<12}"
            f" {badge.badge_label:<13} {marker}{badge.inactivity_text}"
        )
    return "\n".join(lines)


def _render_quality(view: ViewState) -> str:
    if view.quality is None:
        return "  no data quality snapshot" + (f" ({view.error})" if view.error else "")
    counts = bucket(view.quality)
    lines = [
        f"  high {counts.high} | mid {counts.mid} | low {counts.low} | page {view.page}/{view.pages}",
    ]
    for item in view.visible_quality_items:
        lines.append(f"  {item.vehicle_id:<14} {item.oem:<10} {item.observed:>6}/{item.expected:<6} {item.score:5.1f}%")
    return "\n".join(lines)


def _filters(args: argparse.Namespace, *, status: StatusTab | None = None) -> FilterState:
    return FilterState(
        oem=args.oem,
        region=args.region,
        search=args.search,
        status_tab=status or StatusTab(args.status),
    )


async def _watch(args: argparse.Namespace, config: CanHealthConfig) -> int:
    def on_change(view: ViewState) -> None:
        if not view.loading:
            print(_section("CAN HEALTH"))
            print(_render_listing(view))

    async with CanHealthClient(config) as client:
        async with SyncController(client, filters=_filters(args), on_change=on_change):
            if args.duration > 0:
                await asyncio.sleep(args.duration)
            else:
                await asyncio.Event().wait()
    return 0


async def _export(args: argparse.Namespace, config: CanHealthConfig) -> int:
    async with CanHealthClient(config) as client:
        async with SyncController(client, filters=_filters(args)) as controller:
            path = await controller.export(args.output)
    print(f"Export written to {path}")
    return 0


async def _quality(args: argparse.Namespace, config: CanHealthConfig) -> int:
    async with CanHealthClient(config) as client:
        async with SyncController(client, filters=_filters(args, status=StatusTab.DATA_QUALITY)) as controller:
            print(_section("DATA QUALITY"))
            print(_render_quality(controller.view))
            if args.export:
                path = await controller.export(args.output)
                print(f"Export written to {path}")
    return 1 if controller.view.error else 0


async def _force_refresh(args: argparse.Namespace, config: CanHealthConfig) -> int:
    async with CanHealthClient(config) as client:
        async with SyncController(client, filters=_filters(args)) as controller:
            task = controller.force_refresh()
            if task is not None:
                await task
            refresh = controller.view.refresh
            print(f"Refresh {refresh.status.value} after {refresh.attempts} status checks")
            if controller.view.error:
                print(controller.view.error, file=sys.stderr)
                return 1
            print(_render_listing(controller.view))
    return 0


async def main() -> int:
    parser = argparse.ArgumentParser(description="OEM fleet connectivity monitor")
    parser.add_argument("--oem", default="All", choices=["All", *KNOWN_OEMS], help="OEM filter (default: All)")
    parser.add_argument("--region", default="All", help="Region filter (default: All)")
    parser.add_argument(
        "--status",
        default=StatusTab.ALL.value,
        choices=[tab.value for tab in StatusTab if tab is not StatusTab.DATA_QUALITY],
        help="Status tab (default: All)",
    )
    parser.add_argument("--search", default="", help="Vehicle ID search")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    watch = sub.add_parser("watch", help="Keep the listing in sync and print every update")
    watch.add_argument("--duration", type=float, default=0.0, help="Stop after N seconds (default: run forever)")

    export = sub.add_parser("export", help="Write the filtered listing to an .xlsx file")
    export.add_argument("--output", "-o", default=".", help="Target directory (default: cwd)")

    quality = sub.add_parser("quality", help="Show the data quality window")
    quality.add_argument("--export", action="store_true", help="Also write the snapshot to an .xlsx file")
    quality.add_argument("--output", "-o", default=".", help="Target directory (default: cwd)")

    sub.add_parser("force-refresh", help="Run a server-side force refresh and wait for it")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    commands = {
        "watch": _watch,
        "export": _export,
        "quality": _quality,
        "force-refresh": _force_refresh,
    }
    try:
        config = CanHealthConfig.from_env()
        return await commands[args.command](args, config)
    except CanHealthError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
