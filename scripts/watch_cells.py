#!/usr/bin/env python3
"""Watch live cell measurements from the telephony bridge.

Starts a :class:`netsense.CellMonitor`, prints every categorized batch
as it arrives, and optionally exports the cached records on exit.

Usage
-----
::

    export NETSENSE_BRIDGE_URL="http://192.168.1.20:8765"
    python scripts/watch_cells.py --export cells.csv

Options::

    --interval SECONDS   Pause between acquisition cycles (default: 3)
    --bridge-url URL     Override NETSENSE_BRIDGE_URL
    --cycles N           Stop after N cycles (default: run until Ctrl-C)
    --json               Print batches as JSON lines
    --export FILE        Export the cache to FILE (CSV) before exiting
    --verbose            Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from netsense import CategorizedBatch, CellMonitor, CellPermissionError, NetsenseConfig  # noqa: E402
from netsense.models import CanonicalCellRecord  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _describe(record: CanonicalCellRecord) -> str:
    ident = record.pci or record.cid or record.eci or "-"
    return (
        f"  {record.role.value:<12} {record.technology.display_name:<8} "
        f"pci/cid={ident:<10} freq={record.frequency_label or '-':<24} "
        f"rsrp={record.consolidated_rsrp or 'N/A':>5} bucket={record.signal_bucket}"
    )


def _print_batch(batch: CategorizedBatch, *, json_mode: bool) -> None:
    if json_mode:
        print(batch.model_dump_json(), flush=True)
        return

    if batch.fallback is not None:
        print(f"── fallback: {len(batch.fallback)} cell(s) (not cached)")
        for cell in batch.fallback:
            role = "Serving" if cell.is_serving else "Neighboring"
            print(f"  {role:<12} {cell.technology.display_name:<8} pci={cell.pci} rsrp={cell.rsrp} rssi={cell.rssi}")
        return

    if batch.diagnostic is not None:
        print(f"── no cells ({batch.diagnostic.value})")
        return

    print(
        f"── {len(batch.all)} cell(s): {len(batch.serving)} serving, "
        f"{len(batch.secondary)} secondary, {len(batch.neighboring)} neighboring"
    )
    for record in batch.all:
        print(_describe(record))
    sys.stdout.flush()


async def main() -> None:
    parser = argparse.ArgumentParser(description="Print live cell measurements from the telephony bridge.")
    parser.add_argument("--interval", type=float, help="Seconds between acquisition cycles")
    parser.add_argument("--bridge-url", help="Bridge base URL (default: NETSENSE_BRIDGE_URL)")
    parser.add_argument("--cycles", type=int, default=0, help="Stop after N cycles (0 = run until Ctrl-C)")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Print batches as JSON lines")
    parser.add_argument("--export", metavar="FILE", help="Export cached records to FILE on exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.interval is not None:
        overrides["refresh_interval"] = args.interval
    if args.bridge_url:
        overrides["bridge_url"] = args.bridge_url
    config = NetsenseConfig.from_env(**overrides)

    done = asyncio.Event()
    seen = 0
    failure: list[CellPermissionError] = []

    def on_batch(batch: CategorizedBatch) -> None:
        nonlocal seen
        seen += 1
        _print_batch(batch, json_mode=args.json_mode)
        if args.cycles and seen >= args.cycles:
            done.set()

    def on_stopped(exc: CellPermissionError | None) -> None:
        if exc is not None:
            failure.append(exc)
        done.set()

    async with CellMonitor(config, on_batch=on_batch, on_stopped=on_stopped) as monitor:
        monitor.start()
        try:
            await done.wait()
        finally:
            monitor.stop()
            await monitor.wait_idle()

        if args.export:
            result = await monitor.export_csv(args.export)
            print(f"Exported {result.count} record(s) to {args.export}", file=sys.stderr)

    if failure:
        print(f"Stopped: {failure[0]}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
