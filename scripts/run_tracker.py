#!/usr/bin/env python3
"""Run the AIS tracker until interrupted.

Configuration comes from the environment (see ``TrackerConfig.from_env``):

- AIS_MMSI (required), AIS_STREAM_KEY
- CMS_HOST_URL, CMS_EMAIL, CMS_PASSWORD
- PORT (health endpoint, default 3000)

Command-line flags override the matching environment values.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from aistrack import AisConfigError, AisTracker, CoordinateOrder, TrackerConfig  # noqa: E402

LOG = logging.getLogger("run_tracker")


def _build_config(args: argparse.Namespace) -> TrackerConfig:
    overrides: dict[str, Any] = {}
    if args.mmsi:
        overrides["mmsi"] = args.mmsi
    if args.port is not None:
        overrides["port"] = args.port
    if args.no_health:
        overrides["health_enabled"] = False
    if args.coordinate_order:
        overrides["coordinate_order"] = CoordinateOrder(args.coordinate_order)
    return TrackerConfig.from_env(**overrides)


async def run(config: TrackerConfig) -> None:
    async with AisTracker(config) as tracker:
        await tracker.run_forever()


def main() -> int:
    parser = argparse.ArgumentParser(description="Track one vessel on aisstream.io and log its positions.")
    parser.add_argument("--mmsi", help="MMSI of the tracked vessel (default: $AIS_MMSI)")
    parser.add_argument("--port", type=int, help="Health endpoint port (default: $PORT or 3000)")
    parser.add_argument("--no-health", action="store_true", help="Do not serve the health endpoint")
    parser.add_argument(
        "--coordinate-order",
        choices=[order.value for order in CoordinateOrder],
        help="Order of the stored location pair (default: $AIS_COORDINATE_ORDER or lat_lon)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _build_config(args)
    except AisConfigError as exc:
        LOG.error("%s", exc)
        return 2

    LOG.info("Tracking MMSI %s", config.mmsi)
    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        LOG.info("Interrupted; shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
