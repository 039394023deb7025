"""
Command line access to the RuneScape Wiki prices API.

Usage:
    osrs-prices latest 4151 2
    osrs-prices mapping --limit 5
    osrs-prices --region dmm interval 1h --timestamp 1700000000
    osrs-prices timeseries 4151 --timestep 6h
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from osrs_prices.core.config import Config
from osrs_prices.core.game_mode import Interval, Region
from osrs_prices.core.logging_setup import setup_logging
from osrs_prices.core.request_context import RequestContext
from osrs_prices.data_sources.base_api import APIError
from osrs_prices.data_sources.pricing.wiki_prices import WikiPricesAPI

logger = logging.getLogger(__name__)

REGION_CHOICES = [r.value for r in Region]
REGION_HELP = ", ".join(f"{r.value} = {r.display_name()}" for r in Region)
INTERVAL_CHOICES = [i.value for i in Interval]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="osrs-prices",
        description="Query Old School RuneScape Grand Exchange prices from the RuneScape Wiki",
    )
    parser.add_argument(
        "--user-agent",
        help="Identifying User-Agent sent to the API (default: from config)",
    )
    parser.add_argument(
        "--region",
        choices=REGION_CHOICES,
        help=f"Game mode to query: {REGION_HELP} (default: from config, osrs)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config JSON (default: ~/.osrs_prices/config.json)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Transport timeout in seconds (default: from config)",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        help="Give up on the whole call after this many seconds",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    latest = sub.add_parser("latest", help="Latest high/low prices")
    latest.add_argument("ids", nargs="*", type=int, help="Item ids (default: all items)")

    mapping = sub.add_parser("mapping", help="Item metadata")
    mapping.add_argument("--limit", type=int, help="Only print the first N items")

    interval = sub.add_parser("interval", help="Average prices over one 5m or 1h bucket")
    interval.add_argument("interval", choices=["5m", "1h"])
    interval.add_argument("--timestamp", type=int, help="Bucket start as Unix seconds")

    timeseries = sub.add_parser("timeseries", help="Price history of one item")
    timeseries.add_argument("id", type=int, help="Item id")
    timeseries.add_argument("--timestep", choices=INTERVAL_CHOICES, default="5m")

    return parser


def _keyed(result: dict) -> dict:
    return {str(item_id): record.to_dict() for item_id, record in result.items()}


def run_command(api: WikiPricesAPI, args: argparse.Namespace, region: Region,
                ctx: Optional[RequestContext] = None) -> Any:
    """Execute the parsed sub-command and return a JSON-ready value."""
    if args.command == "latest":
        return _keyed(api.get_latest_prices(region, *args.ids, ctx=ctx))

    if args.command == "mapping":
        items = api.get_item_mapping(region, ctx=ctx)
        if args.limit is not None:
            items = items[:args.limit]
        return [item.to_dict() for item in items]

    if args.command == "interval":
        return _keyed(api.get_interval_prices(region, args.interval, args.timestamp, ctx=ctx))

    if args.command == "timeseries":
        points = api.get_timeseries(region, args.timestep, args.id, ctx=ctx)
        return [point.to_dict() for point in points]

    raise ValueError(f"unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug)

    config = Config(config_file=args.config)
    region = Region.from_string(args.region) if args.region else config.region
    user_agent = args.user_agent or config.user_agent
    timeout = args.timeout if args.timeout is not None else config.timeout

    ctx = RequestContext(timeout=args.deadline) if args.deadline is not None else None

    try:
        with WikiPricesAPI(user_agent, base_url=config.base_url, timeout=timeout) as api:
            result = run_command(api, args, region, ctx=ctx)
    except APIError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error ({e.stage}): {e}", file=sys.stderr)
        return 1

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
