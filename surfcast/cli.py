"""CLI entry point for the surf forecast pipeline."""

import argparse
import asyncio
import json
import logging
from datetime import timedelta
from zoneinfo import ZoneInfo

from surfcast.config.loader import (
    config_hash,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from surfcast.config.schema import SurfcastConfig
from surfcast.ingest.firestore_client import FirestoreSource
from surfcast.ingest.source import ForecastSource, NoMetadataFound, SourceUnavailable
from surfcast.models.common import utc_now
from surfcast.pipeline.forecast_pipeline import ForecastPipeline
from surfcast.reporting.formatters import (
    format_forecast_json,
    format_forecast_text,
    format_report_json,
    format_report_text,
    format_stored_report,
)
from surfcast.storage import forecast_repo, summary_repo
from surfcast.storage.database import open_database

DEFAULT_CONFIG = "ops/configs/default.yaml"
DEFAULT_DB = "data/surfcast.db"

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None, source: ForecastSource | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="surfcast",
        description="Surf forecast normalization and regional summaries",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite DB path")

    sub = parser.add_subparsers(dest="command")

    # forecast
    fc_p = sub.add_parser("forecast", help="Show the forecast for one beach")
    fc_p.add_argument("beach_id")
    fc_p.add_argument("--region", help="Region slug (looked up when omitted)")
    fc_p.add_argument("--days", type=int, help="Days of history to fetch")
    fc_p.add_argument("--save", action="store_true", help="Store points in the DB")
    fc_p.add_argument("--json", action="store_true", help="JSON output")

    # summary
    sum_p = sub.add_parser("summary", help="Regional wind/wave summary")
    sum_p.add_argument("--region", help="Limit to one region")
    sum_p.add_argument(
        "--listed", action="store_true",
        help="Use the source's beach list instead of configured beaches",
    )
    sum_p.add_argument("--save", action="store_true", help="Store the run in the DB")
    sum_p.add_argument(
        "--last", action="store_true",
        help="Show the most recent stored run instead of fetching",
    )
    sum_p.add_argument("--json", action="store_true", help="JSON output")

    # history
    h_p = sub.add_parser("history", help="Show stored points for one beach")
    h_p.add_argument("beach_id", type=int)
    h_p.add_argument("--hours", type=float, help="Only points newer than this many hours")
    h_p.add_argument("--json", action="store_true", help="JSON output")

    # beaches
    b_p = sub.add_parser("beaches", help="List beaches known to the source")
    b_p.add_argument("--region", help="Limit to one region")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    if args.command == "config":
        return _cmd_config(config, args)
    if args.command == "history":
        return _cmd_history(config, args)
    if args.command == "summary" and args.last:
        return _cmd_last_summary(args)

    try:
        return asyncio.run(_dispatch(config, args, source))
    except SourceUnavailable as e:
        retry = " (retryable)" if e.is_retryable else ""
        print(f"Error: forecast source unavailable{retry}: {e.message}")
        return 1


async def _dispatch(config: SurfcastConfig, args, source: ForecastSource | None) -> int:
    if source is None:
        async with FirestoreSource.from_config(config.source) as firestore:
            return await _dispatch(config, args, firestore)

    pipeline = ForecastPipeline(source, config.pipeline)
    if args.command == "forecast":
        return await _cmd_forecast(config, pipeline, args)
    if args.command == "summary":
        return await _cmd_summary(config, pipeline, args)
    return await _cmd_beaches(source, args)


async def _cmd_forecast(config: SurfcastConfig, pipeline: ForecastPipeline, args) -> int:
    region = args.region
    if region is None:
        candidates = list(dict.fromkeys(b.region for b in config.beaches))
        region = await pipeline.find_region(args.beach_id, candidates)
        if region is None:
            print(f"Beach {args.beach_id} not found in any region")
            return 1

    try:
        points = await pipeline.get_forecast(args.beach_id, region, args.days)
    except NoMetadataFound as e:
        print(f"Not found: {e}")
        return 1

    if args.save:
        with open_database(args.db) as conn:
            n = forecast_repo.save_points(conn, region, points)
        logger.info("Saved %d points for %s/%s", n, region, args.beach_id)

    if args.json:
        print(format_forecast_json(points))
    else:
        tz = ZoneInfo(config.pipeline.display_timezone)
        print(format_forecast_text(points, tz))
    return 0


async def _cmd_summary(config: SurfcastConfig, pipeline: ForecastPipeline, args) -> int:
    if args.listed:
        report = await pipeline.summarize_region(args.region)
    else:
        keys = config.beach_keys(args.region)
        report = await pipeline.run_regional_summary(keys, region=args.region)

    if args.save:
        with open_database(args.db) as conn:
            summary_repo.save_report(conn, report, config_hash(config))

    print(format_report_json(report) if args.json else format_report_text(report))
    return 0


def _cmd_history(config: SurfcastConfig, args) -> int:
    since = utc_now() - timedelta(hours=args.hours) if args.hours is not None else None
    with open_database(args.db) as conn:
        points = forecast_repo.get_points(conn, args.beach_id, since)

    if args.json:
        print(format_forecast_json(points))
    else:
        print(format_forecast_text(points, ZoneInfo(config.pipeline.display_timezone)))
    return 0


def _cmd_last_summary(args) -> int:
    with open_database(args.db) as conn:
        row = summary_repo.get_latest_report(conn, args.region)
    if row is None:
        print("No stored summary runs")
        return 1
    print(json.dumps(row, indent=2) if args.json else format_stored_report(row))
    return 0


async def _cmd_beaches(source: ForecastSource, args) -> int:
    beaches = await source.list_beaches(args.region)
    for b in sorted(beaches, key=lambda b: (b.region_order, b.beach_id)):
        print(f"{b.beach_id}  {b.region:<10} {b.region_name:<8} {b.display_name}")
    print(f"{len(beaches)} beaches")
    return 0


def _cmd_config(config: SurfcastConfig, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            save_config(new_config, args.config)
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except (KeyError, ValueError) as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1
