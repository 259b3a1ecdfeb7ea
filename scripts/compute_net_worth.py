#!/usr/bin/env python3
"""Compute the daily net worth series of a wallet from saved feeds.

Usage::

    python scripts/compute_net_worth.py \
        --transactions feeds/transaction_history.json \
        --rates CAD_BTC=feeds/rates_CAD_BTC.json \
        --rates CAD_ETH=feeds/rates_CAD_ETH.json \
        --output-dir output
"""

import argparse
import logging
import sys
from pathlib import Path

from networth.config import EngineConfig
from networth.engine import NetWorthEngine
from networth.exceptions import NetWorthError
from networth.feeds import load_rate_feed, load_transaction_feed
from networth.logging import setup_logging
from networth.models.enums import AsofDirection, MissingRatePolicy
from networth.sinks import ConsoleSink, JsonFileSink

logger = logging.getLogger(__name__)


def parse_rate_argument(value: str) -> tuple[str | None, Path]:
    """Split ``PAIR=path`` (or a bare path) into its parts."""
    if "=" in value:
        pair, path = value.split("=", 1)
        return pair, Path(path)
    return None, Path(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute daily wallet net worth")
    parser.add_argument("--transactions", type=Path, required=True, help="Transaction history JSON file")
    parser.add_argument(
        "--rates",
        action="append",
        default=[],
        metavar="PAIR=PATH",
        help="Rate history JSON file, optionally prefixed by its pair (repeatable)",
    )
    parser.add_argument("--base-currency", help="Valuation currency (default: NETWORTH_BASE_CURRENCY or CAD)")
    parser.add_argument("--tracked", help="Comma-separated foreign currencies")
    parser.add_argument("--timezone", help="Zone whose midnights delimit days")
    parser.add_argument("--direction", choices=[d.value for d in AsofDirection], help="Asof lookup direction")
    parser.add_argument(
        "--missing-rate-policy",
        choices=[p.value for p in MissingRatePolicy],
        help="What to do when a rate is unavailable",
    )
    parser.add_argument("--output-dir", type=Path, help="Directory for samples.json and snapshots.json")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    parser.add_argument("--console", action="store_true", help="Print samples to stdout instead of files")
    parser.add_argument("--log-level", help="Log level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--log-format", choices=["standard", "json"], help="Log format")
    return parser


def apply_arguments(config: EngineConfig, args: argparse.Namespace) -> EngineConfig:
    """Override environment configuration with command line flags."""
    valuation = config.valuation
    if args.base_currency:
        valuation.base_currency = args.base_currency.upper()
    if args.tracked:
        valuation.tracked_currencies = tuple(c.strip().upper() for c in args.tracked.split(",") if c.strip())
    if args.timezone:
        valuation.timezone = args.timezone
    if args.direction:
        valuation.asof_direction = AsofDirection(args.direction)
    if args.missing_rate_policy:
        valuation.missing_rate_policy = MissingRatePolicy(args.missing_rate_policy)
    if args.output_dir:
        config.output.output_dir = args.output_dir
    if args.pretty:
        config.output.pretty_json = True
    if args.log_level:
        config.log_level = args.log_level
    if args.log_format:
        config.log_format = args.log_format
    return config


def main() -> int:
    args = build_parser().parse_args()

    try:
        config = apply_arguments(EngineConfig.from_env(), args)
        setup_logging(config.log_level, config.log_format)

        engine = NetWorthEngine(config)
        transactions = load_transaction_feed(args.transactions, config.valuation.supported_currencies)
        series = []
        for value in args.rates:
            pair, path = parse_rate_argument(value)
            series.append(load_rate_feed(path, pair=pair))

        report = engine.compute_from_models(transactions, series)

        if args.console:
            sink = ConsoleSink(pretty=config.output.pretty_json)
        else:
            sink = JsonFileSink(config.output.output_dir, pretty=config.output.pretty_json)
            sink.write_batch("snapshots", report.snapshots)
        sink.write_batch("samples", report.samples)
        sink.close()
    except NetWorthError as exc:
        logger.error("%s", exc)
        return 1

    if report.unvalued_days:
        logger.warning("%d samples are missing exchange rates", len(report.unvalued_days))
    return 0


if __name__ == "__main__":
    sys.exit(main())
