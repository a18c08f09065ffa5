"""Fetch the PLEX price and print the pack and Omega value tables."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from eve_value import ValueCalculator
from eve_value.config import CalculatorSettings, load_settings
from eve_value.engine.state import CalculatorStatus
from eve_value.errors import ValueCalculatorError
from eve_value.presentation.table import render_state
from eve_value.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["build_settings", "parse_args", "main"]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        dest="config_path",
        help="YAML or JSON settings file (feeds, sources, aggregation policy)",
    )
    parser.add_argument("--offers", dest="offers_source", help="Path or URL of packs.json")
    parser.add_argument("--plans", dest="plans_source", help="Path or URL of omega.json")
    parser.add_argument(
        "--no-plans",
        dest="skip_plans",
        action="store_true",
        help="Do not load Omega plans",
    )
    parser.add_argument(
        "--policy",
        dest="aggregation_policy",
        choices=["min", "mean", "median"],
        help="How multiple price candidates are reduced to one rate",
    )
    parser.add_argument(
        "--block-size",
        dest="block_size",
        type=float,
        help="ISK denomination used for the cash-per-ISK column (default: one billion)",
    )
    parser.add_argument(
        "--manual-rate",
        dest="manual_rate",
        type=float,
        help="Skip the price feed and value packs at this ISK per PLEX",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> CalculatorSettings:
    if args.config_path:
        LOGGER.info("Loading settings from %s", args.config_path)
        settings = load_settings(args.config_path)
    else:
        settings = CalculatorSettings()
    settings = settings.with_overrides(
        offers_source=args.offers_source,
        plans_source=args.plans_source,
        aggregation_policy=args.aggregation_policy,
        block_size=args.block_size,
    )
    if args.skip_plans:
        settings = settings.with_overrides(plans_source="")
    return settings


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = build_settings(args)
    except (FileNotFoundError, ValueCalculatorError) as exc:
        print(f"Error: config ({type(exc).__name__}): {exc}", file=sys.stderr)
        return 1
    with ValueCalculator(settings) as calculator:
        if args.manual_rate is not None:
            try:
                calculator.load_catalog()
            except ValueCalculatorError as exc:
                print(f"Error: offers ({type(exc).__name__}): {exc}", file=sys.stderr)
                return 1
            if not calculator.set_manual_rate(args.manual_rate):
                print(f"Error: invalid manual rate {args.manual_rate!r}", file=sys.stderr)
                return 2
        else:
            calculator.refresh()
        state = calculator.state
    print(render_state(state))
    return 1 if state.status is CalculatorStatus.ERROR else 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
