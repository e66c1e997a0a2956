"""Command-line entry point for the liquidator simulation."""

import argparse
import logging
import sys
from typing import List, Optional

import yaml

from .config.loader import config_from_dict, load_config
from .config.schema import Config
from .reporting.console import ConsoleSink, format_summary
from .reporting.export import CsvMetricsSink, export_json
from .simulation.runner import SimulationRunner
from .validation.sanity_checks import validate_simulation_results

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="liquidator-sim",
        description="Simulates the yield liquidation algorithm against a virtual CPMM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  liquidator-sim                                  # Reference scenario, 1000 ticks
  liquidator-sim -d 500 -a 0.5 -o arbs.csv        # Shorter run, smoother average, CSV log
  liquidator-sim -c my_scenario.yaml -v           # Custom schedules, print every arbitrage
        """
    )

    parser.add_argument('-c', '--config', type=str, metavar='PATH',
                        help='YAML configuration file (default: built-in reference scenario)')
    parser.add_argument('-d', '--duration', type=int,
                        help='The number of time units to run for (default: 1000)')
    parser.add_argument('-a', '--ema-alpha', type=float,
                        help='How reactive the yield moving average is. Higher alpha weights '
                             'recent values more; lower alpha gives a smoother average (default: 0.7)')
    parser.add_argument('-s', '--swap-multiplier', type=float,
                        help='How quickly the price tracks downward market swings. Higher values '
                             'also leave more yield unsold, due to price impact (default: 0.3)')
    parser.add_argument('-l', '--liquidity-fraction', type=float,
                        help='Size of the virtual LP relative to the average yield. Lower values make '
                             'for efficient swaps but track downward price swings poorly (default: 0.02)')
    parser.add_argument('-o', '--output-csv', type=str, metavar='PATH',
                        help='Write one CSV row per arbitrage')
    parser.add_argument('--output-json', type=str, metavar='PATH',
                        help='Export config, records and final metrics to JSON')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print every arbitrage')

    return parser


def apply_cli_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return a validated config with command-line flags applied."""
    data = config.to_dict()
    overrides = {
        ('simulation', 'duration'): args.duration,
        ('simulation', 'output_csv'): args.output_csv,
        ('liquidator', 'ema_alpha'): args.ema_alpha,
        ('liquidator', 'swap_multiplier'): args.swap_multiplier,
        ('liquidator', 'liquidity_fraction'): args.liquidity_fraction,
    }
    for (section, key), value in overrides.items():
        if value is not None:
            data[section][key] = value
    return config_from_dict(data)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with command-line interface."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        config = load_config(args.config)
        config = apply_cli_overrides(config, args)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Could not read configuration: %s", e)
        return 2
    except ValueError as e:
        # pydantic ValidationError is a ValueError
        logger.error("Invalid configuration:\n%s", e)
        return 2

    sinks = []
    if config.simulation.output_csv:
        sinks.append(CsvMetricsSink(config.simulation.output_csv))
    if args.verbose:
        sinks.append(ConsoleSink())

    result = SimulationRunner(config, sinks=sinks).run()

    for warning in validate_simulation_results(result):
        logger.warning("[%s/%s] %s%s", warning.severity, warning.category, warning.message,
                       f" ({warning.details})" if warning.details else "")

    if args.output_json:
        export_json(result, args.output_json)

    print(format_summary(result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
