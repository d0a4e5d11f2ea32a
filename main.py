#!/usr/bin/env python3
"""
Entry point for the Fitness Connect command-line tool.
"""
import argparse
import json
import sys
from typing import List, Optional

from config import Config, get_config
from clients.strava_client import StravaClient
from clients.withings_client import WithingsClient
from models.errors import FitnessConnectError
from services.weight_sync import get_and_format_weight, sync_weight_to_strava
from utils.logging_config import setup_logging, get_logger

logger = get_logger()


def positive_int(value: str) -> int:
    """argparse type for day offsets (1 = current day)."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog='fitness-connect',
        description='A sync tool for various fitness apps'
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only log errors')
    verbosity.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        type=str.upper,
        help='Log level (defaults to LOG_LEVEL or INFO)'
    )
    parser.add_argument(
        '--cloud-logging',
        action='store_true',
        help='Also send logs to Google Cloud Logging (needs GCP_CREDENTIALS_PATH)'
    )

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    withings_parser = subparsers.add_parser('withings', help='Get data from Withings')
    withings_parser.add_argument(
        '-l', '--last',
        type=positive_int,
        default=1,
        metavar='DAYS',
        help='Day to get weight: 1 is the current day, 2 the day prior etc. (default: 1)'
    )
    withings_parser.add_argument(
        '-s', '--strava',
        action='store_true',
        help='Sync the weight to Strava'
    )

    strava_parser = subparsers.add_parser('strava', help='Interact with Strava')
    strava_actions = strava_parser.add_mutually_exclusive_group(required=True)
    strava_actions.add_argument('-r', '--register', action='store_true',
                                help='Authorize this tool with Strava')
    strava_actions.add_argument('-a', '--get-athlete', action='store_true',
                                help='Print the authenticated athlete')
    strava_actions.add_argument('-g', '--get-stats', action='store_true',
                                help='Print the athlete statistics')

    return parser.parse_args(argv)


def resolve_log_level(args: argparse.Namespace) -> Optional[str]:
    if args.verbose:
        return 'DEBUG'
    if args.quiet:
        return 'ERROR'
    return args.log_level


def build_strava_client(config: Config) -> StravaClient:
    config.require_strava_credentials()
    return StravaClient(
        client_id=config.strava_client_id,
        client_secret=config.strava_client_secret,
        config_file=config.strava_config_file,
        redirect_uri=config.strava_redirect_uri,
        api_timeout=config.api_timeout
    )


def build_withings_client(config: Config) -> WithingsClient:
    config.require_withings_credentials()
    return WithingsClient(
        client_id=config.withings_client_id,
        client_secret=config.withings_client_secret,
        config_file=config.withings_config_file,
        redirect_uri=config.withings_redirect_uri,
        api_timeout=config.api_timeout
    )


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def run_withings(args: argparse.Namespace, config: Config) -> int:
    """Fetch the latest weight and optionally forward it to Strava."""
    withings_client = build_withings_client(config)
    strava_client = build_strava_client(config) if args.strava else None

    try:
        weight_in_kgs = get_and_format_weight(withings_client, args.last, config.timezone)
        print(f"Weight: {weight_in_kgs} kg")

        if strava_client:
            sync_weight_to_strava(strava_client, weight_in_kgs)
    finally:
        withings_client.close()
        if strava_client:
            strava_client.close()

    return 0


def run_strava(args: argparse.Namespace, config: Config) -> int:
    """Register with Strava or print athlete data."""
    strava_client = build_strava_client(config)

    try:
        if args.register:
            strava_client.register()
            print(f"Strava authorization saved to {strava_client.token_store.config_file}")
        elif args.get_athlete:
            print_json(strava_client.get_authenticated_athlete())
        elif args.get_stats:
            print_json(strava_client.get_athlete_stats())
    finally:
        strava_client.close()

    return 0


COMMANDS = {
    'withings': run_withings,
    'strava': run_strava,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    try:
        config = get_config()
        setup_logging(level=resolve_log_level(args), use_cloud_logging=args.cloud_logging)
        logger.debug(f"Running command: {args.command}")

        return COMMANDS[args.command](args, config)

    except FitnessConnectError as e:
        logger.debug(f"{type(e).__name__}: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 130


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
