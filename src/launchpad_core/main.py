import argparse
import json
import logging
import os

from launchpad_core.pool.config import load_platform
from launchpad_core.webapi.webapi import create_app


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the launchpad bonding curve API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--config", help="JSON file with PlatformConfig fields")
    parser.add_argument("--trading-fee-bps", type=int, help="Overrides trading_fee_bps from --config")
    parser.add_argument("--creation-fee", type=int, help="Overrides creation_fee from --config")
    parser.add_argument("--admin-key", default=os.environ.get("LAUNCHPAD_ADMIN_KEY"),
                        help="Enables the admin routes (default: $LAUNCHPAD_ADMIN_KEY)")
    parser.add_argument("--debug", action="store_true")
    return parser


def platform_settings(args) -> dict:
    """Merges the --config file with the explicit command line overrides."""
    settings = {}
    if args.config:
        with open(args.config) as handle:
            settings = json.load(handle)
    if args.trading_fee_bps is not None:
        settings["trading_fee_bps"] = args.trading_fee_bps
    if args.creation_fee is not None:
        settings["creation_fee"] = args.creation_fee
    return settings


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)
    config, cap = load_platform(platform_settings(args))
    if not args.admin_key:
        logger.warning("No admin key configured; pause, withdrawal and graduation routes are disabled.")
    create_app(config, cap=cap, admin_key=args.admin_key).run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
